from pydantic import BaseModel, ConfigDict


class Repository(BaseModel):
    # Only the name is needed; the rest of GitHub's repository object is ignored.
    name: str


class PushEvent(BaseModel):
    model_config = ConfigDict(frozen=True)

    ref: str
    repository_name: str


class PushPayload(BaseModel):
    ref: str
    repository: Repository
    # Optionally add pusher, commits, etc. if needed

    def to_event(self) -> PushEvent:
        return PushEvent(ref=self.ref, repository_name=self.repository.name)
