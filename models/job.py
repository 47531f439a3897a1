from pydantic import BaseModel, ConfigDict

from models.endpoint import EndpointConfig
from models.github_webhook import PushEvent


class Job(BaseModel):
    """A push accepted by an endpoint, waiting for the executor."""

    model_config = ConfigDict(frozen=True)

    event: PushEvent
    endpoint: EndpointConfig

    def describe(self) -> str:
        return f"repo: {self.endpoint.repo_name!r}, ref: {self.event.ref!r}"
