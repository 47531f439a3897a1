from pydantic import BaseModel, ConfigDict, Field
from typing import Dict, List, Optional


class CommandSpec(BaseModel):
    model_config = ConfigDict(frozen=True)

    command: str = Field(min_length=1)
    args: List[str] = Field(default_factory=list)

    def argv(self) -> List[str]:
        return [self.command, *self.args]


class EndpointConfig(BaseModel):
    """
    Webhook handling rules for one repository, bound to one URL path.

    Keys follow the YAML config file: ``reponame``, ``secret``, ``command``,
    ``args`` and ``refs``. Unknown keys are ignored.
    """

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    repo_name: str = Field(alias="reponame", min_length=1)
    secret: Optional[str] = None
    command: Optional[str] = None
    args: List[str] = Field(default_factory=list)
    refs: Dict[str, CommandSpec] = Field(default_factory=dict)

    @property
    def has_secret(self) -> bool:
        return bool(self.secret)

    @property
    def secret_bytes(self) -> Optional[bytes]:
        return self.secret.encode() if self.secret else None

    @property
    def default_command(self) -> Optional[CommandSpec]:
        if not self.command:
            return None
        return CommandSpec(command=self.command, args=self.args)

    def command_for(self, ref: str) -> Optional[CommandSpec]:
        # Exact match only, no prefix or glob handling.
        return self.refs.get(ref)
