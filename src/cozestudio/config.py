import logging
import os

from pydantic import BaseModel, Field

from cozestudio.errors import CozeStudioError

LOG_FORMAT = '%(asctime)s:%(name)s:%(levelname)s:%(message)s'
LOG_DATEFMT = '%Y-%m-%d %H:%M:%S'


class AgentConfig(BaseModel):
    """Connection details for one chat backend agent.

    Args:
        api_url: Endpoint the query is POSTed to.
        auth_token: Bearer token sent with every request.
        project_id: Backend project the query runs against.
        name: Display name, unused on the wire.
    """

    api_url: str
    auth_token: str
    project_id: str
    name: str = ""

    @classmethod
    def from_env(cls, prefix: str = "COZE_") -> "AgentConfig":
        values = {}
        for field_name in ("api_url", "auth_token", "project_id"):
            env_var = f"{prefix}{field_name.upper()}"
            value = os.getenv(env_var)
            if not value:
                raise CozeStudioError(f"{env_var} is not set")
            values[field_name] = value
        return cls(name=os.getenv(f"{prefix}AGENT_NAME", ""), **values)


class ProviderSettings(BaseModel):
    """HTTP behaviour of :class:`~cozestudio.provider.CozeProvider`.

    ``timeout`` defaults to ``None``: a hung stream is waited on
    indefinitely unless a caller opts into a limit.
    """

    timeout: float | None = None
    headers: dict[str, str] = Field(default_factory=dict)


def configure_logging(
    level: int = logging.INFO,
    log_file: str | None = None,
) -> None:
    handlers: list[logging.Handler] = [logging.StreamHandler()]
    if log_file:
        handlers.append(logging.FileHandler(log_file))
    logging.basicConfig(
        level=level,
        format=LOG_FORMAT,
        datefmt=LOG_DATEFMT,
        handlers=handlers,
    )
