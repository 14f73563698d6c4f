"""Remote agent backend configuration."""

from pydantic import BaseModel, Field, SecretStr


class BackendConfig(BaseModel):
    """Connection settings for the document-aware agent backend."""

    base_url: str = Field(
        default="https://staging.impromptu-labs.com/api_tools",
        description="Base URL all endpoint paths are appended to",
    )
    api_token: SecretStr = Field(
        default=SecretStr(""),
        description="Static bearer credential (POLICYCHAT_BACKEND__API_TOKEN)",
    )
    timeout_seconds: float = Field(
        default=30.0,
        gt=0,
        description="Per-request timeout; the backend itself never times out",
    )
    bind_object_on_provision: bool = Field(
        default=False,
        description="Send the stored object name in the create-agent body",
    )
