from pydantic import BaseModel, ConfigDict, Field


class ProviderConfig(BaseModel):
    """Static description of a remote chat-completion backend."""

    model_config = ConfigDict(frozen=True)

    id: str = Field(description="Registry key, e.g. 'openai'")
    display_name: str = Field(description="Human-readable provider name")
    base_url: str = Field(description="Default API base URL ('' when the user must supply one)")
    models: tuple[str, ...] = Field(default=(), description="Selectable model ids, in display order")
    credential_prefix: str | None = Field(
        default=None,
        description="Required API key prefix, or None to accept any key"
    )
    description: str = ""
