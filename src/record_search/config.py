"""Centralized configuration for record-search using Pydantic Settings."""

from pydantic import Field, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Strictly typed configuration loaded from environment variables.

    Built once at startup and handed explicitly to the record source and the
    HTTP app. The matching core never reads it; it only sees SearchOptions.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        validate_default=True,
        extra="ignore",  # Ignore extra env vars not defined in model
    )

    # Airtable record store
    airtable_api_key: str = Field(default="", description="Bearer token for the Airtable REST API")
    airtable_base_id: str = Field(default="", description="Airtable base identifier")
    airtable_table_name: str = Field(default="", description="Airtable table holding the searchable records")
    airtable_view_name: str = Field(default="", description="Optional Airtable view used to pre-filter records")
    airtable_api_url: str = Field(default="https://api.airtable.com/v0", description="Airtable REST API root")
    allowed_fields: str = Field(
        default="",
        description="Comma-separated field whitelist; only these fields are fetched and returned",
    )

    # HTTP/Request settings
    http_timeout: int = Field(default=30, ge=1, description="HTTP request timeout in seconds")

    # Search defaults
    search_default_limit: int = Field(default=5, ge=0, description="Result limit when the caller sends none")
    search_threshold: float = Field(
        default=0.4,
        ge=0.0,
        le=1.0,
        description="Maximum score (0 = exact) for a record to count as a match",
    )
    search_min_match_length: int = Field(
        default=2, ge=1, description="Queries shorter than this never match anything"
    )

    # Server settings
    host: str = Field(default="127.0.0.1", description="HTTP server host")
    port: int = Field(default=3000, ge=1, le=65535, description="HTTP server port")
    cors_allow_origins: str = Field(default="*", description="Comma-separated origins allowed by CORS")

    # Logging
    log_level: str = Field(default="info", description="Logging level")
    log_json: bool = Field(default=True, description="Emit structured JSON logs")

    @model_validator(mode="after")
    def _check_airtable_target(self) -> "Settings":
        # A key without a target table can only ever produce 404s
        if self.airtable_api_key and not (self.airtable_base_id and self.airtable_table_name):
            raise ValueError(
                "AIRTABLE_BASE_ID and AIRTABLE_TABLE_NAME must be set when AIRTABLE_API_KEY is provided."
            )
        return self

    def is_airtable_configured(self) -> bool:
        """Check whether enough settings are present to query Airtable."""
        return bool(self.airtable_api_key and self.airtable_base_id and self.airtable_table_name)

    def get_allowed_fields(self) -> list[str]:
        """Get the field whitelist, empty when every field is allowed."""
        if not self.allowed_fields:
            return []
        return [field.strip() for field in self.allowed_fields.split(",") if field.strip()]

    def get_view_name(self) -> str | None:
        """Get the Airtable view name, None when no view is configured."""
        view = self.airtable_view_name.strip()
        return view or None

    def get_cors_allow_origins(self) -> list[str]:
        """Get list of origins allowed to call the API."""
        if not self.cors_allow_origins:
            return []
        return [origin.strip() for origin in self.cors_allow_origins.split(",") if origin.strip()]
