from functools import lru_cache
import json
from typing import Annotated, Optional

from pydantic import AliasChoices, Field, field_validator
from pydantic_settings import BaseSettings, NoDecode, SettingsConfigDict


def _parse_list_value(value) -> list[str]:
    if not value:
        return []
    if isinstance(value, str):
        raw = value.strip()
        if raw == "":
            return []
        try:
            parsed = json.loads(raw)
            if isinstance(parsed, list):
                return [str(item).strip() for item in parsed if str(item).strip()]
        except ValueError:
            pass
        return [item.strip() for item in raw.split(",") if item.strip()]
    if isinstance(value, list):
        return [str(item).strip() for item in value if str(item).strip()]
    return []


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        extra="ignore",
        validate_by_name=True,
        populate_by_name=True,
    )

    docs_enabled: bool = Field(default=True)
    openapi_enabled: bool = Field(default=True)
    expose_error_details: bool = False

    enable_vision_ai: bool = True

    # Provider credentials. Absence surfaces when a scan is attempted.
    gemini_api_key: str = Field(
        default="",
        validation_alias=AliasChoices("GEMINI_API_KEY", "GOOGLE_API_KEY"),
    )
    openai_api_key: str = ""
    anthropic_api_key: str = ""

    ai_vision_provider: str = "gemini"
    ai_vision_model: str = ""
    ai_allowed_providers_raw: str = Field(
        default="gemini,openai,claude,mock",
        validation_alias=AliasChoices("AI_ALLOWED_PROVIDERS"),
    )
    ai_allowed_models_raw: str = Field(
        default="",
        validation_alias=AliasChoices("AI_ALLOWED_MODELS"),
    )
    enable_ai_overrides: bool = False

    ai_temperature: float = 0.2
    ai_max_tokens: int = 2048
    ai_vision_timeout_seconds: Optional[float] = None
    ai_debug_store_raw: bool = False

    cors_allow_origins: Annotated[list[str], NoDecode] = Field(default_factory=list)
    cors_allow_methods: Annotated[list[str], NoDecode] = Field(default_factory=lambda: ["GET", "POST", "OPTIONS"])
    cors_allow_headers: Annotated[list[str], NoDecode] = Field(default_factory=lambda: ["Content-Type", "Accept"])

    @field_validator(
        "cors_allow_origins",
        "cors_allow_methods",
        "cors_allow_headers",
        mode="before",
    )
    @classmethod
    def _split_csv(cls, value):
        if value is None:
            return []
        if isinstance(value, str):
            if value.strip() == "":
                return []
            return [item.strip() for item in value.split(",") if item.strip()]
        return value

    @field_validator("ai_vision_timeout_seconds", mode="before")
    @classmethod
    def _empty_timeout_is_none(cls, value):
        if isinstance(value, str) and value.strip() == "":
            return None
        return value

    @property
    def ai_allowed_providers(self) -> list[str]:
        return [p.lower() for p in _parse_list_value(self.ai_allowed_providers_raw)]

    @property
    def ai_allowed_models(self) -> dict[str, list[str]]:
        """Per-provider model allowlist, e.g. ``{"gemini": ["gemini-2.0-flash"]}``."""
        raw = self.ai_allowed_models_raw.strip()
        if not raw:
            return {}
        try:
            parsed = json.loads(raw)
        except ValueError:
            return {}
        if not isinstance(parsed, dict):
            return {}
        return {str(k).lower(): _parse_list_value(v) for k, v in parsed.items()}


@lru_cache
def get_settings() -> Settings:
    return Settings()
