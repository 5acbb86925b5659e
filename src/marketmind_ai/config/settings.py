"""Settings configuration"""
from typing import Optional, Dict
from pydantic import Field, field_validator, SecretStr
from pydantic_settings import BaseSettings, SettingsConfigDict
from functools import lru_cache


class Settings(BaseSettings):
    """Application settings"""

    model_config = SettingsConfigDict(
        env_file=".env", env_file_encoding="utf-8", extra="ignore", case_sensitive=False,
        validate_assignment=True, protected_namespaces=()
    )

    # Application
    app_name: str = Field(default="MarketMind AI", validation_alias="APP_NAME")
    version: str = "1.0.0"
    environment: str = Field(default="development", validation_alias="ENVIRONMENT")
    debug: bool = Field(default=False, validation_alias="DEBUG")
    api_prefix: str = Field(default="/api", validation_alias="API_PREFIX")

    # Server
    host: str = Field(default="0.0.0.0", validation_alias="HOST")
    port: int = Field(default=5000, validation_alias="PORT", ge=1, le=65535)
    workers: int = Field(default=1, validation_alias="WORKERS", ge=1)
    reload: bool = Field(default=False, validation_alias="RELOAD")

    # Upstream provider
    groq_api_key: Optional[SecretStr] = Field(default=None, validation_alias="GROQ_API_KEY")
    groq_base_url: str = Field(
        default="https://api.groq.com/openai/v1", validation_alias="GROQ_BASE_URL"
    )
    request_timeout: float = Field(default=30.0, validation_alias="REQUEST_TIMEOUT", gt=0)

    # Model roles
    model_primary: str = Field(default="llama-3.3-70b-versatile", validation_alias="MODEL_PRIMARY")
    model_alternative: str = Field(
        default="llama-3.1-70b-versatile", validation_alias="MODEL_ALTERNATIVE"
    )
    model_creative: str = Field(default="mixtral-8x7b-32768", validation_alias="MODEL_CREATIVE")
    model_instruction: str = Field(
        default="llama-3.3-70b-versatile", validation_alias="MODEL_INSTRUCTION"
    )
    model_fallback: str = Field(default="llama-3.1-8b-instant", validation_alias="MODEL_FALLBACK")

    # Retry policy
    max_retries: int = Field(default=3, validation_alias="MAX_RETRIES", ge=1)
    retry_base_delay_ms: int = Field(default=1000, validation_alias="RETRY_BASE_DELAY_MS", ge=0)
    retry_jitter_ms: int = Field(default=500, validation_alias="RETRY_JITTER_MS", ge=0)

    # Health monitoring
    health_check_on_startup: bool = Field(default=True, validation_alias="HEALTH_CHECK_ON_STARTUP")
    health_aware_routing: bool = Field(default=True, validation_alias="HEALTH_AWARE_ROUTING")

    # Logging
    log_level: str = Field(default="INFO", validation_alias="LOG_LEVEL")
    log_format: str = Field(default="json", validation_alias="LOG_FORMAT")

    @field_validator("log_format")
    @classmethod
    def validate_log_format(cls, v):
        v = v.lower()
        if v not in ("json", "console"):
            raise ValueError("LOG_FORMAT must be 'json' or 'console'")
        return v

    @field_validator("model_primary", "model_alternative", "model_creative",
                     "model_instruction", "model_fallback")
    @classmethod
    def validate_model_identifier(cls, v):
        if not v or not v.strip():
            raise ValueError("Model identifier cannot be empty")
        return v.strip()

    # Properties
    @property
    def is_development(self) -> bool:
        return self.environment == "development"

    @property
    def is_production(self) -> bool:
        return self.environment == "production"

    @property
    def has_groq_key(self) -> bool:
        return bool(self.groq_api_key)

    @property
    def model_roles(self) -> Dict[str, str]:
        """Role name to model identifier, in registry order."""
        return {
            "primary": self.model_primary,
            "alternative": self.model_alternative,
            "creative": self.model_creative,
            "instruction": self.model_instruction,
            "fallback": self.model_fallback,
        }


@lru_cache()
def get_settings() -> Settings:
    """Get cached settings instance"""
    return Settings()
