from typing import Optional

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_prefix="FSM_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Environment (drives log rendering and default log level)
    environment: str = Field(default="development")
    log_level: str = Field(default="")

    # Engine
    # None keeps the machine blocked until the transition function settles
    trigger_timeout_seconds: Optional[float] = Field(default=None)
    validate_payloads: bool = Field(default=True)

    # Login flow (simulated network latency of the credential/code checks)
    login_flow_delay_seconds: float = Field(default=2.0, ge=0)

    @field_validator("trigger_timeout_seconds")
    @classmethod
    def validate_trigger_timeout(cls, v):
        if v is not None and v <= 0:
            raise ValueError("trigger_timeout_seconds must be positive when set")
        return v

    @field_validator("log_level", mode="before")
    @classmethod
    def normalize_log_level(cls, v):
        if isinstance(v, str):
            return v.strip().upper()
        return v


settings = Settings()
