"""Application configuration using Pydantic Settings.

Configuration is loaded from environment variables. Optionally point
`ENV_FILE` at a local env file for development.
"""

import os
from enum import Enum

from pydantic import field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from dmn_rules.domain.enums import HitPolicy


class AppEnvironment(str, Enum):
    """Application environment values."""

    LOCAL = "local"
    TEST = "test"
    PROD = "prod"


class Settings(BaseSettings):
    """
    Application settings with type validation.

    Configuration is loaded from environment variables, with support
    for .env files in development.
    """

    model_config = SettingsConfigDict(
        env_file=os.getenv("ENV_FILE") or None, env_prefix="", extra="ignore"
    )

    # Application
    app_env: AppEnvironment = AppEnvironment.LOCAL
    app_name: str = "dmn-rules"
    app_log_level: str = "INFO"

    # Observability
    observability_enabled: bool = True
    observability_structured_logs: bool = True
    observability_request_id_header: str = "X-Request-ID"

    # Metrics token for protecting /metrics endpoint
    metrics_token: str | None = None

    # CORS Configuration
    cors_origins: str = "http://localhost:3000,http://localhost:5173"

    # Decision table defaults applied when a request leaves them out
    dmn_hit_policy: HitPolicy = HitPolicy.FIRST
    dmn_decision_name: str = "Business Rule Decision"
    dmn_pretty_print: bool = True

    # Upper bound on rules accepted by one multi-rule request
    dmn_max_rules: int = 500

    @property
    def cors_origins_list(self) -> list[str]:
        """Parse CORS origins string into a list."""
        return [origin.strip() for origin in self.cors_origins.split(",") if origin.strip()]

    @field_validator("app_env", mode="before")
    @classmethod
    def validate_app_env(cls, v: str | AppEnvironment) -> AppEnvironment:
        """Validate and parse app_env to AppEnvironment enum."""
        if isinstance(v, AppEnvironment):
            return v
        try:
            return AppEnvironment(v.lower())
        except ValueError:
            raise ValueError(
                f"app_env must be one of {[e.value for e in AppEnvironment]}, got '{v}'"
            )

    @field_validator("dmn_hit_policy", mode="before")
    @classmethod
    def parse_hit_policy(cls, v: str | HitPolicy) -> HitPolicy:
        """Accept hit policies as DMN spelling or enum name (RULE_ORDER / RULE ORDER)."""
        if isinstance(v, HitPolicy):
            return v
        text = str(v).strip().upper()
        for policy in HitPolicy:
            if text in (policy.value, policy.name):
                return policy
        raise ValueError(f"dmn_hit_policy must be one of {[p.value for p in HitPolicy]}, got '{v}'")

    @field_validator("dmn_max_rules")
    @classmethod
    def validate_max_rules(cls, v: int) -> int:
        if v < 1:
            raise ValueError("dmn_max_rules must be at least 1")
        return v

    @model_validator(mode="after")
    def validate_production_settings(self) -> "Settings":
        """
        Validate production-specific settings.

        These checks prevent insecure configurations from being deployed to production.
        """
        if self.app_env == AppEnvironment.PROD:
            if self.observability_enabled and (
                not self.metrics_token or len(self.metrics_token) < 16
            ):
                raise ValueError("METRICS_TOKEN must be set and at least 16 characters in production")

            for origin in self.cors_origins_list:
                if "localhost" in origin or "127.0.0.1" in origin:
                    raise ValueError(
                        f"CORS origins must not contain localhost in production: {origin}"
                    )

        return self


settings = Settings()
