"""
Unit tests for application settings.

Tests cover:
- Defaults and environment overrides
- Hit policy parsing by DMN spelling or enum name
- Rule limit bounds
- Production safety checks
"""

import pytest
from pydantic import ValidationError

from dmn_rules.core.config import AppEnvironment, Settings
from dmn_rules.domain.enums import HitPolicy

PROD_TOKEN = "0123456789abcdef"


class TestDefaults:
    @pytest.mark.anyio
    async def test_decision_defaults(self):
        settings = Settings(app_env="local")
        assert settings.dmn_hit_policy is HitPolicy.FIRST
        assert settings.dmn_decision_name == "Business Rule Decision"
        assert settings.dmn_pretty_print is True
        assert settings.dmn_max_rules == 500

    @pytest.mark.anyio
    async def test_app_env_is_case_insensitive(self):
        assert Settings(app_env="LOCAL").app_env is AppEnvironment.LOCAL

    @pytest.mark.anyio
    async def test_unknown_app_env(self):
        with pytest.raises(ValidationError, match="app_env must be one of"):
            Settings(app_env="staging")

    @pytest.mark.anyio
    async def test_cors_origins_list(self):
        settings = Settings(app_env="local", cors_origins=" http://a.test , ,http://b.test")
        assert settings.cors_origins_list == ["http://a.test", "http://b.test"]


class TestDecisionSettings:
    @pytest.mark.anyio
    @pytest.mark.parametrize(
        ("raw", "expected"),
        [
            ("RULE ORDER", HitPolicy.RULE_ORDER),
            ("rule_order", HitPolicy.RULE_ORDER),
            ("unique", HitPolicy.UNIQUE),
            (HitPolicy.COLLECT, HitPolicy.COLLECT),
        ],
    )
    async def test_hit_policy_parsing(self, raw, expected):
        assert Settings(app_env="local", dmn_hit_policy=raw).dmn_hit_policy is expected

    @pytest.mark.anyio
    async def test_unknown_hit_policy(self):
        with pytest.raises(ValidationError, match="dmn_hit_policy must be one of"):
            Settings(app_env="local", dmn_hit_policy="LAST")

    @pytest.mark.anyio
    async def test_hit_policy_from_environment(self, monkeypatch):
        monkeypatch.setenv("DMN_HIT_POLICY", "output order")
        assert Settings(app_env="local").dmn_hit_policy is HitPolicy.OUTPUT_ORDER

    @pytest.mark.anyio
    async def test_max_rules_must_be_positive(self):
        with pytest.raises(ValidationError, match="at least 1"):
            Settings(app_env="local", dmn_max_rules=0)


class TestProductionSettings:
    @pytest.mark.anyio
    async def test_valid_production_settings(self):
        settings = Settings(
            app_env="prod", metrics_token=PROD_TOKEN, cors_origins="https://rules.example.com"
        )
        assert settings.app_env is AppEnvironment.PROD

    @pytest.mark.anyio
    async def test_metrics_token_required(self):
        with pytest.raises(ValidationError, match="METRICS_TOKEN"):
            Settings(app_env="prod", metrics_token="short", cors_origins="https://x.example.com")

    @pytest.mark.anyio
    async def test_metrics_token_not_required_without_observability(self):
        settings = Settings(
            app_env="prod", observability_enabled=False, cors_origins="https://x.example.com"
        )
        assert settings.metrics_token is None

    @pytest.mark.anyio
    async def test_localhost_cors_rejected(self):
        with pytest.raises(ValidationError, match="localhost"):
            Settings(app_env="prod", metrics_token=PROD_TOKEN, cors_origins="http://localhost:3000")
