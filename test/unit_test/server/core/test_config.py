"""Unit tests for the server Settings model.

Tests verify that every variable documented in .env.example binds to the
Settings model and that the grouped configurations are rebuilt from it.
"""

from pathlib import Path

import pytest

from jalanea_forge.server.core.config import (
    GeminiConfig,
    LabConfig,
    Settings,
    StripeConfig,
    SupabaseConfig,
)


@pytest.fixture
def env_example_path() -> Path:
    """Get path to .env.example file."""
    return Path(__file__).resolve().parents[4] / ".env.example"


@pytest.fixture
def env_example_vars(env_example_path: Path) -> dict[str, str]:
    """Parse .env.example file and return environment variables."""
    env_vars = {}
    with open(env_example_path) as f:
        for line in f:
            line = line.strip()
            if not line or line.startswith("#"):
                continue
            if "=" in line:
                key, value = line.split("=", 1)
                env_vars[key.strip()] = value.strip()
    return env_vars


def _settings() -> Settings:
    return Settings(_env_file=None)


class TestSettingsBinding:
    """Test Settings model environment variable binding."""

    def test_every_documented_variable_is_known(self, env_example_vars: dict[str, str]):
        aliases = {field.alias for field in Settings.model_fields.values()}
        logfire_vars = {key for key in env_example_vars if key.startswith("LOGFIRE_")}

        assert set(env_example_vars) - logfire_vars <= aliases

    def test_server_binding(self, monkeypatch):
        monkeypatch.setenv("JALANEA_FORGE_SERVER_HOST", "127.0.0.1")
        monkeypatch.setenv("JALANEA_FORGE_SERVER_PORT", "9000")
        monkeypatch.setenv("JALANEA_FORGE_LOG_LEVEL", "DEBUG")

        settings = _settings()

        assert settings.server_host == "127.0.0.1"
        assert settings.server_port == 9000
        assert settings.log_level == "DEBUG"

    def test_database_url_from_test_environment(self):
        assert _settings().database_url == "sqlite+aiosqlite:///:memory:"

    def test_workflow_tuning(self, monkeypatch):
        monkeypatch.setenv("AUTOSAVE_DELAY_SECONDS", "0.5")
        monkeypatch.setenv("GENERATION_MAX_RETRIES", "5")
        monkeypatch.setenv("PRD_HISTORY_LIMIT", "3")

        settings = _settings()

        assert settings.autosave_delay_seconds == 0.5
        assert settings.generation_max_retries == 5
        assert settings.prd_history_limit == 3

    def test_defaults(self, monkeypatch):
        for name in ("GEMINI_API_KEY", "STRIPE_SECRET_KEY", "LAB_PASSWORD", "RESEND_API_KEY"):
            monkeypatch.delenv(name, raising=False)

        settings = _settings()

        assert settings.gemini_api_key is None
        assert settings.stripe_secret_key is None
        assert settings.lab_password is None
        assert settings.autosave_delay_seconds == 2.0
        assert settings.generation_max_retries == 3
        assert settings.prd_history_limit == 10


class TestGroupedConfigurations:
    def test_gemini(self, monkeypatch):
        monkeypatch.setenv("GEMINI_API_KEY", "AIza-server")
        monkeypatch.setenv("GEMINI_MODEL", "gemini-2.5-pro")

        gemini = _settings().gemini

        assert isinstance(gemini, GeminiConfig)
        assert gemini.api_key == "AIza-server"
        assert gemini.model == "gemini-2.5-pro"
        assert gemini.test_model == "gemini-2.0-flash"

    def test_anthropic(self, monkeypatch):
        monkeypatch.setenv("ANTHROPIC_API_KEY", "sk-ant-test")

        anthropic = _settings().anthropic

        assert anthropic.api_key == "sk-ant-test"
        assert anthropic.model.startswith("claude")

    def test_supabase(self, monkeypatch):
        monkeypatch.setenv("SUPABASE_JWT_SECRET", "another-secret-with-at-least-32-characters")

        supabase = _settings().supabase

        assert isinstance(supabase, SupabaseConfig)
        assert supabase.jwt_secret == "another-secret-with-at-least-32-characters"
        assert supabase.jwt_audience == "authenticated"

    def test_stripe(self, monkeypatch):
        monkeypatch.setenv("STRIPE_SECRET_KEY", "sk_test_1")
        monkeypatch.setenv("STRIPE_WEBHOOK_SECRET", "whsec_1")
        monkeypatch.setenv("STRIPE_STARTER_PRICE_ID", "price_starter")
        monkeypatch.setenv("STRIPE_PRO_PRICE_ID", "price_pro")

        stripe = _settings().stripe

        assert stripe == StripeConfig(
            secret_key="sk_test_1",
            webhook_secret="whsec_1",
            starter_price_id="price_starter",
            pro_price_id="price_pro",
        )

    def test_resend(self, monkeypatch):
        monkeypatch.setenv("RESEND_API_KEY", "re_1")
        monkeypatch.setenv("APP_URL", "http://localhost:3000")

        resend = _settings().resend

        assert resend.api_key == "re_1"
        assert resend.app_url == "http://localhost:3000"
        assert resend.api_url == "https://api.resend.com/emails"

    def test_lab(self, monkeypatch):
        monkeypatch.setenv("LAB_PASSWORD", "open-sesame")
        monkeypatch.setenv("LAB_TOKEN_TTL_DAYS", "7")

        lab = _settings().lab

        assert isinstance(lab, LabConfig)
        assert lab.password == "open-sesame"
        assert lab.token_ttl_days == 7
        assert lab.preview_domain == "jalnaea.dev"
        assert lab.preview_ttl_days == 30

    def test_cors(self, monkeypatch):
        monkeypatch.setenv("CORS_ORIGINS", '["http://localhost:3000"]')

        cors = _settings().cors

        assert cors.origins == ["http://localhost:3000"]
        assert cors.allow_credentials is True
