"""
Unit tests for settings and response schema configuration.
"""
from treeledger.api.v1.models.responses import ErrResponse, OkResponse
from treeledger.config import Settings

from conftest import COORDINATOR


class TestSettings:
    """Tests for environment-driven settings."""

    def test_defaults(self, monkeypatch):
        monkeypatch.delenv("MAX_PRIORITY_SCORE", raising=False)

        settings = Settings(_env_file=None)

        assert settings.caller_identity_header == "X-Caller-Identity"
        assert settings.min_priority_score == 0
        assert settings.max_priority_score == 100

    def test_environment_overrides_are_case_insensitive(self, monkeypatch):
        monkeypatch.setenv("max_priority_score", "80")
        monkeypatch.setenv("COORDINATOR_IDENTITIES", f'["{COORDINATOR}"]')

        settings = Settings(_env_file=None)

        assert settings.max_priority_score == 80
        assert settings.coordinator_identities == [COORDINATOR]


class TestResponseSchemas:
    """Tests for documented response examples."""

    def test_ok_example(self):
        assert OkResponse.model_json_schema()["example"] == {"type": "ok", "value": True}

    def test_err_example(self):
        assert ErrResponse.model_json_schema()["example"]["error"] == "NotFound"
