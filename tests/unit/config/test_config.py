import pytest

from propnet.config import DEV_SESSION_SECRET_KEY, Config

DATABASE_URL = "mongodb://localhost:27017/propnet_test"


@pytest.fixture(autouse=True)
def clean_environment(monkeypatch):
    monkeypatch.delenv("PROPNET_SESSION_SECRET_KEY", raising=False)
    monkeypatch.delenv("PROPNET_PRODUCTION", raising=False)


class TestSessionSecret:
    def test_production_requires_secret(self):
        """Test that a production configuration without a signing key refuses to load."""
        with pytest.raises(ValueError, match="PROPNET_SESSION_SECRET_KEY must be set in production"):
            Config(database_url=DATABASE_URL, production=True, session_secret_key=None, _env_file=None)

    def test_production_with_secret(self):
        config = Config(database_url=DATABASE_URL, production=True, session_secret_key="prod-key", _env_file=None)
        assert config.secret_key == "prod-key"

    def test_development_falls_back_to_dev_key(self):
        config = Config(database_url=DATABASE_URL, _env_file=None)
        assert config.production is False
        assert config.secret_key == DEV_SESSION_SECRET_KEY

    def test_production_from_environment(self, monkeypatch):
        monkeypatch.setenv("PROPNET_PRODUCTION", "true")
        with pytest.raises(ValueError, match="must be set in production"):
            Config(database_url=DATABASE_URL, _env_file=None)
