import pytest

from geomood.utils.config import Settings


class TestSettings:

    def test_reads_environment(self, monkeypatch):
        monkeypatch.setenv("TODAY_MOODS_PER_USER", "0")
        monkeypatch.setenv("AUTO_REGISTER_USERS", "true")

        settings = Settings.from_env(dotenv_path="/nonexistent/.env")

        assert settings.gemini_api_key == "fake_key"
        assert settings.weather_api_key == "fake_weather_key"
        assert settings.today_moods_per_user == 0
        assert settings.auto_register_users is True
        assert settings.mongodb_database == "geomood"

    def test_defaults(self, monkeypatch):
        monkeypatch.delenv("TODAY_MOODS_PER_USER", raising=False)
        monkeypatch.delenv("AUTO_REGISTER_USERS", raising=False)

        settings = Settings.from_env(dotenv_path="/nonexistent/.env")

        assert settings.today_moods_per_user == 1
        assert settings.auto_register_users is False

    def test_malformed_integer(self, monkeypatch):
        monkeypatch.setenv("TODAY_MOODS_PER_USER", "many")
        with pytest.raises(ValueError, match="TODAY_MOODS_PER_USER"):
            Settings.from_env(dotenv_path="/nonexistent/.env")
