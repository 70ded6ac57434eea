import pytest

from taskchat_api.settings import DEFAULT_DATABASE_URL, get_settings

ENV_VARS = [
    "PORT",
    "HOST",
    "STORE_BACKEND",
    "FIREBASE_CREDENTIALS",
    "FIREBASE_DATABASE_URL",
    "CORS_ALLOW_ORIGINS",
    "LOG_LEVEL",
]


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    for name in ENV_VARS:
        monkeypatch.delenv(name, raising=False)


class TestSettings:
    def test_defaults(self):
        s = get_settings()
        assert s.port == 5000
        assert s.host == "0.0.0.0"
        assert s.store_backend == "firebase"
        assert s.firebase_credentials == "./serviceAccountKey.json"
        assert s.firebase_database_url == DEFAULT_DATABASE_URL
        assert s.cors_allow_origins == ["*"]
        assert s.log_level == "INFO"

    def test_port_from_env(self, monkeypatch):
        monkeypatch.setenv("PORT", "8080")
        assert get_settings().port == 8080

    @pytest.mark.parametrize("value", ["abc", "0", "70000", ""])
    def test_invalid_port_falls_back(self, monkeypatch, value):
        monkeypatch.setenv("PORT", value)
        assert get_settings().port == 5000

    def test_unknown_backend_falls_back_to_firebase(self, monkeypatch):
        monkeypatch.setenv("STORE_BACKEND", "sqlite")
        assert get_settings().store_backend == "firebase"

    def test_memory_backend(self, monkeypatch):
        monkeypatch.setenv("STORE_BACKEND", " Memory ")
        assert get_settings().store_backend == "memory"

    def test_origins_list(self, monkeypatch):
        monkeypatch.setenv("CORS_ALLOW_ORIGINS", "http://a.test, http://b.test,")
        assert get_settings().cors_allow_origins == ["http://a.test", "http://b.test"]

    def test_log_level(self, monkeypatch):
        monkeypatch.setenv("LOG_LEVEL", "debug")
        assert get_settings().log_level == "DEBUG"
        monkeypatch.setenv("LOG_LEVEL", "loud")
        assert get_settings().log_level == "INFO"
