import pytest

from chat_core.api import service
from chat_core.config.settings import settings
from chat_core.domain.exceptions import NetworkError


class FakeStream:
    def __init__(self, chunks):
        self._chunks = chunks

    def __iter__(self):
        return iter(self._chunks)

    def close(self):
        pass


class FakeTransport:
    name = "fake"

    def __init__(self, chunks, healthy=True):
        self._chunks = chunks
        self._healthy = healthy
        self.configs = []

    def send(self, config, user_text):
        self.configs.append(config)
        return FakeStream(self._chunks)

    def health_check(self):
        if not self._healthy:
            raise NetworkError(code="NETWORK_ERROR", message="down")


@pytest.fixture
def fake_transport(monkeypatch):
    transport = FakeTransport([b"Hi", b" there", b"!"])
    monkeypatch.setattr("chat_core.api.service.create_transport", lambda: transport)
    monkeypatch.setattr(settings, "openai_api_key", None)
    service.reset_default_engine()
    yield transport
    service.reset_default_engine()


def test_build_config_defaults_and_overrides(monkeypatch):
    monkeypatch.setattr(settings, "openai_api_key", "sk-env")
    cfg = service.build_config()
    assert cfg.api_key == "sk-env"
    assert cfg.model == settings.default_model
    assert cfg.developer_message == settings.default_developer_message

    cfg = service.build_config(api_key="", model="gpt-4.1-nano", developer_message="")
    assert cfg.api_key == ""
    assert cfg.model == "gpt-4.1-nano"
    assert cfg.developer_message == ""
    assert "sk-env" not in repr(service.build_config())


def test_send_message_success(fake_transport):
    result = service.send_message("Hello", api_key="sk-test", model="gpt-4.1-mini")
    assert result["outcome"]["status"] == "success"
    assert [(m["role"], m["content"]) for m in result["messages"]] == [
        ("user", "Hello"),
        ("assistant", "Hi there!"),
    ]
    assert fake_transport.configs[0].model == "gpt-4.1-mini"
    assert service.get_state()["last_outcome"]["status"] == "success"


def test_send_message_without_key(fake_transport):
    result = service.send_message("Hello")
    assert result["outcome"]["error_kind"] == "missing_credential"
    assert result["messages"] == []
    assert "API key" in service.get_state()["error"]

    service.settings_changed()
    assert service.get_state()["error"] is None


def test_clear_chat(fake_transport):
    service.send_message("Hello", api_key="sk-test")
    service.clear_chat()
    assert service.get_transcript() == []


def test_check_backend(monkeypatch):
    monkeypatch.setattr("chat_core.api.service.create_transport", lambda: FakeTransport([], healthy=False))
    service.reset_default_engine()
    try:
        assert service.check_backend() is False
        assert "Backend server is not running" in service.get_state()["error"]
    finally:
        service.reset_default_engine()


def test_list_models():
    ids = [m["id"] for m in service.list_models()]
    assert ids == ["gpt-4.1-mini", "gpt-4.1-nano", "gpt-3.5-turbo"]
