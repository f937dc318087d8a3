from datetime import datetime, timezone

from chat_core.domain.models import ChatConfig, ChatRequest, Message, TurnOutcome
from chat_core.providers.registry import get_model_option


def test_messages():
    now = datetime.now(timezone.utc)
    user = Message.user("m1", "hi", now)
    assert user.role == "user"
    assert user.content == "hi"
    assert user.frozen
    assert Message.user("m2", "", now).content == ""

    ph = Message.placeholder("m3", now)
    assert ph.role == "assistant"
    assert ph.content == ""
    assert not ph.frozen
    ph.fragments.extend(["a", "b"])
    view = ph.view()
    assert view.content == "ab"
    assert view.to_dict()["created_at"] == now.isoformat()


def test_config_and_request():
    assert not ChatConfig(api_key=" ").has_credential
    cfg = ChatConfig(api_key="sk-secret", model="gpt-4.1-nano", developer_message="sys")
    assert cfg.has_credential
    assert "sk-secret" not in repr(cfg)
    req = ChatRequest.from_config(cfg, "hello")
    assert req.to_payload() == {
        "developer_message": "sys",
        "user_message": "hello",
        "model": "gpt-4.1-nano",
        "api_key": "sk-secret",
    }
    assert "sk-secret" not in repr(req)


def test_outcome():
    assert TurnOutcome(status="success").ok
    out = TurnOutcome(status="error", message="boom", error_kind="stream")
    assert not out.ok
    assert out.to_dict()["error_kind"] == "stream"


def test_model_registry():
    assert get_model_option("GPT-4.1-MINI").label == "GPT-4.1 Mini"
    assert get_model_option("custom-model") is None
