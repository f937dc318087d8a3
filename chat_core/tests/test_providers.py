import pytest

from chat_core.providers import create_transport
from chat_core.providers.http_client import HttpChatClient


def test_create_transport_defaults_to_http():
    assert isinstance(create_transport(), HttpChatClient)
    assert isinstance(create_transport("HTTP"), HttpChatClient)


def test_create_transport_unknown_name():
    with pytest.raises(KeyError):
        create_transport("websocket")
