"""聊天后端传输层。

该包下的模块负责：
- 定义 Transport 抽象接口 (base)。
- 维护可选模型列表 (registry)。
- 提供基于 httpx 的具体实现 (http_client)。
"""

from typing import Optional

from chat_core.config.settings import settings
from chat_core.providers.base import TransportClient
from chat_core.providers.http_client import HttpChatClient


def create_transport(name: Optional[str] = None) -> TransportClient:
    """根据名称创建 Transport 实例，目前仅支持 http。"""

    transport_name = (name or "http").lower()
    if transport_name == "http":
        return HttpChatClient(settings)
    raise KeyError(f"Unknown transport: {name!r}")
