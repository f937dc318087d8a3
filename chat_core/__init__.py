"""Chat Core 顶层包。

该包提供流式聊天客户端的核心实现，
包括配置加载、领域模型、HTTP 传输、流式解码、
Transcript 存储与对话回合编排等能力。
"""

from chat_core.agents.chat_agent import ChatEngine
from chat_core.domain.models import ChatConfig, TurnOutcome

__all__ = ["ChatEngine", "ChatConfig", "TurnOutcome"]
