"""统一的消息、配置与回合结果模型。

本模块定义了客户端内部共享的标准数据结构：

- Message: Transcript 中的一条消息记录（身份不可变 + 可增长的内容日志）。
- MessageView: Message 的只读快照，供展示层读取。
- ChatConfig: 调用方提供的会话配置（密钥、模型、系统指令）。
- ChatRequest: 发给后端 /api/chat 的请求体。
- TurnOutcome / TurnState: 一个回合的最终结果以及展示层可见的状态。
"""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, List, Literal, Optional, Tuple


# 消息角色（与后端 user/assistant 一致，system 指令通过 ChatConfig 单独传递）
Role = Literal["user", "assistant"]

OutcomeStatus = Literal["success", "empty_response", "error"]
ErrorKind = Literal["missing_credential", "transport", "stream", "busy"]


@dataclass(frozen=True)
class MessageView:
    """某一时刻的消息快照（不可变）。"""

    id: str
    role: Role
    content: str
    created_at: datetime

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "role": self.role,
            "content": self.content,
            "created_at": self.created_at.isoformat(),
        }


@dataclass
class Message:
    """Transcript 中的一条消息记录。

    - id / role / created_at 在创建后不再变化。
    - fragments 是内容的追加日志，content 为其按序拼接的结果。
      assistant 占位消息在回合进行中只能追加，回合结束后 frozen。
    - user 消息在创建时即 frozen，内容只设置一次。
    """

    id: str
    role: Role
    created_at: datetime
    fragments: List[str] = field(default_factory=list)
    frozen: bool = False

    @classmethod
    def user(cls, message_id: str, text: str, created_at: datetime) -> "Message":
        return cls(
            id=message_id,
            role="user",
            created_at=created_at,
            fragments=[text] if text else [],
            frozen=True,
        )

    @classmethod
    def placeholder(cls, message_id: str, created_at: datetime) -> "Message":
        return cls(id=message_id, role="assistant", created_at=created_at)

    @property
    def content(self) -> str:
        return "".join(self.fragments)

    def view(self) -> MessageView:
        return MessageView(id=self.id, role=self.role, content=self.content, created_at=self.created_at)


@dataclass
class ChatConfig:
    """一次回合使用的配置，对核心而言均为不透明字符串。

    - api_key: 调用方提供的密钥，仅透传给后端，不缓存、不持久化。
    - model: 模型标识，例如 "gpt-4.1-mini"。
    - developer_message: 系统指令。
    """

    api_key: str = field(default="", repr=False)
    model: str = "gpt-4.1-mini"
    developer_message: str = "You are a helpful AI assistant."

    @property
    def has_credential(self) -> bool:
        return bool((self.api_key or "").strip())


@dataclass
class ChatRequest:
    """POST /api/chat 的请求体。"""

    developer_message: str
    user_message: str
    model: str
    api_key: str = field(repr=False)

    @classmethod
    def from_config(cls, config: ChatConfig, user_text: str) -> "ChatRequest":
        return cls(
            developer_message=config.developer_message,
            user_message=user_text,
            model=config.model,
            api_key=config.api_key,
        )

    def to_payload(self) -> Dict[str, Any]:
        return {
            "developer_message": self.developer_message,
            "user_message": self.user_message,
            "model": self.model,
            "api_key": self.api_key,
        }


@dataclass(frozen=True)
class TurnOutcome:
    """一个回合的终态分类。

    - status: success / empty_response / error。
    - error_kind: status 为 error 时的子类型。
    - message: 面向用户的可读信息（success 时为空字符串）。
    - user_message_id / assistant_message_id: 本回合涉及的消息 id；
      assistant_message_id 只有在助手消息最终保留时才会给出。
    """

    status: OutcomeStatus
    message: str = ""
    error_kind: Optional[ErrorKind] = None
    user_message_id: Optional[str] = None
    assistant_message_id: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.status == "success"

    def to_dict(self) -> Dict[str, Any]:
        return {
            "status": self.status,
            "message": self.message,
            "error_kind": self.error_kind,
            "user_message_id": self.user_message_id,
            "assistant_message_id": self.assistant_message_id,
        }


@dataclass
class TurnState:
    """展示层可读取的回合状态。"""

    is_loading: bool = False
    error: Optional[str] = None
    last_outcome: Optional[TurnOutcome] = None


Snapshot = Tuple[MessageView, ...]
