from typing import Callable, Dict, List, Optional

from chat_core.domain.exceptions import DuplicateMessageError, MessageFrozenError, MessageNotFoundError
from chat_core.domain.models import Message, MessageView, Snapshot
from chat_core.domain.transcript import TranscriptEvent, TranscriptListener, TranscriptStore
from chat_core.infrastructure.logging.logger import logger


class InMemoryTranscriptStore(TranscriptStore):
    """进程内的 Transcript 存储。

    插入顺序即会话顺序。所有修改都是同步的，修改完成后立即对
    snapshot() 可见，并同步通知已订阅的监听器（展示层据此重绘）。
    """

    def __init__(self) -> None:
        self._messages: Dict[str, Message] = {}
        self._listeners: List[TranscriptListener] = []

    def append(self, message: Message) -> None:
        if message.id in self._messages:
            raise DuplicateMessageError(message.id)
        self._messages[message.id] = message
        self._notify("append", message.id)

    def append_to_content(self, message_id: str, fragment: str) -> None:
        msg = self._require(message_id)
        if msg.frozen:
            raise MessageFrozenError(message_id)
        msg.fragments.append(fragment)
        self._notify("update", message_id)

    def remove(self, message_id: str) -> None:
        if self._messages.pop(message_id, None) is not None:
            self._notify("remove", message_id)

    def freeze(self, message_id: str) -> None:
        msg = self._messages.get(message_id)
        if msg is not None:
            msg.frozen = True

    def get(self, message_id: str) -> MessageView:
        return self._require(message_id).view()

    def fragments(self, message_id: str) -> List[str]:
        """返回某条消息的内容追加日志副本。"""
        return list(self._require(message_id).fragments)

    def snapshot(self) -> Snapshot:
        return tuple(m.view() for m in self._messages.values())

    def clear(self) -> None:
        self._messages.clear()
        self._notify("clear", None)

    def subscribe(self, listener: TranscriptListener) -> Callable[[], None]:
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def __len__(self) -> int:
        return len(self._messages)

    def _require(self, message_id: str) -> Message:
        msg = self._messages.get(message_id)
        if msg is None:
            raise MessageNotFoundError(message_id)
        return msg

    def _notify(self, event: TranscriptEvent, message_id: Optional[str]) -> None:
        # 监听器（展示层）的异常不能打断存储的修改与回合编排
        for listener in list(self._listeners):
            try:
                listener(event, message_id)
            except Exception:  # noqa: BLE001 - 只记录，不向调用方传播
                logger.exception(
                    "Transcript listener failed",
                    extra={"extra": {"event": event, "message_id": message_id}},
                )
