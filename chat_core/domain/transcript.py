from typing import Callable, Literal, Optional, Protocol

from .models import Message, MessageView, Snapshot


TranscriptEvent = Literal["append", "update", "remove", "clear"]
# listener(event, message_id)；clear 事件的 message_id 为 None
TranscriptListener = Callable[[TranscriptEvent, Optional[str]], None]


class TranscriptStore(Protocol):
    def append(self, message: Message) -> None:
        ...

    def append_to_content(self, message_id: str, fragment: str) -> None:
        ...

    def remove(self, message_id: str) -> None:
        ...

    def freeze(self, message_id: str) -> None:
        ...

    def get(self, message_id: str) -> MessageView:
        ...

    def snapshot(self) -> Snapshot:
        ...

    def clear(self) -> None:
        ...

    def subscribe(self, listener: TranscriptListener) -> Callable[[], None]:
        ...
