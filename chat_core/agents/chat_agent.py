"""对话编排核心模块。

负责一个完整回合：写入用户消息、创建助手占位消息、调用传输层、
把解码后的文本片段按到达顺序逐段追加到占位消息，并把回合归结为
success / empty_response / error 之一。

回合内的任何失败都不会越过 submit_turn 向外抛出，而是转换为 TurnOutcome。
"""

from datetime import datetime, timezone
from itertools import count
from typing import Any, Callable, Dict, Optional
from uuid import uuid4
import logging
import time

from chat_core.domain.exceptions import BusinessError, MessageNotFoundError, MissingCredentialError, TransportError
from chat_core.domain.models import ChatConfig, Message, Snapshot, TurnOutcome, TurnState
from chat_core.domain.transcript import TranscriptListener, TranscriptStore
from chat_core.providers.base import TransportClient
from chat_core.streaming.decoder import StreamDecoder
from chat_core.infrastructure.logging.logger import logger


EMPTY_RESPONSE_MESSAGE = "No response received from the AI. Please try again."
BACKEND_DOWN_MESSAGE = "Backend server is not running. Please start the FastAPI server."
BUSY_MESSAGE = "A response is still being generated. Please wait for it to finish."
SEND_FAILED_MESSAGE = "Failed to send message"


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class ChatEngine:
    """单会话的对话编排器。

    - store: Transcript 存储，消息记录的唯一所有者。
    - transport: 负责发出请求并返回增量响应句柄。
    - decoder: 把原始字节块解码为文本片段。
    - clock: 消息时间戳来源，测试中可替换。

    同一时刻只允许一个回合在进行；回合进行中再次提交会直接得到
    error_kind="busy" 的结果，Transcript 不受影响。
    """

    def __init__(
        self,
        store: TranscriptStore,
        transport: TransportClient,
        decoder: Optional[StreamDecoder] = None,
        clock: Optional[Callable[[], datetime]] = None,
    ):
        self._store = store
        self._transport = transport
        self._decoder = decoder or StreamDecoder()
        self._clock = clock or _utcnow
        self._ids = count(1)
        self._in_flight = False
        self.state = TurnState()

    @property
    def store(self) -> TranscriptStore:
        return self._store

    def snapshot(self) -> Snapshot:
        return self._store.snapshot()

    def subscribe(self, listener: TranscriptListener) -> Callable[[], None]:
        return self._store.subscribe(listener)

    def submit_turn(self, user_text: str, config: ChatConfig) -> TurnOutcome:
        """执行一次对话回合。

        Args:
            user_text: 用户输入（允许为空字符串，是否拒绝由调用方决定）
            config: 会话配置，api_key 为空时回合在任何副作用之前被拒绝

        Returns:
            TurnOutcome，描述本回合的终态
        """
        log_ctx: Dict[str, Any] = {
            "trace_id": f"tr-{uuid4().hex}",
            "transport": getattr(self._transport, "name", "unknown"),
            "model": config.model,
        }

        if self._in_flight:
            self._log(logging.WARNING, "Rejected turn while another is in flight", log_ctx)
            return TurnOutcome(status="error", message=BUSY_MESSAGE, error_kind="busy")

        if not config.has_credential:
            err = MissingCredentialError()
            self._log(logging.WARNING, "Rejected turn without credential", log_ctx, code=err.code)
            return self._finish(
                TurnOutcome(status="error", message=err.message, error_kind="missing_credential")
            )

        self._in_flight = True
        self.state.is_loading = True
        self.state.error = None
        start_time = time.time()
        try:
            outcome = self._run_turn(user_text, config, log_ctx)
        finally:
            self._in_flight = False
            self.state.is_loading = False

        self._log(
            logging.INFO,
            "Completed turn",
            log_ctx,
            status=outcome.status,
            error_kind=outcome.error_kind,
            elapsed_seconds=round(time.time() - start_time, 2),
        )
        return self._finish(outcome)

    def clear(self) -> bool:
        """清空 Transcript 与错误状态；回合进行中时拒绝并返回 False。"""
        if self._in_flight:
            logger.warning("Rejected clear while a turn is in flight")
            return False
        self._store.clear()
        self.state.error = None
        self.state.last_outcome = None
        return True

    def config_changed(self) -> None:
        """设置被修改后清除“缺少密钥”的提示，其他错误保留。"""
        if self.state.error and "API key" in self.state.error:
            self.state.error = None

    def check_health(self) -> bool:
        """探测后端；失败时只记录错误提示，不影响后续回合。"""
        try:
            self._transport.health_check()
        except TransportError as e:
            self.state.error = BACKEND_DOWN_MESSAGE
            logger.warning("Backend health check failed", extra={"extra": {"code": e.code, "error": e.message}})
            return False
        return True

    def _run_turn(self, user_text: str, config: ChatConfig, log_ctx: Dict[str, Any]) -> TurnOutcome:
        # 1. 用户消息：在任何网络调用之前可见
        user_msg = Message.user(self._next_id(), user_text, self._clock())
        self._store.append(user_msg)
        log_ctx["user_message_id"] = user_msg.id

        # 2. 助手占位消息：本回合唯一会被修改内容的记录
        placeholder = Message.placeholder(self._next_id(), self._clock())
        self._store.append(placeholder)
        log_ctx["assistant_message_id"] = placeholder.id

        # 3. 发出请求；失败时总是移除占位消息，保留用户消息
        self._log(logging.INFO, "Sending request", log_ctx)
        try:
            stream = self._transport.send(config, user_text)
        except Exception as e:  # noqa: BLE001 - 任何发送失败都归结为 transport 错误
            self._store.remove(placeholder.id)
            message = self._error_message(e)
            self._log(logging.ERROR, "Transport failed", log_ctx, error=message, code=getattr(e, "code", None))
            return TurnOutcome(status="error", message=message, error_kind="transport", user_message_id=user_msg.id)

        # 4/5. 逐段追加，保持到达顺序
        has_content = False
        fragment_count = 0
        try:
            for fragment in self._decoder.decode(stream):
                if not fragment:
                    continue
                self._store.append_to_content(placeholder.id, fragment)
                has_content = True
                fragment_count += 1
        except Exception as e:  # noqa: BLE001 - 流中断需要转换为回合结果
            # 7. 已有内容则保留（部分回答比沉默更有用），否则移除占位
            message = self._error_message(e)
            kept: Optional[str] = None
            if has_content and self._exists(placeholder.id):
                self._store.freeze(placeholder.id)
                kept = placeholder.id
            else:
                self._store.remove(placeholder.id)
            self._log(
                logging.ERROR,
                "Stream failed",
                log_ctx,
                error=message,
                code=getattr(e, "code", None),
                fragments=fragment_count,
                kept_partial=kept is not None,
            )
            return TurnOutcome(
                status="error",
                message=message,
                error_kind="stream",
                user_message_id=user_msg.id,
                assistant_message_id=kept,
            )
        finally:
            self._close_stream(stream, log_ctx)

        # 6. 正常结束
        self._log(logging.INFO, "Stream finished", log_ctx, fragments=fragment_count)
        if not has_content:
            self._store.remove(placeholder.id)
            return TurnOutcome(
                status="empty_response",
                message=EMPTY_RESPONSE_MESSAGE,
                user_message_id=user_msg.id,
            )
        self._store.freeze(placeholder.id)
        return TurnOutcome(
            status="success",
            user_message_id=user_msg.id,
            assistant_message_id=placeholder.id,
        )

    def _finish(self, outcome: TurnOutcome) -> TurnOutcome:
        self.state.last_outcome = outcome
        self.state.error = None if outcome.ok else outcome.message
        return outcome

    def _exists(self, message_id: str) -> bool:
        try:
            self._store.get(message_id)
        except MessageNotFoundError:
            return False
        return True

    def _close_stream(self, stream: Any, log_ctx: Dict[str, Any]) -> None:
        try:
            stream.close()
        except Exception as e:  # noqa: BLE001 - 关闭失败不能覆盖已确定的回合结果
            self._log(logging.WARNING, "Failed to close response stream", log_ctx, error=str(e))

    def _next_id(self) -> str:
        return f"m-{next(self._ids)}"

    @staticmethod
    def _error_message(e: Exception) -> str:
        if isinstance(e, BusinessError):
            return e.message
        return str(e) or SEND_FAILED_MESSAGE

    @staticmethod
    def _log(level: int, message: str, log_ctx: Dict[str, Any], **fields: Any) -> None:
        payload = dict(log_ctx)
        payload.update(fields)
        logger.log(level, message, extra={"extra": payload})
