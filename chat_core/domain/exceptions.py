"""统一业务异常模型。

所有跨模块抛出的业务级错误都应该继承自 BusinessError，
便于在编排层（ChatEngine）统一捕获并转换为 TurnOutcome。
"""


class BusinessError(Exception):
    """业务异常基类。

    Attributes:
        code: 机器可读错误码（如 "MISSING_API_KEY"）。
        message: 用户可读错误信息。
        http_status: 映射到 HTTP 时可用的状态码，默认 400。
        extra: 其他补充字段（例如 message_id、url 等）。
    """

    def __init__(self, code: str, message: str, http_status: int = 400, **extra):
        self.code = code
        self.message = message
        self.http_status = http_status
        self.extra = extra
        super().__init__(message)


class ValidationError(BusinessError):
    """参数或配置校验失败。"""


class MissingCredentialError(ValidationError):
    """未提供 API 密钥，回合在任何副作用之前被拒绝。"""

    def __init__(self, message: str = "Please enter your API key in settings.", **extra):
        super().__init__(code="MISSING_API_KEY", message=message, **extra)


class TransportError(BusinessError):
    """请求未能产生可读取的响应（发生在流开始之前）。"""


class NetworkError(TransportError):
    """网络层错误，例如连接失败、超时等。"""


class ApiError(TransportError):
    """后端返回非 2xx/429 错误时抛出。"""


class RateLimitError(TransportError):
    """后端限流错误，由上层决定是否重试。"""


class StreamError(BusinessError):
    """流式读取过程中出现的错误（连接中断等）。"""

    def __init__(self, message: str, code: str = "STREAM_INTERRUPTED", **extra):
        super().__init__(code=code, message=message, **extra)


class DecodeError(StreamError):
    """响应字节无法按配置的编码解码为文本。"""

    def __init__(self, message: str, **extra):
        super().__init__(message, code="DECODE_ERROR", **extra)


class StoreError(BusinessError):
    """Transcript 存储层错误。"""


class MessageNotFoundError(StoreError):
    def __init__(self, message_id: str):
        super().__init__(
            code="MESSAGE_NOT_FOUND", message=f"Message {message_id} not found", http_status=404, message_id=message_id
        )


class DuplicateMessageError(StoreError):
    def __init__(self, message_id: str):
        super().__init__(
            code="DUPLICATE_MESSAGE", message=f"Message {message_id} already exists", http_status=409, message_id=message_id
        )


class MessageFrozenError(StoreError):
    """消息内容已定稿（或本身是用户消息），不允许再追加。"""

    def __init__(self, message_id: str):
        super().__init__(
            code="MESSAGE_FROZEN", message=f"Message {message_id} can no longer be changed", http_status=409, message_id=message_id
        )
