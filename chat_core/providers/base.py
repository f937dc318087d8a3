"""Transport 抽象接口。

ChatEngine 不直接依赖 httpx，而是依赖此协议：

- TransportClient.send 负责发出请求，并在返回之前确认响应可用
  （连接失败、非 2xx 状态一律以单个 TransportError 抛出，而不是流中的数据块）。
- 返回的 ResponseStream 是可逐段读取的原始字节序列，由 StreamDecoder 解码。

这样可以在不改编排逻辑的前提下替换底层传输（测试中使用假实现）。
"""

from typing import Iterator, Protocol, Union

from chat_core.domain.models import ChatConfig


Chunk = Union[bytes, str]


class ResponseStream(Protocol):
    """增量响应句柄：按到达顺序产出原始数据块，用完需 close。"""

    def __iter__(self) -> Iterator[Chunk]:
        ...

    def close(self) -> None:
        ...


class TransportClient(Protocol):
    """聊天后端客户端协议。

    实现者需要提供：
    - name: 传输名称，用于日志。
    - send(config, user_text): 发起一次流式对话请求。
    - health_check(): 后端不可达时抛出异常。
    """

    name: str

    def send(self, config: ChatConfig, user_text: str) -> ResponseStream:
        ...

    def health_check(self) -> None:
        ...

