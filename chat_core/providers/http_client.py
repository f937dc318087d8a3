"""HTTP 传输适配器。

本模块负责：

1. 接收 ChatConfig 与用户输入，构造 /api/chat 的请求体。
2. 通过 httpx 发出流式请求，并在返回之前检查状态码，
   把连接错误、限流和其他非 2xx 响应统一包装为 TransportError。
3. 返回 HttpResponseStream：逐段产出响应体的原始字节，
   读取中途的连接中断被包装为 StreamError。
4. 提供 /api/health 健康检查。

密钥只随每次请求透传给后端，这里不做任何缓存。
"""

import httpx
from typing import Iterator, Optional

from chat_core.domain.models import ChatConfig, ChatRequest
from chat_core.domain.exceptions import ApiError, NetworkError, RateLimitError, StreamError


class HttpResponseStream:
    """基于 httpx 流式响应的 ResponseStream 实现。"""

    def __init__(self, client: httpx.Client, response: httpx.Response):
        self._client = client
        self._response = response
        self._closed = False

    def __iter__(self) -> Iterator[bytes]:
        try:
            for chunk in self._response.iter_bytes():
                if chunk:
                    yield chunk
        except (httpx.HTTPError, httpx.StreamError) as e:
            # 已开始读取后的错误属于流中断，而不是传输失败
            raise StreamError(str(e) or e.__class__.__name__) from e

    def close(self) -> None:
        if self._closed:
            return
        self._closed = True
        try:
            self._response.close()
        finally:
            self._client.close()

    def __enter__(self) -> "HttpResponseStream":
        return self

    def __exit__(self, *exc) -> bool:
        self.close()
        return False


class HttpChatClient:
    """聊天后端的 HTTP 客户端实现。

    - name: 传输名称（供日志/调试使用）。
    - send: 发起流式对话请求，返回 HttpResponseStream。
    - health_check: 探测后端是否在线。
    """

    name = "http"

    def __init__(self, settings):
        # Settings 里包含 backend_base_url、超时等配置
        self._settings = settings

    @property
    def base_url(self) -> str:
        return (getattr(self._settings, "backend_base_url", None) or "http://localhost:8000").rstrip("/")

    def send(self, config: ChatConfig, user_text: str) -> HttpResponseStream:
        """发起一次流式对话请求。

        步骤：
        1. 由 ChatConfig + 用户输入构造 ChatRequest。
        2. 发送请求（stream=True），捕获网络错误。
        3. 检查状态码：429 -> RateLimitError，其他非 2xx -> ApiError。
        4. 返回尚未读取的响应句柄。
        """

        payload = ChatRequest.from_config(config, user_text).to_payload()
        client = httpx.Client(timeout=self._settings.http_timeout, trust_env=False)
        try:
            request = client.build_request(
                "POST",
                f"{self.base_url}/api/chat",
                json=payload,
                headers={"Content-Type": "application/json"},
            )
            resp = client.send(request, stream=True)
        except httpx.RequestError as e:
            # 网络错误：DNS 失败、连接被拒绝、超时等
            client.close()
            raise NetworkError(code="NETWORK_ERROR", message=self._network_message(e), url=self.base_url)

        if 200 <= resp.status_code < 300:
            return HttpResponseStream(client, resp)

        try:
            detail = self._error_detail(resp)
        finally:
            resp.close()
            client.close()
        if resp.status_code == 429:
            raise RateLimitError(code="RATE_LIMIT", message=detail or "Rate limit exceeded", http_status=429)
        raise ApiError(
            code="API_ERROR",
            message=detail or f"HTTP {resp.status_code}",
            http_status=resp.status_code,
        )

    def health_check(self) -> None:
        """GET /api/health，不可达或非 2xx 时抛出 TransportError。"""

        try:
            with httpx.Client(timeout=self._settings.http_timeout, trust_env=False) as client:
                resp = client.get(f"{self.base_url}/api/health")
        except httpx.RequestError as e:
            raise NetworkError(code="NETWORK_ERROR", message=self._network_message(e), url=self.base_url)
        if not 200 <= resp.status_code < 300:
            raise ApiError(code="HEALTH_CHECK_FAILED", message=f"HTTP {resp.status_code}", http_status=resp.status_code)

    @staticmethod
    def _error_detail(resp: httpx.Response) -> Optional[str]:
        """提取错误信息：优先使用后端 JSON 中的 detail 字段。"""

        try:
            resp.read()
        except httpx.HTTPError:
            return None
        try:
            data = resp.json()
        except ValueError:
            return (resp.text or "").strip() or None
        if isinstance(data, dict) and data.get("detail"):
            return str(data["detail"])
        return (resp.text or "").strip() or None

    @staticmethod
    def _network_message(e: Exception) -> str:
        reason = str(e) or e.__class__.__name__
        return f"Could not reach the chat backend: {reason}"
