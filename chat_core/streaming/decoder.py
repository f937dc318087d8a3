"""流式响应解码。

把传输层逐段到达的原始字节解码为文本片段：每个输入块对应至多一个
输出片段，不做合并或拆分。使用增量解码器，因此跨块截断的多字节
字符会在下一块到达时一并输出，而不是被解成乱码。
"""

import codecs
from typing import Iterable, Iterator, Optional

from chat_core.config.settings import settings
from chat_core.domain.exceptions import DecodeError


class StreamDecoder:
    def __init__(self, encoding: Optional[str] = None):
        encoding = encoding or settings.stream_encoding
        try:
            codecs.lookup(encoding)
        except LookupError as e:
            raise ValueError(f"Unknown stream encoding: {encoding!r}") from e
        self.encoding = encoding

    def decode(self, chunks: Iterable) -> Iterator[str]:
        """按到达顺序产出文本片段。

        - bytes 块经增量解码后输出；只包含半个字符的块不产出片段。
        - str 块原样透传。
        - 非法字节或数据结束时残留不完整字符会抛出 DecodeError。
        """

        decoder = codecs.getincrementaldecoder(self.encoding)(errors="strict")
        for index, chunk in enumerate(chunks):
            if isinstance(chunk, str):
                text = chunk
            else:
                try:
                    text = decoder.decode(bytes(chunk))
                except UnicodeDecodeError as e:
                    raise DecodeError(f"Response is not valid {self.encoding}: {e.reason}", chunk_index=index) from e
            if text:
                yield text
        try:
            tail = decoder.decode(b"", final=True)
        except UnicodeDecodeError as e:
            raise DecodeError(f"Response ended inside a {self.encoding} character", chunk_index=None) from e
        if tail:
            yield tail
