"""Capture of a downstream response body as it streams to the client."""

from __future__ import annotations

from typing import AsyncIterator, Awaitable, Callable, List, Optional, Union

Chunk = Union[bytes, memoryview, str]


class CapturedResponse:
    """Request-local buffer of the status code and body bytes of a response."""

    def __init__(self, status_code: int):
        self.status_code = status_code
        self._chunks: List[bytes] = []
        self._size = 0

    def write(self, chunk: Chunk) -> None:
        if isinstance(chunk, str):
            data = chunk.encode("utf-8")
        else:
            data = bytes(chunk)
        self._chunks.append(data)
        self._size += len(data)

    @property
    def size(self) -> int:
        return self._size

    @property
    def body(self) -> bytes:
        return b"".join(self._chunks)

    async def tee(
        self,
        body_iterator: AsyncIterator[Chunk],
        on_complete: Optional[Callable[["CapturedResponse"], Awaitable[None]]] = None,
    ) -> AsyncIterator[Chunk]:
        """Yield every chunk unchanged while mirroring it into the buffer.

        ``on_complete`` runs once the downstream body is exhausted. It is
        skipped if the stream is abandoned (client disconnect, handler error).
        """
        async for chunk in body_iterator:
            self.write(chunk)
            yield chunk
        if on_complete is not None:
            await on_complete(self)


__all__ = ["CapturedResponse"]
