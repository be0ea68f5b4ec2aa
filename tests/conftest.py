"""
Общие фикстуры для тестов.

Асинхронный код гоняем через asyncio.run() внутри обычных тестов —
без плагинов для pytest.
"""
from typing import Callable, List, Optional, Tuple

import pytest

from httpd.handler import Router
from httpd.storage import FileStore
from httpd.utils.stream import ByteStream


class ChunkSource:
    """
    Источник байтов, который отдаёт заранее заданные чанки по одному.

    Каждый read() — ровно один чанк (или его часть, если n меньше),
    после последнего — b"" как у закрытого сокета.
    """

    def __init__(self, chunks: List[bytes]):
        self._chunks = list(chunks)
        self.reads = 0

    async def read(self, n: int = -1) -> bytes:
        self.reads += 1
        if not self._chunks:
            return b""
        chunk = self._chunks.pop(0)
        if 0 <= n < len(chunk):
            self._chunks.insert(0, chunk[n:])
            chunk = chunk[:n]
        return chunk

    @property
    def exhausted(self) -> bool:
        return not self._chunks


class FakeWriter:
    """Заменитель asyncio.StreamWriter — копит всё записанное."""

    def __init__(self, peername: Tuple[str, int] = ("127.0.0.1", 50000)):
        self.data = bytearray()
        self.closed = False
        self.eof = False
        self._peername = peername

    def write(self, data: bytes) -> None:
        assert not self.closed, "write after close"
        assert not self.eof, "write after write_eof"
        self.data.extend(data)

    async def drain(self) -> None:
        pass

    def can_write_eof(self) -> bool:
        return True

    def write_eof(self) -> None:
        self.eof = True

    def close(self) -> None:
        self.closed = True

    async def wait_closed(self) -> None:
        pass

    def get_extra_info(self, name: str, default: Optional[object] = None) -> object:
        return self._peername if name == "peername" else default


@pytest.fixture
def make_stream() -> Callable[..., ByteStream]:
    """ByteStream поверх чанков: make_stream(b"GET / ", b"HTTP/1.1\\r\\n...")."""
    def factory(*chunks: bytes) -> ByteStream:
        return ByteStream(ChunkSource(list(chunks)))
    return factory


@pytest.fixture
def make_source() -> Callable[..., ChunkSource]:
    def factory(*chunks: bytes) -> ChunkSource:
        return ChunkSource(list(chunks))
    return factory


@pytest.fixture
def writer() -> FakeWriter:
    return FakeWriter()


@pytest.fixture
def files(tmp_path) -> FileStore:
    return FileStore(tmp_path)


@pytest.fixture
def router(files: FileStore) -> Router:
    return Router(files)
