"""
Буферизованное чтение байтового потока.

Данные из сокета приходят кусками произвольного размера:
строка запроса может прийти в трёх чанках, а заголовки вместе с телом
в одном. Парсеру же нужны две операции:
- "дай следующую строку до \\r\\n"
- "дай следующие N байт"

ByteStream копит байты и отдаёт их только когда нужное уже в буфере,
иначе ждёт следующий чанк из источника.
"""
from typing import Protocol

CRLF = b"\r\n"

# 16KB — баланс между числом syscall'ов и задержкой первого чанка
CHUNK_SIZE = 16 * 1024


class ByteSource(Protocol):
    """Всё что умеет `await read(n)` — обычно asyncio.StreamReader."""

    async def read(self, n: int = -1) -> bytes: ...


class ByteStream:
    """
    Накопитель байтов поверх источника.

    Размер буфера не ограничен: клиент, который шлёт поток без \\r\\n,
    может раздуть его сколько угодно. Ограничения — забота вызывающего.
    """

    def __init__(self, source: ByteSource, chunk_size: int = CHUNK_SIZE):
        self._source = source
        self._chunk_size = chunk_size
        self._buffer = bytearray()
        self._eof = False
        self.bytes_received = 0

    def feed(self, chunk: bytes) -> None:
        """Добавляет байты в буфер. Никогда не блокирует."""
        self._buffer.extend(chunk)
        self.bytes_received += len(chunk)

    @property
    def buffered(self) -> int:
        return len(self._buffer)

    async def _fill(self) -> None:
        """
        Дочитывает один чанк из источника.

        Пустой read() — клиент закрыл соединение, дальше ждать нечего.
        """
        if self._eof:
            raise ConnectionError("Connection closed by peer")
        chunk = await self._source.read(self._chunk_size)
        if not chunk:
            self._eof = True
            raise ConnectionError("Connection closed by peer")
        self.feed(chunk)

    async def read_line(self) -> bytes:
        """
        Следующая строка без завершающего \\r\\n.

        Одиночный \\n разделителем не считается — только пара CR LF.
        """
        start = 0
        while True:
            end = self._buffer.find(CRLF, start)
            if end != -1:
                line = bytes(self._buffer[:end])
                del self._buffer[:end + len(CRLF)]
                return line
            # \r мог прийти последним байтом чанка, а \n — в следующем
            start = max(0, len(self._buffer) - 1)
            await self._fill()

    async def read_exactly(self, n: int) -> bytes:
        """Ровно n байт, считая от текущей позиции."""
        if n < 0:
            raise ValueError(f"Negative read length: {n}")
        while len(self._buffer) < n:
            await self._fill()
        data = bytes(self._buffer[:n])
        del self._buffer[:n]
        return data

