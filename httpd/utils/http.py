"""
Минимальный HTTP/1.1 парсер запросов.

Только то что нужно серверу:
- request line
- headers
- тело фиксированной длины (Content-Length)

Chunked и keep-alive не поддерживаются: один запрос на соединение.

Парсер — явная машина состояний поверх ByteStream:

    AWAITING_REQUEST_LINE -> AWAITING_HEADERS -> AWAITING_BODY -> COMPLETE

Любое состояние может закончиться HttpError вместо COMPLETE.
"""
import enum
from dataclasses import dataclass, field
from typing import Awaitable, Callable, Dict, Optional

from httpd.utils.stream import ByteStream

ALLOWED_METHODS = frozenset({"GET", "POST", "PUT", "DELETE"})
SUPPORTED_VERSION = "HTTP/1.1"

# разделитель имени и значения — ровно ": ", режем только по первому
HEADER_DELIMITER = ": "


class HttpError(Exception):
    """
    Запрос нельзя обработать на уровне протокола.

    Несёт статус и фразу для терминального ответа —
    соединение после него сразу закрывается.
    """
    status = 400
    reason = "Bad Request"

    def __init__(self, message: str = ""):
        super().__init__(message or f"{self.status} {self.reason}")


class MalformedRequest(HttpError):
    status = 400
    reason = "Bad Request"


class MethodNotAllowed(HttpError):
    status = 405
    reason = "Method Not Allowed"


class VersionNotSupported(HttpError):
    status = 505
    reason = "HTTP Version Not Supported"


@dataclass
class HttpRequest:
    """
    Распарсенный HTTP-запрос вместе с телом.

    Имена заголовков хранятся как их прислал клиент,
    при повторе имени побеждает последнее значение.
    """
    method: str       # GET, POST, PUT, DELETE
    path: str         # /echo/abc — без query string
    version: str      # HTTP/1.1
    headers: Dict[str, str] = field(default_factory=dict)
    body: bytes = b""

    def header(self, name: str, default: Optional[str] = None) -> Optional[str]:
        """
        Значение заголовка без учёта регистра имени.

        "user-agent" и "User-Agent" — один и тот же заголовок,
        если прислали оба — берём тот что пришёл позже.
        """
        return find_header(self.headers, name, default)

    @property
    def content_length(self) -> Optional[int]:
        """Длина тела или None если не указано."""
        return parse_content_length(self.header("Content-Length"))

    @property
    def user_agent(self) -> Optional[str]:
        return self.header("User-Agent")

    @property
    def accept_encoding(self) -> Optional[str]:
        return self.header("Accept-Encoding")


def find_header(headers: Dict[str, str], name: str, default: Optional[str] = None) -> Optional[str]:
    wanted = name.lower()
    value = default
    for key, candidate in headers.items():
        if key.lower() == wanted:
            value = candidate
    return value


def parse_content_length(value: Optional[str]) -> Optional[int]:
    """
    Content-Length строго в десятичной записи.

    "+5", " 5", "0x10" и отрицательные — битый запрос,
    иначе мы бы ждали тело неизвестной длины.
    """
    if value is None:
        return None
    if not value.isdigit() or not value.isascii():
        raise MalformedRequest(f"Invalid Content-Length: {value!r}")
    return int(value, 10)


def split_target(target: str) -> str:
    """/echo/abc?x=1#top -> /echo/abc"""
    for sep in ("?", "#"):
        target = target.split(sep, 1)[0]
    return target


class ParserState(enum.Enum):
    AWAITING_REQUEST_LINE = "awaiting_request_line"
    AWAITING_HEADERS = "awaiting_headers"
    AWAITING_BODY = "awaiting_body"
    COMPLETE = "complete"


class RequestParser:
    """
    Собирает один HttpRequest из потока.

    Каждое состояние — отдельный шаг, который читает из ByteStream
    ровно столько, сколько ему нужно, и переключает состояние.
    Пока данных не хватает, шаг висит на await — остальные
    соединения это не задерживает.
    """

    def __init__(self, stream: ByteStream):
        self.stream = stream
        self.state = ParserState.AWAITING_REQUEST_LINE
        self.method = ""
        self.path = ""
        self.version = ""
        self.headers: Dict[str, str] = {}
        self.body = b""
        self._body_length = 0
        self._steps: Dict[ParserState, Callable[[], Awaitable[None]]] = {
            ParserState.AWAITING_REQUEST_LINE: self._read_request_line,
            ParserState.AWAITING_HEADERS: self._read_header,
            ParserState.AWAITING_BODY: self._read_body,
        }

    async def parse(self) -> HttpRequest:
        while self.state is not ParserState.COMPLETE:
            await self._steps[self.state]()
        return HttpRequest(self.method, self.path, self.version, self.headers, self.body)

    async def _read_request_line(self) -> None:
        """
        GET /path HTTP/1.1

        Метод и версию проверяем сразу, до заголовков: запрос с чужим
        методом или версией отклоняется, даже если тело так и не придёт.
        """
        try:
            line = await self.stream.read_line()
        except ConnectionError:
            if self.stream.bytes_received == 0:
                raise ConnectionError("Empty request")
            raise

        # latin-1 — стандартная кодировка для HTTP/1.x headers
        parts = line.decode("latin-1").split(" ")
        if len(parts) < 3:
            raise MalformedRequest(f"Malformed request line: {line!r}")

        # лишние токены после версии игнорируются
        method, target, version = parts[:3]
        if method not in ALLOWED_METHODS:
            raise MethodNotAllowed(f"Method not allowed: {method}")
        if version != SUPPORTED_VERSION:
            raise VersionNotSupported(f"Version not supported: {version}")

        self.method = method
        self.path = split_target(target)
        self.version = version
        self.state = ParserState.AWAITING_HEADERS

    async def _read_header(self) -> None:
        line = (await self.stream.read_line()).decode("latin-1")

        if not line:
            # пустая строка — конец заголовков
            self._begin_body()
            return

        # "Accept: a: b" -> ("Accept", "a: b"), а не три куска;
        # без ": " вся строка становится именем с пустым значением
        name, _, value = line.partition(HEADER_DELIMITER)
        # повторный заголовок (в любом регистре) перезаписывает прежний
        for existing in [key for key in self.headers if key.lower() == name.lower()]:
            del self.headers[existing]
        self.headers[name] = value

    def _begin_body(self) -> None:
        length = parse_content_length(find_header(self.headers, "Content-Length"))
        if length is None:
            self.state = ParserState.COMPLETE
            return
        self._body_length = length
        self.state = ParserState.AWAITING_BODY

    async def _read_body(self) -> None:
        self.body = await self.stream.read_exactly(self._body_length)
        self.state = ParserState.COMPLETE


async def parse_request(stream: ByteStream) -> HttpRequest:
    """
    Парсит request line, headers и тело из потока.

    Формат HTTP/1.1:
    POST /files/a HTTP/1.1\\r\\n
    Content-Length: 5\\r\\n
    \\r\\n
    hello
    """
    return await RequestParser(stream).parse()
