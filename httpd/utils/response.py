"""
HTTP-ответ и его сериализация в байты.

Формат:
HTTP/1.1 200 OK\r\n
Content-Type: text/plain\r\n
Content-Length: 3\r\n
\r\n
abc

Content-Type и Content-Length есть в каждом ответе:
если хэндлер их не выставил — проставляем сами.
"""
from dataclasses import dataclass, field
from typing import Dict, Optional

from httpd.utils.http import HttpError, SUPPORTED_VERSION, find_header

# других фраз сериализатор не знает — для остальных кодов нужен явный reason
REASON_PHRASES: Dict[int, str] = {
    200: "OK",
    201: "Created",
    404: "Not Found",
}

DEFAULT_CONTENT_TYPE = "text/plain"


@dataclass
class HttpResponse:
    """
    Ответ хэндлера.

    Заголовки пишутся в порядке добавления.
    """
    status: int
    body: bytes = b""
    headers: Dict[str, str] = field(default_factory=dict)
    reason: Optional[str] = None

    def has_header(self, name: str) -> bool:
        return find_header(self.headers, name) is not None

    @property
    def reason_phrase(self) -> str:
        """Явная фраза, иначе из таблицы, иначе пустая строка."""
        if self.reason is not None:
            return self.reason
        return REASON_PHRASES.get(self.status, "")


def serialize_response(response: HttpResponse, version: str = SUPPORTED_VERSION) -> bytes:
    """
    Собирает ответ целиком: status line, headers, пустая строка, тело.

    Сам response не меняется — дефолтные заголовки
    добавляются в копию.
    """
    headers = dict(response.headers)
    if not response.has_header("Content-Type"):
        headers["Content-Type"] = DEFAULT_CONTENT_TYPE
    if not response.has_header("Content-Length"):
        headers["Content-Length"] = str(len(response.body))

    head = f"{version} {response.status} {response.reason_phrase}\r\n"
    for name, value in headers.items():
        head += f"{name}: {value}\r\n"
    head += "\r\n"

    # latin-1 — стандартная кодировка для HTTP/1.x headers
    return head.encode("latin-1") + response.body


def serialize_error(error: HttpError) -> bytes:
    """
    Терминальный ответ на ошибку протокола.

    Без заголовков и тела — после него соединение закрывается:
    HTTP/1.1 505 HTTP Version Not Supported\r\n\r\n
    """
    return f"{SUPPORTED_VERSION} {error.status} {error.reason}\r\n\r\n".encode("latin-1")
