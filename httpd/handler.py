"""
Маршрутизация запросов.

Маршруты зашиты в код и проверяются по порядку:
- любой метод кроме GET/POST -> 405
- GET /                      -> 200
- GET /echo/<text>           -> 200, text (gzip если попросили)
- GET /user-agent            -> 200, значение User-Agent
- GET /files/<name>          -> 200 с файлом или 404
- POST /files/<name>         -> 201, тело запроса пишется в файл
- всё остальное              -> 404

Файлы и сжатие уходят в отдельный поток через asyncio.to_thread —
корутина соединения ждёт, остальные соединения работают.
"""
import asyncio
import logging
from typing import Callable

from httpd.storage import FileStore
from httpd.utils.encoding import GZIP, gzip_compress
from httpd.utils.http import HttpRequest
from httpd.utils.response import HttpResponse

logger = logging.getLogger("httpd")

# на уровне приложения разрешены только эти, PUT/DELETE отсекаются здесь
APP_METHODS = frozenset({"GET", "POST"})

ECHO_PREFIX = "/echo/"
FILES_PREFIX = "/files/"
USER_AGENT_PATH = "/user-agent"

OCTET_STREAM = "application/octet-stream"

# "", "." и ".." — сам каталог или родитель, это не файл
_RESERVED_NAMES = frozenset({"", ".", ".."})
_FORBIDDEN_CHARS = ("/", "\\", "\x00")


def is_safe_name(name: str) -> bool:
    """
    Имя файла без разделителей пути.

    ../secret, a/b и a\\b не проходят — выход за пределы каталога
    выглядит для клиента так же, как отсутствующий файл.
    """
    if name in _RESERVED_NAMES:
        return False
    return not any(ch in name for ch in _FORBIDDEN_CHARS)


def not_found() -> HttpResponse:
    return HttpResponse(404)


def method_not_allowed() -> HttpResponse:
    # 405 нет в таблице сериализатора — статусная строка уйдёт с пустой фразой
    return HttpResponse(405)


def _to_bytes(text: str) -> bytes:
    # путь и заголовки декодированы как latin-1, обратно — без потерь
    return text.encode("latin-1")


class Router:
    """
    Отображение HttpRequest -> HttpResponse.

    Каталог для /files передаётся явно, глобального состояния нет —
    в тестах у каждого роутера свой tmp_path.
    """

    def __init__(
        self,
        files: FileStore,
        compress: Callable[[bytes], bytes] = gzip_compress,
    ):
        self.files = files
        self.compress = compress

    async def handle(self, request: HttpRequest) -> HttpResponse:
        method, path = request.method, request.path

        if method not in APP_METHODS:
            return method_not_allowed()

        if method == "GET":
            if path == "/":
                return HttpResponse(200)
            if path.startswith(ECHO_PREFIX):
                return await self.echo(request, path[len(ECHO_PREFIX):])
            if path == USER_AGENT_PATH:
                return self.user_agent(request)
            if path.startswith(FILES_PREFIX):
                return await self.read_file(path[len(FILES_PREFIX):])

        if method == "POST" and path.startswith(FILES_PREFIX):
            return await self.write_file(path[len(FILES_PREFIX):], request.body)

        return not_found()

    async def echo(self, request: HttpRequest, text: str) -> HttpResponse:
        """
        Тело ответа — остаток пути.

        Сжимаем только при Accept-Encoding ровно "gzip":
        "gzip, deflate", " gzip" и "GZIP" не считаются.
        """
        body = _to_bytes(text)
        if request.accept_encoding == GZIP:
            compressed = await asyncio.to_thread(self.compress, body)
            return HttpResponse(200, body=compressed, headers={"Content-Encoding": GZIP})
        return HttpResponse(200, body=body)

    def user_agent(self, request: HttpRequest) -> HttpResponse:
        return HttpResponse(200, body=_to_bytes(request.user_agent or ""))

    async def read_file(self, name: str) -> HttpResponse:
        if not is_safe_name(name):
            logger.debug(f"Rejected file name {name!r}")
            return not_found()
        try:
            data = await asyncio.to_thread(self.files.read, name)
        except FileNotFoundError:
            logger.debug(f"File not found: {self.files.path_for(name)}")
            return not_found()
        return HttpResponse(200, body=data, headers={"Content-Type": OCTET_STREAM})

    async def write_file(self, name: str, data: bytes) -> HttpResponse:
        """
        Создаёт или перезаписывает файл.

        Ошибка записи не превращается в ответ — она уходит наверх
        и обрывает только это соединение.
        """
        if not is_safe_name(name):
            logger.debug(f"Rejected file name {name!r}")
            return not_found()
        await asyncio.to_thread(self.files.write, name, data)
        logger.debug(f"Wrote {len(data)} bytes to {self.files.path_for(name)}")
        return HttpResponse(201)
