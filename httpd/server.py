"""
TCP-сервер для приёма клиентских соединений.

Использует asyncio.start_server() — низкоуровневый, но простой API.
Каждое соединение обрабатывается в отдельной корутине, лимита на их
число нет.
"""
import asyncio
import logging
from typing import Optional, Set

from httpd.client_handler import handle_client
from httpd.config import ServerConfig
from httpd.handler import Router
from httpd.logger import LOGGER_NAME, new_trace_id
from httpd.storage import FileStore

logger = logging.getLogger(LOGGER_NAME)


class HttpServer:
    """
    Слушает адрес из конфига и отдаёт каждое соединение в handle_client().

    Роутер один на весь сервер. Общего изменяемого состояния
    у соединений нет, кроме файлов на диске.
    """

    def __init__(self, config: ServerConfig):
        self.config = config
        self.files = FileStore(config.directory)
        self.router = Router(self.files)
        self._server: Optional[asyncio.Server] = None
        self._connections: Set["asyncio.Task[None]"] = set()

    async def listen(self) -> None:
        """
        Открывает сокет и сразу возвращает управление.

        С listen_port=0 порт выбирает ОС — см. self.port.
        """
        self._server = await asyncio.start_server(
            self._on_connection,
            self.config.listen_host,
            self.config.listen_port,
        )
        logger.info(f"Server started on {self.config.listen_host}:{self.port}")
        logger.info(f"Serving files from {self.files.directory.resolve()}")

    async def start(self) -> None:
        """listen() + serve_forever(): блокирует до stop() или отмены."""
        await self.listen()
        async with self._server:
            await self._server.serve_forever()

    async def stop(self) -> None:
        """
        Перестаёт принимать соединения и обрывает висящие.

        Без отмены wait_closed() ждал бы клиентов, которые
        так и не дослали запрос.
        """
        if self._server is None:
            return
        logger.info("Stopping server...")
        self._server.close()
        for task in list(self._connections):
            task.cancel()
        await asyncio.gather(*self._connections, return_exceptions=True)
        await self._server.wait_closed()
        logger.info("Server stopped")

    @property
    def port(self) -> int:
        if self._server is None or not self._server.sockets:
            return self.config.listen_port
        return self._server.sockets[0].getsockname()[1]

    @property
    def active_connections(self) -> int:
        return len(self._connections)

    async def _on_connection(
        self,
        reader: asyncio.StreamReader,
        writer: asyncio.StreamWriter,
    ) -> None:
        # start_server запускает колбэк в своей задаче — свой контекст, свой trace_id
        new_trace_id()
        logger.debug(f"Connection from {writer.get_extra_info('peername')}")

        task = asyncio.current_task()
        self._connections.add(task)
        try:
            await handle_client(reader, writer, self.router, self.config.timeouts)
        finally:
            self._connections.discard(task)
