"""
Обработка одного клиентского соединения.

Весь жизненный цикл:
- парсим запрос из потока
- отдаём его роутеру
- сериализуем ответ и пишем в сокет
- закрываем соединение

Keep-alive нет: один запрос — одно соединение.
"""
import asyncio
import logging

from httpd.config import TimeoutConfig
from httpd.handler import Router
from httpd.logger import log_request
from httpd.timeouts import with_timeout
from httpd.utils.http import HttpError, parse_request
from httpd.utils.response import serialize_error, serialize_response
from httpd.utils.stream import CHUNK_SIZE, ByteStream

logger = logging.getLogger("httpd")

# сколько секунд дочитываем недосланный запрос после отказа
LINGER_TIMEOUT = 2.0


async def handle_client(
    client_reader: asyncio.StreamReader,
    client_writer: asyncio.StreamWriter,
    router: Router,
    timeouts: TimeoutConfig,
) -> None:
    """
    Обрабатывает один HTTP-запрос.

    Поток данных:
    client -> parse -> router -> serialize -> client -> close

    Ошибка любого этапа обрывает только это соединение.
    Ответ на неё отправляется лишь для ошибок протокола (400/405/505),
    остальные просто логируются.
    """
    client_addr = client_writer.get_extra_info("peername")
    stream = ByteStream(client_reader)

    try:
        try:
            request = await with_timeout(
                parse_request(stream),
                timeouts.read,
                "parsing request"
            )
        except HttpError as e:
            # метод/версия/формат — отвечаем сразу, остаток запроса не разбираем
            logger.info(f"[{client_addr}] Rejected: {e}")
            await send(client_writer, serialize_error(e), timeouts)
            await linger(client_reader, client_writer)
            return

        logger.debug(
            f"[{client_addr}] {request.method} {request.path} "
            f"({stream.bytes_received} bytes received)"
        )

        with log_request(logger, request.method, request.path) as log:
            response = await router.handle(request)
            log.status = response.status
            data = serialize_response(response, request.version)
            await send(client_writer, data, timeouts)
            log.bytes_sent = len(data)

    except TimeoutError as e:
        logger.warning(f"[{client_addr}] Timeout: {e}")
    except ConnectionError as e:
        logger.warning(f"[{client_addr}] Connection error: {e}")
    except Exception as e:
        logger.exception(f"[{client_addr}] Unexpected error: {e}")
    finally:
        # всегда закрываем соединение с клиентом
        await close(client_writer)


async def send(
    writer: asyncio.StreamWriter,
    data: bytes,
    timeouts: TimeoutConfig,
) -> None:
    """
    Пишет ответ целиком.

    drain() ждёт пока буфер уйдёт в сокет — после этого можно закрывать.
    """
    writer.write(data)
    await with_timeout(writer.drain(), timeouts.write, "writing response")


async def close(writer: asyncio.StreamWriter) -> None:
    try:
        writer.close()
        await writer.wait_closed()
    except ConnectionError:
        pass  # клиент мог уже отвалиться


async def linger(reader: asyncio.StreamReader, writer: asyncio.StreamWriter) -> None:
    """
    Закрывает запись и дочитывает то, что клиент ещё шлёт.

    После отказа тело запроса остаётся в сокете непрочитанным.
    Если закрыть соединение с данными в приёмном буфере, ядро
    отправит RST и клиент может потерять уже записанный ответ.
    Поэтому сначала FIN, потом читаем до EOF, но не дольше LINGER_TIMEOUT.
    """
    if writer.can_write_eof():
        writer.write_eof()
    try:
        discarded = await with_timeout(discard_input(reader), LINGER_TIMEOUT, "discarding request")
    except (TimeoutError, ConnectionError) as e:
        logger.debug(f"Stopped discarding input: {e}")
        return
    logger.debug(f"Discarded {discarded} unread bytes")


async def discard_input(reader: asyncio.StreamReader) -> int:
    discarded = 0
    while True:
        chunk = await reader.read(CHUNK_SIZE)
        if not chunk:
            return discarded
        discarded += len(chunk)
