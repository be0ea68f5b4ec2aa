#!/usr/bin/env python3
"""
Точка входа.

    python -m httpd.main
    python -m httpd.main --directory /tmp/files
    python -m httpd.main --config config.yaml --directory /srv/files

Аргументы командной строки, указанные явно, перекрывают YAML-конфиг.
"""
import argparse
import asyncio
import logging
import signal
from pathlib import Path
from typing import List, Optional

from httpd.config import ServerConfig
from httpd.logger import LOGGER_NAME, setup_logger
from httpd.server import HttpServer


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    # default=None у всех флагов — так видно, что пользователь указал сам
    parser = argparse.ArgumentParser(description="Minimal HTTP/1.1 server")
    parser.add_argument("-c", "--config", help="Path to YAML config file")
    parser.add_argument("-H", "--host", help="Listen host (default: localhost)")
    parser.add_argument("-p", "--port", type=int, help="Listen port (default: 4221)")
    parser.add_argument("-d", "--directory", help="Directory for /files (default: ./tmp)")
    parser.add_argument(
        "--log-level",
        choices=["debug", "info", "warning", "error"],
        help="Logging level (default: info)",
    )
    return parser.parse_args(argv)


def load_config(args: argparse.Namespace) -> ServerConfig:
    """YAML-файл, если он есть, поверх него — явные флаги."""
    if args.config and Path(args.config).exists():
        config = ServerConfig.from_yaml(args.config)
    else:
        config = ServerConfig.default()

    if args.host is not None:
        config.listen_host = args.host
    if args.port is not None:
        config.listen_port = args.port
    if args.directory is not None:
        config.directory = args.directory
    if args.log_level is not None:
        config.log_level = args.log_level
    return config


async def serve(config: ServerConfig) -> None:
    """
    Запускает сервер и ждёт SIGINT/SIGTERM.

    По сигналу закрываем слушающий сокет; соединения,
    которые уже в работе, отменяются вместе с event loop'ом.
    """
    logger = logging.getLogger(LOGGER_NAME)
    server = HttpServer(config)
    stopping = asyncio.Event()

    loop = asyncio.get_running_loop()
    for sig in (signal.SIGTERM, signal.SIGINT):
        loop.add_signal_handler(sig, stopping.set)

    serving = asyncio.create_task(server.start())
    await stopping.wait()

    logger.info("Shutting down...")
    serving.cancel()
    await asyncio.gather(serving, return_exceptions=True)
    await server.stop()


def run(argv: Optional[List[str]] = None) -> None:
    config = load_config(parse_args(argv))
    logger = setup_logger(config.log_level)
    logger.debug(f"Config loaded: {config}")

    try:
        asyncio.run(serve(config))
    except KeyboardInterrupt:
        pass


if __name__ == "__main__":
    run()
