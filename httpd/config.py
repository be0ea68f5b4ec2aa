"""
Конфигурация сервера.

Все настройки описаны как dataclasses — это проще Pydantic
и не тянет лишние зависимости.
"""
from dataclasses import dataclass, field
from typing import Optional
import yaml

DEFAULT_HOST = "localhost"
DEFAULT_PORT = 4221
DEFAULT_DIRECTORY = "./tmp"


@dataclass
class TimeoutConfig:
    """
    Таймауты на чтение запроса и запись ответа.

    Храним в миллисекундах (так удобнее в конфиге),
    но properties возвращают секунды для asyncio.wait_for().
    None — ждать сколько угодно: клиент, не дославший запрос,
    держит соединение бесконечно.
    """
    read_ms: Optional[int] = None
    write_ms: Optional[int] = None

    @property
    def read(self) -> Optional[float]:
        return None if self.read_ms is None else self.read_ms / 1000

    @property
    def write(self) -> Optional[float]:
        return None if self.write_ms is None else self.write_ms / 1000


@dataclass
class ServerConfig:
    """
    Корневой конфиг приложения.

    Можно создать через from_yaml() или default() для разработки.
    """
    listen_host: str = DEFAULT_HOST
    listen_port: int = DEFAULT_PORT
    directory: str = DEFAULT_DIRECTORY
    timeouts: TimeoutConfig = field(default_factory=TimeoutConfig)
    log_level: str = "info"

    @property
    def address(self) -> str:
        return f"{self.listen_host}:{self.listen_port}"

    @classmethod
    def from_yaml(cls, path: str) -> "ServerConfig":
        """
        Парсит YAML-конфиг.

        Формат см. в config.example.yaml
        """
        with open(path, "r") as f:
            data = yaml.safe_load(f) or {}

        # listen может быть "127.0.0.1:4221" или просто "0.0.0.0"
        listen = str(data.get("listen", f"{DEFAULT_HOST}:{DEFAULT_PORT}"))
        if ":" in listen:
            host, port = listen.rsplit(":", 1)  # rsplit на случай IPv6
            listen_host = host
            listen_port = int(port)
        else:
            listen_host = listen
            listen_port = DEFAULT_PORT

        timeouts_data = data.get("timeouts") or {}
        timeouts = TimeoutConfig(
            read_ms=timeouts_data.get("read_ms"),
            write_ms=timeouts_data.get("write_ms"),
        )

        return cls(
            listen_host=listen_host,
            listen_port=listen_port,
            directory=str(data.get("directory", DEFAULT_DIRECTORY)),
            timeouts=timeouts,
            log_level=(data.get("logging") or {}).get("level", "info"),
        )

    @classmethod
    def default(cls) -> "ServerConfig":
        """Дефолтный конфиг для локальной разработки."""
        return cls()
