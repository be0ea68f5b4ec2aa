"""
Файловое хранилище для /files.

Имена плоские: без подкаталогов и без выхода за пределы корня.
Проверка имени — забота хэндлера, здесь только чтение и запись.
"""
from pathlib import Path
from typing import Union


class FileStore:
    """
    Каталог с файлами.

    Блокировок нет: если два клиента пишут один файл,
    останется тот, кто записал последним.
    """

    def __init__(self, directory: Union[str, Path]):
        self.directory = Path(directory)

    def path_for(self, name: str) -> Path:
        return self.directory / name

    def read(self, name: str) -> bytes:
        """
        Содержимое файла.

        Каталог или что-то кроме обычного файла — тоже FileNotFoundError,
        снаружи это неотличимо от отсутствия.
        """
        path = self.path_for(name)
        if not path.is_file():
            raise FileNotFoundError(str(path))
        return path.read_bytes()

    def write(self, name: str, data: bytes) -> None:
        """Создаёт или перезаписывает файл. Каталог создаётся при первой записи."""
        self.directory.mkdir(parents=True, exist_ok=True)
        self.path_for(name).write_bytes(data)

    def __repr__(self) -> str:
        return f"FileStore({str(self.directory)!r})"
