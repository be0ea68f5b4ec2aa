"""
Сжатие тела ответа.

Только gzip и только для /echo — никакого content negotiation.
"""
import gzip

GZIP = "gzip"


def gzip_compress(data: bytes) -> bytes:
    """
    gzip с нулевым mtime в заголовке.

    Один и тот же вход всегда даёт одни и те же байты —
    иначе ответ нельзя сравнить в тестах.
    """
    return gzip.compress(data, mtime=0)
