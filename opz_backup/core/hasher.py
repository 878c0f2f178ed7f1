from __future__ import annotations
from pathlib import Path
import hashlib

# ---- Configuração --------------------------------------------
BUF_SIZE = 4 * 1024 * 1024   # 4 MiB por leitura
DEFAULT_ALGO = "sha256"
# --------------------------------------------------------------


def file_hash(path: str | Path, algo: str = DEFAULT_ALGO) -> str:
    """
    Calcula o *digest* hexadecimal de `path` com o algoritmo indicado.
    Lê em blocos para não carregar ficheiros grandes em memória.
    """
    h = hashlib.new(algo)
    with Path(path).open("rb") as f:
        while True:
            chunk = f.read(BUF_SIZE)
            if not chunk:
                break
            h.update(chunk)
    return h.hexdigest()


def same_content(a: str | Path, b: str | Path, algo: str = DEFAULT_ALGO) -> bool:
    return file_hash(a, algo) == file_hash(b, algo)


__all__ = ["file_hash", "same_content", "BUF_SIZE"]
