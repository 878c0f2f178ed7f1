"""
Erros
=====

Taxonomia de erros do backup.  Só ``FatalSetupError`` (e, na CLI,
``DeviceNotFoundError``) interrompe a operação; os restantes ficam
registados no ``CopyResult`` do ficheiro respectivo.
"""

from __future__ import annotations
from pathlib import Path


class BackupError(Exception):
    """Erro base do projecto."""

    def __init__(self, path: str | Path, reason: str = "") -> None:
        self.path = Path(path)
        self.reason = reason
        super().__init__(f"{path}: {reason}" if reason else str(path))


class FatalSetupError(BackupError):
    """Origem ilegível ou destino impossível de criar."""


class DeviceNotFoundError(BackupError):
    pass


class FileReadError(BackupError):
    pass


class FileWriteError(BackupError):
    pass


class VerificationMismatch(BackupError):
    pass


class UnsupportedEntry(BackupError):
    """Nem ficheiro regular nem pasta (symlink, dispositivo, fifo…)."""
