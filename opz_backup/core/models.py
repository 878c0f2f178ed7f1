from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Optional

from .errors import BackupError


class EntryKind(Enum):
    DIRECTORY = "directory"
    FILE = "file"
    UNSUPPORTED = "unsupported"


class CopyStatus(Enum):
    SUCCEEDED = "succeeded"
    SKIPPED = "skipped"
    FAILED = "failed"


class VerifyMode(Enum):
    SIZE = "size"   # só compara tamanhos
    HASH = "hash"   # tamanho + sha256 de origem e destino


@dataclass(frozen=True)
class SourceEntry:
    parts: tuple[str, ...]
    kind: EntryKind
    size: int = 0
    mtime: float = 0.0

    @property
    def rel_path(self) -> Path:
        return Path(*self.parts)


@dataclass(frozen=True)
class CopyTask:
    src: Path
    dst: Path
    expected_size: int
    entry: SourceEntry


@dataclass(frozen=True)
class CopyResult:
    task: CopyTask
    status: CopyStatus
    error: Optional[BackupError] = None
    bytes_copied: int = 0

    @property
    def detail(self) -> str:
        return self.error.reason if self.error else ""


class SyncResults(list):
    """Lista de ``CopyResult``; ``cancelled`` indica que ficaram entradas por copiar."""

    cancelled = False


@dataclass
class RunSummary:
    """Totais de uma execução, calculados a partir dos ``CopyResult``."""

    source: Path
    dest: Path
    succeeded: int = 0
    skipped: int = 0
    failed: int = 0
    bytes_copied: int = 0
    bytes_total: int = 0
    duration_sec: float = 0.0
    cancelled: bool = False
    start_time: str = ""
    end_time: str = ""
    failures: list[CopyResult] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return self.failed == 0 and not self.cancelled

    @classmethod
    def from_results(cls, source: Path, dest: Path, results: list[CopyResult]) -> "RunSummary":
        summary = cls(Path(source), Path(dest))
        for r in results:
            if r.status is CopyStatus.SUCCEEDED:
                summary.succeeded += 1
                summary.bytes_copied += r.bytes_copied
            elif r.status is CopyStatus.SKIPPED:
                summary.skipped += 1
            else:
                summary.failed += 1
                summary.failures.append(r)
            summary.bytes_total += r.task.expected_size
        return summary
