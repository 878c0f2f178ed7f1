"""
BackupLog
=========

• Cria um ficheiro JSON (nome inclui timestamp UTC) dentro da pasta de
  destino do backup.
• Guarda estatísticas globais + listas de ficheiros copiados, ignorados
  e com erro.
• `close()` actualiza os campos finais, grava no disco e devolve o caminho.
"""

from __future__ import annotations
from datetime import datetime, timedelta, timezone
from pathlib import Path
import json

from .models import CopyResult, CopyStatus, RunSummary


def human_bytes(n: float) -> str:
    for unit in ("B", "KB", "MB", "GB"):
        if abs(n) < 1024:
            return f"{n:.0f} {unit}" if unit == "B" else f"{n:.1f} {unit}"
        n /= 1024
    return f"{n:.1f} TB"


class BackupLog:
    # -------------------------------------------------------------- construtor
    def __init__(self, src: Path, dest: Path) -> None:
        dest = Path(dest)
        dest.mkdir(parents=True, exist_ok=True)

        now = datetime.now(timezone.utc)
        self.path = dest / f"backup_log_{now.strftime('%Y-%m-%dT%H-%M-%S')}.json"

        self.data: dict = {
            "timestamp": now.isoformat(timespec="seconds"),
            "source": str(src),
            "dest": str(dest),
            "succeeded": 0,
            "skipped": 0,
            "failed": 0,
            "cancelled": False,
            "bytes_copied": 0,
            "bytes_total": 0,
            "duration_sec": 0.0,
            "duration": "0:00:00",
            # listas p/ registar cada ficheiro
            "copied": [],          # [{"path": "a/b.txt", "size": 1234}]
            "skipped_entries": [], # [{"path": "...", "reason": "..."}]
            "errors": [],          # [{"path": "...", "kind": "...", "error": "..."}]
        }

    # -------------------------------------------------------------- API p/ runner
    def add_result(self, result: CopyResult) -> None:
        rel = result.task.entry.rel_path.as_posix()
        if result.status is CopyStatus.SUCCEEDED:
            self.data["copied"].append({"path": rel, "size": result.bytes_copied})
        elif result.status is CopyStatus.SKIPPED:
            self.data["skipped_entries"].append({"path": rel, "reason": result.detail})
        else:
            self.data["errors"].append({
                "path": rel,
                "kind": type(result.error).__name__ if result.error else "",
                "error": result.detail,
            })

    # -------------------------------------------------------------- fechar / gravar
    def close(self, summary: RunSummary) -> Path:
        self.data.update(
            succeeded=summary.succeeded,
            skipped=summary.skipped,
            failed=summary.failed,
            cancelled=summary.cancelled,
            bytes_copied=summary.bytes_copied,
            bytes_total=summary.bytes_total,
            duration_sec=round(summary.duration_sec, 2),
            duration=str(timedelta(seconds=int(summary.duration_sec))),
            copied_human=human_bytes(summary.bytes_copied),
            total_human=human_bytes(summary.bytes_total),
        )

        with self.path.open("w", encoding="utf-8") as fh:
            json.dump(self.data, fh, indent=2, ensure_ascii=False)

        return self.path
