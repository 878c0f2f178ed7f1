"""
Detecção do dispositivo
=======================

O OP-Z aparece como um disco USB quando é ligado em modo *disk*
(desligar, carregar em I, ligar).  Procuramos o ponto de montagem na
saída de ``df`` e devolvemos um caminho simples; o motor de cópia nunca
consulta o sistema por conta própria.
"""

from __future__ import annotations

import platform
import subprocess
from datetime import datetime
from pathlib import Path
from typing import Optional

from .core.errors import DeviceNotFoundError

DEFAULT_LABEL = "OP-Z"
DEFAULT_BACKUP_ROOT = Path.home() / "opz-backups"


def _mount_column(system: Optional[str] = None) -> int:
    # macOS acrescenta iused/ifree/%iused antes de "Mounted on"
    return 8 if (system or platform.system()) == "Darwin" else 5


def _run_df() -> str:
    try:
        return subprocess.check_output(["df", "-h"], text=True, shell=False)
    except (OSError, subprocess.CalledProcessError) as exc:
        raise DeviceNotFoundError("df", f"não foi possível listar volumes: {exc}") from exc


def find_mount(df_output: str, label: str = DEFAULT_LABEL, system: Optional[str] = None) -> Optional[Path]:
    """Primeiro ponto de montagem que contém *label*, ou None."""
    col = _mount_column(system)
    for line in df_output.splitlines()[1:]:
        cols = line.split()
        if len(cols) <= col:
            continue
        mount = " ".join(cols[col:])  # caminhos com espaços
        if label in mount:
            return Path(mount)
    return None


def detect_device(label: str = DEFAULT_LABEL) -> Path:
    mount = find_mount(_run_df(), label)
    if mount is None:
        raise DeviceNotFoundError(
            label, "dispositivo não encontrado (desligar, carregar em I, ligar, ligar USB)"
        )
    return mount


def backup_dir(root: str | Path | None = None, now: Optional[datetime] = None) -> Path:
    """Destino por omissão: <root>/<AAAA-MM-DD_HH-MM-SS>."""
    root = Path(root).expanduser() if root else DEFAULT_BACKUP_ROOT
    stamp = (now or datetime.now()).strftime("%Y-%m-%d_%H-%M-%S")
    return root / stamp
