# settings.py
from __future__ import annotations
import json, os, sys
from pathlib import Path
from typing import Any, Dict, Optional

_ENV_VAR = "OPZ_BACKUP_SETTINGS"
_CFG = Path(os.environ.get(_ENV_VAR) or Path.home() / ".opz_backup.json")
_DATA: Dict[str, Any] = {}

DEFAULTS: Dict[str, Any] = {
    "device_label": "OP-Z",
    "backup_root": None,        # None -> ~/opz-backups
    "workers": 4,
    "verify": "size",           # "size" | "hash"
    "write_log": True,
    "pdf_report": False,
}

def load(path: Optional[str | Path] = None) -> None:
    global _DATA, _CFG
    if path is not None:
        _CFG = Path(path)
    _DATA = {}
    if _CFG.exists():
        try:
            data = json.loads(_CFG.read_text(encoding="utf-8"))
        except (OSError, ValueError) as exc:
            print(f"[settings] warning: {_CFG}: {exc}", file=sys.stderr)
            return
        if isinstance(data, dict):
            _DATA = data

def get(key: str, default: Any = None) -> Any:
    if key in _DATA:
        return _DATA[key]
    return DEFAULTS.get(key, default) if default is None else default

def set(key: str, value: Any) -> None:
    _DATA[key] = value

def save() -> None:
    try:
        _CFG.write_text(json.dumps(_DATA, indent=2, ensure_ascii=False), encoding="utf-8")
    except OSError as exc:   # nunca deixar falhar o fecho da app
        print(f"[settings] warning: {exc}", file=sys.stderr)

load()
