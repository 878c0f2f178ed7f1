"""
CLI
===

    opz-backup [DESTINO] [--source PASTA] [...]

Sem ``--source`` procura o dispositivo montado; sem DESTINO usa
``~/opz-backups/<data>``.  Código de saída: 0 tudo copiado (ou ignorado),
1 houve erros ou cancelamento, 2 não foi possível começar.
"""

from __future__ import annotations

import argparse
import re
import signal
import sys
import threading
from pathlib import Path
from typing import Optional, Sequence

from . import settings
from .core.errors import DeviceNotFoundError, FatalSetupError
from .core.runner import cli_run
from .device import backup_dir, detect_device

EXIT_OK = 0
EXIT_FAILURES = 1
EXIT_SETUP = 2

_MARKUP_RE = re.compile(r"\[/?(?:green|yellow|red)\]")


def build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(
        prog="opz-backup",
        description="Copia todo o conteúdo do dispositivo para uma pasta local.",
    )
    p.add_argument("destination", nargs="?", type=Path,
                   help="pasta de destino (por omissão ~/opz-backups/<data>)")
    p.add_argument("--source", type=Path,
                   help="pasta de origem; evita a detecção automática do dispositivo")
    p.add_argument("--label", default=settings.get("device_label"),
                   help="texto procurado no ponto de montagem (por omissão: %(default)s)")
    p.add_argument("--workers", type=int, default=settings.get("workers"),
                   help="cópias em paralelo (por omissão: %(default)s)")
    p.add_argument("--verify", choices=("size", "hash"), default=settings.get("verify"),
                   help="verificação após cada cópia (por omissão: %(default)s)")
    p.add_argument("--no-times", action="store_true",
                   help="não preservar datas de modificação")
    p.add_argument("--no-log", action="store_true",
                   help="não gravar backup_log_*.json no destino")
    p.add_argument("--pdf", action="store_true", default=settings.get("pdf_report"),
                   help="gerar relatório PDF no destino")
    p.add_argument("-q", "--quiet", action="store_true",
                   help="mostra só erros e o resumo")
    return p


def _printer(quiet: bool):
    def _print(msg: str) -> None:
        msg = _MARKUP_RE.sub("", msg)
        if msg.startswith("❌") or msg.startswith("ERRO"):
            print(msg, file=sys.stderr, flush=True)
        elif not (quiet and msg.startswith(("✔", "⏭"))):
            print(msg, flush=True)
    return _print


def main(argv: Optional[Sequence[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    if args.workers < 1:
        print("--workers tem de ser >= 1", file=sys.stderr)
        return EXIT_SETUP

    try:
        src = args.source or detect_device(args.label)
    except DeviceNotFoundError as exc:
        print(f"✗ {exc.reason}", file=sys.stderr)
        return EXIT_SETUP

    dst = args.destination or backup_dir(settings.get("backup_root"))
    print(f"→ {src} → {dst}")

    stop = threading.Event()

    def _on_sigint(_signum, _frame):
        if not stop.is_set():
            print("\n⏹️  A parar após as cópias em curso…", file=sys.stderr)
        stop.set()

    previous = signal.signal(signal.SIGINT, _on_sigint)
    try:
        summary, log_path = cli_run(
            src, dst,
            workers=args.workers,
            verify=args.verify,
            preserve_times=not args.no_times,
            write_log=settings.get("write_log") and not args.no_log,
            pdf_report=args.pdf,
            callbacks={"log": _printer(args.quiet)},
            stop_flag=stop.is_set,
        )
    except FatalSetupError:
        # a mensagem já saiu pelo callback de log
        return EXIT_SETUP
    finally:
        signal.signal(signal.SIGINT, previous)

    if log_path:
        print(f"📝 Log: {log_path}")
    return EXIT_OK if summary.ok else EXIT_FAILURES


if __name__ == "__main__":
    sys.exit(main())
