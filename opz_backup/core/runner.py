"""
runner.py  –  Função de alto-nível cli_run()
===========================================

• Coordena synchronize() → BackupLog → relatório PDF
• Pode ser usado pela CLI ou por outra interface (através de callbacks).
• Devolve tuplo (summary: RunSummary, log_path: pathlib.Path | None)
"""

from __future__ import annotations

import time
from datetime import datetime
from pathlib import Path
from typing import Any, Callable

from .copier import DEFAULT_WORKERS, synchronize
from .errors import FatalSetupError
from .logger import BackupLog, human_bytes
from .models import CopyResult, RunSummary, VerifyMode


# --------------------------------------------------------------------------- #
#                               TIPO DE CALLBACKS                             #
# --------------------------------------------------------------------------- #
ProgressCb = Callable[[int, int], Any]        # ficheiros processados, bytes copiados
LogCb      = Callable[[str], Any]             # linha texto
ResultCb   = Callable[[CopyResult], Any]      # resultado de cada ficheiro


# --------------------------------------------------------------------------- #
#                                 FUNÇÃO PÚBLICA                              #
# --------------------------------------------------------------------------- #
def cli_run(
    src: str | Path,
    dst: str | Path,
    workers: int = DEFAULT_WORKERS,
    verify: VerifyMode | str = VerifyMode.SIZE,
    preserve_times: bool = True,
    write_log: bool = True,
    pdf_report: bool = False,
    callbacks: dict[str, Callable] | None = None,
    stop_flag: Callable[[], bool] | None = None,
) -> tuple[RunSummary, Path | None]:
    """
    Parameters
    ----------
    src, dst        : origem (ponto de montagem) e destino
    workers         : threads de cópia
    verify          : "size" ou "hash"
    preserve_times  : mantém datas de modificação
    write_log       : grava backup_log_<data>.json no destino
    pdf_report      : gera também backup_report_<data>.pdf no destino
    callbacks       : {"progress": ProgressCb, "log": LogCb, "result": ResultCb}
    stop_flag       : pedido de cancelamento (entre ficheiros)

    Raises
    ------
    FatalSetupError  se a origem não puder ser lida ou o destino criado.
    """
    src = Path(src)
    dst = Path(dst)
    cb_progress: ProgressCb | None = None
    cb_log:      LogCb | None      = None
    cb_result:   ResultCb | None   = None
    if callbacks:
        cb_progress = callbacks.get("progress")
        cb_log      = callbacks.get("log")
        cb_result   = callbacks.get("result")

    processed = 0
    bytes_done = 0

    def _on_result(result: CopyResult) -> None:
        nonlocal processed, bytes_done
        processed += 1
        bytes_done += result.bytes_copied
        if cb_result:
            cb_result(result)
        if cb_progress:
            cb_progress(processed, bytes_done)

    t0 = time.time()
    started = datetime.now().isoformat(timespec="seconds")
    try:
        results = synchronize(
            src, dst,
            workers=workers,
            verify=verify,
            preserve_times=preserve_times,
            stop_flag=stop_flag,
            result_cb=_on_result,
            log_cb=cb_log,
        )
    except FatalSetupError as exc:
        if cb_log:
            cb_log(f"[red]ERRO FATAL: {exc}[/red]")
        raise

    # ---------------------------------------------------- finalizar
    summary = RunSummary.from_results(src, dst, results)
    summary.duration_sec = time.time() - t0
    summary.cancelled = results.cancelled
    summary.start_time = started
    summary.end_time = datetime.now().isoformat(timespec="seconds")

    log_path = None
    if write_log:
        log = BackupLog(src, dst)
        for r in results:
            log.add_result(r)
        log_path = log.close(summary)

    if pdf_report:
        from ..pdf_report import generate_pdf_report  # import tardio: reportlab é pesado
        pdf_path = generate_pdf_report(summary, dst)
        if cb_log:
            cb_log(f"📄 Relatório: {pdf_path}")

    if cb_log:
        totals = (f"{summary.succeeded} copiado(s), {summary.skipped} ignorado(s), "
                  f"{summary.failed} erro(s), {human_bytes(summary.bytes_copied)}")
        if summary.cancelled:
            cb_log(f"[yellow]Cancelado: {totals}[/yellow]")
        elif summary.ok:
            cb_log(f"[green]Backup concluído: {totals}[/green]")
        else:
            cb_log(f"[yellow]Concluído com erros: {totals}[/yellow]")

    return summary, log_path
