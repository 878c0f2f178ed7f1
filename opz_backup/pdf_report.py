# opz_backup/pdf_report.py
from __future__ import annotations

from pathlib import Path
import datetime

from reportlab.lib.pagesizes import A4
from reportlab.pdfgen import canvas

from .core.logger import human_bytes
from .core.models import RunSummary


def _format_duration(seconds: float) -> str:
    return str(datetime.timedelta(seconds=int(seconds)))


def _format_time(value: str) -> str:
    if not value:
        return "-"
    try:
        return datetime.datetime.fromisoformat(value).strftime("%Y-%m-%d %H:%M:%S")
    except ValueError:
        return value


def generate_pdf_report(summary: RunSummary, destino: str | Path) -> Path:
    """Gera um relatório PDF com as estatísticas do backup.

    O ficheiro é guardado com o nome ``backup_report_<data>_<hora>.pdf``.

    Parameters
    ----------
    summary: RunSummary
        Totais da execução (inclui a lista de falhas).
    destino: str | Path
        Pasta onde o relatório será guardado.

    Returns
    -------
    Path
        Caminho para o ficheiro PDF criado.
    """
    destino = Path(destino)
    destino.mkdir(parents=True, exist_ok=True)

    timestamp = datetime.datetime.now().strftime("%Y%m%d_%H%M%S")
    pdf_path = destino / f"backup_report_{timestamp}.pdf"

    c = canvas.Canvas(str(pdf_path), pagesize=A4)
    width, height = A4
    y = height - 50

    def _line(text: str, x: int = 50) -> None:
        nonlocal y
        c.drawString(x, y, text)
        y -= 20
        if y < 50:
            c.showPage()
            y = height - 50
            c.setFont("Helvetica", 12)

    c.setFont("Helvetica-Bold", 16)
    c.drawString(50, y, "Relatório de Backup")
    y -= 40

    c.setFont("Helvetica", 12)
    estado = "Cancelado" if summary.cancelled else ("Sucesso" if summary.ok else "Com erros")
    linhas = [
        f"Origem              : {summary.source}",
        f"Destino             : {summary.dest}",
        f"Início              : {_format_time(summary.start_time)}",
        f"Fim                 : {_format_time(summary.end_time)}",
        f"Duração             : {_format_duration(summary.duration_sec)}",
        f"Ficheiros copiados  : {summary.succeeded}",
        f"Ignorados           : {summary.skipped}",
        f"Com erro            : {summary.failed}",
        f"Dados copiados      : {human_bytes(summary.bytes_copied)}",
        f"Dados na origem     : {human_bytes(summary.bytes_total)}",
        f"Estado              : {estado}",
    ]
    for linha in linhas:
        _line(linha)

    if summary.failures:
        y -= 10
        c.setFont("Helvetica-Bold", 12)
        _line("Ficheiros com erro:")
        c.setFont("Helvetica", 10)
        for r in summary.failures:
            _line(f"{r.task.entry.rel_path.as_posix()}: {r.detail}", x=60)

    c.save()
    return pdf_path
