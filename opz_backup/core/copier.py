"""
Copier
======

Motor de cópia em árvore: espelha a origem dentro do destino, verifica
cada ficheiro copiado e devolve um ``CopyResult`` por ficheiro.

As pastas são criadas pela thread coordenadora à medida que o Scanner as
devolve (sempre antes do seu conteúdo); só depois disso as cópias dos
ficheiros que lá vivem são entregues ao *pool*.  Um erro num ficheiro
nunca interrompe o resto da árvore.
"""

from __future__ import annotations

import os
import shutil
from concurrent.futures import FIRST_COMPLETED, Future, ThreadPoolExecutor, wait
from pathlib import Path
from typing import BinaryIO, Callable, Optional

from .errors import (
    BackupError,
    FatalSetupError,
    FileReadError,
    FileWriteError,
    UnsupportedEntry,
    VerificationMismatch,
)
from .hasher import BUF_SIZE, same_content
from .models import CopyResult, CopyStatus, CopyTask, EntryKind, SourceEntry, SyncResults, VerifyMode
from .scanner import scan

ResultCb = Callable[[CopyResult], None]
LogCb = Callable[[str], None]

DEFAULT_WORKERS = 4


def _emit(cb: Optional[LogCb], msg: str) -> None:
    try:
        if cb:
            cb(msg)
    except Exception:
        pass


def _notify(cb: Optional[ResultCb], result: CopyResult) -> None:
    try:
        if cb:
            cb(result)
    except Exception:
        pass


def _reason(exc: OSError) -> str:
    return exc.strerror or str(exc)


def _open_source(path: Path) -> BinaryIO:
    return open(path, "rb")


def describe(result: CopyResult) -> str:
    """Linha de texto para um resultado (usada no log e na CLI)."""
    rel = result.task.entry.rel_path
    if result.status is CopyStatus.SUCCEEDED:
        return f"✔ Copiado: {rel}"
    if result.status is CopyStatus.SKIPPED:
        return f"⏭️  Ignorado: {rel} ({result.detail})"
    return f"❌ Erro: {rel} ({result.detail})"


# ------------------------------------------------------------------ 1 ficheiro
PARTIAL_SUFFIX = ".opz-part"


def _partial_path(dst: Path) -> Path:
    return dst.with_name(f".{dst.name}{PARTIAL_SUFFIX}")


def _discard(path: Path) -> None:
    try:
        path.unlink()
    except OSError:
        pass  # limpeza; o erro original é o que se reporta


def _stream_copy(src: Path, dst: Path) -> int:
    """
    Cópia byte-a-byte em blocos para um ficheiro temporário ao lado do
    destino, que só substitui o destino quando a cópia termina.  Um erro a
    meio deixa intacta a cópia anterior.
    """
    try:
        fsrc = _open_source(src)
    except OSError as exc:
        raise FileReadError(src, _reason(exc)) from exc

    tmp = _partial_path(dst)
    written = 0
    with fsrc:
        try:
            with open(tmp, "wb") as fdst:
                while True:
                    try:
                        chunk = fsrc.read(BUF_SIZE)
                    except OSError as exc:
                        raise FileReadError(src, _reason(exc)) from exc
                    if not chunk:
                        break
                    fdst.write(chunk)
                    written += len(chunk)
                fdst.flush()
                os.fsync(fdst.fileno())
            os.replace(tmp, dst)
        except FileReadError:
            _discard(tmp)
            raise
        except OSError as exc:
            _discard(tmp)
            raise FileWriteError(dst, _reason(exc)) from exc
    return written


def _verify(task: CopyTask, mode: VerifyMode) -> None:
    try:
        actual = task.dst.stat().st_size
    except OSError as exc:
        raise FileWriteError(task.dst, _reason(exc)) from exc

    if actual != task.expected_size:
        raise VerificationMismatch(
            task.dst, f"tamanho {actual} != {task.expected_size} bytes esperados"
        )

    if mode is VerifyMode.HASH:
        try:
            equal = same_content(task.src, task.dst)
        except OSError as exc:
            raise FileReadError(task.src, _reason(exc)) from exc
        if not equal:
            raise VerificationMismatch(task.dst, "hash diferente da origem")


def copy_file(
    task: CopyTask,
    verify: VerifyMode = VerifyMode.SIZE,
    preserve_times: bool = True,
) -> CopyResult:
    """
    Copia e verifica um único ficheiro.

    Returns
    -------
    CopyResult  SUCCEEDED só se a verificação passar; FAILED com o erro
                (FileReadError / FileWriteError / VerificationMismatch)
                caso contrário.
    """
    try:
        written = _stream_copy(task.src, task.dst)
        if preserve_times:
            try:
                shutil.copystat(task.src, task.dst)
            except OSError as exc:
                raise FileWriteError(task.dst, _reason(exc)) from exc
        _verify(task, verify)
    except BackupError as exc:
        return CopyResult(task, CopyStatus.FAILED, exc)
    return CopyResult(task, CopyStatus.SUCCEEDED, None, written)


# ------------------------------------------------------------------ árvore
def _task_for(entry: SourceEntry, base_src: Path, base_dst: Path) -> CopyTask:
    return CopyTask(
        src=base_src.joinpath(*entry.parts),
        dst=base_dst.joinpath(*entry.parts),
        expected_size=entry.size,
        entry=entry,
    )


def synchronize(
    source_root: str | os.PathLike,
    destination_root: str | os.PathLike,
    *,
    workers: int = DEFAULT_WORKERS,
    verify: VerifyMode | str = VerifyMode.SIZE,
    preserve_times: bool = True,
    stop_flag: Optional[Callable[[], bool]] = None,
    result_cb: Optional[ResultCb] = None,
    log_cb: Optional[LogCb] = None,
) -> SyncResults:
    """
    Espelha *source_root* dentro de *destination_root*.

    Parameters
    ----------
    workers         : nº de threads de cópia (>= 1)
    verify          : VerifyMode.SIZE (por omissão) ou VerifyMode.HASH
    preserve_times  : copia datas/permissões (``shutil.copystat``)
    stop_flag       : consultado entre ficheiros; se devolver True não se
                      iniciam mais cópias e devolve-se o resultado parcial
    result_cb       : recebe cada ``CopyResult`` assim que fica pronto
    log_cb          : recebe linhas de texto

    Returns
    -------
    SyncResults       lista de CopyResult pela ordem de enumeração da origem;
                      ``cancelled`` é True se o stop_flag interrompeu a árvore

    Raises
    ------
    FatalSetupError   origem ilegível ou destino impossível de criar;
                      nada foi copiado.
    """
    if workers < 1:
        raise ValueError("workers tem de ser >= 1")
    verify = VerifyMode(verify)
    base_src = Path(source_root)
    base_dst = Path(destination_root)

    results: list[Optional[CopyResult]] = []
    pending: dict[Future, int] = {}
    window = workers * 2

    def _record(idx: int, result: CopyResult) -> None:
        results[idx] = result
        _notify(result_cb, result)
        _emit(log_cb, describe(result))

    def _add(result: CopyResult) -> None:
        results.append(None)
        _record(len(results) - 1, result)

    def _collect(futures) -> None:
        for fut in futures:
            _record(pending.pop(fut), fut.result())

    def _unreadable(entry: SourceEntry, exc: OSError) -> None:
        task = _task_for(entry, base_src, base_dst)
        _add(CopyResult(task, CopyStatus.FAILED, FileReadError(task.src, _reason(exc))))

    entries = scan(base_src, on_error=_unreadable)
    try:
        base_dst.mkdir(parents=True, exist_ok=True)
    except OSError as exc:
        raise FatalSetupError(base_dst, f"impossível criar destino ({_reason(exc)})") from exc

    if stop_flag is None:
        stop_flag = lambda: False  # noqa: E731

    cancelled = False
    with ThreadPoolExecutor(max_workers=workers, thread_name_prefix="opz-copy") as pool:
        for entry in entries:
            if stop_flag():
                _emit(log_cb, "⏹️  Operação cancelada.")
                cancelled = True
                break

            if entry.kind is EntryKind.DIRECTORY:
                dst_dir = base_dst.joinpath(*entry.parts)
                try:
                    dst_dir.mkdir(parents=True, exist_ok=True)
                except OSError as exc:
                    # os ficheiros lá dentro vão falhar um a um
                    _emit(log_cb, f"⚠️  Não foi possível criar {dst_dir}: {_reason(exc)}")
                continue

            task = _task_for(entry, base_src, base_dst)

            if entry.kind is EntryKind.UNSUPPORTED:
                _add(CopyResult(
                    task, CopyStatus.SKIPPED, UnsupportedEntry(task.src, "tipo não suportado")
                ))
                continue

            # janela limitada: não enfileira mais do que 2x o nº de workers
            if len(pending) >= window:
                done, _ = wait(pending, return_when=FIRST_COMPLETED)
                _collect(done)

            results.append(None)
            fut = pool.submit(copy_file, task, verify, preserve_times)
            pending[fut] = len(results) - 1

        # as cópias em curso terminam sempre, mesmo após cancelamento
        while pending:
            done, _ = wait(pending, return_when=FIRST_COMPLETED)
            _collect(done)

    out = SyncResults(r for r in results if r is not None)
    out.cancelled = cancelled
    return out
