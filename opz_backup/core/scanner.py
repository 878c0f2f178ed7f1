"""
Scanner
-------

Percorre recursivamente a árvore de *root* e gera um ``SourceEntry`` por
cada nó encontrado, em profundidade e com as pastas *antes* do seu
conteúdo.  Assim quem consome a sequência pode criar a pasta de destino
antes de lá escrever qualquer ficheiro.

Symlinks nunca são seguidos: aparecem como ``EntryKind.UNSUPPORTED``,
tal como dispositivos, fifos e sockets.
"""

from __future__ import annotations

import os
from pathlib import Path
from typing import Callable, Iterator, Optional

from .errors import FatalSetupError
from .models import EntryKind, SourceEntry

ErrorCb = Callable[[SourceEntry, OSError], None]


def scan(root: str | Path, on_error: Optional[ErrorCb] = None) -> Iterator[SourceEntry]:
    """
    Parameters
    ----------
    root      : pasta de origem (não é incluída no resultado)
    on_error  : chamado com (entrada, excepção) quando uma subpasta não pode
                ser listada, ou quando não é possível ler os
                atributos de uma entrada; sem callback a excepção propaga.

    Raises
    ------
    FatalSetupError
        Logo na chamada (não na primeira iteração) se *root* não existir,
        não for pasta ou não puder ser listada.
    """
    root = Path(root)
    if not root.is_dir():
        raise FatalSetupError(root, "pasta de origem não encontrada")
    try:
        with os.scandir(root):
            pass
    except OSError as exc:
        raise FatalSetupError(root, f"sem acesso à origem ({exc.strerror or exc})") from exc

    return _walk(root, (), on_error)


def classify(entry: os.DirEntry) -> EntryKind:
    if entry.is_symlink():
        return EntryKind.UNSUPPORTED
    if entry.is_dir(follow_symlinks=False):
        return EntryKind.DIRECTORY
    if entry.is_file(follow_symlinks=False):
        return EntryKind.FILE
    return EntryKind.UNSUPPORTED


# --------------------------------------------------------------------- helpers
def _walk(path: Path, parts: tuple[str, ...], on_error: Optional[ErrorCb]) -> Iterator[SourceEntry]:
    with os.scandir(path) as it:
        entries = sorted(it, key=lambda e: e.name)

    for entry in entries:
        sub_parts = parts + (entry.name,)
        try:
            kind = classify(entry)
            st = None if kind is EntryKind.UNSUPPORTED else entry.stat(follow_symlinks=False)
        except OSError as exc:
            # ficheiro desapareceu ou sem acesso: falha só esta entrada
            if on_error is None:
                raise
            on_error(SourceEntry(sub_parts, EntryKind.FILE), exc)
            continue

        if kind is EntryKind.FILE:
            yield SourceEntry(sub_parts, kind, st.st_size, st.st_mtime)
            continue

        if kind is EntryKind.UNSUPPORTED:
            yield SourceEntry(sub_parts, kind)
            continue

        node = SourceEntry(sub_parts, kind, 0, st.st_mtime)
        yield node
        try:
            yield from _walk(Path(entry.path), sub_parts, on_error)
        except OSError as exc:
            # subpasta impossível de listar: regista e segue com as irmãs
            if on_error is None:
                raise
            on_error(node, exc)
