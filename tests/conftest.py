import contextlib
import os

import pytest

from opz_backup.core import scanner


class _StatFails:
    """DirEntry cujo lstat falha (ficheiro que desaparece a meio do scan)."""

    def __init__(self, entry):
        self._entry = entry

    def __getattr__(self, name):
        return getattr(self._entry, name)

    def stat(self, *, follow_symlinks=True):
        raise FileNotFoundError(2, 'No such file or directory')


@pytest.fixture
def broken_scandir(monkeypatch):
    """
    broken_scandir(stat_fails=[...], unlistable=[...]): faz o Scanner ver
    entradas cujo stat falha e pastas impossíveis de listar, sem depender
    de permissões (que não se aplicam quando se corre como root).
    """
    real_scandir = os.scandir

    def _install(stat_fails=(), unlistable=()):
        stat_fails = {os.fspath(p) for p in stat_fails}
        unlistable = {os.fspath(p) for p in unlistable}

        @contextlib.contextmanager
        def fake_scandir(path):
            if os.fspath(path) in unlistable:
                raise PermissionError(13, 'Permission denied')
            with real_scandir(path) as it:
                yield [_StatFails(e) if e.path in stat_fails else e for e in it]

        monkeypatch.setattr(scanner.os, 'scandir', fake_scandir)

    return _install
