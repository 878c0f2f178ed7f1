import os
from pathlib import Path

import pytest

from opz_backup.core.errors import FatalSetupError
from opz_backup.core.models import EntryKind
from opz_backup.core.scanner import scan

needs_symlink = pytest.mark.skipif(not hasattr(os, "symlink") or os.name == "nt",
                                   reason="symlinks indisponíveis")
running_as_root = hasattr(os, "geteuid") and os.geteuid() == 0


def test_scan_depth_first_dirs_before_contents(tmp_path):
    (tmp_path / 'a' / 'sub').mkdir(parents=True)
    (tmp_path / 'a' / 'b.txt').write_text('test')
    (tmp_path / 'a' / 'sub' / 'c.txt').write_text('xy')
    (tmp_path / 'c').mkdir()

    found = [(e.parts, e.kind) for e in scan(tmp_path)]
    assert found == [
        (('a',), EntryKind.DIRECTORY),
        (('a', 'b.txt'), EntryKind.FILE),
        (('a', 'sub'), EntryKind.DIRECTORY),
        (('a', 'sub', 'c.txt'), EntryKind.FILE),
        (('c',), EntryKind.DIRECTORY),
    ]


def test_scan_records_size_and_mtime(tmp_path):
    f = tmp_path / 'b.txt'
    f.write_text('test')

    (entry,) = list(scan(tmp_path))
    assert entry.size == 4
    assert entry.mtime == pytest.approx(f.stat().st_mtime)
    assert entry.rel_path == Path('b.txt')


@needs_symlink
def test_scan_symlinks_are_unsupported_and_not_followed(tmp_path):
    (tmp_path / 'real').mkdir()
    (tmp_path / 'real' / 'x.txt').write_text('x')
    os.symlink(tmp_path / 'real', tmp_path / 'link_dir')
    os.symlink(tmp_path / 'real' / 'x.txt', tmp_path / 'link_file')

    kinds = {e.parts: e.kind for e in scan(tmp_path)}
    assert kinds[('link_dir',)] is EntryKind.UNSUPPORTED
    assert kinds[('link_file',)] is EntryKind.UNSUPPORTED
    assert ('link_dir', 'x.txt') not in kinds


def test_scan_missing_root_fails_immediately():
    missing = Path('nao_existe')
    with pytest.raises(FatalSetupError):
        scan(missing)


def test_scan_root_must_be_a_directory(tmp_path):
    f = tmp_path / 'ficheiro.txt'
    f.write_text('x')
    with pytest.raises(FatalSetupError):
        scan(f)


@pytest.mark.skipif(running_as_root or os.name == "nt", reason="permissões não se aplicam")
def test_scan_unlistable_subdir_reported_and_siblings_continue(tmp_path):
    locked = tmp_path / 'a_locked'
    locked.mkdir()
    (locked / 'segredo.txt').write_text('x')
    (tmp_path / 'b.txt').write_text('ok')
    locked.chmod(0)
    errors = []
    try:
        found = [e.parts for e in scan(tmp_path, on_error=lambda e, exc: errors.append(e.parts))]
    finally:
        locked.chmod(0o755)

    assert errors == [('a_locked',)]
    assert ('b.txt',) in found


def test_scan_stat_failure_reported_per_entry(tmp_path, broken_scandir):
    (tmp_path / 'd').mkdir()
    for name in ('a.txt', 'b.txt', 'c.txt'):
        (tmp_path / 'd' / name).write_text(name)
    broken_scandir(stat_fails=[tmp_path / 'd' / 'a.txt'])
    errors = []

    found = [e.parts for e in scan(tmp_path, on_error=lambda e, exc: errors.append((e.parts, e.kind)))]

    assert errors == [(('d', 'a.txt'), EntryKind.FILE)]
    assert found == [('d',), ('d', 'b.txt'), ('d', 'c.txt')]


def test_scan_stat_failure_without_callback_propagates(tmp_path, broken_scandir):
    (tmp_path / 'a.txt').write_text('a')
    broken_scandir(stat_fails=[tmp_path / 'a.txt'])
    with pytest.raises(FileNotFoundError):
        list(scan(tmp_path))
