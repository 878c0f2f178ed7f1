from pathlib import Path

from opz_backup import cli
from opz_backup.core import copier
from opz_backup.core.errors import DeviceNotFoundError


def _source(tmp_path):
    src = tmp_path / 'src'
    (src / 'a').mkdir(parents=True)
    (src / 'a' / 'b.txt').write_text('test')
    (src / 'c').mkdir()
    return src


def test_cli_success(tmp_path, capsys):
    src = _source(tmp_path)
    dst = tmp_path / 'dst'

    code = cli.main([str(dst), '--source', str(src), '--no-log'])

    out = capsys.readouterr().out
    assert code == cli.EXIT_OK
    assert (dst / 'a' / 'b.txt').read_text() == 'test'
    assert f"✔ Copiado: {Path('a', 'b.txt')}" in out
    assert 'Backup concluído' in out
    assert '[green]' not in out


def test_cli_quiet_hides_per_file_lines(tmp_path, capsys):
    src = _source(tmp_path)
    code = cli.main([str(tmp_path / 'dst'), '--source', str(src), '--no-log', '-q'])
    out = capsys.readouterr().out
    assert code == cli.EXIT_OK
    assert 'Copiado' not in out


def test_cli_failure_exit_code(tmp_path, monkeypatch, capsys):
    src = _source(tmp_path)

    def fail_open(path):
        raise PermissionError(13, 'Permission denied')

    monkeypatch.setattr(copier, '_open_source', fail_open)
    code = cli.main([str(tmp_path / 'dst'), '--source', str(src), '--no-log'])

    err = capsys.readouterr().err
    assert code == cli.EXIT_FAILURES
    assert '❌ Erro' in err


def test_cli_missing_source(tmp_path, capsys):
    code = cli.main([str(tmp_path / 'dst'), '--source', str(tmp_path / 'nao_existe')])
    assert code == cli.EXIT_SETUP
    assert 'nao_existe' in capsys.readouterr().err
    assert not (tmp_path / 'dst').exists()


def test_cli_no_device(tmp_path, monkeypatch, capsys):
    def no_device(label):
        raise DeviceNotFoundError(label, 'dispositivo não encontrado')

    monkeypatch.setattr(cli, 'detect_device', no_device)
    assert cli.main([str(tmp_path / 'dst')]) == cli.EXIT_SETUP
    assert 'dispositivo não encontrado' in capsys.readouterr().err


def test_cli_detects_device_and_default_destination(tmp_path, monkeypatch):
    src = _source(tmp_path)
    dst = tmp_path / 'opz-backups' / 'agora'
    monkeypatch.setattr(cli, 'detect_device', lambda label: src)
    monkeypatch.setattr(cli, 'backup_dir', lambda root=None: dst)

    code = cli.main(['--no-log', '--verify', 'hash', '--workers', '2'])

    assert code == cli.EXIT_OK
    assert (dst / 'a' / 'b.txt').read_text() == 'test'
    assert (dst / 'c').is_dir()


def test_cli_rejects_zero_workers(tmp_path):
    src = _source(tmp_path)
    assert cli.main([str(tmp_path / 'dst'), '--source', str(src), '--workers', '0']) == cli.EXIT_SETUP


def test_cli_unlistable_subdir_exit_code(tmp_path, broken_scandir, capsys):
    src = _source(tmp_path)
    dst = tmp_path / 'dst'
    broken_scandir(unlistable=[src / 'c'])

    code = cli.main([str(dst), '--source', str(src), '--no-log'])

    assert code == cli.EXIT_FAILURES
    assert (dst / 'a' / 'b.txt').read_text() == 'test'
    assert "❌ Erro: c (Permission denied)" in capsys.readouterr().err
