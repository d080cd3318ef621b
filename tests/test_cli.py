import io

import pytest

from esolang.__main__ import main


def write_program(tmp_path, source, name='prog.eso'):
    path = tmp_path / name
    path.write_text(source, encoding='utf-8')
    return str(path)


def test_runs_program(tmp_path, capsys):
    main([write_program(tmp_path, 'println("hello from cli");')])
    assert capsys.readouterr().out == 'hello from cli\n'


def test_requires_program_or_repl(capsys):
    with pytest.raises(SystemExit) as excinfo:
        main([])
    assert excinfo.value.code == 2
    assert 'missing program file; or use --repl' in capsys.readouterr().err


def test_rejects_non_eso_file(tmp_path, capsys):
    with pytest.raises(SystemExit) as excinfo:
        main([write_program(tmp_path, 'println(1)', name='prog.txt')])
    assert excinfo.value.code == 1
    assert 'is not an .eso file' in capsys.readouterr().err


def test_missing_file(tmp_path, capsys):
    with pytest.raises(SystemExit) as excinfo:
        main([str(tmp_path / 'absent.eso')])
    assert excinfo.value.code == 1
    assert 'not found' in capsys.readouterr().err


def test_parse_errors_are_reported(tmp_path, capsys):
    path = write_program(tmp_path, 'let = 1;\nlet y 2;')
    with pytest.raises(SystemExit) as excinfo:
        main([path])
    assert excinfo.value.code == 1
    err = capsys.readouterr().err.splitlines()
    assert err[0] == f'{path}:1:5: expected next token to be IDENT, got = instead'
    assert f'{path}:2:7: expected next token to be =, got INT instead' in err


def test_runtime_error_exits_nonzero(tmp_path, capsys):
    path = write_program(tmp_path, 'println("start");\nlet x = missing;')
    with pytest.raises(SystemExit) as excinfo:
        main([path])
    assert excinfo.value.code == 1
    captured = capsys.readouterr()
    assert captured.out == 'start\n'
    assert captured.err == f"ERROR: {path}:2:9: cannot find 'missing' in scope\n"


def test_include_directories(tmp_path, capsys):
    libs = tmp_path / 'libs'
    libs.mkdir()
    (libs / 'greet.eso').write_text('func Hello(name) { "hello " + name }', encoding='utf-8')
    path = write_program(tmp_path, 'println(import("greet").Hello("cli"));')
    main(['-I', str(libs), path])
    assert capsys.readouterr().out == 'hello cli\n'


def test_max_depth(tmp_path, capsys):
    path = write_program(tmp_path, 'func down(n) { down(n + 1) }\ndown(0);')
    with pytest.raises(SystemExit):
        main(['--max-depth', '20', path])
    assert capsys.readouterr().err.strip().endswith('maximum recursion depth exceeded (20)')

    with pytest.raises(SystemExit) as excinfo:
        main(['--max-depth', '0', path])
    assert excinfo.value.code == 2


def test_verbose_writes_debug_file(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    path = write_program(tmp_path, 'let x = 1;\nfunc f(a) { a }\nf(x);')
    main(['-vvvv', path])
    log = (tmp_path / 'debug.txt').read_text(encoding='utf-8').splitlines()
    assert 'let x = 1' in log
    assert 'func f' in log
    assert 'call f(1)' in log
    assert f'{path}:3:1: f(x)' in log


def test_repl_flag(monkeypatch, capsys):
    monkeypatch.setattr('sys.stdin', io.StringIO('1 + 1\n'))
    main(['--repl'])
    assert capsys.readouterr().out == '>> 2\n>> \n'


def test_deeply_nested_program(tmp_path, capsys):
    path = write_program(tmp_path, 'let x = ' + '[' * 3000 + ']' * 3000 + ';')
    with pytest.raises(SystemExit) as excinfo:
        main([path])
    assert excinfo.value.code == 1
    assert capsys.readouterr().err == f'{path}:1:109: expression nested too deeply\n'


def test_program_with_invalid_utf8(tmp_path, capsys):
    path = tmp_path / 'garbled.eso'
    path.write_bytes(b'println("\xff");')
    with pytest.raises(SystemExit) as excinfo:
        main([str(path)])
    assert excinfo.value.code == 1
    assert capsys.readouterr().err.startswith(f'Error: cannot read {path}:')
