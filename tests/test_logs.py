from fractex import ARGS, compile_equation
from fractex.logs import debug_print, verbose_print


def test_silent_by_default(monkeypatch, capsys):
    monkeypatch.setitem(ARGS, "debug", False)
    monkeypatch.setitem(ARGS, "verbose", False)
    debug_print("hidden")
    verbose_print("hidden")
    assert capsys.readouterr().out == ""


def test_debug_output(monkeypatch, capsys):
    monkeypatch.setitem(ARGS, "debug", True)
    debug_print("hello")
    assert capsys.readouterr().out == "[DEBUG 5] hello\n"


def test_verbose_output_is_truncated(monkeypatch, capsys):
    monkeypatch.setitem(ARGS, "verbose", True)
    verbose_print("x" * 200)
    assert capsys.readouterr().out == "[VERBOSE 200] " + "x" * 120 + "\n"


def test_logfile(monkeypatch, tmp_path, capsys):
    logfile = tmp_path / "fractex.log"
    monkeypatch.setitem(ARGS, "debug", True)
    monkeypatch.setitem(ARGS, "logfile", str(logfile))
    debug_print("first")
    debug_print("second")
    capsys.readouterr()
    assert logfile.read_text() == "[DEBUG 5] first\n[DEBUG 6] second\n"


def test_compiler_logs_stages(monkeypatch, capsys):
    monkeypatch.setitem(ARGS, "debug", True)
    monkeypatch.setitem(ARGS, "verbose", True)
    compile_equation("z*z + z*z")
    out = capsys.readouterr().out
    assert "[VERBOSE" in out and "compiling equation: z*z + z*z" in out
    assert "reusing temp_0" in out
