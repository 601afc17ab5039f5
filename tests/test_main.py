import json

import pytest

from pipeline_timing import main as main_module
from pipeline_timing.main import main


def write(tmp_path, text, name="prog.txt"):
    path = tmp_path / name
    path.write_text(text)
    return str(path)


def test_end_to_end(tmp_path, capsys):
    prog = write(tmp_path, "add x1, x2, x3\nadd x4, x1, x5  # RAW\nmov x6, x7\n")
    out = tmp_path / "out"
    assert main([prog, "-o", str(out), "--trace"]) == 0

    text = capsys.readouterr().out
    assert "Stepwise and closed-form timing agree" in text
    assert "Total cycles with stalls: 9" in text
    assert "C  4: BUBBLE in EX (1 more pending)" in text
    for name in ("pipeline_timeline.csv", "pipeline_cycles.csv", "pipeline_view.html", "pipeline_trace.vcd"):
        assert (out / name).exists()


def test_trace_window_limits_output(tmp_path, capsys):
    prog = write(tmp_path, "mov x1, x2\nmov x3, x4\n")
    main([prog, "-o", str(tmp_path), "--trace-window", "2:2", "--no-html", "--no-vcd"])
    trace = [line for line in capsys.readouterr().out.splitlines() if line.startswith("C  ")]
    assert trace and all(line.startswith("C  2:") for line in trace)
    assert not (tmp_path / "pipeline_view.html").exists()


def test_closed_form_only(tmp_path, capsys):
    prog = write(tmp_path, "mov x1, x2\n")
    main([prog, "-o", str(tmp_path), "--engine", "closed-form", "--trace"])
    text = capsys.readouterr().out
    assert "Total cycles with stalls: 5" in text
    assert "skipping" in text
    assert (tmp_path / "pipeline_timeline.csv").exists()
    assert not (tmp_path / "pipeline_cycles.csv").exists()


@pytest.mark.parametrize("text,code", [
    ("# nothing\n\n", main_module.EXIT_EMPTY),
    ("add x1, x2\n", main_module.EXIT_PARSE),
])
def test_exit_codes(tmp_path, capsys, text, code):
    prog = write(tmp_path, text)
    with pytest.raises(SystemExit) as excinfo:
        main([prog, "-o", str(tmp_path)])
    assert excinfo.value.code == code
    assert "❌" in capsys.readouterr().err


def test_missing_input(tmp_path):
    with pytest.raises(SystemExit) as excinfo:
        main([str(tmp_path / "absent.txt")])
    assert excinfo.value.code == main_module.EXIT_CONFIG


def test_engine_mismatch_exit(tmp_path, monkeypatch):
    prog = write(tmp_path, "add x1, x2, x3\nadd x4, x1, x5\n")
    monkeypatch.setattr(main_module.timing, "stall_schedule", lambda program: [0] * len(program))
    with pytest.raises(SystemExit) as excinfo:
        main([prog, "-o", str(tmp_path)])
    assert excinfo.value.code == main_module.EXIT_MISMATCH


def test_open_browser(tmp_path, monkeypatch):
    opened = []
    monkeypatch.setattr(main_module.webbrowser, "open_new_tab", opened.append)
    prog = write(tmp_path, "mov x1, x2\n")
    main([prog, "-o", str(tmp_path), "--open", "--no-vcd"])
    assert len(opened) == 1 and opened[0].endswith("pipeline_view.html")


@pytest.mark.parametrize("period", [0, "10"])
def test_bad_clock_period_exits_cleanly(tmp_path, capsys, period):
    prog = write(tmp_path, "mov x1, x2\n")
    cfg = tmp_path / "clock.json"
    cfg.write_text(json.dumps({"clock_period_ns": period}))
    with pytest.raises(SystemExit) as excinfo:
        main([prog, "-c", str(cfg), "-o", str(tmp_path), "--no-html"])
    assert excinfo.value.code == main_module.EXIT_CONFIG
    assert "clock_period_ns" in capsys.readouterr().err
