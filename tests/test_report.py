from helpers import program_of
from pipeline_timing import report
from pipeline_timing.simulation import simulate
from pipeline_timing.timing import compute_timing

PROGRAM = program_of("add x1, x2, x3", "add x4, x1, x5")


def test_timing_frame():
    df = report.timing_frame(compute_timing(PROGRAM))
    assert list(df.columns) == ["idx", "instruction", "IF", "ID", "EX", "MEM", "WB", "stalls_here"]
    assert df.iloc[1].tolist() == [1, "add x4, x1, x5", 4, 5, 6, 7, 8, 2]


def test_cycles_frame():
    df = report.cycles_frame(simulate(PROGRAM).snapshots)
    assert list(df.columns) == ["cycle", "IF", "ID", "EX", "MEM", "WB", "stalls_pending"]
    assert len(df) == 8
    assert df.iloc[2].tolist() == [3, "", "add x4, x1, x5", "add x1, x2, x3", "", "", 2]


def test_pipeline_diagram_marks_stalls():
    df = report.pipeline_diagram(simulate(PROGRAM).snapshots, PROGRAM)
    assert list(df.columns) == [f"C{c}" for c in range(1, 9)]
    assert df.loc["[ 0] add x1, x2, x3"].tolist() == ["IF", "ID", "EX", "MEM", "WB", "", "", ""]
    assert df.loc["[ 1] add x4, x1, x5"].tolist() == ["", "IF", "ID", "STALL", "STALL", "EX", "MEM", "WB"]


def test_csv_layouts(tmp_path):
    timeline = tmp_path / "timeline.csv"
    cycles = tmp_path / "cycles.csv"
    result = simulate(PROGRAM)
    report.write_timing_csv(result, timeline)
    report.write_cycles_csv(result.snapshots, cycles)

    lines = timeline.read_text().splitlines()
    assert lines[0] == "idx,instruction,IF,ID,EX,MEM,WB,stalls_here"
    assert lines[1] == '0,"add x1, x2, x3",1,2,3,4,5,0'

    lines = cycles.read_text().splitlines()
    assert lines[0] == "cycle,IF,ID,EX,MEM,WB,stalls_pending"
    assert lines[1] == '1,"add x1, x2, x3",,,,,0'
    assert len(lines) == 9


def test_summary_lines():
    result = compute_timing(PROGRAM)
    assert report.summary_lines(result.summary, result.rows) == [
        "Instructions: 2",
        "Base cycles (N+4): 6",
        "Total stalls: 2",
        "Total cycles with stalls: 8",
        "Per-instruction stalls (index:stalls):",
        "0:0, 1:2",
    ]


def test_trace_lines():
    snaps = simulate(PROGRAM).snapshots
    assert report.trace_lines(snaps[0], PROGRAM) == ["C  1: FETCH  [ 0] add x1, x2, x3"]
    assert report.trace_lines(snaps[3], PROGRAM) == [
        "C  4: MEM    [ 0] add x1, x2, x3 (bypassed)",
        "C  4: BUBBLE in EX (1 more pending)",
        "C  4: DECODE [ 1] add x4, x1, x5 (stalled)",
    ]
    assert report.trace_lines(snaps[4], PROGRAM)[0] == "C  5: WB     [ 0] add x1, x2, x3 -> write x1"
