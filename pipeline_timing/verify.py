from .errors import EngineMismatchError
from .timing import PIPELINE_DEPTH, STAGES

ROW_FIELDS = STAGES + ("stalls",)
SUMMARY_FIELDS = ("instructions", "base_cycles", "total_stalls", "total_cycles")


def compare_rows(a_rows, b_rows):
    """List of (index, field, a_value, b_value) where the two timings differ."""
    mismatches = []
    if len(a_rows) != len(b_rows):
        mismatches.append((None, "length", len(a_rows), len(b_rows)))
    for a, b in zip(a_rows, b_rows):
        for name in ROW_FIELDS:
            av, bv = getattr(a, name), getattr(b, name)
            if av != bv:
                mismatches.append((a.index, name, av, bv))
    return mismatches


def check_agreement(stepwise, closed_form):
    mismatches = compare_rows(stepwise.rows, closed_form.rows)
    for name in SUMMARY_FIELDS:
        av, bv = getattr(stepwise.summary, name), getattr(closed_form.summary, name)
        if av != bv:
            mismatches.append(("summary", name, av, bv))
    if mismatches:
        raise EngineMismatchError(mismatches)


def timing_violations(result):
    problems = []
    rows = result.rows
    for row in rows:
        for offset, name in enumerate(STAGES[1:], start=1):
            if row.stage(name) != row.IF + offset:
                problems.append(f"[{row.index}] {name}={row.stage(name)} but IF+{offset}={row.IF + offset}")
        if row.stalls not in (0, 1, 2):
            problems.append(f"[{row.index}] stall count {row.stalls} outside 0..2")
    for prev, cur in zip(rows, rows[1:]):
        if not prev.IF < cur.IF:
            problems.append(f"[{cur.index}] IF={cur.IF} does not follow IF={prev.IF} of [{prev.index}]")

    s = result.summary
    expected = s.instructions + PIPELINE_DEPTH - 1 + sum(row.stalls for row in rows)
    if s.total_cycles != expected:
        problems.append(f"total cycles {s.total_cycles} != N+4+stalls = {expected}")
    if rows and s.total_cycles != rows[-1].WB:
        problems.append(f"total cycles {s.total_cycles} != WB of last instruction {rows[-1].WB}")
    return problems
