import pandas as pd

from .timing import STAGES

TIMELINE_COLUMNS = ["idx", "instruction", "IF", "ID", "EX", "MEM", "WB", "stalls_here"]
CYCLE_COLUMNS = ["cycle"] + list(STAGES) + ["stalls_pending"]


def instruction_label(idx, instr):
    return f"[{idx:2d}] {instr}"


# --- Tables ---

def timing_frame(result) -> pd.DataFrame:
    records = [
        [r.index, r.instruction, r.IF, r.ID, r.EX, r.MEM, r.WB, r.stalls]
        for r in result.rows
    ]
    return pd.DataFrame(records, columns=TIMELINE_COLUMNS)


def cycles_frame(snapshots) -> pd.DataFrame:
    records = [[s.cycle, *s.contents, s.pending_stalls] for s in snapshots]
    return pd.DataFrame(records, columns=CYCLE_COLUMNS)


def pipeline_diagram(snapshots, program) -> pd.DataFrame:
    """Instruction x cycle matrix of stage names; held stages show as STALL."""
    columns = [f"C{s.cycle}" for s in snapshots]
    labels = [instruction_label(i, instr) for i, instr in enumerate(program)]
    matrix = {label: [""] * len(snapshots) for label in labels}

    for col, snap in enumerate(snapshots):
        for stage, idx in zip(STAGES, snap.slots):
            if idx is None:
                continue
            held = snap.stalled and stage in ("IF", "ID")
            matrix[labels[idx]][col] = "STALL" if held else stage

    return pd.DataFrame.from_dict(matrix, orient="index", columns=columns)


def write_timing_csv(result, path):
    timing_frame(result).to_csv(path, index=False)


def write_cycles_csv(snapshots, path):
    cycles_frame(snapshots).to_csv(path, index=False)


# --- Text ---

def summary_lines(summary, rows):
    per_instr = ", ".join(f"{r.index}:{r.stalls}" for r in rows)
    return [
        f"Instructions: {summary.instructions}",
        f"Base cycles (N+4): {summary.base_cycles}",
        f"Total stalls: {summary.total_stalls}",
        f"Total cycles with stalls: {summary.total_cycles}",
        "Per-instruction stalls (index:stalls):",
        per_instr,
    ]


def trace_lines(snapshot, program):
    c = snapshot.cycle
    wb, mem, ex, id_, if_ = (snapshot.occupant(s) for s in ("WB", "MEM", "EX", "ID", "IF"))
    lines = []
    if wb is not None:
        lines.append(f"C{c:3d}: WB     [{wb:2d}] {program[wb]} -> write {program[wb].destination}")
    if mem is not None:
        lines.append(f"C{c:3d}: MEM    [{mem:2d}] {program[mem]} (bypassed)")
    if ex is not None:
        lines.append(f"C{c:3d}: EXEC   [{ex:2d}] {program[ex]}")
    elif snapshot.stalled:
        lines.append(f"C{c:3d}: BUBBLE in EX ({snapshot.pending_stalls} more pending)")
    if id_ is not None:
        suffix = " (stalled)" if snapshot.stalled or snapshot.pending_stalls else ""
        lines.append(f"C{c:3d}: DECODE [{id_:2d}] {program[id_]}{suffix}")
    if if_ is not None:
        lines.append(f"C{c:3d}: FETCH  [{if_:2d}] {program[if_]}")
    return lines
