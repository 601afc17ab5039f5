from dataclasses import dataclass
from typing import List, Tuple

from .errors import EmptyProgramError
from .hazard import EX_PRODUCER_STALLS, MEM_PRODUCER_STALLS

STAGES = ("IF", "ID", "EX", "MEM", "WB")
PIPELINE_DEPTH = len(STAGES)


@dataclass(frozen=True)
class TimingRow:
    index: int
    instruction: str
    IF: int
    ID: int
    EX: int
    MEM: int
    WB: int
    stalls: int

    @classmethod
    def from_fetch(cls, index, instruction, fetch_cycle, stalls):
        return cls(index, str(instruction), fetch_cycle, fetch_cycle + 1,
                   fetch_cycle + 2, fetch_cycle + 3, fetch_cycle + 4, stalls)

    def stage(self, name) -> int:
        return getattr(self, name)


@dataclass(frozen=True)
class TimingSummary:
    instructions: int
    base_cycles: int
    total_stalls: int
    total_cycles: int


@dataclass(frozen=True)
class TimingResult:
    rows: Tuple[TimingRow, ...]
    summary: TimingSummary

    @property
    def stalls(self) -> List[int]:
        return [row.stalls for row in self.rows]


def summarize(rows) -> TimingSummary:
    n = len(rows)
    return TimingSummary(
        instructions=n,
        base_cycles=n + PIPELINE_DEPTH - 1,
        total_stalls=sum(row.stalls for row in rows),
        total_cycles=rows[-1].WB if rows else 0,
    )


def stall_schedule(program) -> List[int]:
    """Per-instruction stall counts without simulating the pipeline.

    ``prev1`` is the destination of the instruction sitting in EX while the
    current one is in ID, ``prev2`` the one in MEM. A stalled instruction
    leaves a bubble behind it, so after a stall nothing useful is in MEM.
    """
    stalls = []
    prev1 = prev2 = None
    for instr in program:
        if instr.reads(prev1):
            s = EX_PRODUCER_STALLS
        elif instr.reads(prev2):
            s = MEM_PRODUCER_STALLS
        else:
            s = 0
        stalls.append(s)
        prev2 = prev1 if s == 0 else None
        prev1 = instr.destination
    return stalls


def compute_timing(program) -> TimingResult:
    if not program:
        raise EmptyProgramError()

    rows = []
    cursor = 1
    for index, (instr, s) in enumerate(zip(program, stall_schedule(program))):
        fetch = cursor + s
        rows.append(TimingRow.from_fetch(index, instr, fetch, s))
        cursor = fetch + 1

    rows = tuple(rows)
    return TimingResult(rows, summarize(rows))
