from dataclasses import dataclass, field
from typing import List, Optional, Tuple

from .errors import EmptyProgramError
from .hazard import EX_PRODUCER_STALLS, required_stalls
from .timing import STAGES, PIPELINE_DEPTH, TimingResult, TimingRow, summarize

IF, ID, EX, MEM, WB = range(PIPELINE_DEPTH)


@dataclass
class PipelineState:
    slots: List[Optional[int]] = field(default_factory=lambda: [None] * PIPELINE_DEPTH)
    program_counter: int = 0
    completed_count: int = 0
    cycle: int = 0
    pending_stalls: int = 0
    total_stalls: int = 0


@dataclass(frozen=True)
class CycleSnapshot:
    cycle: int
    slots: Tuple[Optional[int], ...]
    contents: Tuple[str, ...]
    pending_stalls: int
    stalled: bool = False
    writeback: Optional[int] = None

    def stage(self, name) -> str:
        return self.contents[STAGES.index(name)]

    def occupant(self, name) -> Optional[int]:
        return self.slots[STAGES.index(name)]


@dataclass(frozen=True)
class SimulationResult(TimingResult):
    snapshots: Tuple[CycleSnapshot, ...] = ()


class StepwiseEngine:
    """Cycle-by-cycle model of the 5-slot pipeline with bubble injection.

    Slots hold instruction indices into the program. Each call to step()
    either drains one pending stall (bubble into EX, IF/ID frozen) or
    shifts every stage forward and fetches.
    """

    def __init__(self, program):
        if not program:
            raise EmptyProgramError()
        self.program = tuple(program)
        self.state = PipelineState()
        # every instruction costs one cycle plus at most one EX-producer penalty
        self.cycle_limit = len(self.program) * (1 + EX_PRODUCER_STALLS) + PIPELINE_DEPTH - 1
        self._entered = {stage: {} for stage in STAGES}
        self._stalls = [0] * len(self.program)
        self.snapshots: List[CycleSnapshot] = []

    @property
    def done(self) -> bool:
        return self.state.completed_count == len(self.program)

    def _instr(self, idx):
        return None if idx is None else self.program[idx]

    def step(self) -> CycleSnapshot:
        if self.done:
            raise RuntimeError("Pipeline already drained; nothing left to step.")

        st = self.state
        slots = st.slots
        st.cycle += 1
        if st.cycle > self.cycle_limit:
            raise RuntimeError(f"Pipeline did not drain within {self.cycle_limit} cycles.")

        # WB occupant wrote back last cycle
        slots[WB] = None

        stalled = st.pending_stalls > 0
        if stalled:
            # --- Bubble cycle: EX empties downstream, IF/ID hold ---
            slots[WB], slots[MEM], slots[EX] = slots[MEM], slots[EX], None
            st.pending_stalls -= 1
            st.total_stalls += 1
            self._stalls[slots[ID]] += 1
        else:
            # --- Normal advance, right to left ---
            for dst in (WB, MEM, EX, ID):
                slots[dst] = slots[dst - 1]
            if st.program_counter < len(self.program):
                slots[IF] = st.program_counter
                st.program_counter += 1
            else:
                slots[IF] = None

            # The new ID occupant stays put if a producer is still in EX or MEM
            need = required_stalls(self._instr(slots[ID]), self._instr(slots[EX]), self._instr(slots[MEM]))
            if need > 0:
                st.pending_stalls = need

        for stage, idx in zip(STAGES, slots):
            if idx is not None:
                self._entered[stage].setdefault(idx, st.cycle)

        writeback = slots[WB]
        if writeback is not None:
            st.completed_count += 1

        snap = CycleSnapshot(
            cycle=st.cycle,
            slots=tuple(slots),
            contents=tuple("" if idx is None else self.program[idx].display_text for idx in slots),
            pending_stalls=st.pending_stalls,
            stalled=stalled,
            writeback=writeback,
        )
        self.snapshots.append(snap)
        return snap

    def timing_rows(self) -> Tuple[TimingRow, ...]:
        """Stage-entry cycles per instruction, stalls charged ahead of fetch."""
        if not self.done:
            raise RuntimeError("Pipeline has not drained yet.")
        rows = []
        for idx, instr in enumerate(self.program):
            ex = self._entered["EX"][idx]
            rows.append(TimingRow(
                index=idx,
                instruction=instr.display_text,
                IF=ex - 2,
                ID=ex - 1,
                EX=ex,
                MEM=self._entered["MEM"][idx],
                WB=self._entered["WB"][idx],
                stalls=self._stalls[idx],
            ))
        return tuple(rows)

    def run(self) -> SimulationResult:
        while not self.done:
            self.step()
        rows = self.timing_rows()
        summary = summarize(rows)
        if summary.total_cycles != self.state.cycle or summary.total_stalls != self.state.total_stalls:
            raise RuntimeError(
                f"Cycle accounting drifted: rows say {summary.total_cycles} cycles/{summary.total_stalls} stalls, "
                f"engine ran {self.state.cycle} cycles/{self.state.total_stalls} stalls."
            )
        return SimulationResult(rows, summary, tuple(self.snapshots))


def simulate(program) -> SimulationResult:
    return StepwiseEngine(program).run()
