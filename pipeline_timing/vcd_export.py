from datetime import date

from vcd.writer import VCDWriter

from .timing import STAGES

SCOPE = "pipeline"
INDEX_WIDTH = 16


def write_vcd(path, snapshots, clock_period=10):
    """Dump stage occupancy as a waveform, one clock period per cycle.

    Each stage gets a ``<stage>_idx`` wire carrying the occupying
    instruction index ('x' while the slot is empty). Values change on
    the rising edge of ``clk`` at ``cycle * clock_period`` ns.
    """
    half = max(clock_period // 2, 1)
    with open(path, "w") as f:
        with VCDWriter(f, timescale="1 ns", date=date.today().isoformat(),
                       comment="No-forwarding 5-stage pipeline occupancy") as writer:
            clk = writer.register_var(SCOPE, "clk", "wire", size=1, init=0)
            stage_vars = {
                stage: writer.register_var(SCOPE, f"{stage.lower()}_idx", "wire", size=INDEX_WIDTH, init="x")
                for stage in STAGES
            }
            pending = writer.register_var(SCOPE, "stall_pending", "wire", size=2, init=0)

            for snap in snapshots:
                rise = snap.cycle * clock_period
                writer.change(clk, rise, 1)
                for stage, idx in zip(STAGES, snap.slots):
                    writer.change(stage_vars[stage], rise, "x" if idx is None else idx)
                writer.change(pending, rise, snap.pending_stalls)
                writer.change(clk, rise + half, 0)
