"""RAW hazard rule for the no-forwarding 5-stage pipeline.

A consumer in ID cannot read a register until its producer has written it
back. A producer in EX is two cycles away from WB, a producer in MEM one
cycle away, so those are the bubble counts the consumer has to wait.
"""

EX_PRODUCER_STALLS = 2
MEM_PRODUCER_STALLS = 1


def required_stalls(id_instr, ex_instr=None, mem_instr=None) -> int:
    """Stall cycles needed before the ID instruction may move on to EX.

    Any argument may be None (empty slot or bubble). The EX producer wins
    over the MEM producer; penalties are never added together.
    """
    if id_instr is None:
        return 0
    if ex_instr is not None and id_instr.reads(ex_instr.destination):
        return EX_PRODUCER_STALLS
    if mem_instr is not None and id_instr.reads(mem_instr.destination):
        return MEM_PRODUCER_STALLS
    return 0
