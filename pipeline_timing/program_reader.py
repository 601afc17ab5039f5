import re

from .errors import ParseError
from .isa import Instruction, Opcode, make_program

WORD_RE = re.compile(r"[A-Za-z]+")
REGISTER_RE = re.compile(r"[xX](\d+)")
BOMS = ("\ufeff", "\xef\xbb\xbf")


def clean_line(line: str) -> str:
    """Drop a byte-order mark, a trailing '#' comment and trailing whitespace."""
    for bom in BOMS:
        if line.startswith(bom):
            line = line[len(bom):]
    line = line.split("#", 1)[0]
    return line.rstrip()


def find_opcode(text):
    for match in WORD_RE.finditer(text):
        op = Opcode.lookup(match.group(0))
        if op is not None:
            return op
    return None


def find_registers(text, limit=3):
    regs = []
    for match in REGISTER_RE.finditer(text):
        regs.append(f"x{match.group(1)}")
        if len(regs) == limit:
            break
    return regs


def parse_line(line, lineno):
    """Instruction for the line, or None if the line holds no instruction."""
    text = clean_line(line)
    if not text.strip():
        return None

    op = find_opcode(text)
    if op is None:
        # not an instruction, skip quietly
        return None

    regs = find_registers(text)
    expected = op.arity + 1
    if len(regs) != expected:
        raise ParseError(lineno, f"need {expected} regs for {op.value}; got {len(regs)}", text)
    return Instruction.from_registers(op, regs)


def parse_program(lines):
    instructions = []
    for lineno, line in enumerate(lines, start=1):
        instr = parse_line(line, lineno)
        if instr is not None:
            instructions.append(instr)
    return make_program(instructions)


def read_program(path):
    print(f"📂 Loading program: {path}...")
    with open(path, "r", encoding="utf-8", errors="replace") as f:
        program = parse_program(f)
    print(f"Parsed {len(program)} instruction(s).")
    return program
