from dataclasses import dataclass
from enum import Enum
from typing import Iterable, Tuple

from .errors import EmptyProgramError


class Opcode(Enum):
    ADD = "add"
    SUB = "sub"
    MOV = "mov"

    @property
    def arity(self) -> int:
        """Number of source registers the opcode reads."""
        return ARITY[self]

    @classmethod
    def lookup(cls, word):
        try:
            return cls(word.lower())
        except ValueError:
            return None


ARITY = {Opcode.ADD: 2, Opcode.SUB: 2, Opcode.MOV: 1}


@dataclass(frozen=True)
class Instruction:
    opcode: Opcode
    destination: str
    sources: Tuple[str, ...]
    display_text: str = ""

    @classmethod
    def from_registers(cls, opcode: Opcode, registers) -> "Instruction":
        """Build from ``[rd, rs1, (rs2)]``; the caller has already checked arity."""
        rd, *rs = registers
        text = f"{opcode.value} {rd}, " + ", ".join(rs)
        return cls(opcode, rd, tuple(rs), text)

    def reads(self, register) -> bool:
        return register is not None and register in self.sources

    def __str__(self):
        return self.display_text


Program = Tuple[Instruction, ...]


def make_program(instructions: Iterable[Instruction]) -> Program:
    program = tuple(instructions)
    if not program:
        raise EmptyProgramError()
    return program
