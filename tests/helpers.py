from pipeline_timing.program_reader import parse_program


def program_of(*lines):
    """Build a program from assembly lines, e.g. program_of("add x1,x2,x3")."""
    return parse_program(lines)
