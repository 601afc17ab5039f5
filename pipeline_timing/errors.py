class PipelineError(Exception):
    """Base class for everything the pipeline tool raises on purpose."""


class EmptyProgramError(PipelineError, ValueError):
    def __init__(self, message="No instructions parsed; nothing to simulate."):
        super().__init__(message)


class ParseError(PipelineError, ValueError):
    def __init__(self, lineno, message, line=""):
        self.lineno = lineno
        self.line = line
        text = f"Parse error on line {lineno}: {message}"
        if line:
            text += f'  |  line: "{line}"'
        super().__init__(text)


class EngineMismatchError(PipelineError, RuntimeError):
    def __init__(self, mismatches):
        self.mismatches = list(mismatches)
        shown = "; ".join(
            f"[{idx}] {field}: stepwise={a} closed-form={b}"
            for idx, field, a, b in self.mismatches[:5]
        )
        if len(self.mismatches) > 5:
            shown += "; ..."
        super().__init__(f"Stepwise and closed-form timing disagree ({len(self.mismatches)} field(s)): {shown}")


class ConfigError(PipelineError):
    pass
