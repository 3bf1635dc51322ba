class SimulatorError(Exception):
    pass


class ConfigurationError(SimulatorError, ValueError):
    """Raised when a simulation cannot be built from the given settings."""


class InvariantViolation(SimulatorError, RuntimeError):
    """Raised when cache state reaches a condition that should be unreachable."""


class TraceFormatError(SimulatorError, ValueError):
    def __init__(self, line_number, line, reason):
        self.line_number = line_number
        self.line = line
        self.reason = reason
        super().__init__(f"line {line_number}: {reason}: {line!r}")
