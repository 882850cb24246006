# errors.py


class SimulationError(Exception):
    """Base class for every fatal condition raised by the simulator."""


class ConfigurationError(SimulationError):
    """Bad, missing, duplicated or out-of-range configuration value."""


class UnsupportedPolicy(SimulationError):
    """A replacement policy that is recognised but not implemented."""


class MalformedAddress(SimulationError):
    def __init__(self, address, reason="not an 8 digit hexadecimal address"):
        self.address = address
        super().__init__(f"malformed address {address!r}: {reason}")


class TraceFormatError(SimulationError):
    def __init__(self, message, line_number=None):
        self.line_number = line_number
        if line_number is not None:
            message = f"line {line_number}: {message}"
        super().__init__(message)


class ResourceError(SimulationError):
    """Trace file could not be opened or cache storage could not be allocated."""
