class TabulationError(Exception):
    """Base class for all tabfluids-related errors."""

    pass


class ValidationError(TabulationError, ValueError):
    """Raised when input data fails validation checks."""

    pass


class FormatError(TabulationError, ValueError):
    """Raised when a tabulated data file is malformed."""

    pass


class RangeError(TabulationError, ValueError):
    """Raised when a property is requested outside the tabulated pressure-temperature domain."""

    pass


class TableIOError(TabulationError, OSError):
    """Raised when a tabulated data file cannot be read or written."""

    pass


class SetupError(TabulationError, RuntimeError):
    """Raised when tabulated properties are used before (or set up after) initialization."""

    pass


class ComputationError(TabulationError):
    """Raised when there is an error during numerical computations."""

    pass
