"""Exception hierarchy for FuseDB.

Drivers translate backend failures into these types. The engine never
wraps or replaces an exception: whatever a driver or hook raised is what
the caller sees.
"""


class FuseError(Exception):
    """Base class for all FuseDB errors."""


class DriverConnectionError(FuseError):
    """A driver could not connect, disconnect, or was used while disconnected."""


class DriverOperationError(FuseError):
    """A primitive driver call failed."""


class DecryptionError(DriverOperationError):
    """A stored payload failed authentication or could not be decoded."""


class ContractViolation(FuseError):
    """A driver or middleware returned a value outside its documented contract."""
