"""Error taxonomy for the pharmacy order core.

None of these is fatal: callers recover locally and keep working in memory.
"""


class DawakError(Exception):
    """Base class for all recoverable order-core errors."""


class ValidationError(DawakError):
    """Bad line-item input. The cart is left untouched."""


class EmptyCartError(DawakError):
    """Submission attempted with no items in the cart."""

    def __init__(self, message: str = "Your cart is empty"):
        super().__init__(message)


class PersistenceError(DawakError):
    """The durable store could not be read or written.

    The in-memory state stays authoritative; this is reported as a warning.
    """


class InvalidCredentialsError(DawakError):
    """Login attempted with anything but the pharmacy account."""
