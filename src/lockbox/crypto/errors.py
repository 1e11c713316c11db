"""
Exceptions raised by the field engine, splitter and combiner.

Every error derives from ShamirError, which is a ValueError, so callers that
only care about "bad input" can keep catching ValueError.

Running out of key combinations during a predicate search is not an error:
combine() returns None in that case.
"""


class ShamirError(ValueError):
    """Base class for secret sharing errors."""


class InvalidThreshold(ShamirError):
    """Threshold k is too small."""


class InsufficientShares(ShamirError):
    """Fewer total shares n than the threshold k were requested."""


class TooManyShares(ShamirError):
    """More shares requested than there are nonzero x-coordinates."""


class InvalidByte(ShamirError):
    """
    A value is not a GF(256) element.

    Attributes:
        value: The offending value
        index: Position in the secret or key, if known
    """

    def __init__(self, value, index: int | None = None):
        self.value = value
        self.index = index
        if index is None:
            message = f"{value!r} is not a GF(256) element (0-255)"
        else:
            message = f"{value!r} at index {index} is out of range (0-255)"
        super().__init__(message)


class NoShares(ShamirError):
    """combine() was given an empty collection."""


class UnequalKeyLengths(ShamirError):
    """Keys being combined encode secrets of different lengths."""


class DuplicateXCoordinate(ShamirError):
    """
    Two keys being interpolated share an x-coordinate.

    Attributes:
        first: Position of the first key
        second: Position of the second key
        x: The shared x-coordinate
    """

    def __init__(self, first: int, second: int, x: int):
        self.first = first
        self.second = second
        self.x = x
        super().__init__(
            f"Keys at {first} and {second} have the same x-coordinate ({x})"
        )


class DivisionByZero(ShamirError, ZeroDivisionError):
    """Division or inversion by the additive identity."""
