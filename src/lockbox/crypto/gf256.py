"""
Arithmetic over the finite field GF(2^8).

Elements are bytes (0-255). The field is GF(2)[x] reduced modulo the
irreducible polynomial

    x^8 + x^4 + x^3 + x + 1    (0x11B, the AES polynomial)

Addition and subtraction are both XOR (characteristic 2). Multiplication,
division and exponentiation go through logarithm/antilogarithm tables built
from the generator 0x03, whose powers run through all 255 nonzero elements.

The tables are built once, on first use, and shared read-only by every caller
for the lifetime of the process.

Reference:
    FIPS-197, Section 4: Mathematical Preliminaries.
"""

import logging
import threading

from .errors import DivisionByZero, InvalidByte


_logger = logging.getLogger(__name__)

# Reduction polynomial. Independent implementations must agree on this
# constant for keys to interoperate.
MODULUS = 0x11B

# Generator of the multiplicative group (order 255) under MODULUS.
GENERATOR = 0x03

ZERO = 0
ONE = 1

# Largest element, and the number of nonzero elements.
MASK = 0xFF
ORDER = 255

_lock = threading.Lock()
_tables: tuple[tuple[int, ...], tuple[int, ...]] | None = None


def _xtime(a: int) -> int:
    """Multiply by x, reducing modulo MODULUS."""
    a <<= 1
    if a & 0x100:
        a ^= MODULUS
    return a


def _build_tables() -> tuple[tuple[int, ...], tuple[int, ...]]:
    exp = [0] * ORDER
    log = [0] * (MASK + 1)

    a = ONE
    for i in range(ORDER):
        exp[i] = a
        log[a] = i
        # a * 0x03 == a * x + a
        a = _xtime(a) ^ a

    if a != ONE:
        raise RuntimeError(f"{GENERATOR:#x} does not generate GF(256)*")

    return tuple(exp), tuple(log)


def tables() -> tuple[tuple[int, ...], tuple[int, ...]]:
    """
    Return the (exp, log) lookup tables, building them on first call.

    exp[i] = GENERATOR^i for i in 0..254; log is its inverse on the nonzero
    elements (log[0] is meaningless and never read).
    """
    global _tables

    if _tables is None:
        with _lock:
            if _tables is None:
                _tables = _build_tables()
                _logger.debug(
                    "Built GF(256) tables (modulus=%#x, generator=%#x)",
                    MODULUS,
                    GENERATOR,
                )
    return _tables


def is_elem(v) -> bool:
    """True iff v is an integer in 0..255."""
    return isinstance(v, int) and not isinstance(v, bool) and 0 <= v <= MASK


def _check(*values: int) -> None:
    for v in values:
        if not is_elem(v):
            raise InvalidByte(v)


def add(a: int, b: int) -> int:
    """a + b in GF(256)."""
    _check(a, b)
    return a ^ b


def sub(a: int, b: int) -> int:
    """a - b in GF(256). Identical to add."""
    _check(a, b)
    return a ^ b


def mul(a: int, b: int) -> int:
    """a * b in GF(256)."""
    _check(a, b)
    if a == ZERO or b == ZERO:
        return ZERO
    exp, log = tables()
    return exp[(log[a] + log[b]) % ORDER]


def inv(a: int) -> int:
    """
    Multiplicative inverse of a.

    Raises:
        DivisionByZero: If a is zero
    """
    _check(a)
    if a == ZERO:
        raise DivisionByZero("Zero has no multiplicative inverse in GF(256)")
    exp, log = tables()
    return exp[(ORDER - log[a]) % ORDER]


def div(a: int, b: int) -> int:
    """
    a / b in GF(256).

    Raises:
        DivisionByZero: If b is zero
    """
    _check(a, b)
    if b == ZERO:
        raise DivisionByZero(f"Cannot divide {a} by zero in GF(256)")
    return mul(a, inv(b))


def pow(a: int, e: int) -> int:
    """
    a raised to the integer power e.

    By convention pow(a, 0) == 1 for every a, including zero. Negative
    exponents are allowed for nonzero a.

    Raises:
        DivisionByZero: If a is zero and e is negative
    """
    _check(a)
    if not isinstance(e, int):
        raise TypeError(f"Exponent must be an integer, got {type(e).__name__}")
    if e == 0:
        return ONE
    if a == ZERO:
        if e < 0:
            raise DivisionByZero("Zero has no multiplicative inverse in GF(256)")
        return ZERO
    exp, log = tables()
    return exp[(log[a] * e) % ORDER]


def poly_eval(coeffs, x: int) -> int:
    """
    Evaluate a polynomial at x using Horner's method.

    coeffs = [c_0, c_1, ..., c_d] (lowest degree first).
    Returns c_0 + c_1*x + ... + c_d*x^d.
    """
    result = ZERO
    for c in reversed(coeffs):
        result = add(mul(result, x), c)
    return result
