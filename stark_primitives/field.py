"""Prime field GF(p) with p = 3 * 2^30 + 1 and generator g = 5.

FieldElement is the scalar value type used for Merkle leaves and polynomial
coefficients. Its arithmetic is computed directly on Python ints and reduced
after every operation. FF is the same field as a galois class, used for bulk
conversion to and from arrays.
"""

import operator
from typing import Iterable, List

import galois

# --- Field Constants ---

PRIME = 3 * 2**30 + 1
GENERATOR = 5

FF = galois.GF(PRIME)
"""Vectorized GF(p) array class."""


# --- Field Element ---


class FieldElement:
    """Element of GF(PRIME).

    The residue is stored fully reduced in [0, PRIME). Instances are
    immutable: every operation returns a new element. Plain ints are accepted
    on either side of the binary operators and are reduced into the field.
    Comparison with a plain int matches only the reduced residue, consistent
    with hashing.
    """

    __slots__ = ('_value',)

    def __init__(self, value: int = 0):
        if isinstance(value, FieldElement):
            value = value.value
        # floats and strings raise TypeError
        self._value = operator.index(value) % PRIME

    @property
    def value(self) -> int:
        return self._value

    # --- Constructors ---

    @staticmethod
    def zero() -> 'FieldElement':
        return FieldElement(0)

    @staticmethod
    def one() -> 'FieldElement':
        return FieldElement(1)

    @staticmethod
    def generator() -> 'FieldElement':
        return FieldElement(GENERATOR)

    @staticmethod
    def random_element() -> 'FieldElement':
        """Return an element drawn uniformly from [0, PRIME)."""
        return FieldElement(int(FF.Random()))

    @staticmethod
    def get_prime() -> int:
        return PRIME

    @staticmethod
    def get_generator() -> int:
        return GENERATOR

    # --- Arithmetic ---

    def __add__(self, other):
        other = _coerce(other)
        if other is None:
            return NotImplemented
        return FieldElement(self._value + other._value)

    __radd__ = __add__

    def __sub__(self, other):
        other = _coerce(other)
        if other is None:
            return NotImplemented
        if self._value < other._value:
            return FieldElement(PRIME + self._value - other._value)
        return FieldElement(self._value - other._value)

    def __rsub__(self, other):
        other = _coerce(other)
        if other is None:
            return NotImplemented
        return other - self

    def __mul__(self, other):
        other = _coerce(other)
        if other is None:
            return NotImplemented
        return FieldElement(self._value * other._value)

    __rmul__ = __mul__

    def __truediv__(self, other):
        other = _coerce(other)
        if other is None:
            return NotImplemented
        return self * other.inverse()

    def __rtruediv__(self, other):
        other = _coerce(other)
        if other is None:
            return NotImplemented
        return other * self.inverse()

    def __neg__(self):
        return FieldElement.zero() - self

    def __pow__(self, exponent):
        if isinstance(exponent, FieldElement):
            exponent = exponent.value
        if not isinstance(exponent, int):
            return NotImplemented
        return self.pow(exponent)

    def pow(self, exponent: int) -> 'FieldElement':
        """Raise to `exponent` by square-and-multiply.

        Takes O(log exponent) modular multiplications. A negative exponent
        raises the inverse, so it fails for zero like `inverse` does.
        """
        if exponent < 0:
            return self.inverse().pow(-exponent)
        base = self._value
        result = 1
        while exponent > 0:
            if exponent & 1:
                result = result * base % PRIME
            base = base * base % PRIME
            exponent >>= 1
        return FieldElement(result)

    def inverse(self) -> 'FieldElement':
        """Multiplicative inverse via Fermat's little theorem: a^(p-2) mod p.

        Raises:
            ZeroDivisionError: If this element is zero.
        """
        if self._value == 0:
            raise ZeroDivisionError("Cannot compute inverse of zero")
        return self.pow(PRIME - 2)

    def is_order(self, n: int) -> bool:
        """Check whether `n` is exactly the multiplicative order of this element.

        True iff self^n == 1 and self^i != 1 for every divisor i of n with
        2 <= i < n. The divisor scan is exhaustive, so the cost grows linearly
        with n; use it for small orders only.

        Raises:
            ValueError: If n < 1.
        """
        if n < 1:
            raise ValueError(f"order must be >= 1, got {n}")
        one = FieldElement.one()
        if self.pow(n) != one:
            return False
        for i in range(2, n):
            if n % i == 0 and self.pow(i) == one:
                return False
        return True

    # --- Comparison and Conversion ---

    def __eq__(self, other):
        if isinstance(other, FieldElement):
            return self._value == other._value
        if isinstance(other, int):
            return self._value == other
        return NotImplemented

    def __hash__(self):
        return hash(self._value)

    def __int__(self):
        return self._value

    def __bool__(self):
        return self._value != 0

    def __str__(self):
        return str(self._value)

    def __repr__(self):
        return f"FieldElement({self._value})"


def _coerce(other):
    """Promote an int operand; None marks an unsupported type."""
    if isinstance(other, FieldElement):
        return other
    if isinstance(other, int):
        return FieldElement(other)
    return None


# --- Roots of Unity ---


def get_root_of_unity(order: int) -> FieldElement:
    """Get an element of multiplicative order exactly `order`.

    Args:
        order: Desired order, must divide PRIME - 1 = 3 * 2^30

    Returns:
        GENERATOR^((PRIME - 1) / order)
    """
    if order < 1 or (PRIME - 1) % order != 0:
        raise ValueError(f"order must divide {PRIME - 1}, got {order}")
    return FieldElement.generator().pow((PRIME - 1) // order)


# --- galois Conversion ---


def to_ff(elements: Iterable[FieldElement]) -> FF:
    """Pack field elements into an FF array."""
    return FF([int(e) for e in elements])


def from_ff(array: FF) -> List[FieldElement]:
    """Unpack an FF array into field elements."""
    return [FieldElement(int(x)) for x in array]
