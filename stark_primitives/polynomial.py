"""Polynomials over GF(p) with FieldElement coefficients.

Coefficients are stored least-significant first with trailing zeros removed,
so [1, 1, 0, 0, 2] is 1 + X + 2*X^4 and the zero polynomial is [].
"""

from itertools import zip_longest
from typing import Iterable, List

import galois

from stark_primitives.field import FF, FieldElement


def _trim_trailing_zeros(coeffs: List[FieldElement]) -> List[FieldElement]:
    end = len(coeffs)
    while end > 0 and coeffs[end - 1] == 0:
        end -= 1
    return coeffs[:end]


class Polynomial:
    """Dense univariate polynomial in the variable `var`."""

    def __init__(self, coeffs: Iterable = (), var: str = "X"):
        coeffs = [c if isinstance(c, FieldElement) else FieldElement(c) for c in coeffs]
        self.coeffs = _trim_trailing_zeros(coeffs)
        self.var = var

    @staticmethod
    def X() -> 'Polynomial':
        """The monomial X."""
        return Polynomial([0, 1])

    @staticmethod
    def _lift(other):
        """Treat ints and FieldElements as constant polynomials; None if unsupported."""
        if isinstance(other, Polynomial):
            return other
        if isinstance(other, (int, FieldElement)):
            return Polynomial([other])
        return None

    def degree(self) -> int:
        """Degree of the polynomial, -1 for the zero polynomial."""
        return len(self.coeffs) - 1

    def leading_coefficient(self) -> FieldElement:
        return self.coeffs[-1] if self.coeffs else FieldElement.zero()

    # --- Arithmetic ---

    def __add__(self, other):
        other = self._lift(other)
        if other is None:
            return NotImplemented
        zero = FieldElement.zero()
        return Polynomial(
            [a + b for a, b in zip_longest(self.coeffs, other.coeffs, fillvalue=zero)], self.var
        )

    __radd__ = __add__

    def __sub__(self, other):
        other = self._lift(other)
        if other is None:
            return NotImplemented
        zero = FieldElement.zero()
        return Polynomial(
            [a - b for a, b in zip_longest(self.coeffs, other.coeffs, fillvalue=zero)], self.var
        )

    def __rsub__(self, other):
        other = self._lift(other)
        if other is None:
            return NotImplemented
        return other - self

    def __neg__(self):
        return Polynomial([-c for c in self.coeffs], self.var)

    def __mul__(self, other):
        other = self._lift(other)
        if other is None:
            return NotImplemented
        if not self.coeffs or not other.coeffs:
            return Polynomial([], self.var)
        result = [FieldElement.zero()] * (len(self.coeffs) + len(other.coeffs) - 1)
        for i, a in enumerate(self.coeffs):
            for j, b in enumerate(other.coeffs):
                result[i + j] = result[i + j] + a * b
        return Polynomial(result, self.var)

    __rmul__ = __mul__

    def __pow__(self, exponent: int) -> 'Polynomial':
        if exponent < 0:
            raise ValueError(f"polynomial exponent must be >= 0, got {exponent}")
        result = Polynomial([1], self.var)
        base = self
        while exponent > 0:
            if exponent & 1:
                result = result * base
            base = base * base
            exponent >>= 1
        return result

    def compose(self, other) -> 'Polynomial':
        """Return self(other).

        With f = X^2 + X and g = X + 1, f.compose(g) = X^2 + 3*X + 2.
        """
        other = self._lift(other)
        result = Polynomial([], self.var)
        for coeff in reversed(self.coeffs):
            result = result * other + coeff
        return result

    def eval(self, point) -> FieldElement:
        """Evaluate at a field point using Horner's rule."""
        if not isinstance(point, FieldElement):
            point = FieldElement(point)
        result = FieldElement.zero()
        for coeff in reversed(self.coeffs):
            result = result * point + coeff
        return result

    def __call__(self, point) -> FieldElement:
        return self.eval(point)

    # --- Comparison and Conversion ---

    def __eq__(self, other):
        other = self._lift(other)
        if other is None:
            return NotImplemented
        return self.coeffs == other.coeffs

    def to_galois(self) -> galois.Poly:
        """Convert to a galois polynomial over FF (descending coefficient order)."""
        if not self.coeffs:
            return galois.Poly.Zero(field=FF)
        return galois.Poly([c.value for c in reversed(self.coeffs)], field=FF)

    @classmethod
    def from_galois(cls, poly: galois.Poly) -> 'Polynomial':
        return cls([int(c) for c in poly.coeffs[::-1]])

    def __str__(self):
        if not self.coeffs:
            return "0"
        terms = []
        for power, coeff in enumerate(self.coeffs):
            if coeff == 0:
                continue
            if power == 0:
                terms.append(str(coeff))
            elif power == 1:
                terms.append(self.var if coeff == 1 else f"{coeff}*{self.var}")
            else:
                terms.append(f"{self.var}^{power}" if coeff == 1 else f"{coeff}*{self.var}^{power}")
        return " + ".join(terms)

    def __repr__(self):
        return f"Polynomial({[c.value for c in self.coeffs]})"
