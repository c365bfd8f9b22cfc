"""
Rank-1 constraint system over Fr.

A ConstraintSystem allocates witnessed variables and records constraints of
the form <a, w> * <b, w> = <c, w>, where a, b, c are LinearCombinations of
variables plus a constant term. Linear combinations are free; only
multiplications cost a constraint.

Example:
    cs = ConstraintSystem()
    x = Num.alloc(cs, 3)
    y = Num.alloc(cs, 9)
    cs.enforce(x.lc(), x.lc(), y.lc(), "x^2 = y")
    assert cs.is_satisfied()
"""

from dataclasses import dataclass
from typing import Dict, List, Optional, Tuple, Union

from .field import Fr, fr


class SynthesisError(RuntimeError):
    """Raised when the constraint system cannot complete synthesis."""


@dataclass(frozen=True)
class Variable:
    """Handle to an allocated witness."""
    index: int


class LinearCombination:
    """Sum of coeff * variable terms plus a constant."""

    def __init__(self, terms: Optional[Dict[int, Fr]] = None, constant: Optional[Fr] = None):
        self.terms: Dict[int, Fr] = {}
        for index, coeff in (terms or {}).items():
            if int(coeff) != 0:
                self.terms[index] = coeff
        self.constant = Fr(0) if constant is None else fr(constant)

    @classmethod
    def zero(cls) -> "LinearCombination":
        return cls()

    @classmethod
    def from_constant(cls, value: Union[int, Fr]) -> "LinearCombination":
        return cls(constant=fr(value))

    @classmethod
    def from_variable(cls, var: Variable, coeff: Union[int, Fr] = 1) -> "LinearCombination":
        return cls({var.index: fr(coeff)})

    def is_constant(self) -> bool:
        return not self.terms

    def copy(self) -> "LinearCombination":
        return LinearCombination(self.terms, self.constant)

    def add_assign_constant(self, value: Union[int, Fr]) -> None:
        self.constant = self.constant + fr(value)

    def add_assign_variable_with_coeff(self, var: Variable, coeff: Union[int, Fr]) -> None:
        updated = self.terms.get(var.index, Fr(0)) + fr(coeff)
        if int(updated) == 0:
            self.terms.pop(var.index, None)
        else:
            self.terms[var.index] = updated

    def add_assign_scaled(self, other: "LinearCombination", coeff: Union[int, Fr]) -> None:
        """self += coeff * other"""
        coeff = fr(coeff)
        for index, c in other.terms.items():
            self.add_assign_variable_with_coeff(Variable(index), c * coeff)
        self.constant = self.constant + other.constant * coeff

    def scaled(self, coeff: Union[int, Fr]) -> "LinearCombination":
        out = LinearCombination.zero()
        out.add_assign_scaled(self, coeff)
        return out

    def __add__(self, other: "LinearCombination") -> "LinearCombination":
        out = self.copy()
        out.add_assign_scaled(other, 1)
        return out

    def __sub__(self, other: "LinearCombination") -> "LinearCombination":
        out = self.copy()
        out.add_assign_scaled(other, -1)
        return out

    def get_value(self, cs: "ConstraintSystem") -> Fr:
        acc = self.constant
        for index, coeff in self.terms.items():
            acc = acc + coeff * cs.value(Variable(index))
        return acc

    def __repr__(self) -> str:
        terms = " + ".join(f"{int(c)}*w{i}" for i, c in sorted(self.terms.items()))
        return f"LC({terms or '0'} + {int(self.constant)})"


class Num:
    """Either a circuit constant or an allocated variable with its value."""

    def __init__(self, value: Union[int, Fr], variable: Optional[Variable] = None):
        self.value = fr(value)
        self.variable = variable

    @classmethod
    def constant(cls, value: Union[int, Fr]) -> "Num":
        return cls(value)

    @classmethod
    def alloc(cls, cs: "ConstraintSystem", value: Optional[Union[int, Fr]],
              annotation: str = "") -> "Num":
        var = cs.alloc(value, annotation)
        return cls(cs.value(var), var)

    def is_constant(self) -> bool:
        return self.variable is None

    def get_value(self) -> Fr:
        return self.value

    def lc(self) -> "LinearCombination":
        if self.variable is None:
            return LinearCombination.from_constant(self.value)
        return LinearCombination.from_variable(self.variable)

    @classmethod
    def from_lc(cls, cs: "ConstraintSystem", lc: "LinearCombination",
                annotation: str = "") -> "Num":
        """
        Collapse a linear combination into a Num.

        Constant combinations stay constants; otherwise a new variable is
        allocated and bound to the combination with one constraint.
        """
        if lc.is_constant():
            return cls.constant(lc.constant)
        if len(lc.terms) == 1 and int(lc.constant) == 0:
            (index, coeff), = lc.terms.items()
            if int(coeff) == 1:
                var = Variable(index)
                return cls(cs.value(var), var)
        num = cls.alloc(cs, lc.get_value(cs), annotation)
        cs.enforce_equal(lc, num.lc(), annotation)
        return num

    def __repr__(self) -> str:
        if self.variable is None:
            return f"Num.constant({int(self.value)})"
        return f"Num(w{self.variable.index}={int(self.value)})"


Constraint = Tuple[LinearCombination, LinearCombination, LinearCombination, str]


class ConstraintSystem:
    """
    Witness assignment and R1CS constraints.

    Attributes:
        constraints: List of (a, b, c, annotation) with a * b = c
        max_variables: Optional allocation budget; exceeding it fails synthesis
    """

    def __init__(self, max_variables: Optional[int] = None):
        self.max_variables = max_variables
        self._values: List[Fr] = []
        self._annotations: List[str] = []
        self.constraints: List[Constraint] = []

    @property
    def num_variables(self) -> int:
        return len(self._values)

    @property
    def num_constraints(self) -> int:
        return len(self.constraints)

    def alloc(self, value: Optional[Union[int, Fr]], annotation: str = "") -> Variable:
        """
        Allocate a witnessed variable.

        Raises:
            SynthesisError: If the assignment is missing or the budget is exhausted
        """
        if value is None:
            raise SynthesisError(f"assignment missing for variable {annotation!r}")
        if self.max_variables is not None and len(self._values) >= self.max_variables:
            raise SynthesisError(f"variable limit of {self.max_variables} reached")
        self._values.append(fr(value))
        self._annotations.append(annotation)
        return Variable(len(self._values) - 1)

    def value(self, var: Variable) -> Fr:
        if not 0 <= var.index < len(self._values):
            raise SynthesisError(f"unknown variable w{var.index}")
        return self._values[var.index]

    def enforce(self, a: LinearCombination, b: LinearCombination, c: LinearCombination,
                annotation: str = "") -> None:
        """Record the constraint a * b = c."""
        self.constraints.append((a.copy(), b.copy(), c.copy(), annotation))

    def enforce_equal(self, a: LinearCombination, b: LinearCombination,
                      annotation: str = "") -> None:
        """Record a = b as (a - b) * 1 = 0."""
        self.enforce(a - b, LinearCombination.from_constant(1), LinearCombination.zero(), annotation)

    def is_satisfied(self, verbose: bool = True) -> bool:
        """Check every constraint against the current assignment."""
        for i, (a, b, c, annotation) in enumerate(self.constraints):
            if a.get_value(self) * b.get_value(self) != c.get_value(self):
                if verbose:
                    print(f"ERROR: constraint {i} ({annotation}) is not satisfied")
                return False
        return True
