"""
Sponge padding strategies.

Every strategy zero-pads the absorbed stream to a multiple of the rate; they
differ only in the value written to the capacity element before absorption,
which separates the domains of otherwise identical padded inputs.
"""

from dataclasses import dataclass
from typing import ClassVar

from .field import Fr, fr


@dataclass(frozen=True)
class PaddingStrategy:
    """Base strategy; `value` is a length or a caller-defined tag."""
    value: int

    DOMAIN_OFFSET: ClassVar[int] = 0

    def __post_init__(self):
        if self.value < 0:
            raise ValueError(f"{type(self).__name__} value must be non-negative, got {self.value}")

    def capacity_value(self) -> Fr:
        """Field element placed in the first capacity slot."""
        return fr(self.DOMAIN_OFFSET + self.value)

    def padding_length(self, n_inputs: int, rate: int) -> int:
        """Number of zero elements appended after n_inputs."""
        return (-n_inputs) % rate


class FixedLength(PaddingStrategy):
    """Input length known in advance."""
    DOMAIN_OFFSET = 1 << 64


class VariableLength(PaddingStrategy):
    """Input length supplied at call time."""
    DOMAIN_OFFSET = 1 << 65


class Custom(PaddingStrategy):
    """Caller-defined domain tag written to the capacity element as is."""
    DOMAIN_OFFSET = 0
