"""
Shared round-function description.

The Rescue-Prime round is written once as an ordered list of layers. Each
substrate (native field elements, circuit linear combinations) supplies a
RoundExecutor that knows how to apply a single layer to its own state, and
apply_rounds drives any executor through the same schedule.

Example:
    executor = NativeRoundExecutor(params, state)
    apply_rounds(params, executor)
"""

from abc import ABC, abstractmethod
from enum import Enum
from typing import Sequence

from .params import ConfigurationError, HashParams


class Layer(Enum):
    SBOX = "sbox"
    MDS = "mds"
    CONSTANTS = "constants"
    INVERSE_SBOX = "inverse_sbox"


# One round: x^alpha, MDS, constants, x^(1/alpha), MDS, constants
ROUND_LAYERS = (
    Layer.SBOX,
    Layer.MDS,
    Layer.CONSTANTS,
    Layer.INVERSE_SBOX,
    Layer.MDS,
    Layer.CONSTANTS,
)

CONSTANT_LAYERS_PER_ROUND = sum(1 for layer in ROUND_LAYERS if layer is Layer.CONSTANTS)


class RoundExecutor(ABC):
    """Applies individual round layers to a substrate-specific state."""

    @abstractmethod
    def sbox(self) -> None:
        """Replace every state element x with x^alpha."""
        pass

    @abstractmethod
    def inverse_sbox(self) -> None:
        """Replace every state element x with x^alpha_inv."""
        pass

    @abstractmethod
    def mds(self) -> None:
        """Multiply the state by the MDS matrix."""
        pass

    @abstractmethod
    def add_constants(self, constants: Sequence) -> None:
        """Add a round-constant row element-wise."""
        pass


def apply_rounds(params: HashParams, executor: RoundExecutor) -> None:
    """
    Run the full permutation schedule on an executor.

    Executes params.number_of_rounds() iterations of ROUND_LAYERS; the k-th
    constants layer of iteration r consumes row CONSTANT_LAYERS_PER_ROUND * r + k.

    Raises:
        ConfigurationError: If the constants table is shorter than the schedule
    """
    n_rounds = params.number_of_rounds()
    needed = CONSTANT_LAYERS_PER_ROUND * n_rounds
    available = len(params.round_constants())
    if available < needed:
        raise ConfigurationError(
            f"round function consumes {needed} constant rows, only {available} available"
        )

    row = 0
    for _ in range(n_rounds):
        for layer in ROUND_LAYERS:
            if layer is Layer.SBOX:
                executor.sbox()
            elif layer is Layer.INVERSE_SBOX:
                executor.inverse_sbox()
            elif layer is Layer.MDS:
                executor.mds()
            else:
                executor.add_constants(params.constants_of_round(row))
                row += 1
