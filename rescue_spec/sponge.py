"""
Sponge absorb/squeeze state machine.

The mode and cursors are tracked here once; the native and gadget sponges
subclass it and supply the permutation. Extra positional arguments given to
the cursor helpers (the constraint system, for the gadget) are forwarded to
_permute.

    IDLE --absorb--> ABSORBING --squeeze--> SQUEEZING --absorb--> ABSORBING
"""

from abc import ABC, abstractmethod
from enum import Enum


class SpongeMode(Enum):
    IDLE = "idle"
    ABSORBING = "absorbing"
    SQUEEZING = "squeezing"


class SpongeStateMachine(ABC):
    """
    Mode and cursor bookkeeping for a sponge of a given rate.

    Attributes:
        mode: Current SpongeMode
        absorb_pos: Rate slots filled since the last permutation
        squeeze_pos: Rate slots read since the last permutation
    """

    def __init__(self, rate: int):
        if rate <= 0:
            raise ValueError(f"rate must be positive, got {rate}")
        self.rate = rate
        self._reset_cursors()

    def _reset_cursors(self) -> None:
        self.mode = SpongeMode.IDLE
        self.absorb_pos = 0
        self.squeeze_pos = 0

    @abstractmethod
    def _permute(self, *ctx) -> None:
        pass

    def _next_absorb_slot(self) -> int:
        """Return the rate slot the next input goes into."""
        if self.mode is not SpongeMode.ABSORBING:
            self.mode = SpongeMode.ABSORBING
            self.absorb_pos = 0
        slot = self.absorb_pos
        self.absorb_pos += 1
        return slot

    def _absorbed(self, *ctx) -> None:
        """Permute once every rate slot has been filled."""
        if self.absorb_pos == self.rate:
            self._permute(*ctx)
            self.absorb_pos = 0

    def _next_squeeze_slot(self, *ctx) -> int:
        """Return the rate slot to read next, permuting first when needed."""
        if self.mode is SpongeMode.IDLE:
            self._permute(*ctx)
        elif self.mode is SpongeMode.ABSORBING and self.absorb_pos > 0:
            # Partial block; the unfilled slots are implicitly zero
            self._permute(*ctx)

        if self.mode is not SpongeMode.SQUEEZING:
            self.mode = SpongeMode.SQUEEZING
            self.squeeze_pos = 0
        elif self.squeeze_pos == self.rate:
            self._permute(*ctx)
            self.squeeze_pos = 0

        slot = self.squeeze_pos
        self.squeeze_pos += 1
        return slot

    def _padding_needed(self) -> int:
        """Zero elements needed to complete the current block."""
        if self.mode is not SpongeMode.ABSORBING or self.absorb_pos == 0:
            return 0
        return self.rate - self.absorb_pos
