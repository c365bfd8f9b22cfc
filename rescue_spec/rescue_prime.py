"""
Rescue-Prime permutation and sponge hash over Fr.
"""

from typing import List, Optional, Sequence, Union

from .field import Fr, fr, power
from .matrix import mmul_assign
from .padding import Custom, FixedLength, PaddingStrategy, VariableLength
from .params import HasherParams, rescue_prime_params
from .rounds import RoundExecutor, apply_rounds
from .sponge import SpongeMode, SpongeStateMachine


class NativeRoundExecutor(RoundExecutor):
    """Applies round layers to a list of Fr in place."""

    def __init__(self, params: HasherParams, state: List[Fr]):
        self.params = params
        self.state = state

    def sbox(self) -> None:
        alpha = self.params.alpha()
        self.state[:] = [power(x, alpha) for x in self.state]

    def inverse_sbox(self) -> None:
        alpha_inv = self.params.alpha_inv()
        self.state[:] = [power(x, alpha_inv) for x in self.state]

    def mds(self) -> None:
        mmul_assign(self.params.mds_matrix(), self.state)

    def add_constants(self, constants: Sequence[Fr]) -> None:
        self.state[:] = [s + c for s, c in zip(self.state, constants)]


def rescue_prime_round_function(params: HasherParams, state: List[Fr]) -> List[Fr]:
    """
    Apply the Rescue-Prime permutation to `state` in place.

    Args:
        params: Permutation parameters
        state: List of params.state_width field elements

    Returns:
        The same list, permuted
    """
    if len(state) != params.state_width:
        raise ValueError(f"state must have {params.state_width} elements, got {len(state)}")
    apply_rounds(params, NativeRoundExecutor(params, state))
    return state


class RescuePrimeSponge(SpongeStateMachine):
    """
    Stateful Rescue-Prime sponge.

    Inputs are added into the rate slots; the capacity slots are never
    output. A sponge is owned by one caller; call reset() to reuse it.
    """

    def __init__(self, params: Optional[HasherParams] = None):
        self.params = params if params is not None else rescue_prime_params()
        super().__init__(self.params.rate)
        self.state = [Fr(0)] * self.params.state_width

    def reset(self) -> None:
        self.state = [Fr(0)] * self.params.state_width
        self._reset_cursors()

    def _permute(self) -> None:
        rescue_prime_round_function(self.params, self.state)

    def permute(self) -> None:
        self._permute()

    def specialize(self, strategy: PaddingStrategy) -> None:
        """Write the strategy's domain value into the first capacity slot."""
        if self.mode is not SpongeMode.IDLE:
            raise ValueError("specialize must be called before absorbing")
        self.state[self.params.rate] = strategy.capacity_value()

    def absorb(self, x: Union[int, Fr]) -> None:
        slot = self._next_absorb_slot()
        self.state[slot] = self.state[slot] + fr(x)
        self._absorbed()

    def absorb_multi(self, xs: Sequence[Union[int, Fr]]) -> None:
        for x in xs:
            self.absorb(x)

    def pad(self) -> None:
        """Zero-fill the current block up to the rate."""
        for _ in range(self._padding_needed()):
            self.absorb(Fr(0))

    def squeeze(self) -> Fr:
        slot = self._next_squeeze_slot()
        return self.state[slot]

    def squeeze_multi(self, n: int) -> List[Fr]:
        return [self.squeeze() for _ in range(n)]


def _generic_hash(
    inputs: Sequence[Union[int, Fr]],
    strategy: PaddingStrategy,
    params: Optional[HasherParams] = None,
) -> List[Fr]:
    sponge = RescuePrimeSponge(params)
    sponge.specialize(strategy)
    sponge.absorb_multi(inputs)
    sponge.pad()
    return sponge.squeeze_multi(sponge.params.rate)


def rescue_prime_fixed_length(inputs, params: Optional[HasherParams] = None) -> List[Fr]:
    """Hash inputs whose length is known in advance; returns `rate` elements."""
    return _generic_hash(inputs, FixedLength(len(inputs)), params)


def rescue_prime_var_length(inputs, params: Optional[HasherParams] = None) -> List[Fr]:
    """Hash inputs whose length is supplied at call time; returns `rate` elements."""
    return _generic_hash(inputs, VariableLength(len(inputs)), params)


def rescue_prime_custom(inputs, tag: Optional[int] = None,
                        params: Optional[HasherParams] = None) -> List[Fr]:
    """Hash under a caller-defined capacity tag (defaults to the input length)."""
    return _generic_hash(inputs, Custom(len(inputs) if tag is None else tag), params)


def rescue_prime_hash(inputs: Sequence[Union[int, Fr]],
                      params: Optional[HasherParams] = None) -> List[Fr]:
    """
    Single-call hash returning the full permuted state.

    The inputs are loaded into a zero state, element i added into slot
    i mod state_width, and the state is permuted once. All state_width
    elements are returned; for an all-zero input this is the permutation of
    the zero state.
    """
    params = params if params is not None else rescue_prime_params()
    state = [Fr(0)] * params.state_width
    for i, x in enumerate(inputs):
        slot = i % params.state_width
        state[slot] = state[slot] + fr(x)
    return rescue_prime_round_function(params, state)
