"""
Rescue-Prime permutation and sponge as a circuit gadget.

The gadget runs the same round schedule as the native permutation
(rounds.apply_rounds) over LinearCombinations. S-box layers witness their
results and enforce them with multiplication constraints; MDS and constant
layers are linear and cost nothing.

Constraint cost per non-constant state element and S-box, for alpha = 5:
x^5 needs x^2, x^4, x^5 (3 constraints); the inverse S-box witnesses
y = x^(1/5) and checks y^5 = x with the same 3 constraints.
"""

from typing import List, Optional, Sequence, Tuple, Union

from .circuit import ConstraintSystem, LinearCombination, Num, SynthesisError, Variable
from .field import Fr, power
from .padding import Custom, FixedLength, PaddingStrategy, VariableLength
from .params import HashParams, HasherParams, rescue_prime_params
from .rounds import RoundExecutor, apply_rounds
from .sponge import SpongeMode, SpongeStateMachine

GadgetInput = Union[Num, LinearCombination, Variable, int, Fr]


class GadgetParams(HashParams):
    """
    Circuit view of HasherParams.

    Round constants are exposed as constant LinearCombinations holding the
    same field values as the native parameters; nothing is re-derived.
    """

    def __init__(self, params: HasherParams):
        self.native = params
        self.rate = params.rate
        self.state_width = params.state_width
        self.capacity = params.capacity
        self.security_level = params.security_level
        self._round_constants = tuple(
            tuple(LinearCombination.from_constant(c) for c in row)
            for row in params.round_constants()
        )

    def number_of_full_rounds(self) -> int:
        return self.native.number_of_full_rounds()

    def number_of_partial_rounds(self) -> int:
        return self.native.number_of_partial_rounds()

    def constants_of_round(self, index: int) -> Tuple[LinearCombination, ...]:
        return self._round_constants[index]

    def round_constants(self) -> Tuple[Tuple[LinearCombination, ...], ...]:
        return self._round_constants

    def mds_matrix(self):
        # Coefficients stay field scalars; they scale linear combinations
        return self.native.mds_matrix()

    def alpha(self) -> int:
        return self.native.alpha()

    def alpha_inv(self) -> int:
        return self.native.alpha_inv()


# --- S-boxes ---

def _power_schedule(exponent: int) -> List[str]:
    """Left-to-right square-and-multiply steps after loading the base."""
    steps = []
    for bit in bin(exponent)[3:]:
        steps.append("square")
        if bit == "1":
            steps.append("mul")
    return steps


def _mul(cs: ConstraintSystem, a: LinearCombination, b: LinearCombination,
         annotation: str) -> LinearCombination:
    """Witness a * b as a new variable."""
    out = cs.alloc(a.get_value(cs) * b.get_value(cs), annotation)
    result = LinearCombination.from_variable(out)
    cs.enforce(a, b, result, annotation)
    return result


def enforce_power(cs: ConstraintSystem, base: LinearCombination, exponent: int,
                  target: Optional[LinearCombination] = None,
                  annotation: str = "pow") -> LinearCombination:
    """
    Constrain base^exponent through a square-and-multiply chain.

    Every intermediate product is witnessed. When `target` is given, the last
    multiplication is enforced to equal it instead of allocating a result.

    Returns:
        The combination equal to base^exponent (target, if given)
    """
    steps = _power_schedule(exponent)
    if not steps:
        raise ValueError(f"exponent must be at least 2, got {exponent}")

    acc = base
    for i, step in enumerate(steps):
        other = acc if step == "square" else base
        label = f"{annotation}/{i}"
        if target is not None and i == len(steps) - 1:
            cs.enforce(acc, other, target, label)
            return target
        acc = _mul(cs, acc, other, label)
    return acc


def sbox_alpha(cs: ConstraintSystem, alpha: int, state: List[LinearCombination]) -> None:
    """Forward S-box: state[i] <- state[i]^alpha."""
    for i, lc in enumerate(state):
        if lc.is_constant():
            state[i] = LinearCombination.from_constant(power(lc.constant, alpha))
        else:
            state[i] = enforce_power(cs, lc, alpha, annotation=f"sbox[{i}]")


def sbox_alpha_inv(cs: ConstraintSystem, alpha: int, alpha_inv: int,
                   state: List[LinearCombination]) -> None:
    """Inverse S-box: witness y = x^alpha_inv and enforce y^alpha = x."""
    for i, lc in enumerate(state):
        if lc.is_constant():
            state[i] = LinearCombination.from_constant(power(lc.constant, alpha_inv))
            continue
        y = cs.alloc(power(lc.get_value(cs), alpha_inv), f"inv_sbox[{i}]")
        y_lc = LinearCombination.from_variable(y)
        enforce_power(cs, y_lc, alpha, target=lc, annotation=f"inv_sbox[{i}]")
        state[i] = y_lc


def matrix_vector_product(matrix, vector: Sequence[LinearCombination]) -> List[LinearCombination]:
    """MDS layer on linear combinations; adds no constraints."""
    result = []
    for row in matrix:
        acc = LinearCombination.zero()
        for coeff, lc in zip(row, vector):
            acc.add_assign_scaled(lc, coeff)
        result.append(acc)
    return result


class GadgetRoundExecutor(RoundExecutor):
    """Applies round layers to a list of LinearCombinations."""

    def __init__(self, cs: ConstraintSystem, params: GadgetParams, state: List[LinearCombination]):
        self.cs = cs
        self.params = params
        self.state = state

    def sbox(self) -> None:
        sbox_alpha(self.cs, self.params.alpha(), self.state)

    def inverse_sbox(self) -> None:
        sbox_alpha_inv(self.cs, self.params.alpha(), self.params.alpha_inv(), self.state)

    def mds(self) -> None:
        self.state[:] = matrix_vector_product(self.params.mds_matrix(), self.state)

    def add_constants(self, constants: Sequence[LinearCombination]) -> None:
        self.state[:] = [s + c for s, c in zip(self.state, constants)]


def rescue_prime_gadget_round_function(cs: ConstraintSystem, params: GadgetParams,
                                       state: List[LinearCombination]) -> List[LinearCombination]:
    """Apply the Rescue-Prime permutation to a circuit state in place."""
    if len(state) != params.state_width:
        raise SynthesisError(f"state must have {params.state_width} elements, got {len(state)}")
    apply_rounds(params, GadgetRoundExecutor(cs, params, state))
    return state


# --- Sponge ---

def _as_lc(cs: ConstraintSystem, x: GadgetInput) -> LinearCombination:
    """Wrap a gadget input; plain values are allocated as witnesses first."""
    if isinstance(x, LinearCombination):
        return x
    if isinstance(x, Num):
        return x.lc()
    if isinstance(x, Variable):
        return LinearCombination.from_variable(x)
    return Num.alloc(cs, x, "input").lc()


class RescuePrimeGadget(SpongeStateMachine):
    """
    Circuit counterpart of RescuePrimeSponge.

    Follows the same mode transitions, so squeezed values equal the native
    sponge's outputs for the same inputs and padding strategy.
    """

    def __init__(self, params: Optional[HasherParams] = None):
        native = params if params is not None else rescue_prime_params()
        self.params = GadgetParams(native)
        super().__init__(self.params.rate)
        self.state = [LinearCombination.zero() for _ in range(self.params.state_width)]

    def reset(self) -> None:
        self.state = [LinearCombination.zero() for _ in range(self.params.state_width)]
        self._reset_cursors()

    def _permute(self, cs: ConstraintSystem) -> None:
        rescue_prime_gadget_round_function(cs, self.params, self.state)

    def permute(self, cs: ConstraintSystem) -> None:
        self._permute(cs)

    def specialize(self, cs: ConstraintSystem, strategy: PaddingStrategy,
                   length: Optional[Num] = None) -> None:
        """
        Write the strategy's domain value into the first capacity slot.

        For VariableLength, `length` may be a circuit Num; the capacity is
        then computed in-circuit as the domain offset plus that value.
        """
        if self.mode is not SpongeMode.IDLE:
            raise ValueError("specialize must be called before absorbing")
        if length is not None:
            if not isinstance(strategy, VariableLength):
                raise ValueError("a circuit length is only meaningful for VariableLength")
            if length.get_value() != Fr(strategy.value):
                raise SynthesisError("circuit length does not match the declared length")
            capacity = length.lc()
            capacity.add_assign_constant(strategy.DOMAIN_OFFSET)
        else:
            capacity = LinearCombination.from_constant(strategy.capacity_value())
        self.state[self.params.rate] = capacity

    def absorb(self, cs: ConstraintSystem, x: GadgetInput) -> None:
        lc = _as_lc(cs, x)
        slot = self._next_absorb_slot()
        self.state[slot] = self.state[slot] + lc
        self._absorbed(cs)

    def absorb_multi(self, cs: ConstraintSystem, xs: Sequence[GadgetInput]) -> None:
        for x in xs:
            self.absorb(cs, x)

    def pad(self, cs: ConstraintSystem) -> None:
        """Zero-fill the current block with circuit constants."""
        for _ in range(self._padding_needed()):
            self.absorb(cs, LinearCombination.zero())

    def squeeze(self, cs: ConstraintSystem) -> Num:
        slot = self._next_squeeze_slot(cs)
        return Num.from_lc(cs, self.state[slot], f"squeeze[{slot}]")

    def squeeze_multi(self, cs: ConstraintSystem, n: int) -> List[Num]:
        return [self.squeeze(cs) for _ in range(n)]


def _generic_hash_gadget(cs: ConstraintSystem, inputs: Sequence[GadgetInput],
                         strategy: PaddingStrategy, params: Optional[HasherParams] = None,
                         length: Optional[Num] = None) -> List[Num]:
    gadget = RescuePrimeGadget(params)
    gadget.specialize(cs, strategy, length)
    gadget.absorb_multi(cs, inputs)
    gadget.pad(cs)
    return gadget.squeeze_multi(cs, gadget.params.rate)


def rescue_prime_gadget_fixed_length(cs: ConstraintSystem, inputs: Sequence[GadgetInput],
                                     params: Optional[HasherParams] = None) -> List[Num]:
    return _generic_hash_gadget(cs, inputs, FixedLength(len(inputs)), params)


def rescue_prime_gadget_var_length(cs: ConstraintSystem, inputs: Sequence[GadgetInput],
                                   params: Optional[HasherParams] = None,
                                   length: Optional[Num] = None) -> List[Num]:
    """Variable-length hash; `length` optionally carries the length as a circuit value."""
    return _generic_hash_gadget(cs, inputs, VariableLength(len(inputs)), params, length)


def rescue_prime_gadget(cs: ConstraintSystem, inputs: Sequence[GadgetInput],
                        tag: Optional[int] = None,
                        params: Optional[HasherParams] = None) -> List[Num]:
    """Hash under a caller-defined capacity tag (defaults to the input length)."""
    return _generic_hash_gadget(cs, inputs, Custom(len(inputs) if tag is None else tag), params)
