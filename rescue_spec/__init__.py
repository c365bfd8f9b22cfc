"""
Rescue-Prime Python Specification

A Python implementation of the Rescue-Prime algebraic permutation and its
sponge hash, evaluated natively over the BN254 scalar field and as an R1CS
gadget. Both evaluators run one shared round schedule and agree element for
element.

This package provides:
- BN254 scalar field arithmetic (via galois)
- Nothing-up-my-sleeve parameter generation (round constants, MDS matrix)
- Native permutation and sponge
- Constraint system and gadget permutation/sponge

Usage:
    from rescue_spec import Fr, rescue_prime_fixed_length

    digest = rescue_prime_fixed_length([Fr(1), Fr(2)])

    from rescue_spec import ConstraintSystem, Num, rescue_prime_gadget_fixed_length

    cs = ConstraintSystem()
    inputs = [Num.alloc(cs, 1), Num.alloc(cs, 2)]
    outputs = rescue_prime_gadget_fixed_length(cs, inputs)
    assert cs.is_satisfied()
"""

# Field arithmetic (via galois)
from .field import (
    Fr,
    BN254_PRIME,
    fr,
    to_bytes,
    from_bytes,
    from_repr,
)

# Parameters
from .params import (
    ConfigurationError,
    RescueConfig,
    HashParams,
    HasherParams,
    generate_params,
    rescue_prime_params,
    estimate_full_rounds,
    compute_round_constants,
    init_rng_for_rescue,
    init_rng_for_poseidon,
    mds_seed_digest,
    rescue_seed_words,
    poseidon_seed_words,
)

# Padding
from .padding import (
    PaddingStrategy,
    FixedLength,
    VariableLength,
    Custom,
)

# Round schedule
from .rounds import Layer, ROUND_LAYERS, RoundExecutor, apply_rounds

# Native hash
from .rescue_prime import (
    RescuePrimeSponge,
    rescue_prime_round_function,
    rescue_prime_hash,
    rescue_prime_fixed_length,
    rescue_prime_var_length,
    rescue_prime_custom,
)

# Constraint system
from .circuit import (
    ConstraintSystem,
    LinearCombination,
    Num,
    SynthesisError,
    Variable,
)

# Gadget
from .gadget import (
    GadgetParams,
    RescuePrimeGadget,
    rescue_prime_gadget_round_function,
    rescue_prime_gadget,
    rescue_prime_gadget_fixed_length,
    rescue_prime_gadget_var_length,
)

__version__ = "0.1.0"
__all__ = [
    # Field
    "Fr",
    "BN254_PRIME",
    "fr",
    "to_bytes",
    "from_bytes",
    "from_repr",
    # Parameters
    "ConfigurationError",
    "RescueConfig",
    "HashParams",
    "HasherParams",
    "generate_params",
    "rescue_prime_params",
    "estimate_full_rounds",
    "compute_round_constants",
    "init_rng_for_rescue",
    "init_rng_for_poseidon",
    "mds_seed_digest",
    "rescue_seed_words",
    "poseidon_seed_words",
    # Padding
    "PaddingStrategy",
    "FixedLength",
    "VariableLength",
    "Custom",
    # Rounds
    "Layer",
    "ROUND_LAYERS",
    "RoundExecutor",
    "apply_rounds",
    # Native
    "RescuePrimeSponge",
    "rescue_prime_round_function",
    "rescue_prime_hash",
    "rescue_prime_fixed_length",
    "rescue_prime_var_length",
    "rescue_prime_custom",
    # Circuit
    "ConstraintSystem",
    "LinearCombination",
    "Num",
    "SynthesisError",
    "Variable",
    # Gadget
    "GadgetParams",
    "RescuePrimeGadget",
    "rescue_prime_gadget_round_function",
    "rescue_prime_gadget",
    "rescue_prime_gadget_fixed_length",
    "rescue_prime_gadget_var_length",
]
