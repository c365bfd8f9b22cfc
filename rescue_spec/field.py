"""
BN254 scalar field using galois library.

This module provides a thin wrapper around galois for the scalar field of the
BN254 curve, plus the canonical byte encoding used when deriving parameters.
"""

from typing import Optional, Union

import galois
import numpy as np

# BN254 scalar field modulus (254 bits)
BN254_PRIME = 21888242871839275222246405745257275088548364400416034343698204186575808495617

# Byte length of a canonical field representation
REPR_SIZE = 32

# Multiplicative generator is known, so galois does not need to factor p - 1
Fr = galois.GF(BN254_PRIME, primitive_element=5, verify=False)


def fr(value: Union[int, "Fr"]) -> "Fr":
    """Coerce an integer or field scalar into Fr, reducing integers mod p."""
    if isinstance(value, Fr):
        return value
    return Fr(int(value) % BN254_PRIME)


def power(x: "Fr", exponent: int) -> "Fr":
    """
    Compute x^exponent for a non-negative integer exponent.

    Large exponents (the inverse S-box) go through Python's modular pow
    rather than galois' array power.
    """
    return Fr(pow(int(x), exponent, BN254_PRIME))


def is_zero(x: "Fr") -> bool:
    return int(x) == 0


def to_bytes(x: "Fr", byteorder: str = "big") -> bytes:
    """Canonical 32-byte representation of a field element."""
    return int(x).to_bytes(REPR_SIZE, byteorder)


def from_repr(data: bytes, byteorder: str = "big") -> Optional["Fr"]:
    """
    Decode a 32-byte representation, returning None if it is not canonical.

    A representation is canonical when the integer it encodes is below the
    field modulus.
    """
    if len(data) != REPR_SIZE:
        raise ValueError(f"representation must be {REPR_SIZE} bytes, got {len(data)}")
    value = int.from_bytes(data, byteorder)
    if value >= BN254_PRIME:
        return None
    return Fr(value)


def from_bytes(data: bytes, byteorder: str = "big") -> "Fr":
    """Decode a 32-byte representation, raising ValueError if not canonical."""
    x = from_repr(data, byteorder)
    if x is None:
        raise ValueError("representation exceeds the field modulus")
    return x


def random_element(rng: np.random.Generator) -> "Fr":
    """
    Draw a uniformly random field element from a numpy Generator.

    Rejection-samples 32-byte strings so that the output depends only on the
    generator's state.
    """
    while True:
        x = from_repr(rng.bytes(REPR_SIZE))
        if x is not None:
            return x
