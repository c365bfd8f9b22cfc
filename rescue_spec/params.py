"""
Rescue-Prime parameters and their nothing-up-my-sleeve generation.

Round constants and the MDS matrix are derived deterministically from fixed
8-byte domain tags through BLAKE2s, so anyone can audit that they hide no
trapdoor. Generation is a pure function of a RescueConfig; the result is
immutable and safe to share between hash invocations.
"""

import hashlib
import math
from abc import ABC, abstractmethod
from dataclasses import dataclass
from functools import lru_cache
from typing import Dict, List, Optional, Sequence, Tuple

import numpy as np

from .field import BN254_PRIME, Fr, from_repr, is_zero
from .matrix import Matrix, construct_mds_matrix, is_mds

# First block fed to every tagged BLAKE2s instance
GH_FIRST_BLOCK = b"096b36a5804bfacef1691e173c366a47ff5ba84a44f26ddd7e8d9f79d5b42df0"

ROUND_CONSTANTS_TAG = b"Rescue_f"
MDS_TAG = b"ResM0003"

SEED_LAYOUTS = ("rescue", "poseidon")


class ConfigurationError(ValueError):
    """Raised when a permutation configuration has no defined security."""


@dataclass(frozen=True)
class RescueConfig:
    """
    Rescue-Prime configuration.

    full_rounds=None derives the round count from security_level.
    """
    rate: int = 2  # Elements absorbed/squeezed per permutation
    state_width: int = 3  # rate + capacity
    security_level: int = 80  # Target bits of security
    alpha: int = 5  # Forward S-box exponent
    full_rounds: Optional[int] = None
    partial_rounds: int = 0  # Reserved, unused by Rescue-Prime
    round_constants_tag: bytes = ROUND_CONSTANTS_TAG
    mds_tag: bytes = MDS_TAG
    mds_seed_layout: str = "rescue"

    def __post_init__(self):
        if self.rate <= 0:
            raise ConfigurationError(f"rate must be positive, got {self.rate}")
        if self.state_width <= 0:
            raise ConfigurationError(f"state_width must be positive, got {self.state_width}")
        if self.rate >= self.state_width:
            raise ConfigurationError(
                f"rate ({self.rate}) must leave at least one capacity element "
                f"in state_width ({self.state_width})"
            )
        if self.full_rounds is not None and self.full_rounds < 2:
            raise ConfigurationError(f"full_rounds must be at least 2, got {self.full_rounds}")
        if self.partial_rounds < 0:
            raise ConfigurationError(f"partial_rounds must be non-negative, got {self.partial_rounds}")
        if self.security_level <= 0:
            raise ConfigurationError(f"security_level must be positive, got {self.security_level}")
        if self.alpha < 3 or math.gcd(self.alpha, BN254_PRIME - 1) != 1:
            raise ConfigurationError(f"alpha={self.alpha} is not a permutation exponent of Fr")
        for name in ("round_constants_tag", "mds_tag"):
            tag = getattr(self, name)
            if len(tag) != 8:
                raise ConfigurationError(f"{name} must be 8 bytes, got {len(tag)}")
        if self.mds_seed_layout not in SEED_LAYOUTS:
            raise ConfigurationError(
                f"mds_seed_layout must be one of {SEED_LAYOUTS}, got {self.mds_seed_layout!r}"
            )

    @property
    def capacity(self) -> int:
        return self.state_width - self.rate

    def number_of_full_rounds(self) -> int:
        if self.full_rounds is not None:
            return self.full_rounds
        return estimate_full_rounds(self.security_level, self.state_width, self.rate, self.alpha)


def estimate_full_rounds(security_level: int, state_width: int, rate: int, alpha: int) -> int:
    """
    Round count from the Rescue-Prime Groebner-basis bound.

    Finds the smallest l1 for which the squared binomial complexity exceeds
    2^security_level, then applies the 50% margin and the floor of 5.
    """
    target = 1 << security_level

    def dcon(n: int) -> int:
        return (alpha - 1) * state_width * (n - 1) // 2 + 2

    def v(n: int) -> int:
        return state_width * (n - 1) + rate

    l1 = 1
    for l1 in range(1, 25):
        if math.comb(v(l1) + dcon(l1), v(l1)) ** 2 > target:
            break

    return math.ceil(1.5 * max(5, l1))


# --- Capability ---

class HashParams(ABC):
    """Accessor contract shared by the native and circuit parameter sets."""

    rate: int
    state_width: int
    capacity: int
    security_level: int

    @abstractmethod
    def number_of_full_rounds(self) -> int:
        pass

    @abstractmethod
    def number_of_partial_rounds(self) -> int:
        pass

    def number_of_rounds(self) -> int:
        """Iterations executed by the round loop."""
        return self.number_of_full_rounds() - 1

    @abstractmethod
    def constants_of_round(self, index: int) -> Sequence:
        """Round-constant row `index`, consumed by one constants layer."""
        pass

    @abstractmethod
    def round_constants(self) -> Sequence[Sequence]:
        pass

    @abstractmethod
    def mds_matrix(self) -> Matrix:
        pass

    @abstractmethod
    def alpha(self) -> int:
        pass

    @abstractmethod
    def alpha_inv(self) -> int:
        pass


class HasherParams(HashParams):
    """
    Native Rescue-Prime parameters over Fr.

    Holds 2 * (full_rounds - 1) round-constant rows, one per constants layer
    the round loop executes.
    """

    def __init__(
        self,
        config: RescueConfig,
        round_constants: Sequence[Sequence[Fr]],
        mds_matrix: Sequence[Sequence[Fr]],
    ):
        self.config = config
        self.rate = config.rate
        self.state_width = config.state_width
        self.capacity = config.capacity
        self.security_level = config.security_level
        self.full_rounds = config.number_of_full_rounds()
        self.partial_rounds = config.partial_rounds

        width = self.state_width
        expected_rows = 2 * (self.full_rounds - 1)
        if len(round_constants) != expected_rows:
            raise ConfigurationError(
                f"expected {expected_rows} round-constant rows, got {len(round_constants)}"
            )
        if any(len(row) != width for row in round_constants):
            raise ConfigurationError(f"round-constant rows must have {width} elements")
        if len(mds_matrix) != width or any(len(row) != width for row in mds_matrix):
            raise ConfigurationError(f"MDS matrix must be {width}x{width}")

        self._round_constants = tuple(tuple(row) for row in round_constants)
        self._mds_matrix = tuple(tuple(row) for row in mds_matrix)
        self._alpha = config.alpha
        # Inverse S-box exponent: alpha^-1 mod (p - 1)
        self._alpha_inv = pow(config.alpha, -1, BN254_PRIME - 1)

    def number_of_full_rounds(self) -> int:
        return self.full_rounds

    def number_of_partial_rounds(self) -> int:
        return self.partial_rounds

    def constants_of_round(self, index: int) -> Tuple[Fr, ...]:
        return self._round_constants[index]

    def round_constants(self) -> Tuple[Tuple[Fr, ...], ...]:
        return self._round_constants

    def mds_matrix(self) -> Matrix:
        return self._mds_matrix

    def alpha(self) -> int:
        return self._alpha

    def alpha_inv(self) -> int:
        return self._alpha_inv

    def to_dict(self) -> Dict:
        """Plain-integer view, suitable for JSON export and comparison."""
        return {
            "rate": self.rate,
            "state_width": self.state_width,
            "capacity": self.capacity,
            "security_level": self.security_level,
            "full_rounds": self.full_rounds,
            "partial_rounds": self.partial_rounds,
            "alpha": self._alpha,
            "alpha_inv": self._alpha_inv,
            "round_constants": [[int(c) for c in row] for row in self._round_constants],
            "mds_matrix": [[int(c) for c in row] for row in self._mds_matrix],
        }

    def __eq__(self, other) -> bool:
        if not isinstance(other, HasherParams):
            return NotImplemented
        return self.to_dict() == other.to_dict()

    def __hash__(self):
        return hash((self.config, self.full_rounds))

    def __repr__(self) -> str:
        return (
            f"HasherParams(rate={self.rate}, state_width={self.state_width}, "
            f"full_rounds={self.full_rounds}, alpha={self._alpha})"
        )


# --- Generation ---

def _tagged_digest(tag: bytes, *chunks: bytes) -> bytes:
    h = hashlib.blake2s(person=tag)
    h.update(GH_FIRST_BLOCK)
    for chunk in chunks:
        h.update(chunk)
    return h.digest()


def compute_round_constants(tag: bytes, count: int) -> List[Fr]:
    """
    Derive `count` non-zero field elements from a domain tag.

    For nonce = 0, 1, 2, ... hashes GH_FIRST_BLOCK || nonce (u32 big-endian)
    under the tag and keeps the digest when its big-endian value is a
    canonical non-zero field element. Rejected digests are skipped, never
    truncated.
    """
    constants = []
    nonce = 0
    while len(constants) < count:
        digest = _tagged_digest(tag, nonce.to_bytes(4, "big"))
        constant = from_repr(digest, "big")
        if constant is not None and not is_zero(constant):
            constants.append(constant)
        nonce += 1
    return constants


def mds_seed_digest(tag: bytes = MDS_TAG) -> bytes:
    """32-byte digest the MDS generator seed is cut from."""
    return _tagged_digest(tag)


def rescue_seed_words(digest: bytes) -> List[int]:
    """Eight seed words, each re-reading the leading four bytes (big-endian)."""
    return [int.from_bytes(digest[0:4], "big") for _ in range(8)]


def poseidon_seed_words(digest: bytes) -> List[int]:
    """Eight sequential four-byte big-endian words of the digest."""
    return [int.from_bytes(digest[i:i + 4], "big") for i in range(0, 32, 4)]


def init_rng_for_rescue(tag: bytes = MDS_TAG) -> np.random.Generator:
    """Seed the MDS generator with the Rescue layout."""
    return np.random.default_rng(rescue_seed_words(mds_seed_digest(tag)))


def init_rng_for_poseidon(tag: bytes = MDS_TAG) -> np.random.Generator:
    """Seed the MDS generator with the Poseidon layout."""
    return np.random.default_rng(poseidon_seed_words(mds_seed_digest(tag)))


_SEED_PROCEDURES = {
    "rescue": init_rng_for_rescue,
    "poseidon": init_rng_for_poseidon,
}


def compute_mds_matrix(config: RescueConfig) -> Matrix:
    """Build and validate the MDS matrix for a configuration."""
    rng = _SEED_PROCEDURES[config.mds_seed_layout](config.mds_tag)
    matrix = construct_mds_matrix(config.state_width, rng)
    if not is_mds(matrix):
        raise ConfigurationError("generated diffusion matrix is not MDS")
    return matrix


def generate_params(config: RescueConfig) -> HasherParams:
    """
    Derive HasherParams from a configuration.

    Pure function: identical configurations give equal parameters.
    """
    width = config.state_width
    n_rows = 2 * (config.number_of_full_rounds() - 1)
    flat = compute_round_constants(config.round_constants_tag, n_rows * width)
    round_constants = [flat[i * width:(i + 1) * width] for i in range(n_rows)]
    return HasherParams(config, round_constants, compute_mds_matrix(config))


@lru_cache(maxsize=None)
def rescue_prime_params(rate: int = 2, state_width: int = 3, security_level: int = 80) -> HasherParams:
    """Memoized parameters for the default Rescue-Prime instance."""
    return generate_params(RescueConfig(rate=rate, state_width=state_width, security_level=security_level))
