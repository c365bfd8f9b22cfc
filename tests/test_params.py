"""Tests for parameter generation and the MDS matrix."""

from itertools import combinations

import numpy as np
import pytest

from rescue_spec.field import BN254_PRIME, Fr
from rescue_spec.matrix import determinant, is_mds, mmul, scalar_product
from rescue_spec.params import (
    MDS_TAG,
    ROUND_CONSTANTS_TAG,
    ConfigurationError,
    HasherParams,
    RescueConfig,
    compute_round_constants,
    estimate_full_rounds,
    generate_params,
    init_rng_for_poseidon,
    init_rng_for_rescue,
    mds_seed_digest,
    poseidon_seed_words,
    rescue_prime_params,
    rescue_seed_words,
)
from rescue_spec.rounds import CONSTANT_LAYERS_PER_ROUND, apply_rounds, RoundExecutor


class TestRoundCount:
    """Round-count estimate from the security level."""

    def test_default_instance_has_nine_rounds(self) -> None:
        """Width 3, rate 2, alpha 5 at 80 bits needs 9 full rounds."""
        assert estimate_full_rounds(80, 3, 2, 5) == 9
        assert RescueConfig().number_of_full_rounds() == 9

    def test_more_security_never_fewer_rounds(self) -> None:
        assert estimate_full_rounds(128, 3, 2, 5) >= estimate_full_rounds(80, 3, 2, 5)

    def test_minimum_is_enforced(self) -> None:
        """Tiny security targets still get ceil(1.5 * 5) rounds."""
        assert estimate_full_rounds(1, 3, 2, 5) == 8

    def test_explicit_full_rounds_wins(self) -> None:
        assert RescueConfig(full_rounds=4).number_of_full_rounds() == 4


class TestRoundConstants:
    """Nothing-up-my-sleeve round constants."""

    def test_count_matches_round_function(self, params) -> None:
        """One row per constants layer the round loop executes."""
        expected = CONSTANT_LAYERS_PER_ROUND * params.number_of_rounds()
        assert len(params.round_constants()) == expected
        assert expected == 2 * (params.number_of_full_rounds() - 1)
        for row in params.round_constants():
            assert len(row) == params.state_width

    def test_constants_are_canonical_and_nonzero(self, params) -> None:
        for row in params.round_constants():
            for c in row:
                assert 0 < int(c) < BN254_PRIME

    def test_deterministic(self) -> None:
        a = compute_round_constants(ROUND_CONSTANTS_TAG, 12)
        b = compute_round_constants(ROUND_CONSTANTS_TAG, 12)
        assert [int(x) for x in a] == [int(x) for x in b]

    def test_prefix_stable(self) -> None:
        """Asking for more constants extends the sequence without changing it."""
        short = compute_round_constants(ROUND_CONSTANTS_TAG, 5)
        long = compute_round_constants(ROUND_CONSTANTS_TAG, 10)
        assert [int(x) for x in short] == [int(x) for x in long[:5]]

    def test_tag_separates_domains(self) -> None:
        a = compute_round_constants(b"Rescue_f", 4)
        b = compute_round_constants(b"Rescue_g", 4)
        assert [int(x) for x in a] != [int(x) for x in b]

    def test_constants_are_distinct(self) -> None:
        constants = [int(x) for x in compute_round_constants(ROUND_CONSTANTS_TAG, 48)]
        assert len(set(constants)) == 48


class TestMdsMatrix:
    """MDS matrix construction and validation."""

    def test_shape(self, params) -> None:
        matrix = params.mds_matrix()
        assert len(matrix) == params.state_width
        assert all(len(row) == params.state_width for row in matrix)

    def test_every_square_submatrix_invertible(self, params) -> None:
        """Check all 1x1, 2x2 and 3x3 minors directly."""
        matrix = params.mds_matrix()
        n = len(matrix)
        for size in range(1, n + 1):
            for rows in combinations(range(n), size):
                for cols in combinations(range(n), size):
                    sub = [[matrix[r][c] for c in cols] for r in rows]
                    assert int(determinant(sub)) != 0

    def test_is_mds_rejects_singular(self) -> None:
        assert not is_mds([[Fr(1), Fr(1)], [Fr(1), Fr(1)]])

    def test_is_mds_rejects_zero_entry(self) -> None:
        assert not is_mds([[Fr(0), Fr(1)], [Fr(1), Fr(2)]])

    def test_is_mds_rejects_non_square(self) -> None:
        assert not is_mds([[Fr(1), Fr(2)]])

    def test_rescue_seed_repeats_leading_window(self) -> None:
        """The Rescue layout seeds every word from the same four bytes."""
        digest = mds_seed_digest(MDS_TAG)
        assert rescue_seed_words(digest) == [int.from_bytes(digest[0:4], "big")] * 8

    def test_poseidon_seed_reads_sequential_words(self) -> None:
        digest = mds_seed_digest(MDS_TAG)
        expected = [int.from_bytes(digest[4 * i:4 * i + 4], "big") for i in range(8)]
        assert poseidon_seed_words(digest) == expected

    def test_seed_layouts_share_first_word_only(self) -> None:
        digest = bytes(range(32))
        rescue = rescue_seed_words(digest)
        poseidon = poseidon_seed_words(digest)
        assert rescue[0] == poseidon[0] == 0x00010203
        assert rescue[1:] == [0x00010203] * 7
        assert poseidon[1:] == [0x04050607, 0x08090A0B, 0x0C0D0E0F, 0x10111213,
                                0x14151617, 0x18191A1B, 0x1C1D1E1F]

    def test_rng_follows_seed_words(self) -> None:
        digest = mds_seed_digest(MDS_TAG)
        a = init_rng_for_rescue(MDS_TAG).integers(0, 1 << 32, 8)
        b = np.random.default_rng(rescue_seed_words(digest)).integers(0, 1 << 32, 8)
        assert list(a) == list(b)
        c = init_rng_for_poseidon(MDS_TAG).integers(0, 1 << 32, 8)
        d = np.random.default_rng(poseidon_seed_words(digest)).integers(0, 1 << 32, 8)
        assert list(c) == list(d)

    def test_seed_layouts_give_different_matrices(self) -> None:
        rescue = generate_params(RescueConfig(full_rounds=2))
        poseidon = generate_params(RescueConfig(full_rounds=2, mds_seed_layout="poseidon"))
        assert rescue.to_dict()["mds_matrix"] != poseidon.to_dict()["mds_matrix"]
        assert is_mds(poseidon.mds_matrix())

    def test_poseidon_rng_is_deterministic(self) -> None:
        a = init_rng_for_poseidon().integers(0, 1 << 32, 4)
        b = init_rng_for_poseidon().integers(0, 1 << 32, 4)
        assert list(a) == list(b)

    def test_wider_state(self) -> None:
        p = generate_params(RescueConfig(rate=3, state_width=4, full_rounds=3))
        assert is_mds(p.mds_matrix())
        assert len(p.round_constants()) == 4


class TestLinearAlgebra:
    """Scalar and matrix-vector products."""

    def test_scalar_product(self) -> None:
        assert scalar_product([Fr(1), Fr(2), Fr(3)], [Fr(4), Fr(5), Fr(6)]) == Fr(32)

    def test_scalar_product_length_mismatch(self) -> None:
        with pytest.raises(ValueError):
            scalar_product([Fr(1)], [Fr(1), Fr(2)])

    def test_mmul(self) -> None:
        m = [[Fr(1), Fr(2)], [Fr(3), Fr(4)]]
        assert mmul(m, [Fr(5), Fr(6)]) == [Fr(17), Fr(39)]

    def test_determinant(self) -> None:
        m = [[Fr(2), Fr(0), Fr(1)], [Fr(1), Fr(3), Fr(2)], [Fr(1), Fr(1), Fr(2)]]
        assert determinant(m) == Fr(6)

    def test_determinant_single_entry(self) -> None:
        assert int(determinant([[Fr(9)]])) == 9
        assert int(determinant([[Fr(0)]])) == 0

    def test_determinant_larger_matrices(self) -> None:
        triangular = [
            [Fr(2), Fr(7), Fr(1), Fr(8)],
            [Fr(0), Fr(3), Fr(4), Fr(1)],
            [Fr(0), Fr(0), Fr(4), Fr(6)],
            [Fr(0), Fr(0), Fr(0), Fr(5)],
        ]
        assert int(determinant(triangular)) == 120
        singular = [list(row) for row in triangular]
        singular[3] = list(singular[0])
        assert int(determinant(singular)) == 0


class TestHasherParams:
    """Construction, equality and validation."""

    def test_idempotent_construction(self) -> None:
        config = RescueConfig()
        assert generate_params(config) == generate_params(config)

    def test_memoized_default_matches_generated(self, params) -> None:
        assert rescue_prime_params() is rescue_prime_params()
        assert params == generate_params(RescueConfig())

    def test_alpha_inv_inverts_alpha(self, params) -> None:
        assert (params.alpha() * params.alpha_inv()) % (BN254_PRIME - 1) == 1

    def test_accessors(self, params) -> None:
        assert params.rate == 2
        assert params.state_width == 3
        assert params.capacity == 1
        assert params.security_level == 80
        assert params.number_of_full_rounds() == 9
        assert params.number_of_partial_rounds() == 0
        assert params.alpha() == 5

    def test_to_dict_is_plain_integers(self, params) -> None:
        data = params.to_dict()
        assert all(isinstance(c, int) for row in data["round_constants"] for c in row)
        assert data["full_rounds"] == 9

    def test_wrong_row_count_rejected(self, params) -> None:
        rows = list(params.round_constants())[:-1]
        with pytest.raises(ConfigurationError):
            HasherParams(params.config, rows, params.mds_matrix())

    def test_wrong_matrix_shape_rejected(self, params) -> None:
        with pytest.raises(ConfigurationError):
            HasherParams(params.config, params.round_constants(), params.mds_matrix()[:2])


class TestConfiguration:
    """Degenerate configurations fail fast."""

    @pytest.mark.parametrize("kwargs", [
        {"rate": 0},
        {"state_width": 0},
        {"rate": 3, "state_width": 3},
        {"full_rounds": 0},
        {"full_rounds": 1},
        {"alpha": 3},
        {"alpha": 1},
        {"security_level": 0},
        {"partial_rounds": -1},
        {"round_constants_tag": b"short"},
        {"mds_tag": b"much_too_long"},
        {"mds_seed_layout": "other"},
    ])
    def test_invalid_config(self, kwargs) -> None:
        with pytest.raises(ConfigurationError):
            RescueConfig(**kwargs)

    def test_configuration_error_is_value_error(self) -> None:
        with pytest.raises(ValueError):
            RescueConfig(rate=0)

    def test_short_constants_table_rejected_by_round_function(self, params) -> None:
        """A params object whose table is shorter than the schedule fails before permuting."""

        class Truncated(HasherParams):
            def round_constants(self):
                return super().round_constants()[:-1]

        truncated = Truncated(params.config, params.round_constants(), params.mds_matrix())

        class Recorder(RoundExecutor):
            calls = 0

            def sbox(self):
                Recorder.calls += 1

            def inverse_sbox(self):
                Recorder.calls += 1

            def mds(self):
                Recorder.calls += 1

            def add_constants(self, constants):
                Recorder.calls += 1

        with pytest.raises(ConfigurationError):
            apply_rounds(truncated, Recorder())
        assert Recorder.calls == 0
