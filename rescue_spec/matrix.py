"""
Linear algebra over Fr for the permutation's diffusion layer.

Matrices are tuples of rows; vectors are sequences of Fr scalars.
"""

from itertools import combinations
from typing import List, Sequence, Tuple

import numpy as np

from .field import Fr, random_element

Matrix = Tuple[Tuple[Fr, ...], ...]


def scalar_product(a: Sequence[Fr], b: Sequence[Fr]) -> Fr:
    """Compute sum(a[i] * b[i])."""
    if len(a) != len(b):
        raise ValueError(f"length mismatch: {len(a)} != {len(b)}")
    acc = Fr(0)
    for x, y in zip(a, b):
        acc = acc + x * y
    return acc


def mmul(matrix: Sequence[Sequence[Fr]], vector: Sequence[Fr]) -> List[Fr]:
    """Matrix-vector product: result[i] = sum_j matrix[i][j] * vector[j]."""
    return [scalar_product(row, vector) for row in matrix]


def mmul_assign(matrix: Sequence[Sequence[Fr]], vector: List[Fr]) -> None:
    """Multiply matrix by vector and write the result back into vector."""
    vector[:] = mmul(matrix, vector)


def construct_mds_matrix(width: int, rng: np.random.Generator) -> Matrix:
    """
    Build a width x width Cauchy matrix M[i][j] = 1 / (x_i - y_j).

    Every square submatrix of a Cauchy matrix is itself a Cauchy matrix and
    therefore non-singular, so the result is MDS whenever the 2 * width
    sampled points are pairwise distinct. Points are resampled from `rng`
    until they are.

    Args:
        width: Matrix dimension (state width)
        rng: Deterministic entropy source

    Returns:
        Matrix as a tuple of rows
    """
    if width <= 0:
        raise ValueError(f"width must be positive, got {width}")

    while True:
        points = [random_element(rng) for _ in range(2 * width)]
        if len({int(p) for p in points}) == 2 * width:
            break

    xs, ys = points[:width], points[width:]
    return tuple(
        tuple((x - y) ** -1 for y in ys)
        for x in xs
    )


def determinant(matrix: Sequence[Sequence[Fr]]) -> Fr:
    """Determinant over Fr, computed by galois' np.linalg.det."""
    return np.linalg.det(Fr([[int(x) for x in row] for row in matrix]))


def is_mds(matrix: Sequence[Sequence[Fr]]) -> bool:
    """Check that every square submatrix is invertible."""
    n = len(matrix)
    if any(len(row) != n for row in matrix):
        return False

    for size in range(1, n + 1):
        for row_idx in combinations(range(n), size):
            for col_idx in combinations(range(n), size):
                sub = [[matrix[r][c] for c in col_idx] for r in row_idx]
                if int(determinant(sub)) == 0:
                    return False
    return True
