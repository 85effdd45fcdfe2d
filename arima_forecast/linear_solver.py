"""
Dense linear system solver shared by the AR and MA estimators.
"""

import logging
import numpy as np
from typing import Sequence


logger = logging.getLogger(__name__)

# Pivots smaller than this are treated as zero
PIVOT_TOLERANCE = 1e-12


def solve_linear_system(A: Sequence[Sequence[float]], b: Sequence[float]) -> np.ndarray:
    """
    Solve Ax = b by Gaussian elimination with partial pivoting.

    At each column the row with the largest absolute pivot is swapped into
    place (the first such row wins ties). A pivot below PIVOT_TOLERANCE marks
    the column as singular: no elimination is done for it and back
    substitution assigns 0 to that unknown. Singular systems therefore never
    raise; they resolve the undetermined unknowns to 0.

    The inputs are copied, never modified.

    Args:
        A: Square coefficient matrix (n x n)
        b: Right-hand side vector (n)

    Returns:
        np.ndarray: Solution vector x of length n

    Raises:
        ValueError: If A is not square or b does not match its size

    Examples:
        >>> solve_linear_system([[2.0, 1.0], [1.0, 3.0]], [3.0, 5.0])
        array([0.8, 1.4])
        >>> solve_linear_system([[1.0, 1.0], [1.0, 1.0]], [2.0, 2.0])
        array([2., 0.])
    """
    A = np.array(A, dtype=np.float64)
    b = np.array(b, dtype=np.float64)
    n = b.shape[0] if b.ndim == 1 else -1

    if n == 0:
        return np.zeros(0)

    if A.shape != (n, n):
        error_msg = f"Expected a square {n}x{n} matrix for a right-hand side of length {n}, got shape {A.shape}"
        logger.error(error_msg)
        raise ValueError(error_msg)

    augmented = np.column_stack([A, b])

    for col in range(n):
        max_row = col + int(np.argmax(np.abs(augmented[col:, col])))
        if max_row != col:
            augmented[[col, max_row]] = augmented[[max_row, col]]

        pivot = augmented[col, col]
        if abs(pivot) < PIVOT_TOLERANCE:
            continue

        for row in range(col + 1, n):
            factor = augmented[row, col] / pivot
            augmented[row, col:] -= factor * augmented[col, col:]

    x = np.zeros(n)
    for i in range(n - 1, -1, -1):
        total = augmented[i, n] - np.dot(augmented[i, i + 1:n], x[i + 1:])
        x[i] = total / augmented[i, i] if abs(augmented[i, i]) > PIVOT_TOLERANCE else 0.0
    return x
