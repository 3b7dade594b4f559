"""
Closed-form ridge regression on the normal equations.

Kept dependency-free of any library solver: the inverse is computed by
Gauss-Jordan elimination with partial pivoting so singular systems are
detected explicitly instead of producing garbage weights.
"""

import logging
from typing import Optional, Sequence, Union
import numpy as np

logger = logging.getLogger(__name__)

RIDGE_LAMBDA = 1e-3
PIVOT_EPSILON = 1e-12

ArrayLike = Union[np.ndarray, Sequence[Sequence[float]]]


def transpose(A: np.ndarray) -> np.ndarray:
    return np.ascontiguousarray(np.asarray(A, dtype=float).T)


def mat_mul(A: np.ndarray, B: np.ndarray) -> np.ndarray:
    A = np.asarray(A, dtype=float)
    B = np.asarray(B, dtype=float)
    if A.shape[1] != B.shape[0]:
        raise ValueError(f"Shape mismatch: {A.shape} x {B.shape}")
    return A @ B


def invert_matrix(A: ArrayLike, eps: float = PIVOT_EPSILON) -> Optional[np.ndarray]:
    """
    Invert a square matrix by Gauss-Jordan elimination.

    At each step the row with the largest absolute value in the pivot column
    is swapped into place. Returns None if that value is below eps.
    """
    M = np.array(A, dtype=float)
    n = M.shape[0]
    if M.ndim != 2 or M.shape[1] != n:
        raise ValueError(f"Expected a square matrix, got shape {M.shape}")
    inv = np.eye(n)

    for i in range(n):
        piv = i + int(np.argmax(np.abs(M[i:, i])))
        if abs(M[piv, i]) < eps:
            logger.debug(f"Singular matrix: pivot {i} magnitude {abs(M[piv, i]):.3e}")
            return None
        if piv != i:
            M[[i, piv]] = M[[piv, i]]
            inv[[i, piv]] = inv[[piv, i]]

        div = M[i, i]
        M[i] /= div
        inv[i] /= div

        for r in range(n):
            if r != i:
                factor = M[r, i]
                if factor != 0.0:
                    M[r] -= factor * M[i]
                    inv[r] -= factor * inv[i]

    return inv


def ridge_solve(X: ArrayLike, y: Sequence[float], lam: float = RIDGE_LAMBDA) -> Optional[np.ndarray]:
    """
    Fit weights = (X^T X + lam*I)^-1 X^T y.

    Args:
        X: Design matrix (n_samples, p), first column all ones
        y: Target vector (n_samples,)
        lam: L2 penalty added to the diagonal

    Returns:
        Weight vector of length p, or None for empty or degenerate input
    """
    X = np.asarray(X, dtype=float)
    y = np.asarray(y, dtype=float)
    if X.size == 0 or X.ndim != 2:
        return None
    if X.shape[0] != y.shape[0]:
        raise ValueError(f"X has {X.shape[0]} rows but y has {y.shape[0]}")

    Xt = transpose(X)
    XtX = mat_mul(Xt, X)
    XtX[np.diag_indices_from(XtX)] += lam

    inv = invert_matrix(XtX)
    if inv is None:
        return None

    Xty = mat_mul(Xt, y.reshape(-1, 1))
    return mat_mul(inv, Xty).ravel()
