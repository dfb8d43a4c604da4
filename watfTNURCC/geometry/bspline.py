"""
Single B-spline basis function evaluation on a local knot vector.

A T-spline basis function is a tensor product of two univariate B-splines,
each defined by its own local knot vector:

    B_i(s, t) = N[S_i](s) * N[T_i](t)

Unlike a global knot vector, where all p+1 non-zero functions at a point are
wanted together, here exactly one function N_{0,p} is evaluated. It follows
the Cox-de Boor recursion on the p+2 local knots:

    N_{j,0}(xi) = 1 if u_j <= xi < u_{j+1}, else 0

    N_{j,q}(xi) = (xi - u_j)/(u_{j+q} - u_j) * N_{j,q-1}(xi)
                + (u_{j+q+1} - xi)/(u_{j+q+1} - u_{j+1}) * N_{j+1,q-1}(xi)

with the convention 0/0 = 0 for repeated knots.
"""

import numpy as np

from .knot_vector import LocalKnotVector


def eval_local_basis(kv: LocalKnotVector, xi: float) -> float:
    """
    Evaluate the basis function of a local knot vector at xi.

    Parameters:
        kv: Local knot vector (p+2 knots)
        xi: Parameter value

    Returns:
        N_{0,p}(xi), zero outside [knots[0], knots[-1])
    """
    u = kv.knots
    p = kv.degree

    if xi < u[0] or xi >= u[-1]:
        return 0.0

    # Degree 0
    N = np.array([1.0 if u[j] <= xi < u[j + 1] else 0.0 for j in range(p + 1)])

    # Build up to degree p; N[j] holds N_{j,q}
    for q in range(1, p + 1):
        for j in range(p + 1 - q):
            left_den = u[j + q] - u[j]
            right_den = u[j + q + 1] - u[j + 1]

            left = (xi - u[j]) / left_den * N[j] if left_den > 0.0 else 0.0
            right = (u[j + q + 1] - xi) / right_den * N[j + 1] if right_den > 0.0 else 0.0
            N[j] = left + right

    return float(N[0])


def eval_local_basis_array(kv: LocalKnotVector, xi: np.ndarray) -> np.ndarray:
    """
    Evaluate the basis function of a local knot vector at several values.

    Parameters:
        kv: Local knot vector
        xi: Parameter values, any shape

    Returns:
        Array of the same shape as xi
    """
    xi = np.asarray(xi, dtype=np.float64)
    flat = np.array([eval_local_basis(kv, x) for x in xi.ravel()])
    return flat.reshape(xi.shape)
