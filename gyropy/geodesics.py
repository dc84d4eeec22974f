"""Distances, geodesics and tangent space maps on the Poincare ball.

Tangent vectors are plain tensors expressed in the ambient Euclidean
coordinates at their base point; the Riemannian length of a tangent vector v
at x is lambda_x * ||v||.
"""

import torch

from . import _utils, klein, poincare, vector
from ._utils import EPS, MIN_NORM, as_tensor


# =============================================================================
# Distances and geodesics
# =============================================================================


def distance(x, y, keepdim=False):
    """Hyperbolic distance on the Poincare ball.

    Formula: d(x, y) = 2 * artanh(|(-x) (+) y|)

    The Mobius difference is taken before clamping, so inputs on or beyond
    the boundary give +inf instead of a saturated value. Interior results are
    capped at 2 * artanh(1 - BALL_EPS[dtype]).

    Args:
        x, y: torch.tensor of shape (..., dim)
        keepdim: bool, keep the reduced last dimension

    Returns:
        torch.tensor of shape (...) or (..., 1)
    """
    x, y = as_tensor(x), as_tensor(y)
    diff_norm = vector.norm(poincare._mobius_add(-x, y), keepdim=keepdim)
    dist = 2 * torch.atanh(diff_norm.clamp(max=_utils.max_norm(diff_norm.dtype)))
    return torch.where(diff_norm >= 1, torch.full_like(dist, float("inf")), dist)


def pairwise_distance(x, y=None):
    """All pairs of hyperbolic distances.

    Args:
        x: torch.tensor of shape (M, dim)
        y: torch.tensor of shape (N, dim), defaults to x

    Returns:
        torch.tensor of shape (M, N)
    """
    x = as_tensor(x)
    y = x if y is None else as_tensor(y)
    return distance(x.unsqueeze(-2), y.unsqueeze(-3))


def geodesic(x, y, t):
    """Point at fraction t along the geodesic from x to y.

    Formula: gamma(t) = x (+) (t (x) ((-x) (+) y))

    Args:
        x, y: torch.tensor of shape (..., dim)
        t: float, interpolation parameter; t <= 0 returns an exact copy of x
           and t >= 1 an exact copy of y

    Returns:
        torch.tensor of shape (..., dim)
    """
    x, y = as_tensor(x), as_tensor(y)
    if t <= 0:
        return x.clone()
    if t >= 1:
        return y.clone()
    diff = poincare.mobius_add(-x, y)
    return poincare.mobius_add(x, poincare.mobius_scalar_mul(diff, t))


def midpoint(x, y):
    """Hyperbolic midpoint of x and y (geodesic at t = 0.5)."""
    return geodesic(x, y, 0.5)


def einstein_midpoint(points, weights=None):
    """Einstein midpoint: closed-form weighted average of ball points.

    The midpoint is taken in Klein coordinates k_i, weighted by the Lorentz
    factors gamma_i = 1 / sqrt(1 - |k_i|^2):

        m = sum(w_i gamma_i k_i) / sum(w_i gamma_i)

    and mapped back to the Poincare ball. Points on or beyond the boundary are
    skipped. For two points with equal weights the result is the geodesic
    midpoint.

    Args:
        points: torch.tensor of shape (n, dim) - Poincare ball coordinates
        weights: torch.tensor of shape (n,), optional (default: uniform)

    Returns:
        torch.tensor of shape (dim,); the zero vector when the set is empty
        or the total weight is below EPS
    """
    x = as_tensor(points)
    if x.numel() == 0:
        dim = x.shape[-1] if x.dim() > 1 else _utils.DEFAULT_DIM
        return torch.zeros(dim, dtype=x.dtype, device=x.device)
    x = x.reshape(-1, x.shape[-1])

    x2 = vector.norm2(x, keepdim=True)
    inside = x2 < 1
    # In terms of the Poincare norm, gamma(k) = (1 + |p|^2) / (1 - |p|^2)
    gamma = (1 + x2) / (1 - x2).clamp_min(MIN_NORM)
    if weights is not None:
        gamma = gamma * as_tensor(weights).to(x.dtype).reshape(-1, 1)
    gamma = torch.where(inside, gamma, torch.zeros_like(gamma))

    total = gamma.sum()
    if total < EPS:
        return torch.zeros(x.shape[-1], dtype=x.dtype, device=x.device)

    k = klein.from_poincare(torch.where(inside, x, torch.zeros_like(x)))
    mean = (gamma * k).sum(dim=0) / total
    return poincare.project(klein.to_poincare(mean))


# =============================================================================
# Exponential and logarithmic maps
# =============================================================================


def expmap(x, v):
    """Exponential map at x applied to the tangent vector v.

    Formula: exp_x(v) = x (+) (tanh(lambda_x |v| / 2) v / |v|)

    Args:
        x: torch.tensor of shape (..., dim) - base point
        v: torch.tensor of shape (..., dim) - tangent vector at x

    Returns:
        torch.tensor of shape (..., dim); x itself where |v| < EPS
    """
    x, v = as_tensor(x), as_tensor(v)
    v_norm = vector.norm(v, keepdim=True)
    lam = poincare.conformal_factor(x, keepdim=True)
    second_term = torch.tanh(lam * v_norm / 2) * v / v_norm.clamp_min(MIN_NORM)
    out = poincare.mobius_add(x, second_term)
    return torch.where(v_norm < EPS, x, out)


def logmap(x, y):
    """Logarithmic map at x of the point y (inverse of expmap).

    Formula: log_x(y) = (2 / lambda_x) artanh(|u|) u / |u|,  u = (-x) (+) y

    Args:
        x: torch.tensor of shape (..., dim) - base point
        y: torch.tensor of shape (..., dim) - target point

    Returns:
        torch.tensor of shape (..., dim); zero where x and y coincide
    """
    x, y = as_tensor(x), as_tensor(y)
    sub = poincare.mobius_add(-x, y)
    sub_norm = vector.norm(sub, keepdim=True)
    lam = poincare.conformal_factor(x, keepdim=True)
    artanh = torch.atanh(sub_norm.clamp(max=_utils.max_norm(sub.dtype)))
    out = 2 / lam * artanh * sub / sub_norm.clamp_min(MIN_NORM)
    return torch.where(sub_norm < EPS, torch.zeros_like(out), out)


def expmap0(v):
    """Exponential map at the origin: tanh(|v|) v / |v|."""
    v = as_tensor(v)
    return expmap(torch.zeros_like(v), v)


def logmap0(y):
    """Logarithmic map at the origin: artanh(|y|) y / |y|."""
    y = as_tensor(y)
    return logmap(torch.zeros_like(y), y)


def parallel_transport(x, y, v):
    """Parallel transport of the tangent vector v from x to y.

    Formula: PT_{x->y}(v) = (lambda_x / lambda_y) gyr[y, -x](v)

    The Riemannian norm is preserved: lambda_y |PT(v)| = lambda_x |v|.

    Args:
        x: torch.tensor of shape (..., dim) - source point
        y: torch.tensor of shape (..., dim) - target point
        v: torch.tensor of shape (..., dim) - tangent vector at x

    Returns:
        torch.tensor of shape (..., dim) - tangent vector at y
    """
    x, y = as_tensor(x), as_tensor(y)
    ratio = poincare.conformal_factor(x, keepdim=True) / poincare.conformal_factor(
        y, keepdim=True
    )
    return poincare.gyration(y, -x, v) * ratio
