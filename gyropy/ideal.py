"""Busemann functions and horocycles for ideal points of the Poincare ball.

An ideal point xi is a unit vector on the boundary sphere. It is never a valid
interior point and is only consumed by the functions in this module.
"""

import torch

from . import _utils, poincare, vector
from ._utils import MIN_NORM, as_tensor


def busemann(x, xi, keepdim=False):
    """Busemann function B_xi(x) in the Poincare ball.

    Formula: B_xi(x) = log((1 + |x|^2 - 2<x, xi>) / (1 - |x|^2))

    Level sets are horocycles centred at xi; B_xi decreases at unit speed
    along every geodesic running into xi.

    Args:
        x: torch.tensor of shape (..., d) - points in Poincare ball
        xi: torch.tensor of shape (..., d) - ideal point direction
            (normalised internally)
        keepdim: bool, keep last dimension

    Returns:
        torch.tensor of shape (...) or (..., 1); +inf where |x| >= 1
    """
    x = as_tensor(x)
    xi = vector.normalize(xi)
    x2 = vector.norm2(x, keepdim=keepdim)
    num = 1 + x2 - 2 * vector.dot(x, xi, keepdim=keepdim)
    den = (1 - x2).clamp_min(MIN_NORM)
    ans = torch.log((num / den).clamp_min(MIN_NORM))
    return torch.where(x2 >= 1, torch.full_like(ans, float("inf")), ans)


def horocycle(xi, level):
    """Find the horocycle for the level set of the Busemann function at xi.

    The horocycle {B_xi = level} is the Euclidean sphere tangent to the
    boundary at xi that meets the diameter through xi at
    q = -tanh(level / 2) xi.

    Args:
        xi: torch.tensor of shape (..., d) - ideal point direction
        level: float or torch.tensor of shape (...) - Busemann value

    Returns:
        c: torch.tensor of shape (..., d) - Euclidean centre of the horocycle
        r: torch.tensor of shape (...) - Euclidean radius of the horocycle
    """
    xi = vector.normalize(xi)
    level = torch.as_tensor(level, dtype=xi.dtype, device=xi.device)
    q = -torch.tanh(level / 2).unsqueeze(-1) * xi
    c = (xi + q) / 2.0
    r = torch.norm(xi - q, dim=-1) / 2.0
    return c, r


def project_to_horocycle(xi, level, x, n_iter=50):
    """Move x along its geodesic towards xi until B_xi equals level.

    The geodesic through x ending at xi is parametrised as
    gamma(t) = x (+) (t u), t in (-1, 1), where u = (-x) (+) xi is the
    direction of xi seen from x. B_xi is strictly decreasing in t, so the
    parameter is found by bisection with a fixed iteration budget. Levels
    outside the reachable range saturate at the clamp radius.

    Args:
        xi: torch.tensor of shape (..., d) - ideal point direction
        level: float or torch.tensor broadcastable to (..., 1) - target value
        x: torch.tensor of shape (..., d) - starting interior point
        n_iter: int, number of bisection steps (default: 50)

    Returns:
        torch.tensor of shape (..., d) - point on the horocycle
    """
    xi = vector.normalize(xi)
    x = poincare.project(x)
    u = vector.normalize(poincare._mobius_add(-x, xi))

    bound = _utils.max_norm(x.dtype)
    shape = torch.broadcast_shapes(x.shape, u.shape)[:-1] + (1,)
    lo = torch.full(shape, -bound, dtype=x.dtype, device=x.device)
    hi = torch.full(shape, bound, dtype=x.dtype, device=x.device)

    for _ in range(n_iter):
        mid = (lo + hi) / 2
        b = busemann(poincare.mobius_add(x, mid * u), xi, keepdim=True)
        above = b > level
        lo = torch.where(above, mid, lo)
        hi = torch.where(above, hi, mid)

    return poincare.mobius_add(x, (lo + hi) / 2 * u)
