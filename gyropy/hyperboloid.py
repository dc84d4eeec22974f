"""Lorentz hyperboloid model operations.

Convention: The ambient Minkowski space has signature (-1, 1, 1, ...).
Points on the hyperboloid satisfy: -x_0^2 + x_1^2 + ... + x_d^2 = -1.

We use the positive sheet, i.e., every point has positive first coordinate
(x_0 > 0). A hyperboloid point has one more coordinate than the Poincare ball
point it represents; the dimension is always taken from the input.
"""

import torch

from . import minkowski, poincare, vector
from ._utils import DEFAULT_DIM, EPS, MIN_NORM, as_tensor


# =============================================================================
# Conversions
# =============================================================================


def from_poincare(x, ideal=False, strict=False):
    """Convert from Poincare ball model to hyperboloid model.

    Formula: x_0 = (1 + |p|^2) / (1 - |p|^2),  x_i = 2 p_i / (1 - |p|^2)

    Args:
        x: torch.tensor of shape (..., dim) - Poincare ball coordinates
        ideal: bool, True if input vectors are ideal points (on boundary)
        strict: bool, raise BoundaryError instead of clamping non-ideal
            points outside the ball

    Returns:
        torch.tensor of shape (..., dim+1) - hyperboloid coordinates
    """
    x = as_tensor(x)
    if ideal:
        t = torch.ones(x.shape[:-1] + (1,), device=x.device, dtype=x.dtype)
        return torch.cat((t, x), dim=-1)
    x = poincare.project(x, strict=strict)
    eucl_squared_norm = vector.norm2(x, keepdim=True)
    denom = (1 - eucl_squared_norm).clamp_min(MIN_NORM)
    return torch.cat((1 + eucl_squared_norm, 2 * x), dim=-1) / denom


def to_poincare(x, ideal=False):
    """Convert from hyperboloid model to Poincare ball model.

    Formula: p_i = x_{i+1} / (1 + x_0)

    Args:
        x: torch.tensor of shape (..., dim+1) - hyperboloid coordinates
        ideal: bool, True if input vectors are ideal points

    Returns:
        torch.tensor of shape (..., dim) - Poincare ball coordinates
    """
    x = as_tensor(x)
    if ideal:
        return x[..., 1:] / x[..., :1].clamp_min(MIN_NORM)
    return x[..., 1:] / (x[..., :1] + 1).clamp_min(MIN_NORM)


def project_to_hyperboloid(x, prepend_time_dim=False):
    """Lift spatial coordinates onto the hyperboloid by recomputing x_0.

    Enforces the constraint: -x_0^2 + ||x_spatial||^2 = -1
    => x_0 = sqrt(1 + ||x_spatial||^2)

    Args:
        x: torch.tensor of shape (..., dim) if prepend_time_dim=True, else (..., dim+1)
        prepend_time_dim: bool, if True, x contains only spatial coords

    Returns:
        torch.tensor of shape (..., dim+1) - points on hyperboloid
    """
    x = as_tensor(x)
    spatial = x if prepend_time_dim else x[..., 1:]
    x0 = torch.sqrt(1 + vector.norm2(spatial, keepdim=True))
    return torch.cat((x0, spatial), dim=-1)


def is_on_hyperboloid(x, atol=1e-6):
    """Check the hyperboloid constraint <x, x>_L = -1 with x_0 > 0.

    The tolerance is scaled by x_0^2 since rounding error in the Minkowski
    norm grows with the magnitude of the coordinates.

    Args:
        x: torch.tensor of shape (..., dim+1)
        atol: float, tolerance on |<x, x>_L + 1| / max(1, x_0^2)

    Returns:
        torch.tensor of dtype bool and shape (...)
    """
    x = as_tensor(x)
    x0 = x[..., 0]
    residual = (minkowski.squared_norm(x) + 1).abs()
    return (x0 > 0) & (residual <= atol * torch.clamp(x0 * x0, min=1.0))


# =============================================================================
# Distances, geodesics and isometries
# =============================================================================


def distance(x, y, keepdim=False):
    """Compute hyperbolic distance on the hyperboloid.

    Formula: d(x, y) = arcosh(-<x, y>_L)

    The argument of arcosh is floored at 1 to absorb rounding error.

    Args:
        x, y: torch.tensor of the same shape (..., dim+1) - hyperboloid coordinates
        keepdim: bool, keep the reduced last dimension

    Returns:
        torch.tensor of shape (...) or (..., 1)
    """
    inner = minkowski.bilinear_pairing(x, y, keepdim=keepdim)
    return torch.acosh(torch.clamp(-inner, min=1.0))


def geodesic(x, y, t):
    """Point at fraction t along the hyperboloid geodesic from x to y.

    Formula: gamma(t) = (sinh((1 - t) d) x + sinh(t d) y) / sinh(d)

    Args:
        x, y: torch.tensor of shape (..., dim+1) - hyperboloid coordinates
        t: float, interpolation parameter; t <= 0 returns x, t >= 1 returns y

    Returns:
        torch.tensor of shape (..., dim+1)
    """
    x, y = as_tensor(x), as_tensor(y)
    if t <= 0:
        return x.clone()
    if t >= 1:
        return y.clone()

    d = distance(x, y, keepdim=True)
    coincident = d < EPS
    sinh_d = torch.where(coincident, torch.ones_like(d), torch.sinh(d))
    out = (torch.sinh((1 - t) * d) * x + torch.sinh(t * d) * y) / sinh_d
    return torch.where(coincident, x, out)


def boost(p, x):
    """Lorentz boost B_p mapping the origin (1, 0, ..., 0) to p.

    The boost has rapidity rho with cosh(rho) = p_0 and acts along the
    spatial direction of p:
        B_p(x)_0 = cosh(rho) x_0 + sinh(rho) <x_s, u>
        B_p(x)_s = x_s + (cosh(rho) - 1) <x_s, u> u + sinh(rho) x_0 u
    where u is the unit spatial direction of p. In the Poincare ball this is
    the Mobius left translation by to_poincare(p).

    Args:
        p: torch.tensor of shape (..., dim+1) - target of the origin
        x: torch.tensor of shape (..., dim+1) - points to move

    Returns:
        torch.tensor of shape (..., dim+1); x unchanged when p is the origin
    """
    p, x = as_tensor(p), as_tensor(x)
    cosh_rho = p[..., :1]
    sinh_rho = torch.sqrt(torch.clamp(cosh_rho * cosh_rho - 1, min=0.0))
    direction = p[..., 1:] / sinh_rho.clamp_min(MIN_NORM)

    x0 = x[..., :1]
    spatial = x[..., 1:]
    along = torch.sum(spatial * direction, dim=-1, keepdim=True)

    out0 = cosh_rho * x0 + sinh_rho * along
    out_spatial = spatial + ((cosh_rho - 1) * along + sinh_rho * x0) * direction
    out = torch.cat((out0, out_spatial), dim=-1)
    return torch.where(sinh_rho < EPS, x, out)


def boost_inv(p, x):
    """Inverse of boost: the Lorentz boost mapping p to the origin.

    B_p^{-1} is the boost along the opposite spatial direction, i.e. B_{p'}
    with p' = (p_0, -p_1, ..., -p_d).

    Args:
        p: torch.tensor of shape (..., dim+1)
        x: torch.tensor of shape (..., dim+1) - points to move

    Returns:
        torch.tensor of shape (..., dim+1)
    """
    p = as_tensor(p)
    return boost(torch.cat((p[..., :1], -p[..., 1:]), dim=-1), x)


def pairwise_distance(x, y=None):
    """All pairs of hyperbolic distances between two batches of hyperboloid points.

    Args:
        x: torch.tensor of shape (M, dim+1)
        y: torch.tensor of shape (N, dim+1), defaults to x

    Returns:
        torch.tensor of shape (M, N)
    """
    x = as_tensor(x)
    y = x if y is None else as_tensor(y)
    inner = minkowski.pairwise_bilinear_pairing(x, y)
    return torch.acosh(torch.clamp(-inner, min=1.0))


# =============================================================================
# Tangent space
# =============================================================================


def _origin_like(x):
    origin = torch.zeros_like(x)
    origin[..., 0] = 1
    return origin


def project_to_tangent(x, v):
    """Project an ambient vector onto the tangent space at x.

    Formula: v + <x, v>_L x, which satisfies <x, result>_L = 0.

    Args:
        x: torch.tensor of shape (..., dim+1) - base points on hyperboloid
        v: torch.tensor of shape (..., dim+1) - ambient vectors

    Returns:
        torch.tensor of shape (..., dim+1)
    """
    x, v = as_tensor(x), as_tensor(v)
    return v + minkowski.bilinear_pairing(x, v, keepdim=True) * x


def expmap(x, v):
    """Exponential map at a point of the hyperboloid.

    Formula: exp_x(v) = cosh(|v|_L) x + sinh(|v|_L) v / |v|_L

    Args:
        x: torch.tensor of shape (..., dim+1) - base points on hyperboloid
        v: torch.tensor of shape (..., dim+1) - tangent vectors at x

    Returns:
        torch.tensor of shape (..., dim+1); x itself for a zero tangent vector
    """
    x, v = as_tensor(x), as_tensor(v)
    v_norm = torch.sqrt(torch.clamp(minkowski.squared_norm(v, keepdim=True), min=0.0))

    # sinh(x)/x -> 1 as x -> 0, handle small norms
    scale = torch.where(
        v_norm < EPS,
        torch.ones_like(v_norm),
        torch.sinh(v_norm) / v_norm.clamp_min(MIN_NORM),
    )
    return torch.cosh(v_norm) * x + scale * v


def logmap(x, y):
    """Logarithmic map at a point of the hyperboloid.

    Formula: log_x(y) = d / sinh(d) * (y - cosh(d) x), with d = d(x, y)

    Args:
        x: torch.tensor of shape (..., dim+1) - base points on hyperboloid
        y: torch.tensor of shape (..., dim+1) - target points on hyperboloid

    Returns:
        torch.tensor of shape (..., dim+1) - tangent vectors at x whose
        Minkowski norm is d(x, y)
    """
    x, y = as_tensor(x), as_tensor(y)
    cosh_d = torch.clamp(-minkowski.bilinear_pairing(x, y, keepdim=True), min=1.0)
    d = torch.acosh(cosh_d)
    scale = torch.where(
        d < EPS,
        torch.ones_like(d),
        d / torch.sinh(d).clamp_min(MIN_NORM),
    )
    return scale * (y - cosh_d * x)


def expmap0(v):
    """Exponential map at the origin (1, 0, ..., 0).

    The first component of v is ignored.

    Args:
        v: torch.tensor of shape (..., dim+1) - tangent vectors at the origin

    Returns:
        torch.tensor of shape (..., dim+1) - points on hyperboloid
    """
    v = as_tensor(v)
    origin = _origin_like(v)
    return expmap(origin, project_to_tangent(origin, v))


def logmap0(x):
    """Logarithmic map at the origin; the first component of the result is 0."""
    x = as_tensor(x)
    return logmap(_origin_like(x), x)


# =============================================================================
# Means
# =============================================================================


def midpoint(x, y):
    """Geodesic midpoint of x and y."""
    return geodesic(x, y, 0.5)


def centroid(x, weights=None):
    """Weighted Lorentzian centroid of a set of hyperboloid points.

    The weighted sum s = sum_i w_i x_i is timelike for non-negative weights
    and is rescaled back onto the hyperboloid:

        c = s / sqrt(-<s, s>_L)

    Mapped to the Poincare ball, c is the Einstein midpoint of the same
    points and weights.

    Args:
        x: torch.tensor of shape (n, dim+1) - points on hyperboloid
        weights: torch.tensor of shape (n,), non-negative (default: uniform)

    Returns:
        torch.tensor of shape (dim+1,); the origin for an empty set or zero
        total weight
    """
    x = as_tensor(x)
    if x.numel() == 0:
        dim = x.shape[-1] if x.dim() > 1 else DEFAULT_DIM + 1
        return _origin_like(torch.zeros(dim, dtype=x.dtype))
    x = x.reshape(-1, x.shape[-1])

    if weights is None:
        weights = torch.ones(x.shape[0], dtype=x.dtype, device=x.device)
    weights = as_tensor(weights).to(x.dtype).reshape(-1, 1)

    total = torch.sum(weights * x, dim=0)
    timelike = -minkowski.squared_norm(total)
    if float(timelike) < EPS:
        return _origin_like(total)
    return total / torch.sqrt(timelike)
