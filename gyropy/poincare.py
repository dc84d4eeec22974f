"""Gyrovector space operations on the Poincare ball.

The Poincare ball is the open unit ball {x : ||x|| < 1} with curvature -1.
Its gyrovector structure (Ungar, "Analytic Hyperbolic Geometry") consists of

    - Mobius addition         x (+) y   (neither commutative nor associative)
    - gyration                gyr[a, b] (rotation relating a (+) b to b (+) a)
    - gyroscalar multiplication r (x) x

Every operation that can leave the ball clamps its result back to the radius
1 - BALL_EPS[dtype]. Degenerate configurations never raise; they fall back to
a clamped operand or to the unchanged input.
"""

import torch

from . import _utils, vector
from ._utils import EPS, MAX_CONFORMAL, MIN_NORM, as_tensor


class BoundaryError(ValueError):
    """Raised in strict mode when a point lies outside the admissible ball."""


# =============================================================================
# Boundary handling
# =============================================================================


def project(x, max_norm=None, strict=False):
    """Clamp points to the interior of the Poincare ball.

    Vectors whose norm exceeds max_norm are rescaled onto the sphere of radius
    max_norm, preserving direction. Points already inside are unchanged.

    Args:
        x: torch.tensor of shape (..., dim)
        max_norm: float, clamp radius (default: 1 - BALL_EPS[x.dtype])
        strict: bool, raise BoundaryError instead of clamping

    Returns:
        torch.tensor of shape (..., dim)
    """
    x = as_tensor(x)
    if max_norm is None:
        max_norm = _utils.max_norm(x.dtype)
    norm = vector.norm(x, keepdim=True)
    cond = norm > max_norm
    if strict and bool(cond.any()):
        raise BoundaryError(
            f"{int(cond.sum())} point(s) have norm above {max_norm}; "
            "pass strict=False to clamp instead"
        )
    return torch.where(cond, x / norm.clamp_min(MIN_NORM) * max_norm, x)


def conformal_factor(x, keepdim=False):
    """Conformal factor lambda_x = 2 / (1 - ||x||^2).

    Saturates at MAX_CONFORMAL as x approaches (or passes) the boundary.

    Args:
        x: torch.tensor of shape (..., dim)
        keepdim: bool, keep the reduced last dimension

    Returns:
        torch.tensor of shape (...) or (..., 1)
    """
    x2 = vector.norm2(x, keepdim=keepdim)
    return 2.0 / (1.0 - x2).clamp_min(2.0 / MAX_CONFORMAL)


# =============================================================================
# Mobius operations
# =============================================================================


def _mobius_add(x, y):
    """Mobius addition without the final clamp.

    Near-antipodal inputs (vanishing denominator) return x.
    """
    x, y = as_tensor(x), as_tensor(y)
    x2 = vector.norm2(x, keepdim=True)
    y2 = vector.norm2(y, keepdim=True)
    xy = vector.dot(x, y, keepdim=True)
    num = (1 + 2 * xy + y2) * x + (1 - x2) * y
    denom = 1 + 2 * xy + x2 * y2
    degenerate = denom.abs() < EPS
    safe_denom = torch.where(degenerate, torch.ones_like(denom), denom)
    return torch.where(degenerate, x, num / safe_denom)


def mobius_add(x, y):
    """Mobius addition x (+) y in the Poincare ball.

    Formula:
        x (+) y = ((1 + 2<x,y> + |y|^2) x + (1 - |x|^2) y)
                  / (1 + 2<x,y> + |x|^2 |y|^2)

    Properties:
        - Left identity:  0 (+) y = y
        - Left inverse:   (-x) (+) x = 0
        - Gyrocommutative: x (+) y = gyr[x, y](y (+) x)

    Args:
        x, y: torch.tensor of shape (..., dim)

    Returns:
        torch.tensor of shape (..., dim), clamped into the ball
    """
    return project(_mobius_add(x, y))


def mobius_sub(x, y):
    """Mobius subtraction x (-) y = x (+) (-y)."""
    return mobius_add(x, -as_tensor(y))


def gyration(a, b, v):
    """Gyration operator gyr[a, b](v).

    The gyration is the Thomas precession induced by composing the
    non-collinear translations a and b. It is a rotation acting in the plane
    spanned by a and b and fixing its orthogonal complement, so it is applied
    as an angle/axis decomposition: an orthonormal basis (e1, e2) of the
    plane is built from a and b, the rotation angle is read off the image of
    e1 under Ungar's closed form, and the in-plane component of v is rotated.

    Collinear a, b (including a zero operand) or a vanishing denominator
    leave v unchanged.

    Args:
        a, b: torch.tensor of shape (..., dim)
        v: torch.tensor of shape (..., dim)

    Returns:
        torch.tensor of shape (..., dim)
    """
    a, b, v = as_tensor(a), as_tensor(b), as_tensor(v)
    a2 = vector.norm2(a, keepdim=True)
    b2 = vector.norm2(b, keepdim=True)
    ab = vector.dot(a, b, keepdim=True)
    denom = 1 + 2 * ab + a2 * b2

    e1 = vector.normalize(a)
    b_perp = b - vector.dot(b, e1, keepdim=True) * e1
    e2 = vector.normalize(b_perp)

    # gyr[a,b]w = w + 2(A a + B b) / denom, evaluated at w = e1
    ae = vector.dot(a, e1, keepdim=True)
    be = vector.dot(b, e1, keepdim=True)
    coef_a = -ae * b2 + be + 2 * ab * be
    coef_b = -be * a2 - ae
    degenerate = denom.abs() < EPS
    safe_denom = torch.where(degenerate, torch.ones_like(denom), denom)
    image = e1 + 2 * (coef_a * a + coef_b * b) / safe_denom

    cos_theta = vector.dot(image, e1, keepdim=True)
    sin_theta = vector.dot(image, e2, keepdim=True)

    v1 = vector.dot(v, e1, keepdim=True)
    v2 = vector.dot(v, e2, keepdim=True)
    rotated = (
        v
        + (cos_theta * v1 - sin_theta * v2 - v1) * e1
        + (sin_theta * v1 + cos_theta * v2 - v2) * e2
    )

    collinear = (vector.norm(a, keepdim=True) <= EPS) | (
        vector.norm(b_perp, keepdim=True) <= EPS
    )
    return torch.where(collinear | degenerate, v, rotated)


def mobius_scalar_mul(x, r):
    """Gyroscalar multiplication r (x) x.

    Moves x along the geodesic through the origin so that its distance from
    the origin is multiplied by r:
        r (x) x = tanh(r * artanh(|x|)) * x / |x|

    Args:
        x: torch.tensor of shape (..., dim)
        r: float or torch.tensor broadcastable to (..., 1)

    Returns:
        torch.tensor of shape (..., dim), zero where |x| < EPS
    """
    x = as_tensor(x)
    x_norm = vector.norm(x, keepdim=True)
    clamped = x_norm.clamp(min=MIN_NORM, max=_utils.max_norm(x.dtype))
    scaled = torch.tanh(r * torch.atanh(clamped)) * x / x_norm.clamp_min(MIN_NORM)
    return project(torch.where(x_norm < EPS, torch.zeros_like(scaled), scaled))
