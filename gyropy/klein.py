"""Klein ball model conversions.

Klein points live in the open unit ball like Poincare points, but geodesics
are straight chords instead of circular arcs. The two models are never mixed
without going through these conversions.
"""

from . import poincare, vector
from ._utils import as_tensor


def from_poincare(x):
    """Convert from Poincare ball model to Klein ball model.

    Formula: k = 2p / (1 + |p|^2)

    Args:
        x: torch.tensor of shape (..., dim) - Poincare ball coordinates

    Returns:
        torch.tensor of shape (..., dim) - Klein ball coordinates
    """
    x = as_tensor(x)
    return 2 * x / (1 + vector.norm2(x, keepdim=True))


def to_poincare(x, strict=False):
    """Convert from Klein ball model to Poincare ball model.

    Formula: p = k / (1 + sqrt(1 - |k|^2))

    Points on or beyond the boundary are clamped first.

    Args:
        x: torch.tensor of shape (..., dim) - Klein ball coordinates
        strict: bool, raise BoundaryError instead of clamping

    Returns:
        torch.tensor of shape (..., dim) - Poincare ball coordinates
    """
    x = poincare.project(x, strict=strict)
    x2 = vector.norm2(x, keepdim=True)
    return x / (1 + (1 - x2).clamp_min(0).sqrt())
