"""Planar (complex number) wrappers around the n-dimensional engine.

Points of the Poincare disk are Python complex numbers z = x + iy. These
helpers exist for 2D callers only; they add no geometry of their own beyond
the dimension-2 specialisation.
"""

from dataclasses import dataclass
from typing import Optional

import torch

from . import geodesics, poincare

COINCIDENT_EPS = 1e-10
COLLINEAR_EPS = 1e-4


@dataclass(frozen=True)
class GeodesicArc:
    """Euclidean description of a geodesic segment in the disk.

    kind is "line" for a diameter segment (center None, radius inf) and "arc"
    for a circle orthogonal to the unit circle.
    """

    kind: str
    center: Optional[complex]
    radius: float


def from_complex(z):
    """2D ball point from a complex number."""
    z = complex(z)
    return torch.tensor([z.real, z.imag], dtype=torch.float64)


def to_complex(p):
    """Complex number from a 2D ball point."""
    return complex(float(p[0]), float(p[1]))


def mobius(a, z):
    """Disk automorphism T_a(z) = (z - a) / (1 - conj(a) z), i.e. (-a) (+) z."""
    return to_complex(poincare.mobius_add(-from_complex(a), from_complex(z)))


def mobius_inv(a, w):
    """Inverse of mobius(a, .): a (+) w."""
    return to_complex(poincare.mobius_add(from_complex(a), from_complex(w)))


def distance(z, w):
    """Hyperbolic distance between two disk points."""
    return float(geodesics.distance(from_complex(z), from_complex(w)))


def geodesic(z1, z2, t):
    """Point at fraction t along the geodesic from z1 to z2."""
    return to_complex(geodesics.geodesic(from_complex(z1), from_complex(z2), t))


def geodesic_arc(z1, z2):
    """Circle (or line) carrying the geodesic through z1 and z2.

    The geodesic lies on the circle orthogonal to the unit circle through both
    points: its center c satisfies 2<z, c> = 1 + |z|^2 for z in {z1, z2}.

    Args:
        z1, z2: complex, disk points

    Returns:
        GeodesicArc, or None when the points coincide
    """
    z1, z2 = complex(z1), complex(z2)
    if abs(z1 - z2) < COINCIDENT_EPS:
        return None

    cross = z1.real * z2.imag - z1.imag * z2.real
    if abs(cross) < COLLINEAR_EPS:
        return GeodesicArc("line", None, float("inf"))

    r1, r2 = abs(z1) ** 2, abs(z2) ** 2
    denom = 2 * cross
    center = complex(
        ((1 + r1) * z2.imag - (1 + r2) * z1.imag) / denom,
        ((1 + r2) * z1.real - (1 + r1) * z2.real) / denom,
    )
    return GeodesicArc("arc", center, abs(z1 - center))
