"""gyropy: Gyrovector space computations in hyperbolic space.

A package for hyperbolic geometry on the Poincare ball, the Lorentz
hyperboloid and the Klein ball, built on the gyrovector operations of the
Poincare ball.

Main features:
- Mobius addition, gyration and gyroscalar multiplication
- Coordinate conversions (Poincare <-> Lorentz, Poincare <-> Klein)
- Distances, geodesics, exponential/logarithmic maps, parallel transport
- Einstein midpoint and Frechet mean
- Busemann functions and horocycles
- Hyperbolic linear maps and distance attention
- Vantage-point tree and FAISS index for nearest neighbour search

Convention:
    - Curvature is fixed at -1
    - Poincare and Klein points satisfy ||x|| < 1; results are clamped to
      norm 1 - 1e-5 (float64) instead of raising
    - Hyperboloid constraint: -x_0^2 + x_1^2 + ... + x_d^2 = -1, x_0 > 0
    - Vectors are torch tensors of shape (..., dim); lists and numpy arrays
      are converted to float64
"""

import logging

# Gyrovector algebra
from .poincare import (
    BoundaryError,
    mobius_add,
    mobius_sub,
    gyration,
    mobius_scalar_mul,
    conformal_factor,
    project,
)

# Distances, geodesics and tangent space
from .geodesics import (
    distance,
    pairwise_distance,
    geodesic,
    midpoint,
    einstein_midpoint,
    expmap,
    logmap,
    expmap0,
    logmap0,
    parallel_transport,
)

# Model conversions
from .hyperboloid import from_poincare as poincare_to_lorentz
from .hyperboloid import to_poincare as lorentz_to_poincare
from .klein import from_poincare as poincare_to_klein
from .klein import to_poincare as klein_to_poincare

# Ideal boundary
from .ideal import busemann, horocycle, project_to_horocycle

# Frechet statistics
from .frechet import frechet_mean, frechet_variance

# Neural primitives
from .neural import HypLinear, aggregate, attention_score, attention_weights

# Spatial indexing
from .vptree import VPTree
from .knn import LorentzKNN

# Submodules
from . import hyperboloid
from . import klein
from . import minkowski
from . import neural
from . import planar
from . import vector

logging.getLogger(__name__).addHandler(logging.NullHandler())

__all__ = [
    # Gyrovector algebra
    "BoundaryError",
    "mobius_add",
    "mobius_sub",
    "gyration",
    "mobius_scalar_mul",
    "conformal_factor",
    "project",
    # Distances and geodesics
    "distance",
    "pairwise_distance",
    "geodesic",
    "midpoint",
    "einstein_midpoint",
    "expmap",
    "logmap",
    "expmap0",
    "logmap0",
    "parallel_transport",
    # Model conversions
    "poincare_to_lorentz",
    "lorentz_to_poincare",
    "poincare_to_klein",
    "klein_to_poincare",
    # Ideal boundary
    "busemann",
    "horocycle",
    "project_to_horocycle",
    # Frechet
    "frechet_mean",
    "frechet_variance",
    # Neural primitives
    "HypLinear",
    "aggregate",
    "attention_score",
    "attention_weights",
    # Classes
    "VPTree",
    "LorentzKNN",
    # Modules
    "hyperboloid",
    "klein",
    "minkowski",
    "neural",
    "planar",
    "vector",
]

__version__ = "0.1.0"
