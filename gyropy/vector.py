"""Dimension-agnostic Euclidean vector primitives.

All functions act on the last dimension and broadcast over leading ones.
`dot`, `add` and `sub` silently truncate to the shorter of two mismatched
lengths.
"""

import torch

from ._utils import DEFAULT_DIM, EPS, MIN_NORM, as_tensor


def _truncate(a, b):
    n = min(a.shape[-1], b.shape[-1])
    return a[..., :n], b[..., :n]


def zeros(n=DEFAULT_DIM, dtype=torch.float64):
    """Zero vector of length n."""
    return torch.zeros(n, dtype=dtype)


def dot(a, b, keepdim=False):
    """Euclidean dot product.

    Args:
        a, b: torch.tensor of shape (..., dim)
        keepdim: bool, keep the reduced last dimension

    Returns:
        torch.tensor of shape (...) or (..., 1)
    """
    a, b = _truncate(as_tensor(a), as_tensor(b))
    return torch.sum(a * b, dim=-1, keepdim=keepdim)


def norm2(a, keepdim=False):
    """Squared Euclidean norm."""
    a = as_tensor(a)
    return torch.sum(a * a, dim=-1, keepdim=keepdim)


def norm(a, keepdim=False):
    """Euclidean norm."""
    return as_tensor(a).norm(dim=-1, p=2, keepdim=keepdim)


def scale(a, k):
    """Scale vector: k * a."""
    return as_tensor(a) * k


def add(a, b):
    """Add vectors: a + b."""
    a, b = _truncate(as_tensor(a), as_tensor(b))
    return a + b


def sub(a, b):
    """Subtract vectors: a - b."""
    a, b = _truncate(as_tensor(a), as_tensor(b))
    return a - b


def normalize(a):
    """Unit vector in the direction of a, or the zero vector if ||a|| <= EPS."""
    a = as_tensor(a)
    n = norm(a, keepdim=True)
    return torch.where(n > EPS, a / n.clamp_min(MIN_NORM), torch.zeros_like(a))
