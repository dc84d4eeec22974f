"""Utility functions for the Minkowski bilinear form.

The Minkowski space has signature (-1, 1, 1, ...).
Points on the unit hyperboloid satisfy: -x_0^2 + x_1^2 + ... + x_d^2 = -1.
"""

import torch

from ._utils import as_tensor


def bilinear_pairing(x, y, keepdim=False):
    """Compute the Minkowski bilinear pairing of x and y.

    Uses signature (-1, 1, 1, ...):
        <x, y>_L = -x_0*y_0 + x_1*y_1 + x_2*y_2 + ...

    Args:
        x, y: torch.tensor of shape (..., dim), where dim >= 2
        keepdim: bool, keep the reduced last dimension

    Returns:
        torch.tensor of shape (...) or (..., 1)
    """
    x, y = as_tensor(x), as_tensor(y)
    eucl_pairing = torch.sum(x * y, dim=-1, keepdim=keepdim)
    time = x[..., :1] * y[..., :1]
    if not keepdim:
        time = time.squeeze(-1)
    return eucl_pairing - 2 * time


def squared_norm(x, keepdim=False):
    """Compute the squared Minkowski norm <x, x>_L."""
    return bilinear_pairing(x, x, keepdim=keepdim)


def pairwise_bilinear_pairing(x, y):
    """Compute the pairwise Minkowski pairings of two batches of vectors.

    Args:
        x: torch.tensor of shape (M, dim), where dim >= 2
        y: torch.tensor of shape (N, dim), where dim >= 2

    Returns:
        torch.tensor of shape (M, N)
    """
    x, y = as_tensor(x), as_tensor(y)
    return x @ y.T - 2 * torch.outer(x[:, 0], y[:, 0])
