"""Internal utilities and numerical constants for gyropy."""

import torch


EPS = 1e-12
MIN_NORM = 1e-15
BALL_EPS = {torch.float32: 4e-3, torch.float64: 1e-5}
MAX_CONFORMAL = 1e10
DEFAULT_DIM = 8


def as_tensor(x):
    """Convert input to a floating point torch tensor.

    Lists, tuples and numpy arrays become float64 tensors; a sequence of
    tensors is stacked. Integer tensors are promoted to float64; floating
    tensors are returned as-is.

    Args:
        x: array-like or torch.tensor of shape (..., dim)

    Returns:
        torch.tensor of shape (..., dim)
    """
    if isinstance(x, (list, tuple)) and len(x) > 0 and torch.is_tensor(x[0]):
        x = torch.stack([as_tensor(item) for item in x])
    if not torch.is_tensor(x):
        return torch.as_tensor(x, dtype=torch.float64)
    if not x.is_floating_point():
        return x.to(torch.float64)
    return x


def max_norm(dtype):
    """Largest admissible Euclidean norm for a ball point of the given dtype."""
    return 1.0 - BALL_EPS.get(dtype, 1e-5)
