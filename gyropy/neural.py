"""Hyperbolic linear maps, distance attention and weighted aggregation.

Linear structure is borrowed from the tangent space at the origin: points are
log-mapped there, transformed, and exp-mapped back.
"""

import math

import torch
import torch.nn as nn

from . import geodesics, poincare
from ._utils import as_tensor


def linear(x, weight, bias=None):
    """Hyperbolic linear transformation.

    Maps x to exp_0(W log_0(x)) (+) b.

    Args:
        x: torch.tensor of shape (..., in_features) - Poincare ball points
        weight: torch.tensor of shape (out_features, in_features)
        bias: torch.tensor of shape (out_features,) - bias point in the ball,
            optional

    Returns:
        torch.tensor of shape (..., out_features)
    """
    v = geodesics.logmap0(x)
    mx = geodesics.expmap0(v @ as_tensor(weight).to(v.dtype).T)
    if bias is None:
        return mx
    return poincare.mobius_add(mx, bias)


def attention_score(query, key, beta=1.0):
    """Distance based attention score: -beta * d(query, key)^2.

    Args:
        query, key: torch.tensor of shape (..., dim)
        beta: float, inverse temperature

    Returns:
        torch.tensor of shape (...)
    """
    d = geodesics.distance(query, key)
    return -beta * d * d


def attention_weights(query, keys, beta=1.0):
    """Softmax-normalised attention of one or more queries over a key set.

    Args:
        query: torch.tensor of shape (..., dim)
        keys: torch.tensor of shape (n, dim)
        beta: float, inverse temperature

    Returns:
        torch.tensor of shape (..., n), summing to 1 over the last axis
    """
    query = as_tensor(query)
    scores = attention_score(query.unsqueeze(-2), keys, beta=beta)
    return torch.softmax(scores, dim=-1)


def aggregate(points, weights):
    """Hyperbolic weighted aggregation via the Einstein midpoint.

    Args:
        points: torch.tensor of shape (n, dim)
        weights: torch.tensor of shape (n,), e.g. from attention_weights

    Returns:
        torch.tensor of shape (dim,)
    """
    return geodesics.einstein_midpoint(points, weights)


class HypLinear(nn.Module):
    """Hyperbolic linear layer on the Poincare ball.

    The weight acts in the tangent space at the origin. The bias is stored as
    a tangent vector at the origin and mapped into the ball with expmap0, so
    it can be optimised with ordinary Euclidean optimisers. expmap0 has zero
    gradient at exactly 0, hence the small random bias initialisation.
    """

    def __init__(self, in_features, out_features, bias=True, dtype=None):
        """Initialize HypLinear.

        Args:
            in_features: int, input ball dimension
            out_features: int, output ball dimension
            bias: bool, if True, learn a hyperbolic bias (default: True)
            dtype: torch.dtype of the parameters (default: torch default)
        """
        super(HypLinear, self).__init__()
        self.in_features = in_features
        self.out_features = out_features
        self.weight = nn.Parameter(torch.empty(out_features, in_features, dtype=dtype))
        if bias:
            self.bias = nn.Parameter(torch.empty(out_features, dtype=dtype))
        else:
            self.register_parameter("bias", None)
        self.reset_parameters()

    def reset_parameters(self):
        nn.init.kaiming_uniform_(self.weight, a=math.sqrt(5))
        if self.bias is not None:
            nn.init.uniform_(self.bias, -1e-3, 1e-3)

    def forward(self, x):
        bias = None if self.bias is None else geodesics.expmap0(self.bias)
        return linear(x, self.weight, bias)

    def extra_repr(self):
        return (
            f"in_features={self.in_features}, out_features={self.out_features}, "
            f"bias={self.bias is not None}"
        )
