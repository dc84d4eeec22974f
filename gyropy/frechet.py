"""Frechet statistics on the Poincare ball.

The Frechet mean minimises the (weighted) sum of squared hyperbolic
distances. It is computed iteratively and is therefore the expensive
counterpart of the closed-form Einstein midpoint, which serves as its
starting point.
"""

import logging

import torch

from . import geodesics, poincare
from ._utils import as_tensor

logger = logging.getLogger(__name__)


def frechet_mean(x, weights=None, lr=0.1, eps=1e-5, max_steps=5000, return_converged=False):
    """Compute the Frechet mean of points in the Poincare ball.

    Args:
        x: torch.tensor of shape (n, dim) - Poincare ball coordinates
        weights: torch.tensor of shape (n,), optional non-negative weights
        lr: float, initial learning rate for gradient descent (default: 0.1)
        eps: float, convergence threshold for gradient norm (default: 1e-5)
        max_steps: int, maximum optimization steps (default: 5000)
        return_converged: bool, if True, also return convergence status

    Returns:
        mu: torch.tensor of shape (dim,) - Frechet mean
        has_converged: bool (only if return_converged=True)
    """
    x = poincare.project(as_tensor(x))
    if weights is None:
        w = torch.full((x.shape[0], 1), 1.0 / x.shape[0], dtype=x.dtype, device=x.device)
    else:
        w = as_tensor(weights).to(x.dtype).reshape(-1, 1)
        w = w / w.sum()

    mu = geodesics.einstein_midpoint(x, w.squeeze(-1))
    has_converged = False

    for step in range(max_steps):
        # Negative Riemannian gradient of the weighted squared distance
        grad = torch.sum(w * geodesics.logmap(mu, x), dim=0)
        grad_norm = grad.norm(p=2).item()

        if grad_norm < eps:
            has_converged = True
            break

        # Normalized gradient descent
        current_lr = min(lr, 0.5 / (grad_norm + 1e-8))
        mu_new = poincare.project(geodesics.expmap(mu, current_lr * grad))

        movement = (mu_new - mu).norm().item()
        mu = mu_new
        if movement < eps * 0.01:
            has_converged = True
            break

    if has_converged:
        logger.debug("Frechet mean converged after %d steps", step + 1)
    else:
        logger.warning("Frechet mean did not converge within %d steps", max_steps)

    if return_converged:
        return mu, has_converged
    return mu


def frechet_variance(x, mu=None, weights=None, lr=0.1, eps=1e-5, max_steps=5000, return_converged=False):
    """Compute the Frechet variance of points in the Poincare ball.

    Frechet variance is the (weighted) mean squared distance from the Frechet
    mean.

    Args:
        x: torch.tensor of shape (n, dim) - Poincare ball coordinates
        mu: torch.tensor of shape (dim,), pre-computed Frechet mean (optional)
        weights: torch.tensor of shape (n,), optional non-negative weights
        lr: float, learning rate for mean computation if mu not provided
        eps: float, convergence threshold for mean computation
        max_steps: int, maximum steps for mean computation
        return_converged: bool, if True, also return convergence status

    Returns:
        var: torch.tensor scalar - Frechet variance
        has_converged: bool (only if return_converged=True)
    """
    x = as_tensor(x)
    if mu is None:
        mu, has_converged = frechet_mean(
            x, weights=weights, lr=lr, eps=eps, max_steps=max_steps, return_converged=True
        )
    else:
        has_converged = True

    sq_distances = geodesics.distance(x, mu) ** 2
    if weights is None:
        var = torch.mean(sq_distances)
    else:
        w = as_tensor(weights).to(x.dtype)
        var = torch.sum(w * sq_distances) / w.sum()

    if return_converged:
        return var, has_converged
    return var
