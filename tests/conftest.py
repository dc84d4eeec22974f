import pytest
import torch


def random_ball(n, dim, max_norm=0.9, generator=None, dtype=torch.float64):
    """Random points in the Poincare ball with norm at most max_norm."""
    direction = torch.randn(n, dim, generator=generator, dtype=dtype)
    direction = direction / direction.norm(dim=-1, keepdim=True)
    radius = torch.rand(n, 1, generator=generator, dtype=dtype) * max_norm
    return direction * radius


@pytest.fixture
def generator():
    g = torch.Generator()
    g.manual_seed(0)
    return g


@pytest.fixture
def ball_points(generator):
    """Factory for seeded random ball points."""

    def make(n=32, dim=8, max_norm=0.9):
        return random_ball(n, dim, max_norm=max_norm, generator=generator)

    return make
