import logging

import torch

import gyropy


class TestFrechetMean:
    def test_two_points_is_midpoint(self, ball_points):
        x = ball_points(n=2)
        mu = gyropy.frechet_mean(x, eps=1e-10)
        assert torch.allclose(mu, gyropy.midpoint(x[0], x[1]), atol=1e-8)

    def test_single_point(self):
        x = torch.tensor([[0.3, -0.2, 0.1]], dtype=torch.float64)
        assert torch.allclose(gyropy.frechet_mean(x), x[0], atol=1e-10)

    def test_gradient_vanishes(self, ball_points):
        x = ball_points(n=20, max_norm=0.8)
        mu, converged = gyropy.frechet_mean(x, eps=1e-8, return_converged=True)
        assert converged
        assert mu.shape == (8,)
        grad = gyropy.logmap(mu, x).mean(dim=0)
        assert float(grad.norm()) < 1e-6

    def test_weights_pull_towards_point(self, ball_points):
        x = ball_points(n=10)
        weights = torch.ones(10, dtype=torch.float64)
        weights[0] = 20.0
        plain = gyropy.frechet_mean(x)
        weighted = gyropy.frechet_mean(x, weights=weights)
        assert gyropy.distance(weighted, x[0]) < gyropy.distance(plain, x[0])

    def test_non_convergence_is_logged(self, ball_points, caplog):
        x = ball_points(n=5)
        with caplog.at_level(logging.WARNING, logger="gyropy.frechet"):
            _, converged = gyropy.frechet_mean(x, eps=1e-14, max_steps=1, return_converged=True)
        assert not converged
        assert "did not converge" in caplog.text


class TestFrechetVariance:
    def test_mean_squared_distance(self, ball_points):
        x = ball_points(n=10)
        mu = gyropy.frechet_mean(x)
        var = gyropy.frechet_variance(x, mu=mu)
        expected = (gyropy.distance(x, mu) ** 2).mean()
        assert torch.allclose(var, expected)

    def test_computes_mean_when_missing(self, ball_points):
        x = ball_points(n=10)
        var, converged = gyropy.frechet_variance(x, return_converged=True)
        assert converged
        assert torch.allclose(var, gyropy.frechet_variance(x, mu=gyropy.frechet_mean(x)), atol=1e-8)

    def test_mean_minimizes_variance(self, ball_points):
        x = ball_points(n=10)
        mu = gyropy.frechet_mean(x)
        var = gyropy.frechet_variance(x, mu=mu)
        shifted = gyropy.frechet_variance(x, mu=gyropy.geodesic(mu, x[0], 0.2))
        assert var <= shifted

    def test_identical_points(self):
        x = torch.tensor([[0.2, 0.1]] * 4, dtype=torch.float64)
        assert float(gyropy.frechet_variance(x)) < 1e-12
