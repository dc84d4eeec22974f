import math

import pytest
import torch

import gyropy


def t(*values):
    return torch.tensor(values, dtype=torch.float64)


class TestDistance:
    def test_from_origin(self):
        d = gyropy.distance(t(0.0, 0.0), t(0.6, 0.0))
        assert float(d) == pytest.approx(2 * math.atanh(0.6))
        assert float(d) == pytest.approx(math.log(4.0))

    def test_identity(self, ball_points):
        x = ball_points()
        assert torch.allclose(gyropy.distance(x, x), torch.zeros(x.shape[0], dtype=x.dtype), atol=1e-7)

    def test_symmetry(self, ball_points):
        x, y = ball_points(), ball_points()
        assert torch.allclose(gyropy.distance(x, y), gyropy.distance(y, x), atol=1e-9)

    def test_triangle_inequality(self, ball_points):
        x, y, z = ball_points(n=100), ball_points(n=100), ball_points(n=100)
        lhs = gyropy.distance(x, z)
        rhs = gyropy.distance(x, y) + gyropy.distance(y, z)
        assert torch.all(lhs <= rhs + 1e-9)

    def test_invariant_under_mobius_translation(self, ball_points):
        a = ball_points(max_norm=0.5)
        x, y = ball_points(max_norm=0.5), ball_points(max_norm=0.5)
        moved = gyropy.distance(gyropy.mobius_add(a, x), gyropy.mobius_add(a, y))
        assert torch.allclose(moved, gyropy.distance(x, y), atol=1e-8)

    def test_boundary_is_infinite(self):
        assert math.isinf(float(gyropy.distance(t(1.0, 0.0), t(0.0, 0.0))))
        assert math.isinf(float(gyropy.distance(t(0.0, 0.0), t(0.0, 1.5))))

    def test_keepdim(self, ball_points):
        x, y = ball_points(n=5), ball_points(n=5)
        assert gyropy.distance(x, y, keepdim=True).shape == (5, 1)

    def test_pairwise(self, ball_points):
        x, y = ball_points(n=6), ball_points(n=4)
        d = gyropy.pairwise_distance(x, y)
        assert d.shape == (6, 4)
        assert torch.allclose(d[2, 3], gyropy.distance(x[2], y[3]))
        self_d = gyropy.pairwise_distance(x)
        assert torch.allclose(self_d, self_d.T, atol=1e-9)


class TestGeodesic:
    def test_endpoints_are_exact(self, ball_points):
        x, y = ball_points(), ball_points()
        assert torch.equal(gyropy.geodesic(x, y, 0.0), x)
        assert torch.equal(gyropy.geodesic(x, y, 1.0), y)
        assert torch.equal(gyropy.geodesic(x, y, -0.5), x)
        assert torch.equal(gyropy.geodesic(x, y, 1.5), y)

    def test_endpoint_is_a_copy(self):
        x, y = t(0.1, 0.2), t(0.3, -0.1)
        out = gyropy.geodesic(x, y, 0.0)
        out[0] = 0.5
        assert float(x[0]) == pytest.approx(0.1)

    def test_constant_speed(self, ball_points):
        x, y = ball_points(), ball_points()
        total = gyropy.distance(x, y)
        for s in (0.1, 0.3, 0.5, 0.9):
            point = gyropy.geodesic(x, y, s)
            assert torch.allclose(gyropy.distance(x, point), s * total, atol=1e-8)
            assert torch.allclose(gyropy.distance(point, y), (1 - s) * total, atol=1e-8)

    def test_monotone_distance(self, ball_points):
        x, y = ball_points(n=1)[0], ball_points(n=1)[0]
        steps = [gyropy.distance(x, gyropy.geodesic(x, y, s)) for s in torch.linspace(0, 1, 11).tolist()]
        assert all(a < b for a, b in zip(steps, steps[1:]))

    def test_midpoint_is_equidistant(self, ball_points):
        x, y = ball_points(), ball_points()
        m = gyropy.midpoint(x, y)
        assert torch.allclose(gyropy.distance(x, m), gyropy.distance(m, y), atol=1e-8)


class TestEinsteinMidpoint:
    def test_two_points_is_midpoint(self, ball_points):
        x, y = ball_points(n=1)[0], ball_points(n=1)[0]
        m = gyropy.einstein_midpoint(torch.stack([x, y]))
        assert torch.allclose(m, gyropy.midpoint(x, y), atol=1e-9)

    def test_single_point(self):
        x = t(0.3, -0.4, 0.1)
        assert torch.allclose(gyropy.einstein_midpoint(x.unsqueeze(0)), x, atol=1e-12)

    def test_unbatched_point(self):
        x = t(0.3, 0.1)
        m = gyropy.einstein_midpoint(x)
        assert m.shape == (2,)
        assert torch.allclose(m, x, atol=1e-12)
        assert torch.allclose(gyropy.einstein_midpoint(x, t(2.0)), x, atol=1e-12)

    def test_symmetric_set_is_origin(self):
        points = t(0.5, 0.0, -0.5, 0.0, 0.0, 0.5, 0.0, -0.5).reshape(4, 2)
        assert torch.allclose(gyropy.einstein_midpoint(points), t(0.0, 0.0), atol=1e-12)

    def test_weights(self):
        points = t(0.5, 0.0, -0.5, 0.0).reshape(2, 2)
        m = gyropy.einstein_midpoint(points, t(1.0, 0.0))
        assert torch.allclose(m, points[0], atol=1e-12)
        biased = gyropy.einstein_midpoint(points, t(3.0, 1.0))
        assert 0 < float(biased[0]) < 0.5

    def test_boundary_points_are_skipped(self):
        x = t(0.2, 0.3)
        points = torch.stack([x, t(1.0, 0.0)])
        assert torch.allclose(gyropy.einstein_midpoint(points), x, atol=1e-12)

    def test_empty_set(self):
        empty = torch.empty(0, 3, dtype=torch.float64)
        assert torch.equal(gyropy.einstein_midpoint(empty), torch.zeros(3, dtype=torch.float64))
        assert gyropy.einstein_midpoint([]).shape == (8,)

    def test_zero_weight(self):
        points = t(0.5, 0.0, -0.2, 0.1).reshape(2, 2)
        assert torch.equal(gyropy.einstein_midpoint(points, t(0.0, 0.0)), t(0.0, 0.0))

    def test_result_in_ball(self, ball_points):
        points = ball_points(n=50, max_norm=0.99999)
        assert float(gyropy.einstein_midpoint(points).norm()) < 1


class TestTangentSpace:
    def test_exp_log_inverse(self, ball_points):
        x, y = ball_points(), ball_points()
        v = gyropy.logmap(x, y)
        assert torch.allclose(gyropy.expmap(x, v), y, atol=1e-8)

    def test_log_exp_inverse(self, ball_points, generator):
        x = ball_points(max_norm=0.7)
        v = torch.randn(x.shape, generator=generator, dtype=torch.float64) * 0.1
        assert torch.allclose(gyropy.logmap(x, gyropy.expmap(x, v)), v, atol=1e-8)

    def test_riemannian_length_is_distance(self, ball_points):
        x, y = ball_points(), ball_points()
        v = gyropy.logmap(x, y)
        length = gyropy.conformal_factor(x) * v.norm(dim=-1)
        assert torch.allclose(length, gyropy.distance(x, y), atol=1e-8)

    def test_zero_tangent_vector(self, ball_points):
        x = ball_points()
        assert torch.equal(gyropy.expmap(x, torch.zeros_like(x)), x)
        assert torch.equal(gyropy.logmap(x, x), torch.zeros_like(x))

    def test_maps_at_origin(self):
        v = t(0.3, 0.4)
        expected = math.tanh(0.5) * v / 0.5
        assert torch.allclose(gyropy.expmap0(v), expected)
        assert torch.allclose(gyropy.logmap0(expected), v)

    def test_exp_follows_geodesic(self, ball_points):
        x, y = ball_points(), ball_points()
        v = gyropy.logmap(x, y)
        assert torch.allclose(gyropy.expmap(x, 0.5 * v), gyropy.midpoint(x, y), atol=1e-8)


class TestParallelTransport:
    def test_preserves_riemannian_norm(self, ball_points, generator):
        x, y = ball_points(), ball_points()
        v = torch.randn(x.shape, generator=generator, dtype=torch.float64)
        w = gyropy.parallel_transport(x, y, v)
        before = gyropy.conformal_factor(x) * v.norm(dim=-1)
        after = gyropy.conformal_factor(y) * w.norm(dim=-1)
        assert torch.allclose(before, after, atol=1e-9)

    def test_round_trip(self, ball_points, generator):
        x, y = ball_points(), ball_points()
        v = torch.randn(x.shape, generator=generator, dtype=torch.float64)
        back = gyropy.parallel_transport(y, x, gyropy.parallel_transport(x, y, v))
        assert torch.allclose(back, v, atol=1e-9)

    def test_from_origin(self, ball_points, generator):
        y = ball_points()
        v = torch.randn(y.shape, generator=generator, dtype=torch.float64)
        w = gyropy.parallel_transport(torch.zeros_like(y), y, v)
        expected = v * (1 - (y * y).sum(dim=-1, keepdim=True))
        assert torch.allclose(w, expected, atol=1e-12)

    def test_transports_geodesic_velocity(self, ball_points):
        x, y = ball_points(), ball_points()
        # The velocity of the geodesic x -> y at y is -log_y(x)
        w = gyropy.parallel_transport(x, y, gyropy.logmap(x, y))
        assert torch.allclose(w, -gyropy.logmap(y, x), atol=1e-8)
