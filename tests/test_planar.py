import math

import pytest
import torch

from gyropy import planar


POINTS = [0.3 + 0.2j, -0.5 + 0.1j, 0.1 - 0.7j, 0j, 0.6j]


def test_complex_round_trip():
    for z in POINTS:
        p = planar.from_complex(z)
        assert p.dtype == torch.float64
        assert planar.to_complex(p) == z


@pytest.mark.parametrize("a", POINTS)
@pytest.mark.parametrize("z", POINTS)
def test_mobius_matches_disk_automorphism(a, z):
    expected = (z - a) / (1 - a.conjugate() * z)
    assert planar.mobius(a, z) == pytest.approx(expected, abs=1e-12)


@pytest.mark.parametrize("a", POINTS)
def test_mobius_inverse(a):
    for z in POINTS:
        assert planar.mobius_inv(a, planar.mobius(a, z)) == pytest.approx(z, abs=1e-12)
    assert planar.mobius(a, a) == pytest.approx(0, abs=1e-12)


def test_distance():
    assert planar.distance(0, 0.6) == pytest.approx(math.log(4.0))
    assert planar.distance(0.3 + 0.2j, -0.5 + 0.1j) == pytest.approx(planar.distance(-0.5 + 0.1j, 0.3 + 0.2j))
    assert isinstance(planar.distance(0.1j, 0.2j), float)


def test_geodesic():
    z1, z2 = 0.3 + 0.2j, -0.5 + 0.1j
    assert planar.geodesic(z1, z2, 0.0) == z1
    assert planar.geodesic(z1, z2, 1.0) == z2
    mid = planar.geodesic(z1, z2, 0.5)
    assert planar.distance(z1, mid) == pytest.approx(planar.distance(mid, z2))


class TestGeodesicArc:
    def test_coincident_points(self):
        assert planar.geodesic_arc(0.2 + 0.1j, 0.2 + 0.1j) is None

    def test_diameter_is_line(self):
        arc = planar.geodesic_arc(0.3, -0.5)
        assert arc.kind == "line"
        assert arc.center is None
        assert math.isinf(arc.radius)
        assert planar.geodesic_arc(0j, 0.4 + 0.4j).kind == "line"

    def test_arc_is_orthogonal_circle(self):
        z1, z2 = 0.3 + 0.2j, -0.5 + 0.1j
        arc = planar.geodesic_arc(z1, z2)
        assert arc.kind == "arc"
        assert abs(z1 - arc.center) == pytest.approx(arc.radius)
        assert abs(z2 - arc.center) == pytest.approx(arc.radius)
        # Orthogonal to the unit circle: |c|^2 = r^2 + 1
        assert abs(arc.center) ** 2 == pytest.approx(arc.radius ** 2 + 1)

    def test_geodesic_points_lie_on_arc(self):
        z1, z2 = 0.1 - 0.7j, 0.6j
        arc = planar.geodesic_arc(z1, z2)
        for s in (0.25, 0.5, 0.75):
            z = planar.geodesic(z1, z2, s)
            assert abs(z - arc.center) == pytest.approx(arc.radius)
