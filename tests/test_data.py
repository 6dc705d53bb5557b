"""
Tests for point data helpers.
"""

import pytest
import torch

from playground.errors import ConfigurationError
from playground.utils.data import (
    Point,
    PointSet,
    brush_radius,
    canvas_to_xy,
    create_quadrant_dataset,
    create_toy_dataset,
    grid_coordinates,
    label_to_tensor,
    parse_layers,
    sample_to_tensor,
    xy_to_canvas,
)


class TestPointSet:

    def test_add_and_counts(self):
        points = PointSet()
        points.add(0.1, 0.2, 0)
        points.add(-0.3, 0.4, 1)
        points.add(0.5, -0.5, 1)

        assert len(points) == 3
        assert points.counts() == {0: 1, 1: 2}
        assert points[1] == Point(-0.3, 0.4, 1)

    def test_erase_near_removes_points_within_radius(self):
        points = PointSet()
        points.add(0.0, 0.0, 0)
        points.add(0.05, 0.0, 1)
        points.add(0.1, 0.0, 1)
        points.add(0.5, 0.5, 0)

        removed = points.erase_near(0.0, 0.0, 0.1)

        assert removed == 3
        assert [(p.x, p.y) for p in points] == [(0.5, 0.5)]

    def test_erase_near_nothing_in_range(self):
        points = create_quadrant_dataset()
        assert points.erase_near(0.0, 0.0, 0.1) == 0
        assert len(points) == 4

    def test_clear(self):
        points = create_quadrant_dataset()
        points.clear()
        assert len(points) == 0

    def test_sample_uses_generator(self):
        points = create_toy_dataset(50, seed=3)
        a = [points.sample(torch.Generator().manual_seed(5)) for _ in range(3)]
        b = [points.sample(torch.Generator().manual_seed(5)) for _ in range(3)]
        assert a == b

    def test_sample_empty_raises(self):
        with pytest.raises(IndexError):
            PointSet().sample()


class TestCanvasMapping:

    def test_corners(self):
        assert canvas_to_xy(0, 0, 200, 100) == (-1.0, 1.0)
        assert canvas_to_xy(200, 100, 200, 100) == (1.0, -1.0)
        assert canvas_to_xy(100, 50, 200, 100) == (0.0, 0.0)

    def test_round_trip(self):
        x, y = canvas_to_xy(37, 81, 300, 200)
        assert xy_to_canvas(x, y, 300, 200) == pytest.approx((37, 81))

    def test_brush_radius(self):
        assert brush_radius(6, 600) == pytest.approx(0.02)


def test_tensors_are_columns():
    p = Point(0.25, -0.75, 1)
    assert sample_to_tensor(p).tolist() == [[0.25], [-0.75]]
    assert label_to_tensor(p).tolist() == [[1.0]]
    assert sample_to_tensor(p).dtype == torch.float64


@pytest.mark.parametrize("text, expected", [
    ("2,8,8,1", [2, 8, 8, 1]),
    (" 2 , 16 ,1 ", [2, 16, 1]),
    ("2,,x,0,-4,3", [2, 3]),
    ("", []),
])
def test_parse_layers(text, expected):
    assert parse_layers(text) == expected


def test_quadrant_dataset_labels_by_x_sign():
    points = create_quadrant_dataset()
    assert sorted((p.x, p.y, p.label) for p in points) == [
        (-0.5, -0.5, 0), (-0.5, 0.5, 0), (0.5, -0.5, 1), (0.5, 0.5, 1),
    ]


@pytest.mark.parametrize("pattern", ["xor", "circle", "halves"])
def test_toy_dataset_patterns(pattern):
    points = create_toy_dataset(100, pattern=pattern, noise=0.05, seed=0)
    assert len(points) == 100
    assert all(-1.0 <= p.x <= 1.0 and -1.0 <= p.y <= 1.0 for p in points)
    assert set(points.counts()) <= {0, 1}


def test_toy_dataset_is_seeded():
    a = create_toy_dataset(20, seed=11)
    b = create_toy_dataset(20, seed=11)
    assert [(p.x, p.y, p.label) for p in a] == [(p.x, p.y, p.label) for p in b]


def test_toy_dataset_unknown_pattern():
    with pytest.raises(ConfigurationError):
        create_toy_dataset(10, pattern="spiral")


def test_grid_coordinates_span_square():
    coords = grid_coordinates(3)
    assert len(coords) == 9
    assert coords[0] == (-1.0, 1.0)
    assert coords[-1] == (1.0, -1.0)
    assert coords[4] == (0.0, 0.0)
