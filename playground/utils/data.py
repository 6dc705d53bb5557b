"""
Point data for the playground: labeled 2-D points in [-1, 1]^2.
"""

from dataclasses import dataclass
from typing import Iterator, List, Optional, Tuple

import torch

from ..errors import ConfigurationError


@dataclass
class Point:
    x: float
    y: float
    label: int


class PointSet:
    """Ordered, mutable collection of labeled points."""

    def __init__(self, points: Optional[List[Point]] = None):
        self.points: List[Point] = list(points) if points else []

    def __len__(self) -> int:
        return len(self.points)

    def __iter__(self) -> Iterator[Point]:
        return iter(self.points)

    def __getitem__(self, i: int) -> Point:
        return self.points[i]

    def add(self, x: float, y: float, label: int) -> Point:
        p = Point(float(x), float(y), int(label))
        self.points.append(p)
        return p

    def erase_near(self, x: float, y: float, radius: float) -> int:
        """
        Remove every point within ``radius`` of ``(x, y)`` (boundary included).

        Returns:
            Number of points removed
        """
        r2 = radius * radius
        before = len(self.points)
        self.points = [
            p for p in self.points
            if (p.x - x) ** 2 + (p.y - y) ** 2 > r2
        ]
        return before - len(self.points)

    def clear(self):
        self.points.clear()

    def counts(self) -> dict:
        """Number of points per label."""
        out = {}
        for p in self.points:
            out[p.label] = out.get(p.label, 0) + 1
        return out

    def sample(self, generator: Optional[torch.Generator] = None) -> Point:
        """Pick one point uniformly at random."""
        if not self.points:
            raise IndexError("Cannot sample from an empty point set")
        i = int(torch.randint(len(self.points), (1,), generator=generator))
        return self.points[i]


def canvas_to_xy(px: float, py: float, width: int, height: int) -> Tuple[float, float]:
    """Map canvas pixels to normalized coordinates (y axis pointing up)."""
    x = (px / width) * 2 - 1
    y = -((py / height) * 2 - 1)
    return x, y


def xy_to_canvas(x: float, y: float, width: int, height: int) -> Tuple[float, float]:
    """Inverse of :func:`canvas_to_xy`."""
    px = ((x + 1) / 2) * width
    py = ((-y + 1) / 2) * height
    return px, py


def brush_radius(brush: float, width: int) -> float:
    """Brush size in pixels as a radius in normalized units."""
    return (brush / width) * 2.0


def sample_to_tensor(p: Point, dtype: torch.dtype = torch.float64) -> torch.Tensor:
    """Column vector (2, 1) holding the point's coordinates."""
    return torch.tensor([[p.x], [p.y]], dtype=dtype)


def label_to_tensor(p: Point, dtype: torch.dtype = torch.float64) -> torch.Tensor:
    """Column vector (1, 1) holding the point's label."""
    return torch.tensor([[float(p.label)]], dtype=dtype)


def parse_layers(text: str) -> List[int]:
    """
    Parse a comma-separated layer spec such as ``"2, 8, 8, 1"``.

    Entries that are not positive integers are dropped.
    """
    sizes = []
    for part in text.split(","):
        try:
            n = int(part.strip())
        except ValueError:
            continue
        if n > 0:
            sizes.append(n)
    return sizes


def create_quadrant_dataset() -> PointSet:
    """Four points at (+-0.5, +-0.5), labeled 1 where x > 0."""
    points = PointSet()
    for x in (-0.5, 0.5):
        for y in (-0.5, 0.5):
            points.add(x, y, 1 if x > 0 else 0)
    return points


def create_toy_dataset(
    n_samples: int = 200,
    pattern: str = "xor",
    noise: float = 0.0,
    seed: Optional[int] = None
) -> PointSet:
    """
    Create a synthetic 2-D dataset.

    Args:
        n_samples: Number of points
        pattern: ``"xor"`` (label by quadrant sign product), ``"circle"``
            (label 1 inside radius 0.5) or ``"halves"`` (label by x sign)
        noise: Standard deviation of Gaussian jitter added after labeling
        seed: Random seed for reproducibility

    Returns:
        PointSet with coordinates clipped to [-1, 1]
    """
    generator = torch.Generator()
    if seed is not None:
        generator.manual_seed(seed)

    coords = torch.rand((n_samples, 2), generator=generator, dtype=torch.float64) * 2 - 1

    if pattern == "xor":
        labels = (coords[:, 0] * coords[:, 1] > 0).long()
    elif pattern == "circle":
        labels = (coords.norm(dim=1) < 0.5).long()
    elif pattern == "halves":
        labels = (coords[:, 0] > 0).long()
    else:
        raise ConfigurationError(f"Unknown dataset pattern: {pattern}")

    if noise > 0:
        coords = coords + torch.randn(coords.shape, generator=generator, dtype=torch.float64) * noise
        coords = coords.clamp(-1.0, 1.0)

    points = PointSet()
    for (x, y), label in zip(coords.tolist(), labels.tolist()):
        points.add(x, y, label)
    return points


def grid_coordinates(resolution: int) -> List[Tuple[float, float]]:
    """Sample positions of a ``resolution`` x ``resolution`` grid spanning [-1, 1], top row first."""
    step = 2.0 / (resolution - 1) if resolution > 1 else 0.0
    return [
        (ix * step - 1, -(iy * step - 1))
        for iy in range(resolution)
        for ix in range(resolution)
    ]
