"""
Vector Primitives Module

Defines the geometry produced by the detectors and consumed by the exporter.
All coordinates are in pixel space (origin top-left, Y down).
"""

import math
from dataclasses import dataclass, field
from typing import List, Tuple, Union


@dataclass
class Segment:
    """A straight line segment. Endpoint order carries no meaning."""
    start: Tuple[float, float]
    end: Tuple[float, float]

    @classmethod
    def from_coords(cls, x1: float, y1: float, x2: float, y2: float) -> "Segment":
        return cls(start=(float(x1), float(y1)), end=(float(x2), float(y2)))

    @property
    def length(self) -> float:
        """Calculate segment length."""
        dx = self.end[0] - self.start[0]
        dy = self.end[1] - self.start[1]
        return math.sqrt(dx * dx + dy * dy)

    @property
    def angle(self) -> float:
        """Calculate segment angle in degrees (0-180)."""
        dx = self.end[0] - self.start[0]
        dy = self.end[1] - self.start[1]
        angle = math.degrees(math.atan2(dy, dx))
        # Normalize to 0-180 (direction doesn't matter)
        if angle < 0:
            angle += 180
        if angle >= 180:
            angle -= 180
        return angle

    @property
    def midpoint(self) -> Tuple[float, float]:
        """Get the midpoint of the segment."""
        return (
            (self.start[0] + self.end[0]) / 2,
            (self.start[1] + self.end[1]) / 2
        )

    @property
    def is_degenerate(self) -> bool:
        return self.length == 0

    def endpoint_distance(self, other: "Segment") -> float:
        """
        Smallest distance between any endpoint of this segment and any
        endpoint of the other segment.
        """
        best = math.inf
        for p in (self.start, self.end):
            for q in (other.start, other.end):
                d = math.hypot(p[0] - q[0], p[1] - q[1])
                if d < best:
                    best = d
        return best

    def as_tuple(self) -> Tuple[float, float, float, float]:
        return (self.start[0], self.start[1], self.end[0], self.end[1])


@dataclass
class Circle:
    """A detected circle."""
    center: Tuple[float, float]
    radius: float


@dataclass
class Ellipse:
    """
    An ellipse fitted to a closed contour.

    rx, ry are semi-axes; rotation is in degrees, measured the way
    cv2.fitEllipse reports it (clockwise on screen, since Y points down).
    """
    center: Tuple[float, float]
    rx: float
    ry: float
    rotation: float = 0.0

    @property
    def axis_ratio(self) -> float:
        longest = max(self.rx, self.ry)
        if longest <= 0:
            return 0.0
        return min(self.rx, self.ry) / longest

    def sample_points(self, count: int) -> List[Tuple[float, float]]:
        """
        Sample the parametric ellipse, rotation applied, in pixel space.

        Args:
            count: Number of samples around the full ellipse

        Returns:
            List of (x, y) points, first point not repeated at the end
        """
        theta = math.radians(self.rotation)
        cos_t, sin_t = math.cos(theta), math.sin(theta)
        cx, cy = self.center

        points = []
        for i in range(count):
            t = 2 * math.pi * i / count
            ex = self.rx * math.cos(t)
            ey = self.ry * math.sin(t)
            points.append((
                cx + ex * cos_t - ey * sin_t,
                cy + ex * sin_t + ey * cos_t,
            ))
        return points


@dataclass
class Polyline:
    """An ordered point sequence; closed only if the source contour was."""
    points: List[Tuple[float, float]]
    closed: bool = False

    def __len__(self) -> int:
        return len(self.points)


ArcShape = Union[Ellipse, Polyline]


@dataclass
class DetectionResult:
    """
    Everything one detection run produced.

    Rebuilt from scratch on every run; owned by the caller afterwards.
    """
    lines: List[Segment] = field(default_factory=list)
    circles: List[Circle] = field(default_factory=list)
    arcs: List[ArcShape] = field(default_factory=list)
    image_width: int = 0
    image_height: int = 0
    strategy: str = ""
    diagnostics: List[str] = field(default_factory=list)

    @property
    def is_empty(self) -> bool:
        return not (self.lines or self.circles or self.arcs)

    @property
    def ellipses(self) -> List[Ellipse]:
        return [a for a in self.arcs if isinstance(a, Ellipse)]

    @property
    def polylines(self) -> List[Polyline]:
        return [a for a in self.arcs if isinstance(a, Polyline)]

    def summary(self) -> str:
        return (
            f"{len(self.lines)} lines, {len(self.circles)} circles, "
            f"{len(self.ellipses)} ellipses, {len(self.polylines)} polylines"
        )
