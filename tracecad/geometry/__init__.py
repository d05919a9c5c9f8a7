# Vector primitive data structures

from .primitives import (
    Segment,
    Circle,
    Ellipse,
    Polyline,
    ArcShape,
    DetectionResult,
)

__all__ = [
    "Segment",
    "Circle",
    "Ellipse",
    "Polyline",
    "ArcShape",
    "DetectionResult",
]
