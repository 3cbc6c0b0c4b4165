import math


EPSILON = 1e-8
TWO_PI = math.pi * 2.0

MIN_SAMPLE_COUNT = 8
MIN_CONTROL_POINTS = 4
DEFAULT_BOUNDARY_SAMPLES = 64
DEFAULT_CONTROL_POINT_COUNT = 12
DEFAULT_SPAN_SUBDIVISIONS = 24
MIN_SPAN_SUBDIVISIONS = 2

# Rounded-rectangle corner radius as a fraction of the short side
CORNER_RADIUS_RATIO = 0.18

DEFAULT_RADIUS = 1.0
DEFAULT_WIDTH = 2.0
DEFAULT_HEIGHT = 1.4

FRAME_DEFAULT_POSITIONS = [
    (-2.2, 1.2, 0.0),
    (2.2, 1.2, 0.0),
    (0.0, 2.2, 2.0),
    (0.0, 0.8, -2.0),
    (-2.0, 1.8, -2.0),
    (2.0, 0.8, 2.0),
]

RELAXATION_STRENGTH_RANGE = (0.05, 2.0)
SHAPE_RETENTION_RANGE = (0.0, 0.5)


def clamp(value: float, bounds: tuple[float, float]) -> float:
    """Clamp *value* into the closed interval *bounds*."""
    low, high = bounds
    return min(high, max(low, value))
