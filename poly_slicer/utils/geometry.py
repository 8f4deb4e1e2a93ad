import numpy as np
import math


def as_point(x: float, y: float) -> np.ndarray:
    """Build a 2-D float64 point."""
    return np.array([x, y], dtype=float)


def dot(v1: np.ndarray, v2: np.ndarray) -> float:
    return float(np.dot(v1, v2))


def cross_2d(v1: np.ndarray, v2: np.ndarray) -> float:
    """
    2-D cross product (determinant of the 2x2 matrix [v1, v2]).

    np.cross is deprecated for 2-D vectors in NumPy 2, so the determinant is written out.

    Args:
        v1, v2: 2-D vectors

    Returns:
        v1.x * v2.y - v1.y * v2.x
    """
    return float(v1[0] * v2[1] - v1[1] * v2[0])


def length_squared(v: np.ndarray) -> float:
    return dot(v, v)


def length(v: np.ndarray) -> float:
    return float(np.linalg.norm(v))


def normalize(v: np.ndarray) -> np.ndarray:
    """
    Scale a vector to unit length.

    Zero vectors come back unchanged rather than as NaN, so callers comparing
    directions get a cosine of 0 for degenerate edges.
    """
    norm = length(v)
    if norm < 1e-12:
        return np.array(v, dtype=float)
    return np.asarray(v, dtype=float) / norm


def interpolate(v0: np.ndarray, v1: np.ndarray, t: float) -> np.ndarray:
    """Linear interpolation, t=0 gives v0 and t=1 gives v1."""
    v0 = np.asarray(v0, dtype=float)
    v1 = np.asarray(v1, dtype=float)
    return v0 + (v1 - v0) * t


def find_intersection_t(v0: np.ndarray, v1: np.ndarray,
                        v2: np.ndarray, v3: np.ndarray) -> float:
    """
    Find how far along the line v0-v1 the line v2-v3 crosses it.

    Solving v0 + t*(v1-v0) = v2 + s*(v3-v2) for t gives
    cross(v2-v0, v3-v2) / cross(v1-v0, v3-v2).

    Args:
        v0, v1: Points defining the first line
        v2, v3: Points defining the second line

    Returns:
        Parameter t along v0-v1; inf or NaN when the lines are parallel
    """
    delta10 = np.asarray(v1, dtype=float) - v0
    delta32 = np.asarray(v3, dtype=float) - v2
    delta20 = np.asarray(v2, dtype=float) - v0

    numerator = cross_2d(delta20, delta32)
    denominator = cross_2d(delta10, delta32)
    if denominator == 0.0:
        if numerator == 0.0:
            return math.nan
        return math.copysign(math.inf, numerator)
    return numerator / denominator


def calculate_signed_area(vertices: np.ndarray) -> float:
    """
    Calculate signed area of polygon using shoelace formula.

    Args:
        vertices: Polygon vertices [N, 2]

    Returns:
        Signed area, positive for counter-clockwise winding (y up)
    """
    vertices = np.asarray(vertices, dtype=float)
    if len(vertices) < 3:
        return 0.0

    x = vertices[:, 0]
    y = vertices[:, 1]
    x_next = np.roll(x, -1)
    y_next = np.roll(y, -1)

    return 0.5 * float(np.sum(x * y_next - x_next * y))


def calculate_centroid(vertices: np.ndarray) -> np.ndarray:
    """
    Average of the polygon's vertices.

    Args:
        vertices: Polygon vertices [N, 2]

    Returns:
        Vertex centroid [2]
    """
    vertices = np.asarray(vertices, dtype=float)
    if len(vertices) == 0:
        raise ValueError("Cannot take the centroid of an empty polygon.")
    return vertices.mean(axis=0)

