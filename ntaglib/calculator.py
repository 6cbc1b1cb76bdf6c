"""Numeric, statistical, random-pick and file-listing helpers."""

from __future__ import annotations

import bisect
import math
import os
import random
from collections.abc import Sequence
from typing import TypeVar

T = TypeVar("T")

Vector = Sequence[float]

_rng = random.Random()


def sigmoid(x: float) -> float:
    """Logistic function 1 / (1 + e^-x)."""
    return 1.0 / (1.0 + math.exp(-x))


def dot(a: Vector, b: Vector) -> float:
    """Dot product of two 3-vectors."""
    return a[0] * b[0] + a[1] * b[1] + a[2] * b[2]


def norm(vec: Vector) -> float:
    """Euclidean length of a 3-vector."""
    return math.sqrt(vec[0] * vec[0] + vec[1] * vec[1] + vec[2] * vec[2])


def distance(vec1: Vector, vec2: Vector) -> float:
    """Distance between two points in 3D."""
    return norm([p - q for p, q in zip(vec1, vec2)])


def get_sum(values: Sequence[float]) -> float:
    """Sum of the values (0 for an empty sequence)."""
    return sum(values)


def get_mean(values: Sequence[float]) -> float:
    """Arithmetic mean; raises ValueError for an empty sequence."""
    if not values:
        raise ValueError("mean of an empty sequence")
    return get_sum(values) / len(values)


def get_rms(values: Sequence[float]) -> float:
    """Sample standard deviation (N-1 normalisation).

    Returns 0 for an empty sequence and NaN for a single value.
    """
    n = len(values)
    if n == 0:
        return 0.0
    if n == 1:
        return math.nan
    mean = sum(values) / n
    variance = sum((v - mean) ** 2 for v in values) / (n - 1)
    return math.sqrt(variance)


def get_median(values: Sequence[float]) -> float:
    """Median of the values; raises ValueError for an empty sequence."""
    if not values:
        raise ValueError("median of an empty sequence")
    ordered = sorted(values)
    n = len(ordered)
    if n % 2 == 0:
        return (ordered[n // 2 - 1] + ordered[n // 2]) / 2.0
    return ordered[n // 2]


def get_skew(values: Sequence[float]) -> float:
    """Skewness as third central moment over rms**1.5; 0 when degenerate."""
    mean = get_mean(values)
    rms = get_rms(values)
    m3 = sum((v - mean) ** 3 for v in values) / len(values)
    if m3 == 0 or rms == 0:
        return 0.0
    return m3 / rms**1.5


def find_index(values: Sequence[T], value: T) -> int:
    """Index of the first occurrence of value, or -1 if absent."""
    for index, item in enumerate(values):
        if item == value:
            return index
    return -1


def legendre_p(order: int, x: float) -> float:
    """Legendre polynomial P_order(x) for orders 1..5; 0 otherwise."""
    polynomials = {
        1: lambda t: t,
        2: lambda t: (3 * t * t - 1) / 2.0,
        3: lambda t: (5 * t**3 - 3 * t) / 2.0,
        4: lambda t: (35 * t**4 - 30 * t * t + 3) / 8.0,
        5: lambda t: (63 * t**5 - 70 * t**3 + 15 * t) / 8.0,
    }
    poly = polynomials.get(order)
    return poly(x) if poly else 0.0


def _unit(vec: Vector) -> tuple[float, float, float]:
    length = norm(vec)
    if length == 0:
        return (vec[0], vec[1], vec[2])
    return (vec[0] / length, vec[1] / length, vec[2] / length)


def opening_angle(u_a: Vector, u_b: Vector, u_c: Vector) -> float:
    """Opening angle in degrees of the cone through three directions.

    The angle is the arcsine of the circumradius of the triangle formed by
    the three unit vectors; 90 degrees when the circumradius reaches 1.
    """
    a_vec, b_vec, c_vec = _unit(u_a), _unit(u_b), _unit(u_c)
    a = distance(a_vec, b_vec)
    b = distance(c_vec, a_vec)
    c = distance(b_vec, c_vec)

    # Coincident directions span no cone.
    if abs(a * b * c) < 1e-15:
        return 0.0

    s = (a + b + c) * (-a + b + c) * (a - b + c) * (a + b - c)
    if s <= 0:
        return 90.0
    r = a * b * c / math.sqrt(s)
    if r >= 1:
        return 90.0
    return math.degrees(math.asin(r))


def _divide(num: float, den: float) -> float:
    if den != 0:
        return num / den
    if num == 0 or math.isnan(num):
        return math.nan
    return math.copysign(math.inf, num)


def dwall_in_direction(
    vertex: Vector,
    direction: Vector,
    radius: float,
    z_max: float,
    z_min: float,
) -> float:
    """Distance from vertex to the wall of a cylinder along direction."""
    if norm(direction) <= 0:
        raise ValueError("direction must have non-zero length")
    d = _unit(direction)
    vx, vy, vz = vertex[0], vertex[1], vertex[2]

    perp_dot = vx * d[0] + vy * d[1]
    dir_sq = d[0] * d[0] + d[1] * d[1]
    vtx_sq = vx * vx + vy * vy

    disc = perp_dot * perp_dot + dir_sq * (radius * radius - vtx_sq)
    root = math.sqrt(disc) if disc >= 0 else math.nan
    dist_r = abs(_divide(-perp_dot + root, dir_sq))
    if d[2] > 0:
        dist_z = abs(_divide(z_max - vz, d[2]))
    else:
        dist_z = abs(_divide(z_min - vz, d[2]))

    if math.isnan(dist_z):
        return dist_r
    return dist_r if dist_r < dist_z else dist_z


def min_index(values: Sequence[float]) -> int:
    """Index of the first minimum value."""
    if not values:
        raise ValueError("min_index of an empty sequence")
    return min(range(len(values)), key=values.__getitem__)


def max_index(values: Sequence[float]) -> int:
    """Index of the first maximum value."""
    if not values:
        raise ValueError("max_index of an empty sequence")
    return max(range(len(values)), key=values.__getitem__)


def set_seed(seed: int) -> None:
    """Seed the module's random number generator."""
    _rng.seed(seed)


def pick_random(items: Sequence[T]) -> T:
    """Pick a uniformly random element."""
    if not items:
        raise IndexError("cannot pick from an empty sequence")
    return items[int(len(items) * _rng.random())]


def shuffle(items: list) -> None:
    """Shuffle a list in place."""
    _rng.shuffle(items)


def _entries(dir_path: str) -> list[os.DirEntry]:
    try:
        with os.scandir(dir_path) as it:
            return sorted(it, key=lambda entry: entry.name)
    except OSError:
        return []


def list_files(dir_path: str, extension: str = "", recursive: bool = False) -> list[str]:
    """Paths of files in dir_path whose names end with extension.

    With recursive set, files in the immediate subdirectories are included.
    """
    found: list[str] = []
    for entry in _entries(dir_path):
        path = os.path.join(dir_path, entry.name)
        if entry.is_dir():
            if recursive:
                found.extend(list_files(path, extension))
        elif entry.name.endswith(extension):
            found.append(path)
    return found


def list_subdirectories(dir_path: str) -> list[str]:
    """Paths of the subdirectories of dir_path."""
    return [os.path.join(dir_path, e.name) for e in _entries(dir_path) if e.is_dir()]


def pick_file(dir_path: str, extension: str = "") -> str:
    """Pick a random file from dir_path."""
    return pick_random(list_files(dir_path, extension))


def pick_subdirectory(dir_path: str) -> str:
    """Pick a random subdirectory of dir_path."""
    return pick_random(list_subdirectories(dir_path))


def range_indices(sorted_values: Sequence[float], low: float, high: float) -> list[int]:
    """Indices of sorted values lying within [low, high]."""
    start = bisect.bisect_left(sorted_values, low)
    end = bisect.bisect_right(sorted_values, high)
    return list(range(start, end))


def histogram(
    values: Sequence[float], n_bins: int, low: float, high: float
) -> list[tuple[float, int]]:
    """Histogram as a list of (bin centre, count) pairs."""
    if n_bins < 0:
        raise ValueError("n_bins must not be negative")
    ordered = sorted(values)
    width = (high - low) / n_bins if n_bins else 0.0
    result: list[tuple[float, int]] = []
    position = 0
    for index in range(n_bins):
        b_min = low + index * width
        b_max = low + (index + 1) * width
        start = bisect.bisect_left(ordered, b_min, lo=position)
        end = bisect.bisect_left(ordered, b_max * 0.99999, lo=start)
        position = end
        result.append(((b_min + b_max) / 2.0, end - start))
    return result


def split(target: str, delim: str) -> list[str]:
    """Split target on delim; an empty target gives an empty list."""
    if not delim:
        raise ValueError("empty delimiter")
    if not target:
        return []
    return target.split(delim)


def get_cwd() -> str:
    """Current working directory with a trailing slash, or '' on failure."""
    try:
        return os.getcwd() + "/"
    except OSError:
        return ""


def get_env(name: str) -> str:
    """Value of an environment variable with a trailing slash, or ''."""
    value = os.environ.get(name)
    return value + "/" if value is not None else ""


def does_exist(path: str) -> bool:
    """True if path exists and is readable."""
    return os.path.exists(path) and os.access(path, os.R_OK)