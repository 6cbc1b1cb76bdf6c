"""Delayed-vertex fitters: the ad-hoc fit goodness and a TRMS grid search."""

from __future__ import annotations

import math
import sys
from abc import ABC, abstractmethod
from collections.abc import Callable, Iterator, Sequence
from dataclasses import dataclass

from ntaglib.calculator import get_mean, get_rms
from ntaglib.printer import Printer, Verbosity

Vector3 = tuple[float, float, float]
ResidualTimes = Callable[[Vector3], Sequence[float]]

TANK_RADIUS = 1690.0
TANK_HALF_HEIGHT = 1810.0


def goodness(residual_times: Sequence[float], t0: float) -> float:
    """Ad-hoc fit goodness of time-of-flight-subtracted hit times around t0.

    Each hit is weighted by a 60 ns Gaussian and scored by a 5 ns Gaussian;
    the result is the weighted mean score, or 0 when it cannot be formed.
    """
    times = list(residual_times)
    if not times:
        sys.stderr.write(
            "WARNING: Empty hit cluster is passed to goodness, returning 0...\n"
        )
        return 0.0

    numerator = 0.0
    denominator = 0.0
    for t in times:
        weight = math.exp(-0.5 * ((t - t0) / 60.0) ** 2)
        numerator += weight * math.exp(-0.5 * ((t - t0) / 5.0) ** 2)
        denominator += weight

    value = numerator / denominator if denominator != 0 else math.nan
    if math.isnan(value):
        sys.stderr.write("WARNING: Vertex fit goodness is NaN! returning 0...\n")
        return 0.0
    return value


@dataclass(frozen=True)
class FitResult:
    """Outcome of a vertex fit."""

    vertex: Vector3 = (0.0, 0.0, 0.0)
    time: float = 0.0
    goodness: float = 0.0


class VertexFitter(ABC):
    """Base of all delayed vertex fitters; keeps the latest fit result."""

    def __init__(self, name: str, verbosity: Verbosity = Verbosity.DEFAULT) -> None:
        self.msg = Printer(name, verbosity)
        self.result = FitResult()

    @abstractmethod
    def fit(self, residual_times: ResidualTimes) -> FitResult:
        """Fit a vertex; residual_times maps a vertex to ToF-subtracted hit times."""


def _grid_steps(limit: float, width: float) -> Iterator[float]:
    x = -limit
    while x < limit + 0.1:
        yield x
        x += width


class TRMSFitter(VertexFitter):
    """Grid search for the vertex that minimises the RMS of residual hit times."""

    def __init__(self, verbosity: Verbosity = Verbosity.DEFAULT) -> None:
        super().__init__("TRMSFitManager", verbosity)
        self.init_grid_width = 800.0
        self.min_grid_width = 50.0
        self.grid_shrink_rate = 0.5
        self.vertex_max_radius = 5000.0
        self.tank_radius = TANK_RADIUS
        self.tank_half_height = TANK_HALF_HEIGHT

    def set_parameters(
        self,
        init_grid_width: float,
        min_grid_width: float,
        grid_shrink_rate: float,
        vertex_max_radius: float,
    ) -> None:
        """Set the grid-search parameters."""
        self.init_grid_width = init_grid_width
        self.min_grid_width = min_grid_width
        self.grid_shrink_rate = grid_shrink_rate
        self.vertex_max_radius = vertex_max_radius

    def _inside(self, point: Vector3) -> bool:
        x, y, z = point
        if math.hypot(x, y) > self.tank_radius or abs(z) > self.tank_half_height:
            return False
        return math.sqrt(x * x + y * y + z * z) <= self.vertex_max_radius

    def fit(self, residual_times: ResidualTimes) -> FitResult:
        """Shrink a grid around the best point until it reaches the minimum width."""
        if self.grid_shrink_rate >= 1 or self.grid_shrink_rate <= 0:
            raise ValueError("grid_shrink_rate must lie strictly between 0 and 1")

        width = self.init_grid_width
        r_limit = int(2 * self.tank_radius / width) * width / 2.0
        z_limit = int(2 * self.tank_half_height / width) * width / 2.0
        origin: Vector3 = (0.0, 0.0, 0.0)
        best: Vector3 = (0.0, 0.0, 0.0)
        min_trms = 9999.0

        while width > self.min_grid_width - 0.1:
            for dx in _grid_steps(r_limit, width):
                for dy in _grid_steps(r_limit, width):
                    for dz in _grid_steps(z_limit, width):
                        point = (origin[0] + dx, origin[1] + dy, origin[2] + dz)
                        if not self._inside(point):
                            continue
                        trms = get_rms(list(residual_times(point)))
                        if trms < min_trms:
                            min_trms = trms
                            best = point
            origin = best
            width *= self.grid_shrink_rate
            r_limit *= self.grid_shrink_rate
            z_limit *= self.grid_shrink_rate

        times = list(residual_times(best))
        fit_time = get_mean(times) if times else math.nan
        self.result = FitResult(best, fit_time, goodness(times, fit_time))
        return self.result