"""Two-dimensional cubic spline interpolation over pressure-temperature tables."""

import logging
import typing

import numba
import numpy as np
from scipy.interpolate import CubicSpline  # type: ignore[import-untyped]

from tabfluids.errors import ValidationError
from tabfluids.tables.data import Axis, BoundaryDerivatives
from tabfluids.types import TwoDimensionalGrid, ValueAndDerivatives

logger = logging.getLogger(__name__)

__all__ = ["BicubicSplineInterpolator", "GridCell"]


# Maps [f(0), f(1), f'(0), f'(1)] on the unit interval to power-basis coefficients
_HERMITE_TO_POWER = np.array(
    [
        [1.0, 0.0, 0.0, 0.0],
        [0.0, 0.0, 1.0, 0.0],
        [-3.0, 3.0, -2.0, -1.0],
        [2.0, -2.0, 1.0, 1.0],
    ]
)


@numba.njit(cache=True)
def _locate(axis: np.ndarray, x: float) -> int:
    """Index of the interval of `axis` containing `x`, clipped to the first/last interval."""
    lo = 0
    hi = axis.size - 1
    while hi - lo > 1:
        mid = (lo + hi) // 2
        if axis[mid] <= x:
            lo = mid
        else:
            hi = mid
    return lo


@numba.njit(cache=True)
def _locate_cell(
    pressures: np.ndarray,
    temperatures: np.ndarray,
    pressure: float,
    temperature: float,
) -> typing.Tuple[int, int, float, float, float, float]:
    j = _locate(pressures, pressure)
    i = _locate(temperatures, temperature)
    dp = pressures[j + 1] - pressures[j]
    dT = temperatures[i + 1] - temperatures[i]
    u = (pressure - pressures[j]) / dp
    v = (temperature - temperatures[i]) / dT
    return i, j, u, v, dp, dT


@numba.njit(cache=True)
def _evaluate_cell(
    coefficients: np.ndarray,
    i: int,
    j: int,
    u: float,
    v: float,
    dp: float,
    dT: float,
) -> typing.Tuple[float, float, float]:
    u_pow = np.array([1.0, u, u * u, u * u * u])
    du_pow = np.array([0.0, 1.0, 2.0 * u, 3.0 * u * u])
    v_pow = np.array([1.0, v, v * v, v * v * v])
    dv_pow = np.array([0.0, 1.0, 2.0 * v, 3.0 * v * v])

    value = 0.0
    dvalue_du = 0.0
    dvalue_dv = 0.0
    for a in range(4):
        for b in range(4):
            coefficient = coefficients[i, j, a, b]
            value += coefficient * u_pow[a] * v_pow[b]
            dvalue_du += coefficient * du_pow[a] * v_pow[b]
            dvalue_dv += coefficient * u_pow[a] * dv_pow[b]
    return value, dvalue_du / dp, dvalue_dv / dT


@numba.njit(cache=True)
def _evaluate_patch(
    coefficients: np.ndarray,
    pressures: np.ndarray,
    temperatures: np.ndarray,
    pressure: float,
    temperature: float,
) -> typing.Tuple[float, float, float]:
    i, j, u, v, dp, dT = _locate_cell(pressures, temperatures, pressure, temperature)
    return _evaluate_cell(coefficients, i, j, u, v, dp, dT)


class GridCell(typing.NamedTuple):
    """Cell of a pressure-temperature grid containing a query point."""

    i: int
    """Temperature interval index."""
    j: int
    """Pressure interval index."""
    u: float
    """Normalized pressure coordinate within the cell."""
    v: float
    """Normalized temperature coordinate within the cell."""
    dp: float
    dT: float


class BicubicSplineInterpolator:
    """
    Bicubic spline through a rectangular, possibly non-uniform, pressure-temperature grid.

    Node derivatives are taken from one-dimensional cubic splines: along pressure for
    every temperature row, along temperature for every pressure column, and the cross
    derivative from splining the pressure derivatives along temperature. When boundary
    derivatives are given, the row and column splines are clamped to them, otherwise
    natural end conditions are used. Each grid cell then holds a bicubic Hermite patch,
    so evaluation costs a cell lookup plus one 4x4 polynomial.

    Evaluation reproduces the tabulated values at grid nodes. Queries outside the grid
    are not checked here; they evaluate the nearest edge patch.
    """

    def __init__(
        self,
        pressure: typing.Union[Axis, typing.Sequence[float], np.ndarray],
        temperature: typing.Union[Axis, typing.Sequence[float], np.ndarray],
        values: TwoDimensionalGrid,
        boundary: typing.Optional[BoundaryDerivatives] = None,
    ) -> None:
        """
        Fit the interpolator.

        :param pressure: Pressure axis (Pa), strictly increasing
        :param temperature: Temperature axis (K), strictly increasing
        :param values: Values of shape (n_temperatures, n_pressures), `values[i, j]` at `(temperature[i], pressure[j])`
        :param boundary: Optional first derivatives along the table edges for clamped splines
        :raises `ValidationError`: If shapes do not match or values are not finite
        """
        pressure_axis = pressure if isinstance(pressure, Axis) else Axis(pressure)
        temperature_axis = (
            temperature if isinstance(temperature, Axis) else Axis(temperature)
        )
        p = np.ascontiguousarray(pressure_axis.values, dtype=np.float64)
        T = np.ascontiguousarray(temperature_axis.values, dtype=np.float64)
        f = np.asarray(values, dtype=np.float64)

        if f.shape != (T.size, p.size):
            raise ValidationError(
                f"Values shape {f.shape} must match "
                f"(n_temperatures={T.size}, n_pressures={p.size})"
            )
        if not np.all(np.isfinite(f)):
            raise ValidationError("Interpolated values must be finite")

        if boundary is not None:
            boundary.check_shape(num_p=p.size, num_T=T.size)
            bc_p = ((1, boundary.dp_min), (1, boundary.dp_max))
            bc_T = ((1, boundary.dT_min), (1, boundary.dT_max))
        else:
            bc_p = bc_T = "natural"

        f_p = CubicSpline(p, f, axis=1, bc_type=bc_p)(p, 1)
        f_T = CubicSpline(T, f, axis=0, bc_type=bc_T)(T, 1)
        f_pT = CubicSpline(T, f_p, axis=0, bc_type="natural")(T, 1)

        self.pressure = pressure_axis
        self.temperature = temperature_axis
        self.is_clamped = boundary is not None
        self._pressures = p
        self._temperatures = T
        self._coefficients = self._build_coefficients(p, T, f, f_p, f_T, f_pT)
        logger.debug(
            f"Built {'clamped' if self.is_clamped else 'natural'} bicubic spline "
            f"on a {p.size} x {T.size} (p x T) grid"
        )

    @staticmethod
    def _build_coefficients(
        p: np.ndarray,
        T: np.ndarray,
        f: np.ndarray,
        f_p: np.ndarray,
        f_T: np.ndarray,
        f_pT: np.ndarray,
    ) -> np.ndarray:
        """
        Power-basis coefficients of every cell, shape (n_T - 1, n_p - 1, 4, 4).

        Entry `[i, j, a, b]` multiplies u^a * v^b, where u and v are the normalized
        pressure and temperature coordinates within cell `(i, j)`.
        """
        dp = np.diff(p)[np.newaxis, :]
        dT = np.diff(T)[:, np.newaxis]

        def corners(grid: np.ndarray) -> typing.Tuple[np.ndarray, ...]:
            # (p_j, T_i), (p_j, T_i+1), (p_j+1, T_i), (p_j+1, T_i+1)
            return grid[:-1, :-1], grid[1:, :-1], grid[:-1, 1:], grid[1:, 1:]

        f00, f01, f10, f11 = corners(f)
        fp00, fp01, fp10, fp11 = (g * dp for g in corners(f_p))
        fT00, fT01, fT10, fT11 = (g * dT for g in corners(f_T))
        fpT00, fpT01, fpT10, fpT11 = (g * dp * dT for g in corners(f_pT))

        hermite = np.empty((T.size - 1, p.size - 1, 4, 4))
        hermite[..., 0, :] = np.stack([f00, f01, fT00, fT01], axis=-1)
        hermite[..., 1, :] = np.stack([f10, f11, fT10, fT11], axis=-1)
        hermite[..., 2, :] = np.stack([fp00, fp01, fpT00, fpT01], axis=-1)
        hermite[..., 3, :] = np.stack([fp10, fp11, fpT10, fpT11], axis=-1)

        coefficients = np.einsum(
            "am,ijmn,bn->ijab", _HERMITE_TO_POWER, hermite, _HERMITE_TO_POWER
        )
        return np.ascontiguousarray(coefficients)

    def evaluate(self, pressure: float, temperature: float) -> ValueAndDerivatives:
        """
        Interpolated value and its partial derivatives from a single cell patch.

        :param pressure: Pressure (Pa)
        :param temperature: Temperature (K)
        :return: Tuple of (value, ∂value/∂p, ∂value/∂T)
        """
        value, dvalue_dp, dvalue_dT = _evaluate_patch(
            self._coefficients,
            self._pressures,
            self._temperatures,
            float(pressure),
            float(temperature),
        )
        return float(value), float(dvalue_dp), float(dvalue_dT)

    def value(self, pressure: float, temperature: float) -> float:
        """Interpolated value only."""
        return self.evaluate(pressure, temperature)[0]

    def locate(self, pressure: float, temperature: float) -> GridCell:
        """
        Find the grid cell containing a query point.

        The cell can be passed to `evaluate_cell` of any interpolator built on the
        same axes, so several properties are evaluated with a single cell search.

        :param pressure: Pressure (Pa)
        :param temperature: Temperature (K)
        :return: `GridCell` holding the cell indices and local coordinates
        """
        i, j, u, v, dp, dT = _locate_cell(
            self._pressures, self._temperatures, float(pressure), float(temperature)
        )
        return GridCell(int(i), int(j), float(u), float(v), float(dp), float(dT))

    def evaluate_cell(self, cell: GridCell) -> ValueAndDerivatives:
        """
        Interpolated value and its partial derivatives in a cell found by `locate`.

        :param cell: Cell from `locate` on an interpolator with the same axes
        :return: Tuple of (value, ∂value/∂p, ∂value/∂T)
        :raises `ValidationError`: If the cell does not belong to this grid
        """
        num_T_cells, num_p_cells = self._coefficients.shape[:2]
        if not (0 <= cell.i < num_T_cells and 0 <= cell.j < num_p_cells):
            raise ValidationError(
                f"Cell ({cell.i}, {cell.j}) is outside the "
                f"{num_T_cells} x {num_p_cells} (T x p) cells of this grid"
            )
        value, dvalue_dp, dvalue_dT = _evaluate_cell(self._coefficients, *cell)
        return float(value), float(dvalue_dp), float(dvalue_dT)

    def __repr__(self) -> str:
        return (
            f"{type(self).__name__}(pressure={self.pressure!r}, "
            f"temperature={self.temperature!r}, clamped={self.is_clamped})"
        )
