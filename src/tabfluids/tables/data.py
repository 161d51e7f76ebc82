import logging
import typing

import attrs
import numpy as np

from tabfluids._precision import get_dtype
from tabfluids.errors import ValidationError
from tabfluids.types import (
    TABULATED_PROPERTIES,
    OneDimensionalGrid,
    PropertyName,
    TwoDimensionalGrid,
)

logger = logging.getLogger(__name__)

__all__ = [
    "Axis",
    "BoundaryDerivatives",
    "PropertyTable",
    "reshape_data_2d",
    "flatten_data",
]


def _frozen_array(value: typing.Any, ndim: int) -> np.ndarray:
    """Copy `value` into a read-only array of the active dtype."""
    array = np.array(value, dtype=get_dtype())
    if array.ndim != ndim:
        raise ValidationError(
            f"Expected a {ndim}-dimensional array, got {array.ndim} dimension(s)"
        )
    array.setflags(write=False)
    return array


def _frozen_vector(value: typing.Any) -> OneDimensionalGrid:
    return _frozen_array(value, ndim=1)


def _frozen_matrix(value: typing.Any) -> TwoDimensionalGrid:
    return _frozen_array(value, ndim=2)


def _frozen_optional_matrix(
    value: typing.Any,
) -> typing.Optional[TwoDimensionalGrid]:
    if value is None:
        return None
    return _frozen_matrix(value)


@attrs.frozen(eq=False)
class Axis:
    """
    Strictly increasing grid line (pressure or temperature) of a property table.

    The values are stored in a read-only array, so an axis cannot change after construction.
    """

    values: OneDimensionalGrid = attrs.field(converter=_frozen_vector)
    """Axis values, strictly increasing, at least two of them."""

    @values.validator
    def _check_values(self, attribute, value: np.ndarray) -> None:
        if value.size < 2:
            raise ValidationError(
                f"An axis requires at least 2 values, got {value.size}"
            )
        if not np.all(np.isfinite(value)):
            raise ValidationError("Axis values must be finite")
        if not np.all(np.diff(value) > 0):
            index = int(np.argmax(np.diff(value) <= 0))
            raise ValidationError(
                f"Axis values must be strictly monotonically increasing, "
                f"but value {index + 1} ({value[index + 1]!r}) does not exceed "
                f"value {index} ({value[index]!r})"
            )

    @classmethod
    def linspace(cls, minimum: float, maximum: float, num: int) -> "Axis":
        """
        Build an evenly spaced axis.

        :param minimum: First axis value
        :param maximum: Last axis value
        :param num: Number of points (>= 2)
        :return: `Axis` instance
        """
        if num < 2:
            raise ValidationError(f"An axis requires at least 2 values, got {num}")
        return cls(np.linspace(minimum, maximum, num))

    @property
    def min(self) -> float:
        return float(self.values[0])

    @property
    def max(self) -> float:
        return float(self.values[-1])

    @property
    def size(self) -> int:
        return int(self.values.size)

    def __len__(self) -> int:
        return self.size

    def __iter__(self) -> typing.Iterator[float]:
        return (float(v) for v in self.values)

    def __getitem__(self, index: int) -> float:
        return float(self.values[index])

    def __array__(self, dtype=None, copy=None) -> np.ndarray:
        if dtype is None:
            return self.values
        return self.values.astype(dtype)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Axis):
            return NotImplemented
        return np.array_equal(self.values, other.values)

    def __hash__(self) -> int:
        return hash(self.values.tobytes())

    def __repr__(self) -> str:
        return f"Axis(min={self.min!r}, max={self.max!r}, size={self.size})"


@attrs.frozen(eq=False)
class BoundaryDerivatives:
    """
    First derivatives of a tabulated property along the four table edges.

    Used to clamp the splines of an interpolator instead of leaving them natural.
    """

    dp_min: OneDimensionalGrid = attrs.field(converter=_frozen_vector)
    """∂/∂p at the minimum pressure, one entry per temperature."""

    dp_max: OneDimensionalGrid = attrs.field(converter=_frozen_vector)
    """∂/∂p at the maximum pressure, one entry per temperature."""

    dT_min: OneDimensionalGrid = attrs.field(converter=_frozen_vector)
    """∂/∂T at the minimum temperature, one entry per pressure."""

    dT_max: OneDimensionalGrid = attrs.field(converter=_frozen_vector)
    """∂/∂T at the maximum temperature, one entry per pressure."""

    def __attrs_post_init__(self) -> None:
        if self.dp_min.size != self.dp_max.size:
            raise ValidationError(
                f"`dp_min` ({self.dp_min.size}) and `dp_max` ({self.dp_max.size}) "
                "must have the same length"
            )
        if self.dT_min.size != self.dT_max.size:
            raise ValidationError(
                f"`dT_min` ({self.dT_min.size}) and `dT_max` ({self.dT_max.size}) "
                "must have the same length"
            )

    def check_shape(self, num_p: int, num_T: int) -> None:
        """
        Check that the vectors fit a table of `num_T` rows and `num_p` columns.

        :raises `ValidationError`: If the lengths do not match
        """
        if self.dp_min.size != num_T:
            raise ValidationError(
                f"Pressure boundary derivatives need {num_T} entries "
                f"(one per temperature), got {self.dp_min.size}"
            )
        if self.dT_min.size != num_p:
            raise ValidationError(
                f"Temperature boundary derivatives need {num_p} entries "
                f"(one per pressure), got {self.dT_min.size}"
            )


@attrs.frozen(eq=False)
class PropertyTable:
    """
    Pressure and temperature axes plus the tabulated property matrices defined on them.

    Each property matrix has shape (n_temperatures, n_pressures), with element `[i, j]`
    holding the value at `(temperature[i], pressure[j])`. Absent properties are None.
    Tables are immutable; use `with_properties` to derive a completed copy.
    """

    pressure: Axis
    """Pressure axis (Pa)."""

    temperature: Axis
    """Temperature axis (K)."""

    density: typing.Optional[TwoDimensionalGrid] = attrs.field(
        default=None, converter=_frozen_optional_matrix
    )
    """Density (kg/m³)."""

    internal_energy: typing.Optional[TwoDimensionalGrid] = attrs.field(
        default=None, converter=_frozen_optional_matrix
    )
    """Specific internal energy (J/kg)."""

    enthalpy: typing.Optional[TwoDimensionalGrid] = attrs.field(
        default=None, converter=_frozen_optional_matrix
    )
    """Specific enthalpy (J/kg)."""

    def __attrs_post_init__(self) -> None:
        shape = (self.num_T, self.num_p)
        for name in TABULATED_PROPERTIES:
            matrix = self.get(name)
            if matrix is not None and matrix.shape != shape:
                raise ValidationError(
                    f"`{name}` shape {matrix.shape} must match "
                    f"(n_temperatures={self.num_T}, n_pressures={self.num_p})"
                )

    @property
    def num_p(self) -> int:
        return self.pressure.size

    @property
    def num_T(self) -> int:
        return self.temperature.size

    def get(self, name: PropertyName) -> typing.Optional[TwoDimensionalGrid]:
        """Get the matrix of a tabulated property, or None if it is absent."""
        if name not in TABULATED_PROPERTIES:
            raise ValidationError(
                f"Unknown tabulated property {name!r}. "
                f"Must be one of: {list(TABULATED_PROPERTIES)}"
            )
        return getattr(self, name)

    def present(self) -> typing.Tuple[PropertyName, ...]:
        return tuple(name for name in TABULATED_PROPERTIES if self.get(name) is not None)

    def missing(self) -> typing.Tuple[PropertyName, ...]:
        return tuple(name for name in TABULATED_PROPERTIES if self.get(name) is None)

    @property
    def is_complete(self) -> bool:
        return not self.missing()

    def with_properties(self, **matrices: TwoDimensionalGrid) -> "PropertyTable":
        """
        Return a copy of this table with the given property matrices set.

        :param matrices: Property matrices keyed by property name
        :return: New `PropertyTable`
        """
        for name in matrices:
            if name not in TABULATED_PROPERTIES:
                raise ValidationError(
                    f"Unknown tabulated property {name!r}. "
                    f"Must be one of: {list(TABULATED_PROPERTIES)}"
                )
        return attrs.evolve(self, **matrices)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, PropertyTable):
            return NotImplemented
        if self.pressure != other.pressure or self.temperature != other.temperature:
            return False
        for name in TABULATED_PROPERTIES:
            mine, theirs = self.get(name), other.get(name)
            if (mine is None) != (theirs is None):
                return False
            if mine is not None and not np.array_equal(mine, theirs):
                return False
        return True

    __hash__ = None  # type: ignore[assignment]


def reshape_data_2d(
    num_rows: int, num_cols: int, values: typing.Sequence[float]
) -> TwoDimensionalGrid:
    """
    Form a (num_rows x num_cols) matrix from a flat sequence in row-major order.

    In table files, rows are temperatures and columns are pressures, so
    values cycle through all pressures before moving to the next temperature.

    :param num_rows: Number of rows (temperatures)
    :param num_cols: Number of columns (pressures)
    :param values: Flat sequence of `num_rows * num_cols` values
    :return: 2D matrix
    :raises `ValidationError`: If the number of values does not match
    """
    flat = np.asarray(values, dtype=get_dtype())
    if flat.ndim != 1 or flat.size != num_rows * num_cols:
        raise ValidationError(
            f"Cannot reshape {flat.size} values into a {num_rows} x {num_cols} matrix"
        )
    return flat.reshape(num_rows, num_cols)


def flatten_data(matrix: TwoDimensionalGrid) -> OneDimensionalGrid:
    """
    Flatten a 2D matrix into a 1D array in row-major order (inverse of `reshape_data_2d`).

    :param matrix: 2D matrix
    :return: Flat array
    """
    array = np.asarray(matrix)
    if array.ndim != 2:
        raise ValidationError(f"Expected a 2D matrix, got {array.ndim} dimension(s)")
    return array.ravel(order="C").copy()
