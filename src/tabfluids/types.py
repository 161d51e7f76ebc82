import typing

import numpy as np
from typing_extensions import TypeAlias


__all__ = [
    "OneDimension",
    "TwoDimensions",
    "OneDimensionalGrid",
    "TwoDimensionalGrid",
    "Numeric",
    "PropertyName",
    "AxisName",
    "TABULATED_PROPERTIES",
    "REQUIRED_AXES",
    "ValueAndDerivatives",
    "HenryCoefficients",
]

NDimension = typing.TypeVar("NDimension", bound=typing.Tuple[int, ...])

TwoDimensions: TypeAlias = typing.Tuple[int, int]
"""2D indices"""
OneDimension: TypeAlias = typing.Tuple[int]
"""1D index"""

Numeric = typing.Union[int, float, np.floating, np.integer]
NDimensionalGrid = np.ndarray[NDimension, np.dtype[np.floating]]

TwoDimensionalGrid = NDimensionalGrid[TwoDimensions]
"""2D grid of property values, shape (n_temperatures, n_pressures)"""
OneDimensionalGrid = NDimensionalGrid[OneDimension]
"""1D grid of axis values or boundary derivatives"""

PropertyName = typing.Literal["density", "internal_energy", "enthalpy"]
"""Properties that are tabulated and interpolated"""

AxisName = typing.Literal["pressure", "temperature"]
"""Axes every table must define"""

TABULATED_PROPERTIES: typing.Tuple[PropertyName, ...] = (
    "density",
    "internal_energy",
    "enthalpy",
)
"""Tabulated properties in file order"""

REQUIRED_AXES: typing.Tuple[AxisName, ...] = ("pressure", "temperature")
"""Required axes in file order"""

ValueAndDerivatives = typing.Tuple[float, float, float]
"""A value with its partial derivatives wrt pressure and temperature"""


class HenryCoefficients(typing.NamedTuple):
    """IAPWS G7-04 coefficients for the Henry's law constant of a gas in water."""

    A: float
    B: float
    C: float
