"""Fluid properties served from interpolated pressure-temperature tables."""

import enum
import logging
import os
from pathlib import Path
import typing

from tabfluids.config import TabulationConfig
from tabfluids.errors import RangeError, SetupError
from tabfluids.fluids.base import FluidProperties
from tabfluids.interpolation import BicubicSplineInterpolator
from tabfluids.tables.codec import read_table, write_table
from tabfluids.tables.data import PropertyTable
from tabfluids.tables.generator import (
    build_axes,
    generate_all_tabulated_data,
    generate_boundary_derivatives,
    generate_missing_tabulated_data,
)
from tabfluids.types import TABULATED_PROPERTIES, PropertyName, ValueAndDerivatives

logger = logging.getLogger(__name__)

__all__ = ["SetupState", "TabulatedFluidProperties"]


class SetupState(enum.Enum):
    """Lifecycle of a `TabulatedFluidProperties` instance."""

    UNINITIALIZED = "uninitialized"
    LOADING = "loading"
    """Reading a complete table from file."""
    GENERATING = "generating"
    """Generating the whole table from the fluid model."""
    HYBRID = "hybrid"
    """Completing a table read from file with generated properties."""
    READY = "ready"


class TabulatedFluidProperties:
    """
    Fluid properties with density, internal energy and enthalpy interpolated from tables.

    Computing density from pressure and temperature can be expensive for equations of
    state formulated in terms of density and temperature (e.g. Helmholtz free energy
    models), as it requires an iterative solve. This class tabulates density, internal
    energy and enthalpy over a pressure-temperature grid once, and then serves them (and
    their derivatives) from bicubic spline interpolation. All other properties are
    forwarded unchanged to the wrapped fluid model.

    The table is read from `config.file_name` if that file exists. Properties missing
    from the file are generated from the fluid model at the pressures and temperatures
    given in the file, and the completed table is written back. If there is no file,
    the table is generated over the configured ranges and written to `config.file_name`
    for future runs.

    Tabulated properties are only available inside the tabulated domain; queries outside
    it raise `RangeError`.

    Example:
    ```python
    fluid = CoolPropFluidProperties("CO2")
    config = TabulationConfig(file_name="co2.csv", num_p=50, num_T=50)
    properties = TabulatedFluidProperties(fluid, config)
    properties.initial_setup()

    rho, drho_dp, drho_dT = properties.rho_dpT(10e6, 350.0)
    ```
    """

    def __init__(
        self,
        fluid: FluidProperties,
        config: typing.Optional[TabulationConfig] = None,
    ) -> None:
        """
        :param fluid: Fluid property model to tabulate and forward untabulated properties to
        :param config: Tabulation configuration. Defaults to `TabulationConfig()`
        """
        self.fluid = fluid
        self.config = config if config is not None else TabulationConfig()
        self._state = SetupState.UNINITIALIZED
        self._table: typing.Optional[PropertyTable] = None
        self._interpolators: typing.Dict[PropertyName, BicubicSplineInterpolator] = {}
        self._pressure_min = self._pressure_max = float("nan")
        self._temperature_min = self._temperature_max = float("nan")

    @property
    def state(self) -> SetupState:
        return self._state

    @property
    def is_ready(self) -> bool:
        return self._state is SetupState.READY

    def initial_setup(self) -> None:
        """
        Load or generate the tables and build the interpolators.

        Must be called exactly once, before any tabulated property is requested.

        :raises `SetupError`: If called more than once
        :raises `FormatError`: If the table file is malformed
        :raises `TableIOError`: If the table file cannot be read or written
        """
        if self._state is not SetupState.UNINITIALIZED:
            raise SetupError(
                f"`initial_setup` can only be called once (current state: {self._state.value})"
            )

        file_name = self.config.file_name
        if file_name is not None and file_name.exists():
            self._state = SetupState.LOADING
            table = read_table(file_name)
            if not table.is_complete:
                self._state = SetupState.HYBRID
                logger.info(
                    f"{file_name} does not contain {list(table.missing())}; "
                    f"generating them with {self.fluid.fluid_name()}"
                )
                table = generate_missing_tabulated_data(self.fluid, table)
                self._save(table)
        else:
            self._state = SetupState.GENERATING
            if file_name is not None:
                logger.info(
                    f"No tabulated data file found at {file_name}; "
                    f"generating tables with {self.fluid.fluid_name()}"
                )
            pressure, temperature = build_axes(self.config)
            table = generate_all_tabulated_data(self.fluid, pressure, temperature)
            self._save(table)

        self._build_interpolators(table)
        self._table = table
        self._pressure_min = table.pressure.min
        self._pressure_max = table.pressure.max
        self._temperature_min = table.temperature.min
        self._temperature_max = table.temperature.max
        self._state = SetupState.READY
        logger.info(
            f"Tabulated properties ready: p ∈ [{self._pressure_min:.6g}, {self._pressure_max:.6g}] Pa, "
            f"T ∈ [{self._temperature_min:.6g}, {self._temperature_max:.6g}] K, "
            f"{table.num_p} x {table.num_T} (p x T) points"
        )

    def _save(self, table: PropertyTable) -> None:
        if self.config.file_name is None or not self.config.save_file:
            return
        write_table(self.config.file_name, table)

    def _build_interpolators(self, table: PropertyTable) -> None:
        boundaries = {}
        if self.config.use_boundary_derivatives:
            boundaries = generate_boundary_derivatives(
                self.fluid, table.pressure, table.temperature
            )

        interpolators = {}
        for name in TABULATED_PROPERTIES:
            values = table.get(name)
            if values is None:
                raise SetupError(f"Tabulated property {name!r} was not generated")
            interpolators[name] = BicubicSplineInterpolator(
                table.pressure, table.temperature, values, boundaries.get(name)
            )
        self._interpolators = interpolators

    def _require_ready(self) -> None:
        if self._state is not SetupState.READY:
            raise SetupError(
                "Tabulated properties are not available before `initial_setup` "
                f"has completed (current state: {self._state.value})"
            )

    @property
    def table(self) -> PropertyTable:
        """The finalized property table."""
        self._require_ready()
        assert self._table is not None
        return self._table

    def interpolator(self, name: PropertyName) -> BicubicSplineInterpolator:
        """Get the interpolator of a tabulated property."""
        self._require_ready()
        try:
            return self._interpolators[name]
        except KeyError:
            raise SetupError(
                f"No interpolator for {name!r}. "
                f"Tabulated properties are: {list(TABULATED_PROPERTIES)}"
            ) from None

    @property
    def pressure_min(self) -> float:
        self._require_ready()
        return self._pressure_min

    @property
    def pressure_max(self) -> float:
        self._require_ready()
        return self._pressure_max

    @property
    def temperature_min(self) -> float:
        self._require_ready()
        return self._temperature_min

    @property
    def temperature_max(self) -> float:
        self._require_ready()
        return self._temperature_max

    def write_tabulated_data(self, filepath: typing.Union[str, os.PathLike]) -> Path:
        """
        Write the finalized table to file.

        :param filepath: Destination path
        :return: Path written to
        """
        return write_table(filepath, self.table)

    def check_input_variables(self, pressure: float, temperature: float) -> None:
        """
        Check that pressure and temperature are within the tabulated domain.

        :param pressure: Pressure (Pa)
        :param temperature: Temperature (K)
        :raises `RangeError`: If either lies outside the tabulated range (the bounds themselves are valid)
        """
        self._require_ready()
        if not self._pressure_min <= pressure <= self._pressure_max:
            raise RangeError(
                f"Pressure {pressure} Pa is outside the range of tabulated pressure "
                f"[{self._pressure_min}, {self._pressure_max}] Pa"
            )
        if not self._temperature_min <= temperature <= self._temperature_max:
            raise RangeError(
                f"Temperature {temperature} K is outside the range of tabulated temperature "
                f"[{self._temperature_min}, {self._temperature_max}] K"
            )

    def _interpolate(
        self, name: PropertyName, pressure: float, temperature: float
    ) -> ValueAndDerivatives:
        self.check_input_variables(pressure, temperature)
        return self._interpolators[name].evaluate(pressure, temperature)

    def fluid_name(self) -> str:
        return self.fluid.fluid_name()

    def molar_mass(self) -> float:
        return self.fluid.molar_mass()

    def rho(self, pressure: float, temperature: float) -> float:
        return self._interpolate("density", pressure, temperature)[0]

    def rho_dpT(self, pressure: float, temperature: float) -> ValueAndDerivatives:
        return self._interpolate("density", pressure, temperature)

    def e(self, pressure: float, temperature: float) -> float:
        return self._interpolate("internal_energy", pressure, temperature)[0]

    def e_dpT(self, pressure: float, temperature: float) -> ValueAndDerivatives:
        return self._interpolate("internal_energy", pressure, temperature)

    def rho_e_dpT(
        self, pressure: float, temperature: float
    ) -> typing.Tuple[float, float, float, float, float, float]:
        """Density and internal energy with their derivatives, sharing one range check and cell search."""
        self.check_input_variables(pressure, temperature)
        density = self._interpolators["density"]
        # All interpolators are built on the table axes
        cell = density.locate(pressure, temperature)
        rho = density.evaluate_cell(cell)
        e = self._interpolators["internal_energy"].evaluate_cell(cell)
        return (*rho, *e)

    def h(self, pressure: float, temperature: float) -> float:
        return self._interpolate("enthalpy", pressure, temperature)[0]

    def h_dpT(self, pressure: float, temperature: float) -> ValueAndDerivatives:
        return self._interpolate("enthalpy", pressure, temperature)

    # Properties below are not tabulated and come straight from the fluid model

    def mu(self, density: float, temperature: float) -> float:
        return self.fluid.mu(density, temperature)

    def mu_drhoT(self, density: float, temperature: float) -> ValueAndDerivatives:
        return self.fluid.mu_drhoT(density, temperature)

    def cp(self, pressure: float, temperature: float) -> float:
        return self.fluid.cp(pressure, temperature)

    def cv(self, pressure: float, temperature: float) -> float:
        return self.fluid.cv(pressure, temperature)

    def c(self, pressure: float, temperature: float) -> float:
        return self.fluid.c(pressure, temperature)

    def k(self, density: float, temperature: float) -> float:
        return self.fluid.k(density, temperature)

    def s(self, pressure: float, temperature: float) -> float:
        return self.fluid.s(pressure, temperature)

    def beta(self, pressure: float, temperature: float) -> float:
        return self.fluid.beta(pressure, temperature)

    def henry_constant(self, temperature: float) -> float:
        return self.fluid.henry_constant(temperature)

    def henry_constant_dT(self, temperature: float) -> typing.Tuple[float, float]:
        return self.fluid.henry_constant_dT(temperature)

    def __repr__(self) -> str:
        return (
            f"{type(self).__name__}(fluid={self.fluid.fluid_name()!r}, "
            f"state={self._state.value!r})"
        )
