import logging
import time
import typing

import numpy as np

from tabfluids._precision import get_dtype
from tabfluids.config import TabulationConfig
from tabfluids.fluids.base import FluidProperties
from tabfluids.tables.data import Axis, BoundaryDerivatives, PropertyTable
from tabfluids.types import TABULATED_PROPERTIES, PropertyName, TwoDimensionalGrid

logger = logging.getLogger(__name__)

__all__ = [
    "build_axes",
    "generate_property_data",
    "generate_all_tabulated_data",
    "generate_missing_tabulated_data",
    "generate_boundary_derivatives",
]


def build_axes(config: TabulationConfig) -> typing.Tuple[Axis, Axis]:
    """
    Build the pressure and temperature axes of a generated table.

    Explicit axis values in `config` take precedence over the evenly spaced
    ranges given by the min/max values and point counts.

    :param config: Tabulation configuration
    :return: Tuple of (pressure axis, temperature axis)
    """
    if config.pressures is not None:
        pressure = Axis(config.pressures)
    else:
        pressure = Axis.linspace(config.pressure_min, config.pressure_max, config.num_p)

    if config.temperatures is not None:
        temperature = Axis(config.temperatures)
    else:
        temperature = Axis.linspace(
            config.temperature_min, config.temperature_max, config.num_T
        )
    return pressure, temperature


def generate_property_data(
    fluid: FluidProperties,
    pressure: Axis,
    temperature: Axis,
    properties: typing.Iterable[PropertyName] = TABULATED_PROPERTIES,
) -> typing.Dict[PropertyName, TwoDimensionalGrid]:
    """
    Evaluate the fluid model at every (temperature, pressure) node.

    Density and internal energy come from the fluid model. Enthalpy is derived
    from them with h = e + p / ρ, so no further model evaluations are made for it.

    :param fluid: Fluid property model to tabulate
    :param pressure: Pressure axis (Pa)
    :param temperature: Temperature axis (K)
    :param properties: Properties to generate
    :return: Property matrices of shape (n_temperatures, n_pressures), keyed by name
    """
    wanted = set(properties)
    if not wanted:
        return {}

    need_density = bool(wanted & {"density", "enthalpy"})
    need_energy = bool(wanted & {"internal_energy", "enthalpy"})
    dtype = get_dtype()
    shape = (temperature.size, pressure.size)
    density = np.empty(shape, dtype=dtype)
    internal_energy = np.empty(shape, dtype=dtype)

    start_time = time.perf_counter()
    for i, T in enumerate(temperature):
        for j, p in enumerate(pressure):
            if need_density:
                density[i, j] = fluid.rho(p, T)
            if need_energy:
                internal_energy[i, j] = fluid.e(p, T)

    result: typing.Dict[PropertyName, TwoDimensionalGrid] = {}
    if "density" in wanted:
        result["density"] = density
    if "internal_energy" in wanted:
        result["internal_energy"] = internal_energy
    if "enthalpy" in wanted:
        result["enthalpy"] = internal_energy + pressure.values[np.newaxis, :] / density

    evaluations = (int(need_density) + int(need_energy)) * shape[0] * shape[1]
    logger.info(
        f"Generated {sorted(result)} for {fluid.fluid_name()} on a "
        f"{pressure.size} x {temperature.size} (p x T) grid: {evaluations} fluid "
        f"property evaluations in {time.perf_counter() - start_time:.3f} s"
    )
    return result


def generate_all_tabulated_data(
    fluid: FluidProperties, pressure: Axis, temperature: Axis
) -> PropertyTable:
    """
    Generate density, internal energy and enthalpy tables from a fluid model.

    :param fluid: Fluid property model to tabulate
    :param pressure: Pressure axis (Pa)
    :param temperature: Temperature axis (K)
    :return: Complete `PropertyTable`
    """
    matrices = generate_property_data(fluid, pressure, temperature)
    return PropertyTable(pressure=pressure, temperature=temperature, **matrices)


def generate_missing_tabulated_data(
    fluid: FluidProperties, table: PropertyTable
) -> PropertyTable:
    """
    Generate the properties missing from a (parsed) table at its own axis points.

    Properties already present in `table` are kept as they are.

    :param fluid: Fluid property model to tabulate
    :param table: Table with possibly missing properties
    :return: Complete `PropertyTable`
    """
    missing = table.missing()
    if not missing:
        return table

    logger.info(f"Generating missing tabulated properties: {list(missing)}")
    matrices = generate_property_data(
        fluid, table.pressure, table.temperature, properties=missing
    )
    return table.with_properties(**matrices)


def generate_boundary_derivatives(
    fluid: FluidProperties,
    pressure: Axis,
    temperature: Axis,
    properties: typing.Iterable[PropertyName] = TABULATED_PROPERTIES,
) -> typing.Dict[PropertyName, BoundaryDerivatives]:
    """
    Evaluate first derivatives of the tabulated properties along the table edges.

    Derivatives wrt pressure are taken at the minimum and maximum pressure for every
    temperature, derivatives wrt temperature at the minimum and maximum temperature
    for every pressure. Enthalpy derivatives follow from h = e + p / ρ:

        dh/dp = de/dp + 1/ρ - p/ρ² * dρ/dp
        dh/dT = de/dT - p/ρ² * dρ/dT

    :param fluid: Fluid property model
    :param pressure: Pressure axis (Pa)
    :param temperature: Temperature axis (K)
    :param properties: Properties to evaluate derivatives for
    :return: `BoundaryDerivatives` keyed by property name
    """
    wanted = list(properties)
    dtype = get_dtype()
    # derivatives[name][edge] is an array along the edge
    derivatives = {
        name: {
            "dp_min": np.empty(temperature.size, dtype=dtype),
            "dp_max": np.empty(temperature.size, dtype=dtype),
            "dT_min": np.empty(pressure.size, dtype=dtype),
            "dT_max": np.empty(pressure.size, dtype=dtype),
        }
        for name in TABULATED_PROPERTIES
    }

    def _fill(edge: str, index: int, wrt_p: bool, p: float, T: float) -> None:
        rho, drho_dp, drho_dT, e, de_dp, de_dT = fluid.rho_e_dpT(p, T)
        if wrt_p:
            derivatives["density"][edge][index] = drho_dp
            derivatives["internal_energy"][edge][index] = de_dp
            derivatives["enthalpy"][edge][index] = (
                de_dp + 1.0 / rho - p * drho_dp / rho**2
            )
        else:
            derivatives["density"][edge][index] = drho_dT
            derivatives["internal_energy"][edge][index] = de_dT
            derivatives["enthalpy"][edge][index] = de_dT - p * drho_dT / rho**2

    for i, T in enumerate(temperature):
        _fill("dp_min", i, True, pressure.min, T)
        _fill("dp_max", i, True, pressure.max, T)
    for j, p in enumerate(pressure):
        _fill("dT_min", j, False, p, temperature.min)
        _fill("dT_max", j, False, p, temperature.max)

    logger.debug(
        f"Evaluated boundary derivatives for {wanted}: "
        f"{2 * (pressure.size + temperature.size)} fluid property evaluations"
    )
    return {name: BoundaryDerivatives(**derivatives[name]) for name in wanted}
