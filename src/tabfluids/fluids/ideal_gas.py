import typing

import attrs
import numba
import numpy as np

from tabfluids.constants import c
from tabfluids.errors import ComputationError
from tabfluids.fluids.base import henry_constant_iapws_dT
from tabfluids.types import HenryCoefficients, ValueAndDerivatives

__all__ = [
    "IdealGasFluidProperties",
    "compute_ideal_gas_density",
    "compute_ideal_gas_density_derivatives",
]


@numba.njit(cache=True)
def compute_ideal_gas_density(
    pressure: float, temperature: float, molar_mass: float, gas_constant: float
) -> float:
    """
    Ideal gas density.

        ρ = p * M / (R * T)
    """
    return pressure * molar_mass / (gas_constant * temperature)


@numba.njit(cache=True)
def compute_ideal_gas_density_derivatives(
    pressure: float, temperature: float, molar_mass: float, gas_constant: float
) -> typing.Tuple[float, float, float]:
    """Ideal gas density with its derivatives wrt pressure and temperature."""
    density = pressure * molar_mass / (gas_constant * temperature)
    ddensity_dp = molar_mass / (gas_constant * temperature)
    ddensity_dT = -density / temperature
    return density, ddensity_dp, ddensity_dT


def _check_state(pressure: float, temperature: float) -> None:
    if pressure <= 0.0 or temperature <= 0.0:
        raise ComputationError(
            f"Ideal gas properties require positive pressure and temperature, "
            f"got p={pressure} Pa, T={temperature} K"
        )


@attrs.frozen
class IdealGasFluidProperties:
    """
    Ideal gas with constant heat capacities and transport properties.

    Cheap analytic model, useful as a reference fluid and for checking tabulated properties.
    Defaults describe air.
    """

    name: str = "ideal_gas"
    """Fluid name."""
    molar_mass_value: float = attrs.field(
        default=29.0e-3, validator=attrs.validators.gt(0.0), alias="molar_mass"
    )
    """Molar mass (kg/mol)."""
    gamma: float = attrs.field(default=1.41, validator=attrs.validators.gt(1.0))
    """Ratio of specific heats cp/cv."""
    viscosity: float = attrs.field(default=18.23e-6, validator=attrs.validators.gt(0.0))
    """Dynamic viscosity (Pa.s)."""
    thermal_conductivity: float = attrs.field(
        default=25.68e-3, validator=attrs.validators.gt(0.0)
    )
    """Thermal conductivity (W/m/K)."""
    henry_coefficients: typing.Optional[HenryCoefficients] = None
    """IAPWS Henry's law coefficients for dissolution in water, if known."""

    @property
    def gas_constant(self) -> float:
        """Specific gas constant R/M (J/kg/K)."""
        return c.UNIVERSAL_GAS_CONSTANT / self.molar_mass_value

    @property
    def specific_heat_cp(self) -> float:
        return self.gamma * self.gas_constant / (self.gamma - 1.0)

    @property
    def specific_heat_cv(self) -> float:
        return self.specific_heat_cp / self.gamma

    def fluid_name(self) -> str:
        return self.name

    def molar_mass(self) -> float:
        return self.molar_mass_value

    def rho(self, pressure: float, temperature: float) -> float:
        _check_state(pressure, temperature)
        return compute_ideal_gas_density(
            pressure, temperature, self.molar_mass_value, c.UNIVERSAL_GAS_CONSTANT
        )

    def rho_dpT(self, pressure: float, temperature: float) -> ValueAndDerivatives:
        _check_state(pressure, temperature)
        return compute_ideal_gas_density_derivatives(
            pressure, temperature, self.molar_mass_value, c.UNIVERSAL_GAS_CONSTANT
        )

    def e(self, pressure: float, temperature: float) -> float:
        _check_state(pressure, temperature)
        return self.specific_heat_cv * temperature

    def e_dpT(self, pressure: float, temperature: float) -> ValueAndDerivatives:
        return self.e(pressure, temperature), 0.0, self.specific_heat_cv

    def rho_e_dpT(
        self, pressure: float, temperature: float
    ) -> typing.Tuple[float, float, float, float, float, float]:
        return (*self.rho_dpT(pressure, temperature), *self.e_dpT(pressure, temperature))

    def h(self, pressure: float, temperature: float) -> float:
        _check_state(pressure, temperature)
        return self.specific_heat_cp * temperature

    def h_dpT(self, pressure: float, temperature: float) -> ValueAndDerivatives:
        return self.h(pressure, temperature), 0.0, self.specific_heat_cp

    def mu(self, density: float, temperature: float) -> float:
        return self.viscosity

    def mu_drhoT(self, density: float, temperature: float) -> ValueAndDerivatives:
        return self.viscosity, 0.0, 0.0

    def cp(self, pressure: float, temperature: float) -> float:
        return self.specific_heat_cp

    def cv(self, pressure: float, temperature: float) -> float:
        return self.specific_heat_cv

    def c(self, pressure: float, temperature: float) -> float:
        _check_state(pressure, temperature)
        return float(np.sqrt(self.gamma * self.gas_constant * temperature))

    def k(self, density: float, temperature: float) -> float:
        return self.thermal_conductivity

    def s(self, pressure: float, temperature: float) -> float:
        """Specific entropy relative to the reference state (273.15 K, 101325 Pa)."""
        _check_state(pressure, temperature)
        return float(
            self.specific_heat_cp * np.log(temperature / c.REFERENCE_TEMPERATURE)
            - self.gas_constant * np.log(pressure / c.REFERENCE_PRESSURE)
        )

    def beta(self, pressure: float, temperature: float) -> float:
        _check_state(pressure, temperature)
        return 1.0 / temperature

    def henry_constant(self, temperature: float) -> float:
        return self.henry_constant_dT(temperature)[0]

    def henry_constant_dT(self, temperature: float) -> typing.Tuple[float, float]:
        if self.henry_coefficients is None:
            raise ComputationError(
                f"No Henry's law coefficients configured for {self.name!r}"
            )
        return henry_constant_iapws_dT(temperature, self.henry_coefficients)
