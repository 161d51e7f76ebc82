"""Fluid property model interface and shared property correlations."""

import typing

import numba
import numpy as np

from tabfluids.constants import c
from tabfluids.errors import ComputationError
from tabfluids.types import HenryCoefficients, ValueAndDerivatives

__all__ = [
    "FluidProperties",
    "HENRY_COEFFICIENTS",
    "henry_constant_iapws",
    "henry_constant_iapws_dT",
]


@typing.runtime_checkable
class FluidProperties(typing.Protocol):
    """
    Single-phase fluid properties as functions of pressure (Pa) and temperature (K).

    Viscosity and thermal conductivity take density (kg/m³) and temperature instead.
    Methods suffixed `_dpT` return the value with its derivatives wrt pressure and
    temperature, `mu_drhoT` returns viscosity with its derivatives wrt density and
    temperature.
    """

    def fluid_name(self) -> str:
        """Fluid name."""
        ...

    def molar_mass(self) -> float:
        """Molar mass (kg/mol)."""
        ...

    def rho(self, pressure: float, temperature: float) -> float:
        """Density (kg/m³)."""
        ...

    def rho_dpT(self, pressure: float, temperature: float) -> ValueAndDerivatives:
        """Density and its derivatives wrt pressure and temperature."""
        ...

    def e(self, pressure: float, temperature: float) -> float:
        """Specific internal energy (J/kg)."""
        ...

    def e_dpT(self, pressure: float, temperature: float) -> ValueAndDerivatives:
        """Internal energy and its derivatives wrt pressure and temperature."""
        ...

    def rho_e_dpT(
        self, pressure: float, temperature: float
    ) -> typing.Tuple[float, float, float, float, float, float]:
        """Density and internal energy, each followed by derivatives wrt pressure and temperature."""
        ...

    def h(self, pressure: float, temperature: float) -> float:
        """Specific enthalpy (J/kg)."""
        ...

    def h_dpT(self, pressure: float, temperature: float) -> ValueAndDerivatives:
        """Enthalpy and its derivatives wrt pressure and temperature."""
        ...

    def mu(self, density: float, temperature: float) -> float:
        """Dynamic viscosity (Pa.s)."""
        ...

    def mu_drhoT(self, density: float, temperature: float) -> ValueAndDerivatives:
        """Viscosity and its derivatives wrt density and temperature."""
        ...

    def cp(self, pressure: float, temperature: float) -> float:
        """Specific isobaric heat capacity (J/kg/K)."""
        ...

    def cv(self, pressure: float, temperature: float) -> float:
        """Specific isochoric heat capacity (J/kg/K)."""
        ...

    def c(self, pressure: float, temperature: float) -> float:
        """Speed of sound (m/s)."""
        ...

    def k(self, density: float, temperature: float) -> float:
        """Thermal conductivity (W/m/K)."""
        ...

    def s(self, pressure: float, temperature: float) -> float:
        """Specific entropy (J/kg/K)."""
        ...

    def beta(self, pressure: float, temperature: float) -> float:
        """Thermal expansion coefficient (1/K)."""
        ...

    def henry_constant(self, temperature: float) -> float:
        """Henry's law constant for dissolution in water (Pa)."""
        ...

    def henry_constant_dT(self, temperature: float) -> typing.Tuple[float, float]:
        """Henry's law constant and its derivative wrt temperature."""
        ...


HENRY_COEFFICIENTS: typing.Dict[str, HenryCoefficients] = {
    "CO2": HenryCoefficients(A=-8.55445, B=4.01195, C=9.52345),
    "Methane": HenryCoefficients(A=-10.44708, B=4.66491, C=12.12986),
    "Nitrogen": HenryCoefficients(A=-9.67578, B=4.72162, C=11.70585),
    "Hydrogen": HenryCoefficients(A=-4.73284, B=6.08954, C=6.06066),
    "Oxygen": HenryCoefficients(A=-9.44833, B=4.43822, C=11.42005),
    "Argon": HenryCoefficients(A=-8.40954, B=4.29587, C=10.52779),
    "Helium": HenryCoefficients(A=-3.52839, B=7.12983, C=4.47770),
    "H2S": HenryCoefficients(A=-4.51499, B=5.23538, C=4.42126),
}
"""IAPWS G7-04 Henry's law coefficients, keyed by CoolProp fluid name."""

# Wagner & Pruss saturation pressure coefficients for water
_VAPOR_PRESSURE_COEFFICIENTS = np.array(
    [-7.85951783, 1.84408259, -11.7866497, 22.6807411, -15.9618719, 1.80122502]
)
_VAPOR_PRESSURE_EXPONENTS = np.array([1.0, 1.5, 3.0, 3.5, 4.0, 7.5])


@numba.njit(cache=True)
def _henry_constant_kernel(
    temperature: float,
    A: float,
    B: float,
    C: float,
    critical_temperature: float,
    critical_pressure: float,
    a: np.ndarray,
    n: np.ndarray,
) -> typing.Tuple[float, float]:
    Tr = temperature / critical_temperature
    tau = 1.0 - Tr

    ln_kh = A / Tr + B * tau**0.355 / Tr + C * Tr**-0.41 * np.exp(tau)
    dln_kh_dTr = (
        -A / Tr**2
        - B * (0.355 * tau**-0.645 / Tr + tau**0.355 / Tr**2)
        - C * np.exp(tau) * (0.41 * Tr**-1.41 + Tr**-0.41)
    )

    b = 0.0
    db_dtau = 0.0
    for idx in range(a.size):
        b += a[idx] * tau ** n[idx]
        db_dtau += a[idx] * n[idx] * tau ** (n[idx] - 1.0)
    psat = critical_pressure * np.exp(b / Tr)
    dln_psat_dTr = -db_dtau / Tr - b / Tr**2

    Kh = psat * np.exp(ln_kh)
    dKh_dT = Kh * (dln_kh_dTr + dln_psat_dTr) / critical_temperature
    return Kh, dKh_dT


def henry_constant_iapws_dT(
    temperature: float, coefficients: HenryCoefficients
) -> typing.Tuple[float, float]:
    """
    Henry's law constant of a gas in water and its derivative wrt temperature.

    IAPWS G7-04 formulation:

        ln(Kh / p_sat) = A / Tr + B * τ^0.355 / Tr + C * Tr^-0.41 * exp(τ)

    where Tr = T / Tc, τ = 1 - Tr, and p_sat is the water saturation pressure
    from the Wagner & Pruss vapor pressure equation.

    :param temperature: Temperature (K), below the critical temperature of water
    :param coefficients: IAPWS coefficients (A, B, C) of the gas
    :return: Tuple of (Kh (Pa), dKh/dT (Pa/K))
    :raises `ComputationError`: If the temperature is not below the critical temperature of water
    """
    critical_temperature = c.WATER_CRITICAL_TEMPERATURE
    if not 0.0 < temperature < critical_temperature:
        raise ComputationError(
            f"Henry's law constant requires 0 < T < {critical_temperature} K, got {temperature}"
        )
    Kh, dKh_dT = _henry_constant_kernel(
        float(temperature),
        coefficients.A,
        coefficients.B,
        coefficients.C,
        critical_temperature,
        c.WATER_CRITICAL_PRESSURE,
        _VAPOR_PRESSURE_COEFFICIENTS,
        _VAPOR_PRESSURE_EXPONENTS,
    )
    return float(Kh), float(dKh_dT)


def henry_constant_iapws(temperature: float, coefficients: HenryCoefficients) -> float:
    """
    Henry's law constant of a gas in water (Pa), see `henry_constant_iapws_dT`.
    """
    return henry_constant_iapws_dT(temperature, coefficients)[0]
