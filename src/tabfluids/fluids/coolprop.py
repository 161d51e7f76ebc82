"""Fluid properties from the CoolProp equations of state."""

import functools
import logging
import typing

import attrs
from CoolProp.CoolProp import PropsSI  # type: ignore[import]

from tabfluids.errors import ComputationError, ValidationError
from tabfluids.fluids.base import HENRY_COEFFICIENTS, henry_constant_iapws_dT
from tabfluids.types import ValueAndDerivatives

logger = logging.getLogger(__name__)

__all__ = ["CoolPropFluidProperties", "is_CoolProp_supported_fluid"]


@functools.lru_cache(maxsize=64)
def is_CoolProp_supported_fluid(fluid: str) -> bool:
    """
    Check if the fluid is supported by CoolProp.

    :param fluid: str name (e.g., "CO2", "Water", "Methane")
    :return: True if the fluid is supported, False otherwise.
    """
    try:
        PropsSI("M", fluid)
    except ValueError:
        return False
    return True


def _validate_fluid(instance, attribute, value: str) -> None:
    if not is_CoolProp_supported_fluid(value):
        raise ValidationError(f"Fluid {value!r} is not supported by CoolProp")


@attrs.frozen
class CoolPropFluidProperties:
    """
    Single-phase fluid properties from CoolProp, using pressure and temperature as inputs.

    These are full equation-of-state evaluations, which for Helmholtz-energy based fluids
    require an iterative density solve per call. Wrap this model in
    `TabulatedFluidProperties` when density, internal energy or enthalpy are needed many times.
    """

    fluid: str = attrs.field(validator=_validate_fluid)
    """CoolProp fluid name (e.g., "CO2", "Methane", "Water")."""

    derivative_step: float = attrs.field(
        default=1e-6, validator=attrs.validators.gt(0.0)
    )
    """Relative step for finite-difference derivatives of transport properties."""

    def _props(self, output: str, name1: str, value1: float, name2: str, value2: float) -> float:
        try:
            return float(PropsSI(output, name1, value1, name2, value2, self.fluid))
        except ValueError as exc:
            raise ComputationError(
                f"CoolProp failed to compute {output!r} for {self.fluid} at "
                f"{name1}={value1}, {name2}={value2}: {exc}"
            ) from exc

    def _pt(self, output: str, pressure: float, temperature: float) -> float:
        return self._props(output, "P", pressure, "T", temperature)

    def _dpT(self, output: str, pressure: float, temperature: float) -> ValueAndDerivatives:
        return (
            self._pt(output, pressure, temperature),
            self._pt(f"d({output})/d(P)|T", pressure, temperature),
            self._pt(f"d({output})/d(T)|P", pressure, temperature),
        )

    def fluid_name(self) -> str:
        return self.fluid

    def molar_mass(self) -> float:
        return float(PropsSI("M", self.fluid))

    def rho(self, pressure: float, temperature: float) -> float:
        return self._pt("D", pressure, temperature)

    def rho_dpT(self, pressure: float, temperature: float) -> ValueAndDerivatives:
        return self._dpT("D", pressure, temperature)

    def e(self, pressure: float, temperature: float) -> float:
        return self._pt("U", pressure, temperature)

    def e_dpT(self, pressure: float, temperature: float) -> ValueAndDerivatives:
        return self._dpT("U", pressure, temperature)

    def rho_e_dpT(
        self, pressure: float, temperature: float
    ) -> typing.Tuple[float, float, float, float, float, float]:
        return (*self.rho_dpT(pressure, temperature), *self.e_dpT(pressure, temperature))

    def h(self, pressure: float, temperature: float) -> float:
        return self._pt("H", pressure, temperature)

    def h_dpT(self, pressure: float, temperature: float) -> ValueAndDerivatives:
        return self._dpT("H", pressure, temperature)

    def mu(self, density: float, temperature: float) -> float:
        return self._props("V", "D", density, "T", temperature)

    def mu_drhoT(self, density: float, temperature: float) -> ValueAndDerivatives:
        """Viscosity and its central-difference derivatives wrt density and temperature."""
        d_rho = self.derivative_step * density
        d_T = self.derivative_step * temperature
        mu = self.mu(density, temperature)
        dmu_drho = (
            self.mu(density + d_rho, temperature) - self.mu(density - d_rho, temperature)
        ) / (2.0 * d_rho)
        dmu_dT = (
            self.mu(density, temperature + d_T) - self.mu(density, temperature - d_T)
        ) / (2.0 * d_T)
        return mu, dmu_drho, dmu_dT

    def cp(self, pressure: float, temperature: float) -> float:
        return self._pt("CPMASS", pressure, temperature)

    def cv(self, pressure: float, temperature: float) -> float:
        return self._pt("CVMASS", pressure, temperature)

    def c(self, pressure: float, temperature: float) -> float:
        return self._pt("A", pressure, temperature)

    def k(self, density: float, temperature: float) -> float:
        return self._props("L", "D", density, "T", temperature)

    def s(self, pressure: float, temperature: float) -> float:
        return self._pt("S", pressure, temperature)

    def beta(self, pressure: float, temperature: float) -> float:
        return self._pt("ISOBARIC_EXPANSION_COEFFICIENT", pressure, temperature)

    def henry_constant(self, temperature: float) -> float:
        return self.henry_constant_dT(temperature)[0]

    def henry_constant_dT(self, temperature: float) -> typing.Tuple[float, float]:
        coefficients = HENRY_COEFFICIENTS.get(self.fluid)
        if coefficients is None:
            raise ComputationError(
                f"No Henry's law coefficients available for {self.fluid!r}. "
                f"Known gases: {list(HENRY_COEFFICIENTS)}"
            )
        return henry_constant_iapws_dT(temperature, coefficients)
