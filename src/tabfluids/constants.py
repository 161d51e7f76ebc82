"""Physical constants used by the fluid property models"""

import typing

import attrs


__all__ = ["Constant", "Constants", "c"]


@attrs.frozen(slots=True)
class Constant:
    """
    A constant value with optional description and unit.
    """

    value: typing.Any
    """The actual value of the constant."""

    description: typing.Optional[str] = None
    """Optional description of what this constant represents."""

    unit: typing.Optional[str] = None
    """Optional unit of measurement for this constant."""

    def __str__(self) -> str:
        return f"{self.value}{self.unit or ''}"


DEFAULT_CONSTANTS: typing.Dict[str, Constant] = {
    "UNIVERSAL_GAS_CONSTANT": Constant(
        value=8.3144598, description="Molar gas constant", unit="J/mol/K"
    ),
    "REFERENCE_PRESSURE": Constant(
        value=101325.0, description="Reference pressure for entropy", unit="Pa"
    ),
    "REFERENCE_TEMPERATURE": Constant(
        value=273.15, description="Reference temperature for entropy", unit="K"
    ),
    "WATER_CRITICAL_TEMPERATURE": Constant(
        value=647.096, description="Critical temperature of water", unit="K"
    ),
    "WATER_CRITICAL_PRESSURE": Constant(
        value=22.064e6, description="Critical pressure of water", unit="Pa"
    ),
}


class Constants:
    """
    Read-only registry of physical constants.

    Use attribute access for the value and item access for the `Constant` with its metadata.
    """

    __slots__ = ("_store",)

    def __init__(
        self, constants: typing.Optional[typing.Mapping[str, Constant]] = None
    ) -> None:
        object.__setattr__(self, "_store", dict(constants or DEFAULT_CONSTANTS))

    def __getattr__(self, name: str) -> typing.Any:
        try:
            return self._store[name].value
        except KeyError:
            raise AttributeError(
                f"'{type(self).__name__}' object has no attribute '{name}'"
            ) from None

    def __getitem__(self, name: str) -> Constant:
        return self._store[name]

    def __setattr__(self, name: str, value: typing.Any) -> None:
        raise AttributeError("Constants are read-only")

    def __contains__(self, name: str) -> bool:
        return name in self._store

    def keys(self) -> typing.KeysView[str]:
        return self._store.keys()

    def __repr__(self) -> str:
        return f"Constants({', '.join(self._store)})"


c = Constants()
"""Global registry of physical constants."""
