import collections
import typing

import numpy as np
import pytest

from tabfluids import IdealGasFluidProperties, PropertyTable, Axis


class CountingFluid:
    """Wraps a fluid model and counts calls per method."""

    def __init__(self, fluid) -> None:
        self._fluid = fluid
        self.calls: typing.Counter[str] = collections.Counter()

    def __getattr__(self, name: str):
        attribute = getattr(self._fluid, name)
        if not callable(attribute):
            return attribute

        def _counted(*args, **kwargs):
            self.calls[name] += 1
            return attribute(*args, **kwargs)

        return _counted


@pytest.fixture
def ideal_gas() -> IdealGasFluidProperties:
    return IdealGasFluidProperties()


@pytest.fixture
def counting_ideal_gas(ideal_gas) -> CountingFluid:
    return CountingFluid(ideal_gas)


@pytest.fixture
def small_table(ideal_gas) -> PropertyTable:
    pressure = Axis([1e5, 2e5, 3e5])
    temperature = Axis([300.0, 350.0, 400.0])
    density = np.array(
        [[ideal_gas.rho(p, T) for p in pressure] for T in temperature]
    )
    return PropertyTable(pressure=pressure, temperature=temperature, density=density)
