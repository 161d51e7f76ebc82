import numpy as np
import pytest

from tabfluids import (
    Axis,
    TabulationConfig,
    build_axes,
    generate_all_tabulated_data,
    generate_boundary_derivatives,
    generate_missing_tabulated_data,
)


def test_build_axes_from_ranges():
    config = TabulationConfig(
        pressure_min=1e5, pressure_max=1e6, num_p=10,
        temperature_min=280.0, temperature_max=380.0, num_T=5,
    )
    pressure, temperature = build_axes(config)
    assert pressure.size == 10
    assert (pressure.min, pressure.max) == (1e5, 1e6)
    np.testing.assert_allclose(temperature.values, [280.0, 305.0, 330.0, 355.0, 380.0])


def test_build_axes_prefers_explicit_values():
    config = TabulationConfig(pressures=[1e5, 5e5, 2e6], temperatures=[300.0, 310.0])
    pressure, temperature = build_axes(config)
    np.testing.assert_array_equal(pressure.values, [1e5, 5e5, 2e6])
    np.testing.assert_array_equal(temperature.values, [300.0, 310.0])


def test_generated_nodes_match_fluid(ideal_gas):
    pressure = Axis.linspace(1e5, 1e6, 4)
    temperature = Axis.linspace(300.0, 400.0, 3)
    table = generate_all_tabulated_data(ideal_gas, pressure, temperature)

    assert table.is_complete
    for i, T in enumerate(temperature):
        for j, p in enumerate(pressure):
            assert table.density[i, j] == ideal_gas.rho(p, T)
            assert table.internal_energy[i, j] == ideal_gas.e(p, T)
            assert table.enthalpy[i, j] == pytest.approx(ideal_gas.h(p, T), rel=1e-12)


def test_generation_evaluates_each_node_once(counting_ideal_gas):
    pressure = Axis.linspace(1e5, 1e6, 4)
    temperature = Axis.linspace(300.0, 400.0, 3)
    generate_all_tabulated_data(counting_ideal_gas, pressure, temperature)
    assert counting_ideal_gas.calls["rho"] == 12
    assert counting_ideal_gas.calls["e"] == 12
    assert counting_ideal_gas.calls["h"] == 0


def test_only_missing_properties_are_generated(counting_ideal_gas, small_table):
    completed = generate_missing_tabulated_data(counting_ideal_gas, small_table)
    assert completed.is_complete
    # Present data is kept as is
    np.testing.assert_array_equal(completed.density, small_table.density)
    assert counting_ideal_gas.calls["e"] == 9

    counting_ideal_gas.calls.clear()
    assert generate_missing_tabulated_data(counting_ideal_gas, completed) is completed
    assert not counting_ideal_gas.calls


def test_energy_only_generation_skips_density(counting_ideal_gas, small_table):
    table = small_table.with_properties(enthalpy=np.zeros((3, 3)))
    completed = generate_missing_tabulated_data(counting_ideal_gas, table)
    np.testing.assert_array_equal(completed.enthalpy, np.zeros((3, 3)))
    assert counting_ideal_gas.calls["rho"] == 0
    assert counting_ideal_gas.calls["e"] == 9


def test_boundary_derivatives(ideal_gas):
    pressure = Axis.linspace(1e5, 1e6, 4)
    temperature = Axis.linspace(300.0, 400.0, 3)
    boundaries = generate_boundary_derivatives(ideal_gas, pressure, temperature)

    assert set(boundaries) == {"density", "internal_energy", "enthalpy"}
    density = boundaries["density"]
    density.check_shape(num_p=4, num_T=3)
    for i, T in enumerate(temperature):
        _, drho_dp, _ = ideal_gas.rho_dpT(pressure.min, T)
        assert density.dp_min[i] == pytest.approx(drho_dp)
    for j, p in enumerate(pressure):
        _, _, drho_dT = ideal_gas.rho_dpT(p, temperature.max)
        assert density.dT_max[j] == pytest.approx(drho_dT)

    # h = cp * T for an ideal gas
    enthalpy = boundaries["enthalpy"]
    np.testing.assert_allclose(enthalpy.dp_min, 0.0, atol=1e-9)
    np.testing.assert_allclose(enthalpy.dT_min, ideal_gas.specific_heat_cp, rtol=1e-12)
