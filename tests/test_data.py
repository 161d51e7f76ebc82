import numpy as np
import pytest

from tabfluids import (
    Axis,
    BoundaryDerivatives,
    PropertyTable,
    ValidationError,
    flatten_data,
    reshape_data_2d,
)


def test_axis_linspace():
    axis = Axis.linspace(1e5, 5e5, 5)
    assert axis.size == len(axis) == 5
    assert axis.min == 1e5
    assert axis.max == 5e5
    assert axis[1] == pytest.approx(2e5)
    assert list(axis) == pytest.approx([1e5, 2e5, 3e5, 4e5, 5e5])


@pytest.mark.parametrize(
    "values",
    [[1.0], [1.0, 1.0], [3.0, 2.0, 1.0], [1.0, np.nan, 3.0], [1.0, np.inf]],
)
def test_axis_rejects_invalid_values(values):
    with pytest.raises(ValidationError):
        Axis(values)


def test_axis_is_read_only():
    axis = Axis([1.0, 2.0, 3.0])
    with pytest.raises(ValueError):
        axis.values[0] = 0.0


def test_reshape_is_temperature_major():
    matrix = reshape_data_2d(2, 3, [1, 2, 3, 4, 5, 6])
    np.testing.assert_array_equal(matrix, [[1, 2, 3], [4, 5, 6]])
    np.testing.assert_array_equal(flatten_data(matrix), [1, 2, 3, 4, 5, 6])


def test_reshape_rejects_wrong_count():
    with pytest.raises(ValidationError):
        reshape_data_2d(2, 3, [1, 2, 3, 4, 5])


def test_table_shape_must_match_axes():
    with pytest.raises(ValidationError):
        PropertyTable(
            pressure=Axis([1.0, 2.0, 3.0]),
            temperature=Axis([1.0, 2.0]),
            density=np.ones((3, 2)),
        )


def test_table_presence(small_table):
    assert small_table.present() == ("density",)
    assert small_table.missing() == ("internal_energy", "enthalpy")
    assert not small_table.is_complete
    assert small_table.num_p == 3
    assert small_table.num_T == 3


def test_with_properties_returns_new_table(small_table):
    energy = np.full((3, 3), 2.0e5)
    completed = small_table.with_properties(internal_energy=energy, enthalpy=energy)
    assert completed.is_complete
    assert small_table.internal_energy is None
    np.testing.assert_array_equal(completed.density, small_table.density)

    with pytest.raises(ValidationError):
        small_table.with_properties(viscosity=energy)
    with pytest.raises(ValidationError):
        small_table.get("viscosity")


def test_table_equality(small_table):
    copy = PropertyTable(
        pressure=Axis(small_table.pressure.values),
        temperature=Axis(small_table.temperature.values),
        density=small_table.density.copy(),
    )
    assert copy == small_table
    assert copy.with_properties(enthalpy=np.zeros((3, 3))) != small_table


def test_boundary_derivatives_lengths():
    with pytest.raises(ValidationError):
        BoundaryDerivatives(dp_min=[0, 0], dp_max=[0, 0, 0], dT_min=[0], dT_max=[0])

    boundary = BoundaryDerivatives(
        dp_min=[0, 0, 0], dp_max=[0, 0, 0], dT_min=[0, 0], dT_max=[0, 0]
    )
    boundary.check_shape(num_p=2, num_T=3)
    with pytest.raises(ValidationError):
        boundary.check_shape(num_p=3, num_T=2)
