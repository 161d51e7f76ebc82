from pathlib import Path

import numpy as np
import pytest

from tabfluids import (
    Constant,
    TableIOError,
    TabulationConfig,
    ValidationError,
    c,
    get_dtype,
    parse_table,
    format_table,
    generate_all_tabulated_data,
    build_axes,
    with_precision,
)


def test_defaults():
    config = TabulationConfig()
    assert config.file_name is None
    assert (config.pressure_min, config.pressure_max, config.num_p) == (1e5, 50e6, 100)
    assert (config.temperature_min, config.temperature_max, config.num_T) == (300.0, 500.0, 100)
    assert config.use_boundary_derivatives
    assert config.save_file


def test_file_name_is_converted_to_path():
    assert TabulationConfig(file_name="table.csv").file_name == Path("table.csv")


@pytest.mark.parametrize(
    "kwargs",
    [
        {"pressure_min": 1e6, "pressure_max": 1e5},
        {"temperature_min": 400.0, "temperature_max": 400.0},
    ],
)
def test_inverted_ranges_are_rejected(kwargs):
    with pytest.raises(ValidationError):
        TabulationConfig(**kwargs)


@pytest.mark.parametrize("kwargs", [{"num_p": 1}, {"num_T": 0}, {"pressure_min": -1.0}])
def test_invalid_values_are_rejected(kwargs):
    with pytest.raises(ValueError):
        TabulationConfig(**kwargs)


def test_explicit_axes_override_ranges():
    config = TabulationConfig(pressure_min=1e6, pressure_max=2e6, pressures=[1e5, 2e5])
    assert config.pressures == (1e5, 2e5)


def test_constants_are_read_only():
    assert c.UNIVERSAL_GAS_CONSTANT == 8.3144598
    assert isinstance(c["WATER_CRITICAL_TEMPERATURE"], Constant)
    with pytest.raises(AttributeError):
        c.UNIVERSAL_GAS_CONSTANT = 8.0
    with pytest.raises(AttributeError):
        c.NOT_A_CONSTANT


def test_precision_context(ideal_gas):
    assert get_dtype() == np.float64
    config = TabulationConfig(num_p=3, num_T=3)
    with with_precision(np.float32):
        pressure, temperature = build_axes(config)
        table = generate_all_tabulated_data(ideal_gas, pressure, temperature)
        assert pressure.values.dtype == np.float32
        assert table.density.dtype == np.float32
    assert get_dtype() == np.float64

    # Tables parsed at the default precision keep float64 values
    parsed = parse_table(format_table(table))
    assert parsed.density.dtype == np.float64
    np.testing.assert_allclose(parsed.density, table.density, rtol=1e-6)


def test_yaml_round_trip(tmp_path: Path):
    config = TabulationConfig(
        file_name=tmp_path / "co2.csv",
        num_p=20,
        temperatures=[300.0, 320.0, 350.0],
        use_boundary_derivatives=False,
    )
    path = tmp_path / "config.yaml"
    config.dump(path)
    assert TabulationConfig.load(path) == config


def test_yaml_partial_config(tmp_path: Path):
    path = tmp_path / "config.yaml"
    path.write_text("file_name: table.csv\npressure_max: 1.0e7\n")
    config = TabulationConfig.load(path)
    assert config.file_name == Path("table.csv")
    assert config.pressure_max == 1e7
    assert config.num_p == 100


@pytest.mark.parametrize(
    "content",
    [
        "num_points: 10\n",
        "num_p: ten\n",
        "num_p: 1\n",
        "pressure_min: 2.0e5\npressure_max: 1.0e5\n",
        "- 1\n- 2\n",
        "num_p: [\n",
    ],
)
def test_invalid_yaml_config(tmp_path: Path, content):
    path = tmp_path / "config.yaml"
    path.write_text(content)
    with pytest.raises(ValidationError):
        TabulationConfig.load(path)


def test_missing_yaml_config(tmp_path: Path):
    with pytest.raises(TableIOError):
        TabulationConfig.load(tmp_path / "missing.yaml")


def test_precision_must_be_floating():
    with pytest.raises(TypeError):
        with with_precision(np.int64):
            pass
