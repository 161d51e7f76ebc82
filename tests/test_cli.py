from pathlib import Path

from tabfluids import read_table
from tabfluids.cli import build_config, build_parser, main


def test_parser_defaults():
    args = build_parser().parse_args(["CO2", "-o", "co2.csv"])
    assert args.fluid == "CO2"
    assert args.outfile == Path("co2.csv")
    assert args.num_p is None
    assert not args.force


def test_config_file_with_overrides(tmp_path: Path):
    config_path = tmp_path / "config.yaml"
    config_path.write_text("pressure_min: 2.0e5\npressure_max: 8.0e5\nnum_p: 7\nnum_T: 5\n")
    args = build_parser().parse_args(
        ["CO2", "-o", str(tmp_path / "co2.csv"), "-c", str(config_path), "--num-p", "4"]
    )
    config = build_config(args)
    assert config.file_name == tmp_path / "co2.csv"
    assert (config.pressure_min, config.pressure_max) == (2e5, 8e5)
    assert config.num_p == 4
    assert config.num_T == 5


def test_builds_ideal_gas_table(tmp_path: Path):
    path = tmp_path / "air.csv"
    argv = [
        "ideal_gas", "-o", str(path),
        "--p-min", "1e5", "--p-max", "4e5", "--num-p", "4",
        "--t-min", "300", "--t-max", "400", "--num-t", "3",
    ]
    assert main(argv) == 0

    table = read_table(path)
    assert table.is_complete
    assert (table.num_p, table.num_T) == (4, 3)
    assert table.pressure.max == 4e5


def test_existing_file_requires_force(tmp_path: Path):
    path = tmp_path / "air.csv"
    path.write_text("keep me")
    argv = ["ideal_gas", "-o", str(path), "--num-p", "3", "--num-t", "3"]
    assert main(argv) == 1
    assert path.read_text() == "keep me"

    assert main([*argv, "--force"]) == 0
    assert read_table(path).num_p == 3


def test_invalid_arguments_fail(tmp_path: Path):
    assert main(["NotAFluid", "-o", str(tmp_path / "x.csv"), "--num-p", "3", "--num-t", "3"]) == 1
    assert main(["ideal_gas", "-o", str(tmp_path / "y.csv"), "--p-min", "1e6", "--p-max", "1e5"]) == 1
    assert not list(tmp_path.iterdir())
