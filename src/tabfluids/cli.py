"""
Build a tabulated fluid property file from the command line.

Example:
    python -m tabfluids CO2 -o co2.csv \
        --p-min 1e5 --p-max 20e6 --num-p 60 \
        --t-min 280 --t-max 450 --num-t 60
"""

import argparse
import logging
from pathlib import Path
import sys
import typing

import attrs

from tabfluids.config import TabulationConfig
from tabfluids.errors import TabulationError
from tabfluids.fluids.base import FluidProperties
from tabfluids.fluids.coolprop import CoolPropFluidProperties
from tabfluids.fluids.ideal_gas import IdealGasFluidProperties
from tabfluids.tables.codec import write_table
from tabfluids.tables.generator import build_axes, generate_all_tabulated_data

logger = logging.getLogger(__name__)

__all__ = ["build_parser", "build_config", "main"]

IDEAL_GAS = "ideal_gas"

# Command line option -> `TabulationConfig` field
_RANGE_OPTIONS = {
    "p_min": "pressure_min",
    "p_max": "pressure_max",
    "num_p": "num_p",
    "t_min": "temperature_min",
    "t_max": "temperature_max",
    "num_t": "num_T",
}


def build_parser() -> argparse.ArgumentParser:
    defaults = TabulationConfig()
    parser = argparse.ArgumentParser(
        prog="tabfluids-build",
        description="Generate a pressure-temperature table of density, internal energy and enthalpy.",
    )
    parser.add_argument(
        "fluid",
        help=f"CoolProp fluid name (e.g. CO2, Methane, Water) or {IDEAL_GAS!r}",
    )
    parser.add_argument(
        "-o", "--outfile", type=Path, required=True, help="Output table file"
    )
    parser.add_argument(
        "-c",
        "--config",
        type=Path,
        default=None,
        help="YAML tabulation config. Range options given on the command line take precedence",
    )
    parser.add_argument(
        "--p-min", type=float, help=f"Pressure min [Pa] (default: {defaults.pressure_min})"
    )
    parser.add_argument(
        "--p-max", type=float, help=f"Pressure max [Pa] (default: {defaults.pressure_max})"
    )
    parser.add_argument(
        "--num-p", type=int, help=f"Number of pressure points (default: {defaults.num_p})"
    )
    parser.add_argument(
        "--t-min",
        type=float,
        help=f"Temperature min [K] (default: {defaults.temperature_min})",
    )
    parser.add_argument(
        "--t-max",
        type=float,
        help=f"Temperature max [K] (default: {defaults.temperature_max})",
    )
    parser.add_argument(
        "--num-t", type=int, help=f"Number of temperature points (default: {defaults.num_T})"
    )
    parser.add_argument(
        "--molar-mass",
        type=float,
        default=29.0e-3,
        help=f"Molar mass [kg/mol], only used with {IDEAL_GAS!r}",
    )
    parser.add_argument(
        "--gamma",
        type=float,
        default=1.41,
        help=f"Ratio of specific heats, only used with {IDEAL_GAS!r}",
    )
    parser.add_argument(
        "-f", "--force", action="store_true", help="Overwrite an existing output file"
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Debug logging")
    return parser


def build_config(args: argparse.Namespace) -> TabulationConfig:
    """
    Build the tabulation config from parsed arguments.

    :param args: Parsed command line arguments
    :return: `TabulationConfig` writing to `args.outfile`
    """
    base = TabulationConfig.load(args.config) if args.config else TabulationConfig()
    overrides = {
        field: getattr(args, option)
        for option, field in _RANGE_OPTIONS.items()
        if getattr(args, option) is not None
    }
    return attrs.evolve(base, file_name=args.outfile, **overrides)


def make_fluid(args: argparse.Namespace) -> FluidProperties:
    if args.fluid == IDEAL_GAS:
        return IdealGasFluidProperties(molar_mass=args.molar_mass, gamma=args.gamma)
    return CoolPropFluidProperties(args.fluid)


def main(argv: typing.Optional[typing.Sequence[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    if args.outfile.exists() and not args.force:
        logger.error(f"{args.outfile} already exists. Use --force to overwrite it.")
        return 1

    try:
        config = build_config(args)
        fluid = make_fluid(args)
        pressure, temperature = build_axes(config)
        table = generate_all_tabulated_data(fluid, pressure, temperature)
        path = write_table(args.outfile, table)
    except (TabulationError, ValueError) as exc:
        logger.error(str(exc))
        return 1

    logger.info(f"Saved {path} ({table.num_p} pressures x {table.num_T} temperatures)")
    return 0


if __name__ == "__main__":
    sys.exit(main())
