import os
from pathlib import Path
import typing

import attrs
import cattrs
import yaml

from tabfluids.errors import TableIOError, ValidationError


__all__ = ["TabulationConfig"]

converter = cattrs.Converter(
    forbid_extra_keys=True, unstruct_collection_overrides={tuple: list}
)
converter.register_structure_hook(Path, lambda value, _: Path(value))
converter.register_unstructure_hook(Path, str)
converter.register_unstructure_hook(tuple, list)


def _to_optional_path(
    value: typing.Optional[typing.Union[str, os.PathLike]],
) -> typing.Optional[Path]:
    if value is None:
        return None
    return Path(value)


def _to_optional_tuple(
    value: typing.Optional[typing.Iterable[float]],
) -> typing.Optional[typing.Tuple[float, ...]]:
    if value is None:
        return None
    return tuple(float(v) for v in value)


@attrs.frozen
class TabulationConfig:
    """Configuration for building and caching a tabulated fluid property set."""

    file_name: typing.Optional[Path] = attrs.field(
        default=None, converter=_to_optional_path
    )
    """
    Path of the tabulated data file.

    If the file exists it is parsed (and completed if properties are missing).
    If it does not exist, the generated table is written to it for future runs.
    If None, the table is generated in memory only.
    """
    pressure_min: float = attrs.field(
        default=1e5, converter=float, validator=attrs.validators.gt(0.0)
    )
    """Minimum pressure (Pa) of a generated table."""
    pressure_max: float = attrs.field(
        default=50e6, converter=float, validator=attrs.validators.gt(0.0)
    )
    """Maximum pressure (Pa) of a generated table."""
    num_p: int = attrs.field(default=100, validator=attrs.validators.ge(2))
    """Number of pressure points of a generated table."""
    temperature_min: float = attrs.field(
        default=300.0, converter=float, validator=attrs.validators.gt(0.0)
    )
    """Minimum temperature (K) of a generated table."""
    temperature_max: float = attrs.field(
        default=500.0, converter=float, validator=attrs.validators.gt(0.0)
    )
    """Maximum temperature (K) of a generated table."""
    num_T: int = attrs.field(default=100, validator=attrs.validators.ge(2))
    """Number of temperature points of a generated table."""
    pressures: typing.Optional[typing.Tuple[float, ...]] = attrs.field(
        default=None, converter=_to_optional_tuple
    )
    """
    Explicit pressure axis (Pa) for a generated table.

    Overrides `pressure_min`, `pressure_max` and `num_p` when given.
    """
    temperatures: typing.Optional[typing.Tuple[float, ...]] = attrs.field(
        default=None, converter=_to_optional_tuple
    )
    """
    Explicit temperature axis (K) for a generated table.

    Overrides `temperature_min`, `temperature_max` and `num_T` when given.
    """
    use_boundary_derivatives: bool = True
    """
    Whether to clamp the splines with first derivatives from the slow model along the table edges.

    If False, natural splines are used and no extra slow model evaluations are made.
    """
    save_file: bool = True
    """Whether generated or completed tables are written back to `file_name`."""

    def __attrs_post_init__(self) -> None:
        if self.pressures is None and self.pressure_min >= self.pressure_max:
            raise ValidationError(
                f"`pressure_min` ({self.pressure_min}) must be less than "
                f"`pressure_max` ({self.pressure_max})"
            )
        if self.temperatures is None and self.temperature_min >= self.temperature_max:
            raise ValidationError(
                f"`temperature_min` ({self.temperature_min}) must be less than "
                f"`temperature_max` ({self.temperature_max})"
            )

    @classmethod
    def load(cls, filepath: typing.Union[str, os.PathLike]) -> "TabulationConfig":
        """
        Load a configuration from a YAML file.

        Keys are the field names of `TabulationConfig`. Omitted keys take their defaults.

        :param filepath: Path to the YAML file
        :return: `TabulationConfig` instance
        :raises `TableIOError`: If the file cannot be read
        :raises `ValidationError`: If the file content is not a valid configuration
        """
        try:
            with open(filepath, "r", encoding="utf-8") as f:
                data = yaml.safe_load(f)
        except OSError as exc:
            raise TableIOError(
                f"Could not read configuration file {filepath}: {exc.strerror or exc}"
            ) from exc
        except yaml.YAMLError as exc:
            raise ValidationError(f"Invalid YAML in {filepath}: {exc}") from exc

        if data is None:
            data = {}
        if not isinstance(data, dict):
            raise ValidationError(
                f"Configuration file {filepath} must contain a mapping, got {type(data).__name__}"
            )
        try:
            return converter.structure(data, cls)
        except (cattrs.BaseValidationError, cattrs.ForbiddenExtraKeysError) as exc:
            errors = "; ".join(cattrs.transform_error(exc))
            raise ValidationError(f"Invalid configuration in {filepath}: {errors}") from exc
        except ValidationError:
            raise
        except ValueError as exc:
            raise ValidationError(f"Invalid configuration in {filepath}: {exc}") from exc

    def dump(self, filepath: typing.Union[str, os.PathLike]) -> None:
        """
        Write the configuration to a YAML file.

        :param filepath: Destination path
        :raises `TableIOError`: If the file cannot be written
        """
        data = converter.unstructure(self)
        try:
            with open(filepath, "w", encoding="utf-8") as f:
                yaml.safe_dump(data, f, sort_keys=False)
        except OSError as exc:
            raise TableIOError(
                f"Could not write configuration file {filepath}: {exc.strerror or exc}"
            ) from exc
