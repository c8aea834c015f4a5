"""
Generator configuration.

Settings come from an optional YAML file and from command-line flags;
flags win. The merged mapping is validated against CONFIG_SCHEMA with
jsonschema before a GeneratorConfig is built.

Example file:

    instrument: forms/household.xlsx
    output: checks/household_hfc.do
    data_dir: data/raw
    enumerator: enum_id
    outlier_multiplier: 3
    success_condition: "consent == 1"
"""

from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, Mapping, Optional

import jsonschema
import yaml
from jsonschema.exceptions import ValidationError

from hfcgen.backends.stata_generator import RenderOptions

DEFAULT_OUTLIER_MULTIPLIER = 3.0

CONFIG_SCHEMA: Dict[str, Any] = {
    "type": "object",
    "properties": {
        "instrument": {"type": "string", "minLength": 1},
        "output": {"type": "string", "minLength": 1},
        "data_dir": {"type": "string", "minLength": 1, "pattern": "^[^$\"`\\r\\n]+$"},
        "enumerator": {"type": "string", "pattern": "^[A-Za-z_][A-Za-z0-9_]{0,31}$"},
        "outlier_multiplier": {"type": "number", "exclusiveMinimum": 0},
        "success_condition": {"type": "string"},
        "survey_sheet": {"type": "string", "minLength": 1},
        "choices_sheet": {"type": "string", "minLength": 1},
    },
    "required": ["instrument", "output", "data_dir", "enumerator"],
    "additionalProperties": False,
}


class ConfigError(Exception):
    pass


@dataclass(frozen=True)
class GeneratorConfig:
    instrument: str
    output: str
    data_dir: str
    enumerator: str
    outlier_multiplier: float = DEFAULT_OUTLIER_MULTIPLIER
    success_condition: str = ""
    survey_sheet: str = "survey"
    choices_sheet: str = "choices"

    @property
    def instrument_path(self) -> Path:
        return Path(self.instrument)

    @property
    def output_path(self) -> Path:
        return Path(self.output)

    def render_options(self) -> RenderOptions:
        return RenderOptions(
            enumerator=self.enumerator,
            outlier_multiplier=self.outlier_multiplier,
            success_condition=self.success_condition,
            output_path=self.output,
            data_dir=self.data_dir,
            instrument_name=self.instrument_path.stem,
        )


def _read_yaml(path: Path) -> Dict[str, Any]:
    if not path.exists():
        raise ConfigError(f"config file not found: {path}")
    try:
        data = yaml.safe_load(path.read_text(encoding="utf-8")) or {}
    except yaml.YAMLError as e:
        raise ConfigError(f"invalid yaml: {e}") from e
    if not isinstance(data, dict):
        raise ConfigError(f"config file must contain a mapping: {path}")
    return data


def config_from_mapping(data: Mapping[str, Any]) -> GeneratorConfig:
    """
    Validate a settings mapping and build a GeneratorConfig.

    Raises:
        ConfigError: If the mapping fails schema validation
    """
    settings = {k: v for k, v in data.items() if v is not None}
    try:
        jsonschema.validate(settings, CONFIG_SCHEMA)
    except ValidationError as e:
        where = ".".join(str(p) for p in e.absolute_path) or "config"
        raise ConfigError(f"{where}: {e.message}") from e

    return GeneratorConfig(
        instrument=settings["instrument"],
        output=settings["output"],
        data_dir=settings["data_dir"],
        enumerator=settings["enumerator"],
        outlier_multiplier=float(settings.get("outlier_multiplier", DEFAULT_OUTLIER_MULTIPLIER)),
        success_condition=settings.get("success_condition", "").strip(),
        survey_sheet=settings.get("survey_sheet", "survey"),
        choices_sheet=settings.get("choices_sheet", "choices"),
    )


def load_config(path: Optional[Path] = None, overrides: Optional[Mapping[str, Any]] = None) -> GeneratorConfig:
    """
    Load settings from a YAML file and/or overrides.

    Args:
        path: YAML config file (optional)
        overrides: Values that replace file values; None entries are ignored

    Returns:
        Validated GeneratorConfig

    Raises:
        ConfigError: Missing/invalid file or failed validation
    """
    data: Dict[str, Any] = _read_yaml(path) if path is not None else {}
    for key, value in (overrides or {}).items():
        if value is not None:
            data[key] = value
    return config_from_mapping(data)


__all__ = [
    "CONFIG_SCHEMA",
    "DEFAULT_OUTLIER_MULTIPLIER",
    "ConfigError",
    "GeneratorConfig",
    "config_from_mapping",
    "load_config",
]
