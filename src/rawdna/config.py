"""Run settings for the ROH scan and the merge, with optional TOML file support.

A config file holds a ``[roh]`` table, for example::

    [roh]
    length_threshold = 300
    no_call_threshold = 20
    treat_no_calls_as_homozygous = false
    min_to_ignore_heterozygous = 100
"""

from __future__ import annotations

import logging
import tomllib
from dataclasses import dataclass, field, replace
from pathlib import Path
from typing import Any, Dict, List, Optional

from .errors import ConfigurationError

logger = logging.getLogger(__name__)

_INT_FIELDS = ("length_threshold", "no_call_threshold", "min_to_ignore_heterozygous")


@dataclass(frozen=True)
class RohConfig:
    """Thresholds for the ROH scan.

    Attributes
    ----------
    length_threshold:
        Report any run longer than this many SNPs.
    no_call_threshold:
        Report a no-call run longer than this many SNPs.
    treat_no_calls_as_homozygous:
        If False, entering a no-call stretch ends the current run.
    min_to_ignore_heterozygous:
        A heterozygous SNP is folded into the run when it is more than this many SNPs
        away from the previous one (or from the run start).
    input_file:
        Raw data file to scan.
    """

    length_threshold: int = 200
    no_call_threshold: int = 10
    treat_no_calls_as_homozygous: bool = True
    min_to_ignore_heterozygous: int = 150
    input_file: Optional[Path] = None

    def validate(self, *, require_input: bool = True) -> "RohConfig":
        for name in _INT_FIELDS:
            value = getattr(self, name)
            if isinstance(value, bool) or not isinstance(value, int):
                raise ConfigurationError(f"{name} must be an integer, got {type(value).__name__}")
            if value < 0:
                raise ConfigurationError(f"{name} must be >= 0, got {value}")
        if not isinstance(self.treat_no_calls_as_homozygous, bool):
            raise ConfigurationError("treat_no_calls_as_homozygous must be true or false")
        if require_input:
            if self.input_file is None:
                raise ConfigurationError("An input file is required")
            if not Path(self.input_file).exists():
                raise ConfigurationError(f"Input file does not exist: {self.input_file}")
        return self

    def with_overrides(self, overrides: Dict[str, Any]) -> "RohConfig":
        """Return a copy with the non-None values of ``overrides`` applied."""
        values = {k: v for k, v in overrides.items() if v is not None}
        if "input_file" in values:
            values["input_file"] = Path(values["input_file"])
        return replace(self, **values)


@dataclass(frozen=True)
class MergeConfig:
    input_files: List[Path] = field(default_factory=list)

    def validate(self) -> "MergeConfig":
        if not self.input_files:
            raise ConfigurationError("At least one input file is required")
        missing = [str(p) for p in self.input_files if not Path(p).exists()]
        if missing:
            raise ConfigurationError("Input file(s) do not exist: " + ", ".join(missing))
        return self


def load_config(config_path: str | Path) -> RohConfig:
    """Load ROH settings from the ``[roh]`` table of a TOML file.

    Unknown keys are ignored with a warning.
    """
    path = Path(config_path)
    if not path.exists():
        raise ConfigurationError(f"Configuration file not found: {path}")

    try:
        with open(path, "rb") as f:
            data = tomllib.load(f)
    except tomllib.TOMLDecodeError as e:
        raise ConfigurationError(f"Invalid TOML in {path}: {e}") from e

    section = data.get("roh", {})
    if not isinstance(section, dict):
        raise ConfigurationError(f"[roh] in {path} must be a table")

    valid_fields = set(_INT_FIELDS) | {"treat_no_calls_as_homozygous", "input_file"}
    unknown = sorted(set(section) - valid_fields)
    if unknown:
        logger.warning("Ignoring unknown [roh] keys in %s: %s", path, ", ".join(unknown))

    filtered = {k: v for k, v in section.items() if k in valid_fields}
    config = RohConfig().with_overrides(filtered)
    return config.validate(require_input=False)
