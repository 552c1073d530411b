"""
Configuration management for PIT array processing.

Handles loading, saving, and validating pipeline configuration profiles.
"""

import json
import math
import pandas as pd
from pathlib import Path
from typing import Any, List, Optional

from ..errors import ConfigurationError
from .defaults import ArrayConfigStep, PipelineConfig, VALID_CONFIGURATIONS


# Marker for "antenna is missing" in rename requests
NA_ANTENNA = "NA"


def parse_antenna_value(value: Any) -> Optional[int]:
    """
    Normalize an antenna parameter to an integer.

    Accepts ints and numeric strings ("1", " 2 "). None, NaN and the
    string "NA" denote a missing antenna and return None.

    Raises:
        ConfigurationError: If the value is not a whole number
    """
    if value is None or (pd.api.types.is_scalar(value) and pd.isna(value)):
        return None

    if isinstance(value, str):
        text = value.strip()
        if text.upper() == NA_ANTENNA:
            return None
        try:
            number = float(text)
        except ValueError:
            raise ConfigurationError(f"Antenna must be a number or 'NA', got {value!r}")
    elif isinstance(value, bool):
        raise ConfigurationError(f"Antenna must be a number or 'NA', got {value!r}")
    else:
        try:
            number = float(value)
        except (TypeError, ValueError):
            raise ConfigurationError(f"Antenna must be a number or 'NA', got {value!r}")

    if math.isnan(number):
        return None

    if not number.is_integer():
        raise ConfigurationError(f"Antenna must be a whole number, got {value!r}")

    return int(number)


def parse_antenna_set(values: Any) -> List[Optional[int]]:
    """Normalize one antenna value or a sequence of them."""
    if isinstance(values, (list, tuple, set, frozenset)):
        return [parse_antenna_value(v) for v in values]
    return [parse_antenna_value(values)]


class ConfigManager:
    """Manager for pipeline configuration profiles."""

    @staticmethod
    def save_config(config: PipelineConfig, filepath: str) -> None:
        """
        Save configuration to JSON file.

        Args:
            config: PipelineConfig object to save
            filepath: Path to save the configuration file

        Raises:
            IOError: If unable to write file
        """
        filepath = Path(filepath)

        # Ensure parent directory exists
        filepath.parent.mkdir(parents=True, exist_ok=True)

        with open(filepath, 'w') as f:
            json.dump(config.to_dict(), f, indent=2)

    @staticmethod
    def load_config(filepath: str) -> PipelineConfig:
        """
        Load configuration from JSON file.

        Args:
            filepath: Path to configuration file

        Returns:
            PipelineConfig object

        Raises:
            FileNotFoundError: If config file doesn't exist
            ValueError: If config file is invalid
        """
        filepath = Path(filepath)

        if not filepath.exists():
            raise FileNotFoundError(f"Configuration file not found: {filepath}")

        with open(filepath, 'r') as f:
            try:
                config_dict = json.load(f)
            except json.JSONDecodeError as e:
                raise ValueError(f"Invalid configuration file {filepath}: {e}")

        try:
            return PipelineConfig.from_dict(config_dict)
        except TypeError as e:
            raise ValueError(f"Invalid configuration file {filepath}: {e}")

    @staticmethod
    def validate_step(step: ArrayConfigStep) -> List[str]:
        """
        Check one array_config step for missing or conflicting parameters.

        Only parameter-level rules are checked here; rules that depend on
        the data (e.g. renaming by array before any array exists) are
        checked when the step is applied.

        Args:
            step: ArrayConfigStep to check

        Returns:
            List of error messages (empty if the step is valid)
        """
        errors = []

        if step.configuration is None:
            return ["configuration must be specified"]

        if step.configuration not in VALID_CONFIGURATIONS:
            return [
                f"Unknown configuration: {step.configuration!r}. "
                f"Available: {list(VALID_CONFIGURATIONS)}"
            ]

        if step.configuration == "combine":
            if step.array_name is None:
                errors.append("array_name must be specified")

            readers = [r for r in step.readers() if r is not None]
            if not readers:
                errors.append("At least one reader (r1-r4) must be specified")
            elif len(set(readers)) != len(readers):
                errors.append(f"Each reader can only be combined once, got {readers}")

        elif step.configuration == "split":
            if step.reader_name is None:
                errors.append("reader_name must be specified")
            if step.new_reader_1_antennas is None:
                errors.append("Must specify which antenna(s) will become part of the new reader 1")
            else:
                try:
                    if not parse_antenna_set(step.new_reader_1_antennas):
                        errors.append("Must specify which antenna(s) will become part of the new reader 1")
                except ConfigurationError as e:
                    errors.append(str(e))

        elif step.configuration == "rename_antennas":
            if step.reader_name is not None and step.array_name is not None:
                errors.append("Only specify one array or one reader with antennas to rename")
            if step.reader_name is None and step.array_name is None:
                errors.append("Must specify a reader or array with antennas to rename")

            extra = [step.ao2, step.ao3, step.ao4, step.an2, step.an3, step.an4]
            if any(value is not None for value in extra):
                errors.append("Only one antenna can be renamed per function call")

            if step.ao1 is None or step.an1 is None:
                errors.append("ao1 and an1 must both be specified")
            else:
                for value in (step.ao1, step.an1):
                    try:
                        parse_antenna_value(value)
                    except ConfigurationError as e:
                        errors.append(str(e))

        return errors

    @staticmethod
    def validate_config(config: PipelineConfig) -> tuple[bool, list[str]]:
        """
        Validate configuration for completeness and correctness.

        Args:
            config: PipelineConfig object to validate

        Returns:
            Tuple of (is_valid, error_messages)
        """
        errors = []

        for i, step in enumerate(config.steps):
            for message in ConfigManager.validate_step(step):
                errors.append(f"Step {i + 1} ({step.configuration}): {message}")

        if config.max_workers < 1:
            errors.append("max_workers must be at least 1")

        if config.save_outputs and not config.output_dir:
            errors.append("Output directory not specified")

        if not config.steps and not config.run_direction:
            errors.append("Nothing to do: no steps and direction disabled")

        is_valid = len(errors) == 0
        return is_valid, errors
