"""
Default configuration templates for PIT array processing.

This module provides the step and pipeline configuration dataclasses along
with preset configurations for common array layouts.
"""

from dataclasses import dataclass, field, asdict
from typing import Any, List, Optional


VALID_CONFIGURATIONS = ("combine", "split", "rename_antennas")


@dataclass
class ArrayConfigStep:
    """
    One array_config call.

    Attributes:
        configuration: One of "combine", "split" or "rename_antennas"
        array_name: Target array (combine) or array to renumber (rename_antennas)
        r1, r2, r3, r4: Readers to combine, ordered downstream to upstream
        reader_name: Reader to split, or reader to renumber (rename_antennas)
        new_reader_1_antennas: Antenna(s) grouped into "<reader>_1" on split
        ao1..ao4: Old antenna numbers (only ao1 is honoured)
        an1..an4: New antenna numbers (only an1 is honoured)
    """

    configuration: Optional[str] = None
    array_name: Optional[str] = None

    # combine
    r1: Optional[str] = None
    r2: Optional[str] = None
    r3: Optional[str] = None
    r4: Optional[str] = None

    # split / rename_antennas
    reader_name: Optional[str] = None
    new_reader_1_antennas: Any = None

    # rename_antennas
    ao1: Any = None
    ao2: Any = None
    ao3: Any = None
    ao4: Any = None
    an1: Any = None
    an2: Any = None
    an3: Any = None
    an4: Any = None

    def readers(self) -> List[Optional[str]]:
        """Combine readers in positional order (r1 -> antenna 1)."""
        return [self.r1, self.r2, self.r3, self.r4]

    def to_dict(self) -> dict:
        """Convert step to dictionary."""
        return asdict(self)

    @classmethod
    def from_dict(cls, data: dict) -> 'ArrayConfigStep':
        """Create step from dictionary."""
        return cls(**data)


@dataclass
class PipelineConfig:
    """Configuration for the array/direction pipeline."""

    # Topology edits, applied in order
    steps: List[ArrayConfigStep] = field(default_factory=list)

    # Direction inference
    run_direction: bool = True
    max_workers: int = 1

    # Output
    output_dir: str = ""
    save_outputs: bool = False

    def to_dict(self) -> dict:
        """Convert config to dictionary."""
        return asdict(self)

    @classmethod
    def from_dict(cls, data: dict) -> 'PipelineConfig':
        """Create config from dictionary."""
        data = dict(data)
        # Steps come back from JSON as plain dicts
        data['steps'] = [
            step if isinstance(step, ArrayConfigStep) else ArrayConfigStep.from_dict(step)
            for step in data.get('steps', [])
        ]
        return cls(**data)


def get_oregon_fishway_config() -> PipelineConfig:
    """
    Get configuration for the two-antenna dam reader example.

    The multi reader "dam" is split into two single readers, the halves are
    combined into the "fishway" array, and the antennas are renumbered:
    - Antenna 1 (dam_1) -> 3
    - Antenna 2 (dam_2) -> 4

    Returns:
        PipelineConfig: Preset configuration for the fishway layout
    """
    config = PipelineConfig()

    config.steps = [
        ArrayConfigStep(configuration="split", reader_name="dam", new_reader_1_antennas="1"),
        ArrayConfigStep(configuration="combine", array_name="fishway", r1="dam_1", r2="dam_2"),
        ArrayConfigStep(configuration="rename_antennas", array_name="fishway", ao1="1", an1="3"),
        ArrayConfigStep(configuration="rename_antennas", array_name="fishway", ao1="2", an1="4"),
    ]
    config.run_direction = True

    return config


def get_default_config(template_name: str = "oregon_fishway") -> PipelineConfig:
    """
    Get a default configuration template by name.

    Args:
        template_name: Name of the template ("oregon_fishway" or "custom")

    Returns:
        PipelineConfig: Configuration object

    Raises:
        ValueError: If template name is not recognized
    """
    templates = {
        "oregon_fishway": get_oregon_fishway_config,
        "custom": PipelineConfig  # Empty config for custom setup
    }

    if template_name not in templates:
        raise ValueError(f"Unknown template: {template_name}. Available: {list(templates.keys())}")

    return templates[template_name]()


def get_available_templates() -> List[str]:
    """
    Get list of available configuration templates.

    Returns:
        List of template names
    """
    return ["oregon_fishway", "custom"]
