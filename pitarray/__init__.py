"""
PIT Array Module.

Provides tools for restructuring PIT telemetry detections into arrays of
ordered antennas and for inferring the direction of tagged-animal movement
across them.
"""

from .errors import ConfigurationError
from .config import (
    ArrayConfigStep,
    PipelineConfig,
    ConfigManager,
    get_default_config,
    get_available_templates
)
from .core import (
    ArrayConfigurator,
    DirectionDetector,
    MovementEvent,
    array_config,
    array_summary,
    direction,
    infer_movements,
    read_detections,
    validate_topology
)
from .pipeline import PipelineRunner, run_pipeline

__version__ = '1.0.0'

__all__ = [
    # Errors
    'ConfigurationError',

    # Configuration
    'ArrayConfigStep',
    'PipelineConfig',
    'ConfigManager',
    'get_default_config',
    'get_available_templates',

    # Pipeline components
    'ArrayConfigurator',
    'DirectionDetector',
    'MovementEvent',
    'array_config',
    'array_summary',
    'direction',
    'infer_movements',
    'read_detections',
    'validate_topology',
    'PipelineRunner',
    'run_pipeline',
]
