"""Core PIT array processing modules."""

from .utils import (
    ARRAY_CONFIG_COLUMNS,
    DIRECTION_COLUMNS,
    array_summary,
    format_array_summary,
    has_array_configuration,
    normalize_antenna_column,
    resolve_arrays,
    validate_topology
)
from .io import read_detections, save_output
from .array_config import ArrayConfigurator, array_config
from .direction import DirectionDetector, MovementEvent, direction, infer_movements

__all__ = [
    # Schema and utilities
    'ARRAY_CONFIG_COLUMNS',
    'DIRECTION_COLUMNS',
    'array_summary',
    'format_array_summary',
    'has_array_configuration',
    'normalize_antenna_column',
    'resolve_arrays',
    'validate_topology',

    # IO
    'read_detections',
    'save_output',

    # Pipeline stages
    'ArrayConfigurator',
    'array_config',
    'DirectionDetector',
    'MovementEvent',
    'direction',
    'infer_movements',
]
