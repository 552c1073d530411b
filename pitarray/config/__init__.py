"""Configuration management for PIT array processing."""

from .defaults import (
    ArrayConfigStep,
    PipelineConfig,
    VALID_CONFIGURATIONS,
    get_default_config,
    get_available_templates
)
from .config_manager import ConfigManager, parse_antenna_value, parse_antenna_set, NA_ANTENNA

__all__ = [
    'ArrayConfigStep',
    'PipelineConfig',
    'VALID_CONFIGURATIONS',
    'get_default_config',
    'get_available_templates',
    'ConfigManager',
    'parse_antenna_value',
    'parse_antenna_set',
    'NA_ANTENNA'
]
