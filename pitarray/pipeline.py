"""
Pipeline runner for PIT array processing.

Applies the configured array_config steps in order, checks the resulting
layout, then runs direction inference. Intermediate results are kept on
the runner.
"""

import logging
import pandas as pd
from typing import Callable, Optional, Tuple

from .config import ConfigManager, PipelineConfig
from .core import ArrayConfigurator, DirectionDetector, save_output, validate_topology
from .errors import ConfigurationError

logger = logging.getLogger(__name__)

ARRAY_CONFIG_FILENAME = "ARRAY_CONFIG.csv"
DIRECTION_FILENAME = "DIRECTION.csv"


class PipelineRunner:
    """
    Runs array configuration and direction inference from a PipelineConfig.
    """

    def __init__(self, config: PipelineConfig):
        """
        Initialize runner.

        Args:
            config: Pipeline configuration object
        """
        self.config = config

        # Storage for intermediate results
        self.array_df = None
        self.direction_df = None
        self.topology_errors = []

    def run(
        self,
        data: pd.DataFrame,
        progress_callback: Optional[Callable] = None
    ) -> Tuple[pd.DataFrame, Optional[pd.DataFrame]]:
        """
        Execute the pipeline.

        Args:
            data: Detection DataFrame
            progress_callback: Optional callback function(message: str)

        Returns:
            Tuple of (configured data, direction data or None if disabled)

        Raises:
            ConfigurationError: If the configuration is invalid
        """
        is_valid, errors = ConfigManager.validate_config(self.config)
        if not is_valid:
            raise ConfigurationError("Invalid pipeline configuration: " + "; ".join(errors))

        total_steps = len(self.config.steps) + (1 if self.config.run_direction else 0)
        current_step = 0

        self.array_df = data
        self.direction_df = None

        for step in self.config.steps:
            current_step += 1
            self._report(progress_callback, f"Step {current_step}/{total_steps}: {step.configuration}...")

            self.array_df = ArrayConfigurator(step).apply(self.array_df, progress_callback=progress_callback)

        _, self.topology_errors = validate_topology(self.array_df)
        for message in self.topology_errors:
            logger.warning(message)
            if progress_callback:
                progress_callback(f"Warning: {message}")

        if self.config.save_outputs and self.config.steps:
            output_path = save_output(self.array_df, self.config.output_dir, ARRAY_CONFIG_FILENAME)
            self._report(progress_callback, f"Saved array configuration to: {output_path}")

        if self.config.run_direction:
            current_step += 1
            self._report(progress_callback, f"Step {current_step}/{total_steps}: Inferring direction...")

            detector = DirectionDetector(max_workers=self.config.max_workers)
            self.direction_df = detector.detect_directions(self.array_df, progress_callback=progress_callback)

            if self.config.save_outputs:
                output_path = save_output(self.direction_df, self.config.output_dir, DIRECTION_FILENAME)
                self._report(progress_callback, f"Saved direction data to: {output_path}")

        self._report(progress_callback, "Processing complete!")

        return self.array_df, self.direction_df

    @staticmethod
    def _report(progress_callback: Optional[Callable], message: str) -> None:
        logger.info(message)
        if progress_callback:
            progress_callback(message)


def run_pipeline(
    data: pd.DataFrame,
    config: PipelineConfig,
    progress_callback: Optional[Callable] = None
) -> Tuple[pd.DataFrame, Optional[pd.DataFrame]]:
    """Run a configured pipeline over one detection dataset."""
    return PipelineRunner(config).run(data, progress_callback=progress_callback)
