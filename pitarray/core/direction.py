"""
Direction Detector - movement stage of pipeline.

Determines the direction of movement of tagged animals across the antennas
of an array:
- Groups detections by (array, tag_code)
- Orders each group by date_time
- Labels each antenna change as "up" or "down" with the number of
  antennas crossed (no_ant)

Antennas are assumed to be numbered downstream to upstream within each
array (see array_config).
"""

import logging
import pandas as pd
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from typing import Any, Callable, List, Optional, Sequence, Tuple

from .utils import (
    DIRECTION_COLUMNS,
    check_required_columns,
    normalize_antenna_column,
    resolve_arrays,
    sign_label
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class MovementEvent:
    """
    A change of antenna between two consecutive detections of one tag.

    Attributes:
        position: Index of the later detection in the input sequence
        date_time: Timestamp of the later detection
        from_antenna: Antenna of the earlier detection
        to_antenna: Antenna of the later detection
        direction: "up" (higher antenna number) or "down"
        no_ant: Number of antennas crossed
    """

    position: int
    date_time: Any
    from_antenna: int
    to_antenna: int
    direction: str
    no_ant: int


def infer_movements(detections: Sequence[Tuple[Any, int]]) -> List[MovementEvent]:
    """
    Derive movement events from time-ordered detections of one tag.

    The first detection has no predecessor and never produces an event;
    repeated detections on the same antenna produce none either.

    Args:
        detections: (date_time, antenna) pairs, already in time order

    Returns:
        List of MovementEvent, one per antenna change

    Raises:
        ValueError: If an antenna is missing
    """
    events = []
    previous = None

    for position, (date_time, antenna) in enumerate(detections):
        if antenna is None or pd.isna(antenna):
            raise ValueError(f"Detection {position} has no antenna")

        antenna = int(antenna)

        if previous is not None:
            difference = antenna - previous
            label = sign_label(difference)

            if label != "N":
                events.append(MovementEvent(
                    position=position,
                    date_time=date_time,
                    from_antenna=previous,
                    to_antenna=antenna,
                    direction=label,
                    no_ant=abs(difference)
                ))

        previous = antenna

    return events


class DirectionDetector:
    """
    Detector for direction of movement from detection data.

    Groups are independent, so they can be processed on a thread pool.
    """

    def __init__(self, max_workers: int = 1):
        """
        Initialize direction detector.

        Args:
            max_workers: Number of parallel workers (1 for sequential processing)
        """
        if max_workers < 1:
            raise ValueError("max_workers must be at least 1")

        self.max_workers = max_workers

    def detect_directions(
        self,
        data: pd.DataFrame,
        progress_callback: Optional[Callable] = None
    ) -> pd.DataFrame:
        """
        Detect direction of movement.

        Algorithm:
        1. Default missing arrays to the reader
        2. Drop records without an antenna
        3. Group by (array, tag_code)
        4. Stable sort each group by date_time (ties keep input order)
        5. Label antenna changes up/down; drop unchanged antennas
        6. Sort by array, tag_code, date_time

        Args:
            data: Detection DataFrame, raw or from array_config
            progress_callback: Optional callback function(message: str)

        Returns:
            DataFrame of movement records with direction and no_ant columns

        Raises:
            ValueError: If required columns are missing
        """
        required_cols = [col for col in DIRECTION_COLUMNS if col not in ('array', 'direction', 'no_ant')]
        check_required_columns(data, required_cols)

        df = data.copy()
        df['array'] = resolve_arrays(df)
        df['antenna'] = normalize_antenna_column(df['antenna'])

        df = df[df['antenna'].notna()].reset_index(drop=True)
        df['_row'] = range(len(df))

        groups = [group for _, group in df.groupby(['array', 'tag_code'], sort=False, dropna=False)]

        if progress_callback:
            progress_callback(f"Inferring direction for {len(groups):,} array/tag groups...")

        if self.max_workers > 1 and len(groups) > 1:
            with ThreadPoolExecutor(max_workers=self.max_workers) as executor:
                results = list(executor.map(self._process_group, groups))
        else:
            results = [self._process_group(group) for group in groups]

        movement_dfs = [result for result in results if result is not None]

        if not movement_dfs:
            logger.info("No movements detected")
            if progress_callback:
                progress_callback("No movements detected")
            return pd.DataFrame(columns=DIRECTION_COLUMNS)

        result_df = pd.concat(movement_dfs)

        # _row breaks date_time ties in input order
        result_df = result_df.sort_values(
            ['array', 'tag_code', 'date_time', '_row'],
            kind='mergesort',
            na_position='last'
        )
        result_df = result_df[DIRECTION_COLUMNS].reset_index(drop=True)

        counts = result_df['direction'].value_counts().to_dict()
        message = (
            f"Detected {len(result_df):,} movements "
            f"(up: {counts.get('up', 0):,}, down: {counts.get('down', 0):,})"
        )
        logger.info(message)
        if progress_callback:
            progress_callback(message)

        return result_df

    def _process_group(self, group_df: pd.DataFrame) -> Optional[pd.DataFrame]:
        """
        Process a single (array, tag_code) group.

        Args:
            group_df: Detections for one tag on one array

        Returns:
            Movement rows with direction and no_ant, or None if the tag
            never changed antenna
        """
        group_df = group_df.sort_values('date_time', kind='mergesort', na_position='last')

        detections = list(zip(group_df['date_time'].tolist(), group_df['antenna'].astype(int).tolist()))
        events = infer_movements(detections)

        if not events:
            return None

        movement_df = group_df.iloc[[event.position for event in events]].copy()
        movement_df['direction'] = [event.direction for event in events]
        movement_df['no_ant'] = [event.no_ant for event in events]

        return movement_df

    def get_direction_statistics(self, direction_df: pd.DataFrame) -> dict:
        """
        Calculate summary statistics for movements.

        Args:
            direction_df: DataFrame returned by detect_directions()

        Returns:
            Dictionary of summary statistics
        """
        stats = {
            'total_movements': len(direction_df),
            'direction_counts': direction_df['direction'].value_counts().to_dict(),
        }

        if len(direction_df) > 0:
            stats['no_ant_stats'] = {
                'mean': direction_df['no_ant'].mean(),
                'max': direction_df['no_ant'].max(),
            }

            stats['movements_per_array'] = direction_df.groupby('array').size().to_dict()
            stats['movements_per_tag'] = direction_df.groupby('tag_code').size().to_dict()

            # Net movement: positive means more upstream than downstream moves
            signed = direction_df['no_ant'].where(direction_df['direction'] == 'up', -direction_df['no_ant'])
            stats['net_antennas_per_tag'] = signed.groupby(direction_df['tag_code']).sum().to_dict()

        return stats


def direction(
    data: pd.DataFrame,
    max_workers: int = 1,
    progress_callback: Optional[Callable] = None
) -> pd.DataFrame:
    """
    Compute the direction of movement.

    Works on the dataset straight from ingestion or on one restructured
    by array_config.

    Args:
        data: Detection DataFrame
        max_workers: Number of parallel workers
        progress_callback: Optional callback function(message: str)

    Returns:
        DataFrame of movements, one row per antenna change
    """
    return DirectionDetector(max_workers=max_workers).detect_directions(
        data,
        progress_callback=progress_callback
    )
