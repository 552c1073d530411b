"""
Array Configurator - topology stage of pipeline.

Restructures the reader/antenna layout of a detection dataset:
- combine: fold up to four single readers into one named array
- split: split a multi reader into "<reader>_1" and "<reader>_2"
- rename_antennas: renumber one antenna of a reader or an array

Each call returns a new DataFrame with the same rows; only the array,
reader and antenna columns change.
"""

import logging
import pandas as pd
from typing import Any, Callable, Optional

from ..config import ArrayConfigStep, ConfigManager, parse_antenna_set, parse_antenna_value
from ..errors import ConfigurationError
from .utils import (
    ARRAY_CONFIG_COLUMNS,
    antenna_positions,
    array_summary,
    check_required_columns,
    format_array_summary,
    has_array_configuration,
    normalize_antenna_column,
    order_columns,
    resolve_arrays
)

logger = logging.getLogger(__name__)


class ArrayConfigurator:
    """
    Applies one array configuration step to detection data.

    The input DataFrame is never modified; index and row order are kept.
    """

    def __init__(self, step: ArrayConfigStep):
        """
        Initialize configurator with a step.

        Args:
            step: Array configuration step
        """
        self.step = step

    def apply(
        self,
        data: pd.DataFrame,
        progress_callback: Optional[Callable] = None
    ) -> pd.DataFrame:
        """
        Apply the configured step.

        Args:
            data: Detection DataFrame (reader and antenna columns required)
            progress_callback: Optional callback function(message: str)

        Returns:
            New DataFrame with updated array, reader and antenna columns

        Raises:
            ConfigurationError: If the step parameters are invalid
            ValueError: If required columns are missing or antennas are not numeric
        """
        self._validate(data)

        result = data.copy()
        result['antenna'] = normalize_antenna_column(result['antenna'])

        if 'array' not in result.columns:
            result['array'] = pd.Series([None] * len(result), index=result.index, dtype=object)
        else:
            result['array'] = result['array'].astype(object)

        handlers = {
            'combine': self._combine,
            'split': self._split,
            'rename_antennas': self._rename_antennas
        }
        result = handlers[self.step.configuration](result, progress_callback)

        # Unassigned records fall back to their (possibly new) reader name
        result['array'] = resolve_arrays(result)

        result = order_columns(result, ARRAY_CONFIG_COLUMNS)

        summary_text = format_array_summary(array_summary(result))
        logger.info(summary_text)
        if progress_callback:
            progress_callback(summary_text)

        return result

    def _validate(self, data: pd.DataFrame) -> None:
        """Fail before touching any record."""
        errors = ConfigManager.validate_step(self.step)
        if errors:
            raise ConfigurationError("; ".join(errors))

        check_required_columns(data, ['reader', 'antenna'])

        if (
            self.step.configuration == 'rename_antennas'
            and self.step.array_name is not None
            and not has_array_configuration(data)
        ):
            raise ConfigurationError(
                "No array configuration exists; combine readers into an array "
                "before renaming its antennas"
            )

    def _combine(self, df: pd.DataFrame, progress_callback: Optional[Callable]) -> pd.DataFrame:
        positions = antenna_positions(self.step.readers())
        selected = df['reader'].isin(list(positions))

        missing = [reader for reader in positions if not (df['reader'] == reader).any()]
        if missing:
            logger.warning("Readers not found in data: %s", missing)

        # Antenna number is the reader's position; original antennas are dropped
        df.loc[selected, 'antenna'] = df.loc[selected, 'reader'].map(positions).astype('Int64')
        df.loc[selected, 'array'] = self.step.array_name

        if progress_callback:
            progress_callback(
                f"Combined {int(selected.sum()):,} records from {len(positions)} readers "
                f"into array {self.step.array_name}"
            )

        return df

    def _split(self, df: pd.DataFrame, progress_callback: Optional[Callable]) -> pd.DataFrame:
        reader_name = self.step.reader_name
        antennas = parse_antenna_set(self.step.new_reader_1_antennas)
        numbered = [a for a in antennas if a is not None]

        selected = (df['reader'] == reader_name).fillna(False).astype(bool)
        if not selected.any():
            logger.warning("Reader %s not found in data", reader_name)

        first = df['antenna'].isin(numbered).fillna(False).astype(bool)
        if None in antennas:
            first = first | df['antenna'].isna()
        first = selected & first

        df['reader'] = df['reader'].astype(object)
        df.loc[first, 'reader'] = f"{reader_name}_1"
        df.loc[selected & ~first, 'reader'] = f"{reader_name}_2"

        if progress_callback:
            progress_callback(
                f"Split reader {reader_name}: {int(first.sum()):,} records to {reader_name}_1, "
                f"{int((selected & ~first).sum()):,} records to {reader_name}_2"
            )

        return df

    def _rename_antennas(self, df: pd.DataFrame, progress_callback: Optional[Callable]) -> pd.DataFrame:
        old_antenna = parse_antenna_value(self.step.ao1)
        new_antenna = parse_antenna_value(self.step.an1)

        if self.step.reader_name is not None:
            label = f"reader {self.step.reader_name}"
            partition = df['reader'] == self.step.reader_name
        else:
            label = f"array {self.step.array_name}"
            partition = resolve_arrays(df) == self.step.array_name
        partition = partition.fillna(False).astype(bool)

        if not partition.any():
            logger.warning("No records found for %s", label)

        if old_antenna is None:
            matches = df['antenna'].isna()
        else:
            matches = (df['antenna'] == old_antenna).fillna(False).astype(bool)
        target = partition & matches

        df.loc[target, 'antenna'] = pd.NA if new_antenna is None else new_antenna

        if progress_callback:
            progress_callback(
                f"Renamed antenna {_antenna_label(old_antenna)} -> {_antenna_label(new_antenna)} "
                f"on {label} ({int(target.sum()):,} records)"
            )

        return df

    def get_configuration_summary(self, df: pd.DataFrame) -> dict:
        """
        Describe the array layout of a configured DataFrame.

        Args:
            df: DataFrame returned by apply()

        Returns:
            Dictionary of array -> reader -> sorted antenna list
        """
        summary = {}

        for row in array_summary(df).itertuples(index=False):
            readers = summary.setdefault(row.array, {})
            antennas = readers.setdefault(row.reader, [])
            if not pd.isna(row.antenna):
                antennas.append(int(row.antenna))

        for readers in summary.values():
            for reader in readers:
                readers[reader] = sorted(readers[reader])

        return summary


def _antenna_label(antenna: Optional[int]) -> str:
    return "NA" if antenna is None else str(antenna)


def array_config(
    data: pd.DataFrame,
    configuration: Optional[str],
    array_name: Optional[str] = None,
    r1: Optional[str] = None,
    r2: Optional[str] = None,
    r3: Optional[str] = None,
    r4: Optional[str] = None,
    reader_name: Optional[str] = None,
    new_reader_1_antennas: Any = None,
    ao1: Any = None,
    ao2: Any = None,
    ao3: Any = None,
    ao4: Any = None,
    an1: Any = None,
    an2: Any = None,
    an3: Any = None,
    an4: Any = None,
    progress_callback: Optional[Callable] = None
) -> pd.DataFrame:
    """
    Restructure the configuration of arrays.

    Combine single readers into an array, split a multi reader into two
    single readers, or renumber an antenna on one reader or one array.
    Calls are iterative: split multi readers first, combine the resulting
    single readers, then renumber antennas one at a time.

    Args:
        data: Detection DataFrame
        configuration: "combine", "split" or "rename_antennas"
        array_name: Name of array to create (combine) or renumber (rename_antennas)
        r1, r2, r3, r4: Readers to combine, downstream to upstream
        reader_name: Reader to split, or reader to renumber
        new_reader_1_antennas: Antenna(s) grouped into "<reader_name>_1"
        ao1: Old antenna ("NA" selects records without an antenna)
        an1: New antenna
        ao2, ao3, ao4, an2, an3, an4: Not supported; only one antenna
            can be renamed per call
        progress_callback: Optional callback function(message: str)

    Returns:
        Updated DataFrame for direction and downstream summaries

    Raises:
        ConfigurationError: If the parameters are missing or conflicting

    Example:
        >>> split = array_config(data, "split", reader_name="dam", new_reader_1_antennas="1")
        >>> combined = array_config(split, "combine", array_name="fishway", r1="dam_1", r2="dam_2")
        >>> renamed = array_config(combined, "rename_antennas", array_name="fishway", ao1="1", an1="3")
    """
    step = ArrayConfigStep(
        configuration=configuration,
        array_name=array_name,
        r1=r1, r2=r2, r3=r3, r4=r4,
        reader_name=reader_name,
        new_reader_1_antennas=new_reader_1_antennas,
        ao1=ao1, ao2=ao2, ao3=ao3, ao4=ao4,
        an1=an1, an2=an2, an3=an3, an4=an4
    )

    return ArrayConfigurator(step).apply(data, progress_callback=progress_callback)
