"""
Utility functions for PIT array processing.

Provides the canonical detection record columns, antenna normalization,
array (topology) state resolution, and configuration summaries.
"""

import pandas as pd
import numpy as np
from typing import List, Sequence, Tuple

from ..config import NA_ANTENNA


# Column order produced by array_config
ARRAY_CONFIG_COLUMNS = [
    'array', 'reader', 'antenna', 'det_type', 'date', 'time', 'date_time',
    'time_zone', 'dur', 'tag_type', 'tag_code', 'consec_det', 'no_empt_scan_prior'
]

# Column order produced by direction (time_zone is not carried)
DIRECTION_COLUMNS = [
    'array', 'reader', 'antenna', 'det_type', 'date', 'time', 'date_time',
    'dur', 'tag_type', 'tag_code', 'consec_det', 'no_empt_scan_prior',
    'direction', 'no_ant'
]

# Antennas of a combined array, numbered downstream to upstream
ARRAY_ANTENNAS = (1, 2, 3, 4)


def check_required_columns(df: pd.DataFrame, required_cols: Sequence[str]) -> None:
    """
    Raise if any required column is missing.

    Raises:
        ValueError: If required columns are missing
    """
    missing_cols = [col for col in required_cols if col not in df.columns]

    if missing_cols:
        raise ValueError(f"Missing required columns: {missing_cols}")


def normalize_antenna_column(antenna: pd.Series) -> pd.Series:
    """
    Convert an antenna column to nullable integers.

    Missing values, empty strings and the "NA" marker become <NA>.

    Args:
        antenna: Antenna column (ints, floats or numeric strings)

    Returns:
        Series with dtype Int64

    Raises:
        ValueError: If a value is neither missing nor a whole number
    """
    if pd.api.types.is_integer_dtype(antenna.dtype):
        return antenna.astype('Int64')

    text = antenna.astype(str).str.strip().str.upper()
    is_marker = antenna.notna() & text.isin([NA_ANTENNA, ''])

    numeric = pd.to_numeric(antenna.where(~is_marker), errors='coerce')

    bad = numeric.isna() & antenna.notna() & ~is_marker
    if bad.any():
        bad_values = sorted(antenna[bad].astype(str).unique())[:5]
        raise ValueError(f"Non-numeric antenna values: {bad_values}")

    fractional = numeric.notna() & (numeric % 1 != 0)
    if fractional.any():
        bad_values = sorted(antenna[fractional].astype(str).unique())[:5]
        raise ValueError(f"Antenna values must be whole numbers: {bad_values}")

    return numeric.astype('Int64')


def has_array_configuration(df: pd.DataFrame) -> bool:
    """True if any record carries an assigned array."""
    return 'array' in df.columns and bool(df['array'].notna().any())


def resolve_arrays(df: pd.DataFrame) -> pd.Series:
    """
    Resolve the array of every record.

    A record's array is optional: when it is unassigned (no array column,
    or a null value) the record belongs to the array named after its reader.

    Args:
        df: DataFrame with a 'reader' column and optionally an 'array' column

    Returns:
        Series of array names aligned to df.index
    """
    if 'array' not in df.columns:
        return df['reader'].copy().rename('array')

    return df['array'].where(df['array'].notna(), df['reader'])


def order_columns(df: pd.DataFrame, columns: Sequence[str]) -> pd.DataFrame:
    """Put known columns first, in order, followed by any others."""
    leading = [col for col in columns if col in df.columns]
    trailing = [col for col in df.columns if col not in leading]
    return df[leading + trailing]


def array_summary(df: pd.DataFrame) -> pd.DataFrame:
    """
    List the distinct (array, reader, antenna) combinations.

    Args:
        df: DataFrame with array, reader and antenna columns

    Returns:
        DataFrame with one row per distinct combination
    """
    layout = pd.DataFrame({
        'array': resolve_arrays(df),
        'reader': df['reader'],
        'antenna': df['antenna']
    })

    return (
        layout.drop_duplicates()
        .sort_values(['array', 'reader', 'antenna'], na_position='first')
        .reset_index(drop=True)
    )


def format_array_summary(summary: pd.DataFrame) -> str:
    """Render an array summary for console / log output."""
    if summary.empty:
        return "Summary of current array, reader, and antenna configuration: (no records)"

    return (
        "Summary of current array, reader, and antenna configuration:\n"
        + summary.to_string(index=False)
    )


def validate_topology(df: pd.DataFrame) -> Tuple[bool, List[str]]:
    """
    Check that arrays are laid out consistently.

    Rules:
    - Each (array, antenna) position is served by a single reader
    - Arrays built from more than one reader only use antennas 1-4

    Args:
        df: DataFrame with reader and antenna columns (array optional)

    Returns:
        Tuple of (is_valid, error_messages)
    """
    errors = []

    layout = pd.DataFrame({
        'array': resolve_arrays(df),
        'reader': df['reader'],
        'antenna': normalize_antenna_column(df['antenna'])
    })
    layout = layout.dropna(subset=['antenna']).drop_duplicates()

    for (array, antenna), group in layout.groupby(['array', 'antenna']):
        readers = sorted(group['reader'].astype(str).unique())
        if len(readers) > 1:
            errors.append(f"Array {array} antenna {antenna} is served by multiple readers: {readers}")

    for array, group in layout.groupby('array'):
        if group['reader'].nunique() < 2:
            continue
        antennas = set(int(a) for a in group['antenna'])
        out_of_range = sorted(antennas - set(ARRAY_ANTENNAS))
        if out_of_range:
            errors.append(
                f"Array {array} uses antenna numbers outside 1-4: {out_of_range}"
            )

    is_valid = len(errors) == 0
    return is_valid, errors


def antenna_positions(readers: Sequence) -> dict:
    """
    Map combine readers to their array antenna numbers.

    Readers are given in positional order (r1..r4); unset positions are
    skipped but keep their number, so r1 and r3 map to antennas 1 and 3.
    """
    return {
        reader: position
        for position, reader in zip(ARRAY_ANTENNAS, readers)
        if reader is not None
    }


def sign_label(difference: int) -> str:
    """Direction label for a signed antenna difference."""
    step = np.sign(difference)
    if step > 0:
        return "up"
    if step < 0:
        return "down"
    return "N"
