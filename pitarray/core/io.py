"""
Reading and writing canonical detection tables.

Raw reader formats are parsed upstream; these helpers only load CSV files
that already use the canonical detection columns, and save stage outputs.
"""

import pandas as pd
from pathlib import Path
from typing import Optional

from .utils import check_required_columns, normalize_antenna_column


def read_detections(filepath: str, time_zone: Optional[str] = None) -> pd.DataFrame:
    """
    Read a canonical detection CSV.

    All columns are read as text so tag codes keep leading zeros; antenna
    is converted to nullable integers and date_time to timestamps.

    Args:
        filepath: Path to CSV file
        time_zone: Time zone to express date_time in (e.g. "America/Vancouver").
            Timestamps are parsed as UTC when given, so mixed offsets are allowed.

    Returns:
        Detection DataFrame

    Raises:
        FileNotFoundError: If file doesn't exist
        ValueError: If required columns are missing
    """
    filepath = Path(filepath)

    if not filepath.exists():
        raise FileNotFoundError(f"File not found: {filepath}")

    df = pd.read_csv(filepath, dtype=str)

    check_required_columns(df, ['reader', 'antenna', 'tag_code', 'date_time'])

    df['antenna'] = normalize_antenna_column(df['antenna'])

    if time_zone is None:
        df['date_time'] = pd.to_datetime(df['date_time'])
    else:
        df['date_time'] = pd.to_datetime(df['date_time'], utc=True).dt.tz_convert(time_zone)

    return df


def save_output(df: pd.DataFrame, output_dir: str, filename: str) -> str:
    """
    Save a stage output to CSV.

    Args:
        df: DataFrame to save
        output_dir: Output directory (created if missing)
        filename: File name, e.g. "ARRAY_CONFIG.csv"

    Returns:
        Path to output file
    """
    output_dir = Path(output_dir)
    output_dir.mkdir(parents=True, exist_ok=True)

    output_path = output_dir / filename

    df.to_csv(output_path, index=False)

    return str(output_path)
