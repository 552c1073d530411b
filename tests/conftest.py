"""Shared fixtures for pitarray tests."""

import pandas as pd
import pytest


def _detection(reader, antenna, tag_code, date_time, **extra):
    timestamp = pd.Timestamp(date_time, tz="America/Vancouver")
    row = {
        'reader': reader,
        'antenna': antenna,
        'det_type': 'S',
        'date': timestamp.strftime('%Y-%m-%d'),
        'time': timestamp.strftime('%H:%M:%S'),
        'date_time': timestamp,
        'time_zone': 'America/Vancouver',
        'dur': '00:00:00.1',
        'tag_type': 'HDX',
        'tag_code': tag_code,
        'consec_det': '1',
        'no_empt_scan_prior': '0',
    }
    row.update(extra)
    return row


@pytest.fixture
def make_detections():
    """Build a detection DataFrame from (reader, antenna, tag_code, date_time) tuples."""

    def _make(rows):
        return pd.DataFrame([_detection(*row) for row in rows])

    return _make


@pytest.fixture
def dam_detections(make_detections):
    """Two-antenna multi reader 'dam' plus an unrelated single reader."""
    return make_detections([
        ('dam', 1, 'T1', '2019-05-01 10:00:00'),
        ('dam', 2, 'T1', '2019-05-01 10:05:00'),
        ('dam', 1, 'T2', '2019-05-01 11:00:00'),
        ('dam', 2, 'T2', '2019-05-01 11:01:00'),
        ('creek', None, 'T3', '2019-05-01 12:00:00'),
    ])
