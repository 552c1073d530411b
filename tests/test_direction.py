"""
Tests for direction of movement.

Tests the per-tag sequence logic on its own and the grouped DataFrame
detector built on top of it.
"""

import pandas as pd
import pytest

from pitarray import DirectionDetector, array_config, direction, infer_movements
from pitarray.core import DIRECTION_COLUMNS


class TestInferMovements:
    """Sequence logic for a single tag on a single array."""

    def test_up_then_down(self):
        events = infer_movements([(10, 1), (15, 2), (20, 2), (25, 1)])

        assert [(e.position, e.direction, e.no_ant) for e in events] == [
            (1, 'up', 1),
            (3, 'down', 1),
        ]
        assert events[0].from_antenna == 1
        assert events[0].to_antenna == 2

    def test_single_detection(self):
        assert infer_movements([(10, 3)]) == []

    def test_empty(self):
        assert infer_movements([]) == []

    def test_same_antenna(self):
        assert infer_movements([(10, 2), (11, 2), (12, 2)]) == []

    def test_skipping_antennas(self):
        """no_ant counts the antennas crossed."""
        events = infer_movements([(10, 1), (20, 4)])

        assert events[0].direction == 'up'
        assert events[0].no_ant == 3

    @pytest.mark.parametrize("missing", [None, pd.NA, float("nan")])
    def test_missing_antenna(self, missing):
        with pytest.raises(ValueError, match="Detection 1 has no antenna"):
            infer_movements([(10, 1), (20, missing)])


class TestDirectionDetector:
    """Grouped direction inference over detection data."""

    def test_up_down_example(self, make_detections):
        """The repeated antenna 2 detection produces no row."""
        data = make_detections([
            ('A', 1, 'T1', '2019-05-01 10:00:00'),
            ('A', 2, 'T1', '2019-05-01 10:05:00'),
            ('A', 2, 'T1', '2019-05-01 10:10:00'),
            ('A', 1, 'T1', '2019-05-01 10:15:00'),
        ])

        result = direction(data)

        assert len(result) == 2
        assert list(result['time']) == ['10:05:00', '10:15:00']
        assert list(result['direction']) == ['up', 'down']
        assert list(result['no_ant']) == [1, 1]

    def test_output_columns(self, make_detections):
        """time_zone is dropped; direction and no_ant are appended."""
        data = make_detections([
            ('A', 1, 'T1', '2019-05-01 10:00:00'),
            ('A', 2, 'T1', '2019-05-01 10:05:00'),
        ])

        result = direction(data)

        assert list(result.columns) == DIRECTION_COLUMNS
        assert 'time_zone' not in result.columns

    def test_single_antenna_tag(self, make_detections):
        data = make_detections([
            ('A', 2, 'T1', '2019-05-01 10:00:00'),
            ('A', 2, 'T1', '2019-05-01 10:05:00'),
            ('A', 2, 'T1', '2019-05-01 10:10:00'),
        ])

        result = direction(data)

        assert len(result) == 0
        assert list(result.columns) == DIRECTION_COLUMNS

    def test_unordered_input(self, make_detections):
        """Detections are ordered by date_time before differencing."""
        data = make_detections([
            ('A', 1, 'T1', '2019-05-01 10:15:00'),
            ('A', 2, 'T1', '2019-05-01 10:05:00'),
            ('A', 1, 'T1', '2019-05-01 10:00:00'),
        ])

        result = direction(data)

        assert list(result['time']) == ['10:05:00', '10:15:00']
        assert list(result['direction']) == ['up', 'down']

    def test_missing_antennas_dropped(self, make_detections):
        """Rows without an antenna never take part."""
        data = make_detections([
            ('A', 1, 'T1', '2019-05-01 10:00:00'),
            ('A', None, 'T1', '2019-05-01 10:02:00'),
            ('A', 3, 'T1', '2019-05-01 10:05:00'),
        ])

        result = direction(data)

        assert len(result) == 1
        assert result['no_ant'].iloc[0] == 2

    def test_groups_by_array_and_tag(self, make_detections):
        """Movements are not inferred across tags or arrays."""
        data = make_detections([
            ('A', 1, 'T1', '2019-05-01 10:00:00'),
            ('A', 2, 'T2', '2019-05-01 10:01:00'),
            ('B', 3, 'T1', '2019-05-01 10:02:00'),
        ])

        assert len(direction(data)) == 0

    def test_uses_configured_arrays(self, make_detections):
        """Two single readers combined into one array give a movement."""
        data = make_detections([
            ('lower', 1, 'T1', '2019-05-01 10:00:00'),
            ('upper', 1, 'T1', '2019-05-01 10:05:00'),
        ])
        assert len(direction(data)) == 0

        combined = array_config(data, "combine", array_name="ladder", r1="lower", r2="upper")
        result = direction(combined)

        assert len(result) == 1
        assert result['array'].iloc[0] == 'ladder'
        assert result['reader'].iloc[0] == 'upper'
        assert result['direction'].iloc[0] == 'up'

    def test_sorted_output(self, make_detections):
        data = make_detections([
            ('B', 2, 'T2', '2019-05-01 09:00:00'),
            ('B', 1, 'T2', '2019-05-01 09:30:00'),
            ('A', 1, 'T9', '2019-05-01 11:00:00'),
            ('A', 2, 'T9', '2019-05-01 11:30:00'),
            ('A', 1, 'T1', '2019-05-01 12:00:00'),
            ('A', 3, 'T1', '2019-05-01 12:30:00'),
            ('A', 1, 'T1', '2019-05-01 12:45:00'),
        ])

        result = direction(data)

        keys = list(zip(result['array'], result['tag_code'], result['date_time']))
        assert keys == sorted(keys)
        assert list(result['tag_code']) == ['T1', 'T1', 'T9', 'T2']

    def test_equal_timestamps_keep_input_order(self, make_detections):
        """Ties on date_time are broken by input row order."""
        data = make_detections([
            ('A', 1, 'T1', '2019-05-01 10:00:00'),
            ('A', 3, 'T1', '2019-05-01 10:05:00'),
            ('A', 2, 'T1', '2019-05-01 10:05:00'),
        ])

        result = direction(data)

        assert list(result['antenna']) == [3, 2]
        assert list(result['direction']) == ['up', 'down']

    def test_array_column_with_gaps(self, make_detections):
        """Records without an array fall back to their reader."""
        data = make_detections([
            ('A', 1, 'T1', '2019-05-01 10:00:00'),
            ('A', 2, 'T1', '2019-05-01 10:05:00'),
        ])
        data['array'] = None

        result = direction(data)

        assert list(result['array']) == ['A']

    def test_parallel_matches_sequential(self, make_detections):
        rows = []
        for tag in range(20):
            for minute, antenna in enumerate([1, 2, 3, 2, 2, 1, 4]):
                rows.append(('A', antenna, f'T{tag:02d}', f'2019-05-01 10:{minute + tag:02d}:00'))
        data = make_detections(rows)

        sequential = DirectionDetector(max_workers=1).detect_directions(data)
        parallel = DirectionDetector(max_workers=4).detect_directions(data)

        pd.testing.assert_frame_equal(sequential, parallel)
        assert len(sequential) == 20 * 5

    def test_input_not_modified(self, make_detections):
        data = make_detections([
            ('A', 1, 'T1', '2019-05-01 10:00:00'),
            ('A', 2, 'T1', '2019-05-01 10:05:00'),
        ])
        before = data.copy()

        direction(data)

        pd.testing.assert_frame_equal(data, before)

    def test_missing_columns(self):
        data = pd.DataFrame({'reader': ['A'], 'antenna': [1]})

        with pytest.raises(ValueError, match="Missing required columns"):
            direction(data)

    def test_invalid_worker_count(self):
        with pytest.raises(ValueError, match="max_workers"):
            DirectionDetector(max_workers=0)

    def test_statistics(self, make_detections):
        data = make_detections([
            ('A', 1, 'T1', '2019-05-01 10:00:00'),
            ('A', 3, 'T1', '2019-05-01 10:05:00'),
            ('A', 2, 'T1', '2019-05-01 10:10:00'),
        ])
        detector = DirectionDetector()

        stats = detector.get_direction_statistics(detector.detect_directions(data))

        assert stats['total_movements'] == 2
        assert stats['direction_counts'] == {'up': 1, 'down': 1}
        assert stats['no_ant_stats']['max'] == 2
        assert stats['net_antennas_per_tag'] == {'T1': 1}
