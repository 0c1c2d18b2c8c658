"""Tests for timestamp to frame index lookup."""

import numpy as np
import pytest

from camsync.exceptions import OutOfRangeError
from camsync.sync.frame_index import (
    fill_utc_timestamps,
    get_frame_time_stamp,
    get_frame_time_stamps,
    get_index,
    get_ts,
)
from camsync.sync.video import FrameEntry, FrameStatus, VideoMetaInformation

UTC_OFFSET = 1_600_000_000_000_000


def make_video(monotonic, utc_offset=UTC_OFFSET, with_utc=True, **kwargs):
    frames = [
        FrameEntry(utc_ts=ts + utc_offset if with_utc else None, monotonic_ts=ts)
        for ts in monotonic
    ]
    return VideoMetaInformation(frames=frames, **kwargs)


@pytest.fixture
def video():
    """Three frames at 100, 200 and 300 us (monotonic)."""
    return make_video([100, 200, 300])


class TestGetIndex:

    @pytest.mark.parametrize("time_stamp, expected", [
        (50, -1),
        (99, -1),
        (100, 0),
        (150, 0),
        (200, 1),
        (299, 1),
        (300, 2),
        (1000, 2),
    ])
    def test_monotonic_round_down(self, video, time_stamp, expected):
        assert get_index(video, time_stamp, utc=False) == expected

    def test_utc_domain(self, video):
        assert get_index(video, UTC_OFFSET + 150) == 0
        assert get_index(video, UTC_OFFSET + 300) == 2
        assert get_index(video, UTC_OFFSET + 50) == -1
        # A monotonic value is far before any utc frame
        assert get_index(video, 300) == -1

    def test_repeated_timestamps_resolve_to_last(self):
        video = make_video([100, 200, 200, 300])

        assert get_index(video, 200, utc=False) == 2

    def test_empty_video(self):
        assert get_index(VideoMetaInformation(), 123) == -1

    def test_missing_domain_raises(self):
        video = make_video([100, 200], with_utc=False)

        assert get_index(video, 150, utc=False) == 0
        with pytest.raises(OutOfRangeError) as excinfo:
            get_index(video, 150, utc=True)
        assert excinfo.value.index == 0
        assert excinfo.value.domain == "utc"

    def test_decreasing_timestamps_rejected(self):
        video = make_video([100, 300, 200])

        with pytest.raises(ValueError, match="Frame 2"):
            get_index(video, 250, utc=False)

    def test_large_video(self):
        time_stamps = np.arange(0, 33_333 * 100_000, 33_333)
        video = make_video(time_stamps.tolist())

        assert get_index(video, 33_333 * 54_321 + 10, utc=False) == 54_321

    def test_timestamps_cached(self, video):
        first = get_frame_time_stamps(video, utc=False)

        assert get_frame_time_stamps(video, utc=False) is first
        assert not first.flags.writeable


class TestGetTimeStamp:

    def test_inverse_of_index(self, video):
        for index in range(len(video)):
            time_stamp = get_frame_time_stamp(video, index, utc=False)
            assert get_index(video, time_stamp, utc=False) == index

    def test_utc_value(self, video):
        assert get_frame_time_stamp(video, 1) == UTC_OFFSET + 200

    @pytest.mark.parametrize("index", [-1, 3, 100])
    def test_index_out_of_range(self, video, index):
        with pytest.raises(OutOfRangeError):
            get_frame_time_stamp(video, index)

    def test_domain_not_recorded(self):
        video = make_video([100], with_utc=False)

        with pytest.raises(OutOfRangeError, match="utc_ts"):
            get_frame_time_stamp(video, 0, utc=True)

    def test_out_of_range_is_index_error(self, video):
        with pytest.raises(IndexError):
            get_frame_time_stamp(video, 5)


class TestGetTS:

    def test_domains(self):
        entry = FrameEntry(utc_ts=2_000, monotonic_ts=1_000, status=FrameStatus.STATIC)

        assert get_ts(entry) == 2_000
        assert get_ts(entry, utc=True) == 2_000
        assert get_ts(entry, utc=False) == 1_000

    def test_missing(self):
        with pytest.raises(OutOfRangeError):
            get_ts(FrameEntry(monotonic_ts=1_000), utc=True)
        with pytest.raises(OutOfRangeError):
            get_ts(FrameEntry(utc_ts=1_000), utc=False)


class TestFillUTC:

    def test_explicit_offset(self):
        video = make_video([100, 200], with_utc=False)

        filled = fill_utc_timestamps(video, offset=5_000)

        assert [f.utc_ts for f in filled.frames] == [5_100, 5_200]
        assert filled.time_offset == 5_000
        # Input is untouched
        assert video.frames[0].utc_ts is None
        assert video.time_offset is None

    def test_video_offset(self):
        video = make_video([100, 200], with_utc=False, time_offset=1_000)

        filled = fill_utc_timestamps(video)

        assert get_index(filled, 1_150) == 0

    def test_recorded_utc_kept(self):
        video = VideoMetaInformation(frames=[
            FrameEntry(utc_ts=42, monotonic_ts=100),
            FrameEntry(monotonic_ts=200),
        ])

        filled = fill_utc_timestamps(video, offset=0)

        assert [f.utc_ts for f in filled.frames] == [42, 200]

    def test_process_offset_used_by_default(self, monkeypatch):
        import camsync.sync.frame_index as frame_index

        monkeypatch.setattr(frame_index, "get_steady_clock_offset", lambda: 7)
        video = make_video([100], with_utc=False)

        assert fill_utc_timestamps(video).frames[0].utc_ts == 107

    def test_frame_without_timestamp(self):
        video = VideoMetaInformation(frames=[FrameEntry()])

        with pytest.raises(OutOfRangeError):
            fill_utc_timestamps(video, offset=0)
