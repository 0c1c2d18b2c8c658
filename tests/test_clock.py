"""Tests for clock domains and the steady clock offset."""

import logging
import re
import threading
import time

import pytest

from camsync.sync.clock import (
    SteadyClockOffset,
    get_formatted_time,
    get_pretty_duration,
    get_steady_clock_offset,
    get_time_stamp,
    get_utc_time_stamp,
    monotonic_to_utc,
    utc_to_monotonic,
)


class FakeClock:
    """Clock advancing by a fixed step at every read."""

    def __init__(self, start, step):
        self.value = start
        self.step = step
        self.calls = 0

    def __call__(self):
        self.calls += 1
        value = self.value
        self.value += self.step
        return value


class TestSteadyClockOffset:

    def test_measurement(self):
        monotonic = FakeClock(start=1_000, step=10)
        utc = FakeClock(start=2_000_000, step=10)

        tracker = SteadyClockOffset(monotonic_clock=monotonic, utc_clock=utc)

        # utc read between monotonic 1000 and 1010
        assert tracker.get() == 2_000_000 - 1_005

    def test_sampled_once(self):
        monotonic = FakeClock(start=0, step=1_000)
        utc = FakeClock(start=10_000_000, step=5_000)
        tracker = SteadyClockOffset(monotonic_clock=monotonic, utc_clock=utc)

        assert not tracker.is_initialized
        first = tracker.get()
        second = tracker.get()

        assert tracker.is_initialized
        assert first == second
        assert monotonic.calls == 2
        assert utc.calls == 1

    def test_measurement_logged(self, caplog):
        tracker = SteadyClockOffset(
            monotonic_clock=FakeClock(start=1_000, step=10),
            utc_clock=FakeClock(start=2_000_000, step=10),
        )

        with caplog.at_level(logging.DEBUG, logger="camsync"):
            tracker.get()

        records = [r for r in caplog.records if r.name == "camsync.SteadyClockOffset"]
        assert len(records) == 1
        assert "1998995 us" in records[0].getMessage()

    def test_concurrent_first_use(self):
        monotonic = FakeClock(start=0, step=1)
        utc = FakeClock(start=1_000_000, step=1)
        tracker = SteadyClockOffset(monotonic_clock=monotonic, utc_clock=utc)
        results = []
        barrier = threading.Barrier(8)

        def worker():
            barrier.wait()
            results.append(tracker.get())

        threads = [threading.Thread(target=worker) for _ in range(8)]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join()

        assert len(set(results)) == 1
        assert utc.calls == 1

    def test_process_offset_stable(self):
        first = get_steady_clock_offset()
        time.sleep(0.01)
        second = get_steady_clock_offset()

        assert first == second

    def test_process_offset_matches_clocks(self):
        """monotonic + offset is close to utc (within a second)."""
        error = get_time_stamp() + get_steady_clock_offset() - get_utc_time_stamp()

        assert abs(error) < 1_000_000

    def test_domain_conversion(self):
        assert monotonic_to_utc(100, offset=50) == 150
        assert utc_to_monotonic(150, offset=50) == 100
        assert utc_to_monotonic(monotonic_to_utc(123)) == 123


class TestTimeStamps:

    def test_monotonic_non_decreasing(self):
        samples = [get_time_stamp() for _ in range(1000)]

        assert all(b >= a for a, b in zip(samples, samples[1:]))

    def test_microsecond_units(self):
        assert abs(get_utc_time_stamp() / 1e6 - time.time()) < 1.0


class TestPrettyDuration:

    @pytest.mark.parametrize("duration_us, expected", [
        (0, "0ms"),
        (999, "0ms"),
        (4_000, "4ms"),
        (3_723_004_000, "1h:2m:3s:4ms"),
        (86_400_000_000, "1d"),
        (90_061_001_000, "1d:1h:1m:1s:1ms"),
        (60_000_000, "1m"),
        (3_600_000_500, "1h"),
    ])
    def test_format(self, duration_us, expected):
        assert get_pretty_duration(duration_us) == expected

    def test_negative(self):
        with pytest.raises(ValueError):
            get_pretty_duration(-1)


def test_formatted_time():
    assert re.fullmatch(r"\d{4}_\d{2}_\d{2}_\d{2}h\d{2}m\d{2}s", get_formatted_time())
