"""
Timestamp to frame index lookup.

Frames of a video are stored in capture order, hence with non-decreasing
timestamps in every clock domain they carry. Lookups use a binary search on
a cached timestamp array: a query resolves to the last frame whose timestamp
is at or before the query ("round down"), never to a later frame.

    frames:      [100, 200, 300]
    get_index(50)   -> -1   (before the first frame)
    get_index(150)  ->  0
    get_index(300)  ->  2
    get_index(1000) ->  2   (after the last frame: last index)
"""

from dataclasses import replace
from typing import Optional

import numpy as np

from ..exceptions import OutOfRangeError
from .clock import get_steady_clock_offset
from .video import FrameEntry, VideoMetaInformation


def _domain(utc: bool) -> str:
    return "utc" if utc else "monotonic"


def get_ts(entry: FrameEntry, utc: bool = True) -> int:
    """
    Timestamp of a frame in the requested clock domain.

    Args:
        entry: Frame record.
        utc: True for the wall clock domain, False for the monotonic one.

    Raises:
        OutOfRangeError: If the frame has no timestamp in that domain.
    """
    time_stamp = entry.utc_ts if utc else entry.monotonic_ts
    if time_stamp is None:
        raise OutOfRangeError(f"Frame has no {_domain(utc)}_ts", domain=_domain(utc))
    return time_stamp


def get_frame_time_stamps(meta_information: VideoMetaInformation, utc: bool = True) -> np.ndarray:
    """
    Timestamps of all frames in the requested domain, as an int64 array.

    The array is computed once per video and domain, then cached.

    Raises:
        OutOfRangeError: If a frame has no timestamp in that domain.
        ValueError: If timestamps decrease along the sequence.
    """
    cache = meta_information._ts_cache
    if utc in cache:
        return cache[utc]

    time_stamps = np.empty(len(meta_information.frames), dtype=np.int64)
    for index, entry in enumerate(meta_information.frames):
        time_stamp = entry.utc_ts if utc else entry.monotonic_ts
        if time_stamp is None:
            raise OutOfRangeError(
                f"Frame {index} has no {_domain(utc)}_ts", index=index, domain=_domain(utc)
            )
        time_stamps[index] = time_stamp

    decreasing = np.flatnonzero(np.diff(time_stamps) < 0)
    if len(decreasing) > 0:
        index = int(decreasing[0]) + 1
        raise ValueError(
            f"Frame {index} {_domain(utc)}_ts={time_stamps[index]} is before "
            f"frame {index - 1} ({time_stamps[index - 1]})"
        )

    time_stamps.setflags(write=False)
    cache[utc] = time_stamps
    return time_stamps


def get_index(meta_information: VideoMetaInformation, time_stamp: int, utc: bool = True) -> int:
    """
    Index of the last frame at or before time_stamp.

    Args:
        meta_information: Video with frames in capture order.
        time_stamp: Query time (us) in the requested domain.
        utc: True for the wall clock domain, False for the monotonic one.

    Returns:
        int: Frame index, or -1 if the query is before the first frame (or the
             video has no frames).
    """
    time_stamps = get_frame_time_stamps(meta_information, utc)
    return int(np.searchsorted(time_stamps, time_stamp, side="right")) - 1


def get_frame_time_stamp(meta_information: VideoMetaInformation, index: int, utc: bool = True) -> int:
    """
    Timestamp of the frame at index in the requested domain.

    Raises:
        OutOfRangeError: If index is outside the sequence or the timestamp was
                         not recorded in that domain.
    """
    n_frames = len(meta_information.frames)
    if not 0 <= index < n_frames:
        raise OutOfRangeError(
            f"Frame index {index} out of range [0, {n_frames - 1}]", index=index, domain=_domain(utc)
        )
    try:
        return get_ts(meta_information.frames[index], utc)
    except OutOfRangeError as e:
        raise OutOfRangeError(f"Frame {index}: {e}", index=index, domain=_domain(utc)) from e


def fill_utc_timestamps(
    meta_information: VideoMetaInformation,
    offset: Optional[int] = None,
) -> VideoMetaInformation:
    """
    Copy of a video where frames missing utc_ts get monotonic_ts + offset.

    Args:
        meta_information: Video to complete.
        offset: Monotonic to utc offset (us). Defaults to the video time_offset,
                then to the offset of the current process.

    Returns:
        VideoMetaInformation: New video; the input is left untouched.

    Raises:
        OutOfRangeError: If a frame has neither a utc nor a monotonic timestamp.
    """
    if offset is None:
        offset = meta_information.time_offset
    if offset is None:
        offset = get_steady_clock_offset()

    frames = []
    for index, entry in enumerate(meta_information.frames):
        if entry.utc_ts is None:
            if entry.monotonic_ts is None:
                raise OutOfRangeError(f"Frame {index} has no timestamp at all", index=index)
            entry = replace(entry, utc_ts=entry.monotonic_ts + offset)
        frames.append(entry)

    return replace(meta_information, frames=tuple(frames), time_offset=offset)
