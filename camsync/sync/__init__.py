"""Clock domains, source identifiers and multi-source frame synchronization."""

from .clock import (
    SteadyClockOffset,
    get_time_stamp,
    get_utc_time_stamp,
    get_steady_clock_offset,
    monotonic_to_utc,
    utc_to_monotonic,
    get_pretty_duration,
    get_formatted_time,
)
from .identifiers import (
    RobotIdentifier,
    MsgIdentifier,
    RobotCameraIdentifier,
    SourceKind,
    VideoSourceID,
    string_to_ip,
    ip_to_string,
)
from .video import FrameStatus, FrameEntry, VideoMetaInformation, get_camera_meta
from .frame_index import (
    get_ts,
    get_index,
    get_frame_time_stamp,
    get_frame_time_stamps,
    fill_utc_timestamps,
)
from .synchronizer import SourceSynchronizer, SynchronizedFrame

__all__ = [
    "SteadyClockOffset",
    "get_time_stamp",
    "get_utc_time_stamp",
    "get_steady_clock_offset",
    "monotonic_to_utc",
    "utc_to_monotonic",
    "get_pretty_duration",
    "get_formatted_time",
    "RobotIdentifier",
    "MsgIdentifier",
    "RobotCameraIdentifier",
    "SourceKind",
    "VideoSourceID",
    "string_to_ip",
    "ip_to_string",
    "FrameStatus",
    "FrameEntry",
    "VideoMetaInformation",
    "get_camera_meta",
    "get_ts",
    "get_index",
    "get_frame_time_stamp",
    "get_frame_time_stamps",
    "fill_utc_timestamps",
    "SourceSynchronizer",
    "SynchronizedFrame",
]
