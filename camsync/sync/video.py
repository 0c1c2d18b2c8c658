"""Frame records of a video and their per-video meta information."""

import enum
from dataclasses import dataclass, field, replace
from typing import Dict, List, Optional, Sequence

import numpy as np

from ..calibration.extrinsics import Pose3D
from ..calibration.intrinsics import IntrinsicParameters
from ..calibration.projection import CameraMetaInformation
from .identifiers import VideoSourceID


class FrameStatus(enum.IntEnum):
    """Acquisition condition of a frame, used to judge pose continuity."""

    UNKNOWN_FRAME_STATUS = 0
    STATIC = 1   # camera not moving, previous poses remain valid
    MOVING = 2   # camera moving slowly, pose interpolation is satisfying
    SHAKING = 3  # camera shaking, pose interpolation is unreliable


@dataclass(frozen=True)
class FrameEntry:
    """
    One frame of a video.

    Attributes:
        utc_ts: Wall clock timestamp (us since epoch), None if not recorded.
        monotonic_ts: Monotonic timestamp (us), None if not recorded.
        pose: Transformation from field to camera for this frame.
        status: Acquisition condition.
    """

    utc_ts: Optional[int] = None
    monotonic_ts: Optional[int] = None
    pose: Optional[Pose3D] = None
    status: FrameStatus = FrameStatus.UNKNOWN_FRAME_STATUS


@dataclass(frozen=True)
class VideoMetaInformation:
    """
    Everything known about a video except its pixels.

    Frames are stored in capture order, which is non-decreasing in each clock
    domain they were recorded in.

    Attributes:
        camera_parameters: Intrinsic parameters of the camera.
        default_pose: Pose used for frames without their own pose.
        frames: Frame records, in capture order.
        time_offset: Offset such that monotonic_ts + time_offset = utc_ts.
        source_id: Source of the video.
    """

    camera_parameters: Optional[IntrinsicParameters] = None
    default_pose: Optional[Pose3D] = None
    frames: Sequence[FrameEntry] = field(default_factory=tuple)
    time_offset: Optional[int] = None
    source_id: Optional[VideoSourceID] = None
    _ts_cache: Dict[bool, np.ndarray] = field(
        default_factory=dict, init=False, repr=False, compare=False, hash=False
    )

    def __post_init__(self):
        object.__setattr__(self, "frames", tuple(self.frames))

    def __len__(self) -> int:
        return len(self.frames)

    def with_frames(self, frames: List[FrameEntry]) -> "VideoMetaInformation":
        """Copy of this meta information with another frame list."""
        return replace(self, frames=tuple(frames))


def get_camera_meta(meta_information: VideoMetaInformation, index: int) -> CameraMetaInformation:
    """
    Camera intrinsics and pose for the frame at index.

    The frame pose is used when present, otherwise the default pose.

    Raises:
        IndexError: If index is outside the frame sequence.
        ValueError: If the video has no camera parameters or no pose is available.
    """
    if not 0 <= index < len(meta_information.frames):
        raise IndexError(f"Frame index {index} out of range [0, {len(meta_information.frames) - 1}]")
    if meta_information.camera_parameters is None:
        raise ValueError("camera_parameters: not set in video meta information")

    pose = meta_information.frames[index].pose
    if pose is None:
        pose = meta_information.default_pose
    if pose is None:
        raise ValueError(f"pose: frame {index} has no pose and no default_pose is set")

    return CameraMetaInformation(camera_parameters=meta_information.camera_parameters, pose=pose)
