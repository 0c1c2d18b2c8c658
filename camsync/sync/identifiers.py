"""
Identifiers of the sources of recorded data, and their total ordering.

Ordering rules:
    RobotIdentifier:        team_id, then robot_id
    MsgIdentifier:          src_ip, then src_port, then packet_no; ordering,
                            equality or hashing with an unset endpoint
                            raises InvalidStateError
    RobotCameraIdentifier:  robot_id, then camera_name
    VideoSourceID:          robot sources before external sources, then the
                            source itself (RobotCameraIdentifier or name),
                            then utc_start

Sorting a list of identifiers is therefore deterministic whatever the order
in which sources were discovered.
"""

import enum
import functools
from dataclasses import dataclass
from typing import Optional, Tuple, Union

from ..exceptions import InvalidStateError


def string_to_ip(address: str) -> int:
    """
    Convert a dotted IPv4 address to an integer (big-endian).

    Example:
        >>> string_to_ip("192.168.0.1")
        3232235521
    """
    fields = address.strip().split(".")
    if len(fields) != 4:
        raise ValueError(f"Invalid IP address '{address}': expected 4 fields")

    ip = 0
    for field in fields:
        if not field.isdigit() or int(field) > 255:
            raise ValueError(f"Invalid IP address '{address}': bad field '{field}'")
        ip = (ip << 8) | int(field)
    return ip


def ip_to_string(ip_address: int) -> str:
    """Inverse of string_to_ip()."""
    if not 0 <= ip_address <= 0xFFFFFFFF:
        raise ValueError(f"Invalid IP address value: {ip_address}")
    return ".".join(str((ip_address >> shift) & 0xFF) for shift in (24, 16, 8, 0))


@dataclass(frozen=True, order=True)
class RobotIdentifier:
    """Robot, unique within a game."""

    team_id: int
    robot_id: int

    def __str__(self) -> str:
        return f"team{self.team_id}_robot{self.robot_id}"


@functools.total_ordering
@dataclass(frozen=True, eq=False)
class MsgIdentifier:
    """
    Origin of a network message.

    Attributes:
        src_ip: Source IPv4 address as an integer (see string_to_ip).
        src_port: Source port.
        packet_no: Packet number for this source.
    """

    src_ip: Optional[int] = None
    src_port: Optional[int] = None
    packet_no: int = 0

    def sort_key(self) -> Tuple[int, int, int]:
        """Return the ordering key, raising if the endpoint is not set."""
        if self.src_ip is None:
            raise InvalidStateError(f"MsgIdentifier: src_ip is not set ({self!r})", field="src_ip")
        if self.src_port is None:
            raise InvalidStateError(f"MsgIdentifier: src_port is not set ({self!r})", field="src_port")
        return self.src_ip, self.src_port, self.packet_no

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, MsgIdentifier):
            return NotImplemented
        return self.sort_key() == other.sort_key()

    def __lt__(self, other: "MsgIdentifier") -> bool:
        if not isinstance(other, MsgIdentifier):
            return NotImplemented
        return self.sort_key() < other.sort_key()

    def __hash__(self) -> int:
        return hash(self.sort_key())

    def __str__(self) -> str:
        ip = "?" if self.src_ip is None else ip_to_string(self.src_ip)
        port = "?" if self.src_port is None else str(self.src_port)
        return f"{ip}:{port}#{self.packet_no}"


@dataclass(frozen=True, order=True)
class RobotCameraIdentifier:
    """One physical camera mounted on one robot."""

    robot_id: RobotIdentifier
    camera_name: str

    def __str__(self) -> str:
        return f"{self.robot_id}_{self.camera_name}"


class SourceKind(enum.IntEnum):
    """Kind of video source; the value is the ordering rank."""

    ROBOT = 0
    EXTERNAL = 1


@functools.total_ordering
@dataclass(frozen=True)
class VideoSourceID:
    """
    Source of a video: a camera on a robot or an external camera.

    Attributes:
        kind: Which variant is populated.
        source: RobotCameraIdentifier for ROBOT sources, camera name for EXTERNAL ones.
        utc_start: Start of the video, microseconds since epoch.

    Example:
        >>> front = VideoSourceID.robot(RobotCameraIdentifier(RobotIdentifier(1, 2), "front"))
        >>> tribune = VideoSourceID.external("tribune_left")
        >>> front < tribune
        True
    """

    kind: SourceKind
    source: Union[RobotCameraIdentifier, str]
    utc_start: int = 0

    def __post_init__(self):
        """Check that the payload matches the declared kind."""
        if self.kind == SourceKind.ROBOT:
            if not isinstance(self.source, RobotCameraIdentifier):
                raise InvalidStateError(
                    f"VideoSourceID: robot source requires a RobotCameraIdentifier, "
                    f"got {type(self.source).__name__}",
                    field="robot_source",
                )
        elif self.kind == SourceKind.EXTERNAL:
            if not isinstance(self.source, str) or not self.source:
                raise InvalidStateError(
                    "VideoSourceID: external source requires a non-empty name",
                    field="external_source",
                )
        else:
            raise InvalidStateError(f"VideoSourceID: unknown kind {self.kind!r}", field="kind")

    @classmethod
    def robot(cls, robot_source: RobotCameraIdentifier, utc_start: int = 0) -> "VideoSourceID":
        return cls(SourceKind.ROBOT, robot_source, utc_start)

    @classmethod
    def external(cls, external_source: str, utc_start: int = 0) -> "VideoSourceID":
        return cls(SourceKind.EXTERNAL, external_source, utc_start)

    @classmethod
    def from_fields(
        cls,
        robot_source: Optional[RobotCameraIdentifier] = None,
        external_source: Optional[str] = None,
        utc_start: int = 0,
    ) -> "VideoSourceID":
        """
        Build from the two optional variant fields of the record.

        Raises:
            InvalidStateError: If zero or both variants are populated.
        """
        if (robot_source is None) == (external_source is None):
            raise InvalidStateError(
                "VideoSourceID: exactly one of robot_source and external_source must be set",
                field="source_identifier",
            )
        if robot_source is not None:
            return cls.robot(robot_source, utc_start)
        return cls.external(external_source, utc_start)

    @property
    def robot_source(self) -> Optional[RobotCameraIdentifier]:
        return self.source if self.kind == SourceKind.ROBOT else None

    @property
    def external_source(self) -> Optional[str]:
        return self.source if self.kind == SourceKind.EXTERNAL else None

    def same_source(self, other: "VideoSourceID") -> bool:
        """True if both identifiers refer to the same physical camera."""
        return self.kind == other.kind and self.source == other.source

    def __lt__(self, other: "VideoSourceID") -> bool:
        if not isinstance(other, VideoSourceID):
            return NotImplemented
        if self.kind != other.kind:
            return self.kind < other.kind
        if self.source != other.source:
            return self.source < other.source
        return self.utc_start < other.utc_start

    def __str__(self) -> str:
        prefix = "robot" if self.kind == SourceKind.ROBOT else "external"
        return f"{prefix}:{self.source}@{self.utc_start}"
