"""Synchronization of frames recorded by several video sources."""

from dataclasses import dataclass
from typing import Any, Dict, Iterable, Iterator, List, Mapping, Optional, Tuple

from ..utils.config_loader import get_nested
from ..utils.logger import LoggerMixin
from .frame_index import get_frame_time_stamps, get_index
from .identifiers import VideoSourceID
from .video import FrameEntry, VideoMetaInformation


@dataclass(frozen=True)
class SynchronizedFrame:
    """Frame of one source selected for a query time."""

    source_id: VideoSourceID
    index: int
    time_stamp: int
    frame: FrameEntry


class SourceSynchronizer(LoggerMixin):
    """
    Align the frames of several videos on a shared clock domain.

    Sources are kept in identifier order (robot cameras first, then external
    cameras), so every query returns sources in the same deterministic order.

    Example:
        >>> sync = SourceSynchronizer({front_id: front_meta, tribune_id: tribune_meta})
        >>> for frame in sync.get_synchronized_frames(time_stamp):
        ...     print(frame.source_id, frame.index)
    """

    def __init__(
        self,
        videos: Mapping[VideoSourceID, VideoMetaInformation],
        use_utc: bool = True,
    ):
        """
        Initialize the synchronizer.

        Args:
            videos: Meta information of each source.
            use_utc: Clock domain of queries, wall clock (True) or monotonic (False).
        """
        self.use_utc = use_utc
        self.source_ids: List[VideoSourceID] = sorted(videos)
        self._videos: Dict[VideoSourceID, VideoMetaInformation] = {
            source_id: videos[source_id] for source_id in self.source_ids
        }

        # Validates domain availability and ordering of every video up front
        for source_id in self.source_ids:
            get_frame_time_stamps(self._videos[source_id], self.use_utc)

        self.logger.debug(
            f"Synchronizing {len(self.source_ids)} sources "
            f"({'utc' if use_utc else 'monotonic'} domain)"
        )

    @classmethod
    def from_videos(
        cls,
        videos: Iterable[VideoMetaInformation],
        use_utc: bool = True,
    ) -> "SourceSynchronizer":
        """
        Build from videos carrying their own source_id.

        Raises:
            ValueError: If a video has no source_id or two videos share one.
        """
        by_source: Dict[VideoSourceID, VideoMetaInformation] = {}
        for video in videos:
            if video.source_id is None:
                raise ValueError("source_id: video meta information has no source_id")
            if video.source_id in by_source:
                raise ValueError(f"source_id: duplicated source {video.source_id}")
            by_source[video.source_id] = video
        return cls(by_source, use_utc=use_utc)

    @classmethod
    def from_config(
        cls,
        videos: Mapping[VideoSourceID, VideoMetaInformation],
        config: Dict[str, Any],
    ) -> "SourceSynchronizer":
        """Build a synchronizer using the 'sync' config section."""
        return cls(videos, use_utc=get_nested(config, "sync.use_utc", True))

    def __len__(self) -> int:
        """Return number of sources."""
        return len(self.source_ids)

    def __contains__(self, source_id: VideoSourceID) -> bool:
        return source_id in self._videos

    def __iter__(self) -> Iterator[VideoSourceID]:
        return iter(self.source_ids)

    def get_video(self, source_id: VideoSourceID) -> VideoMetaInformation:
        """
        Meta information of one source.

        Raises:
            KeyError: If the source is unknown.
        """
        if source_id not in self._videos:
            raise KeyError(f"Source '{source_id}' not found")
        return self._videos[source_id]

    def get_indices(self, time_stamp: int) -> Dict[VideoSourceID, int]:
        """
        Frame index of every source for a query time.

        Returns:
            Dict mapping each source (in identifier order) to the index of its
            last frame at or before time_stamp, -1 if it has none.
        """
        return {
            source_id: get_index(self._videos[source_id], time_stamp, self.use_utc)
            for source_id in self.source_ids
        }

    def get_synchronized_frames(self, time_stamp: int) -> List[SynchronizedFrame]:
        """
        Frames displayed by each source at a query time.

        Sources which had not started recording yet are skipped.

        Args:
            time_stamp: Query time (us) in the synchronizer domain.

        Returns:
            List of SynchronizedFrame, in identifier order.
        """
        frames = []
        for source_id, index in self.get_indices(time_stamp).items():
            if index < 0:
                self.logger.warning(f"No frame of {source_id} at or before {time_stamp}")
                continue
            video = self._videos[source_id]
            frames.append(SynchronizedFrame(
                source_id=source_id,
                index=index,
                time_stamp=int(get_frame_time_stamps(video, self.use_utc)[index]),
                frame=video.frames[index],
            ))
        return frames

    def get_time_range(self) -> Optional[Tuple[int, int]]:
        """
        Interval covered by all sources.

        Returns:
            (start, end) where start is the latest first frame and end the
            earliest last frame, or None if the sources do not overlap or a
            source has no frames.
        """
        starts, ends = [], []
        for source_id in self.source_ids:
            time_stamps = get_frame_time_stamps(self._videos[source_id], self.use_utc)
            if len(time_stamps) == 0:
                return None
            starts.append(int(time_stamps[0]))
            ends.append(int(time_stamps[-1]))

        if not starts or max(starts) > min(ends):
            return None
        return max(starts), min(ends)

    def get_statistics(self) -> Dict:
        """
        Get synchronization statistics.

        Returns:
            Dictionary with sync statistics.
        """
        return {
            "sources": len(self),
            "frames_per_source": {
                str(source_id): len(self._videos[source_id]) for source_id in self.source_ids
            },
            "total_frames": sum(len(video) for video in self._videos.values()),
            "common_time_range": self.get_time_range(),
        }
