"""Conversion between point records and numpy arrays."""

from dataclasses import dataclass
from typing import List, Sequence, Tuple, Union

import numpy as np


@dataclass(frozen=True)
class Point2DMsg:
    """Image position (pixels)."""

    x: float
    y: float


@dataclass(frozen=True)
class Point3DMsg:
    """Field position."""

    x: float
    y: float
    z: float


@dataclass(frozen=True)
class Match2D3DMsg:
    """Correspondence between an image position and a field position."""

    img_pos: Point2DMsg
    obj_pos: Point3DMsg


def point_to_cv(msg: Union[Point2DMsg, Point3DMsg]) -> np.ndarray:
    """Convert a point record to a float64 array of shape (2,) or (3,)."""
    if isinstance(msg, Point3DMsg):
        return np.array([msg.x, msg.y, msg.z], dtype=np.float64)
    return np.array([msg.x, msg.y], dtype=np.float64)


def cv_to_point_msg(pos: Sequence[float]) -> Union[Point2DMsg, Point3DMsg]:
    """Convert a (2,) or (3,) array to the matching point record."""
    pos = np.asarray(pos, dtype=np.float64).flatten()
    if pos.shape == (2,):
        return Point2DMsg(x=float(pos[0]), y=float(pos[1]))
    if pos.shape == (3,):
        return Point3DMsg(x=float(pos[0]), y=float(pos[1]), z=float(pos[2]))
    raise ValueError(f"Expected a 2D or 3D point, got shape {pos.shape}")


def matches_to_cv(matches: List[Match2D3DMsg]) -> Tuple[np.ndarray, np.ndarray]:
    """
    Split 2D-3D matches into arrays usable by cv2.solvePnP.

    Args:
        matches: List of correspondences.

    Returns:
        Tuple[np.ndarray, np.ndarray]: img_pos (N, 2) and obj_pos (N, 3).
    """
    img_pos = np.array([point_to_cv(m.img_pos) for m in matches], dtype=np.float64).reshape(-1, 2)
    obj_pos = np.array([point_to_cv(m.obj_pos) for m in matches], dtype=np.float64).reshape(-1, 3)
    return img_pos, obj_pos
