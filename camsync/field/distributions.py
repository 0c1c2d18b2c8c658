"""
Field Position Distributions.

Positions, angles and poses expressed in the field referential, each with an
optional uncertainty. A missing uncertainty (None) means "unknown" and is
distinct from a zero uncertainty.

Side Inversion:
===============
The field x-axis points toward the opposite goal, so the same physical point
has opposite (x, y) coordinates for both teams. Switching side is a rotation
of pi around the field z-axis:

    (x, y) -> (-x, -y)
    theta  -> theta + pi

The 2x2 position covariance is unchanged by this rotation. For a 3x3
covariance the xz and yz terms change sign.
"""

from dataclasses import dataclass, field, replace
from typing import Optional, Tuple

import numpy as np

# Upper triangular storage order of a 3x3 covariance: xx, xy, xz, yy, yz, zz
_UPPER_3X3 = ((0, 0), (0, 1), (0, 2), (1, 1), (1, 2), (2, 2))


def normalize_angle(angle: float) -> float:
    """Wrap an angle (radians) to (-pi, pi]."""
    wrapped = (angle + np.pi) % (2 * np.pi) - np.pi
    if wrapped == -np.pi:
        return float(np.pi)
    return float(wrapped)


@dataclass(frozen=True)
class PositionDistribution:
    """
    Position on the field with optional uncertainty.

    Attributes:
        x: Position along the field x-axis.
        y: Position along the field y-axis.
        uncertainty: Upper triangular covariance coefficients, 3 values for a
                     2x2 matrix or 6 values for a 3x3 matrix. None if unknown.
    """

    x: float
    y: float
    uncertainty: Optional[Tuple[float, ...]] = None

    def __post_init__(self):
        if self.uncertainty is not None:
            object.__setattr__(self, "uncertainty", tuple(float(u) for u in self.uncertainty))


@dataclass(frozen=True)
class AngleDistribution:
    """Angle (radians) with optional standard deviation."""

    mean: float
    std_dev: Optional[float] = None


@dataclass(frozen=True)
class PoseDistribution:
    """Position and orientation of a robot on the field."""

    position: PositionDistribution
    dir: AngleDistribution = field(default_factory=lambda: AngleDistribution(0.0))


def invert_position(position: PositionDistribution) -> PositionDistribution:
    """Return the position seen from the other side of the field."""
    uncertainty = position.uncertainty
    if uncertainty is not None and len(uncertainty) == 6:
        xx, xy, xz, yy, yz, zz = uncertainty
        uncertainty = (xx, xy, -xz, yy, -yz, zz)
    return replace(position, x=-position.x, y=-position.y, uncertainty=uncertainty)


def invert_angle(angle: AngleDistribution) -> AngleDistribution:
    """Return the angle seen from the other side of the field."""
    return replace(angle, mean=normalize_angle(angle.mean + np.pi))


def invert_pose(pose: PoseDistribution) -> PoseDistribution:
    """Return the pose seen from the other side of the field."""
    return PoseDistribution(
        position=invert_position(pose.position),
        dir=invert_angle(pose.dir),
    )


def export_uncertainty(position: PositionDistribution) -> Tuple[bool, Optional[np.ndarray]]:
    """
    Export the uncertainty of a position to a covariance matrix.

    Args:
        position: Position with its uncertainty.

    Returns:
        Tuple[bool, Optional[np.ndarray]]:
            - success: False if there is no uncertainty or its size is invalid
            - covariance: 2x2 or 3x3 symmetric matrix, None on failure
    """
    uncertainty = position.uncertainty
    if uncertainty is None:
        return False, None

    if len(uncertainty) == 3:
        a, b, c = uncertainty
        return True, np.array([[a, b], [b, c]], dtype=np.float64)

    if len(uncertainty) == 6:
        covariance = np.zeros((3, 3), dtype=np.float64)
        for value, (row, col) in zip(uncertainty, _UPPER_3X3):
            covariance[row, col] = value
            covariance[col, row] = value
        return True, covariance

    return False, None


def cvt_to_point3f(position: PositionDistribution) -> np.ndarray:
    """Mean of the position as a 3D field point (z = 0)."""
    return np.array([position.x, position.y, 0.0], dtype=np.float64)


def field_from_self(
    obj_pos_in_self: PositionDistribution,
    robot_pose: PoseDistribution,
) -> np.ndarray:
    """
    Field position of an object observed in the robot referential.

    Uncertainty is not propagated.

    Mathematical Form:
        P_field = P_robot + R(theta) @ P_self

    Args:
        obj_pos_in_self: Object position relative to the robot.
        robot_pose: Pose of the robot on the field.

    Returns:
        np.ndarray: Field point (3,) with z = 0.
    """
    theta = robot_pose.dir.mean
    c, s = np.cos(theta), np.sin(theta)
    x = robot_pose.position.x + c * obj_pos_in_self.x - s * obj_pos_in_self.y
    y = robot_pose.position.y + s * obj_pos_in_self.x + c * obj_pos_in_self.y
    return np.array([x, y, 0.0], dtype=np.float64)
