"""Field referential positions, angles and poses."""

from .distributions import (
    PositionDistribution,
    AngleDistribution,
    PoseDistribution,
    normalize_angle,
    invert_position,
    invert_angle,
    invert_pose,
    export_uncertainty,
    cvt_to_point3f,
    field_from_self,
)

__all__ = [
    "PositionDistribution",
    "AngleDistribution",
    "PoseDistribution",
    "normalize_angle",
    "invert_position",
    "invert_angle",
    "invert_pose",
    "export_uncertainty",
    "cvt_to_point3f",
    "field_from_self",
]
