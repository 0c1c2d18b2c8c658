"""
Camera calibration and projection.

This package converts camera calibration records to and from the OpenCV
representation, and projects points between the field referential and camera
images.

Classes:
    IntrinsicParameters: Focal lengths, principal point, image size, distortion.
    Pose3D: Rigid transform from field to camera referential.
    CameraMetaInformation: Intrinsics and pose of one camera.
    Projector: Batch projection of field points into one camera.

Standalone Functions:
    intrinsic_to_cv / cv_to_intrinsic: Intrinsics <-> (K, dist, img_size).
    pose3d_to_cv / cv_to_pose3d: Pose3D <-> (rvec, tvec).
    get_affine_from_pose / set_pose_from_affine: Pose3D <-> 4x4 transform.
    field_to_camera: Field point to camera frame.
    field_to_img: Field point to pixel with validity flag.
    is_point_valid_for_correction: Visibility predicate.

Example Usage:
    >>> from camsync.calibration import CameraMetaInformation, field_to_img
    >>> valid, img_pos = field_to_img(point, CameraMetaInformation(intrinsics, pose))
"""

from .intrinsics import IntrinsicParameters, intrinsic_to_cv, cv_to_intrinsic, normalize_distortion
from .extrinsics import (
    Pose3D,
    pose3d_to_cv,
    cv_to_pose3d,
    get_affine_from_pose,
    set_pose_from_affine,
)
from .projection import (
    CameraMetaInformation,
    Projector,
    get_img_size,
    field_to_camera,
    project_camera_points,
    project_to_image,
    field_to_img,
    is_point_valid_for_correction,
)
from .points import Point2DMsg, Point3DMsg, Match2D3DMsg, point_to_cv, cv_to_point_msg, matches_to_cv

__all__ = [
    # Classes
    "IntrinsicParameters",
    "Pose3D",
    "CameraMetaInformation",
    "Projector",
    "Point2DMsg",
    "Point3DMsg",
    "Match2D3DMsg",
    # Standalone functions
    "intrinsic_to_cv",
    "cv_to_intrinsic",
    "normalize_distortion",
    "pose3d_to_cv",
    "cv_to_pose3d",
    "get_affine_from_pose",
    "set_pose_from_affine",
    "get_img_size",
    "field_to_camera",
    "project_camera_points",
    "project_to_image",
    "field_to_img",
    "is_point_valid_for_correction",
    "point_to_cv",
    "cv_to_point_msg",
    "matches_to_cv",
]
