"""
Field to Image Projection Module.

This module projects points expressed in the field referential into the
image of a calibrated camera, and decides whether a field point can be used
to correct (or triangulate) a camera pose.

Mathematical Background:
========================

Full Projection Pipeline:
-------------------------
    1. Field to camera:   P_cam = R @ P_field + t
    2. Normalization:     x' = X / Z, y' = Y / Z
    3. Distortion:        (x'', y'') = distort(x', y')   (see intrinsics)
    4. Pixel mapping:     u = fx * x'' + cx, v = fy * y'' + cy

Points Behind the Camera:
-------------------------
Normalization by Z is symmetric: a point P and its mirror -P project to the
same pixel. The distortion routine therefore happily returns a pixel for a
point behind the camera. A projection is only valid when Z > min_depth
(min_depth = 0 by default, a point in the camera plane is invalid). Invalid
depth projections are reported with NaN pixel coordinates and a False flag.

Image Bounds:
-------------
When an image size is known, a projection is also invalid when the pixel is
outside [0, width) x [0, height).
"""

from dataclasses import dataclass, field
from typing import Any, Dict, Optional, Tuple

import cv2
import numpy as np

from .extrinsics import Pose3D
from .intrinsics import IntrinsicParameters, normalize_distortion
from ..utils.config_loader import get_nested
from ..utils.logger import LoggerMixin


@dataclass(frozen=True)
class CameraMetaInformation:
    """
    Intrinsic parameters and field pose of one camera.

    Attributes:
        camera_parameters: Intrinsic parameters of the camera.
        pose: Transformation from field referential to camera referential.
    """

    camera_parameters: IntrinsicParameters
    pose: Pose3D = field(default_factory=Pose3D)


def get_img_size(camera_information: CameraMetaInformation) -> Tuple[int, int]:
    """Return the declared image size (width, height) of a camera."""
    return camera_information.camera_parameters.get_img_size()


def field_to_camera(
    pos_in_field: np.ndarray,
    rvec: np.ndarray,
    tvec: np.ndarray,
) -> np.ndarray:
    """
    Convert point(s) from the field basis to the camera basis.

    Mathematical Form:
        P_cam = R(rvec) @ P_field + tvec

    The Z coordinate of the result tells whether the point faces the camera.

    Args:
        pos_in_field: 3D point (3,) or points (N, 3) in field frame.
        rvec: Rotation vector (3,) / (3, 1).
        tvec: Translation vector (3,) / (3, 1).

    Returns:
        np.ndarray: Points in camera frame, same shape as the input.
    """
    pos_in_field = np.asarray(pos_in_field, dtype=np.float64)
    R, _ = cv2.Rodrigues(np.asarray(rvec, dtype=np.float64).reshape(3, 1))
    t = np.asarray(tvec, dtype=np.float64).flatten()

    points_cam = np.atleast_2d(pos_in_field) @ R.T + t

    return points_cam[0] if pos_in_field.ndim == 1 else points_cam


def project_camera_points(
    points_cam: np.ndarray,
    camera_matrix: np.ndarray,
    distortion_coeffs: Optional[np.ndarray] = None,
    min_depth: float = 0.0,
) -> Tuple[np.ndarray, np.ndarray]:
    """
    Apply the pinhole + distortion projection to camera-frame points.

    Args:
        points_cam: Points (N, 3) or (3,) in camera frame.
        camera_matrix: 3x3 intrinsic matrix.
        distortion_coeffs: Distortion vector (any recognized length, may be None).
        min_depth: Points must satisfy Z > min_depth to be valid.

    Returns:
        Tuple[np.ndarray, np.ndarray]:
            - img_points: Pixel coordinates (N, 2), NaN where depth is invalid
            - valid: Boolean mask (N,), False for points not in front of the camera
    """
    points_cam = np.atleast_2d(np.asarray(points_cam, dtype=np.float64))
    n_points = len(points_cam)

    if n_points == 0:
        return np.zeros((0, 2), dtype=np.float64), np.zeros(0, dtype=bool)

    valid = points_cam[:, 2] > min_depth
    dist = normalize_distortion(() if distortion_coeffs is None else distortion_coeffs)

    img_points, _ = cv2.projectPoints(
        np.ascontiguousarray(points_cam.reshape(-1, 1, 3)),
        np.zeros(3, dtype=np.float64),
        np.zeros(3, dtype=np.float64),
        np.asarray(camera_matrix, dtype=np.float64),
        dist,
    )
    img_points = img_points.reshape(n_points, 2)

    # Mirrored projections of points behind the camera are never exposed
    img_points[~valid] = np.nan

    return img_points, valid


def project_to_image(
    pos_in_field: np.ndarray,
    rvec: np.ndarray,
    tvec: np.ndarray,
    camera_matrix: np.ndarray,
    distortion_coeffs: Optional[np.ndarray] = None,
    min_depth: float = 0.0,
) -> Tuple[np.ndarray, np.ndarray]:
    """
    Project field point(s) to the image, without any image bounds check.

    Args:
        pos_in_field: Point (3,) or points (N, 3) in field frame.
        rvec: Rotation vector field -> camera.
        tvec: Translation vector field -> camera.
        camera_matrix: 3x3 intrinsic matrix.
        distortion_coeffs: Distortion vector.
        min_depth: Points must satisfy Z > min_depth in camera frame.

    Returns:
        Tuple[np.ndarray, np.ndarray]: (img_points (N, 2), valid (N,)).
    """
    points_cam = field_to_camera(np.atleast_2d(pos_in_field), rvec, tvec)
    return project_camera_points(points_cam, camera_matrix, distortion_coeffs, min_depth)


def field_to_img(
    pos_in_field: np.ndarray,
    camera_information: CameraMetaInformation,
    min_depth: float = 0.0,
    margin: int = 0,
) -> Tuple[bool, np.ndarray]:
    """
    Convert a field position to an image position.

    Args:
        pos_in_field: 3D point (3,) in field frame.
        camera_information: Intrinsics and pose of the camera.
        min_depth: Points must satisfy Z > min_depth in camera frame.
        margin: Pixels excluded along each image border.

    Returns:
        Tuple[bool, np.ndarray]:
            - valid: False if the point is behind the camera or outside the image
            - img_pos: Pixel coordinates (2,); NaN if the point is behind the camera

    Example:
        >>> valid, img_pos = field_to_img(np.array([1.0, 0.0, 0.0]), camera_information)
        >>> if valid:
        ...     print(f"Pixel: ({img_pos[0]:.1f}, {img_pos[1]:.1f})")
    """
    intrinsics = camera_information.camera_parameters
    rvec, tvec = camera_information.pose.to_cv()

    img_points, valid = project_to_image(
        np.asarray(pos_in_field, dtype=np.float64).reshape(1, 3),
        rvec,
        tvec,
        intrinsics.get_K_matrix(),
        intrinsics.distortion,
        min_depth,
    )
    img_pos = img_points[0]
    is_valid = bool(valid[0]) and bool(intrinsics.is_in_image(img_pos, margin)[0])

    return is_valid, img_pos


def is_point_valid_for_correction(
    pos: np.ndarray,
    rvec: np.ndarray,
    tvec: np.ndarray,
    camera_matrix: np.ndarray,
    distortion_coeffs: Optional[np.ndarray] = None,
    img_size: Optional[Tuple[int, int]] = None,
    min_depth: float = 0.0,
) -> bool:
    """
    Check if a field point can be used to correct this camera's pose.

    The point must be in front of the camera and project inside the image.

    Args:
        pos: 3D point (3,) in field frame.
        rvec: Rotation vector field -> camera.
        tvec: Translation vector field -> camera.
        camera_matrix: 3x3 intrinsic matrix.
        distortion_coeffs: Distortion vector.
        img_size: (width, height). When omitted the image is assumed centered
                  on the principal point: (2 * cx, 2 * cy).
        min_depth: Points must satisfy Z > min_depth in camera frame.

    Returns:
        bool: True if the point is a valid correction candidate.
    """
    camera_matrix = np.asarray(camera_matrix, dtype=np.float64)
    if img_size is None:
        img_size = (2 * camera_matrix[0, 2], 2 * camera_matrix[1, 2])
    width, height = img_size

    img_points, valid = project_to_image(
        np.asarray(pos, dtype=np.float64).reshape(1, 3),
        rvec, tvec, camera_matrix, distortion_coeffs, min_depth,
    )
    if not valid[0]:
        return False

    u, v = img_points[0]
    return bool(0 <= u < width and 0 <= v < height)


class Projector(LoggerMixin):
    """
    Project field points into the image of one camera.

    Batch counterpart of field_to_img(): same validity rules, applied to N
    points at once.

    Attributes:
        camera_information: Intrinsics and pose of the camera.
        min_depth: Points must satisfy Z > min_depth in camera frame.
        image_margin: Pixels excluded along each image border.

    Example:
        >>> projector = Projector(camera_information)
        >>> img_points, mask = projector.project_field_points(field_points)
        >>> print(f"{mask.sum()} of {len(field_points)} points visible")
    """

    def __init__(
        self,
        camera_information: CameraMetaInformation,
        min_depth: float = 0.0,
        image_margin: int = 0,
    ):
        """
        Initialize the projector.

        Args:
            camera_information: Intrinsics and pose of the camera.
            min_depth: Points must satisfy Z > min_depth in camera frame.
            image_margin: Pixels excluded along each image border.
        """
        self.camera_information = camera_information
        self.min_depth = float(min_depth)
        self.image_margin = int(image_margin)

        self._rvec, self._tvec = camera_information.pose.to_cv()
        self.logger.debug(
            f"Projector ready: {camera_information.camera_parameters!r}, "
            f"pose {camera_information.pose}"
        )

    @classmethod
    def from_config(
        cls,
        camera_information: CameraMetaInformation,
        config: Dict[str, Any],
    ) -> "Projector":
        """Build a projector using the 'projection' config section."""
        return cls(
            camera_information,
            min_depth=get_nested(config, "projection.min_depth", 0.0),
            image_margin=get_nested(config, "projection.image_margin", 0),
        )

    @property
    def intrinsics(self) -> IntrinsicParameters:
        return self.camera_information.camera_parameters

    @property
    def camera_position(self) -> np.ndarray:
        """Optical center of the camera in field coordinates."""
        return self.camera_information.pose.inverse().get_translation_vector()

    def field_to_camera(self, points: np.ndarray) -> np.ndarray:
        """Transform field points (N, 3) or (3,) to the camera frame."""
        return field_to_camera(points, self._rvec, self._tvec)

    def project_field_points(
        self,
        points: np.ndarray,
    ) -> Tuple[np.ndarray, np.ndarray]:
        """
        Project field points to image coordinates.

        Args:
            points: Field points (N, 3).

        Returns:
            Tuple[np.ndarray, np.ndarray]:
                - img_points: Pixel coordinates (N, 2), NaN behind the camera
                - mask: Boolean mask (N,), True for points in front of the
                        camera and inside the image
        """
        img_points, mask = project_to_image(
            points,
            self._rvec,
            self._tvec,
            self.intrinsics.get_K_matrix(),
            self.intrinsics.distortion,
            self.min_depth,
        )
        mask &= self.intrinsics.is_in_image(np.nan_to_num(img_points, nan=-1.0), self.image_margin)

        return img_points, mask

    def field_to_img(self, point: np.ndarray) -> Tuple[bool, np.ndarray]:
        """Single point version of project_field_points()."""
        img_points, mask = self.project_field_points(np.asarray(point, dtype=np.float64).reshape(1, 3))
        return bool(mask[0]), img_points[0]

    def is_visible(self, point: np.ndarray) -> bool:
        """True if the field point is a valid correction candidate for this camera."""
        return self.field_to_img(point)[0]
