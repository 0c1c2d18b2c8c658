"""
Camera Intrinsic Parameters Module.

This module handles camera intrinsic parameters which describe the internal
characteristics of a camera: focal lengths, principal point, image size and
lens distortion.

Mathematical Background:
========================

The camera intrinsic matrix K (also called the calibration matrix) transforms
normalized camera coordinates to pixel coordinates:

    K = | fx   0  cx |
        |  0  fy  cy |
        |  0   0   1 |

Distortion Model:
=================
Coefficients follow the OpenCV radial + tangential convention:

    (k1, k2, p1, p2[, k3[, k4, k5, k6]])

Applied to normalized coordinates (x', y') with r² = x'² + y'²:

    radial = (1 + k1 r² + k2 r⁴ + k3 r⁶) / (1 + k4 r² + k5 r⁴ + k6 r⁶)
    x'' = x' radial + 2 p1 x' y' + p2 (r² + 2 x'²)
    y'' = y' radial + p1 (r² + 2 y'²) + 2 p2 x' y'

Vectors of 4, 5 or 8 coefficients are recognized. Shorter vectors are padded
with zeros up to the next recognized length, an empty vector means no
distortion at all.
"""

from dataclasses import dataclass, field
from typing import Sequence, Tuple

import numpy as np

# Coefficient counts understood by the distortion model
DISTORTION_SIZES = (4, 5, 8)


def normalize_distortion(coefficients: Sequence[float]) -> np.ndarray:
    """
    Pad a distortion vector to a length accepted by the distortion model.

    Args:
        coefficients: Raw distortion coefficients (any length up to 8).

    Returns:
        np.ndarray: Float64 vector of length 4, 5 or 8. Empty input gives
                    5 zeros.

    Raises:
        ValueError: If more than 8 coefficients are provided.
    """
    coefficients = np.asarray(coefficients, dtype=np.float64).flatten()
    n = len(coefficients)

    if n > DISTORTION_SIZES[-1]:
        raise ValueError(
            f"distortion: expected at most {DISTORTION_SIZES[-1]} coefficients, got {n}"
        )
    if n == 0:
        return np.zeros(5, dtype=np.float64)

    target = next(size for size in DISTORTION_SIZES if size >= n)
    padded = np.zeros(target, dtype=np.float64)
    padded[:n] = coefficients
    return padded


@dataclass(frozen=True)
class IntrinsicParameters:
    """
    Camera intrinsic parameters.

    Attributes:
        fx: Focal length in x direction (pixels).
        fy: Focal length in y direction (pixels).
        cx: Principal point x coordinate (pixels).
        cy: Principal point y coordinate (pixels).
        width: Image width in pixels.
        height: Image height in pixels.
        distortion: Distortion coefficients (k1, k2, p1, p2, ...), may be empty.

    Example:
        >>> intrinsics = IntrinsicParameters(fx=600.0, fy=600.0, cx=320.0, cy=240.0,
        ...                                  width=640, height=480)
        >>> K, dist, img_size = intrinsics.to_cv()
    """

    fx: float
    fy: float
    cx: float
    cy: float
    width: int
    height: int
    distortion: Tuple[float, ...] = field(default_factory=tuple)

    def __post_init__(self):
        """Validate image size and freeze the distortion vector."""
        if self.width <= 0 or self.height <= 0:
            raise ValueError(
                f"Image size must be strictly positive, got {self.width}x{self.height}"
            )
        object.__setattr__(
            self, "distortion", tuple(float(d) for d in np.asarray(self.distortion).flatten())
        )
        if len(self.distortion) > DISTORTION_SIZES[-1]:
            raise ValueError(
                f"distortion: expected at most {DISTORTION_SIZES[-1]} coefficients, "
                f"got {len(self.distortion)}"
            )

    @property
    def K(self) -> np.ndarray:
        """Alias for get_K_matrix()."""
        return self.get_K_matrix()

    def get_K_matrix(self) -> np.ndarray:
        """
        Get the 3x3 camera intrinsic (calibration) matrix.

        Returns:
            np.ndarray: 3x3 intrinsic matrix K with dtype float64.
        """
        return np.array([
            [self.fx, 0, self.cx],
            [0, self.fy, self.cy],
            [0, 0, 1]
        ], dtype=np.float64)

    def get_distortion_coefficients(self) -> np.ndarray:
        """Distortion vector padded to a length the distortion model accepts."""
        return normalize_distortion(self.distortion)

    @property
    def has_distortion(self) -> bool:
        """True if any distortion coefficient is non-zero."""
        return bool(np.any(np.asarray(self.distortion) != 0))

    def get_img_size(self) -> Tuple[int, int]:
        """Return the image size as (width, height)."""
        return int(self.width), int(self.height)

    def get_fov(self) -> Tuple[float, float]:
        """
        Calculate the camera field of view.

        Horizontal FOV:
            θ_h = 2 * arctan(width / (2 * fx))

        Vertical FOV:
            θ_v = 2 * arctan(height / (2 * fy))

        Returns:
            Tuple[float, float]: (horizontal_fov, vertical_fov) in radians.
        """
        horizontal_fov = 2 * np.arctan(self.width / (2 * self.fx))
        vertical_fov = 2 * np.arctan(self.height / (2 * self.fy))
        return horizontal_fov, vertical_fov

    def is_in_image(
        self,
        points_2d: np.ndarray,
        margin: int = 0,
    ) -> np.ndarray:
        """
        Check if 2D points are within image bounds.

        Bounds are half-open: 0 <= u < width and 0 <= v < height.

        Args:
            points_2d: 2D points (N, 2) or (2,) in pixel coordinates.
            margin: Additional margin from image border (pixels).

        Returns:
            np.ndarray: Boolean mask (N,) indicating valid points.
        """
        points_2d = np.atleast_2d(points_2d)

        valid = (
            (points_2d[:, 0] >= margin) &
            (points_2d[:, 0] < self.width - margin) &
            (points_2d[:, 1] >= margin) &
            (points_2d[:, 1] < self.height - margin)
        )

        return valid

    def to_cv(self) -> Tuple[np.ndarray, np.ndarray, Tuple[int, int]]:
        """
        Export to the OpenCV representation.

        Returns:
            Tuple of:
                - camera_matrix: 3x3 float64 matrix K
                - distortion_coefficients: float64 vector, as stored
                - img_size: (width, height)
        """
        return (
            self.get_K_matrix(),
            np.array(self.distortion, dtype=np.float64),
            self.get_img_size(),
        )

    @classmethod
    def from_cv(
        cls,
        camera_matrix: np.ndarray,
        distortion_coefficients: np.ndarray,
        img_size: Tuple[int, int],
    ) -> "IntrinsicParameters":
        """
        Build intrinsics from the OpenCV representation.

        Args:
            camera_matrix: 3x3 intrinsic matrix.
            distortion_coefficients: Distortion vector of any shape (flattened).
            img_size: (width, height).

        Returns:
            IntrinsicParameters: Instance with extracted parameters.
        """
        camera_matrix = np.asarray(camera_matrix, dtype=np.float64)
        if camera_matrix.shape != (3, 3):
            raise ValueError(f"camera_matrix must be 3x3, got {camera_matrix.shape}")

        distortion = (
            np.asarray(distortion_coefficients, dtype=np.float64).flatten()
            if distortion_coefficients is not None else ()
        )
        width, height = img_size

        return cls(
            fx=float(camera_matrix[0, 0]),
            fy=float(camera_matrix[1, 1]),
            cx=float(camera_matrix[0, 2]),
            cy=float(camera_matrix[1, 2]),
            width=int(width),
            height=int(height),
            distortion=tuple(distortion),
        )

    def __repr__(self) -> str:
        """String representation."""
        return (
            f"IntrinsicParameters(fx={self.fx:.2f}, fy={self.fy:.2f}, "
            f"cx={self.cx:.2f}, cy={self.cy:.2f}, "
            f"width={self.width}, height={self.height}, "
            f"distortion={list(self.distortion)})"
        )


def intrinsic_to_cv(
    camera_parameters: IntrinsicParameters,
) -> Tuple[np.ndarray, np.ndarray, Tuple[int, int]]:
    """Return (camera_matrix, distortion_coefficients, img_size) for the given intrinsics."""
    return camera_parameters.to_cv()


def cv_to_intrinsic(
    camera_matrix: np.ndarray,
    distortion_coefficients: np.ndarray,
    img_size: Tuple[int, int],
) -> IntrinsicParameters:
    """Inverse of intrinsic_to_cv()."""
    return IntrinsicParameters.from_cv(camera_matrix, distortion_coefficients, img_size)
