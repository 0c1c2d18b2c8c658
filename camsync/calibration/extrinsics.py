"""
Camera Extrinsic Pose Module.

This module handles the rigid transformation from the field referential to
a camera referential.

Mathematical Background:
========================

Rigid Body Transformation:
--------------------------
A rigid body transformation consists of a rotation R (3x3 orthonormal matrix)
and translation t (3x1 vector). For a point P in the field frame, its
coordinates in the camera frame are:

    P_cam = R * P_field + t

This can be written as a 4x4 homogeneous (affine) transformation matrix:

    T = | R   t |
        | 0   1 |

Inverse Transformation:
-----------------------
    T^(-1) = | R^T  -R^T * t |
             |  0       1    |

Rotation Encodings:
===================
A Pose3D stores its rotation either as:
    - 3 values: Rodrigues rotation vector (axis * angle, radians)
    - 4 values: quaternion (qw, qx, qy, qz)
An empty rotation is the identity, an empty translation is zero.

Referentials:
=============
Field: origin at field center on the ground, X toward the opposite goal,
       Y toward the left side, Z toward the roof.
Camera: origin at the optical center, X along image columns, Y along image
        rows, Z along the viewing direction.
"""

from dataclasses import dataclass, field
from typing import Optional, Tuple

import cv2
import numpy as np
from scipy.spatial.transform import Rotation

# Tolerance used when checking that rotations are orthonormal / unit norm
ROTATION_TOLERANCE = 1e-3


def _check_rotation_matrix(R: np.ndarray) -> np.ndarray:
    """Return R as float64 after checking it is a proper rotation."""
    R = np.asarray(R, dtype=np.float64)
    if R.shape != (3, 3):
        raise ValueError(f"R must be 3x3, got {R.shape}")
    if not np.allclose(R.T @ R, np.eye(3), atol=ROTATION_TOLERANCE):
        raise ValueError("R is not orthonormal (scaling or shearing is not representable)")
    if not np.isclose(np.linalg.det(R), 1.0, atol=ROTATION_TOLERANCE):
        raise ValueError(f"R must have determinant +1, got {np.linalg.det(R):.6f}")
    return R


@dataclass(frozen=True)
class Pose3D:
    """
    Rigid transform from the field referential to a camera referential.

    Attributes:
        rotation: Rotation vector (3 values) or quaternion qw, qx, qy, qz (4 values).
        translation: Position of the field center in the camera referential (3 values).

    Example:
        >>> pose = Pose3D(rotation=(0.0, 0.0, 0.0), translation=(0.0, 0.0, 5.0))
        >>> rvec, tvec = pose.to_cv()
    """

    rotation: Tuple[float, ...] = field(default_factory=tuple)
    translation: Tuple[float, ...] = field(default_factory=tuple)

    def __post_init__(self):
        """Validate sizes and the rotation encoding."""
        rotation = tuple(float(v) for v in np.asarray(self.rotation).flatten())
        translation = tuple(float(v) for v in np.asarray(self.translation).flatten())

        if len(rotation) not in (0, 3, 4):
            raise ValueError(
                f"rotation: expected 3 (rotation vector) or 4 (quaternion) values, "
                f"got {len(rotation)}"
            )
        if len(translation) not in (0, 3):
            raise ValueError(f"translation: expected 3 values, got {len(translation)}")
        if len(rotation) == 4:
            norm = np.linalg.norm(rotation)
            if not np.isclose(norm, 1.0, atol=ROTATION_TOLERANCE):
                raise ValueError(f"rotation: quaternion must have unit norm, got {norm:.6f}")

        object.__setattr__(self, "rotation", rotation)
        object.__setattr__(self, "translation", translation)

    @property
    def is_quaternion(self) -> bool:
        """True if the rotation is stored as a quaternion."""
        return len(self.rotation) == 4

    def get_rotation_vector(self) -> np.ndarray:
        """
        Get the rotation as a Rodrigues vector (3,).

        Quaternions (qw, qx, qy, qz) are converted through scipy, which
        expects scalar-last ordering.
        """
        if len(self.rotation) == 0:
            return np.zeros(3, dtype=np.float64)
        if self.is_quaternion:
            qw, qx, qy, qz = self.rotation
            return Rotation.from_quat([qx, qy, qz, qw]).as_rotvec()
        return np.array(self.rotation, dtype=np.float64)

    def get_rotation_matrix(self) -> np.ndarray:
        """Get the 3x3 rotation matrix R (field to camera)."""
        R, _ = cv2.Rodrigues(self.get_rotation_vector().reshape(3, 1))
        return R

    def get_translation_vector(self) -> np.ndarray:
        """Get the translation t (3,)."""
        if len(self.translation) == 0:
            return np.zeros(3, dtype=np.float64)
        return np.array(self.translation, dtype=np.float64)

    def to_cv(self) -> Tuple[np.ndarray, np.ndarray]:
        """
        Export to the OpenCV (rvec, tvec) pair.

        Returns:
            Tuple[np.ndarray, np.ndarray]: rvec (3, 1) and tvec (3, 1), float64.
        """
        return (
            self.get_rotation_vector().reshape(3, 1),
            self.get_translation_vector().reshape(3, 1),
        )

    @classmethod
    def from_cv(cls, rvec: np.ndarray, tvec: np.ndarray) -> "Pose3D":
        """
        Build a pose from an OpenCV (rvec, tvec) pair.

        Args:
            rvec: Rotation vector (3,) / (3, 1), or a 3x3 rotation matrix.
            tvec: Translation vector (3,) / (3, 1).

        Returns:
            Pose3D: Pose with the rotation stored as a rotation vector.
        """
        rvec = np.asarray(rvec, dtype=np.float64)
        if rvec.shape == (3, 3):
            rvec, _ = cv2.Rodrigues(_check_rotation_matrix(rvec))
        rvec = rvec.flatten()
        tvec = np.asarray(tvec, dtype=np.float64).flatten()

        if rvec.shape != (3,):
            raise ValueError(f"rvec must have 3 values, got {rvec.shape}")
        if tvec.shape != (3,):
            raise ValueError(f"tvec must have 3 values, got {tvec.shape}")

        return cls(rotation=tuple(rvec), translation=tuple(tvec))

    def get_transform_matrix(self) -> np.ndarray:
        """
        Get the 4x4 homogeneous transformation matrix.

            T = | R  t |
                | 0  1 |

        Returns:
            np.ndarray: 4x4 affine transform from field to camera.
        """
        T = np.eye(4, dtype=np.float64)
        T[:3, :3] = self.get_rotation_matrix()
        T[:3, 3] = self.get_translation_vector()
        return T

    @classmethod
    def from_matrix(cls, T: np.ndarray) -> "Pose3D":
        """
        Create from a 4x4 or 3x4 transformation matrix.

        Args:
            T: 4x4 homogeneous or 3x4 transformation matrix.

        Returns:
            Pose3D: Pose with the rotation stored as a rotation vector.

        Raises:
            ValueError: If the shape is wrong or the rotation block is not a
                        proper rotation.
        """
        T = np.asarray(T, dtype=np.float64)
        if T.shape == (4, 4):
            if not np.allclose(T[3], [0, 0, 0, 1]):
                raise ValueError(f"Last row of an affine transform must be [0, 0, 0, 1], got {T[3]}")
        elif T.shape != (3, 4):
            raise ValueError(f"Expected 4x4 or 3x4 matrix, got {T.shape}")

        return cls.from_cv(T[:3, :3], T[:3, 3])

    def transform_points(self, points: np.ndarray) -> np.ndarray:
        """
        Transform 3D points from the field frame to the camera frame.

        Args:
            points: 3D points (N, 3) or (3,) in field frame.

        Returns:
            np.ndarray: Transformed points, same shape as the input.
        """
        points = np.asarray(points, dtype=np.float64)
        single = points.ndim == 1
        transformed = np.atleast_2d(points) @ self.get_rotation_matrix().T + self.get_translation_vector()
        return transformed[0] if single else transformed

    def inverse(self) -> "Pose3D":
        """
        Get the inverse transformation (camera to field).

            R_inv = R^T, t_inv = -R^T @ t

        The camera optical center in field coordinates is inverse().translation.
        """
        R_inv = self.get_rotation_matrix().T
        t_inv = -R_inv @ self.get_translation_vector()
        return Pose3D.from_cv(R_inv, t_inv)

    def compose(self, other: "Pose3D") -> "Pose3D":
        """
        Chain transformations: apply this pose first, then other.

        Args:
            other: The transformation to apply after this one.

        Returns:
            Pose3D: Combined transformation (other ∘ self).
        """
        return Pose3D.from_matrix(other.get_transform_matrix() @ self.get_transform_matrix())

    def __str__(self) -> str:
        kind = "quaternion" if self.is_quaternion else "rvec"
        rotation = ", ".join(f"{v:.4f}" for v in self.rotation)
        translation = ", ".join(f"{v:.4f}" for v in self.get_translation_vector())
        return f"rotation ({kind}): [{rotation}] translation: [{translation}]"


def pose3d_to_cv(pose: Pose3D) -> Tuple[np.ndarray, np.ndarray]:
    """Return the (rvec, tvec) pair of a pose."""
    return pose.to_cv()


def cv_to_pose3d(rvec: np.ndarray, tvec: np.ndarray) -> Pose3D:
    """Inverse of pose3d_to_cv()."""
    return Pose3D.from_cv(rvec, tvec)


def get_affine_from_pose(pose: Pose3D) -> np.ndarray:
    """Convert a Pose3D to its 4x4 affine transform."""
    return pose.get_transform_matrix()


def set_pose_from_affine(affine: np.ndarray, pose: Optional[Pose3D] = None) -> Pose3D:
    """
    Export a 4x4 affine transform to a pose.

    Args:
        affine: 4x4 affine transform.
        pose: Optional previous pose; when it stores a quaternion, the
              result keeps the quaternion encoding.

    Returns:
        Pose3D: New pose for the transform.
    """
    result = Pose3D.from_matrix(affine)
    if pose is not None and pose.is_quaternion:
        qx, qy, qz, qw = Rotation.from_rotvec(result.get_rotation_vector()).as_quat()
        result = Pose3D(rotation=(qw, qx, qy, qz), translation=result.translation)
    return result
