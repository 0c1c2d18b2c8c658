"""
Tests for field to image projection.

Test Coverage:
- Projection of a point on the optical axis lands on the principal point
- Points behind the camera are rejected, never mirrored
- Image bounds and depth threshold
- Distortion
- Batch projection and config-driven projector
"""

import numpy as np
import pytest

# Camera at field position (-5, 0, 1) looking along the field x-axis:
# camera z = field x, camera x = -field y, camera y = -field z
FIELD_TO_CAMERA_R = np.array([
    [0.0, -1.0, 0.0],
    [0.0, 0.0, -1.0],
    [1.0, 0.0, 0.0],
])
CAMERA_CENTER = np.array([-5.0, 0.0, 1.0])


@pytest.fixture
def simple_intrinsics():
    from camsync.calibration import IntrinsicParameters

    return IntrinsicParameters(fx=100.0, fy=100.0, cx=50.0, cy=50.0, width=100, height=100)


@pytest.fixture
def identity_camera(simple_intrinsics):
    """Camera whose frame coincides with the field frame."""
    from camsync.calibration import CameraMetaInformation, Pose3D

    return CameraMetaInformation(
        camera_parameters=simple_intrinsics,
        pose=Pose3D(rotation=(0.0, 0.0, 0.0), translation=(0.0, 0.0, 0.0)),
    )


@pytest.fixture
def field_camera(simple_intrinsics):
    """Camera placed on the field, looking toward the opposite goal."""
    from camsync.calibration import CameraMetaInformation, Pose3D

    t = -FIELD_TO_CAMERA_R @ CAMERA_CENTER
    return CameraMetaInformation(
        camera_parameters=simple_intrinsics,
        pose=Pose3D.from_cv(FIELD_TO_CAMERA_R, t),
    )


# =============================================================================
# Test field_to_camera
# =============================================================================

class TestFieldToCamera:

    def test_camera_center_maps_to_origin(self, field_camera):
        from camsync.calibration import field_to_camera

        rvec, tvec = field_camera.pose.to_cv()

        assert np.allclose(field_to_camera(CAMERA_CENTER, rvec, tvec), 0.0, atol=1e-10)

    def test_point_along_optical_axis(self, field_camera):
        from camsync.calibration import field_to_camera

        rvec, tvec = field_camera.pose.to_cv()
        point = CAMERA_CENTER + np.array([3.0, 0.0, 0.0])

        assert np.allclose(field_to_camera(point, rvec, tvec), [0.0, 0.0, 3.0], atol=1e-10)

    def test_batch_shape(self, field_camera):
        from camsync.calibration import field_to_camera

        rvec, tvec = field_camera.pose.to_cv()
        points = np.zeros((5, 3))

        assert field_to_camera(points, rvec, tvec).shape == (5, 3)


# =============================================================================
# Test field_to_img
# =============================================================================

class TestFieldToImg:

    @pytest.mark.parametrize("distance", [0.5, 3.0, 50.0])
    def test_optical_axis_projects_to_principal_point(self, field_camera, distance):
        from camsync.calibration import field_to_img, is_point_valid_for_correction

        point = CAMERA_CENTER + np.array([distance, 0.0, 0.0])

        valid, img_pos = field_to_img(point, field_camera)

        assert valid
        assert np.allclose(img_pos, [50.0, 50.0], atol=1e-6)

        rvec, tvec = field_camera.pose.to_cv()
        K, dist, img_size = field_camera.camera_parameters.to_cv()
        assert is_point_valid_for_correction(point, rvec, tvec, K, dist, img_size)

    def test_behind_camera_is_invalid(self, field_camera):
        from camsync.calibration import field_to_img

        point = CAMERA_CENTER - np.array([3.0, 0.0, 0.0])

        valid, img_pos = field_to_img(point, field_camera)

        assert not valid
        assert np.all(np.isnan(img_pos))

    def test_mirrored_projection_is_not_returned(self, identity_camera):
        """(1, 1, -10) would mirror to pixel (40, 40), inside the image."""
        from camsync.calibration import field_to_img

        valid, img_pos = field_to_img(np.array([1.0, 1.0, -10.0]), identity_camera)

        assert not valid
        assert not np.allclose(np.nan_to_num(img_pos), [40.0, 40.0])

    def test_point_in_camera_plane_is_invalid(self, identity_camera):
        from camsync.calibration import field_to_img

        valid, _ = field_to_img(np.array([1.0, 0.0, 0.0]), identity_camera)

        assert not valid

    def test_outside_image_is_invalid(self, identity_camera):
        """(10, 0, 10) projects to u = 150, outside a 100 pixels wide image."""
        from camsync.calibration import field_to_img

        valid, img_pos = field_to_img(np.array([10.0, 0.0, 10.0]), identity_camera)

        assert not valid
        assert np.allclose(img_pos, [150.0, 50.0])

    def test_offset_point(self, identity_camera):
        from camsync.calibration import field_to_img

        valid, img_pos = field_to_img(np.array([1.0, 2.0, 10.0]), identity_camera)

        assert valid
        assert np.allclose(img_pos, [60.0, 70.0])

    def test_margin(self, identity_camera):
        from camsync.calibration import field_to_img

        point = np.array([4.5, 0.0, 10.0])  # u = 95

        assert field_to_img(point, identity_camera)[0]
        assert not field_to_img(point, identity_camera, margin=10)[0]

    def test_get_img_size(self, identity_camera):
        from camsync.calibration import get_img_size

        assert get_img_size(identity_camera) == (100, 100)


# =============================================================================
# Test Distortion
# =============================================================================

class TestDistortion:

    def test_radial_distortion(self):
        """x' = 0.1, r² = 0.01, k1 = 0.1: u = 100 * 0.1 * 1.001 + 50."""
        from camsync.calibration import project_camera_points

        K = np.array([[100.0, 0, 50.0], [0, 100.0, 50.0], [0, 0, 1]])

        img_points, valid = project_camera_points(
            np.array([[1.0, 0.0, 10.0]]), K, np.array([0.1, 0.0, 0.0, 0.0])
        )

        assert valid[0]
        assert np.allclose(img_points[0], [60.01, 50.0], atol=1e-6)

    def test_principal_point_not_distorted(self):
        from camsync.calibration import project_camera_points

        K = np.array([[100.0, 0, 50.0], [0, 100.0, 50.0], [0, 0, 1]])

        img_points, _ = project_camera_points(
            np.array([0.0, 0.0, 10.0]), K, np.array([0.3, -0.1, 0.01, 0.02, 0.05])
        )

        assert np.allclose(img_points[0], [50.0, 50.0])

    def test_empty_input(self):
        from camsync.calibration import project_camera_points

        img_points, valid = project_camera_points(np.zeros((0, 3)), np.eye(3))

        assert img_points.shape == (0, 2)
        assert valid.shape == (0,)


# =============================================================================
# Test is_point_valid_for_correction
# =============================================================================

class TestCorrectionValidity:

    def test_image_size_inferred_from_principal_point(self):
        from camsync.calibration import is_point_valid_for_correction

        K = np.array([[100.0, 0, 50.0], [0, 100.0, 50.0], [0, 0, 1]])
        rvec = np.zeros(3)
        tvec = np.zeros(3)

        assert is_point_valid_for_correction(np.array([0.0, 0.0, 10.0]), rvec, tvec, K)
        assert not is_point_valid_for_correction(np.array([10.0, 0.0, 10.0]), rvec, tvec, K)

    def test_behind_camera(self):
        from camsync.calibration import is_point_valid_for_correction

        K = np.array([[100.0, 0, 50.0], [0, 100.0, 50.0], [0, 0, 1]])

        assert not is_point_valid_for_correction(
            np.array([0.0, 0.0, -10.0]), np.zeros(3), np.zeros(3), K, None, (100, 100)
        )


# =============================================================================
# Test Projector
# =============================================================================

class TestProjector:

    def test_batch_projection(self, field_camera):
        from camsync.calibration import Projector

        projector = Projector(field_camera)
        points = np.array([
            CAMERA_CENTER + [3.0, 0.0, 0.0],    # on axis
            CAMERA_CENTER - [3.0, 0.0, 0.0],    # behind
            CAMERA_CENTER + [1.0, -5.0, 0.0],   # far to the right
            CAMERA_CENTER + [10.0, 0.0, -1.0],  # ground point ahead
        ])

        img_points, mask = projector.project_field_points(points)

        assert img_points.shape == (4, 2)
        assert mask.tolist() == [True, False, False, True]
        assert np.allclose(img_points[0], [50.0, 50.0])
        assert np.allclose(img_points[3], [50.0, 60.0])

    def test_camera_position(self, field_camera):
        from camsync.calibration import Projector

        assert np.allclose(Projector(field_camera).camera_position, CAMERA_CENTER, atol=1e-10)

    def test_single_point_matches_function(self, field_camera):
        from camsync.calibration import Projector, field_to_img

        point = CAMERA_CENTER + np.array([4.0, 0.5, 0.2])
        projector = Projector(field_camera)

        valid, img_pos = projector.field_to_img(point)
        expected_valid, expected_pos = field_to_img(point, field_camera)

        assert valid == expected_valid
        assert np.allclose(img_pos, expected_pos)

    def test_from_config_min_depth(self, field_camera):
        from camsync.calibration import Projector

        config = {"projection": {"min_depth": 5.0, "image_margin": 0}}
        projector = Projector.from_config(field_camera, config)

        assert not projector.is_visible(CAMERA_CENTER + np.array([3.0, 0.0, 0.0]))
        assert projector.is_visible(CAMERA_CENTER + np.array([6.0, 0.0, 0.0]))
