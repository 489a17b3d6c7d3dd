import numpy as np
import pytest

from exifcrop.models.matrix import Matrix
from exifcrop.models.rect import Rect
from exifcrop.models.rotated_image import RotatedImage


class TestRect:
    def test_dimensions(self):
        rect = Rect(10, 20, 110, 70)
        assert rect.width == 100
        assert rect.height == 50
        assert not rect.is_empty

    def test_empty(self):
        assert Rect(5, 5, 5, 10).is_empty
        assert Rect(5, 5, 4, 10).is_empty

    def test_is_within(self):
        assert Rect(0, 0, 100, 80).is_within(100, 80)
        assert not Rect(0, 0, 101, 80).is_within(100, 80)
        assert not Rect(-1, 0, 10, 10).is_within(100, 80)

    def test_scaled_truncates(self):
        assert Rect(3, 5, 11, 13).scaled(0.5) == Rect(1, 2, 5, 6)

    def test_as_box(self):
        assert Rect(5, -2, 15, 8).as_box() == (5, -2, 15, 8)


class TestMatrix:
    """Affine transform helpers."""

    def test_quarter_turns_are_exact(self):
        for degrees in (90, 180, 270, -90, -180, -270):
            values = Matrix().set_rotate(degrees).values
            assert set(np.unique(values[:2, :2])) <= {-1.0, 0.0, 1.0}

    def test_rotate_90_is_clockwise_on_screen(self):
        mapped = Matrix().set_rotate(90).map_points(np.array([[1.0, 0.0]]))
        assert mapped.tolist() == [[0.0, 1.0]]

    def test_post_applies_after_pre_applies_before(self):
        point = np.array([[1.0, 0.0]])
        post = Matrix().set_rotate(90).post_translate(10, 0).map_points(point)
        pre = Matrix().set_rotate(90).pre_translate(10, 0).map_points(point)
        assert post.tolist() == [[10.0, 1.0]]
        assert pre.tolist() == [[0.0, 11.0]]

    def test_rect_to_rect_fill(self):
        matrix = Matrix().set_rect_to_rect(Rect(10, 20, 110, 70), Rect(0, 0, 50, 100))
        assert matrix.map_rect(Rect(10, 20, 110, 70)) == pytest.approx((0, 0, 50, 100))

    def test_rect_to_rect_from_empty_is_degenerate(self):
        matrix = Matrix().set_rect_to_rect(Rect(0, 0, 0, 10), Rect(0, 0, 10, 10))
        assert not matrix.values.any()

    def test_map_rect_returns_bounding_box(self):
        bounds = Matrix().set_rotate(90).map_rect(Rect(0, 0, 40, 20))
        assert bounds == pytest.approx((-20, 0, 0, 40))

    def test_pixel_affine_of_identity(self):
        assert np.array_equal(Matrix().to_pixel_affine(), np.array([[1.0, 0, 0], [0, 1.0, 0]]))

    def test_pixel_affine_of_flip(self):
        """Mirroring 10 pixels maps pixel 0 onto pixel 9."""
        matrix = Matrix().post_scale(-1, 1).post_translate(10, 0)
        mapped = matrix.to_pixel_affine() @ np.array([0.0, 0.0, 1.0])
        assert mapped.tolist() == [9.0, 0.0]


class TestRotatedImage:
    def test_dimensions_swap_on_quarter_turn(self):
        rotated = RotatedImage(np.zeros((20, 40, 3), dtype=np.uint8), 90)
        assert (rotated.raw_width, rotated.raw_height) == (40, 20)
        assert (rotated.width, rotated.height) == (20, 40)
        assert rotated.is_orientation_changed

    def test_dimensions_kept_on_half_turn(self):
        rotated = RotatedImage(np.zeros((20, 40, 3), dtype=np.uint8), 180)
        assert (rotated.width, rotated.height) == (40, 20)
        assert not rotated.is_orientation_changed

    def test_no_rotation_is_identity(self):
        assert RotatedImage(np.zeros((3, 5, 3), dtype=np.uint8)).rotate_matrix().is_identity()

    @pytest.mark.parametrize("rotation", [90, 180, 270])
    def test_rotate_matrix_lands_on_display_bounds(self, rotation):
        rotated = RotatedImage(np.zeros((5, 3, 3), dtype=np.uint8), rotation)
        bounds = rotated.rotate_matrix().map_rect(Rect(0, 0, rotated.raw_width, rotated.raw_height))
        assert bounds == pytest.approx((0, 0, rotated.width, rotated.height))
