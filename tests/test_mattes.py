import itertools
import unittest

import numpy as np

from chromakey.algorithms import ConnectedMatte, GlobalMatte
from chromakey.algorithms.connected import AXIS_NEIGHBORS, clear_border_connected, flood_clear
from chromakey.algorithms.feathered import feather_alpha
from chromakey.color import ColorKey

GREEN = (0, 255, 0)
RED = (255, 0, 0)
GREEN_KEY = ColorKey("#00FF00")


def solid(h, w, color):
    img = np.zeros((h, w, 4), dtype=np.uint8)
    img[..., :3] = color
    img[..., 3] = 255
    return img


class TestFeatherAlpha(unittest.TestCase):
    def test_three_zones(self):
        similarity = np.array([0.9, 0.5, 0.35, 0.3, 0.1])
        alpha = feather_alpha(similarity, edge_start=0.5, edge_end=0.3)
        np.testing.assert_array_equal(alpha, [0, 0, 191, 255, 255])

    def test_alpha_is_monotonic_in_similarity(self):
        similarity = np.linspace(0.0, 1.0, 501)
        for edge_start, edge_end in [(0.8, 0.5), (0.4, 0.0), (0.6, 0.6), (1.0, 0.2)]:
            with self.subTest(edge_start=edge_start, edge_end=edge_end):
                alpha = feather_alpha(similarity, edge_start, edge_end).astype(int)
                self.assertTrue(np.all(np.diff(alpha) <= 0))

    def test_zero_width_band_is_a_hard_cut(self):
        alpha = feather_alpha(np.array([0.49, 0.5, 0.51]), 0.5, 0.5)
        np.testing.assert_array_equal(alpha, [255, 0, 0])


class TestGlobalMatte(unittest.TestCase):
    def test_reference_green_is_transparent_for_any_tolerance(self):
        for tolerance in (0, 1, 50, 99.5, 100):
            with self.subTest(tolerance=tolerance):
                img = solid(3, 3, GREEN)
                GlobalMatte(GREEN_KEY, tolerance, smoothness=20)(img)
                self.assertTrue(np.all(img[..., 3] == 0))

    def test_rgb_key_keeps_distant_colors(self):
        img = solid(2, 2, RED)
        img[1, 1, :3] = (0, 0, 255)
        GlobalMatte(ColorKey("#FF0000"), 90, smoothness=0)(img)
        np.testing.assert_array_equal(img[..., 3], [[0, 0], [0, 255]])

    def test_color_channels_untouched(self):
        img = solid(4, 4, (10, 200, 30))
        before = img[..., :3].copy()
        GlobalMatte(GREEN_KEY, 50, smoothness=30)(img)
        np.testing.assert_array_equal(img[..., :3], before)

    def test_feather_band_clips_at_zero(self):
        matte = GlobalMatte(GREEN_KEY, 20, smoothness=80)
        self.assertEqual(matte.edges, (0.2, 0.0))

    def test_rejects_non_rgba(self):
        with self.assertRaises(ValueError):
            GlobalMatte(GREEN_KEY, 50)(np.zeros((2, 2, 3), dtype=np.uint8))


class TestConnectedMatte(unittest.TestCase):
    def test_uniform_green_is_cleared(self):
        img = solid(4, 4, GREEN)
        ConnectedMatte(GREEN_KEY, 50)(img)
        self.assertTrue(np.all(img[..., 3] == 0))

    def test_enclosed_patch_survives_in_small_image(self):
        img = solid(4, 4, RED)
        img[1:3, 1:3, :3] = GREEN
        ConnectedMatte(GREEN_KEY, 50)(img)
        self.assertTrue(np.all(img[..., 3] == 255))

    def test_enclosed_patch_survives_border_region_cleared(self):
        img = solid(10, 10, RED)
        img[4:6, 4:6, :3] = GREEN
        img[:, 0, :3] = GREEN
        ConnectedMatte(GREEN_KEY, 50)(img)

        self.assertTrue(np.all(img[:, 0, 3] == 0))
        self.assertTrue(np.all(img[4:6, 4:6, 3] == 255))
        self.assertTrue(np.all(img[:, 1:, 3][~np.isin(np.arange(10), [4, 5])] == 255))

    def test_no_diagonal_connectivity(self):
        img = solid(5, 5, RED)
        img[0, 0, :3] = GREEN
        img[1, 1, :3] = GREEN
        ConnectedMatte(GREEN_KEY, 50)(img)
        self.assertEqual(img[0, 0, 3], 0)
        self.assertEqual(img[1, 1, 3], 255)

    def test_rgb_key_uses_distance_threshold(self):
        img = solid(3, 5, (0, 0, 230))
        img[:, 2, :3] = (255, 255, 255)
        ConnectedMatte(ColorKey("#0000FF"), 10)(img)
        np.testing.assert_array_equal(img[:, 2, 3], [255, 255, 255])
        self.assertTrue(np.all(img[:, [0, 1, 3, 4], 3] == 0))

    def test_result_independent_of_push_order(self):
        rng = np.random.default_rng(7)
        img = solid(12, 15, RED)
        img[rng.random((12, 15)) < 0.55, :3] = GREEN

        keyed = img.copy()
        ConnectedMatte(GREEN_KEY, 50)(keyed)
        background = ConnectedMatte(GREEN_KEY, 50).background_mask(img)

        for order in itertools.permutations(AXIS_NEIGHBORS):
            with self.subTest(order=order):
                alpha = np.full((12, 15), 255, dtype=np.uint8)
                flood_clear(alpha, background, order)
                np.testing.assert_array_equal(alpha, keyed[..., 3])

    def test_labeling_matches_stack_fill_on_large_image(self):
        rng = np.random.default_rng(11)
        background = rng.random((300, 400)) < 0.6
        background[0, :] = True

        labeled = np.full(background.shape, 255, dtype=np.uint8)
        stacked = labeled.copy()
        cleared = clear_border_connected(labeled, background)

        self.assertEqual(cleared, flood_clear(stacked, background))
        np.testing.assert_array_equal(labeled, stacked)

    def test_no_corner_background_clears_nothing(self):
        alpha = np.full((4, 4), 255, dtype=np.uint8)
        background = np.zeros((4, 4), dtype=bool)
        background[1:3, 1:3] = True
        self.assertEqual(clear_border_connected(alpha, background), 0)
        self.assertTrue(np.all(alpha == 255))

    def test_large_uniform_image_is_cleared(self):
        img = solid(1000, 1000, GREEN)
        ConnectedMatte(GREEN_KEY, 50)(img)
        self.assertFalse(img[..., 3].any())

    def test_flood_clear_reports_cleared_count(self):
        alpha = np.full((3, 3), 255, dtype=np.uint8)
        background = np.array(
            [[True, True, False], [False, True, False], [False, False, False]]
        )
        self.assertEqual(flood_clear(alpha, background), 3)
        np.testing.assert_array_equal(alpha[1], [255, 0, 255])

    def test_single_row_image(self):
        img = solid(1, 6, GREEN)
        img[0, 3, :3] = RED
        ConnectedMatte(GREEN_KEY, 50)(img)
        np.testing.assert_array_equal(img[0, :, 3], [0, 0, 0, 255, 0, 0])


if __name__ == "__main__":
    unittest.main()
