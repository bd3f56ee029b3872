import unittest

import numpy as np

from chromakey.refine import erode_alpha


class TestErodeAlpha(unittest.TestCase):
    def _plane_with_hole(self, h=5, w=7, at=(2, 3)):
        alpha = np.full((h, w), 255, dtype=np.uint8)
        alpha[at] = 0
        return alpha

    def test_zero_strength_is_identity(self):
        rng = np.random.default_rng(0)
        alpha = rng.integers(0, 256, size=(6, 6), dtype=np.uint8)
        for strength in (0, -2):
            with self.subTest(strength=strength):
                before = alpha.copy()
                erode_alpha(alpha, strength)
                np.testing.assert_array_equal(alpha, before)

    def test_one_pass_reads_snapshot(self):
        alpha = erode_alpha(self._plane_with_hole(), 1)
        self.assertEqual(int((alpha == 0).sum()), 5)
        for y, x in [(1, 3), (3, 3), (2, 2), (2, 4)]:
            self.assertEqual(alpha[y, x], 0)
        self.assertEqual(alpha[1, 2], 255)
        self.assertEqual(alpha[2, 1], 255)

    def test_two_passes_grow_a_diamond_inside_the_border(self):
        alpha = erode_alpha(self._plane_with_hole(), 2)
        self.assertEqual(int((alpha == 0).sum()), 11)
        self.assertEqual(alpha[0, 3], 255)
        self.assertEqual(alpha[4, 3], 255)
        self.assertEqual(alpha[1, 2], 0)

    def test_partial_alpha_is_eroded_too(self):
        alpha = self._plane_with_hole()
        alpha[2, 2] = 128
        erode_alpha(alpha, 1)
        self.assertEqual(alpha[2, 2], 0)

    def test_border_is_never_modified(self):
        rng = np.random.default_rng(3)
        alpha = np.where(rng.random((9, 11)) < 0.2, 0, 255).astype(np.uint8)
        before = alpha.copy()
        erode_alpha(alpha, 6)
        np.testing.assert_array_equal(alpha[0], before[0])
        np.testing.assert_array_equal(alpha[-1], before[-1])
        np.testing.assert_array_equal(alpha[:, 0], before[:, 0])
        np.testing.assert_array_equal(alpha[:, -1], before[:, -1])

    def test_tiny_images_have_no_interior(self):
        for shape in [(1, 1), (2, 5), (5, 2)]:
            with self.subTest(shape=shape):
                alpha = np.zeros(shape, dtype=np.uint8)
                alpha.flat[0] = 255
                before = alpha.copy()
                erode_alpha(alpha, 3)
                np.testing.assert_array_equal(alpha, before)

    def test_works_on_strided_rgba_view(self):
        rgba = np.zeros((5, 7, 4), dtype=np.uint8)
        rgba[..., 3] = self._plane_with_hole()
        erode_alpha(rgba[..., 3], 1)
        self.assertEqual(int((rgba[..., 3] == 0).sum()), 5)
        self.assertTrue(np.all(rgba[..., :3] == 0))


if __name__ == "__main__":
    unittest.main()
