from __future__ import annotations

import math
import unittest

from contracts.errors import ConfigurationError
from contracts.layout import Transform
from word_boxes.projector import check_resolution, project_box
from word_boxes.transform import accumulate, compose
from word_boxes.walker import LocalBox


class TestCompose(unittest.TestCase):
    def test_identity_is_neutral(self) -> None:
        t = Transform(a=2.0, b=0.5, c=-0.25, d=3.0, e=7.0, f=-4.0)
        self.assertEqual(compose(Transform.identity(), t), t)
        self.assertEqual(compose(t, Transform.identity()), t)

    def test_child_applies_before_parent(self) -> None:
        parent = Transform.scale(2.0, 2.0)
        child = Transform.translate(10.0, 5.0)
        eff = compose(parent, child)
        # translate first, then scale
        self.assertEqual(eff.apply(0.0, 0.0), (20.0, 10.0))
        self.assertEqual(eff.apply(1.0, 1.0), (22.0, 12.0))

        reverse = compose(child, parent)
        self.assertEqual(reverse.apply(1.0, 1.0), (12.0, 7.0))

    def test_compose_matches_sequential_application(self) -> None:
        chain = [
            Transform.translate(3.0, 4.0),
            Transform.rotate(math.pi / 6),
            Transform.scale(1.5, 0.5),
            Transform.translate(-2.0, 1.0),
        ]
        eff = accumulate(chain)
        x, y = 2.0, -1.0
        for t in reversed(chain):
            x, y = t.apply(x, y)
        ex, ey = eff.apply(2.0, -1.0)
        self.assertAlmostEqual(ex, x, places=9)
        self.assertAlmostEqual(ey, y, places=9)

    def test_word_boxes_reexports_contract_composition(self) -> None:
        from contracts import layout

        self.assertIs(compose, layout.compose)
        self.assertIs(accumulate, layout.accumulate)

    def test_singular_matrix_passes_through(self) -> None:
        eff = compose(Transform.scale(0.0, 1.0), Transform.translate(5.0, 5.0))
        self.assertEqual(eff.apply(1.0, 1.0), (0.0, 6.0))


class TestProjectBox(unittest.TestCase):
    def test_identity_is_exact_local_box_scaled(self) -> None:
        box = LocalBox(x0=10.0, y0=20.0, x1=40.0, y1=32.0)
        b = project_box(box, Transform.identity(), 2.0)
        self.assertEqual((b.x, b.y, b.width, b.height), (20.0, 40.0, 60.0, 24.0))

    def test_translation_and_scale_are_exact(self) -> None:
        box = LocalBox(x0=0.0, y0=-8.0, x1=10.0, y1=2.0)
        tf = compose(Transform.translate(100.0, 50.0), Transform.scale(2.0, 2.0))
        b = project_box(box, tf, 1.0)
        self.assertEqual((b.x, b.y, b.width, b.height), (100.0, 34.0, 20.0, 20.0))

    def test_rotation_gives_enclosing_envelope(self) -> None:
        box = LocalBox(x0=0.0, y0=0.0, x1=10.0, y1=2.0)
        b = project_box(box, Transform.rotate(math.pi / 2), 1.0)
        # 90 degrees maps (x, y) -> (-y, x)
        self.assertAlmostEqual(b.x, -2.0, places=9)
        self.assertAlmostEqual(b.y, 0.0, places=9)
        self.assertAlmostEqual(b.width, 2.0, places=9)
        self.assertAlmostEqual(b.height, 10.0, places=9)

        b45 = project_box(box, Transform.rotate(math.pi / 4), 1.0)
        corners = [(0.0, 0.0), (10.0, 0.0), (10.0, 2.0), (0.0, 2.0)]
        for cx, cy in corners:
            px, py = Transform.rotate(math.pi / 4).apply(cx, cy)
            self.assertGreaterEqual(px, b45.x - 1e-9)
            self.assertLessEqual(px, b45.x1 + 1e-9)
            self.assertGreaterEqual(py, b45.y - 1e-9)
            self.assertLessEqual(py, b45.y1 + 1e-9)

    def test_mirror_keeps_non_negative_extent(self) -> None:
        box = LocalBox(x0=1.0, y0=1.0, x1=5.0, y1=3.0)
        b = project_box(box, Transform.scale(-1.0, -1.0), 1.0)
        self.assertEqual((b.x, b.y, b.width, b.height), (-5.0, -3.0, 4.0, 2.0))

    def test_resolution_must_be_positive_and_finite(self) -> None:
        for bad in (0.0, -1.0, math.inf, math.nan, True, "2"):
            with self.assertRaises(ConfigurationError):
                check_resolution(bad)  # type: ignore[arg-type]
        check_resolution(1)


if __name__ == "__main__":
    unittest.main()
