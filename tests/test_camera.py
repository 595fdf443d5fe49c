import unittest

from immersive_chess.camera import BOARD_CENTER, CameraFocusModel, CameraMode, OrbitControl, Vec3
from immersive_chess.oracle import BLACK, WHITE


class CameraFocusModelTests(unittest.TestCase):
    def test_centered_approaches_center_without_overshoot(self):
        cam = CameraFocusModel(OrbitControl(target=Vec3(3.0, 0.0, -2.5)), k_center=2.0, k_follow=5.0)
        last = cam.focus_point.distance_to(BOARD_CENTER)
        for _ in range(120):
            p = cam.step(1 / 60, Vec3(3.5, 0.0, 3.5))
            d = p.distance_to(BOARD_CENTER)
            self.assertLessEqual(d, last)
            self.assertGreaterEqual(p.x, 0.0)
            self.assertLessEqual(p.z, 0.0)
            last = d
        self.assertLess(last, 0.5)

    def test_follow_approaches_cursor(self):
        cam = CameraFocusModel(mode=CameraMode.FOLLOW, k_center=2.0, k_follow=5.0)
        goal = Vec3(0.5, 0.0, -2.5)
        last = cam.focus_point.distance_to(goal)
        for _ in range(60):
            d = cam.step(1 / 60, goal).distance_to(goal)
            self.assertLessEqual(d, last)
            last = d
        self.assertLess(last, 0.05)

    def test_large_step_lands_exactly(self):
        cam = CameraFocusModel(mode=CameraMode.FOLLOW, k_center=2.0, k_follow=5.0)
        goal = Vec3(-1.5, 0.0, 2.5)
        self.assertEqual(cam.step(10.0, goal), goal)

    def test_follow_translates_camera_by_target_delta(self):
        control = OrbitControl(target=Vec3(), position=Vec3(1.0, 8.0, -7.0))
        cam = CameraFocusModel(control, mode=CameraMode.FOLLOW, k_center=2.0, k_follow=5.0)
        offset = control.position - control.target
        for _ in range(30):
            cam.step(1 / 60, Vec3(2.5, 0.0, 1.5))
            rel = control.position - control.target
            self.assertAlmostEqual(rel.x, offset.x)
            self.assertAlmostEqual(rel.y, offset.y)
            self.assertAlmostEqual(rel.z, offset.z)

    def test_centered_leaves_camera_body_alone(self):
        control = OrbitControl(target=Vec3(2.0, 0.0, 2.0))
        cam = CameraFocusModel(control, k_center=2.0, k_follow=5.0)
        before = control.position
        cam.step(1 / 60, Vec3(3.5, 0.0, 3.5))
        self.assertEqual(control.position, before)

    def test_mode_switch_resyncs_tracker(self):
        control = OrbitControl(target=Vec3(), position=Vec3(0.0, 8.0, -8.0))
        cam = CameraFocusModel(control, k_center=2.0, k_follow=5.0)
        # User pans the orbit target by hand between frames.
        control.target = Vec3(1.0, 0.0, 1.0)
        cam.set_mode(CameraMode.FOLLOW)
        body_before, target_before = control.position, control.target
        cam.step(1 / 60, Vec3(1.5, 0.0, 1.5))
        moved = control.position - body_before
        expected = control.target - target_before
        self.assertAlmostEqual(moved.x, expected.x)
        self.assertAlmostEqual(moved.z, expected.z)
        self.assertLess(abs(moved.x), 0.1)

    def test_manual_orbit_offset_kept_in_follow(self):
        cam = CameraFocusModel(mode=CameraMode.FOLLOW, k_center=2.0, k_follow=5.0)
        cam.orbit(position=Vec3(4.0, 6.0, -4.0))
        cam.step(1.0, Vec3(1.0, 0.0, 1.0))
        self.assertEqual(cam.focus_point, Vec3(1.0, 0.0, 1.0))
        self.assertEqual(cam.control.position, Vec3(5.0, 6.0, -3.0))

    def test_manual_pan_does_not_jump_camera(self):
        cam = CameraFocusModel(mode=CameraMode.FOLLOW, k_center=2.0, k_follow=5.0)
        cam.orbit(target=Vec3(2.0, 0.0, 2.0))
        cam.step(1 / 60, Vec3(2.0, 0.0, 2.0))
        self.assertEqual(cam.focus_point, Vec3(2.0, 0.0, 2.0))
        self.assertEqual(cam.control.position, Vec3(0.0, 8.0, -8.0))

    def test_reset_for_side(self):
        cam = CameraFocusModel(OrbitControl(target=Vec3(2.0, 0.0, 2.0)))
        cam.reset_for_side(BLACK)
        self.assertEqual(cam.control.position, Vec3(0.0, 8.0, 8.0))
        self.assertEqual(cam.focus_point, BOARD_CENTER)
        cam.reset_for_side(WHITE)
        self.assertEqual(cam.control.position.z, -8.0)

    def test_zero_dt_is_noop(self):
        cam = CameraFocusModel(OrbitControl(target=Vec3(2.0, 0.0, 2.0)))
        self.assertEqual(cam.step(0.0, Vec3()), Vec3(2.0, 0.0, 2.0))

    def test_parse_mode(self):
        self.assertIs(CameraMode.parse("Follow"), CameraMode.FOLLOW)
        self.assertIs(CameraMode.parse("orbit"), CameraMode.CENTERED)
        with self.assertRaises(ValueError):
            CameraMode.parse("drone")


if __name__ == "__main__":
    unittest.main()
