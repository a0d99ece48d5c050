"""
Unit tests for arrow angle tracking, alignment events and the spin animation
"""
import unittest

from navigation.algorithms.angle_unwrapper import AngleUnwrapper, AlignmentDetector, SpinAnimation
from tests.fakes import ManualClock


class TestAngleUnwrapper(unittest.TestCase):

    def test_shortest_path_sequence(self):
        """Targets crossing north never cause a near-full turn"""
        unwrapper = AngleUnwrapper(epsilon=0.1, initial_display=0.0)
        expected = [10.0, 20.0, -10.0, 5.0]

        previous = unwrapper.current_display
        for target, want in zip([10.0, 20.0, 350.0, 5.0], expected):
            display = unwrapper.update(target, heading=0.0)
            self.assertAlmostEqual(display, want)
            self.assertLessEqual(abs(display - previous), 180.0)
            self.assertAlmostEqual((display - target) % 360.0, 0.0, places=9)
            previous = display

    def test_display_tracks_target_modulo_360(self):
        unwrapper = AngleUnwrapper(epsilon=0.1, initial_display=0.0)
        heading = 30.0
        previous = unwrapper.current_display
        for bearing in (100, 250, 40, 300, 170, 359, 1, 181):
            display = unwrapper.update(bearing, heading)
            self.assertLessEqual(abs(display - previous), 180.0)
            residue = (display - (bearing - heading)) % 360.0
            self.assertTrue(residue < 1e-9 or residue > 360.0 - 1e-9)
            previous = display

    def test_display_can_grow_past_full_turn(self):
        unwrapper = AngleUnwrapper(epsilon=0.1, initial_display=0.0)
        for target in (90, 180, 270, 0, 90):
            unwrapper.update(target, 0.0)
        self.assertAlmostEqual(unwrapper.current_display, 450.0)

    def test_small_delta_is_suppressed(self):
        unwrapper = AngleUnwrapper(epsilon=0.5, initial_display=0.0)
        unwrapper.update(10.0, 0.0)
        display = unwrapper.update(10.3, 0.0)
        self.assertEqual(display, 10.0)
        self.assertEqual(unwrapper.last_delta, 0.0)

    def test_force_applies_small_delta(self):
        unwrapper = AngleUnwrapper(epsilon=0.5, initial_display=0.0)
        unwrapper.update(10.0, 0.0)
        display = unwrapper.update(10.3, 0.0, force=True)
        self.assertAlmostEqual(display, 10.3)

    def test_first_update_snaps_without_initial_display(self):
        unwrapper = AngleUnwrapper()
        self.assertEqual(unwrapper.current_display, 0.0)
        self.assertEqual(unwrapper.update(200.0, 20.0), 180.0)
        self.assertEqual(unwrapper.last_delta, 0.0)

    def test_heading_is_subtracted(self):
        unwrapper = AngleUnwrapper(initial_display=0.0)
        self.assertAlmostEqual(unwrapper.update(90.0, 80.0), 10.0)

    def test_reset(self):
        unwrapper = AngleUnwrapper(initial_display=0.0)
        unwrapper.update(90.0, 0.0)
        unwrapper.reset()
        self.assertEqual(unwrapper.current_display, 0.0)
        self.assertEqual(unwrapper.update(45.0, 0.0), 45.0)


class TestAlignmentDetector(unittest.TestCase):
    def setUp(self):
        self.clock = ManualClock()
        self.events = []
        self.detector = AlignmentDetector(threshold=5.0, cooldown=1.0, clock=self.clock)
        self.detector.add_listener(lambda: self.events.append(self.clock()))

    def test_fires_on_entering_zone(self):
        self.assertFalse(self.detector.update(30.0))
        self.assertTrue(self.detector.update(3.0))
        self.assertTrue(self.detector.is_aligned)
        self.assertEqual(len(self.events), 1)

    def test_does_not_repeat_while_aligned(self):
        self.detector.update(2.0)
        self.clock.advance(5.0)
        self.assertFalse(self.detector.update(1.0))
        self.assertEqual(len(self.events), 1)

    def test_cooldown(self):
        self.detector.update(2.0)
        self.detector.update(20.0)
        self.clock.advance(0.5)
        self.assertFalse(self.detector.update(2.0))

        self.detector.update(20.0)
        self.clock.advance(0.6)
        self.assertTrue(self.detector.update(-4.0))
        self.assertEqual(len(self.events), 2)

    def test_entry_during_cooldown_fires_once_cooldown_passes(self):
        self.detector.update(2.0)
        self.detector.update(20.0)
        self.clock.advance(0.3)
        self.assertFalse(self.detector.update(1.0))
        self.assertTrue(self.detector.is_aligned)

        self.clock.advance(0.8)
        self.assertTrue(self.detector.update(1.5))
        self.assertFalse(self.detector.update(0.5))
        self.assertEqual(len(self.events), 2)

    def test_wraps_relative_angle(self):
        self.assertTrue(self.detector.update(358.0))

    def test_listener_error_is_contained(self):
        def broken():
            raise RuntimeError("boom")
        self.detector.add_listener(broken)
        self.assertTrue(self.detector.update(0.0))
        self.assertEqual(len(self.events), 1)


class TestSpinAnimation(unittest.TestCase):
    def test_spin_lifecycle(self):
        clock = ManualClock()
        spin = SpinAnimation(degrees=360.0, duration=0.7, clock=clock)
        self.assertEqual(spin.offset(), 0.0)

        self.assertTrue(spin.start())
        self.assertTrue(spin.is_spinning())
        self.assertEqual(spin.offset(), 360.0)
        self.assertFalse(spin.start())

        clock.advance(0.7)
        self.assertFalse(spin.is_spinning())
        self.assertEqual(spin.offset(), 0.0)
        self.assertTrue(spin.start())


if __name__ == '__main__':
    unittest.main()
