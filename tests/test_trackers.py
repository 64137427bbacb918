"""
Tracker tests.

Focus and presence debouncing with re-arm, the implicit reset when a single
face reappears, and contraband label mapping. Ticks are 2 seconds apart and
the session starts at t=0.
"""

import sys
import os
import math
import unittest

sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from inference.contraband_tracker import ContrabandTracker, classify_label
from inference.focus_tracker import FocusTracker
from inference.presence_tracker import PresenceTracker
from inference.violations import ViolationKind
from tests.fixtures.fakes import FRAME_H, FRAME_W, centered_face, obj, off_center_face

TICK = 2.0


def run_focus(tracker, faces_per_tick, start=TICK):
    """Feed one face list per tick; return [(t, event), ...] for emitted events."""
    emitted = []
    t = start
    for faces in faces_per_tick:
        event = tracker.observe(faces, FRAME_W, FRAME_H, t)
        if event is not None:
            emitted.append((t, event))
        t += TICK
    return emitted


def run_presence(tracker, faces_per_tick, start=TICK):
    emitted = []
    t = start
    for faces in faces_per_tick:
        event = tracker.observe(faces, t)
        if event is not None:
            emitted.append((t, event))
        t += TICK
    return emitted


class TestFocusTracker(unittest.TestCase):

    def setUp(self):
        self.tracker = FocusTracker(start_time=0.0)

    def test_deviation_ratio(self):
        self.assertAlmostEqual(self.tracker.deviation_ratio(centered_face(), FRAME_W), 0.0)
        self.assertAlmostEqual(self.tracker.deviation_ratio(off_center_face(), FRAME_W), 270 / 640)
        self.assertTrue(self.tracker.is_centered(centered_face(), FRAME_W))
        self.assertFalse(self.tracker.is_centered(off_center_face(), FRAME_W))

    def test_three_off_center_ticks_emit_once_on_third(self):
        emitted = run_focus(self.tracker, [[off_center_face()]] * 3)
        self.assertEqual(len(emitted), 1)
        t, event = emitted[0]
        self.assertEqual(t, 6.0)
        self.assertEqual(event.kind, ViolationKind.FOCUS_LOST)
        self.assertAlmostEqual(event.confidence, 0.8)

    def test_two_off_center_ticks_do_not_emit(self):
        self.assertEqual(run_focus(self.tracker, [[off_center_face()]] * 2), [])
        self.assertTrue(self.tracker.state.condition_active)

    def test_rearms_after_emission(self):
        # 12 seconds of continuous deviation -> two events, at 6s and 12s
        emitted = run_focus(self.tracker, [[off_center_face()]] * 6)
        self.assertEqual([t for t, _ in emitted], [6.0, 12.0])

    def test_emission_count_never_exceeds_floor_of_duration(self):
        for ticks in range(1, 20):
            tracker = FocusTracker(start_time=0.0)
            emitted = run_focus(tracker, [[off_center_face()]] * ticks)
            duration = ticks * TICK
            self.assertLessEqual(len(emitted), math.floor(duration / 5.0))

    def test_centered_face_resets_countdown(self):
        faces = [[off_center_face()], [off_center_face()], [centered_face()],
                 [off_center_face()], [off_center_face()]]
        self.assertEqual(run_focus(self.tracker, faces), [])
        self.assertEqual(self.tracker.state.last_good_time, 6.0)

        # Third bad tick after the reset crosses the threshold again
        event = self.tracker.observe([off_center_face()], FRAME_W, FRAME_H, 12.0)
        self.assertIsNotNone(event)

    def test_no_judgement_without_exactly_one_face(self):
        self.assertIsNone(self.tracker.observe([], FRAME_W, FRAME_H, 2.0))
        self.assertIsNone(self.tracker.observe([off_center_face(), centered_face()], FRAME_W, FRAME_H, 4.0))
        self.assertFalse(self.tracker.state.condition_active)
        self.assertEqual(self.tracker.state.last_good_time, 0.0)

    def test_reappearing_face_starts_fresh_episode(self):
        faces = [[]] * 4 + [[off_center_face()]]
        # The 10s without a single face must not count as looking away
        self.assertEqual(run_focus(self.tracker, faces), [])
        self.assertEqual(self.tracker.state.last_good_time, 8.0)

        # Third off-center tick of the new episode fires
        emitted = run_focus(self.tracker, [[off_center_face()]] * 3, start=12.0)
        self.assertEqual([t for t, _ in emitted], [14.0])

    def test_first_bad_tick_never_emits(self):
        # Late first tick, e.g. camera warm-up or skipped frames
        self.assertIsNone(self.tracker.observe([off_center_face()], FRAME_W, FRAME_H, 8.0))
        self.assertTrue(self.tracker.state.condition_active)

    def test_first_bad_tick_after_long_gap_never_emits(self):
        self.tracker.observe([centered_face()], FRAME_W, FRAME_H, 2.0)
        # Nothing evaluated between 2s and 40s (failed or skipped ticks)
        self.assertIsNone(self.tracker.observe([off_center_face()], FRAME_W, FRAME_H, 40.0))

    def test_countdown_never_reaches_before_previous_tick(self):
        run_focus(self.tracker, [[centered_face()]] * 5)
        self.tracker.observe([off_center_face()], FRAME_W, FRAME_H, 12.0)
        self.assertEqual(self.tracker.state.last_good_time, 10.0)
        self.assertIsNone(self.tracker.observe([off_center_face()], FRAME_W, FRAME_H, 14.0))
        self.assertIsNotNone(self.tracker.observe([off_center_face()], FRAME_W, FRAME_H, 16.0))

    def test_crowd_interrupts_focus_episode(self):
        faces = [[off_center_face()], [off_center_face()],
                 [centered_face(), centered_face()], [off_center_face()]]
        self.assertEqual(run_focus(self.tracker, faces), [])
        self.assertEqual(self.tracker.state.last_good_time, 6.0)

    def test_threshold_overrides_from_config(self):
        tracker = FocusTracker(0.0, {"face_center": 0.5, "focus_lost_seconds": 1.0})
        self.assertTrue(tracker.is_centered(off_center_face(), FRAME_W))


class TestPresenceTracker(unittest.TestCase):

    def setUp(self):
        self.tracker = PresenceTracker(start_time=0.0)

    def test_twelve_seconds_without_face_emits_on_sixth_tick(self):
        emitted = run_presence(self.tracker, [[]] * 6)
        self.assertEqual(len(emitted), 1)
        t, event = emitted[0]
        self.assertEqual(t, 12.0)
        self.assertEqual(event.kind, ViolationKind.NO_FACE)
        self.assertAlmostEqual(event.confidence, 0.9)

    def test_face_reappearing_resets_absence(self):
        run_presence(self.tracker, [[]] * 6)
        self.assertIsNone(self.tracker.observe([centered_face()], 14.0))
        self.assertFalse(self.tracker.state.condition_active)

        # A fresh absence needs the full threshold again
        emitted = run_presence(self.tracker, [[]] * 6, start=16.0)
        self.assertEqual([t for t, _ in emitted], [26.0])

    def test_no_face_rearms(self):
        emitted = run_presence(self.tracker, [[]] * 12)
        self.assertEqual([t for t, _ in emitted], [12.0, 24.0])

    def test_multiple_faces_every_tick(self):
        emitted = run_presence(self.tracker, [[centered_face(), off_center_face()]] * 4)
        self.assertEqual(len(emitted), 4)
        self.assertTrue(all(e.kind == ViolationKind.MULTIPLE_FACES for _, e in emitted))
        self.assertTrue(all(e.confidence == 0.9 for _, e in emitted))

    def test_absence_after_crowd_starts_fresh_countdown(self):
        self.assertIsNone(self.tracker.observe([centered_face()], 0.0))
        crowd = run_presence(self.tracker, [[centered_face(), centered_face()]] * 10)
        self.assertEqual(len(crowd), 10)

        # Faces were present until 20s, so 22s is the first tick of the absence
        self.assertIsNone(self.tracker.observe([], 22.0))
        emitted = run_presence(self.tracker, [[]] * 5, start=24.0)
        self.assertEqual([t for t, _ in emitted], [32.0])

    def test_crowd_ends_absence_episode(self):
        faces = [[], [], [centered_face(), centered_face()], [], [], []]
        emitted = run_presence(self.tracker, faces)
        self.assertEqual([e.kind for _, e in emitted], [ViolationKind.MULTIPLE_FACES])
        self.assertTrue(self.tracker.state.condition_active)
        self.assertEqual(self.tracker.state.last_good_time, 6.0)

    def test_late_first_tick_without_face_never_emits(self):
        self.assertIsNone(self.tracker.observe([], 30.0))
        self.assertTrue(self.tracker.state.condition_active)

    def test_single_face_is_normal(self):
        self.assertEqual(run_presence(self.tracker, [[off_center_face()]] * 10), [])


class TestContrabandTracker(unittest.TestCase):

    def setUp(self):
        self.tracker = ContrabandTracker()

    def test_cell_phone(self):
        events = self.tracker.observe([obj("cell phone", 0.87)], 2.0)
        self.assertEqual(len(events), 1)
        self.assertEqual(events[0].kind, ViolationKind.PHONE_DETECTED)
        self.assertAlmostEqual(events[0].confidence, 0.87)
        self.assertEqual(events[0].timestamp, 2.0)

    def test_each_object_is_its_own_event(self):
        events = self.tracker.observe([obj("book", 0.7), obj("book", 0.6)], 2.0)
        self.assertEqual([e.kind for e in events], [ViolationKind.BOOK_DETECTED] * 2)
        self.assertEqual([e.confidence for e in events], [0.7, 0.6])

    def test_label_table(self):
        self.assertEqual(classify_label("Cell Phone"), ViolationKind.PHONE_DETECTED)
        self.assertEqual(classify_label("smartphone"), ViolationKind.PHONE_DETECTED)
        self.assertEqual(classify_label("BOOK"), ViolationKind.BOOK_DETECTED)
        self.assertEqual(classify_label("notebook"), ViolationKind.BOOK_DETECTED)
        self.assertEqual(classify_label("paper"), ViolationKind.NOTES_DETECTED)
        self.assertIsNone(classify_label("person"))
        self.assertIsNone(classify_label("laptop"))
        self.assertIsNone(classify_label(""))

    def test_order_preserved_and_allowed_objects_skipped(self):
        objects = [obj("person", 0.99), obj("paper", 0.55), obj("cell phone", 0.9), obj("cup", 0.8)]
        events = self.tracker.observe(objects, 4.0)
        self.assertEqual([e.kind for e in events],
                         [ViolationKind.NOTES_DETECTED, ViolationKind.PHONE_DETECTED])

    def test_confidence_clamped(self):
        events = self.tracker.observe([obj("phone", 1.7), obj("phone", -0.2), obj("phone", float("nan"))], 0.0)
        self.assertEqual([e.confidence for e in events], [1.0, 0.0, 0.0])

    def test_no_debounce_across_ticks(self):
        total = sum(len(self.tracker.observe([obj("book", 0.8)], t)) for t in (2.0, 4.0, 6.0))
        self.assertEqual(total, 3)


if __name__ == "__main__":
    unittest.main()
