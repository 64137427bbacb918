"""
Perception types and CameraPerception with stub detectors (no models loaded).
"""

import sys
import os
import unittest
from unittest.mock import MagicMock

import numpy as np

sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from detection.camera_perception import CameraPerception
from detection.perception import (BoundingBox, FaceObservation, NullPerception, ObjectObservation,
                                  PerceptionError, PerceptionInitError, clamp_confidence)
from tests.fixtures.fakes import centered_face, obj


class TestPerceptionTypes(unittest.TestCase):

    def test_clamp_confidence(self):
        self.assertEqual(clamp_confidence(1.5), 1.0)
        self.assertEqual(clamp_confidence(-3), 0.0)
        self.assertEqual(clamp_confidence(float("nan")), 0.0)
        self.assertEqual(clamp_confidence("junk"), 0.0)
        self.assertAlmostEqual(clamp_confidence(0.42), 0.42)

    def test_observations_clamp(self):
        self.assertEqual(FaceObservation(BoundingBox(0, 0, 10, 10), 7.0).confidence, 1.0)
        self.assertEqual(ObjectObservation("book", float("nan")).confidence, 0.0)

    def test_bounding_box(self):
        box = BoundingBox.from_xyxy(10, 20, 110, 70)
        self.assertEqual((box.width, box.height), (100, 50))
        self.assertEqual(box.center_x, 60)
        self.assertEqual(box.to_xyxy(), (10, 20, 110, 70))

    def test_null_perception(self):
        perception = NullPerception()
        self.assertTrue(perception.degraded)
        result = perception.detect(None)
        self.assertEqual((result.faces, result.objects), ([], []))


class TestCameraPerception(unittest.TestCase):

    def setUp(self):
        self.faces = MagicMock()
        self.faces.detect.return_value = [centered_face()]
        self.objects = MagicMock()
        self.objects.detect.return_value = [obj("cell phone", 0.8)]
        self.perception = CameraPerception(self.faces, self.objects)

    def test_initialize_loads_both(self):
        self.perception.initialize()
        self.faces.load.assert_called_once()
        self.objects.load.assert_called_once()

    def test_initialize_failure_propagates(self):
        self.objects.load.side_effect = PerceptionInitError("no weights")
        with self.assertRaises(PerceptionInitError):
            self.perception.initialize()

    def test_detect_reports_frame_size(self):
        frame = np.zeros((480, 640, 3), dtype=np.uint8)
        result = self.perception.detect(frame)
        self.assertEqual((result.frame_width, result.frame_height), (640, 480))
        self.assertEqual(len(result.faces), 1)
        self.assertEqual(result.objects[0].label, "cell phone")

    def test_empty_frame(self):
        with self.assertRaises(PerceptionError):
            self.perception.detect(np.zeros((0, 0, 3), dtype=np.uint8))
        with self.assertRaises(PerceptionError):
            self.perception.detect(None)

    def test_detector_crash_becomes_perception_error(self):
        self.faces.detect.side_effect = RuntimeError("cuda lost")
        with self.assertRaises(PerceptionError):
            self.perception.detect(np.zeros((480, 640, 3), dtype=np.uint8))


if __name__ == "__main__":
    unittest.main()
