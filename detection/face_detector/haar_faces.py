"""Offline face detector using OpenCV Haar cascades."""
import cv2

from detection.perception import BoundingBox, FaceObservation, PerceptionInitError


class HaarFaceDetector:
    """
    Returns every frontal face in a frame as a FaceObservation.

    Haar cascades give no per-face score, so each face is reported with
    confidence 1.0.
    """

    def __init__(self, scale_factor: float = 1.1, min_neighbors: int = 5, min_size=(60, 60),
                 cascade_path: str = None):
        self.scale_factor = scale_factor
        self.min_neighbors = min_neighbors
        self.min_size = tuple(min_size)
        self.cascade_path = cascade_path or (cv2.data.haarcascades + "haarcascade_frontalface_default.xml")
        self.detector = None

    def load(self):
        detector = cv2.CascadeClassifier(self.cascade_path)
        if detector.empty():
            raise PerceptionInitError(f"Could not load Haar cascade: {self.cascade_path}")
        self.detector = detector

    def detect(self, frame_bgr):
        """Return [FaceObservation, ...] for the full frame."""
        if self.detector is None:
            self.load()
        if frame_bgr is None or frame_bgr.size == 0:
            return []

        gray = cv2.cvtColor(frame_bgr, cv2.COLOR_BGR2GRAY)
        faces = self.detector.detectMultiScale(
            gray,
            scaleFactor=self.scale_factor,
            minNeighbors=self.min_neighbors,
            minSize=self.min_size,
        )
        if faces is None or len(faces) == 0:
            return []

        return [
            FaceObservation(BoundingBox(float(x), float(y), float(w), float(h)), 1.0)
            for x, y, w, h in faces
        ]
