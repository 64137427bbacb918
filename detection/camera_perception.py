"""PerceptionPort backed by OpenCV face detection and YOLO object detection."""
from detection.face_detector.haar_faces import HaarFaceDetector
from detection.object_detector.yolo_objects import YoloObjectDetector
from detection.perception import PerceptionError, PerceptionPort, PerceptionResult


class CameraPerception(PerceptionPort):
    """Runs both detectors on a BGR frame and reports frame size from its shape."""

    def __init__(self, face_detector=None, object_detector=None, config: dict = None):
        config = config or {}
        face_cfg = config.get("face", {})
        self.face_detector = face_detector or HaarFaceDetector(
            scale_factor=face_cfg.get("scale_factor", 1.1),
            min_neighbors=face_cfg.get("min_neighbors", 5),
            min_size=face_cfg.get("min_size", (60, 60)),
        )
        self.object_detector = object_detector or YoloObjectDetector(
            model_path=config.get("object_model", "yolov8n.pt"),
            min_confidence=config.get("min_confidence", 0.5),
        )
        self.debug = bool(config.get("debug", False))

    def initialize(self):
        # Both loaders raise PerceptionInitError
        self.face_detector.load()
        self.object_detector.load()

    def detect(self, frame) -> PerceptionResult:
        if frame is None or getattr(frame, "size", 0) == 0:
            raise PerceptionError("Empty frame")
        height, width = frame.shape[:2]
        try:
            faces = self.face_detector.detect(frame)
            objects = self.object_detector.detect(frame, debug=self.debug)
        except Exception as e:
            raise PerceptionError(f"Detection failed: {e}") from e
        return PerceptionResult(faces=faces, objects=objects, frame_width=width, frame_height=height)
