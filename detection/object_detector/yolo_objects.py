"""COCO object detection with a YOLO model, mapped to ObjectObservation."""
import torch
from ultralytics import YOLO

from detection.perception import BoundingBox, ObjectObservation, PerceptionInitError


class YoloObjectDetector:
    """Owns one YOLO model; reports every box at or above ``min_confidence``."""

    def __init__(self, model_path: str = "yolov8n.pt", min_confidence: float = 0.5, device: str = None):
        """
        Args:
            model_path (str): Ultralytics weights file
            min_confidence (float): Boxes below this score are dropped
            device (str): "cuda" / "cpu"; picked automatically if None
        """
        self.model_path = model_path
        self.min_confidence = min_confidence
        self.device = device or ("cuda" if torch.cuda.is_available() else "cpu")
        self.model = None

    def load(self):
        try:
            model = YOLO(self.model_path)
            model.to(self.device)
        except Exception as e:
            raise PerceptionInitError(f"Could not load YOLO model {self.model_path}: {e}") from e
        self.model = model
        print(f"✓ Object detector loaded: {self.model_path} on {self.device}")

    def detect(self, frame, debug: bool = False):
        """
        Detect objects in frame.

        Args:
            frame: BGR image
            debug: Print every raw (label, confidence) pair

        Returns:
            list of ObjectObservation
        """
        if self.model is None:
            self.load()

        results = self.model(frame, verbose=False)
        observations = []
        all_detections = []  # For debug output

        for result in results:
            for box in result.boxes:
                conf = box.conf[0].item()
                cls = int(box.cls[0].item())
                label = self.model.names[cls]
                all_detections.append((label, conf))

                if conf < self.min_confidence:
                    continue

                x1, y1, x2, y2 = map(float, box.xyxy[0].tolist())
                observations.append(ObjectObservation(
                    label=label,
                    confidence=conf,
                    bounding_box=BoundingBox.from_xyxy(x1, y1, x2, y2),
                ))

        if debug and all_detections:
            print(f"DEBUG - Detected objects: {all_detections}")

        return observations
