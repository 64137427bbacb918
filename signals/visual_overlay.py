"""Real-time visual overlay for interview integrity monitoring."""
import cv2

from inference.score_engine import classify_severity
from signals.event_sink import EventSink


class VisualOverlay(EventSink):
    """Draws the live score panel, detection boxes and violation toasts on frames."""

    def __init__(self, alert_duration: float = 5.0):
        """Initialize visual overlay with default styling."""
        # Score panel color per severity band (BGR format)
        self.severity_colors = {
            "Excellent": (0, 255, 0),     # Green
            "Good": (0, 200, 120),
            "Average": (0, 200, 255),     # Yellow-orange
            "Poor": (0, 120, 255),        # Orange
            "Critical": (0, 0, 255),      # Red
        }
        self.face_color = (0, 255, 0)
        self.object_color = (0, 0, 255)
        self.toast_color = (0, 0, 255)

        # Font settings
        self.font = cv2.FONT_HERSHEY_SIMPLEX
        self.font_scale_small = 0.4
        self.font_scale_medium = 0.5
        self.font_scale_large = 0.6
        self.font_thickness = 1
        self.font_thickness_bold = 2

        # Toast display buffer
        self.active_alerts = []
        self.alert_duration = alert_duration
        self.score = 100
        self.candidate_name = ""
        self.degraded = False

    def session_started(self, snapshot):
        self.score = snapshot.score
        self.candidate_name = snapshot.candidate_name
        self.degraded = snapshot.degraded

    def violation_recorded(self, event, snapshot):
        """Queue a toast for the violation and remember the new score."""
        self.score = snapshot.score
        self.active_alerts.append({"timestamp": event.timestamp, "event": event})

    def prune_alerts(self, now: float):
        self.active_alerts = [
            a for a in self.active_alerts
            if now - a["timestamp"] < self.alert_duration
        ]

    def draw_detections(self, frame, result):
        """
        Draw face and object boxes from the most recent perception result.

        Args:
            frame: Video frame
            result: PerceptionResult or None
        """
        if result is None:
            return
        for face in result.faces:
            x1, y1, x2, y2 = map(int, face.bounding_box.to_xyxy())
            cv2.rectangle(frame, (x1, y1), (x2, y2), self.face_color, 2)
        for obj in result.objects:
            if obj.bounding_box is None:
                continue
            x1, y1, x2, y2 = map(int, obj.bounding_box.to_xyxy())
            cv2.rectangle(frame, (x1, y1), (x2, y2), self.object_color, 2)
            cv2.putText(frame, f"{obj.label} ({obj.confidence:.2f})", (x1, max(0, y1 - 10)),
                        self.font, self.font_scale_medium, self.object_color, self.font_thickness)

    def draw_score_panel(self, frame):
        """Draw integrity score panel in top-right corner."""
        height, width = frame.shape[:2]
        panel_width = 260
        panel_x = width - panel_width - 10
        panel_y = 10
        severity = classify_severity(self.score)
        color = self.severity_colors.get(severity, (255, 255, 255))

        # Semi-transparent background
        overlay = frame.copy()
        cv2.rectangle(overlay, (panel_x, panel_y),
                      (panel_x + panel_width, panel_y + 90), (0, 0, 0), -1)
        cv2.addWeighted(overlay, 0.6, frame, 0.4, 0, frame)
        cv2.rectangle(frame, (panel_x, panel_y),
                      (panel_x + panel_width, panel_y + 90), color, 2)

        cv2.putText(frame, "AI MONITORING ACTIVE", (panel_x + 10, panel_y + 22),
                    self.font, self.font_scale_medium, (255, 255, 255), self.font_thickness_bold)
        cv2.putText(frame, f"Score: {self.score}/100 ({severity})", (panel_x + 10, panel_y + 50),
                    self.font, self.font_scale_large, color, self.font_thickness_bold)
        status = "DEGRADED - no detection" if self.degraded else self.candidate_name[:28]
        cv2.putText(frame, status, (panel_x + 10, panel_y + 75),
                    self.font, self.font_scale_small, (255, 255, 255), 1)

    def draw_alerts(self, frame, now: float):
        """Draw up to three recent violation toasts at the bottom of the frame."""
        self.prune_alerts(now)
        if not self.active_alerts:
            return

        height, width = frame.shape[:2]
        alert_y = height - 90

        overlay = frame.copy()
        cv2.rectangle(overlay, (10, alert_y), (width - 10, height - 10), (0, 0, 0), -1)
        cv2.addWeighted(overlay, 0.7, frame, 0.3, 0, frame)
        cv2.rectangle(frame, (10, alert_y), (width - 10, height - 10), self.toast_color, 2)

        y_offset = 25
        for alert_data in self.active_alerts[-3:]:
            event = alert_data["event"]
            cv2.putText(frame, event.message[:70], (20, alert_y + y_offset),
                        self.font, self.font_scale_medium, self.toast_color, 1)
            y_offset += 20

    def render_full_overlay(self, frame, result, now: float):
        """
        Render complete visual overlay on frame.

        Returns:
            Annotated frame
        """
        self.draw_detections(frame, result)
        self.draw_score_panel(frame)
        self.draw_alerts(frame, now)
        return frame

