"""Output layer for logging interview integrity sessions to files."""
import json
from datetime import datetime
from pathlib import Path
from typing import Optional

import numpy as np

from inference.score_engine import DEDUCTIONS
from inference.violations import REPORT_ROWS, ViolationKind
from signals.event_sink import EventSink

TIMELINE_LIMIT = 15


def convert_to_serializable(obj):
    """Convert NumPy types to Python native types for JSON serialization."""
    if isinstance(obj, np.integer):
        return int(obj)
    elif isinstance(obj, np.floating):
        return float(obj)
    elif isinstance(obj, np.ndarray):
        return obj.tolist()
    elif isinstance(obj, dict):
        return {key: convert_to_serializable(value) for key, value in obj.items()}
    elif isinstance(obj, list):
        return [convert_to_serializable(item) for item in obj]
    elif isinstance(obj, tuple):
        return tuple(convert_to_serializable(item) for item in obj)
    return obj


class SessionLogger(EventSink):
    """Writes one session's events, final data and text summary under output_dir/<session>."""

    def __init__(self, session_name: Optional[str] = None, output_dir: str = "log"):
        """
        Initialize session logger.

        Args:
            session_name (str): Name for this session (defaults to timestamp)
            output_dir (str): Directory to save log files
        """
        self.output_dir = Path(output_dir)
        self.output_dir.mkdir(parents=True, exist_ok=True)

        if session_name is None:
            timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
            session_name = f"session_{timestamp}"

        self.session_name = session_name
        self.session_dir = self.output_dir / session_name
        self.session_dir.mkdir(exist_ok=True)

        self.event_log_path = self.session_dir / "events.jsonl"  # JSON Lines format
        self.summary_path = self.session_dir / "session_summary.txt"
        self.session_json_path = self.session_dir / "session_data.json"

        self.events_logged = 0
        self.warnings_logged = 0

        print(f"Session logger initialized: {self.session_dir}")

    def _append_line(self, record: dict):
        try:
            with open(self.event_log_path, 'a') as f:
                f.write(json.dumps(convert_to_serializable(record)) + '\n')
        except OSError as e:
            print(f"⚠ Warning: Failed to write event log: {e}")

    def session_started(self, snapshot):
        self._append_line({
            "event_type": "session_start",
            "datetime": datetime.now().isoformat(),
            "room_id": snapshot.room_id,
            "candidate_name": snapshot.candidate_name,
            "degraded": snapshot.degraded,
        })

    def violation_recorded(self, event, snapshot):
        record = {"event_type": "violation", "score": snapshot.score}
        record.update(event.to_dict())
        self._append_line(record)
        self.events_logged += 1

    def perception_failed(self, room_id, error, now):
        self._append_line({
            "event_type": "perception_warning",
            "datetime": datetime.fromtimestamp(now).isoformat(),
            "room_id": room_id,
            "message": str(error),
        })
        self.warnings_logged += 1

    def session_ended(self, snapshot):
        """Generate the summary files for a finished session."""
        self._append_line({
            "event_type": "session_end",
            "datetime": datetime.now().isoformat(),
            "status": snapshot.status,
            "score": snapshot.score,
        })
        try:
            self._generate_json_summary(snapshot)
            self._generate_text_summary(snapshot)
        except OSError as e:
            print(f"⚠ Warning: Failed to write session summary: {e}")
            return

        print(f"\nSession finalized: {self.session_dir}")
        print(f"  - Event log: {self.event_log_path.name}")
        print(f"  - Summary: {self.summary_path.name}")
        print(f"  - JSON data: {self.session_json_path.name}")

    def _generate_json_summary(self, snapshot):
        data = {
            "interview": snapshot.to_interview_data(),
            "report": snapshot.to_report_summary(),
            "statistics": {
                "events_logged": self.events_logged,
                "perception_warnings": self.warnings_logged,
            },
        }
        with open(self.session_json_path, 'w') as f:
            json.dump(convert_to_serializable(data), f, indent=2)

    def _generate_text_summary(self, snapshot):
        """Generate human-readable text summary."""
        report = snapshot.to_report_summary()
        counts = snapshot.counts
        start = datetime.fromtimestamp(snapshot.start_time)

        with open(self.summary_path, 'w') as f:
            f.write("=" * 70 + "\n")
            f.write("INTERVIEW INTEGRITY REPORT\n")
            f.write("=" * 70 + "\n\n")

            f.write(f"Candidate: {snapshot.candidate_name}\n")
            f.write(f"Room ID: {snapshot.room_id}\n")
            f.write(f"Status: {snapshot.status}\n")
            f.write(f"Start Time: {start.strftime('%Y-%m-%d %H:%M:%S')}\n")
            if snapshot.end_time is not None:
                end = datetime.fromtimestamp(snapshot.end_time)
                f.write(f"End Time: {end.strftime('%Y-%m-%d %H:%M:%S')}\n")
            f.write(f"Duration: {snapshot.duration_minutes or 0} minutes\n")
            if snapshot.degraded:
                f.write("Detection: DEGRADED (no perception available)\n")
            f.write("\n")

            f.write("-" * 70 + "\n")
            f.write("FINAL INTEGRITY SCORE\n")
            f.write("-" * 70 + "\n")
            f.write(f"{snapshot.score}/100 - {report['interpretation']}\n\n")

            f.write("-" * 70 + "\n")
            f.write("VIOLATIONS\n")
            f.write("-" * 70 + "\n")
            f.write(f"{'Type':<30}{'Count':>8}  {'Severity':<10}{'Impact':>12}\n")
            for kind in ViolationKind:
                title, severity = REPORT_ROWS[kind]
                impact = f"-{DEDUCTIONS[kind]} each"
                f.write(f"{title:<30}{counts[kind]:>8}  {severity:<10}{impact:>12}\n")
            f.write(f"\nTotal Events: {snapshot.total_events}\n\n")

            if snapshot.events:
                f.write("-" * 70 + "\n")
                f.write("EVENT TIMELINE\n")
                f.write("-" * 70 + "\n")
                for event in snapshot.events[-TIMELINE_LIMIT:]:
                    when = datetime.fromtimestamp(event.timestamp).strftime('%H:%M:%S')
                    label = event.kind.value.replace("_", " ")
                    f.write(f"  {when}  {label:<20} ({round(event.confidence * 100)}% confidence)\n")
                if len(snapshot.events) > TIMELINE_LIMIT:
                    f.write(f"  ... and {len(snapshot.events) - TIMELINE_LIMIT} earlier events\n")
                f.write("\n")

            f.write("-" * 70 + "\n")
            f.write("RECOMMENDATIONS\n")
            f.write("-" * 70 + "\n")
            for line in report["recommendations"]:
                f.write(f"  - {line}\n")

            f.write("\n" + "=" * 70 + "\n")
            f.write(f"Log files saved to: {self.session_dir}\n")
            f.write("=" * 70 + "\n")
