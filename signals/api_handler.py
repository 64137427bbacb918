"""API handler for sending interview integrity data to a remote API."""
from datetime import datetime
from typing import Dict, Optional

import requests

from signals.event_sink import EventSink
from signals.session_logger import convert_to_serializable


class APIHandler(EventSink):
    """Posts session markers and violation events as JSON; failures never propagate."""

    def __init__(self, api_url: str, timeout: int = 10, session: Optional[requests.Session] = None):
        """
        Initialize API handler.

        Args:
            api_url (str): API endpoint URL
            timeout (int): Request timeout in seconds
            session: requests.Session to reuse (a new one if None)
        """
        self.api_url = api_url
        self.timeout = timeout
        self.session = session or requests.Session()
        self.last_error = None
        self.sent = 0
        self.failed = 0
        self.session.headers.update({
            'Content-Type': 'application/json',
            'User-Agent': 'InterviewIntegrityMonitor/1.0'
        })
        print(f"✓ API Handler initialized: {self.api_url}")

    def _make_request(self, payload: Dict) -> bool:
        """
        Make POST request to API.

        Returns:
            bool: True if successful, False otherwise
        """
        try:
            response = self.session.post(
                self.api_url,
                json=convert_to_serializable(payload),
                timeout=self.timeout
            )
            response.raise_for_status()
            self.last_error = None
            self.sent += 1
            return True
        except requests.exceptions.RequestException as e:
            self.failed += 1
            print(f"✗ API request error: {e}")
            response = getattr(e, 'response', None)
            if response is not None:
                try:
                    error_json = response.json()
                except ValueError:
                    error_json = None
                self.last_error = {
                    "status_code": response.status_code,
                    "json": error_json,
                    "text": response.text,
                    "url": response.url
                }
            else:
                self.last_error = {
                    "status_code": None,
                    "json": None,
                    "text": str(e),
                    "url": None
                }
            return False

    def session_started(self, snapshot):
        payload = {
            "event_type": "session_start",
            "timestamp": datetime.now().isoformat(),
        }
        payload.update(snapshot.to_interview_data())
        if self._make_request(payload):
            print(f"✓ Session {snapshot.room_id} sent to API")

    def violation_recorded(self, event, snapshot):
        payload = {
            "event_type": "violation",
            "room_id": snapshot.room_id,
            "integrity_score": snapshot.score,
        }
        payload.update(event.to_dict())
        self._make_request(payload)

    def perception_failed(self, room_id, error, now):
        self._make_request({
            "event_type": "perception_warning",
            "room_id": room_id,
            "message": str(error),
            "timestamp": datetime.fromtimestamp(now).isoformat(),
        })

    def session_ended(self, snapshot):
        payload = {
            "event_type": "session_end",
            "interview": snapshot.to_interview_data(),
            "report": snapshot.to_report_summary(),
        }
        if self._make_request(payload):
            print(f"✓ Session {snapshot.room_id} finalized via API")

    def close(self):
        self.session.close()
