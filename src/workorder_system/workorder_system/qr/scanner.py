"""Scan session state machine (detect -> confirm -> commit).

A session is kept as a plain dict in the Flask session so each request
restores it, advances it and stores it back.
"""

from __future__ import annotations

from dataclasses import asdict, dataclass
from typing import Optional

from ..core.constants import QR_MAX_SCANS_PER_SECOND, QR_REARM_SECONDS
from ..core.exceptions import ValidationError
from .payload import parse_work_id

SCANNING = "scanning"
DETECTED = "detected"
COMMITTING = "committing"
COMMITTED = "committed"
REJECTED = "rejected"
STOPPED = "stopped"

# feed() outcomes
FRAME_DETECTED = "detected"
FRAME_INVALID = "invalid"
FRAME_THROTTLED = "throttled"
FRAME_IGNORED = "ignored"

INVALID_QR_MESSAGE = "Invalid QR code"


@dataclass
class ScanSession:
    state: str = SCANNING
    work_id: Optional[int] = None
    error: Optional[str] = None
    rearm_at: Optional[float] = None
    last_frame_at: Optional[float] = None

    @classmethod
    def from_dict(cls, data: Optional[dict]) -> "ScanSession":
        if not data:
            return cls()
        return cls(
            state=data.get("state", SCANNING),
            work_id=data.get("work_id"),
            error=data.get("error"),
            rearm_at=data.get("rearm_at"),
            last_frame_at=data.get("last_frame_at"),
        )

    def to_dict(self) -> dict:
        return asdict(self)

    @property
    def is_active(self) -> bool:
        return self.state not in (STOPPED, COMMITTED)

    def feed(self, payload: Optional[str], now: float) -> str:
        """Handle one decoded frame (payload None when nothing was decoded)."""

        if self.state != SCANNING:
            return FRAME_IGNORED

        if self.rearm_at is not None:
            if now < self.rearm_at:
                return FRAME_IGNORED
            self.rearm_at = None
            self.error = None

        min_interval = 1.0 / QR_MAX_SCANS_PER_SECOND
        if self.last_frame_at is not None and now - self.last_frame_at < min_interval:
            return FRAME_THROTTLED
        self.last_frame_at = now

        if payload is None:
            return FRAME_IGNORED

        work_id = parse_work_id(payload)
        if work_id is None:
            self.error = INVALID_QR_MESSAGE
            self.rearm_at = now + QR_REARM_SECONDS
            return FRAME_INVALID

        self.state = DETECTED
        self.work_id = int(work_id)
        self.error = None
        return FRAME_DETECTED

    def begin_commit(self) -> int:
        if self.state != DETECTED or self.work_id is None:
            raise ValidationError("No QR code has been detected")
        self.state = COMMITTING
        return self.work_id

    def mark_committed(self) -> None:
        self.state = COMMITTED
        self.error = None

    def mark_rejected(self, message: str) -> None:
        self.state = REJECTED
        self.error = message

    def rescan(self) -> None:
        if self.state == STOPPED:
            raise ValidationError("Scanner has been stopped")
        self.state = SCANNING
        self.work_id = None
        self.error = None
        self.rearm_at = None
        self.last_frame_at = None

    def stop(self) -> None:
        self.state = STOPPED
        self.rearm_at = None
