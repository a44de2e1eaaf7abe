"""Test helpers shared across the suite."""

import re
from datetime import datetime, timedelta, timezone
from typing import Optional

STRONG_PASSWORD = "Sup3r$ecret"
_OTP_IN_TEXT = re.compile(r"\b(\d{6})\b")


class FakeClock:
    """A controllable clock. Call it to read the time; advance() to move it."""

    def __init__(self, start: Optional[datetime] = None) -> None:
        self.now = start or datetime(2024, 5, 1, 12, 0, tzinfo=timezone.utc)

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs) -> None:
        self.now = self.now + timedelta(**kwargs)


def otp_from_text(text: str) -> str:
    match = _OTP_IN_TEXT.search(text)
    assert match, f"no OTP in email body: {text!r}"
    return match.group(1)
