"""
Unit tests for the domain models.

These tests verify the core business rules without touching
external services (no API calls, no database, no file system).
"""

import re
from datetime import datetime, timedelta, timezone

import pytest

from vidsum.core.accounts.models import Otp, OtpType, User
from vidsum.core.accounts.policy import is_valid_otp_format, password_policy_violations
from vidsum.core.errors import AppError, ErrorKind
from vidsum.core.videos.models import (
    ALLOWED_TRANSITIONS,
    InvalidTransitionError,
    Video,
    VideoStatus,
    can_transition,
    generate_file_key,
)

NOW = datetime(2024, 5, 1, 12, 0, tzinfo=timezone.utc)


def make_video(**overrides) -> Video:
    fields = dict(
        user_id="owner-1",
        title="Holiday",
        file_name="holiday.mp4",
        file_key="videos/abc-1.mp4",
        file_size=1024,
        mime_type="video/mp4",
    )
    fields.update(overrides)
    return Video(**fields)


# ---------------------------------------------------------------------------
# Video Status Machine Tests
# ---------------------------------------------------------------------------

class TestVideoStatus:
    """Tests for the video lifecycle transition table."""

    def test_new_video_starts_pending(self):
        """A freshly created video has nothing uploaded yet."""
        assert make_video().status is VideoStatus.PENDING

    @pytest.mark.parametrize("current", [VideoStatus.PENDING, VideoStatus.UPLOADING, VideoStatus.READY])
    def test_any_live_status_can_be_deleted(self, current):
        assert can_transition(current, VideoStatus.DELETED)

    def test_deleted_is_terminal(self):
        """Nothing leaves DELETED."""
        assert ALLOWED_TRANSITIONS[VideoStatus.DELETED] == frozenset()
        for target in VideoStatus:
            assert not can_transition(VideoStatus.DELETED, target)

    def test_nothing_returns_to_pending(self):
        for current in VideoStatus:
            assert not can_transition(current, VideoStatus.PENDING)

    def test_transition_updates_status_and_timestamp(self):
        video = make_video(updated_at=NOW)
        later = NOW + timedelta(minutes=5)

        video.transition_to(VideoStatus.UPLOADING, later)

        assert video.status is VideoStatus.UPLOADING
        assert video.updated_at == later

    def test_invalid_transition_raises_and_leaves_status(self):
        video = make_video(status=VideoStatus.DELETED)

        with pytest.raises(InvalidTransitionError, match="DELETED to READY"):
            video.transition_to(VideoStatus.READY)

        assert video.status is VideoStatus.DELETED

    def test_reconfirming_a_ready_video_is_allowed(self):
        video = make_video(status=VideoStatus.READY)
        video.transition_to(VideoStatus.READY)
        assert video.is_ready


class TestVideo:
    """Tests for the Video entity."""

    def test_rejects_non_video_mime_type(self):
        with pytest.raises(ValueError, match="video/"):
            make_video(mime_type="image/png")

    def test_rejects_non_positive_size(self):
        with pytest.raises(ValueError, match="positive"):
            make_video(file_size=0)

    def test_private_video_readable_only_by_owner(self):
        video = make_video()
        assert video.is_readable_by("owner-1")
        assert not video.is_readable_by("someone-else")

    def test_public_video_readable_by_anyone_but_owned_by_one(self):
        video = make_video(is_public=True)
        assert video.is_readable_by("someone-else")
        assert not video.is_owned_by("someone-else")

    def test_apply_update_leaves_omitted_fields(self):
        video = make_video(description="old")

        video.apply_update(title="New title", now=NOW)

        assert video.title == "New title"
        assert video.description == "old"
        assert video.is_public is False
        assert video.updated_at == NOW


class TestFileKey:
    """Tests for storage key generation."""

    def test_key_has_uuid_timestamp_and_extension(self):
        key = generate_file_key("clip.final.MOV", now_ms=1714564800000)
        assert re.fullmatch(r"videos/[0-9a-f-]{36}-1714564800000\.MOV", key)

    def test_name_without_extension_gets_no_suffix(self):
        key = generate_file_key("clip", now_ms=1)
        assert re.fullmatch(r"videos/[0-9a-f-]{36}-1", key)

    def test_keys_are_unique(self):
        keys = {generate_file_key("a.mp4", now_ms=1) for _ in range(50)}
        assert len(keys) == 50


# ---------------------------------------------------------------------------
# Account Model Tests
# ---------------------------------------------------------------------------

class TestUser:
    def test_email_is_normalized(self):
        user = User(email="  Alice@Example.COM ", password_hash="x")
        assert user.email == "alice@example.com"

    def test_new_user_is_unverified(self):
        assert User(email="a@b.co", password_hash="x").is_verified is False

    def test_update_profile_is_partial(self):
        user = User(email="a@b.co", password_hash="x", first_name="Al", last_name="Li")
        user.update_profile(last_name="Lee", now=NOW)
        assert (user.first_name, user.last_name) == ("Al", "Lee")


class TestOtp:
    """Tests for one-time code matching rules."""

    def test_issue_sets_ten_minute_expiry(self):
        otp = Otp.issue("u1", "123456", OtpType.VERIFICATION, NOW)
        assert otp.expires_at == NOW + timedelta(minutes=10)

    def test_matches_same_code_and_type_before_expiry(self):
        otp = Otp.issue("u1", "123456", OtpType.VERIFICATION, NOW)
        assert otp.matches("123456", OtpType.VERIFICATION, NOW + timedelta(minutes=9))

    def test_does_not_match_other_purpose(self):
        """A verification code cannot reset a password."""
        otp = Otp.issue("u1", "123456", OtpType.VERIFICATION, NOW)
        assert not otp.matches("123456", OtpType.PASSWORD_RESET, NOW)

    def test_does_not_match_after_expiry(self):
        otp = Otp.issue("u1", "123456", OtpType.VERIFICATION, NOW)
        assert not otp.matches("123456", OtpType.VERIFICATION, NOW + timedelta(minutes=10))

    def test_rejects_malformed_code(self):
        with pytest.raises(ValueError, match="6 digits"):
            Otp.issue("u1", "12ab56", OtpType.VERIFICATION, NOW)


class TestPolicy:
    def test_strong_password_passes(self):
        assert password_policy_violations("Sup3r$ecret") == []

    @pytest.mark.parametrize("password, fragment", [
        ("Sh0r$t", "at least 8"),
        ("lower$case1", "uppercase"),
        ("UPPER$CASE1", "lowercase"),
        ("NoDigits$here", "number"),
        ("NoSymbols123", "special"),
    ])
    def test_each_rule_is_reported(self, password, fragment):
        violations = password_policy_violations(password)
        assert any(fragment in message for message in violations)

    @pytest.mark.parametrize("otp, valid", [
        ("123456", True),
        ("12345", False),
        ("1234567", False),
        ("12a456", False),
    ])
    def test_otp_format(self, otp, valid):
        assert is_valid_otp_format(otp) is valid


class TestErrors:
    @pytest.mark.parametrize("kind, status", [
        (ErrorKind.VALIDATION, 400),
        (ErrorKind.AUTHENTICATION, 401),
        (ErrorKind.AUTHORIZATION, 403),
        (ErrorKind.NOT_FOUND, 404),
        (ErrorKind.CONFLICT, 409),
        (ErrorKind.UPSTREAM, 502),
        (ErrorKind.INTERNAL, 500),
    ])
    def test_kind_maps_to_http_status(self, kind, status):
        assert AppError(kind, "boom").status_code == status

    def test_default_code_derives_from_kind(self):
        assert AppError(ErrorKind.NOT_FOUND, "gone").code == "NOT_FOUND_ERROR"
