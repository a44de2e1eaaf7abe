"""
Unit tests for the repositories.

The Snowflake repositories run against a fake connection that records SQL
and replays canned rows, which is enough to check parameter binding, row
mapping and commit behaviour without a warehouse.
"""

from contextlib import contextmanager
from datetime import datetime, timedelta, timezone

import pytest

from vidsum.core.accounts.models import Otp, OtpType, User
from vidsum.core.videos.models import Summary, Video, VideoStatus
from vidsum.infrastructure.snowflake.repositories import (
    InMemoryOtpRepository,
    InMemoryUserRepository,
    InMemoryVideoRepository,
    SnowflakeOtpRepository,
    SnowflakeUserRepository,
    SnowflakeVideoRepository,
)
from vidsum.infrastructure.snowflake.schema import TABLES, create_schema

NOW = datetime(2024, 5, 1, 12, 0, tzinfo=timezone.utc)
NAIVE = datetime(2024, 5, 1, 12, 0)


class FakeCursor:
    def __init__(self, rows=None, error=None):
        self.rows = list(rows or [])
        self.error = error
        self.executed = []
        self.closed = False
        self.rowcount = len(self.rows)

    def execute(self, sql, params=None):
        if self.error:
            raise self.error
        self.executed.append((" ".join(sql.split()), params))

    def fetchone(self):
        return self.rows[0] if self.rows else None

    def fetchall(self):
        return self.rows

    def close(self):
        self.closed = True


class FakeConnection:
    def __init__(self, cursor: FakeCursor):
        self._cursor = cursor
        self.commits = 0

    def cursor(self):
        return self._cursor

    def commit(self):
        self.commits += 1


class FakeSource:
    def __init__(self, rows=None, error=None):
        self.cursor = FakeCursor(rows, error)
        self.connection = FakeConnection(self.cursor)

    @contextmanager
    def get_connection(self):
        yield self.connection

    @property
    def sql(self) -> str:
        return self.cursor.executed[-1][0]

    @property
    def params(self):
        return self.cursor.executed[-1][1]


def user_row(**overrides):
    row = dict(
        id="u1", email="alice@example.com", password_hash="hash",
        first_name="Alice", last_name=None, is_verified=1,
        created_at=NAIVE, updated_at=NAIVE,
    )
    row.update(overrides)
    return tuple(row.values())


def video_row(summary=False):
    base = (
        "v1", "u1", "Holiday", None, "holiday.mp4", "videos/abc-1.mp4",
        2048, "video/mp4", "READY", True, NAIVE, NAIVE,
    )
    if summary:
        return base + ("s1", "People at a beach.", NAIVE, NAIVE)
    return base + (None, None, None, None)


# ---------------------------------------------------------------------------
# Snowflake Repositories
# ---------------------------------------------------------------------------

class TestSnowflakeUserRepository:
    def test_get_by_email_normalizes_lookup(self):
        source = FakeSource(rows=[user_row()])
        user = SnowflakeUserRepository(source).get_by_email(" Alice@Example.COM ")

        assert source.params == ("alice@example.com",)
        assert user.id == "u1"
        assert user.is_verified is True
        assert user.created_at.tzinfo is timezone.utc

    def test_missing_user_is_none(self):
        assert SnowflakeUserRepository(FakeSource()).get_by_id("nope") is None

    def test_reads_do_not_commit(self):
        source = FakeSource(rows=[user_row()])
        SnowflakeUserRepository(source).get_by_id("u1")
        assert source.connection.commits == 0
        assert source.cursor.closed

    def test_save_merges_and_commits(self):
        source = FakeSource()
        user = User(id="u1", email="alice@example.com", password_hash="hash")

        SnowflakeUserRepository(source).save(user)

        assert source.sql.startswith("MERGE INTO users")
        assert source.params[0] == "u1"
        assert source.connection.commits == 1

    def test_failed_query_propagates_without_commit(self):
        source = FakeSource(error=RuntimeError("warehouse suspended"))
        user = User(email="alice@example.com", password_hash="hash")

        with pytest.raises(RuntimeError):
            SnowflakeUserRepository(source).create(user)

        assert source.connection.commits == 0
        assert source.cursor.closed


class TestSnowflakeOtpRepository:
    def test_find_valid_binds_type_and_time(self):
        row = ("o1", "u1", "123456", "PASSWORD_RESET", NAIVE + timedelta(minutes=10), NAIVE)
        source = FakeSource(rows=[row])

        otp = SnowflakeOtpRepository(source).find_valid("u1", "123456", OtpType.PASSWORD_RESET, NOW)

        assert source.params == ("u1", "123456", "PASSWORD_RESET", NOW)
        assert otp.type is OtpType.PASSWORD_RESET
        assert otp.expires_at == NOW + timedelta(minutes=10)

    def test_delete_for_user_returns_rowcount(self):
        source = FakeSource(rows=[("a",), ("b",)])
        deleted = SnowflakeOtpRepository(source).delete_for_user("u1", OtpType.VERIFICATION)

        assert deleted == 2
        assert source.params == ("u1", "VERIFICATION")
        assert source.connection.commits == 1


class TestSnowflakeVideoRepository:
    def test_get_maps_row_with_summary(self):
        source = FakeSource(rows=[video_row(summary=True)])

        video = SnowflakeVideoRepository(source).get("v1")

        assert "LEFT JOIN summaries" in source.sql
        assert video.status is VideoStatus.READY
        assert video.is_public is True
        assert video.summary.content == "People at a beach."
        assert video.summary.video_id == "v1"

    def test_get_without_summary(self):
        video = SnowflakeVideoRepository(FakeSource(rows=[video_row()])).get("v1")
        assert video.summary is None

    def test_list_excludes_deleted_newest_first(self):
        source = FakeSource(rows=[video_row()])

        videos = SnowflakeVideoRepository(source).list_for_user("u1")

        assert len(videos) == 1
        assert source.params == ("u1", "DELETED")
        assert "ORDER BY v.created_at DESC" in source.sql

    def test_save_updates_status(self):
        source = FakeSource()
        video = Video(
            id="v1", user_id="u1", title="Holiday", file_name="holiday.mp4",
            file_key="videos/abc-1.mp4", file_size=10, mime_type="video/mp4",
            status=VideoStatus.DELETED,
        )

        SnowflakeVideoRepository(source).save(video)

        assert source.sql.startswith("UPDATE videos")
        assert "DELETED" in source.params
        assert source.params[-1] == "v1"
        assert source.connection.commits == 1


class TestCreateSchema:
    def test_runs_every_ddl_and_commits(self):
        source = FakeSource()
        created = create_schema(source.connection)

        assert created == list(TABLES)
        assert len(source.cursor.executed) == len(TABLES)
        assert source.connection.commits == 1
        assert source.cursor.closed


# ---------------------------------------------------------------------------
# In-memory Repositories
# ---------------------------------------------------------------------------

class TestInMemoryRepositories:
    def test_user_copies_are_detached(self):
        users = InMemoryUserRepository()
        user = User(email="alice@example.com", password_hash="hash")
        users.create(user)

        loaded = users.get_by_id(user.id)
        loaded.first_name = "Changed"

        assert users.get_by_id(user.id).first_name is None

    def test_duplicate_user_id_is_rejected(self):
        users = InMemoryUserRepository()
        user = User(email="alice@example.com", password_hash="hash")
        users.create(user)
        with pytest.raises(ValueError):
            users.create(user)

    def test_newest_matching_otp_wins(self):
        otps = InMemoryOtpRepository()
        older = Otp.issue("u1", "123456", OtpType.VERIFICATION, NOW)
        newer = Otp.issue("u1", "123456", OtpType.VERIFICATION, NOW + timedelta(minutes=1))
        otps.create(older)
        otps.create(newer)

        found = otps.find_valid("u1", "123456", OtpType.VERIFICATION, NOW + timedelta(minutes=2))

        assert found.id == newer.id

    def test_saving_video_does_not_overwrite_summary(self):
        videos = InMemoryVideoRepository()
        video = Video(
            user_id="u1", title="Holiday", file_name="holiday.mp4",
            file_key="videos/abc-1.mp4", file_size=10, mime_type="video/mp4",
        )
        videos.create(video)
        videos.attach_summary(Summary(video_id=video.id, content="A summary"))

        loaded = videos.get(video.id)
        loaded.summary = None
        videos.save(loaded)

        assert videos.get(video.id).summary.content == "A summary"
