import sqlite3

import pytest

from lofi_api.app.core.db import MIGRATIONS, Database, new_id


def _insert_song(db, title):
    with db.cursor() as cursor:
        cursor.execute(
            "INSERT INTO songs (id, title, artist, duration_seconds) VALUES (?, ?, ?, ?)",
            (new_id(), title, "Artist", 120),
        )


def test_open_applies_all_migrations(db):
    with db.cursor() as cursor:
        versions = [row["version"] for row in cursor.execute("SELECT version FROM migrations")]
    assert versions == [version for version, _ in MIGRATIONS]


def test_migrate_is_idempotent(db):
    db.migrate()
    with db.cursor() as cursor:
        count = cursor.execute("SELECT COUNT(*) AS n FROM migrations").fetchone()["n"]
    assert count == len(MIGRATIONS)


def test_file_database_survives_reopen(tmp_path):
    path = str(tmp_path / "lofi.db")
    with Database(path) as db:
        _insert_song(db, "Persisted")
    with Database(path) as db:
        assert [row["title"] for row in db.substring_search("songs", "title", "persist", 10)] == ["Persisted"]


def test_cursor_requires_open_database():
    with pytest.raises(RuntimeError):
        with Database(":memory:").cursor():
            pass


def test_cursor_rolls_back_on_error(db):
    with pytest.raises(sqlite3.IntegrityError):
        with db.cursor() as cursor:
            cursor.execute(
                "INSERT INTO songs (id, title, artist, duration_seconds) VALUES ('x', 'A', 'B', 1)"
            )
            cursor.execute(
                "INSERT INTO songs (id, title, artist, duration_seconds) VALUES ('x', 'C', 'D', 1)"
            )
    with db.cursor() as cursor:
        assert cursor.execute("SELECT COUNT(*) AS n FROM songs").fetchone()["n"] == 0


def test_nested_cursor_joins_outer_transaction(db):
    with pytest.raises(ValueError):
        with db.cursor():
            with db.cursor() as inner:
                inner.execute(
                    "INSERT INTO songs (id, title, artist, duration_seconds) VALUES ('x', 'A', 'B', 1)"
                )
            raise ValueError("abort outer")
    with db.cursor() as cursor:
        assert cursor.execute("SELECT COUNT(*) AS n FROM songs").fetchone()["n"] == 0


class TestSubstringSearch:
    def test_case_insensitive(self, db):
        _insert_song(db, "Lofi Dreams")
        _insert_song(db, "Rock Anthem")
        rows = db.substring_search("songs", "title", "LO", 10)
        assert [row["title"] for row in rows] == ["Lofi Dreams"]

    def test_folds_non_ascii(self, db):
        _insert_song(db, "ÉTÉ INDIEN")
        rows = db.substring_search("songs", "title", "été", 10)
        assert len(rows) == 1

    def test_wildcards_are_literal(self, db):
        _insert_song(db, "100% Chill")
        _insert_song(db, "Chill_Beats")
        _insert_song(db, "Chillout")
        assert [r["title"] for r in db.substring_search("songs", "title", "%", 10)] == ["100% Chill"]
        assert [r["title"] for r in db.substring_search("songs", "title", "_", 10)] == ["Chill_Beats"]

    def test_respects_limit_and_insertion_order(self, db):
        for i in range(15):
            _insert_song(db, f"Track {i:02d}")
        rows = db.substring_search("songs", "title", "track", 10)
        assert [row["title"] for row in rows] == [f"Track {i:02d}" for i in range(10)]

    def test_rejects_unknown_fields(self, db):
        with pytest.raises(ValueError):
            db.substring_search("users", "email", "a", 10)


class TestRandomSample:
    def test_returns_distinct_rows_up_to_n(self, db):
        for i in range(3):
            _insert_song(db, f"Song {i}")
        rows = db.random_sample("songs", 10)
        assert len(rows) == 3
        assert len({row["id"] for row in rows}) == 3

    def test_caps_at_n(self, db):
        for i in range(5):
            _insert_song(db, f"Song {i}")
        assert len(db.random_sample("songs", 2)) == 2

    def test_rejects_unknown_tables(self, db):
        with pytest.raises(ValueError):
            db.random_sample("users", 1)
