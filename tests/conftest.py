import pytest

from chess_coach.db import init_db
from chess_coach.store import add_student


@pytest.fixture
def tmp_db(tmp_path):
    """Provide a temporary SQLite database path for tests."""
    db_path = str(tmp_path / "test_coach.db")
    return db_path


@pytest.fixture
def student_db(tmp_db):
    """An initialized database with one student. Yields (db_path, student_id)."""
    init_db(tmp_db)
    student_id = add_student(tmp_db, "Judit", "judit@example.com")
    return tmp_db, student_id
