"""Students, reports, findings, goals and time budgets."""
import json
from datetime import datetime

from loguru import logger

from chess_coach.db import get_connection
from chess_coach.models import SKILL_CATEGORIES, Finding, Goal, Student, TimeBudget


class StudentNotFoundError(LookupError):
    pass


def _now() -> str:
    return datetime.now().isoformat()


def row_to_finding(row) -> Finding:
    return Finding(
        description=row["description"],
        skill_tags=tuple(json.loads(row["skill_tags"])),
        priority=row["priority"],
        id=row["id"],
        report_id=row["report_id"],
        created_at=row["created_at"],
    )


def row_to_goal(row) -> Goal:
    return Goal(
        skill=row["skill"],
        description=row["description"] or "",
        target_value=row["target_value"],
        current_value=row["current_value"],
        deadline=row["deadline"],
        id=row["id"],
        student_id=row["student_id"],
    )


def row_to_budget(row) -> TimeBudget:
    return TimeBudget(
        daily_minutes=row["daily_minutes"],
        weekly_minutes=row["weekly_minutes"],
        distribution=json.loads(row["distribution"]),
        id=row["id"],
        student_id=row["student_id"],
    )


# Students

def add_student(db_path: str, name: str, email: str | None = None) -> int:
    conn = get_connection(db_path)
    cur = conn.execute(
        "INSERT INTO students (name, email, created_at) VALUES (?, ?, ?)",
        (name, email, _now()),
    )
    conn.commit()
    conn.close()
    logger.info(f"Added student {cur.lastrowid} ({name})")
    return cur.lastrowid


def get_student(db_path: str, student_id: int) -> Student:
    conn = get_connection(db_path)
    row = conn.execute("SELECT * FROM students WHERE id = ?", (student_id,)).fetchone()
    conn.close()
    if row is None:
        raise StudentNotFoundError(f"No student with id {student_id}")
    return Student(id=row["id"], name=row["name"], email=row["email"], created_at=row["created_at"])


def list_students(db_path: str) -> list[Student]:
    conn = get_connection(db_path)
    rows = conn.execute("SELECT * FROM students ORDER BY name").fetchall()
    conn.close()
    return [Student(id=r["id"], name=r["name"], email=r["email"], created_at=r["created_at"]) for r in rows]


def delete_student(db_path: str, student_id: int) -> None:
    """Delete a student and, through cascades, everything they own."""
    conn = get_connection(db_path)
    conn.execute("DELETE FROM students WHERE id = ?", (student_id,))
    conn.commit()
    conn.close()
    logger.info(f"Deleted student {student_id}")


# Reports and findings

def add_report(db_path: str, student_id: int, title: str, source_file: str | None = None) -> int:
    get_student(db_path, student_id)
    conn = get_connection(db_path)
    cur = conn.execute(
        "INSERT INTO reports (student_id, title, source_file, created_at) VALUES (?, ?, ?, ?)",
        (student_id, title, source_file, _now()),
    )
    conn.commit()
    conn.close()
    return cur.lastrowid


def list_reports(db_path: str, student_id: int) -> list[dict]:
    conn = get_connection(db_path)
    rows = conn.execute(
        """SELECT r.*, COUNT(f.id) as finding_count
        FROM reports r LEFT JOIN findings f ON f.report_id = r.id
        WHERE r.student_id = ?
        GROUP BY r.id
        ORDER BY r.created_at DESC, r.id DESC""",
        (student_id,),
    ).fetchall()
    conn.close()
    return [dict(r) for r in rows]


def add_finding(
    db_path: str,
    student_id: int,
    description: str,
    skill_tags: list[str],
    priority: str,
    report_id: int | None = None,
) -> int:
    # Build the value object first so bad tags or priorities never reach the table
    finding = Finding(description=description, skill_tags=skill_tags, priority=priority)
    conn = get_connection(db_path)
    cur = conn.execute(
        """INSERT INTO findings (student_id, report_id, description, skill_tags, priority, created_at)
        VALUES (?, ?, ?, ?, ?, ?)""",
        (student_id, report_id, finding.description, json.dumps(list(finding.skill_tags)), finding.priority, _now()),
    )
    conn.commit()
    conn.close()
    return cur.lastrowid


def list_findings(db_path: str, student_id: int, report_id: int | None = None) -> list[Finding]:
    conn = get_connection(db_path)
    if report_id is None:
        rows = conn.execute(
            "SELECT * FROM findings WHERE student_id = ? ORDER BY id", (student_id,)
        ).fetchall()
    else:
        rows = conn.execute(
            "SELECT * FROM findings WHERE student_id = ? AND report_id = ? ORDER BY id",
            (student_id, report_id),
        ).fetchall()
    conn.close()
    return [row_to_finding(r) for r in rows]


def delete_finding(db_path: str, finding_id: int) -> None:
    conn = get_connection(db_path)
    conn.execute("DELETE FROM findings WHERE id = ?", (finding_id,))
    conn.commit()
    conn.close()


# Goals

def add_goal(
    db_path: str,
    student_id: int,
    skill: str,
    description: str = "",
    target_value: float | None = None,
    current_value: float | None = None,
    deadline: str | None = None,
) -> int:
    goal = Goal(skill=skill, description=description)
    now = _now()
    conn = get_connection(db_path)
    cur = conn.execute(
        """INSERT INTO goals (student_id, skill, description, target_value, current_value, deadline, created_at, updated_at)
        VALUES (?, ?, ?, ?, ?, ?, ?, ?)""",
        (student_id, goal.skill, goal.description, target_value, current_value, deadline, now, now),
    )
    conn.commit()
    conn.close()
    return cur.lastrowid


def list_goals(db_path: str, student_id: int) -> list[Goal]:
    conn = get_connection(db_path)
    rows = conn.execute("SELECT * FROM goals WHERE student_id = ? ORDER BY id", (student_id,)).fetchall()
    conn.close()
    return [row_to_goal(r) for r in rows]


def update_goal_progress(db_path: str, goal_id: int, current_value: float) -> None:
    conn = get_connection(db_path)
    conn.execute(
        "UPDATE goals SET current_value = ?, updated_at = ? WHERE id = ?",
        (current_value, _now(), goal_id),
    )
    conn.commit()
    conn.close()


def delete_goal(db_path: str, goal_id: int) -> None:
    conn = get_connection(db_path)
    conn.execute("DELETE FROM goals WHERE id = ?", (goal_id,))
    conn.commit()
    conn.close()


# Time budgets

def set_time_budget(
    db_path: str,
    student_id: int,
    daily_minutes: int,
    weekly_minutes: int,
    distribution: dict,
) -> None:
    """Store the student's budget, replacing any earlier one."""
    full = {skill: distribution.get(skill, 0) for skill in SKILL_CATEGORIES}
    conn = get_connection(db_path)
    conn.execute(
        """INSERT INTO time_budgets (student_id, daily_minutes, weekly_minutes, distribution)
        VALUES (?, ?, ?, ?)
        ON CONFLICT(student_id) DO UPDATE SET
            daily_minutes=excluded.daily_minutes,
            weekly_minutes=excluded.weekly_minutes,
            distribution=excluded.distribution""",
        (student_id, daily_minutes, weekly_minutes, json.dumps(full)),
    )
    conn.commit()
    conn.close()
    total = sum(full.values())
    if total != 100:
        logger.info(f"Time budget for student {student_id} sums to {total}%, not 100%")


def get_time_budget(db_path: str, student_id: int) -> TimeBudget | None:
    conn = get_connection(db_path)
    row = conn.execute("SELECT * FROM time_budgets WHERE student_id = ?", (student_id,)).fetchone()
    conn.close()
    return row_to_budget(row) if row else None
