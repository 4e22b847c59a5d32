"""Training plan persistence, task completion and repetition follow-ups."""
import json
from dataclasses import asdict, replace
from datetime import date, datetime, time

from loguru import logger

from chess_coach.config import PlannerConfig, load_planner_config
from chess_coach.db import get_connection
from chess_coach.models import Goal, TimeBudget, TrainingPlan, TrainingTask
from chess_coach.planner import generate_training_tasks
from chess_coach.sm2 import calculate_next_repetition, generate_spaced_repetition_schedule
from chess_coach.store import get_student, get_time_budget, list_findings, list_goals


class TaskNotFoundError(LookupError):
    pass


def _as_datetime(value) -> datetime:
    """Coerce a date, datetime or ISO string to a naive local datetime."""
    if isinstance(value, str):
        value = datetime.fromisoformat(value)
    if isinstance(value, datetime):
        if value.tzinfo is not None:
            return value.astimezone().replace(tzinfo=None)
        return value
    return datetime.combine(value, time())


def _parse(value: str | None) -> datetime | None:
    return datetime.fromisoformat(value) if value else None


def _iso(value: datetime | None) -> str | None:
    return value.isoformat() if value else None


def row_to_task(row) -> TrainingTask:
    return TrainingTask(
        plan_id=row["plan_id"],
        title=row["title"],
        description=row["description"] or "",
        skill=row["skill"],
        duration_minutes=row["duration_minutes"],
        scheduled_date=_parse(row["scheduled_date"]),
        completed=bool(row["completed"]),
        completed_at=_parse(row["completed_at"]),
        difficulty=row["difficulty"],
        repetition_count=row["repetition_count"],
        next_repetition_date=_parse(row["next_repetition_date"]),
        id=row["id"],
    )


def _insert_task(conn, plan_id: int, task: TrainingTask) -> int:
    cur = conn.execute(
        """INSERT INTO training_tasks
        (plan_id, title, description, skill, duration_minutes, scheduled_date, completed,
         completed_at, difficulty, repetition_count, next_repetition_date)
        VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)""",
        (
            plan_id, task.title, task.description, task.skill, task.duration_minutes,
            _iso(task.scheduled_date), int(task.completed), _iso(task.completed_at),
            task.difficulty, task.repetition_count, _iso(task.next_repetition_date),
        ),
    )
    return cur.lastrowid


def create_plan(
    db_path: str,
    student_id: int,
    start_date,
    end_date,
    report_id: int | None = None,
    template_id: int | None = None,
    config: PlannerConfig | None = None,
) -> int:
    """Generate and store a training plan for a student. Returns the plan id.

    Findings are limited to one report when report_id is given. The goals
    and time budget used are stored with the plan so later edits to the
    student's records don't change what the plan was built from.
    """
    get_student(db_path, student_id)
    budget = get_time_budget(db_path, student_id)
    if budget is None:
        raise ValueError(f"Student {student_id} has no time budget set")
    findings = list_findings(db_path, student_id, report_id=report_id)
    goals = list_goals(db_path, student_id)
    config = config or load_planner_config(db_path)
    start_date, end_date = _as_datetime(start_date), _as_datetime(end_date)

    # Generated before the insert so an invalid range leaves nothing behind
    tasks = generate_training_tasks(None, findings, goals, budget, start_date, end_date, config)

    conn = get_connection(db_path)
    cur = conn.execute(
        """INSERT INTO training_plans
        (student_id, report_id, template_id, start_date, end_date, goals_snapshot, budget_snapshot, created_at)
        VALUES (?, ?, ?, ?, ?, ?, ?, ?)""",
        (
            student_id, report_id, template_id, start_date.isoformat(), end_date.isoformat(),
            json.dumps([asdict(g) for g in goals]), json.dumps(asdict(budget)),
            datetime.now().isoformat(),
        ),
    )
    plan_id = cur.lastrowid
    for task in tasks:
        _insert_task(conn, plan_id, task)
    conn.commit()
    conn.close()
    logger.info(f"Created plan {plan_id} for student {student_id} with {len(tasks)} tasks")
    return plan_id


def get_plan(db_path: str, plan_id: int) -> TrainingPlan | None:
    conn = get_connection(db_path)
    row = conn.execute("SELECT * FROM training_plans WHERE id = ?", (plan_id,)).fetchone()
    if row is None:
        conn.close()
        return None
    task_rows = conn.execute(
        "SELECT * FROM training_tasks WHERE plan_id = ? ORDER BY scheduled_date, id", (plan_id,)
    ).fetchall()
    conn.close()
    return TrainingPlan(
        start_date=_parse(row["start_date"]),
        end_date=_parse(row["end_date"]),
        time_budget=TimeBudget(**json.loads(row["budget_snapshot"])),
        tasks=[row_to_task(r) for r in task_rows],
        goals=[Goal(**g) for g in json.loads(row["goals_snapshot"])],
        id=row["id"],
        student_id=row["student_id"],
        report_id=row["report_id"],
        template_id=row["template_id"],
        created_at=row["created_at"],
    )


def list_plans(db_path: str, student_id: int) -> list[dict]:
    conn = get_connection(db_path)
    rows = conn.execute(
        """SELECT p.id, p.start_date, p.end_date, p.created_at,
            COUNT(t.id) as total_tasks,
            COALESCE(SUM(t.completed), 0) as completed_tasks
        FROM training_plans p
        LEFT JOIN training_tasks t ON t.plan_id = p.id
        WHERE p.student_id = ?
        GROUP BY p.id
        ORDER BY p.start_date DESC, p.id DESC""",
        (student_id,),
    ).fetchall()
    conn.close()
    return [dict(r) for r in rows]


def delete_plan(db_path: str, plan_id: int) -> None:
    conn = get_connection(db_path)
    conn.execute("DELETE FROM training_plans WHERE id = ?", (plan_id,))
    conn.commit()
    conn.close()


def get_task(db_path: str, task_id: int) -> TrainingTask:
    conn = get_connection(db_path)
    row = conn.execute("SELECT * FROM training_tasks WHERE id = ?", (task_id,)).fetchone()
    conn.close()
    if row is None:
        raise TaskNotFoundError(f"No task with id {task_id}")
    return row_to_task(row)


def get_tasks_for_date(db_path: str, student_id: int, on_date: date) -> list[TrainingTask]:
    conn = get_connection(db_path)
    rows = conn.execute(
        """SELECT t.* FROM training_tasks t
        JOIN training_plans p ON t.plan_id = p.id
        WHERE p.student_id = ? AND substr(t.scheduled_date, 1, 10) = ?
        ORDER BY t.scheduled_date, t.id""",
        (student_id, on_date.isoformat()),
    ).fetchall()
    conn.close()
    return [row_to_task(r) for r in rows]


def complete_task(
    db_path: str,
    task_id: int,
    quality: int,
    time_spent_minutes: int | None = None,
    notes: str | None = None,
    now: datetime | None = None,
) -> TrainingTask:
    """Mark a task done and schedule its next repetition.

    The next repetition date comes from calculate_next_repetition on the task
    as it was before this review; the repetition count is then bumped and a
    progress entry recorded. A follow-up task that has not been reviewed yet
    takes its previous interval from the task it follows. Returns the
    updated task.
    """
    now = _as_datetime(now) if now else datetime.now()
    conn = get_connection(db_path)
    row = conn.execute(
        """SELECT t.*, p.student_id FROM training_tasks t
        JOIN training_plans p ON t.plan_id = p.id
        WHERE t.id = ?""",
        (task_id,),
    ).fetchone()
    if row is None:
        conn.close()
        raise TaskNotFoundError(f"No task with id {task_id}")
    task = row_to_task(row)
    if task.next_repetition_date is None:
        parent = conn.execute(
            "SELECT scheduled_date, next_repetition_date FROM training_tasks WHERE follow_up_task_id = ?",
            (task_id,),
        ).fetchone()
        if parent is not None:
            gap = _parse(parent["next_repetition_date"]) - _parse(parent["scheduled_date"])
            task = replace(task, next_repetition_date=task.scheduled_date + gap)

    next_date = calculate_next_repetition(task, quality, now=now)
    updated = replace(
        task,
        completed=True,
        completed_at=now,
        repetition_count=task.repetition_count + 1,
        next_repetition_date=next_date,
    )
    conn.execute(
        """UPDATE training_tasks
        SET completed = 1, completed_at = ?, repetition_count = ?, next_repetition_date = ?, quality = ?
        WHERE id = ?""",
        (_iso(now), updated.repetition_count, _iso(next_date), quality, task_id),
    )
    conn.execute(
        """INSERT INTO progress_entries (student_id, task_id, date, score, notes, time_spent_minutes)
        VALUES (?, ?, ?, ?, ?, ?)""",
        (
            row["student_id"], task_id, _iso(now), quality, notes,
            time_spent_minutes if time_spent_minutes is not None else task.duration_minutes,
        ),
    )
    conn.commit()
    conn.close()
    logger.info(f"Completed task {task_id} with quality {quality}; next repetition {next_date.date()}")
    return updated


def get_due_repetitions(db_path: str, student_id: int, on_date: date) -> list[TrainingTask]:
    """Completed tasks whose next repetition is due and has no follow-up task yet."""
    conn = get_connection(db_path)
    rows = conn.execute(
        """SELECT t.* FROM training_tasks t
        JOIN training_plans p ON t.plan_id = p.id
        WHERE p.student_id = ?
            AND t.completed = 1
            AND t.next_repetition_date IS NOT NULL
            AND t.follow_up_task_id IS NULL
            AND substr(t.next_repetition_date, 1, 10) <= ?
        ORDER BY t.next_repetition_date, t.id""",
        (student_id, on_date.isoformat()),
    ).fetchall()
    conn.close()
    return [row_to_task(r) for r in rows]


def schedule_follow_up(db_path: str, task_id: int) -> int:
    """Create the follow-up task for a reviewed task on its next repetition date.

    The follow-up keeps the repetition count and starts with no next
    repetition date of its own; complete_task reads the interval from this
    task instead. Calling this twice returns the same task.
    """
    conn = get_connection(db_path)
    row = conn.execute("SELECT * FROM training_tasks WHERE id = ?", (task_id,)).fetchone()
    if row is None:
        conn.close()
        raise TaskNotFoundError(f"No task with id {task_id}")
    if row["follow_up_task_id"] is not None:
        conn.close()
        return row["follow_up_task_id"]
    task = row_to_task(row)
    if task.next_repetition_date is None:
        conn.close()
        raise ValueError(f"Task {task_id} has no next repetition date; complete it first")

    follow_up = replace(
        task,
        id=None,
        scheduled_date=task.next_repetition_date,
        completed=False,
        completed_at=None,
        next_repetition_date=None,
    )
    follow_up_id = _insert_task(conn, task.plan_id, follow_up)
    conn.execute("UPDATE training_tasks SET follow_up_task_id = ? WHERE id = ?", (follow_up_id, task_id))
    conn.commit()
    conn.close()
    logger.info(f"Scheduled follow-up task {follow_up_id} for task {task_id} on {follow_up.scheduled_date.date()}")
    return follow_up_id


def add_repetition_ladder(db_path: str, task_id: int, repetitions: int) -> list[int]:
    """Seed fixed-ladder repetitions of a task into its plan.

    The task itself counts as repetition 0, so repetitions=5 adds four new
    tasks at +1, +4, +11 and +25 days from its scheduled date.
    """
    task = get_task(db_path, task_id)
    template = replace(task, completed=False, completed_at=None)
    schedule = generate_spaced_repetition_schedule(template, task.scheduled_date, repetitions)

    conn = get_connection(db_path)
    ids = [_insert_task(conn, task.plan_id, copy) for copy in schedule[1:]]
    conn.commit()
    conn.close()
    logger.info(f"Added {len(ids)} ladder repetitions for task {task_id}")
    return ids
