# tests/test_dashboard.py
from datetime import datetime, timedelta

from chess_coach.dashboard import (
    get_plan_progress, get_progress_color, get_progress_label, get_skill_breakdown,
    get_student_stats,
)
from chess_coach.plans import complete_task, create_plan, get_plan
from chess_coach.store import add_finding, add_goal, set_time_budget

START = datetime(2024, 3, 1, 9, 0)


def make_plan(db, student_id, days=2):
    add_finding(db, student_id, "Missed a knight fork", ["tactics"], "high")
    add_goal(db, student_id, "endgames", "Win K+P vs K")
    set_time_budget(db, student_id, 60, 420, {"tactics": 50, "endgames": 50})
    return create_plan(db, student_id, START, START + timedelta(days=days))


def test_progress_label():
    assert get_progress_label(85) == "ON TRACK"
    assert get_progress_label(70) == "STEADY"
    assert get_progress_label(45) == "FALLING BEHIND"
    assert get_progress_label(10) == "STALLED"


def test_progress_color():
    assert get_progress_color(90) == "green"
    assert get_progress_color(0) == "red"


def test_plan_progress_empty_plan(student_db):
    db, student_id = student_db
    set_time_budget(db, student_id, 60, 420, {"tactics": 100})
    plan_id = create_plan(db, student_id, START, START + timedelta(days=3))
    progress = get_plan_progress(db, plan_id)
    assert progress["total_tasks"] == 0
    assert progress["completion_rate"] == 0.0
    assert progress["label"] == "STALLED"


def test_plan_progress_after_completion(student_db):
    db, student_id = student_db
    plan_id = make_plan(db, student_id)
    tasks = get_plan(db, plan_id).tasks
    complete_task(db, tasks[0].id, 5, now=START)
    progress = get_plan_progress(db, plan_id)
    assert progress["total_tasks"] == 4
    assert progress["completed_tasks"] == 1
    assert progress["planned_minutes"] == 120
    assert progress["completed_minutes"] == 30
    assert progress["completion_rate"] == 25.0


def test_skill_breakdown_in_planner_order(student_db):
    db, student_id = student_db
    plan_id = make_plan(db, student_id)
    tasks = get_plan(db, plan_id).tasks
    endgame_task = next(t for t in tasks if t.skill == "endgames")
    complete_task(db, endgame_task.id, 2, now=START)
    breakdown = get_skill_breakdown(db, plan_id)
    assert [row["skill"] for row in breakdown] == ["tactics", "endgames"]
    assert breakdown[0]["avg_quality"] is None
    assert breakdown[1]["avg_quality"] == 2.0
    assert breakdown[1]["completion_rate"] == 50.0
    assert breakdown[1]["name"] == "Endgames"


def test_student_stats(student_db):
    db, student_id = student_db
    plan_id = make_plan(db, student_id)
    tasks = get_plan(db, plan_id).tasks
    complete_task(db, tasks[0].id, 4, time_spent_minutes=20, now=START)
    complete_task(db, tasks[1].id, 2, now=START)
    stats = get_student_stats(db, student_id)
    assert stats["plans"] == 1
    assert stats["findings"] == 1
    assert stats["tasks_completed"] == 2
    assert stats["minutes_practiced"] == 50
    assert stats["avg_quality"] == 3.0


def test_student_stats_empty(student_db):
    db, student_id = student_db
    stats = get_student_stats(db, student_id)
    assert stats["tasks_completed"] == 0
    assert stats["avg_quality"] == 0.0
