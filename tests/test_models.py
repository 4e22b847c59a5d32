"""Tests for data model classes."""
from dataclasses import FrozenInstanceError
from datetime import datetime

import pytest

from chess_coach.models import (
    Finding, Goal, TimeBudget, TrainingTask, TrainingPlan, Template, ProgressEntry, Student,
    SKILL_CATEGORIES, SKILL_LABELS,
)


def test_skill_categories_order():
    assert SKILL_CATEGORIES == ("tactics", "endgames", "openings", "calculation", "timeManagement")
    assert set(SKILL_LABELS) == set(SKILL_CATEGORIES)


def test_finding_creation():
    f = Finding(description="Missed a fork", skill_tags=["tactics"], priority="high")
    assert f.skill_tags == ("tactics",)
    assert f.id is None
    assert f.report_id is None


def test_finding_is_immutable():
    f = Finding("Missed a fork", ["tactics"], "high")
    with pytest.raises(FrozenInstanceError):
        f.priority = "low"


def test_finding_requires_tags():
    with pytest.raises(ValueError):
        Finding("No tags", [], "high")


def test_finding_rejects_unknown_tag():
    with pytest.raises(ValueError):
        Finding("Bad tag", ["strategy"], "high")


def test_finding_rejects_unknown_priority():
    with pytest.raises(ValueError):
        Finding("Bad priority", ["tactics"], "urgent")


def test_goal_defaults():
    g = Goal(skill="endgames")
    assert g.description == ""
    assert g.target_value is None
    assert g.deadline is None


def test_goal_rejects_unknown_skill():
    with pytest.raises(ValueError):
        Goal(skill="time_management")


def test_time_budget_defaults():
    tb = TimeBudget(daily_minutes=30)
    assert tb.weekly_minutes == 0
    assert tb.distribution == {}


def test_training_task_defaults():
    t = TrainingTask(
        plan_id=1, title="Tactics Practice", description="Puzzles", skill="tactics",
        duration_minutes=20, scheduled_date=datetime(2024, 1, 1),
    )
    assert t.completed is False
    assert t.completed_at is None
    assert t.difficulty is None
    assert t.repetition_count == 0
    assert t.next_repetition_date is None
    assert t.id is None


def test_training_task_rejects_unknown_difficulty():
    with pytest.raises(ValueError):
        TrainingTask(
            plan_id=1, title="t", description="d", skill="tactics", duration_minutes=5,
            scheduled_date=datetime(2024, 1, 1), difficulty="brutal",
        )


def test_training_plan_defaults():
    p = TrainingPlan(start_date=datetime(2024, 1, 1), end_date=datetime(2024, 1, 8), time_budget=TimeBudget(60))
    assert p.tasks == []
    assert p.goals == []
    assert p.id is None


def test_template_and_progress_entry():
    t = Template(id=1, name="Bootcamp", daily_minutes=45, weekly_minutes=300)
    assert t.default_goals == []
    assert t.description == ""
    e = ProgressEntry(id=1, student_id=1, task_id=2, date="2024-01-01", time_spent_minutes=20)
    assert e.score is None
    s = Student(id=1, name="Magnus")
    assert s.email is None
