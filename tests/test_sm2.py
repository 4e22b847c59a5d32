# tests/test_sm2.py
from dataclasses import replace
from datetime import datetime, timedelta, timezone

import pytest

from chess_coach.models import TrainingTask
from chess_coach.sm2 import (
    calculate_next_repetition, easiness_factor, generate_spaced_repetition_schedule,
)

NOW = datetime(2024, 5, 10, 18, 30)
SCHEDULED = datetime(2024, 5, 1, 9, 0)


def make_task(repetition_count=0, next_repetition_date=None):
    return TrainingTask(
        plan_id=1, title="Tactics Practice", description="Missed a fork", skill="tactics",
        duration_minutes=30, scheduled_date=SCHEDULED, difficulty="hard",
        repetition_count=repetition_count, next_repetition_date=next_repetition_date, id=7,
    )


def test_easiness_factor_perfect():
    assert easiness_factor(5) == pytest.approx(2.6)


def test_easiness_factor_zero_quality():
    """Starting from 2.5, quality 0 only drops to 1.7."""
    assert easiness_factor(0) == pytest.approx(1.7)


def test_easiness_factor_clamps_to_minimum():
    assert easiness_factor(-2) == 1.3
    assert easiness_factor(-10) == 1.3


def test_first_repetition_is_one_day():
    for quality in (-3, 0, 3, 5, 9):
        assert calculate_next_repetition(make_task(0), quality, now=NOW) == NOW + timedelta(days=1)


def test_second_repetition_is_six_days():
    for quality in (0, 2, 5):
        assert calculate_next_repetition(make_task(1), quality, now=NOW) == NOW + timedelta(days=6)


def test_later_repetition_defaults_previous_interval_to_six():
    assert calculate_next_repetition(make_task(2), 5, now=NOW) == NOW + timedelta(days=16)  # 6 * 2.6
    assert calculate_next_repetition(make_task(2), 3, now=NOW) == NOW + timedelta(days=14)  # 6 * 2.36


def test_later_repetition_uses_previous_gap():
    task = make_task(3, next_repetition_date=SCHEDULED + timedelta(days=10))
    assert calculate_next_repetition(task, 5, now=NOW) == NOW + timedelta(days=26)


def test_previous_gap_is_at_least_one_day():
    task = make_task(2, next_repetition_date=SCHEDULED + timedelta(hours=3))
    assert calculate_next_repetition(task, 5, now=NOW) == NOW + timedelta(days=3)  # round(2.6)
    task = make_task(2, next_repetition_date=SCHEDULED - timedelta(days=4))
    assert calculate_next_repetition(task, 5, now=NOW) == NOW + timedelta(days=3)


def test_interval_ignores_scheduled_date_relative_to_now():
    """The result is anchored on now, not on when the task was scheduled."""
    task = make_task(2)
    later = NOW + timedelta(days=100)
    assert calculate_next_repetition(task, 5, now=later) - later == timedelta(days=16)


def test_out_of_range_quality_does_not_crash():
    result = calculate_next_repetition(make_task(4), 42, now=NOW)
    assert isinstance(result, datetime)


def test_defaults_to_wall_clock_now():
    before = datetime.now()
    result = calculate_next_repetition(make_task(0), 4)
    after = datetime.now()
    assert before + timedelta(days=1) <= result <= after + timedelta(days=1)


def test_task_is_not_mutated():
    task = make_task(2)
    calculate_next_repetition(task, 5, now=NOW)
    assert task.repetition_count == 2
    assert task.next_repetition_date is None


def test_ladder_offsets():
    start = datetime(2024, 1, 1, 8, 0)
    schedule = generate_spaced_repetition_schedule(make_task(), start, 7)
    offsets = [(t.scheduled_date - start).days for t in schedule]
    assert offsets == [0, 1, 4, 11, 25, 55, 85]
    assert [t.repetition_count for t in schedule] == list(range(7))
    assert all(t.next_repetition_date is None and t.id is None for t in schedule)
    assert all(t.description == "Missed a fork" and t.duration_minutes == 30 for t in schedule)


def test_ladder_clears_inherited_next_repetition_date():
    base = make_task(3, next_repetition_date=SCHEDULED + timedelta(days=9))
    schedule = generate_spaced_repetition_schedule(base, SCHEDULED, 2)
    assert all(t.next_repetition_date is None for t in schedule)
    assert base.next_repetition_date == SCHEDULED + timedelta(days=9)


def test_ladder_zero_or_negative_repetitions():
    assert generate_spaced_repetition_schedule(make_task(), NOW, 0) == []
    assert generate_spaced_repetition_schedule(make_task(), NOW, -3) == []


def test_aware_task_dates_default_to_aware_now():
    aware = SCHEDULED.replace(tzinfo=timezone.utc)
    task = replace(make_task(2, next_repetition_date=aware + timedelta(days=10)), scheduled_date=aware)
    result = calculate_next_repetition(task, 5)
    assert result.tzinfo is not None
    assert result - datetime.now(timezone.utc) > timedelta(days=25)
