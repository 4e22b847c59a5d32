"""SM-2 style spaced repetition for practice tasks."""
import math
from dataclasses import replace
from datetime import datetime, timedelta

from loguru import logger

from chess_coach.planner import SECONDS_PER_DAY, round_half_up

BASE_EASE_FACTOR = 2.5
MIN_EASE_FACTOR = 1.3
DEFAULT_PREVIOUS_INTERVAL = 6

# Fixed gaps (days) between seeded repetitions; the last one repeats.
REPETITION_LADDER = [1, 3, 7, 14, 30]


def easiness_factor(quality: int) -> float:
    """Ease factor for a 0-5 quality rating, floored at 1.3.

    Always starts from the base ease of 2.5 rather than a stored per-task
    value. Out-of-range ratings are not rejected.
    """
    penalty = 5 - quality
    return max(MIN_EASE_FACTOR, BASE_EASE_FACTOR + (0.1 - penalty * (0.08 + penalty * 0.02)))


def calculate_next_repetition(task, quality: int, now: datetime = None) -> datetime:
    """Calculate when a task should come back after a review.

    Args:
        task: The reviewed task; only repetition_count, scheduled_date and
            next_repetition_date are read.
        quality: Rating 0-5 (0=complete blackout, 5=perfect)
        now: Reference time, defaults to the current wall-clock time in the
            task's timezone (naive when the task's dates are naive).

    Returns:
        now plus 1 day on the first repetition, 6 days on the second, and
        afterwards the previous interval scaled by the ease factor.
    """
    now = now or datetime.now(getattr(task.scheduled_date, "tzinfo", None))

    if task.repetition_count == 0:
        interval = 1
    elif task.repetition_count == 1:
        interval = 6
    else:
        if task.next_repetition_date is not None:
            gap = task.next_repetition_date - task.scheduled_date
            previous_interval = max(1, math.floor(gap.total_seconds() / SECONDS_PER_DAY))
        else:
            previous_interval = DEFAULT_PREVIOUS_INTERVAL
        interval = round_half_up(previous_interval * easiness_factor(quality))

    logger.debug(
        f"Task {task.id}: repetition {task.repetition_count}, quality {quality} -> {interval} day interval"
    )
    return now + timedelta(days=interval)


def generate_spaced_repetition_schedule(base_task, start_date, repetitions: int) -> list:
    """Copy a task onto the fixed 1/3/7/14/30-day ladder starting at start_date.

    Copies are unsaved (id None), numbered by repetition_count, and have no
    next_repetition_date.
    """
    tasks = []
    current_date = start_date
    for i in range(repetitions):
        tasks.append(replace(
            base_task,
            id=None,
            scheduled_date=current_date,
            repetition_count=i,
            next_repetition_date=None,
        ))
        current_date = current_date + timedelta(days=REPETITION_LADDER[min(i, len(REPETITION_LADDER) - 1)])
    return tasks
