"""Practice-time distribution and daily task generation.

Turns a student's findings, goals and time budget into a percentage split
across skill categories and then into a dated list of practice tasks.
Everything here is a pure function: inputs are never mutated and no state
is kept between calls.
"""
import math
from datetime import timedelta

from loguru import logger

from chess_coach.config import DEFAULT_PLANNER_CONFIG, PlannerConfig
from chess_coach.models import SKILL_CATEGORIES, SKILL_LABELS, TrainingTask

SECONDS_PER_DAY = 86400

PRIORITY_WEIGHTS = {"high": 3, "medium": 2, "low": 1}
GOAL_WEIGHT = 2

DEFAULT_DISTRIBUTION = {
    "tactics": 30,
    "endgames": 20,
    "openings": 20,
    "calculation": 20,
    "timeManagement": 10,
}

DIFFICULTY_BY_PRIORITY = {"high": "hard", "medium": "medium", "low": "easy"}


class InvalidPlanRangeError(ValueError):
    """Raised when a plan starts after it ends."""


def round_half_up(value: float) -> int:
    """Round to the nearest integer with .5 going up (round() would go to even)."""
    return math.floor(value + 0.5)


def compute_skill_priorities(findings) -> dict:
    """Sum finding weights (high=3, medium=2, low=1) per tagged skill."""
    priorities = {skill: 0 for skill in SKILL_CATEGORIES}
    for finding in findings:
        weight = PRIORITY_WEIGHTS[finding.priority]
        for skill in finding.skill_tags:
            priorities[skill] += weight
    return priorities


def suggest_time_distribution(findings, goals) -> dict:
    """Suggest a percentage of practice time for every skill.

    Each goal adds a flat weight of 2 to its skill on top of the finding
    weights. Percentages are rounded independently, so the total can drift
    a point or two from 100. With nothing to go on, a fixed default split
    is returned.
    """
    weights = compute_skill_priorities(findings)
    for goal in goals:
        weights[goal.skill] += GOAL_WEIGHT

    total = sum(weights.values())
    if total == 0:
        return dict(DEFAULT_DISTRIBUTION)
    return {skill: round_half_up(weights[skill] / total * 100) for skill in SKILL_CATEGORIES}


def plan_length_days(start_date, end_date, config: PlannerConfig = None) -> int:
    """Number of plan days between two dates, rounded up to whole days."""
    config = config or DEFAULT_PLANNER_CONFIG
    if start_date > end_date:
        raise InvalidPlanRangeError(f"Plan start {start_date} is after end {end_date}")
    days = math.ceil((end_date - start_date).total_seconds() / SECONDS_PER_DAY)
    if days == 0 and config.same_day_plan_counts_as_one_day:
        return 1
    return days


def _share(distribution: dict, skill: str) -> float:
    share = distribution.get(skill) or 0
    return share if share > 0 else 0


def generate_training_tasks(
    plan_id,
    findings,
    goals,
    time_budget,
    start_date,
    end_date,
    config: PlannerConfig = None,
) -> list[TrainingTask]:
    """Expand a time budget over a date range into unsaved practice tasks.

    Each day, skills are visited in SKILL_CATEGORIES order and receive
    floor(daily_minutes * share / 100) minutes while the day still has time
    left. A skill only gets a task when it has a finding or a goal,
    otherwise its minutes go unused. The day's remaining time drops by the
    full allocation even when the task itself had to be shortened.
    """
    days = plan_length_days(start_date, end_date, config)
    daily_minutes = time_budget.daily_minutes

    findings_by_skill = {skill: [] for skill in SKILL_CATEGORIES}
    for finding in findings:
        for skill in finding.skill_tags:
            findings_by_skill[skill].append(finding)
    goals_by_skill = {skill: [g for g in goals if g.skill == skill] for skill in SKILL_CATEGORIES}

    tasks = []
    for day in range(days):
        current_date = start_date + timedelta(days=day)
        remaining_minutes = daily_minutes

        for skill in SKILL_CATEGORIES:
            skill_minutes = math.floor(daily_minutes * _share(time_budget.distribution, skill) / 100)
            if skill_minutes <= 0 or remaining_minutes <= 0:
                continue

            skill_findings = findings_by_skill[skill]
            skill_goals = goals_by_skill[skill]
            if not skill_findings and not skill_goals:
                continue

            # Rotate through findings so consecutive days practise different ones
            finding = skill_findings[day % len(skill_findings)] if skill_findings else None
            goal = skill_goals[0] if skill_goals else None
            description = (
                (finding.description if finding else "")
                or (goal.description if goal else "")
                or f"Practice {skill}"
            )
            difficulty = DIFFICULTY_BY_PRIORITY.get(finding.priority, "easy") if finding else "easy"

            tasks.append(TrainingTask(
                plan_id=plan_id,
                title=f"{SKILL_LABELS[skill]} Practice",
                description=description,
                skill=skill,
                duration_minutes=min(skill_minutes, remaining_minutes),
                scheduled_date=current_date,
                difficulty=difficulty,
                repetition_count=0,
            ))
            remaining_minutes -= skill_minutes

    logger.debug(f"Generated {len(tasks)} tasks for plan {plan_id} over {days} days")
    return tasks
