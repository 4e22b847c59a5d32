"""Data classes for the coaching domain model."""
from dataclasses import dataclass, field
from datetime import datetime
from typing import Optional

# Iteration order matters: the planner hands out daily minutes in this order.
SKILL_CATEGORIES = ("tactics", "endgames", "openings", "calculation", "timeManagement")

SKILL_LABELS = {
    "tactics": "Tactics",
    "endgames": "Endgames",
    "openings": "Openings",
    "calculation": "Calculation",
    "timeManagement": "Time Management",
}

PRIORITIES = ("low", "medium", "high")
DIFFICULTIES = ("easy", "medium", "hard")


def _check_skill(skill: str) -> None:
    if skill not in SKILL_CATEGORIES:
        raise ValueError(f"Unknown skill category: {skill!r}")


@dataclass
class Student:
    id: int
    name: str
    email: Optional[str] = None
    created_at: Optional[str] = None


@dataclass(frozen=True)
class Finding:
    """A weakness spotted in a student's games, tagged with the skills it touches."""
    description: str
    skill_tags: tuple
    priority: str
    id: Optional[int] = None
    report_id: Optional[int] = None
    created_at: Optional[str] = None

    def __post_init__(self):
        object.__setattr__(self, "skill_tags", tuple(self.skill_tags))
        if not self.skill_tags:
            raise ValueError("A finding needs at least one skill tag")
        for skill in self.skill_tags:
            _check_skill(skill)
        if self.priority not in PRIORITIES:
            raise ValueError(f"Unknown priority: {self.priority!r}")


@dataclass(frozen=True)
class Goal:
    skill: str
    description: str = ""
    target_value: Optional[float] = None
    current_value: Optional[float] = None
    deadline: Optional[str] = None
    id: Optional[int] = None
    student_id: Optional[int] = None

    def __post_init__(self):
        _check_skill(self.skill)


@dataclass(frozen=True)
class TimeBudget:
    """Daily/weekly minutes plus advisory percentage weights per skill."""
    daily_minutes: int
    weekly_minutes: int = 0
    distribution: dict = field(default_factory=dict)
    id: Optional[int] = None
    student_id: Optional[int] = None


@dataclass
class TrainingTask:
    plan_id: Optional[int]
    title: str
    description: str
    skill: str
    duration_minutes: int
    scheduled_date: datetime
    completed: bool = False
    completed_at: Optional[datetime] = None
    difficulty: Optional[str] = None
    repetition_count: int = 0
    next_repetition_date: Optional[datetime] = None
    id: Optional[int] = None

    def __post_init__(self):
        _check_skill(self.skill)
        if self.difficulty is not None and self.difficulty not in DIFFICULTIES:
            raise ValueError(f"Unknown difficulty: {self.difficulty!r}")


@dataclass
class TrainingPlan:
    start_date: datetime
    end_date: datetime
    time_budget: TimeBudget
    tasks: list = field(default_factory=list)
    goals: list = field(default_factory=list)
    id: Optional[int] = None
    student_id: Optional[int] = None
    report_id: Optional[int] = None
    template_id: Optional[int] = None
    created_at: Optional[str] = None


@dataclass
class Template:
    id: int
    name: str
    daily_minutes: int
    weekly_minutes: int
    distribution: dict = field(default_factory=dict)
    default_goals: list = field(default_factory=list)  # list of {"skill", "description"}
    skill_focus: list = field(default_factory=list)
    description: str = ""


@dataclass
class ProgressEntry:
    id: int
    student_id: int
    task_id: int
    date: str
    time_spent_minutes: int
    score: Optional[int] = None
    notes: Optional[str] = None
