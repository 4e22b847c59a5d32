"""Planner configuration and persisted user settings."""
from dataclasses import dataclass

from chess_coach.db import get_connection

SAME_DAY_PLAN_KEY = "same_day_plan"


@dataclass(frozen=True)
class PlannerConfig:
    # When set, a plan whose start and end fall on the same instant gets one
    # day of tasks instead of none.
    same_day_plan_counts_as_one_day: bool = False


DEFAULT_PLANNER_CONFIG = PlannerConfig()


def get_setting(db_path: str, key: str, default: str = None) -> str | None:
    conn = get_connection(db_path)
    row = conn.execute("SELECT value FROM user_settings WHERE key = ?", (key,)).fetchone()
    conn.close()
    return row["value"] if row else default


def set_setting(db_path: str, key: str, value: str) -> None:
    conn = get_connection(db_path)
    conn.execute(
        "INSERT INTO user_settings (key, value) VALUES (?, ?) ON CONFLICT(key) DO UPDATE SET value=?",
        (key, value, value),
    )
    conn.commit()
    conn.close()


def load_planner_config(db_path: str) -> PlannerConfig:
    value = get_setting(db_path, SAME_DAY_PLAN_KEY, "0")
    return PlannerConfig(same_day_plan_counts_as_one_day=value.strip().lower() in ("1", "true", "yes", "on"))


def save_planner_config(db_path: str, config: PlannerConfig) -> None:
    set_setting(db_path, SAME_DAY_PLAN_KEY, "1" if config.same_day_plan_counts_as_one_day else "0")
