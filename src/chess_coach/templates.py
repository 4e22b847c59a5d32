"""Plan templates: reusable budgets and goal sets."""
import json

from loguru import logger

from chess_coach.db import get_connection
from chess_coach.models import Template
from chess_coach.store import add_goal, get_student, set_time_budget


class TemplateNotFoundError(LookupError):
    pass


def _row_to_template(row) -> Template:
    return Template(
        id=row["id"],
        name=row["name"],
        description=row["description"] or "",
        daily_minutes=row["daily_minutes"],
        weekly_minutes=row["weekly_minutes"],
        distribution=json.loads(row["distribution"]),
        default_goals=json.loads(row["default_goals"]),
        skill_focus=json.loads(row["skill_focus"]),
    )


def list_templates(db_path: str) -> list[Template]:
    conn = get_connection(db_path)
    rows = conn.execute("SELECT * FROM templates ORDER BY id").fetchall()
    conn.close()
    return [_row_to_template(r) for r in rows]


def get_template(db_path: str, template_id: int) -> Template:
    conn = get_connection(db_path)
    row = conn.execute("SELECT * FROM templates WHERE id = ?", (template_id,)).fetchone()
    conn.close()
    if row is None:
        raise TemplateNotFoundError(f"No template with id {template_id}")
    return _row_to_template(row)


def apply_template(db_path: str, template_id: int, student_id: int) -> Template:
    """Give a student the template's time budget and add its default goals."""
    template = get_template(db_path, template_id)
    get_student(db_path, student_id)
    set_time_budget(
        db_path, student_id, template.daily_minutes, template.weekly_minutes, template.distribution,
    )
    for goal in template.default_goals:
        add_goal(db_path, student_id, goal["skill"], goal.get("description", ""))
    logger.info(f"Applied template '{template.name}' to student {student_id}")
    return template
