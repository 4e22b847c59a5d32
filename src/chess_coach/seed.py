"""Seed the database with the default plan templates."""
import json
from pathlib import Path
from chess_coach.db import get_connection

CONTENT_DIR = Path(__file__).parent / "content"


def is_seeded(db_path: str) -> bool:
    """Check whether the database has already been seeded with templates."""
    conn = get_connection(db_path)
    count = conn.execute("SELECT COUNT(*) FROM templates").fetchone()[0]
    conn.close()
    return count > 0


def seed_templates(db_path: str) -> None:
    """Insert plan templates from templates.json."""
    data = json.loads((CONTENT_DIR / "templates.json").read_text())
    conn = get_connection(db_path)
    for t in data["templates"]:
        conn.execute(
            """INSERT OR IGNORE INTO templates
            (name, description, daily_minutes, weekly_minutes, distribution, default_goals, skill_focus)
            VALUES (?, ?, ?, ?, ?, ?, ?)""",
            (
                t["name"], t["description"], t["daily_minutes"], t["weekly_minutes"],
                json.dumps(t["distribution"]), json.dumps(t["default_goals"]), json.dumps(t["skill_focus"]),
            ),
        )
    conn.commit()
    conn.close()


def seed_all(db_path: str) -> None:
    """Run all seed functions in order."""
    if is_seeded(db_path):
        return
    seed_templates(db_path)
