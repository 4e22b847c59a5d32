"""Weak skill identification from findings and practice results."""
from chess_coach.db import get_connection
from chess_coach.models import SKILL_CATEGORIES, SKILL_LABELS
from chess_coach.planner import compute_skill_priorities
from chess_coach.store import list_findings


def get_focus_skills(db_path: str, student_id: int) -> list[dict]:
    """Skills with findings, heaviest weight first (ties keep planner order)."""
    priorities = compute_skill_priorities(list_findings(db_path, student_id))
    ranked = sorted(
        (skill for skill in SKILL_CATEGORIES if priorities[skill] > 0),
        key=lambda s: -priorities[s],
    )
    return [{"skill": s, "name": SKILL_LABELS[s], "weight": priorities[s]} for s in ranked]


def get_struggling_skills(db_path: str, student_id: int, threshold: float = 3.0) -> list[dict]:
    """Get skills whose average review quality is below threshold (worst first)."""
    conn = get_connection(db_path)
    rows = conn.execute(
        """SELECT t.skill, COUNT(*) as reviews, AVG(e.score) as avg_quality
        FROM progress_entries e
        JOIN training_tasks t ON e.task_id = t.id
        WHERE e.student_id = ? AND e.score IS NOT NULL
        GROUP BY t.skill
        HAVING AVG(e.score) < ?
        ORDER BY AVG(e.score) ASC""",
        (student_id, threshold),
    ).fetchall()
    conn.close()
    return [
        {
            "skill": r["skill"],
            "name": SKILL_LABELS[r["skill"]],
            "reviews": r["reviews"],
            "avg_quality": round(r["avg_quality"], 1),
        }
        for r in rows
    ]
