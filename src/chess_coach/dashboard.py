"""Plan progress scoring and statistics."""
from chess_coach.db import get_connection
from chess_coach.models import SKILL_CATEGORIES, SKILL_LABELS


def get_progress_label(rate: float) -> str:
    if rate >= 80:
        return "ON TRACK"
    elif rate >= 60:
        return "STEADY"
    elif rate >= 40:
        return "FALLING BEHIND"
    return "STALLED"


def get_progress_color(rate: float) -> str:
    if rate >= 80:
        return "green"
    elif rate >= 60:
        return "yellow"
    elif rate >= 40:
        return "dark_orange"
    return "red"


def get_plan_progress(db_path: str, plan_id: int) -> dict:
    conn = get_connection(db_path)
    row = conn.execute(
        """SELECT COUNT(*) as total,
            COALESCE(SUM(completed), 0) as done,
            COALESCE(SUM(duration_minutes), 0) as planned,
            COALESCE(SUM(CASE WHEN completed = 1 THEN duration_minutes ELSE 0 END), 0) as done_minutes
        FROM training_tasks WHERE plan_id = ?""",
        (plan_id,),
    ).fetchone()
    conn.close()
    rate = (row["done"] / row["total"] * 100) if row["total"] else 0.0
    return {
        "total_tasks": row["total"],
        "completed_tasks": row["done"],
        "planned_minutes": row["planned"],
        "completed_minutes": row["done_minutes"],
        "completion_rate": round(rate, 1),
        "label": get_progress_label(rate),
    }


def get_skill_breakdown(db_path: str, plan_id: int) -> list[dict]:
    """Per-skill task counts, minutes and average quality, in planner order."""
    conn = get_connection(db_path)
    rows = conn.execute(
        """SELECT skill, COUNT(*) as total,
            COALESCE(SUM(completed), 0) as done,
            COALESCE(SUM(duration_minutes), 0) as minutes,
            AVG(quality) as avg_quality
        FROM training_tasks WHERE plan_id = ?
        GROUP BY skill""",
        (plan_id,),
    ).fetchall()
    conn.close()
    by_skill = {r["skill"]: r for r in rows}
    results = []
    for skill in SKILL_CATEGORIES:
        r = by_skill.get(skill)
        if r is None:
            continue
        rate = r["done"] / r["total"] * 100
        results.append({
            "skill": skill,
            "name": SKILL_LABELS[skill],
            "total_tasks": r["total"],
            "completed_tasks": r["done"],
            "minutes": r["minutes"],
            "avg_quality": round(r["avg_quality"], 1) if r["avg_quality"] is not None else None,
            "completion_rate": round(rate, 1),
            "label": get_progress_label(rate),
        })
    return results


def get_student_stats(db_path: str, student_id: int) -> dict:
    conn = get_connection(db_path)
    plans = conn.execute(
        "SELECT COUNT(*) FROM training_plans WHERE student_id = ?", (student_id,)
    ).fetchone()[0]
    row = conn.execute(
        """SELECT COUNT(*) as sessions,
            COALESCE(SUM(time_spent_minutes), 0) as minutes,
            AVG(score) as avg_score
        FROM progress_entries WHERE student_id = ?""",
        (student_id,),
    ).fetchone()
    findings = conn.execute(
        "SELECT COUNT(*) FROM findings WHERE student_id = ?", (student_id,)
    ).fetchone()[0]
    conn.close()
    return {
        "plans": plans,
        "findings": findings,
        "tasks_completed": row["sessions"],
        "minutes_practiced": row["minutes"],
        "avg_quality": round(row["avg_score"], 1) if row["avg_score"] is not None else 0.0,
    }
