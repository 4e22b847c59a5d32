"""Import analysis findings from JSON or YAML files."""
import json
from pathlib import Path

import yaml
from loguru import logger

from chess_coach.models import PRIORITIES, SKILL_CATEGORIES
from chess_coach.store import add_finding, add_report

SKILL_ALIASES = {
    "tactic": "tactics",
    "tactics": "tactics",
    "endgame": "endgames",
    "endgames": "endgames",
    "opening": "openings",
    "openings": "openings",
    "calculation": "calculation",
    "calc": "calculation",
    "timemanagement": "timeManagement",
    "time_management": "timeManagement",
    "time management": "timeManagement",
    "time-management": "timeManagement",
    "time": "timeManagement",
    "clock": "timeManagement",
}

# Keyword mapping for guessing skills from a finding's description
SKILL_KEYWORDS = {
    "tactics": ["fork", "pin", "skewer", "discovered", "hanging", "blunder", "combination", "sacrifice", "tactic", "missed mate"],
    "endgames": ["endgame", "ending", "king and pawn", "rook ending", "opposition", "promotion", "passed pawn", "lucena", "philidor"],
    "openings": ["opening", "repertoire", "gambit", "development", "castl", "theory", "sicilian", "fianchetto"],
    "calculation": ["calculat", "variation", "visualiz", "candidate move", "forcing line", "miscalculat", "deep line"],
    "timeManagement": ["time trouble", "clock", "flag", "time pressure", "zeitnot", "increment", "ran out of time", "too long"],
}


def read_findings_file(file_path: str):
    path = Path(file_path)
    suffix = path.suffix.lower()

    if suffix == ".json":
        return json.loads(path.read_text())
    elif suffix in (".yaml", ".yml"):
        return yaml.safe_load(path.read_text())
    else:
        raise ValueError(f"Unsupported findings file type: {suffix or path.name}")


def normalize_skill(name: str) -> str | None:
    key = name.strip().lower()
    if key in SKILL_ALIASES:
        return SKILL_ALIASES[key]
    return name if name in SKILL_CATEGORIES else None


def categorize_description(text: str) -> list[str]:
    """Guess skill tags from keywords in a description. Returns [] when nothing matches."""
    text_lower = text.lower()
    return [
        skill for skill in SKILL_CATEGORIES
        if any(kw in text_lower for kw in SKILL_KEYWORDS[skill])
    ]


def parse_findings(data) -> tuple[str | None, list[dict]]:
    """Validate raw file data into (title, findings).

    Accepts either {"title": ..., "findings": [...]} or a bare list of
    findings. Each finding needs a description; skills come from "skills" or
    "skill_tags" and are guessed from the description when missing.
    """
    if isinstance(data, dict):
        title = data.get("title")
        items = data.get("findings", [])
    elif isinstance(data, list):
        title, items = None, data
    else:
        raise ValueError("Findings file must contain a mapping or a list")
    if not isinstance(items, list):
        raise ValueError("'findings' must be a list")

    parsed = []
    for i, item in enumerate(items, 1):
        if not isinstance(item, dict):
            raise ValueError(f"Finding {i} must be a mapping")
        description = item.get("description")
        if description is not None and not isinstance(description, str):
            raise ValueError(f"Finding {i} description must be text, got {description!r}")
        description = (description or "").strip()
        if not description:
            raise ValueError(f"Finding {i} has no description")

        priority = str(item.get("priority", "medium")).strip().lower()
        if priority not in PRIORITIES:
            raise ValueError(f"Finding {i} has unknown priority {priority!r}")

        raw_skills = item.get("skills") or item.get("skill_tags") or []
        if isinstance(raw_skills, str):
            raw_skills = [raw_skills]
        if not isinstance(raw_skills, list):
            raise ValueError(f"Finding {i} skills must be a list or a single name")
        skills = []
        for raw in raw_skills:
            if not isinstance(raw, str):
                raise ValueError(f"Finding {i} has a non-text skill {raw!r}")
            skill = normalize_skill(raw)
            if skill is None:
                logger.warning(f"Finding {i}: ignoring unknown skill {raw!r}")
            elif skill not in skills:
                skills.append(skill)
        if not skills:
            skills = categorize_description(description)
            if not skills:
                raise ValueError(f"Finding {i} has no recognisable skill: {description!r}")
            logger.info(f"Finding {i}: guessed skills {skills} from description")

        parsed.append({"description": description, "skill_tags": skills, "priority": priority})
    return title, parsed


def import_findings(db_path: str, student_id: int, file_path: str, title: str | None = None) -> dict:
    """Import a findings file as a new report for the student."""
    file_title, findings = parse_findings(read_findings_file(file_path))
    name = Path(file_path).name
    report_id = add_report(db_path, student_id, title or file_title or name, source_file=name)
    for f in findings:
        add_finding(db_path, student_id, f["description"], f["skill_tags"], f["priority"], report_id=report_id)
    logger.info(f"Imported {len(findings)} findings from {name} into report {report_id}")
    return {"filename": name, "report_id": report_id, "count": len(findings)}
