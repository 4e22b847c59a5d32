"""Interactive CLI application."""
from datetime import date, timedelta
from pathlib import Path

from loguru import logger
from rich.console import Console
from rich.panel import Panel
from rich.prompt import Confirm, Prompt
from rich.table import Table

from chess_coach.config import (
    PlannerConfig, get_setting, load_planner_config, save_planner_config, set_setting,
)
from chess_coach.dashboard import (
    get_plan_progress, get_progress_color, get_skill_breakdown, get_student_stats,
)
from chess_coach.db import DEFAULT_DB_PATH, init_db
from chess_coach.importer import import_findings
from chess_coach.logger import setup_logger
from chess_coach.models import PRIORITIES, SKILL_CATEGORIES, SKILL_LABELS
from chess_coach.planner import suggest_time_distribution
from chess_coach.plans import (
    TaskNotFoundError, complete_task, create_plan, get_due_repetitions, get_plan, get_task,
    get_tasks_for_date, list_plans, schedule_follow_up,
)
from chess_coach.review import get_focus_skills, get_struggling_skills
from chess_coach.seed import is_seeded, seed_all
from chess_coach.store import (
    add_finding, add_goal, add_student, get_student, get_time_budget, list_findings,
    list_goals, list_students, set_time_budget,
)
from chess_coach.templates import apply_template, list_templates

console = Console()

CURRENT_STUDENT_KEY = "current_student_id"


class SessionExitRequested(Exception):
    """Raised when the user types q/menu at a prompt to go back to the menu."""


def session_prompt(text: str, **kwargs) -> str:
    answer = Prompt.ask(text, **kwargs)
    if answer.strip().lower() in ("q", "menu"):
        raise SessionExitRequested()
    return answer


def session_int_prompt(text: str, choices: list[str] | None = None, default: int | None = None) -> int:
    kwargs = {}
    if choices is not None:
        kwargs["choices"] = choices + ["q", "menu"]
    if default is not None:
        kwargs["default"] = str(default)
    while True:
        answer = session_prompt(text, **kwargs)
        try:
            return int(answer)
        except ValueError:
            console.print("[red]Please enter a number.[/red]")


def show_welcome():
    console.print(Panel(
        "[bold]Chess Coach[/bold]\n[dim]Practice plans from your weaknesses[/dim]",
        title="Welcome", border_style="blue",
    ))


def show_menu():
    console.print("\n[bold]Commands:[/bold]")
    commands = [
        ("students", "Pick or add a student"),
        ("findings", "List or add findings"),
        ("import", "Import findings from a file"),
        ("goals", "List or add goals"),
        ("budget", "Set the daily time budget"),
        ("suggest", "Suggested time split"),
        ("templates", "Apply a plan template"),
        ("plan", "Generate a training plan"),
        ("today", "Today's tasks"),
        ("complete", "Complete a task"),
        ("due", "Repetitions due"),
        ("dashboard", "Plan progress"),
        ("review", "Focus and struggling skills"),
        ("settings", "Planner settings"),
        ("quit", "Exit"),
    ]
    for cmd, desc in commands:
        console.print(f"  [cyan]{cmd:<14}[/cyan] {desc}")


def get_current_student_id(db_path: str) -> int | None:
    value = get_setting(db_path, CURRENT_STUDENT_KEY)
    return int(value) if value else None


def require_student(db_path: str) -> int | None:
    student_id = get_current_student_id(db_path)
    if student_id is None:
        console.print("[yellow]No student selected. Use 'students' first.[/yellow]")
    return student_id


def render_tasks(tasks: list, title: str) -> None:
    table = Table(title=title)
    table.add_column("ID", justify="right")
    table.add_column("Date")
    table.add_column("Skill", style="cyan")
    table.add_column("Task")
    table.add_column("Min", justify="right")
    table.add_column("Level")
    table.add_column("Done")
    for t in tasks:
        table.add_row(
            str(t.id), t.scheduled_date.date().isoformat(), SKILL_LABELS[t.skill],
            t.description, str(t.duration_minutes), t.difficulty or "",
            "[green]✓[/green]" if t.completed else "",
        )
    console.print(table)


def cmd_students(db_path: str):
    students = list_students(db_path)
    current = get_current_student_id(db_path)
    table = Table(title="Students")
    table.add_column("ID", justify="right")
    table.add_column("Name")
    table.add_column("Email")
    for s in students:
        marker = " ←" if s.id == current else ""
        table.add_row(str(s.id), s.name + marker, s.email or "")
    console.print(table)
    choice = session_prompt("Student id to select, or 'new'", default=str(current) if current else "new")
    if choice == "new":
        name = session_prompt("Name")
        email = Prompt.ask("Email (optional)", default="") or None
        student_id = add_student(db_path, name, email)
    else:
        student_id = int(choice)
        get_student(db_path, student_id)
    set_setting(db_path, CURRENT_STUDENT_KEY, str(student_id))
    console.print(f"[green]Selected student {student_id}.[/green]")


def cmd_findings(db_path: str):
    student_id = require_student(db_path)
    if student_id is None:
        return
    findings = list_findings(db_path, student_id)
    table = Table(title="Findings")
    table.add_column("ID", justify="right")
    table.add_column("Priority")
    table.add_column("Skills", style="cyan")
    table.add_column("Description")
    for f in findings:
        table.add_row(str(f.id), f.priority, ", ".join(SKILL_LABELS[s] for s in f.skill_tags), f.description)
    console.print(table)
    if not Confirm.ask("Add a finding?", default=False):
        return
    description = session_prompt("Description")
    skills = session_prompt("Skills (comma separated)", default="tactics")
    priority = session_prompt("Priority", choices=list(PRIORITIES) + ["q"], default="medium")
    add_finding(db_path, student_id, description, [s.strip() for s in skills.split(",") if s.strip()], priority)
    console.print("[green]Finding added.[/green]")


def cmd_import(db_path: str):
    student_id = require_student(db_path)
    if student_id is None:
        return
    file_path = Prompt.ask("Findings file (.json/.yaml)")
    if not Path(file_path).exists():
        console.print(f"[red]File not found: {file_path}[/red]")
        return
    result = import_findings(db_path, student_id, file_path)
    console.print(f"[green]Imported {result['count']} findings from {result['filename']} → report {result['report_id']}[/green]")


def cmd_goals(db_path: str):
    student_id = require_student(db_path)
    if student_id is None:
        return
    for g in list_goals(db_path, student_id):
        progress = f" ({g.current_value}/{g.target_value})" if g.target_value is not None else ""
        console.print(f"  [cyan]{SKILL_LABELS[g.skill]}[/cyan] {g.description}{progress}")
    if not Confirm.ask("Add a goal?", default=False):
        return
    skill = session_prompt("Skill", choices=list(SKILL_CATEGORIES) + ["q"])
    description = session_prompt("Description")
    add_goal(db_path, student_id, skill, description)
    console.print("[green]Goal added.[/green]")


def cmd_budget(db_path: str):
    student_id = require_student(db_path)
    if student_id is None:
        return
    current = get_time_budget(db_path, student_id)
    daily = session_int_prompt("Daily minutes", default=current.daily_minutes if current else 60)
    weekly = session_int_prompt("Weekly minutes", default=current.weekly_minutes if current else daily * 6)
    suggested = suggest_time_distribution(list_findings(db_path, student_id), list_goals(db_path, student_id))
    distribution = {}
    for skill in SKILL_CATEGORIES:
        distribution[skill] = session_int_prompt(f"{SKILL_LABELS[skill]} %", default=suggested[skill])
    set_time_budget(db_path, student_id, daily, weekly, distribution)
    total = sum(distribution.values())
    if total != 100:
        console.print(f"[yellow]Note: percentages add up to {total}%.[/yellow]")
    console.print("[green]Time budget saved.[/green]")


def cmd_suggest(db_path: str):
    student_id = require_student(db_path)
    if student_id is None:
        return
    distribution = suggest_time_distribution(list_findings(db_path, student_id), list_goals(db_path, student_id))
    table = Table(title="Suggested Time Split")
    table.add_column("Skill", style="cyan")
    table.add_column("%", justify="right")
    for skill in SKILL_CATEGORIES:
        table.add_row(SKILL_LABELS[skill], str(distribution[skill]))
    console.print(table)


def cmd_templates(db_path: str):
    student_id = require_student(db_path)
    if student_id is None:
        return
    templates = list_templates(db_path)
    for t in templates:
        console.print(f"  [cyan]{t.id}[/cyan]) [bold]{t.name}[/bold] - {t.daily_minutes} min/day [dim]{t.description}[/dim]")
    template_id = session_int_prompt("Template", choices=[str(t.id) for t in templates])
    template = apply_template(db_path, template_id, student_id)
    console.print(f"[green]Applied '{template.name}'.[/green]")


def cmd_plan(db_path: str):
    student_id = require_student(db_path)
    if student_id is None:
        return
    start = date.fromisoformat(session_prompt("Start date", default=date.today().isoformat()))
    days = session_int_prompt("Number of days", default=14)
    plan_id = create_plan(db_path, student_id, start, start + timedelta(days=days))
    progress = get_plan_progress(db_path, plan_id)
    console.print(
        f"[green]Plan {plan_id} created: {progress['total_tasks']} tasks, "
        f"{progress['planned_minutes']} minutes.[/green]"
    )


def cmd_today(db_path: str):
    student_id = require_student(db_path)
    if student_id is None:
        return
    tasks = get_tasks_for_date(db_path, student_id, date.today())
    if not tasks:
        console.print("[yellow]Nothing scheduled for today.[/yellow]")
        return
    render_tasks(tasks, "Today's Practice")


def cmd_complete(db_path: str):
    student_id = require_student(db_path)
    if student_id is None:
        return
    task_id = session_int_prompt("Task id")
    try:
        task = get_task(db_path, task_id)
    except TaskNotFoundError:
        console.print(f"[red]No task with id {task_id}.[/red]")
        return
    if get_plan(db_path, task.plan_id).student_id != student_id:
        console.print(f"[red]Task {task_id} is not in one of this student's plans.[/red]")
        return
    quality = session_int_prompt(
        "How did it go? (0=blackout, 3=hard, 4=good, 5=easy)", choices=["0", "1", "2", "3", "4", "5"],
    )
    task = complete_task(db_path, task_id, quality)
    console.print(f"[green]Done! Next repetition on {task.next_repetition_date.date().isoformat()}.[/green]")


def cmd_due(db_path: str):
    student_id = require_student(db_path)
    if student_id is None:
        return
    due = get_due_repetitions(db_path, student_id, date.today())
    if not due:
        console.print("[green]No repetitions due.[/green]")
        return
    render_tasks(due, "Repetitions Due")
    if Confirm.ask("Schedule follow-up tasks for these?", default=True):
        for task in due:
            schedule_follow_up(db_path, task.id)
        console.print(f"[green]Scheduled {len(due)} follow-up tasks.[/green]")


def cmd_dashboard(db_path: str):
    student_id = require_student(db_path)
    if student_id is None:
        return
    stats = get_student_stats(db_path, student_id)
    plans = list_plans(db_path, student_id)
    console.print(Panel(
        f"Plans: [bold]{stats['plans']}[/bold]  |  Findings: [bold]{stats['findings']}[/bold]  |  "
        f"Tasks done: [bold]{stats['tasks_completed']}[/bold]  |  "
        f"Minutes: [bold]{stats['minutes_practiced']}[/bold]  |  Avg quality: [bold]{stats['avg_quality']}[/bold]",
        title="Progress Dashboard", border_style="blue",
    ))
    if not plans:
        return
    latest = plans[0]
    progress = get_plan_progress(db_path, latest["id"])
    color = get_progress_color(progress["completion_rate"])
    bar_filled = int(progress["completion_rate"] / 5)
    bar = f"[{color}]{'█' * bar_filled}{'░' * (20 - bar_filled)}[/{color}]"
    console.print(f"\n  Plan {latest['id']}: [bold]{progress['completion_rate']}%[/bold] {bar} [{color}]{progress['label']}[/{color}]\n")

    table = Table(title="Skill Breakdown")
    table.add_column("Skill", style="cyan")
    table.add_column("Done", justify="right")
    table.add_column("Minutes", justify="right")
    table.add_column("Avg quality", justify="right")
    table.add_column("Status")
    for row in get_skill_breakdown(db_path, latest["id"]):
        sc_color = get_progress_color(row["completion_rate"])
        table.add_row(
            row["name"], f"{row['completed_tasks']}/{row['total_tasks']}", str(row["minutes"]),
            "-" if row["avg_quality"] is None else str(row["avg_quality"]),
            f"[{sc_color}]{row['label']}[/{sc_color}]",
        )
    console.print(table)


def cmd_review(db_path: str):
    student_id = require_student(db_path)
    if student_id is None:
        return
    focus = get_focus_skills(db_path, student_id)
    if focus:
        console.print("\n[bold]Focus skills (from findings):[/bold]")
        for f in focus:
            console.print(f"  [cyan]{f['name']}[/cyan] weight {f['weight']}")
    struggling = get_struggling_skills(db_path, student_id)
    if struggling:
        console.print("\n[bold]Struggling skills (from reviews):[/bold]")
        for s in struggling:
            console.print(f"  [red]{s['avg_quality']} avg[/red] - {s['name']} ({s['reviews']} reviews)")
    if not focus and not struggling:
        console.print("[green]No weak areas detected yet.[/green]")


def cmd_settings(db_path: str):
    config = load_planner_config(db_path)
    console.print(f"Same-day plans get one day of tasks: [bold]{config.same_day_plan_counts_as_one_day}[/bold]")
    if Confirm.ask("Toggle?", default=False):
        save_planner_config(db_path, PlannerConfig(
            same_day_plan_counts_as_one_day=not config.same_day_plan_counts_as_one_day,
        ))
        console.print("[green]Saved.[/green]")


COMMANDS = {
    "students": cmd_students,
    "findings": cmd_findings,
    "import": cmd_import,
    "goals": cmd_goals,
    "budget": cmd_budget,
    "suggest": cmd_suggest,
    "templates": cmd_templates,
    "plan": cmd_plan,
    "today": cmd_today,
    "complete": cmd_complete,
    "due": cmd_due,
    "dashboard": cmd_dashboard,
    "review": cmd_review,
    "settings": cmd_settings,
}


def main():
    setup_logger()
    db_path = DEFAULT_DB_PATH
    init_db(db_path)
    first_run = not is_seeded(db_path)
    if first_run:
        console.print("[dim]Setting up for first use...[/dim]")
    seed_all(db_path)
    if first_run:
        console.print("[green]Ready![/green]\n")

    show_welcome()

    while True:
        show_menu()
        choice = Prompt.ask("\n[bold]>[/bold]", default="today").strip().lower()
        try:
            if choice in ("quit", "exit", "q"):
                console.print("[dim]Good luck at the board![/dim]")
                break
            command = COMMANDS.get(choice)
            if command is None:
                console.print("[red]Unknown command. Try again.[/red]")
                continue
            command(db_path)
        except SessionExitRequested:
            console.print("[dim]Back to menu.[/dim]")
        except KeyboardInterrupt:
            console.print("\n[dim]Use 'quit' to exit.[/dim]")
        except Exception as e:
            logger.exception(f"Command {choice!r} failed")
            console.print(f"[red]Error: {e}[/red]")


if __name__ == "__main__":
    main()
