"""CLI principal (Typer + Rich).

Por qué una CLI:
- Ejercita el Core completo (Resource Client, caché, mappers) contra una API
  real sin necesidad de la aplicación web.
- Los errores llegan ya clasificados: la CLI solo los presenta.
"""

from __future__ import annotations

import asyncio
from pathlib import Path
from typing import Awaitable, Callable, Optional, TypeVar

import typer
from rich.console import Console

from adapters.ai_scheduler import schedule_class
from adapters.resource_client import ResourceClient
from cli import doctor
from cli.ui_components import (
    build_course_panel,
    build_courses_table,
    build_lessons_table,
    build_schedule_panel,
    build_tests_table,
    build_users_table,
    print_banner,
    print_error,
)
from core.config import AppSettings
from core.domain.reports import ScheduleRequest
from core.errors import ClassifiedError, ErrorHandler
from core.logger import setup_logger
from core.query import QueryCache
from core.services.queries import TrainingQueries, TrainingServices

T = TypeVar("T")

app = typer.Typer(no_args_is_help=True, help="Training-management API client.")
courses_app = typer.Typer(no_args_is_help=True, help="Courses.")
lessons_app = typer.Typer(no_args_is_help=True, help="Lessons of a course.")
tests_app = typer.Typer(no_args_is_help=True, help="Tests of a course.")
users_app = typer.Typer(no_args_is_help=True, help="Users.")

app.add_typer(courses_app, name="courses")
app.add_typer(lessons_app, name="lessons")
app.add_typer(tests_app, name="tests")
app.add_typer(users_app, name="users")
app.add_typer(doctor.app, name="doctor")

_console = Console()


def _build_queries(settings: AppSettings, client: ResourceClient) -> TrainingQueries:
    handler = ErrorHandler(
        lambda error: print_error(_console, error),
        dedupe_seconds=settings.notify_dedupe_seconds,
    )
    cache = QueryCache(settings, error_handler=handler)
    return TrainingQueries(TrainingServices.from_client(client), cache)


def _execute(action: Callable[[TrainingQueries], Awaitable[T]]) -> T:
    """Ejecuta una acción con un cliente y una caché de vida corta."""

    settings = AppSettings()

    async def _runner() -> T:
        async with ResourceClient(settings) as client:
            queries = _build_queries(settings, client)
            try:
                return await action(queries)
            except ClassifiedError as exc:
                queries.cache.error_handler.handle(exc, notify=True)
                raise

    try:
        return asyncio.run(_runner())
    except ClassifiedError as exc:
        raise typer.Exit(code=1) from exc


@app.callback()
def main(
    log_level: Optional[str] = typer.Option(None, "--log-level", help="DEBUG, INFO, WARNING, ..."),
    log_file: Optional[Path] = typer.Option(None, "--log-file", help="Also write logs to this file."),
    banner: bool = typer.Option(False, "--banner/--no-banner", help="Show the welcome banner."),
) -> None:
    settings = AppSettings()
    setup_logger(level=(log_level or settings.log_level).upper(), log_file=log_file or settings.log_file)
    if banner:
        print_banner(_console)


@courses_app.command("list")
def list_courses(
    page: int = typer.Option(1, min=1, help="Page number."),
    page_size: Optional[int] = typer.Option(None, "--page-size", min=1, help="Items per page."),
    search: Optional[str] = typer.Option(None, "--search", "-s", help="Keyword search."),
) -> None:
    """List courses (paginated)."""

    result = _execute(lambda q: q.courses(page=page, page_size=page_size, search=search))
    _console.print(build_courses_table(result))


@courses_app.command("show")
def show_course(course_id: str = typer.Argument(..., help="Course id.")) -> None:
    """Show one course."""

    course = _execute(lambda q: q.course(course_id))
    _console.print(build_course_panel(course))


@courses_app.command("enrolled")
def enrolled_courses() -> None:
    """Courses the current user is enrolled in."""

    courses = _execute(lambda q: q.enrolled_courses())
    for course in courses:
        progress = f"{course.progress_percentage}%" if course.progress_percentage is not None else "-"
        _console.print(f"[cyan]{course.course_code or course.id}[/cyan] {course.title} [dim]{progress}[/dim]")


@courses_app.command("delete")
def delete_courses(
    course_ids: list[str] = typer.Argument(..., help="One or more course ids."),
    yes: bool = typer.Option(False, "--yes", "-y", help="Skip confirmation."),
) -> None:
    """Soft-delete courses in one request."""

    if not yes:
        typer.confirm(f"Delete {len(course_ids)} course(s)?", abort=True)
    _execute(lambda q: q.delete_courses(course_ids))
    _console.print(f"[green]Deleted:[/green] {', '.join(course_ids)}")


@lessons_app.command("list")
def list_lessons(course_id: str = typer.Argument(..., help="Course id.")) -> None:
    """List the lessons of a course."""

    lessons = _execute(lambda q: q.lessons(course_id))
    if not lessons:
        _console.print("[dim]No lessons yet.[/dim]")
        return
    _console.print(build_lessons_table(lessons))


@tests_app.command("list")
def list_tests(course_id: str = typer.Argument(..., help="Course id.")) -> None:
    """List the tests of a course."""

    tests = _execute(lambda q: q.tests(course_id))
    if not tests:
        _console.print("[dim]No tests yet.[/dim]")
        return
    _console.print(build_tests_table(tests))


@users_app.command("list")
def list_users(
    page: int = typer.Option(1, min=1, help="Page number."),
    limit: Optional[int] = typer.Option(None, "--limit", min=1, help="Items per page."),
    search: Optional[str] = typer.Option(None, "--search", "-s", help="Keyword search."),
) -> None:
    """List users (paginated)."""

    result = _execute(lambda q: q.users(page=page, limit=limit, search=search))
    _console.print(build_users_table(result))


@app.command()
def schedule(
    class_name: str = typer.Option(..., "--class-name", help="Class to schedule."),
    instructor: str = typer.Option(..., "--instructor", help="Instructor availability."),
    classroom: str = typer.Option(..., "--classroom", help="Classroom availability."),
    duration: str = typer.Option(..., "--duration", help="Class duration, e.g. '1.5 hours'."),
    existing: str = typer.Option("", "--existing", help="Existing schedule."),
) -> None:
    """Ask the AI assistant for the best time and classroom for a class."""

    request = ScheduleRequest(
        class_name=class_name,
        instructor_availability=instructor,
        classroom_availability=classroom,
        class_duration=duration,
        existing_schedule=existing,
    )
    try:
        with _console.status("Scheduling..."):
            result = asyncio.run(schedule_class(request))
    except ClassifiedError as exc:
        print_error(_console, exc)
        raise typer.Exit(code=1) from exc
    _console.print(build_schedule_panel(result))


def run() -> None:
    app()


if __name__ == "__main__":
    run()
