"""Componentes de UI para CLI (Rich).

Por qué separar componentes:
- Evita mezclar lógica de comandos con detalles visuales.
- Permite reutilizar tablas/paneles en múltiples comandos.
"""

from __future__ import annotations

from typing import Iterable

from rich.align import Align
from rich.console import Console
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from core.domain.models import Course, CourseTest, Lesson, PaginatedResult
from core.domain.organization import User
from core.domain.reports import ScheduleResult
from core.errors import ClassifiedError, ErrorKind


def print_banner(console: Console) -> None:
    """Imprime el banner de bienvenida.

    Por qué aquí:
    - Evita dependencias circulares (main <-> doctor).
    - Permite desactivar banner en modos no interactivos (JSON/pipelines).
    """

    title = Text("QLDT", style="bold cyan")
    subtitle = Text("Cursos • Lecciones • Tests • Planificación IA", style="dim")
    body = Align.center(Text.assemble(title, "\n", subtitle), vertical="middle")
    console.print(Panel(body, border_style="cyan", padding=(1, 4)))


def build_courses_table(result: PaginatedResult[Course]) -> Table:
    table = Table(title=f"Courses (page {result.page}/{result.total_pages}, {result.total_count} total)")
    table.add_column("ID", style="dim", no_wrap=True)
    table.add_column("Code", style="cyan", no_wrap=True)
    table.add_column("Title", style="white")
    table.add_column("Status", style="green")
    table.add_column("Type", style="magenta")
    for course in result.items:
        table.add_row(course.id, course.course_code, course.title, course.status, course.enrollment_type)
    return table


def build_course_panel(course: Course) -> Panel:
    body = Text()
    body.append(f"{course.title}\n", style="bold")
    body.append(f"Code: {course.course_code}\n")
    body.append(f"Status: {course.status}\n")
    body.append(f"Enrollment: {course.enrollment_type}\n")
    if course.start_date or course.end_date:
        body.append(f"Dates: {course.start_date or '?'} -> {course.end_date or '?'}\n")
    if course.description:
        body.append(f"\n{course.description.strip()}\n", style="dim")
    return Panel(body, title=Text("Course", style="bold cyan"), border_style="cyan")


def build_lessons_table(lessons: Iterable[Lesson]) -> Table:
    table = Table(title="Lessons")
    table.add_column("#", style="dim", no_wrap=True)
    table.add_column("ID", style="dim", no_wrap=True)
    table.add_column("Title", style="white")
    table.add_column("Type", style="magenta")
    table.add_column("Duration", style="green", justify="right")
    for lesson in lessons:
        duration = f"{lesson.total_duration_seconds // 60} min" if lesson.total_duration_seconds else "-"
        table.add_row(
            str(lesson.position) if lesson.position is not None else "-",
            str(lesson.id),
            lesson.title,
            lesson.content_type,
            duration,
        )
    return table


def build_tests_table(tests: Iterable[CourseTest]) -> Table:
    table = Table(title="Tests")
    table.add_column("ID", style="dim", no_wrap=True)
    table.add_column("Title", style="white")
    table.add_column("Questions", style="cyan", justify="right")
    table.add_column("Pass %", style="green", justify="right")
    table.add_column("Time", style="magenta", justify="right")
    for test in tests:
        table.add_row(
            str(test.id),
            test.title,
            str(test.count_question),
            f"{test.passing_score_percentage:g}",
            f"{test.time_test} min" if test.time_test else "-",
        )
    return table


def build_users_table(result: PaginatedResult[User]) -> Table:
    table = Table(title=f"Users (page {result.page}/{result.total_pages}, {result.total_count} total)")
    table.add_column("ID", style="dim", no_wrap=True)
    table.add_column("Name", style="white")
    table.add_column("Email", style="cyan")
    table.add_column("Role", style="magenta")
    table.add_column("Department", style="green")
    for user in result.items:
        table.add_row(user.id, user.full_name, user.email, user.role, user.department_name or "-")
    return table


def build_schedule_panel(result: ScheduleResult) -> Panel:
    """Panel para presentar la propuesta del asistente IA."""

    body = Text()
    body.append("Time: ", style="bold")
    body.append(f"{result.scheduled_time}\n")
    body.append("Classroom: ", style="bold")
    body.append(f"{result.classroom}\n")
    if result.reasoning:
        body.append(f"\n{result.reasoning}\n")
    if result.model:
        body.append(f"\nModelo: {result.model}", style="dim")
    return Panel(body, title=Text("Planificación IA", style="bold yellow"), border_style="yellow")


_ERROR_STYLES: dict[ErrorKind, str] = {
    ErrorKind.NETWORK: "yellow",
    ErrorKind.VALIDATION: "yellow",
    ErrorKind.AUTHORIZATION: "red",
    ErrorKind.NOT_FOUND: "yellow",
    ErrorKind.SERVER: "red",
    ErrorKind.CLIENT: "red",
}


def print_error(console: Console, error: ClassifiedError) -> None:
    style = _ERROR_STYLES.get(error.kind, "red")
    console.print(f"[{style}]{error.kind.value}:[/{style}] {error.message}")
    for field, messages in error.field_errors.items():
        for message in messages:
            console.print(f"  [dim]{field}:[/dim] {message}")
