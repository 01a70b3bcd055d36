"""Fachada de consultas: lo que usan las vistas y la CLI.

Cada lectura tiene una Query Key cuyo primer elemento es su familia (la
ventana de frescura se configura por familia). Cada mutación declara las
claves que invalida, por prefijo:

- cursos: `("courses",)` (listas y detalles) y `("enrolledCourses",)` al matricular
- lecciones: `("lessons", course_id)`
- tests: `("tests", course_id)`
- preguntas: `("questions", test_id)` y `("tests",)` (el recuento cambia)
- usuarios, departamentos, cargos: su familia completa
- adjuntos, progreso, feedback: `(familia, course_id)`
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Iterable, Sequence

from adapters.resource_client import ResourceClient
from core.domain.models import (
    AttachedFile,
    AttachedFileInput,
    Course,
    CourseTest,
    Lesson,
    LessonInput,
    LessonProgress,
    LessonProgressInput,
    PaginatedResult,
    Question,
    ReorderLesson,
)
from core.domain.organization import (
    Department,
    DepartmentInput,
    Position,
    PositionInput,
    ResetPasswordInput,
    RoleInput,
    ServiceRole,
    User,
    UserInput,
)
from core.domain.reports import (
    AuditLogEntry,
    AuditLogFilter,
    AvgFeedback,
    CourseFeedbackSummary,
    Feedback,
    FeedbackInput,
    MonthlyReport,
    StudentsOfCourse,
    TopDepartment,
)
from core.query import Mutation, QueryCache, QueryKey
from core.services.course_tests import CourseTestsService
from core.services.courses import CoursesService
from core.services.lessons import LessonsService
from core.services.materials import AttachedFilesService, LessonProgressService
from core.services.organization import DepartmentsService, PositionsService, RolesService
from core.services.questions import QuestionsService
from core.services.reports import AuditLogService, FeedbackService, ReportsService
from core.services.users import UsersService

OnSuccess = Callable[[Any, Any], Any]


@dataclass
class TrainingServices:
    """Un servicio por recurso, todos sobre el mismo ResourceClient."""

    courses: CoursesService
    lessons: LessonsService
    tests: CourseTestsService
    questions: QuestionsService
    users: UsersService
    departments: DepartmentsService
    positions: PositionsService
    roles: RolesService
    reports: ReportsService
    audit_log: AuditLogService
    feedback: FeedbackService
    attached_files: AttachedFilesService
    lesson_progress: LessonProgressService

    @classmethod
    def from_client(cls, client: ResourceClient) -> "TrainingServices":
        return cls(
            courses=CoursesService(client),
            lessons=LessonsService(client),
            tests=CourseTestsService(client),
            questions=QuestionsService(client),
            users=UsersService(client),
            departments=DepartmentsService(client),
            positions=PositionsService(client),
            roles=RolesService(client),
            reports=ReportsService(client),
            audit_log=AuditLogService(client),
            feedback=FeedbackService(client),
            attached_files=AttachedFilesService(client),
            lesson_progress=LessonProgressService(client),
        )


class TrainingQueries:
    def __init__(self, services: TrainingServices, cache: QueryCache) -> None:
        self.services = services
        self.cache = cache

    async def _read(self, key: QueryKey, fetch: Callable[[], Awaitable[Any]], force: bool) -> Any:
        return await self.cache.fetch(key, fetch, force=force)

    async def _write(
        self,
        name: str,
        run: Callable[[], Awaitable[Any]],
        invalidates: Sequence[QueryKey],
        on_success: OnSuccess | None = None,
    ) -> Any:
        mutation: Mutation[None, Any] = Mutation(
            fn=lambda _variables: run(),
            invalidates=list(invalidates),
            on_success=on_success,
            name=name,
        )
        return await self.cache.mutate(mutation, None)

    # Cursos ------------------------------------------------------------

    async def courses(
        self,
        *,
        page: int = 1,
        page_size: int | None = None,
        search: str | None = None,
        force: bool = False,
    ) -> PaginatedResult[Course]:
        page_size = page_size or self.cache.settings.default_page_size
        search = (search or "").strip() or None
        key = ("courses", "list", {"page": page, "pageSize": page_size, "search": search})
        return await self._read(
            key,
            lambda: self.services.courses.list_courses(page=page, page_size=page_size, search=search),
            force,
        )

    async def course(self, course_id: str, *, force: bool = False) -> Course:
        return await self._read(
            ("courses", "detail", course_id),
            lambda: self.services.courses.get_course(course_id),
            force,
        )

    async def enrolled_courses(self, *, force: bool = False) -> list[Course]:
        return await self._read(("enrolledCourses",), self.services.courses.enrolled_courses, force)

    async def create_course(self, course: Course, *, on_success: OnSuccess | None = None) -> Course:
        return await self._write(
            "courses.create",
            lambda: self.services.courses.create_course(course),
            [("courses",)],
            on_success,
        )

    async def update_course(
        self,
        course_id: str,
        course: Course,
        original: Course | None = None,
        *,
        on_success: OnSuccess | None = None,
    ) -> Course:
        return await self._write(
            "courses.update",
            lambda: self.services.courses.update_course(course_id, course, original),
            [("courses",), ("enrolledCourses",)],
            on_success,
        )

    async def delete_courses(self, course_ids: Iterable[str], *, on_success: OnSuccess | None = None) -> None:
        ids = list(course_ids)
        await self._write(
            "courses.delete",
            lambda: self.services.courses.soft_delete_courses(ids),
            [("courses",), ("enrolledCourses",)],
            on_success,
        )

    async def enroll(self, course_id: str, *, on_success: OnSuccess | None = None) -> None:
        await self._write(
            "courses.enroll",
            lambda: self.services.courses.enroll(course_id),
            [("enrolledCourses",), ("courses",)],
            on_success,
        )

    # Lecciones ---------------------------------------------------------

    async def lessons(self, course_id: str, *, force: bool = False) -> list[Lesson]:
        return await self._read(
            ("lessons", course_id),
            lambda: self.services.lessons.list_lessons(course_id),
            force,
        )

    async def create_lesson(
        self, course_id: str, payload: LessonInput, *, on_success: OnSuccess | None = None
    ) -> Lesson | None:
        return await self._write(
            "lessons.create",
            lambda: self.services.lessons.create_lesson(course_id, payload),
            [("lessons", course_id)],
            on_success,
        )

    async def update_lesson(
        self, course_id: str, lesson_id: int, payload: LessonInput, *, on_success: OnSuccess | None = None
    ) -> Lesson | None:
        return await self._write(
            "lessons.update",
            lambda: self.services.lessons.update_lesson(course_id, lesson_id, payload),
            [("lessons", course_id)],
            on_success,
        )

    async def delete_lessons(
        self, course_id: str, lesson_ids: Iterable[int], *, on_success: OnSuccess | None = None
    ) -> None:
        ids = list(lesson_ids)
        await self._write(
            "lessons.delete",
            lambda: self.services.lessons.delete_lessons(course_id, ids),
            [("lessons", course_id)],
            on_success,
        )

    async def reorder_lesson(
        self, course_id: str, payload: ReorderLesson, *, on_success: OnSuccess | None = None
    ) -> None:
        await self._write(
            "lessons.reorder",
            lambda: self.services.lessons.reorder_lesson(course_id, payload),
            [("lessons", course_id)],
            on_success,
        )

    # Tests y preguntas -------------------------------------------------

    async def tests(self, course_id: str, *, force: bool = False) -> list[CourseTest]:
        return await self._read(
            ("tests", course_id),
            lambda: self.services.tests.list_tests(course_id),
            force,
        )

    async def test(self, course_id: str, test_id: int, *, force: bool = False) -> CourseTest:
        return await self._read(
            ("tests", course_id, test_id),
            lambda: self.services.tests.get_test(course_id, test_id),
            force,
        )

    async def create_test(
        self, course_id: str, test: CourseTest, *, on_success: OnSuccess | None = None
    ) -> CourseTest | None:
        return await self._write(
            "tests.create",
            lambda: self.services.tests.create_test(course_id, test),
            [("tests", course_id)],
            on_success,
        )

    async def update_test(
        self, course_id: str, test_id: int, test: CourseTest, *, on_success: OnSuccess | None = None
    ) -> CourseTest | None:
        return await self._write(
            "tests.update",
            lambda: self.services.tests.update_test(course_id, test_id, test),
            [("tests", course_id)],
            on_success,
        )

    async def delete_test(self, course_id: str, test_id: int, *, on_success: OnSuccess | None = None) -> None:
        await self._write(
            "tests.delete",
            lambda: self.services.tests.delete_test(course_id, test_id),
            [("tests", course_id), ("questions", test_id)],
            on_success,
        )

    async def questions(
        self,
        test_id: int,
        *,
        page: int = 1,
        page_size: int | None = None,
        force: bool = False,
    ) -> PaginatedResult[Question]:
        return await self._read(
            ("questions", test_id, {"page": page, "pageSize": page_size}),
            lambda: self.services.questions.list_questions(test_id, page=page, page_size=page_size),
            force,
        )

    async def create_question(
        self, test_id: int, question: Question, *, on_success: OnSuccess | None = None
    ) -> Question | None:
        return await self._write(
            "questions.create",
            lambda: self.services.questions.create_question(test_id, question),
            [("questions", test_id), ("tests",)],
            on_success,
        )

    async def create_questions(
        self, test_id: int, questions: Iterable[Question], *, on_success: OnSuccess | None = None
    ) -> None:
        items = list(questions)
        await self._write(
            "questions.create_many",
            lambda: self.services.questions.create_questions(test_id, items),
            [("questions", test_id), ("tests",)],
            on_success,
        )

    async def update_question(
        self, test_id: int, question_id: int, question: Question, *, on_success: OnSuccess | None = None
    ) -> Question | None:
        return await self._write(
            "questions.update",
            lambda: self.services.questions.update_question(test_id, question_id, question),
            [("questions", test_id)],
            on_success,
        )

    async def delete_questions(
        self, test_id: int, question_ids: Iterable[int], *, on_success: OnSuccess | None = None
    ) -> None:
        ids = list(question_ids)
        await self._write(
            "questions.delete",
            lambda: self.services.questions.delete_questions(test_id, ids),
            [("questions", test_id), ("tests",)],
            on_success,
        )

    # Usuarios ----------------------------------------------------------

    async def users(
        self,
        *,
        page: int = 1,
        limit: int | None = None,
        search: str | None = None,
        force: bool = False,
    ) -> PaginatedResult[User]:
        # Limit ausente o >= max_page_size es la misma petición.
        max_size = self.cache.settings.max_page_size
        limit = limit if limit and limit < max_size else max_size
        search = (search or "").strip() or None
        return await self._read(
            ("users", "list", {"page": page, "limit": limit, "search": search}),
            lambda: self.services.users.list_users(page=page, limit=limit, search=search),
            force,
        )

    async def user(self, user_id: str, *, force: bool = False) -> User:
        return await self._read(
            ("users", "detail", user_id),
            lambda: self.services.users.get_user(user_id),
            force,
        )

    async def create_user(self, user: UserInput, *, on_success: OnSuccess | None = None) -> User:
        return await self._write(
            "users.create", lambda: self.services.users.create_user(user), [("users",)], on_success
        )

    async def update_user(self, user_id: str, user: UserInput, *, on_success: OnSuccess | None = None) -> User:
        return await self._write(
            "users.update",
            lambda: self.services.users.update_user_by_admin(user_id, user),
            [("users",)],
            on_success,
        )

    async def update_profile(self, user: UserInput, *, on_success: OnSuccess | None = None) -> User:
        return await self._write(
            "users.update_profile",
            lambda: self.services.users.update_profile(user),
            [("users",)],
            on_success,
        )

    async def delete_user(self, user_id: str, *, on_success: OnSuccess | None = None) -> None:
        await self._write(
            "users.delete", lambda: self.services.users.delete_user(user_id), [("users",)], on_success
        )

    async def reset_password(
        self, user_id: str, payload: ResetPasswordInput, *, on_success: OnSuccess | None = None
    ) -> None:
        await self._write(
            "users.reset_password",
            lambda: self.services.users.reset_password(user_id, payload),
            [],
            on_success,
        )

    # Departamentos y cargos ---------------------------------------------

    async def departments(self, *, force: bool = False) -> list[Department]:
        return await self._read(("departments",), self.services.departments.list_departments, force)

    async def department(self, department_id: str, *, force: bool = False) -> Department:
        return await self._read(
            ("departments", department_id),
            lambda: self.services.departments.get_department(department_id),
            force,
        )

    async def create_department(
        self, payload: DepartmentInput, *, on_success: OnSuccess | None = None
    ) -> Department:
        return await self._write(
            "departments.create",
            lambda: self.services.departments.create_department(payload),
            [("departments",)],
            on_success,
        )

    async def update_department(
        self, department_id: str, payload: DepartmentInput, *, on_success: OnSuccess | None = None
    ) -> None:
        await self._write(
            "departments.update",
            lambda: self.services.departments.update_department(department_id, payload),
            [("departments",)],
            on_success,
        )

    async def delete_department(self, department_id: str, *, on_success: OnSuccess | None = None) -> None:
        await self._write(
            "departments.delete",
            lambda: self.services.departments.delete_department(department_id),
            [("departments",)],
            on_success,
        )

    async def positions(self, *, force: bool = False) -> list[Position]:
        return await self._read(("positions",), self.services.positions.list_positions, force)

    async def create_position(self, payload: PositionInput, *, on_success: OnSuccess | None = None) -> Position:
        return await self._write(
            "positions.create",
            lambda: self.services.positions.create_position(payload),
            [("positions",)],
            on_success,
        )

    async def update_position(
        self, position_id: int, payload: PositionInput, *, on_success: OnSuccess | None = None
    ) -> Position | None:
        return await self._write(
            "positions.update",
            lambda: self.services.positions.update_position(position_id, payload),
            [("positions",)],
            on_success,
        )

    async def delete_position(self, position_id: int, *, on_success: OnSuccess | None = None) -> None:
        await self._write(
            "positions.delete",
            lambda: self.services.positions.delete_position(position_id),
            [("positions",)],
            on_success,
        )

    async def roles(self, *, force: bool = False) -> list[ServiceRole]:
        return await self._read(("roles",), self.services.roles.list_roles, force)

    async def role(self, role_id: str, *, force: bool = False) -> ServiceRole:
        return await self._read(("roles", "detail", role_id), lambda: self.services.roles.get_role(role_id), force)

    async def role_by_name(self, name: str, *, force: bool = False) -> ServiceRole:
        return await self._read(
            ("roles", "byName", name),
            lambda: self.services.roles.get_role_by_name(name),
            force,
        )

    async def create_role(self, payload: RoleInput, *, on_success: OnSuccess | None = None) -> ServiceRole:
        return await self._write(
            "roles.create",
            lambda: self.services.roles.create_role(payload),
            [("roles",)],
            on_success,
        )

    async def update_role(
        self, role_id: str, payload: RoleInput, *, on_success: OnSuccess | None = None
    ) -> ServiceRole | None:
        return await self._write(
            "roles.update",
            lambda: self.services.roles.update_role(role_id, payload),
            [("roles",), ("users",)],
            on_success,
        )

    async def delete_role(self, role_id: str, *, on_success: OnSuccess | None = None) -> None:
        await self._write(
            "roles.delete",
            lambda: self.services.roles.delete_role(role_id),
            [("roles",), ("users",)],
            on_success,
        )

    # Material, progreso y feedback --------------------------------------

    async def attached_files(self, course_id: str, *, force: bool = False) -> list[AttachedFile]:
        return await self._read(
            ("attachedFiles", course_id),
            lambda: self.services.attached_files.list_files(course_id),
            force,
        )

    async def upload_attached_files(
        self, course_id: str, items: Sequence[AttachedFileInput], *, on_success: OnSuccess | None = None
    ) -> list[AttachedFile]:
        return await self._write(
            "attachedFiles.upload",
            lambda: self.services.attached_files.upload_files(course_id, items),
            [("attachedFiles", course_id)],
            on_success,
        )

    async def delete_attached_file(
        self, course_id: str, file_id: int, *, on_success: OnSuccess | None = None
    ) -> None:
        await self._write(
            "attachedFiles.delete",
            lambda: self.services.attached_files.delete_file(course_id, file_id),
            [("attachedFiles", course_id)],
            on_success,
        )

    async def lesson_progress(self, course_id: str, *, force: bool = False) -> list[LessonProgress]:
        return await self._read(
            ("lessonProgress", course_id),
            lambda: self.services.lesson_progress.list_progress(course_id),
            force,
        )

    async def save_lesson_progress(
        self, course_id: str, payload: LessonProgressInput, *, on_success: OnSuccess | None = None
    ) -> None:
        await self._write(
            "lessonProgress.upsert",
            lambda: self.services.lesson_progress.upsert_progress(payload),
            [("lessonProgress", course_id), ("enrolledCourses",)],
            on_success,
        )

    async def feedback(self, course_id: str, *, force: bool = False) -> list[Feedback]:
        return await self._read(
            ("feedback", course_id),
            lambda: self.services.feedback.list_feedback(course_id),
            force,
        )

    async def create_feedback(
        self, course_id: str, payload: FeedbackInput, *, on_success: OnSuccess | None = None
    ) -> None:
        await self._write(
            "feedback.create",
            lambda: self.services.feedback.create_feedback(course_id, payload),
            [("feedback", course_id), ("reports",)],
            on_success,
        )

    # Informes y auditoría -----------------------------------------------

    async def avg_feedback(self, *, force: bool = False) -> AvgFeedback:
        return await self._read(("reports", "avgFeedback"), self.services.reports.avg_feedback, force)

    async def monthly_report(self, month: int, *, force: bool = False) -> MonthlyReport:
        return await self._read(
            ("reports", "monthly", month),
            lambda: self.services.reports.monthly_report(month),
            force,
        )

    async def course_feedback_report(self, *, force: bool = False) -> list[CourseFeedbackSummary]:
        return await self._read(("reports", "courseFeedback"), self.services.reports.course_feedback, force)

    async def students_of_course(self, *, force: bool = False) -> list[StudentsOfCourse]:
        return await self._read(("reports", "studentsOfCourse"), self.services.reports.students_of_course, force)

    async def top_departments(self, *, force: bool = False) -> list[TopDepartment]:
        return await self._read(("reports", "topDepartments"), self.services.reports.top_departments, force)

    async def course_audit_log(
        self, course_id: str, filters: AuditLogFilter | None = None, *, force: bool = False
    ) -> list[AuditLogEntry]:
        return await self._read(
            ("auditLog", "course", course_id, filters),
            lambda: self.services.audit_log.course_log(course_id, filters),
            force,
        )

    async def user_audit_log(
        self, user_id: str, filters: AuditLogFilter | None = None, *, force: bool = False
    ) -> list[AuditLogEntry]:
        return await self._read(
            ("auditLog", "user", user_id, filters),
            lambda: self.services.audit_log.user_log(user_id, filters),
            force,
        )

    async def audit_log(self, filters: AuditLogFilter | None = None, *, force: bool = False) -> list[AuditLogEntry]:
        return await self._read(
            ("auditLog", "all", filters),
            lambda: self.services.audit_log.global_log(filters),
            force,
        )
