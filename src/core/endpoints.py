"""Plantillas de rutas de la API (Endpoint Descriptors).

Constantes inmutables; los servicios las rellenan con `str.format`.
Las mayúsculas/minúsculas reproducen las rutas reales del backend.
"""

from __future__ import annotations

# Cursos
COURSES = "/Courses"
COURSE = "/Courses/{course_id}"
COURSES_SEARCH = "/Courses/search"
COURSES_SOFT_DELETE = "/Courses/soft-delete"
COURSES_ENROLLED = "/Courses/enroll-courses"
COURSE_ENROLL = "/Courses/{course_id}/enroll"

# Lecciones (sub-recurso de curso)
LESSONS = "/courses/{course_id}/lessons"
LESSON = "/courses/{course_id}/lessons/{lesson_id}"
LESSONS_REORDER = "/courses/{course_id}/lessons/reorder"

# Tests (sub-recurso de curso)
TESTS = "/courses/{course_id}/tests"
TEST_CREATE = "/courses/{course_id}/tests/create"
TEST = "/courses/{course_id}/tests/{test_id}"
TEST_UPDATE = "/courses/{course_id}/tests/update/{test_id}"
TEST_DELETE = "/courses/{course_id}/tests/delete/{test_id}"

# Preguntas (sub-recurso de test)
QUESTIONS = "/tests/{test_id}/questions"
QUESTION = "/tests/{test_id}/questions/{question_id}"

# Usuarios
USERS = "/Users"
USER = "/Users/{user_id}"
USERS_CREATE = "/Users/create"
USERS_SEARCH = "/Users/search"
USERS_UPDATE_PROFILE = "/Users/update"
USER_UPDATE_ADMIN = "/Users/admin/{user_id}/update"
USER_RESET_PASSWORD = "/Users/{user_id}/reset-password"
USER_SOFT_DELETE = "/Users/{user_id}/soft-delete"

# Departamentos, cargos y roles
DEPARTMENTS = "/Departments"
DEPARTMENT = "/Departments/{department_id}"
POSITIONS = "/Positions"
ROLES = "/roles"

# Informes
REPORT_AVG_FEEDBACK = "/Report/avg-feedback"
REPORT_MONTHLY = "/Report/monthly-report/{month}"
REPORT_COURSE_FEEDBACK = "/Report/course-and-avg-feedback"
REPORT_STUDENTS_OF_COURSE = "/Report/students-of-course"
REPORT_TOP_DEPARTMENTS = "/Report/top-department"

# Auditoría
AUDIT_LOG = "/AuditLog"
AUDIT_LOG_COURSE = "/AuditLog/course"
AUDIT_LOG_USER = "/AuditLog/user"

# Feedback de cursos
FEEDBACK = "/feedback/{course_id}"
FEEDBACK_CREATE = "/feedback/{course_id}/create"

# Ficheros adjuntos y progreso
ATTACHED_FILES = "/courseattachedfiles/{course_id}"
ATTACHED_FILE = "/courseattachedfiles/{course_id}/{file_id}"
LESSON_PROGRESS = "/LessonProgress/get-lesson-progress/{course_id}"
LESSON_PROGRESS_UPSERT = "/LessonProgress/upsert-lesson-progress"
