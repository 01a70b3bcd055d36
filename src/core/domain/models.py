"""Modelos del dominio de formación (Pydantic v2).

Por qué Pydantic en el dominio:
- Nos da validación estricta y documentación autocontenida (Field) sin acoplar
  el Core a librerías de I/O.
- Es la forma "UI" estable: los mappers traducen el formato del cable
  (nombres heredados, PascalCase, erratas del backend) a estos modelos.

Nota:
- Estos modelos describen *qué* es la información, no *cómo* se obtiene.
"""

from __future__ import annotations

from typing import Generic, Literal, TypeVar

from pydantic import BaseModel, Field, model_validator

T = TypeVar("T")

EnrollmentType = Literal["optional", "mandatory"]
LearningType = Literal["online", "offline"]
LessonContentType = Literal["pdf_url", "video_url", "external_link", "text"]


class PaginatedResult(BaseModel, Generic[T]):
    """Página de resultados.

    Invariantes: `len(items) <= page_size` y `page >= 1`.
    """

    items: list[T] = Field(default_factory=list)
    total_count: int = Field(default=0, ge=0)
    page: int = Field(default=1, ge=1)
    page_size: int = Field(default=10, ge=1)

    @model_validator(mode="after")
    def _check_page_size(self) -> "PaginatedResult[T]":
        if len(self.items) > self.page_size:
            raise ValueError("items must not exceed page_size")
        return self

    @property
    def total_pages(self) -> int:
        if self.total_count <= 0:
            return 1
        return (self.total_count + self.page_size - 1) // self.page_size


class UploadFile(BaseModel):
    """Fichero binario a subir en un formulario multipart."""

    filename: str = Field(..., min_length=1)
    content: bytes = Field(default=b"")
    content_type: str = Field(default="application/octet-stream")


class NamedRef(BaseModel):
    """Referencia `{id, name}` (estado, categoría, autor...)."""

    id: int | str
    name: str = ""


class CourseDuration(BaseModel):
    sessions: int = 0
    hours_per_session: float = 0


class CourseDepartment(BaseModel):
    department_id: int
    department_name: str = ""


class CourseLevel(BaseModel):
    level_id: int
    level_name: str = ""


class Course(BaseModel):
    """Curso en forma UI."""

    id: str = Field(..., description="Identificador del curso (string en el backend).")
    title: str = ""
    course_code: str = ""
    description: str = ""
    objectives: str = ""
    image: str = Field(default="", description="URL absoluta de la miniatura.")
    location: str = ""
    status: str = ""
    status_id: int | None = None
    enrollment_type: EnrollmentType = "optional"
    is_public: bool = True
    instructor: str = ""
    duration: CourseDuration = Field(default_factory=CourseDuration)
    learning_type: LearningType = "online"
    max_participants: int | None = None
    start_date: str | None = None
    end_date: str | None = None
    registration_start_date: str | None = None
    registration_deadline: str | None = None
    departments: list[CourseDepartment] = Field(default_factory=list)
    levels: list[CourseLevel] = Field(default_factory=list)
    category: NamedRef | None = None
    user_ids: list[str] = Field(default_factory=list)
    progress_percentage: int | None = Field(
        default=None,
        description="Solo presente en cursos matriculados del usuario actual.",
    )
    created_at: str | None = None
    modified_at: str | None = None
    created_by: str = ""
    modified_by: str = ""
    image_file: UploadFile | None = Field(
        default=None,
        description="Miniatura nueva a subir (solo en formularios).",
    )


class Lesson(BaseModel):
    id: int
    title: str = ""
    content_type: LessonContentType = "text"
    content: str = Field(default="", description="URL del PDF/vídeo/enlace.")
    total_duration_seconds: int = 0
    position: int | None = None


class LessonInput(BaseModel):
    """Datos de alta/edición de una lección (multipart)."""

    title: str | None = None
    file: UploadFile | None = None
    link: str | None = None
    total_duration_seconds: int | None = None


class ReorderLesson(BaseModel):
    lesson_id: int = Field(..., gt=0)
    previous_lesson_id: int | None = Field(
        default=None,
        description="None mueve la lección a la primera posición.",
    )


class Question(BaseModel):
    """Pregunta de opción múltiple con cuatro opciones (A-D)."""

    id: int | None = None
    text: str = ""
    options: list[str] = Field(default_factory=lambda: ["", "", "", ""])
    correct_answer_index: int = -1
    correct_answer_indexes: list[int] = Field(default_factory=list)
    explanation: str = ""
    position: int | None = None


class CourseTest(BaseModel):
    """Test (examen) de un curso."""

    id: int | None = None
    title: str = ""
    count_question: int = 0
    questions: list[Question] = Field(default_factory=list)
    passing_score_percentage: float = 70
    time_test: int = Field(default=0, description="Duración en minutos.")
    created_by: NamedRef = Field(default_factory=lambda: NamedRef(id="unknown", name="Unknown"))


class AttachedFile(BaseModel):
    """Material adjunto a un curso (PDF o enlace)."""

    id: int
    title: str = ""
    type: Literal["pdf", "link", "other"] = "other"
    url: str = ""


class AttachedFileInput(BaseModel):
    title: str = Field(..., min_length=1)
    file: UploadFile | None = None
    link: str | None = None


class LessonProgress(BaseModel):
    lesson_id: int
    progress_percentage: float = 0
    current_page: int | None = None
    current_time_second: int | None = None
    is_completed: bool = False


class LessonProgressInput(BaseModel):
    lesson_id: int = Field(..., gt=0)
    current_page: int | None = None
    current_time_second: int | None = None
