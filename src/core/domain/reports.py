"""Modelos de informes, auditoría, feedback y planificación asistida por IA."""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, Field


class AvgFeedback(BaseModel):
    """Media de las cinco preguntas de valoración (escala 1-5)."""

    relevance: float = 0
    clarity: float = 0
    structure: float = 0
    duration: float = 0
    material: float = 0


class MonthlyReport(BaseModel):
    number_of_courses: int = 0
    number_of_students: int = 0
    average_completed_percentage: float = 0
    average_time: float = 0
    average_positive_feedback: float = 0


class CourseFeedbackSummary(BaseModel):
    course_name: str = ""
    avg_feedback: AvgFeedback = Field(default_factory=AvgFeedback)


class StudentsOfCourse(BaseModel):
    course_name: str = ""
    total_student: int = 0


class TopDepartment(BaseModel):
    department_name: str = ""
    count_student: int = 0
    completion_rate: float = 0


class Feedback(BaseModel):
    """Valoración de un curso por un alumno."""

    id: int | None = None
    user_id: str | None = None
    relevance: int = 0
    clarity: int = 0
    structure: int = 0
    duration: int = 0
    material: int = 0
    comment: str = ""
    submitted_at: str | None = None


class FeedbackInput(BaseModel):
    relevance: int = Field(..., ge=1, le=5)
    clarity: int = Field(..., ge=1, le=5)
    structure: int = Field(..., ge=1, le=5)
    duration: int = Field(..., ge=1, le=5)
    material: int = Field(..., ge=1, le=5)
    comment: str = ""


class AuditLogEntry(BaseModel):
    id: int | str | None = None
    action: str = ""
    entity_name: str = ""
    entity_id: str | None = None
    user_name: str = ""
    timestamp: str | None = None
    changes: list[dict[str, Any]] = Field(default_factory=list)


class AuditLogFilter(BaseModel):
    action: str | None = None
    entity_name: str | None = None
    user_name: str | None = None
    start_date: str | None = None
    end_date: str | None = None
    page: int | None = Field(default=None, ge=1)
    limit: int | None = Field(default=None, ge=1)


class ScheduleRequest(BaseModel):
    """Restricciones de planificación enviadas al modelo IA."""

    class_name: str = Field(..., min_length=1, description="Nombre de la clase a planificar.")
    instructor_availability: str = Field(
        ...,
        min_length=1,
        description="Disponibilidad del instructor (días y horas concretos).",
    )
    classroom_availability: str = Field(
        ...,
        min_length=1,
        description="Disponibilidad de aulas (días y horas concretos).",
    )
    class_duration: str = Field(..., min_length=1, description="Duración, p.ej. '1.5 hours'.")
    existing_schedule: str = Field(
        default="",
        description="Reservas existentes: clase, instructor, hora y aula.",
    )


class ScheduleResult(BaseModel):
    """Hueco elegido por el modelo IA y su justificación."""

    scheduled_time: str = Field(..., min_length=1)
    classroom: str = Field(..., min_length=1)
    reasoning: str = ""
    model: str | None = None
