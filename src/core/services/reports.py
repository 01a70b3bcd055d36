"""Servicios de informes, auditoría y feedback."""

from __future__ import annotations

from typing import Any

from adapters.resource_client import ResourceClient
from core import endpoints
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
from core.errors import invalid_argument
from core.mappers.reports import (
    feedback_payload,
    map_audit_log_entry,
    map_avg_feedback,
    map_course_feedback_summary,
    map_feedback,
    map_monthly_report,
    map_students_of_course,
    map_top_department,
)
from core.services._collections import read_collection, read_nested_collection
from core.validation import path_id, require_id


class ReportsService:
    """Estadísticas agregadas. Un cuerpo vacío da ceros (valores por defecto del mapper)."""

    def __init__(self, client: ResourceClient) -> None:
        self._client = client

    async def avg_feedback(self) -> AvgFeedback:
        return map_avg_feedback(await self._client.get(endpoints.REPORT_AVG_FEEDBACK))

    async def monthly_report(self, month: int) -> MonthlyReport:
        if isinstance(month, bool) or not isinstance(month, int) or not 1 <= month <= 12:
            raise invalid_argument("month must be between 1 and 12", field="month")
        return map_monthly_report(await self._client.get(endpoints.REPORT_MONTHLY.format(month=month)))

    async def course_feedback(self) -> list[CourseFeedbackSummary]:
        return await read_collection(self._client, endpoints.REPORT_COURSE_FEEDBACK, map_course_feedback_summary)

    async def students_of_course(self) -> list[StudentsOfCourse]:
        return await read_collection(self._client, endpoints.REPORT_STUDENTS_OF_COURSE, map_students_of_course)

    async def top_departments(self) -> list[TopDepartment]:
        return await read_collection(self._client, endpoints.REPORT_TOP_DEPARTMENTS, map_top_department)


def _filter_params(filters: AuditLogFilter | None) -> dict[str, Any]:
    if filters is None:
        return {}
    return {
        "action": filters.action,
        "entityName": filters.entity_name,
        "userName": filters.user_name,
        "startDate": filters.start_date,
        "endDate": filters.end_date,
        "page": filters.page,
        "limit": filters.limit,
    }


class AuditLogService:
    """Historial de cambios. El backend responde con sobre o con un array desnudo."""

    def __init__(self, client: ResourceClient) -> None:
        self._client = client

    async def course_log(self, course_id: str, filters: AuditLogFilter | None = None) -> list[AuditLogEntry]:
        params = {"courseId": require_id(course_id, "course_id"), **_filter_params(filters)}
        return await read_collection(self._client, endpoints.AUDIT_LOG_COURSE, map_audit_log_entry, params)

    async def user_log(self, user_id: str, filters: AuditLogFilter | None = None) -> list[AuditLogEntry]:
        params = {"userId": require_id(user_id, "user_id"), **_filter_params(filters)}
        return await read_collection(self._client, endpoints.AUDIT_LOG_USER, map_audit_log_entry, params)

    async def global_log(self, filters: AuditLogFilter | None = None) -> list[AuditLogEntry]:
        return await read_collection(
            self._client, endpoints.AUDIT_LOG, map_audit_log_entry, _filter_params(filters)
        )


class FeedbackService:
    def __init__(self, client: ResourceClient) -> None:
        self._client = client

    async def list_feedback(self, course_id: str) -> list[Feedback]:
        path = endpoints.FEEDBACK.format(course_id=path_id(course_id, "course_id"))
        return await read_nested_collection(self._client, path, map_feedback)

    async def create_feedback(self, course_id: str, payload: FeedbackInput) -> None:
        path = endpoints.FEEDBACK_CREATE.format(course_id=path_id(course_id, "course_id"))
        await self._client.post(path, feedback_payload(payload))
