"""Mappers de informes, feedback y auditoría.

Los nombres del cable incluyen erratas del backend (`averange...`) y el
prefijo de pregunta (`q1_relevance`); se aceptan también los nombres limpios.
"""

from __future__ import annotations

from typing import Any

from core.domain.reports import (
    AuditLogEntry,
    AvgFeedback,
    CourseFeedbackSummary,
    Feedback,
    FeedbackInput,
    MonthlyReport,
    StudentsOfCourse,
    TopDepartment,
)
from core.mappers._fields import as_dict, as_float, as_int, as_list, as_opt_int, as_opt_str, as_str, pick


def map_avg_feedback(data: object) -> AvgFeedback:
    return AvgFeedback(
        relevance=as_float(pick(data, "q1_relevanceAvg", "relevance")),
        clarity=as_float(pick(data, "q2_clarityAvg", "clarity")),
        structure=as_float(pick(data, "q3_structureAvg", "structure")),
        duration=as_float(pick(data, "q4_durationAvg", "duration")),
        material=as_float(pick(data, "q5_materialAvg", "material")),
    )


def map_monthly_report(data: object) -> MonthlyReport:
    return MonthlyReport(
        number_of_courses=as_int(pick(data, "numberOfCourses")),
        number_of_students=as_int(pick(data, "numberOfStudents")),
        average_completed_percentage=as_float(
            pick(data, "averangeCompletedPercentage", "averageCompletedPercentage")
        ),
        average_time=as_float(pick(data, "averangeTime", "averageTime")),
        average_positive_feedback=as_float(pick(data, "averagePositiveFeedback")),
    )


def map_course_feedback_summary(data: object) -> CourseFeedbackSummary:
    return CourseFeedbackSummary(
        course_name=as_str(pick(data, "courseName")),
        avg_feedback=map_avg_feedback(pick(data, "avgFeedback")),
    )


def map_students_of_course(data: object) -> StudentsOfCourse:
    return StudentsOfCourse(
        course_name=as_str(pick(data, "courseName")),
        total_student=as_int(pick(data, "totalStudent", "totalStudents")),
    )


def map_top_department(data: object) -> TopDepartment:
    return TopDepartment(
        department_name=as_str(pick(data, "departmentName", "name")),
        count_student=as_int(pick(data, "countStudent", "studentCount")),
        completion_rate=as_float(pick(data, "completionRate", "rate")),
    )


def map_feedback(data: object) -> Feedback:
    return Feedback(
        id=as_opt_int(pick(data, "id")),
        user_id=as_opt_str(pick(data, "userId")),
        relevance=as_int(pick(data, "q1_relevance", "relevance")),
        clarity=as_int(pick(data, "q2_clarity", "clarity")),
        structure=as_int(pick(data, "q3_structure", "structure")),
        duration=as_int(pick(data, "q4_duration", "duration")),
        material=as_int(pick(data, "q5_material", "material")),
        comment=as_str(pick(data, "comment")),
        submitted_at=as_opt_str(pick(data, "submissionDate", "submittedAt", "createdAt")),
    )


def feedback_payload(feedback: FeedbackInput) -> dict[str, Any]:
    return {
        "q1_relevance": feedback.relevance,
        "q2_clarity": feedback.clarity,
        "q3_structure": feedback.structure,
        "q4_duration": feedback.duration,
        "q5_material": feedback.material,
        "comment": feedback.comment,
    }


def map_audit_log_entry(data: object) -> AuditLogEntry:
    raw_id = pick(data, "id")
    return AuditLogEntry(
        id=raw_id if isinstance(raw_id, (int, str)) and not isinstance(raw_id, bool) else None,
        action=as_str(pick(data, "action")),
        entity_name=as_str(pick(data, "entityName")),
        entity_id=as_opt_str(pick(data, "entityId")),
        user_name=as_str(pick(data, "userName")),
        timestamp=as_opt_str(pick(data, "timestamp", "createdAt")),
        changes=[as_dict(c) for c in as_list(pick(data, "changes", "changedFields")) if as_dict(c)],
    )
