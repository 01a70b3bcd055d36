"""Mapper de tests (exámenes) de curso."""

from __future__ import annotations

from typing import Any, Mapping

from core.domain.models import CourseTest, NamedRef
from core.mappers._fields import as_float, as_int, as_list, as_opt_int, as_str, pick
from core.mappers.question import map_question, question_payload

DEFAULT_PASS_THRESHOLD = 70
DEFAULT_TITLE = "Bài kiểm tra không tên"


def map_course_test(data: object) -> CourseTest:
    questions = [map_question(q) for q in as_list(pick(data, "questions"))]
    created_by = pick(data, "createdBy")
    return CourseTest(
        id=as_opt_int(pick(data, "id")),
        title=as_str(pick(data, "title")),
        count_question=as_int(pick(data, "countQuestion")) or len(questions),
        questions=questions,
        passing_score_percentage=as_float(pick(data, "passThreshold")) or DEFAULT_PASS_THRESHOLD,
        time_test=as_int(pick(data, "timeTest")),
        created_by=(
            NamedRef(id=as_str(pick(created_by, "id"), "unknown"), name=as_str(pick(created_by, "name"), "Unknown"))
            if isinstance(created_by, Mapping)
            else NamedRef(id="unknown", name="Unknown")
        ),
    )


def course_test_update_payload(test: CourseTest) -> dict[str, Any]:
    return {
        "Title": test.title or DEFAULT_TITLE,
        "PassThreshold": test.passing_score_percentage or DEFAULT_PASS_THRESHOLD,
        "TimeTest": test.time_test or 0,
    }


def course_test_create_payload(test: CourseTest) -> dict[str, Any]:
    payload = course_test_update_payload(test)
    payload["Questions"] = [question_payload(q) for q in test.questions]
    return payload
