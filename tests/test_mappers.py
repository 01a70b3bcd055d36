"""
Tests for the wire <-> UI mappers.
"""

from core.domain.models import Course, CourseDepartment, CourseDuration, CourseTest, LessonProgressInput, NamedRef, Question
from core.mappers.course import (
    NOT_AVAILABLE,
    absolute_image_url,
    course_create_payload,
    course_update_payload,
    map_course,
    map_enrolled_course,
)
from core.mappers.course_test import course_test_create_payload, map_course_test
from core.mappers.lesson import content_type_for, lesson_progress_payload, map_lesson, map_lesson_progress
from core.mappers.organization import flatten_departments, map_department
from core.mappers.pagination import map_paginated
from core.mappers.question import map_question, question_payload
from core.mappers.reports import map_avg_feedback, map_feedback
from core.mappers.user import map_user

ASSETS = "http://api.test"


class TestQuestions:
    def test_round_trip_single_answer(self):
        question = Question(
            text="2 + 2?",
            options=["3", "4", "5", "6"],
            correct_answer_index=1,
            correct_answer_indexes=[1],
            explanation="Arithmetic",
        )
        assert map_question(question_payload(question)) == question

    def test_round_trip_multiple_answers(self):
        question = Question(
            text="Primes?",
            options=["2", "3", "4", "9"],
            correct_answer_index=0,
            correct_answer_indexes=[0, 1],
            position=3,
        )
        payload = question_payload(question)
        assert payload["CorrectOption"] == "a,b"
        assert payload["QuestionType"] == 2
        assert map_question(payload) == question

    def test_missing_options_keep_four_slots(self):
        question = map_question({"questionText": "Q", "a": "x", "correctOption": "A"})
        assert question.options == ["x", "", "", ""]
        assert question.correct_answer_index == 0

    def test_unknown_correct_option(self):
        question = map_question({"questionText": "Q", "correctOption": "z"})
        assert question.correct_answer_index == -1
        assert question.correct_answer_indexes == []


class TestCourses:
    def test_relative_image_made_absolute(self):
        assert absolute_image_url("/uploads/a.png", "X", asset_base_url=ASSETS) == "http://api.test/uploads/a.png"
        assert absolute_image_url("uploads/a.png", "X", asset_base_url=ASSETS) == "http://api.test/uploads/a.png"

    def test_absolute_image_kept(self):
        url = "https://cdn.test/a.png"
        assert absolute_image_url(url, "X", asset_base_url=ASSETS) == url

    def test_placeholder_for_missing_or_garbage_image(self):
        assert absolute_image_url(None, "Intro Python", asset_base_url=ASSETS).startswith("https://placehold.co/")
        assert "Intro%20Python" in absolute_image_url("FormFile", "Intro Python", asset_base_url=ASSETS)

    def test_map_course_defaults(self):
        course = map_course({"id": "c1"}, asset_base_url=ASSETS)
        assert course.id == "c1"
        assert course.title == NOT_AVAILABLE
        assert course.enrollment_type == "optional"
        assert course.category is None

    def test_map_course_nested_fields(self):
        course = map_course(
            {
                "id": "c1",
                "name": "Python",
                "code": "PY1",
                "optional": "Bắt buộc",
                "status": {"id": 2, "name": "Đang mở"},
                "departments": [{"departmentId": 3, "departmentName": "IT"}, {"name": "no id"}],
                "thumbUrl": "/img/py.png",
            },
            asset_base_url=ASSETS,
        )
        assert course.enrollment_type == "mandatory"
        assert course.is_public is False
        assert course.status == "Đang mở"
        assert course.status_id == 2
        assert course.departments == [CourseDepartment(department_id=3, department_name="IT")]
        assert course.image == "http://api.test/img/py.png"

    def test_enrolled_course_progress(self):
        course = map_enrolled_course({"id": "c1", "name": "Py", "progressPercentage": 42.6})
        assert course.progress_percentage == 43

    def test_create_payload_drops_none_and_repeats_lists(self):
        course = Course(
            id="new",
            title="Python",
            course_code="PY1",
            departments=[CourseDepartment(department_id=1), CourseDepartment(department_id=2)],
            category=NamedRef(id=5, name="Dev"),
        )
        payload = course_create_payload(course)
        assert payload["DepartmentIds"] == [1, 2]
        assert payload["CategoryId"] == 5
        assert "MaxParticipant" not in payload
        assert "StartDate" not in payload

    def test_update_payload_is_diff_only(self):
        original = Course(id="c1", title="Old", course_code="PY1", duration=CourseDuration(sessions=4, hours_per_session=2))
        edited = original.model_copy(update={"title": "New", "duration": CourseDuration(sessions=5, hours_per_session=2)})
        payload = course_update_payload(edited, original)
        assert payload == {"Name": "New", "Sessions": 5, "HoursPerSessions": 2}

    def test_update_payload_clears_removed_category(self):
        original = Course(id="c1", category=NamedRef(id=5, name="Dev"))
        edited = original.model_copy(update={"category": None})
        assert course_update_payload(edited, original) == {"CategoryId": None}


class TestUsers:
    def test_reads_modified_at_typo(self):
        user = map_user({"id": "u1", "fullName": "An", "modifedAt": "2024-05-01T00:00:00"})
        assert user.modified_at == "2024-05-01T00:00:00"

    def test_null_user_is_default(self):
        user = map_user(None)
        assert user.id == "N/A"
        assert user.role == "HOCVIEN"

    def test_unknown_role_normalized(self):
        assert map_user({"id": "u1", "role": "superuser"}).role == "HOCVIEN"
        assert map_user({"id": "u1", "role": "admin"}).role == "ADMIN"

    def test_department_from_nested_object(self):
        user = map_user({"id": "u1", "department": {"departmentName": "HR"}})
        assert user.department_name == "HR"


class TestLessons:
    def test_content_type(self):
        assert content_type_for("PDF", "/files/a.pdf") == "pdf_url"
        assert content_type_for("LINK", "https://youtu.be/x") == "video_url"
        assert content_type_for("LINK", "https://docs.test") == "external_link"
        assert content_type_for("LINK", "") == "text"

    def test_map_lesson(self):
        lesson = map_lesson({"id": 4, "title": "Intro", "type": "PDF", "urlPdf": "/f.pdf", "totalDurationSeconds": 600})
        assert lesson.content_type == "pdf_url"
        assert lesson.content == "/f.pdf"
        assert lesson.total_duration_seconds == 600

    def test_progress_fraction_to_percent(self):
        progress = map_lesson_progress({"lessonId": 4, "progressPercentage": 0.756, "isCompleted": False})
        assert progress.progress_percentage == 76

    def test_progress_payload_omits_missing_positions(self):
        assert lesson_progress_payload(LessonProgressInput(lesson_id=4, current_page=3)) == {
            "lessonId": 4,
            "currentPage": 3,
        }


class TestTests:
    def test_defaults(self):
        test = map_course_test({"id": 1, "questions": [{"questionText": "Q"}]})
        assert test.passing_score_percentage == 70
        assert test.count_question == 1
        assert test.created_by.name == "Unknown"

    def test_create_payload(self):
        payload = course_test_create_payload(CourseTest(questions=[Question(text="Q", correct_answer_index=2)]))
        assert payload["Title"] == "Bài kiểm tra không tên"
        assert payload["PassThreshold"] == 70
        assert payload["Questions"][0]["CorrectOption"] == "c"


def test_department_tree():
    tree = [
        map_department(
            {
                "departmentId": 1,
                "departmentName": "Root",
                "status": {"id": 1, "name": "Active"},
                "children": [{"departmentId": 2, "departmentName": "Child", "parentId": 1, "status": "Active"}],
            }
        )
    ]
    assert tree[0].status == "Active"
    assert tree[0].children[0].parent_id == "1"
    assert [d.name for d in flatten_departments(tree)] == ["Root", "Child"]


def test_paginated_shapes():
    nested = map_paginated(
        {"items": [1, 2], "pagination": {"totalItems": 12, "itemsPerPage": 2, "currentPage": 3}}, lambda x: x * 10
    )
    assert nested.items == [10, 20]
    assert (nested.total_count, nested.page, nested.page_size, nested.total_pages) == (12, 3, 2, 6)

    bare = map_paginated([1, 2, 3], lambda x: x, page_size=2)
    assert bare.total_count == 3
    assert bare.page_size == 3


def test_report_field_aliases():
    report = map_avg_feedback({"q1_relevanceAvg": 4.5, "q2_clarityAvg": 3})
    assert report.relevance == 4.5
    assert report.clarity == 3.0
    assert report.material == 0.0
    assert map_feedback({"q1_relevance": 5, "comment": "ok"}).relevance == 5
