"""
Tests for the domain services and the query facade, over a mocked API.
"""

import asyncio
from unittest import mock

import httpx
import pytest

from core.domain.models import AttachedFileInput, LessonProgressInput, Question, UploadFile
from core.domain.organization import ResetPasswordInput, RoleInput, ServiceRole, UserInput
from core.errors import ClassifiedError, ErrorKind
from core.query import QueryCache
from core.services.course_tests import CourseTestsService
from core.services.courses import CoursesService
from core.services.lessons import LessonsService
from core.services.materials import AttachedFilesService, LessonProgressService
from core.services.organization import RolesService
from core.services.queries import TrainingQueries, TrainingServices
from core.services.reports import FeedbackService, ReportsService
from core.services.users import UsersService
from tests.conftest import json_response, request_json


class Recorder:
    """MockTransport handler answering from a {(method, path): response} table."""

    def __init__(self, routes: dict[tuple[str, str], httpx.Response]) -> None:
        self.routes = routes
        self.requests: list[httpx.Request] = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        response = self.routes.get((request.method, request.url.path))
        if response is None:
            return json_response(404, {"message": "no route"})
        return response


def run_with(make_client, routes, action):
    recorder = Recorder(routes)

    async def scenario():
        async with make_client(recorder) as client:
            return await action(client)

    return asyncio.run(scenario()), recorder


class TestLessons:
    def test_course_without_lessons_is_empty_list(self, make_client):
        result, _ = run_with(
            make_client,
            {("GET", "/api/courses/c1/lessons"): json_response(404, {"message": "No lessons"})},
            lambda c: LessonsService(c).list_lessons("c1"),
        )
        assert result == []

    def test_forbidden_lessons_propagate(self, make_client):
        with pytest.raises(ClassifiedError) as excinfo:
            run_with(
                make_client,
                {("GET", "/api/courses/c1/lessons"): json_response(403)},
                lambda c: LessonsService(c).list_lessons("c1"),
            )
        assert excinfo.value.kind is ErrorKind.AUTHORIZATION

    def test_bulk_delete_is_one_request(self, make_client):
        _, recorder = run_with(
            make_client,
            {("DELETE", "/api/courses/c1/lessons"): httpx.Response(200)},
            lambda c: LessonsService(c).delete_lessons("c1", [5, 7]),
        )
        assert len(recorder.requests) == 1
        assert request_json(recorder.requests[0]) == {"ids": [5, 7]}

    def test_empty_course_id_rejected_before_io(self, make_client):
        with pytest.raises(ClassifiedError) as excinfo:
            run_with(make_client, {}, lambda c: LessonsService(c).list_lessons("  "))
        assert excinfo.value.kind is ErrorKind.VALIDATION

    def test_non_positive_lesson_id_rejected(self, make_client):
        with pytest.raises(ClassifiedError) as excinfo:
            run_with(make_client, {}, lambda c: LessonsService(c).delete_lessons("c1", [0]))
        assert excinfo.value.kind is ErrorKind.VALIDATION
        assert "lesson_ids" in excinfo.value.field_errors


class TestPathIds:
    def test_ids_are_encoded_as_one_segment(self, make_client):
        async def action(client):
            service = CoursesService(client)
            for course_id in ("../Users/42", "c1?admin=true"):
                with pytest.raises(ClassifiedError):
                    await service.get_course(course_id)

        _, recorder = run_with(make_client, {}, action)
        assert [r.url.raw_path for r in recorder.requests] == [
            b"/api/Courses/..%2FUsers%2F42",
            b"/api/Courses/c1%3Fadmin%3Dtrue",
        ]
        assert all(not r.url.params for r in recorder.requests)

    def test_bulk_delete_not_redirected_by_course_id(self, make_client):
        seen: list[httpx.Request] = []

        def handler(request):
            seen.append(request)
            return httpx.Response(200)

        async def scenario():
            async with make_client(handler) as client:
                await LessonsService(client).delete_lessons("abc/lessons/9#", [5])

        asyncio.run(scenario())
        assert len(seen) == 1
        request = seen[0]
        assert request.method == "DELETE"
        assert request.url.raw_path == b"/api/courses/abc%2Flessons%2F9%23/lessons"
        assert request_json(request) == {"ids": [5]}


class TestCourses:
    def test_missing_course_is_not_found(self, make_client):
        with pytest.raises(ClassifiedError) as excinfo:
            run_with(make_client, {}, lambda c: CoursesService(c).get_course("does-not-exist"))
        assert excinfo.value.kind is ErrorKind.NOT_FOUND

    def test_null_entity_body_is_not_found(self, make_client):
        with pytest.raises(ClassifiedError) as excinfo:
            run_with(
                make_client,
                {("GET", "/api/Courses/c1"): json_response(200, {"success": True, "data": None})},
                lambda c: CoursesService(c).get_course("c1"),
            )
        assert excinfo.value.kind is ErrorKind.NOT_FOUND

    def test_default_paging_params_omitted(self, make_client):
        body = {"items": [{"id": "c1", "name": "Py"}], "pagination": {"totalItems": 1, "itemsPerPage": 10, "currentPage": 1}}
        result, recorder = run_with(
            make_client,
            {("GET", "/api/Courses"): json_response(200, body)},
            lambda c: CoursesService(c).list_courses(),
        )
        assert result.items[0].title == "Py"
        assert dict(recorder.requests[0].url.params) == {}

    def test_search_uses_search_endpoint(self, make_client):
        _, recorder = run_with(
            make_client,
            {("GET", "/api/Courses/search"): json_response(200, [])},
            lambda c: CoursesService(c).list_courses(page=2, page_size=20, search=" py "),
        )
        params = recorder.requests[0].url.params
        assert (params["page"], params["pageSize"], params["keyword"]) == ("2", "20", "py")

    def test_soft_delete_sends_ids(self, make_client):
        _, recorder = run_with(
            make_client,
            {("POST", "/api/Courses/soft-delete"): httpx.Response(200)},
            lambda c: CoursesService(c).soft_delete_courses(["c1", "c2"]),
        )
        assert request_json(recorder.requests[0]) == {"ids": ["c1", "c2"]}


class TestTests:
    def test_course_without_tests_is_empty(self, make_client):
        result, _ = run_with(make_client, {}, lambda c: CourseTestsService(c).list_tests("c1"))
        assert result == []

    def test_missing_test_is_not_found(self, make_client):
        with pytest.raises(ClassifiedError) as excinfo:
            run_with(make_client, {}, lambda c: CourseTestsService(c).get_test("c1", 9))
        assert excinfo.value.kind is ErrorKind.NOT_FOUND


class TestUsers:
    def test_backend_params(self, make_client, settings):
        service = UsersService(mock.Mock(settings=settings))
        assert service.backend_params(page=2, limit=12, search=" an ") == {
            "Page": 2,
            "Limit": 12,
            "SortField": None,
            "SortType": None,
            "keyword": "an",
        }
        assert "Limit" not in service.backend_params(limit=settings.max_page_size)

    def test_reset_password_mismatch_rejected(self, make_client):
        payload = ResetPasswordInput(new_password="a1", confirm_new_password="b2")
        with pytest.raises(ClassifiedError) as excinfo:
            run_with(make_client, {}, lambda c: UsersService(c).reset_password("u1", payload))
        assert excinfo.value.kind is ErrorKind.VALIDATION

    def test_update_with_avatar_is_multipart(self, make_client):
        avatar = UploadFile(filename="me.png", content=b"png", content_type="image/png")
        _, recorder = run_with(
            make_client,
            {("PUT", "/api/Users/update"): json_response(200, {"id": "u1", "fullName": "An"})},
            lambda c: UsersService(c).update_profile(UserInput(full_name="An", avatar=avatar)),
        )
        request = recorder.requests[0]
        assert request.headers["Content-Type"].startswith("multipart/form-data")
        assert b'name="UrlAvatar"' in request.content


class TestMaterials:
    def test_files_and_progress_404_are_empty(self, make_client):
        async def action(client):
            return (
                await AttachedFilesService(client).list_files("c1"),
                await LessonProgressService(client).list_progress("c1"),
                await FeedbackService(client).list_feedback("c1"),
            )

        result, _ = run_with(make_client, {}, action)
        assert result == ([], [], [])

    def test_upload_needs_file_or_link(self, make_client):
        with pytest.raises(ClassifiedError):
            run_with(
                make_client,
                {},
                lambda c: AttachedFilesService(c).upload_files("c1", [AttachedFileInput(title="Empty")]),
            )

    def test_upload_uses_indexed_names(self, make_client):
        items = [
            AttachedFileInput(title="Doc", link="https://docs.test"),
            AttachedFileInput(title="Pdf", file=UploadFile(filename="a.pdf", content=b"%PDF")),
        ]
        _, recorder = run_with(
            make_client,
            {("POST", "/api/courseattachedfiles/c1"): json_response(200, [])},
            lambda c: AttachedFilesService(c).upload_files("c1", items),
        )
        body = recorder.requests[0].content
        assert b'name="request[0].Link"' in body
        assert b'name="request[1].File"' in body

    def test_progress_upsert_payload(self, make_client):
        _, recorder = run_with(
            make_client,
            {("POST", "/api/LessonProgress/upsert-lesson-progress"): httpx.Response(200)},
            lambda c: LessonProgressService(c).upsert_progress(LessonProgressInput(lesson_id=4, current_time_second=90)),
        )
        assert request_json(recorder.requests[0]) == {"lessonId": 4, "currentTimeSecond": 90}


class TestRoles:
    def test_list_and_get(self, make_client):
        routes = {
            ("GET", "/api/roles"): json_response(200, {"success": True, "data": [{"id": "r1", "name": "ADMIN"}]}),
            ("GET", "/api/roles/r1"): json_response(200, {"id": "r1", "name": "ADMIN"}),
        }

        async def action(client):
            service = RolesService(client)
            return await service.list_roles(), await service.get_role("r1")

        (roles, role), _ = run_with(make_client, routes, action)
        assert roles == [ServiceRole(id="r1", name="ADMIN")]
        assert role.name == "ADMIN"

    def test_by_name_is_exact_match(self, make_client):
        body = [{"id": "r1", "name": "HR Manager"}, {"id": "r2", "name": "HR"}]
        role, recorder = run_with(
            make_client,
            {("GET", "/api/roles"): json_response(200, body)},
            lambda c: RolesService(c).get_role_by_name("hr"),
        )
        assert role.id == "r2"
        assert recorder.requests[0].url.params["name"] == "hr"

    def test_by_name_without_match_is_not_found(self, make_client):
        with pytest.raises(ClassifiedError) as excinfo:
            run_with(
                make_client,
                {("GET", "/api/roles"): json_response(200, [])},
                lambda c: RolesService(c).get_role_by_name("ghost"),
            )
        assert excinfo.value.kind is ErrorKind.NOT_FOUND

    def test_create_payload(self, make_client):
        _, recorder = run_with(
            make_client,
            {("POST", "/api/roles"): json_response(200, {"id": "r3", "name": "Mentor"})},
            lambda c: RolesService(c).create_role(RoleInput(name="Mentor")),
        )
        assert request_json(recorder.requests[0]) == {"name": "Mentor"}


class TestReports:
    def test_month_out_of_range(self, make_client):
        with pytest.raises(ClassifiedError) as excinfo:
            run_with(make_client, {}, lambda c: ReportsService(c).monthly_report(13))
        assert excinfo.value.kind is ErrorKind.VALIDATION

    def test_empty_report_is_zeros(self, make_client):
        result, _ = run_with(
            make_client,
            {("GET", "/api/Report/avg-feedback"): httpx.Response(200)},
            lambda c: ReportsService(c).avg_feedback(),
        )
        assert result.relevance == 0.0


class TestQueries:
    def test_bulk_lesson_delete_invalidates_once(self, make_client, settings):
        routes = {
            ("GET", "/api/courses/c1/lessons"): json_response(200, [{"id": 5, "title": "A"}, {"id": 7, "title": "B"}]),
            ("DELETE", "/api/courses/c1/lessons"): httpx.Response(200),
        }
        recorder = Recorder(routes)

        async def scenario():
            async with make_client(recorder) as client:
                queries = TrainingQueries(TrainingServices.from_client(client), QueryCache(settings))
                await queries.lessons("c1")
                with mock.patch.object(queries.cache, "invalidate", wraps=queries.cache.invalidate) as spy:
                    await queries.delete_lessons("c1", [5, 7])
                return queries, spy

        queries, spy = asyncio.run(scenario())
        spy.assert_called_once_with(("lessons", "c1"))
        assert [r.method for r in recorder.requests] == ["GET", "DELETE"]
        assert queries.cache.is_stale(("lessons", "c1"))

    def test_repeated_reads_hit_network_once(self, make_client, settings):
        recorder = Recorder({("GET", "/api/Positions"): json_response(200, [{"positionId": 1, "positionName": "Dev"}])})

        async def scenario():
            async with make_client(recorder) as client:
                queries = TrainingQueries(TrainingServices.from_client(client), QueryCache(settings))
                first = await queries.positions()
                second = await queries.positions()
                return first, second

        first, second = asyncio.run(scenario())
        assert first == second
        assert len(recorder.requests) == 1

    def test_question_create_invalidates_tests(self, make_client, settings):
        recorder = Recorder({("POST", "/api/tests/3/questions"): json_response(200, {"id": 11, "questionText": "Q"})})

        async def scenario():
            async with make_client(recorder) as client:
                queries = TrainingQueries(TrainingServices.from_client(client), QueryCache(settings))
                queries.cache.set_query_data(("tests", "c1"), [])
                queries.cache.set_query_data(("questions", 3, {"page": 1}), [])
                await queries.create_question(3, Question(text="Q", correct_answer_index=0))
                return queries.cache

        cache = asyncio.run(scenario())
        assert cache.is_stale(("tests", "c1"))
        assert cache.is_stale(("questions", 3, {"page": 1}))

    def test_role_delete_invalidates_roles_and_users(self, make_client, settings):
        recorder = Recorder(
            {
                ("GET", "/api/roles"): json_response(200, [{"id": "r1", "name": "HR"}]),
                ("DELETE", "/api/roles/r1"): httpx.Response(200),
            }
        )

        async def scenario():
            async with make_client(recorder) as client:
                queries = TrainingQueries(TrainingServices.from_client(client), QueryCache(settings))
                await queries.roles()
                queries.cache.set_query_data(("users", "list", {"page": 1}), [])
                await queries.delete_role("r1")
                return queries.cache

        cache = asyncio.run(scenario())
        assert cache.is_stale(("roles",))
        assert cache.is_stale(("users", "list", {"page": 1}))

    def test_default_page_size_shares_cache_entry(self, make_client, settings):
        recorder = Recorder({("GET", "/api/Courses"): json_response(200, [{"id": "c1", "name": "Py"}])})

        async def scenario():
            async with make_client(recorder) as client:
                queries = TrainingQueries(TrainingServices.from_client(client), QueryCache(settings))
                await queries.courses()
                await queries.courses(page_size=settings.default_page_size)
                return len(queries.cache)

        assert asyncio.run(scenario()) == 1
        assert len(recorder.requests) == 1

    def test_users_limit_at_backend_max_shares_cache_entry(self, make_client, settings):
        recorder = Recorder({("GET", "/api/Users"): json_response(200, [])})

        async def scenario():
            async with make_client(recorder) as client:
                queries = TrainingQueries(TrainingServices.from_client(client), QueryCache(settings))
                await queries.users()
                await queries.users(limit=settings.max_page_size + 6)
                return len(queries.cache)

        assert asyncio.run(scenario()) == 1
        assert len(recorder.requests) == 1
