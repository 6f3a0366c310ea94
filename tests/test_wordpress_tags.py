import json

import httpx

from conftest import route
from wpstudio.wordpress import WordPressAPI


def make_api(fake):
    return WordPressAPI("example.com", "admin", "app pass", transport=fake.transport)


def creating_tags(start_id=100, fail_on=()):
    """Handler de POST /tags que asigna IDs consecutivos y falla para ciertos nombres"""
    counter = {"next": start_id}

    def create(request):
        name = json.loads(request.content)["name"]
        if name in fail_on:
            return httpx.Response(500, json={"code": "db_error", "message": "boom"})
        tag_id = counter["next"]
        counter["next"] += 1
        return httpx.Response(201, json={"id": tag_id, "name": name})
    return create


async def test_empty_tag_list_makes_no_requests(fake_wp):
    fake = fake_wp(route({}))

    assert await make_api(fake).resolve_tags([]) == []
    assert fake.requests == []


async def test_existing_tag_is_reused_case_insensitively(fake_wp):
    fake = fake_wp(route({
        ("GET", "/tags"): httpx.Response(200, json=[{"id": 5, "name": "Tech"}]),
        ("POST", "/tags"): creating_tags(start_id=77),
    }))

    assert await make_api(fake).resolve_tags(["tech", "News"]) == [5, 77]
    assert fake.bodies("POST") == [{"name": "News"}]


async def test_existing_tags_fetch_uses_most_used_first(fake_wp):
    fake = fake_wp(route({("GET", "/tags"): httpx.Response(200, json=[])}, default=httpx.Response(201, json={"id": 1})))

    await make_api(fake).resolve_tags(["a"])

    params = fake.requests[0].url.params
    assert params["per_page"] == "100"
    assert params["orderby"] == "count"
    assert params["order"] == "desc"


async def test_failed_creation_is_skipped_and_order_kept(fake_wp):
    fake = fake_wp(route({
        ("GET", "/tags"): httpx.Response(200, json=[]),
        ("POST", "/tags"): creating_tags(start_id=10, fail_on={"b"}),
    }))

    assert await make_api(fake).resolve_tags(["a", "b", "c"]) == [10, 11]


async def test_unparseable_tag_list_is_treated_as_empty(fake_wp):
    fake = fake_wp(route({
        ("GET", "/tags"): httpx.Response(200, text="<html>not json</html>"),
        ("POST", "/tags"): creating_tags(start_id=1),
    }))

    assert await make_api(fake).resolve_tags(["x", "y"]) == [1, 2]


async def test_duplicates_with_different_case_create_once(fake_wp):
    fake = fake_wp(route({
        ("GET", "/tags"): httpx.Response(200, json=[]),
        ("POST", "/tags"): creating_tags(start_id=10),
    }))

    assert await make_api(fake).resolve_tags(["Python", "python", "PYTHON"]) == [10, 10, 10]
    assert len(fake.bodies("POST")) == 1


async def test_term_exists_reuses_reported_id(fake_wp):
    fake = fake_wp(route({
        ("GET", "/tags"): httpx.Response(200, json=[]),
        ("POST", "/tags"): httpx.Response(400, json={
            "code": "term_exists",
            "message": "A term with the name provided already exists.",
            "data": {"status": 400, "term_id": 33},
        }),
    }))

    assert await make_api(fake).resolve_tags(["Antigua"]) == [33]


async def test_network_errors_never_raise(fake_wp):
    def handler(request):
        raise httpx.ConnectError("connection refused", request=request)

    fake = fake_wp(handler)

    assert await make_api(fake).resolve_tags(["a", "b"]) == []


async def test_malformed_site_url_never_raises(fake_wp):
    fake = fake_wp(route({}))
    api = WordPressAPI("https://[::1", "admin", "pass", transport=fake.transport)

    assert await api.resolve_tags(["a"]) == []
    assert fake.requests == []
