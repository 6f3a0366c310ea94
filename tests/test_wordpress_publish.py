import httpx
import pytest

from conftest import route
from wpstudio.exceptions import (
    AmbiguousResponseError,
    InvalidResponseError,
    MissingCredentialsError,
    RemoteRejectedError,
    WordPressConnectionError,
)
from wpstudio.models import GeneratedContent, PublishResult
from wpstudio.wordpress import WordPressAPI

PUBLISHED = httpx.Response(201, json={"id": 42, "link": "https://x/y"})


def make_api(fake, url="https://example.com/wp-admin/", username="admin", password="abcd efgh"):
    return WordPressAPI(url, username, password, transport=fake.transport)


@pytest.mark.parametrize("url,username,password", [
    ("", "admin", "pass"),
    ("example.com", "", "pass"),
    ("example.com", "admin", ""),
    ("   ", "admin", "pass"),
])
async def test_missing_credentials_fail_before_network(fake_wp, url, username, password):
    fake = fake_wp(route({}, default=PUBLISHED))

    with pytest.raises(MissingCredentialsError):
        await make_api(fake, url, username, password).publish(GeneratedContent(title="t", body="b"))
    assert fake.requests == []


async def test_create_targets_collection(fake_wp):
    fake = fake_wp(route({("POST", "/posts"): PUBLISHED}))

    result = await make_api(fake).publish(GeneratedContent(title="Hola", body="<p>Mundo</p>"))

    assert result == PublishResult(post_url="https://x/y", post_id=42)
    request = fake.requests[0]
    assert request.method == "POST"
    assert str(request.url) == "https://example.com/wp-json/wp/v2/posts"
    assert fake.bodies() == [{"title": "Hola", "content": "<p>Mundo</p>", "status": "publish"}]


async def test_update_targets_item_path(fake_wp):
    fake = fake_wp(route({("POST", "/posts/42"): PUBLISHED}))

    await make_api(fake).publish(GeneratedContent(title="t", body="b", post_id="42"))

    assert fake.paths() == [("POST", "/wp-json/wp/v2/posts/42")]


async def test_sends_basic_auth_and_json_headers(fake_wp):
    fake = fake_wp(route({("POST", "/posts"): PUBLISHED}))

    await make_api(fake, username="user", password="pass").publish(GeneratedContent(title="t", body="b"))

    headers = fake.requests[0].headers
    assert headers["Authorization"] == "Basic dXNlcjpwYXNz"
    assert headers["Content-Type"] == "application/json"


async def test_posts_include_resolved_tags(fake_wp):
    fake = fake_wp(route({
        ("GET", "/tags"): httpx.Response(200, json=[{"id": 5, "name": "Tech"}]),
        ("POST", "/posts"): PUBLISHED,
    }))

    await make_api(fake).publish(GeneratedContent(title="t", body="b", tags=["tech"]))

    assert fake.bodies()[-1]["tags"] == [5]


async def test_empty_resolved_tags_are_omitted(fake_wp):
    fake = fake_wp(route({
        ("GET", "/tags"): httpx.Response(500, json={"message": "down"}),
        ("POST", "/tags"): httpx.Response(403, json={"message": "no permission"}),
        ("POST", "/posts"): PUBLISHED,
    }))

    result = await make_api(fake).publish(GeneratedContent(title="t", body="b", tags=["a"]))

    assert result.post_id == 42
    assert "tags" not in fake.bodies()[-1]


async def test_pages_never_resolve_tags(fake_wp):
    fake = fake_wp(route({("POST", "/pages"): PUBLISHED}))

    await make_api(fake).publish(GeneratedContent(title="t", body="b", tags=["a"], post_type="pages"))

    assert fake.paths() == [("POST", "/wp-json/wp/v2/pages")]
    assert "tags" not in fake.bodies()[0]


async def test_rejection_uses_remote_message(fake_wp):
    fake = fake_wp(route({}, default=httpx.Response(403, json={"code": "rest_forbidden", "message": "Forbidden"})))

    with pytest.raises(RemoteRejectedError, match="Forbidden") as info:
        await make_api(fake).publish(GeneratedContent(title="t", body="b"))
    assert info.value.status_code == 403
    assert info.value.code == "rest_forbidden"


async def test_rejection_without_message_uses_status_text(fake_wp):
    fake = fake_wp(route({}, default=httpx.Response(500, json={})))

    with pytest.raises(RemoteRejectedError, match="Internal Server Error"):
        await make_api(fake).publish(GeneratedContent(title="t", body="b"))


async def test_success_without_link_is_ambiguous(fake_wp):
    fake = fake_wp(route({}, default=httpx.Response(201, json={"id": 42})))

    with pytest.raises(AmbiguousResponseError):
        await make_api(fake).publish(GeneratedContent(title="t", body="b"))


async def test_success_without_id_is_ambiguous(fake_wp):
    fake = fake_wp(route({}, default=httpx.Response(200, json={"link": "https://x/y"})))

    with pytest.raises(AmbiguousResponseError):
        await make_api(fake).publish(GeneratedContent(title="t", body="b"))


@pytest.mark.parametrize("status", [200, 404])
async def test_html_response_is_invalid(fake_wp, status):
    fake = fake_wp(route({}, default=httpx.Response(status, text="<!DOCTYPE html><html></html>")))

    with pytest.raises(InvalidResponseError, match="URL"):
        await make_api(fake).publish(GeneratedContent(title="t", body="b"))


async def test_transport_failure(fake_wp):
    def handler(request):
        raise httpx.ConnectError("Name or service not known", request=request)

    with pytest.raises(WordPressConnectionError, match="Name or service not known"):
        await make_api(fake_wp(handler)).publish(GeneratedContent(title="t", body="b"))


async def test_malformed_site_url_is_a_connection_error(fake_wp):
    fake = fake_wp(route({}, default=PUBLISHED))

    with pytest.raises(WordPressConnectionError):
        await make_api(fake, url="https://[::1").publish(GeneratedContent(title="t", body="b"))
    assert fake.requests == []
