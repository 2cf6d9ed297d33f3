from __future__ import annotations

import asyncio

import pytest
import requests

from rbx import errors
from rbx.api import ACCOUNT_URL, FRIENDS_PAGE_SIZE, FRIENDS_URL, USERS_URL, WebApi, paginate

from .helpers.fakes import FakeResponse, FakeSession


def make_api(*responses):
    session = FakeSession(list(responses))
    return WebApi(session=session, timeout=1, poll_interval=0), session


def test_username_lookup_posts_the_name():
    api, session = make_api(FakeResponse(200, {"data": [{"id": 42, "name": "alice"}]}))

    assert asyncio.run(api.get_id_from_username("alice")) == 42
    method, url, kwargs = session.requests[0]
    assert (method, url) == ("POST", f"{USERS_URL}/usernames/users")
    assert kwargs["json"]["usernames"] == ["alice"]
    assert kwargs["timeout"] == 1


def test_unknown_username_raises_user_not_found():
    api, _ = make_api(FakeResponse(200, {"data": []}))

    with pytest.raises(errors.UserNotFoundError):
        asyncio.run(api.get_id_from_username("nobody"))


def test_unknown_id_raises_user_not_found():
    api, _ = make_api(FakeResponse(404, {"errors": []}))

    with pytest.raises(errors.UserNotFoundError) as caught:
        asyncio.run(api.get_username_from_id(999))
    assert caught.value.resolvable == 999


def test_server_error_is_a_transport_error():
    api, _ = make_api(FakeResponse(503, {"errors": []}))

    with pytest.raises(errors.TransportError) as caught:
        asyncio.run(api.get_username_from_id(42))
    assert caught.value.status == 503
    assert not isinstance(caught.value, errors.UserNotFoundError)


def test_network_failure_is_a_transport_error():
    api, _ = make_api(requests.ConnectionError("down"))

    with pytest.raises(errors.TransportError, match="down"):
        asyncio.run(api.get_blurb(42))


def test_login_performs_the_csrf_handshake():
    api, _ = make_api()
    handle = FakeSession([FakeResponse(403, {"errors": []}, {"x-csrf-token": "tok"}), FakeResponse(200, {})])

    def issue_cookie(session):
        if session.headers.get("X-CSRF-TOKEN") == "tok":
            session.cookies[".ROBLOSECURITY"] = "cookie"

    handle.on_request = issue_cookie

    assert asyncio.run(api.login("alice", "pw", handle)) is handle
    assert len(handle.requests) == 2
    assert handle.requests[1][2]["json"] == {"ctype": "Username", "cvalue": "alice", "password": "pw"}


def test_login_without_session_cookie_fails():
    api, _ = make_api()
    handle = FakeSession([FakeResponse(200, {})])

    with pytest.raises(errors.AuthenticationError):
        asyncio.run(api.login("alice", "pw", handle))


def test_rejected_login_is_an_authentication_error():
    api, _ = make_api()
    handle = FakeSession([FakeResponse(403, {"errors": []}, {"x-csrf-token": "tok"}), FakeResponse(403, {"errors": []})])

    with pytest.raises(errors.AuthenticationError) as caught:
        asyncio.run(api.login("alice", "wrong", handle))
    assert isinstance(caught.value.__cause__, errors.TransportError)


def test_actions_use_the_session_handle():
    api, default_session = make_api()
    handle = FakeSession([FakeResponse(200)])

    assert asyncio.run(api.block(7, handle)) is None
    assert handle.requests[0][:2] == ("POST", f"{ACCOUNT_URL}/users/7/block")
    assert default_session.requests == []


def test_friend_requests_are_paginated():
    api, _ = make_api()
    handle = FakeSession([FakeResponse(200, {"data": [{"id": n} for n in range(5)]})])

    page = asyncio.run(api.get_friends(42, "FriendRequests", 1, 2, handle))
    assert page == [{"id": 2}, {"id": 3}]
    assert handle.requests[0][1] == f"{FRIENDS_URL}/my/friends/requests"


def test_paginate_without_limit_returns_everything():
    assert paginate([1, 2, 3]) == [1, 2, 3]
    assert paginate([1, 2, 3], 0, 2) == [1, 2]
    assert paginate([1, 2, 3], 5, 2) == []


def test_unknown_feed_is_rejected():
    api, _ = make_api()

    with pytest.raises(errors.UnknownFeedError):
        api.open_feed("presence", FakeSession())


def test_feed_yields_only_new_items_and_reports_failed_polls():
    api, _ = make_api()
    handle = FakeSession([
        FakeResponse(200, {"data": [{"id": 1}]}),
        FakeResponse(500, {"errors": []}),
        FakeResponse(200, {"data": [{"id": 1}, {"id": 7}]}),
    ])

    async def scenario():
        feed = api.open_feed("friend_request", handle)
        try:
            return [await asyncio.wait_for(feed.__anext__(), 1) for _ in range(2)]
        finally:
            await feed.aclose()

    failure, request = asyncio.run(scenario())
    assert isinstance(failure, errors.TransportError)
    assert failure.status == 500
    assert request == 7
    assert len(handle.requests) == 3


def test_page_without_limit_uses_the_default_page_size():
    items = list(range(500))

    assert paginate(items, 1) == list(range(FRIENDS_PAGE_SIZE, 2 * FRIENDS_PAGE_SIZE))
    assert paginate(items, 2) == list(range(2 * FRIENDS_PAGE_SIZE, 500))


def test_friends_page_without_limit_is_a_single_page():
    api, _ = make_api(FakeResponse(200, {"data": [{"id": n} for n in range(450)]}))

    page = asyncio.run(api.get_friends(42, "AllFriends", 2))
    assert page == [{"id": n} for n in range(400, 450)]


def test_non_json_username_lookup_is_a_transport_error():
    api, _ = make_api(FakeResponse(200, "<html>maintenance</html>"))

    with pytest.raises(errors.TransportError, match="unexpected body"):
        asyncio.run(api.get_id_from_username("alice"))


def test_empty_user_lookup_is_a_transport_error():
    api, _ = make_api(FakeResponse(200))

    with pytest.raises(errors.TransportError, match="unexpected body"):
        asyncio.run(api.get_username_from_id(42))
