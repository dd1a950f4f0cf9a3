"""Tests for RestApi: authentication, caches and listings."""
import pytest

from meower.entities import Chat, User
from meower.errors import ApiError
from meower.rest_api import RestApi

from support import API_URL, chat_record, error_record, post_record, user_record


def login_record(token="token"):
    return {"error": False, "token": token, "account": user_record()}


@pytest.fixture
def api(session):
    return RestApi(session, user_record())


async def test_login(http):
    http.route("POST", "/auth/login", login_record("login-token"))

    api = await RestApi.login("Alice", "password", API_URL + "/", http=http)

    call = http.calls[-1]
    assert call.url == API_URL + "/auth/login"
    assert call.json == {"username": "Alice", "password": "password"}
    assert "token" not in call.headers
    assert api.api_token == "login-token"
    assert api.api_url == API_URL
    assert isinstance(api.api_user, User)
    assert api.api_user.username == "alice"


async def test_login_failure(http):
    http.route("POST", "/auth/login", error_record("invalidCredentials"), status=401)

    with pytest.raises(ApiError) as exc:
        await RestApi.login("Alice", "wrong", API_URL, http=http)
    assert exc.value.body["type"] == "invalidCredentials"


async def test_login_without_token(http):
    http.route("POST", "/auth/login", {"error": False, "account": user_record()})

    with pytest.raises(ApiError):
        await RestApi.login("Alice", "password", API_URL, http=http)


async def test_signup(http):
    http.route("POST", "/signup", login_record("signup-token"))

    api = await RestApi.signup("Alice", "password", "captcha-key", API_URL, http=http)

    assert http.calls[-1].json == {"username": "Alice", "password": "password", "captcha": "captcha-key"}
    assert api.api_token == "signup-token"


async def test_home_and_livechat_are_cached(api, http):
    home = await api.get_chat("home")
    livechat = await api.get_chat("livechat")

    assert home.id == "home"
    assert livechat.id == "livechat"
    assert http.calls == []


async def test_get_chats_appends_sentinels(api, http):
    http.route("GET", "/chats", {"autoget": [chat_record(), chat_record(_id="chat-2")]})

    chats = await api.get_chats()

    assert [chat.id for chat in chats] == ["chat-1", "chat-2", "home", "livechat"]
    assert all(isinstance(chat, Chat) for chat in chats)


async def test_get_chats_keeps_duplicate_sentinels(api, http):
    http.route("GET", "/chats", {"autoget": [chat_record(_id="home", nickname="home")]})

    chats = await api.get_chats()

    assert [chat.id for chat in chats] == ["home", "home", "livechat"]


async def test_get_chat_uses_cache(api, http):
    http.route("GET", "/chats/chat-1", chat_record())

    first = await api.get_chat("chat-1")
    second = await api.get_chat("chat-1")

    assert len(http.calls) == 1
    assert first.id == second.id == "chat-1"

    # Wrappers don't share state with the cache or each other
    first.members.append("Mallory")
    third = await api.get_chat("chat-1")
    assert third.members == ["Alice", "Bob"]
    assert api.chat_cache["chat-1"]["members"] == ["Alice", "Bob"]


async def test_get_chat_failure_is_not_cached(api, http):
    http.route("GET", "/chats/chat-1", error_record("notFound"), status=404)

    with pytest.raises(ApiError):
        await api.get_chat("chat-1")
    assert "chat-1" not in api.chat_cache


async def test_create_chat(api, http):
    http.route("POST", "/chats", chat_record(_id="chat-3", nickname="New chat"))

    chat = await api.create_chat("New chat")

    assert http.calls[-1].json == {"nickname": "New chat", "allow_pinning": False}
    assert chat.id == "chat-3"

    cached = await api.get_chat("chat-3")
    assert cached.nickname == "New chat"
    assert len(http.calls) == 1


async def test_get_post_uses_cache(api, http):
    http.route("GET", "/posts", post_record())

    await api.get_post("post-1")
    post = await api.get_post("post-1")

    assert len(http.calls) == 1
    assert http.calls[0].params == {"id": "post-1"}
    assert post.content == "hello world"


async def test_get_user_uses_cache(api, http):
    http.route("GET", "/users/Bob", user_record(_id="Bob", lower_username="bob"))

    await api.get_user("Bob")
    user = await api.get_user("Bob")

    assert len(http.calls) == 1
    assert user.username == "bob"


async def test_get_home(api, http):
    http.route("GET", "/home", {"autoget": [post_record()]})

    posts = await api.get_home()

    assert posts[0].id == "post-1"
    assert http.calls[-1].path == "/home"


async def test_get_inbox(api, http):
    http.route("GET", "/inbox", {"autoget": [post_record(post_origin="inbox", type=2)]})

    posts = await api.get_inbox(page=2)

    assert posts[0].type == 2
    assert http.calls[-1].params == {"autoget": 1, "page": 2}


async def test_search_users(api, http):
    http.route("GET", "/search/users/", {"autoget": [user_record(_id="Bob", lower_username="bob")]})

    users = await api.search_users("bo")

    assert users[0].id == "Bob"
    assert http.calls[-1].params == {"autoget": 1, "q": "bo", "page": 1}


async def test_get_statistics(api, http):
    http.route("GET", "/statistics", {"error": False, "users": 10, "posts": 200, "chats": 5})

    stats = await api.get_statistics()

    assert (stats.users, stats.posts, stats.chats) == (10, 200, 5)


async def test_get_statistics_bad_shape(api, http):
    http.route("GET", "/statistics", {"error": False, "users": "many"})

    with pytest.raises(ApiError) as exc:
        await api.get_statistics()
    assert exc.value.body == {"error": False, "users": "many"}
