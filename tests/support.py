"""Server record factories and helpers shared by the tests."""
from copy import deepcopy
import asyncio


API_URL = "https://api.meower.test"
SOCKET_URL = "wss://server.meower.test"
UPLOADS_URL = "https://uploads.meower.test"


def user_record(**overrides):
    record = {
        "_id": "Alice",
        "avatar": "",
        "avatar_color": "ff8800",
        "banned": False,
        "created": 1700000000,
        "flags": 0,
        "last_seen": 1700000500,
        "lower_username": "alice",
        "lvl": 0,
        "permissions": 0,
        "pfp_data": 21,
        "quote": "meow",
        "uuid": "9a5d4f20-4b7c-4c43-8d5e-2a3f0b2f9c11",
    }
    record.update(overrides)
    return record


def post_record(**overrides):
    record = {
        "_id": "post-1",
        "post_id": "post-1",
        "pinned": False,
        "isDeleted": False,
        "p": "hello world",
        "post_origin": "home",
        "t": {"e": 1700000000},
        "type": 1,
        "u": "Alice",
        "attachments": [],
        "reactions": [],
        "reply_to": [],
        "stickers": [],
    }
    record.update(overrides)
    return record


def chat_record(**overrides):
    record = {
        "_id": "chat-1",
        "allow_pinning": True,
        "created": 1700000000,
        "deleted": False,
        "icon": "",
        "icon_color": "000000",
        "last_active": 1700000100,
        "members": ["Alice", "Bob"],
        "nickname": "Cats",
        "owner": "Alice",
        "type": 0,
    }
    record.update(overrides)
    return record


def auth_record(token="fresh-token", chats=None):
    return {
        "account": user_record(),
        "token": token,
        "username": "Alice",
        "relationships": [],
        "chats": deepcopy(chats) if chats is not None else [],
    }


def error_record(error_type="notFound"):
    return {"error": True, "type": error_type}


async def settle(rounds=10):
    """Let pending tasks (receive loop, handlers) run."""
    for _ in range(rounds):
        await asyncio.sleep(0)
