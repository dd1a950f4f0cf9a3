from json import loads
from typing import TYPE_CHECKING, Any, Callable, Optional
import logging

from pydantic import ValidationError

from meower.cloudlink.types import CloudlinkPacket
from meower.entities import Chat, Post
from meower.errors import ShapeError
from meower.models import AuthPayload
from meower.utils import log

if TYPE_CHECKING:
    from meower.cloudlink.client import Socket


def parse_packet(raw: Any) -> Optional[CloudlinkPacket]:
    try:
        packet = loads(raw)
    except (TypeError, ValueError):
        return None
    if not isinstance(packet, dict):
        return None
    if not isinstance(packet.get("cmd"), str):
        return None

    # Listener IDs are only ever strings we generated
    if "listener" in packet and not isinstance(packet["listener"], str):
        del packet["listener"]
    return packet


def _dict_val(packet: CloudlinkPacket) -> Optional[dict[str, Any]]:
    val = packet.get("val")
    return val if isinstance(val, dict) else None


def _emit_post(client: "Socket", packet: CloudlinkPacket, event: str):
    # A bad post payload must never take the receive loop down with it
    try:
        post = Post(client.session, packet.get("val"))
    except ShapeError:
        log(f"Dropped malformed '{packet['cmd']}' payload", logging.DEBUG)
        return
    client.emit(event, post)


def handle_post(client: "Socket", packet: CloudlinkPacket):
    _emit_post(client, packet, "create_post")

def handle_update_post(client: "Socket", packet: CloudlinkPacket):
    _emit_post(client, packet, "edit_post")

def handle_inbox_message(client: "Socket", packet: CloudlinkPacket):
    _emit_post(client, packet, "inbox_message")


def handle_delete_post(client: "Socket", packet: CloudlinkPacket):
    val = _dict_val(packet)
    if val is None or "post_id" not in val:
        return
    client.emit("delete_post", {"post_id": val["post_id"], "chat_id": val.get("chat_id")})


def handle_typing(client: "Socket", packet: CloudlinkPacket):
    val = _dict_val(packet)
    if val is None:
        return
    client.emit("typing", {"chat_id": val.get("chat_id"), "username": val.get("username")})


def handle_ulist(client: "Socket", packet: CloudlinkPacket):
    val = packet.get("val")
    if not isinstance(val, str):
        return

    # "user1;user2;" -> ["user1", "user2"]
    client.ulist = [username for username in val.split(";") if username]
    client.emit("ulist", list(client.ulist))


def handle_auth(client: "Socket", packet: CloudlinkPacket):
    try:
        payload = AuthPayload.model_validate(packet.get("val"))
    except ValidationError:
        log("Dropped malformed 'auth' payload", logging.DEBUG)
        return

    # Everything after this uses the fresh token
    client.api_token = payload.token
    client.emit("auth", packet["val"])


def handle_reaction_add(client: "Socket", packet: CloudlinkPacket):
    val = _dict_val(packet)
    if val is not None:
        client.emit("reaction_add", val)

def handle_reaction_remove(client: "Socket", packet: CloudlinkPacket):
    val = _dict_val(packet)
    if val is not None:
        client.emit("reaction_remove", val)


def handle_create_chat(client: "Socket", packet: CloudlinkPacket):
    try:
        chat = Chat(client.session, packet.get("val"))
    except ShapeError:
        log("Dropped malformed 'create_chat' payload", logging.DEBUG)
        return
    client.emit("create_chat", chat)


def handle_update_chat(client: "Socket", packet: CloudlinkPacket):
    # Only the changed fields are sent
    val = _dict_val(packet)
    if val is None or not isinstance(val.get("_id"), str):
        return
    client.emit("update_chat", val)


def handle_delete_chat(client: "Socket", packet: CloudlinkPacket):
    val = _dict_val(packet)
    if val is None:
        return
    chat_id = val.get("chat_id", val.get("_id"))
    if isinstance(chat_id, str):
        client.emit("delete_chat", {"chat_id": chat_id})


def handle_update_relationship(client: "Socket", packet: CloudlinkPacket):
    val = _dict_val(packet)
    if val is not None:
        client.emit("update_relationship", val)


command_handlers: dict[str, Callable[["Socket", CloudlinkPacket], None]] = {
    "auth": handle_auth,
    "post": handle_post,
    "update_post": handle_update_post,
    "delete_post": handle_delete_post,
    "inbox_message": handle_inbox_message,
    "typing": handle_typing,
    "ulist": handle_ulist,
    "post_reaction_add": handle_reaction_add,
    "post_reaction_remove": handle_reaction_remove,
    "create_chat": handle_create_chat,
    "update_chat": handle_update_chat,
    "delete_chat": handle_delete_chat,
    "update_relationship": handle_update_relationship,
}


def handle_frame(client: "Socket", raw: Any):
    # Parse packet
    packet = parse_packet(raw)
    if packet is None:
        log("Dropped unparseable frame", logging.DEBUG)
        return

    client.emit("packet", packet)

    # Unknown commands only reach "packet" subscribers
    handler = command_handlers.get(packet["cmd"])
    if handler:
        handler(client, packet)

    if packet.get("listener"):
        client.resolve_listener(packet)
