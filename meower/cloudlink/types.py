from enum import Enum
from typing import Any, Optional, TypedDict


PROTOCOL_VERSION = 1


class CloudlinkPacket(TypedDict, total=False):
    cmd: str
    val: Any
    listener: Optional[str]


class SocketState(str, Enum):
    DISCONNECTED = "disconnected"
    CONNECTING = "connecting"
    OPEN = "open"
    CLOSING = "closing"
    CLOSED = "closed"


# Older event names that are still accepted when subscribing
event_aliases = {
    "create_message": "create_post",
    "edit_message": "edit_post",
    "delete_message": "delete_post",
}

statuscodes = {
    "Banned": "E:018 | Account Banned",
    "Datatype": "E:102 | Datatype",
    "InternalServerError": "E:104 | Internal",
    "Invalid": "E:118 | Invalid command",
    "OK": "I:100 | OK",
    "PasswordInvalid": "I:011 | Invalid Password",
    "Syntax": "E:101 | Syntax",
    "TAEnabled": "I:112 | Trusted Access enabled",
}

# Status codes that don't mean a request failed
ok_statuscodes = {
    statuscodes["OK"],
    statuscodes["TAEnabled"],
}
