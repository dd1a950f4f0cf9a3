from meower.client import Client
from meower.cloudlink import CloudlinkPacket, Socket, SocketState
from meower.config import Settings, load_settings
from meower.entities import Chat, ChatType, Post, PostType, RelationshipState, User
from meower.errors import (
    ApiError,
    MeowerError,
    NotSupported,
    ShapeError,
    SocketConnectionError,
    StatusCodeError
)
from meower.rest_api import RestApi
from meower.session import ApiSession
from meower.uploads import Uploads, UploadType
