from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field, StrictBool, StrictInt, StrictStr, ValidationError

from meower.errors import ShapeError


class ApiRecord(BaseModel):
    """Base for records sent by the server. Unknown keys are kept as-is."""

    model_config = ConfigDict(extra="allow", populate_by_name=True, validate_assignment=True)

    def dump(self) -> dict[str, Any]:
        return self.model_dump(by_alias=True, mode="python")


class ApiUser(ApiRecord):
    id: StrictStr = Field(alias="_id")  # actually their username
    avatar: StrictStr
    avatar_color: StrictStr  # their profile colour
    banned: StrictBool
    created: StrictInt
    flags: StrictInt
    last_seen: Optional[StrictInt] = None
    lower_username: StrictStr
    lvl: StrictInt  # deprecated
    permissions: StrictInt
    pfp_data: StrictInt  # their legacy avatar
    quote: StrictStr
    uuid: StrictStr


class ApiAttachment(ApiRecord):
    id: StrictStr
    filename: StrictStr
    mime: StrictStr
    size: StrictInt
    width: Optional[StrictInt] = None
    height: Optional[StrictInt] = None


class ApiEmoji(ApiRecord):
    id: StrictStr = Field(alias="_id")
    name: StrictStr
    animated: StrictBool = False


class ApiReaction(ApiRecord):
    emoji: StrictStr
    count: StrictInt
    user_reacted: StrictBool = False


class PostTimestamp(ApiRecord):
    e: StrictInt  # unix epoch seconds


class ApiPost(ApiRecord):
    id: StrictStr = Field(alias="_id")
    post_id: StrictStr
    pinned: StrictBool
    isDeleted: StrictBool
    p: StrictStr  # content
    post_origin: StrictStr  # can be home, inbox, livechat or a chat ID
    t: PostTimestamp
    type: StrictInt
    u: StrictStr  # author's username
    attachments: list[ApiAttachment] = Field(default_factory=list)
    reactions: list[ApiReaction] = Field(default_factory=list)
    reply_to: list[Optional["ApiPost"]] = Field(default_factory=list)  # null if the reply was deleted
    stickers: list[ApiEmoji] = Field(default_factory=list)


class ApiChat(ApiRecord):
    id: StrictStr = Field(alias="_id")
    allow_pinning: StrictBool
    created: StrictInt
    deleted: StrictBool
    icon: Optional[StrictStr] = None
    icon_color: StrictStr
    last_active: StrictInt
    members: list[StrictStr]
    nickname: StrictStr
    owner: StrictStr
    type: StrictInt


class Statistics(ApiRecord):
    users: StrictInt
    posts: StrictInt
    chats: StrictInt


class AuthPayload(ApiRecord):
    # Accounts change shape between server versions, only the token is required
    account: dict[str, Any] = Field(default_factory=dict)
    token: StrictStr
    username: Optional[StrictStr] = None
    relationships: list[Any] = Field(default_factory=list)
    chats: list[Any] = Field(default_factory=list)


class Credentials(BaseModel):
    username: str
    password: str
    captcha: Optional[str] = None

    model_config = ConfigDict(str_strip_whitespace=True)


class ChatBody(BaseModel):
    nickname: Optional[str] = Field(default=None, max_length=50)
    icon: Optional[str] = Field(default=None)
    icon_color: Optional[str] = Field(default=None)
    allow_pinning: Optional[bool] = Field(default=None)

    model_config = ConfigDict(validate_assignment=True, str_strip_whitespace=True)


class PostBody(BaseModel):
    content: Optional[str] = Field(default="", max_length=4000)
    nonce: Optional[str] = Field(default=None, max_length=64)
    attachments: Optional[list[str]] = Field(default_factory=list)
    reply_to: Optional[list[str]] = Field(default_factory=list)
    stickers: Optional[list[str]] = Field(default_factory=list)

    model_config = ConfigDict(validate_assignment=True)


class ReportBody(BaseModel):
    reason: str = Field(default="No reason provided", max_length=2000)
    comment: str = Field(default="", max_length=2000)

    model_config = ConfigDict(validate_assignment=True, str_strip_whitespace=True)


class RelationshipBody(BaseModel):
    state: int = Field(ge=0, le=2)


ApiPost.model_rebuild()


def parse_record(model: type[ApiRecord], data: Any, message: str) -> ApiRecord:
    """Validate a server record, raising ShapeError (with the raw data attached) if it doesn't fit."""

    if isinstance(data, model):
        data = data.dump()
    try:
        return model.model_validate(data)
    except ValidationError as e:
        raise ShapeError(f"{message}: {e.error_count()} invalid field(s)", data) from e
