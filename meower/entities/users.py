from enum import IntEnum
from typing import Union

from meower.entities.chats import Chat
from meower.entities.posts import Post
from meower.models import ApiUser, RelationshipBody, ReportBody, parse_record
from meower.session import ApiSession


class RelationshipState(IntEnum):
    NONE = 0
    FOLLOWING = 1  # unused by the server for now
    BLOCKED = 2


class User:
    def __init__(self, session: ApiSession, data: Union[dict, ApiUser]):
        self._session = session
        self._raw: ApiUser = parse_record(ApiUser, data, "data is not a user")
        self._assign_data()

    def _assign_data(self):
        self.id = self._raw.id
        self.avatar = self._raw.avatar
        self.profile_color = self._raw.avatar_color
        self.banned = self._raw.banned
        self.created = self._raw.created
        self.flags = self._raw.flags
        self.last_seen = self._raw.last_seen
        self.username = self._raw.lower_username
        self.lvl = self._raw.lvl
        self.permissions = self._raw.permissions
        self.pfp_data = self._raw.pfp_data
        self.quote = self._raw.quote
        self.uuid = self._raw.uuid

    @property
    def raw(self) -> ApiUser:
        return self._raw

    def __repr__(self):
        return f"<User {self.id}>"

    async def report(self, reason: str = "No reason provided", comment: str = ""):
        body = ReportBody(reason=reason, comment=comment)
        await self._session.call("post", f"/users/{self.id}/report", "failed to report user", json=body.model_dump())

    async def change_relationship(self, state: RelationshipState):
        body = RelationshipBody(state=int(state))
        await self._session.call(
            "patch",
            f"/users/{self.id}/relationship",
            "failed to change relationship",
            json=body.model_dump()
        )

    async def get_posts(self, page: int = 1) -> list[Post]:
        posts = await self._session.autoget(f"/users/{self.id}/posts", "failed to get user posts", params={"page": page})
        return [Post(self._session, post) for post in posts]

    async def get_dm(self) -> Chat:
        data = await self._session.call("get", f"/users/{self.id}/dm", "failed to get dm")
        return Chat(self._session, data)
