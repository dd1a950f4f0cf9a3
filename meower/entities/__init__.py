from meower.entities.posts import Post, PostType
from meower.entities.chats import Chat, ChatType, HOME, LIVECHAT
from meower.entities.users import User, RelationshipState
