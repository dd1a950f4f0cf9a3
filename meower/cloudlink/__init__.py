from meower.cloudlink.client import Socket
from meower.cloudlink.types import CloudlinkPacket, SocketState
