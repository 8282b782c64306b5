import threading
from dataclasses import dataclass, field
from enum import Enum
from typing import Callable, List, Union


def key_of(value: str) -> str:
    """Normalize a nickname or channel name for case-insensitive comparison."""
    return value.casefold()


class Status(Enum):
    """Presence status of a user on the hub.

    Each member's value is the name exposed through the API; the
    description explains how messages reach a user in that state.
    """
    ONLINE = "Online"
    AWAY = "Away"
    BUSY = "Busy"
    OFFLINE = "Offline"

    @property
    def description(self) -> str:
        return _STATUS_DESCRIPTIONS[self]


_STATUS_DESCRIPTIONS = {
    Status.ONLINE: "The user is online, and will be notified about incoming messages ASAP.",
    Status.AWAY: "The user is online, but seems to be away from the keyboard. "
                 "Will be notified ASAP, but may not see the messages soon.",
    Status.BUSY: "The user is online, but seems to be busy. Will receive messages ASAP, but will not be notified.",
    Status.OFFLINE: "The user is not connected. Will receive messages and be notified when becoming online.",
}


@dataclass(frozen=True)
class User:
    """Represents a user of the collaboration hub.

    Attributes:
        nickname (str): Unique nickname, compared case-insensitively
        name (str): Full display name
        status (Status): Current presence status
    """
    nickname: str
    name: str
    status: Status = Status.ONLINE

    @property
    def key(self) -> str:
        return key_of(self.nickname)


@dataclass(eq=False)
class Channel:
    """A place where a group of users collaborate together.

    Channels compare by identity. The member list holds shared User
    references and is only ever replaced as a whole through
    update_members, which serializes concurrent changes per channel.

    Attributes:
        name (str): Unique channel name, compared case-insensitively
        description (str): Short description of the channel purpose
        members (List[User]): Users collaborating on the channel
    """
    name: str
    description: str
    members: List[User] = field(default_factory=list)
    _lock: threading.Lock = field(default_factory=threading.Lock, repr=False)

    @property
    def key(self) -> str:
        return key_of(self.name)

    def has_member(self, user: User) -> bool:
        return any(m.key == user.key for m in self.members)

    def update_members(self, change: Callable[[List[User]], List[User]]) -> List[User]:
        """Replace the member list with change(current members).

        The read of the current list and the write of the new one happen
        under the channel's lock, so concurrent updates are never lost.

        Args:
            change: Function receiving a copy of the current members and
                returning the new member list

        Returns:
            List[User]: The member list now stored on the channel
        """
        with self._lock:
            self.members = list(change(list(self.members)))
            return self.members


class DestinationKind(Enum):
    USER = "User"
    CHANNEL = "Channel"


class Destination:
    """Where a message was sent: either a user or a channel.

    Two destinations are equal when they have the same kind and point to
    entities with the same key. Other attributes of the target (a user's
    status, a channel's members) play no part in equality.
    """

    __slots__ = ("kind", "target")

    def __init__(self, kind: DestinationKind, target: Union[User, Channel]):
        self.kind = kind
        self.target = target

    @classmethod
    def to_user(cls, user: User) -> "Destination":
        return cls(DestinationKind.USER, user)

    @classmethod
    def to_channel(cls, channel: Channel) -> "Destination":
        return cls(DestinationKind.CHANNEL, channel)

    @property
    def key(self) -> str:
        return self.target.key

    def __eq__(self, other):
        if not isinstance(other, Destination):
            return NotImplemented
        return self.kind is other.kind and self.key == other.key

    def __hash__(self):
        return hash((self.kind, self.key))

    def __repr__(self):
        return f"Destination({self.kind.value}:{self.key})"


@dataclass(frozen=True)
class Message:
    """A message sent by a user to another user or a channel.

    Attributes:
        contents (str): Text of the message
        timestamp (int): Unix timestamp in milliseconds when the message was sent
        sender (User): User who sent the message
        destination (Destination): User or channel the message was sent to
    """
    contents: str
    timestamp: int
    sender: User
    destination: Destination
