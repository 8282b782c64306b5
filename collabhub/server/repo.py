import threading
from typing import Generic, Iterator, List, Optional, TypeVar
from .models import User, Channel, Message, key_of
from ..utils.logger import setup_logger

logger = setup_logger('collabhub.repo')

T = TypeVar('T')


class AppendOnlyBag(Generic[T]):
    """Thread-safe collection that only ever grows.

    Appends and snapshots take a short lock; iteration runs over a
    snapshot, so readers never block writers for longer than a list copy
    and never see a partially applied append.
    """

    def __init__(self):
        self._items: List[T] = []
        self._lock = threading.Lock()

    def add(self, item: T) -> T:
        with self._lock:
            self._items.append(item)
        return item

    def snapshot(self) -> List[T]:
        with self._lock:
            return list(self._items)

    def __iter__(self) -> Iterator[T]:
        return iter(self.snapshot())

    def __len__(self) -> int:
        with self._lock:
            return len(self._items)


class Store:
    """In-memory store holding users, channels and messages.

    The store is created by whoever hosts the service and handed to the
    resolvers; its data lives only as long as the process. No uniqueness
    is enforced here: duplicate nicknames or channel names are accepted and
    lookups return the first match.
    """

    def __init__(self):
        """Initialize empty collections.

        Attributes:
            _users (AppendOnlyBag[User]): Registered users
            _channels (AppendOnlyBag[Channel]): Created channels
            _messages (AppendOnlyBag[Message]): Sent messages
        """
        self._users: AppendOnlyBag[User] = AppendOnlyBag()
        self._channels: AppendOnlyBag[Channel] = AppendOnlyBag()
        self._messages: AppendOnlyBag[Message] = AppendOnlyBag()

    def add_user(self, user: User) -> User:
        """Add a user to the store.

        Args:
            user (User): User to store

        Returns:
            User: The stored user
        """
        self._users.add(user)
        logger.info(f"New user stored: {user.name} ({user.nickname})")
        return user

    def add_channel(self, channel: Channel) -> Channel:
        """Add a channel to the store.

        Args:
            channel (Channel): Channel to store

        Returns:
            Channel: The stored channel
        """
        self._channels.add(channel)
        logger.info(f"New channel stored: {channel.name} with {len(channel.members)} members")
        return channel

    def add_message(self, message: Message) -> Message:
        """Add a message to the store.

        Args:
            message (Message): Message to store

        Returns:
            Message: The stored message
        """
        self._messages.add(message)
        logger.debug(f"New message stored from {message.sender.nickname} to {message.destination!r}")
        return message

    def find_user(self, nickname: str) -> Optional[User]:
        """Find user by nickname (case insensitive).

        Args:
            nickname (str): Nickname to search for

        Returns:
            Optional[User]: First matching user, None otherwise
        """
        key = key_of(nickname)
        for user in self._users:
            if user.key == key:
                return user
        return None

    def find_channel(self, name: str) -> Optional[Channel]:
        """Find channel by name (case insensitive).

        Args:
            name (str): Channel name to search for

        Returns:
            Optional[Channel]: First matching channel, None otherwise
        """
        key = key_of(name)
        for channel in self._channels:
            if channel.key == key:
                return channel
        return None

    def users(self) -> List[User]:
        return self._users.snapshot()

    def channels(self) -> List[Channel]:
        return self._channels.snapshot()

    def messages(self) -> List[Message]:
        return self._messages.snapshot()
