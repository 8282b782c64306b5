"""Query and mutation resolvers over the in-memory store.

Every resolver takes the store explicitly. Lookups that fail yield None
rather than raising, and mutations that depend on such a lookup return
None and leave the store untouched.
"""
import time
from typing import Iterable, List, Optional
from .models import User, Channel, Message, Destination, Status
from .repo import Store
from ..utils.logger import setup_logger

logger = setup_logger('collabhub.resolvers')

# Number of most recent messages returned for a destination
MESSAGE_HISTORY_LIMIT = 20


def get_user(store: Store, nickname: str) -> Optional[User]:
    return store.find_user(nickname)


def get_channel(store: Store, name: str) -> Optional[Channel]:
    return store.find_channel(name)


def get_channels(store: Store, user: User) -> List[Channel]:
    """Get the channels a user is a member of, sorted by name."""
    return sorted(
        (c for c in store.channels() if c.has_member(user)),
        key=lambda c: c.name,
    )


def get_messages(store: Store, destination: Destination) -> List[Message]:
    """Get the most recent messages sent to a destination.

    Picks the MESSAGE_HISTORY_LIMIT newest messages and returns them
    oldest first.

    Args:
        store (Store): Store to read from
        destination (Destination): User or channel the messages were sent to

    Returns:
        List[Message]: Up to MESSAGE_HISTORY_LIMIT messages in chronological order
    """
    matching = [m for m in store.messages() if m.destination == destination]
    matching.sort(key=lambda m: m.timestamp, reverse=True)
    recent = matching[:MESSAGE_HISTORY_LIMIT]
    recent.reverse()
    return recent


def create_channel(store: Store, name: str, description: str, member_nicknames: Iterable[str]) -> Channel:
    """Create a new channel with the given members.

    Nicknames that don't resolve to a user are skipped without error.

    Args:
        store (Store): Store to add the channel to
        name (str): Channel name
        description (str): Channel description
        member_nicknames (Iterable[str]): Nicknames of the initial members

    Returns:
        Channel: The created channel
    """
    members = []
    for nickname in member_nicknames:
        user = get_user(store, nickname)
        if user is None:
            logger.debug(f"create_channel: skipping unknown member '{nickname}' for '{name}'")
            continue
        members.append(user)
    return store.add_channel(Channel(name=name, description=description, members=members))


def add_user_to_channel(store: Store, channel_name: str, user_nickname: str) -> Optional[Channel]:
    """Add a user at the front of a channel's member list.

    No duplicate check is made: adding an existing member again gives a
    second entry for that user.

    Returns:
        Optional[Channel]: The updated channel, None if the channel or
        the user doesn't exist
    """
    channel = get_channel(store, channel_name)
    user = get_user(store, user_nickname)
    if channel is None or user is None:
        logger.warning(f"add_user_to_channel: '{user_nickname}' -> '{channel_name}' did not resolve")
        return None
    channel.update_members(lambda members: [user] + members)
    logger.info(f"Added user {user.nickname} to channel {channel.name}")
    return channel


def remove_user_from_channel(store: Store, channel_name: str, user_nickname: str) -> Optional[Channel]:
    """Remove every entry of a user from a channel's member list.

    Members are matched with the same case-insensitive key used by the
    lookups, so "Bob" removes a member stored as "bob".

    Returns:
        Optional[Channel]: The updated channel, None if the channel or
        the user doesn't exist
    """
    channel = get_channel(store, channel_name)
    user = get_user(store, user_nickname)
    if channel is None or user is None:
        logger.warning(f"remove_user_from_channel: '{user_nickname}' -> '{channel_name}' did not resolve")
        return None
    channel.update_members(lambda members: [m for m in members if m.key != user.key])
    logger.info(f"Removed user {user.nickname} from channel {channel.name}")
    return channel


def register_user(store: Store, nickname: str, name: str, status: Status = Status.ONLINE) -> Optional[User]:
    """Register a new user.

    Returns:
        Optional[User]: The new user, None if the nickname is already taken
    """
    if get_user(store, nickname) is not None:
        logger.warning(f"register_user: nickname '{nickname}' already taken")
        return None
    return store.add_user(User(nickname=nickname, name=name, status=status))


def post_message(
    store: Store,
    sender_nickname: str,
    contents: str,
    channel: Optional[str] = None,
    user: Optional[str] = None,
    timestamp: Optional[int] = None,
) -> Optional[Message]:
    """Send a message from a user to a channel or to another user.

    Exactly one of channel and user names the destination.

    Args:
        store (Store): Store to add the message to
        sender_nickname (str): Nickname of the sender
        contents (str): Message text
        channel (str, optional): Name of the destination channel
        user (str, optional): Nickname of the destination user
        timestamp (int, optional): Unix timestamp in milliseconds. Defaults to now

    Returns:
        Optional[Message]: The stored message, None if the sender or the
        destination doesn't exist

    Raises:
        ValueError: If both or neither of channel and user are given
    """
    if (channel is None) == (user is None):
        raise ValueError("Exactly one of channel or user must be given")

    sender = get_user(store, sender_nickname)
    destination = resolve_destination(store, channel=channel, user=user)
    if sender is None or destination is None:
        logger.warning(f"post_message: sender '{sender_nickname}' or destination did not resolve")
        return None

    if timestamp is None:
        timestamp = int(time.time() * 1000)
    return store.add_message(Message(
        contents=contents,
        timestamp=timestamp,
        sender=sender,
        destination=destination,
    ))


def resolve_destination(store: Store, channel: Optional[str] = None, user: Optional[str] = None) -> Optional[Destination]:
    """Turn a channel name or user nickname into a Destination, None if unknown."""
    if channel is not None:
        found = get_channel(store, channel)
        return Destination.to_channel(found) if found is not None else None
    if user is not None:
        found = get_user(store, user)
        return Destination.to_user(found) if found is not None else None
    return None
