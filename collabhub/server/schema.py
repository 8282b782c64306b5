"""Query and mutation root fields of the collaboration hub.

Binds the resolvers to named fields: each field pulls its arguments out
of a request by name, calls a resolver against the store and renders the
result into plain JSON-ready dicts.
"""
from dataclasses import dataclass
from typing import Any, Callable, Dict, List, Optional
from . import resolvers
from .models import User, Channel, Message, Destination, DestinationKind, Status
from .repo import Store


class ArgumentError(ValueError):
    """Raised when a field argument is missing or has the wrong type."""


class FieldArgs:
    """Named arguments passed to a root field."""

    def __init__(self, values: Dict[str, Any]):
        self.values = values

    def arg(self, name: str, kind: type = str) -> Any:
        if name not in self.values or self.values[name] is None:
            raise ArgumentError(f"Missing required argument '{name}'")
        return self._check(name, self.values[name], kind)

    def optional(self, name: str, kind: type = str, default: Any = None) -> Any:
        value = self.values.get(name)
        if value is None:
            return default
        return self._check(name, value, kind)

    def str_list(self, name: str) -> List[str]:
        value = self.arg(name, list)
        if not all(isinstance(v, str) for v in value):
            raise ArgumentError(f"Argument '{name}' must be a list of strings")
        return value

    @staticmethod
    def _check(name: str, value: Any, kind: type) -> Any:
        if not isinstance(value, kind):
            raise ArgumentError(f"Argument '{name}' must be of type {kind.__name__}")
        return value


def parse_status(value: str) -> Status:
    for status in Status:
        if status.value.casefold() == value.casefold():
            return status
    raise ArgumentError(f"Unknown status '{value}'")


def render_user(user: User) -> dict:
    return {"nickname": user.nickname, "name": user.name, "status": user.status.value}


def render_channel(channel: Channel) -> dict:
    return {
        "name": channel.name,
        "description": channel.description,
        "members": [render_user(u) for u in channel.members],
    }


def render_destination(destination: Destination) -> dict:
    if destination.kind is DestinationKind.USER:
        rendered = render_user(destination.target)
    else:
        rendered = render_channel(destination.target)
    return {"__typename": destination.kind.value, **rendered}


def render_message(message: Message) -> dict:
    return {
        "contents": message.contents,
        "timestamp": message.timestamp,
        "sender": render_user(message.sender),
        "destination": render_destination(message.destination),
    }


def _many(render: Callable[[Any], dict]) -> Callable[[List[Any]], List[dict]]:
    return lambda items: [render(item) for item in items]


@dataclass(frozen=True)
class RootField:
    """A query or mutation field.

    Attributes:
        name (str): Field name as exposed by the API
        description (str): Human readable purpose of the field
        resolve (Callable): Called with the store and the field arguments
        render (Callable): Turns the resolved value into JSON-ready data
        nullable (bool): Whether the field may resolve to null
    """
    name: str
    description: str
    resolve: Callable[[Store, FieldArgs], Any]
    render: Callable[[Any], Any]
    nullable: bool = False

    def execute(self, store: Store, values: Dict[str, Any]) -> Optional[Any]:
        """Resolve the field and render its result.

        Raises:
            ArgumentError: If an argument is missing or malformed
        """
        result = self.resolve(store, FieldArgs(values))
        if result is None:
            return None
        return self.render(result)


def _user(store: Store, args: FieldArgs):
    return resolvers.get_user(store, args.arg("nickname"))


def _channels(store: Store, args: FieldArgs):
    user = resolvers.get_user(store, args.arg("nickname"))
    if user is None:
        return []
    return resolvers.get_channels(store, user)


def _messages(store: Store, args: FieldArgs):
    channel, user = args.optional("channel"), args.optional("user")
    if (channel is None) == (user is None):
        raise ArgumentError("Exactly one of 'channel' or 'user' must be given")
    destination = resolvers.resolve_destination(store, channel=channel, user=user)
    if destination is None:
        return []
    return resolvers.get_messages(store, destination)


def _create_channel(store: Store, args: FieldArgs):
    return resolvers.create_channel(
        store,
        args.arg("name"),
        args.arg("description"),
        args.str_list("users"),
    )


def _add_user_to_channel(store: Store, args: FieldArgs):
    return resolvers.add_user_to_channel(store, args.arg("channel"), args.arg("user"))


def _remove_user_from_channel(store: Store, args: FieldArgs):
    return resolvers.remove_user_from_channel(store, args.arg("channel"), args.arg("user"))


def _register_user(store: Store, args: FieldArgs):
    status = args.optional("status")
    return resolvers.register_user(
        store,
        args.arg("nickname"),
        args.arg("name"),
        parse_status(status) if status is not None else Status.ONLINE,
    )


def _send_message(store: Store, args: FieldArgs):
    channel, user = args.optional("channel"), args.optional("user")
    if (channel is None) == (user is None):
        raise ArgumentError("Exactly one of 'channel' or 'user' must be given")
    return resolvers.post_message(
        store,
        args.arg("sender"),
        args.arg("contents"),
        channel=channel,
        user=user,
    )


QUERY = {f.name: f for f in [
    RootField("user", "Gets information about an user.", _user, render_user, nullable=True),
    RootField("channels", "Gets the list of channels that the user is a member of.",
              _channels, _many(render_channel)),
    RootField("messages", "Gets the most recent messages sent to a channel or an user.",
              _messages, _many(render_message)),
]}

MUTATION = {f.name: f for f in [
    RootField("createChannel", "Creates a new channel on the server.", _create_channel, render_channel),
    RootField("addUserToChannel", "Adds an user to a channel on the server.",
              _add_user_to_channel, render_channel, nullable=True),
    RootField("removeUserFromChannel", "Removes an user of a channel on the server.",
              _remove_user_from_channel, render_channel, nullable=True),
    RootField("registerUser", "Registers a new user on the server.", _register_user, render_user, nullable=True),
    RootField("sendMessage", "Sends a message to a channel or an user.", _send_message, render_message, nullable=True),
]}
