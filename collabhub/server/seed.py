from .models import Status
from .repo import Store
from . import resolvers
from ..utils.logger import setup_logger

logger = setup_logger('collabhub.seed')

DEMO_USERS = [
    ("alice", "Alice Liddell", Status.ONLINE),
    ("bob", "Bob Marley", Status.AWAY),
    ("carol", "Carol Danvers", Status.BUSY),
    ("dave", "Dave Grohl", Status.OFFLINE),
]

DEMO_CHANNELS = [
    ("general", "Everything and nothing in particular.", ["alice", "bob", "carol", "dave"]),
    ("eng", "Engineering discussions.", ["alice", "carol"]),
]

DEMO_MESSAGES = [
    ("alice", "general", None, "Welcome to the hub!"),
    ("bob", "general", None, "Hi everyone"),
    ("carol", "eng", None, "Deploy is green."),
    ("alice", None, "bob", "Lunch today?"),
]


def seed_store(store: Store, start_ts: int = 1_700_000_000_000) -> None:
    """Fill a store with demo users, channels and messages.

    Message timestamps start at start_ts and grow by one second each.

    Args:
        store (Store): Store to fill
        start_ts (int, optional): Timestamp of the first demo message, in milliseconds
    """
    for nickname, name, status in DEMO_USERS:
        resolvers.register_user(store, nickname, name, status)
    for name, description, members in DEMO_CHANNELS:
        resolvers.create_channel(store, name, description, members)
    for i, (sender, channel, user, contents) in enumerate(DEMO_MESSAGES):
        resolvers.post_message(store, sender, contents, channel=channel, user=user, timestamp=start_ts + i * 1000)
    logger.info(f"Seeded store with {len(DEMO_USERS)} users, {len(DEMO_CHANNELS)} channels "
                f"and {len(DEMO_MESSAGES)} messages")
