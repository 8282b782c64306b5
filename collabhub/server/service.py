import grpc
from grpc import aio
from .repo import Store
from .schema import QUERY, MUTATION, RootField, ArgumentError
from ..utils.logger import setup_logger

logger = setup_logger('collabhub.server')


class CollaborationService:
    """gRPC service implementation for the collaboration hub.

    Exposes the query and mutation root fields as unary RPCs. Requests and
    responses are JSON objects; every response has the form
    {"data": <result or null>}.
    """

    def __init__(self, store: Store):
        """Initialize service with the store it resolves against.

        Args:
            store (Store): In-memory store shared by every request
        """
        self.store = store

    async def _execute(self, field: RootField, request, context: aio.ServicerContext) -> dict:
        """Resolve a root field for an RPC request.

        Args:
            field (RootField): Field to resolve
            request: Decoded JSON request body, expected to be an object
            context (ServicerContext): gRPC service context

        Returns:
            dict: {"data": rendered result, or None when absent}

        Raises:
            INVALID_ARGUMENT: If the body is not an object or an argument
                is missing or malformed
        """
        if not isinstance(request, dict):
            logger.error(f"{field.name}: request body is not a JSON object")
            await context.abort(grpc.StatusCode.INVALID_ARGUMENT, "Request body must be a JSON object")
        try:
            data = field.execute(self.store, request)
        except ArgumentError as e:
            logger.error(f"{field.name}: invalid arguments {request}: {e}")
            await context.abort(grpc.StatusCode.INVALID_ARGUMENT, str(e))
        if data is None:
            logger.warning(f"{field.name}: {request} resolved to null")
        else:
            logger.debug(f"{field.name}: {request} resolved")
        return {"data": data}

    async def User(self, request, context):
        """Get information about a user.

        Args:
            request (dict): {"nickname": str}
            context (ServicerContext): gRPC service context

        Returns:
            dict: User data, or null if no user has that nickname
        """
        return await self._execute(QUERY["user"], request, context)

    async def Channels(self, request, context):
        """List the channels a user is a member of, sorted by name.

        Args:
            request (dict): {"nickname": str}
            context (ServicerContext): gRPC service context

        Returns:
            dict: List of channels, empty if the user is unknown
        """
        return await self._execute(QUERY["channels"], request, context)

    async def Messages(self, request, context):
        """List the 20 most recent messages sent to a channel or a user.

        Args:
            request (dict): {"channel": str} or {"user": str}
            context (ServicerContext): gRPC service context

        Returns:
            dict: Messages oldest first, empty if the destination is unknown
        """
        return await self._execute(QUERY["messages"], request, context)

    async def CreateChannel(self, request, context):
        """Create a new channel.

        Args:
            request (dict): {"name": str, "description": str, "users": [str]}
            context (ServicerContext): gRPC service context

        Returns:
            dict: The created channel; unknown nicknames are left out of its members

        Side Effects:
            - Adds channel to the store
        """
        response = await self._execute(MUTATION["createChannel"], request, context)
        logger.info(f"CreateChannel: channel '{request['name']}' created")
        return response

    async def AddUserToChannel(self, request, context):
        """Add a user to a channel.

        Args:
            request (dict): {"channel": str, "user": str}
            context (ServicerContext): gRPC service context

        Returns:
            dict: The updated channel, or null if channel or user is unknown

        Side Effects:
            - Prepends user to the channel's member list
        """
        return await self._execute(MUTATION["addUserToChannel"], request, context)

    async def RemoveUserFromChannel(self, request, context):
        """Remove a user from a channel.

        Args:
            request (dict): {"channel": str, "user": str}
            context (ServicerContext): gRPC service context

        Returns:
            dict: The updated channel, or null if channel or user is unknown

        Side Effects:
            - Drops every entry of the user from the channel's member list
        """
        return await self._execute(MUTATION["removeUserFromChannel"], request, context)

    async def RegisterUser(self, request, context):
        """Register a new user.

        Args:
            request (dict): {"nickname": str, "name": str, "status": str (optional)}
            context (ServicerContext): gRPC service context

        Returns:
            dict: The registered user

        Raises:
            ALREADY_EXISTS: If the nickname is already taken
        """
        response = await self._execute(MUTATION["registerUser"], request, context)
        if response["data"] is None:
            logger.error(f"RegisterUser: User '{request['nickname']}' registration failed (nickname already exists)")
            await context.abort(grpc.StatusCode.ALREADY_EXISTS, f"User {request['nickname']} already exists")
        logger.info(f"RegisterUser: User '{request['nickname']}' registered successfully")
        return response

    async def SendMessage(self, request, context):
        """Send a message to a channel or a user.

        Args:
            request (dict): {"sender": str, "contents": str} plus either
                {"channel": str} or {"user": str}
            context (ServicerContext): gRPC service context

        Returns:
            dict: The stored message, or null if sender or destination is unknown
        """
        return await self._execute(MUTATION["sendMessage"], request, context)
