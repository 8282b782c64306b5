"""gRPC bindings for the CollaborationHub service.

The service has no compiled .proto: every method is unary and carries a
JSON object in both directions, so the handlers and the client stub are
built from grpc's generic helpers.
"""
import json
import grpc

SERVICE_NAME = "collabhub.CollaborationHub"

# RPC method name -> root field it serves
QUERY_METHODS = {
    "User": "user",
    "Channels": "channels",
    "Messages": "messages",
}
MUTATION_METHODS = {
    "CreateChannel": "createChannel",
    "AddUserToChannel": "addUserToChannel",
    "RemoveUserFromChannel": "removeUserFromChannel",
    "RegisterUser": "registerUser",
    "SendMessage": "sendMessage",
}
METHODS = {**QUERY_METHODS, **MUTATION_METHODS}


def encode(payload) -> bytes:
    return json.dumps(payload, ensure_ascii=False).encode("utf-8")


class MalformedBody:
    """Stands in for a request body that is not valid UTF-8 JSON.

    It is not a dict, so the service rejects it with INVALID_ARGUMENT.
    """

    def __init__(self, error: Exception):
        self.error = error

    def __repr__(self):
        return f"MalformedBody({self.error})"


def decode(data: bytes):
    if not data:
        return {}
    try:
        return json.loads(data.decode("utf-8"))
    except (UnicodeDecodeError, json.JSONDecodeError) as e:
        return MalformedBody(e)


def method_path(method: str) -> str:
    return f"/{SERVICE_NAME}/{method}"


class CollaborationHubStub:
    """Client stub exposing one awaitable callable per RPC method.

    Args:
        channel: grpc.aio channel connected to the server
    """

    def __init__(self, channel):
        for method in METHODS:
            setattr(self, method, channel.unary_unary(
                method_path(method),
                request_serializer=encode,
                response_deserializer=decode,
            ))


def add_CollaborationHubServicer_to_server(servicer, server):
    """Register every RPC method of servicer on a grpc server.

    The servicer must define a coroutine named after each entry of METHODS.
    """
    handlers = {
        method: grpc.unary_unary_rpc_method_handler(
            getattr(servicer, method),
            request_deserializer=decode,
            response_serializer=encode,
        )
        for method in METHODS
    }
    server.add_generic_rpc_handlers((grpc.method_handlers_generic_handler(SERVICE_NAME, handlers),))
