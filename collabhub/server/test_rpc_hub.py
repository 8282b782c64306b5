import asyncio
import unittest
from types import SimpleNamespace
import grpc
from grpc import aio
from collabhub.proto import hub_codec
from collabhub.server.repo import Store
from collabhub.server.service import CollaborationService
from collabhub.server.main import build_server


class AbortCalled(Exception):
    def __init__(self, code, details):
        super().__init__(details)
        self.code = code
        self.details = details


class FakeContext:
    async def abort(self, code, details):
        raise AbortCalled(code, details)


class TestCollaborationService(unittest.TestCase):
    def setUp(self):
        self.store = Store()
        self.service = CollaborationService(self.store)
        self.context = FakeContext()

    def call(self, method, request):
        return asyncio.run(getattr(self.service, method)(request, self.context))

    def register(self, nickname, name, **extra):
        return self.call("RegisterUser", {"nickname": nickname, "name": name, **extra})

    def test_register_and_get_user(self):
        resp = self.register("alice", "Alice Liddell", status="busy")
        self.assertEqual(resp, {"data": {"nickname": "alice", "name": "Alice Liddell", "status": "Busy"}})
        resp = self.call("User", {"nickname": "ALICE"})
        self.assertEqual(resp["data"]["nickname"], "alice")

    def test_register_taken_nickname(self):
        self.register("alice", "Alice")
        with self.assertRaises(AbortCalled) as cm:
            self.register("Alice", "Other Alice")
        self.assertEqual(cm.exception.code, grpc.StatusCode.ALREADY_EXISTS)

    def test_register_unknown_status(self):
        with self.assertRaises(AbortCalled) as cm:
            self.register("alice", "Alice", status="sleeping")
        self.assertEqual(cm.exception.code, grpc.StatusCode.INVALID_ARGUMENT)

    def test_unknown_user_is_null(self):
        self.assertEqual(self.call("User", {"nickname": "nobody"}), {"data": None})

    def test_channels_of_unknown_user_is_empty(self):
        self.assertEqual(self.call("Channels", {"nickname": "nobody"}), {"data": []})

    def test_create_channel_and_membership(self):
        self.register("alice", "Alice")
        self.register("bob", "Bob")
        resp = self.call("CreateChannel", {"name": "eng", "description": "desc", "users": ["alice", "unknown"]})
        self.assertEqual([m["nickname"] for m in resp["data"]["members"]], ["alice"])

        resp = self.call("AddUserToChannel", {"channel": "eng", "user": "bob"})
        self.assertEqual([m["nickname"] for m in resp["data"]["members"]], ["bob", "alice"])

        resp = self.call("Channels", {"nickname": "bob"})
        self.assertEqual([c["name"] for c in resp["data"]], ["eng"])

        resp = self.call("RemoveUserFromChannel", {"channel": "eng", "user": "Bob"})
        self.assertEqual([m["nickname"] for m in resp["data"]["members"]], ["alice"])

    def test_membership_on_missing_channel_is_null(self):
        self.register("alice", "Alice")
        self.assertEqual(self.call("AddUserToChannel", {"channel": "missing", "user": "alice"}), {"data": None})
        self.assertEqual(self.call("RemoveUserFromChannel", {"channel": "missing", "user": "alice"}), {"data": None})

    def test_missing_argument(self):
        with self.assertRaises(AbortCalled) as cm:
            self.call("CreateChannel", {"name": "eng", "description": "desc"})
        self.assertEqual(cm.exception.code, grpc.StatusCode.INVALID_ARGUMENT)
        self.assertIn("users", cm.exception.details)

    def test_wrong_argument_type(self):
        with self.assertRaises(AbortCalled) as cm:
            self.call("CreateChannel", {"name": "eng", "description": "desc", "users": ["alice", 3]})
        self.assertEqual(cm.exception.code, grpc.StatusCode.INVALID_ARGUMENT)

    def test_body_must_be_object(self):
        with self.assertRaises(AbortCalled) as cm:
            self.call("User", ["alice"])
        self.assertEqual(cm.exception.code, grpc.StatusCode.INVALID_ARGUMENT)

    def test_send_and_list_messages(self):
        self.register("alice", "Alice")
        self.register("bob", "Bob")
        self.call("CreateChannel", {"name": "eng", "description": "desc", "users": ["alice"]})

        resp = self.call("SendMessage", {"sender": "alice", "contents": "hello", "channel": "eng"})
        self.assertEqual(resp["data"]["destination"]["__typename"], "Channel")
        self.call("SendMessage", {"sender": "bob", "contents": "psst", "user": "alice"})

        resp = self.call("Messages", {"channel": "ENG"})
        self.assertEqual([m["contents"] for m in resp["data"]], ["hello"])
        resp = self.call("Messages", {"user": "alice"})
        self.assertEqual(resp["data"][0]["destination"],
                         {"__typename": "User", "nickname": "alice", "name": "Alice", "status": "Online"})
        self.assertEqual(self.call("Messages", {"channel": "ops"}), {"data": []})

    def test_messages_need_exactly_one_destination(self):
        with self.assertRaises(AbortCalled) as cm:
            self.call("Messages", {"channel": "eng", "user": "alice"})
        self.assertEqual(cm.exception.code, grpc.StatusCode.INVALID_ARGUMENT)

    def test_send_from_unknown_user_is_null(self):
        self.assertEqual(self.call("SendMessage", {"sender": "nobody", "contents": "x", "user": "nobody"}),
                         {"data": None})


class TestHubCodec(unittest.TestCase):
    def test_encode_decode(self):
        payload = {"name": "café", "users": ["a"]}
        self.assertEqual(hub_codec.decode(hub_codec.encode(payload)), payload)
        self.assertEqual(hub_codec.decode(b""), {})

    def test_decode_malformed_body_is_not_a_dict(self):
        for body in [b"{not json", b"\xff\xfe"]:
            decoded = hub_codec.decode(body)
            self.assertIsInstance(decoded, hub_codec.MalformedBody)
            self.assertNotIsInstance(decoded, dict)

    def test_every_method_is_registered(self):
        captured = []
        server = SimpleNamespace(add_generic_rpc_handlers=captured.extend)
        hub_codec.add_CollaborationHubServicer_to_server(CollaborationService(Store()), server)
        self.assertEqual(len(captured), 1)
        for method in hub_codec.METHODS:
            details = SimpleNamespace(method=hub_codec.method_path(method))
            self.assertIsNotNone(captured[0].service(details), method)


class TestOverTheWire(unittest.TestCase):
    def test_round_trip_through_grpc(self):
        async def scenario():
            server = aio.server()
            hub_codec.add_CollaborationHubServicer_to_server(CollaborationService(Store()), server)
            port = server.add_insecure_port("127.0.0.1:0")
            await server.start()
            try:
                async with aio.insecure_channel(f"127.0.0.1:{port}") as chan:
                    stub = hub_codec.CollaborationHubStub(chan)
                    await stub.RegisterUser({"nickname": "alice", "name": "Alice"})
                    await stub.CreateChannel({"name": "eng", "description": "desc", "users": ["alice"]})
                    channels = await stub.Channels({"nickname": "alice"})
                    try:
                        await stub.RegisterUser({"nickname": "alice", "name": "Alice"})
                    except aio.AioRpcError as e:
                        code = e.code()
                    else:
                        code = None
                    return channels, code
            finally:
                await server.stop(None)

        channels, code = asyncio.run(scenario())
        self.assertEqual([c["name"] for c in channels["data"]], ["eng"])
        self.assertEqual(code, grpc.StatusCode.ALREADY_EXISTS)

    def test_malformed_bodies_are_invalid_argument(self):
        async def scenario():
            server, _, port = build_server("127.0.0.1", 0, seed=False)
            await server.start()
            codes = []
            try:
                async with aio.insecure_channel(f"127.0.0.1:{port}") as chan:
                    # raw bytes in, raw bytes out: no client-side serializer
                    call = chan.unary_unary(hub_codec.method_path("User"))
                    for body in [b"{not json", b"\xff\xfe", b"[1, 2]"]:
                        try:
                            await call(body)
                        except aio.AioRpcError as e:
                            codes.append(e.code())
                        else:
                            codes.append(None)
            finally:
                await server.stop(None)
            return codes

        codes = asyncio.run(scenario())
        self.assertEqual(codes, [grpc.StatusCode.INVALID_ARGUMENT] * 3)


class TestBuildServer(unittest.TestCase):
    def test_port_zero_binds_a_free_port(self):
        async def scenario():
            server, store, port = build_server("127.0.0.1", 0, seed=True)
            await server.start()
            await server.stop(None)
            return store, port

        store, port = asyncio.run(scenario())
        self.assertGreater(port, 0)
        self.assertIsNotNone(store.find_user("alice"))


if __name__ == '__main__':
    unittest.main()
