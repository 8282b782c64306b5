import asyncio, re, shlex, typer
import grpc
from grpc import aio
from ..proto import hub_codec

app = typer.Typer(help="Simple gRPC collaboration hub client")

HELP = ("Commands:\n"
        "  /register <nickname> <full name...>\n"
        "  /user <nickname>\n"
        "  /channels [nickname]\n"
        "  /create-channel #<name> \"<description>\" [member...]\n"
        "  /add #<channel> <nickname>\n"
        "  /remove #<channel> <nickname>\n"
        "  /say #<channel> <message>\n"
        "  /dm @<nickname> <message>\n"
        "  /messages #<channel> | @<nickname>\n"
        "  /help")


def format_user(u: dict) -> str:
    return f"{u['nickname']} ({u['name']}, {u['status']})"


def format_channel(c: dict) -> str:
    members = ",".join(m["nickname"] for m in c["members"])
    return f"#{c['name']} - {c['description']} members={members}"


def format_message(m: dict) -> str:
    dest = m["destination"]
    target = f"#{dest['name']}" if dest["__typename"] == "Channel" else f"@{dest['nickname']}"
    return f"[{m['timestamp']}] {m['sender']['nickname']} -> {target}: {m['contents']}"


def parse_target(token: str) -> dict:
    """Map '#name' to a channel argument and '@nick' (or 'nick') to a user argument."""
    if token.startswith("#"):
        return {"channel": token[1:]}
    return {"user": token.lstrip("@")}


async def handle_line(stub, nickname: str, line: str) -> str:
    """Run one interactive command against the server.

    Args:
        stub (CollaborationHubStub): Stub bound to an open channel
        nickname (str): Nickname of the current user, used as sender and
            as default for /channels
        line (str): Raw command line

    Returns:
        str: Text to print for the command
    """
    if line in {"/help", "help"}:
        return HELP

    # /register <nickname> <full name...>
    m = re.match(r"^/register\s+(\S+)\s+(.+)$", line)
    if m:
        resp = await stub.RegisterUser({"nickname": m.group(1), "name": m.group(2)})
        return f"[register] {format_user(resp['data'])}"

    # /user <nickname>
    m = re.match(r"^/user\s+@?(\S+)$", line)
    if m:
        resp = await stub.User({"nickname": m.group(1)})
        if resp["data"] is None:
            return f"[user] No user {m.group(1)}"
        return f"[user] {format_user(resp['data'])}"

    # /channels [nickname]
    m = re.match(r"^/channels(?:\s+@?(\S+))?$", line)
    if m:
        resp = await stub.Channels({"nickname": m.group(1) or nickname})
        if not resp["data"]:
            return "[channels] No channels found"
        return "[channels] Channels:\n" + "\n".join(f" - {format_channel(c)}" for c in resp["data"])

    # /create-channel #name "description" members...
    if line.startswith("/create-channel "):
        try:
            args = shlex.split(line[len("/create-channel "):])
        except ValueError:
            args = []
        if len(args) < 2 or not args[0].startswith("#"):
            return "[error] Usage: /create-channel #<name> \"<description>\" [member...]"
        members = [a.lstrip("@") for a in args[2:]]
        resp = await stub.CreateChannel({"name": args[0][1:], "description": args[1], "users": members})
        return f"[channel] Created {format_channel(resp['data'])}"

    # /add #channel nickname, /remove #channel nickname
    m = re.match(r"^/(add|remove)\s+#(\S+)\s+@?(\S+)$", line)
    if m:
        request = {"channel": m.group(2), "user": m.group(3)}
        if m.group(1) == "add":
            resp = await stub.AddUserToChannel(request)
        else:
            resp = await stub.RemoveUserFromChannel(request)
        if resp["data"] is None:
            return f"[error] Channel #{m.group(2)} or user {m.group(3)} not found"
        return f"[channel] {format_channel(resp['data'])}"

    # /say #channel message..., /dm @nickname message...
    m = re.match(r"^/(?:say|dm)\s+([#@]\S+)\s+(.+)$", line)
    if m:
        resp = await stub.SendMessage({"sender": nickname, "contents": m.group(2), **parse_target(m.group(1))})
        if resp["data"] is None:
            return f"[error] Could not deliver to {m.group(1)}"
        return f"[sent] {format_message(resp['data'])}"

    # /messages #channel | @nickname
    m = re.match(r"^/messages\s+(\S+)$", line)
    if m:
        resp = await stub.Messages(parse_target(m.group(1)))
        if not resp["data"]:
            return "[messages] No messages"
        return "\n".join(format_message(msg) for msg in resp["data"])

    return 'Type "/help" for commands.'


async def _run(nickname: str, host: str, port: int):
    """Main client loop.

    Connects to the hub, checks that the nickname exists and then reads
    commands from standard input until EOF or /quit.

    Args:
        nickname (str): Nickname to act as (will prompt if empty)
        host (str): Hub server hostname
        port (int): Hub server port

    Side Effects:
        - Connects to gRPC server
        - Reads commands from standard input and prints results
    """
    async with aio.insecure_channel(f"{host}:{port}") as chan:
        stub = hub_codec.CollaborationHubStub(chan)

        if not nickname:
            nickname = input("Enter your nickname: ").strip()

        try:
            me = await stub.User({"nickname": nickname})
        except grpc.aio.AioRpcError as e:
            print(f"Error during login: {e.details()}")
            return
        if me["data"] is None:
            print(f"User {nickname} not found, use /register to create it")
        else:
            print(f"Logged in as {format_user(me['data'])}")

        loop = asyncio.get_event_loop()
        while True:
            try:
                line = await loop.run_in_executor(None, input, "")
            except EOFError:
                break
            line = line.strip()
            if not line:
                continue
            if line == "/quit":
                break
            try:
                print(await handle_line(stub, nickname, line))
            except grpc.aio.AioRpcError as e:
                print(f"[error] {e.code().name}: {e.details()}")


@app.command("run")
def run_cmd(
    nickname: str = "",
    host: str = "127.0.0.1",
    port: int = 50051,
):
    """
    Run the collaboration hub client.

    Args:
        nickname: Nickname to act as
        host: Server hostname
        port: Server port
    """
    asyncio.run(_run(nickname, host, port))

if __name__ == "__main__":
    app()
