import asyncio
from grpc import aio
from ..proto import hub_codec
from .config import settings
from .service import CollaborationService, logger  # Reuse the same logger
from .repo import Store
from .seed import seed_store


def build_server(host=None, port=None, seed=None):
    """Create the gRPC server and bind it, without starting it.

    Args:
        host (str, optional): Hostname to bind server to. Defaults to settings.host
        port (int, optional): Port number to listen on; 0 picks a free port.
            Defaults to settings.port
        seed (bool, optional): Load demo data on startup. Defaults to settings.seed

    Returns:
        tuple: (aio.Server, Store, bound port)
    """
    host = settings.host if host is None else host
    port = settings.port if port is None else port
    seed = settings.seed if seed is None else seed

    server = aio.server()
    store = Store()
    if seed:
        seed_store(store)
    hub_codec.add_CollaborationHubServicer_to_server(CollaborationService(store), server)
    bound_port = server.add_insecure_port(f"{host}:{port}")
    return server, store, bound_port


async def serve(host=None, port=None, seed=None):
    """Start the collaboration hub server.

    Builds the in-memory store, optionally fills it with demo data and
    runs the gRPC server until it is terminated. All data is lost when
    the process exits.

    Args:
        host (str, optional): Hostname to bind server to. Defaults to settings.host
        port (int, optional): Port number to listen on. Defaults to settings.port
        seed (bool, optional): Load demo data on startup. Defaults to settings.seed

    Side Effects:
        - Starts gRPC server
        - Logs server startup progress
    """
    server, _, bound_port = build_server(host, port, seed)
    listen_addr = f"{settings.host if host is None else host}:{bound_port}"
    logger.info(f"Server starting, listening on {listen_addr}")
    await server.start()
    logger.info(f"Server is now running on {listen_addr}")
    await server.wait_for_termination()

if __name__ == "__main__":
    asyncio.run(serve())
