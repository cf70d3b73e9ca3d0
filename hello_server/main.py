import asyncio
import os
import socket
import sys

from fastapi import FastAPI, Request
from fastapi.responses import Response
from uvicorn import Config, Server

HOST = "0.0.0.0"
DEFAULT_PORT = "8080"
GREETING = "Hello World, I'm a backend app!\n"

app = FastAPI(docs_url=None, redoc_url=None, openapi_url=None)

# Answers every method and request target ahead of routing
@app.middleware("http")
async def greet(request: Request, call_next):
    target = request.scope["path"]
    query = request.scope.get("query_string", b"")
    if query:
        target = f"{target}?{query.decode('latin-1')}"
    print(target, flush=True)
    return Response(content=GREETING)

def resolve_port(environ=None) -> str:
    if environ is None:
        environ = os.environ
    return environ.get("PORT") or DEFAULT_PORT

def bind_socket(host, port) -> socket.socket:
    server_socket = socket.socket(socket.AF_INET, socket.SOCK_STREAM)
    try:
        server_socket.setsockopt(socket.SOL_SOCKET, socket.SO_REUSEADDR, 1)
        server_socket.bind((host, int(port)))
    except Exception:
        server_socket.close()
        raise
    return server_socket

def create_server() -> Server:
    # greet prints the single per-request line
    config = Config(app, access_log=False, server_header=False)
    return Server(config)

async def serve(port=None) -> int:
    if port is None:
        port = resolve_port()
    try:
        server_socket = bind_socket(HOST, port)
    except (OSError, OverflowError, ValueError) as e:
        print(f"Error binding to port {port}: {e}", flush=True)
        return 1

    print(f"server is listening on {port}", flush=True)
    server = create_server()
    await server.serve(sockets=[server_socket])
    return 0

def main():
    sys.exit(asyncio.run(serve()))

if __name__ == "__main__":
    main()
