"""Minimal echo server for trying out examples/echo_client.py.

    python examples/echo_server.py --port 8765

Send the text ``drop`` from a client to make the server close that
connection with an application close code (triggers a client reconnect).
"""

import argparse
import asyncio

from websockets.asyncio.server import serve


async def echo(ws):
    async for message in ws:
        if message == "drop":
            await ws.close(4000, "dropped by server")
            return
        await ws.send(message)


async def main(host: str, port: int):
    async with serve(echo, host, port) as server:
        print(f"Echo server on ws://{host}:{port}")
        await server.serve_forever()


if __name__ == "__main__":
    parser = argparse.ArgumentParser(description="Echo WebSocket server")
    parser.add_argument("--host", default="localhost")
    parser.add_argument("--port", type=int, default=8765)
    args = parser.parse_args()
    asyncio.run(main(args.host, args.port))
