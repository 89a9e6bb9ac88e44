"""Interactive resilient_ws client.

Connects to a WebSocket server, prints every incoming message and sends a
ping every few seconds.  Kill the server and restart it to watch the
backoff reconnects.

    pip install -e .

    python examples/echo_client.py --url ws://localhost:8765
"""

import argparse
import asyncio
import logging
import signal

from resilient_ws import ConnectionManager, ConnectionState, SessionConfig


async def main(url: str, interval: float, base_delay_ms: float):
    stop = asyncio.Event()
    loop = asyncio.get_running_loop()
    for sig in (signal.SIGINT, signal.SIGTERM):
        loop.add_signal_handler(sig, stop.set)

    def on_state(state: ConnectionState):
        print(f"-- {state.value}")
        if state == ConnectionState.ERROR and not manager.is_connected:
            print(f"   {manager.last_error}")

    manager = ConnectionManager(on_state_change=on_state)
    manager.connect(
        url,
        SessionConfig(
            on_message=lambda msg: print(f"<< {msg.payload}"),
            on_close=lambda code, reason: print(f"-- closed ({code}) {reason}"),
            auto_reconnect=True,
            reconnect_delay_base_ms=base_delay_ms,
            parse_json=True,
        ),
    )

    seq = 0
    while not stop.is_set():
        if manager.send({"type": "ping", "seq": seq}):
            print(f">> ping {seq}")
            seq += 1
        try:
            await asyncio.wait_for(stop.wait(), timeout=interval)
        except asyncio.TimeoutError:
            pass

    manager.disconnect()
    print(f"Sent {manager.get_stats()['messages_sent']} messages")


if __name__ == "__main__":
    parser = argparse.ArgumentParser(description="resilient_ws echo client")
    parser.add_argument("--url", default="ws://localhost:8765")
    parser.add_argument("--interval", type=float, default=3.0)
    parser.add_argument("--base-delay-ms", type=float, default=1000.0)
    parser.add_argument("--verbose", action="store_true")
    args = parser.parse_args()

    logging.basicConfig(level=logging.DEBUG if args.verbose else logging.INFO)
    asyncio.run(main(args.url, args.interval, args.base_delay_ms))
