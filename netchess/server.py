"""The black player's side: waits for a client and plays from typed commands."""

from __future__ import annotations

import argparse
import contextlib
import socket
import sys
from collections.abc import Callable, Iterable, Iterator

from .board import ChessGame, new_game
from .commands import (
    DEFAULT_DB,
    FRAME_SIZE,
    Command,
    CommandError,
    StrPath,
    receive_command,
    send_command,
)

PORT = 8080


def _info(message: str) -> None:
    print(f"[          ] [ INFO ] {message}", file=sys.stderr, flush=True)


def _send_next(
    game: ChessGame, inputs: Iterator[str], sock: socket.socket, db_path: StrPath
) -> Command | None:
    """Send input lines until one is carried out; None once input runs out."""
    for line in inputs:
        try:
            command = send_command(game, line, sock, False, db_path)
        except CommandError as exc:
            print(exc, file=sys.stderr)
            continue
        if command is not Command.UNKNOWN:
            return command
    return None


def run_server(
    host: str = "",
    port: int = PORT,
    lines: Iterable[str] | None = None,
    db_path: StrPath = DEFAULT_DB,
    ready: Callable[[int], object] | None = None,
) -> ChessGame:
    """Accept one client and play black until someone forfeits or input ends.

    ready, if given, is called with the bound port once the server listens.
    """
    source = sys.stdin if lines is None else lines
    inputs = (line.rstrip("\n") for line in source)
    with socket.socket(socket.AF_INET, socket.SOCK_STREAM) as listener:
        listener.setsockopt(socket.SOL_SOCKET, socket.SO_REUSEADDR, 1)
        if hasattr(socket, "SO_REUSEPORT"):
            with contextlib.suppress(OSError):
                listener.setsockopt(socket.SOL_SOCKET, socket.SO_REUSEPORT, 1)
        listener.bind((host, port))
        listener.listen(1)
        bound_port = listener.getsockname()[1]
        _info(f"Server listening on port {bound_port}")
        if ready is not None:
            ready(bound_port)
        conn, _ = listener.accept()
    _info("Server accepted connection")

    game = new_game()
    with conn, conn.makefile("rb") as stream:
        while True:
            frame = stream.read(FRAME_SIZE)
            if not frame:
                raise ConnectionError("client closed the connection")
            message = frame.partition(b"\0")[0].decode("utf-8", "replace")
            try:
                received = receive_command(game, message, conn, False, db_path)
            except CommandError as exc:
                print(exc, file=sys.stderr)
                received = None
            if received is Command.FORFEIT:
                break
            command = _send_next(game, inputs, conn, db_path)
            if command is None or command is Command.FORFEIT:
                break
    return game


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description="Play black in a networked chess game.")
    parser.add_argument("--host", default="")
    parser.add_argument("--port", type=int, default=PORT)
    parser.add_argument("--db", default=DEFAULT_DB, help="saved-game database")
    args = parser.parse_args(argv)
    try:
        run_server(args.host, args.port, None, args.db)
    except OSError as exc:
        print(f"server: {exc}", file=sys.stderr)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())