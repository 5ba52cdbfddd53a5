"""The white player's side: connects to the server and plays from typed commands."""

from __future__ import annotations

import argparse
import socket
import sys
from collections.abc import Iterable, Iterator
from pathlib import Path

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


def _send_next(
    game: ChessGame, inputs: Iterator[str], sock: socket.socket, db_path: StrPath
) -> Command | None:
    """Send input lines until one is carried out; None once input runs out."""
    for line in inputs:
        try:
            command = send_command(game, line, sock, True, db_path)
        except CommandError as exc:
            print(exc, file=sys.stderr)
            continue
        if command is not Command.UNKNOWN:
            return command
    return None


def run_client(
    host: str = "127.0.0.1",
    port: int = PORT,
    lines: Iterable[str] | None = None,
    fen_path: StrPath = "fen.txt",
    db_path: StrPath = DEFAULT_DB,
) -> ChessGame:
    """Play white against a server until someone forfeits or input ends.

    The final position is written to fen_path and the game is returned.
    """
    source = sys.stdin if lines is None else lines
    inputs = (line.rstrip("\n") for line in source)
    game = new_game()
    with socket.create_connection((host, port)) as sock, sock.makefile("rb") as stream:
        print(game.render(), end="")
        while True:
            command = _send_next(game, inputs, sock, db_path)
            print(game.render(), end="")
            if command is None or command is Command.FORFEIT:
                break
            if command in (Command.SAVE, Command.DISPLAY):
                continue
            frame = stream.read(FRAME_SIZE)
            if not frame:
                raise ConnectionError("server closed the connection")
            message = frame.partition(b"\0")[0].decode("utf-8", "replace")
            try:
                received = receive_command(game, message, sock, True, db_path)
            except CommandError as exc:
                print(exc, file=sys.stderr)
                received = None
            print(game.render(), end="")
            if received is Command.FORFEIT:
                break
    Path(fen_path).write_text(game.to_fen(), encoding="utf-8")
    return game


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description="Play white in a networked chess game.")
    parser.add_argument("--host", default="127.0.0.1")
    parser.add_argument("--port", type=int, default=PORT)
    parser.add_argument("--fen", default="fen.txt", help="where to write the final position")
    parser.add_argument("--db", default=DEFAULT_DB, help="saved-game database")
    args = parser.parse_args(argv)
    try:
        run_client(args.host, args.port, None, args.fen, args.db)
    except OSError as exc:
        print(f"client: {exc}", file=sys.stderr)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())