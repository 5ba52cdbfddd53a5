"""Text commands exchanged between the two players, and the saved-game database."""

from __future__ import annotations

import enum
from itertools import islice
from os import PathLike
from pathlib import Path
from typing import Any, Union

from .board import ChessGame, MoveError, MoveParseError, parse_move

DEFAULT_DB = "game_database.txt"
FRAME_SIZE = 100

StrPath = Union[str, "PathLike[str]"]

_SEND_COMMANDS = ("/move", "/forfeit", "/chessboard", "/import", "/load", "/save")
_RECEIVE_COMMANDS = ("/move", "/forfeit", "/import", "/load")
_SAVE_DIGITS = frozenset("123456789")


class Command(enum.IntEnum):
    """Outcome of a command that was carried out."""

    MOVE = 1001
    FORFEIT = 1002
    GAME = 1004
    IMPORT = 1006
    LOAD = 1007
    SAVE = 1008
    DISPLAY = 1011
    UNKNOWN = 2001


class CommandError(Exception):
    """A command could not be carried out."""


def save_game(game: ChessGame, username: str, db_path: StrPath = DEFAULT_DB) -> None:
    """Append the game's position to the database under the given user name."""
    if not username or " " in username:
        raise ValueError(f"invalid user name: {username!r}")
    with open(db_path, "a", encoding="utf-8") as db:
        db.write(f"{username}:{game.to_fen()}\n")


def load_game(game: ChessGame, username: str, db_path: StrPath, save_number: int) -> None:
    """Restore the user's save with the given 1-based number into the game."""
    if save_number < 1:
        raise ValueError(f"save numbers start at 1, got {save_number}")
    try:
        lines = Path(db_path).read_text(encoding="utf-8").splitlines()
    except FileNotFoundError:
        lines = []
    saves = (
        fen
        for name, sep, fen in (line.partition(":") for line in lines)
        if sep and name == username
    )
    fen = next(islice(saves, save_number - 1, None), None)
    if fen is None:
        raise LookupError(f"no save {save_number} for user {username!r}")
    game.load_fen(fen)


def _split(message: str, names: tuple[str, ...]) -> tuple[str | None, str]:
    """Return the command name the message starts with and its argument text."""
    for name in names:
        rest = message[len(name):]
        if message.startswith(name) and (not rest or rest[0] == " "):
            return name, rest[1:]
    return None, ""


def _transmit(sock: Any, message: str) -> None:
    data = message.encode("utf-8")[:FRAME_SIZE]
    sock.sendall(data.ljust(FRAME_SIZE, b"\0"))


def _load(game: ChessGame, arg: str, message: str, sock: Any, db_path: StrPath) -> Command:
    username, sep, number = arg.partition(" ")
    if not sep:
        raise CommandError("usage: /load <username> <save number>")
    if not all(char in _SAVE_DIGITS for char in number):
        raise CommandError(f"invalid save number: {number!r}")
    try:
        load_game(game, username, db_path, int(number) if number else 0)
    except (ValueError, LookupError, OSError) as exc:
        raise CommandError(str(exc)) from exc
    _transmit(sock, message)
    return Command.LOAD


def _import(game: ChessGame, fen: str) -> None:
    try:
        game.load_fen(fen)
    except ValueError as exc:
        raise CommandError(str(exc)) from exc


def send_command(
    game: ChessGame, message: str, sock: Any, is_client: bool, db_path: StrPath = DEFAULT_DB
) -> Command:
    """Carry out a command typed by the local player, sending it to the peer where needed."""
    name, arg = _split(message, _SEND_COMMANDS)
    match name:
        case "/move":
            try:
                game.make_move(parse_move(arg), is_client)
            except (MoveParseError, MoveError) as exc:
                raise CommandError(str(exc)) from exc
            _transmit(sock, message)
            return Command.MOVE
        case "/forfeit":
            _transmit(sock, message)
            return Command.FORFEIT
        case "/chessboard":
            print(game.render(), end="")
            return Command.DISPLAY
        case "/import":
            if is_client:
                raise CommandError("only the server may import a position")
            _import(game, arg)
            _transmit(sock, message)
            return Command.IMPORT
        case "/save":
            try:
                save_game(game, arg, db_path)
            except (ValueError, OSError) as exc:
                raise CommandError(str(exc)) from exc
            return Command.SAVE
        case "/load":
            return _load(game, arg, message, sock, db_path)
    return Command.UNKNOWN


def receive_command(
    game: ChessGame, message: str, sock: Any, is_client: bool, db_path: StrPath = DEFAULT_DB
) -> Command:
    """Apply a command that arrived from the peer."""
    name, arg = _split(message, _RECEIVE_COMMANDS)
    match name:
        case "/move":
            try:
                move = parse_move(arg)
            except MoveParseError as exc:
                raise CommandError(str(exc)) from exc
            game.make_move(move, is_client, validate=False)
            return Command.MOVE
        case "/forfeit":
            return Command.FORFEIT
        case "/import":
            if not is_client:
                raise CommandError("only the client may receive an imported position")
            _import(game, arg)
            return Command.IMPORT
        case "/load":
            return _load(game, arg, message, sock, db_path)
    raise CommandError(f"unknown command: {message!r}")