# netchess

A two-player chess game played over a TCP connection. One player runs the
server and plays black. The other runs the client and plays white. Each player
types commands on standard input. Commands that are accepted and that change
the shared game are forwarded to the opponent.

## Installation

```
pip install .
```

To install the test dependencies as well:

```
pip install .[test]
```

## Playing

Start the server first. By default it listens on all interfaces, port 8080:

```
netchess-server [--host HOST] [--port PORT] [--db FILE]
```

Then start the client. By default it connects to 127.0.0.1:8080:

```
netchess-client [--host HOST] [--port PORT] [--fen FILE] [--db FILE]
```

White moves first. The client reads a command and, once one is accepted, waits
for the server's reply. The server then does the same in turn. Rejected or
unrecognised lines are reported on standard error, and the program reads the
next line. The game ends when either player forfeits or a player's input runs
out. When the client finishes, it writes the final position as FEN to
`fen.txt`, or to the file named with `--fen`.

The server accepts a single client and serves one game. If the peer closes
the connection during play, the program stops with an error.

## Commands

| Command | Meaning |
| --- | --- |
| `/move e2e4` | Move a piece. Add `q`, `r`, `b` or `n` to promote a pawn, e.g. `/move e7e8q`. |
| `/forfeit` | Give up and end the game. |
| `/chessboard` | Print the board. Local only. |
| `/import <fen>` | Replace the board with a FEN placement and side to move, e.g. `/import 3k4/8/8/8/8/8/8/4K3 w`. Only the server can send this. |
| `/save <username>` | Add the current position to the save database. Local only. |
| `/load <username> <n>` | Load the n-th save of `username`, counting from 1. `n` may only use the digits 1 to 9. |

Each side reads and writes its own database file, `game_database.txt` by
default. A `/load` that reaches the opponent is carried out against the
opponent's database. Messages travel in fixed 100-byte frames, so text longer
than that is cut short.

## Rules that are checked

Before a move is made, it is checked for the following:

- it is the player's turn;
- there is a piece on the start square;
- the piece belongs to the player;
- the move does not capture one of the player's own pieces;
- a pawn reaching the last rank names a promotion piece;
- the piece's movement pattern allows the move, including clear paths for
  rooks, bishops and queens.

Moves received from the opponent are applied without these checks.

## What it does not do

- There is no castling and no en passant.
- Check, checkmate and stalemate are not detected. A game only ends by
  forfeit or when input runs out.
- The connection is not authenticated.

## Library use

```python
from netchess.board import new_game, parse_move

game = new_game()
game.make_move(parse_move("e2e4"), is_client=True, validate=True)
print(game.to_fen())   # rnbqkbnr/pppppppp/8/8/4P3/8/PPPP1PPP/RNBQKBNR b
print(game.render())
```

`netchess.board` provides the following:

- `ChessGame`, with `reset`, `to_fen`, `load_fen`, `make_move` and `render`;
- `ChessMove`;
- `Player`;
- `parse_move`;
- the movement checks `is_valid_move`, `is_valid_pawn_move`,
  `is_valid_rook_move`, `is_valid_knight_move`, `is_valid_bishop_move`,
  `is_valid_queen_move` and `is_valid_king_move`.

Refused moves raise `MoveError`, and malformed move text raises
`MoveParseError`. Each error has a `kind` attribute, either a `MoveErrorKind`
or a `ParseErrorKind`, that says why.

`netchess.commands` provides the following:

- `save_game` and `load_game` for the save database. Each line of the
  database has the form `username:<board> <side>`. `save_game` raises
  `ValueError` for an empty user name or one that contains a space.
  `load_game` raises `LookupError` when the requested save does not exist.
- `send_command` and `receive_command`, which carry out command text. They
  return a `Command` value or raise `CommandError`.

The programs are also available as functions:

- `netchess.client.run_client`;
- `netchess.server.run_server`.

Each function takes an iterable of input lines in place of standard input and
returns the final `ChessGame`.