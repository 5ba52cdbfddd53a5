"""Chess board state, FEN conversion, move parsing and piece movement rules."""

from __future__ import annotations

import enum
from dataclasses import dataclass, field
from itertools import groupby

EMPTY = "."
FILES = "abcdefgh"
RANKS = "12345678"

_BACK_RANK = "rnbqkbnr"
_WHITE_PIECES = frozenset("RNBQKP")
_PROMOTIONS = frozenset("qrbn")


class Player(enum.IntEnum):
    """The side to move."""

    WHITE = 0
    BLACK = 1

    @property
    def opponent(self) -> Player:
        return Player.BLACK if self is Player.WHITE else Player.WHITE


class MoveErrorKind(enum.IntEnum):
    """Reasons a move is refused."""

    CAPTURES_OWN_PIECE = 2
    OUT_OF_TURN = 3
    NOTHING_TO_MOVE = 4
    WRONG_COLOR = 5
    ILLEGAL = 6
    NOT_A_PAWN = 7
    MISSING_PROMOTION = 8


class ParseErrorKind(enum.IntEnum):
    """Reasons a move string cannot be parsed."""

    INVALID_FORMAT = 20
    INVALID_DESTINATION = 21
    OUT_OF_BOUNDS = 22
    INVALID_PROMOTION = 23


class MoveError(Exception):
    """A move was refused by the rules."""

    def __init__(self, kind: MoveErrorKind) -> None:
        super().__init__(f"move refused: {kind.name.lower()}")
        self.kind = kind


class MoveParseError(ValueError):
    """A move string is malformed."""

    def __init__(self, kind: ParseErrorKind, text: str) -> None:
        super().__init__(f"cannot parse move {text!r}: {kind.name.lower()}")
        self.kind = kind
        self.text = text


@dataclass(frozen=True)
class ChessMove:
    """A move from one square to another; the end square may carry a promotion letter."""

    start_square: str
    end_square: str

    @property
    def promotion(self) -> str | None:
        return self.end_square[2] if len(self.end_square) > 2 else None


def is_white_piece(piece: str) -> bool:
    """Return True for an upper-case (white) piece letter."""
    return piece in _WHITE_PIECES


def _initial_board() -> list[list[str]]:
    return [
        list(_BACK_RANK),
        ["p"] * 8,
        *([EMPTY] * 8 for _ in range(4)),
        ["P"] * 8,
        list(_BACK_RANK.upper()),
    ]


def _square(square: str) -> tuple[int, int]:
    """Map a square such as 'e2' to (row, col) with row 0 being rank 8."""
    if len(square) < 2 or square[0] not in FILES or square[1] not in RANKS:
        raise ValueError(f"not a board square: {square!r}")
    return 8 - int(square[1]), FILES.index(square[0])


@dataclass
class ChessGame:
    """A game: the board, the moves played, captured pieces and the side to move."""

    board: list[list[str]] = field(default_factory=_initial_board)
    moves: list[ChessMove] = field(default_factory=list)
    captured: list[str] = field(default_factory=list)
    current_player: Player = Player.WHITE

    def reset(self) -> None:
        """Return to the starting position with white to move."""
        self.board = _initial_board()
        self.moves = []
        self.captured = []
        self.current_player = Player.WHITE

    def to_fen(self) -> str:
        """Return the board placement followed by the side to move."""
        rows = []
        for row in self.board:
            parts = []
            for is_empty, run in groupby(row, key=lambda cell: cell == EMPTY):
                cells = list(run)
                parts.append(str(len(cells)) if is_empty else "".join(cells))
            rows.append("".join(parts))
        side = "b" if self.current_player is Player.BLACK else "w"
        return f"{'/'.join(rows)} {side}"

    def load_fen(self, fen: str) -> None:
        """Set the board and side to move from a FEN placement and side letter."""
        chars = iter(fen)

        def take() -> str:
            try:
                return next(chars)
            except StopIteration:
                raise ValueError(f"FEN string too short: {fen!r}") from None

        board: list[list[str]] = []
        pending = 0
        for _ in range(8):
            row = []
            for _ in range(8):
                if pending:
                    row.append(EMPTY)
                    pending -= 1
                    continue
                char = take()
                if "1" <= char <= "9":
                    row.append(EMPTY)
                    pending = int(char) - 1
                else:
                    row.append(char)
            board.append(row)
            next(chars, None)
        side = next(chars, None)
        self.board = board
        self.current_player = Player.WHITE if side == "w" else Player.BLACK

    def make_move(self, move: ChessMove, is_client: bool, validate: bool = True) -> None:
        """Play a move, raising MoveError (and leaving the game untouched) if refused.

        The client plays white and the server plays black.
        """
        src_row, src_col = _square(move.start_square)
        dest_row, dest_col = _square(move.end_square)
        if validate:
            self._check_move(move, is_client, src_row, src_col, dest_row, dest_col)

        piece = self.board[src_row][src_col]
        promotion = move.promotion
        if piece == "P" and dest_row == 0 and promotion:
            piece = promotion.upper()
        if piece == "p" and dest_row == 7 and promotion:
            piece = promotion
        target = self.board[dest_row][dest_col]
        if target != EMPTY:
            self.captured.append(target)
        self.board[dest_row][dest_col] = piece
        self.board[src_row][src_col] = EMPTY
        self.moves.append(move)
        self.current_player = self.current_player.opponent

    def _check_move(
        self,
        move: ChessMove,
        is_client: bool,
        src_row: int,
        src_col: int,
        dest_row: int,
        dest_col: int,
    ) -> None:
        expected = Player.WHITE if is_client else Player.BLACK
        if self.current_player is not expected:
            raise MoveError(MoveErrorKind.OUT_OF_TURN)
        piece = self.board[src_row][src_col]
        if piece == EMPTY:
            raise MoveError(MoveErrorKind.NOTHING_TO_MOVE)
        own_pawn, last_row = ("P", 0) if is_client else ("p", 7)
        if is_white_piece(piece) != is_client:
            raise MoveError(MoveErrorKind.WRONG_COLOR)
        target = self.board[dest_row][dest_col]
        if target != EMPTY and is_white_piece(target) == is_client:
            raise MoveError(MoveErrorKind.CAPTURES_OWN_PIECE)
        if len(move.end_square) > 3 and piece != own_pawn:
            raise MoveError(MoveErrorKind.NOT_A_PAWN)
        if piece == own_pawn and dest_row == last_row and move.promotion is None:
            raise MoveError(MoveErrorKind.MISSING_PROMOTION)
        if not is_valid_move(piece, src_row, src_col, dest_row, dest_col, self):
            raise MoveError(MoveErrorKind.ILLEGAL)

    def render(self) -> str:
        """Return a text picture of the board with rank and file labels."""
        header = "  " + " ".join(FILES)
        lines = ["", "Chessboard:", header]
        for index, row in enumerate(self.board):
            rank = 8 - index
            lines.append(f"{rank} {' '.join(row)} {rank}")
        lines.append(header)
        return "\n".join(lines) + "\n"


def new_game() -> ChessGame:
    """Return a game in the starting position."""
    return ChessGame()


def parse_move(text: str) -> ChessMove:
    """Parse a move such as 'e2e4' or 'e7e8q', raising MoveParseError if malformed."""
    bad_rank = False
    for index, char in enumerate(text):
        if index in (0, 2) and char not in FILES:
            raise MoveParseError(ParseErrorKind.INVALID_FORMAT, text)
        if index in (1, 3) and char not in RANKS:
            bad_rank = True
    if len(text) not in (4, 5):
        raise MoveParseError(ParseErrorKind.INVALID_FORMAT, text)
    if bad_rank:
        raise MoveParseError(ParseErrorKind.OUT_OF_BOUNDS, text)
    start, end = text[0:2], text[2:]
    if len(text) == 5:
        if (start[1], end[1]) not in (("7", "8"), ("2", "1")):
            raise MoveParseError(ParseErrorKind.INVALID_DESTINATION, text)
        if end[2] not in _PROMOTIONS:
            raise MoveParseError(ParseErrorKind.INVALID_PROMOTION, text)
    return ChessMove(start, end)


def is_valid_pawn_move(piece, src_row, src_col, dest_row, dest_col, game) -> bool:
    """Pawn steps, double steps from the home row, and diagonal captures."""
    board = game.board
    target = board[dest_row][dest_col]
    if piece == "P":
        if dest_row + 1 == src_row and src_col == dest_col:
            return target == EMPTY
        if src_row == 6 and dest_row + 2 == src_row and src_col == dest_col:
            return target == EMPTY and board[dest_row + 1][dest_col] == EMPTY
        if dest_row + 1 == src_row and abs(dest_col - src_col) == 1:
            return target != EMPTY and not is_white_piece(target)
    elif piece == "p":
        if dest_row - 1 == src_row and src_col == dest_col:
            return target == EMPTY
        if src_row == 1 and dest_row - 2 == src_row and src_col == dest_col:
            return target == EMPTY and board[dest_row - 1][dest_col] == EMPTY
        if dest_row - 1 == src_row and abs(dest_col - src_col) == 1:
            return target != EMPTY and is_white_piece(target)
    return False


def _path_is_clear(src_row, src_col, dest_row, dest_col, game) -> bool:
    row_step = (dest_row > src_row) - (dest_row < src_row)
    col_step = (dest_col > src_col) - (dest_col < src_col)
    distance = max(abs(dest_row - src_row), abs(dest_col - src_col))
    return all(
        game.board[src_row + i * row_step][src_col + i * col_step] == EMPTY
        for i in range(1, distance)
    )


def is_valid_rook_move(src_row, src_col, dest_row, dest_col, game) -> bool:
    """Straight line along a rank or file with nothing in between."""
    if src_row != dest_row and src_col != dest_col:
        return False
    return _path_is_clear(src_row, src_col, dest_row, dest_col, game)


def is_valid_knight_move(src_row, src_col, dest_row, dest_col) -> bool:
    """An L-shaped jump."""
    if abs(dest_row - src_row) == 1:
        return abs(dest_col - src_col) == 2
    if abs(dest_col - src_col) == 1:
        return abs(dest_row - src_row) == 2
    return False


def is_valid_bishop_move(src_row, src_col, dest_row, dest_col, game) -> bool:
    """Diagonal line with nothing in between."""
    if abs(dest_row - src_row) != abs(dest_col - src_col):
        return False
    return _path_is_clear(src_row, src_col, dest_row, dest_col, game)


def is_valid_queen_move(src_row, src_col, dest_row, dest_col, game) -> bool:
    """Rook or bishop movement."""
    return is_valid_rook_move(src_row, src_col, dest_row, dest_col, game) or is_valid_bishop_move(
        src_row, src_col, dest_row, dest_col, game
    )


def is_valid_king_move(src_row, src_col, dest_row, dest_col) -> bool:
    """One square in any direction."""
    row_diff = abs(dest_row - src_row)
    col_diff = abs(dest_col - src_col)
    return row_diff <= 1 and col_diff <= 1 and (row_diff, col_diff) != (0, 0)


_RULES = {
    "p": lambda piece, sr, sc, dr, dc, game: is_valid_pawn_move(piece, sr, sc, dr, dc, game),
    "r": lambda piece, sr, sc, dr, dc, game: is_valid_rook_move(sr, sc, dr, dc, game),
    "n": lambda piece, sr, sc, dr, dc, game: is_valid_knight_move(sr, sc, dr, dc),
    "b": lambda piece, sr, sc, dr, dc, game: is_valid_bishop_move(sr, sc, dr, dc, game),
    "q": lambda piece, sr, sc, dr, dc, game: is_valid_queen_move(sr, sc, dr, dc, game),
    "k": lambda piece, sr, sc, dr, dc, game: is_valid_king_move(sr, sc, dr, dc),
}


def is_valid_move(piece, src_row, src_col, dest_row, dest_col, game) -> bool:
    """Check the movement rule for the given piece letter; empty sources are never valid."""
    if game.board[src_row][src_col] == EMPTY:
        return False
    rule = _RULES.get(piece.lower()) if piece in "pPrRnNbBqQkK" else None
    if rule is None:
        return False
    return rule(piece, src_row, src_col, dest_row, dest_col, game)