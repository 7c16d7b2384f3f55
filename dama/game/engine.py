from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import TYPE_CHECKING, Iterator, List, Mapping, Optional, Tuple, Union

from dama.errors import IllegalAction, OutOfBounds

if TYPE_CHECKING:
    from .storage import GameSettings

SIZE = 8
CELLS = SIZE * SIZE
FILES = "abcdefgh"

# (rank delta, file delta)
ORTHOGONAL = ((1, 0), (-1, 0), (0, 1), (0, -1))


class Side(str, Enum):
    A = "A"  # starts on ranks 2-3, promotes on rank 8
    B = "B"  # starts on ranks 6-7, promotes on rank 1

    @property
    def opponent(self) -> "Side":
        return Side.B if self is Side.A else Side.A

    @property
    def forward(self) -> int:
        return 1 if self is Side.A else -1


class Rank(str, Enum):
    MAN = "man"
    KING = "king"


class Reason(str, Enum):
    ELIMINATION = "elimination"
    BLOCKADE = "blockade"
    NO_CAPTURE_LIMIT = "no_capture_limit"


@dataclass(frozen=True)
class Piece:
    side: Side
    rank: Rank = Rank.MAN

    @property
    def is_king(self) -> bool:
        return self.rank is Rank.KING

    def crowned(self) -> "Piece":
        return Piece(self.side, Rank.KING)


Cell = Optional[Piece]
Position = Tuple[Cell, ...]


# ----- Board model -----
def in_board(rank: int, file: int) -> bool:
    return 1 <= rank <= SIZE and 1 <= file <= SIZE


def to_index(rank: int, file: int) -> int:
    if not in_board(rank, file):
        raise OutOfBounds(f"rank={rank} file={file} is off the board")
    return (rank - 1) * SIZE + (file - 1)


def from_index(index: int) -> Tuple[int, int]:
    """Returns (rank, file), both 1-based."""
    if not isinstance(index, int) or not 0 <= index < CELLS:
        raise OutOfBounds(f"square index {index!r} is off the board")
    return index // SIZE + 1, index % SIZE + 1


def square_name(index: int) -> str:
    rank, file = from_index(index)
    return f"{FILES[file - 1]}{rank}"


def parse_square(name: str) -> int:
    s = (name or "").strip().lower()
    if len(s) != 2 or s[0] not in FILES or not s[1].isdigit():
        raise OutOfBounds(f"bad square name: {name!r}")
    return to_index(int(s[1]), FILES.index(s[0]) + 1)


def promotion_rank(side: Side) -> int:
    return SIZE if side is Side.A else 1


def _neighbor(index: int, dr: int, df: int) -> Optional[int]:
    rank, file = index // SIZE + 1 + dr, index % SIZE + 1 + df
    if not in_board(rank, file):
        return None
    return (rank - 1) * SIZE + (file - 1)


def _ray(index: int, dr: int, df: int) -> Iterator[int]:
    cur = _neighbor(index, dr, df)
    while cur is not None:
        yield cur
        cur = _neighbor(cur, dr, df)


def _man_dirs(side: Side) -> Tuple[Tuple[int, int], ...]:
    # forward, left, right; men never step or jump backward
    return ((side.forward, 0), (0, -1), (0, 1))


def _reaches_promotion(piece: Piece, index: int) -> bool:
    return not piece.is_king and index // SIZE + 1 == promotion_rank(piece.side)


def create_initial_position() -> Position:
    cells: List[Cell] = [None] * CELLS
    for file in range(1, SIZE + 1):
        for rank in (2, 3):
            cells[to_index(rank, file)] = Piece(Side.A)
        for rank in (6, 7):
            cells[to_index(rank, file)] = Piece(Side.B)
    return tuple(cells)


def make_position(pieces: Mapping[int, Piece]) -> Position:
    """Builds a position holding only the given pieces, keyed by square index."""
    cells: List[Cell] = [None] * CELLS
    for index, piece in pieces.items():
        from_index(index)
        cells[index] = piece
    return tuple(cells)


def pieces_of(position: Position, side: Side) -> Iterator[Tuple[int, Piece]]:
    for index, piece in enumerate(position):
        if piece is not None and piece.side is side:
            yield index, piece


def count_pieces(position: Position, side: Side) -> int:
    return sum(1 for _ in pieces_of(position, side))


# ----- Actions -----
@dataclass(frozen=True)
class SimpleMove:
    fr: int
    to: int

    def __post_init__(self):
        from_index(self.fr)
        from_index(self.to)


@dataclass(frozen=True)
class CaptureStep:
    to: int
    jumped: int

    def __post_init__(self):
        from_index(self.to)
        from_index(self.jumped)


@dataclass(frozen=True)
class CaptureSequence:
    fr: int
    steps: Tuple[CaptureStep, ...]

    def __post_init__(self):
        from_index(self.fr)
        object.__setattr__(self, "steps", tuple(self.steps))
        if not self.steps:
            raise IllegalAction("capture sequence needs at least one step")

    def __len__(self) -> int:
        return len(self.steps)

    @property
    def to(self) -> int:
        return self.steps[-1].to

    @property
    def captured(self) -> Tuple[int, ...]:
        return tuple(step.jumped for step in self.steps)


Action = Union[SimpleMove, CaptureSequence]


def notation(action: Action) -> str:
    """c3-c4 for a move, d2xd4xd6 for a capture sequence."""
    if isinstance(action, CaptureSequence):
        return "x".join([square_name(action.fr)] + [square_name(s.to) for s in action.steps])
    return f"{square_name(action.fr)}-{square_name(action.to)}"


@dataclass(frozen=True)
class ApplyResult:
    position: Position
    captured: int = 0
    promoted: bool = False


@dataclass(frozen=True)
class GameResult:
    over: bool = False
    winner: Optional[Side] = None
    reason: Optional[Reason] = None


# ----- Simple moves -----
def list_simple_moves_for_piece(position: Position, index: int) -> List[SimpleMove]:
    piece = position[index]
    if piece is None:
        return []

    res: List[SimpleMove] = []

    if not piece.is_king:
        for dr, df in _man_dirs(piece.side):
            to = _neighbor(index, dr, df)
            if to is not None and position[to] is None:
                res.append(SimpleMove(index, to))
        return res

    # king: every empty cell along each orthogonal ray
    for dr, df in ORTHOGONAL:
        for to in _ray(index, dr, df):
            if position[to] is not None:
                break
            res.append(SimpleMove(index, to))
    return res


def generate_moves(position: Position, side: Side) -> List[SimpleMove]:
    """Non-capturing moves of every piece of `side`, ordered by start square."""
    res: List[SimpleMove] = []
    for index, _ in pieces_of(position, side):
        res.extend(list_simple_moves_for_piece(position, index))
    return res


# ----- Captures -----
def _jump(position: Position, fr: int, jumped: int, to: int) -> Position:
    b = list(position)
    b[to] = b[fr]
    b[fr] = None
    b[jumped] = None
    return tuple(b)


def _prefixed(step: CaptureStep, continuations: List[Tuple[CaptureStep, ...]]) -> List[Tuple[CaptureStep, ...]]:
    if not continuations:
        return [(step,)]
    return [(step,) + rest for rest in continuations]


def capture_from(position: Position, index: int, is_king: bool, side: Side) -> List[Tuple[CaptureStep, ...]]:
    """
    Every complete capture sequence the piece on `index` can make.

    Each jump is played on a fresh copy of the position before searching for
    continuations, so a captured piece is gone for the rest of the sequence
    and sibling branches never see each other's jumps. A man that lands on its
    promotion rank stops there.
    """
    sequences: List[Tuple[CaptureStep, ...]] = []

    if not is_king:
        for dr, df in _man_dirs(side):
            mid = _neighbor(index, dr, df)
            land = _neighbor(mid, dr, df) if mid is not None else None
            if land is None:
                continue
            victim = position[mid]
            if victim is None or victim.side is side or position[land] is not None:
                continue
            step = CaptureStep(land, mid)
            if land // SIZE + 1 == promotion_rank(side):
                sequences.append((step,))
                continue
            after = _jump(position, index, mid, land)
            sequences.extend(_prefixed(step, capture_from(after, land, False, side)))
        return sequences

    for dr, df in ORTHOGONAL:
        victim_at: Optional[int] = None
        for cur in _ray(index, dr, df):
            cell = position[cur]
            if cell is None:
                continue
            if cell.side is not side:
                victim_at = cur
            break  # only the first piece on the ray matters
        if victim_at is None:
            continue

        for land in _ray(victim_at, dr, df):
            if position[land] is not None:
                break
            step = CaptureStep(land, victim_at)
            after = _jump(position, index, victim_at, land)
            sequences.extend(_prefixed(step, capture_from(after, land, True, side)))

    return sequences


def generate_captures(
    position: Position,
    side: Side,
    settings: Optional["GameSettings"] = None,
) -> List[CaptureSequence]:
    """
    All capture sequences of maximal length for `side`.

    Sequences of every piece are collected and only those with the greatest
    number of jumps are kept; all of them are returned so the player chooses
    among equals. `settings` carries the configured tie-break policy, which
    does not filter beyond the maximal-length rule.
    """
    found: List[CaptureSequence] = []
    for index, piece in pieces_of(position, side):
        for steps in capture_from(position, index, piece.is_king, side):
            found.append(CaptureSequence(index, steps))

    if not found:
        return []
    longest = max(len(c) for c in found)
    return [c for c in found if len(c) == longest]


def legal_actions(
    position: Position,
    side: Side,
    settings: Optional["GameSettings"] = None,
) -> List[Action]:
    # captures are mandatory whenever one exists
    captures: List[Action] = list(generate_captures(position, side, settings))
    return captures or list(generate_moves(position, side))


def has_any_action(position: Position, side: Side) -> bool:
    return bool(generate_moves(position, side)) or bool(generate_captures(position, side))


# ----- Applying actions -----
def apply_action(position: Position, action: Action) -> ApplyResult:
    b = list(position)
    piece = b[action.fr]
    if piece is None:
        raise IllegalAction(f"no piece on {square_name(action.fr)}")

    if isinstance(action, SimpleMove):
        if b[action.to] is not None:
            raise IllegalAction(f"{square_name(action.to)} is occupied")
        promoted = _reaches_promotion(piece, action.to)
        b[action.fr] = None
        b[action.to] = piece.crowned() if promoted else piece
        return ApplyResult(tuple(b), 0, promoted)

    if not isinstance(action, CaptureSequence):
        raise IllegalAction(f"unsupported action: {action!r}")

    cur = action.fr
    captured = 0
    promoted = False
    for step in action.steps:
        victim = b[step.jumped]
        if victim is None or victim.side is piece.side:
            raise IllegalAction(f"nothing to capture on {square_name(step.jumped)}")
        b[cur] = None
        if b[step.to] is not None:
            raise IllegalAction(f"{square_name(step.to)} is occupied")
        b[step.jumped] = None
        captured += 1
        cur = step.to
        if _reaches_promotion(piece, cur):
            # promotion ends the turn; any further steps are ignored
            piece = piece.crowned()
            promoted = True
            b[cur] = piece
            break
        b[cur] = piece

    return ApplyResult(tuple(b), captured, promoted)


# ----- Game over -----
def check_game_over(position: Position, side_to_move: Side) -> GameResult:
    """Call with the side about to move next, not the side that just moved."""
    if count_pieces(position, Side.A) == 0:
        return GameResult(True, Side.B, Reason.ELIMINATION)
    if count_pieces(position, Side.B) == 0:
        return GameResult(True, Side.A, Reason.ELIMINATION)
    if not has_any_action(position, side_to_move):
        return GameResult(True, side_to_move.opponent, Reason.BLOCKADE)
    return GameResult()
