"""
Shared pytest fixtures for the dama tests.

Positions are described as {square name: code}; the code is the side letter,
lower case for a man and upper case for a king:

    board({"d4": "a", "d5": "b", "a1": "A"})
"""

import pytest

from dama.game.engine import Piece, Rank, Side, make_position, parse_square


def _piece(code: str) -> Piece:
    side = Side(code.upper())
    return Piece(side, Rank.KING if code.isupper() else Rank.MAN)


@pytest.fixture
def board():
    def build(pieces):
        return make_position({parse_square(sq): _piece(code) for sq, code in pieces.items()})
    return build


@pytest.fixture
def sq():
    return parse_square
