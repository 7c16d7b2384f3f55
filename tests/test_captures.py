from dama.game.engine import (
    CaptureSequence, CaptureStep, Side, capture_from, create_initial_position,
    generate_captures, legal_actions, notation,
)


def test_no_captures_in_opening():
    assert generate_captures(create_initial_position(), Side.A) == []
    assert generate_captures(create_initial_position(), Side.B) == []


def test_man_captures_forward(board, sq):
    pos = board({"d4": "a", "d5": "b"})
    caps = generate_captures(pos, Side.A)
    assert caps == [CaptureSequence(sq("d4"), (CaptureStep(sq("d6"), sq("d5")),))]


def test_man_captures_sideways(board, sq):
    pos = board({"d4": "a", "e4": "b"})
    caps = generate_captures(pos, Side.A)
    assert [(c.fr, c.to, c.captured) for c in caps] == [(sq("d4"), sq("f4"), (sq("e4"),))]


def test_man_does_not_capture_backward(board):
    pos = board({"d4": "a", "d3": "b"})
    assert generate_captures(pos, Side.A) == []


def test_side_b_captures_toward_rank_one(board, sq):
    pos = board({"e5": "b", "e4": "a"})
    caps = generate_captures(pos, Side.B)
    assert [c.to for c in caps] == [sq("e3")]


def test_no_capture_when_landing_is_occupied(board):
    pos = board({"d4": "a", "d5": "b", "d6": "b"})
    assert generate_captures(pos, Side.A) == []


def test_no_capture_over_own_piece(board):
    pos = board({"d4": "a", "d5": "a", "h8": "b"})
    assert generate_captures(pos, Side.A) == []


def test_man_multi_jump_is_one_sequence(board, sq):
    pos = board({"d2": "a", "d3": "b", "d5": "b"})
    caps = generate_captures(pos, Side.A)
    assert len(caps) == 1
    assert caps[0].steps == (
        CaptureStep(sq("d4"), sq("d3")),
        CaptureStep(sq("d6"), sq("d5")),
    )
    assert notation(caps[0]) == "d2xd4xd6"


def test_only_longest_sequences_are_returned(board, sq):
    # h2 has a single jump, d2 a double one
    pos = board({"d2": "a", "d3": "b", "d5": "b", "h2": "a", "h3": "b"})
    caps = generate_captures(pos, Side.A)
    assert [c.fr for c in caps] == [sq("d2")]
    assert all(len(c) == 2 for c in caps)


def test_equal_length_sequences_from_several_pieces_are_all_kept(board, sq):
    pos = board({"b2": "a", "b3": "b", "g2": "a", "g3": "b"})
    caps = generate_captures(pos, Side.A)
    assert sorted(c.fr for c in caps) == [sq("b2"), sq("g2")]


def test_branching_man_sequences(board, sq):
    # after d4xd6 the man can go on to the left or to the right
    pos = board({"d4": "a", "d5": "b", "c6": "b", "e6": "b"})
    caps = generate_captures(pos, Side.A)
    assert sorted(c.to for c in caps) == sorted([sq("b6"), sq("f6")])
    assert all(len(c) == 2 for c in caps)


def test_promotion_interrupts_the_sequence(board, sq):
    # landing on d8 crowns the man; the c8 piece stays even though a king could take it
    pos = board({"d6": "a", "d7": "b", "c8": "b"})
    caps = generate_captures(pos, Side.A)
    assert caps == [CaptureSequence(sq("d6"), (CaptureStep(sq("d8"), sq("d7")),))]


def test_promotion_interrupts_for_side_b(board, sq):
    pos = board({"e3": "b", "e2": "a", "f1": "a"})
    caps = generate_captures(pos, Side.B)
    assert [(c.to, len(c)) for c in caps] == [(sq("e1"), 1)]


def test_shorter_promoting_capture_loses_to_longer_one(board, sq):
    pos = board({"d6": "a", "d7": "b", "a2": "a", "a3": "b", "a5": "b"})
    caps = generate_captures(pos, Side.A)
    assert [c.fr for c in caps] == [sq("a2")]


def test_king_chooses_any_landing_beyond_the_piece(board, sq):
    pos = board({"a1": "A", "a3": "b"})
    caps = generate_captures(pos, Side.A)
    assert sorted(c.to for c in caps) == [sq(s) for s in ("a4", "a5", "a6", "a7", "a8")]
    # the captured piece is gone, so nothing is left to jump
    assert all(len(c) == 1 and c.captured == (sq("a3"),) for c in caps)


def test_king_captures_from_a_distance(board, sq):
    pos = board({"a1": "A", "e1": "b"})
    caps = generate_captures(pos, Side.A)
    assert sorted(c.to for c in caps) == [sq("f1"), sq("g1"), sq("h1")]


def test_king_blocked_by_own_piece(board):
    pos = board({"a1": "A", "a2": "a", "a3": "b", "a4": "b"})
    assert generate_captures(pos, Side.A) == []


def test_king_cannot_jump_two_pieces_in_a_row(board):
    pos = board({"a1": "A", "a3": "b", "a4": "b"})
    assert generate_captures(pos, Side.A) == []


def test_king_keeps_only_landings_that_continue(board, sq):
    pos = board({"a1": "A", "a3": "b", "c5": "b"})
    caps = generate_captures(pos, Side.A)
    assert all(c.steps[0] == CaptureStep(sq("a5"), sq("a3")) for c in caps)
    assert sorted(c.to for c in caps) == [sq(s) for s in ("d5", "e5", "f5", "g5", "h5")]
    assert all(len(c) == 2 for c in caps)


def test_king_chains_along_the_same_file(board, sq):
    pos = board({"a1": "A", "a3": "b", "a5": "b"})
    caps = generate_captures(pos, Side.A)
    assert all(c.captured == (sq("a3"), sq("a5")) for c in caps)
    assert sorted(c.to for c in caps) == [sq("a6"), sq("a7"), sq("a8")]


def test_no_piece_is_jumped_twice(board):
    pos = board({"c3": "A", "c5": "b", "e5": "b", "e3": "b"})
    for c in generate_captures(pos, Side.A):
        assert len(set(c.captured)) == len(c.captured)


def test_king_passes_over_its_vacated_start_square(board, sq):
    # the last jump runs c6 -> c1 straight through c3
    pos = board({"c3": "A", "e3": "b", "f5": "b", "d6": "b", "c2": "b"})
    caps = generate_captures(pos, Side.A)
    assert len(caps) == 1
    assert notation(caps[0]) == "c3xf3xf6xc6xc1"
    assert caps[0].captured == (sq("e3"), sq("f5"), sq("d6"), sq("c2"))


def test_capture_from_for_a_single_piece(board, sq):
    pos = board({"d4": "a", "d5": "b", "c4": "b"})
    seqs = capture_from(pos, sq("d4"), False, Side.A)
    assert sorted(s[0].jumped for s in seqs) == sorted([sq("d5"), sq("c4")])


def test_settings_do_not_change_the_result(board):
    from dama.game.storage import GameSettings

    pos = board({"b2": "a", "b3": "b", "g2": "A", "g4": "b"})
    plain = generate_captures(pos, Side.A)
    assert generate_captures(pos, Side.A, GameSettings(tie_break="most_kings")) == plain
    assert generate_captures(pos, Side.A, GameSettings(tie_break="prefer_king_start")) == plain


def test_legal_actions_prefers_captures(board, sq):
    pos = board({"d4": "a", "d5": "b", "a2": "a"})
    actions = legal_actions(pos, Side.A)
    assert actions == generate_captures(pos, Side.A)


def test_capture_generation_is_repeatable(board):
    pos = board({"a1": "A", "a3": "b", "c5": "b", "d2": "a", "d3": "b"})
    snapshot = tuple(pos)
    assert generate_captures(pos, Side.A) == generate_captures(pos, Side.A)
    assert pos == snapshot
