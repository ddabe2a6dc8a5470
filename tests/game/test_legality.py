"""Tests for legality filtering, drop rules, promotion status and checkmate.

Coverage map:
  - Self-check filtering: pinned pieces, king moving into attack
  - Drop rules: Nifu (二歩), dead-piece restriction (行き所のない駒),
    Uchifuzume (打ち歩詰め), self-check on drop
  - Promotion status: none / optional / mandatory, mirror symmetry
  - Checkmate: interposition, capture of the checking piece, drop defence
"""

from __future__ import annotations

import pytest

from shogi_rules.game.board import Piece, Position
from shogi_rules.game.legality import (
    PromotionStatus,
    is_checkmate,
    legal_drops,
    legal_moves,
    promotion_status,
)
from shogi_rules.game.moves import in_check
from shogi_rules.game.types import COLS, NUM_SQUARES, ROWS, PieceType, Player


def _make_position(
    pieces: list[tuple[int, int, PieceType, Player]],
    sente_hand: dict[PieceType, int] | None = None,
    gote_hand: dict[PieceType, int] | None = None,
    side_to_move: Player = Player.SENTE,
) -> Position:
    return Position.from_pieces(pieces, sente_hand, gote_hand, side_to_move)


def _all_empty_squares(position: Position) -> set[tuple[int, int]]:
    return {
        (idx // COLS, idx % COLS)
        for idx in range(NUM_SQUARES)
        if position.squares[idx] is None
    }


# ===========================================================================
# Board moves
# ===========================================================================


class TestLegalMoves:
    def test_initial_position_has_30_destinations(self) -> None:
        position = Position()
        total = 0
        for idx, piece in enumerate(position.squares):
            if piece is not None and piece.owner == Player.SENTE:
                total += len(legal_moves(position, idx // COLS, idx % COLS))
        assert total == 30

    def test_empty_square_has_no_legal_moves(self) -> None:
        assert legal_moves(Position(), 4, 4) == set()

    def test_pinned_gold_stays_on_file(self) -> None:
        position = _make_position(
            [
                (8, 4, PieceType.KING, Player.SENTE),
                (6, 4, PieceType.GOLD, Player.SENTE),
                (0, 4, PieceType.ROOK, Player.GOTE),
                (0, 0, PieceType.KING, Player.GOTE),
            ]
        )
        assert legal_moves(position, 6, 4) == {(5, 4), (7, 4)}

    def test_pinned_piece_may_capture_pinner(self) -> None:
        position = _make_position(
            [
                (8, 4, PieceType.KING, Player.SENTE),
                (6, 4, PieceType.LANCE, Player.SENTE),
                (2, 4, PieceType.ROOK, Player.GOTE),
                (0, 0, PieceType.KING, Player.GOTE),
            ]
        )
        assert legal_moves(position, 6, 4) == {(5, 4), (4, 4), (3, 4), (2, 4)}

    def test_king_cannot_step_into_attack(self) -> None:
        position = _make_position(
            [
                (8, 4, PieceType.KING, Player.SENTE),
                (0, 3, PieceType.ROOK, Player.GOTE),
                (0, 0, PieceType.KING, Player.GOTE),
            ]
        )
        moves = legal_moves(position, 8, 4)
        assert (7, 3) not in moves
        assert (8, 3) not in moves
        assert (7, 4) in moves

    def test_in_check_only_responses_are_legal(self) -> None:
        position = _make_position(
            [
                (8, 4, PieceType.KING, Player.SENTE),
                (7, 0, PieceType.GOLD, Player.SENTE),
                (4, 4, PieceType.ROOK, Player.GOTE),
                (0, 0, PieceType.KING, Player.GOTE),
            ]
        )
        # The gold cannot reach the file, so it has no way to answer the check
        assert legal_moves(position, 7, 0) == set()

    def test_self_check_freedom_over_a_game(self) -> None:
        """No legal move ever leaves the mover's own king attacked."""
        position = Position()
        for _ in range(12):
            player = position.side_to_move
            candidates: list[tuple[int, int, int, int]] = []
            for idx, piece in enumerate(position.squares):
                if piece is None or piece.owner != player:
                    continue
                row, col = idx // COLS, idx % COLS
                for to_row, to_col in sorted(legal_moves(position, row, col)):
                    probe = position.clone()
                    probe.move_piece(row, col, to_row, to_col)
                    assert not in_check(probe, player)
                    candidates.append((row, col, to_row, to_col))
            assert candidates
            # Advance with the move that lands farthest forward
            sign = 1 if player == Player.SENTE else -1
            position.move_piece(*min(candidates, key=lambda m: sign * m[2]))
            position.switch_side()

    def test_idempotent(self) -> None:
        position = Position()
        first = legal_moves(position, 7, 7)
        assert legal_moves(position, 7, 7) == first
        assert legal_moves(position, 7, 7) == first


# ===========================================================================
# Drops
# ===========================================================================


class TestNifu:
    def test_cannot_drop_pawn_in_column_with_own_pawn(self) -> None:
        position = _make_position(
            [
                (8, 4, PieceType.KING, Player.SENTE),
                (0, 4, PieceType.KING, Player.GOTE),
                (6, 0, PieceType.PAWN, Player.SENTE),
            ],
            sente_hand={PieceType.PAWN: 1},
        )
        drops = legal_drops(position, Player.SENTE, PieceType.PAWN)
        assert all(col != 0 for _, col in drops)
        assert (5, 1) in drops

    def test_promoted_pawn_does_not_block_column(self) -> None:
        position = _make_position(
            [
                (8, 4, PieceType.KING, Player.SENTE),
                (0, 4, PieceType.KING, Player.GOTE),
                (3, 0, PieceType.PRO_PAWN, Player.SENTE),
            ],
            sente_hand={PieceType.PAWN: 1},
        )
        assert (5, 0) in legal_drops(position, Player.SENTE, PieceType.PAWN)

    def test_opponent_pawn_does_not_block_column(self) -> None:
        position = _make_position(
            [
                (8, 4, PieceType.KING, Player.SENTE),
                (0, 4, PieceType.KING, Player.GOTE),
                (2, 0, PieceType.PAWN, Player.GOTE),
            ],
            sente_hand={PieceType.PAWN: 1},
        )
        assert (5, 0) in legal_drops(position, Player.SENTE, PieceType.PAWN)

    def test_no_column_with_own_pawn_in_initial_position(self) -> None:
        position = Position()
        position.hands[Player.SENTE.value][PieceType.PAWN] = 1
        assert legal_drops(position, Player.SENTE, PieceType.PAWN) == set()


class TestDeadPieceRestriction:
    @pytest.fixture
    def position(self) -> Position:
        return _make_position(
            [
                (8, 4, PieceType.KING, Player.SENTE),
                (0, 4, PieceType.KING, Player.GOTE),
            ],
            sente_hand={
                PieceType.PAWN: 1,
                PieceType.LANCE: 1,
                PieceType.KNIGHT: 1,
                PieceType.SILVER: 1,
            },
            gote_hand={PieceType.PAWN: 1, PieceType.LANCE: 1, PieceType.KNIGHT: 1},
        )

    def test_sente_pawn_and_lance_not_on_row_zero(self, position: Position) -> None:
        for pt in (PieceType.PAWN, PieceType.LANCE):
            drops = legal_drops(position, Player.SENTE, pt)
            assert all(row != 0 for row, _ in drops)
            assert (1, 0) in drops

    def test_sente_knight_not_on_last_two_ranks(self, position: Position) -> None:
        drops = legal_drops(position, Player.SENTE, PieceType.KNIGHT)
        assert all(row > 1 for row, _ in drops)
        assert (2, 0) in drops

    def test_gote_restrictions_are_mirrored(self, position: Position) -> None:
        for pt in (PieceType.PAWN, PieceType.LANCE):
            drops = legal_drops(position, Player.GOTE, pt)
            assert all(row != ROWS - 1 for row, _ in drops)
            assert (7, 0) in drops
        knight_drops = legal_drops(position, Player.GOTE, PieceType.KNIGHT)
        assert all(row < 7 for row, _ in knight_drops)
        assert (6, 0) in knight_drops

    def test_silver_may_drop_anywhere_empty(self, position: Position) -> None:
        drops = legal_drops(position, Player.SENTE, PieceType.SILVER)
        assert drops == _all_empty_squares(position)


class TestDropSelfCheck:
    def test_drop_must_answer_check(self) -> None:
        position = _make_position(
            [
                (8, 4, PieceType.KING, Player.SENTE),
                (4, 4, PieceType.ROOK, Player.GOTE),
                (0, 0, PieceType.KING, Player.GOTE),
            ],
            sente_hand={PieceType.GOLD: 1},
        )
        assert legal_drops(position, Player.SENTE, PieceType.GOLD) == {
            (5, 4),
            (6, 4),
            (7, 4),
        }

    def test_drops_only_on_empty_squares(self) -> None:
        position = Position()
        position.hands[Player.SENTE.value][PieceType.GOLD] = 1
        drops = legal_drops(position, Player.SENTE, PieceType.GOLD)
        assert drops == _all_empty_squares(position)

    def test_idempotent(self) -> None:
        position = Position()
        position.hands[Player.GOTE.value][PieceType.KNIGHT] = 1
        first = legal_drops(position, Player.GOTE, PieceType.KNIGHT)
        assert legal_drops(position, Player.GOTE, PieceType.KNIGHT) == first


class TestUchifuzume:
    """打ち歩詰め: 歩を打って相手玉を詰ませてはならない。

    Gote King at (0, 8) is boxed in:
      Sente Gold at (0, 6) covers (0, 7).
      Sente Gold at (2, 7) covers (1, 7) and (1, 8).
    A Sente pawn on (1, 8) checks the king and is protected by the gold.
    """

    _BOX = [
        (8, 4, PieceType.KING, Player.SENTE),
        (0, 8, PieceType.KING, Player.GOTE),
        (0, 6, PieceType.GOLD, Player.SENTE),
        (2, 7, PieceType.GOLD, Player.SENTE),
    ]

    def test_mating_pawn_drop_is_illegal(self) -> None:
        position = _make_position(
            self._BOX, sente_hand={PieceType.PAWN: 1, PieceType.LANCE: 1}
        )
        drops = legal_drops(position, Player.SENTE, PieceType.PAWN)
        assert (1, 8) not in drops
        assert (4, 4) in drops  # other drops are unaffected

    def test_mating_lance_drop_is_legal(self) -> None:
        position = _make_position(
            self._BOX, sente_hand={PieceType.PAWN: 1, PieceType.LANCE: 1}
        )
        assert (1, 8) in legal_drops(position, Player.SENTE, PieceType.LANCE)

        position.drop_piece(PieceType.LANCE, 1, 8, Player.SENTE)
        position.switch_side()
        assert is_checkmate(position)

    def test_mating_pawn_board_move_is_legal(self) -> None:
        position = _make_position(
            [*self._BOX, (2, 8, PieceType.PAWN, Player.SENTE)]
        )
        assert (1, 8) in legal_moves(position, 2, 8)

        position.move_piece(2, 8, 1, 8)
        position.switch_side()
        assert is_checkmate(position)

    def test_pawn_drop_check_with_an_answer_is_legal(self) -> None:
        # A Gote silver on (0, 7) can capture the pawn on (1, 8)
        position = _make_position(
            [*self._BOX, (0, 7, PieceType.SILVER, Player.GOTE)],
            sente_hand={PieceType.PAWN: 1},
        )
        assert (1, 8) in legal_drops(position, Player.SENTE, PieceType.PAWN)

    def test_pawn_drop_check_with_escape_square_is_legal(self) -> None:
        position = _make_position(
            [
                (8, 4, PieceType.KING, Player.SENTE),
                (0, 8, PieceType.KING, Player.GOTE),
                (2, 7, PieceType.GOLD, Player.SENTE),
            ],
            sente_hand={PieceType.PAWN: 1},
        )
        assert (1, 8) in legal_drops(position, Player.SENTE, PieceType.PAWN)

    def test_gote_mating_pawn_drop_is_illegal(self) -> None:
        # Mirror image of the boxed position
        position = _make_position(
            [
                (0, 4, PieceType.KING, Player.GOTE),
                (8, 0, PieceType.KING, Player.SENTE),
                (8, 2, PieceType.GOLD, Player.GOTE),
                (6, 1, PieceType.GOLD, Player.GOTE),
            ],
            gote_hand={PieceType.PAWN: 1},
            side_to_move=Player.GOTE,
        )
        assert (7, 0) not in legal_drops(position, Player.GOTE, PieceType.PAWN)


# ===========================================================================
# Promotion
# ===========================================================================


class TestPromotionStatus:
    @pytest.mark.parametrize(
        ("piece_type", "from_row", "to_row", "expected"),
        [
            (PieceType.PAWN, 5, 4, PromotionStatus.NONE),
            (PieceType.PAWN, 3, 2, PromotionStatus.OPTIONAL),
            (PieceType.PAWN, 1, 0, PromotionStatus.MANDATORY),
            (PieceType.LANCE, 4, 1, PromotionStatus.OPTIONAL),
            (PieceType.LANCE, 4, 0, PromotionStatus.MANDATORY),
            (PieceType.KNIGHT, 4, 2, PromotionStatus.OPTIONAL),
            (PieceType.KNIGHT, 3, 1, PromotionStatus.MANDATORY),
            (PieceType.SILVER, 1, 0, PromotionStatus.OPTIONAL),
            (PieceType.SILVER, 2, 3, PromotionStatus.OPTIONAL),  # leaving the zone
            (PieceType.BISHOP, 7, 3, PromotionStatus.NONE),
            (PieceType.ROOK, 6, 2, PromotionStatus.OPTIONAL),
            (PieceType.GOLD, 3, 2, PromotionStatus.NONE),
            (PieceType.KING, 3, 2, PromotionStatus.NONE),
            (PieceType.PRO_PAWN, 1, 0, PromotionStatus.NONE),
            (PieceType.DRAGON, 3, 2, PromotionStatus.NONE),
        ],
    )
    def test_sente(
        self,
        piece_type: PieceType,
        from_row: int,
        to_row: int,
        expected: PromotionStatus,
    ) -> None:
        piece = Piece(piece_type, Player.SENTE)
        assert promotion_status(piece, from_row, to_row) == expected

    def test_gote_zone_is_rows_six_to_eight(self) -> None:
        pawn = Piece(PieceType.PAWN, Player.GOTE)
        assert promotion_status(pawn, 4, 5) == PromotionStatus.NONE
        assert promotion_status(pawn, 5, 6) == PromotionStatus.OPTIONAL
        assert promotion_status(pawn, 7, 8) == PromotionStatus.MANDATORY
        knight = Piece(PieceType.KNIGHT, Player.GOTE)
        assert promotion_status(knight, 5, 7) == PromotionStatus.MANDATORY

    def test_mirror_symmetry(self) -> None:
        for piece_type in PieceType:
            for from_row in range(ROWS):
                for to_row in range(ROWS):
                    sente = promotion_status(Piece(piece_type, Player.SENTE), from_row, to_row)
                    gote = promotion_status(
                        Piece(piece_type, Player.GOTE),
                        ROWS - 1 - from_row,
                        ROWS - 1 - to_row,
                    )
                    assert sente == gote


# ===========================================================================
# Checkmate
# ===========================================================================


class TestCheckmate:
    """Gote King on (0, 4), checked along row 0 by a Sente Rook on (0, 0).

    The king's other neighbours are occupied by its own pieces, so only an
    interposition on (0, 1)-(0, 3) or a capture of the rook can save it.
    """

    _BASE = [
        (8, 4, PieceType.KING, Player.SENTE),
        (0, 0, PieceType.ROOK, Player.SENTE),
        (0, 4, PieceType.KING, Player.GOTE),
        (1, 3, PieceType.PAWN, Player.GOTE),
        (1, 4, PieceType.PAWN, Player.GOTE),
        (1, 5, PieceType.PAWN, Player.GOTE),
        (0, 5, PieceType.SILVER, Player.GOTE),
    ]

    def _position(
        self,
        extra: list[tuple[int, int, PieceType, Player]] | None = None,
        gote_hand: dict[PieceType, int] | None = None,
    ) -> Position:
        return _make_position(
            [*self._BASE, *(extra or [])],
            gote_hand=gote_hand,
            side_to_move=Player.GOTE,
        )

    def test_king_is_in_check(self) -> None:
        assert in_check(self._position(), Player.GOTE)

    def test_no_defence_is_checkmate(self) -> None:
        assert is_checkmate(self._position())

    def test_interposing_piece_prevents_mate(self) -> None:
        position = self._position([(1, 2, PieceType.GOLD, Player.GOTE)])
        assert (0, 2) in legal_moves(position, 1, 2)
        assert not is_checkmate(position)

    def test_capturing_the_rook_prevents_mate(self) -> None:
        position = self._position([(1, 0, PieceType.GOLD, Player.GOTE)])
        assert (0, 0) in legal_moves(position, 1, 0)
        assert not is_checkmate(position)

    def test_drop_interposition_prevents_mate(self) -> None:
        position = self._position(gote_hand={PieceType.GOLD: 1})
        assert legal_drops(position, Player.GOTE, PieceType.GOLD) == {
            (0, 1),
            (0, 2),
            (0, 3),
        }
        assert not is_checkmate(position)

    def test_not_in_check_is_not_mate(self) -> None:
        position = self._position([(0, 2, PieceType.GOLD, Player.GOTE)])
        assert not in_check(position, Player.GOTE)
        assert not is_checkmate(position)

    def test_mate_is_evaluated_for_side_to_move(self) -> None:
        position = self._position()
        position.side_to_move = Player.SENTE
        assert not is_checkmate(position)

    def test_initial_position_is_not_mate(self) -> None:
        assert not is_checkmate(Position())
