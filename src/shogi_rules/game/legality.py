"""Legal move/drop filtering, promotion rules and checkmate detection.

合法手の判定と詰みの判定。

打ち歩詰めの判定は「歩を打った後に相手が詰んでいるか」を調べる必要があり、
詰み判定は「持ち駒を打って王手を防げるか」を調べる必要がある。
両者が互いを呼ぶと無限に再帰するため、check_drop_mate 引数で
打ち歩詰めチェックの有無を明示的に切り替える:

  is_checkmate()          → 持ち駒の合法判定で打ち歩詰めを調べる（ルール完全）
  _is_checkmate_simple()  → 打ち歩詰めを調べない（打ち歩詰め判定の内部専用）

打ち歩詰めの判定からは必ず _is_checkmate_simple() を呼ぶので、再帰は1段で止まる。
"""

from __future__ import annotations

from enum import Enum, unique

from shogi_rules.game.board import Piece, Position
from shogi_rules.game.moves import in_check, pseudo_moves
from shogi_rules.game.types import (
    COLS,
    NUM_SQUARES,
    PROMOTION_ZONE_DEPTH,
    ROWS,
    PieceType,
    Player,
    Square,
    can_promote,
)


@unique
class PromotionStatus(Enum):
    """成りの可否。"""

    NONE = "none"            # 成れない
    OPTIONAL = "optional"    # 成る・成らないを選べる
    MANDATORY = "mandatory"  # 成らないと次に動けないので必ず成る


def legal_moves(position: Position, row: int, col: int) -> set[Square]:
    """Return the destinations of the piece at (row, col) that keep its king safe.

    疑似合法手のうち、指した後に自玉が王手にならない手だけを返す。
    """
    piece = position.piece_at(row, col)
    if piece is None:
        return set()

    legal: set[Square] = set()
    for to_row, to_col in pseudo_moves(position, row, col):
        probe = position.clone()
        probe.place(to_row, to_col, piece)
        probe.clear(row, col)
        if not in_check(probe, piece.owner):
            legal.add((to_row, to_col))
    return legal


def legal_drops(position: Position, player: Player, piece_type: PieceType) -> set[Square]:
    """持ち駒 piece_type を打てるマスを返す（打ち歩詰めも判定する）。"""
    return _legal_drops(position, player, piece_type, check_drop_mate=True)


def _legal_drops(
    position: Position,
    player: Player,
    piece_type: PieceType,
    *,
    check_drop_mate: bool,
) -> set[Square]:
    drops: set[Square] = set()
    for idx in range(NUM_SQUARES):
        if position.squares[idx] is not None:
            continue
        row, col = idx // COLS, idx % COLS
        if not _is_drop_legal(
            position, player, piece_type, row, col, check_drop_mate=check_drop_mate
        ):
            continue

        # 自玉が王手にならないか確認
        probe = position.clone()
        probe.place(row, col, Piece(piece_type, player))
        if not in_check(probe, player):
            drops.add((row, col))
    return drops


def _is_drop_legal(
    position: Position,
    player: Player,
    piece_type: PieceType,
    row: int,
    col: int,
    *,
    check_drop_mate: bool,
) -> bool:
    """Drop rules other than self-check: 二歩, 行き所のない駒, 打ち歩詰め."""
    # 二歩: 同じ列に自分の未成歩があれば打てない
    if piece_type == PieceType.PAWN and position.has_unpromoted_pawn_in_column(player, col):
        return False

    # 行き所のない駒: 打った後に一度も動けないマスには打てない
    if _ranks_to_far_edge(player, row) < _required_ranks_ahead(piece_type):
        return False

    # 打ち歩詰め: 歩を打って相手玉を詰ませてはならない（歩以外の駒は詰ませてよい）
    if check_drop_mate and piece_type == PieceType.PAWN:
        probe = position.clone()
        probe.place(row, col, Piece(PieceType.PAWN, player))
        probe.side_to_move = player.opponent
        if _is_checkmate_simple(probe):
            return False

    return True


def _ranks_to_far_edge(player: Player, row: int) -> int:
    """row から相手側の端までに残っている段数（最奥段なら 0）。"""
    if player == Player.SENTE:
        return row
    return ROWS - 1 - row


def _required_ranks_ahead(piece_type: PieceType) -> int:
    """駒が動き続けるために前方に必要な段数。歩・香は1段、桂は2段。"""
    if piece_type in (PieceType.PAWN, PieceType.LANCE):
        return 1
    if piece_type == PieceType.KNIGHT:
        return 2
    return 0


def in_promotion_zone(player: Player, row: int) -> bool:
    """Check if a row is in the promotion zone (enemy's 3 ranks)."""
    return _ranks_to_far_edge(player, row) < PROMOTION_ZONE_DEPTH


def promotion_status(piece: Piece, from_row: int, to_row: int) -> PromotionStatus:
    """Return whether moving ``piece`` from from_row to to_row may or must promote.

    - 成れない駒（王・金・成り駒）: NONE
    - 移動元・移動先のどちらも敵陣外: NONE
    - 歩・香が最奥段、桂が奥2段に入る: MANDATORY
    - それ以外で敵陣に関わる移動: OPTIONAL
    """
    if not can_promote(piece.piece_type):
        return PromotionStatus.NONE

    player = piece.owner
    if not (in_promotion_zone(player, from_row) or in_promotion_zone(player, to_row)):
        return PromotionStatus.NONE

    if _ranks_to_far_edge(player, to_row) < _required_ranks_ahead(piece.piece_type):
        return PromotionStatus.MANDATORY
    return PromotionStatus.OPTIONAL


def is_checkmate(position: Position) -> bool:
    """手番側が詰んでいれば True（持ち駒の判定に打ち歩詰めを含む）。"""
    player = position.side_to_move
    if not in_check(position, player):
        return False
    return _has_no_legal_moves(position, player, check_drop_mate=True)


def _is_checkmate_simple(position: Position) -> bool:
    """打ち歩詰めを調べない詰み判定。_is_drop_legal からのみ呼ぶ。"""
    player = position.side_to_move
    if not in_check(position, player):
        return False
    return _has_no_legal_moves(position, player, check_drop_mate=False)


def _has_no_legal_moves(
    position: Position,
    player: Player,
    *,
    check_drop_mate: bool,
) -> bool:
    # 盤上の駒で王手を解除できるか（玉が逃げる・合駒・王手している駒を取る）
    for idx in range(NUM_SQUARES):
        piece = position.squares[idx]
        if piece is None or piece.owner != player:
            continue
        if legal_moves(position, idx // COLS, idx % COLS):
            return False

    # 持ち駒を打って王手を防げるか（合駒）
    for piece_type, count in position.hands[player.value].items():
        if count <= 0:
            continue
        if _legal_drops(position, player, piece_type, check_drop_mate=check_drop_mate):
            return False

    return True
