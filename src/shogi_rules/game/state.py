"""Game facade for 本将棋 (Full Shogi).

本将棋の対局を進める窓口。ShogiGame プロトコルを実装する。
局面（Position）を1つ持ち、表示層からの問い合わせと操作を
ルールモジュール（moves / legality）に振り分ける。

apply_move() / apply_drop() は移動元（持ち駒）の有無しか確認しない。
移動先の合法性は呼び出し側が legal_moves() / legal_drops() で事前に確認すること。

Terminal conditions（終局条件）:
  手番側が王手されていて、盤上の駒も持ち駒も王手を解除できない（詰み）。
  千日手などその他の終局条件は扱わない。
"""

from __future__ import annotations

import logging

from shogi_rules.game.board import LastMove, Piece, Position
from shogi_rules.game.legality import PromotionStatus
from shogi_rules.game.legality import is_checkmate as _is_checkmate
from shogi_rules.game.legality import legal_drops as _legal_drops
from shogi_rules.game.legality import legal_moves as _legal_moves
from shogi_rules.game.legality import promotion_status as _promotion_status
from shogi_rules.game.moves import in_check as _in_check
from shogi_rules.game.types import PieceType, Player, Square

_LOGGER = logging.getLogger(__name__)


class Game:
    """Mutable game in progress.

    position を直接渡せば任意の局面から対局を始められる（省略時は平手の初期局面）。
    """

    def __init__(self, position: Position | None = None) -> None:
        self.position = position if position is not None else Position()

    def reset(self) -> None:
        """初期局面から新しい対局を始める。"""
        self.position = Position()
        _LOGGER.debug("Game reset to the initial position")

    @property
    def current_player(self) -> Player:
        return self.position.side_to_move

    @property
    def is_game_over(self) -> bool:
        return self.position.game_over

    @property
    def winner(self) -> Player | None:
        return self.position.winner

    @property
    def last_move(self) -> LastMove | None:
        return self.position.last_move

    @property
    def in_check(self) -> bool:
        return self.position.in_check

    def piece_at(self, row: int, col: int) -> Piece | None:
        return self.position.piece_at(row, col)

    def hand_count(self, player: Player, piece_type: PieceType) -> int:
        return self.position.hand_count(player, piece_type)

    def is_in_check(self, player: Player) -> bool:
        """player の王将が現在攻撃されているかをその場で判定する。"""
        return _in_check(self.position, player)

    def legal_moves(self, row: int, col: int) -> set[Square]:
        return _legal_moves(self.position, row, col)

    def legal_drops(self, player: Player, piece_type: PieceType) -> set[Square]:
        return _legal_drops(self.position, player, piece_type)

    def promotion_status(self, piece: Piece, from_row: int, to_row: int) -> PromotionStatus:
        return _promotion_status(piece, from_row, to_row)

    def apply_move(
        self,
        from_row: int,
        from_col: int,
        to_row: int,
        to_col: int,
        promote: bool = False,
    ) -> bool:
        """盤上の駒を動かす。移動元に駒がなければ False（局面は変わらない）。"""
        if not self.position.move_piece(from_row, from_col, to_row, to_col, promote):
            _LOGGER.debug("Rejected move from empty square (%d, %d)", from_row, from_col)
            return False
        _LOGGER.debug(
            "%s moved (%d, %d) -> (%d, %d)%s",
            self.current_player.name,
            from_row,
            from_col,
            to_row,
            to_col,
            " promoting" if promote else "",
        )
        return True

    def apply_drop(self, piece_type: PieceType, to_row: int, to_col: int) -> bool:
        """手番側の持ち駒を打つ。持ち駒がない・マスが埋まっていれば False。"""
        player = self.current_player
        if not self.position.drop_piece(piece_type, to_row, to_col, player):
            _LOGGER.debug(
                "Rejected %s drop of %s on (%d, %d)",
                player.name,
                piece_type.name,
                to_row,
                to_col,
            )
            return False
        _LOGGER.debug("%s dropped %s on (%d, %d)", player.name, piece_type.name, to_row, to_col)
        return True

    def end_turn_and_evaluate(self) -> None:
        """手番を交代し、新しい手番側の王手・詰みを判定する。"""
        position = self.position
        position.switch_side()
        position.in_check = _in_check(position, position.side_to_move)
        if position.in_check and _is_checkmate(position):
            position.game_over = True
            position.winner = position.side_to_move.opponent
            _LOGGER.info("Checkmate: %s wins", position.winner.name)
