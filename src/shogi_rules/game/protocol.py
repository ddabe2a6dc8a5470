"""ShogiGame protocol — the API surface offered to a presentation layer.

盤面の描画・クリック操作・効果音などの表示層が使うインタフェース。
表示層はこのプロトコルだけに依存し、手ごとに次の順で呼び出す:

  1. legal_moves() / legal_drops() で移動可能なマスを得る（合法手だけを選ばせる）
  2. apply_move() / apply_drop() で局面を更新する
     （成りは promotion_status() が MANDATORY なら True、NONE なら False、
      OPTIONAL ならユーザーに選ばせる）
  3. end_turn_and_evaluate() で手番を交代し、王手・詰みを再計算する
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol, runtime_checkable

from shogi_rules.game.types import PieceType, Player, Square

if TYPE_CHECKING:
    from shogi_rules.game.board import LastMove, Piece
    from shogi_rules.game.legality import PromotionStatus


@runtime_checkable  # isinstance() でのランタイムチェックを有効にする
class ShogiGame(Protocol):
    """Query/command interface of a shogi rules engine."""

    @property
    def current_player(self) -> Player:
        """現在手番のプレイヤーを返す。"""
        ...

    @property
    def is_game_over(self) -> bool:
        """詰みで終局していれば True。"""
        ...

    @property
    def winner(self) -> Player | None:
        """勝者を返す。対局中は None。"""
        ...

    @property
    def last_move(self) -> LastMove | None:
        """直前の手（盤上の移動または打ち）を返す。"""
        ...

    @property
    def in_check(self) -> bool:
        """手番側が王手されていれば True（end_turn_and_evaluate で更新）。"""
        ...

    def piece_at(self, row: int, col: int) -> Piece | None: ...

    def hand_count(self, player: Player, piece_type: PieceType) -> int: ...

    def is_in_check(self, player: Player) -> bool: ...

    def legal_moves(self, row: int, col: int) -> set[Square]: ...

    def legal_drops(self, player: Player, piece_type: PieceType) -> set[Square]: ...

    def promotion_status(self, piece: Piece, from_row: int, to_row: int) -> PromotionStatus: ...

    def apply_move(
        self, from_row: int, from_col: int, to_row: int, to_col: int, promote: bool
    ) -> bool: ...

    def apply_drop(self, piece_type: PieceType, to_row: int, to_col: int) -> bool: ...

    def end_turn_and_evaluate(self) -> None: ...
