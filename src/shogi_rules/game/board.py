"""Board representation for 本将棋 (9x9).

9×9盤の局面データ構造（盤面 + 持ち駒 + 手番 + 最終手）。
変更メソッドはその場で局面を書き換える。ルールの検証は一切行わない
（合法性は legality モジュールで事前に確認する）。
仮想的な手を試すときは clone() で独立したコピーを作ってから変更する。
"""

from __future__ import annotations

from dataclasses import dataclass, field

from shogi_rules.game.types import (
    COLS,
    HAND_PIECE_TYPES,
    NUM_SQUARES,
    PROMOTION_MAP,
    ROWS,
    PieceType,
    Player,
    Square,
    in_bounds,
    unpromote,
)


@dataclass(frozen=True)
class Piece:
    """A piece on the board.

    盤面上の駒。種類と所有者を持つ。
    成るときは同じマスに成り駒の Piece を置き直す。
    """

    piece_type: PieceType
    owner: Player


@dataclass(frozen=True)
class BoardMove:
    """盤上の駒を動かした手の記録。"""

    from_square: Square
    to_square: Square
    promote: bool = False


@dataclass(frozen=True)
class DropMove:
    """持ち駒を打った手の記録。"""

    piece_type: PieceType
    to_square: Square


LastMove = BoardMove | DropMove


def _empty_hands() -> list[dict[PieceType, int]]:
    return [{pt: 0 for pt in HAND_PIECE_TYPES} for _ in Player]


@dataclass
class Position:
    """Mutable position state for 9x9 本将棋.

    squares: 81要素のリスト（行優先）。squares[row * COLS + col] でアクセス。
    hands:   2要素のリスト。hands[0]=先手の持ち駒、hands[1]=後手の持ち駒。
             各要素は {駒種: 枚数}（持ち駒になる7種すべてのキーを持つ）。

    in_check / game_over / winner は手番交代時に Game が再計算する派生フラグ。
    """

    squares: list[Piece | None] = field(
        default_factory=lambda: Position._initial_squares()
    )
    hands: list[dict[PieceType, int]] = field(default_factory=_empty_hands)
    side_to_move: Player = Player.SENTE
    last_move: LastMove | None = None
    in_check: bool = False
    game_over: bool = False
    winner: Player | None = None

    @staticmethod
    def _initial_squares() -> list[Piece | None]:
        """Return the standard starting position (平手).

        Row 0 = 後手の後段（上端）、Row 8 = 先手の後段（下端）。
        将棋盤の「9筋」表記と異なり、プログラムでは列0が左（9筋）になる点に注意。
        """
        squares: list[Piece | None] = [None] * NUM_SQUARES
        back_rank = [
            PieceType.LANCE, PieceType.KNIGHT, PieceType.SILVER,
            PieceType.GOLD, PieceType.KING, PieceType.GOLD,
            PieceType.SILVER, PieceType.KNIGHT, PieceType.LANCE,
        ]

        # 後手陣: 後段（Row 0）、飛角（Row 1）、歩（Row 2）
        for c, pt in enumerate(back_rank):
            squares[0 * COLS + c] = Piece(pt, Player.GOTE)
        squares[1 * COLS + 1] = Piece(PieceType.ROOK, Player.GOTE)
        squares[1 * COLS + 7] = Piece(PieceType.BISHOP, Player.GOTE)
        for c in range(COLS):
            squares[2 * COLS + c] = Piece(PieceType.PAWN, Player.GOTE)

        # 先手陣（後手と点対称）
        for c in range(COLS):
            squares[6 * COLS + c] = Piece(PieceType.PAWN, Player.SENTE)
        squares[7 * COLS + 1] = Piece(PieceType.BISHOP, Player.SENTE)
        squares[7 * COLS + 7] = Piece(PieceType.ROOK, Player.SENTE)
        for c, pt in enumerate(back_rank):
            squares[8 * COLS + c] = Piece(pt, Player.SENTE)

        return squares

    @classmethod
    def from_pieces(
        cls,
        pieces: list[tuple[int, int, PieceType, Player]],
        sente_hand: dict[PieceType, int] | None = None,
        gote_hand: dict[PieceType, int] | None = None,
        side_to_move: Player = Player.SENTE,
    ) -> Position:
        """Build a position holding exactly the given pieces.

        pieces は (row, col, PieceType, Player) のリスト。
        詰将棋の局面やテスト用の局面を作るのに使う。
        """
        position = cls(squares=[None] * NUM_SQUARES, side_to_move=side_to_move)
        for row, col, pt, owner in pieces:
            position.place(row, col, Piece(pt, owner))
        for player, hand in ((Player.SENTE, sente_hand), (Player.GOTE, gote_hand)):
            for pt, count in (hand or {}).items():
                position.hands[player.value][pt] = count
        return position

    def piece_at(self, row: int, col: int) -> Piece | None:
        """マス(row, col)の駒を返す。駒がない・盤外なら None。"""
        if not in_bounds(row, col):
            return None
        return self.squares[row * COLS + col]

    def place(self, row: int, col: int, piece: Piece) -> None:
        """マス(row, col)に駒を置く（既存の駒は上書き）。"""
        self.squares[_index(row, col)] = piece

    def clear(self, row: int, col: int) -> None:
        """マス(row, col)を空にする。"""
        self.squares[_index(row, col)] = None

    def hand_count(self, player: Player, piece_type: PieceType) -> int:
        return self.hands[player.value].get(piece_type, 0)

    def add_to_hand(self, player: Player, piece_type: PieceType) -> None:
        """Add a captured piece to the hand, reverting promoted pieces.

        取った駒を持ち駒に追加する。成り駒は元の駒種に戻す。
        例: 龍（成り飛）を取ったら、飛車として持ち駒に加える。
        王将は持ち駒にならない（何もしない）。
        """
        base_type = unpromote(piece_type)
        if base_type == PieceType.KING:
            return
        self.hands[player.value][base_type] += 1

    def remove_from_hand(self, player: Player, piece_type: PieceType) -> bool:
        """持ち駒から1枚取り除く。持っていなければ False。"""
        hand = self.hands[player.value]
        if hand.get(piece_type, 0) <= 0:
            return False
        hand[piece_type] -= 1
        return True

    def move_piece(
        self,
        from_row: int,
        from_col: int,
        to_row: int,
        to_col: int,
        promote: bool = False,
    ) -> bool:
        """Move the piece at (from_row, from_col) without any validation.

        移動先の駒は上書きされ、相手の駒なら元の駒種で持ち駒に加わる。
        promote=True かつ成れる駒なら成り駒にする。
        移動元に駒がなければ何もせず False を返す。
        """
        piece = self.piece_at(from_row, from_col)
        if piece is None:
            return False

        captured = self.piece_at(to_row, to_col)
        if captured is not None and captured.owner != piece.owner:
            self.add_to_hand(piece.owner, captured.piece_type)

        new_type = piece.piece_type
        if promote and piece.piece_type in PROMOTION_MAP:
            new_type = PROMOTION_MAP[piece.piece_type]

        self.place(to_row, to_col, Piece(new_type, piece.owner))
        self.clear(from_row, from_col)
        self.last_move = BoardMove(
            (from_row, from_col),
            (to_row, to_col),
            promote=new_type != piece.piece_type,
        )
        return True

    def drop_piece(
        self,
        piece_type: PieceType,
        to_row: int,
        to_col: int,
        player: Player,
    ) -> bool:
        """持ち駒を打つ。持ち駒がない・マスが埋まっている場合は False。"""
        if self.hand_count(player, piece_type) <= 0:
            return False
        if self.piece_at(to_row, to_col) is not None:
            return False

        self.remove_from_hand(player, piece_type)
        self.place(to_row, to_col, Piece(piece_type, player))
        self.last_move = DropMove(piece_type, (to_row, to_col))
        return True

    def switch_side(self) -> None:
        """手番を交代する。"""
        self.side_to_move = self.side_to_move.opponent

    def find_king(self, player: Player) -> Square | None:
        """プレイヤーの王将のマスを返す。王将がなければ None。"""
        for idx, piece in enumerate(self.squares):
            if (
                piece is not None
                and piece.piece_type == PieceType.KING
                and piece.owner == player
            ):
                return (idx // COLS, idx % COLS)
        return None

    def has_unpromoted_pawn_in_column(self, player: Player, col: int) -> bool:
        """指定列にプレイヤーの未成歩があれば True（二歩の判定用）。"""
        for r in range(ROWS):
            p = self.piece_at(r, col)
            if p is not None and p.owner == player and p.piece_type == PieceType.PAWN:
                return True
        return False

    def clone(self) -> Position:
        """Return a fully independent copy.

        Piece・BoardMove・DropMove はイミュータブルなので、
        リストと持ち駒の dict を作り直せば元の局面と何も共有しない。
        """
        return Position(
            squares=list(self.squares),
            hands=[dict(hand) for hand in self.hands],
            side_to_move=self.side_to_move,
            last_move=self.last_move,
            in_check=self.in_check,
            game_over=self.game_over,
            winner=self.winner,
        )


def _index(row: int, col: int) -> int:
    if not in_bounds(row, col):
        msg = f"Square out of bounds: ({row}, {col})"
        raise ValueError(msg)
    return row * COLS + col
