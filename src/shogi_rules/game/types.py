"""Types and constants for 本将棋 (Full Shogi, 9x9).

本将棋（9×9盤）の基本型・定数定義と駒の動き（ピースカタログ）。
駒は14種類（未成7種 + 成り6種 + 王将）。
"""

from __future__ import annotations

from enum import IntEnum, unique
from typing import NamedTuple

ROWS = 9
COLS = 9
NUM_SQUARES = ROWS * COLS  # 81マス

# 敵陣（成れる領域）の段数
PROMOTION_ZONE_DEPTH = 3

# マスの座標 (row, col)
Square = tuple[int, int]


@unique
class Player(IntEnum):
    """Player identifiers.

    先手（SENTE）は下側から上に向かって進む（row 8 → row 0）。
    後手（GOTE）は上側から下に向かって進む（row 0 → row 8）。
    """

    SENTE = 0  # 先手
    GOTE = 1   # 後手

    @property
    def opponent(self) -> Player:
        """相手プレイヤーを返す。"""
        return Player(1 - self.value)


@unique
class PieceType(IntEnum):
    """Piece types in 本将棋（14種類）.

    0〜6: 未成駒（持ち駒になれる駒）、7: 王将、8〜13: 成り駒
    """

    PAWN = 0         # 歩
    LANCE = 1        # 香
    KNIGHT = 2       # 桂
    SILVER = 3       # 銀
    GOLD = 4         # 金
    BISHOP = 5       # 角
    ROOK = 6         # 飛
    KING = 7         # 玉/王
    PRO_PAWN = 8     # と（成り歩）
    PRO_LANCE = 9    # 成香
    PRO_KNIGHT = 10  # 成桂
    PRO_SILVER = 11  # 成銀
    HORSE = 12       # 馬（成り角）
    DRAGON = 13      # 龍（成り飛）


# 成り変換テーブル: 未成駒 → 成り駒
PROMOTION_MAP: dict[PieceType, PieceType] = {
    PieceType.PAWN: PieceType.PRO_PAWN,
    PieceType.LANCE: PieceType.PRO_LANCE,
    PieceType.KNIGHT: PieceType.PRO_KNIGHT,
    PieceType.SILVER: PieceType.PRO_SILVER,
    PieceType.BISHOP: PieceType.HORSE,
    PieceType.ROOK: PieceType.DRAGON,
}

# 逆変換: 成り駒 → 元の駒種（取られた駒を持ち駒に戻す際に使用）
UNPROMOTION_MAP: dict[PieceType, PieceType] = {v: k for k, v in PROMOTION_MAP.items()}

# 持ち駒として使える駒種（未成の非玉駒、7種）
HAND_PIECE_TYPES = [
    PieceType.PAWN, PieceType.LANCE, PieceType.KNIGHT,
    PieceType.SILVER, PieceType.GOLD, PieceType.BISHOP, PieceType.ROOK,
]


def promote(piece_type: PieceType) -> PieceType | None:
    """成った後の駒種を返す。成れない駒（王・金・成り駒）は None。"""
    return PROMOTION_MAP.get(piece_type)


def unpromote(piece_type: PieceType) -> PieceType:
    """成り駒を元の駒種に戻す。未成駒はそのまま返す。"""
    return UNPROMOTION_MAP.get(piece_type, piece_type)


def can_promote(piece_type: PieceType) -> bool:
    return piece_type in PROMOTION_MAP


def is_promoted(piece_type: PieceType) -> bool:
    return piece_type in UNPROMOTION_MAP


Offset = tuple[int, int]


class MovementPattern(NamedTuple):
    """Direction vectors of one piece kind for one side.

    steps:  1マスだけ移動できる方向（桂馬のジャンプも含む）
    slides: 駒にぶつかるまで何マスでも移動できる方向
    """

    steps: tuple[Offset, ...]
    slides: tuple[Offset, ...]


# 方向の定義（先手視点、前 = 行インデックス減少方向）
_ORTHOGONAL: tuple[Offset, ...] = ((-1, 0), (1, 0), (0, -1), (0, 1))
_DIAGONAL: tuple[Offset, ...] = ((-1, -1), (-1, 1), (1, -1), (1, 1))
_GOLD_STEPS: tuple[Offset, ...] = ((-1, -1), (-1, 0), (-1, 1), (0, -1), (0, 1), (1, 0))

# 駒種ごとの動き（先手視点のみ保持する。後手は参照時に符号を反転する）
_MOVEMENT_TABLE: dict[PieceType, MovementPattern] = {
    PieceType.KING: MovementPattern(_ORTHOGONAL + _DIAGONAL, ()),
    PieceType.ROOK: MovementPattern((), _ORTHOGONAL),
    PieceType.BISHOP: MovementPattern((), _DIAGONAL),
    PieceType.GOLD: MovementPattern(_GOLD_STEPS, ()),
    PieceType.SILVER: MovementPattern(((-1, -1), (-1, 0), (-1, 1), (1, -1), (1, 1)), ()),
    PieceType.KNIGHT: MovementPattern(((-2, -1), (-2, 1)), ()),  # 間の駒を飛び越える
    PieceType.LANCE: MovementPattern((), ((-1, 0),)),
    PieceType.PAWN: MovementPattern(((-1, 0),), ()),
    # 龍 = 飛車 + 斜め1マス、馬 = 角行 + 縦横1マス
    PieceType.DRAGON: MovementPattern(_DIAGONAL, _ORTHOGONAL),
    PieceType.HORSE: MovementPattern(_ORTHOGONAL, _DIAGONAL),
    # と・成香・成桂・成銀は金と同じ動き
    PieceType.PRO_PAWN: MovementPattern(_GOLD_STEPS, ()),
    PieceType.PRO_LANCE: MovementPattern(_GOLD_STEPS, ()),
    PieceType.PRO_KNIGHT: MovementPattern(_GOLD_STEPS, ()),
    PieceType.PRO_SILVER: MovementPattern(_GOLD_STEPS, ()),
}


def _flip(offsets: tuple[Offset, ...]) -> tuple[Offset, ...]:
    return tuple((-dr, -dc) for dr, dc in offsets)


def movement_pattern(piece_type: PieceType, player: Player) -> MovementPattern:
    """Return the movement directions of a piece kind for the given side.

    駒の移動方向を返す。表は先手視点で1つだけ持ち、
    後手の場合は全方向ベクトルの符号を反転して返す（盤を180度回転した動き）。
    """
    pattern = _MOVEMENT_TABLE[piece_type]
    if player == Player.SENTE:
        return pattern
    return MovementPattern(_flip(pattern.steps), _flip(pattern.slides))


def in_bounds(row: int, col: int) -> bool:
    """(row, col) が盤内なら True。"""
    return 0 <= row < ROWS and 0 <= col < COLS
