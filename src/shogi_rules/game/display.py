"""Text dump of a 本将棋 position (for logs, tests and API snapshots)."""

from __future__ import annotations

from shogi_rules.game.board import Position
from shogi_rules.game.types import COLS, HAND_PIECE_TYPES, ROWS, PieceType, Player

# Display characters for pieces
_PIECE_CHARS: dict[PieceType, str] = {
    PieceType.PAWN: "歩",
    PieceType.LANCE: "香",
    PieceType.KNIGHT: "桂",
    PieceType.SILVER: "銀",
    PieceType.GOLD: "金",
    PieceType.BISHOP: "角",
    PieceType.ROOK: "飛",
    PieceType.KING: "玉",
    PieceType.PRO_PAWN: "と",
    PieceType.PRO_LANCE: "杏",
    PieceType.PRO_KNIGHT: "圭",
    PieceType.PRO_SILVER: "全",
    PieceType.HORSE: "馬",
    PieceType.DRAGON: "龍",
}


def piece_char(piece_type: PieceType, player: Player) -> str:
    """駒の漢字1文字を返す。王将は先手が「王」、後手が「玉」。"""
    if piece_type == PieceType.KING and player == Player.SENTE:
        return "王"
    return _PIECE_CHARS[piece_type]


def format_board(position: Position) -> str:
    """Format the position for terminal display."""
    lines: list[str] = []

    lines.append(f"後手持駒: {format_hand(position, Player.GOTE)}")
    lines.append("  ９ ８ ７ ６ ５ ４ ３ ２ １")
    lines.append("+--+--+--+--+--+--+--+--+--+")

    for r in range(ROWS):
        row_str = "|"
        for c in range(COLS):
            piece = position.piece_at(r, c)
            if piece is None:
                row_str += "  |"
            else:
                # 後手の駒には v を付ける
                mark = "v" if piece.owner == Player.GOTE else " "
                row_str += f"{mark}{piece_char(piece.piece_type, piece.owner)}|"
        lines.append(f"{row_str} {_row_label(r)}")
        lines.append("+--+--+--+--+--+--+--+--+--+")

    lines.append(f"先手持駒: {format_hand(position, Player.SENTE)}")

    return "\n".join(lines)


def format_hand(position: Position, player: Player) -> str:
    """持ち駒を「飛 角 金 銀 桂 香 歩」の順に並べる。2枚以上は枚数を付ける。"""
    pieces: list[str] = []
    for pt in reversed(HAND_PIECE_TYPES):
        count = position.hand_count(player, pt)
        if count == 0:
            continue
        char = _PIECE_CHARS[pt]
        pieces.append(char if count == 1 else f"{char}{count}")
    return " ".join(pieces) if pieces else "なし"


def _row_label(row: int) -> str:
    labels = ["一", "二", "三", "四", "五", "六", "七", "八", "九"]
    return labels[row]
