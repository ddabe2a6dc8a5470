"""本将棋 (Full Shogi) rules engine — 9x9 board."""

from shogi_rules.game.board import BoardMove, DropMove, Piece, Position
from shogi_rules.game.display import format_board
from shogi_rules.game.legality import (
    PromotionStatus,
    is_checkmate,
    legal_drops,
    legal_moves,
    promotion_status,
)
from shogi_rules.game.moves import in_check, pseudo_moves
from shogi_rules.game.protocol import ShogiGame
from shogi_rules.game.state import Game
from shogi_rules.game.types import COLS, ROWS, PieceType, Player

__all__ = [
    "BoardMove",
    "COLS",
    "DropMove",
    "Game",
    "Piece",
    "PieceType",
    "Player",
    "Position",
    "PromotionStatus",
    "ROWS",
    "ShogiGame",
    "format_board",
    "in_check",
    "is_checkmate",
    "legal_drops",
    "legal_moves",
    "promotion_status",
    "pseudo_moves",
]
