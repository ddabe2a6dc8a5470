"""Pseudo-legal move generation and check detection for 本将棋.

疑似合法手（自玉が取られるかどうかを考えない手）の生成と、王手の判定。
自玉を王手に晒す手の除外は legality モジュールが行う。
"""

from __future__ import annotations

from shogi_rules.game.board import Position
from shogi_rules.game.types import (
    COLS,
    NUM_SQUARES,
    Player,
    Square,
    in_bounds,
    movement_pattern,
)


def pseudo_moves(position: Position, row: int, col: int) -> set[Square]:
    """Return the squares the piece at (row, col) can reach by geometry alone.

    駒の動きと盤上の駒の配置だけで到達できるマスの集合を返す。
    - steps: 盤内かつ自分の駒がなければ到達可能（相手の駒は取れる）
    - slides: 空きマスは進み続け、相手の駒なら取って止まる、自分の駒の手前で止まる
    マスに駒がなければ空集合。
    """
    piece = position.piece_at(row, col)
    if piece is None:
        return set()

    pattern = movement_pattern(piece.piece_type, piece.owner)
    reachable: set[Square] = set()

    # 1マス移動（桂馬のジャンプを含む）
    for dr, dc in pattern.steps:
        nr, nc = row + dr, col + dc
        if not in_bounds(nr, nc):
            continue
        target = position.piece_at(nr, nc)
        if target is None or target.owner != piece.owner:
            reachable.add((nr, nc))

    # 遠距離移動（飛車・角行・香車・龍・馬）
    for dr, dc in pattern.slides:
        nr, nc = row + dr, col + dc
        while in_bounds(nr, nc):
            target = position.piece_at(nr, nc)
            if target is not None:
                if target.owner != piece.owner:
                    reachable.add((nr, nc))  # 取って止まる
                break
            reachable.add((nr, nc))
            nr, nc = nr + dr, nc + dc

    return reachable


def in_check(position: Position, player: Player) -> bool:
    """Check if player's king is under attack.

    相手のいずれかの駒の疑似合法手が王将のマスに届けば王手。
    王将が盤上にない局面（不正な局面）は王手ではないとみなす。
    """
    king_square = position.find_king(player)
    if king_square is None:
        return False

    opponent = player.opponent
    for idx in range(NUM_SQUARES):
        piece = position.squares[idx]
        if piece is None or piece.owner != opponent:
            continue
        if king_square in pseudo_moves(position, idx // COLS, idx % COLS):
            return True
    return False
