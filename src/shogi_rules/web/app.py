"""FastAPI web application exposing the shogi rules engine.

FastAPI を使った将棋ルールエンジンの REST API。
ブラウザなど別プロセスの表示層が、Game の問い合わせ・操作を JSON で呼び出せる。

エンドポイント:
  POST /api/new-game                — 新規対局を開始（ゲームIDを返す）
  GET  /api/state/{id}              — 現在の局面情報を取得
  GET  /api/legal-moves/{id}        — 盤上の駒の移動可能マス
  GET  /api/legal-drops/{id}        — 手番側の持ち駒を打てるマス
  POST /api/move                    — 盤上の駒を動かす（合法性・成りを検証して手番交代）
  POST /api/drop                    — 持ち駒を打つ（合法性を検証して手番交代）
"""

from __future__ import annotations

import logging
import uuid
from dataclasses import dataclass
from typing import Any

from fastapi import FastAPI, HTTPException
from pydantic import BaseModel

from shogi_rules.game.board import BoardMove, LastMove
from shogi_rules.game.display import format_board
from shogi_rules.game.legality import PromotionStatus
from shogi_rules.game.state import Game
from shogi_rules.game.types import COLS, HAND_PIECE_TYPES, ROWS, PieceType, Square

_LOGGER = logging.getLogger(__name__)

app = FastAPI(title="Shogi Rules")

# 対局情報のインメモリストレージ（サーバ再起動で消える）
_games: dict[str, Game] = {}


@dataclass(frozen=True)
class ServerConfig:
    """Web サーバの設定。"""

    host: str = "127.0.0.1"
    port: int = 8000


class MoveRequest(BaseModel):
    """盤上の駒を動かすリクエストのスキーマ。"""

    game_id: str
    from_row: int
    from_col: int
    to_row: int
    to_col: int
    promote: bool | None = None  # 成りを選べる手のみ必須（None = 未指定）


class DropRequest(BaseModel):
    """持ち駒を打つリクエストのスキーマ。"""

    game_id: str
    piece_type: str  # 駒種名（"PAWN", "ROOK" など）
    to_row: int
    to_col: int


def _get_game(game_id: str) -> Game:
    game = _games.get(game_id)
    if game is None:
        raise HTTPException(404, "Game not found")
    return game


def _hand_piece_type(name: str) -> PieceType:
    """駒種名を持ち駒の駒種に変換する。持ち駒にならない駒種は 400。"""
    try:
        piece_type = PieceType[name.upper()]
    except KeyError:
        raise HTTPException(400, f"Unknown piece type: {name}") from None
    if piece_type not in HAND_PIECE_TYPES:
        raise HTTPException(400, f"Not a hand piece type: {name}")
    return piece_type


def _squares_to_list(squares: set[Square]) -> list[list[int]]:
    return [[r, c] for r, c in sorted(squares)]


def _last_move_to_dict(last_move: LastMove | None) -> dict[str, Any] | None:
    if last_move is None:
        return None
    if isinstance(last_move, BoardMove):
        return {
            "type": "board",
            "from": list(last_move.from_square),
            "to": list(last_move.to_square),
            "promote": last_move.promote,
        }
    return {
        "type": "drop",
        "piece_type": last_move.piece_type.name,
        "to": list(last_move.to_square),
    }


def _state_to_dict(game: Game) -> dict[str, Any]:
    """Convert the game to a JSON-serializable dict.

    局面情報を JSON 形式（辞書）に変換する。
    表示層はこの形式を受け取って盤面を描画する。
    """
    position = game.position
    squares: list[dict[str, Any] | None] = []
    for piece in position.squares:
        if piece is None:
            squares.append(None)
        else:
            squares.append(
                {
                    "type": piece.piece_type.value,  # 駒種インデックス
                    "owner": piece.owner.value,  # 所有者（0=先手, 1=後手）
                    "name": piece.piece_type.name,  # 駒名（文字列）
                }
            )
    hands = [
        {pt.name: count for pt, count in hand.items() if count > 0}
        for hand in position.hands
    ]

    return {
        "current_player": game.current_player.value,  # 手番（0=先手, 1=後手）
        "in_check": game.in_check,
        "is_game_over": game.is_game_over,
        "winner": game.winner.value if game.winner is not None else None,
        "last_move": _last_move_to_dict(game.last_move),  # 最終手のハイライト用
        "squares": squares,
        "hands": hands,
        "rows": ROWS,
        "cols": COLS,
        "board_display": format_board(position),  # テキスト形式の盤面表示
    }


@app.post("/api/new-game")
async def new_game() -> dict[str, Any]:
    """新規対局を開始する。対局IDと初期局面情報を返す。"""
    game_id = str(uuid.uuid4())[:8]  # 短いIDを生成
    game = Game()
    _games[game_id] = game
    _LOGGER.info("Started game %s", game_id)
    return {"game_id": game_id, "state": _state_to_dict(game)}


@app.get("/api/state/{game_id}")
async def get_state(game_id: str) -> dict[str, Any]:
    """現在の局面情報を取得する（ページ再読み込み時などに使用）。"""
    return _state_to_dict(_get_game(game_id))


@app.get("/api/legal-moves/{game_id}")
async def get_legal_moves(game_id: str, row: int, col: int) -> dict[str, Any]:
    """(row, col) の駒の移動可能マスを返す。手番側の駒でなければ空。"""
    game = _get_game(game_id)
    piece = game.piece_at(row, col)
    if game.is_game_over or piece is None or piece.owner != game.current_player:
        return {"squares": []}
    return {"squares": _squares_to_list(game.legal_moves(row, col))}


@app.get("/api/legal-drops/{game_id}")
async def get_legal_drops(game_id: str, piece_type: str) -> dict[str, Any]:
    """手番側が持ち駒 piece_type を打てるマスを返す。"""
    game = _get_game(game_id)
    pt = _hand_piece_type(piece_type)
    if game.is_game_over or game.hand_count(game.current_player, pt) == 0:
        return {"squares": []}
    return {"squares": _squares_to_list(game.legal_drops(game.current_player, pt))}


@app.post("/api/move")
async def make_move(req: MoveRequest) -> dict[str, Any]:
    """盤上の駒を動かして手番を交代する。

    処理フロー:
    1. 手番側の駒か、移動先が合法手に含まれるかを検証
    2. 成りの可否を判定（必ず成る・成れない手は指定を無視、選べる手は指定必須）
    3. 手を適用し、手番交代と王手・詰みの判定を行う
    """
    game = _get_game(req.game_id)
    if game.is_game_over:
        raise HTTPException(400, "Game is already over")

    piece = game.piece_at(req.from_row, req.from_col)
    if piece is None or piece.owner != game.current_player:
        raise HTTPException(400, "No piece of the side to move on the source square")

    if (req.to_row, req.to_col) not in game.legal_moves(req.from_row, req.from_col):
        _LOGGER.debug("Illegal move request in game %s: %s", req.game_id, req)
        raise HTTPException(400, "Illegal move")

    status = game.promotion_status(piece, req.from_row, req.to_row)
    if status == PromotionStatus.MANDATORY:
        promote = True
    elif status == PromotionStatus.NONE:
        promote = False
    elif req.promote is None:
        raise HTTPException(400, "Promotion choice required")
    else:
        promote = req.promote

    game.apply_move(req.from_row, req.from_col, req.to_row, req.to_col, promote)
    game.end_turn_and_evaluate()
    return {"state": _state_to_dict(game)}


@app.post("/api/drop")
async def make_drop(req: DropRequest) -> dict[str, Any]:
    """持ち駒を打って手番を交代する。"""
    game = _get_game(req.game_id)
    if game.is_game_over:
        raise HTTPException(400, "Game is already over")

    pt = _hand_piece_type(req.piece_type)
    player = game.current_player
    if game.hand_count(player, pt) == 0:
        raise HTTPException(400, f"No {pt.name} in hand")

    if (req.to_row, req.to_col) not in game.legal_drops(player, pt):
        _LOGGER.debug("Illegal drop request in game %s: %s", req.game_id, req)
        raise HTTPException(400, "Illegal drop")

    game.apply_drop(pt, req.to_row, req.to_col)
    game.end_turn_and_evaluate()
    return {"state": _state_to_dict(game)}


def main(config: ServerConfig | None = None) -> None:
    """Run the web server.

    `shogi-web` または `python -m shogi_rules.web.app` で起動する。
    """
    import uvicorn

    config = config or ServerConfig()
    uvicorn.run(app, host=config.host, port=config.port)


if __name__ == "__main__":
    main()
