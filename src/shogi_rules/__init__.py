"""shogi-rules — 本将棋のルールエンジン（合法手・持ち駒・王手・詰みの判定）."""
