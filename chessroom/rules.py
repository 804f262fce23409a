"""Rules oracle: move legality and terminal conditions, delegated to python-chess.

The room authority never inspects a board itself. It hands the current position,
the move history since the last reset and the incoming intent to an oracle and
acts on the outcome.
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass
from typing import Protocol

import chess


PROMOTION_PIECES: dict[str, chess.PieceType] = {
    "q": chess.QUEEN,
    "r": chess.ROOK,
    "b": chess.BISHOP,
    "n": chess.KNIGHT,
}

DEFAULT_PROMOTION = "q"


@dataclass(frozen=True, slots=True)
class MoveIntent:
    from_square: str
    to_square: str
    promotion: str | None = DEFAULT_PROMOTION


@dataclass(frozen=True, slots=True)
class MoveEvaluation:
    """Outcome of evaluating one intent against one position.

    `fen`, `uci` and `san` are only meaningful when `legal` is True.
    """

    legal: bool
    fen: str = ""
    uci: str = ""
    san: str = ""
    check: bool = False
    checkmate: bool = False
    stalemate: bool = False
    draw: bool = False

    @property
    def is_terminal(self) -> bool:
        return self.checkmate or self.stalemate or self.draw

    @staticmethod
    def illegal() -> MoveEvaluation:
        return MoveEvaluation(legal=False)


class RulesOracle(Protocol):
    def evaluate(self, *, position: str, history: Sequence[str], intent: MoveIntent) -> MoveEvaluation: ...


class PythonChessOracle:
    """RulesOracle backed by python-chess."""

    def evaluate(self, *, position: str, history: Sequence[str], intent: MoveIntent) -> MoveEvaluation:
        board = self._board_for(position=position, history=history)

        move = self._parse_intent(board, intent)
        if move is None or not board.is_legal(move):
            return MoveEvaluation.illegal()

        san = board.san(move)
        board.push(move)

        checkmate = board.is_checkmate()
        stalemate = board.is_stalemate()
        draw = not checkmate and not stalemate and self._is_draw(board)

        return MoveEvaluation(
            legal=True,
            fen=board.fen(),
            uci=move.uci(),
            san=san,
            check=board.is_check(),
            checkmate=checkmate,
            stalemate=stalemate,
            draw=draw,
        )

    @staticmethod
    def _board_for(*, position: str, history: Sequence[str]) -> chess.Board:
        # Replaying from the start keeps the move stack, which repetition detection needs.
        board = chess.Board()
        try:
            for uci in history:
                board.push_uci(uci)
        except ValueError:
            return chess.Board(position)
        if board.fen() != position:
            return chess.Board(position)
        return board

    @staticmethod
    def _parse_intent(board: chess.Board, intent: MoveIntent) -> chess.Move | None:
        try:
            from_sq = chess.parse_square(intent.from_square.strip().lower())
            to_sq = chess.parse_square(intent.to_square.strip().lower())
        except ValueError:
            return None

        piece = board.piece_at(from_sq)
        reaches_last_rank = chess.square_rank(to_sq) in (0, 7)
        if piece is None or piece.piece_type != chess.PAWN or not reaches_last_rank:
            # Promotion is ignored for anything that is not a promotion.
            return chess.Move(from_sq, to_sq)

        letter = (intent.promotion or DEFAULT_PROMOTION).strip().lower()
        promotion = PROMOTION_PIECES.get(letter)
        if promotion is None:
            return None
        return chess.Move(from_sq, to_sq, promotion=promotion)

    @staticmethod
    def _is_draw(board: chess.Board) -> bool:
        return (
            board.is_insufficient_material()
            or board.halfmove_clock >= 100
            or board.is_repetition(3)
        )
