import chess

from chessroom.registry import Color


# Owns the single chess position; python-chess decides legality
class ChessGame:
    def __init__(self) -> None:
        self.board = chess.Board()
        self.last_move: dict | None = None

    @property
    def turn(self) -> Color:
        """Colour whose move it is."""
        return Color.WHITE if self.board.turn == chess.WHITE else Color.BLACK

    def make_move(self, src: str, dst: str, promotion: str | None = None) -> bool:
        """
        Try to play a move.
        Returns True if it was legal and applied, False otherwise.
        Raises ValueError when the squares/promotion do not form UCI text.
        """
        uci = f"{src}{dst}{promotion or ''}".lower()
        move = chess.Move.from_uci(uci)

        if move in self.board.legal_moves:
            self.board.push(move)
            self.last_move = {"from": src, "to": dst}
            return True

        return False

    def fen(self) -> str:
        return self.board.fen()

    def is_game_over(self) -> bool:
        return self.board.is_game_over()

    def state_payload(self) -> dict:
        """Return the current game state as a JSON-friendly dict."""
        return {
            "fen": self.board.fen(),
            "lastMove": self.last_move,
            "turn": self.turn.value,
            "gameOver": self.board.is_game_over(),
        }
