import logging
from dataclasses import dataclass, field
from decimal import Decimal

from sqlalchemy.orm import Session

from app.models import BetOutcome, GameType
from app.services.amounts import format_amount, format_multiplier, quantize_amount
from app.services.errors import InvalidMove, NothingToCashOut, ValidationError
from app.services.games.base import SessionGame
from app.services.settlement import settle

logger = logging.getLogger(__name__)

GRID_SIZE = 25
MIN_MINES = 1
MAX_MINES = GRID_SIZE - 1


def mines_multiplier(mine_count: int, revealed: int, grid_size: int = GRID_SIZE) -> Decimal:
    # Recomputed from the revealed count every time, never compounded.
    return (Decimal(grid_size) / Decimal(grid_size - mine_count)) ** revealed


@dataclass
class MinesSession:
    bet_amount: Decimal
    mine_count: int
    mine_positions: list[int]
    grid_size: int = GRID_SIZE
    revealed_tiles: list[int] = field(default_factory=list)
    multiplier: Decimal = Decimal("1")


class MinesGame(SessionGame):
    game_type = GameType.MINES

    def start(self, db: Session, user_id: int, bet_amount: Decimal, mine_count: int) -> MinesSession:
        if not MIN_MINES <= mine_count <= MAX_MINES:
            raise ValidationError(f"Mine count must be between {MIN_MINES} and {MAX_MINES}")
        session = MinesSession(
            bet_amount=bet_amount,
            mine_count=mine_count,
            mine_positions=sorted(self.rng.sample(range(GRID_SIZE), mine_count)),
        )
        return self._open(db, user_id, bet_amount, session)

    def reveal(self, db: Session, user_id: int, tile_index: int) -> dict:
        session = self._active(user_id)
        if not 0 <= tile_index < session.grid_size:
            raise ValidationError(f"Tile index must be between 0 and {session.grid_size - 1}")
        if tile_index in session.revealed_tiles:
            raise InvalidMove("Tile already revealed")

        if tile_index in session.mine_positions:
            lost = self._take(user_id)
            settle(
                db,
                user_id,
                self.game_type,
                bet_amount=lost.bet_amount,
                bet_choice=f"{lost.mine_count} mines",
                result=f"Hit mine at tile {tile_index}",
                outcome=BetOutcome.LOSS,
            )
            return {
                "game_type": self.game_type.value,
                "active": False,
                "outcome": BetOutcome.LOSS.value,
                "hit_mine": True,
                "tile_index": tile_index,
                "mine_positions": list(lost.mine_positions),
                "revealed_tiles": list(lost.revealed_tiles),
                "bet_amount": lost.bet_amount,
                "payout": Decimal("0"),
            }

        session.revealed_tiles.append(tile_index)
        session.multiplier = mines_multiplier(session.mine_count, len(session.revealed_tiles), session.grid_size)
        view = self.describe(session)
        view.update(hit_mine=False, tile_index=tile_index)
        return view

    def cashout(self, db: Session, user_id: int) -> dict:
        session = self._active(user_id)
        if not session.revealed_tiles:
            raise NothingToCashOut("Must reveal at least one tile before cashing out")

        snapshot = self._take(user_id)
        bet_amount, multiplier = snapshot.bet_amount, snapshot.multiplier
        revealed, mine_count = len(snapshot.revealed_tiles), snapshot.mine_count
        payout = quantize_amount(bet_amount * multiplier)
        settle(
            db,
            user_id,
            self.game_type,
            bet_amount=bet_amount,
            bet_choice=f"{mine_count} mines, {revealed} revealed",
            result=f"Cashed out at {format_multiplier(multiplier)}",
            outcome=BetOutcome.WIN,
            payout=payout,
            win_description=f"Won {format_amount(payout)} on mines ({format_multiplier(multiplier)})",
        )
        return {
            "game_type": self.game_type.value,
            "active": False,
            "outcome": BetOutcome.WIN.value,
            "multiplier": multiplier,
            "bet_amount": bet_amount,
            "payout": payout,
            "mine_positions": list(snapshot.mine_positions),
        }

    def describe(self, session: MinesSession) -> dict:
        return {
            "game_type": self.game_type.value,
            "active": True,
            "grid_size": session.grid_size,
            "mine_count": session.mine_count,
            "revealed_tiles": list(session.revealed_tiles),
            "multiplier": session.multiplier,
            "bet_amount": session.bet_amount,
            "potential_payout": quantize_amount(session.bet_amount * session.multiplier),
        }
