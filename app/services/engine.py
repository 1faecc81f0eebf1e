import logging
import time
from decimal import Decimal
from typing import Callable

from pydantic import BaseModel, TypeAdapter
from pydantic import ValidationError as PydanticValidationError
from sqlalchemy.orm import Session

from app.models import GameType, SESSION_GAMES
from app.schemas.game import MinesRevealRequest, MinesStartRequest, SingleShotBet, StartRequest, TowerPlayRequest
from app.services import ledger
from app.services.errors import InvalidMove, ValidationError
from app.services.games.crash import CrashGame
from app.services.games.mines import MinesGame
from app.services.games.single_shot import SingleShotResolver
from app.services.games.tower import TowerGame
from app.services.locks import KeyedLocks
from app.services.rng import RandomSource
from app.services.sessions import SessionStore

logger = logging.getLogger(__name__)

_single_shot_adapter = TypeAdapter(SingleShotBet)


def _first_error(exc: PydanticValidationError) -> str:
    errors = exc.errors()
    if not errors:
        return "Invalid request"
    message = str(errors[0].get("msg") or "Invalid request")
    return message.removeprefix("Value error, ")


def _coerce(model: type[BaseModel], params) -> BaseModel:
    if isinstance(params, model):
        return params
    if isinstance(params, BaseModel):
        params = params.model_dump()
    try:
        return model.model_validate(params or {})
    except PydanticValidationError as exc:
        raise ValidationError(_first_error(exc))


def _game_type(value) -> GameType:
    try:
        return GameType(value)
    except ValueError:
        raise ValidationError(f"Unknown game type: {value}")


class WageringEngine:
    """Entry point for every balance and game operation.

    Each call runs under the user's lock and ends in exactly one DB commit; a
    failure rolls back the DB and puts the session slot back as it was.
    """

    def __init__(
        self,
        sessions: SessionStore | None = None,
        rng: RandomSource | None = None,
        clock: Callable[[], float] = time.time,
        locks: KeyedLocks | None = None,
    ):
        self.sessions = sessions or SessionStore()
        self.rng = rng or RandomSource()
        self.clock = clock
        self.locks = locks or KeyedLocks()
        self.single_shot = SingleShotResolver(self.rng)
        self.tower = TowerGame(self.sessions, self.rng, clock)
        self.crash = CrashGame(self.sessions, self.rng, clock)
        self.mines = MinesGame(self.sessions, self.rng, clock)
        self._games = {
            GameType.TOWER: self.tower,
            GameType.CRASH: self.crash,
            GameType.MINES: self.mines,
        }

    def _session_game(self, game_type):
        game_type = _game_type(game_type)
        if game_type not in SESSION_GAMES:
            raise ValidationError(f"{game_type.value} is not a session game")
        return self._games[game_type]

    def _run(self, db: Session, user_id: int, game_type: GameType | None, action: Callable, *args):
        with self.locks.hold(user_id):
            if game_type is None:
                return self._commit(db, action, db, user_id, *args)
            with self.sessions.guard(user_id, game_type):
                return self._commit(db, action, db, user_id, *args)

    @staticmethod
    def _commit(db: Session, action: Callable, *args):
        try:
            result = action(*args)
            db.commit()
        except Exception:
            db.rollback()
            raise
        return result

    def get_balance(self, db: Session, user_id: int) -> dict:
        def _read(db, user_id):
            balance = ledger.get_balance(db, user_id)
            return {"amount": Decimal(balance.amount), "currency": balance.currency}

        return self._run(db, user_id, None, _read)

    def credit_deposit(self, db: Session, user_id: int, apply: Callable) -> None:
        """Run a deposit confirmation under the same lock as the games."""
        self._run(db, user_id, None, apply)

    def place_single_shot_bet(self, db: Session, user_id: int, bet) -> dict:
        if not isinstance(bet, BaseModel):
            try:
                bet = _single_shot_adapter.validate_python(bet)
            except PydanticValidationError as exc:
                raise ValidationError(_first_error(exc))
        return self._run(db, user_id, None, self.single_shot.play, bet)

    def start_session(self, db: Session, user_id: int, game_type, params=None) -> dict:
        game = self._session_game(game_type)
        if game is self.mines:
            request = _coerce(MinesStartRequest, params)
            extra = (request.mine_count,)
        else:
            request = _coerce(StartRequest, params)
            extra = ()

        def action(db, user_id):
            return game.describe(game.start(db, user_id, request.bet_amount, *extra))

        view = self._run(db, user_id, game.game_type, action)
        logger.info("Started %s session user=%s bet=%s", game.game_type.value, user_id, request.bet_amount)
        return view

    def advance_session(self, db: Session, user_id: int, game_type, params=None) -> dict:
        game = self._session_game(game_type)
        if game is self.tower:
            request = _coerce(TowerPlayRequest, params)
            return self._run(db, user_id, game.game_type, game.play, request.difficulty)
        if game is self.mines:
            request = _coerce(MinesRevealRequest, params)
            return self._run(db, user_id, game.game_type, game.reveal, request.tile_index)
        raise InvalidMove("Crash has no moves; cash out or poll its status")

    def cashout_session(self, db: Session, user_id: int, game_type) -> dict:
        game = self._session_game(game_type)
        return self._run(db, user_id, game.game_type, game.cashout)

    def get_session_status(self, db: Session, user_id: int, game_type) -> dict:
        game = self._session_game(game_type)
        return self._run(db, user_id, game.game_type, game.status)
