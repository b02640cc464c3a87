"""
LifeSweeper API Views

This module contains Django REST Framework views for the game API.
Views act as the caller of the engine: they keep the current game in
the HTTP session, dispatch reveal/flag intents to the GameController,
and expose the player name and lifetime statistics.

The stores are created once in urls.py and injected into every view
through as_view().

Author: LifeSweeper Team
"""

from __future__ import annotations

import logging
from typing import Optional

from django.conf import settings
from rest_framework import status
from rest_framework.permissions import AllowAny
from rest_framework.request import Request
from rest_framework.response import Response
from rest_framework.views import APIView

from .board import DIFFICULTY
from .engine import STARTING_LIVES, GameController, GameState
from .exceptions import InvalidState, SweeperError
from .serializers import (
    DifficultySerializer,
    GameActionSerializer,
    GameStateSerializer,
    GameStatsSerializer,
    PlayerNameSerializer,
    StartGameSerializer,
)
from .stores import ProfileStore, StatsStore

logger = logging.getLogger(__name__)

SESSION_GAME_KEY = 'sweeper_game'


def _get_session(request: Request):
    """Get the Django session from a DRF or Django request."""
    # DRF wraps the Django request, session is on the underlying request
    if hasattr(request, '_request'):
        return request._request.session
    return request.session


def load_game(request: Request) -> Optional[GameState]:
    """
    Return the game kept in the request session, if any.

    A stored game that can no longer be read is discarded.
    """
    session = _get_session(request)
    data = session.get(SESSION_GAME_KEY)
    if not data:
        return None
    try:
        return GameState.from_dict(data)
    except InvalidState as e:
        logger.warning("Discarding unreadable game from session: %s", e)
        del session[SESSION_GAME_KEY]
        return None


def save_game(request: Request, state: GameState) -> None:
    """Save the game into the request session."""
    session = _get_session(request)
    session[SESSION_GAME_KEY] = state.to_dict()
    session.modified = True


def default_difficulty() -> str:
    """Return SWEEPER_DEFAULT_DIFFICULTY, or EASY if it names no preset."""
    level = getattr(settings, 'SWEEPER_DEFAULT_DIFFICULTY', 'EASY')
    if level not in DIFFICULTY:
        logger.warning(
            "Unknown SWEEPER_DEFAULT_DIFFICULTY %r, falling back to EASY", level
        )
        return 'EASY'
    return level


class SweeperAPIView(APIView):
    """
    Base view holding the injected stores.

    Every game intent passes through the name-entry gate: until a
    player name has been submitted, those endpoints answer 403.
    """

    permission_classes = [AllowAny]

    stats_store: Optional[StatsStore] = None
    profile_store: Optional[ProfileStore] = None
    requires_name = True

    def initial(self, request: Request, *args, **kwargs) -> None:
        super().initial(request, *args, **kwargs)
        if self.stats_store is None or self.profile_store is None:
            raise RuntimeError(f"{type(self).__name__} was created without its stores.")

    def get_controller(self) -> GameController:
        return GameController(
            self.stats_store,
            starting_lives=getattr(settings, 'SWEEPER_STARTING_LIVES', STARTING_LIVES),
            default_difficulty=default_difficulty(),
        )

    def name_gate(self) -> Optional[Response]:
        """Return a 403 response if no player name is set yet."""
        if self.requires_name and not self.profile_store.has_name:
            return Response(
                {"detail": "Enter a player name before playing."},
                status=status.HTTP_403_FORBIDDEN
            )
        return None

    @staticmethod
    def no_game_response() -> Response:
        return Response(
            {"detail": "No game found. Start a new game."},
            status=status.HTTP_404_NOT_FOUND
        )


class PlayerView(SweeperAPIView):
    """
    API endpoint for the player name.

    GET /api/player/
    POST /api/player/

    Request Body:
        {
            "name": "Ada"
        }

    Response:
        - 200: Current (or newly stored) name
        - 400: Empty or invalid name
    """

    requires_name = False

    def get(self, request: Request) -> Response:
        name = self.profile_store.name
        return Response({"name": name, "has_name": bool(name)}, status=status.HTTP_200_OK)

    def post(self, request: Request) -> Response:
        """Store the submitted name, overwriting any previous one."""
        serializer = PlayerNameSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        try:
            name = self.profile_store.set_name(serializer.validated_data['name'])
        except ValueError as e:
            return Response({"detail": str(e)}, status=status.HTTP_400_BAD_REQUEST)

        return Response({"name": name, "has_name": True}, status=status.HTTP_200_OK)


class StartGameView(SweeperAPIView):
    """
    API endpoint to start a new game.

    POST /api/start/

    Request Body (optional):
        {
            "difficulty": "MEDIUM"  // Defaults to the current game's difficulty
        }

    A finished previous game is counted as played before it is replaced.

    Response:
        - 201: Returns the new game
        - 403: No player name yet
    """

    def post(self, request: Request) -> Response:
        gate = self.name_gate()
        if gate is not None:
            return gate

        serializer = StartGameSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        current = load_game(request)
        state = self.get_controller().start_new_game(
            current, serializer.validated_data.get('difficulty')
        )
        save_game(request, state)

        return Response(GameStateSerializer(state).data, status=status.HTTP_201_CREATED)


class GameSessionView(SweeperAPIView):
    """
    API endpoint to retrieve the current game for rendering.

    GET /api/game/

    Response:
        - 200: Returns current game
        - 403: No player name yet
        - 404: No game found
    """

    def get(self, request: Request) -> Response:
        gate = self.name_gate()
        if gate is not None:
            return gate

        state = load_game(request)
        if state is None:
            return self.no_game_response()

        return Response(GameStateSerializer(state).data, status=status.HTTP_200_OK)


class GameActionView(SweeperAPIView):
    """
    API endpoint to perform game actions (reveal, flag).

    POST /api/action/

    Request Body:
        {
            "row": 4,
            "col": 5,
            "action": "reveal"  // One of: reveal, flag
        }

    Actions on a finished game, a revealed cell or (for reveals) a
    flagged cell are accepted and change nothing.

    Response:
        - 200: Returns the updated game and what the move did
        - 400: Invalid action or coordinates
        - 403: No player name yet
        - 404: No game found
    """

    def post(self, request: Request) -> Response:
        gate = self.name_gate()
        if gate is not None:
            return gate

        serializer = GameActionSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        row = serializer.validated_data['row']
        col = serializer.validated_data['col']
        action = serializer.validated_data['action']

        state = load_game(request)
        if state is None:
            return self.no_game_response()

        controller = self.get_controller()
        try:
            if action == 'reveal':
                outcome = controller.reveal(state, row, col)
            else:
                outcome = controller.flag(state, row, col)
        except SweeperError as e:
            return Response({"detail": str(e)}, status=status.HTTP_400_BAD_REQUEST)

        save_game(request, state)

        data = dict(GameStateSerializer(state).data)
        data['move'] = {
            'changed': outcome.changed,
            'cells_revealed': outcome.cells_revealed,
            'life_lost': outcome.life_lost,
            'transition': outcome.transition,
        }
        return Response(data, status=status.HTTP_200_OK)


class DifficultyView(SweeperAPIView):
    """
    API endpoint to switch difficulty.

    POST /api/difficulty/

    Request Body:
        {
            "difficulty": "HARD"
        }

    The current game is replaced by a fresh one; no statistics change.

    Response:
        - 200: Returns the fresh game
        - 400: Unknown difficulty
        - 403: No player name yet
    """

    def post(self, request: Request) -> Response:
        gate = self.name_gate()
        if gate is not None:
            return gate

        serializer = DifficultySerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        state = self.get_controller().change_difficulty(
            serializer.validated_data['difficulty']
        )
        save_game(request, state)

        return Response(GameStateSerializer(state).data, status=status.HTTP_200_OK)


class StatsView(SweeperAPIView):
    """
    API endpoint to retrieve lifetime statistics.

    GET /api/stats/
    """

    requires_name = False

    def get(self, request: Request) -> Response:
        return Response(
            GameStatsSerializer(self.stats_store.stats).data,
            status=status.HTTP_200_OK
        )


class StatsResetView(SweeperAPIView):
    """
    API endpoint to zero every lifetime statistic.

    POST /api/stats/reset/
    """

    requires_name = False

    def post(self, request: Request) -> Response:
        stats = self.stats_store.reset()
        return Response(GameStatsSerializer(stats).data, status=status.HTTP_200_OK)
