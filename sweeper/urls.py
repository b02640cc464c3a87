"""
LifeSweeper Game API URLs

This module defines the URL routing for the game API endpoints and
creates the process-wide stores handed to every view.

Author: LifeSweeper Team
"""

from django.urls import path
from django.views.decorators.csrf import csrf_exempt

from .stores import ProfileStore, StatsStore
from .views import (
    DifficultyView,
    GameActionView,
    GameSessionView,
    PlayerView,
    StartGameView,
    StatsResetView,
    StatsView,
)

app_name = 'sweeper'

stats_store = StatsStore()
profile_store = ProfileStore()

stores = {
    'stats_store': stats_store,
    'profile_store': profile_store,
}

urlpatterns = [
    # Name-entry gate
    path('api/player/', csrf_exempt(PlayerView.as_view(**stores)), name='player'),

    # Game lifecycle
    path('api/start/', csrf_exempt(StartGameView.as_view(**stores)), name='start-game'),
    path('api/game/', csrf_exempt(GameSessionView.as_view(**stores)), name='game'),
    path('api/difficulty/', csrf_exempt(DifficultyView.as_view(**stores)), name='difficulty'),

    # Game actions
    path('api/action/', csrf_exempt(GameActionView.as_view(**stores)), name='game-action'),

    # Stats
    path('api/stats/', csrf_exempt(StatsView.as_view(**stores)), name='stats'),
    path('api/stats/reset/', csrf_exempt(StatsResetView.as_view(**stores)), name='stats-reset'),
]
