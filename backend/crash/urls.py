from django.urls import path
from . import views

urlpatterns = [
    path("round/", views.round_state, name="crash-round"),
    path("recent-rounds/", views.RecentRoundsView.as_view(), name="crash-recent-rounds"),
    path("play/", views.place_bet, name="crash-play"),
    path("my-bets/", views.my_bets, name="crash-my-bets"),
    path("open-next/", views.open_next, name="crash-open-next"),
    path("force-close/", views.force_close, name="crash-force-close"),
]
