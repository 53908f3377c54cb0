from django.contrib import admin
from django.urls import path, include


urlpatterns = [
    path('admin/', admin.site.urls),

    # Bankroll: deposit / claim / withdraw per game
    path('api/bankroll/', include('bankroll.urls')),

    # Games
    path('api/coinflip/', include('coinflip.urls')),
    path('api/wheel/', include('wheel.urls')),
    path('api/crash/', include('crash.urls')),
]
