from django.urls import path
from . import views

urlpatterns = [
    path('<str:game>/', views.bankroll_state, name='bankroll-state'),
    path('<str:game>/deposit/', views.deposit, name='bankroll-deposit'),
    path('<str:game>/claim/', views.claim, name='bankroll-claim'),
    path('<str:game>/withdraw/', views.withdraw, name='bankroll-withdraw'),
]
