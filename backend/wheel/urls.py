from django.urls import path
from . import views

urlpatterns = [
    path('spin/', views.spin_wheel, name='wheel-spin'),
    path('last/', views.last_spin, name='wheel-last'),
]
