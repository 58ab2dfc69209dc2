"""
URL routing for dashboard app.
"""
from django.urls import path

from . import views

urlpatterns = [
    path('', views.dashboard_state, name='admin-dashboard'),
    path('tab/', views.select_tab, name='admin-dashboard-tab'),
    path('drill-down/', views.open_drill_down, name='admin-dashboard-drill-down'),
    path('back/', views.back, name='admin-dashboard-back'),
    path('close/', views.close, name='admin-dashboard-close'),
]
