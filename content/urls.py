"""
Public URL routing for content app.
"""
from django.urls import path

from . import public_views

urlpatterns = [
    path('hero/', public_views.hero, name='public-hero'),
    path('about/', public_views.about, name='public-about'),
    path('resume/', public_views.resume, name='public-resume'),
    path('cards/', public_views.card_list, name='public-card-list'),
    path('cards/<str:card_id>/', public_views.card_detail, name='public-card-detail'),
    path('cards/<str:card_id>/items/<str:item_id>/', public_views.card_item_detail, name='public-card-item-detail'),
    path('projects/', public_views.project_list, name='public-project-list'),
    path('projects/<int:project_id>/feedback/', public_views.submit_feedback, name='public-project-feedback'),
    path('techstack/', public_views.techstack_list, name='public-techstack'),
    path('contact/', public_views.submit_contact, name='public-contact'),
]
