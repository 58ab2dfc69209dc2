"""
URL routing for notifications app.
"""
from django.urls import path

from . import views

urlpatterns = [
    path('notifications/', views.unread_counts, name='admin-notifications'),
    path('contact-messages/mark-read/', views.mark_messages_read, name='admin-contact-messages-mark-read'),
    path('projects/<int:project_id>/feedback/mark-read/', views.mark_feedback_read, name='admin-project-feedback-mark-read'),
]
