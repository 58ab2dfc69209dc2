"""
Admin console URL routing for content app.
"""
from django.urls import path, include
from rest_framework.routers import SimpleRouter

from . import views

router = SimpleRouter()
router.register(r'cards', views.CardViewSet, basename='admin-card')
router.register(r'projects', views.ProjectViewSet, basename='admin-project')
router.register(r'techstack', views.TechStackViewSet, basename='admin-techstack')
router.register(r'contact-messages', views.ContactMessageViewSet, basename='admin-contact-message')

card_items = views.CardItemViewSet.as_view({'get': 'list', 'post': 'create'})
card_item_detail = views.CardItemViewSet.as_view({
    'put': 'update', 'patch': 'partial_update', 'delete': 'destroy',
})
project_feedback = views.ProjectFeedbackViewSet.as_view({'get': 'list'})
feedback_detail = views.ProjectFeedbackViewSet.as_view({'delete': 'destroy'})

urlpatterns = [
    path('hero/', views.HeroView.as_view(), name='admin-hero'),
    path('about/', views.AboutView.as_view(), name='admin-about'),
    path('resume/', views.ResumeView.as_view(), name='admin-resume'),
    path('uploads/', views.upload_media, name='admin-upload'),
    # Nested under a card / project
    path('cards/<int:card_pk>/items/', card_items, name='admin-card-items'),
    path('cards/<int:card_pk>/items/<int:pk>/', card_item_detail, name='admin-card-item-detail'),
    path('projects/<int:project_pk>/feedback/', project_feedback, name='admin-project-feedback'),
    path('feedback/<int:pk>/', feedback_detail, name='admin-feedback-detail'),
    path('', include(router.urls)),
]
