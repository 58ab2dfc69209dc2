"""
Read-only endpoints for the public portfolio site, plus the two visitor forms.

These are unauthenticated. Singletons that were never configured answer 200
with "configured": false so the site can render its empty state.
"""
import logging

from rest_framework import status
from rest_framework.decorators import api_view, permission_classes, authentication_classes
from rest_framework.permissions import AllowAny
from rest_framework.response import Response

from .exceptions import ContentError
from .repositories import (
    hero_repository, about_repository, resume_repository, card_repository,
    project_repository, feedback_repository, contact_message_repository,
    techstack_repository,
)
from .resolver import card_with_items, resolve_card_item
from .serializers import (
    HeroSerializer, AboutSerializer, ResumeSerializer, CardSerializer,
    CardDetailSerializer, CardItemSerializer, ProjectSerializer, ProjectFeedbackSubmitSerializer,
    ContactMessageSubmitSerializer, TechStackEntrySerializer,
)
from .views import error_response

logger = logging.getLogger(__name__)


def _singleton(repository, serializer_class):
    try:
        obj = repository.get_singleton()
    except ContentError as e:
        logger.error(f"Failed to fetch {repository.label}: {e}")
        return error_response(e)
    return Response({
        'configured': obj is not None,
        'data': serializer_class(obj).data if obj is not None else None,
    })


def _collection(repository, serializer_class):
    try:
        rows = repository.list()
    except ContentError as e:
        logger.error(f"Failed to list {repository.label}: {e}")
        return error_response(e)
    return Response(serializer_class(rows, many=True).data)


@api_view(['GET'])
@authentication_classes([])
@permission_classes([AllowAny])
def hero(request):
    return _singleton(hero_repository, HeroSerializer)


@api_view(['GET'])
@authentication_classes([])
@permission_classes([AllowAny])
def about(request):
    return _singleton(about_repository, AboutSerializer)


@api_view(['GET'])
@authentication_classes([])
@permission_classes([AllowAny])
def resume(request):
    return _singleton(resume_repository, ResumeSerializer)


@api_view(['GET'])
@authentication_classes([])
@permission_classes([AllowAny])
def card_list(request):
    return _collection(card_repository, CardSerializer)


@api_view(['GET'])
@authentication_classes([])
@permission_classes([AllowAny])
def card_detail(request, card_id):
    """
    A card and its items.

    GET /api/v1/cards/{card_id}/

    card_id may be the legacy integer id or the UUID. Items are matched with
    the same identifier generation as card_id.

    Returns: { "card": {...}, "items": [...] }
    """
    try:
        card, items = card_with_items(card_id)
    except ContentError as e:
        if e.status_code != status.HTTP_404_NOT_FOUND:
            logger.error(f"Failed to fetch card {card_id}: {e}")
        return error_response(e)

    return Response(CardDetailSerializer({'card': card, 'items': items}).data)


@api_view(['GET'])
@authentication_classes([])
@permission_classes([AllowAny])
def card_item_detail(request, card_id, item_id):
    """
    GET /api/v1/cards/{card_id}/items/{item_id}/

    The item is resolved by item_id alone; card_id only shapes the URL.
    """
    try:
        item = resolve_card_item(item_id)
    except ContentError as e:
        if e.status_code != status.HTTP_404_NOT_FOUND:
            logger.error(f"Failed to fetch card item {item_id}: {e}")
        return error_response(e)
    return Response(CardItemSerializer(item).data)


@api_view(['GET'])
@authentication_classes([])
@permission_classes([AllowAny])
def project_list(request):
    return _collection(project_repository, ProjectSerializer)


@api_view(['GET'])
@authentication_classes([])
@permission_classes([AllowAny])
def techstack_list(request):
    return _collection(techstack_repository, TechStackEntrySerializer)


@api_view(['POST'])
@authentication_classes([])
@permission_classes([AllowAny])
def submit_contact(request):
    """
    Visitor contact form.

    POST /api/v1/contact/
    Body: { "name": "...", "email": "...", "message": "..." }
    """
    serializer = ContactMessageSubmitSerializer(data=request.data)
    if not serializer.is_valid():
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)

    try:
        message = contact_message_repository.create(dict(serializer.validated_data))
    except ContentError as e:
        logger.error(f"Failed to store contact message: {e}")
        return error_response(e)

    return Response({
        'message': 'Thanks for reaching out!',
        'id': message.id,
    }, status=status.HTTP_201_CREATED)


@api_view(['POST'])
@authentication_classes([])
@permission_classes([AllowAny])
def submit_feedback(request, project_id):
    """
    Visitor feedback on a project.

    POST /api/v1/projects/{project_id}/feedback/
    Body: { "name": "...", "email": "...", "message": "..." }
    """
    serializer = ProjectFeedbackSubmitSerializer(data=request.data)
    if not serializer.is_valid():
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)

    try:
        project = project_repository.get(project_id)
        feedback = feedback_repository.create({
            **serializer.validated_data,
            'project_id': project.id,
        })
    except ContentError as e:
        if e.status_code != status.HTTP_404_NOT_FOUND:
            logger.error(f"Failed to store feedback for project {project_id}: {e}")
        return error_response(e)

    return Response({
        'message': 'Thanks for the feedback!',
        'id': feedback.id,
    }, status=status.HTTP_201_CREATED)
