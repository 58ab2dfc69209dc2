"""
Admin editors for portfolio content.

Each editor wraps one repository. Content errors are caught here, logged, and
returned as {"error": {...}} so the console can show a blocking alert; nothing
is retried. Every successful write answers with the re-listed collection
rather than a patch of the caller's cached copy.
"""
import logging

from rest_framework import viewsets, status
from rest_framework.decorators import api_view, permission_classes, parser_classes
from rest_framework.parsers import JSONParser, MultiPartParser, FormParser
from rest_framework.permissions import IsAdminUser
from rest_framework.response import Response
from rest_framework.views import APIView

from .exceptions import ContentError, NotFoundError
from .repositories import (
    hero_repository, about_repository, resume_repository,
    card_repository, card_item_repository, project_repository,
    feedback_repository, contact_message_repository, techstack_repository,
)
from .resolver import LegacyKey
from .serializers import (
    HeroSerializer, AboutSerializer, ResumeSerializer, CardSerializer,
    CardItemSerializer, ProjectSerializer, ProjectFeedbackSerializer,
    ContactMessageSerializer, TechStackEntrySerializer, UploadSerializer,
)
from .uploads import MediaUploader

logger = logging.getLogger(__name__)


def error_response(exc):
    return Response(exc.as_payload(), status=exc.status_code)


class MediaUploadMixin:
    """
    Binds an optional multipart "file" to the editor's media field.

    The upload finishes and resolves a URL before the entity write is issued;
    if it fails, UploadError propagates and the write never happens.
    """
    uploader_class = MediaUploader
    upload_target = None
    media_field = None

    def bind_upload(self, request, fields):
        upload = request.FILES.get('file') if hasattr(request, 'FILES') else None
        if upload is None or not self.media_field:
            return fields
        url = self.uploader_class().upload(upload, self.upload_target)
        return {**fields, self.media_field: url}


class RepositoryViewSet(MediaUploadMixin, viewsets.ViewSet):
    """
    CRUD editor over a repository.

    list:    GET    .../           - full collection
    create:  POST   .../           - create, answer with the re-listed collection
    update:  PUT    .../{id}/      - write the given fields only
    destroy: DELETE .../{id}/      - delete, answer with the re-listed collection
    """
    permission_classes = [IsAdminUser]
    parser_classes = [JSONParser, MultiPartParser, FormParser]
    repository = None
    serializer_class = None

    def get_collection(self):
        return self.repository.list()

    def collection_data(self):
        return self.serializer_class(self.get_collection(), many=True).data

    def get_object(self, pk):
        return self.repository.get(pk)

    def check_parent(self):
        """Hook for nested editors: raise NotFoundError before anything is written."""

    def perform_create(self, fields):
        return self.repository.create(fields)

    def list(self, request, *args, **kwargs):
        try:
            return Response(self.collection_data())
        except ContentError as e:
            logger.error(f"Failed to list {self.repository.label}: {e}")
            return error_response(e)

    def create(self, request, *args, **kwargs):
        serializer = self.serializer_class(data=request.data)
        if not serializer.is_valid():
            return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)

        try:
            self.check_parent()
            fields = self.bind_upload(request, dict(serializer.validated_data))
            obj = self.perform_create(fields)
            results = self.collection_data()
        except ContentError as e:
            logger.error(f"Failed to create {self.repository.label}: {e}")
            return error_response(e)

        return Response({
            'message': f'{self.repository.label.capitalize()} saved successfully',
            'id': obj.pk,
            'results': results,
        }, status=status.HTTP_201_CREATED)

    def update(self, request, pk=None, *args, **kwargs):
        serializer = self.serializer_class(data=request.data, partial=True)
        if not serializer.is_valid():
            return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)

        try:
            # Check the target first so a missing row does not leave an orphaned upload
            self.get_object(pk)
            fields = self.bind_upload(request, dict(serializer.validated_data))
            self.repository.update(pk, fields)
            results = self.collection_data()
        except ContentError as e:
            logger.error(f"Failed to update {self.repository.label} {pk}: {e}")
            return error_response(e)

        return Response({
            'message': f'{self.repository.label.capitalize()} saved successfully',
            'id': int(pk),
            'results': results,
        })

    partial_update = update

    def destroy(self, request, pk=None, *args, **kwargs):
        try:
            self.get_object(pk)
            self.repository.delete(pk)
            results = self.collection_data()
        except ContentError as e:
            logger.error(f"Failed to delete {self.repository.label} {pk}: {e}")
            return error_response(e)

        return Response({
            'message': f'{self.repository.label.capitalize()} deleted successfully',
            'results': results,
        })


class CardViewSet(RepositoryViewSet):
    """Cards. Deleting a card also deletes its items."""
    repository = card_repository
    serializer_class = CardSerializer
    upload_target = 'card'
    media_field = 'image_url'


class CardItemViewSet(RepositoryViewSet):
    """
    Items of one card, addressed by the card's integer id.

    GET/POST /api/v1/admin/cards/{card_pk}/items/
    PUT/PATCH/DELETE /api/v1/admin/cards/{card_pk}/items/{id}/
    """
    repository = card_item_repository
    serializer_class = CardItemSerializer
    upload_target = 'item'
    media_field = 'image_url'

    def get_card(self):
        return card_repository.get(self.kwargs['card_pk'])

    def check_parent(self):
        self.get_card()

    def get_object(self, pk):
        """The item, only if it hangs off the card in the URL by either parent reference."""
        card = self.get_card()
        item = self.repository.get(pk)
        if item.card_id != card.id and not (card.uuid_id and item.card_uuid == card.uuid_id):
            raise NotFoundError(f"Card item {pk} not found on card {card.id}")
        return item

    def get_collection(self):
        card = self.get_card()
        return self.repository.list_for(LegacyKey(card.id))

    def perform_create(self, fields):
        return self.repository.create_for(self.get_card(), fields)


class ProjectViewSet(RepositoryViewSet):
    """Projects. Deleting a project leaves its feedback rows in place."""
    repository = project_repository
    serializer_class = ProjectSerializer
    upload_target = 'project'
    media_field = 'image_url'


class TechStackViewSet(RepositoryViewSet):
    repository = techstack_repository
    serializer_class = TechStackEntrySerializer


class ContactMessageViewSet(RepositoryViewSet):
    """Contact messages are written by visitors; the console only reads and deletes."""
    repository = contact_message_repository
    serializer_class = ContactMessageSerializer
    http_method_names = ['get', 'delete', 'head', 'options']


class ProjectFeedbackViewSet(RepositoryViewSet):
    """
    Feedback for one project.

    GET    /api/v1/admin/projects/{project_pk}/feedback/
    DELETE /api/v1/admin/feedback/{id}/
    """
    repository = feedback_repository
    serializer_class = ProjectFeedbackSerializer
    http_method_names = ['get', 'delete', 'head', 'options']

    def get_collection(self):
        return self.repository.list_for(self.kwargs['project_pk'])

    def destroy(self, request, pk=None, *args, **kwargs):
        try:
            feedback = self.repository.get(pk)
            self.kwargs['project_pk'] = feedback.project_id
            self.repository.delete(pk)
            results = self.collection_data()
        except ContentError as e:
            logger.error(f"Failed to delete feedback {pk}: {e}")
            return error_response(e)

        return Response({
            'message': 'Feedback deleted successfully',
            'project_id': feedback.project_id,
            'results': results,
        })


class SingletonView(MediaUploadMixin, APIView):
    """
    Editor for a single-row content type.

    GET: { "configured": bool, "data": {...} | null }
    PUT: write the given fields at the fixed id (last write wins)
    """
    permission_classes = [IsAdminUser]
    parser_classes = [JSONParser, MultiPartParser, FormParser]
    repository = None
    serializer_class = None

    def _payload(self, obj):
        return {
            'configured': obj is not None,
            'data': self.serializer_class(obj).data if obj is not None else None,
        }

    def get(self, request):
        try:
            obj = self.repository.get_singleton()
        except ContentError as e:
            logger.error(f"Failed to fetch {self.repository.label}: {e}")
            return error_response(e)
        return Response(self._payload(obj))

    def put(self, request):
        serializer = self.serializer_class(data=request.data, partial=True)
        if not serializer.is_valid():
            return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)

        try:
            fields = self.bind_upload(request, dict(serializer.validated_data))
            self.repository.upsert_singleton(fields)
            obj = self.repository.get_singleton()
        except ContentError as e:
            logger.error(f"Failed to save {self.repository.label}: {e}")
            return error_response(e)

        return Response({
            'message': f'{self.repository.label.capitalize()} updated successfully',
            **self._payload(obj),
        })

    patch = put


class HeroView(SingletonView):
    repository = hero_repository
    serializer_class = HeroSerializer
    upload_target = 'profile'
    media_field = 'photo_url'


class AboutView(SingletonView):
    repository = about_repository
    serializer_class = AboutSerializer


class ResumeView(SingletonView):
    repository = resume_repository
    serializer_class = ResumeSerializer
    upload_target = 'resume'
    media_field = 'file_url'


@api_view(['POST'])
@permission_classes([IsAdminUser])
@parser_classes([MultiPartParser, FormParser])
def upload_media(request):
    """
    Upload a file without binding it to an entity.

    POST /api/v1/admin/uploads/
    Body (multipart): file=<file>, target=profile|card|item|project|resume

    Returns: { "url": "...", "target": "..." }
    """
    serializer = UploadSerializer(data=request.data)
    if not serializer.is_valid():
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)

    target = serializer.validated_data['target']
    try:
        url = MediaUploader().upload(serializer.validated_data['file'], target)
    except ContentError as e:
        logger.error(f"Upload to {target} failed: {e}")
        return error_response(e)

    return Response({'url': url, 'target': target}, status=status.HTTP_201_CREATED)
