"""
Unread badge endpoints for the admin console.

Counts come from the requesting admin's shell, which owns the aggregator;
the shell is opened on first use.
"""
import logging

from rest_framework import status
from rest_framework.decorators import api_view, permission_classes
from rest_framework.permissions import IsAdminUser
from rest_framework.response import Response

from content.exceptions import ContentError
from content.repositories import project_repository
from content.views import error_response
from dashboard.shell import shell_for

from .aggregator import CONTACT_MESSAGES, PROJECT_FEEDBACK

logger = logging.getLogger(__name__)


@api_view(['GET'])
@permission_classes([IsAdminUser])
def unread_counts(request):
    """
    GET /api/v1/admin/notifications/

    Returns: { "badges": {"contact": n, "projects": n}, "subscriptions": {...} }
    """
    try:
        shell = shell_for(request.user)
    except ContentError as e:
        logger.error(f"Failed to load unread counts: {e}")
        return error_response(e)

    return Response({
        'badges': shell.badges(),
        'subscriptions': shell.aggregator.counts(),
    })


@api_view(['POST'])
@permission_classes([IsAdminUser])
def mark_messages_read(request):
    """POST /api/v1/admin/contact-messages/mark-read/"""
    try:
        shell = shell_for(request.user)
        updated = shell.aggregator.mark_read(CONTACT_MESSAGES)
    except ContentError as e:
        logger.error(f"Failed to mark contact messages read: {e}")
        return error_response(e)

    return Response({'updated': updated, 'badges': shell.badges()}, status=status.HTTP_200_OK)


@api_view(['POST'])
@permission_classes([IsAdminUser])
def mark_feedback_read(request, project_id):
    """POST /api/v1/admin/projects/{project_id}/feedback/mark-read/"""
    try:
        project_repository.get(project_id)
        shell = shell_for(request.user)
        updated = shell.aggregator.mark_read(PROJECT_FEEDBACK, scope=project_id)
    except ContentError as e:
        if e.status_code != status.HTTP_404_NOT_FOUND:
            logger.error(f"Failed to mark feedback read for project {project_id}: {e}")
        return error_response(e)

    return Response({
        'updated': updated,
        'project_id': project_id,
        'badges': shell.badges(),
    })
