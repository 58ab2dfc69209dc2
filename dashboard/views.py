"""
Admin console navigation endpoints.

GET  /api/v1/admin/dashboard/             - current state
POST /api/v1/admin/dashboard/tab/         - {"tab": "projects"}
POST /api/v1/admin/dashboard/drill-down/  - {"kind": "feedback", "key": 7}
POST /api/v1/admin/dashboard/back/
POST /api/v1/admin/dashboard/close/
"""
import logging

from rest_framework import status
from rest_framework.decorators import api_view, permission_classes
from rest_framework.permissions import IsAdminUser
from rest_framework.response import Response

from content.exceptions import ContentError
from content.repositories import card_repository, project_repository
from content.views import error_response

from .shell import NavigationError, shell_for, close_shell

logger = logging.getLogger(__name__)

# drill-down kind -> repository holding the parent row
DRILL_DOWN_PARENTS = {
    'card_items': card_repository,
    'feedback': project_repository,
}


def _bad_request(message):
    return Response(
        {'error': {'code': 'INVALID_NAVIGATION', 'message': message, 'status': 400}},
        status=status.HTTP_400_BAD_REQUEST
    )


@api_view(['GET'])
@permission_classes([IsAdminUser])
def dashboard_state(request):
    try:
        shell = shell_for(request.user)
    except ContentError as e:
        logger.error(f"Failed to open admin shell: {e}")
        return error_response(e)
    return Response(shell.state())


@api_view(['POST'])
@permission_classes([IsAdminUser])
def select_tab(request):
    try:
        shell = shell_for(request.user)
        shell.select_tab(request.data.get('tab'))
    except NavigationError as e:
        return _bad_request(str(e))
    except ContentError as e:
        logger.error(f"Failed to switch tab: {e}")
        return error_response(e)
    return Response(shell.state())


@api_view(['POST'])
@permission_classes([IsAdminUser])
def open_drill_down(request):
    kind = request.data.get('kind')
    key = request.data.get('key')

    parent_repository = DRILL_DOWN_PARENTS.get(kind)
    if parent_repository is None:
        return _bad_request(f"Unknown drill-down: {kind}")

    try:
        parent_repository.get(key)
        shell = shell_for(request.user)
        shell.open_drill_down(kind, key)
    except NavigationError as e:
        return _bad_request(str(e))
    except ContentError as e:
        if e.status_code != status.HTTP_404_NOT_FOUND:
            logger.error(f"Failed to open {kind} drill-down for {key}: {e}")
        return error_response(e)
    return Response(shell.state())


@api_view(['POST'])
@permission_classes([IsAdminUser])
def back(request):
    try:
        shell = shell_for(request.user)
    except ContentError as e:
        logger.error(f"Failed to open admin shell: {e}")
        return error_response(e)
    shell.back()
    return Response(shell.state())


@api_view(['POST'])
@permission_classes([IsAdminUser])
def close(request):
    closed = close_shell(request.user)
    return Response({'closed': closed})
