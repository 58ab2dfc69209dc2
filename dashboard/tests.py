"""
Tests for admin console navigation state.
"""
import pytest
from django.contrib.auth import get_user_model
from rest_framework.test import APIClient
from rest_framework_simplejwt.tokens import RefreshToken

from content.models import ContactMessage
from content.repositories import card_repository, contact_message_repository, feedback_repository, project_repository
from notifications.aggregator import CONTACT_MESSAGES, PROJECT_FEEDBACK
from notifications.feed import change_feed

from . import shell as shell_registry
from .shell import AdminShell, NavigationError, DrillDown, DEFAULT_TAB

User = get_user_model()


@pytest.fixture
def api_client():
    return APIClient()


@pytest.fixture
def admin_client(api_client):
    user = User.objects.create_user(username='admin', is_staff=True)
    refresh = RefreshToken.for_user(user)
    api_client.credentials(HTTP_AUTHORIZATION=f'Bearer {str(refresh.access_token)}')
    return api_client, user


@pytest.fixture
def shell():
    admin_shell = AdminShell()
    admin_shell.open()
    yield admin_shell
    admin_shell.close()


@pytest.fixture
def project():
    return project_repository.create({'title': 'Folio'})


@pytest.fixture(autouse=True)
def close_shells():
    yield
    shell_registry.close_all()


@pytest.mark.django_db
class TestAdminShell:

    def test_defaults(self, shell):
        state = shell.state()
        assert state['active_tab'] == DEFAULT_TAB
        assert state['drill_down'] is None
        assert state['badges'] == {'contact': 0, 'projects': 0}

    def test_open_subscribes_badge_streams(self, shell):
        assert shell.aggregator.is_subscribed(CONTACT_MESSAGES)
        assert shell.aggregator.is_subscribed(PROJECT_FEEDBACK)
        assert shell.open() is False

    def test_badges_follow_submissions(self, shell, project):
        contact_message_repository.create({'name': 'A', 'email': 'a@example.com', 'message': 'Hi'})
        feedback_repository.create({'project_id': project.id, 'name': 'B', 'email': 'b@example.com', 'message': 'Nice'})
        assert shell.badges() == {'contact': 1, 'projects': 1}

    def test_select_tab(self, shell):
        shell.select_tab('projects')
        assert shell.active_tab == 'projects'

    def test_contact_tab_marks_messages_read(self, shell):
        contact_message_repository.create({'name': 'A', 'email': 'a.com', 'message': 'Hi'})
        assert shell.badges()['contact'] == 1

        shell.select_tab('contact')
        assert shell.badges()['contact'] == 0
        assert not ContactMessage.objects.filter(is_read=False).exists()

    def test_other_tabs_leave_messages_unread(self, shell):
        contact_message_repository.create({'name': 'A', 'email': 'a.com', 'message': 'Hi'})
        shell.select_tab('projects')
        assert shell.badges()['contact'] == 1

    def test_unknown_tab(self, shell):
        with pytest.raises(NavigationError):
            shell.select_tab('billing')
        assert shell.active_tab == DEFAULT_TAB

    def test_feedback_drill_down_subscribes_project_scope(self, shell, project):
        shell.open_drill_down('feedback', project.id)

        assert shell.active_tab == 'projects'
        assert shell.drill_down == DrillDown('feedback', project.id)
        assert shell.aggregator.is_subscribed(PROJECT_FEEDBACK, scope=project.id)

        feedback_repository.create({'project_id': project.id, 'name': 'B', 'email': 'b@example.com', 'message': 'Nice'})
        assert shell.state()['drill_down']['unread'] == 1

    def test_back_unsubscribes_project_scope(self, shell, project):
        shell.open_drill_down('feedback', project.id)
        assert shell.back() is True
        assert shell.back() is False

        assert shell.active_tab == 'projects'
        assert shell.drill_down is None
        assert not shell.aggregator.is_subscribed(PROJECT_FEEDBACK, scope=project.id)

    def test_switching_tab_closes_drill_down(self, shell, project):
        shell.open_drill_down('feedback', project.id)
        shell.select_tab('contact')
        assert shell.drill_down is None
        assert not shell.aggregator.is_subscribed(PROJECT_FEEDBACK, scope=project.id)

    def test_one_drill_down_at_a_time(self, shell, project):
        card = card_repository.create({'title': 'Certifications'})
        shell.open_drill_down('feedback', project.id)
        shell.open_drill_down('card_items', card.id)

        assert shell.drill_down == DrillDown('card_items', card.id)
        assert shell.active_tab == 'cards'
        assert not shell.aggregator.is_subscribed(PROJECT_FEEDBACK, scope=project.id)

    def test_unknown_drill_down(self, shell):
        with pytest.raises(NavigationError):
            shell.open_drill_down('invoices', 1)

    def test_close_exactly_once(self):
        admin_shell = AdminShell()
        admin_shell.open()
        # Three events for each of the two badge tables
        assert change_feed.subscriber_count() == 6

        assert admin_shell.close() is True
        assert admin_shell.close() is False
        assert change_feed.subscriber_count() == 0
        assert not admin_shell.is_open

    def test_closed_shell_cannot_reopen(self):
        admin_shell = AdminShell()
        admin_shell.close()
        with pytest.raises(NavigationError):
            admin_shell.open()


@pytest.mark.django_db
class TestShellRegistry:

    def test_one_shell_per_user(self):
        user = User.objects.create_user(username='admin', is_staff=True)
        assert shell_registry.shell_for(user) is shell_registry.shell_for(user)

    def test_shell_closed_before_open_is_replaced(self, monkeypatch):
        user = User.objects.create_user(username='admin', is_staff=True)
        stale = AdminShell()
        stale.close()
        # A concurrent close_shell() won the race after this shell was registered
        monkeypatch.setitem(shell_registry._shells, user.pk, stale)

        fresh = shell_registry.shell_for(user)

        assert fresh is not stale
        assert fresh.is_open
        assert shell_registry.shell_for(user) is fresh

    def test_state_after_concurrent_close(self, admin_client):
        client, user = admin_client
        stale = AdminShell()
        stale.close()
        shell_registry._shells[user.pk] = stale

        response = client.get('/api/v1/admin/dashboard/')
        assert response.status_code == 200
        assert shell_registry._shells[user.pk] is not stale

    def test_close_shell(self):
        user = User.objects.create_user(username='admin', is_staff=True)
        first = shell_registry.shell_for(user)

        assert shell_registry.close_shell(user) is True
        assert shell_registry.close_shell(user) is False
        assert not first.is_open
        assert shell_registry.shell_for(user) is not first


@pytest.mark.django_db
class TestDashboardEndpoints:

    def test_state(self, admin_client):
        client, user = admin_client
        response = client.get('/api/v1/admin/dashboard/')
        assert response.status_code == 200
        assert response.data['active_tab'] == 'hero'

    def test_tab_and_drill_down(self, admin_client, project):
        client, user = admin_client
        response = client.post('/api/v1/admin/dashboard/tab/', {'tab': 'contact'}, format='json')
        assert response.data['active_tab'] == 'contact'

        response = client.post('/api/v1/admin/dashboard/drill-down/', {
            'kind': 'feedback', 'key': project.id
        }, format='json')
        assert response.status_code == 200
        assert response.data['active_tab'] == 'projects'
        assert response.data['drill_down'] == {'kind': 'feedback', 'key': project.id, 'unread': 0}

        response = client.post('/api/v1/admin/dashboard/back/')
        assert response.data['drill_down'] is None

    def test_contact_tab_clears_contact_badge(self, admin_client):
        client, user = admin_client
        APIClient().post('/api/v1/contact/', {
            'name': 'Visitor', 'email': 'visitor.com', 'message': 'Hello'
        }, format='json')
        assert client.get('/api/v1/admin/dashboard/').data['badges']['contact'] == 1

        response = client.post('/api/v1/admin/dashboard/tab/', {'tab': 'contact'}, format='json')
        assert response.status_code == 200
        assert response.data['badges']['contact'] == 0

    def test_invalid_tab(self, admin_client):
        client, user = admin_client
        response = client.post('/api/v1/admin/dashboard/tab/', {'tab': 'billing'}, format='json')
        assert response.status_code == 400
        assert response.data['error']['code'] == 'INVALID_NAVIGATION'

    def test_drill_down_missing_parent(self, admin_client):
        client, user = admin_client
        response = client.post('/api/v1/admin/dashboard/drill-down/', {
            'kind': 'card_items', 'key': 99999
        }, format='json')
        assert response.status_code == 404

    def test_close(self, admin_client):
        client, user = admin_client
        client.get('/api/v1/admin/dashboard/')
        assert client.post('/api/v1/admin/dashboard/close/').data == {'closed': True}
        assert client.post('/api/v1/admin/dashboard/close/').data == {'closed': False}
