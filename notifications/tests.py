"""
Tests for the change feed and unread-count aggregator.
"""
import pytest
from django.contrib.auth import get_user_model
from rest_framework.test import APIClient
from rest_framework_simplejwt.tokens import RefreshToken

from content.models import ContactMessage, ProjectFeedback
from content.repositories import contact_message_repository, feedback_repository, project_repository
from dashboard import shell as shell_registry

from . import aggregator as aggregator_module
from .aggregator import NotificationAggregator, WatchedTable, CONTACT_MESSAGES, PROJECT_FEEDBACK
from .feed import ChangeFeed, change_feed, INSERT, UPDATE, DELETE

User = get_user_model()


def submit_message(n=1):
    for i in range(n):
        contact_message_repository.create({
            'name': f'Visitor {i}', 'email': f'visitor{i}@example.com', 'message': 'Hello'
        })


def submit_feedback(project, n=1):
    for i in range(n):
        feedback_repository.create({
            'project_id': project.id, 'name': f'Visitor {i}',
            'email': f'visitor{i}@example.com', 'message': 'Nice',
        })


class Row:
    def __init__(self, **attrs):
        self.__dict__.update(attrs)


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
def aggregator():
    agg = NotificationAggregator()
    yield agg
    agg.teardown()


@pytest.fixture
def project():
    return project_repository.create({'title': 'Folio'})


@pytest.fixture(autouse=True)
def close_shells():
    yield
    shell_registry.close_all()


class TestChangeFeed:

    def test_publish_reaches_matching_subscribers(self):
        feed = ChangeFeed()
        received = []
        feed.subscribe('project_feedback', INSERT, received.append)
        feed.subscribe('project_feedback', DELETE, received.append)
        feed.subscribe('contact_messages', INSERT, received.append)

        delivered = feed.publish('project_feedback', INSERT, Row(project_id=1))

        assert delivered == 1
        assert [(c.table, c.event) for c in received] == [('project_feedback', INSERT)]

    def test_scope_filters_rows(self):
        feed = ChangeFeed()
        received = []
        feed.subscribe('project_feedback', INSERT, received.append, scope={'project_id': 7})

        feed.publish('project_feedback', INSERT, Row(project_id=8))
        feed.publish('project_feedback', INSERT, Row(project_id=7))

        assert [c.row.project_id for c in received] == [7]

    def test_unsubscribe_once(self):
        feed = ChangeFeed()
        handle = feed.subscribe('contact_messages', INSERT, lambda change: None)
        assert feed.unsubscribe(handle) is True
        assert feed.unsubscribe(handle) is False
        assert feed.publish('contact_messages', INSERT, Row()) == 0

    def test_failing_subscriber_does_not_block_others(self):
        feed = ChangeFeed()
        received = []

        def broken(change):
            raise RuntimeError("boom")

        feed.subscribe('contact_messages', INSERT, broken)
        feed.subscribe('contact_messages', INSERT, received.append)

        assert feed.publish('contact_messages', INSERT, Row()) == 2
        assert len(received) == 1

    def test_unknown_event(self):
        with pytest.raises(ValueError):
            ChangeFeed().subscribe('contact_messages', 'TRUNCATE', lambda change: None)

    @pytest.mark.django_db
    def test_model_signals_publish(self):
        received = []
        handles = [
            change_feed.subscribe(CONTACT_MESSAGES, event, received.append)
            for event in (INSERT, UPDATE, DELETE)
        ]
        try:
            message = ContactMessage.objects.create(name='A', email='a@example.com', message='Hi')
            message.is_read = True
            message.save()
            message.delete()
        finally:
            for handle in handles:
                change_feed.unsubscribe(handle)

        assert [c.event for c in received] == [INSERT, UPDATE, DELETE]


@pytest.mark.django_db
class TestNotificationAggregator:

    def test_initial_count(self, aggregator):
        submit_message(2)
        aggregator.subscribe(CONTACT_MESSAGES)
        assert aggregator.count(CONTACT_MESSAGES) == 2

    def test_idle_count_is_zero(self, aggregator):
        submit_message(2)
        assert aggregator.count(CONTACT_MESSAGES) == 0

    def test_converges_after_inserts(self, aggregator):
        aggregator.subscribe(CONTACT_MESSAGES)
        submit_message(3)
        assert aggregator.count(CONTACT_MESSAGES) == 3
        assert aggregator.count(CONTACT_MESSAGES) == ContactMessage.objects.filter(is_read=False).count()

    def test_submit_then_mark_read(self, aggregator):
        aggregator.subscribe(CONTACT_MESSAGES)
        before = aggregator.count(CONTACT_MESSAGES)

        submit_message()
        assert aggregator.count(CONTACT_MESSAGES) == before + 1

        aggregator.mark_read(CONTACT_MESSAGES)
        assert aggregator.count(CONTACT_MESSAGES) == 0

    def test_mark_read_is_idempotent(self, aggregator):
        aggregator.subscribe(CONTACT_MESSAGES)
        submit_message(2)

        assert aggregator.mark_read(CONTACT_MESSAGES) == 2
        assert aggregator.mark_read(CONTACT_MESSAGES) == 0
        assert aggregator.count(CONTACT_MESSAGES) == 0
        assert not ContactMessage.objects.filter(is_read=False).exists()

    def test_mark_read_empty_scope(self, aggregator):
        assert aggregator.mark_read(PROJECT_FEEDBACK, scope=12345) == 0

    def test_subscribe_is_idempotent(self, aggregator):
        assert aggregator.subscribe(CONTACT_MESSAGES) is True
        assert aggregator.subscribe(CONTACT_MESSAGES) is False
        # One listener for each of INSERT, UPDATE and DELETE
        assert change_feed.subscriber_count(CONTACT_MESSAGES) == 3

    def test_teardown_stops_recounts(self, aggregator):
        aggregator.subscribe(CONTACT_MESSAGES)
        submit_message()

        assert aggregator.teardown() == 1
        assert aggregator.teardown() == 0
        assert change_feed.subscriber_count(CONTACT_MESSAGES) == 0

        submit_message()
        assert aggregator.count(CONTACT_MESSAGES) == 0
        assert not aggregator.is_subscribed(CONTACT_MESSAGES)

    def test_deleting_unread_row_drops_count(self, aggregator):
        aggregator.subscribe(CONTACT_MESSAGES)
        submit_message(2)
        assert aggregator.count(CONTACT_MESSAGES) == 2

        contact_message_repository.delete(ContactMessage.objects.first().id)
        assert aggregator.count(CONTACT_MESSAGES) == 1

    def test_read_flag_change_outside_mark_read_is_counted(self, aggregator):
        aggregator.subscribe(CONTACT_MESSAGES)
        submit_message()

        message = ContactMessage.objects.get()
        message.is_read = True
        message.save()
        assert aggregator.count(CONTACT_MESSAGES) == 0

    def test_deleting_scoped_feedback_drops_both_counts(self, aggregator, project):
        aggregator.subscribe(PROJECT_FEEDBACK)
        aggregator.subscribe(PROJECT_FEEDBACK, scope=project.id)
        submit_feedback(project, 2)

        feedback_repository.delete(ProjectFeedback.objects.first().id)
        assert aggregator.count(PROJECT_FEEDBACK, scope=project.id) == 1
        assert aggregator.count(PROJECT_FEEDBACK) == 1

    def test_refresh_picks_up_bulk_writes(self, aggregator):
        aggregator.subscribe(CONTACT_MESSAGES)
        # bulk_create sends no post_save signals
        ContactMessage.objects.bulk_create([
            ContactMessage(name='A', email='a.com', message='Hi'),
            ContactMessage(name='B', email='b.com', message='Hi'),
        ])
        assert aggregator.count(CONTACT_MESSAGES) == 0

        assert aggregator.refresh(CONTACT_MESSAGES) == 2
        assert aggregator.count(CONTACT_MESSAGES) == 2

    def test_refresh_unsubscribed_key_is_zero(self, aggregator):
        submit_message()
        assert aggregator.refresh(CONTACT_MESSAGES) == 0

    def test_per_project_scope(self, aggregator, project):
        other = project_repository.create({'title': 'Other'})
        aggregator.subscribe(PROJECT_FEEDBACK)
        aggregator.subscribe(PROJECT_FEEDBACK, scope=project.id)

        submit_feedback(project, 2)
        submit_feedback(other, 1)

        assert aggregator.count(PROJECT_FEEDBACK, scope=project.id) == 2
        assert aggregator.count(PROJECT_FEEDBACK) == 3

    def test_scoped_mark_read_refreshes_global_count(self, aggregator, project):
        other = project_repository.create({'title': 'Other'})
        aggregator.subscribe(PROJECT_FEEDBACK)
        aggregator.subscribe(PROJECT_FEEDBACK, scope=project.id)
        submit_feedback(project, 2)
        submit_feedback(other, 1)

        assert aggregator.mark_read(PROJECT_FEEDBACK, scope=project.id) == 2
        assert aggregator.count(PROJECT_FEEDBACK, scope=project.id) == 0
        assert aggregator.count(PROJECT_FEEDBACK) == 1
        assert ProjectFeedback.objects.filter(project_id=other.id, is_read=False).count() == 1

    def test_contact_messages_have_no_scope(self, aggregator):
        with pytest.raises(ValueError):
            aggregator.subscribe(CONTACT_MESSAGES, scope=1)

    def test_unknown_table(self, aggregator):
        with pytest.raises(ValueError):
            aggregator.subscribe('cards')

    def test_stale_recount_is_dropped(self, aggregator, monkeypatch):
        """A recount that finishes after a later one must not overwrite it."""
        aggregator.subscribe(CONTACT_MESSAGES)
        key = (CONTACT_MESSAGES, None)
        results = iter([5, 9])

        class Counts:
            nested = False

            def filter(self, **filters):
                return self

            def count(self):
                value = next(results)
                if not Counts.nested:
                    # A second recount starts and finishes while this one is in flight
                    Counts.nested = True
                    aggregator._recount(key)
                return value

        class FakeModel:
            objects = Counts()

        monkeypatch.setitem(aggregator_module.WATCHED_TABLES, CONTACT_MESSAGES, WatchedTable(FakeModel, None))
        aggregator._recount(key)

        # The outer recount (issued first) read 5 but the nested one (issued later) read 9
        assert aggregator.count(CONTACT_MESSAGES) == 9


@pytest.mark.django_db
class TestNotificationEndpoints:

    def test_contact_submit_then_mark_read(self, admin_client):
        client, user = admin_client
        response = client.get('/api/v1/admin/notifications/')
        assert response.status_code == 200
        assert response.data['badges'] == {'contact': 0, 'projects': 0}

        APIClient().post('/api/v1/contact/', {
            'name': 'Visitor', 'email': 'visitor@example.com', 'message': 'Hello'
        }, format='json')
        response = client.get('/api/v1/admin/notifications/')
        assert response.data['badges']['contact'] == 1

        response = client.post('/api/v1/admin/contact-messages/mark-read/')
        assert response.status_code == 200
        assert response.data['updated'] == 1
        assert response.data['badges']['contact'] == 0

    def test_deleting_message_updates_badge(self, admin_client):
        client, user = admin_client
        submit_message()
        assert client.get('/api/v1/admin/notifications/').data['badges']['contact'] == 1

        message = ContactMessage.objects.get()
        response = client.delete(f'/api/v1/admin/contact-messages/{message.id}/')
        assert response.status_code == 200

        response = client.get('/api/v1/admin/notifications/')
        assert response.data['badges']['contact'] == 0

    def test_deleting_feedback_updates_badge(self, admin_client, project):
        client, user = admin_client
        submit_feedback(project)
        assert client.get('/api/v1/admin/notifications/').data['badges']['projects'] == 1

        feedback = ProjectFeedback.objects.get()
        response = client.delete(f'/api/v1/admin/feedback/{feedback.id}/')
        assert response.status_code == 200

        response = client.get('/api/v1/admin/notifications/')
        assert response.data['badges']['projects'] == 0

    def test_mark_feedback_read(self, admin_client, project):
        client, user = admin_client
        submit_feedback(project, 2)
        response = client.post(f'/api/v1/admin/projects/{project.id}/feedback/mark-read/')
        assert response.status_code == 200
        assert response.data['updated'] == 2
        assert response.data['badges']['projects'] == 0

    def test_mark_feedback_read_missing_project(self, admin_client):
        client, user = admin_client
        response = client.post('/api/v1/admin/projects/99999/feedback/mark-read/')
        assert response.status_code == 404

    def test_requires_staff(self, api_client):
        assert api_client.get('/api/v1/admin/notifications/').status_code == 401
