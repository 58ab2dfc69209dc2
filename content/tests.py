"""
Tests for content repositories, identifier resolution, uploads and the
public/admin content endpoints.
"""
import functools
import uuid

import pytest
from django.contrib.auth import get_user_model
from django.core.files.storage import FileSystemStorage
from django.core.files.uploadedfile import SimpleUploadedFile
from django.db import DatabaseError
from rest_framework.test import APIClient
from rest_framework_simplejwt.tokens import RefreshToken

from dashboard import shell as shell_registry

from .exceptions import FetchError, NotFoundError, UploadError
from .models import Card, CardItem, Hero, Project, ProjectFeedback, ContactMessage, Resume
from .repositories import (
    hero_repository, about_repository, resume_repository, card_repository,
    card_item_repository, project_repository, techstack_repository,
)
from .resolver import (
    LegacyKey, StableKey, parse_public_key, resolve_card, card_with_items, public_id,
)
from .uploads import MediaUploader, get_target
from .views import MediaUploadMixin

User = get_user_model()

PNG_HEADER = b'\x89PNG\r\n\x1a\n'


def png_file(name='photo.png', size=2 * 1024 * 1024, fill=b'\0'):
    return SimpleUploadedFile(name, PNG_HEADER + fill * (size - len(PNG_HEADER)), content_type='image/png')


class StepClock:
    """Returns start, start + step, ... in seconds."""

    def __init__(self, start=1700000000.5, step=1.0):
        self.now = start - step
        self.step = step

    def __call__(self):
        self.now += self.step
        return self.now


class BrokenStorage(FileSystemStorage):
    def save(self, name, content, max_length=None):
        raise OSError("bucket unavailable")


@pytest.fixture
def api_client():
    return APIClient()


@pytest.fixture
def admin_client(api_client):
    user = User.objects.create_user(username='admin', is_staff=True)
    refresh = RefreshToken.for_user(user)
    api_client.credentials(HTTP_AUTHORIZATION=f'Bearer {str(refresh.access_token)}')
    return api_client


@pytest.fixture
def media_root(settings, tmp_path):
    settings.MEDIA_ROOT = str(tmp_path)
    return tmp_path


@pytest.fixture(autouse=True)
def close_shells():
    yield
    shell_registry.close_all()


@pytest.fixture
def card():
    return card_repository.create({'title': 'Certifications', 'type': 'Achievements'})


@pytest.mark.django_db
class TestSingletonRepository:

    def test_unconfigured_singleton_is_none(self):
        assert hero_repository.get_singleton() is None
        assert about_repository.get_singleton() is None

    def test_upsert_keeps_one_row_last_write_wins(self):
        hero_repository.upsert_singleton({'name': 'Ada', 'designation': 'Engineer'})
        hero_repository.upsert_singleton({'name': 'Grace', 'designation': 'Admiral'})

        assert Hero.objects.count() == 1
        hero = hero_repository.get_singleton()
        assert hero.name == 'Grace'
        assert hero.designation == 'Admiral'

    def test_upsert_only_touches_given_fields(self):
        hero_repository.upsert_singleton({'name': 'Ada', 'designation': 'Engineer'})
        hero_repository.upsert_singleton({'photo_url': '/media/profile_images/profile-1.png'})

        hero = hero_repository.get_singleton()
        assert hero.name == 'Ada'
        assert hero.photo_url == '/media/profile_images/profile-1.png'

    def test_resume_upsert_replaces_file_url(self):
        resume_repository.upsert_singleton({'file_url': '/media/resume_files/resume-1.pdf'})
        resume_repository.upsert_singleton({'file_url': '/media/resume_files/resume-2.pdf'})

        assert Resume.objects.count() == 1
        assert resume_repository.get_singleton().file_url == '/media/resume_files/resume-2.pdf'

    def test_configured_with_empty_fields_is_not_absent(self):
        about_repository.upsert_singleton({'content': ''})
        about = about_repository.get_singleton()
        assert about is not None
        assert about.content == ''


@pytest.mark.django_db
class TestEntityRepository:

    def test_list_contains_created_row(self):
        project = project_repository.create({'title': 'Folio'})
        assert project in project_repository.list()

    def test_list_empty(self):
        assert techstack_repository.list() == []

    def test_update_leaves_other_fields_unchanged(self):
        project = project_repository.create({
            'title': 'Folio',
            'description': 'Portfolio site',
            'github_link': 'https://github.com/example/folio',
        })
        project_repository.update(project.id, {'title': 'Folio v2'})

        updated = project_repository.get(project.id)
        assert updated.title == 'Folio v2'
        assert updated.description == 'Portfolio site'
        assert updated.github_link == 'https://github.com/example/folio'

    def test_update_missing_row(self):
        with pytest.raises(NotFoundError):
            project_repository.update(99999, {'title': 'Ghost'})

    def test_delete_missing_row(self):
        with pytest.raises(NotFoundError):
            project_repository.delete(99999)

    def test_delete_removes_row(self):
        project = project_repository.create({'title': 'Folio'})
        project_repository.delete(project.id)
        assert not Project.objects.filter(id=project.id).exists()

    def test_get_with_non_numeric_pk(self):
        with pytest.raises(NotFoundError):
            project_repository.get('abc')

    def test_database_failure_raises_fetch_error(self, monkeypatch):
        def broken_queryset():
            raise DatabaseError("connection refused")

        monkeypatch.setattr(project_repository, '_queryset', broken_queryset)
        with pytest.raises(FetchError):
            project_repository.list()

    def test_projects_ordered_by_sort_order_then_recency(self):
        unsorted = project_repository.create({'title': 'Unsorted'})
        second = project_repository.create({'title': 'Second', 'sort_order': 2})
        first = project_repository.create({'title': 'First', 'sort_order': 1})

        assert project_repository.list() == [first, second, unsorted]


@pytest.mark.django_db
class TestRepositoriesAcrossKinds:
    """Create, list, partial update and delete behave the same for every collection."""

    KINDS = [
        pytest.param(
            card_repository,
            {'title': 'Certifications', 'type': 'Achievements', 'image_url': '/media/card_images/card-1.png'},
            {'title': 'Awards'},
            id='card',
        ),
        pytest.param(
            card_item_repository,
            {'card_id': 1, 'title': 'AWS', 'description': 'Solutions Architect', 'link': 'https://aws.amazon.com/'},
            {'description': 'Professional'},
            id='card-item',
        ),
        pytest.param(
            project_repository,
            {'title': 'Folio', 'description': 'Portfolio site', 'github_link': 'https://github.com/example/folio'},
            {'sort_order': 3},
            id='project',
        ),
        pytest.param(
            techstack_repository,
            {'name': 'Django', 'logo_url': '/media/logos/django.svg'},
            {'name': 'Django REST framework'},
            id='techstack',
        ),
    ]

    @pytest.mark.parametrize('repository, fields, change', KINDS)
    def test_create_then_list(self, repository, fields, change):
        obj = repository.create(fields)
        listed = repository.list()
        assert [o.pk for o in listed] == [obj.pk]
        for name, value in fields.items():
            assert getattr(listed[0], name) == value

    @pytest.mark.parametrize('repository, fields, change', KINDS)
    def test_partial_update_leaves_other_fields(self, repository, fields, change):
        obj = repository.create(fields)
        repository.update(obj.pk, change)

        updated = repository.get(obj.pk)
        for name, value in {**fields, **change}.items():
            assert getattr(updated, name) == value

    @pytest.mark.parametrize('repository, fields, change', KINDS)
    def test_delete(self, repository, fields, change):
        obj = repository.create(fields)
        repository.delete(obj.pk)
        assert repository.list() == []
        with pytest.raises(NotFoundError):
            repository.get(obj.pk)


@pytest.mark.django_db
class TestCardCascade:

    def test_delete_card_removes_items_by_either_reference(self, card):
        other = card_repository.create({'title': 'Talks'})
        card_item_repository.create_for(card, {'title': 'AWS'})
        CardItem.objects.create(title='Legacy only', card_id=card.id)
        CardItem.objects.create(title='UUID only', card_uuid=card.uuid_id)
        kept = card_item_repository.create_for(other, {'title': 'PyCon'})

        card_repository.delete(card.id)

        assert not Card.objects.filter(id=card.id).exists()
        assert list(CardItem.objects.all()) == [kept]

    def test_project_delete_leaves_feedback(self):
        project = project_repository.create({'title': 'Folio'})
        ProjectFeedback.objects.create(project_id=project.id, name='A', email='a@example.com', message='Nice')

        project_repository.delete(project.id)

        assert ProjectFeedback.objects.filter(project_id=project.id).count() == 1


@pytest.mark.django_db
class TestResolver:

    def test_parse_legacy_id(self):
        assert parse_public_key('42') == LegacyKey(42)

    def test_parse_uuid(self):
        value = uuid.uuid4()
        assert parse_public_key(str(value)) == StableKey(value)

    @pytest.mark.parametrize('param', ['abc', '', '12a', '-' * 36, '1.5'])
    def test_parse_malformed(self, param):
        with pytest.raises(NotFoundError):
            parse_public_key(param)

    def test_resolve_card_by_either_identifier(self, card):
        assert resolve_card(str(card.id)) == card
        assert resolve_card(str(card.uuid_id)) == card

    def test_resolve_missing_card(self):
        with pytest.raises(NotFoundError):
            resolve_card(str(uuid.uuid4()))

    def test_items_follow_parameter_generation(self, card):
        card_item_repository.create_for(card, {'title': 'AWS'})
        CardItem.objects.create(title='Legacy only', card_id=card.id)

        _, by_legacy = card_with_items(str(card.id))
        _, by_uuid = card_with_items(str(card.uuid_id))

        assert sorted(i.title for i in by_legacy) == ['AWS', 'Legacy only']
        assert [i.title for i in by_uuid] == ['AWS']

    def test_public_id_prefers_uuid(self, card):
        assert public_id(card) == str(card.uuid_id)

        Card.objects.filter(id=card.id).update(uuid_id=None)
        card.refresh_from_db()
        assert public_id(card) == str(card.id)


class TestMediaUploader:

    def test_object_name(self):
        uploader = MediaUploader(clock=lambda: 1700000000.5)
        assert uploader.object_name('me.PNG', get_target('profile')) == 'profile_images/profile-1700000000500.PNG'
        assert uploader.object_name('cv.pdf', get_target('resume')) == 'resume_files/resume-1700000000500.pdf'

    def test_items_share_card_bucket(self):
        assert get_target('item').bucket == get_target('card').bucket == 'card_images'

    def test_unknown_target(self):
        with pytest.raises(UploadError):
            MediaUploader().upload(png_file(), 'avatar')

    def test_distinct_milliseconds_give_distinct_urls(self, tmp_path):
        storage = FileSystemStorage(location=tmp_path, base_url='/media/')
        uploader = MediaUploader(storage=storage, clock=StepClock())

        first = uploader.upload(png_file(), 'project')
        second = uploader.upload(png_file(), 'project')

        assert first != second
        assert first.startswith('/media/project_images/project-')

    def test_same_millisecond_overwrites(self, media_root):
        uploader = MediaUploader(clock=lambda: 1700000000.5)

        first = uploader.upload(png_file(size=64, fill=b'a'), 'card')
        second = uploader.upload(png_file(size=64, fill=b'b'), 'card')

        assert first == second
        stored = (media_root / 'card_images' / 'card-1700000000500.png').read_bytes()
        assert stored.endswith(b'b')

    def test_storage_failure_raises_upload_error(self, tmp_path):
        uploader = MediaUploader(storage=BrokenStorage(location=tmp_path))
        with pytest.raises(UploadError):
            uploader.upload(png_file(), 'project')


@pytest.mark.django_db
class TestPublicContentAPI:

    def test_unconfigured_hero(self, api_client):
        response = api_client.get('/api/v1/hero/')
        assert response.status_code == 200
        assert response.data == {'configured': False, 'data': None}

    def test_configured_about(self, api_client):
        about_repository.upsert_singleton({'content': '<p>Hi</p>'})
        response = api_client.get('/api/v1/about/')
        assert response.data['configured'] is True
        assert response.data['data']['content'] == '<p>Hi</p>'

    def test_card_detail_malformed_id(self, api_client):
        response = api_client.get('/api/v1/cards/not-an-id/')
        assert response.status_code == 404
        assert response.data['error']['code'] == 'NOT_FOUND'

    def test_card_item_detail(self, api_client, card):
        item = card_item_repository.create_for(card, {'title': 'AWS'})
        response = api_client.get(f'/api/v1/cards/{card.uuid_id}/items/{item.uuid_id}/')
        assert response.status_code == 200
        assert response.data['title'] == 'AWS'
        assert response.data['public_id'] == str(item.uuid_id)

    def test_submit_contact(self, api_client):
        response = api_client.post('/api/v1/contact/', {
            'name': 'Visitor', 'email': 'visitor@example.com', 'message': 'Hello'
        }, format='json')
        assert response.status_code == 201
        assert ContactMessage.objects.get(id=response.data['id']).is_read is False

    def test_submit_contact_invalid_email(self, api_client):
        response = api_client.post('/api/v1/contact/', {
            'name': 'Visitor', 'email': 'nope', 'message': 'Hello'
        }, format='json')
        assert response.status_code == 400

    def test_submit_feedback(self, api_client):
        project = project_repository.create({'title': 'Folio'})
        response = api_client.post(f'/api/v1/projects/{project.id}/feedback/', {
            'name': 'Visitor', 'email': 'visitor@example.com', 'message': 'Great work'
        }, format='json')
        assert response.status_code == 201
        assert ProjectFeedback.objects.get(id=response.data['id']).project_id == project.id

    def test_submit_feedback_missing_project(self, api_client):
        response = api_client.post('/api/v1/projects/99999/feedback/', {
            'name': 'Visitor', 'email': 'visitor@example.com', 'message': 'Great work'
        }, format='json')
        assert response.status_code == 404
        assert not ProjectFeedback.objects.exists()


@pytest.mark.django_db
class TestAdminContentAPI:

    def test_requires_authentication(self, api_client):
        assert api_client.get('/api/v1/admin/projects/').status_code == 401

    def test_card_and_item_visible_by_legacy_id(self, admin_client, api_client):
        response = admin_client.post('/api/v1/admin/cards/', {
            'title': 'Certifications', 'type': 'Achievements'
        }, format='json')
        assert response.status_code == 201
        card_id = response.data['id']
        assert [c['title'] for c in response.data['results']] == ['Certifications']

        response = admin_client.post(f'/api/v1/admin/cards/{card_id}/items/', {
            'title': 'AWS', 'description': 'Solutions Architect'
        }, format='json')
        assert response.status_code == 201

        response = api_client.get(f'/api/v1/cards/{card_id}/')
        assert response.status_code == 200
        assert response.data['card']['title'] == 'Certifications'
        assert len(response.data['items']) == 1
        assert response.data['items'][0]['title'] == 'AWS'

        # The same items are reachable through the shared UUID link
        response = api_client.get(f"/api/v1/cards/{response.data['card']['public_id']}/")
        assert len(response.data['items']) == 1

    def test_update_answers_with_relisted_collection(self, admin_client):
        project = project_repository.create({'title': 'Folio', 'description': 'Portfolio'})
        response = admin_client.put(f'/api/v1/admin/projects/{project.id}/', {
            'title': 'Folio v2'
        }, format='json')
        assert response.status_code == 200
        assert response.data['results'][0]['title'] == 'Folio v2'
        assert response.data['results'][0]['description'] == 'Portfolio'

    def test_delete_missing_project(self, admin_client):
        response = admin_client.delete('/api/v1/admin/projects/99999/')
        assert response.status_code == 404
        assert response.data['error']['code'] == 'NOT_FOUND'

    def test_delete_card_cascades(self, admin_client, card):
        card_item_repository.create_for(card, {'title': 'AWS'})
        response = admin_client.delete(f'/api/v1/admin/cards/{card.id}/')
        assert response.status_code == 200
        assert response.data['results'] == []
        assert not CardItem.objects.exists()

    def test_hero_put_twice_single_row(self, admin_client):
        admin_client.put('/api/v1/admin/hero/', {'name': 'Ada'}, format='json')
        response = admin_client.put('/api/v1/admin/hero/', {'name': 'Grace'}, format='json')
        assert response.status_code == 200
        assert response.data['data']['name'] == 'Grace'
        assert Hero.objects.count() == 1

    def test_feedback_list_and_delete(self, admin_client):
        project = project_repository.create({'title': 'Folio'})
        feedback = ProjectFeedback.objects.create(
            project_id=project.id, name='A', email='a@example.com', message='Nice'
        )
        response = admin_client.get(f'/api/v1/admin/projects/{project.id}/feedback/')
        assert [f['id'] for f in response.data] == [feedback.id]

        response = admin_client.delete(f'/api/v1/admin/feedback/{feedback.id}/')
        assert response.status_code == 200
        assert response.data['results'] == []

    def test_item_routes_check_card_before_writing(self, admin_client, card):
        item = card_item_repository.create_for(card, {'title': 'AWS'})

        response = admin_client.put(f'/api/v1/admin/cards/99999/items/{item.id}/', {
            'title': 'Changed'
        }, format='json')
        assert response.status_code == 404
        assert CardItem.objects.get(id=item.id).title == 'AWS'

        response = admin_client.delete(f'/api/v1/admin/cards/99999/items/{item.id}/')
        assert response.status_code == 404
        assert CardItem.objects.filter(id=item.id).exists()

    def test_item_routes_reject_item_of_another_card(self, admin_client, card):
        other = card_repository.create({'title': 'Awards'})
        item = card_item_repository.create_for(other, {'title': 'Hackathon'})

        response = admin_client.put(f'/api/v1/admin/cards/{card.id}/items/{item.id}/', {
            'title': 'Changed'
        }, format='json')
        assert response.status_code == 404
        assert CardItem.objects.get(id=item.id).title == 'Hackathon'

        response = admin_client.delete(f'/api/v1/admin/cards/{card.id}/items/{item.id}/')
        assert response.status_code == 404
        assert CardItem.objects.filter(id=item.id).exists()

    def test_item_reachable_through_uuid_reference_only(self, admin_client, card):
        item = CardItem.objects.create(card_uuid=card.uuid_id, title='AWS')
        response = admin_client.put(f'/api/v1/admin/cards/{card.id}/items/{item.id}/', {
            'title': 'AWS Professional'
        }, format='json')
        assert response.status_code == 200
        assert CardItem.objects.get(id=item.id).title == 'AWS Professional'

    def test_item_create_on_missing_card_uploads_nothing(self, admin_client, media_root):
        response = admin_client.post('/api/v1/admin/cards/99999/items/', {
            'title': 'AWS', 'file': png_file()
        }, format='multipart')
        assert response.status_code == 404
        assert not CardItem.objects.exists()
        assert not any(media_root.iterdir())

    def test_contact_messages_are_read_only(self, admin_client):
        response = admin_client.post('/api/v1/admin/contact-messages/', {
            'name': 'A', 'email': 'a@example.com', 'message': 'Hi'
        }, format='json')
        assert response.status_code == 405


@pytest.mark.django_db
class TestAdminUploads:

    def test_upload_binds_url_to_project(self, admin_client, media_root, monkeypatch):
        monkeypatch.setattr(
            MediaUploadMixin, 'uploader_class', functools.partial(MediaUploader, clock=StepClock())
        )

        response = admin_client.post('/api/v1/admin/projects/', {
            'title': 'Folio', 'file': png_file()
        }, format='multipart')
        assert response.status_code == 201
        first_url = response.data['results'][0]['image_url']
        assert first_url == '/media/project_images/project-1700000000500.png'
        assert (media_root / 'project_images' / 'project-1700000000500.png').stat().st_size == 2 * 1024 * 1024

        project = project_repository.get(response.data['id'])
        assert project.image_url == first_url

        # Replacing the image gives a new URL; the refetched row carries it
        response = admin_client.put(f'/api/v1/admin/projects/{project.id}/', {
            'file': png_file()
        }, format='multipart')
        assert response.status_code == 200
        second_url = project_repository.get(project.id).image_url
        assert second_url != first_url
        assert project_repository.get(project.id).title == 'Folio'

    def test_failed_upload_writes_nothing(self, admin_client, tmp_path, monkeypatch):
        monkeypatch.setattr(
            MediaUploadMixin, 'uploader_class',
            functools.partial(MediaUploader, storage=BrokenStorage(location=tmp_path))
        )

        response = admin_client.post('/api/v1/admin/projects/', {
            'title': 'Folio', 'file': png_file()
        }, format='multipart')
        assert response.status_code == 502
        assert response.data['error']['code'] == 'UPLOAD_FAILED'
        assert not Project.objects.exists()

    def test_hero_photo_upload(self, admin_client, media_root):
        response = admin_client.put('/api/v1/admin/hero/', {
            'name': 'Ada', 'file': png_file('me.png')
        }, format='multipart')
        assert response.status_code == 200
        assert response.data['data']['photo_url'].startswith('/media/profile_images/profile-')

    def test_standalone_upload(self, admin_client, media_root):
        response = admin_client.post('/api/v1/admin/uploads/', {
            'target': 'resume', 'file': SimpleUploadedFile('cv.pdf', b'%PDF-1.4', content_type='application/pdf')
        }, format='multipart')
        assert response.status_code == 201
        assert response.data['url'].startswith('/media/resume_files/resume-')
        assert response.data['url'].endswith('.pdf')

    def test_standalone_upload_unknown_target(self, admin_client, media_root):
        response = admin_client.post('/api/v1/admin/uploads/', {
            'target': 'avatar', 'file': png_file()
        }, format='multipart')
        assert response.status_code == 400
        assert 'target' in response.data
        assert not any(media_root.iterdir())
