"""
Row-store access for every content type.

All repositories share one contract:

- list() returns [] when nothing matches and raises FetchError only when the
  database call itself fails.
- get_singleton() returns None for an unconfigured singleton; the ORM's
  DoesNotExist is the "no rows" signal and is never surfaced as an error.
- Writes are last-write-wins: there is no version column and no conflict
  check. update() and delete() raise NotFoundError for a missing row.

Nothing here caches rows; every call goes to the database.
"""
import logging

from django.core.exceptions import ValidationError
from django.db import DatabaseError, transaction
from django.db.models import Q

from .exceptions import FetchError, NotFoundError, WriteError
from .models import (
    SINGLETON_ID, Hero, About, Resume, Card, CardItem, Project,
    ProjectFeedback, ContactMessage, TechStackEntry,
)

logger = logging.getLogger(__name__)


class EntityRepository:
    model = None
    ordering = None

    def __init__(self, model=None):
        if model is not None:
            self.model = model

    @property
    def label(self):
        return self.model._meta.verbose_name

    def _queryset(self):
        return self.model.objects.all()

    def list(self, filters=None, ordering=None):
        try:
            qs = self._queryset().filter(**(filters or {}))
            ordering = ordering or self.ordering
            if ordering:
                qs = qs.order_by(*ordering)
            return list(qs)
        except DatabaseError as e:
            logger.error(f"Failed to list {self.label}: {e}")
            raise FetchError(f"Failed to fetch {self.label} list") from e

    def get(self, pk):
        try:
            return self._queryset().get(pk=pk)
        except (self.model.DoesNotExist, ValueError, TypeError, ValidationError):
            # ValueError/TypeError/ValidationError: pk cannot match the column type
            raise NotFoundError(f"{self.label.capitalize()} {pk} not found")
        except DatabaseError as e:
            logger.error(f"Failed to fetch {self.label} {pk}: {e}")
            raise FetchError(f"Failed to fetch {self.label}") from e

    def create(self, fields):
        try:
            obj = self.model.objects.create(**fields)
        except DatabaseError as e:
            logger.error(f"Failed to create {self.label}: {e}")
            raise WriteError(f"Failed to save {self.label}") from e
        logger.info("Created %s %s", self.label, obj.pk)
        return obj

    def update(self, pk, fields):
        """Write only the given fields; every other column keeps its value."""
        obj = self.get(pk)
        for key, value in fields.items():
            setattr(obj, key, value)
        try:
            obj.save(update_fields=list(fields) or None)
        except DatabaseError as e:
            logger.error(f"Failed to update {self.label} {pk}: {e}")
            raise WriteError(f"Failed to save {self.label}") from e
        logger.info("Updated %s %s (%s)", self.label, pk, ', '.join(fields))
        return obj

    def delete(self, pk):
        obj = self.get(pk)
        try:
            obj.delete()
        except DatabaseError as e:
            logger.error(f"Failed to delete {self.label} {pk}: {e}")
            raise WriteError(f"Failed to delete {self.label}") from e
        logger.info("Deleted %s %s", self.label, pk)


class SingletonRepository(EntityRepository):
    """Repository for content types stored as a single row at SINGLETON_ID."""

    def get_singleton(self):
        try:
            return self._queryset().get(pk=SINGLETON_ID)
        except self.model.DoesNotExist:
            return None
        except DatabaseError as e:
            logger.error(f"Failed to fetch {self.label}: {e}")
            raise FetchError(f"Failed to fetch {self.label}") from e

    def upsert_singleton(self, fields):
        """Create or overwrite the singleton row. The last writer wins."""
        try:
            obj, created = self.model.objects.update_or_create(pk=SINGLETON_ID, defaults=fields)
        except DatabaseError as e:
            logger.error(f"Failed to save {self.label}: {e}")
            raise WriteError(f"Failed to save {self.label}") from e
        logger.info("%s %s", 'Created' if created else 'Updated', self.label)
        return obj


class CardRepository(EntityRepository):
    model = Card

    def delete(self, pk):
        """Delete a card and every item that points at it by either parent reference."""
        card = self.get(pk)
        parent = Q(card_id=card.id)
        if card.uuid_id:
            parent |= Q(card_uuid=card.uuid_id)
        try:
            with transaction.atomic():
                items_deleted, _ = CardItem.objects.filter(parent).delete()
                card.delete()
        except DatabaseError as e:
            logger.error(f"Failed to delete card {pk}: {e}")
            raise WriteError("Failed to delete card") from e
        logger.info("Deleted card %s and %s item(s)", pk, items_deleted)


class CardItemRepository(EntityRepository):
    model = CardItem

    def create_for(self, card, fields):
        """Create an item under card, recording both of the card's identifiers."""
        return self.create({**fields, 'card_id': card.id, 'card_uuid': card.uuid_id})

    def list_for(self, key):
        """
        Items for the card addressed by key (LegacyKey or StableKey).

        The query uses the same identifier generation as key; items that only
        carry the other generation's reference are not returned.
        """
        return self.list(filters=key.child_lookup())


class ProjectRepository(EntityRepository):
    model = Project


class ProjectFeedbackRepository(EntityRepository):
    model = ProjectFeedback

    def list_for(self, project_id):
        return self.list(filters={'project_id': project_id})


class ContactMessageRepository(EntityRepository):
    model = ContactMessage


class TechStackRepository(EntityRepository):
    model = TechStackEntry


hero_repository = SingletonRepository(Hero)
about_repository = SingletonRepository(About)
resume_repository = SingletonRepository(Resume)
card_repository = CardRepository()
card_item_repository = CardItemRepository()
project_repository = ProjectRepository()
feedback_repository = ProjectFeedbackRepository()
contact_message_repository = ContactMessageRepository()
techstack_repository = TechStackRepository()
