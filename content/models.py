"""
Portfolio content models.

Parent references (CardItem.card_id / card_uuid, ProjectFeedback.project_id)
are plain columns rather than foreign keys: "has many" is only ever matched
at query time, and rows can outlive their parent.
"""
import uuid

from django.db import models


SINGLETON_ID = 1


class SingletonContent(models.Model):
    """
    Content type with at most one logical row, stored at SINGLETON_ID.
    A missing row means "not yet configured", which is different from a
    row whose fields are empty.
    """
    id = models.PositiveSmallIntegerField(primary_key=True, default=SINGLETON_ID, editable=False)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        abstract = True


class Hero(SingletonContent):
    name = models.CharField(max_length=255, blank=True)
    designation = models.CharField(max_length=255, blank=True)
    photo_url = models.CharField(max_length=500, blank=True, help_text="Public URL of the profile photo")

    class Meta:
        db_table = 'hero'
        verbose_name_plural = 'hero'

    def __str__(self):
        return self.name or 'Hero'


class About(SingletonContent):
    content = models.TextField(blank=True, help_text="Rich-text about section")

    class Meta:
        db_table = 'about'
        verbose_name_plural = 'about'

    def __str__(self):
        return 'About'


class Resume(SingletonContent):
    file_url = models.CharField(max_length=500, blank=True, help_text="Public URL of the resume file")

    class Meta:
        db_table = 'resume'

    def __str__(self):
        return self.file_url or 'Resume'


class Card(models.Model):
    """
    A titled card on the home page that groups CardItems.

    Cards created before public UUIDs existed keep uuid_id NULL and are only
    addressable by their integer id.
    """
    uuid_id = models.UUIDField(
        default=uuid.uuid4,
        unique=True,
        null=True,
        blank=True,
        editable=False,
        help_text="Stable public identifier (NULL for legacy rows)"
    )
    title = models.CharField(max_length=255)
    type = models.CharField(max_length=100, blank=True, help_text="Category label, e.g. Achievements")
    image_url = models.CharField(max_length=500, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        db_table = 'cards'
        ordering = ['-created_at']

    def __str__(self):
        return self.title


class CardItem(models.Model):
    uuid_id = models.UUIDField(
        default=uuid.uuid4,
        unique=True,
        null=True,
        blank=True,
        editable=False
    )
    card_id = models.BigIntegerField(null=True, blank=True, db_index=True, help_text="Parent card legacy id")
    card_uuid = models.UUIDField(null=True, blank=True, db_index=True, help_text="Parent card UUID")
    title = models.CharField(max_length=255)
    description = models.TextField(blank=True)
    image_url = models.CharField(max_length=500, blank=True)
    link = models.URLField(max_length=500, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        db_table = 'card_items'
        ordering = ['-created_at']

    def __str__(self):
        return self.title


class Project(models.Model):
    title = models.CharField(max_length=255)
    description = models.TextField(blank=True)
    image_url = models.CharField(max_length=500, blank=True)
    github_link = models.URLField(max_length=500, blank=True)
    demo_link = models.URLField(max_length=500, blank=True)
    sort_order = models.IntegerField(
        null=True,
        blank=True,
        help_text="Manual position; projects without one fall back to recency"
    )
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        db_table = 'projects'
        ordering = [models.F('sort_order').asc(nulls_last=True), '-created_at']

    def __str__(self):
        return self.title


class Submission(models.Model):
    """Visitor-submitted message. is_read only ever moves to True."""
    name = models.CharField(max_length=255)
    email = models.EmailField()
    message = models.TextField()
    is_read = models.BooleanField(default=False)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        abstract = True
        ordering = ['-created_at']


class ProjectFeedback(Submission):
    project_id = models.BigIntegerField(db_index=True)

    class Meta(Submission.Meta):
        db_table = 'project_feedback'
        verbose_name_plural = 'project feedback'
        indexes = [
            models.Index(fields=['project_id', 'is_read'], name='project_feedback_unread_idx'),
        ]

    def __str__(self):
        return f"Feedback from {self.name} on project {self.project_id}"


class ContactMessage(Submission):

    class Meta(Submission.Meta):
        db_table = 'contact_messages'
        indexes = [
            models.Index(fields=['is_read'], name='contact_messages_unread_idx'),
        ]

    def __str__(self):
        return f"Message from {self.name} <{self.email}>"


class TechStackEntry(models.Model):
    name = models.CharField(max_length=100)
    logo_url = models.CharField(max_length=500, blank=True)

    class Meta:
        db_table = 'techstack'
        ordering = ['id']
        verbose_name_plural = 'tech stack entries'

    def __str__(self):
        return self.name
