"""
Bridge Django model signals into the change feed.

post_save publishes INSERT for new rows and UPDATE otherwise; post_delete
publishes DELETE. The table name is the model's db_table.
"""
from django.apps import apps
from django.db.models.signals import post_save, post_delete

from .feed import change_feed, INSERT, UPDATE, DELETE

CONTENT_MODELS = (
    'Hero', 'About', 'Resume', 'Card', 'CardItem', 'Project',
    'ProjectFeedback', 'ContactMessage', 'TechStackEntry',
)


def publish_save(sender, instance, created, raw=False, **kwargs):
    # Fixture loading
    if raw:
        return
    change_feed.publish(sender._meta.db_table, INSERT if created else UPDATE, instance)


def publish_delete(sender, instance, **kwargs):
    change_feed.publish(sender._meta.db_table, DELETE, instance)


def connect_content_signals():
    for name in CONTENT_MODELS:
        model = apps.get_model('content', name)
        post_save.connect(publish_save, sender=model, dispatch_uid=f'change_feed_save_{name}')
        post_delete.connect(publish_delete, sender=model, dispatch_uid=f'change_feed_delete_{name}')
