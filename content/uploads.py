"""
Media uploads for the admin editors.

Each upload target maps to a name prefix and a bucket (a top-level folder in
the storage backend). Stored objects are named "<prefix>-<epoch ms><ext>":
two uploads with the same prefix in the same millisecond share a name and
the later one overwrites the earlier. Files replaced on an entity are never
deleted from storage.
"""
import logging
import os
import time
from typing import NamedTuple

from django.core.files.storage import default_storage

from .exceptions import UploadError

logger = logging.getLogger(__name__)


class UploadTarget(NamedTuple):
    prefix: str
    bucket: str


UPLOAD_TARGETS = {
    'profile': UploadTarget('profile', 'profile_images'),
    'card': UploadTarget('card', 'card_images'),
    'item': UploadTarget('item', 'card_images'),
    'project': UploadTarget('project', 'project_images'),
    'resume': UploadTarget('resume', 'resume_files'),
}


def get_target(name: str) -> UploadTarget:
    try:
        return UPLOAD_TARGETS[name]
    except KeyError:
        raise UploadError(f"Unknown upload target: {name}")


class MediaUploader:
    """
    Stores a file and resolves its public URL.

    storage defaults to Django's default storage; clock returns seconds since
    the epoch and exists so tests can pin the generated names.
    """

    def __init__(self, storage=None, clock=None):
        self.storage = storage if storage is not None else default_storage
        self.clock = clock or time.time

    def object_name(self, file_name: str, target: UploadTarget) -> str:
        """Bucket-relative path for a new upload, e.g. project_images/project-1700000000000.png"""
        _, ext = os.path.splitext(file_name or '')
        millis = int(self.clock() * 1000)
        return f"{target.bucket}/{target.prefix}-{millis}{ext}"

    def upload(self, file, target: str) -> str:
        """
        Write file under target and return its public URL.

        Raises UploadError on any storage failure; callers must not write the
        entity when this raises.
        """
        upload_target = get_target(target)
        name = self.object_name(getattr(file, 'name', ''), upload_target)

        try:
            saved_name = self.storage.save(name, file)
            url = self.storage.url(saved_name)
        except Exception as e:
            logger.error(f"Upload of {name} failed: {e}")
            raise UploadError(f"Failed to upload {getattr(file, 'name', 'file')}") from e

        if not url:
            raise UploadError(f"No public URL for {saved_name}")

        logger.info("Uploaded %s (%s bytes) to %s", saved_name, getattr(file, 'size', '?'), upload_target.bucket)
        return url
