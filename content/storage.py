"""
Object-store backend for uploaded media.
"""
from django.core.files.storage import FileSystemStorage


class OverwriteStorage(FileSystemStorage):
    """
    FileSystemStorage with overwrite-on-conflict semantics.

    Django's default appends a random suffix when a name is taken; uploads
    here are addressed by their generated name, so an existing file with the
    same name is replaced instead.
    """

    def get_available_name(self, name, max_length=None):
        if self.exists(name):
            self.delete(name)
        return name
