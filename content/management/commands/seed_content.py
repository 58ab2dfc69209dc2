"""
Management command to seed starter portfolio content.
Usage: python manage.py seed_content [--force]

Singletons are only written when missing unless --force is given, so an
already configured site keeps its edits.
"""
from django.core.management.base import BaseCommand

from content.models import TechStackEntry
from content.repositories import hero_repository, about_repository

HERO = {
    'name': 'Your Name',
    'designation': 'Software Engineer',
    'photo_url': '',
}

ABOUT = {
    'content': '<p>Tell visitors who you are and what you build.</p>',
}

TECH_STACK = [
    'Python',
    'Django',
    'PostgreSQL',
    'React',
    'TypeScript',
    'Docker',
]


class Command(BaseCommand):
    help = 'Seed starter portfolio content into the database'

    def add_arguments(self, parser):
        parser.add_argument(
            '--force',
            action='store_true',
            help='Overwrite hero and about even if they are already configured',
        )

    def handle(self, *args, **options):
        force = options['force']

        for repository, fields in ((hero_repository, HERO), (about_repository, ABOUT)):
            if repository.get_singleton() is not None and not force:
                self.stdout.write(f'Skipped: {repository.label} (already configured)')
                continue
            repository.upsert_singleton(fields)
            self.stdout.write(f'Seeded: {repository.label}')

        for name in TECH_STACK:
            _, created = TechStackEntry.objects.get_or_create(name=name)
            action = 'Created' if created else 'Exists'
            self.stdout.write(f'{action}: {name}')

        self.stdout.write(self.style.SUCCESS(f'Seeded {len(TECH_STACK)} tech stack entries.'))
