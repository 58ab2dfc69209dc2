# Generated migration for portfolio content tables

from django.db import migrations, models
import uuid


class Migration(migrations.Migration):

    initial = True

    dependencies = []

    operations = [
        migrations.CreateModel(
            name='About',
            fields=[
                ('id', models.PositiveSmallIntegerField(default=1, editable=False, primary_key=True, serialize=False)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('content', models.TextField(blank=True, help_text='Rich-text about section')),
            ],
            options={
                'db_table': 'about',
                'verbose_name_plural': 'about',
            },
        ),
        migrations.CreateModel(
            name='Card',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('uuid_id', models.UUIDField(blank=True, default=uuid.uuid4, editable=False, help_text='Stable public identifier (NULL for legacy rows)', null=True, unique=True)),
                ('title', models.CharField(max_length=255)),
                ('type', models.CharField(blank=True, help_text='Category label, e.g. Achievements', max_length=100)),
                ('image_url', models.CharField(blank=True, max_length=500)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
            ],
            options={
                'db_table': 'cards',
                'ordering': ['-created_at'],
            },
        ),
        migrations.CreateModel(
            name='CardItem',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('uuid_id', models.UUIDField(blank=True, default=uuid.uuid4, editable=False, null=True, unique=True)),
                ('card_id', models.BigIntegerField(blank=True, db_index=True, help_text='Parent card legacy id', null=True)),
                ('card_uuid', models.UUIDField(blank=True, db_index=True, help_text='Parent card UUID', null=True)),
                ('title', models.CharField(max_length=255)),
                ('description', models.TextField(blank=True)),
                ('image_url', models.CharField(blank=True, max_length=500)),
                ('link', models.URLField(blank=True, max_length=500)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
            ],
            options={
                'db_table': 'card_items',
                'ordering': ['-created_at'],
            },
        ),
        migrations.CreateModel(
            name='ContactMessage',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('name', models.CharField(max_length=255)),
                ('email', models.EmailField(max_length=254)),
                ('message', models.TextField()),
                ('is_read', models.BooleanField(default=False)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
            ],
            options={
                'db_table': 'contact_messages',
                'ordering': ['-created_at'],
                'abstract': False,
                'indexes': [models.Index(fields=['is_read'], name='contact_messages_unread_idx')],
            },
        ),
        migrations.CreateModel(
            name='Hero',
            fields=[
                ('id', models.PositiveSmallIntegerField(default=1, editable=False, primary_key=True, serialize=False)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('name', models.CharField(blank=True, max_length=255)),
                ('designation', models.CharField(blank=True, max_length=255)),
                ('photo_url', models.CharField(blank=True, help_text='Public URL of the profile photo', max_length=500)),
            ],
            options={
                'db_table': 'hero',
                'verbose_name_plural': 'hero',
            },
        ),
        migrations.CreateModel(
            name='Project',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('title', models.CharField(max_length=255)),
                ('description', models.TextField(blank=True)),
                ('image_url', models.CharField(blank=True, max_length=500)),
                ('github_link', models.URLField(blank=True, max_length=500)),
                ('demo_link', models.URLField(blank=True, max_length=500)),
                ('sort_order', models.IntegerField(blank=True, help_text='Manual position; projects without one fall back to recency', null=True)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
            ],
            options={
                'db_table': 'projects',
                'ordering': [models.OrderBy(models.F('sort_order'), nulls_last=True), '-created_at'],
            },
        ),
        migrations.CreateModel(
            name='ProjectFeedback',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('name', models.CharField(max_length=255)),
                ('email', models.EmailField(max_length=254)),
                ('message', models.TextField()),
                ('is_read', models.BooleanField(default=False)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('project_id', models.BigIntegerField(db_index=True)),
            ],
            options={
                'db_table': 'project_feedback',
                'ordering': ['-created_at'],
                'abstract': False,
                'verbose_name_plural': 'project feedback',
                'indexes': [models.Index(fields=['project_id', 'is_read'], name='project_feedback_unread_idx')],
            },
        ),
        migrations.CreateModel(
            name='Resume',
            fields=[
                ('id', models.PositiveSmallIntegerField(default=1, editable=False, primary_key=True, serialize=False)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('file_url', models.CharField(blank=True, help_text='Public URL of the resume file', max_length=500)),
            ],
            options={
                'db_table': 'resume',
            },
        ),
        migrations.CreateModel(
            name='TechStackEntry',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('name', models.CharField(max_length=100)),
                ('logo_url', models.CharField(blank=True, max_length=500)),
            ],
            options={
                'db_table': 'techstack',
                'ordering': ['id'],
                'verbose_name_plural': 'tech stack entries',
            },
        ),
    ]
