from django.contrib import admin
from .models import (
    Hero, About, Resume, Card, CardItem, Project,
    ProjectFeedback, ContactMessage, TechStackEntry,
)


@admin.register(Hero)
class HeroAdmin(admin.ModelAdmin):
    list_display = ('name', 'designation', 'updated_at')
    readonly_fields = ('updated_at',)


@admin.register(About)
class AboutAdmin(admin.ModelAdmin):
    list_display = ('id', 'updated_at')
    readonly_fields = ('updated_at',)


@admin.register(Resume)
class ResumeAdmin(admin.ModelAdmin):
    list_display = ('file_url', 'updated_at')
    readonly_fields = ('updated_at',)


@admin.register(Card)
class CardAdmin(admin.ModelAdmin):
    list_display = ('title', 'type', 'uuid_id', 'created_at')
    list_filter = ('type',)
    search_fields = ('title', 'type')
    readonly_fields = ('uuid_id', 'created_at')


@admin.register(CardItem)
class CardItemAdmin(admin.ModelAdmin):
    list_display = ('title', 'card_id', 'card_uuid', 'created_at')
    search_fields = ('title', 'description')
    readonly_fields = ('uuid_id', 'created_at')


@admin.register(Project)
class ProjectAdmin(admin.ModelAdmin):
    list_display = ('title', 'sort_order', 'created_at')
    search_fields = ('title', 'description')
    readonly_fields = ('created_at',)


@admin.register(ProjectFeedback)
class ProjectFeedbackAdmin(admin.ModelAdmin):
    list_display = ('name', 'email', 'project_id', 'is_read', 'created_at')
    list_filter = ('is_read', 'created_at')
    search_fields = ('name', 'email', 'message')
    readonly_fields = ('created_at',)


@admin.register(ContactMessage)
class ContactMessageAdmin(admin.ModelAdmin):
    list_display = ('name', 'email', 'is_read', 'created_at')
    list_filter = ('is_read', 'created_at')
    search_fields = ('name', 'email', 'message')
    readonly_fields = ('created_at',)


@admin.register(TechStackEntry)
class TechStackEntryAdmin(admin.ModelAdmin):
    list_display = ('name', 'logo_url')
    search_fields = ('name',)
