"""
Serializers for portfolio content models.
"""
from rest_framework import serializers

from .models import (
    Hero, About, Resume, Card, CardItem, Project,
    ProjectFeedback, ContactMessage, TechStackEntry,
)
from .resolver import public_id
from .uploads import UPLOAD_TARGETS


class HeroSerializer(serializers.ModelSerializer):
    class Meta:
        model = Hero
        fields = ('id', 'name', 'designation', 'photo_url', 'updated_at')
        read_only_fields = ('id', 'updated_at')


class AboutSerializer(serializers.ModelSerializer):
    class Meta:
        model = About
        fields = ('id', 'content', 'updated_at')
        read_only_fields = ('id', 'updated_at')


class ResumeSerializer(serializers.ModelSerializer):
    class Meta:
        model = Resume
        fields = ('id', 'file_url', 'updated_at')
        read_only_fields = ('id', 'updated_at')


class CardSerializer(serializers.ModelSerializer):
    """Serializer for Card model; public_id is the identifier for shared links."""
    public_id = serializers.SerializerMethodField()

    class Meta:
        model = Card
        fields = ('id', 'uuid_id', 'public_id', 'title', 'type', 'image_url', 'created_at')
        read_only_fields = ('id', 'uuid_id', 'public_id', 'created_at')

    def get_public_id(self, obj):
        return public_id(obj)


class CardItemSerializer(serializers.ModelSerializer):
    public_id = serializers.SerializerMethodField()

    class Meta:
        model = CardItem
        fields = (
            'id', 'uuid_id', 'public_id', 'card_id', 'card_uuid',
            'title', 'description', 'image_url', 'link', 'created_at'
        )
        read_only_fields = ('id', 'uuid_id', 'public_id', 'card_id', 'card_uuid', 'created_at')

    def get_public_id(self, obj):
        return public_id(obj)


class CardDetailSerializer(serializers.Serializer):
    """A card together with the items reachable through the requested identifier."""
    card = CardSerializer()
    items = CardItemSerializer(many=True)


class ProjectSerializer(serializers.ModelSerializer):
    class Meta:
        model = Project
        fields = (
            'id', 'title', 'description', 'image_url',
            'github_link', 'demo_link', 'sort_order', 'created_at'
        )
        read_only_fields = ('id', 'created_at')


class ProjectFeedbackSerializer(serializers.ModelSerializer):
    class Meta:
        model = ProjectFeedback
        fields = ('id', 'project_id', 'name', 'email', 'message', 'is_read', 'created_at')
        read_only_fields = fields


class ProjectFeedbackSubmitSerializer(serializers.ModelSerializer):
    """Visitor feedback form; the project comes from the URL."""

    class Meta:
        model = ProjectFeedback
        fields = ('name', 'email', 'message')


class ContactMessageSerializer(serializers.ModelSerializer):
    class Meta:
        model = ContactMessage
        fields = ('id', 'name', 'email', 'message', 'is_read', 'created_at')
        read_only_fields = fields


class ContactMessageSubmitSerializer(serializers.ModelSerializer):
    class Meta:
        model = ContactMessage
        fields = ('name', 'email', 'message')


class TechStackEntrySerializer(serializers.ModelSerializer):
    class Meta:
        model = TechStackEntry
        fields = ('id', 'name', 'logo_url')
        read_only_fields = ('id',)


class UploadSerializer(serializers.Serializer):
    """Standalone upload: a file and the target it belongs to."""
    file = serializers.FileField()
    target = serializers.ChoiceField(choices=list(UPLOAD_TARGETS))
