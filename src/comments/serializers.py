"""Serializers for article comments."""

from rest_framework import serializers

from users.serializers import ProfileSerializer
from .models import Comment


class CommentInputSerializer(serializers.ModelSerializer):
    class Meta:
        model = Comment
        fields = ["body"]


class CommentSerializer(serializers.ModelSerializer):
    author = serializers.SerializerMethodField()

    class Meta:
        """Comment payload; everything is read-only."""
        model = Comment
        fields = ["id", "body", "author", "created_at", "updated_at"]
        read_only_fields = fields

    def get_author(self, obj) -> dict:
        return ProfileSerializer(obj.author, context=self.context).data


__all__ = ["CommentInputSerializer", "CommentSerializer"]
