"""Article request schema and response payloads."""

from django.db import transaction
from rest_framework import serializers

from users.serializers import ProfileSerializer
from .models import Article


def viewer_context(viewer) -> dict:
    """Serializer context carrying the viewer plus their favorite/follow ids.

    Loading both id sets once keeps list payloads from issuing a query per
    article for the ``favorited`` and ``following`` flags.
    """
    if viewer is None:
        return {"viewer": None, "favorite_ids": frozenset(), "following_ids": frozenset()}
    return {
        "viewer": viewer,
        "favorite_ids": frozenset(viewer.favorites.values_list("pk", flat=True)),
        "following_ids": frozenset(viewer.following.values_list("pk", flat=True)),
    }


class ArticleInputSerializer(serializers.ModelSerializer):
    """Fields a client may set on create/update; author, slug and counts are server-owned."""

    tag_list = serializers.ListField(
        child=serializers.CharField(max_length=64), required=False, allow_empty=True
    )

    class Meta:
        model = Article
        fields = ["title", "description", "body", "tag_list"]
        extra_kwargs = {"description": {"required": False, "allow_blank": True}}

    def validate(self, attrs):
        """Reject client-supplied favorite counts instead of silently dropping them."""
        if "favorites_count" in getattr(self, "initial_data", {}):
            raise serializers.ValidationError(
                {"favorites_count": "This field is read-only; it is derived from favorites."}
            )
        return super().validate(attrs)

    def create(self, validated_data):
        tag_list = validated_data.pop("tag_list", [])
        with transaction.atomic():
            article = Article.objects.create(**validated_data)
            article.set_tags(tag_list)
        return article

    def update(self, instance, validated_data):
        tag_list = validated_data.pop("tag_list", None)
        with transaction.atomic():
            for field, value in validated_data.items():
                setattr(instance, field, value)
            instance.save()
            if tag_list is not None:
                instance.set_tags(tag_list)
        return instance


class ArticleSerializer(serializers.ModelSerializer):
    """Article payload with viewer-relative ``favorited`` and ``author.following`` flags."""

    tag_list = serializers.ListField(child=serializers.CharField(), read_only=True)
    favorites_count = serializers.IntegerField(read_only=True)
    favorited = serializers.SerializerMethodField()
    author = serializers.SerializerMethodField()

    class Meta:
        model = Article
        fields = [
            "slug",
            "title",
            "description",
            "body",
            "tag_list",
            "favorited",
            "favorites_count",
            "author",
            "created_at",
            "updated_at",
        ]
        read_only_fields = fields

    def get_favorited(self, obj) -> bool:
        return obj.pk in self.context.get("favorite_ids", ())

    def get_author(self, obj) -> dict:
        return ProfileSerializer(obj.author, context=self.context).data


__all__ = ["ArticleInputSerializer", "ArticleSerializer", "viewer_context"]
