"""Serializers for registration, login, profile updates, and user payloads."""

from django.contrib.auth import get_user_model
from rest_framework import serializers
from rest_framework.exceptions import AuthenticationFailed

from core.exceptions import INVALID_CREDENTIALS
from .managers import UserManager

User = get_user_model()

# bcrypt only considers the first 72 bytes of a password.
PASSWORD_MAX_LENGTH = 72

# Path segments under /users/ that a username would shadow.
RESERVED_USERNAMES = frozenset({"me", "login", "refresh", "logout"})


def _other_users(instance=None):
    users = User.objects.all()
    return users.exclude(pk=instance.pk) if instance is not None else users


def check_username(value: str, instance=None) -> str:
    """Reject reserved and taken usernames; ``instance`` is the account being edited."""
    if value.lower() in RESERVED_USERNAMES:
        raise serializers.ValidationError("This username is reserved")
    if _other_users(instance).filter(username=value).exists():
        raise serializers.ValidationError("Username already taken")
    return value


def check_email(value: str, instance=None) -> str:
    # Login looks accounts up case-insensitively, so uniqueness must match.
    if _other_users(instance).filter(email__iexact=value).exists():
        raise serializers.ValidationError("Email already in use")
    return value


class RegisterSerializer(serializers.Serializer):
    """Validate and create a new user."""

    username = serializers.SlugField(max_length=150)
    email = serializers.EmailField()
    password = serializers.CharField(write_only=True, min_length=8, max_length=PASSWORD_MAX_LENGTH)
    bio = serializers.CharField(required=False, allow_blank=True)
    image = serializers.CharField(required=False, allow_blank=True, max_length=512)

    @staticmethod
    def validate_username(value):
        return check_username(value)

    @staticmethod
    def validate_email(value):
        return check_email(value)

    def create(self, validated_data):
        return User.objects.create_user(**validated_data)


class LoginSerializer(serializers.Serializer):
    """Authenticate a user via email/password using bcrypt verification."""

    email = serializers.EmailField()
    password = serializers.CharField(write_only=True, max_length=PASSWORD_MAX_LENGTH)

    def validate(self, attrs):
        """Authenticate credentials and attach the user to validated_data."""
        try:
            user = User.objects.get(email__iexact=attrs.get("email"))
        except User.DoesNotExist:
            raise AuthenticationFailed("Invalid email or password", code=INVALID_CREDENTIALS)

        # Inactive accounts get the same message so login does not reveal them.
        if not user.is_active or not UserManager.verify_password(user, attrs.get("password")):
            raise AuthenticationFailed("Invalid email or password", code=INVALID_CREDENTIALS)

        attrs["user"] = user
        return attrs


class UserSerializer(serializers.ModelSerializer):
    """The account owner's own view of their user record."""

    class Meta:
        model = User
        fields = ["id", "username", "email", "bio", "image"]
        read_only_fields = fields


class ProfileSerializer(serializers.ModelSerializer):
    """Public author profile; ``following`` is relative to the viewer in context."""

    following = serializers.SerializerMethodField()

    class Meta:
        model = User
        fields = ["username", "bio", "image", "following"]
        read_only_fields = fields

    def get_following(self, obj) -> bool:
        following_ids = self.context.get("following_ids")
        if following_ids is not None:
            return obj.pk in following_ids
        viewer = self.context.get("viewer")
        return bool(viewer and viewer.is_following(obj))


class UserUpdateSerializer(serializers.ModelSerializer):
    """Patchable profile fields; a new password is re-hashed with bcrypt."""

    username = serializers.SlugField(max_length=150, required=False)
    email = serializers.EmailField(required=False)
    password = serializers.CharField(
        write_only=True, required=False, min_length=8, max_length=PASSWORD_MAX_LENGTH
    )

    class Meta:
        model = User
        fields = ["username", "email", "password", "bio", "image"]
        extra_kwargs = {
            "bio": {"required": False, "allow_blank": True},
            "image": {"required": False, "allow_blank": True},
        }

    def validate_username(self, value):
        return check_username(value, self.instance)

    def validate_email(self, value):
        return check_email(value, self.instance)

    def update(self, instance, validated_data):
        password = validated_data.pop("password", None)
        if password is not None:
            instance.set_password(password)
        return super().update(instance, validated_data)
