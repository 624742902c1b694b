"""Ownership permission shared by article and comment views."""

from rest_framework import permissions


def is_author(obj, user) -> bool:
    """True when ``user`` wrote ``obj`` (articles and comments both carry ``author_id``)."""
    author_id = getattr(obj, "author_id", None)
    return author_id is not None and author_id == getattr(user, "pk", None)


class IsAuthorOrReadOnly(permissions.BasePermission):
    """Allow owner-only actions to the author alone.

    Views declare ``ownership_actions``, mapping each DRF action that requires
    ownership to the verb used in the denial message ("edit", "delete", ...).
    Actions missing from the map are allowed.
    """

    message = "You are not authorized to modify this resource."

    def has_object_permission(self, request, view, obj) -> bool:
        verb = getattr(view, "ownership_actions", {}).get(getattr(view, "action", None))
        if verb is None:
            return True
        if is_author(obj, request.user):
            return True
        # DRF reads ``message`` after a denial, so tailor it to the action.
        self.message = f"You are not authorized to {verb} this {obj._meta.verbose_name}."
        return False


__all__ = ["IsAuthorOrReadOnly", "is_author"]
