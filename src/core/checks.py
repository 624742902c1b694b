"""System checks for ownership-protected views."""

from django.core.checks import Error, register

from core.permissions import IsAuthorOrReadOnly


@register()
def author_views_declare_ownership_actions(app_configs, **kwargs):
    """Ensure views using IsAuthorOrReadOnly declare which actions need ownership.

    The permission allows any action missing from ``ownership_actions``.
    """
    errors: list[Error] = []

    # Import here to avoid circular imports at module load time.
    from articles.views import ArticleViewSet
    from comments.views import CommentViewSet

    for view_cls in (ArticleViewSet, CommentViewSet):
        if IsAuthorOrReadOnly not in getattr(view_cls, "permission_classes", []):
            continue
        if not getattr(view_cls, "ownership_actions", None):
            errors.append(
                Error(
                    f"{view_cls.__name__} uses IsAuthorOrReadOnly but does not "
                    f"define ownership_actions.",
                    obj=view_cls,
                    id="core.E001",
                )
            )

    return errors
