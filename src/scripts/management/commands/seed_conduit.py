"""Seed demo users, follows, tagged articles, favorites, and comments."""

from django.contrib.auth import get_user_model
from django.core.management.base import BaseCommand
from django.db import transaction

from articles.models import Article, Tag
from comments.models import Comment
from users.managers import UserManager

DEMO_USERS = {
    "alice": {"email": "alice@example.com", "password": "alicepass", "bio": "Writes about Python."},
    "bob": {"email": "bob@example.com", "password": "bobpass1", "bio": "Reads everything."},
    "carol": {"email": "carol@example.com", "password": "carolpass", "bio": ""},
}

DEMO_ARTICLES = [
    ("alice", "Getting Started with Django", "A short tour.", "Models, views, urls.", ["django", "python"]),
    ("alice", "Testing Views", "Notes on APIClient.", "Use APIClient for JSON endpoints.", ["testing"]),
    ("bob", "Why I Follow Authors", "Feeds explained.", "Following builds your feed.", ["meta"]),
]


def create_demo_users() -> dict:
    """Create the demo users if missing and return a username -> User map."""
    User = get_user_model()
    users = {}
    for username, fields in DEMO_USERS.items():
        user, _ = User.objects.get_or_create(
            username=username,
            defaults={
                "email": fields["email"],
                "bio": fields["bio"],
                "password_hash": UserManager.hash_password(fields["password"]),
            },
        )
        users[username] = user
    return users


def create_demo_content(users: dict) -> None:
    """Create follows, articles with tags, a favorite, and a comment."""
    users["bob"].follow(users["alice"])
    users["carol"].follow(users["bob"])

    for author, title, description, body, tags in DEMO_ARTICLES:
        article = Article.objects.filter(author=users[author], title=title).first()
        if article is None:
            article = Article.objects.create(
                author=users[author], title=title, description=description, body=body
            )
            article.set_tags(tags)

    first = Article.objects.filter(author=users["alice"]).order_by("created_at").first()
    users["bob"].favorite(first)
    Comment.objects.get_or_create(article=first, author=users["bob"], defaults={"body": "Great intro!"})


class Command(BaseCommand):
    """Management command to seed demo data for local development."""

    help = (
        "Seed demo users (alice, bob, carol), follows, tagged articles, favorites, "
        "and comments. Use --reset to clear previously seeded data first."
    )

    def add_arguments(self, parser):
        parser.add_argument(
            "--reset",
            action="store_true",
            help="Delete the demo users (their articles and comments cascade) before seeding.",
        )

    def handle(self, *args, **options):
        """Entrypoint for the management command."""
        with transaction.atomic():
            if options.get("reset"):
                self._reset_seeded_data()

            self.stdout.write("Seeding Conduit demo data...")
            users = create_demo_users()
            create_demo_content(users)
        self.stdout.write(self.style.SUCCESS("Conduit seed completed."))

    def _reset_seeded_data(self) -> None:
        self.stdout.write("Resetting previously seeded demo data...")
        get_user_model().objects.filter(username__in=list(DEMO_USERS)).delete()
        # Tags only referenced by the deleted articles are left orphaned.
        Tag.objects.filter(articles__isnull=True).delete()
        self.stdout.write(self.style.WARNING("Seeded demo data cleared."))
