"""The seed_conduit management command."""

from __future__ import annotations

from io import StringIO

from django.core.management import call_command
from django.test import TestCase

from articles.models import Article
from comments.models import Comment
from users.models import User


class SeedConduitTests(TestCase):
    def _seed(self, *args):
        out = StringIO()
        call_command("seed_conduit", *args, stdout=out)
        return out.getvalue()

    def test_seed_creates_demo_data(self):
        output = self._seed()

        self.assertIn("Conduit seed completed.", output)
        self.assertEqual(User.objects.filter(username__in=["alice", "bob", "carol"]).count(), 3)
        self.assertEqual(Article.objects.count(), 3)
        bob = User.objects.get(username="bob")
        self.assertEqual(sorted(a.author.username for a in bob.feed()), ["alice", "alice"])
        self.assertEqual(bob.favorites.count(), 1)
        self.assertEqual(Comment.objects.count(), 1)
        self.assertTrue(User.objects.get(username="alice").check_password("alicepass"))

    def test_seed_is_idempotent(self):
        self._seed()
        self._seed()

        self.assertEqual(User.objects.count(), 3)
        self.assertEqual(Article.objects.count(), 3)
        self.assertEqual(Comment.objects.count(), 1)

    def test_reset_recreates_demo_data(self):
        self._seed()
        output = self._seed("--reset")

        self.assertIn("Seeded demo data cleared.", output)
        self.assertEqual(Article.objects.count(), 3)
        self.assertEqual(Article.objects.filter(slug__endswith="-2").count(), 0)
