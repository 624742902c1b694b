"""Comment endpoints nested under an article slug."""

from __future__ import annotations

from django.contrib.messages import get_messages
from django.test import TestCase
from rest_framework.test import APIClient

from articles.models import Article
from comments.models import Comment
from tests.utils import FakeRedisMixin, auth_client, browser_client, create_user


class CommentTests(FakeRedisMixin, TestCase):
    @classmethod
    def setUpTestData(cls):
        cls.alice = create_user("alice")
        cls.bob = create_user("bob")
        cls.article = Article.objects.create(author=cls.alice, title="Test Title", body="Test Body")
        cls.other_article = Article.objects.create(author=cls.alice, title="Other", body="Body")
        cls.comment = Comment.objects.create(article=cls.article, author=cls.bob, body="First!")

    def test_list_comments_for_article(self):
        response = APIClient().get("/articles/test-title/comments/")
        comments = response.json()["comments"]

        self.assertEqual(response.status_code, 200)
        self.assertEqual(len(comments), 1)
        self.assertEqual(comments[0]["body"], "First!")
        self.assertEqual(comments[0]["author"]["username"], "bob")

    def test_list_for_missing_article_is_404(self):
        response = APIClient().get("/articles/missing/comments/")

        self.assertEqual(response.status_code, 404)
        self.assertEqual(response.json(), {"errors": ["Article not found"]})

    def test_create_comment_as_viewer(self):
        response = auth_client(self.alice).post(
            "/articles/test-title/comments/", {"comment": {"body": "Thanks for reading"}}, format="json"
        )
        comment = response.json()["comment"]

        self.assertEqual(response.status_code, 201)
        self.assertEqual(comment["body"], "Thanks for reading")
        self.assertEqual(comment["author"]["username"], "alice")
        self.assertEqual(self.article.comments.count(), 2)

    def test_create_requires_authentication(self):
        response = APIClient().post("/articles/test-title/comments/", {"comment": {"body": "anon"}}, format="json")

        self.assertEqual(response.status_code, 401)
        self.assertFalse(Comment.objects.filter(body="anon").exists())

    def test_blank_body_is_validation_error(self):
        response = auth_client(self.bob).post(
            "/articles/test-title/comments/", {"comment": {"body": ""}}, format="json"
        )

        self.assertEqual(response.status_code, 422)
        self.assertTrue(response.json()["errors"][0].startswith("body:"))

    def test_author_deletes_comment(self):
        response = auth_client(self.bob).delete(f"/articles/test-title/comments/{self.comment.pk}/")

        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json(), {"message": "Comment deleted successfully"})
        self.assertFalse(Comment.objects.filter(pk=self.comment.pk).exists())

    def test_non_author_cannot_delete_comment(self):
        response = auth_client(self.alice).delete(f"/articles/test-title/comments/{self.comment.pk}/")

        self.assertEqual(response.status_code, 403)
        self.assertEqual(response.json(), {"errors": ["You are not authorized to delete this comment."]})
        self.assertTrue(Comment.objects.filter(pk=self.comment.pk).exists())

    def test_comment_must_belong_to_the_article_in_the_path(self):
        response = auth_client(self.bob).delete(f"/articles/other/comments/{self.comment.pk}/")

        self.assertEqual(response.status_code, 404)
        self.assertEqual(response.json(), {"errors": ["Comment not found"]})
        self.assertTrue(Comment.objects.filter(pk=self.comment.pk).exists())

    def test_browser_comment_redirects_to_article(self):
        response = browser_client(self.alice).post("/articles/test-title/comments/", {"body": "From a form"})

        self.assertEqual(response.status_code, 302)
        self.assertEqual(response["Location"], "/articles/test-title/")
        self.assertEqual([str(m) for m in get_messages(response.wsgi_request)], ["Comment added."])

    def test_browser_forbidden_delete_redirects_to_article(self):
        response = browser_client(self.alice).delete(f"/articles/test-title/comments/{self.comment.pk}/")

        self.assertEqual(response.status_code, 302)
        self.assertEqual(response["Location"], "/articles/test-title/")
