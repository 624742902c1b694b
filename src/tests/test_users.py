"""Registration, login, token refresh/logout, and user show/update."""

from __future__ import annotations

from datetime import datetime, timedelta, timezone
from unittest import mock

import jwt
from django.conf import settings
from django.contrib.messages import get_messages
from django.test import TestCase, override_settings
from rest_framework.test import APIClient

from articles.models import Article
from users.models import User
from users.services import BlocklistUnavailable, TokenService
from tests.utils import DEFAULT_PASSWORD, FakeRedisMixin, auth_client, browser_client, create_user


def _login(client: APIClient, email: str, password: str = DEFAULT_PASSWORD):
    return client.post("/users/login/", {"user": {"email": email, "password": password}}, format="json")


class RegistrationTests(FakeRedisMixin, TestCase):
    def test_register_creates_user_with_hashed_password(self):
        response = APIClient().post(
            "/users/",
            {"user": {"username": "writer", "email": "writer@example.com", "password": "Password123"}},
            format="json",
        )
        body = response.json()

        self.assertEqual(response.status_code, 201)
        self.assertEqual(body["user"]["username"], "writer")
        self.assertEqual(body["message"], "User created successfully. Please log in.")
        self.assertNotIn("password", body["user"])
        user = User.objects.get(username="writer")
        self.assertNotEqual(user.password_hash, "Password123")
        self.assertTrue(user.check_password("Password123"))

    def test_register_accepts_flat_payload(self):
        response = APIClient().post(
            "/users/", {"username": "flat", "email": "flat@example.com", "password": "Password123"}, format="json"
        )
        self.assertEqual(response.status_code, 201)

    def test_duplicate_email_and_short_password_are_validation_errors(self):
        create_user("taken")
        response = APIClient().post(
            "/users/",
            {"user": {"username": "other", "email": "taken@example.com", "password": "short"}},
            format="json",
        )
        errors = response.json()["errors"]

        self.assertEqual(response.status_code, 422)
        self.assertIn("email: Email already in use", errors)
        self.assertTrue(any(error.startswith("password:") for error in errors))

    def test_reserved_and_non_slug_usernames_are_rejected(self):
        for username in ("me", "Login", "refresh", "has/slash", "two words"):
            response = APIClient().post(
                "/users/",
                {"user": {"username": username, "email": "x@example.com", "password": "Password123"}},
                format="json",
            )
            self.assertEqual(response.status_code, 422, username)
            self.assertTrue(response.json()["errors"][0].startswith("username:"), username)
        self.assertFalse(User.objects.filter(email="x@example.com").exists())

    def test_duplicate_email_check_ignores_case(self):
        create_user("taken")
        response = APIClient().post(
            "/users/",
            {"user": {"username": "other", "email": "TAKEN@example.com", "password": "Password123"}},
            format="json",
        )
        self.assertEqual(response.status_code, 422)

    def test_browser_registration_redirects_home_with_notice(self):
        response = browser_client().post(
            "/users/", {"username": "web", "email": "web@example.com", "password": "Password123"}
        )

        self.assertEqual(response.status_code, 302)
        self.assertEqual(response["Location"], "/")
        self.assertEqual(
            [str(m) for m in get_messages(response.wsgi_request)],
            ["User created successfully. Please log in."],
        )


class LoginTests(FakeRedisMixin, TestCase):
    @classmethod
    def setUpTestData(cls):
        cls.user = create_user("alice")

    def test_login_returns_tokens_usable_as_bearer(self):
        response = _login(APIClient(), "alice@example.com")
        body = response.json()

        self.assertEqual(response.status_code, 200)
        self.assertEqual(body["user"]["username"], "alice")
        self.assertTrue(body["token"])
        self.assertTrue(body["refresh"])

        client = APIClient()
        client.credentials(HTTP_AUTHORIZATION=f"Bearer {body['token']}")
        me = client.get("/users/me/")
        self.assertEqual(me.status_code, 200)
        self.assertEqual(me.json()["user"]["email"], "alice@example.com")

    def test_wrong_password_is_unauthorized(self):
        response = _login(APIClient(), "alice@example.com", "wrong-password")

        self.assertEqual(response.status_code, 401)
        self.assertEqual(response.json(), {"errors": ["Invalid email or password"]})

    def test_unknown_email_gets_the_same_message(self):
        response = _login(APIClient(), "nobody@example.com")

        self.assertEqual(response.status_code, 401)
        self.assertEqual(response.json(), {"errors": ["Invalid email or password"]})

    def test_inactive_user_cannot_log_in(self):
        create_user("sleepy", is_active=False)
        self.assertEqual(_login(APIClient(), "sleepy@example.com").status_code, 401)

    def test_browser_login_starts_a_session(self):
        client = browser_client()
        response = client.post("/users/login/", {"email": "alice@example.com", "password": DEFAULT_PASSWORD})

        self.assertEqual(response.status_code, 302)
        self.assertEqual(response["Location"], "/users/me/")
        self.assertEqual([str(m) for m in get_messages(response.wsgi_request)], ["Logged in successfully"])

        page = client.get("/users/me/")
        self.assertEqual(page.status_code, 200)
        self.assertIn(b"alice@example.com", page.content)

    def test_browser_login_failure_rerenders_with_alert(self):
        response = browser_client().post("/users/login/", {"email": "alice@example.com", "password": "nope-nope"})

        self.assertEqual(response.status_code, 401)
        self.assertEqual([str(m) for m in get_messages(response.wsgi_request)], ["Invalid email or password"])


class TokenLifecycleTests(FakeRedisMixin, TestCase):
    @classmethod
    def setUpTestData(cls):
        cls.user = create_user("alice")

    def test_refresh_issues_new_tokens_once(self):
        _, refresh = TokenService.generate_tokens(self.user)

        first = APIClient().post("/users/refresh/", {"refresh": refresh}, format="json")
        self.assertEqual(first.status_code, 200)
        self.assertTrue(first.json()["token"])

        reused = APIClient().post("/users/refresh/", {"refresh": refresh}, format="json")
        self.assertEqual(reused.status_code, 401)

    def test_access_token_cannot_be_used_to_refresh(self):
        access, _ = TokenService.generate_tokens(self.user)
        response = APIClient().post("/users/refresh/", {"refresh": access}, format="json")
        self.assertEqual(response.status_code, 401)

    def test_refresh_requires_a_token(self):
        response = APIClient().post("/users/refresh/", {}, format="json")
        self.assertEqual(response.status_code, 401)

    def test_logout_revokes_access_token(self):
        client = auth_client(self.user)

        self.assertEqual(client.post("/users/logout/").status_code, 204)
        response = client.get("/users/me/")
        self.assertEqual(response.status_code, 401)
        self.assertEqual(
            response.json(),
            {"errors": ["Authentication credentials were not provided or are invalid, or the token was revoked."]},
        )

    def test_logout_requires_authentication(self):
        self.assertEqual(APIClient().post("/users/logout/").status_code, 401)

    def test_expired_token_is_rejected(self):
        past = datetime.now(timezone.utc) - timedelta(hours=2)
        token = jwt.encode(
            {
                "sub": str(self.user.id),
                "jti": "expired-jti",
                "type": "access",
                "iat": int(past.timestamp()),
                "exp": int((past + timedelta(minutes=5)).timestamp()),
            },
            settings.SECRET_KEY,
            algorithm=TokenService.ALGORITHM,
        )
        client = APIClient()
        client.credentials(HTTP_AUTHORIZATION=f"Bearer {token}")

        self.assertEqual(client.get("/users/me/").status_code, 401)

    def test_garbage_token_is_rejected(self):
        client = APIClient()
        client.credentials(HTTP_AUTHORIZATION="Bearer not-a-jwt")
        self.assertEqual(client.get("/articles/").status_code, 401)

    def test_blocklist_outage_fails_closed(self):
        client = auth_client(self.user)
        with mock.patch.object(TokenService, "is_token_blocked", side_effect=BlocklistUnavailable("down")):
            response = client.get("/users/me/")

        self.assertEqual(response.status_code, 503)
        self.assertEqual(response.json(), {"errors": ["Authentication service unavailable (blocklist)."]})


class UserDetailTests(FakeRedisMixin, TestCase):
    @classmethod
    def setUpTestData(cls):
        cls.alice = create_user("alice", bio="Writes things")
        cls.bob = create_user("bob")
        Article.objects.create(author=cls.alice, title="Alice Post", body="b")

    def test_show_me_requires_login(self):
        response = APIClient().get("/users/me/")

        self.assertEqual(response.status_code, 401)
        self.assertEqual(response.json(), {"errors": ["User not found"]})

    def test_browser_show_me_redirects_home_with_alert(self):
        response = browser_client().get("/users/me/")

        self.assertEqual(response.status_code, 302)
        self.assertEqual(response["Location"], "/")
        self.assertEqual([str(m) for m in get_messages(response.wsgi_request)], ["User not found"])

    def test_show_me_lists_own_articles(self):
        body = auth_client(self.alice).get("/users/me/").json()

        self.assertEqual(body["user"]["username"], "alice")
        self.assertEqual([a["slug"] for a in body["articles"]], ["alice-post"])

    def test_show_other_user_by_username_and_id(self):
        by_name = auth_client(self.bob).get("/users/alice/").json()
        by_id = APIClient().get(f"/users/{self.alice.id}/").json()

        self.assertEqual(by_name["user"], {"username": "alice", "bio": "Writes things", "image": "", "following": False})
        self.assertEqual(by_id["user"]["username"], "alice")
        self.assertNotIn("email", by_id["user"])

    def test_show_unknown_user_is_404(self):
        response = APIClient().get("/users/ghost/")

        self.assertEqual(response.status_code, 404)
        self.assertEqual(response.json(), {"errors": ["User not found"]})

    def test_update_own_profile(self):
        response = auth_client(self.alice).put(
            "/users/me/", {"user": {"bio": "Updated bio", "password": "NewPassword1"}}, format="json"
        )

        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json()["user"]["bio"], "Updated bio")
        self.assertEqual(_login(APIClient(), "alice@example.com", "NewPassword1").status_code, 200)

    def test_update_other_user_is_forbidden(self):
        response = auth_client(self.bob).patch("/users/alice/", {"user": {"bio": "hacked"}}, format="json")

        self.assertEqual(response.status_code, 403)
        self.assertEqual(response.json(), {"errors": ["You are not authorized to update this profile."]})
        self.alice.refresh_from_db()
        self.assertEqual(self.alice.bio, "Writes things")

    def test_update_to_taken_username_is_validation_error(self):
        response = auth_client(self.bob).patch("/users/me/", {"user": {"username": "alice"}}, format="json")
        self.assertEqual(response.status_code, 422)

    def test_update_to_case_variant_of_taken_email_is_rejected(self):
        response = auth_client(self.bob).patch("/users/me/", {"user": {"email": "ALICE@example.com"}}, format="json")

        self.assertEqual(response.status_code, 422)
        self.assertEqual(response.json(), {"errors": ["email: Email already in use"]})
        self.bob.refresh_from_db()
        self.assertEqual(self.bob.email, "bob@example.com")
        self.assertEqual(_login(APIClient(), "alice@example.com").status_code, 200)

    def test_update_keeps_own_email_in_another_case(self):
        response = auth_client(self.bob).patch(
            "/users/me/", {"user": {"email": "Bob@Example.com", "username": "bob"}}, format="json"
        )
        self.assertEqual(response.status_code, 200)

    def test_update_to_reserved_username_is_rejected(self):
        response = auth_client(self.bob).patch("/users/me/", {"user": {"username": "logout"}}, format="json")

        self.assertEqual(response.status_code, 422)
        self.assertEqual(response.json(), {"errors": ["username: This username is reserved"]})

    def test_anonymous_update_is_unauthorized(self):
        response = APIClient().put("/users/me/", {"user": {"bio": "x"}}, format="json")
        self.assertEqual(response.status_code, 401)

    def test_browser_anonymous_update_redirects_with_unable_to_save(self):
        response = browser_client().put("/users/me/", {"bio": "x"})

        self.assertEqual(response.status_code, 302)
        self.assertEqual(response["Location"], "/")
        self.assertEqual([str(m) for m in get_messages(response.wsgi_request)], ["Unable to save"])

    @override_settings(DEBUG_AUTH_ERRORS=True)
    def test_debug_auth_errors_expose_token_failure_reason(self):
        _, refresh = TokenService.generate_tokens(self.alice)
        APIClient().post("/users/refresh/", {"refresh": refresh}, format="json")

        response = APIClient().post("/users/refresh/", {"refresh": refresh}, format="json")
        self.assertEqual(response.json(), {"errors": ["Refresh token revoked"]})
