"""
Test suite for JWT authentication and the current user endpoint.

This test module covers:
- Login with username and password
- Token refresh
- Login rate limiting
- Cached current user payload and its invalidation
"""

from django.contrib.auth import get_user_model
from django.core.cache import cache
from django.urls import reverse
from rest_framework import status
from rest_framework.test import APITestCase

from users.services import CurrentUserCacheService

User = get_user_model()


class UserAuthTests(APITestCase):
    """Login, refresh and throttling of the authentication endpoints."""

    def setUp(self):
        # Throttle counters live in the cache
        cache.clear()
        self.password = "S3cure-pass!"
        self.user = User.objects.create_user(
            username="ana", email="ana@example.com", password=self.password
        )
        self.login_url = reverse("users:login")
        self.refresh_url = reverse("users:token_refresh")

    def tearDown(self):
        cache.clear()

    def _login(self, password=None):
        return self.client.post(
            self.login_url,
            {"username": "ana", "password": password or self.password},
            format="json",
        )

    def test_login_returns_tokens_in_envelope(self):
        response = self._login()

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertIs(response.data["success"], True)
        self.assertIn("access", response.data["data"])
        self.assertIn("refresh", response.data["data"])

    def test_login_with_wrong_password(self):
        response = self._login(password="wrong")

        self.assertEqual(response.status_code, status.HTTP_401_UNAUTHORIZED)
        self.assertEqual(set(response.data), {"success", "error"})
        self.assertIs(response.data["success"], False)

    def test_login_missing_fields(self):
        response = self.client.post(self.login_url, {"username": "ana"}, format="json")

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data["error"], "password: This field is required.")

    def test_login_is_throttled(self):
        for _ in range(5):
            self._login(password="wrong")

        response = self._login()

        self.assertEqual(response.status_code, status.HTTP_429_TOO_MANY_REQUESTS)
        self.assertIs(response.data["success"], False)

    def test_refresh_issues_new_access_token(self):
        refresh = self._login().data["data"]["refresh"]

        response = self.client.post(self.refresh_url, {"refresh": refresh}, format="json")

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertIn("access", response.data["data"])

    def test_refresh_with_garbage_token(self):
        response = self.client.post(
            self.refresh_url, {"refresh": "not-a-token"}, format="json"
        )

        self.assertEqual(response.status_code, status.HTTP_401_UNAUTHORIZED)
        self.assertIs(response.data["success"], False)

    def test_bearer_token_authenticates_api(self):
        access = self._login().data["data"]["access"]
        self.client.credentials(HTTP_AUTHORIZATION=f"Bearer {access}")

        response = self.client.get(reverse("account-list"))

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data, {"success": True, "data": []})


class CurrentUserTests(APITestCase):
    """The ``me`` endpoint and its cache."""

    def setUp(self):
        cache.clear()
        self.user = User.objects.create_user(
            username="bruno", email="bruno@example.com", password="S3cure-pass!"
        )
        self.client.force_authenticate(user=self.user)
        self.me_url = reverse("users:me")
        self.cache_key = CurrentUserCacheService.cache_key(self.user.id)

    def tearDown(self):
        cache.clear()

    def test_requires_authentication(self):
        self.client.force_authenticate(user=None)

        response = self.client.get(self.me_url)

        self.assertEqual(response.status_code, status.HTTP_401_UNAUTHORIZED)

    def test_returns_profile_with_settings(self):
        response = self.client.get(self.me_url)

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        data = response.data["data"]
        self.assertEqual(data["username"], "bruno")
        self.assertEqual(data["settings"]["default_currency"], "BRL")

    def test_payload_is_cached(self):
        self.client.get(self.me_url)
        self.assertIsNotNone(cache.get(self.cache_key))

        User.objects.filter(pk=self.user.pk).update(first_name="Changed")
        response = self.client.get(self.me_url)

        self.assertEqual(response.data["data"]["first_name"], "")

    def test_settings_update_invalidates_cache(self):
        self.client.get(self.me_url)

        settings_id = self.user.settings.id
        self.client.patch(
            reverse("user-settings-detail", args=[settings_id]),
            {"language": "en"},
            format="json",
        )

        self.assertIsNone(cache.get(self.cache_key))
        # Fresh instance so the settings relation is reloaded
        self.client.force_authenticate(user=User.objects.get(pk=self.user.pk))
        response = self.client.get(self.me_url)
        self.assertEqual(response.data["data"]["settings"]["language"], "en")
