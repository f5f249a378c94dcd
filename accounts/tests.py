from django.contrib.auth import get_user_model
from django.contrib.auth.models import AnonymousUser, Permission
from django.test import TestCase
from rest_framework.exceptions import NotFound
from rest_framework.test import APIClient, APIRequestFactory

from accounts.permissions import HasRequiredPermissions
from accounts.utils import api_response, custom_exception_handler


class ApiEnvelopeTests(TestCase):
    def test_api_response_defaults(self):
        response = api_response(message="ok")
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.data, {"success": True, "message": "ok", "data": {}, "errors": []})

    def test_exception_handler_wraps_detail_and_code(self):
        response = custom_exception_handler(NotFound("Missing thing."), {})
        self.assertEqual(response.status_code, 404)
        self.assertFalse(response.data["success"])
        self.assertEqual(response.data["message"], "Missing thing.")
        self.assertEqual(response.data["errors"], [{"code": "not_found"}])

    def test_exception_handler_ignores_unknown_errors(self):
        self.assertIsNone(custom_exception_handler(RuntimeError("boom"), {}))


class HasRequiredPermissionsTests(TestCase):
    class View:
        required_permissions = ["payroll.view_payrollrecord"]

    def setUp(self):
        self.factory = APIRequestFactory()
        self.permission = HasRequiredPermissions()
        User = get_user_model()
        self.user = User.objects.create_user(username="clerk", password="pass")

    def _request(self, user):
        request = self.factory.get("/api/payroll/")
        request.user = user
        return request

    def test_anonymous_user_is_refused(self):
        self.assertFalse(self.permission.has_permission(self._request(AnonymousUser()), self.View()))

    def test_user_needs_every_listed_permission(self):
        self.assertFalse(self.permission.has_permission(self._request(self.user), self.View()))

        self.user.user_permissions.add(Permission.objects.get(codename="view_payrollrecord"))
        user = get_user_model().objects.get(pk=self.user.pk)
        self.assertTrue(self.permission.has_permission(self._request(user), self.View()))

    def test_superuser_always_passes(self):
        admin = get_user_model().objects.create_superuser(username="root", password="pass", email="root@example.com")
        self.assertTrue(self.permission.has_permission(self._request(admin), self.View()))


class TokenAuthenticationTests(TestCase):
    def setUp(self):
        self.client = APIClient()
        get_user_model().objects.create_superuser(username="root", password="s3cret-pass", email="root@example.com")

    def test_bearer_token_grants_api_access(self):
        response = self.client.post(
            "/api/auth/token/",
            {"username": "root", "password": "s3cret-pass"},
            format="json",
        )
        self.assertEqual(response.status_code, 200)
        access = response.json()["access"]

        self.assertEqual(self.client.get("/api/payroll/").status_code, 401)
        self.client.credentials(HTTP_AUTHORIZATION=f"Bearer {access}")
        self.assertEqual(self.client.get("/api/payroll/").status_code, 200)
