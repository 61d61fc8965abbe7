# mx_core/iam/api/auth.py

from __future__ import annotations

from datetime import timedelta
from typing import Any

from django.conf import settings
from drf_spectacular.utils import extend_schema
from rest_framework import status
from rest_framework.permissions import AllowAny, IsAuthenticated
from rest_framework.response import Response
from rest_framework.views import APIView
from rest_framework_simplejwt.serializers import TokenObtainPairSerializer, TokenRefreshSerializer

from mx_core.iam.api.schema_serializers import DetailResponseSerializer, LoginRequestSerializer


def _seconds(value: Any) -> int:
    """
    JWT lifetime setting in seconds (timedelta or a number of seconds).
    0 means a session cookie.
    """
    if isinstance(value, timedelta):
        return int(value.total_seconds())
    try:
        return int(value)
    except (TypeError, ValueError):
        return 0


def _jwt_cfg() -> dict:
    return getattr(settings, "SIMPLE_JWT", {}) or {}


def _cookie_names() -> tuple[str, str]:
    cfg = _jwt_cfg()
    return cfg.get("AUTH_COOKIE", "mx_access"), cfg.get("AUTH_COOKIE_REFRESH", "mx_refresh")


def _set_auth_cookies(response: Response, *, access: str, refresh: str) -> None:
    cfg = _jwt_cfg()
    access_name, refresh_name = _cookie_names()

    common = {
        "httponly": True,
        "secure": bool(cfg.get("AUTH_COOKIE_SECURE", False)),
        "samesite": cfg.get("AUTH_COOKIE_SAMESITE", "Lax"),
        "path": "/",
    }
    response.set_cookie(
        access_name,
        access,
        max_age=_seconds(cfg.get("ACCESS_TOKEN_LIFETIME", timedelta(minutes=10))),
        **common,
    )
    response.set_cookie(
        refresh_name,
        refresh,
        max_age=_seconds(cfg.get("REFRESH_TOKEN_LIFETIME", timedelta(days=14))),
        **common,
    )


def _clear_auth_cookies(response: Response) -> None:
    access_name, refresh_name = _cookie_names()
    response.delete_cookie(access_name, path="/")
    response.delete_cookie(refresh_name, path="/")


class LoginView(APIView):
    permission_classes = [AllowAny]
    authentication_classes: list = []

    @extend_schema(request=LoginRequestSerializer, responses={200: DetailResponseSerializer}, tags=["IAM"])
    def post(self, request):
        serializer = TokenObtainPairSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        res = Response({"detail": "login ok"}, status=status.HTTP_200_OK)
        _set_auth_cookies(
            res,
            access=serializer.validated_data["access"],
            refresh=serializer.validated_data["refresh"],
        )
        return res


class RefreshView(APIView):
    permission_classes = [AllowAny]
    authentication_classes: list = []

    @extend_schema(request=None, responses={200: DetailResponseSerializer}, tags=["IAM"])
    def post(self, request):
        _, refresh_cookie_name = _cookie_names()
        refresh = request.COOKIES.get(refresh_cookie_name) or request.data.get("refresh")

        serializer = TokenRefreshSerializer(data={"refresh": refresh})
        serializer.is_valid(raise_exception=True)

        res = Response({"detail": "refreshed"}, status=status.HTTP_200_OK)
        _set_auth_cookies(
            res,
            access=serializer.validated_data["access"],
            refresh=serializer.validated_data.get("refresh", refresh),
        )
        return res


class LogoutView(APIView):
    permission_classes = [IsAuthenticated]

    @extend_schema(request=None, responses={200: DetailResponseSerializer}, tags=["IAM"])
    def post(self, request):
        res = Response({"detail": "logged out"}, status=status.HTTP_200_OK)
        _clear_auth_cookies(res)
        return res
