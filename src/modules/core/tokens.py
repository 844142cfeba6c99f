"""SimpleJWT token endpoint that stamps a ``role`` claim on the token pair."""

from __future__ import annotations

from rest_framework_simplejwt.serializers import TokenObtainPairSerializer
from rest_framework_simplejwt.views import TokenObtainPairView

from modules.core.permissions import role_for


class PharmacyTokenObtainPairSerializer(TokenObtainPairSerializer):
    @classmethod
    def get_token(cls, user):
        token = super().get_token(user)
        token["role"] = role_for(user)
        token["username"] = user.get_username()
        return token


class PharmacyTokenObtainPairView(TokenObtainPairView):
    serializer_class = PharmacyTokenObtainPairSerializer
