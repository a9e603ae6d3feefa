"""Tests for modules/directory/models.py."""

import pytest
from datetime import timedelta
from pydantic import ValidationError

from modules.directory.models import (
    Credential,
    DirectoryUser,
    DirectoryUserSummary,
    TokenGrant,
)
from tests.conftest import FIXED_NOW, user_payload


class TestCredential:
    def test_from_grant_subtracts_safety_margin(self):
        """Expiry should be issue time + ttl - margin."""
        grant = TokenGrant(access_token="abc", expires_in=7200)
        credential = Credential.from_grant(grant, FIXED_NOW, timedelta(seconds=60))
        assert credential.token == "abc"
        assert credential.expires_at == FIXED_NOW + timedelta(seconds=7140)

    def test_is_valid_before_expiry(self):
        credential = Credential(token="abc", expires_at=FIXED_NOW + timedelta(seconds=1))
        assert credential.is_valid(FIXED_NOW) is True

    def test_is_invalid_at_expiry(self):
        """A credential is unusable from its expiry instant on."""
        credential = Credential(token="abc", expires_at=FIXED_NOW)
        assert credential.is_valid(FIXED_NOW) is False

    def test_short_ttl_is_immediately_invalid(self):
        """A ttl shorter than the margin should never be served."""
        grant = TokenGrant(access_token="abc", expires_in=30)
        credential = Credential.from_grant(grant, FIXED_NOW, timedelta(seconds=60))
        assert credential.is_valid(FIXED_NOW) is False

    def test_is_frozen(self):
        credential = Credential(token="abc", expires_at=FIXED_NOW)
        with pytest.raises(ValidationError):
            credential.token = "other"


class TestTokenGrant:
    def test_rejects_empty_token(self):
        with pytest.raises(ValidationError):
            TokenGrant(access_token="", expires_in=7200)

    def test_rejects_negative_ttl(self):
        with pytest.raises(ValidationError):
            TokenGrant(access_token="abc", expires_in=-1)

    def test_ignores_extra_fields(self):
        grant = TokenGrant.model_validate(
            {"access_token": "abc", "expires_in": 10, "created_at": 1700000000}
        )
        assert grant.token_type == "bearer"


class TestDirectoryUser:
    def test_reads_active_flag_alias(self):
        """The payload key is 'active?'."""
        summary = DirectoryUserSummary.model_validate(user_payload(active=True))
        assert summary.active is True

    def test_active_defaults_to_false(self):
        payload = user_payload()
        del payload["active?"]
        assert DirectoryUserSummary.model_validate(payload).active is False

    def test_full_payload(self):
        user = DirectoryUser.model_validate(user_payload("jdoe"))
        assert user.login == "jdoe"
        assert user.wallet == 120
        assert user.correction_point == 4
        assert user.image.versions.small.endswith("small_jdoe.jpg")
        assert user.projects_users[0]["project"]["slug"] == "libft"

    def test_details_default_to_empty(self):
        user = DirectoryUser.model_validate(user_payload(with_details=False))
        assert user.wallet is None
        assert user.cursus_users == []
        assert user.projects_users == []

    def test_requires_login(self):
        with pytest.raises(ValidationError):
            DirectoryUserSummary.model_validate({"id": 1, "login": ""})
