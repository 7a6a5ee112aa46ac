"""Unit tests for BypassAuthProvider

The directory is mocked; the provider must never look at credentials.
"""

from unittest.mock import MagicMock, PropertyMock

import pytest

from monarch_auth.core.auth import BypassAuthProvider
from monarch_auth.domain.models import (
    Admitted,
    AuthenticationRequest,
    Deferred,
    Rejected,
    RejectionReason,
    UserRecord,
)

pytestmark = pytest.mark.unit


@pytest.fixture
def provider(directory):
    return BypassAuthProvider(directory, exempt_identifiers={"opsadmin", "support"})


class TestSupports:
    def test_supports_username_password(self, provider):
        assert provider.supports("username_password") is True

    def test_rejects_other_kinds(self, provider):
        assert provider.supports("bearer_token") is False


class TestAllowListedIdentifier:
    """Allow-listed identifiers are admitted without a password check"""

    @pytest.mark.asyncio
    @pytest.mark.parametrize("credential", [None, "", "wrong-password", "monarch123!"])
    async def test_admitted_regardless_of_credential(self, provider, directory, make_user, credential):
        user = make_user("opsadmin", login_fail_count=999)
        directory.find_user_by_identifier.return_value = user

        decision = await provider.authenticate(AuthenticationRequest("opsadmin", credential))

        assert isinstance(decision, Admitted)
        assert decision.principal.user is user
        assert decision.principal.authorities == user.authorities
        assert decision.principal.provider == "bypass"
        directory.find_user_by_identifier.assert_awaited_once_with("opsadmin")

    @pytest.mark.asyncio
    async def test_never_reads_stored_password(self, provider, directory):
        """Accessing the stored hash fails the test"""
        user = MagicMock(spec=UserRecord)
        user.user_no = 7
        user.authorities = frozenset({"ROLE_USER"})
        type(user).password_hash = PropertyMock(
            side_effect=AssertionError("bypass provider read the stored password")
        )
        directory.find_user_by_identifier.return_value = user

        decision = await provider.authenticate(AuthenticationRequest("support", "anything"))

        assert isinstance(decision, Admitted)

    @pytest.mark.asyncio
    async def test_unknown_user_rejected_not_deferred(self, provider, directory):
        """Allow-listed but absent: USER_NOT_FOUND, no deferral"""
        directory.find_user_by_identifier.return_value = None

        decision = await provider.authenticate(AuthenticationRequest("opsadmin", "x"))

        assert isinstance(decision, Rejected)
        assert decision.reason is RejectionReason.USER_NOT_FOUND


    @pytest.mark.asyncio
    async def test_inactive_user_rejected(self, provider, directory, make_user):
        """Allow-listed but inactive: USER_NOT_FOUND, not admitted"""
        directory.find_user_by_identifier.return_value = make_user("opsadmin", is_active=False)

        decision = await provider.authenticate(AuthenticationRequest("opsadmin", None))

        assert isinstance(decision, Rejected)
        assert decision.reason is RejectionReason.USER_NOT_FOUND

class TestOtherIdentifiers:
    @pytest.mark.asyncio
    @pytest.mark.parametrize("identifier", ["jdoe", "OPSADMIN", "opsadmin ", ""])
    async def test_deferred(self, provider, directory, identifier):
        decision = await provider.authenticate(AuthenticationRequest(identifier, "x"))

        assert decision is Deferred
        directory.find_user_by_identifier.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_empty_allow_list_defers_everything(self, directory):
        provider = BypassAuthProvider(directory, exempt_identifiers=[])

        decision = await provider.authenticate(AuthenticationRequest("opsadmin", "x"))

        assert decision is Deferred
