"""
Tests for the Role Directory and Account Transitions

Tests covering:
1. Registration always yields a plain user, duplicates return the existing record
2. Unknown identities resolve to role user
3. Role changes and fraud flags are admin-only
4. Role re-resolution: promotion and demotion apply to existing tokens
"""

from __future__ import annotations

import threading

import pytest

from dreamkeys import (
    ForbiddenError,
    InvalidArgumentError,
    NotFoundError,
    Role,
    UnauthorizedError,
)
from dreamkeys.identity.accounts import parse_role
from dreamkeys.identity import directory as directory_module
from dreamkeys.identity.directory import UserRecord


# =============================================================================
# Registration
# =============================================================================


class TestRegistration:
    """Tests for first sign-in."""

    def test_new_identity_is_plain_user(self, marketplace):
        record, created = marketplace.accounts.register("New@Example.com", name="New")

        assert created is True
        assert record.role == Role.USER
        assert record.email == "new@example.com"
        assert record.is_fraud is False

    def test_duplicate_registration_returns_existing(self, marketplace):
        first, _ = marketplace.accounts.register("dup@example.com")
        second, created = marketplace.accounts.register("DUP@example.com")

        assert created is False
        assert second.user_id == first.user_id

    def test_malformed_email_rejected(self, marketplace):
        with pytest.raises(InvalidArgumentError):
            marketplace.accounts.register("not-an-email")

    def test_user_record_round_trips_through_dict(self):
        record = UserRecord(user_id="USR-0123456789AB", email="a@b.com", role=Role.AGENT)

        assert UserRecord.from_dict(record.to_dict()) == record


class TestRoleResolution:
    """Tests for current_role."""

    def test_unknown_identity_is_user(self, marketplace):
        assert marketplace.directory.current_role("ghost@example.com") == Role.USER

    def test_role_ranking(self):
        assert Role.ADMIN.at_least(Role.AGENT)
        assert Role.AGENT.at_least(Role.USER)
        assert not Role.USER.at_least(Role.AGENT)
        assert not Role.AGENT.at_least(Role.ADMIN)

    @pytest.mark.parametrize("value", ["user", "AGENT", " admin "])
    def test_parse_role_accepts_known_roles(self, value):
        assert parse_role(value).value == value.strip().lower()

    @pytest.mark.parametrize("value", [None, "", "superuser"])
    def test_parse_role_rejects_unknown(self, value):
        with pytest.raises(InvalidArgumentError):
            parse_role(value)


# =============================================================================
# Admin Transitions
# =============================================================================


class TestAdminTransitions:
    """Tests for set_role, mark_fraud and delete_user."""

    def test_admin_promotes_user_to_agent(self, marketplace, admin_token, buyer_token):
        buyer = marketplace.directory.lookup("buyer@example.com")
        updated = marketplace.accounts.set_role(admin_token, buyer.user_id, "agent")

        assert updated.role == Role.AGENT
        assert marketplace.directory.current_role("buyer@example.com") == Role.AGENT

    def test_non_admin_cannot_change_roles(self, marketplace, agent_token, buyer_token):
        buyer = marketplace.directory.lookup("buyer@example.com")

        with pytest.raises(ForbiddenError):
            marketplace.accounts.set_role(agent_token, buyer.user_id, "admin")

    def test_anonymous_cannot_change_roles(self, marketplace, buyer_token):
        buyer = marketplace.directory.lookup("buyer@example.com")

        with pytest.raises(UnauthorizedError):
            marketplace.accounts.set_role(None, buyer.user_id, "admin")

    def test_invalid_role_rejected(self, marketplace, admin_token, buyer_token):
        buyer = marketplace.directory.lookup("buyer@example.com")

        with pytest.raises(InvalidArgumentError):
            marketplace.accounts.set_role(admin_token, buyer.user_id, "owner")

    def test_unknown_user_not_found(self, marketplace, admin_token):
        with pytest.raises(NotFoundError):
            marketplace.accounts.set_role(admin_token, "USR-000000000000", "agent")

    def test_malformed_user_id_rejected(self, marketplace, admin_token):
        with pytest.raises(InvalidArgumentError):
            marketplace.accounts.mark_fraud(admin_token, "12345")

    def test_mark_fraud_is_idempotent(self, marketplace, admin_token, agent_token):
        agent = marketplace.directory.lookup("agent@dreamkeys.com")
        first = marketplace.accounts.mark_fraud(admin_token, agent.user_id)
        second = marketplace.accounts.mark_fraud(admin_token, agent.user_id)

        assert first.is_fraud and second.is_fraud
        assert marketplace.directory.is_in_good_standing("agent@dreamkeys.com") is False

    def test_delete_user(self, marketplace, admin_token, buyer_token):
        buyer = marketplace.directory.lookup("buyer@example.com")
        removed = marketplace.accounts.delete_user(admin_token, buyer.user_id)

        assert removed.email == "buyer@example.com"
        assert marketplace.directory.lookup("buyer@example.com") is None

    def test_list_users_is_admin_only(self, marketplace, admin_token, buyer_token):
        emails = {u.email for u in marketplace.accounts.list_users(admin_token)}
        assert {"admin@dreamkeys.com", "buyer@example.com"} <= emails

        with pytest.raises(ForbiddenError):
            marketplace.accounts.list_users(buyer_token)

    def test_lookup_self_or_admin(self, marketplace, admin_token, buyer_token, agent_token):
        assert marketplace.accounts.lookup(buyer_token, "buyer@example.com").email == "buyer@example.com"
        assert marketplace.accounts.lookup(admin_token, "buyer@example.com").email == "buyer@example.com"

        with pytest.raises(ForbiddenError):
            marketplace.accounts.lookup(agent_token, "buyer@example.com")

    def test_concurrent_fraud_flag_survives_role_change(
        self, marketplace, agent_token, monkeypatch
    ):
        agent = marketplace.directory.lookup("agent@dreamkeys.com")
        real_replace = directory_module.replace
        flagger = threading.Thread(target=marketplace.directory.flag_fraud, args=(agent.user_id,))

        def replace_with_flag_in_flight(record, **changes):
            # Role change has read the record; the fraud flag lands meanwhile
            if flagger.ident is None:
                flagger.start()
                flagger.join(timeout=0.2)
            return real_replace(record, **changes)

        monkeypatch.setattr(directory_module, "replace", replace_with_flag_in_flight)
        marketplace.directory.assign_role(agent.user_id, Role.USER)
        flagger.join()

        final = marketplace.directory.get(agent.user_id)
        assert final.role == Role.USER
        assert final.is_fraud is True


# =============================================================================
# Role Re-Resolution
# =============================================================================


class TestRoleReResolution:
    """A token issued before a role change follows the new role."""

    def test_promotion_applies_to_existing_token(self, marketplace, admin_token, buyer_token):
        with pytest.raises(ForbiddenError):
            marketplace.properties.create(buyer_token, {"title": "Before promotion"})

        buyer = marketplace.directory.lookup("buyer@example.com")
        marketplace.accounts.set_role(admin_token, buyer.user_id, "agent")

        prop = marketplace.properties.create(buyer_token, {"title": "After promotion"})
        assert prop.agent_email == "buyer@example.com"

    def test_demotion_applies_to_existing_token(self, marketplace, admin_token, identity, listing):
        second_admin = identity("second.admin@dreamkeys.com", Role.ADMIN)
        marketplace.properties.verify(second_admin, listing.property_id, "verified")

        record = marketplace.directory.lookup("second.admin@dreamkeys.com")
        marketplace.accounts.set_role(admin_token, record.user_id, "user")

        with pytest.raises(ForbiddenError):
            marketplace.properties.verify(second_admin, listing.property_id, "rejected")

    def test_embedded_role_is_not_trusted(self, marketplace, buyer_token, listing):
        forged = marketplace.tokens.issue("buyer@example.com", role="admin")

        with pytest.raises(ForbiddenError):
            marketplace.properties.verify(forged, listing.property_id, "verified")
