"""Tests for the organization/service status machine."""

from datetime import datetime, timedelta, timezone
from types import SimpleNamespace

import pytest

from orgportal.exceptions import InvalidStatusError, StatusConflictError
from orgportal.state_machine import (
    STATUSES,
    VALID_TRANSITIONS,
    can_transition,
    is_promotion,
    parse_status,
    transition,
    trigger_for,
    validate_transition,
)


def _entity(status: str) -> SimpleNamespace:
    yesterday = datetime.now(timezone.utc) - timedelta(days=1)
    return SimpleNamespace(
        status=status,
        institution_name="Divisional Secretariat",
        created_at=yesterday,
        updated_at=yesterday,
    )


class TestCanTransition:
    """Every pair of distinct statuses is reachable."""

    @pytest.mark.parametrize("current", STATUSES)
    @pytest.mark.parametrize("target", STATUSES)
    def test_all_pairs_allowed(self, current, target):
        assert can_transition(current, target) is True

    def test_unknown_current(self):
        assert can_transition("archived", "pending") is False

    def test_unknown_target(self):
        assert can_transition("pending", "archived") is False

    def test_no_terminal_state(self):
        for status in STATUSES:
            assert len(VALID_TRANSITIONS[status]) == 2


class TestValidateTransition:
    def test_valid_does_not_raise(self):
        validate_transition("approved", "rejected")

    def test_invalid_raises(self):
        with pytest.raises(InvalidStatusError):
            validate_transition("pending", "deleted")


class TestParseStatus:
    def test_normalises_case_and_whitespace(self):
        assert parse_status("  Approved ") == "approved"

    @pytest.mark.parametrize("value", ["", "done", None, 3])
    def test_rejects_unknown(self, value):
        with pytest.raises(InvalidStatusError) as exc_info:
            parse_status(value)
        assert exc_info.value.error_type == "invalid_status"


class TestTransition:
    def test_sets_status_and_updated_at_only(self):
        entity = _entity("pending")
        created = entity.created_at
        before = entity.updated_at

        previous = transition(entity, "approved")

        assert previous == "pending"
        assert entity.status == "approved"
        assert entity.updated_at > before
        assert entity.created_at == created
        assert entity.institution_name == "Divisional Secretariat"

    def test_same_status_refreshes_updated_at(self):
        entity = _entity("rejected")
        before = entity.updated_at

        previous = transition(entity, "rejected")

        assert previous == "rejected"
        assert entity.status == "rejected"
        assert entity.updated_at > before

    def test_invalid_target_leaves_entity_untouched(self):
        entity = _entity("pending")
        before = entity.updated_at

        with pytest.raises(InvalidStatusError):
            transition(entity, "published")

        assert entity.status == "pending"
        assert entity.updated_at == before

    def test_observed_status_mismatch(self):
        entity = _entity("approved")

        with pytest.raises(StatusConflictError) as exc_info:
            transition(entity, "rejected", observed="pending")

        assert exc_info.value.current == "approved"
        assert entity.status == "approved"

    def test_observed_status_match(self):
        entity = _entity("approved")
        transition(entity, "rejected", observed="approved")
        assert entity.status == "rejected"

    def test_round_trip_through_all_states(self):
        entity = _entity("approved")
        for target in ("rejected", "pending", "approved"):
            transition(entity, target)
        assert entity.status == "approved"
        assert entity.institution_name == "Divisional Secretariat"


class TestTriggers:
    def test_named_triggers(self):
        assert trigger_for("pending", "approved") == "review_approved"
        assert trigger_for("approved", "rejected") == "approval_revoked"
        assert trigger_for("rejected", "approved") == "rejection_overturned"

    def test_self_transition_trigger(self):
        assert trigger_for("pending", "pending") == "status_reaffirmed"


class TestIsPromotion:
    def test_approved_with_move(self):
        assert is_promotion("approved", "move") is True

    def test_approved_without_move(self):
        assert is_promotion("approved", None) is False

    def test_rejected_with_move(self):
        assert is_promotion("rejected", "move") is False
