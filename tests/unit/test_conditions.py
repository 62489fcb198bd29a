"""Tests for condition utilities."""

from __future__ import annotations

from s3_website_operator.utils.conditions import (
    clear_condition,
    get_condition,
    set_apply_failed_condition,
    set_drift_detected_condition,
    set_provider_not_ready_condition,
    set_ready_condition,
    set_unsupported_target_condition,
    update_condition,
)


class TestUpdateCondition:
    """Test cases for update_condition."""

    def test_add_new_condition(self):
        """Test adding a condition to an empty list."""
        result = update_condition([], "Ready", "True", "Ready", "All good", observed_generation=3)

        assert len(result) == 1
        assert result[0]["type"] == "Ready"
        assert result[0]["status"] == "True"
        assert result[0]["observedGeneration"] == 3
        assert "lastTransitionTime" in result[0]

    def test_input_not_mutated(self):
        """Test the original list is left alone."""
        conditions = [{"type": "Ready", "status": "False", "lastTransitionTime": "t0"}]
        update_condition(conditions, "Ready", "True", "Ready", "ok")
        assert conditions == [{"type": "Ready", "status": "False", "lastTransitionTime": "t0"}]

    def test_same_status_keeps_transition_time(self):
        """Test the transition time only moves when the status changes."""
        conditions = [{"type": "Ready", "status": "True", "message": "old", "lastTransitionTime": "t0"}]
        result = update_condition(conditions, "Ready", "True", "Ready", "new")
        assert result[0]["lastTransitionTime"] == "t0"
        assert result[0]["message"] == "new"

    def test_status_change_updates_transition_time(self):
        """Test a status flip records a new transition time."""
        conditions = [{"type": "Ready", "status": "True", "lastTransitionTime": "t0"}]
        result = update_condition(conditions, "Ready", "False", "NotReady", "broken")
        assert result[0]["lastTransitionTime"] != "t0"

    def test_order_preserved(self):
        """Test replacing a condition keeps its position."""
        conditions = [{"type": "A", "status": "True"}, {"type": "Ready", "status": "True"}, {"type": "B", "status": "True"}]
        result = update_condition(conditions, "Ready", "False", "NotReady", "x")
        assert [cond["type"] for cond in result] == ["A", "Ready", "B"]


class TestConditionHelpers:
    """Test cases for the typed condition setters."""

    def test_ready_true(self):
        """Test setting Ready to True."""
        result = set_ready_condition([], True, "Website configuration in sync", 2)
        assert result[0]["status"] == "True"
        assert result[0]["reason"] == "Ready"
        assert result[0]["observedGeneration"] == 2

    def test_ready_false(self):
        """Test setting Ready to False."""
        result = set_ready_condition([], False, "Apply failed")
        assert result[0]["status"] == "False"
        assert result[0]["reason"] == "NotReady"

    def test_failure_conditions(self):
        """Test failure conditions are True with their own reason."""
        for setter, condition_type in [
            (set_provider_not_ready_condition, "ProviderNotReady"),
            (set_apply_failed_condition, "ApplyFailed"),
            (set_unsupported_target_condition, "UnsupportedTarget"),
        ]:
            result = setter([], "message")
            assert result[0]["type"] == condition_type
            assert result[0]["status"] == "True"
            assert result[0]["reason"] == condition_type

    def test_drift_message_lists_attributes(self):
        """Test the drift message names attributes in sorted order."""
        result = set_drift_detected_condition([], ["routing_rules", "index_document"])
        assert result[0]["message"] == "Remote configuration drifted on: index_document, routing_rules"

    def test_clear_and_get(self):
        """Test clearing a condition removes only that type."""
        conditions = set_apply_failed_condition(set_ready_condition([], False, "x"), "boom")
        assert get_condition(conditions, "ApplyFailed") is not None

        cleared = clear_condition(conditions, "ApplyFailed")

        assert get_condition(cleared, "ApplyFailed") is None
        assert get_condition(cleared, "Ready")["status"] == "False"
