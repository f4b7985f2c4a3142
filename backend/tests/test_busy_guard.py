from __future__ import annotations

import pytest

from companion.services.busy import ActionGuard, ActionInProgress


def test_same_resource_is_rejected_while_held() -> None:
    guard = ActionGuard()

    with guard.hold("user-1", "library", "profile"):
        assert guard.is_busy("user-1", "profile")
        with pytest.raises(ActionInProgress) as exc_info:
            with guard.hold("user-1", "profile"):
                pass
        assert exc_info.value.resource == "profile"

    assert not guard.is_busy("user-1", "library")


def test_other_users_and_resources_are_independent() -> None:
    guard = ActionGuard()

    with guard.hold("user-1", "library"):
        with guard.hold("user-2", "library"):
            pass
        with guard.hold("user-1", "tasks"):
            assert guard.is_busy("user-1", "tasks")


def test_release_happens_on_error() -> None:
    guard = ActionGuard()

    with pytest.raises(RuntimeError):
        with guard.hold("user-1", "plan"):
            raise RuntimeError("boom")

    assert not guard.is_busy("user-1", "plan")


def test_partial_claim_is_not_kept() -> None:
    guard = ActionGuard()

    with guard.hold("user-1", "tasks"):
        with pytest.raises(ActionInProgress):
            with guard.hold("user-1", "plan", "tasks"):
                pass
        assert not guard.is_busy("user-1", "plan")


def test_plan_claim_conflicts_with_library_claim() -> None:
    guard = ActionGuard()

    with guard.hold("user-1", "library", "profile", "plan", "tasks"):
        with pytest.raises(ActionInProgress):
            with guard.hold("user-1", "library", "profile"):
                pass
