from __future__ import annotations

import gc

import pytest

from draftstream.base.cancellation import CancellationToken, CancelledError


def test_first_reason_wins():
    token = CancellationToken()
    assert token.cancelled is False and token.reason is None  # nosec B101
    token.cancel("user stop")
    token.cancel("shutdown")
    assert token.cancelled and token.reason == "user stop"  # nosec B101


def test_parent_cascades_to_children_not_back():
    parent = CancellationToken()
    child = parent.child()
    grandchild = child.child()
    sibling = parent.child()

    child.cancel("child only")
    assert not parent.cancelled and not sibling.cancelled  # nosec B101
    assert grandchild.cancelled and grandchild.reason == "child only"  # nosec B101

    parent.cancel("all")
    assert sibling.cancelled and sibling.reason == "all"  # nosec B101
    assert child.reason == "child only"  # nosec B101


def test_child_of_cancelled_parent_starts_cancelled():
    parent = CancellationToken()
    parent.cancel("gone")
    child = parent.child()
    assert child.cancelled and child.reason == "gone"  # nosec B101


def test_raise_if_cancelled():
    token = CancellationToken()
    token.raise_if_cancelled()
    token.cancel()
    with pytest.raises(CancelledError, match="stream cancelled"):
        token.raise_if_cancelled()


def test_cancelled_error_carries_reason():
    token = CancellationToken()
    token.cancel("window closed")
    with pytest.raises(CancelledError) as info:
        token.raise_if_cancelled()
    assert info.value.reason == "window closed" and str(info.value) == "window closed"  # nosec B101


def test_finished_children_are_not_retained():
    parent = CancellationToken()
    kept = parent.child()
    for _ in range(50):
        parent.child()
    gc.collect()
    assert parent.live_children == 1  # nosec B101
    parent.cancel("stop")
    assert kept.cancelled  # nosec B101
