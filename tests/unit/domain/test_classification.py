"""Tests for the blocked/not-blocked verdict policy."""

from __future__ import annotations

import pytest

from adornot.domain import classification
from adornot.domain.classification import FailureKind, is_blocked


class TestIsBlocked:
    def test_response_is_never_blocked(self) -> None:
        assert is_blocked(None) is False

    @pytest.mark.parametrize(
        "kind",
        [
            FailureKind.TIMED_OUT,
            FailureKind.CANNOT_FIND_HOST,
            FailureKind.CANNOT_CONNECT,
            FailureKind.CONNECTION_LOST,
            FailureKind.DNS_LOOKUP_FAILED,
            FailureKind.SECURE_CONNECTION_FAILED,
        ],
    )
    def test_filtering_signatures_are_blocked(self, kind: FailureKind) -> None:
        assert is_blocked(kind) is True

    def test_untrusted_certificate_is_not_blocked(self) -> None:
        assert is_blocked(FailureKind.CERTIFICATE_UNTRUSTED) is False

    def test_offline_follows_named_constant(self) -> None:
        assert (
            is_blocked(FailureKind.NOT_CONNECTED_TO_INTERNET)
            is classification.NO_CONNECTIVITY_IS_BLOCKED
        )
        assert classification.NO_CONNECTIVITY_IS_BLOCKED is False

    @pytest.mark.parametrize("kind", [FailureKind.UNKNOWN, FailureKind.INVALID_URL])
    def test_unlisted_kinds_default_to_blocked(self, kind: FailureKind) -> None:
        assert kind not in classification.VERDICTS
        assert is_blocked(kind) is True

    @pytest.mark.parametrize("kind", list(FailureKind))
    def test_every_kind_has_a_boolean_verdict(self, kind: FailureKind) -> None:
        assert isinstance(is_blocked(kind), bool)


def test_failure_kind_values_are_snake_case() -> None:
    for kind in FailureKind:
        assert kind.value == kind.name.lower()
