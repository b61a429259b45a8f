"""Unit tests for plan definitions and limit checks."""

import pytest

from flipdeck.billing.plans import (
    MEGABYTE,
    PLANS,
    exceeds_file_size,
    file_size_message,
    flipbook_limit_message,
    flipbook_quota_reached,
    get_plan,
)


class TestPlanDefinitions:
    def test_free_limits(self):
        free = PLANS["free"]
        assert free.max_file_size_mb == 10
        assert free.max_flipbooks == 3
        assert free.price == 0

    def test_pro_limits(self):
        pro = PLANS["pro"]
        assert pro.max_file_size_mb == 50
        assert pro.max_flipbooks is None
        assert (pro.price, pro.currency) == (999, "INR")

    def test_max_file_size_bytes(self):
        assert PLANS["free"].max_file_size_bytes == 10 * MEGABYTE

    @pytest.mark.parametrize("role", [None, "", "enterprise"])
    def test_unknown_roles_are_free(self, role):
        assert get_plan(role).name == "free"


class TestFileSize:
    def test_exactly_at_limit_allowed(self):
        assert exceeds_file_size(PLANS["free"], 10 * MEGABYTE) is False

    def test_one_byte_over(self):
        assert exceeds_file_size(PLANS["free"], 10 * MEGABYTE + 1) is True

    def test_pro_accepts_twenty_mb(self):
        assert exceeds_file_size(PLANS["pro"], 20 * MEGABYTE) is False

    def test_free_message_mentions_upgrade(self):
        assert file_size_message(PLANS["free"]) == "File size must be less than 10MB (upgrade to Pro for 50MB)"

    def test_pro_message(self):
        assert file_size_message(PLANS["pro"]) == "File size must be less than 50MB"


class TestFlipbookQuota:
    @pytest.mark.parametrize("count,reached", [(0, False), (2, False), (3, True), (7, True)])
    def test_free_quota(self, count, reached):
        assert flipbook_quota_reached(PLANS["free"], count) is reached

    def test_pro_is_unlimited(self):
        assert flipbook_quota_reached(PLANS["pro"], 10_000) is False

    def test_limit_message(self):
        assert flipbook_limit_message(PLANS["free"]) == (
            "Free plan limit reached (3 flipbooks). Upgrade to Pro for unlimited flipbooks."
        )
