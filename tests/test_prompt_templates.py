"""Tests for category prompt selection."""

import pytest

from curhatin.config.prompt_templates import (
    CRISIS_REFERRAL,
    SYSTEM_PROMPT_CAREER,
    SYSTEM_PROMPT_FAMILY,
    SYSTEM_PROMPT_GENERAL,
    SYSTEM_PROMPT_ROMANCE,
    SYSTEM_PROMPT_SELF_DEVELOPMENT,
    get_system_prompt,
)


@pytest.mark.parametrize(
    "category, addendum",
    [
        ("karir", SYSTEM_PROMPT_CAREER),
        ("career", SYSTEM_PROMPT_CAREER),
        ("asmara", SYSTEM_PROMPT_ROMANCE),
        ("love", SYSTEM_PROMPT_ROMANCE),
        ("keluarga", SYSTEM_PROMPT_FAMILY),
        ("family", SYSTEM_PROMPT_FAMILY),
        ("pengembangan diri", SYSTEM_PROMPT_SELF_DEVELOPMENT),
        ("growth", SYSTEM_PROMPT_SELF_DEVELOPMENT),
    ],
)
def test_known_category_appends_addendum(category, addendum):
    assert get_system_prompt(category) == f"{SYSTEM_PROMPT_GENERAL}\n\n{addendum}"


@pytest.mark.parametrize("category", ["KARIR", "  Career  ", "Pengembangan Diri"])
def test_lookup_ignores_case_and_padding(category):
    assert get_system_prompt(category) != SYSTEM_PROMPT_GENERAL


@pytest.mark.parametrize("category", [None, "", "general", "astrology"])
def test_missing_or_unknown_category_is_general(category):
    assert get_system_prompt(category) == SYSTEM_PROMPT_GENERAL


def test_general_prompt_carries_crisis_referral():
    assert CRISIS_REFERRAL in SYSTEM_PROMPT_GENERAL
    assert "{CRISIS_REFERRAL}" not in SYSTEM_PROMPT_GENERAL
