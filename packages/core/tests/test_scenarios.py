"""Tests for carrying checked QA scenarios forward across reworded reviews."""

import itertools

from sherlockqa_core.scenarios import is_carried_forward, normalize_scenario


def test_normalize_strips_case_and_punctuation():
    assert normalize_scenario("  Test LOGIN, with `bad` password!  ") == "test login with bad password"


def test_exact_match_ignores_case_and_punctuation():
    assert is_carried_forward("Test login!", {"test login"}) is True


def test_containment_candidate_longer():
    checked = {"test login with invalid credentials"}
    assert is_carried_forward("test login with invalid credentials and bad password", checked) is True


def test_containment_candidate_shorter():
    assert is_carried_forward("Submit empty form", {"Submit empty form twice in a row"}) is True


def test_word_overlap_above_threshold():
    # 3 of the 4 words of the shorter side overlap: 0.75 >= 0.7
    assert is_carried_forward("upload large avatar image", {"upload a large avatar file"}) is True


def test_word_overlap_below_threshold():
    # 2 of 4 words overlap: 0.5 < 0.7
    assert is_carried_forward("delete account while offline", {"delete draft while saving"}) is False


def test_no_overlap():
    assert is_carried_forward("B", {"A"}) is False


def test_empty_checked_set():
    assert is_carried_forward("anything", set()) is False


def test_threshold_is_overridable():
    checked = {"delete draft while saving"}
    assert is_carried_forward("delete account while offline", checked, overlap_threshold=0.5) is True


def test_blank_strings_never_match():
    assert is_carried_forward("!!!", {"test login"}) is False
    assert is_carried_forward("test login", {"..."}) is False


def test_order_independent():
    checked = ["unrelated thing", "Verify logout clears session", "another one"]
    results = {
        is_carried_forward("verify logout clears the session", perm) for perm in itertools.permutations(checked)
    }
    assert results == {True}


def test_backtick_wrapped_item_matches():
    assert is_carried_forward("Retry on timeout", {"`Retry on timeout`"}) is True


def test_normalize_keeps_non_ascii_letters():
    assert normalize_scenario("Créer un compte - déjà vérifié!") == "créer un compte  déjà vérifié"
    assert is_carried_forward("Créer un compte", ["créer un compte"])
