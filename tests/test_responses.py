"""
Tests for the work-authorization answer table
"""
import pytest

from dialogs.responses import (
    CPT_TEXT,
    ON_CAMPUS_TEXT,
    OPT_TEXT,
    find_response,
    normalize_key,
    select_response,
)


class TestSelectResponse:

    @pytest.mark.parametrize("work_type, expected", [
        ("on campus", ON_CAMPUS_TEXT),
        ("cpt", CPT_TEXT),
        ("opt", OPT_TEXT),
    ])
    def test_f1_work_types_have_fixed_answers(self, work_type, expected):
        text = select_response("f1", work_type)
        assert text == expected
        assert text.strip()

    def test_answers_are_distinct(self):
        answers = {select_response("f1", work) for work in ("on campus", "cpt", "opt")}
        assert len(answers) == 3

    @pytest.mark.parametrize("work_type", ["opt", "cpt", "anything", None])
    def test_other_visa_gets_coming_soon_with_visa_name(self, work_type):
        text = select_response("h1b", work_type)
        assert "h1b" in text
        assert "coming soon" in text

    def test_unknown_f1_work_type_is_explicit(self):
        """F1 with a work type we don't cover still answers, never None"""
        text = select_response("f1", "stem extension")
        assert text is not None
        assert "stem extension" in text
        assert "F1" in text

    def test_spelling_variants_are_matched(self):
        assert select_response("F-1", "On-Campus") == ON_CAMPUS_TEXT
        assert select_response(" F1 ", "OPT") == OPT_TEXT


class TestFindResponse:

    def test_known_entry(self):
        entry = find_response("f1", "cpt")
        assert entry is not None
        assert entry.visa_type == "f1"
        assert entry.work_type == "cpt"
        assert entry.text == CPT_TEXT

    def test_missing_entry_is_none(self):
        assert find_response("f1", "h1b transfer") is None
        assert find_response("j1", "opt") is None
        assert find_response(None, None) is None


class TestNormalizeKey:

    @pytest.mark.parametrize("raw, expected", [
        ("F-1", "f1"),
        ("H-1B", "h1b"),
        ("on_campus", "on campus"),
        ("On-Campus", "on campus"),
        ("  cpt ", "cpt"),
        ("", ""),
        (None, ""),
    ])
    def test_normalize(self, raw, expected):
        assert normalize_key(raw) == expected
