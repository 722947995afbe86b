"""Unit tests for splitting CIS text into display sections."""
from wagerdesk.services.analysis.cis_sections import FALLBACK_TITLE, split_cis_sections


class TestCisSections:

    def test_splits_standard_headings(self):
        cis = (
            "KEY STATS: Home side averages 2.1 goals.\n\n"
            "RECENT FORM: WWDLW at home.\n\n"
            "INJURIES: Striker doubtful.\n\n"
            "MARKET: Home price looks long."
        )
        assert split_cis_sections(cis) == [
            {"title": "Key Stats", "content": "Home side averages 2.1 goals."},
            {"title": "Form & Pattern", "content": "WWDLW at home."},
            {"title": "Injury Insights", "content": "Striker doubtful."},
            {"title": "Market Evaluation", "content": "Home price looks long."},
        ]

    def test_each_pattern_contributes_once(self):
        cis = "KEY STATS: First block.\n\nSTATISTICS: Second block."
        assert split_cis_sections(cis) == [{"title": "Key Stats", "content": "First block."}]

    def test_unstructured_text_falls_back_to_one_section(self):
        cis = "a short note with no headings"
        assert split_cis_sections(cis) == [{"title": FALLBACK_TITLE, "content": cis}]

    def test_empty_text(self):
        assert split_cis_sections("") == [{"title": FALLBACK_TITLE, "content": ""}]
