"""sanitize_free_text tests — dates, long numbers and Title-Case names."""

import pytest

from triage_rulesets.sanitizer import sanitize_free_text


class TestDates:

    @pytest.mark.parametrize("text", [
        "seen on 3/14/2020",
        "seen on 03-14-20",
        "seen on 2020-03-14",
    ])
    def test_numeric_dates(self, text):
        """Slash, dash and ISO dates are replaced."""
        assert sanitize_free_text(text) == "seen on [date]"

    def test_month_name_date(self):
        """Month-name dates are replaced whole, year included."""
        assert sanitize_free_text("started March 14, 2020") == "started [date]"


class TestNumbers:

    def test_long_number(self):
        """Runs of 4+ digits become [number]."""
        assert sanitize_free_text("MRN 123456") == "MRN [number]"

    def test_short_number_kept(self):
        """Three-digit values (temperatures, doses) are kept."""
        assert sanitize_free_text("temp 102 for 3 days") == "temp 102 for 3 days"


class TestNames:

    def test_name_replaced(self):
        """One to three Title-Case words become a single [name]."""
        assert sanitize_free_text("called John Smith yesterday") == "called [name] yesterday"

    def test_preserved_words(self):
        """Clinical words, weekdays, months and pronouns survive."""
        text = "Chest pain since Monday, worse in June. She says it hurts."
        assert sanitize_free_text(text) == text

    def test_all_passes(self):
        """Dates, numbers and names in one string."""
        text = "saw Mary on 1/2/2023, chart 98765"
        assert sanitize_free_text(text) == "saw [name] on [date], chart [number]"

    def test_clinical_note_identifiers(self):
        """Name, date and record number in a clinical note each get a placeholder."""
        out = sanitize_free_text("John Doe met with cardiology on 03/14/2020 and MRN 12345678")
        assert "[name]" in out
        assert "[date]" in out
        assert "[number]" in out
        assert "John" not in out
        assert "12345678" not in out

    def test_safe_sentence_unchanged(self):
        """A sentence without identifiers comes back exactly as given."""
        text = "She felt better on Monday after visiting the clinic"
        assert sanitize_free_text(text) == text


class TestEdgeCases:

    @pytest.mark.parametrize("text", [None, ""])
    def test_empty_passthrough(self, text):
        """None and empty input are returned unchanged."""
        assert sanitize_free_text(text) == text

    def test_idempotent(self):
        """Sanitizing sanitized text is a no-op."""
        once = sanitize_free_text("Jane Doe, 4/5/2021, id 55555 - Dr Adams")
        assert sanitize_free_text(once) == once

    def test_placeholders_not_rematched(self):
        """Placeholder tokens are lowercase, so the name pass skips them."""
        assert sanitize_free_text("[date] [number] [name]") == "[date] [number] [name]"
