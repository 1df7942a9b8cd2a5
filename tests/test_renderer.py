"""
Tests for lictool.renderer
==========================

Test Organization
-----------------
- TestRender: Substitution results
- TestMissingFields: Batch reporting of missing required fields
- TestUnfilledPolicy: Optional placeholders without values
"""

import pytest

from lictool.errors import MissingFieldsError
from lictool.placeholders import has_placeholders
from lictool.renderer import UnfilledPolicy, render
from tests.conftest import DETAILS, MIT_TEXT, ZERO_BSD_TEXT, make_template


COMPLETE = {"year": "2024", "author": "Jane Doe", "program": "frob", "email": "j@d.org",
            "project_url": "https://frob.example"}


# =============================================================================
# Substitution Tests
# =============================================================================

class TestRender:
    """Tests for render."""

    def test_mit_exact_text(self) -> None:
        """Only the placeholders change."""
        rendered = render(make_template("MIT"), {"year": "2024", "author": "Jane Doe"})

        expected = MIT_TEXT.replace("<year>", "2024").replace("<copyright holders>", "Jane Doe")
        assert rendered.text == expected
        assert rendered.identifier == "MIT"

    @pytest.mark.parametrize("identifier", list(DETAILS))
    def test_complete_mapping_leaves_no_tokens(self, identifier: str) -> None:
        """Every catalog template renders fully with a complete mapping."""
        rendered = render(make_template(identifier), COMPLETE)
        assert not has_placeholders(rendered.text)

    def test_alias_keys(self) -> None:
        """fullname is accepted for author."""
        rendered = render(make_template("MIT"), {"yyyy": "2024", "fullname": "Jane Doe"})
        assert "Copyright (c) 2024 Jane Doe" in rendered.text

    def test_no_reinjection(self) -> None:
        """Substituted values are not scanned again."""
        rendered = render(make_template("MIT"), {"year": "<copyright holders>", "author": "{{year}}"})
        assert "Copyright (c) <copyright holders> {{year}}" in rendered.text

    def test_extra_keys_ignored(self) -> None:
        """Keys the template does not use have no effect."""
        plain = render(make_template("MIT"), {"year": "2024", "author": "A"})
        extra = render(make_template("MIT"), {"year": "2024", "author": "A", "unused": "x"})
        assert plain == extra

    def test_no_placeholders_is_identity(self) -> None:
        """A body without tokens is returned unchanged."""
        assert render(make_template("0BSD"), {}).text == ZERO_BSD_TEXT

    def test_deterministic(self) -> None:
        """Rendering twice gives identical output."""
        template = make_template("GPL-3.0-only")
        assert render(template, COMPLETE).text == render(template, COMPLETE).text

    def test_repeated_marker_replaced_everywhere(self) -> None:
        """GPL mentions <year> twice; both are filled."""
        text = render(make_template("GPL-3.0-only"), COMPLETE).text
        assert text.count("2024") == 2


# =============================================================================
# Missing Field Tests
# =============================================================================

class TestMissingFields:
    """Tests for MissingFieldsError reporting."""

    def test_all_missing_reported(self) -> None:
        """Both missing fields are listed, in template order."""
        with pytest.raises(MissingFieldsError) as exc:
            render(make_template("MIT"), {})
        assert exc.value.fields == ["year", "author"]

    def test_one_missing(self) -> None:
        with pytest.raises(MissingFieldsError) as exc:
            render(make_template("Apache-2.0"), {"year": "2024"})
        assert exc.value.fields == ["author"]

    def test_defaults_satisfy_required(self) -> None:
        """A configured default counts as a value."""
        rendered = render(make_template("MIT"), {"year": "2024"}, defaults={"author": "Config"})
        assert "2024 Config" in rendered.text

    def test_mapping_beats_defaults(self) -> None:
        rendered = render(
            make_template("MIT"),
            {"year": "2024", "author": "Explicit"},
            defaults={"author": "Config"},
        )
        assert "2024 Explicit" in rendered.text

    def test_message_names_fields(self) -> None:
        error = MissingFieldsError(["year", "author"])
        assert "year, author" in str(error)


# =============================================================================
# Unfilled Optional Placeholder Tests
# =============================================================================

class TestUnfilledPolicy:
    """Tests for optional placeholders without values."""

    def test_empty_by_default(self) -> None:
        """Unfilled optional tokens disappear."""
        rendered = render(make_template("X-Custom"), {"year": "2024", "author": "Jane"})
        assert rendered.text == "Custom License\n\nCopyright 2024 Jane <>\nProject: \n"

    def test_keep_policy(self) -> None:
        """The keep policy preserves the original token text."""
        rendered = render(
            make_template("X-Custom"),
            {"year": "2024", "author": "Jane"},
            unfilled=UnfilledPolicy.KEEP,
        )
        assert rendered.text == (
            "Custom License\n\nCopyright 2024 Jane <[EMAIL]>\nProject: {{project_url}}\n"
        )

    def test_policy_from_string(self) -> None:
        rendered = render(make_template("X-Custom"), {"year": "1", "author": "A"}, unfilled="keep")
        assert "{{project_url}}" in rendered.text

    def test_default_for_optional(self) -> None:
        """A configured default fills an optional token."""
        rendered = render(
            make_template("X-Custom"),
            {"year": "2024", "author": "Jane"},
            defaults={"email": "jane@example.com"},
        )
        assert "<jane@example.com>" in rendered.text

    def test_invalid_policy(self) -> None:
        with pytest.raises(ValueError):
            render(make_template("MIT"), {"year": "1", "author": "A"}, unfilled="drop")
