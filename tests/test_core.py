"""Tests for applying, suggesting and processing wikilinks."""

import pytest
from pydantic import ValidationError

from vaultlinks import (
    ExtendedWikilinkOptions,
    VaultLinksError,
    WikilinkOptions,
    apply_wikilinks,
    process_wikilinks,
    suggest_wikilinks,
)


# ─────────────────────────────────────────────────────────────────────────────
# apply_wikilinks: basics
# ─────────────────────────────────────────────────────────────────────────────


class TestApplyBasics:
    """Known entity names become wikilinks."""

    def test_links_single_entity(self):
        result = apply_wikilinks("Working with Claude Code on the project", ["Claude Code"])

        assert result.content == "Working with [[Claude Code]] on the project"
        assert result.links_added == 1
        assert result.linked_entities == ["Claude Code"]

    def test_links_multiple_entities(self):
        result = apply_wikilinks(
            "Using React and TypeScript for the API", ["React", "TypeScript", "API"]
        )

        assert result.content == "Using [[React]] and [[TypeScript]] for the [[API]]"
        assert result.links_added == 3
        assert sorted(result.linked_entities) == ["API", "React", "TypeScript"]

    def test_first_occurrence_only_by_default(self):
        result = apply_wikilinks("React is great. I love React. React rocks!", ["React"])

        assert result.content == "[[React]] is great. I love React. React rocks!"
        assert result.links_added == 1

    def test_all_occurrences(self):
        result = apply_wikilinks(
            "React is great. I love React.", ["React"], first_occurrence_only=False
        )

        assert result.content == "[[React]] is great. I love [[React]]."
        assert result.links_added == 2
        assert result.linked_entities == ["React"]

    def test_options_object(self):
        options = WikilinkOptions(first_occurrence_only=False)

        result = apply_wikilinks("React and React", ["React"], options)

        assert result.content == "[[React]] and [[React]]"

    def test_unknown_keyword_rejected(self):
        with pytest.raises(ValidationError):
            apply_wikilinks("React and React", ["React"], first_occurence_only=False)

    def test_unknown_keyword_rejected_with_options_object(self):
        with pytest.raises(ValidationError):
            apply_wikilinks("React", ["React"], WikilinkOptions(), case_insensitve=False)

    def test_unknown_field_rejected_on_options_model(self):
        with pytest.raises(ValidationError):
            WikilinkOptions(first_occurence_only=False)

    def test_keyword_overrides_options_object(self):
        options = WikilinkOptions(first_occurrence_only=False)

        result = apply_wikilinks("React and React", ["React"], options, first_occurrence_only=True)

        assert result.content == "[[React]] and React"

    @pytest.mark.parametrize(
        ("content", "entities"),
        [
            ("", ["React"]),
            ("Some content without entities", []),
            ("Nothing to see here", ["React"]),
        ],
    )
    def test_nothing_to_link(self, content, entities):
        result = apply_wikilinks(content, entities)

        assert result.content == content
        assert result.links_added == 0
        assert result.linked_entities == []


# ─────────────────────────────────────────────────────────────────────────────
# apply_wikilinks: protected zones
# ─────────────────────────────────────────────────────────────────────────────


class TestApplyProtectedZones:
    """Text inside protected constructs is never rewritten."""

    def test_skips_existing_wikilinks(self):
        result = apply_wikilinks("See [[React Guide]] for React tips", ["React"])

        assert result.content == "See [[React Guide]] for [[React]] tips"

    def test_skips_code_blocks(self):
        content = 'Use React:\n```\nimport React from "react";\n```\nReact is awesome'

        result = apply_wikilinks(content, ["React"])

        assert result.content.startswith("Use [[React]]:")
        assert 'import React from "react";' in result.content
        assert result.links_added == 1

    def test_skips_code_blocks_in_all_mode(self):
        content = 'Use React:\n```\nimport React from "react";\n```\nReact is awesome'

        result = apply_wikilinks(content, ["React"], first_occurrence_only=False)

        assert 'import React from "react";' in result.content
        assert result.content.endswith("[[React]] is awesome")
        assert result.links_added == 2

    def test_skips_inline_code(self):
        result = apply_wikilinks("Run `npm install react` to get React", ["React", "react"])

        assert result.content == "Run `npm install react` to get [[React]]"

    def test_skips_frontmatter(self):
        content = "---\ntitle: React Guide\n---\nReact is great"

        result = apply_wikilinks(content, ["React"])

        assert result.content == "---\ntitle: React Guide\n---\n[[React]] is great"

    def test_unterminated_frontmatter_is_plain_text(self):
        result = apply_wikilinks("---\ntitle: React\nmore", ["React"])

        assert result.content == "---\ntitle: [[React]]\nmore"

    def test_skips_urls(self):
        result = apply_wikilinks("Visit https://react.dev to learn React", ["React"])

        assert result.content == "Visit https://react.dev to learn [[React]]"

    def test_skips_hashtags(self):
        result = apply_wikilinks("#react and React", ["React"])

        assert result.content == "#react and [[React]]"

    def test_skips_bracket_adjacent_matches(self):
        result = apply_wikilinks("(React) is nice", ["React"])

        assert result.content == "(React) is nice"
        assert result.links_added == 0


# ─────────────────────────────────────────────────────────────────────────────
# apply_wikilinks: matching rules
# ─────────────────────────────────────────────────────────────────────────────


class TestApplyMatching:
    """Word boundaries, case handling, priority and stop words."""

    def test_longer_entity_wins_at_same_position(self):
        result = apply_wikilinks(
            "Working with API Management and the API", ["API", "API Management"]
        )

        assert result.content == "Working with [[API Management]] and the [[API]]"

    def test_shorter_entity_not_linked_inside_longer(self):
        result = apply_wikilinks("the API Management team", ["API", "API Management"])

        assert result.content == "the [[API Management]] team"
        assert result.linked_entities == ["API Management"]

    def test_stop_word_entities_are_never_linked(self):
        result = apply_wikilinks("Meeting on Monday for the project", ["Monday", "Project"])

        assert result.content == "Meeting on Monday for the [[Project]]"

    def test_case_insensitive_uses_canonical_name(self):
        result = apply_wikilinks("Using react for development", ["React"])

        assert result.content == "Using [[React]] for development"

    def test_case_sensitive(self):
        result = apply_wikilinks(
            "Using react for development", ["React"], case_insensitive=False
        )

        assert result.content == "Using react for development"
        assert result.links_added == 0

    def test_word_boundaries(self):
        result = apply_wikilinks("The API and APIManager are different", ["API"])

        assert result.content == "The [[API]] and APIManager are different"

    def test_already_linked_entities_are_skipped(self):
        result = apply_wikilinks(
            "React and TypeScript", ["React", "TypeScript"], already_linked={"react"}
        )

        assert result.content == "React and [[TypeScript]]"

    def test_first_listed_entity_wins_exact_tie(self):
        entities = [
            {"name": "Alpha", "aliases": ["Shared"]},
            {"name": "Beta", "aliases": ["Shared"]},
        ]

        assert apply_wikilinks("Shared thing", entities).content == "[[Alpha|Shared]] thing"
        assert apply_wikilinks("Shared thing", entities[::-1]).content == "[[Beta|Shared]] thing"


# ─────────────────────────────────────────────────────────────────────────────
# apply_wikilinks: aliases
# ─────────────────────────────────────────────────────────────────────────────


class TestApplyAliases:
    """Alias matches link to the canonical name with the alias as display text."""

    PRD = {"name": "Product Requirements Document", "path": "docs/PRD.md", "aliases": ["PRD"]}
    JAVASCRIPT = {"name": "JavaScript", "path": "JavaScript.md", "aliases": ["JS", "ECMAScript"]}

    def test_alias_links_to_canonical(self):
        result = apply_wikilinks("The PRD is ready for review", [self.PRD])

        assert result.content == "The [[Product Requirements Document|PRD]] is ready for review"
        assert result.linked_entities == ["Product Requirements Document"]

    def test_name_match_without_display_text(self):
        entity = {"name": "API", "path": "API.md", "aliases": ["Application Programming Interface"]}

        result = apply_wikilinks("The API is documented", [entity])

        assert result.content == "The [[API]] is documented"

    def test_alias_keeps_matched_casing(self):
        result = apply_wikilinks("Check the prd for details", [self.PRD])

        assert result.content == "Check the [[Product Requirements Document|prd]] for details"

    def test_all_occurrences_across_name_and_alias(self):
        result = apply_wikilinks(
            "The JS framework uses JavaScript internally",
            [self.JAVASCRIPT],
            first_occurrence_only=False,
        )

        assert result.content == "The [[JavaScript|JS]] framework uses [[JavaScript]] internally"
        assert result.links_added == 2

    def test_first_occurrence_across_name_and_alias(self):
        result = apply_wikilinks("JS is fun. JavaScript is powerful.", [self.JAVASCRIPT])

        assert result.content == "[[JavaScript|JS]] is fun. JavaScript is powerful."
        assert result.links_added == 1

    def test_longer_alias_beats_shorter_name(self):
        entities = [
            "API",
            {"name": "API Management Platform", "path": "x.md", "aliases": ["API Management"]},
        ]

        result = apply_wikilinks("Working with API Management and the API", entities)

        assert "[[API Management Platform|API Management]]" in result.content
        assert "the [[API]]" in result.content

    def test_mixed_bare_and_aliased_entities(self):
        result = apply_wikilinks("Using React for the PRD", ["React", self.PRD])

        assert result.content == "Using [[React]] for the [[Product Requirements Document|PRD]]"


# ─────────────────────────────────────────────────────────────────────────────
# suggest_wikilinks
# ─────────────────────────────────────────────────────────────────────────────


class TestSuggest:
    """Suggestions report positions and context without rewriting."""

    def test_reports_position_and_context(self):
        suggestions = suggest_wikilinks("Working with React today", ["React"])

        assert len(suggestions) == 1
        suggestion = suggestions[0]
        assert suggestion.entity == "React"
        assert (suggestion.start, suggestion.end) == (13, 18)
        assert suggestion.context == "Working with React today"

    def test_truncated_context_gets_ellipsis(self):
        content = "x" * 30 + " React and more"

        suggestion = suggest_wikilinks(content, ["React"])[0]

        assert suggestion.context.startswith("...")
        assert "React" in suggestion.context

    def test_skips_protected_zones(self):
        assert suggest_wikilinks("Use `React` here", ["React"]) == []

    def test_alias_reported_under_canonical_name(self):
        entity = {"name": "Product Requirements Document", "aliases": ["PRD"]}

        suggestions = suggest_wikilinks("The PRD is ready", [entity])

        assert [s.entity for s in suggestions] == ["Product Requirements Document"]

    def test_all_occurrences(self):
        suggestions = suggest_wikilinks("React and React", ["React"], first_occurrence_only=False)

        assert [s.start for s in suggestions] == [0, 10]

    def test_first_occurrence_across_name_and_alias(self):
        entity = {"name": "JavaScript", "aliases": ["JS"]}

        suggestions = suggest_wikilinks("JS is fun. JavaScript is powerful.", [entity])

        assert len(suggestions) == 1
        assert suggestions[0].start == 0

    def test_does_not_modify_content(self):
        content = "React and TypeScript"

        suggest_wikilinks(content, ["React", "TypeScript"])

        assert content == "React and TypeScript"


# ─────────────────────────────────────────────────────────────────────────────
# process_wikilinks
# ─────────────────────────────────────────────────────────────────────────────


class TestProcess:
    """Known entities first, then implicit entities when enabled."""

    def test_behaves_like_apply_without_implicit(self):
        content = "Using React with Marcus Johnson."

        result = process_wikilinks(content, ["React"])

        assert result == apply_wikilinks(content, ["React"])
        assert result.implicit_entities is None

    def test_links_known_and_implicit(self):
        result = process_wikilinks(
            "Using React with Marcus Johnson for Project Alpha.", ["React"], detect_implicit=True
        )

        assert "[[React]]" in result.content
        assert "[[Marcus Johnson]]" in result.content
        assert "[[Project Alpha]]" in result.content
        assert result.linked_entities == ["React"]
        assert sorted(result.implicit_entities) == ["Marcus Johnson", "Project Alpha"]

    def test_counts_all_links(self):
        result = process_wikilinks(
            "React is used by Marcus Johnson for Project Alpha.", ["React"], detect_implicit=True
        )

        assert result.links_added == 3
        assert len(result.implicit_entities) == 2

    def test_quoted_term_replaces_quotes(self):
        result = process_wikilinks(
            'Testing the "Turbopump" component today.', [], detect_implicit=True
        )

        assert result.content == "Testing the [[Turbopump]] component today."
        assert result.implicit_entities == ["Turbopump"]

    def test_known_entity_not_reported_as_implicit(self):
        result = process_wikilinks(
            "Working with Marcus Johnson on the project.", ["Marcus Johnson"], detect_implicit=True
        )

        assert "[[Marcus Johnson]]" in result.content
        assert not result.implicit_entities

    def test_note_title_not_self_linked(self):
        result = process_wikilinks(
            "Notes about Project Alpha and Marcus Johnson.",
            [],
            detect_implicit=True,
            note_path="people/Marcus Johnson.md",
        )

        assert result.content == "Notes about [[Project Alpha]] and Marcus Johnson."
        assert result.implicit_entities == ["Project Alpha"]

    def test_extended_options_object(self):
        options = ExtendedWikilinkOptions(detect_implicit=True, implicit_patterns=["acronyms"])

        result = process_wikilinks("Export to ONNX today.", [], options)

        assert result.content == "Export to [[ONNX]] today."

    def test_invalid_exclude_pattern_raises(self):
        with pytest.raises(VaultLinksError) as exc_info:
            process_wikilinks(
                "Marcus Johnson", [], detect_implicit=True, exclude_patterns=["(unclosed"]
            )

        assert exc_info.value.code.value == "INVALID_PATTERN"

    def test_plain_options_object(self):
        result = process_wikilinks("React here", ["React"], WikilinkOptions())

        assert result.content == "[[React]] here"
        assert result.implicit_entities is None

    def test_plain_options_object_keeps_fields(self):
        options = WikilinkOptions(first_occurrence_only=False)

        result = process_wikilinks(
            "React met Marcus Johnson. React again.",
            ["React"],
            options,
            detect_implicit=True,
            implicit_patterns=["proper-nouns"],
        )

        assert result.content == "[[React]] met [[Marcus Johnson]]. [[React]] again."
        assert result.implicit_entities == ["Marcus Johnson"]

    def test_unknown_keyword_rejected(self):
        with pytest.raises(ValidationError):
            process_wikilinks("React", ["React"], detect_implicits=True)
