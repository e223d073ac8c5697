"""Tests for term matching and candidate selection."""

import pytest

from vaultlinks.entities import expand_terms
from vaultlinks.matching import collect_candidates, find_matches, select_matches
from vaultlinks.models import Candidate, Match, ProtectedZone
from vaultlinks.parser.zones import ZoneList


class TestFindMatches:
    """Word-bounded literal matching."""

    def test_word_boundaries(self):
        assert find_matches("The API and APIManager", "API") == [Match(4, 7, "API")]

    def test_case_insensitive_by_default(self):
        assert find_matches("react React", "React") == [Match(0, 5, "react"), Match(6, 11, "React")]

    def test_case_sensitive(self):
        assert find_matches("react React", "React", case_insensitive=False) == [Match(6, 11, "React")]

    @pytest.mark.parametrize("content", ["(React)", "[React]", "{React}", "x(React", "React]"])
    def test_bracket_adjacent_matches_discarded(self, content):
        assert find_matches(content, "React") == []

    def test_term_is_literal(self):
        assert find_matches("see node.js today", "node.js") == [Match(4, 11, "node.js")]
        assert find_matches("nodeXjs", "node.js") == []

    def test_regex_characters_do_not_raise(self):
        assert find_matches("x a(b y", "a(b") == [Match(2, 5, "a(b")]

    def test_empty_term(self):
        assert find_matches("anything", "") == []


class TestCollectCandidates:
    """Candidates are grouped per entity and skip protected zones."""

    def test_skips_matches_in_zones(self):
        content = "`React` and React"
        zones = ZoneList([ProtectedZone(0, 7, "inline_code")])

        candidates = collect_candidates(content, expand_terms(["React"]), zones)

        assert [c.match.start for c in candidates] == [12]

    def test_alias_candidates_use_canonical_name(self):
        terms = expand_terms([{"name": "JavaScript", "aliases": ["JS"]}])

        candidates = collect_candidates("JS then JavaScript", terms, ZoneList())

        assert [(c.entity_name, c.term, c.match.start) for c in candidates] == [
            ("JavaScript", "JS", 0),
            ("JavaScript", "JavaScript", 8),
        ]


class TestSelectMatches:
    """Greedy, deterministic selection."""

    def candidate(self, name, term, start, matched=None):
        matched = matched or term
        return Candidate(name, term, Match(start, start + len(matched), matched))

    def test_longest_match_wins_at_same_start(self):
        candidates = [
            self.candidate("API", "API", 0),
            self.candidate("API Management", "API Management", 0),
        ]

        selected = select_matches(candidates)

        assert [c.entity_name for c in selected] == ["API Management"]

    def test_earlier_position_wins(self):
        candidates = [
            self.candidate("Management Platform", "Management Platform", 4),
            self.candidate("API Management", "API Management", 0),
        ]

        assert [c.entity_name for c in select_matches(candidates)] == ["API Management"]

    def test_one_link_per_entity(self):
        candidates = [self.candidate("React", "React", 0), self.candidate("React", "React", 20)]

        assert len(select_matches(candidates)) == 1

    def test_already_linked_case_insensitive(self):
        candidates = [self.candidate("React", "React", 0), self.candidate("Vue", "Vue", 10)]

        selected = select_matches(candidates, already_linked={"REACT"})

        assert [c.entity_name for c in selected] == ["Vue"]

    def test_result_in_position_order(self):
        candidates = [self.candidate("B", "Bbb", 10), self.candidate("A", "Aaa", 0)]

        assert [c.match.start for c in select_matches(candidates)] == [0, 10]

    def test_shorter_term_breaks_matched_length_tie(self):
        candidates = [
            self.candidate("Long", "Longer Term", 0, matched="Shared"),
            self.candidate("Short", "Short", 0, matched="Shared"),
        ]

        assert [c.entity_name for c in select_matches(candidates)] == ["Short"]
