"""
Unit tests for fuzzy query construction (escaping and thresholds).
"""

import pytest

from oti.search.fuzzy import (
    allowed_edits,
    build_fuzzy_query,
    escape_query,
    min_identity,
)


class TestEscapeQuery:

    @pytest.mark.parametrize("raw, escaped", [
        ("plain", "plain"),
        ("a+b", r"a\+b"),
        ("(x)", r"\(x\)"),
        ("ot:studyId", r"ot\:studyId"),
        ("50%~", r"50%\~"),
        ("a/b", r"a\/b"),
        ("back\\slash", r"back\\slash"),
        ("Homo sapiens", r"Homo\ sapiens"),
        ('"quoted"', r"\"quoted\""),
    ])
    def test_reserved_characters(self, raw, escaped):
        assert escape_query(raw) == escaped

    def test_empty_string(self):
        assert escape_query("") == ""


class TestThresholds:

    def test_short_values_match_exactly(self):
        assert allowed_edits("abc") == 0
        assert min_identity("abc") == 1.0

    def test_empty_value_is_exact(self):
        assert allowed_edits("") == 0
        assert min_identity("") == 1.0

    def test_medium_text_allows_one_edit(self):
        assert allowed_edits("Homo") == 1
        assert min_identity("Homo") == pytest.approx(0.75)

    def test_long_text_allows_two_edits(self):
        assert allowed_edits("Drosophila") == 2
        assert min_identity("Drosophila") == pytest.approx(0.8)

    def test_identifiers_are_stricter(self):
        assert allowed_edits("Smith2020") == 1
        assert allowed_edits("pg_1") == 0

    def test_longer_values_need_higher_identity(self):
        assert min_identity("Drosophila melanogaster") > min_identity("Drosophila")


class TestBuildFuzzyQuery:

    def test_term_lowercased_and_escaped(self):
        query = build_fuzzy_query("ot:ottTaxonName", "Homo Sapiens")

        assert query.term == r"homo\ sapiens"
        assert query.property_name == "ot:ottTaxonName"

    def test_threshold_uses_raw_value(self):
        # escaping would lengthen the term and loosen the threshold
        query = build_fuzzy_query("ot:tag", "a+b+c+d")

        assert query.min_identity == min_identity("a+b+c+d")
        assert query.max_edits == 2

    def test_lucene_rendering_with_edits(self):
        query = build_fuzzy_query("ot:studyId", "Smith2020")

        assert query.to_lucene() == r"ot\:studyId:smith2020~1"

    def test_lucene_rendering_without_edits(self):
        query = build_fuzzy_query("tree_id", "t1")

        assert query.to_lucene() == "tree_id:t1"

    def test_exact_term_keeps_case(self):
        query = build_fuzzy_query("ot:studyId", "ABC")

        assert query.to_lucene(preserve_case=True) == r"ot\:studyId:ABC"
        assert query.to_lucene() == r"ot\:studyId:abc"

    def test_exact_term_is_escaped(self):
        query = build_fuzzy_query("ot:ottTaxonName", "Homo Sapiens")

        assert query.exact_term == r"Homo\ Sapiens"
