"""Tests for query runs."""

import pytest

from bibfilter.core.exceptions import ParseFailure
from bibfilter.core.models import MatchOutcome, QueryConfig, SearchFields
from bibfilter.search.engine import SearchEngine, run_query

K1 = (
    "@article{k1, title={A remote study of immersive virtual reality task "
    "performance}, abstract={We conducted an online study using immersive "
    "virtual reality with participant-owned HMDs.}}"
)
K2 = (
    "@inproceedings{k2, title={On-site VR art}, abstract={An on-site "
    "installation without user study.}}"
)


class TestClassification:
    """Test matched, partial and unmatched buckets."""

    def test_mixed_bibliography(self, mixed_bibtex, two_block_config):
        result = run_query(mixed_bibtex, two_block_config)

        assert [item.cite_key for item in result.matched] == ["full"]
        assert [item.cite_key for item in result.partial] == ["half"]
        assert [item.cite_key for item in result.unmatched] == ["none"]

        summary = result.summary
        assert (summary.total, summary.eligible) == (4, 3)
        assert (summary.matched, summary.partial, summary.unmatched) == (1, 1, 1)

    def test_ineligible_record_in_no_bucket(self, mixed_bibtex, two_block_config):
        result = run_query(mixed_bibtex, two_block_config)

        assert result.get("empty") is None

    def test_partial_present_and_missing(self, mixed_bibtex, two_block_config):
        item = run_query(mixed_bibtex, two_block_config).get("half")

        assert item.outcome is MatchOutcome.PARTIAL
        assert item.present_blocks == ("VR",)
        assert item.missing_blocks == ("Remote",)

    def test_matched_details(self, mixed_bibtex, two_block_config):
        item = run_query(mixed_bibtex, two_block_config).get("full")

        assert item.matched_block_names == ("VR", "Remote")
        assert item.hit_map["Remote"].title == ("crowdsourc*",)
        assert item.hit_map["Remote"].abstract == ("web-based", "remote")
        assert item.matched_blocks_string == "VR; Remote"
        assert item.detail_string == (
            "VR [Title: virtual reality; Keywords: virtual reality]; "
            "Remote [Title: crowdsourc*; Abstract: web-based | remote; "
            "Keywords: crowdsourc*]"
        )

    def test_unmatched_has_no_hits(self, mixed_bibtex, two_block_config):
        item = run_query(mixed_bibtex, two_block_config).get("none")

        assert item.outcome is MatchOutcome.UNMATCHED
        assert item.hit_map == {}

    def test_field_selection_changes_eligibility(self, mixed_bibtex, two_block_config):
        config = QueryConfig(
            blocks=two_block_config.blocks,
            operators=two_block_config.operators,
            search_fields=SearchFields(title=False, abstract=False, keywords=True),
        )

        result = run_query(mixed_bibtex, config)

        assert result.summary.total == 4
        assert result.summary.eligible == 1
        assert [item.cite_key for item in result.matched] == ["full"]

    def test_vacuous_query_matches_every_eligible_record(self, mixed_bibtex):
        result = run_query(mixed_bibtex, QueryConfig())

        assert [item.cite_key for item in result.matched] == ["full", "half", "none"]
        assert result.summary.partial == 0


class TestDefaultConfigScenarios:
    def test_k1_matched(self, default_config):
        result = run_query(K1, default_config)

        assert [item.cite_key for item in result.matched] == ["k1"]
        hits = result.matched[0].hit_map["Group 1"]
        assert hits.title
        assert hits.abstract

    def test_k2_not_matched(self, default_config):
        result = run_query(K2, default_config)

        assert not result.has_matches
        item = result.get("k2")
        assert item.outcome is MatchOutcome.PARTIAL
        assert "Group 1" in item.missing_blocks
        assert item.present_blocks == ("Group 3",)

    def test_sample_bibliography(self, sample_bibtex, default_config):
        result = run_query(sample_bibtex, default_config)

        assert [r.cite_key for r in result.matched_records] == ["sample1"]


class TestRunResult:
    def test_highlight_matched_title(self, mixed_bibtex, two_block_config):
        result = run_query(mixed_bibtex, two_block_config)
        item = result.get("full")

        spans = result.highlight(item, "title")

        assert [(s.block_name, s.matched_text) for s in spans] == [
            ("Remote", "Crowdsourced"),
            ("VR", "virtual reality"),
        ]

    def test_highlight_standalone_regex_terms(self, make_config):
        config = make_config(
            ("R", [r"(?i)virtual\s+reality", r"(?P<w>augmented) reality"], "regex")
        )
        result = run_query(
            "@misc{p1, title={Virtual reality and augmented reality}}", config
        )
        item = result.get("p1")

        spans = result.highlight(item, "title")

        assert item.outcome is MatchOutcome.MATCHED
        assert [s.matched_text for s in spans] == [
            "Virtual reality",
            "augmented reality",
        ]

    def test_term_stats_cover_matched_only(self, mixed_bibtex, two_block_config):
        stats = run_query(mixed_bibtex, two_block_config).term_stats

        assert stats.documents == 1
        assert stats.overall["virtual reality"] == 1
        assert stats.overall["VR"] == 0

    def test_each_run_is_independent(self, mixed_bibtex, two_block_config):
        engine = SearchEngine(two_block_config)

        first = engine.run(mixed_bibtex)
        second = engine.run(mixed_bibtex)

        assert first is not second
        assert first.summary == second.summary


class TestFailures:
    def test_noise_only_text(self, two_block_config):
        with pytest.raises(ParseFailure):
            run_query("nothing to see here", two_block_config)

    def test_empty_text(self, two_block_config):
        result = run_query("", two_block_config)

        assert result.summary.total == 0
        assert not result.has_matches

    def test_inconsistent_config_warns(self, caplog, make_config):
        config = make_config(("A", ["a"]), ("B", ["b"]), operators=[])

        with caplog.at_level("WARNING"):
            SearchEngine(config)

        assert "2 blocks but 0 operators" in caplog.text

    def test_duplicate_block_names_warn(self, caplog, make_config):
        config = make_config(("A", ["a"]), ("A", ["b"]), ("B", ["c"]))

        with caplog.at_level("WARNING"):
            SearchEngine(config)

        assert "Duplicate block names share hit map entries: A" in caplog.text
