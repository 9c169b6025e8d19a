"""Tests for query configuration persistence."""

import json

import pytest

from bibfilter.core.exceptions import ConfigError
from bibfilter.core.models import Block, Operator, QueryConfig, SearchFields
from bibfilter.search.engine import run_query
from bibfilter.storage.config_store import (
    dump_config,
    load_config,
    load_config_file,
    save_config,
)


class TestDumpConfig:
    def test_uses_camel_case_keys(self, default_config):
        data = json.loads(dump_config(default_config))

        assert set(data) == {"blocks", "operators", "caseInsensitive", "searchFields"}
        assert data["operators"] == ["AND", "AND"]
        assert data["blocks"][1]["isRegex"] is True
        assert data["searchFields"] == {
            "title": True,
            "abstract": True,
            "keywords": True,
        }

    def test_output_is_indented(self, default_config):
        assert b"\n  " in dump_config(default_config)


class TestLoadConfig:
    def test_round_trip_preserves_config(self, default_config):
        restored = load_config(dump_config(default_config))

        assert restored == default_config

    def test_minimal_document(self):
        config = load_config(
            '{"blocks": [{"name": "A", "terms": ["x"]}], "operators": []}'
        )

        assert config.block_names == ("A",)
        assert config.blocks[0].is_regex is False
        assert config.blocks[0].id
        assert config.case_insensitive is True
        assert config.search_fields == SearchFields()

    def test_full_document(self):
        config = load_config(
            json.dumps(
                {
                    "blocks": [
                        {"name": "A", "terms": ["a"], "isRegex": True},
                        {"name": "B", "terms": ["b"], "exclude": True},
                    ],
                    "operators": ["OR"],
                    "caseInsensitive": False,
                    "searchFields": {"title": True, "abstract": False, "keywords": False},
                }
            )
        )

        assert config.operators == (Operator.OR,)
        assert config.blocks[0].is_regex is True
        assert config.blocks[1].exclude is True
        assert config.case_insensitive is False
        assert config.search_fields.selected() == ("title",)

    @pytest.mark.parametrize(
        "document",
        [
            "not json",
            "[1, 2]",
            '{"operators": []}',
            '{"blocks": []}',
            '{"blocks": [{"terms": ["x"]}], "operators": []}',
            '{"blocks": [], "operators": ["XOR"]}',
        ],
    )
    def test_invalid_documents(self, document):
        with pytest.raises(ConfigError) as exc_info:
            load_config(document, source="saved.json")

        assert exc_info.value.source == "saved.json"
        assert "saved.json" in str(exc_info.value)

    def test_inconsistent_config_loads_with_warning(self, caplog):
        with caplog.at_level("WARNING"):
            config = load_config(
                '{"blocks": [{"name": "A"}, {"name": "B"}], "operators": []}'
            )

        assert not config.is_consistent()
        assert "2 blocks but 0 operators" in caplog.text


class TestConfigFiles:
    def test_save_creates_directories(self, tmp_path, two_block_config):
        path = tmp_path / "nested" / "dir" / "query.json"
        save_config(two_block_config, path)

        assert path.exists()
        assert load_config_file(path) == two_block_config

    def test_missing_file(self, tmp_path):
        with pytest.raises(ConfigError, match="cannot read file"):
            load_config_file(tmp_path / "absent.json")

    def test_reloaded_config_gives_identical_results(
        self, tmp_path, mixed_bibtex, two_block_config
    ):
        path = tmp_path / "query.json"
        save_config(two_block_config, path)

        before = run_query(mixed_bibtex, two_block_config)
        after = run_query(mixed_bibtex, load_config_file(path))

        assert [i.cite_key for i in after.matched] == [i.cite_key for i in before.matched]
        assert [i.cite_key for i in after.partial] == [i.cite_key for i in before.partial]
        assert after.summary == before.summary
        assert after.matched[0].hit_map == before.matched[0].hit_map


def test_edited_config_survives_round_trip():
    config = (
        QueryConfig()
        .insert_block(0, Block(name="Topic", terms=("haptic*",)))
        .insert_block(1, Block(name="Not", terms=("survey",), exclude=True))
        .set_operator(0, Operator.AND)
    )

    assert load_config(dump_config(config)) == config
