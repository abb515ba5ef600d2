"""Tests for package.json parsing and serialization."""

import pytest

from smartup.errors import ManifestError
from smartup.models import Section
from smartup.parse_node import (
    dependency_records,
    dump_manifest,
    parse_package_json,
    read_manifest,
    write_manifest,
)


class TestPackageJsonParser:
    """Test package.json parsing."""

    def test_parse_records_both_sections(self, sample_package_json):
        """Should snapshot dependencies then devDependencies in file order."""
        document = parse_package_json(sample_package_json)
        records = dependency_records(document)

        assert [r.name for r in records] == ["express", "left-pad", "lodash", "jest"]
        assert records[0].current_range == "^3.0.0"
        assert records[0].section is Section.DIRECT
        assert records[-1].section is Section.DEVELOPMENT

    def test_parse_without_dependency_sections(self):
        document = parse_package_json('{"name": "empty"}')
        assert dependency_records(document) == ()

    def test_duplicate_declaration_kept_once(self):
        """A package in both sections should be recorded under dependencies."""
        content = '{"dependencies": {"a": "^1.0.0"}, "devDependencies": {"a": "^1.1.0"}}'
        records = dependency_records(parse_package_json(content))

        assert len(records) == 1
        assert records[0].section is Section.DIRECT

    def test_invalid_json(self):
        with pytest.raises(ManifestError):
            parse_package_json("{not json")

    def test_top_level_must_be_object(self):
        with pytest.raises(ManifestError):
            parse_package_json("[]")

    def test_detects_indentation(self):
        assert parse_package_json('{\n    "name": "x"\n}').indent == 4
        assert parse_package_json('{\n\t"name": "x"\n}').indent == "\t"
        assert parse_package_json('{"name": "x"}').indent == 2

    def test_detects_trailing_newline(self):
        assert parse_package_json('{"name": "x"}\n').trailing_newline is True
        assert parse_package_json('{"name": "x"}').trailing_newline is False


class TestManifestSerialization:
    """Test writing package.json back out."""

    def test_dump_is_byte_identical_for_standard_formatting(self, sample_package_json):
        document = parse_package_json(sample_package_json)
        assert dump_manifest(document) == sample_package_json

    def test_dump_preserves_non_ascii(self):
        content = '{\n  "author": "Zoë"\n}\n'
        assert dump_manifest(parse_package_json(content)) == content

    def test_read_missing_manifest(self, tmp_path):
        with pytest.raises(ManifestError) as exc_info:
            read_manifest(tmp_path / "package.json")
        assert "no package.json" in str(exc_info.value).lower()

    def test_write_and_read_back(self, project_dir, sample_package_json):
        path = project_dir / "package.json"
        document = read_manifest(path)
        write_manifest(document, path)
        assert path.read_text() == sample_package_json
