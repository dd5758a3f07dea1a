"""Tests for the manifest validator."""

import re

import pytest

from coboldepot.errors import SchemaError
from coboldepot.registry.models import PackageRecord
from coboldepot.registry.schema import REQUIRED_FIELDS, License, SchemaVariant
from coboldepot.registry.validator import (
    ROOT_FIELD,
    ManifestValidation,
    ValidationMode,
    validate_manifest,
)


def _manifest(**overrides) -> dict:
    data = {
        "name": "acme-ledger",
        "version": "2.0.0",
        "description": "Double-entry ledger routines",
        "author": "Acme Systems",
        "repository": "https://github.com/acme/ledger",
        "keywords": ["finance"],
        "license": "MIT",
        "updatedAt": "2024-05-14T09:30:00Z",
    }
    data.update(overrides)
    return data


def _collect(document, variant=SchemaVariant.CATALOG) -> ManifestValidation:
    return validate_manifest(document, "acme.yaml", variant, ValidationMode.COLLECT_ALL)


def test_valid_manifest_is_normalized():
    record = validate_manifest(_manifest(), "acme.yaml")
    assert isinstance(record, PackageRecord)
    assert record.license == "mit"
    assert re.fullmatch(r"[0-9a-f]{32}", record.repo_key)
    assert record.keywords == ("finance",)
    assert record.qualified_id == "acme-ledger@2.0.0"


def test_license_is_case_insensitive():
    record = validate_manifest(_manifest(license="  Apache-2.0 "), "acme.yaml")
    assert record.license == License.APACHE_2_0.value


def test_unknown_license_lists_allowed_ones():
    with pytest.raises(SchemaError) as excinfo:
        validate_manifest(_manifest(license="WTFPL"), "acme.yaml")
    assert excinfo.value.field == "license"
    assert excinfo.value.source == "acme.yaml"
    for identifier in License.identifiers():
        assert identifier in str(excinfo.value)


@pytest.mark.parametrize("field_name", REQUIRED_FIELDS)
def test_missing_required_field_is_named(field_name):
    document = _manifest()
    del document[field_name]
    with pytest.raises(SchemaError) as excinfo:
        validate_manifest(document, "acme.yaml")
    assert excinfo.value.field == field_name
    assert f'"{field_name}"' in str(excinfo.value)
    assert "acme.yaml" in str(excinfo.value)


def test_null_field_counts_as_missing():
    with pytest.raises(SchemaError) as excinfo:
        validate_manifest(_manifest(author=None), "acme.yaml")
    assert excinfo.value.field == "author"


@pytest.mark.parametrize(
    "version",
    ["1.2", "01.2.3", "1.2.3.4", "v1.2.3", "1.2.3-", "1.2.3\n", " 1.2.3", "1\u0661.2.3", "\u0661.2.3"],
)
def test_invalid_versions_are_rejected(version):
    with pytest.raises(SchemaError) as excinfo:
        validate_manifest(_manifest(version=version), "acme.yaml")
    assert excinfo.value.field == "version"


@pytest.mark.parametrize("version", ["0.0.0", "1.2.3", "1.2.3-rc.1+build.5", "10.20.30+meta"])
def test_valid_versions_are_accepted(version):
    assert validate_manifest(_manifest(version=version), "acme.yaml").version == version


def test_blank_string_field_is_rejected():
    with pytest.raises(SchemaError) as excinfo:
        validate_manifest(_manifest(description="   "), "acme.yaml")
    assert excinfo.value.field == "description"


def test_non_string_field_is_rejected():
    with pytest.raises(SchemaError) as excinfo:
        validate_manifest(_manifest(author=["a", "b"]), "acme.yaml")
    assert excinfo.value.field == "author"


@pytest.mark.parametrize("keywords", [[], "finance", ["finance", ""], ["finance", 3]])
def test_bad_keywords_are_rejected(keywords):
    with pytest.raises(SchemaError) as excinfo:
        validate_manifest(_manifest(keywords=keywords), "acme.yaml")
    assert excinfo.value.field == "keywords"


def test_relative_repository_is_rejected():
    with pytest.raises(SchemaError) as excinfo:
        validate_manifest(_manifest(repository="acme/ledger"), "acme.yaml")
    assert excinfo.value.field == "repository"


def test_non_github_repository_still_validates():
    record = validate_manifest(_manifest(repository="https://gitlab.com/foo/bar"), "acme.yaml")
    assert record.repository == "https://gitlab.com/foo/bar"


def test_popularity_only_required_for_audit():
    validate_manifest(_manifest(), "acme.yaml", SchemaVariant.SYNC)
    with pytest.raises(SchemaError) as excinfo:
        validate_manifest(_manifest(), "acme.yaml", SchemaVariant.AUDIT)
    assert excinfo.value.field == "popularity"


@pytest.mark.parametrize("popularity", ["high", True, float("nan"), float("inf")])
def test_popularity_must_be_finite_number(popularity):
    with pytest.raises(SchemaError) as excinfo:
        validate_manifest(_manifest(popularity=popularity), "acme.yaml", SchemaVariant.AUDIT)
    assert excinfo.value.field == "popularity"


@pytest.mark.parametrize("variant", [SchemaVariant.CATALOG, SchemaVariant.SYNC])
def test_popularity_not_checked_unless_required(variant):
    record = validate_manifest(_manifest(popularity="high"), "acme.yaml", variant)
    assert record.popularity is None
    assert record.to_dict()["popularity"] == "high"


def test_numeric_popularity_is_kept():
    record = validate_manifest(_manifest(popularity=7.5), "acme.yaml")
    assert record.popularity == 7.5
    assert "popularity" not in record.extras


def test_unparsable_updated_at_is_accepted():
    record = validate_manifest(_manifest(updatedAt="last tuesday"), "acme.yaml")
    assert record.updated_at == "last tuesday"


def test_extra_keys_are_preserved():
    record = validate_manifest(_manifest(homepage="https://acme.example"), "acme.yaml")
    assert record.extras == {"homepage": "https://acme.example"}
    assert record.to_dict()["homepage"] == "https://acme.example"
    assert record.to_dict()["repoKey"] == record.repo_key


def test_supplied_repo_key_is_replaced():
    record = validate_manifest(_manifest(repoKey="forged"), "acme.yaml")
    assert record.repo_key != "forged"
    assert "repoKey" not in record.extras


def test_fail_fast_reports_first_defect():
    document = _manifest(version="1.2", license="WTFPL")
    del document["author"]
    with pytest.raises(SchemaError) as excinfo:
        validate_manifest(document, "acme.yaml")
    assert excinfo.value.field == "author"


def test_collect_all_reports_every_defect():
    document = _manifest(version="1.2", license="WTFPL", keywords=[])
    del document["author"]
    result = _collect(document)
    assert not result.passed
    assert result.record is None
    assert [i.field for i in result.issues] == ["author", "keywords", "version", "license"]
    assert all(i.source == "acme.yaml" for i in result.issues)


def test_collect_all_returns_record_when_clean():
    result = _collect(_manifest())
    assert result.passed
    assert result.record.name == "acme-ledger"


def test_non_mapping_document():
    result = _collect(["not", "a", "mapping"])
    assert [i.field for i in result.issues] == [ROOT_FIELD]
    with pytest.raises(SchemaError):
        validate_manifest(None, "acme.yaml")


def test_record_is_immutable():
    record = validate_manifest(_manifest(), "acme.yaml")
    with pytest.raises(AttributeError):
        record.name = "other"
