"""Input loading and CLI configuration tests."""

from __future__ import annotations

import io
from pathlib import Path

import pytest

from cli.config import Settings, load_settings
from cli.sources import load_document_text, load_statement_file, parse_s3_url


class DummyS3:
    def __init__(self, objects: dict[tuple[str, str], bytes]) -> None:
        self.objects = objects
        self.requests: list[tuple[str, str]] = []

    def get_object(self, Bucket: str, Key: str) -> dict[str, object]:
        self.requests.append((Bucket, Key))
        return {"Body": io.BytesIO(self.objects[(Bucket, Key)])}


def test_parse_s3_url_splits_bucket_and_key():
    assert parse_s3_url("s3://policies/base/bucket.json") == ("policies", "base/bucket.json")
    with pytest.raises(ValueError):
        parse_s3_url("s3://policies")


def test_load_document_text_from_s3():
    client = DummyS3({("policies", "base.json"): b'{"Statement": []}'})
    assert load_document_text("s3://policies/base.json", s3_client=client) == '{"Statement": []}'
    assert client.requests == [("policies", "base.json")]


def test_load_document_text_missing_file(tmp_path: Path):
    with pytest.raises(FileNotFoundError):
        load_document_text(tmp_path / "absent.json")


def test_load_statement_file_accepts_list_and_mapping(tmp_path: Path):
    as_list = tmp_path / "list.yml"
    as_list.write_text("- sid: A\n  actions: ['s3:*']\n", encoding="utf-8")
    as_mapping = tmp_path / "mapping.yml"
    as_mapping.write_text("version: 2012-10-17\npolicy_id: pid\nstatements:\n  - actions: ['s3:*']\n", encoding="utf-8")

    assert load_statement_file(as_list) == {"statements": [{"sid": "A", "actions": ["s3:*"]}]}
    declared = load_statement_file(as_mapping)
    assert declared["policy_id"] == "pid"
    assert str(declared["version"]) == "2012-10-17"
    assert len(declared["statements"]) == 1


def test_load_statement_file_json(tmp_path: Path):
    path = tmp_path / "statements.json"
    path.write_text('{"statements": [{"sid": "A"}]}', encoding="utf-8")
    assert load_statement_file(path)["statements"] == [{"sid": "A"}]


def test_load_statement_file_rejects_scalars(tmp_path: Path):
    path = tmp_path / "statements.yml"
    path.write_text("just a string\n", encoding="utf-8")
    with pytest.raises(ValueError):
        load_statement_file(path)


def test_load_settings_defaults_when_missing(tmp_path: Path):
    settings = load_settings(tmp_path / "bpc.yml")
    assert settings == Settings()
    assert settings.default_version == "2012-10-17"


def test_load_settings_reads_yaml(tmp_path: Path):
    path = tmp_path / "bpc.yml"
    path.write_text(
        "project_name: storage\nendpoint_url: http://localhost:9000\nregion: us-east-1\nlog_level: debug\n",
        encoding="utf-8",
    )
    settings = load_settings(path)
    assert settings.project_name == "storage"
    assert settings.endpoint_url == "http://localhost:9000"
    assert settings.log_level == "DEBUG"

    merged = settings.merge_cli(format_override="table", log_level="info")
    assert merged.default_format == "table"
    assert merged.log_level == "INFO"
    assert merged.endpoint_url == "http://localhost:9000"


def test_load_settings_rejects_non_mapping(tmp_path: Path):
    path = tmp_path / "bpc.yml"
    path.write_text("- a\n- b\n", encoding="utf-8")
    with pytest.raises(ValueError):
        load_settings(path)


def test_load_settings_validates_format_and_version(tmp_path: Path):
    path = tmp_path / "bpc.yml"
    path.write_text("default_format: sarif\n", encoding="utf-8")
    with pytest.raises(ValueError):
        load_settings(path)

    path.write_text("default_version: 2020-01-01\n", encoding="utf-8")
    with pytest.raises(ValueError):
        load_settings(path)

    path.write_text("default_version: 2008-10-17\n", encoding="utf-8")
    assert load_settings(path).default_version == "2008-10-17"
