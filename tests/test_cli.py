"""CLI command tests."""

from __future__ import annotations

import json
from pathlib import Path

from botocore.exceptions import ClientError

from cli import main as cli_main
from cli.main import app
from core.policy.serializer import fingerprint

GOLDEN = Path(__file__).resolve().parent / "golden"


class DummyS3:
    def __init__(self, delete_error: str | None = None) -> None:
        self.put_calls: list[dict[str, str]] = []
        self.delete_calls: list[str] = []
        self.delete_error = delete_error

    def put_bucket_policy(self, Bucket: str, Policy: str) -> None:
        self.put_calls.append({"Bucket": Bucket, "Policy": Policy})

    def delete_bucket_policy(self, Bucket: str) -> None:
        self.delete_calls.append(Bucket)
        if self.delete_error:
            raise ClientError({"Error": {"Code": self.delete_error, "Message": "boom"}}, "DeleteBucketPolicy")


def _args(tmp_path: Path, *argv: str) -> list[str]:
    return ["--config", str(tmp_path / "bpc.yml"), *argv]


def test_compose_raw_writes_golden_document(tmp_path: Path) -> None:
    out = tmp_path / "policy.json"
    code = app(_args(tmp_path, "compose", "--statements", str(GOLDEN / "basic_statements.yml"), "--raw", "--output", str(out)))

    assert code == 0
    expected = (GOLDEN / "expected_basic.json").read_text(encoding="utf-8").strip()
    assert out.read_text(encoding="utf-8").strip() == expected


def test_compose_json_reports_fingerprint(tmp_path: Path, capsys) -> None:
    statements = tmp_path / "statements.json"
    statements.write_text(json.dumps([{"sid": "A", "actions": ["s3:*"], "resources": ["*"]}]), encoding="utf-8")

    code = app(_args(tmp_path, "compose", "--statements", str(statements), "--policy-id", "pid"))
    assert code == 0

    payload = json.loads(capsys.readouterr().out)
    assert payload["id"] == str(payload["fingerprint"])
    assert payload["fingerprint"] == fingerprint(payload["json"])
    assert json.loads(payload["json"])["Id"] == "pid"


def test_compose_applies_override_file(tmp_path: Path, capsys) -> None:
    statements = tmp_path / "statements.yml"
    statements.write_text(
        "statements:\n"
        "  - sid: SidToOverwrite\n"
        "    actions: ['s3:*']\n"
        "    resources: ['arn:aws:s3:::somebucket']\n",
        encoding="utf-8",
    )
    code = app(
        _args(
            tmp_path,
            "compose",
            "--statements",
            str(statements),
            "--override-json",
            str(GOLDEN / "override.json"),
            "--raw",
        )
    )
    assert code == 0
    document = json.loads(capsys.readouterr().out)
    assert document["Statement"][0]["Resource"] == "*"


def test_compose_duplicate_sid_exits_with_usage_error(tmp_path: Path, capsys) -> None:
    statements = tmp_path / "statements.yml"
    statements.write_text(
        "- sid: 1\n  actions: ['s3:*']\n- sid: 1\n  actions: ['s3:*']\n",
        encoding="utf-8",
    )
    code = app(_args(tmp_path, "compose", "--statements", str(statements)))

    assert code == 2
    assert "found duplicate sid (1)" in capsys.readouterr().err


def test_compose_missing_file_exits_with_usage_error(tmp_path: Path) -> None:
    assert app(_args(tmp_path, "compose", "--source-json", str(tmp_path / "missing.json"))) == 2


def test_compose_uses_config_defaults(tmp_path: Path, capsys) -> None:
    (tmp_path / "bpc.yml").write_text("default_version: '2008-10-17'\ndefault_format: json\n", encoding="utf-8")
    statements = tmp_path / "statements.yml"
    statements.write_text("- actions: ['s3:GetObject']\n", encoding="utf-8")

    code = app(_args(tmp_path, "compose", "--statements", str(statements), "--raw"))
    assert code == 0
    assert json.loads(capsys.readouterr().out)["Version"] == "2008-10-17"


def test_canned_markdown_output(tmp_path: Path) -> None:
    out = tmp_path / "canned.md"
    code = app(_args(tmp_path, "canned", "--acl", "public-read", "--bucket", "mybucket", "--format", "md", "--output", str(out)))

    assert code == 0
    content = out.read_text(encoding="utf-8")
    assert content.startswith("| Key | Value |")
    assert "AllObjectActionsMyBuckets" in content


def test_diff_exit_code_signals_drift(tmp_path: Path, capsys) -> None:
    before = tmp_path / "before.json"
    after = tmp_path / "after.json"
    before.write_text(json.dumps({"Version": "2012-10-17", "Statement": []}), encoding="utf-8")
    after.write_text(
        json.dumps({"Version": "2012-10-17", "Statement": [{"Sid": "A", "Effect": "Allow", "Action": "s3:*"}]}),
        encoding="utf-8",
    )

    assert app(_args(tmp_path, "diff", "--before", str(before), "--after", str(before))) == 0
    capsys.readouterr()

    assert app(_args(tmp_path, "diff", "--before", str(before), "--after", str(after))) == 1
    report = json.loads(capsys.readouterr().out)
    assert report["addedSids"] == ["A"]


def test_fingerprint_matches_composed_output(tmp_path: Path, capsys) -> None:
    out = tmp_path / "policy.json"
    assert app(_args(tmp_path, "canned", "--acl", "public", "--bucket", "b", "--raw", "--output", str(out))) == 0

    assert app(_args(tmp_path, "fingerprint", "--input", str(out))) == 0
    payload = json.loads(capsys.readouterr().out)
    assert payload["fingerprint"] == fingerprint(out.read_text(encoding="utf-8").rstrip("\n"))


def test_fingerprint_canonicalize_normalizes_layout(tmp_path: Path, capsys) -> None:
    compact = tmp_path / "compact.json"
    compact.write_text('{"Version":"2012-10-17","Statement":[]}', encoding="utf-8")

    assert app(_args(tmp_path, "fingerprint", "--input", str(compact), "--canonicalize")) == 0
    payload = json.loads(capsys.readouterr().out)
    assert payload["fingerprint"] == fingerprint('{\n  "Version": "2012-10-17",\n  "Statement": []\n}')


def test_attach_canned_policy(tmp_path: Path, monkeypatch) -> None:
    client = DummyS3()
    monkeypatch.setattr(cli_main, "make_s3_client", lambda endpoint_url, region: client)

    assert app(_args(tmp_path, "attach", "--bucket", "mybucket", "--acl", "public-read-write")) == 0
    assert len(client.put_calls) == 1
    assert client.put_calls[0]["Bucket"] == "mybucket"
    policy = json.loads(client.put_calls[0]["Policy"])
    assert [statement["Sid"] for statement in policy["Statement"]] == ["ListObjectsInBucket", "UploadObjectActions"]


def test_attach_private_removes_policy(tmp_path: Path, monkeypatch) -> None:
    client = DummyS3(delete_error="NoSuchBucketPolicy")
    monkeypatch.setattr(cli_main, "make_s3_client", lambda endpoint_url, region: client)

    assert app(_args(tmp_path, "attach", "--bucket", "mybucket", "--acl", "private")) == 0
    assert client.delete_calls == ["mybucket"]
    assert client.put_calls == []


def test_attach_surfaces_backend_errors(tmp_path: Path, monkeypatch) -> None:
    client = DummyS3(delete_error="AccessDenied")
    monkeypatch.setattr(cli_main, "make_s3_client", lambda endpoint_url, region: client)

    assert app(_args(tmp_path, "attach", "--bucket", "mybucket", "--acl", "private")) == 1


def test_attach_document_is_canonicalized(tmp_path: Path, monkeypatch) -> None:
    client = DummyS3()
    monkeypatch.setattr(cli_main, "make_s3_client", lambda endpoint_url, region: client)
    document = tmp_path / "doc.json"
    document.write_text('{"Version":"2012-10-17","Statement":[]}', encoding="utf-8")

    assert app(_args(tmp_path, "attach", "--bucket", "b", "--document", str(document))) == 0
    assert client.put_calls[0]["Policy"] == '{\n  "Version": "2012-10-17",\n  "Statement": []\n}'


def test_invalid_config_exits_with_usage_error(tmp_path: Path) -> None:
    (tmp_path / "bpc.yml").write_text("default_format: xml\n", encoding="utf-8")
    assert app(_args(tmp_path, "canned", "--acl", "private", "--bucket", "b")) == 2


def test_table_output_indents_policy_document(tmp_path: Path, capsys) -> None:
    assert app(_args(tmp_path, "canned", "--acl", "private", "--bucket", "b", "--format", "table")) == 0
    lines = capsys.readouterr().out.splitlines()

    assert lines[0] == "json        :"
    assert lines[1] == "    {"
    assert any(line.startswith("fingerprint : ") for line in lines)


def test_canned_accepts_platform_policy_names(tmp_path: Path, capsys) -> None:
    assert app(_args(tmp_path, "canned", "--acl", "readwrite", "--bucket", "b", "--raw")) == 0
    by_name = capsys.readouterr().out
    assert app(_args(tmp_path, "canned", "--acl", "public-read-write", "--bucket", "b", "--raw")) == 0
    assert by_name == capsys.readouterr().out


def test_attach_policy_name_none_removes_policy(tmp_path: Path, monkeypatch) -> None:
    client = DummyS3()
    monkeypatch.setattr(cli_main, "make_s3_client", lambda endpoint_url, region: client)

    assert app(_args(tmp_path, "attach", "--bucket", "mybucket", "--acl", "none")) == 0
    assert client.delete_calls == ["mybucket"]
    assert client.put_calls == []
