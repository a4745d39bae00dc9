# tests/test_cli.py
import json

import pytest
from typer.testing import CliRunner

from chunk_pipeline.infrastructure.entrypoints import cli

runner = CliRunner()

TOPIC = "arn:aws:sns:us-east-1:123456789012:annotations"

ENV_VARS = (
    "CHUNK_SIZE_BYTES",
    "ALLOWED_ENTITIES",
    "MIN_CONFIDENCE",
    "TOPIC_ID",
    "ENTITY_FIELD",
    "CONFIDENCE_FIELD",
    "MAX_WORKERS",
    "LOG_LEVEL",
)


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    for var in ENV_VARS:
        monkeypatch.delenv(var, raising=False)


@pytest.fixture
def fake_sns(monkeypatch, publisher):
    monkeypatch.setattr(cli, "SNSMessagePublisher", lambda region=None: publisher)
    return publisher


def test_split_reports_chunks_per_file(tmp_path, monkeypatch):
    src = tmp_path / "src"
    src.mkdir()
    (src / "a.mp4").write_bytes(b"x" * 2500)
    (src / "empty.mp4").write_bytes(b"")
    monkeypatch.setenv("CHUNK_SIZE_BYTES", "1000")

    result = runner.invoke(cli.app, ["split", str(src)])

    assert result.exit_code == 0, result.output
    assert "a.mp4: 3 chunks, 2500 bytes" in result.output
    assert "empty.mp4: 1 chunks, 0 bytes" in result.output


def test_split_writes_chunk_parts(tmp_path):
    src = tmp_path / "src"
    src.mkdir()
    (src / "a.mp4").write_bytes(b"0123456789")
    out = tmp_path / "out"

    result = runner.invoke(
        cli.app, ["split", str(src), "--chunk-size", "4", "--output-dir", str(out)]
    )

    assert result.exit_code == 0, result.output
    parts = sorted(p.name for p in out.iterdir())
    assert parts == ["a.mp4.000001.part", "a.mp4.000002.part", "a.mp4.000003.part"]
    assert (out / "a.mp4.000003.part").read_bytes() == b"89"


def test_split_without_chunk_size_is_a_usage_error(tmp_path):
    result = runner.invoke(cli.app, ["split", str(tmp_path)])
    assert result.exit_code == 2


def test_split_rejects_missing_directory(tmp_path):
    result = runner.invoke(cli.app, ["split", str(tmp_path / "nope"), "--chunk-size", "10"])
    assert result.exit_code == 2


def test_split_exits_non_zero_when_a_unit_fails(tmp_path, monkeypatch, make_store):
    store = make_store({"bad.mp4": b"x" * 10}, fail_read={"bad.mp4"})
    monkeypatch.setattr(cli, "_blob_store_for", lambda source, settings: store)

    result = runner.invoke(cli.app, ["split", "s3://videos/in/", "--chunk-size", "4"])

    assert result.exit_code == 1
    assert "bad.mp4: 0 chunks, 0 bytes" in result.output


@pytest.mark.parametrize("name", ["../escaped/x.mp4", "/tmp/chunk-pipeline-escaped.mp4"])
def test_split_refuses_parts_outside_the_output_dir(tmp_path, monkeypatch, make_store, name):
    store = make_store({"ok.mp4": b"x" * 10, name: b"y" * 10})
    monkeypatch.setattr(cli, "_blob_store_for", lambda source, settings: store)
    out = tmp_path / "out"

    result = runner.invoke(
        cli.app, ["split", "s3://videos/in/", "--chunk-size", "4", "--output-dir", str(out)]
    )

    assert result.exit_code == 1
    assert "Refusing to write chunks" in result.output
    assert not (tmp_path / "escaped").exists()
    assert not list(tmp_path.glob("**/*.part"))
    assert store.opened == 0


def test_split_keeps_nested_names_inside_the_output_dir(tmp_path, monkeypatch, make_store):
    store = make_store({"day1/cam.mp4": b"0123456789"})
    monkeypatch.setattr(cli, "_blob_store_for", lambda source, settings: store)
    out = tmp_path / "out"

    result = runner.invoke(
        cli.app, ["split", "s3://videos/in/", "--chunk-size", "4", "--output-dir", str(out)]
    )

    assert result.exit_code == 0, result.output
    assert (out / "day1" / "cam.mp4.000003.part").read_bytes() == b"89"


def test_publish_sends_matching_records(tmp_path, monkeypatch, fake_sns):
    records = tmp_path / "records.jsonl"
    records.write_text(
        "\n".join(
            json.dumps(r)
            for r in [
                {"entity": "person", "confidence": 0.91},
                {"entity": "person", "confidence": 0.90},
                {"entity": "dog", "confidence": 0.99},
            ]
        )
        + "\n\n",
        encoding="utf-8",
    )
    monkeypatch.setenv("ALLOWED_ENTITIES", "person,vehicle")
    monkeypatch.setenv("MIN_CONFIDENCE", "0.9")
    monkeypatch.setenv("TOPIC_ID", TOPIC)

    result = runner.invoke(cli.app, ["publish", str(records)])

    assert result.exit_code == 0, result.output
    assert f"Published 1 record(s) to {TOPIC}" in result.output
    assert fake_sns.messages == [(TOPIC, '{"confidence":0.91,"entity":"person"}')]


def test_publish_reads_stdin(monkeypatch, fake_sns):
    monkeypatch.setenv("ALLOWED_ENTITIES", "vehicle")
    monkeypatch.setenv("TOPIC_ID", TOPIC)

    result = runner.invoke(
        cli.app, ["publish", "-"], input='{"entity": "vehicle", "confidence": 0.7}\n'
    )

    assert result.exit_code == 0, result.output
    assert len(fake_sns.messages) == 1


def test_publish_requires_filter_settings(tmp_path, fake_sns):
    result = runner.invoke(cli.app, ["publish", "-"], input="")
    assert result.exit_code == 2
    assert fake_sns.messages == []


def test_publish_fails_on_malformed_record(monkeypatch, fake_sns):
    monkeypatch.setenv("ALLOWED_ENTITIES", "person")
    monkeypatch.setenv("TOPIC_ID", TOPIC)

    result = runner.invoke(cli.app, ["publish", "-"], input='{"entity": "person"}\n')

    assert result.exit_code == 1
    assert fake_sns.messages == []


def test_publish_sends_nothing_when_a_later_record_is_malformed(monkeypatch, fake_sns):
    monkeypatch.setenv("ALLOWED_ENTITIES", "person")
    monkeypatch.setenv("TOPIC_ID", TOPIC)
    lines = [
        '{"entity": "person", "confidence": 0.95}',
        '{"entity": "person"}',
        '{"entity": "person", "confidence": 0.99}',
    ]

    result = runner.invoke(cli.app, ["publish", "-"], input="\n".join(lines) + "\n")

    assert result.exit_code == 1
    assert "record 1" in result.output
    assert fake_sns.messages == []
