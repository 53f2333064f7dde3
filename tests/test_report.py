"""Tests for the scan summary and graph document."""

import json
import logging
import re

from constants import LicenseSource
from tree.graph import Edge
from tree.index import PackageIndex, PackageNode
from tree.report import build_graph_document, log_summary, now_utc_iso, summarize, write_graph


def _index():
    index = PackageIndex()
    index.insert_if_absent(PackageNode(
        id="a@1.0.0", name="a", version="1.0.0", path="/nm/a", sha256="ab" * 32,
        license="LICENSE", license_source=LicenseSource.FILE, license_text="MIT",
        declared_dependencies=("b",),
    ))
    index.insert_if_absent(PackageNode(
        id="b@2.0.0", name="b", version="2.0.0", path="/nm/b", sha256=None,
        license=None, license_source=LicenseSource.NONE,
    ))
    return index


class TestSummary:
    """Test counting and missing-license diagnostics."""

    def test_summarize(self):
        summary = summarize(_index())
        assert summary.package_count == 2
        assert [node.id for node in summary.missing_license] == ["b@2.0.0"]

    def test_log_summary(self, caplog):
        with caplog.at_level(logging.INFO, logger="tree.report"):
            log_summary(summarize(_index()))
        assert "Scanned 2 packages." in caplog.text
        assert "Packages missing license file or license field: 1" in caplog.text
        assert " - b@2.0.0 at /nm/b" in caplog.text

    def test_log_summary_nothing_missing(self, caplog):
        with caplog.at_level(logging.INFO, logger="tree.report"):
            log_summary(summarize(PackageIndex()))
        assert "Scanned 0 packages." in caplog.text
        assert not [r for r in caplog.records if r.levelno >= logging.WARNING]


class TestGraphDocument:
    """Test the structured output."""

    def test_document_shape(self):
        edges = [Edge("a@1.0.0", "b@2.0.0", "b")]
        document = build_graph_document("/nm", _index(), edges, generated_at="2024-01-01T00:00:00.000Z")
        assert document["generatedAt"] == "2024-01-01T00:00:00.000Z"
        assert document["nodeModulesRoot"] == "/nm"
        assert document["edgePolicy"] == "first-match"
        assert set(document["nodes"]) == {"a@1.0.0", "b@2.0.0"}
        assert document["nodes"]["b@2.0.0"]["sha256"] is None
        assert document["nodes"]["b@2.0.0"]["missingLicense"] is True
        assert document["nodes"]["a@1.0.0"]["licenseSource"] == "file"
        assert document["edges"] == [{"from": "a@1.0.0", "to": "b@2.0.0", "depName": "b"}]

    def test_timestamp_format(self):
        assert re.fullmatch(r"\d{4}-\d{2}-\d{2}T\d{2}:\d{2}:\d{2}\.\d{3}Z", now_utc_iso())

    def test_write_stdout(self, capsys):
        write_graph({"nodes": {}, "edges": []})
        assert json.loads(capsys.readouterr().out) == {"nodes": {}, "edges": []}

    def test_write_file(self, tmp_path, capsys):
        target = tmp_path / "graph.json"
        write_graph({"edges": []}, str(target))
        assert json.loads(target.read_text()) == {"edges": []}
        assert capsys.readouterr().out == ""
