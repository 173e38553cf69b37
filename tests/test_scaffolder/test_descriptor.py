"""Unit tests for reading ``pom.xml`` properties (aemgen.scaffolder.descriptor)."""

from __future__ import annotations

import pytest

from aemgen.scaffolder.descriptor import read_pom


class TestReadPom:
    @pytest.mark.unit
    def test_missing_pom(self, project_dir):
        assert read_pom(project_dir) == {}

    @pytest.mark.unit
    def test_namespaced_pom(self, project_dir, sample_pom):
        assert read_pom(project_dir) == {
            "group_id": "com.frompom",
            "artifact_id": "frompom",
            "version": "3.0.0",
            "name": "From POM",
            "aem_version": "6.5",
        }

    @pytest.mark.unit
    def test_parent_fallback(self, project_dir):
        (project_dir / "pom.xml").write_text(
            "<project>"
            "<parent><groupId>com.parent</groupId><version>9.9</version></parent>"
            "<artifactId>child</artifactId>"
            "</project>",
            encoding="utf-8",
        )
        assert read_pom(project_dir) == {
            "group_id": "com.parent",
            "artifact_id": "child",
            "version": "9.9",
        }

    @pytest.mark.unit
    def test_own_coordinates_beat_parent(self, project_dir):
        (project_dir / "pom.xml").write_text(
            "<project>"
            "<parent><groupId>com.parent</groupId></parent>"
            "<groupId>com.child</groupId>"
            "</project>",
            encoding="utf-8",
        )
        assert read_pom(project_dir)["group_id"] == "com.child"

    @pytest.mark.unit
    def test_unparsable_pom_is_ignored(self, project_dir, capsys):
        (project_dir / "pom.xml").write_text("<project><groupId>", encoding="utf-8")
        assert read_pom(project_dir) == {}
        assert "Ignoring unreadable" in capsys.readouterr().out
