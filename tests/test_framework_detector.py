"""Tests for framework inference."""

import json
from pathlib import Path

import pytest

from conftest import write_files
from sourcelens.framework_detector import FrameworkDetector


def _package(root: Path, deps=None, dev_deps=None, scripts=None) -> None:
    payload = {"name": "app", "dependencies": deps or {}, "devDependencies": dev_deps or {}}
    if scripts:
        payload["scripts"] = scripts
    (root / "package.json").write_text(json.dumps(payload), encoding="utf-8")


@pytest.fixture
def detector() -> FrameworkDetector:
    return FrameworkDetector()


class TestPackageJsonSignals:
    """Detection driven by declared dependencies."""

    def test_sample_react_app(self, detector, sample_react_app_path: Path):
        result = detector.detect_framework(sample_react_app_path)

        assert result.framework == "react"
        # react 0.4 + react-dom 0.2 + jsx files 0.2
        assert result.confidence == pytest.approx(0.8)
        assert result.version == "^18.2.0"
        assert "React found in dependencies" in result.evidence

    def test_next_sets_build_tool(self, detector, temp_dir: Path):
        _package(temp_dir, deps={"react": "18.0.0", "next": "14.0.0"})

        result = detector.detect_framework(temp_dir)

        assert result.framework == "react"
        assert result.build_tool == "next"

    def test_vue_with_single_file_components(self, detector, temp_dir: Path):
        _package(temp_dir, deps={"vue": "^3.3.0"}, dev_deps={"@vitejs/plugin-vue": "^4.0.0"})
        write_files(temp_dir, {"src/App.vue": "<template><div/></template>"})

        result = detector.detect_framework(temp_dir)

        assert result.framework == "vue"
        assert result.confidence == pytest.approx(0.7)
        assert result.build_tool == "vite"

    def test_angular_project(self, detector, temp_dir: Path):
        _package(temp_dir, deps={"@angular/core": "^17.0.0"}, dev_deps={"@angular/cli": "^17.0.0"})
        write_files(temp_dir, {"angular.json": "{}"})

        result = detector.detect_framework(temp_dir)

        assert result.framework == "angular"
        assert result.build_tool == "angular-cli"
        assert result.confidence == pytest.approx(0.9)

    def test_confidence_is_capped(self, detector, temp_dir: Path):
        _package(
            temp_dir,
            deps={"react": "18", "react-dom": "18", "next": "14", "@types/react": "18"},
        )
        write_files(temp_dir, {"pages/index.tsx": "export default function Home() {}"})

        result = detector.detect_framework(temp_dir)

        assert result.confidence == 1.0

    def test_tie_prefers_react(self, detector, temp_dir: Path):
        _package(temp_dir, deps={"react": "18", "vue": "3"})

        result = detector.detect_framework(temp_dir)

        assert result.framework == "react"


class TestFileSystemFallback:
    """Detection without usable package.json signals."""

    def test_no_package_json_uses_extensions(self, detector, temp_dir: Path):
        write_files(temp_dir, {"src/Widget.vue": "<template></template>"})

        result = detector.detect_framework(temp_dir)

        assert result.framework == "vue"
        assert result.confidence == pytest.approx(0.6)

    def test_weak_signals_fall_back(self, detector, temp_dir: Path):
        _package(temp_dir, dev_deps={"@types/react": "18"})
        write_files(temp_dir, {"index.html": "<html></html>"})

        result = detector.detect_framework(temp_dir)

        assert result.framework == "html"
        assert result.confidence == pytest.approx(0.3)

    def test_invalid_package_json(self, detector, temp_dir: Path):
        (temp_dir / "package.json").write_text("{not json", encoding="utf-8")
        write_files(temp_dir, {"src/app/app.component.ts": "export class AppComponent {}"})

        result = detector.detect_framework(temp_dir)

        assert result.framework == "angular"

    def test_non_utf8_package_json_is_treated_as_absent(self, detector, temp_dir: Path):
        (temp_dir / "package.json").write_bytes(b"\xff\xfe{\"dependencies\": {}}")
        write_files(temp_dir, {"src/app/app.component.ts": "export class AppComponent {}"})

        result = detector.detect_framework(temp_dir)

        assert result.framework == "angular"
        assert not any("failed" in item for item in result.evidence)

    def test_node_modules_ignored(self, detector, temp_dir: Path):
        write_files(temp_dir, {"node_modules/lib/Thing.jsx": "export default 1"})

        result = detector.detect_framework(temp_dir)

        assert result.framework == "html"

    def test_internal_error_defaults_to_html(self, detector, temp_dir: Path, monkeypatch):
        def boom(path):
            raise RuntimeError("disk on fire")

        monkeypatch.setattr(FrameworkDetector, "_read_package_json", staticmethod(boom))

        result = detector.detect_framework(temp_dir)

        assert result.framework == "html"
        assert result.confidence == pytest.approx(0.1)
        assert result.evidence[0].startswith("Framework detection failed")
