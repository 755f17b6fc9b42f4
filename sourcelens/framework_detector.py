"""Infer the UI framework and build tool a workspace uses.

Each candidate framework accumulates confidence from independent signals
found in ``package.json`` and on disk. The best candidate wins unless it
scores below :data:`MIN_CONFIDENCE`, in which case a pure file-system scan
decides.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence

from .errors import DetectionFailure
from .models import FrameworkDetectionResult
from .scanner import has_files_with_extensions

logger = logging.getLogger(__name__)

MIN_CONFIDENCE = 0.3
FILESYSTEM_CONFIDENCE = 0.6
DEFAULT_CONFIDENCE = 0.3
FAILURE_CONFIDENCE = 0.1


class _Signals:
    """Accumulator for one framework candidate."""

    def __init__(self, framework: str) -> None:
        self.framework = framework
        self.confidence = 0.0
        self.evidence: List[str] = []
        self.version: Optional[str] = None
        self.build_tool: Optional[str] = None

    def add(self, weight: float, evidence: str, build_tool: Optional[str] = None) -> None:
        self.confidence += weight
        self.evidence.append(evidence)
        if build_tool:
            self.build_tool = build_tool

    def result(self) -> FrameworkDetectionResult:
        return FrameworkDetectionResult(
            framework=self.framework,  # type: ignore[arg-type]
            confidence=round(min(self.confidence, 1.0), 4),
            evidence=self.evidence,
            version=self.version,
            build_tool=self.build_tool,  # type: ignore[arg-type]
        )


class FrameworkDetector:
    """Read-only framework inference for a workspace root."""

    def detect_framework(self, workspace_root: Path) -> FrameworkDetectionResult:
        """Detect the framework used under *workspace_root*.

        Never raises; an internal error yields a low-confidence ``html``
        result whose evidence records the failure.
        """
        root = Path(workspace_root)
        try:
            package_json = self._read_package_json(root / "package.json")
            if package_json is None:
                return self.detect_from_file_system(root)

            deps: Dict[str, str] = {}
            deps.update(package_json.get("dependencies") or {})
            deps.update(package_json.get("devDependencies") or {})

            candidates = [
                self._detect_react(root, package_json, deps),
                self._detect_vue(root, deps),
                self._detect_angular(root, deps),
            ]
            best = candidates[0]
            for candidate in candidates[1:]:
                if candidate.confidence > best.confidence:
                    best = candidate

            if best.confidence < MIN_CONFIDENCE:
                return self.detect_from_file_system(root)
            return best
        except Exception as exc:
            failure = DetectionFailure(f"Framework detection failed, defaulting to HTML: {exc}")
            logger.error("%s (%s): %s", failure.code, root, exc)
            return FrameworkDetectionResult(
                framework="html",
                confidence=FAILURE_CONFIDENCE,
                evidence=[failure.message],
            )

    # ------------------------------------------------------------------
    # Candidates
    # ------------------------------------------------------------------

    def _detect_react(
        self, root: Path, package_json: Dict[str, Any], deps: Dict[str, str]
    ) -> FrameworkDetectionResult:
        signals = _Signals("react")
        if "react" in deps:
            signals.add(0.4, "React found in dependencies")
            signals.version = deps["react"]
        if "react-dom" in deps:
            signals.add(0.2, "React DOM found in dependencies")
        if "next" in deps:
            signals.add(0.3, "Next.js found in dependencies", build_tool="next")
        start_script = str((package_json.get("scripts") or {}).get("start", ""))
        if "create-react-app" in deps or "react-scripts" in start_script:
            signals.add(0.2, "Create React App detected", build_tool="webpack")
        if "@types/react" in deps:
            signals.add(0.1, "React TypeScript types found")
        if has_files_with_extensions(root, [".jsx", ".tsx"]):
            signals.add(0.2, "JSX/TSX files found")
        if self._vite_config_mentions(root, ("@vitejs/plugin-react", "react()")):
            signals.add(0.2, "Vite React configuration found", build_tool="vite")
        return signals.result()

    def _detect_vue(self, root: Path, deps: Dict[str, str]) -> FrameworkDetectionResult:
        signals = _Signals("vue")
        if "vue" in deps:
            signals.add(0.4, "Vue found in dependencies")
            signals.version = deps["vue"]
        if "nuxt" in deps:
            signals.add(0.4, "Nuxt.js found in dependencies", build_tool="nuxt")
        if "@vue/cli-service" in deps:
            signals.add(0.2, "Vue CLI detected", build_tool="webpack")
        if has_files_with_extensions(root, [".vue"]):
            signals.add(0.3, "Vue single file components found")
        if self._file_exists(root, ["nuxt.config.js", "nuxt.config.ts"]):
            signals.add(0.2, "Nuxt configuration found")
        if signals.build_tool is None and "@vitejs/plugin-vue" in deps:
            signals.build_tool = "vite"
        return signals.result()

    def _detect_angular(self, root: Path, deps: Dict[str, str]) -> FrameworkDetectionResult:
        signals = _Signals("angular")
        if "@angular/core" in deps:
            signals.add(0.4, "Angular core found in dependencies")
            signals.version = deps["@angular/core"]
        if "@angular/cli" in deps:
            signals.add(0.2, "Angular CLI found in dependencies", build_tool="angular-cli")
        if self._file_exists(root, ["angular.json"]):
            signals.add(0.3, "Angular configuration found")
        if has_files_with_extensions(root, [".component.ts"]):
            signals.add(0.2, "Angular component files found")
        return signals.result()

    def detect_from_file_system(self, root: Path) -> FrameworkDetectionResult:
        """Extension-only fallback used when package.json is missing or weak."""
        if has_files_with_extensions(root, [".jsx", ".tsx"]):
            framework, evidence = "react", "JSX/TSX files found in file system"
        elif has_files_with_extensions(root, [".vue"]):
            framework, evidence = "vue", "Vue files found in file system"
        elif has_files_with_extensions(root, [".component.ts"]):
            framework, evidence = "angular", "Angular component files found in file system"
        else:
            return FrameworkDetectionResult(
                framework="html",
                confidence=DEFAULT_CONFIDENCE,
                evidence=["No specific framework files found, defaulting to HTML"],
            )
        return FrameworkDetectionResult(
            framework=framework,  # type: ignore[arg-type]
            confidence=FILESYSTEM_CONFIDENCE,
            evidence=[evidence],
        )

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    @staticmethod
    def _read_package_json(path: Path) -> Optional[Dict[str, Any]]:
        try:
            payload = json.loads(path.read_text(encoding="utf-8"))
        except (OSError, ValueError):
            return None
        return payload if isinstance(payload, dict) else None

    @staticmethod
    def _file_exists(root: Path, names: Sequence[str]) -> bool:
        return any((root / name).exists() for name in names)

    @staticmethod
    def _vite_config_mentions(root: Path, markers: Sequence[str]) -> bool:
        for name in ("vite.config.js", "vite.config.ts"):
            try:
                content = (root / name).read_text(encoding="utf-8")
            except OSError:
                continue
            if any(marker in content for marker in markers):
                return True
        return False
