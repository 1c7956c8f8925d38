"""
Project context detection
Reads package.json and the source tree to tell the models what kind of project they write tests for
"""

import json
import logging
import os
from pathlib import Path
from typing import Dict, List, Optional

from .models import (
    FRAMEWORK_ANGULAR,
    FRAMEWORK_LOOPBACK,
    FRAMEWORK_REACT,
    FRAMEWORK_UNKNOWN,
    ProjectContext
)

logger = logging.getLogger(__name__)

TEST_FILE_SUFFIXES = (".test.ts", ".test.tsx", ".test.js", ".spec.ts", ".spec.js")
STRUCTURE_DEPTH = 2

# Marker text in a test file -> pattern name shown to the models
TEST_PATTERN_MARKERS = [
    ("describe(", "describe/it pattern"),
    ("test(", "test pattern"),
    ("TestBed", "Angular TestBed"),
    ("@testing-library", "React Testing Library"),
]


def _skipped(name: str) -> bool:
    return name.startswith(".") or name == "node_modules"


def read_dependencies(project_root: Path) -> Dict[str, str]:
    """Merge dependencies and devDependencies of package.json; empty when it cannot be read"""
    package_json = project_root / "package.json"
    try:
        data = json.loads(package_json.read_text(encoding="utf-8"))
    except (OSError, ValueError) as e:
        logger.warning(f"Could not read {package_json}, detecting framework from structure: {e}")
        return {}
    if not isinstance(data, dict):
        return {}
    return {**(data.get("dependencies") or {}), **(data.get("devDependencies") or {})}


def detect_framework(dependencies: Dict[str, str]) -> ProjectContext:
    """Pick the application and testing framework from the dependency names"""
    if "@angular/core" in dependencies:
        testing = "karma/jasmine" if "karma" in dependencies else "jest"
        return ProjectContext(framework=FRAMEWORK_ANGULAR, testing_framework=testing)
    if "react" in dependencies:
        testing = "react-testing-library" if "@testing-library/react" in dependencies else "jest"
        return ProjectContext(framework=FRAMEWORK_REACT, testing_framework=testing)
    if "@loopback/core" in dependencies:
        testing = "mocha" if "mocha" in dependencies else "jest"
        return ProjectContext(framework=FRAMEWORK_LOOPBACK, testing_framework=testing)
    return ProjectContext(framework=FRAMEWORK_UNKNOWN, testing_framework="jest")


def get_project_structure(project_root: Path, source_dir: str = "src") -> List[str]:
    """List the directories under the source root, two levels deep, as 'a/' and 'a/b/'"""
    structure: List[str] = []

    def walk(directory: Path, prefix: str, depth: int) -> None:
        for entry in sorted(directory.iterdir(), key=lambda p: p.name):
            if _skipped(entry.name) or not entry.is_dir():
                continue
            structure.append(f"{prefix}{entry.name}/")
            if depth + 1 < STRUCTURE_DEPTH:
                walk(entry, f"{prefix}{entry.name}/", depth + 1)

    root = project_root / source_dir
    if root.is_dir():
        walk(root, "", 0)
    return structure


def find_first_test_file(project_root: Path) -> Optional[Path]:
    """First test file in sorted walk order, skipping dot directories and node_modules"""
    for directory, dir_names, file_names in os.walk(project_root):
        dir_names[:] = sorted(name for name in dir_names if not _skipped(name))
        for file_name in sorted(file_names):
            if file_name.endswith(TEST_FILE_SUFFIXES):
                return Path(directory) / file_name
    return None


def analyze_existing_tests(project_root: Path) -> List[str]:
    """Name the test idioms used by the first existing test file"""
    test_file = find_first_test_file(project_root)
    if test_file is None:
        return []
    try:
        content = test_file.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as e:
        logger.warning(f"Could not read test file {test_file}: {e}")
        return []

    logger.info(f"Reading test patterns from {test_file}")
    return [name for marker, name in TEST_PATTERN_MARKERS if marker in content]


def detect_project_context(project_root: str = ".") -> ProjectContext:
    """
    Analyze the project workspace

    Args:
        project_root: Directory holding package.json and the source tree

    Returns:
        ProjectContext: Framework, testing framework, structure and test patterns
    """
    root = Path(project_root)
    dependencies = read_dependencies(root)
    context = detect_framework(dependencies)
    context.dependencies = dependencies
    context.project_structure = get_project_structure(root)
    context.existing_patterns = analyze_existing_tests(root)
    return context


__all__ = [
    "analyze_existing_tests",
    "detect_framework",
    "detect_project_context",
    "find_first_test_file",
    "get_project_structure",
    "read_dependencies",
]
