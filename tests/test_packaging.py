from pathlib import Path

import pytest

tomllib = pytest.importorskip("tomllib")

REPO_ROOT = Path(__file__).resolve().parent.parent


def test_declared_modules_exist():
    with open(REPO_ROOT / "pyproject.toml", "rb") as f:
        project = tomllib.load(f)
    for module in project["tool"]["setuptools"]["py-modules"]:
        assert (REPO_ROOT / f"{module}.py").exists()
    assert "readme" not in project["project"]
