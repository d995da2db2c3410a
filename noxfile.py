# jqline:header:start
#
#   project      : jqline
#   file         : noxfile.py
#   file_relpath : noxfile.py
#   license      : MIT
#   copyright    : (c) 2025 Olivier Biot
#
# jqline:header:end

"""jqline project automation via Nox (using uv-backed virtualenvs).

Sessions:
  - `lint`: Ruff lint checks.
  - `lint_fixall`: Ruff lint autofix.
  - `format_check`: Verify formatting (ruff).
  - `format`: Apply formatting (ruff).
  - `qa`: Per-Python session that runs pytest and pyright.
  - `property_test`: Long-running property tests (opt-in).
  - `smoke`: Run the installed console script on sample queries.
  - `package_check`: Build sdist/wheel and validate metadata (twine).
  - `release_check`: Single-Python gate (format, lint, tests, pyright, packaging).

Notes:
  - The default venv backend is `uv` for faster environment sync.
  - Supported Python versions are read from the `pyproject.toml` classifiers.

Common invocations:
  - `nox -s lint`
  - `nox -s qa` (runs for all configured Python versions)
  - `nox -s qa -- -m cli` (forward arguments to pytest)
"""

from __future__ import annotations

import pathlib
import sys
import warnings
from typing import TYPE_CHECKING, Any, cast

import nox

if TYPE_CHECKING:
    from collections.abc import Callable

if sys.version_info >= (3, 11):
    import tomllib

    _toml_loads = cast("Callable[[str], dict[str, Any]]", tomllib.loads)  # type: ignore[assignment]
else:
    import toml

    _toml_loads = cast("Callable[[str], dict[str, Any]]", toml.loads)  # type: ignore[assignment]

CURRENT_PYTHON_VERSION: str = f"{sys.version_info[0]}.{sys.version_info[1]}"

# Markers excluded from the default test run.
FAST_MARKERS: str = "not hypothesis_slow"


def _parse_pyproject_toml() -> dict[str, Any]:
    """Parse `pyproject.toml`.

    This runs at **noxfile import time**, so it must not depend on project
    runtime dependencies.

    Returns:
        dict[str, Any]: Parsed TOML document (top-level table), empty when unreadable.
    """
    path: pathlib.Path = pathlib.Path(__file__).parent / "pyproject.toml"
    if not path.exists():
        return {}
    try:
        return _toml_loads(path.read_text(encoding="utf-8"))
    except ValueError:
        return {}


def get_supported_pythons() -> list[str]:
    """Resolve supported Python versions from `pyproject.toml` classifiers.

    Returns:
        list[str]: Supported versions like ["3.10", "3.11", ...], sorted.
    """
    project_any = _parse_pyproject_toml().get("project")
    classifiers_any = project_any.get("classifiers") if isinstance(project_any, dict) else None
    if not isinstance(classifiers_any, list):
        warnings.warn(
            "Could not find 'classifiers' in pyproject.toml. "
            f"Falling back to Python {CURRENT_PYTHON_VERSION}.",
            RuntimeWarning,
            stacklevel=2,
        )
        return [CURRENT_PYTHON_VERSION]

    prefix = "Programming Language :: Python :: "
    versions: set[tuple[int, int]] = set()
    for classifier in cast("list[str]", classifiers_any):
        if not classifier.startswith(prefix):
            continue
        parts: list[str] = classifier.removeprefix(prefix).strip().split(".")
        # Accept only X.Y numeric versions.
        if len(parts) == 2 and all(p.isdigit() for p in parts):
            versions.add((int(parts[0]), int(parts[1])))

    if not versions:
        return [CURRENT_PYTHON_VERSION]
    return [f"{major}.{minor}" for major, minor in sorted(versions)]


PYTHONS: list[str] = get_supported_pythons()

nox.options.sessions = ["lint", "format_check"]
nox.options.default_venv_backend = "uv"


def _ruff(session: nox.Session, *args: str) -> None:
    session.install("ruff")
    session.run("ruff", *args, ".")


def _build_and_check(session: nox.Session) -> None:
    # A stale dist/ would let twine validate old artifacts.
    session.run("python", "-c", "import shutil; shutil.rmtree('dist', ignore_errors=True)")
    session.run("python", "-m", "build", "--sdist", "--wheel")
    session.run("twine", "check", "dist/*")


@nox.session(python=PYTHONS)
def qa(session: nox.Session) -> None:
    """Run the fast test suite and pyright for each supported Python."""
    session.install("-e", ".[dev]")
    session.run("pytest", "-q", "tests", "-m", FAST_MARKERS, *session.posargs)
    session.run("pyright", "--pythonversion", str(session.python))


@nox.session
def lint(session: nox.Session) -> None:
    """Ruff lint checks."""
    _ruff(session, "check")


@nox.session
def lint_fixall(session: nox.Session) -> None:
    """Ruff lint with autofix."""
    _ruff(session, "check", "--fix")


@nox.session
def format_check(session: nox.Session) -> None:
    """Fail when files need reformatting."""
    _ruff(session, "format", "--check")


@nox.session
def format(session: nox.Session) -> None:
    """Reformat the tree."""
    _ruff(session, "format")


@nox.session
def property_test(session: nox.Session) -> None:
    """Run the hypothesis property tests marked ``hypothesis_slow``."""
    session.install("-e", ".[test]")
    session.run("pytest", "-vv", "-m", "hypothesis_slow", "tests", *session.posargs)


@nox.session(python=CURRENT_PYTHON_VERSION)
def smoke(session: nox.Session) -> None:
    """Install jqline non-editable and run the console script on a few queries."""
    session.install(".")
    session.run("jqline", "--version")
    session.run("jqline", "-n", "-c", "[range(3)] | add")
    session.run("jqline", "-n", "-e", "true")
    session.run("jqline", "-n", "false", "-e", success_codes=[1])


@nox.session(python=CURRENT_PYTHON_VERSION)
def package_check(session: nox.Session) -> None:
    """Build sdist and wheel, then validate the metadata with twine."""
    session.install("build", "twine")
    _build_and_check(session)


@nox.session(python=CURRENT_PYTHON_VERSION)
def release_check(session: nox.Session) -> None:
    """Release gate on one Python: format, lint, tests, pyright and packaging."""
    session.install("-e", ".[dev]")
    session.install("build", "twine")
    session.run("ruff", "format", "--check", ".")
    session.run("ruff", "check", ".")
    session.run("pytest", "-q", "tests", "-m", FAST_MARKERS, *session.posargs)
    session.run("pyright", "--pythonversion", CURRENT_PYTHON_VERSION)
    _build_and_check(session)
