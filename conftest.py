"""
Repo-level pytest configuration.

This project uses a `src/` layout (package lives in `src/frbsf_qa`). When running
tests without installing the package (e.g. `pytest`), we need `src/` on
`sys.path` so imports like `from frbsf_qa.core import ...` work.

Command line options live here rather than in `tests/scenarios/conftest.py`
because pytest only reads `pytest_addoption` from initial conftest files.
"""
from __future__ import annotations
import sys
from pathlib import Path

_SRC = Path(__file__).resolve().parent / "src"
if _SRC.is_dir():
    sys.path.insert(0, str(_SRC))


def pytest_addoption(parser):
    group = parser.getgroup("frbsf", "FRBSF scenario options")
    group.addoption("--env", default=None, help="Named environment (t3, t5)")
    group.addoption("--browser-type", default=None, choices=["chromium", "firefox", "webkit"])
    group.addoption("--viewport", default=None, choices=["desktop", "mobile", "tablet"])
    group.addoption("--headed", action="store_true", default=False)
    group.addoption("--base-url", default=None)


def pytest_configure(config):
    for marker in [
        "e2e: Scenarios that drive a real browser against the live site",
        "smoke: Quick smoke scenarios",
        "critical: Critical path scenarios (trace capture when enabled)",
        "homepage: Home page scenarios",
        "search: Search scenarios",
        "news: News and media scenarios",
        "research: Research and insights scenarios",
        "responsive: Responsive layout scenarios",
        "performance: Performance threshold scenarios",
        "mobile: Mobile viewport",
        "tablet: Tablet viewport",
        "desktop: Desktop viewport",
        "chromium_only: Runs only on Chromium",
        "firefox_only: Runs only on Firefox",
        "webkit_only: Runs only on WebKit",
        "t3_only: Runs only against T3",
        "t5_only: Runs only against T5",
    ]:
        config.addinivalue_line("markers", marker)
