"""
Pytest fixtures that run live FRBSF scenarios through the scenario lifecycle.

One browser is launched per session; every test gets its own context and
``ScenarioWorld``. Markers on a test are its tags.
"""

import logging
from typing import AsyncGenerator

import pytest
import pytest_asyncio

from frbsf_qa.core import (
    EnvironmentConfig,
    LaunchError,
    ScenarioStatus,
    Settings,
    UnsupportedConfigurationError,
    resolve_environment,
)
from frbsf_qa.core.log import configure_logging
from frbsf_qa.lifecycle import ScenarioLifecycle, status_from_reports
from frbsf_qa.world import ScenarioWorld

logger = logging.getLogger(__name__)

# Markers that pytest or plugins add and which are not scenario tags
_NON_TAG_MARKERS = {"asyncio", "parametrize", "usefixtures", "filterwarnings", "skip", "skipif", "xfail"}
MAX_ERROR_CHARS = 4000

# ============================================================================
# Environment
# ============================================================================

@pytest.fixture(scope="session")
def environment_config(request) -> EnvironmentConfig:
    """Resolve the run environment; command line options win over env vars."""
    overrides = {}
    if request.config.getoption("--env"):
        overrides["env"] = request.config.getoption("--env")
    if request.config.getoption("--browser-type"):
        overrides["browser"] = request.config.getoption("--browser-type")
    if request.config.getoption("--viewport"):
        overrides["viewport"] = request.config.getoption("--viewport")
    if request.config.getoption("--headed"):
        overrides["headed"] = True
    if request.config.getoption("--base-url"):
        overrides["base_url"] = request.config.getoption("--base-url")
    return resolve_environment(Settings(**overrides))

# ============================================================================
# Lifecycle Fixtures
# ============================================================================

@pytest_asyncio.fixture(scope="session", loop_scope="session")
async def lifecycle(environment_config: EnvironmentConfig) -> AsyncGenerator[ScenarioLifecycle, None]:
    configure_logging(environment_config)
    run = ScenarioLifecycle(environment_config)
    try:
        await run.run_start()
    except LaunchError as e:
        pytest.exit(f"Browser launch failed, aborting run: {e}", returncode=3)
    yield run
    summary = await run.run_end()
    if summary:
        logger.info(f"Summary written to {summary}")


@pytest_asyncio.fixture(loop_scope="session")
async def world(lifecycle: ScenarioLifecycle, request) -> AsyncGenerator[ScenarioWorld, None]:
    node = request.node
    tags = [m.name for m in node.iter_markers() if m.name not in _NON_TAG_MARKERS]
    try:
        scenario = await lifecycle.scenario_setup(node.name, tags)
    except UnsupportedConfigurationError as e:
        pytest.skip(str(e))

    try:
        await scenario.initialize_page_objects()
    except Exception as e:
        await lifecycle.scenario_teardown(scenario, ScenarioStatus.FAILED, str(e))
        raise

    yield scenario

    rep_setup = getattr(node, "rep_setup", None)
    rep_call = getattr(node, "rep_call", None)
    error_message = None
    if rep_call is not None and rep_call.failed:
        error_message = rep_call.longreprtext[-MAX_ERROR_CHARS:]
    await lifecycle.scenario_teardown(scenario, status_from_reports(rep_setup, rep_call), error_message)

# ============================================================================
# Hooks
# ============================================================================

@pytest.hookimpl(hookwrapper=True)
def pytest_runtest_makereport(item, call):
    """Keep each phase report on the item so fixtures can see the outcome."""
    outcome = yield
    rep = outcome.get_result()
    setattr(item, f"rep_{rep.when}", rep)
