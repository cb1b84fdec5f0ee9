"""
Run- and scenario-level lifecycle.

The run launches one browser before the first scenario and closes it after
the last one. Each scenario gets a fresh browser context and a fresh
:class:`ScenarioWorld`, is configured from its tags, and is torn down
whether it passed or not. Teardown never raises: a failure while collecting
artifacts or closing the context is logged, and the statistics still count
the scenario exactly once.
"""

import logging
import re
import time
import weakref
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Iterable, List, Optional
from .core.browser import BrowserManager
from .core.config import BrowserType, EnvironmentConfig
from .core.errors import UnsupportedConfigurationError
from .core.log import log_scenario
from .core.reporter import RunReporter, RunStatistics, ScenarioResult, ScenarioStatus
from .world import ScenarioWorld

logger = logging.getLogger(__name__)

PERFORMANCE_THRESHOLD_MS = 5000

VIEWPORT_TAGS = ("mobile", "tablet", "desktop")
BROWSER_ONLY_TAGS = {
    "chromium-only": BrowserType.CHROMIUM,
    "firefox-only": BrowserType.FIREFOX,
    "webkit-only": BrowserType.WEBKIT,
}
ENVIRONMENT_ONLY_TAGS = {
    "t3-only": "t3",
    "t5-only": "t5",
}


class LifecycleState(str, Enum):
    NOT_STARTED = "not-started"
    RUN_ACTIVE = "run-active"
    RUN_COMPLETE = "run-complete"


class ScenarioPhase(str, Enum):
    SETUP = "setup"
    EXECUTING = "executing"
    TEARDOWN = "teardown"
    FINISHED = "finished"


def normalize_tag(tag: str) -> str:
    """``@Chromium-Only``, ``chromium-only`` and ``chromium_only`` are one tag."""
    return tag.strip().lstrip("@").lower().replace("_", "-")


def status_from_reports(*reports) -> ScenarioStatus:
    """Collapse pytest phase reports (setup, call, ...) into one scenario status."""
    present = [r for r in reports if r is not None]
    if any(getattr(r, "failed", False) for r in present):
        return ScenarioStatus.FAILED
    if not present or any(getattr(r, "skipped", False) for r in present):
        return ScenarioStatus.SKIPPED
    return ScenarioStatus.PASSED


class ScenarioLifecycle:
    """Drives one run: run start, per-scenario setup/teardown, run end."""

    def __init__(
        self,
        config: EnvironmentConfig,
        browser_manager: Optional[BrowserManager] = None,
        reporter: Optional[RunReporter] = None,
    ):
        self.config = config
        self.browser_manager = browser_manager or BrowserManager(config)
        self.reporter = reporter or RunReporter(config.report_dir)
        self.stats = RunStatistics()
        self.state = LifecycleState.NOT_STARTED
        # Entries go away with their world
        self._scenarios: "weakref.WeakKeyDictionary[ScenarioWorld, _ScenarioRecord]" = (
            weakref.WeakKeyDictionary()
        )

    def phase(self, world: ScenarioWorld) -> Optional[ScenarioPhase]:
        record = self._scenarios.get(world)
        return record.phase if record else None

    # ------------------------------------------------------------------
    # Run scope
    # ------------------------------------------------------------------

    async def run_start(self):
        """Prepare output directories and launch the shared browser."""
        if self.state != LifecycleState.NOT_STARTED:
            raise RuntimeError(f"Run already started (state={self.state.value})")

        self.config.ensure_directories()
        self.stats.start()
        options = self.config.browser
        logger.info("=" * 80)
        logger.info("TEST EXECUTION STARTED")
        logger.info("=" * 80)
        logger.info(f"Environment: {self.config.name}")
        logger.info(f"Base URL: {self.config.base_url}")
        logger.info(f"Browser: {options.engine.value}")
        logger.info(f"Headless: {options.headless}")
        logger.info(f"Viewport: {options.viewport.width}x{options.viewport.height}")
        logger.info("=" * 80)

        try:
            await self.browser_manager.launch_browser()
        except Exception:
            logger.error("Failed to launch browser for test suite")
            raise
        self.state = LifecycleState.RUN_ACTIVE
        logger.info("Browser launched successfully for test suite")

    async def run_end(self) -> Optional[Path]:
        """Log the summary, close the browser and write the summary artifacts.

        Returns the summary path, or None when it could not be written.
        """
        self.stats.finish()
        duration = self.stats.duration_ms
        logger.info("=" * 80)
        logger.info("TEST EXECUTION COMPLETED")
        logger.info("=" * 80)
        logger.info(f"Total Scenarios: {self.stats.total}")
        logger.info(f"Passed: {self.stats.passed}")
        logger.info(f"Failed: {self.stats.failed}")
        logger.info(f"Skipped: {self.stats.skipped}")
        logger.info(f"Total Duration: {duration}ms ({duration / 1000:.2f}s)")
        logger.info(f"Success Rate: {self.stats.success_rate:.2f}%")
        logger.info("=" * 80)

        try:
            await self.browser_manager.close_browser()
            logger.info("Browser closed successfully")
        except Exception as e:
            logger.error(f"Failed to close browser: {e}")

        self.state = LifecycleState.RUN_COMPLETE
        path = None
        try:
            path = self.reporter.save_summary(self.stats, self.config)
        except OSError as e:
            logger.error(f"Failed to write test summary: {e}")
        try:
            self.reporter.generate_html_report(self.stats)
        except OSError as e:
            logger.error(f"Failed to generate HTML report: {e}")
        return path

    # ------------------------------------------------------------------
    # Scenario scope
    # ------------------------------------------------------------------

    async def scenario_setup(self, name: str, tags: Iterable[str] = ()) -> ScenarioWorld:
        """
        Count the scenario, open a fresh context and apply tag configuration.

        When setup fails the scenario is torn down right here (a tag
        restriction counts as skipped, anything else as failed) and the
        error propagates so no step runs.
        """
        if self.state != LifecycleState.RUN_ACTIVE:
            raise RuntimeError("scenario_setup called outside an active run")

        tag_list = [normalize_tag(t) for t in tags]
        world = ScenarioWorld(self.browser_manager, self.config)
        world.current_scenario = name
        self.stats.total += 1
        record = _ScenarioRecord(name=name, tags=tag_list)
        self._scenarios[world] = record
        log_scenario(name, "START", log=logger)

        try:
            await self.browser_manager.create_context()
            if tag_list:
                logger.info(f"Scenario tags: {', '.join('@' + t for t in tag_list)}")
            await self.apply_tag_configuration(world, tag_list)
        except UnsupportedConfigurationError as e:
            logger.warning(f"Scenario {name} not applicable: {e}")
            await self.scenario_teardown(world, ScenarioStatus.SKIPPED, str(e))
            raise
        except Exception as e:
            logger.error(f"Failed to set up scenario: {name}: {e}")
            await self.scenario_teardown(world, ScenarioStatus.FAILED, str(e))
            raise

        record.phase = ScenarioPhase.EXECUTING
        return world

    async def apply_tag_configuration(self, world: ScenarioWorld, tags: Iterable[str]):
        tag_set = {normalize_tag(t) for t in tags}

        # Restrictions first so a mismatched scenario touches nothing else
        for tag, engine in BROWSER_ONLY_TAGS.items():
            if tag in tag_set and self.config.browser.engine != engine:
                raise UnsupportedConfigurationError(
                    f"This scenario requires {engine.value} "
                    f"(active browser: {self.config.browser.engine.value})"
                )
        for tag, env_name in ENVIRONMENT_ONLY_TAGS.items():
            if tag in tag_set and self.config.name != env_name:
                raise UnsupportedConfigurationError(
                    f"This scenario can only run in {env_name.upper()} environment "
                    f"(active environment: {self.config.name})"
                )

        if "mobile" in tag_set:
            await world.set_mobile_viewport()
        elif "tablet" in tag_set:
            await world.set_tablet_viewport()
        elif "desktop" in tag_set:
            await world.set_desktop_viewport()

        if "performance" in tag_set:
            world.set_scenario_context("performanceTest", True)
            world.set_scenario_context("performanceThreshold", PERFORMANCE_THRESHOLD_MS)
            world.set_test_data("performanceThreshold", PERFORMANCE_THRESHOLD_MS)

        if "critical" in tag_set:
            world.set_scenario_context("criticalTest", True)
            if self.config.browser.video:
                logger.info("Video recording enabled for critical test")
            if self.config.trace_critical:
                await world.capture_trace(f"critical-{_slug(world.current_scenario)}")

        logger.info(f"Scenario configuration completed for: {world.current_scenario}")

    async def scenario_teardown(
        self,
        world: ScenarioWorld,
        status: ScenarioStatus,
        error_message: Optional[str] = None,
    ) -> ScenarioResult:
        """Record the outcome, collect failure artifacts and close the context."""
        record = self._scenarios.get(world)
        if record is None:
            record = _ScenarioRecord(name=world.current_scenario or "Unknown Scenario")
            logger.warning(f"Teardown for a scenario that was never set up: {record.name}")
            self._scenarios[world] = record
            self.stats.total += 1
        if record.result is not None:
            logger.warning(f"Teardown already ran for scenario: {record.name}")
            return record.result
        record.phase = ScenarioPhase.TEARDOWN

        name = record.name
        status = ScenarioStatus(status)
        duration = (time.perf_counter() - record.started_at) * 1000
        result = ScenarioResult(
            name=name,
            status=status,
            duration_ms=duration,
            error_message=error_message,
            tags=record.tags,
        )
        record.result = result

        try:
            if status == ScenarioStatus.FAILED:
                logger.error(f"Scenario failed: {name} | step: {world.current_step or 'unknown'} | {error_message}")
                try:
                    await world.capture_screenshot(f"failed-scenario-{_slug(name)}")
                except Exception as e:
                    logger.error(f"Failed to capture failure screenshot: {e}")

            if world.active_trace:
                try:
                    await world.stop_trace(world.active_trace)
                except Exception as e:
                    logger.error(f"Failed to save trace for {name}: {e}")

            result.screenshots = list(world.screenshots)
            result.traces = list(world.traces)
            self.stats.record(result)
            log_scenario(name, "END", status.value.upper(), log=logger)
            logger.info(f"Scenario duration: {duration:.0f}ms")
        finally:
            try:
                await self.browser_manager.close_context()
            except Exception as e:
                logger.error(f"Error during scenario cleanup: {e}")
            world.cleanup_test_data()
            record.phase = ScenarioPhase.FINISHED
        return result


@dataclass
class _ScenarioRecord:
    name: str
    tags: List[str] = field(default_factory=list)
    phase: ScenarioPhase = ScenarioPhase.SETUP
    started_at: float = field(default_factory=time.perf_counter)
    result: Optional[ScenarioResult] = None


def _slug(value: Optional[str]) -> str:
    return re.sub(r"\s+", "-", (value or "unknown").strip())
