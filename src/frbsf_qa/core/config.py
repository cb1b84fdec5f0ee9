"""
Configuration management for the FRBSF E2E Automation Framework.

A run is configured from a named environment profile (``t3``, ``t5``) plus
overrides read from process environment variables or ``.env``. Overrides win
over profile defaults and are applied exactly once, in
:func:`resolve_environment`; the result is frozen for the rest of the run.
"""

from enum import Enum
from pathlib import Path
from typing import Dict, Optional
from pydantic import BaseModel, ConfigDict, Field, SecretStr, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict
from .errors import ConfigurationError


class ViewportType(str, Enum):
    DESKTOP = "desktop"
    MOBILE = "mobile"
    TABLET = "tablet"


class BrowserType(str, Enum):
    CHROMIUM = "chromium"
    FIREFOX = "firefox"
    WEBKIT = "webkit"


BROWSER_ALIASES = {
    "chrome": BrowserType.CHROMIUM,
    "chromium": BrowserType.CHROMIUM,
    "firefox": BrowserType.FIREFOX,
    "safari": BrowserType.WEBKIT,
    "webkit": BrowserType.WEBKIT,
}


class Viewport(BaseModel):
    model_config = ConfigDict(frozen=True)

    width: int
    height: int

    def as_dict(self) -> dict:
        return {"width": self.width, "height": self.height}


VIEWPORTS: Dict[ViewportType, Viewport] = {
    ViewportType.MOBILE: Viewport(width=375, height=667),
    ViewportType.TABLET: Viewport(width=768, height=1024),
    ViewportType.DESKTOP: Viewport(width=1920, height=1080),
}


class Settings(BaseSettings):
    """Raw process overrides. Unset fields leave the profile default alone."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )
    # Target environment
    env: str = Field(default="t3")
    base_url: Optional[str] = Field(default=None)
    # Browser selection
    browser: BrowserType = Field(default=BrowserType.CHROMIUM)
    headed: bool = Field(default=False)
    slow_mo: Optional[int] = Field(default=None, ge=0)
    # Viewport: named class or explicit size
    viewport: Optional[ViewportType] = Field(default=None)
    viewport_width: Optional[int] = Field(default=None, gt=0)
    viewport_height: Optional[int] = Field(default=None, gt=0)
    # Global timeout override (ms)
    timeout: Optional[int] = Field(default=None, gt=0)
    # Artifacts
    record_video: Optional[bool] = Field(default=None)
    record_har: bool = Field(default=False)
    trace_critical: bool = Field(default=False)
    report_dir: Path = Field(default=Path("reports"))
    # Logging
    debug: bool = Field(default=False)
    verbose: bool = Field(default=False)
    ci: bool = Field(default=False)

    @field_validator("browser", mode="before")
    @classmethod
    def normalize_browser(cls, v):
        if isinstance(v, BrowserType) or v is None:
            return v or BrowserType.CHROMIUM
        return BROWSER_ALIASES.get(str(v).strip().lower(), BrowserType.CHROMIUM)

    @field_validator("viewport", mode="before")
    @classmethod
    def blank_viewport(cls, v):
        if isinstance(v, str) and not v.strip():
            return None
        return v

    @field_validator("report_dir", mode="before")
    @classmethod
    def ensure_path(cls, v):
        if isinstance(v, str):
            return Path(v)
        return v


class EnvironmentProfile(BaseModel):
    """Defaults for one named deployment target."""

    model_config = ConfigDict(frozen=True)

    name: str
    base_url: str
    application_password: SecretStr = SecretStr("")
    isva_password: SecretStr = SecretStr("")
    viewport: Viewport = VIEWPORTS[ViewportType.DESKTOP]
    timeout: int = 30000
    slow_mo: int = 0
    video: bool = True
    screenshot: bool = True
    api_timeout: int = 10000
    page_load_timeout: int = 30000
    element_timeout: int = 10000


ENVIRONMENTS: Dict[str, EnvironmentProfile] = {
    "t3": EnvironmentProfile(
        name="t3",
        base_url="https://frbsf.org",
        application_password=SecretStr("t3_app_password_2024"),
        isva_password=SecretStr("t3_isva_password_2024"),
    ),
    "t5": EnvironmentProfile(
        name="t5",
        base_url="https://frbsf.org",
        application_password=SecretStr("t5_app_password_2024"),
        isva_password=SecretStr("t5_isva_password_2024"),
    ),
}


class BrowserOptions(BaseModel):
    model_config = ConfigDict(frozen=True)

    engine: BrowserType = BrowserType.CHROMIUM
    headless: bool = True
    viewport: Viewport = VIEWPORTS[ViewportType.DESKTOP]
    slow_mo: int = 0
    # Default action timeout applied to every browser context
    timeout: int = 30000
    video: bool = True
    screenshot: bool = True
    record_har: bool = False


class EnvironmentConfig(BaseModel):
    """Resolved, immutable configuration for one process run."""

    model_config = ConfigDict(frozen=True)

    name: str
    base_url: str
    browser: BrowserOptions = Field(default_factory=BrowserOptions)
    application_password: SecretStr = SecretStr("")
    isva_password: SecretStr = SecretStr("")
    api_timeout: int = 10000
    page_load_timeout: int = 30000
    element_timeout: int = 10000
    trace_critical: bool = False
    debug: bool = False
    verbose: bool = False
    ci: bool = False
    report_dir: Path = Path("reports")

    @property
    def screenshot_dir(self) -> Path:
        return self.report_dir / "screenshots"

    @property
    def video_dir(self) -> Path:
        return self.report_dir / "videos"

    @property
    def trace_dir(self) -> Path:
        return self.report_dir / "traces"

    @property
    def har_path(self) -> Path:
        return self.report_dir / "network.har"

    def is_test_environment(self) -> bool:
        return self.name in ("t3", "t5")

    def is_production(self) -> bool:
        return self.name == "prod"

    def ensure_directories(self):
        for directory in (self.report_dir, self.screenshot_dir, self.video_dir, self.trace_dir):
            directory.mkdir(parents=True, exist_ok=True)


def resolve_environment(
    settings: Optional[Settings] = None,
    profiles: Optional[Dict[str, EnvironmentProfile]] = None,
) -> EnvironmentConfig:
    """Resolve the named environment and apply process overrides on top of it."""
    settings = settings or get_settings()
    profiles = profiles if profiles is not None else ENVIRONMENTS

    env_name = settings.env.strip().lower()
    profile = profiles.get(env_name)
    if profile is None:
        raise ConfigurationError(
            f"Environment '{settings.env}' not found. "
            f"Available environments: {', '.join(sorted(profiles))}"
        )

    viewport = profile.viewport
    if settings.viewport is not None:
        viewport = VIEWPORTS[settings.viewport]
    if settings.viewport_width and settings.viewport_height:
        viewport = Viewport(width=settings.viewport_width, height=settings.viewport_height)

    timeout = profile.timeout
    page_load_timeout = profile.page_load_timeout
    if settings.timeout is not None:
        timeout = settings.timeout
        page_load_timeout = settings.timeout

    browser = BrowserOptions(
        engine=settings.browser,
        headless=not settings.headed,
        viewport=viewport,
        slow_mo=settings.slow_mo if settings.slow_mo is not None else profile.slow_mo,
        timeout=timeout,
        video=settings.record_video if settings.record_video is not None else profile.video,
        screenshot=profile.screenshot,
        record_har=settings.record_har,
    )
    return EnvironmentConfig(
        name=profile.name,
        base_url=(settings.base_url or profile.base_url).rstrip("/"),
        browser=browser,
        application_password=profile.application_password,
        isva_password=profile.isva_password,
        api_timeout=profile.api_timeout,
        page_load_timeout=page_load_timeout,
        element_timeout=profile.element_timeout,
        trace_critical=settings.trace_critical,
        debug=settings.debug,
        verbose=settings.verbose,
        ci=settings.ci,
        report_dir=settings.report_dir,
    )


_settings: Settings | None = None


def get_settings() -> Settings:
    global _settings
    if _settings is None:
        _settings = Settings()
    return _settings
