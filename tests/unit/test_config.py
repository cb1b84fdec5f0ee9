"""Environment resolution and process overrides."""

import pytest
from pydantic import ValidationError

from frbsf_qa.core import ConfigurationError
from frbsf_qa.core.config import (
    BrowserType,
    Settings,
    ViewportType,
    resolve_environment,
)


def settings(**overrides) -> Settings:
    return Settings(_env_file=None, **overrides)


class TestResolveEnvironment:

    def test_t3_defaults(self):
        config = resolve_environment(settings())
        assert config.name == "t3"
        assert config.base_url == "https://frbsf.org"
        assert config.browser.engine == BrowserType.CHROMIUM
        assert config.browser.headless is True
        assert config.browser.viewport.as_dict() == {"width": 1920, "height": 1080}
        assert config.browser.timeout == 30000
        assert config.page_load_timeout == 30000
        assert config.element_timeout == 10000
        assert config.api_timeout == 10000
        assert config.browser.video is True

    def test_t5_is_available(self):
        config = resolve_environment(settings(env="T5"))
        assert config.name == "t5"
        assert config.is_test_environment()
        assert not config.is_production()

    def test_unknown_environment_lists_available(self):
        with pytest.raises(ConfigurationError) as exc:
            resolve_environment(settings(env="staging"))
        assert "Environment 'staging' not found" in str(exc.value)
        assert "t3, t5" in str(exc.value)

    def test_viewport_class_override(self):
        config = resolve_environment(settings(viewport=ViewportType.MOBILE))
        assert config.browser.viewport.as_dict() == {"width": 375, "height": 667}

    def test_explicit_viewport_size_wins_over_class(self):
        config = resolve_environment(
            settings(viewport="tablet", viewport_width=1280, viewport_height=720)
        )
        assert config.browser.viewport.as_dict() == {"width": 1280, "height": 720}

    def test_timeout_override_applies_to_actions_and_page_loads(self):
        config = resolve_environment(settings(timeout=45000))
        assert config.browser.timeout == 45000
        assert config.page_load_timeout == 45000
        assert config.element_timeout == 10000

    def test_headed_and_slow_mo(self):
        config = resolve_environment(settings(headed=True, slow_mo=250))
        assert config.browser.headless is False
        assert config.browser.slow_mo == 250

    def test_base_url_override_strips_trailing_slash(self):
        config = resolve_environment(settings(base_url="https://staging.frbsf.org/"))
        assert config.base_url == "https://staging.frbsf.org"

    def test_video_can_be_disabled(self):
        config = resolve_environment(settings(record_video=False))
        assert config.browser.video is False

    def test_resolved_config_is_frozen(self):
        config = resolve_environment(settings())
        with pytest.raises(ValidationError):
            config.base_url = "https://example.com"

    def test_passwords_are_not_printed(self):
        config = resolve_environment(settings())
        assert "t3_app_password_2024" not in repr(config)
        assert config.application_password.get_secret_value() == "t3_app_password_2024"


class TestSettings:

    @pytest.mark.parametrize(
        "raw, expected",
        [
            ("chromium", BrowserType.CHROMIUM),
            ("chrome", BrowserType.CHROMIUM),
            ("Firefox", BrowserType.FIREFOX),
            ("safari", BrowserType.WEBKIT),
            ("webkit", BrowserType.WEBKIT),
            ("opera", BrowserType.CHROMIUM),
        ],
    )
    def test_browser_aliases(self, raw, expected):
        assert settings(browser=raw).browser == expected

    def test_reads_process_environment(self, monkeypatch):
        monkeypatch.setenv("ENV", "t5")
        monkeypatch.setenv("BROWSER", "firefox")
        monkeypatch.setenv("HEADED", "true")
        monkeypatch.setenv("VIEWPORT", "mobile")
        monkeypatch.setenv("CI", "true")
        config = resolve_environment(settings())
        assert config.name == "t5"
        assert config.browser.engine == BrowserType.FIREFOX
        assert config.browser.headless is False
        assert config.browser.viewport.width == 375
        assert config.ci is True

    def test_blank_viewport_means_profile_default(self, monkeypatch):
        monkeypatch.setenv("VIEWPORT", "")
        assert settings().viewport is None


def test_ensure_directories(config):
    config.ensure_directories()
    for directory in (config.report_dir, config.screenshot_dir, config.video_dir, config.trace_dir):
        assert directory.is_dir()
