"""
================================================================================
Suite Configuration Loader
================================================================================

YAML-based configuration with named environment profiles.

Features:
    - Profiles (development, staging, production) selected by TEST_ENV
    - Shared `defaults` section deep-merged under the selected profile
    - Environment variable override (URLS_BASE overrides urls.base)
    - Frozen, read-only SuiteConfig loaded once per process

Author: Automation Team
License: MIT
================================================================================
"""

from __future__ import annotations

import copy
import os
from dataclasses import dataclass, replace
from pathlib import Path
from typing import Any, Dict, Optional, Tuple

import yaml
from loguru import logger


DEFAULT_CONFIG_PATH = Path(__file__).parent.parent.parent.parent / "config" / "config.yaml"

DEFAULT_PROFILE = "development"
PROFILE_ENV_VAR = "TEST_ENV"

# Aliases kept for CI pipelines that export the Playwright-style name
BASE_URL_ENV_VARS = ("UI_BASE_URL", "PLAYWRIGHT_BASE_URL")


_DEFAULTS: Dict[str, Any] = {
    "timeouts": {
        "short": 5000,
        "medium": 15000,
        "long": 30000,
        "page_load": 30000,
        "api_request": 10000,
    },
    "urls": {
        "base": "https://job-portal-user-dev-skx7zw44dq-et.a.run.app",
        "mentoring": "/mentoring",
    },
    "viewports": {
        "desktop": {"width": 1920, "height": 1080},
        "tablet": {"width": 1024, "height": 768},
        "mobile": {"width": 375, "height": 667},
    },
    "responsive_matrix": {
        "desktop-large": {"width": 1920, "height": 1080},
        "desktop-standard": {"width": 1366, "height": 768},
        "tablet-landscape": {"width": 1024, "height": 768},
        "tablet-portrait": {"width": 768, "height": 1024},
        "mobile-standard": {"width": 375, "height": 667},
        "mobile-small": {"width": 320, "height": 568},
    },
    "browsers": ["chromium", "firefox", "webkit"],
    "retries": {"ci": 2, "local": 1},
    "screenshots": {"on_failure": True, "on_success": False, "full_page": True},
    "videos": {"enabled": True, "quality": "medium"},
    "traces": {"on_failure": True},
    "readiness": {
        "probe_timeout": 2000,
        "indicator_timeout": 15000,
        "min_words": 50,
        "settle_delay": 2000,
        "heading_timeout": 20000,
        "loading_selectors": [
            ".loading",
            ".spinner",
            ".loader",
            "[data-loading]",
            ".skeleton",
            ".shimmer",
            "[class*='loading']",
        ],
    },
    "mentoring": {
        "title_keywords": ["mentoring", "mentor", "karir"],
        "name_heuristic": {
            "max_words": 4,
            "max_length": 100,
            "excluded_phrases": ["mentoring", "karir", "tingkatkan"],
        },
        "max_load_time": 10000,
    },
    "scenario_data": {
        "search_terms": {
            "valid": ["Software Engineer", "Product Manager", "Designer", "Data Scientist"],
            "invalid": ["", "!@#$%^&*()"],
            "oversized_length": 1000,
        },
        "categories": {
            "technology": ["IT & Eng", "Technology", "Engineering", "Software"],
            "business": ["Business", "Management", "Sales", "Marketing"],
            "design": ["Design", "UX", "UI", "Creative"],
        },
        "user_agents": {
            "desktop": (
                "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 "
                "(KHTML, like Gecko) Chrome/120.0.0.0 Safari/537.36"
            ),
            "mobile": (
                "Mozilla/5.0 (iPhone; CPU iPhone OS 16_0 like Mac OS X) AppleWebKit/605.1.15 "
                "(KHTML, like Gecko) Version/16.0 Mobile/15E148 Safari/604.1"
            ),
            "tablet": (
                "Mozilla/5.0 (iPad; CPU OS 16_0 like Mac OS X) AppleWebKit/605.1.15 "
                "(KHTML, like Gecko) Version/16.0 Mobile/15E148 Safari/604.1"
            ),
        },
    },
    "artifacts": {
        "screenshot_dir": "screenshots",
        "reports_dir": "reports",
        "video_dir": "reports/videos",
        "trace_dir": "reports/traces",
    },
    "logging": {"level": "INFO", "file": None},
}


class ConfigurationError(Exception):
    """Raised when configuration loading or access fails."""
    pass


# =============================================================================
# Typed configuration
# =============================================================================

@dataclass(frozen=True)
class Timeouts:
    short: int
    medium: int
    long: int
    page_load: int
    api_request: int


@dataclass(frozen=True)
class Urls:
    base: str
    mentoring: str

    @property
    def mentoring_url(self) -> str:
        return f"{self.base.rstrip('/')}{self.mentoring}"


@dataclass(frozen=True)
class Viewport:
    name: str
    width: int
    height: int

    def as_size(self) -> Dict[str, int]:
        """Playwright viewport dict."""
        return {"width": self.width, "height": self.height}


@dataclass(frozen=True)
class Retries:
    ci: int
    local: int

    def for_environment(self, is_ci: bool) -> int:
        return self.ci if is_ci else self.local


@dataclass(frozen=True)
class ScreenshotSettings:
    on_failure: bool
    on_success: bool
    full_page: bool


@dataclass(frozen=True)
class VideoSettings:
    enabled: bool
    quality: str


@dataclass(frozen=True)
class ReadinessSettings:
    probe_timeout: int
    indicator_timeout: int
    min_words: int
    settle_delay: int
    heading_timeout: int
    loading_selectors: Tuple[str, ...]


@dataclass(frozen=True)
class NameHeuristic:
    """Loose "looks like a person's name" filter for mentor name extraction."""

    max_words: int
    max_length: int
    excluded_phrases: Tuple[str, ...]

    def matches(self, text: str) -> bool:
        candidate = text.strip()
        if not candidate or len(candidate) >= self.max_length:
            return False
        lowered = candidate.lower()
        if any(phrase in lowered for phrase in self.excluded_phrases):
            return False
        return len(candidate.split()) <= self.max_words


@dataclass(frozen=True)
class MentoringSettings:
    title_keywords: Tuple[str, ...]
    name_heuristic: NameHeuristic
    max_load_time: int


@dataclass(frozen=True)
class ScenarioData:
    valid_search_terms: Tuple[str, ...]
    invalid_search_terms: Tuple[str, ...]
    categories: Dict[str, Tuple[str, ...]]
    user_agents: Dict[str, str]

    def category_list(self, *groups: str) -> Tuple[str, ...]:
        """Flatten category groups (all groups when none given)."""
        names = groups or tuple(self.categories)
        flattened = []
        for group in names:
            flattened.extend(self.categories.get(group, ()))
        return tuple(flattened)


@dataclass(frozen=True)
class ArtifactPaths:
    screenshot_dir: Path
    reports_dir: Path
    video_dir: Path
    trace_dir: Path


@dataclass(frozen=True)
class SuiteConfig:
    """Read-only configuration bundle for one profile."""

    profile: str
    timeouts: Timeouts
    urls: Urls
    viewports: Tuple[Viewport, ...]
    responsive_matrix: Tuple[Viewport, ...]
    browsers: Tuple[str, ...]
    retries: Retries
    screenshots: ScreenshotSettings
    videos: VideoSettings
    trace_on_failure: bool
    readiness: ReadinessSettings
    mentoring: MentoringSettings
    scenario_data: ScenarioData
    artifacts: ArtifactPaths
    log_level: str
    log_file: Optional[str]

    def viewport(self, name: str) -> Viewport:
        for viewport in self.viewports + self.responsive_matrix:
            if viewport.name == name:
                return viewport
        raise ConfigurationError(f"Unknown viewport preset: {name}")

    def with_action_timeout(self, milliseconds: int) -> "SuiteConfig":
        """Copy with the action and navigation timeouts set to `milliseconds`."""
        if milliseconds <= 0:
            raise ValueError(f"Action timeout must be positive, got {milliseconds}")
        return replace(
            self,
            timeouts=replace(self.timeouts, medium=milliseconds, page_load=milliseconds),
        )

    @classmethod
    def from_dict(cls, profile: str, data: Dict[str, Any]) -> "SuiteConfig":
        try:
            terms = data["scenario_data"]["search_terms"]
            invalid_terms = list(terms.get("invalid", []))
            oversized = int(terms.get("oversized_length", 0))
            if oversized:
                invalid_terms.append("x" * oversized)

            heuristic = data["mentoring"]["name_heuristic"]
            readiness = data["readiness"]
            artifacts = data["artifacts"]

            return cls(
                profile=profile,
                timeouts=Timeouts(**{k: int(v) for k, v in data["timeouts"].items()}),
                urls=Urls(base=str(data["urls"]["base"]), mentoring=str(data["urls"]["mentoring"])),
                viewports=_viewports(data["viewports"]),
                responsive_matrix=_viewports(data["responsive_matrix"]),
                browsers=tuple(data["browsers"]),
                retries=Retries(ci=int(data["retries"]["ci"]), local=int(data["retries"]["local"])),
                screenshots=ScreenshotSettings(**{k: bool(v) for k, v in data["screenshots"].items()}),
                videos=VideoSettings(
                    enabled=bool(data["videos"]["enabled"]),
                    quality=str(data["videos"]["quality"]),
                ),
                trace_on_failure=bool(data["traces"]["on_failure"]),
                readiness=ReadinessSettings(
                    probe_timeout=int(readiness["probe_timeout"]),
                    indicator_timeout=int(readiness["indicator_timeout"]),
                    min_words=int(readiness["min_words"]),
                    settle_delay=int(readiness["settle_delay"]),
                    heading_timeout=int(readiness["heading_timeout"]),
                    loading_selectors=tuple(readiness["loading_selectors"]),
                ),
                mentoring=MentoringSettings(
                    title_keywords=tuple(k.lower() for k in data["mentoring"]["title_keywords"]),
                    name_heuristic=NameHeuristic(
                        max_words=int(heuristic["max_words"]),
                        max_length=int(heuristic["max_length"]),
                        excluded_phrases=tuple(p.lower() for p in heuristic["excluded_phrases"]),
                    ),
                    max_load_time=int(data["mentoring"]["max_load_time"]),
                ),
                scenario_data=ScenarioData(
                    valid_search_terms=tuple(terms["valid"]),
                    invalid_search_terms=tuple(invalid_terms),
                    categories={
                        group: tuple(names)
                        for group, names in data["scenario_data"]["categories"].items()
                    },
                    user_agents=dict(data["scenario_data"]["user_agents"]),
                ),
                artifacts=ArtifactPaths(
                    screenshot_dir=Path(artifacts["screenshot_dir"]),
                    reports_dir=Path(artifacts["reports_dir"]),
                    video_dir=Path(artifacts["video_dir"]),
                    trace_dir=Path(artifacts["trace_dir"]),
                ),
                log_level=str(data["logging"]["level"]),
                log_file=data["logging"].get("file"),
            )
        except (KeyError, TypeError, ValueError) as e:
            raise ConfigurationError(f"Invalid configuration for profile '{profile}': {e}") from e


def _viewports(section: Dict[str, Dict[str, Any]]) -> Tuple[Viewport, ...]:
    return tuple(
        Viewport(name=name, width=int(size["width"]), height=int(size["height"]))
        for name, size in section.items()
    )


# =============================================================================
# Loader
# =============================================================================

class ConfigLoader:
    """
    Profile-aware configuration loader.

    Configuration hierarchy (highest to lowest priority):
        1. Environment variables (URLS_BASE, TIMEOUTS_PAGE_LOAD, UI_BASE_URL)
        2. Selected profile in the YAML file
        3. `defaults` section in the YAML file
        4. Built-in defaults

    Usage:
        >>> loader = ConfigLoader()
        >>> loader.get("urls.base")
        'https://job-portal-user-dev-skx7zw44dq-et.a.run.app'
        >>> loader.suite_config().timeouts.page_load
        30000
    """

    _instance: Optional["ConfigLoader"] = None

    def __new__(cls, config_path: Optional[Path] = None, profile: Optional[str] = None) -> "ConfigLoader":
        """Singleton - configuration is loaded once per process."""
        if cls._instance is None:
            cls._instance = super().__new__(cls)
            cls._instance._initialized = False
        return cls._instance

    def __init__(self, config_path: Optional[Path] = None, profile: Optional[str] = None) -> None:
        """
        Args:
            config_path: YAML file path. Uses DEFAULT_CONFIG_PATH if not specified.
            profile: Profile name. Uses TEST_ENV (default: development) if not specified.
        """
        if getattr(self, "_initialized", False):
            return

        self._config_path = Path(config_path) if config_path else DEFAULT_CONFIG_PATH
        self._requested_profile = profile
        self._config: Dict[str, Any] = {}
        self._suite_config: Optional[SuiteConfig] = None
        self._load_config()
        self._initialized = True

    @property
    def profile(self) -> str:
        return self._profile

    def _load_config(self) -> None:
        raw: Dict[str, Any] = {}
        if not self._config_path.exists():
            logger.warning(
                f"Configuration file not found: {self._config_path}. "
                f"Using built-in defaults and environment variables only."
            )
        else:
            try:
                with open(self._config_path, "r", encoding="utf-8") as f:
                    raw = yaml.safe_load(f) or {}
                logger.debug(f"Loaded configuration from: {self._config_path}")
            except yaml.YAMLError as e:
                raise ConfigurationError(f"Invalid YAML in configuration file: {e}") from e

        profiles = raw.get("profiles") or {}
        profile = self._requested_profile or os.environ.get(PROFILE_ENV_VAR) or DEFAULT_PROFILE
        if profile not in profiles and profile != DEFAULT_PROFILE:
            logger.warning(f"Unknown profile '{profile}', falling back to '{DEFAULT_PROFILE}'")
            profile = DEFAULT_PROFILE

        merged = _deep_merge(copy.deepcopy(_DEFAULTS), raw.get("defaults") or {})
        merged = _deep_merge(merged, profiles.get(profile) or {})
        self._profile = profile
        self._config = merged
        self._suite_config = None

    def get(self, key: str, default: Any = None) -> Any:
        """
        Get configuration value by dot-notation path.

        Environment variables win over the file (dots become underscores,
        uppercased: "timeouts.page_load" -> TIMEOUTS_PAGE_LOAD).
        """
        if key == "urls.base":
            for env_key in BASE_URL_ENV_VARS:
                if os.environ.get(env_key):
                    return os.environ[env_key]

        env_key = key.upper().replace(".", "_")
        env_value = os.environ.get(env_key)

        value: Any = self._config
        for part in key.split("."):
            if isinstance(value, dict):
                value = value.get(part)
            else:
                value = None
            if value is None:
                break

        if env_value is not None:
            return self._convert_type(env_value, value if value is not None else default)
        return default if value is None else value

    def get_section(self, section: str) -> Dict[str, Any]:
        return copy.deepcopy(self._config.get(section, {}))

    def suite_config(self) -> SuiteConfig:
        """Build (once) the frozen SuiteConfig for the selected profile."""
        if self._suite_config is None:
            resolved = self._resolve_overrides(self._config, "")
            self._suite_config = SuiteConfig.from_dict(self._profile, resolved)
            logger.debug(f"Suite configuration ready (profile={self._profile}, base={self._suite_config.urls.base})")
        return self._suite_config

    def _resolve_overrides(self, section: Dict[str, Any], prefix: str) -> Dict[str, Any]:
        resolved: Dict[str, Any] = {}
        for key, value in section.items():
            path = f"{prefix}.{key}" if prefix else key
            if isinstance(value, dict):
                resolved[key] = self._resolve_overrides(value, path)
            else:
                resolved[key] = self.get(path, value)
        return resolved

    def reload(self) -> None:
        """Reload configuration from file."""
        self._load_config()
        logger.info(f"Configuration reloaded from: {self._config_path} (profile={self._profile})")

    def _convert_type(self, value: str, reference: Any) -> Any:
        """Convert an environment string to match the reference type."""
        if reference is None:
            return value
        if isinstance(reference, bool):
            return value.lower() in ("true", "1", "yes", "on")
        if isinstance(reference, int):
            try:
                return int(value)
            except ValueError:
                return value
        if isinstance(reference, float):
            try:
                return float(value)
            except ValueError:
                return value
        if isinstance(reference, (list, tuple)):
            return [item.strip() for item in value.split(",") if item.strip()]
        return value

    @classmethod
    def reset(cls) -> None:
        """Reset singleton instance (tests, profile switches)."""
        cls._instance = None


def _deep_merge(base: Dict[str, Any], override: Dict[str, Any]) -> Dict[str, Any]:
    """Deep merge two dictionaries, with override taking precedence."""
    result = base.copy()
    for key, value in override.items():
        if key in result and isinstance(result[key], dict) and isinstance(value, dict):
            result[key] = _deep_merge(result[key], value)
        else:
            result[key] = value
    return result


def get_suite_config() -> SuiteConfig:
    """Convenience accessor for the process-wide SuiteConfig."""
    return ConfigLoader().suite_config()


__all__ = [
    "ConfigLoader",
    "ConfigurationError",
    "SuiteConfig",
    "Timeouts",
    "Urls",
    "Viewport",
    "Retries",
    "ScreenshotSettings",
    "VideoSettings",
    "ReadinessSettings",
    "NameHeuristic",
    "MentoringSettings",
    "ScenarioData",
    "ArtifactPaths",
    "get_suite_config",
    "DEFAULT_PROFILE",
]
