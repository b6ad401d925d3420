"""Shared fixtures for framework unit tests (no real browser)."""

from __future__ import annotations

import copy
from pathlib import Path
from typing import Any, Callable, Dict, Union

import pytest
import yaml

from webtests.ui_testing.framework.config_model import (
    BrowserConfig,
    BrowserType,
    EnvironmentConfig,
    ExecutionConfig,
    RunConfig,
    ScreenshotConfig,
)

from .fakes import QA_PROFILE, FakePlaywrightFactory


@pytest.fixture
def qa_profile() -> Dict[str, Any]:
    """A deep copy of a valid profile, safe to mutate."""
    return copy.deepcopy(QA_PROFILE)

@pytest.fixture
def config_dir(tmp_path: Path) -> Path:
    directory = tmp_path / "config"
    directory.mkdir()
    return directory

@pytest.fixture
def write_profile(config_dir: Path) -> Callable[[str, Union[Dict[str, Any], str]], Path]:
    """Write <name>.yaml into config_dir from a dict or raw YAML text."""

    def _write(name: str, content: Union[Dict[str, Any], str]) -> Path:
        path = config_dir / f"{name}.yaml"
        text = content if isinstance(content, str) else yaml.safe_dump(content, sort_keys=False)
        path.write_text(text, encoding="utf-8")
        return path

    return _write

@pytest.fixture
def sample_config() -> RunConfig:
    return RunConfig(
        environment=EnvironmentConfig(name="qa", base_url="https://qa.example.com"),
        browser=BrowserConfig(type=BrowserType.CHROMIUM, headless=True, slow_mo=0, timeout=20000),
        screenshot=ScreenshotConfig(take_on_failure=True, full_page=True),
        execution=ExecutionConfig(parallel=False, thread_count=1),
    )

@pytest.fixture
def fake_playwright() -> FakePlaywrightFactory:
    return FakePlaywrightFactory()
