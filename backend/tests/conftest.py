"""Shared test fixtures and configuration."""
from typing import Any, Callable

import pytest

from app.models.analysis import ImageAnalysis


@pytest.fixture(autouse=True)
def set_env_vars(monkeypatch: pytest.MonkeyPatch) -> None:
    """Point the app at a fake Gradio space and reset cached settings."""
    monkeypatch.setenv("GRADIO_SPACE", "test-user/test-space")
    from app.core.config import get_settings

    get_settings.cache_clear()


@pytest.fixture
def make_analysis() -> Callable[..., ImageAnalysis]:
    """Factory for ImageAnalysis with neutral defaults (no optional sentences fire)."""

    def _make(**kwargs: Any) -> ImageAnalysis:
        defaults: dict[str, Any] = {
            "main_subject": "object",
            "has_tree": False,
            "has_person": False,
            "has_water": False,
            "has_background": True,
            "emptiness": 0.1,
            "line_weight": "medium",
            "drawing_complexity": "moderate",
            "dominant_colors": ["#336699"],
        }
        defaults.update(kwargs)
        return ImageAnalysis(**defaults)

    return _make
