"""Tests for settings and the command line entry point."""

import logging
import xml.etree.ElementTree as ET

import pytest
from pydantic import ValidationError

from py_tessellator.cli import EXIT_FAILED, EXIT_OK, configure_logging, main
from py_tessellator.config import Settings, load_env_file
from py_tessellator.render.coloring import ColorMode
from py_tessellator.render.svg import DOCTYPE, SVG_NS

SMALL_ARGS = ["--width", "200", "--height", "160", "--min-radius", "10", "--max-radius", "25"]


@pytest.fixture
def clean_env(monkeypatch):
    """Unset TESSELLATOR_* variables and restore them afterwards."""
    for name in ["SEED", "MIN_RADIUS", "MAX_RADIUS", "COLOR_MODE", "DRAW_CIRCLES", "OUTPUT_PATH"]:
        # setenv first so teardown also removes values loaded from .env files
        monkeypatch.setenv(f"TESSELLATOR_{name}", "")
        monkeypatch.delenv(f"TESSELLATOR_{name}")
    return monkeypatch


class TestSettings:
    """Test environment-driven settings."""

    def test_defaults(self, clean_env):
        """Test that defaults match the core configuration."""
        settings = Settings()
        config = settings.tessellation_config()
        assert config.canvas_width == 1024
        assert config.min_radius == 16
        assert config.max_radius == 64
        assert config.retry_budget == 10
        assert settings.seed is None
        assert settings.color_mode is ColorMode.NOISE

    def test_env_override(self, clean_env):
        """Test TESSELLATOR_ prefixed variables."""
        clean_env.setenv("TESSELLATOR_MIN_RADIUS", "20")
        clean_env.setenv("TESSELLATOR_COLOR_MODE", "gradient")
        clean_env.setenv("TESSELLATOR_DRAW_CIRCLES", "false")
        settings = Settings()
        assert settings.min_radius == 20
        assert settings.color_mode is ColorMode.GRADIENT
        assert settings.draw_circles is False

    @pytest.mark.parametrize(
        "kwargs",
        [
            {"min_radius": 0},
            {"min_radius": 80},
            {"retry_budget": -1},
            {"log_format": "xml"},
        ],
    )
    def test_invalid(self, clean_env, kwargs):
        """Test field constraints."""
        with pytest.raises(ValidationError):
            Settings(**kwargs)

    def test_load_env_file(self, tmp_path, clean_env):
        """Test that .env values fill in without overriding the environment."""
        env_file = tmp_path / ".env"
        env_file.write_text("TESSELLATOR_SEED=from-file\nTESSELLATOR_MAX_RADIUS=40\n")
        clean_env.setenv("TESSELLATOR_MAX_RADIUS", "50")

        assert load_env_file(env_file) == 1
        settings = Settings()
        assert settings.seed == "from-file"
        assert settings.max_radius == 50

    def test_missing_env_file(self, tmp_path):
        """Test that a missing file loads nothing."""
        assert load_env_file(tmp_path / "absent.env") == 0


class TestConfigureLogging:
    """Test structlog setup."""

    def test_level(self):
        """Test that the root level follows the argument."""
        configure_logging("DEBUG", "json")
        assert logging.getLogger().level == logging.DEBUG
        configure_logging("WARNING", "plain")
        assert logging.getLogger().level == logging.WARNING


class TestMain:
    """Test full command line runs."""

    def test_writes_svg(self, tmp_path, clean_env):
        """Test a validated run that writes its output."""
        out = tmp_path / "mesh.svg"
        code = main(["--seed", "cli", "--output", str(out), "--validate"] + SMALL_ARGS, settings=Settings())

        assert code == EXIT_OK
        text = out.read_text(encoding="utf-8")
        assert text.startswith(DOCTYPE)
        root = ET.fromstring(text[len(DOCTYPE) + 1:])
        assert root.get("width") == "200"
        assert root.findall(f"{{{SVG_NS}}}polygon")
        assert root.findall(f"{{{SVG_NS}}}circle")

    def test_same_seed_same_file(self, tmp_path, clean_env):
        """Test that the output is reproducible from the seed."""
        first, second = tmp_path / "a.svg", tmp_path / "b.svg"
        main(["--seed", "again", "--output", str(first)] + SMALL_ARGS, settings=Settings())
        main(["--seed", "again", "--output", str(second)] + SMALL_ARGS, settings=Settings())
        assert first.read_text() == second.read_text()

    def test_generated_seed(self, tmp_path, clean_env):
        """Test that a run without a seed still succeeds."""
        out = tmp_path / "random.svg"
        assert main(["--output", str(out)] + SMALL_ARGS, settings=Settings()) == EXIT_OK
        assert out.exists()

    def test_no_overlays(self, tmp_path, clean_env):
        """Test that debug overlays can be disabled."""
        out = tmp_path / "plain.svg"
        args = ["--seed", "plain", "--output", str(out), "--no-circles", "--no-loops"] + SMALL_ARGS
        assert main(args, settings=Settings()) == EXIT_OK
        root = ET.fromstring(out.read_text()[len(DOCTYPE) + 1:])
        assert not root.findall(f"{{{SVG_NS}}}circle")
        assert not root.findall(f"{{{SVG_NS}}}line")

    def test_gradient_mode(self, tmp_path, clean_env):
        """Test gradient fills from the command line."""
        out = tmp_path / "gradient.svg"
        args = ["--seed", "grad", "--output", str(out), "--color-mode", "gradient"] + SMALL_ARGS
        assert main(args, settings=Settings()) == EXIT_OK
        root = ET.fromstring(out.read_text()[len(DOCTYPE) + 1:])
        assert root.find(f"{{{SVG_NS}}}defs") is not None

    def test_invalid_radii(self, tmp_path, clean_env):
        """Test that an invalid configuration fails with status 1."""
        out = tmp_path / "never.svg"
        args = ["--seed", "bad", "--output", str(out), "--min-radius", "50", "--max-radius", "20"]
        assert main(args, settings=Settings()) == EXIT_FAILED
        assert not out.exists()
