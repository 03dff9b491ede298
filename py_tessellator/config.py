"""Configuration management."""

import os
from pathlib import Path
from typing import Literal, Optional, Union

from dotenv import dotenv_values
from pydantic import Field, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from .core.frontier import TessellationConfig
from .render.coloring import ColorMode

BASE_DIR = Path(__file__).resolve().parent.parent


def load_env_file(path: Union[str, Path]) -> int:
    """
    Copy values from a .env file into os.environ without overriding
    variables that are already set. Returns the number of values loaded.
    """
    path = Path(path)
    if not path.exists():
        return 0
    file_env = dotenv_values(path)
    missing = {k: v for k, v in file_env.items() if k not in os.environ and v is not None}
    os.environ.update(missing)
    return len(missing)


load_env_file(BASE_DIR / ".env")


class Settings(BaseSettings):
    """Run settings pulled from TESSELLATOR_* environment variables."""

    model_config = SettingsConfigDict(
        env_prefix="TESSELLATOR_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Canvas and packing
    canvas_width: float = Field(default=1024.0, gt=0, description="Canvas width")
    canvas_height: float = Field(default=1024.0, gt=0, description="Canvas height")
    min_radius: float = Field(default=16.0, gt=0, description="Minimum disk radius")
    max_radius: float = Field(default=64.0, gt=0, description="Maximum disk radius")
    retry_budget: int = Field(default=10, ge=0, description="Requeues allowed per frontier edge")
    overlap_tolerance: float = Field(default=2.0, ge=0, description="Allowed disk overlap")
    angle_tolerance: float = Field(default=1e-3, gt=0, description="Loop angle-sum tolerance (radians)")

    # Run
    seed: Optional[str] = Field(default=None, description="PRNG seed; generated when missing")

    # Output
    output_path: str = Field(default="out.svg", description="SVG output file")
    draw_circles: bool = Field(default=True, description="Overlay disk outlines")
    draw_loops: bool = Field(default=True, description="Overlay dead-edge loops")
    color_mode: ColorMode = Field(default=ColorMode.NOISE, description="Triangle fill mode")

    # Logging
    log_level: str = Field(default="INFO", description="Logging level")
    log_format: Literal["plain", "json"] = Field(default="plain", description="Logging format")

    @model_validator(mode="after")
    def check_radii(self) -> "Settings":
        if self.min_radius > self.max_radius:
            raise ValueError(
                f"min_radius ({self.min_radius}) must not exceed max_radius ({self.max_radius})"
            )
        return self

    def tessellation_config(self) -> TessellationConfig:
        """Core engine configuration from these settings."""
        return TessellationConfig(
            canvas_width=self.canvas_width,
            canvas_height=self.canvas_height,
            min_radius=self.min_radius,
            max_radius=self.max_radius,
            retry_budget=self.retry_budget,
            overlap_tolerance=self.overlap_tolerance,
            angle_tolerance=self.angle_tolerance,
        )


# Instantiate singleton settings object
settings = Settings()
