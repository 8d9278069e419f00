"""Application configuration."""

from typing import Literal, Optional, Tuple

from pydantic_settings import BaseSettings

from .definitions import ImsFramework


class Settings(BaseSettings):
    """Application settings, overridable via GRAYSTAG_* environment variables."""

    LOG_LEVEL: str = "INFO"

    # Conversion
    KERNEL: Literal["pixel", "vectorized", "fixed", "threaded"] = "pixel"
    FRAMEWORK: ImsFramework = ImsFramework.CV  # Decoder and library route
    ROW_ALIGNMENT: int = 4  # Bytes, like IplImage's widthStep
    WORKERS: Optional[int] = None  # Threaded kernel, CPU count if unset

    # Window positions (x, y)
    COLOR_WINDOW_POS: Tuple[int, int] = (100, 100)
    GRAY_WINDOW_POS: Tuple[int, int] = (500, 100)
    MYGRAY_WINDOW_POS: Tuple[int, int] = (500, 500)

    model_config = {"env_prefix": "GRAYSTAG_"}


settings = Settings()
