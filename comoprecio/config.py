import logging
import os
from functools import lru_cache
from pathlib import Path

from dotenv import load_dotenv
from pydantic import BaseModel, Field, ValidationError


class Settings(BaseModel):
    data_dir: Path = Field(default=Path("data"), alias="COMOPRECIO_DATA_DIR")
    download_dir: Path = Field(default=Path("downloads"), alias="COMOPRECIO_DOWNLOAD_DIR")
    log_level: str = Field(default="INFO", alias="LOG_LEVEL")
    http_timeout: float = Field(default=15.0, alias="HTTP_TIMEOUT")
    navigation_timeout_ms: int = Field(default=60000, alias="NAVIGATION_TIMEOUT_MS")

    @property
    def products_path(self) -> Path:
        return self.data_dir / "products.json"

    @property
    def aliexpress_path(self) -> Path:
        return self.data_dir / "aliexpress_products.json"


def _load_dotenv():
    # Load from repo root if present, otherwise rely on environment variables.
    root_env = Path(__file__).resolve().parents[1] / ".env"
    if root_env.exists():
        load_dotenv(root_env)
    else:
        load_dotenv()


@lru_cache()
def get_settings() -> Settings:
    _load_dotenv()
    try:
        return Settings(**os.environ)
    except ValidationError as exc:
        invalid = [str(e["loc"][0]) for e in exc.errors()]
        detail = f"Invalid environment variables: {', '.join(invalid)}"
        raise RuntimeError(detail) from exc


def setup_logging(level: str | None = None) -> None:
    """Configure root logging once for a command-line entry point."""
    logging.basicConfig(
        level=(level or get_settings().log_level).upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
