"""
skillpack configuration module
"""

from pathlib import Path

from pydantic import Field
from pydantic_settings import BaseSettings


def _default_skills_dir() -> Path:
    """
    Catalog root used when SKILLPACK_SKILLS_DIR is not set.

    Prefers the ``skills/`` directory shipped next to the source checkout,
    then ``./skills`` in the working directory.
    """
    bundled = Path(__file__).resolve().parents[2] / "skills"
    if bundled.is_dir():
        return bundled
    return Path.cwd() / "skills"


class Settings(BaseSettings):
    """Application settings"""

    # === Catalog and install locations ===
    skills_dir: Path = Field(
        default_factory=_default_skills_dir, description="Root directory of the skill catalog"
    )
    project_root: Path = Field(
        default_factory=lambda: Path.cwd(), description="Project directory (defaults to cwd)"
    )
    install_dir_name: str = Field(
        default=".skills", description="Directory under project_root for full-source installs"
    )
    home_dir: Path = Field(
        default_factory=Path.home, description="Home directory for global agent installs"
    )

    # === HTTP API ===
    api_host: str = Field(default="127.0.0.1", description="HTTP API bind address")
    api_port: int = Field(default=3579, description="HTTP API port")

    # === Logging ===
    log_level: str = Field(default="WARNING", description="Log level")
    log_dir: str = Field(default="logs", description="Log directory (relative to project_root)")
    log_file_prefix: str = Field(default="skillpack", description="Log file prefix")
    log_max_size_mb: int = Field(default=10, description="Max size of a single log file (MB)")
    log_backup_count: int = Field(default=5, description="Number of rotated log files to keep")
    log_format: str = Field(
        default="%(asctime)s - %(name)s - %(levelname)s - %(message)s", description="Log format"
    )
    log_to_console: bool = Field(default=True, description="Log to stderr")
    log_to_file: bool = Field(default=False, description="Log to files under log_dir")

    model_config = {
        "env_prefix": "SKILLPACK_",
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "extra": "ignore",
        # an empty SKILLPACK_API_PORT= in .env must not break int parsing
        "env_ignore_empty": True,
    }

    @property
    def install_root(self) -> Path:
        """Directory that receives full-source installs"""
        return self.project_root / self.install_dir_name

    @property
    def log_dir_path(self) -> Path:
        """Absolute log directory"""
        return self.project_root / self.log_dir

