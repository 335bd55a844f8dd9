from dataclasses import dataclass
from pathlib import Path


@dataclass
class TermplexPaths:
    """Centralizes filesystem paths used by termplex."""

    root: Path

    @property
    def termplex_dir(self) -> Path:
        return self.root / ".termplex"

    @property
    def config_file(self) -> Path:
        return self.termplex_dir / "termplex.json"

    @property
    def logs_dir(self) -> Path:
        return self.termplex_dir / "logs"

    @property
    def global_dir(self) -> Path:
        return Path.home() / ".termplex"

    @property
    def global_config_file(self) -> Path:
        return self.global_dir / "termplex.json"
