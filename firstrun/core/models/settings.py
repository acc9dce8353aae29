"""
Settings model — how this machine should be provisioned.

Loaded from firstrun.yml. Every field has a default, so a run without
a settings file behaves like one with an empty file.
"""

from __future__ import annotations

from pathlib import Path

from pydantic import BaseModel, Field


class CatalogPaths(BaseModel):
    """Overrides for the catalog documents (None = bundled default)."""

    software: Path | None = None
    tweaks: Path | None = None
    bloatware: Path | None = None


class Settings(BaseModel):
    """Run-wide knobs for the provisioning session."""

    locale: str | None = None            # passed to the package manager, e.g. "en-US"
    max_retries: int = Field(default=3, ge=1)
    retry_delay_seconds: float = Field(default=5, ge=0)
    command_timeout: int | None = None   # seconds; None = wait forever

    catalogs: CatalogPaths = Field(default_factory=CatalogPaths)

    backup_dir: Path = Path("backups")
    log_dir: Path = Path("logs")
    downloads_dir: Path = Path("downloads")

    create_restore_point: bool = True
    open_manual_urls: bool = True

    def resolve_paths(self, base: Path) -> Settings:
        """Return a copy with relative paths anchored at ``base``."""

        def _anchor(p: Path | None) -> Path | None:
            if p is None or p.is_absolute():
                return p
            return (base / p).resolve()

        return self.model_copy(
            update={
                "backup_dir": _anchor(self.backup_dir),
                "log_dir": _anchor(self.log_dir),
                "downloads_dir": _anchor(self.downloads_dir),
                "catalogs": CatalogPaths(
                    software=_anchor(self.catalogs.software),
                    tweaks=_anchor(self.catalogs.tweaks),
                    bloatware=_anchor(self.catalogs.bloatware),
                ),
            }
        )
