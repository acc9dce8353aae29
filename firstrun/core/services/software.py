"""
Install-package action — winget installs with retry and a manual path.

Flow per package:
    manual-only? → fallback
    already installed? → Skipped
    install loop → Success / Skipped / Failed

The install loop runs against a RetryPolicy. A content hash mismatch
is special: the first one switches on ``force`` and retries at once,
without consuming an attempt and without pausing. Every other failure
consumes one attempt.
"""

from __future__ import annotations

import logging
from pathlib import Path
from urllib.parse import unquote, urlparse

from firstrun.adapters.base import PackageManager, SystemShell
from firstrun.core.models.catalog import SoftwarePackage
from firstrun.core.models.result import InstallSignal, Outcome
from firstrun.core.observability.reporter import Reporter, notify
from firstrun.core.reliability.retry import RetryPolicy

logger = logging.getLogger(__name__)

_INSTALLER_SUFFIXES = (".exe", ".msi")


def install_with_retry(
    package_manager: PackageManager,
    package_id: str,
    policy: RetryPolicy,
    *,
    locale: str | None = None,
) -> Outcome:
    """Install one package, retrying per ``policy``.

    Returns:
        Skipped if the package manager reports it already present,
        Success on the first successful attempt, Failed once the
        attempt budget is spent.
    """
    attempt = 0
    force = False

    while attempt < policy.max_retries:
        signal = package_manager.install(package_id, locale=locale, force=force)

        if signal is InstallSignal.ALREADY_INSTALLED:
            logger.info("%s is already installed", package_id)
            return Outcome.SKIPPED
        if signal is InstallSignal.SUCCEEDED:
            return Outcome.SUCCESS
        if signal is InstallSignal.HASH_MISMATCH and not force:
            logger.warning("Hash mismatch for %s, retrying with --force", package_id)
            force = True
            continue

        attempt += 1
        logger.warning(
            "Install of %s failed (attempt %d/%d)",
            package_id,
            attempt,
            policy.max_retries,
        )
        policy.pause(attempt)

    logger.error("Giving up on %s after %d attempts", package_id, attempt)
    return Outcome.FAILED


def installer_file_name(url: str) -> str | None:
    """The installer file a URL points at, or None for a web page."""
    name = Path(unquote(urlparse(url).path)).name
    if name.lower().endswith(_INSTALLER_SUFFIXES):
        return name
    return None


class ManualFallback:
    """Handles packages the package manager cannot install.

    The operator always gets a notice. Interactive sessions open the
    download page; scripted sessions fetch a direct installer link and
    run it silently. Whatever happens, the entry counts as Success: the
    manual step has been handed over.
    """

    def __init__(
        self,
        shell: SystemShell,
        downloads_dir: Path,
        *,
        reporter: Reporter | None = None,
        interactive: bool = True,
        open_urls: bool = True,
    ):
        self._shell = shell
        self._downloads_dir = downloads_dir
        self._reporter = reporter
        self._interactive = interactive
        self._open_urls = open_urls

    def __call__(self, package: SoftwarePackage) -> Outcome:
        url = package.manual_url
        parts = [p for p in (package.manual_note, url) if p]
        message = " ".join(parts) or "Install this package manually."
        notify(self._reporter, "on_notice", package.name, message)
        logger.info("%s needs a manual install: %s", package.name, message)

        if not url:
            logger.warning("%s has no download URL", package.name)
        elif self._interactive:
            self._open(url)
        else:
            self._download_and_run(package, url)
        return Outcome.SUCCESS

    def _open(self, url: str) -> None:
        if not self._open_urls:
            return
        if not self._shell.open_url(url):
            logger.warning("Could not open %s", url)

    def _download_and_run(self, package: SoftwarePackage, url: str) -> None:
        file_name = installer_file_name(url)
        if file_name is None:
            logger.warning("%s: %s is not a direct installer link", package.name, url)
            return

        destination = self._downloads_dir / file_name
        if not self._shell.download(url, destination):
            logger.warning("%s: download of %s failed", package.name, url)
            return

        if file_name.lower().endswith(".msi"):
            code = self._shell.run_executable(
                Path("msiexec"),
                ["/i", str(destination), "/qn", "/norestart"],
            )
        else:
            code = self._shell.run_executable(destination, ["/S"])

        if code != 0:
            logger.warning("%s: installer exited with %d", package.name, code)
        else:
            logger.info("%s: installer finished", package.name)


class InstallAction:
    """The per-entry action for software batches."""

    def __init__(
        self,
        package_manager: PackageManager,
        policy: RetryPolicy,
        fallback: ManualFallback,
        *,
        locale: str | None = None,
    ):
        self._pm = package_manager
        self._policy = policy
        self._fallback = fallback
        self._locale = locale

    def __call__(self, package: SoftwarePackage) -> Outcome:
        if package.winget_unavailable:
            return self._fallback(package)

        if self._pm.is_installed(package.id):
            logger.info("%s (%s) is already installed", package.name, package.id)
            return Outcome.SKIPPED

        return install_with_retry(
            self._pm,
            package.id,
            self._policy,
            locale=self._locale,
        )
