"""
Catalog models — the declarative description of what to provision.

Three catalog documents drive a run: software (packages to install),
tweaks (registry values and system commands to apply) and bloatware
(preinstalled apps to remove). Each is parsed into a typed catalog
whose entries are read-only for the lifetime of the run.

Field names follow Python conventions; the camelCase keys used in the
JSON documents are accepted through aliases.
"""

from __future__ import annotations

from typing import Iterator, Literal, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator

# PowerShell-style type names seen in catalogs → reg.exe type names
_VALUE_TYPE_ALIASES = {
    "dword": "REG_DWORD",
    "qword": "REG_QWORD",
    "string": "REG_SZ",
    "sz": "REG_SZ",
    "expandstring": "REG_EXPAND_SZ",
    "expand_sz": "REG_EXPAND_SZ",
    "multistring": "REG_MULTI_SZ",
    "multi_sz": "REG_MULTI_SZ",
    "binary": "REG_BINARY",
}

ONEDRIVE_ID = "Microsoft.OneDrive"
ONEDRIVE_NAME = "Microsoft OneDrive"


class _Entry(BaseModel):
    model_config = ConfigDict(frozen=True, populate_by_name=True)


# ── Software ────────────────────────────────────────────────────────


class SoftwarePackage(_Entry):
    """An application installed through the package manager."""

    id: str                           # package-manager package id
    name: str
    description: str = ""
    recommended: bool = False
    winget_unavailable: bool = Field(default=False, alias="wingetUnavailable")
    manual_url: str | None = Field(default=None, alias="manualUrl")
    manual_note: str | None = Field(default=None, alias="manualNote")


class SoftwareCategory(_Entry):
    name: str
    description: str = ""
    packages: list[SoftwarePackage] = Field(default_factory=list)


class SoftwareCatalog(_Entry):
    categories: list[SoftwareCategory] = Field(default_factory=list)

    def entries(self) -> Iterator[SoftwarePackage]:
        for category in self.categories:
            yield from category.packages

    @property
    def category_count(self) -> int:
        return len(self.categories)

    @property
    def entry_count(self) -> int:
        return sum(len(c.packages) for c in self.categories)


# ── Tweaks ──────────────────────────────────────────────────────────


class RegistryValue(_Entry):
    """One registry value write."""

    path: str                         # e.g. HKCU:\Software\... or HKLM\SOFTWARE\...
    name: str
    value: int | str | list[str]
    type: str = "REG_DWORD"

    @field_validator("type")
    @classmethod
    def _normalize_type(cls, v: str) -> str:
        key = v.strip().lower()
        if key.startswith("reg_"):
            return v.strip().upper()
        if key in _VALUE_TYPE_ALIASES:
            return _VALUE_TYPE_ALIASES[key]
        raise ValueError(f"Unsupported registry value type: {v!r}")


class Tweak(_Entry):
    """A system tweak: registry writes and/or configuration commands.

    ``info`` marks an entry that only documents a manual step; it is
    never applied.
    """

    name: str
    description: str = ""
    recommended: bool = False
    info: bool = False
    registry: list[RegistryValue] | None = None
    power_config: list[str] | None = Field(default=None, alias="powerConfig")

    @property
    def id(self) -> str:
        return self.name

    @property
    def has_registry_phase(self) -> bool:
        return bool(self.registry)

    @property
    def has_command_phase(self) -> bool:
        return bool(self.power_config)


class TweakCategory(_Entry):
    name: str
    description: str = ""
    tweaks: list[Tweak] = Field(default_factory=list)


class TweaksCatalog(_Entry):
    categories: list[TweakCategory] = Field(default_factory=list)

    def entries(self) -> Iterator[Tweak]:
        for category in self.categories:
            yield from category.tweaks

    @property
    def category_count(self) -> int:
        return len(self.categories)

    @property
    def entry_count(self) -> int:
        return sum(len(c.tweaks) for c in self.categories)


# ── Bloatware ───────────────────────────────────────────────────────


class BloatwareApp(_Entry):
    """A preinstalled app to remove.

    ``kind`` is ``appx`` for regular app packages and ``onedrive`` for
    the sync client, which ships its own uninstaller.
    """

    id: str                           # app package name, may contain '*'
    name: str
    recommended: bool = False
    kind: Literal["appx", "onedrive"] = "appx"


class OneDriveOptions(_Entry):
    recommended: bool = False


class BloatwareCatalog(_Entry):
    bloatware: list[BloatwareApp] = Field(default_factory=list)
    protected: tuple[str, ...] = ()
    onedrive: OneDriveOptions | None = None

    def entries(self) -> Iterator[BloatwareApp]:
        yield from self.bloatware
        if self.onedrive is not None:
            yield self.onedrive_entry()

    def onedrive_entry(self) -> BloatwareApp:
        recommended = self.onedrive.recommended if self.onedrive else False
        return BloatwareApp(
            id=ONEDRIVE_ID,
            name=ONEDRIVE_NAME,
            recommended=recommended,
            kind="onedrive",
        )

    @property
    def category_count(self) -> int:
        return 1

    @property
    def entry_count(self) -> int:
        return len(self.bloatware) + (1 if self.onedrive is not None else 0)


CatalogEntry = Union[SoftwarePackage, Tweak, BloatwareApp]
Catalog = Union[SoftwareCatalog, TweaksCatalog, BloatwareCatalog]
