"""
Vendor space configuration resolution.

Combines the ``vendor-space.toml`` file with command line overrides into a
fully resolved :class:`VendorSpace`. The raw file models only mirror what was
written in the file; defaults and precedence are applied in
:func:`load_config`.

Example file::

    root = "vendor"
    allow_existing = false

    [serde]
    url = "https://github.com/serde-rs/serde.git"
    branches = ["master", "v1.0.100"]
    allow_existing = true
"""
from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple

try:  # Python 3.11+
    import tomllib  # type: ignore[attr-defined]
except ModuleNotFoundError:  # pragma: no cover - fallback for older interpreters
    import tomli as tomllib  # type: ignore[attr-defined]

from pydantic import BaseModel, ConfigDict, StrictBool, StrictStr, ValidationError

from .errors import ConfigError
from .logger import get_logger
from .settings import AppSettings, settings

log = get_logger(__name__)

# Errors are surprising but easy to correct; silently reusing existing code is not.
ALLOW_EXISTING_DEFAULT = False


@dataclass(frozen=True)
class RepoConfig:
    """One upstream repository to clone and vendor."""

    name: str
    url: str
    branches: Tuple[str, ...]
    allow_existing: bool = ALLOW_EXISTING_DEFAULT

    def __post_init__(self) -> None:
        if not self.branches:
            raise ConfigError(f"repository {self.name!r} must list at least one branch")
        if len(set(self.branches)) != len(self.branches):
            raise ConfigError(f"repository {self.name!r} lists a branch more than once")

    @property
    def primary_branch(self) -> str:
        return self.branches[0]


@dataclass(frozen=True)
class VendorSpace:
    """Resolved configuration: an absolute root and the repositories under it."""

    root: Path
    repos: Tuple[RepoConfig, ...] = field(default_factory=tuple)

    def __post_init__(self) -> None:
        if not self.root.is_absolute():
            raise ConfigError(f"vendor space root must be absolute, got {self.root}")

    def repo_path(self, repo: RepoConfig) -> Path:
        return self.root / repo.name


@dataclass
class CliOptions:
    """Command line values that take part in configuration resolution."""

    config: Optional[str] = None
    root: Optional[str] = None
    allow_existing: bool = False
    block_existing: bool = False

    def validate(self) -> None:
        if self.allow_existing and self.block_existing:
            raise ConfigError("May not both allow and block existing")

    def allow_existing_override(self) -> Optional[bool]:
        self.validate()
        if self.allow_existing or self.block_existing:
            return self.allow_existing
        return None


class ConfigFileHeader(BaseModel):
    """Free floating fields at the top level of the config file."""

    model_config = ConfigDict(extra="ignore", frozen=True)

    root: Optional[StrictStr] = None
    allow_existing: Optional[StrictBool] = None


class ConfigFileRepo(BaseModel):
    """A table within the config file describing one repository."""

    model_config = ConfigDict(extra="ignore", frozen=True)

    name: StrictStr
    url: StrictStr
    branches: Optional[List[StrictStr]] = None
    allow_existing: Optional[StrictBool] = None


@dataclass
class ConfigFile:
    """
    Exact deserialized state of the config file.

    Explicitly set values stay distinguishable from absent ones (``None``) and
    paths are kept as the strings that were written.
    """

    header: ConfigFileHeader
    repos: List[ConfigFileRepo]


def _describe_validation_error(exc: ValidationError) -> str:
    return "; ".join(
        f"{'.'.join(str(part) for part in error['loc']) or 'value'}: {error['msg']}"
        for error in exc.errors()
    )


def parse_config_file(toml_string: str) -> ConfigFile:
    """Split a TOML document into its header and one entry per repository table."""
    try:
        document: Dict[str, Any] = tomllib.loads(toml_string)
    except tomllib.TOMLDecodeError as exc:
        raise ConfigError(f"failed to parse TOML: {exc}") from exc

    header_values = {key: value for key, value in document.items() if not isinstance(value, dict)}
    try:
        header = ConfigFileHeader(**header_values)
    except ValidationError as exc:
        raise ConfigError(f"invalid header: {_describe_validation_error(exc)}") from exc

    repos: List[ConfigFileRepo] = []
    for name, table in document.items():
        if not isinstance(table, dict):
            continue
        try:
            repos.append(ConfigFileRepo(**{**table, "name": name}))
        except ValidationError as exc:
            raise ConfigError(
                f"invalid repository {name!r}: {_describe_validation_error(exc)}"
            ) from exc
    return ConfigFile(header=header, repos=repos)


def find_file_up(start_directory: Path, name: str) -> Path:
    """Return the nearest file called ``name`` in ``start_directory`` or a parent."""
    for directory in (start_directory, *start_directory.parents):
        candidate = directory / name
        if candidate.is_file():
            return candidate
    raise ConfigError(f"{name} not found in {start_directory} or its parents")


def _validate_repo_name(name: str) -> None:
    if not name or name in {".", ".."} or "/" in name or "\\" in name:
        raise ConfigError(f"repository name {name!r} is not a valid directory name")


def _locate_config_file(options: CliOptions, cwd: Path, filename: str) -> Path:
    if options.config is not None:
        path = (cwd / Path(options.config).expanduser()).resolve()
        if not path.is_file():
            raise ConfigError(f"config file not found: {path}")
        return path
    start = (cwd / Path(options.root or ".").expanduser()).resolve()
    return find_file_up(start, filename)


def _resolve_root(
    options: CliOptions,
    header: ConfigFileHeader,
    config_file_path: Path,
    cwd: Path,
) -> Path:
    if options.root is not None:
        return (cwd / Path(options.root).expanduser()).resolve()
    root = Path(header.root).expanduser() if header.root is not None else Path(".")
    if not root.is_absolute():
        root = config_file_path.parent / root
    return root.resolve()


def load_config(
    options: Optional[CliOptions] = None,
    cwd: Optional[Path] = None,
    app_settings: Optional[AppSettings] = None,
) -> VendorSpace:
    """
    Resolve the vendor space for this run.

    ``allow_existing`` is decided per repository by the first value present in:
    the command line override, the repository table, the file header, and
    finally :data:`ALLOW_EXISTING_DEFAULT`.
    """
    options = options or CliOptions()
    options.validate()
    source = app_settings or settings
    cwd = (cwd or Path.cwd()).resolve()

    config_file_path = _locate_config_file(options, cwd, source.config_filename)
    try:
        config_text = config_file_path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as exc:
        raise ConfigError(f"failed to read {config_file_path}: {exc}") from exc
    config_file = parse_config_file(config_text)

    root = _resolve_root(options, config_file.header, config_file_path, cwd)
    override = options.allow_existing_override()

    repos: List[RepoConfig] = []
    for entry in config_file.repos:
        _validate_repo_name(entry.name)
        if override is not None:
            allow_existing = override
        elif entry.allow_existing is not None:
            allow_existing = entry.allow_existing
        elif config_file.header.allow_existing is not None:
            allow_existing = config_file.header.allow_existing
        else:
            allow_existing = ALLOW_EXISTING_DEFAULT
        branches = entry.branches if entry.branches is not None else [source.default_branch]
        repos.append(
            RepoConfig(
                name=entry.name,
                url=entry.url,
                branches=tuple(branches),
                allow_existing=allow_existing,
            )
        )

    log.info(
        "config_loaded",
        config_file=str(config_file_path),
        root=str(root),
        repos=[repo.name for repo in repos],
    )
    return VendorSpace(root=root, repos=tuple(repos))
