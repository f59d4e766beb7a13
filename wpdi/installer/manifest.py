"""Dependency manifest model - one row of wp-dependencies.json."""

import json
import logging
from enum import Enum
from pathlib import Path
from typing import List, Optional

from pydantic import BaseModel, Field, StrictBool, ValidationError, field_validator, model_validator

from wpdi.installer.errors import ConfigError

logger = logging.getLogger(__name__)

MANIFEST_FILE = "wp-dependencies.json"


class Host(str, Enum):
    """Source hosting conventions a dependency can be fetched from."""

    GITHUB = "github"
    BITBUCKET = "bitbucket"
    GITLAB = "gitlab"
    GITEA = "gitea"
    WORDPRESS = "wordpress"
    DIRECT = "direct"


def slug_directory(slug: str) -> str:
    """Directory a plugin slug expects, e.g. ``akismet`` for ``akismet/akismet.php``."""
    if "/" in slug:
        return slug.split("/")[0]
    return Path(slug).stem


class DependencyDeclaration(BaseModel):
    """A plugin dependency declared by a plugin or theme."""

    slug: str = Field(..., description="Plugin file relative to the plugins directory, e.g. 'dir/file.php'")
    name: Optional[str] = Field(default=None, description="Human-readable plugin name")
    uri: str = Field(..., description="Source location of the plugin")
    host: Host = Field(..., description="github | bitbucket | gitlab | gitea | wordpress | direct")
    branch: str = Field(default="master", description="Branch, tag or ref to download")
    token: Optional[str] = Field(default=None, description="Access token for private repositories")
    required_flag: Optional[StrictBool] = Field(default=None, alias="required")
    optional_flag: Optional[StrictBool] = Field(default=None, alias="optional")
    source: str = Field(default="", description="Plugin or theme that declared this dependency")
    download_link: Optional[str] = Field(default=None, exclude=True, description="Resolved by the installer, never read from input")

    model_config = {"populate_by_name": True}

    @model_validator(mode="before")
    @classmethod
    def drop_download_link(cls, data):
        if isinstance(data, dict) and "download_link" in data:
            logger.warning(f"[Manifest] Ignoring download_link declared for {data.get('slug')}")
            data = {k: v for k, v in data.items() if k != "download_link"}
        return data

    @field_validator("slug", "uri")
    @classmethod
    def not_empty(cls, v: str) -> str:
        if not v or not v.strip():
            raise ValueError("must not be empty")
        return v.strip()

    @field_validator("host", mode="before")
    @classmethod
    def normalize_host(cls, v):
        if isinstance(v, str):
            return v.strip().lower()
        return v

    @property
    def required(self) -> bool:
        """Required iff ``required`` is true or ``optional`` is explicitly false."""
        return self.required_flag is True or self.optional_flag is False

    @property
    def display_name(self) -> str:
        if self.name:
            return self.name
        return self.slug.split("/")[0]

    @property
    def directory(self) -> str:
        """Directory the plugin lives in, derived from its slug."""
        return slug_directory(self.slug)

    def to_dict(self) -> dict:
        """Serialize declaration to dict for API responses."""
        return {
            "slug": self.slug,
            "name": self.display_name,
            "uri": self.uri,
            "host": self.host.value,
            "branch": self.branch,
            "required": self.required,
            "source": self.source,
            "download_link": self.download_link,
        }


def parse_manifest(text: str, source: str = "") -> List[DependencyDeclaration]:
    """Parse manifest text into declarations.

    The whole manifest is rejected when any part of it is invalid.

    Args:
        text: JSON array of dependency objects
        source: Identity of the plugin or theme declaring them

    Returns:
        List of declarations with ``source`` set

    Raises:
        ConfigError: If the text is not a valid manifest
    """
    if not text or not text.strip():
        raise ConfigError("Manifest is empty", source)

    try:
        data = json.loads(text)
    except json.JSONDecodeError as e:
        raise ConfigError(f"Invalid JSON: {e}", source) from e

    if not isinstance(data, list):
        raise ConfigError("Manifest must be a JSON array", source)

    declarations = []
    for i, entry in enumerate(data):
        if not isinstance(entry, dict):
            raise ConfigError(f"Entry {i} is not an object", source)
        try:
            declaration = DependencyDeclaration(**entry)
        except ValidationError as e:
            raise ConfigError(f"Invalid entry {i}: {e}", source) from e
        declaration.source = source
        declarations.append(declaration)

    return declarations


def load_manifest(plugin_path: Path) -> Optional[List[DependencyDeclaration]]:
    """Load ``wp-dependencies.json`` from a plugin or theme directory.

    Returns:
        Declarations, or None when the directory has no manifest

    Raises:
        ConfigError: If the manifest exists but is unreadable or malformed
    """
    plugin_path = Path(plugin_path)
    manifest_file = plugin_path / MANIFEST_FILE
    if not manifest_file.exists():
        logger.debug(f"[Manifest] No {MANIFEST_FILE} in {plugin_path}")
        return None

    source = plugin_path.name
    try:
        text = manifest_file.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as e:
        raise ConfigError(f"Cannot read {manifest_file}: {e}", source) from e

    if not text.strip():
        logger.debug(f"[Manifest] Empty {MANIFEST_FILE} in {plugin_path}")
        return None

    return parse_manifest(text, source)
