"""Dependency registry - tracks every declared dependency by slug."""

import logging
from pathlib import Path
from typing import Dict, Iterable, List, Optional

from wpdi.installer.errors import ConfigError
from wpdi.installer.manifest import DependencyDeclaration, load_manifest

logger = logging.getLogger(__name__)


class DependencyRegistry:
    """Holds at most one declaration per slug.

    A required declaration always replaces a stored one; an optional
    declaration is only stored when the slug is new.
    """

    def __init__(self):
        self._dependencies: Dict[str, DependencyDeclaration] = {}

    def register(self, declarations: Iterable[DependencyDeclaration], source: str) -> None:
        """Register declarations made by one plugin or theme.

        Args:
            declarations: Parsed manifest entries
            source: Identity of the declaring plugin or theme
        """
        for declaration in declarations:
            declaration.source = source
            slug = declaration.slug
            existing = self._dependencies.get(slug)

            if existing is None:
                self._dependencies[slug] = declaration
                logger.debug(f"[Registry] Registered {slug} from '{source}'")
            elif declaration.required:
                self._dependencies[slug] = declaration
                logger.debug(
                    f"[Registry] {slug} redeclared as required by '{source}', "
                    f"replacing declaration from '{existing.source}'"
                )
            else:
                logger.debug(f"[Registry] Keeping existing declaration of {slug}, '{source}' is optional")

    def run(self, plugin_path: Path) -> bool:
        """Register the manifest shipped in a plugin or theme directory.

        A malformed manifest is dropped entirely and logged.

        Args:
            plugin_path: Directory of the plugin or theme

        Returns:
            True if a manifest was found and registered
        """
        plugin_path = Path(plugin_path)
        try:
            declarations = load_manifest(plugin_path)
        except ConfigError as e:
            logger.error(f"[Registry] Ignoring manifest of '{e.source or plugin_path.name}': {e}")
            return False

        if declarations is None:
            return False

        self.register(declarations, plugin_path.name)
        logger.info(f"[Registry] Loaded {len(declarations)} dependencies from '{plugin_path.name}'")
        return True

    def get(self, slug: str) -> Optional[DependencyDeclaration]:
        """Get a declaration by slug."""
        return self._dependencies.get(slug)

    def all(self) -> List[DependencyDeclaration]:
        """Get all declarations in registration order."""
        return list(self._dependencies.values())

    def has(self, slug: str) -> bool:
        return slug in self._dependencies

    def count(self) -> int:
        return len(self._dependencies)
