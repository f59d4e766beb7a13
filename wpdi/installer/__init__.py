"""Dependency installer core: manifest, registry, resolver and lifecycle.

Imports are lazy so that lightweight pieces like the manifest parser can be
used without pulling in the rest of the package.
"""

__all__ = [
    "DependencyDeclaration",
    "Host",
    "parse_manifest",
    "load_manifest",
    "DependencyRegistry",
    "DownloadLinkResolver",
    "build_download_link",
    "LifecycleController",
    "DependencyState",
    "Action",
    "Notice",
    "NoticeStatus",
    "ActionResult",
]


def __getattr__(name):
    if name in ("DependencyDeclaration", "Host", "parse_manifest", "load_manifest"):
        from wpdi.installer import manifest
        return getattr(manifest, name)
    if name == "DependencyRegistry":
        from wpdi.installer.registry import DependencyRegistry
        return DependencyRegistry
    if name in ("DownloadLinkResolver", "build_download_link"):
        from wpdi.installer import resolver
        return getattr(resolver, name)
    if name in ("LifecycleController", "DependencyState", "Action", "Notice", "NoticeStatus", "ActionResult"):
        from wpdi.installer import lifecycle
        return getattr(lifecycle, name)
    raise AttributeError(f"module 'wpdi.installer' has no attribute {name!r}")
