"""Locate a bundled libVLC runtime before python-vlc is imported."""

from __future__ import annotations

import os
import sys
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, Iterable, Optional

from playdeck.backend.common.logging import get_logger
from playdeck.config.settings.paths import get_vlc_runtime_root

log = get_logger(__name__)

_PLATFORM_HINTS: Dict[str, tuple[str, ...]] = {
    "win32": ("win64", "win32"),
    "cygwin": ("win64", "win32"),
    "darwin": ("macos-arm64", "macos-x64", "macos"),
    "linux": ("linux-x86_64", "linux"),
}


@dataclass(frozen=True, slots=True)
class VLCRuntimePaths:
    root: Path
    lib_dir: Path
    plugin_dir: Path

    def as_env(self) -> Dict[str, str]:
        return {
            "PYTHON_VLC_MODULE_PATH": str(self.lib_dir),
            "VLC_PLUGIN_PATH": str(self.plugin_dir),
        }


def _candidate_roots(explicit_root: Optional[Path]) -> Iterable[Path]:
    if explicit_root:
        yield explicit_root
    configured = get_vlc_runtime_root()
    if configured:
        yield Path(configured)


def _platform_dir(root: Path) -> Optional[Path]:
    if not root.exists():
        return None
    hints = _PLATFORM_HINTS.get(sys.platform, ())
    if not hints and sys.platform.startswith("linux"):
        hints = _PLATFORM_HINTS["linux"]
    for hint in hints:
        candidate = root / hint
        if candidate.exists():
            return candidate
    # Root may already hold lib/ and plugins/.
    return root


def resolve_vlc_runtime(explicit_root: Optional[str] = None) -> Optional[VLCRuntimePaths]:
    """Find a packaged runtime and export the environment libVLC expects.

    Returns ``None`` when nothing is bundled; python-vlc then falls back to the
    system installation.
    """

    explicit = Path(explicit_root).expanduser() if explicit_root else None
    searched = []
    for candidate_root in _candidate_roots(explicit):
        searched.append(str(candidate_root))
        platform_root = _platform_dir(candidate_root)
        if platform_root is None:
            continue
        lib_dir = platform_root / "lib"
        plugin_dir = platform_root / "plugins"
        if not lib_dir.exists() or not plugin_dir.exists():
            log.debug(
                "vlc_runtime_missing_dirs",
                extra={
                    "root": str(platform_root),
                    "lib_exists": lib_dir.exists(),
                    "plugin_exists": plugin_dir.exists(),
                },
            )
            continue
        runtime = VLCRuntimePaths(candidate_root, lib_dir, plugin_dir)
        apply_environment(runtime)
        return runtime
    log.info("vlc_runtime_not_bundled", extra={"searched": searched})
    return None


def apply_environment(runtime: VLCRuntimePaths) -> None:
    for key, value in runtime.as_env().items():
        os.environ[key] = value
    if sys.platform.startswith("win"):
        path_var = "PATH"
    elif sys.platform == "darwin":
        path_var = "DYLD_LIBRARY_PATH"
    else:
        path_var = "LD_LIBRARY_PATH"
    existing = os.environ.get(path_var, "")
    parts = [str(runtime.lib_dir)]
    if existing and str(runtime.lib_dir) not in existing.split(os.pathsep):
        parts.append(existing)
    elif existing:
        parts = [existing]
    os.environ[path_var] = os.pathsep.join(parts)


__all__ = ["VLCRuntimePaths", "apply_environment", "resolve_vlc_runtime"]
