# Copyright (C) 2025 Antonio Paolillo. All rights reserved.
# SPDX-License-Identifier: MIT
"""
Build context of the development container image.

The `BuildContext` maps paths as seen by the Dockerfile `COPY` instructions (relative to the
context root) to files and directories on the host, and materializes that mapping into the
directory handed to `docker build`. Python bytecode caches are left out of copied directories.
"""

import shutil
from pathlib import Path

from devprovision.sysutils import PathType

IGNORED_PATTERNS = ("__pycache__", "*.pyc")


class BuildContext:
    """
    A Docker build context under construction.

    Attributes:
        _context_root:
            Optional host directory against which context paths are computed. Without it, a host
            path is staged under its basename.
        _context_entries:
            Mapping from context-relative paths to host paths.
    """

    def __init__(self, context_root: PathType | None = None) -> None:
        self._context_root = Path(context_root) if context_root else None
        self._context_entries: dict[Path, Path] = {}

    @property
    def entries(self) -> dict[Path, Path]:
        """A copy of the context-relative path to host path mapping."""
        return dict(self._context_entries)

    def add_context_entry(self, host_path: PathType) -> Path:
        """
        Registers a host file or directory and returns its path inside the context.

        Args:
            host_path: Path to a file or directory on the host.

        Returns:
            The context-relative path the Dockerfile must refer to.

        Raises:
            ValueError: If another host path is already staged under the same context path.
        """
        host_path = Path(host_path)
        if self._context_root is not None:
            ctx_path = host_path.relative_to(self._context_root)
        else:
            ctx_path = Path(host_path.name)

        registered = self._context_entries.get(ctx_path)
        if registered is not None and registered != host_path:
            raise ValueError(f"Duplicate context entry: {ctx_path}")

        self._context_entries[ctx_path] = host_path
        return ctx_path

    def build(self, context_path: PathType) -> None:
        """
        Copies every registered entry under `context_path`.

        Args:
            context_path: Directory that becomes the root of the build context.

        Raises:
            ValueError: If a context path is absolute or escapes the root (`..`), or if a host
                path is neither a file nor a directory.
            FileNotFoundError: If a host path does not exist.
        """
        context_root = Path(context_path)
        context_root.mkdir(parents=True, exist_ok=True)

        for ctx_path, host_path in self._context_entries.items():
            if ctx_path.is_absolute() or ".." in ctx_path.parts:
                raise ValueError(f"Invalid context path (must be relative, no '..'): {ctx_path}")
            if not host_path.exists():
                raise FileNotFoundError(f"Host path does not exist: {host_path}")

            dst_path = context_root / ctx_path
            dst_path.parent.mkdir(parents=True, exist_ok=True)
            if host_path.is_file():
                shutil.copy2(host_path, dst_path)
            elif host_path.is_dir():
                shutil.copytree(
                    host_path,
                    dst_path,
                    ignore=shutil.ignore_patterns(*IGNORED_PATTERNS),
                    dirs_exist_ok=True,
                )
            else:
                raise ValueError(f"Host path must be a file or directory: {host_path}")
