"""Package manager collaborator.

Plugins are npm packages installed under a private prefix. The engine only
needs four primitives from npm (view, install, uninstall, ls) and treats
each as an opaque async operation that either succeeds or raises
``PackageManagerError``.
"""

from __future__ import annotations

import asyncio
import json
import logging
from pathlib import Path
from typing import Any, Protocol

from shipmate.plugins.errors import PackageManagerError, PluginDirectoryError
from shipmate.plugins.models import VersionMetadataMap

logger = logging.getLogger(__name__)

DEFAULT_NPM_OPTIONS: dict[str, Any] = {
    "force": True,
    "unsafe-perm": True,
    "loglevel": "silent",
}


class PackageManager(Protocol):
    """Primitives the installer consumes."""

    async def load(self, prefix: str | Path, options: dict[str, Any] | None = None) -> None: ...

    async def view(self, spec: str) -> VersionMetadataMap: ...

    async def install(self, spec: str) -> None: ...

    async def uninstall(self, name: str) -> None: ...

    async def list_installed(self) -> dict[str, str]: ...


class NpmPackageManager:
    """Runs the ``npm`` executable against a plugin prefix directory."""

    def __init__(self, executable: str = "npm", timeout: float = 300.0) -> None:
        """Initialize the npm adapter.

        Args:
            executable: npm binary name or path
            timeout: Maximum seconds a single npm command may run
        """
        self.executable = executable
        self.timeout = timeout
        self.prefix: Path | None = None
        self.options: dict[str, Any] = dict(DEFAULT_NPM_OPTIONS)
        # npm rewrites package.json and the lockfile under the prefix, so
        # commands that change node_modules run one at a time
        self._write_lock = asyncio.Lock()

    async def load(self, prefix: str | Path, options: dict[str, Any] | None = None) -> None:
        """Point npm at a prefix, creating ``<prefix>/node_modules`` if needed.

        Raises:
            PluginDirectoryError: If the directory cannot be created
        """
        self.prefix = Path(prefix).expanduser()
        if options is not None:
            self.options = dict(options)

        try:
            (self.prefix / "node_modules").mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise PluginDirectoryError(
                f"Cannot create plugin directory {self.prefix}: {e}"
            ) from e

        logger.debug("npm prefix set to %s", self.prefix)

    async def view(self, spec: str) -> VersionMetadataMap:
        """Published versions matching ``spec`` with their package metadata."""
        stdout = await self._run("view", spec, "--json")
        if not stdout.strip():
            # npm prints nothing when a range matches no version
            return {}

        try:
            data = json.loads(stdout)
        except json.JSONDecodeError as e:
            raise PackageManagerError("view", f"unreadable output for {spec}: {e}") from e

        return versions_from_view(data)

    async def install(self, spec: str) -> None:
        async with self._write_lock:
            await self._run("install", spec)

    async def uninstall(self, name: str) -> None:
        async with self._write_lock:
            await self._run("uninstall", name)

    async def list_installed(self) -> dict[str, str]:
        """Top level packages under the prefix, name to version."""
        # npm ls exits non-zero on extraneous or missing packages but still
        # prints the tree, so the exit code is not checked here
        stdout = await self._run("ls", "--json", "--depth=0", check=False)
        try:
            data = json.loads(stdout or "{}")
        except json.JSONDecodeError as e:
            raise PackageManagerError("ls", f"unreadable output: {e}") from e

        dependencies = data.get("dependencies") or {}
        return {
            name: str(info.get("version", ""))
            for name, info in dependencies.items()
            if isinstance(info, dict)
        }

    def _option_flags(self) -> list[str]:
        flags = []
        for key, value in self.options.items():
            if value is True:
                flags.append(f"--{key}")
            elif value is False or value is None:
                continue
            else:
                flags.append(f"--{key}={value}")
        return flags

    async def _run(self, command: str, *args: str, check: bool = True) -> str:
        """Run one npm command and return its stdout.

        Raises:
            PackageManagerError: On timeout, missing executable, or a non-zero
                exit when ``check`` is set
        """
        if self.prefix is None:
            raise PackageManagerError(command, "package manager used before load()")

        argv = [
            self.executable,
            command,
            *args,
            "--prefix",
            str(self.prefix),
            *self._option_flags(),
        ]
        logger.debug("Running %s", " ".join(argv))

        try:
            process = await asyncio.create_subprocess_exec(
                *argv,
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.PIPE,
            )
        except OSError as e:
            raise PackageManagerError(command, f"cannot run {self.executable}: {e}") from e

        try:
            stdout, stderr = await asyncio.wait_for(process.communicate(), timeout=self.timeout)
        except asyncio.TimeoutError as e:
            process.kill()
            await process.wait()
            raise PackageManagerError(
                command, f"timed out after {self.timeout} seconds"
            ) from e

        out = stdout.decode("utf-8", errors="replace")
        if check and process.returncode != 0:
            raise PackageManagerError(command, _error_message(out, stderr, process.returncode))
        return out


def versions_from_view(data: Any) -> VersionMetadataMap:
    """Normalize ``npm view --json`` output into a version map.

    npm prints a single object when one version matches and a list of
    objects when several do.
    """
    entries = data if isinstance(data, list) else [data]

    versions: VersionMetadataMap = {}
    for entry in entries:
        if isinstance(entry, dict) and isinstance(entry.get("version"), str):
            versions[entry["version"]] = entry
        elif isinstance(entry, str):
            # "npm view <spec> version" style output
            versions[entry] = {"version": entry}
    return versions


def _error_message(stdout: str, stderr: bytes, returncode: int | None) -> str:
    """Best human readable error from a failed npm run."""
    # With --json, npm reports errors as {"error": {"summary": ...}} on stdout
    try:
        data = json.loads(stdout)
    except (json.JSONDecodeError, TypeError):
        data = None
    if isinstance(data, dict) and isinstance(data.get("error"), dict):
        error = data["error"]
        summary = error.get("summary") or error.get("code")
        if summary:
            return str(summary)

    text = stderr.decode("utf-8", errors="replace").strip()
    if text:
        return text.splitlines()[-1]
    return f"exit code {returncode}"
