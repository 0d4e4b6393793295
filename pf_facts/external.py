"""External facts: structured files and executables dropped into facts.d directories."""

from __future__ import annotations

import json
import logging
import os
import subprocess
from pathlib import Path
from typing import Any, Iterator

import yaml

from pf_common.errors import ExternalFactError


logger = logging.getLogger(__name__)

SYSTEM_DIRECTORIES = (
    "/etc/puppetlabs/facter/facts.d",
    "/etc/facter/facts.d",
    "/opt/puppetlabs/facter/facts.d",
)
USER_DIRECTORIES = (
    "~/.puppetlabs/opt/facter/facts.d",
    "~/.facter/facts.d",
)
EXECUTABLE_TIMEOUT = 30.0


def default_directories() -> list[str]:
    """Directories searched when none are given on the command line."""
    if hasattr(os, "geteuid") and os.geteuid() == 0:
        return list(SYSTEM_DIRECTORIES)
    return [str(Path(entry).expanduser()) for entry in USER_DIRECTORIES]


def iter_fact_files(directory: str, *, explicit: bool = False) -> Iterator[Path]:
    root = Path(directory).expanduser()
    if not root.is_dir():
        if explicit:
            logger.warning("skipping external facts for \"%s\": directory does not exist.", root)
        else:
            logger.debug("skipping external facts for \"%s\": directory does not exist.", root)
        return
    for path in sorted(root.iterdir()):
        if path.is_file() and not path.name.startswith("."):
            yield path


def load_fact_file(path: Path) -> dict[str, Any]:
    """Parse one external fact source into a name -> value mapping."""
    suffix = path.suffix.lower()
    if suffix in (".yaml", ".yml"):
        return _load_yaml(path)
    if suffix == ".json":
        return _load_json(path)
    if suffix == ".txt":
        return _parse_key_values(_read_text(path), path)
    if os.access(path, os.X_OK):
        return _run_executable(path)
    logger.debug("skipping \"%s\": not a supported external fact file.", path)
    return {}


def _read_text(path: Path) -> str:
    try:
        return path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as exc:
        raise ExternalFactError(
            f"error reading external facts from \"{path}\": {exc}",
            context={"path": path},
            cause=exc,
        ) from exc


def _load_yaml(path: Path) -> dict[str, Any]:
    try:
        data = yaml.safe_load(_read_text(path))
    except yaml.YAMLError as exc:
        raise ExternalFactError(
            f"error parsing YAML external facts in \"{path}\": {exc}",
            context={"path": path},
            cause=exc,
        ) from exc
    return _expect_mapping(data, path)


def _load_json(path: Path) -> dict[str, Any]:
    try:
        data = json.loads(_read_text(path))
    except json.JSONDecodeError as exc:
        raise ExternalFactError(
            f"error parsing JSON external facts in \"{path}\": {exc}",
            context={"path": path},
            cause=exc,
        ) from exc
    return _expect_mapping(data, path)


def _expect_mapping(data: Any, path: Path) -> dict[str, Any]:
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ExternalFactError(
            f"external facts in \"{path}\" must be a mapping of fact names to values.",
            context={"path": path, "type": type(data).__name__},
        )
    return {str(key): value for key, value in data.items()}


def _parse_key_values(text: str, path: Path) -> dict[str, Any]:
    facts: dict[str, Any] = {}
    for number, line in enumerate(text.splitlines(), start=1):
        stripped = line.strip()
        if not stripped or stripped.startswith("#"):
            continue
        if "=" not in stripped:
            logger.debug("%s:%d: ignoring line without '=': %s", path, number, stripped)
            continue
        key, value = stripped.split("=", 1)
        if key.strip():
            facts[key.strip()] = value.strip()
    return facts


def _run_executable(path: Path) -> dict[str, Any]:
    try:
        result = subprocess.run(
            [str(path)],
            check=False,
            capture_output=True,
            text=True,
            timeout=EXECUTABLE_TIMEOUT,
        )
    except (OSError, subprocess.TimeoutExpired) as exc:
        raise ExternalFactError(
            f"error executing external fact \"{path}\": {exc}",
            context={"path": path},
            cause=exc,
        ) from exc
    if result.stderr.strip():
        logger.warning("external fact file \"%s\" had output on stderr: %s", path, result.stderr.strip())
    if result.returncode != 0:
        raise ExternalFactError(
            f"external fact \"{path}\" exited with status {result.returncode}.",
            context={"path": path, "returncode": result.returncode},
        )
    output = result.stdout.strip()
    if output.startswith("{"):
        try:
            return _expect_mapping(json.loads(output), path)
        except json.JSONDecodeError as exc:
            raise ExternalFactError(
                f"error parsing JSON output of external fact \"{path}\": {exc}",
                context={"path": path},
                cause=exc,
            ) from exc
    return _parse_key_values(output, path)
