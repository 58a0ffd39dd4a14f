"""Build a test-job request from a managed script in a local checkout."""

from __future__ import annotations

import base64
import logging
import os
import re
import subprocess
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import yaml

_log = logging.getLogger(__name__)

_SOURCE_LINE = re.compile(r"source /managed-scripts/(.*)\n")
_METADATA_FILE = "metadata.yaml"


@dataclass
class TestScriptRequest:
    """A script body (base64 encoded), its metadata and run parameters."""

    __test__ = False

    script_body: str
    script_metadata: dict[str, Any]
    parameters: dict[str, str] = field(default_factory=dict)


def _repo_root(directory: str) -> str:
    result = subprocess.run(
        ["git", "rev-parse", "--show-toplevel"],
        cwd=directory,
        capture_output=True,
        text=True,
        check=True,
    )
    return result.stdout.strip()


def inline_library_source_files(script: str, script_path: str | os.PathLike[str]) -> str:
    """Replace the first ``source /managed-scripts/...`` line with the library inlined.

    The library is read from the ``scripts`` directory at the top of the git
    repository that holds ``script_path``. The library is written out to
    ``./lib.sh`` with a heredoc and sourced from there.
    """
    match = _SOURCE_LINE.search(script)
    if match is None:
        return script

    library_path = match.group(1)
    script_dir = os.path.dirname(os.fspath(script_path)) or "."
    managed_scripts_dir = _repo_root(script_dir)

    library = Path(managed_scripts_dir + "/scripts/" + library_path).read_text(encoding="utf-8")
    inlined = "cat << EOF > ./lib.sh\n" + library + "\nEOF\n" + "source ./lib.sh\n"
    return script.replace(match.group(0), inlined, 1)


def create_test_script_from_files(directory: str | os.PathLike[str] | None = None) -> TestScriptRequest:
    """Read ``metadata.yaml`` and the script it names from ``directory``."""
    base = Path(directory) if directory is not None else Path.cwd()

    try:
        raw_metadata = (base / _METADATA_FILE).read_text(encoding="utf-8")
    except OSError as exc:
        _log.error("Error reading metadata yaml: %s, ensure you are in a script directory", exc)
        raise

    try:
        metadata = yaml.safe_load(raw_metadata)
    except yaml.YAMLError as exc:
        _log.error("Error reading metadata: %s", exc)
        raise
    if metadata is None:
        metadata = {}
    if not isinstance(metadata, dict):
        _log.error("Error reading metadata: not a mapping")
        raise ValueError("metadata must be a mapping")

    script_file = metadata.get("file") or ""
    if not isinstance(script_file, str) or not script_file:
        _log.error("unable to read script file, metadata names none")
        raise ValueError("metadata does not name a script file")

    script_path = base / script_file
    try:
        body = script_path.read_text(encoding="utf-8")
    except OSError:
        _log.error("unable to read file %s, make sure this file exists", script_file)
        raise

    body = inline_library_source_files(body, script_path)
    encoded = base64.b64encode(body.encode("utf-8")).decode("ascii")
    return TestScriptRequest(script_body=encoded, script_metadata=metadata)