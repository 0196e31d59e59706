# Overview: Runs allow-listed maintenance commands as subprocesses and parses their summary lines.

"""
Maintenance Script Runner

Only the names in ALLOWED_SCRIPTS can be run. Each one maps to a
`flask files ...` command of this application, executed in a child
process with a hard timeout. The commands print "Fixed: N",
"Failed: N" and "Total files: N" summary lines which are lifted into
the response.
"""

from __future__ import annotations

import logging
import re
import subprocess
import sys
from dataclasses import dataclass

from flask import current_app

from ..validation import SentraError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class AllowedScript:
    args: tuple[str, ...]
    description: str


ALLOWED_SCRIPTS = {
    "quick-fix-files": AllowedScript(("files", "fix-all"), "Fix ACL for all files"),
    "fix-existing-files-acl": AllowedScript(("files", "fix-acl-detailed"), "Fix ACL for existing files (detailed)"),
    "setup-automatic-acl": AllowedScript(("files", "setup-acl"), "Setup automatic ACL system"),
}

_FIXED_RE = re.compile(r"Fixed:\s*(\d+)")
_FAILED_RE = re.compile(r"Failed:\s*(\d+)")
_TOTAL_RE = re.compile(r"Total files:\s*(\d+)")


class ScriptError(SentraError):
    """Base error for script execution."""


class UnknownScriptError(ScriptError):
    def __init__(self, name):
        super().__init__("Invalid script name" if name else "Script name is required")
        self.name = name
        self.allowed = sorted(ALLOWED_SCRIPTS)


class ScriptTimeoutError(ScriptError):
    """Raised when a script runs past its time limit (408)."""


class ScriptExecutionError(ScriptError):
    def __init__(self, message: str, stdout: str | None = None, stderr: str | None = None):
        super().__init__(message)
        self.stdout = stdout
        self.stderr = stderr


def build_command(script: AllowedScript) -> list[str]:
    return [sys.executable, "-m", "flask", "--app", "sentra", *script.args]


def parse_counts(output: str) -> dict:
    """Pull fixedCount / failedCount / totalFiles out of a script's stdout when present."""
    counts = {}
    if "Fixed:" not in (output or ""):
        return counts
    for key, pattern in (("fixedCount", _FIXED_RE), ("failedCount", _FAILED_RE), ("totalFiles", _TOTAL_RE)):
        match = pattern.search(output)
        if match:
            counts[key] = int(match.group(1))
    return counts


def run_script(name: str | None) -> dict:
    script = ALLOWED_SCRIPTS.get(name or "")
    if script is None:
        raise UnknownScriptError(name)

    timeout = current_app.config.get("SCRIPT_TIMEOUT_SECONDS", 60)
    command = build_command(script)
    logger.info("Running script %s: %s", name, " ".join(command[1:]))

    try:
        completed = subprocess.run(
            command,
            capture_output=True,
            text=True,
            timeout=timeout,
            check=False,
        )
    except subprocess.TimeoutExpired as e:
        raise ScriptTimeoutError("Script execution timed out") from e
    except OSError as e:
        raise ScriptExecutionError(str(e)) from e

    if completed.returncode != 0:
        raise ScriptExecutionError(
            f"Command exited with status {completed.returncode}",
            stdout=completed.stdout or None,
            stderr=completed.stderr or None,
        )

    if completed.stderr:
        logger.warning("Script %s warnings: %s", name, completed.stderr.strip())

    result = {
        "success": True,
        "message": f"{script.description} completed successfully",
        "output": completed.stdout,
        "warnings": completed.stderr or None,
    }
    result.update(parse_counts(completed.stdout))
    return result
