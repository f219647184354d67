# /*
# Copyright 2026 The Grove Authors.
#
# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# You may obtain a copy of the License at
#
#     http://www.apache.org/licenses/LICENSE-2.0
#
# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS,
# WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
# See the License for the specific language governing permissions and
# limitations under the License.
# */

"""Utility functions for CLI invocation, not-found detection, and command checks."""

from __future__ import annotations

import subprocess

import sh

from deploy_sequencer import logger
from deploy_sequencer.constants import AZ_TIMEOUT, KUBECTL_TIMEOUT, NOT_FOUND_MARKERS
from deploy_sequencer.errors import MissingToolError


def require_command(cmd: str) -> None:
    """Check if a command exists on the system PATH.

    Args:
        cmd: Name of the CLI command to check.

    Raises:
        MissingToolError: If the command is not found.
    """
    try:
        sh.which(cmd)
    except sh.ErrorReturnCode as err:
        raise MissingToolError(cmd) from err


def run_cli(binary: str, args: list[str], timeout: float) -> tuple[bool, str, str]:
    """Run a CLI tool via subprocess and return (success, stdout, stderr).

    Uses subprocess instead of sh because callers parse stdout and stderr
    separately (e.g. telling a NotFound error apart from other failures).

    Args:
        binary: Executable name (``kubectl``, ``az``, ``minikube``).
        args: Arguments passed to the executable.
        timeout: Maximum seconds to wait for the command to complete.

    Returns:
        Tuple of (success, stdout, stderr).
    """
    logger.debug("%s %s", binary, " ".join(args))
    try:
        result = subprocess.run(
            [binary, *args],
            capture_output=True,
            text=True,
            timeout=timeout,
        )
        return result.returncode == 0, result.stdout, result.stderr
    except (subprocess.SubprocessError, OSError) as exc:
        return False, "", str(exc)


def run_kubectl(args: list[str], timeout: float = KUBECTL_TIMEOUT) -> tuple[bool, str, str]:
    """Run a kubectl command and return (success, stdout, stderr)."""
    return run_cli("kubectl", args, timeout)


def run_az(args: list[str], timeout: float = AZ_TIMEOUT) -> tuple[bool, str, str]:
    """Run an Azure CLI command and return (success, stdout, stderr)."""
    return run_cli("az", args, timeout)


def run_minikube(args: list[str], timeout: float = KUBECTL_TIMEOUT) -> tuple[bool, str, str]:
    """Run a minikube command and return (success, stdout, stderr)."""
    return run_cli("minikube", args, timeout)


def only_not_found(stderr: str, markers: tuple[str, ...] = NOT_FOUND_MARKERS) -> bool:
    """Return True if every error line in *stderr* reports a missing resource.

    ``kubectl delete -f`` on a multi-document manifest exits non-zero when any
    object is absent, even if the others were deleted. Warning lines are ignored.

    Args:
        stderr: Captured standard error of the failed command.
        markers: Substrings identifying a not-found error line.

    Returns:
        True if stderr has at least one error line and all of them are not-found.
    """
    lines = [
        line for line in stderr.splitlines()
        if line.strip() and not line.lstrip().startswith("Warning:")
    ]
    return bool(lines) and all(any(m in line for m in markers) for line in lines)


def first_line(text: str, limit: int = 200) -> str:
    """Return the first non-empty line of *text*, truncated to *limit* characters."""
    for line in text.splitlines():
        if line.strip():
            return line.strip()[:limit]
    return ""
