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

"""Error taxonomy for redeployment runs."""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from deploy_sequencer.sequencer import SequenceReport


class SequencerError(RuntimeError):
    """Base class for all fatal deploy_sequencer errors."""


class MissingToolError(SequencerError):
    """A required command-line tool is not on PATH."""

    def __init__(self, tool: str) -> None:
        super().__init__(f"Required command '{tool}' not found. Please install it first.")
        self.tool = tool


class ClientError(SequencerError):
    """A cluster or cloud CLI call failed for reasons other than not-found."""


class PreconditionError(SequencerError):
    """A cluster precondition could not be checked or created."""

    def __init__(self, name: str, reason: str) -> None:
        super().__init__(f"Precondition '{name}' failed: {reason}")
        self.name = name


class StepError(SequencerError):
    """A manifest step failed.

    Attributes:
        step_name: Name of the failing step, when raised by the sequencer.
        report: Partial sequence report at the time of failure, if any.
    """

    def __init__(self, message: str, step_name: str | None = None,
                 report: SequenceReport | None = None) -> None:
        super().__init__(message)
        self.step_name = step_name
        self.report = report


class ApplyError(StepError):
    """Applying a manifest failed."""


class DeleteError(StepError):
    """Deleting a manifest failed for a reason other than not-found."""
