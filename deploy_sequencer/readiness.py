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

"""Bounded readiness polling and load-balancer address extraction."""

from __future__ import annotations

import time
from collections.abc import Callable
from dataclasses import dataclass
from typing import Any

from tenacity import Retrying, retry_if_result, stop_after_attempt, wait_fixed

from deploy_sequencer import console, logger
from deploy_sequencer.client import ClusterClient
from deploy_sequencer.config import ReadinessPoll
from deploy_sequencer.errors import ClientError


@dataclass(frozen=True)
class PollResult:
    """Outcome of a readiness poll.

    Attributes:
        value: First value satisfying the condition, or None if none did.
        attempts: Number of queries made.
        ready: Whether the condition was met.
    """

    value: Any
    attempts: int
    ready: bool


def poll(
    query: Callable[[], Any],
    bounds: ReadinessPoll,
    sleep: Callable[[float], None] = time.sleep,
    on_attempt: Callable[[int, Any], None] | None = None,
) -> PollResult:
    """Query until the condition holds or the attempt budget runs out.

    A query raising ClientError counts as an unsuccessful attempt. Exhaustion
    is not an error: the result comes back with ``ready=False``.

    Args:
        query: Zero-argument status query.
        bounds: Attempt count, interval, and success predicate.
        sleep: Sleep function between attempts.
        on_attempt: Called with (attempt number, observed value) after each miss.

    Returns:
        The poll result.
    """
    attempts = 0

    def _attempt() -> tuple[bool, Any]:
        nonlocal attempts
        attempts += 1
        try:
            value = query()
        except ClientError as err:
            logger.debug("readiness query %d failed: %s", attempts, err)
            value = None
        ready = value is not None and bool(bounds.condition(value))
        if not ready and on_attempt is not None:
            on_attempt(attempts, value)
        return ready, value

    retrying = Retrying(
        stop=stop_after_attempt(bounds.max_attempts),
        wait=wait_fixed(bounds.interval),
        retry=retry_if_result(lambda observed: not observed[0]),
        retry_error_callback=lambda state: (False, None),
        sleep=sleep,
    )
    ready, value = retrying(_attempt)
    return PollResult(value=value if ready else None, attempts=attempts, ready=ready)


def load_balancer_address(status: dict | None) -> str | None:
    """Extract the first load-balancer IP (or hostname) from a resource status."""
    if not status:
        return None
    ingress = (status.get("loadBalancer") or {}).get("ingress") or []
    if not ingress:
        return None
    return ingress[0].get("ip") or ingress[0].get("hostname") or None


def wait_for_ingress_address(
    client: ClusterClient,
    kind: str,
    name: str,
    namespace: str,
    bounds: ReadinessPoll,
    sleep: Callable[[float], None] = time.sleep,
) -> PollResult:
    """Poll ``kind/name`` until it reports a load-balancer address.

    Args:
        client: Cluster client.
        kind: Resource kind (``service`` or ``ingress``).
        name: Resource name.
        namespace: Resource namespace.
        bounds: Attempt count and interval.
        sleep: Sleep function between attempts.

    Returns:
        The poll result; ``value`` is the address when ready.
    """
    console.print(f"[yellow]\u2139\ufe0f  Waiting for external address on {kind}/{name} "
                  f"(up to {bounds.max_attempts} x {bounds.interval}s)...[/yellow]")

    def _report(attempt: int, _value: Any) -> None:
        console.print(f"[yellow]   Not yet assigned ({attempt}/{bounds.max_attempts})[/yellow]")

    return poll(
        lambda: load_balancer_address(client.get_status(kind, name, namespace)),
        bounds,
        sleep=sleep,
        on_attempt=_report,
    )
