# Copyright 2020 PrivateStorage.io, LLC
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

"""
Eliot field, message, and action definitions for StorageAllowance.
"""

from functools import wraps
from typing import Any, Awaitable, Callable, TypeVar, cast

from eliot import ActionType, Field, MessageType, start_action
from eliot.testing import capture_logging as _capture_logging
from typing_extensions import ParamSpec

STORAGE_CAPACITY = Field(
    "storage_capacity",
    int,
    "A storage capacity, in bytes.",
)

PERSISTENCE_PERIOD = Field(
    "persistence_period",
    int,
    "A desired persistence period, in days.",
)

MIN_DAYS_THRESHOLD = Field(
    "min_days_threshold",
    int,
    "The minimum number of days of remaining lockup considered sufficient.",
)

WITH_CDN = Field.forTypes(
    "with_cdn",
    [bool],
    "Whether the content-delivery pricing tier applies.",
)

RATE_USED = Field(
    "rate_used",
    int,
    "The per-epoch rate currently being consumed.",
)

RATE_ALLOWANCE_NEEDED = Field(
    "rate_allowance_needed",
    int,
    "The per-epoch rate allowance required for the target capacity.",
)

REASON = Field(
    "reason",
    str,
    "A description of why an operation failed.",
)

IS_SUFFICIENT = Field.forTypes(
    "is_sufficient",
    [bool],
    "Whether the current allowances cover the target capacity and duration.",
)

COMPUTE_STORAGE_METRICS = ActionType(
    "storageallowance:compute-storage-metrics",
    [STORAGE_CAPACITY, PERSISTENCE_PERIOD, MIN_DAYS_THRESHOLD, WITH_CDN],
    [IS_SUFFICIENT],
    "Storage metrics are being computed from a freshly fetched balance snapshot.",
)

FETCH_SNAPSHOT = ActionType(
    "storageallowance:fetch-snapshot",
    [STORAGE_CAPACITY, PERSISTENCE_PERIOD, WITH_CDN],
    [],
    "A balance snapshot is being requested from the payment-market service.",
)

USAGE_ESTIMATE_FAILED = MessageType(
    "storageallowance:usage-estimate-failed",
    [RATE_USED, RATE_ALLOWANCE_NEEDED, STORAGE_CAPACITY, REASON],
    "Estimating current storage usage failed so the estimate was treated as zero.",
)

T = TypeVar("T")
P = ParamSpec("P")


def log_call_coroutine(
    action_type: str,
) -> Callable[[Callable[P, Awaitable[T]]], Callable[P, Awaitable[T]]]:
    def decorate_log_call_coroutine(
        f: Callable[P, Awaitable[T]]
    ) -> Callable[P, Awaitable[T]]:
        @wraps(f)
        async def logged_f(*a: P.args, **kw: P.kwargs) -> T:
            with start_action(action_type=action_type):
                return await f(*a, **kw)

        return logged_f

    return decorate_log_call_coroutine


def capture_logging(
    assertion: Any,
    *assertionArgs: Any,
    **assertionKwargs: Any,
) -> Callable[[Callable[P, T]], Callable[P, T]]:
    return cast(
        Callable[[Callable[P, T]], Callable[P, T]],
        _capture_logging(assertion, *assertionArgs, **assertionKwargs),
    )
