# Copyright 2019 PrivateStorage.io, LLC
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
Calculate storage metrics for an account.

``compute_storage_metrics`` is the entry point.  It fetches one balance
snapshot and derives everything else from it without suspending again.
Failures to fetch the snapshot are not handled here; they propagate to the
caller unchanged.
"""

from typing import Optional

from .config import StorageConfig
from .eliot import COMPUTE_STORAGE_METRICS
from .model import BalanceSnapshot, CalculationResult
from .paymentmarket import IBalanceSnapshotProvider
from .persistence import remaining_lockup, runway_at_current_rate, runway_at_required_rate
from .pricecalculator import PriceCalculator
from .sufficiency import evaluate_sufficiency
from .usage import estimate_current_usage


def calculate_storage_metrics(
    snapshot: BalanceSnapshot,
    storage_capacity: int,
    min_days_threshold: int,
    with_cdn: bool,
) -> CalculationResult:
    """
    Derive storage metrics from a balance snapshot.

    :param snapshot: The balance state, assessed against the storage plan.

    :param storage_capacity: The plan's capacity in bytes.

    :param min_days_threshold: The least acceptable runway in days.

    :param with_cdn: Whether content-delivery pricing applies.
    """
    rate_needed = snapshot.costs.per_epoch
    remaining = remaining_lockup(snapshot)

    persistence_days_left = runway_at_required_rate(remaining, rate_needed)
    persistence_days_left_at_current_rate = runway_at_current_rate(
        remaining, snapshot.current_rate_used
    )

    usage = estimate_current_usage(snapshot, storage_capacity)

    sufficiency = evaluate_sufficiency(
        snapshot.current_rate_allowance,
        rate_needed,
        persistence_days_left,
        min_days_threshold,
    )

    return CalculationResult(
        rate_needed=rate_needed,
        rate_used=snapshot.current_rate_used,
        current_storage_bytes=usage.current_storage_bytes,
        current_storage_gb=usage.current_storage_gb,
        total_lockup_needed=snapshot.lockup_allowance_needed,
        deposit_needed=snapshot.deposit_amount_needed,
        persistence_days_left=persistence_days_left,
        persistence_days_left_at_current_rate=persistence_days_left_at_current_rate,
        is_rate_sufficient=sufficiency.is_rate_sufficient,
        is_lockup_sufficient=sufficiency.is_lockup_sufficient,
        current_rate_allowance=snapshot.current_rate_allowance,
        current_rate_allowance_gb=PriceCalculator(with_cdn).capacity_gb_for_rate(
            snapshot.current_rate_allowance
        ),
        current_lockup_allowance=snapshot.current_lockup_allowance,
    )


async def compute_storage_metrics(
    provider: IBalanceSnapshotProvider,
    config: StorageConfig,
    persistence_period_days: Optional[int] = None,
    storage_capacity: Optional[int] = None,
    min_days_threshold: Optional[int] = None,
) -> CalculationResult:
    """
    Fetch a balance snapshot for a storage plan and calculate its metrics.

    :param provider: The source of the balance snapshot.

    :param config: The storage plan.  Its values are used for any of the
        remaining arguments which are omitted.

    :param persistence_period_days: The number of days the plan should be
        paid for in advance.

    :param storage_capacity: The plan's capacity in bytes.

    :param min_days_threshold: The least acceptable runway in days.

    :return: The metrics.
    """
    if persistence_period_days is None:
        persistence_period_days = config.persistence_period
    if storage_capacity is None:
        storage_capacity = config.storage_capacity
    if min_days_threshold is None:
        min_days_threshold = config.min_days_threshold

    with COMPUTE_STORAGE_METRICS(
        storage_capacity=storage_capacity,
        persistence_period=persistence_period_days,
        min_days_threshold=min_days_threshold,
        with_cdn=config.with_cdn,
    ) as action:
        snapshot = await provider.check_allowance_for_storage(
            storage_capacity,
            config.with_cdn,
            persistence_period_days,
        )
        result = calculate_storage_metrics(
            snapshot,
            storage_capacity,
            min_days_threshold,
            config.with_cdn,
        )
        action.add_success_fields(is_sufficient=result.is_sufficient)
        return result
