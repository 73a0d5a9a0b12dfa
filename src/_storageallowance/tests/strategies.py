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
Hypothesis strategies for property testing.
"""

from hypothesis.strategies import (
    SearchStrategy,
    booleans,
    builds,
    floats,
    integers,
    just,
    one_of,
)

from ..config import StorageConfig
from ..model import BalanceSnapshot, CalculationResult, StorageCosts
from ..paymentmarket import OperatorApproval
from ..persistence import Days, Unbounded
from ..storage_common import EPOCHS_PER_DAY, EPOCHS_PER_MONTH, GiB, TiB


def token_amounts(max_value: int = 10**24) -> SearchStrategy[int]:
    """
    Build amounts of tokens in the smallest token unit.
    """
    return integers(min_value=0, max_value=max_value)


def storage_capacities() -> SearchStrategy[int]:
    """
    Build storage capacities in bytes, from one byte to a few PiB.
    """
    return integers(min_value=1, max_value=4096 * TiB)


def gib_capacities() -> SearchStrategy[int]:
    """
    Build storage capacities, in bytes, which are a whole number of GiB.
    """
    return integers(min_value=1, max_value=100000).map(lambda n: n * GiB)


def persistence_periods() -> SearchStrategy[int]:
    """
    Build persistence periods in days.
    """
    return integers(min_value=1, max_value=3650)


def day_counts() -> SearchStrategy[float]:
    """
    Build finite, non-negative numbers of days.
    """
    return floats(min_value=0.0, max_value=1e9, allow_nan=False, allow_infinity=False)


def storage_costs() -> SearchStrategy[StorageCosts]:
    """
    Build ``StorageCosts`` which are consistent between periods.
    """
    return token_amounts(max_value=10**18).map(
        lambda per_epoch: StorageCosts(
            per_epoch=per_epoch,
            per_day=per_epoch * EPOCHS_PER_DAY,
            per_month=per_epoch * EPOCHS_PER_MONTH,
        ),
    )


def balance_snapshots() -> SearchStrategy[BalanceSnapshot]:
    """
    Build ``BalanceSnapshot`` instances, including ones which use more than
    they are allowed.
    """
    return builds(
        BalanceSnapshot,
        current_rate_allowance=token_amounts(),
        current_rate_used=token_amounts(),
        current_lockup_allowance=token_amounts(),
        current_lockup_used=token_amounts(),
        rate_allowance_needed=token_amounts(),
        lockup_allowance_needed=token_amounts(),
        deposit_amount_needed=token_amounts(),
        costs=storage_costs(),
    )


def runways() -> SearchStrategy:
    """
    Build any kind of runway.
    """
    return one_of(
        just(Unbounded()),
        day_counts().map(Days),
    )


def calculation_results(
    is_rate_sufficient: SearchStrategy[bool] = booleans(),
    is_lockup_sufficient: SearchStrategy[bool] = booleans(),
) -> SearchStrategy[CalculationResult]:
    """
    Build ``CalculationResult`` instances.  The values are not necessarily
    consistent with each other.
    """
    return builds(
        CalculationResult,
        rate_needed=token_amounts(),
        rate_used=token_amounts(),
        current_storage_bytes=storage_capacities(),
        current_storage_gb=day_counts(),
        total_lockup_needed=token_amounts(),
        deposit_needed=token_amounts(),
        persistence_days_left=day_counts().map(Days),
        persistence_days_left_at_current_rate=runways(),
        is_rate_sufficient=is_rate_sufficient,
        is_lockup_sufficient=is_lockup_sufficient,
        current_rate_allowance=token_amounts(),
        current_rate_allowance_gb=day_counts(),
        current_lockup_allowance=token_amounts(),
    )


def storage_configs(
    storage_capacity: SearchStrategy[int] = gib_capacities(),
) -> SearchStrategy[StorageConfig]:
    """
    Build ``StorageConfig`` instances.
    """
    return builds(
        StorageConfig,
        storage_capacity=storage_capacity,
        persistence_period=persistence_periods(),
        min_days_threshold=integers(min_value=0, max_value=3650),
        with_cdn=booleans(),
    )


def operator_approvals() -> SearchStrategy[OperatorApproval]:
    """
    Build ``OperatorApproval`` instances.
    """
    return builds(
        OperatorApproval,
        rate_allowance=token_amounts(),
        rate_used=token_amounts(),
        lockup_allowance=token_amounts(),
        lockup_used=token_amounts(),
    )
