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
Estimate how much storage an account is currently paying for.

The estimate is proportional: if the target capacity requires some rate
allowance and half of that rate is being spent then about half of the target
capacity is in use.  It is display data only and failures to compute it are
logged and reported as zero usage.
"""

from attrs import frozen

from .eliot import USAGE_ESTIMATE_FAILED
from .model import BalanceSnapshot
from .storage_common import bytes_to_gb


@frozen
class UsageEstimate(object):
    """
    :ivar current_storage_bytes: The estimated capacity in use, in bytes.
    :ivar current_storage_gb: The same estimate in (binary) gigabytes.
    """

    current_storage_bytes: int
    current_storage_gb: float


NO_USAGE = UsageEstimate(current_storage_bytes=0, current_storage_gb=0.0)


def estimate_current_usage(
    snapshot: BalanceSnapshot, storage_capacity: int
) -> UsageEstimate:
    """
    Estimate the capacity currently in use from the rate currently being
    spent.

    :param snapshot: The balance state to consider.

    :param storage_capacity: The target capacity, in bytes, which
        ``snapshot.rate_allowance_needed`` pays for.

    :return: The estimate, or ``NO_USAGE`` if nothing is being spent, nothing
        is needed, or the estimate cannot be computed.
    """
    rate_used = snapshot.current_rate_used
    rate_needed = snapshot.rate_allowance_needed
    if rate_used <= 0 or rate_needed <= 0:
        return NO_USAGE

    try:
        current_storage_bytes = rate_used * storage_capacity // rate_needed
        current_storage_gb = bytes_to_gb(current_storage_bytes)
    except ArithmeticError as e:
        USAGE_ESTIMATE_FAILED.log(
            rate_used=rate_used,
            rate_allowance_needed=rate_needed,
            storage_capacity=storage_capacity,
            reason=str(e),
        )
        return NO_USAGE

    return UsageEstimate(
        current_storage_bytes=current_storage_bytes,
        current_storage_gb=current_storage_gb,
    )
