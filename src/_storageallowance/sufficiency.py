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
Decide whether an account's allowances cover a storage plan.
"""

from attrs import frozen

from ._types import TokenAmount
from .persistence import Runway


@frozen
class Sufficiency(object):
    """
    :ivar is_rate_sufficient: The rate allowance is at least the required
        rate.

    :ivar is_lockup_sufficient: The runway is at least the minimum number of
        days.
    """

    is_rate_sufficient: bool
    is_lockup_sufficient: bool

    @property
    def is_sufficient(self) -> bool:
        return self.is_rate_sufficient and self.is_lockup_sufficient


def is_rate_sufficient(
    current_rate_allowance: TokenAmount, rate_needed: TokenAmount
) -> bool:
    return current_rate_allowance >= rate_needed


def is_lockup_sufficient(persistence_days_left: Runway, min_days_threshold: int) -> bool:
    return persistence_days_left.covers(min_days_threshold)


def evaluate_sufficiency(
    current_rate_allowance: TokenAmount,
    rate_needed: TokenAmount,
    persistence_days_left: Runway,
    min_days_threshold: int,
) -> Sufficiency:
    """
    Compare allowances against requirements.

    Both comparisons are non-strict: exactly meeting a requirement is
    sufficient.

    :param current_rate_allowance: The rate allowance granted to the operator.
    :param rate_needed: The rate the storage plan costs.
    :param persistence_days_left: The runway at the required rate.
    :param min_days_threshold: The least acceptable runway, in days.
    """
    return Sufficiency(
        is_rate_sufficient=is_rate_sufficient(current_rate_allowance, rate_needed),
        is_lockup_sufficient=is_lockup_sufficient(
            persistence_days_left, min_days_threshold
        ),
    )
