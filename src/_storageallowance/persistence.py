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
Lockup requirements and the runway they imply.

Funds locked up with the storage operator are consumed at some per-epoch
rate.  The runway is how many days the unused part of the lockup allowance
lasts at that rate.
"""

import sys
from typing import Optional, Union

from attrs import field, frozen

from ._types import JSON, TokenAmount
from .storage_common import EPOCHS_PER_DAY
from .validators import non_negative_float


@frozen
class Unbounded(object):
    """
    Nothing is being spent and there is lockup left, so the funds never run
    out.
    """

    def covers(self, min_days: float) -> bool:
        return True

    def to_json_v1(self) -> JSON:
        return {"name": "unbounded"}


@frozen
class Days(object):
    """
    The funds run out after a finite number of days.

    :ivar days: The number of days, possibly fractional.
    """

    days: float = field(validator=non_negative_float)

    def covers(self, min_days: float) -> bool:
        """
        :return: ``True`` if this runway is at least ``min_days`` long.
        """
        return self.days >= min_days

    def to_json_v1(self) -> JSON:
        return {"name": "days", "days": self.days}


Runway = Union[Unbounded, Days]

NO_RUNWAY = Days(0.0)

# The longest runway a ``Days`` can express.
LONGEST_RUNWAY = Days(sys.float_info.max)


def runway_from_json_v1(values: dict) -> Runway:
    """
    Load a runway from the structure produced by its ``to_json_v1``.

    :raise ValueError: If the structure does not describe a runway.
    """
    name = values.get("name")
    if name == "unbounded":
        return Unbounded()
    if name == "days":
        return Days(days=values["days"])
    raise ValueError("Unrecognized runway {!r}".format(values))


def lockup_per_day(rate: TokenAmount, epochs_per_day: int = EPOCHS_PER_DAY) -> TokenAmount:
    """
    Calculate how much lockup a per-epoch rate consumes in one day.
    """
    return epochs_per_day * rate


def remaining_lockup(snapshot) -> TokenAmount:
    """
    Calculate the part of the lockup allowance not already used.

    This is negative if the snapshot reports more lockup used than allowed,
    which a snapshot taken during an allowance update may do.

    :param BalanceSnapshot snapshot: The balance state to consider.
    """
    return snapshot.current_lockup_allowance - snapshot.current_lockup_used


def _days(remaining: TokenAmount, per_day: TokenAmount) -> Optional[Days]:
    """
    :return: The runway, or ``None`` if it is too long to represent as a
        float.
    """
    if remaining <= 0:
        return NO_RUNWAY
    try:
        return Days(remaining / per_day)
    except OverflowError:
        return None


def runway_at_required_rate(
    remaining: TokenAmount,
    rate: TokenAmount,
    epochs_per_day: int = EPOCHS_PER_DAY,
) -> Days:
    """
    Calculate how long the remaining lockup lasts if the target capacity is
    fully used.

    :param remaining: The unused lockup allowance.
    :param rate: The per-epoch rate required for the target capacity.

    :return: The runway.  A zero rate only arises from malformed input and
        gives no runway at all.  A runway too long to represent is
        ``LONGEST_RUNWAY``.
    """
    per_day = lockup_per_day(rate, epochs_per_day)
    if per_day <= 0:
        return NO_RUNWAY
    days = _days(remaining, per_day)
    if days is None:
        return LONGEST_RUNWAY
    return days


def runway_at_current_rate(
    remaining: TokenAmount,
    rate: TokenAmount,
    epochs_per_day: int = EPOCHS_PER_DAY,
) -> Runway:
    """
    Calculate how long the remaining lockup lasts at the rate currently being
    spent.

    :param remaining: The unused lockup allowance.
    :param rate: The per-epoch rate currently in use.

    :return: The runway.  If nothing is being spent it is ``Unbounded`` as
        long as some lockup remains.  It is also ``Unbounded`` if it is too
        long to represent.
    """
    per_day = lockup_per_day(rate, epochs_per_day)
    if per_day > 0:
        days = _days(remaining, per_day)
        if days is None:
            return Unbounded()
        return days
    if remaining > 0:
        return Unbounded()
    return NO_RUNWAY
