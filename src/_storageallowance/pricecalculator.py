# -*- coding: utf-8 -*-
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
Convert between storage capacity and the per-epoch spending rate which pays
for it.

The payment-market service is the authority on the rate required for a
capacity; it reports that rate in every balance snapshot.  This calculator
answers the inverse question for display purposes: how much capacity does a
given rate allowance sustain?  It also provides the forward conversion so
that a snapshot can be produced locally from a known operator approval.

Both directions use integer arithmetic which truncates.  Converting a
capacity to a rate and back again loses at most one byte.
"""

import sys

import attr

from .model import StorageCosts
from .storage_common import (
    EPOCHS_PER_DAY,
    EPOCHS_PER_MONTH,
    TiB,
    bytes_to_gb,
    price_per_tib_per_month,
)


def _require_non_negative(name, value):
    if value < 0:
        raise ValueError(
            "{name} must not be negative, instead it was {value}".format(
                name=name,
                value=value,
            ),
        )


@attr.s(frozen=True)
class PriceCalculator(object):
    """
    :ivar bool _with_cdn: Whether prices come from the content-delivery tier.
    """

    _with_cdn = attr.ib(validator=attr.validators.instance_of(bool))

    @property
    def price_per_tib_per_month(self):
        return price_per_tib_per_month(self._with_cdn)

    def capacity_for_rate(self, rate_allowance):
        """
        Calculate the storage capacity a rate allowance pays for when it is
        spent for a whole month.

        :param int rate_allowance: A per-epoch rate in the smallest token unit.

        :return int: The capacity in bytes.
        """
        _require_non_negative("rate_allowance", rate_allowance)
        monthly_rate = rate_allowance * EPOCHS_PER_MONTH
        return (monthly_rate * TiB) // self.price_per_tib_per_month

    def capacity_gb_for_rate(self, rate_allowance):
        """
        Like ``capacity_for_rate`` but in (binary) gigabytes.

        :return float: The capacity, or ``sys.float_info.max`` if it is too
            large to represent.
        """
        try:
            return bytes_to_gb(self.capacity_for_rate(rate_allowance))
        except OverflowError:
            return sys.float_info.max

    def rate_for_capacity(self, capacity):
        """
        Calculate the per-epoch rate which pays for storing some data.

        :param int capacity: The amount of data in bytes.

        :return int: The rate in the smallest token unit per epoch.
        """
        _require_non_negative("capacity", capacity)
        return (self.price_per_tib_per_month * capacity) // (TiB * EPOCHS_PER_MONTH)

    def costs_for_capacity(self, capacity):
        """
        Calculate the cost of storing some data over several periods.

        :param int capacity: The amount of data in bytes.

        :return StorageCosts: The cost per epoch, per day, and per month.
        """
        per_epoch = self.rate_for_capacity(capacity)
        return StorageCosts(
            per_epoch=per_epoch,
            per_day=per_epoch * EPOCHS_PER_DAY,
            per_month=per_epoch * EPOCHS_PER_MONTH,
        )
