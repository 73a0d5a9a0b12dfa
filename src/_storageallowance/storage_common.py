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
Constants and pricing shared by the calculators and the snapshot providers.
"""

from ._types import TokenAmount

# The payment chain produces one epoch every thirty seconds.
EPOCHS_PER_DAY = 2880

# A billing month is thirty days long.
EPOCHS_PER_MONTH = EPOCHS_PER_DAY * 30

GiB = 1024**3
TiB = 1024**4

# The payment token is denominated with this many decimal places.
TOKEN_DECIMALS = 18

_ONE_TOKEN = 10**TOKEN_DECIMALS

# The price of storing one TiB for one month without content delivery.
PRICE_PER_TIB_PER_MONTH = 2 * _ONE_TOKEN

# The price of storing one TiB for one month with content delivery.
PRICE_PER_TIB_PER_MONTH_CDN = 3 * _ONE_TOKEN


def price_per_tib_per_month(with_cdn: bool) -> TokenAmount:
    """
    Determine the storage price for a pricing tier.

    :param with_cdn: ``True`` to select the content-delivery tier.

    :return: The price of one TiB for one month in the smallest token unit.
    """
    if with_cdn:
        return PRICE_PER_TIB_PER_MONTH_CDN
    return PRICE_PER_TIB_PER_MONTH


def bytes_to_gb(size: int) -> float:
    """
    Express a number of bytes in (binary) gigabytes.

    :raise OverflowError: If the result cannot be represented as a float.
    """
    return size / GiB
