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
Tests for ``_storageallowance.storage_common``.
"""

from testtools import TestCase
from testtools.matchers import Equals, raises

from ..storage_common import (
    EPOCHS_PER_DAY,
    EPOCHS_PER_MONTH,
    GiB,
    TiB,
    bytes_to_gb,
    price_per_tib_per_month,
)


class ConstantsTests(TestCase):
    """
    Tests for the shared constants.
    """

    def test_epochs(self) -> None:
        """
        An epoch is thirty seconds and a month is thirty days.
        """
        self.assertThat(
            (EPOCHS_PER_DAY, EPOCHS_PER_MONTH),
            Equals((24 * 60 * 2, 24 * 60 * 2 * 30)),
        )

    def test_sizes(self) -> None:
        self.assertThat((GiB, TiB), Equals((2**30, 2**40)))

    def test_prices(self) -> None:
        """
        One TiB for one month costs two tokens, or three with content
        delivery.
        """
        self.assertThat(
            (price_per_tib_per_month(False), price_per_tib_per_month(True)),
            Equals((2 * 10**18, 3 * 10**18)),
        )


class BytesToGBTests(TestCase):
    """
    Tests for ``bytes_to_gb``.
    """

    def test_binary(self) -> None:
        self.assertThat(bytes_to_gb(3 * GiB // 2), Equals(1.5))

    def test_too_large(self) -> None:
        self.assertThat(lambda: bytes_to_gb(10**400), raises(OverflowError))
