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
Sources of balance snapshots.

The payment-market service knows the allowances an account has granted to
the storage operator and what a storage plan costs.  This module implements
clients for it as well as a local stand-in which applies the same rules to a
known operator approval.
"""

from typing import Any

import attr
from attrs import define, field, frozen
from hyperlink import DecodedURL
from treq import content
from treq.client import HTTPClient
from twisted.internet.error import ConnectError, DNSLookupError, TimeoutError
from twisted.logger import Logger
from twisted.web.client import (
    Agent,
    RequestTransmissionFailed,
    ResponseFailed,
    ResponseNeverReceived,
)
from twisted.web.http import OK
from zope.interface import Interface, implementer

from ._json import dumps_utf8
from .config import ConfigSource, read_payment_market_url
from .eliot import FETCH_SNAPSHOT, log_call_coroutine
from .model import BalanceSnapshot
from .pricecalculator import PriceCalculator
from .storage_common import EPOCHS_PER_DAY
from .validators import non_negative_integer


# It would be nice to have frozen exception types but Failure.cleanFailure
# interacts poorly with these.
# https://twistedmatrix.com/trac/ticket/9641
# https://twistedmatrix.com/trac/ticket/9771
@define(auto_exc=False)
class UnexpectedResponse(Exception):
    """
    The payment-market service responded in an unexpected and unhandled way.
    """

    code: int
    body: bytes


# The ways a request to the payment-market service can fail.
PROVIDER_ERRORS = (
    UnexpectedResponse,
    ConnectError,
    DNSLookupError,
    TimeoutError,
    RequestTransmissionFailed,
    ResponseFailed,
    ResponseNeverReceived,
)


class NoPaymentMarket(Exception):
    """
    No payment-market service is configured so there is nowhere to get a
    balance snapshot from.
    """


class IBalanceSnapshotProvider(Interface):
    """
    An ``IBalanceSnapshotProvider`` reports an account's allowances together
    with what a storage plan requires of them.
    """

    async def check_allowance_for_storage(
        capacity: int, with_cdn: bool, persistence_days: int
    ) -> BalanceSnapshot:
        """
        Get a balance snapshot assessed against a storage plan.

        Implementations may fail for any reason.  They do not retry.

        :param capacity: The plan's storage capacity in bytes.

        :param with_cdn: Whether content-delivery pricing applies.

        :param persistence_days: The number of days the plan should be paid
            for in advance.
        """


@implementer(IBalanceSnapshotProvider)
@frozen
class RemoteSnapshotProvider(object):
    """
    An ``IBalanceSnapshotProvider`` which asks a payment-market service over
    HTTP.

    :ivar _treq: An HTTP client to use to make calls to the service.

    :ivar _api_root: The root of the service HTTP API.
    """

    _log = Logger()

    _treq: HTTPClient
    _api_root: DecodedURL = field(
        validator=attr.validators.instance_of(DecodedURL),
    )

    @classmethod
    def make(cls, api_root: DecodedURL, reactor: Any) -> "RemoteSnapshotProvider":
        return cls(
            HTTPClient(Agent(reactor)),  # type: ignore[no-untyped-call]
            api_root,
        )

    async def check_allowance_for_storage(
        self, capacity: int, with_cdn: bool, persistence_days: int
    ) -> BalanceSnapshot:
        with FETCH_SNAPSHOT(
            storage_capacity=capacity,
            persistence_period=persistence_days,
            with_cdn=with_cdn,
        ):
            response = await self._treq.post(
                self._api_root.child("v1", "allowance-check").to_text(),
                dumps_utf8(
                    {
                        "version": 1,
                        "storage-capacity": capacity,
                        "with-cdn": with_cdn,
                        "persistence-period": persistence_days,
                    }
                ),
                headers={b"content-type": b"application/json"},
            )
            response_body = await content(response)

            if response.code != OK:
                raise UnexpectedResponse(response.code, response_body)
            try:
                snapshot = BalanceSnapshot.from_json(response_body)
            except ValueError:
                raise UnexpectedResponse(response.code, response_body)

            self._log.info(
                "Received balance snapshot for {capacity} bytes over {days} days",
                capacity=capacity,
                days=persistence_days,
            )
            return snapshot


@frozen
class OperatorApproval(object):
    """
    The allowances an account has granted the storage operator and how much
    of them is in use.
    """

    rate_allowance: int = field(validator=non_negative_integer)
    rate_used: int = field(validator=non_negative_integer)
    lockup_allowance: int = field(validator=non_negative_integer)
    lockup_used: int = field(validator=non_negative_integer)


@implementer(IBalanceSnapshotProvider)
@frozen
class ApprovalSnapshotProvider(object):
    """
    An ``IBalanceSnapshotProvider`` which assesses a fixed operator approval
    the way the payment-market service does.

    The plan's rate is added to the rate already in use and its lockup (the
    rate sustained for the whole persistence period) to the lockup already
    held.  The plan's lockup must be deposited in full.
    """

    approval: OperatorApproval = field(
        validator=attr.validators.instance_of(OperatorApproval),
    )

    @log_call_coroutine("storageallowance:approval-snapshot")
    async def check_allowance_for_storage(
        self, capacity: int, with_cdn: bool, persistence_days: int
    ) -> BalanceSnapshot:
        costs = PriceCalculator(with_cdn).costs_for_capacity(capacity)
        lockup_needed = costs.per_epoch * persistence_days * EPOCHS_PER_DAY
        return BalanceSnapshot(
            current_rate_allowance=self.approval.rate_allowance,
            current_rate_used=self.approval.rate_used,
            current_lockup_allowance=self.approval.lockup_allowance,
            current_lockup_used=self.approval.lockup_used,
            rate_allowance_needed=self.approval.rate_used + costs.per_epoch,
            lockup_allowance_needed=self.approval.lockup_used + lockup_needed,
            deposit_amount_needed=lockup_needed,
            costs=costs,
        )


def get_snapshot_provider(cfg: ConfigSource, reactor: Any) -> IBalanceSnapshotProvider:
    """
    Create the snapshot provider a configuration calls for.

    :raise NoPaymentMarket: If no payment-market service is configured.
    """
    api_root = read_payment_market_url(cfg)
    if api_root is None:
        raise NoPaymentMarket()
    return RemoteSnapshotProvider.make(api_root, reactor)
