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
This module implements models (in the MVC sense) for the balance state of a
storage payment account and the metrics calculated from it.
"""

from typing import Any

import attr
from attrs import field, frozen

from ._json import dumps_utf8, load_object
from ._types import JSON, TokenAmount
from .persistence import Days, Runway, Unbounded, runway_from_json_v1
from .validators import non_negative_float, non_negative_integer


def _amount_attribute() -> Any:
    return field(validator=non_negative_integer)


def _marshal_amount(amount: TokenAmount) -> str:
    # Token amounts routinely exceed the range in which a double (and so many
    # JSON implementations) can represent integers exactly.
    return str(amount)


def _unmarshal_amount(values: dict, key: str) -> TokenAmount:
    try:
        text = values[key]
    except KeyError:
        raise ValueError("Missing required field {!r}".format(key))
    if not isinstance(text, str) or not text.isdigit():
        raise ValueError(
            "Field {!r} must be a decimal string, instead it was {!r}".format(
                key,
                text,
            ),
        )
    return int(text)


def _load_versioned(cls, json: bytes):
    values = load_object(json)
    version = values.pop("version", None)
    if version != 1:
        raise ValueError("Unsupported version {!r}".format(version))
    return cls.from_json_v1(values)


@frozen
class StorageCosts(object):
    """
    The cost of storing some data over several periods.

    :ivar per_epoch: The cost per epoch.  This is the rate allowance the data
        requires.

    :ivar per_day: The cost per day.

    :ivar per_month: The cost per thirty day month.
    """

    per_epoch: TokenAmount = _amount_attribute()
    per_day: TokenAmount = _amount_attribute()
    per_month: TokenAmount = _amount_attribute()

    @classmethod
    def from_json_v1(cls, values):
        return cls(
            per_epoch=_unmarshal_amount(values, "per-epoch"),
            per_day=_unmarshal_amount(values, "per-day"),
            per_month=_unmarshal_amount(values, "per-month"),
        )

    def to_json_v1(self):
        return {
            "per-epoch": _marshal_amount(self.per_epoch),
            "per-day": _marshal_amount(self.per_day),
            "per-month": _marshal_amount(self.per_month),
        }


@frozen
class BalanceSnapshot(object):
    """
    A point-in-time view of a payment account's allowances for a storage
    operator together with the payment-market service's assessment of what a
    target capacity and duration require.

    All amounts are in the smallest unit of the payment token.  ``used``
    amounts are not guaranteed to be no greater than the corresponding
    allowances: a snapshot taken while an allowance change is being applied
    may briefly disagree with itself.

    :ivar current_rate_allowance: The per-epoch rate the operator may spend.
    :ivar current_rate_used: The per-epoch rate the operator is spending.
    :ivar current_lockup_allowance: The total lockup the operator may hold.
    :ivar current_lockup_used: The lockup the operator holds.
    :ivar rate_allowance_needed: The rate allowance required after adding the
        target capacity.
    :ivar lockup_allowance_needed: The lockup allowance required to keep the
        target capacity for the target duration.
    :ivar deposit_amount_needed: The deposit required to fund that lockup.
    :ivar costs: The cost of the target capacity.
    """

    current_rate_allowance: TokenAmount = _amount_attribute()
    current_rate_used: TokenAmount = _amount_attribute()
    current_lockup_allowance: TokenAmount = _amount_attribute()
    current_lockup_used: TokenAmount = _amount_attribute()
    rate_allowance_needed: TokenAmount = _amount_attribute()
    lockup_allowance_needed: TokenAmount = _amount_attribute()
    deposit_amount_needed: TokenAmount = _amount_attribute()
    costs: StorageCosts = field(validator=attr.validators.instance_of(StorageCosts))

    @classmethod
    def from_json(cls, json: bytes) -> "BalanceSnapshot":
        """
        Load a snapshot from a versioned JSON document.

        :raise ValueError: If the document does not describe a snapshot.
        """
        return _load_versioned(cls, json)

    @classmethod
    def from_json_v1(cls, values):
        costs = values.get("costs")
        if not isinstance(costs, dict):
            raise ValueError("Missing required object 'costs'")
        return cls(
            current_rate_allowance=_unmarshal_amount(values, "current-rate-allowance"),
            current_rate_used=_unmarshal_amount(values, "current-rate-used"),
            current_lockup_allowance=_unmarshal_amount(
                values, "current-lockup-allowance"
            ),
            current_lockup_used=_unmarshal_amount(values, "current-lockup-used"),
            rate_allowance_needed=_unmarshal_amount(values, "rate-allowance-needed"),
            lockup_allowance_needed=_unmarshal_amount(
                values, "lockup-allowance-needed"
            ),
            deposit_amount_needed=_unmarshal_amount(values, "deposit-amount-needed"),
            costs=StorageCosts.from_json_v1(costs),
        )

    def to_json(self) -> bytes:
        return dumps_utf8(self.marshal())

    def marshal(self) -> JSON:
        return self.to_json_v1()

    def to_json_v1(self):
        return {
            "current-rate-allowance": _marshal_amount(self.current_rate_allowance),
            "current-rate-used": _marshal_amount(self.current_rate_used),
            "current-lockup-allowance": _marshal_amount(self.current_lockup_allowance),
            "current-lockup-used": _marshal_amount(self.current_lockup_used),
            "rate-allowance-needed": _marshal_amount(self.rate_allowance_needed),
            "lockup-allowance-needed": _marshal_amount(self.lockup_allowance_needed),
            "deposit-amount-needed": _marshal_amount(self.deposit_amount_needed),
            "costs": self.costs.to_json_v1(),
            "version": 1,
        }


@frozen
class CalculationResult(object):
    """
    The storage metrics derived from one balance snapshot.

    Capacities expressed in GB are binary gigabytes (2 ** 30 bytes).

    :ivar rate_needed: The per-epoch rate the target capacity costs.
    :ivar rate_used: The per-epoch rate currently being spent.
    :ivar current_storage_bytes: An estimate of the capacity currently paid
        for.  Advisory only.
    :ivar current_storage_gb: ``current_storage_bytes`` in GB.
    :ivar total_lockup_needed: The lockup allowance required for the target.
    :ivar deposit_needed: The deposit required for the target.
    :ivar persistence_days_left: The runway if the target capacity is fully
        used.
    :ivar persistence_days_left_at_current_rate: The runway at the rate
        currently being spent.
    :ivar is_rate_sufficient: Whether the rate allowance covers
        ``rate_needed``.
    :ivar is_lockup_sufficient: Whether ``persistence_days_left`` meets the
        minimum days threshold.
    :ivar current_rate_allowance: The rate allowance in the snapshot.
    :ivar current_rate_allowance_gb: The capacity the rate allowance pays for.
    :ivar current_lockup_allowance: The lockup allowance in the snapshot.
    """

    rate_needed: TokenAmount = _amount_attribute()
    rate_used: TokenAmount = _amount_attribute()
    current_storage_bytes: int = _amount_attribute()
    current_storage_gb: float = field(validator=non_negative_float)
    total_lockup_needed: TokenAmount = _amount_attribute()
    deposit_needed: TokenAmount = _amount_attribute()
    persistence_days_left: Days = field(validator=attr.validators.instance_of(Days))
    persistence_days_left_at_current_rate: Runway = field(
        validator=attr.validators.instance_of((Days, Unbounded)),
    )
    is_rate_sufficient: bool = field(validator=attr.validators.instance_of(bool))
    is_lockup_sufficient: bool = field(validator=attr.validators.instance_of(bool))
    current_rate_allowance: TokenAmount = _amount_attribute()
    current_rate_allowance_gb: float = field(validator=non_negative_float)
    current_lockup_allowance: TokenAmount = _amount_attribute()

    @property
    def is_sufficient(self) -> bool:
        """
        Whether both the rate and the lockup allowances are sufficient.
        """
        return self.is_rate_sufficient and self.is_lockup_sufficient

    @classmethod
    def from_json(cls, json: bytes) -> "CalculationResult":
        return _load_versioned(cls, json)

    @classmethod
    def from_json_v1(cls, values):
        try:
            return cls(
                rate_needed=_unmarshal_amount(values, "rate-needed"),
                rate_used=_unmarshal_amount(values, "rate-used"),
                current_storage_bytes=_unmarshal_amount(
                    values, "current-storage-bytes"
                ),
                current_storage_gb=values["current-storage-gb"],
                total_lockup_needed=_unmarshal_amount(values, "total-lockup-needed"),
                deposit_needed=_unmarshal_amount(values, "deposit-needed"),
                persistence_days_left=runway_from_json_v1(
                    values["persistence-days-left"]
                ),
                persistence_days_left_at_current_rate=runway_from_json_v1(
                    values["persistence-days-left-at-current-rate"]
                ),
                is_rate_sufficient=values["is-rate-sufficient"],
                is_lockup_sufficient=values["is-lockup-sufficient"],
                current_rate_allowance=_unmarshal_amount(
                    values, "current-rate-allowance"
                ),
                current_rate_allowance_gb=values["current-rate-allowance-gb"],
                current_lockup_allowance=_unmarshal_amount(
                    values, "current-lockup-allowance"
                ),
            )
        except (AttributeError, KeyError, TypeError) as e:
            raise ValueError("Malformed calculation result: {!r}".format(e))

    def to_json(self) -> bytes:
        return dumps_utf8(self.marshal())

    def marshal(self) -> JSON:
        return self.to_json_v1()

    def to_json_v1(self):
        return {
            "rate-needed": _marshal_amount(self.rate_needed),
            "rate-used": _marshal_amount(self.rate_used),
            "current-storage-bytes": _marshal_amount(self.current_storage_bytes),
            "current-storage-gb": self.current_storage_gb,
            "total-lockup-needed": _marshal_amount(self.total_lockup_needed),
            "deposit-needed": _marshal_amount(self.deposit_needed),
            "persistence-days-left": self.persistence_days_left.to_json_v1(),
            "persistence-days-left-at-current-rate": (
                self.persistence_days_left_at_current_rate.to_json_v1()
            ),
            "is-rate-sufficient": self.is_rate_sufficient,
            "is-lockup-sufficient": self.is_lockup_sufficient,
            "is-sufficient": self.is_sufficient,
            "current-rate-allowance": _marshal_amount(self.current_rate_allowance),
            "current-rate-allowance-gb": self.current_rate_allowance_gb,
            "current-lockup-allowance": _marshal_amount(self.current_lockup_allowance),
            "version": 1,
        }
