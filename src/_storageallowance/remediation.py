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
Work out what an account must do to make its allowances sufficient.

The amounts involved come from the payment-market service by way of the
``CalculationResult``.  This module only chooses which of them apply.  The
choice depends on which of the rate and lockup allowances fall short:

=====  ======  ==========================
rate   lockup  remediation
=====  ======  ==========================
ok     ok      ``NoRemediation``
ok     short   ``IncreaseLockup``
short  ok      ``IncreaseRate``
short  short   ``DepositAndIncreaseRate``
=====  ======  ==========================
"""

from decimal import ROUND_DOWN, Decimal, localcontext
from typing import Optional, Union

from attrs import field, frozen

from ._types import JSON, TokenAmount
from .model import CalculationResult
from .persistence import Days
from .storage_common import TOKEN_DECIMALS
from .validators import non_negative_integer


@frozen
class PaymentAction(object):
    """
    The parameters of the transaction which applies a remediation.

    :ivar lockup_allowance: The lockup allowance to grant the operator.
    :ivar epoch_rate_allowance: The per-epoch rate allowance to grant the
        operator.
    :ivar deposit_amount: The amount to deposit into the payment contract.
    """

    lockup_allowance: TokenAmount = field(validator=non_negative_integer)
    epoch_rate_allowance: TokenAmount = field(validator=non_negative_integer)
    deposit_amount: TokenAmount = field(validator=non_negative_integer)

    def to_json_v1(self) -> JSON:
        return {
            "lockup-allowance": str(self.lockup_allowance),
            "epoch-rate-allowance": str(self.epoch_rate_allowance),
            "deposit-amount": str(self.deposit_amount),
        }


@frozen
class NoRemediation(object):
    """
    The allowances are sufficient.
    """

    def payment_action(self) -> Optional[PaymentAction]:
        return None

    def describe(self) -> str:
        return "Storage balance is sufficient."

    def to_json_v1(self) -> JSON:
        return {"name": "none"}


@frozen
class IncreaseLockup(object):
    """
    The rate allowance is sufficient but the lockup runs out too soon.  Make
    a deposit and extend the lockup while keeping the current rate allowance.
    """

    total_lockup_needed: TokenAmount
    current_rate_allowance: TokenAmount
    deposit_needed: TokenAmount

    def payment_action(self) -> Optional[PaymentAction]:
        return PaymentAction(
            lockup_allowance=self.total_lockup_needed,
            epoch_rate_allowance=self.current_rate_allowance,
            deposit_amount=self.deposit_needed,
        )

    def describe(self) -> str:
        return "Deposit {} to extend the storage lockup period.".format(
            format_token_amount(self.deposit_needed),
        )

    def to_json_v1(self) -> JSON:
        return {
            "name": "increase-lockup",
            "action": self.payment_action().to_json_v1(),
        }


@frozen
class IncreaseRate(object):
    """
    The lockup lasts long enough but the rate allowance does not cover the
    storage capacity.  Raise the rate allowance without depositing anything.
    """

    current_lockup_allowance: TokenAmount
    rate_needed: TokenAmount

    def payment_action(self) -> Optional[PaymentAction]:
        return PaymentAction(
            lockup_allowance=self.current_lockup_allowance,
            epoch_rate_allowance=self.rate_needed,
            deposit_amount=0,
        )

    def describe(self) -> str:
        return "Increase the rate allowance to meet the storage capacity needs."

    def to_json_v1(self) -> JSON:
        return {
            "name": "increase-rate",
            "action": self.payment_action().to_json_v1(),
        }


@frozen
class DepositAndIncreaseRate(object):
    """
    Neither allowance is sufficient.  Deposit the full amount needed and
    raise both allowances.
    """

    total_lockup_needed: TokenAmount
    rate_needed: TokenAmount
    deposit_needed: TokenAmount

    def payment_action(self) -> Optional[PaymentAction]:
        return PaymentAction(
            lockup_allowance=self.total_lockup_needed,
            epoch_rate_allowance=self.rate_needed,
            deposit_amount=self.deposit_needed,
        )

    def describe(self) -> str:
        return (
            "Deposit {} and increase the rate allowance to meet the storage needs."
        ).format(format_token_amount(self.deposit_needed))

    def to_json_v1(self) -> JSON:
        return {
            "name": "deposit-and-increase-rate",
            "action": self.payment_action().to_json_v1(),
        }


Remediation = Union[NoRemediation, IncreaseLockup, IncreaseRate, DepositAndIncreaseRate]


def remediation_for(result: CalculationResult) -> Remediation:
    """
    Choose the remediation for a calculation result.

    :return: Exactly one remediation for every combination of the rate and
        lockup sufficiency flags.
    """
    rate_ok = result.is_rate_sufficient
    lockup_ok = result.is_lockup_sufficient
    if rate_ok and lockup_ok:
        return NoRemediation()
    if rate_ok:
        return IncreaseLockup(
            total_lockup_needed=result.total_lockup_needed,
            current_rate_allowance=result.current_rate_allowance,
            deposit_needed=result.deposit_needed,
        )
    if lockup_ok:
        return IncreaseRate(
            current_lockup_allowance=result.current_lockup_allowance,
            rate_needed=result.rate_needed,
        )
    return DepositAndIncreaseRate(
        total_lockup_needed=result.total_lockup_needed,
        rate_needed=result.rate_needed,
        deposit_needed=result.deposit_needed,
    )


def extension_days(persistence_period: int, persistence_days_left: Days) -> float:
    """
    Calculate how many more days of lockup reach the persistence period.

    :return: The shortfall in days, never negative.
    """
    return max(0.0, persistence_period - persistence_days_left.days)


def format_token_amount(
    amount: TokenAmount, decimals: int = TOKEN_DECIMALS, places: int = 3
) -> str:
    """
    Render an amount in the smallest token unit as a decimal number of whole
    tokens, truncated to a fixed number of places.

    >>> format_token_amount(1234500000000000000)
    '1.234'
    """
    with localcontext() as context:
        context.prec = max(context.prec, len(str(amount)) + places)
        whole = Decimal(amount).scaleb(-decimals)
        return str(whole.quantize(Decimal(1).scaleb(-places), rounding=ROUND_DOWN))
