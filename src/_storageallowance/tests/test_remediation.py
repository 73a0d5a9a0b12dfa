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
Tests for ``_storageallowance.remediation``.
"""

from hypothesis import given
from hypothesis.strategies import just
from testtools import TestCase
from testtools.matchers import (
    Equals,
    Is,
    IsInstance,
    raises,
)

from ..model import CalculationResult
from ..persistence import Days
from ..remediation import (
    DepositAndIncreaseRate,
    IncreaseLockup,
    IncreaseRate,
    NoRemediation,
    PaymentAction,
    extension_days,
    format_token_amount,
    remediation_for,
)
from .strategies import calculation_results


class RemediationForTests(TestCase):
    """
    Tests for ``remediation_for``.
    """

    @given(calculation_results(just(True), just(True)))
    def test_sufficient(self, result: CalculationResult) -> None:
        """
        Nothing needs to be done when both allowances are sufficient.
        """
        remediation = remediation_for(result)
        self.assertThat(remediation, IsInstance(NoRemediation))
        self.assertThat(remediation.payment_action(), Is(None))

    @given(calculation_results(just(True), just(False)))
    def test_lockup_short(self, result: CalculationResult) -> None:
        """
        When only the lockup is short the lockup is raised and the deposit
        made while the rate allowance stays as it is.
        """
        remediation = remediation_for(result)
        self.assertThat(remediation, IsInstance(IncreaseLockup))
        self.assertThat(
            remediation.payment_action(),
            Equals(
                PaymentAction(
                    lockup_allowance=result.total_lockup_needed,
                    epoch_rate_allowance=result.current_rate_allowance,
                    deposit_amount=result.deposit_needed,
                ),
            ),
        )

    @given(calculation_results(just(False), just(True)))
    def test_rate_short(self, result: CalculationResult) -> None:
        """
        When only the rate is short the rate allowance is raised without any
        deposit and the lockup allowance stays as it is.
        """
        remediation = remediation_for(result)
        self.assertThat(remediation, IsInstance(IncreaseRate))
        self.assertThat(
            remediation.payment_action(),
            Equals(
                PaymentAction(
                    lockup_allowance=result.current_lockup_allowance,
                    epoch_rate_allowance=result.rate_needed,
                    deposit_amount=0,
                ),
            ),
        )

    @given(calculation_results(just(False), just(False)))
    def test_both_short(self, result: CalculationResult) -> None:
        """
        When both are short the deposit is made and both allowances raised.
        """
        remediation = remediation_for(result)
        self.assertThat(remediation, IsInstance(DepositAndIncreaseRate))
        self.assertThat(
            remediation.payment_action(),
            Equals(
                PaymentAction(
                    lockup_allowance=result.total_lockup_needed,
                    epoch_rate_allowance=result.rate_needed,
                    deposit_amount=result.deposit_needed,
                ),
            ),
        )

    @given(calculation_results())
    def test_json(self, result: CalculationResult) -> None:
        """
        Every remediation is represented with a name and, if anything must be
        done, the payment action.
        """
        remediation = remediation_for(result)
        action = remediation.payment_action()
        expected = {"name": remediation.to_json_v1()["name"]}
        if action is not None:
            expected["action"] = action.to_json_v1()
        self.assertThat(remediation.to_json_v1(), Equals(expected))

    def test_describe(self) -> None:
        """
        Each remediation describes itself for a user.
        """
        self.assertThat(
            NoRemediation().describe(),
            Equals("Storage balance is sufficient."),
        )
        self.assertThat(
            IncreaseLockup(10, 20, 10**18).describe(),
            Equals("Deposit 1.000 to extend the storage lockup period."),
        )
        self.assertThat(
            IncreaseRate(10, 20).describe(),
            Equals("Increase the rate allowance to meet the storage capacity needs."),
        )
        self.assertThat(
            DepositAndIncreaseRate(10, 20, 2500000000000000000).describe(),
            Equals(
                "Deposit 2.500 and increase the rate allowance to meet the "
                "storage needs."
            ),
        )


class PaymentActionTests(TestCase):
    """
    Tests for ``PaymentAction``.
    """

    def test_negative(self) -> None:
        """
        Amounts in a payment action cannot be negative.
        """
        self.assertThat(
            lambda: PaymentAction(-1, 0, 0),
            raises(ValueError),
        )

    def test_json(self) -> None:
        """
        Amounts are represented as decimal strings.
        """
        self.assertThat(
            PaymentAction(10**30, 2, 0).to_json_v1(),
            Equals(
                {
                    "lockup-allowance": "1" + "0" * 30,
                    "epoch-rate-allowance": "2",
                    "deposit-amount": "0",
                }
            ),
        )


class ExtensionDaysTests(TestCase):
    """
    Tests for ``extension_days``.
    """

    def test_shortfall(self) -> None:
        """
        The extension is the persistence period less the days left.
        """
        self.assertThat(extension_days(30, Days(18.0)), Equals(12.0))

    def test_no_shortfall(self) -> None:
        """
        The extension is never negative.
        """
        self.assertThat(extension_days(30, Days(45.5)), Equals(0.0))


class FormatTokenAmountTests(TestCase):
    """
    Tests for ``format_token_amount``.
    """

    def test_truncates(self) -> None:
        """
        Amounts are truncated, not rounded, to three places.
        """
        self.assertThat(format_token_amount(1999999999999999999), Equals("1.999"))

    def test_zero(self) -> None:
        self.assertThat(format_token_amount(0), Equals("0.000"))

    def test_large(self) -> None:
        """
        Amounts with more digits than the default decimal precision are
        formatted exactly.
        """
        self.assertThat(
            format_token_amount(123456789012345678901234567890 * 10**18),
            Equals("123456789012345678901234567890.000"),
        )

    def test_other_decimals(self) -> None:
        self.assertThat(
            format_token_amount(123456, decimals=6, places=2),
            Equals("0.12"),
        )
