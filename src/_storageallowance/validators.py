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
This module implements validators for ``attrs``-defined attributes.
"""

from math import isfinite
from typing import Callable, TypeVar

from ._types import Attribute

_T = TypeVar("_T")

ValidatorType = Callable[[object, Attribute[_T], _T], None]


def bounded_integer(min_bound: int) -> ValidatorType[int]:
    def validator(inst: object, attr: Attribute[int], value: int) -> None:
        """
        An attrs validator which checks an integer value to make sure it
        greater than some minimum bound.
        """
        # bool is an int subclass but True is not a token amount.
        if not isinstance(value, int) or isinstance(value, bool):
            raise TypeError(
                f"{attr.name} must be an integer, instead it was {type(value)}",
            )
        if not (value > min_bound):
            raise ValueError(
                f"{attr.name} must be greater than {min_bound}, instead it was {value}",
            )

        return None

    return validator


positive_integer = bounded_integer(0)
non_negative_integer = bounded_integer(-1)


def non_negative_float(inst: object, attr: Attribute[float], value: float) -> None:
    """
    An attrs validator which checks that a value is a finite, non-negative
    number.  Integers are accepted since they compare like floats.
    """
    if not isinstance(value, (int, float)) or isinstance(value, bool):
        raise TypeError(
            f"{attr.name} must be a number, instead it was {type(value)}",
        )
    if not isfinite(value) or value < 0:
        raise ValueError(
            f"{attr.name} must be finite and non-negative, instead it was {value}",
        )
