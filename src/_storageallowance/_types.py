# Copyright 2022 PrivateStorage.io, LLC
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
Re-usable type definitions for StorageAllowance.
"""

from typing import TYPE_CHECKING, Generic, Mapping, Sequence, TypedDict, TypeVar, Union

from attrs import Attribute as _Attribute

_T = TypeVar("_T")

if TYPE_CHECKING:
    Attribute = _Attribute
else:

    class Attribute(_Attribute, Generic[_T]):
        pass


# mypy does not support recursive types so we can't say much about what's in
# the containers here.
JSON = Union[None, int, float, str, Sequence, Mapping]

# An amount of the payment token in its smallest unit.
TokenAmount = int

# The contents of the [storage-allowance] section of a configuration file.
# All values are strings, as read from the file.
AllowanceConfig = TypedDict(
    "AllowanceConfig",
    {
        "storage-capacity": str,
        "persistence-period": str,
        "min-days-threshold": str,
        "with-cdn": str,
        "payment-market-url": str,
    },
    total=False,
)
