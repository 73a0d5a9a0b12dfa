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
Helpers for reading StorageAllowance configuration.

Configuration lives in the ``[storage-allowance]`` section of an ini-style
file::

    [storage-allowance]
    storage-capacity = 10
    persistence-period = 30
    min-days-threshold = 10
    with-cdn = false
    payment-market-url = https://payments.example/
"""

__all__ = [
    "SECTION_NAME",
    "ConfigSource",
    "EmptyConfig",
    "IniConfig",
    "StorageConfig",
    "empty_config",
    "read_payment_market_url",
]

from configparser import ConfigParser
from typing import Optional, Protocol

import attr
from attrs import define, field, frozen
from hyperlink import DecodedURL
from twisted.python.filepath import FilePath

from . import NAME
from .storage_common import GiB
from .validators import non_negative_integer, positive_integer

SECTION_NAME = NAME

DEFAULT_STORAGE_CAPACITY_GIB = 10
DEFAULT_PERSISTENCE_PERIOD = 30
DEFAULT_MIN_DAYS_THRESHOLD = 10

_MISSING = object()


class ConfigSource(Protocol):
    """
    A representation of a configuration file.
    """

    def get_config(
        self,
        section: str,
        option: str,
        default: object = _MISSING,
        boolean: bool = False,
    ) -> object:
        """
        Read an option from a section of the configuration.

        :raise KeyError: If the option is missing and no default is given.
        """


@define
class EmptyConfig:
    """
    Weakly pretend to be a configuration file with nothing in it.
    """

    def get_config(self, section, option, default=_MISSING, boolean=False):
        if default is _MISSING:
            raise KeyError((section, option))
        return default


empty_config = EmptyConfig()


@frozen
class IniConfig:
    """
    A ``ConfigSource`` backed by a parsed ini-style file.
    """

    _parser: ConfigParser

    @classmethod
    def from_string(cls, text: str) -> "IniConfig":
        parser = ConfigParser(interpolation=None)
        parser.read_string(text)
        return cls(parser)

    @classmethod
    def from_path(cls, path: FilePath) -> "IniConfig":
        return cls.from_string(path.getContent().decode("utf-8"))

    def get_config(self, section, option, default=_MISSING, boolean=False):
        if not self._parser.has_option(section, option):
            if default is _MISSING:
                raise KeyError((section, option))
            return default
        if boolean:
            try:
                return self._parser.getboolean(section, option)
            except ValueError:
                raise ValueError(
                    "{section}.{option} must be a boolean, instead it was {value!r}".format(
                        section=section,
                        option=option,
                        value=self._parser.get(section, option),
                    ),
                )
        return self._parser.get(section, option)


def _read_int(cfg: ConfigSource, option: str, default: int) -> int:
    value = cfg.get_config(section=SECTION_NAME, option=option, default=None)
    if value is None:
        return default
    try:
        return int(value)
    except ValueError:
        raise ValueError(
            "{section}.{option} must be an integer, instead it was {value!r}".format(
                section=SECTION_NAME,
                option=option,
                value=value,
            ),
        )


@frozen
class StorageConfig(object):
    """
    The storage plan the allowances are checked against.

    :ivar storage_capacity: The capacity the plan consumes, in bytes.

    :ivar persistence_period: The number of days the plan should be paid for
        in advance.

    :ivar min_days_threshold: The notice period: the least number of days of
        remaining lockup considered sufficient.

    :ivar with_cdn: Whether content-delivery pricing applies.
    """

    storage_capacity: int = field(validator=positive_integer)
    persistence_period: int = field(validator=positive_integer)
    min_days_threshold: int = field(validator=non_negative_integer)
    with_cdn: bool = field(
        default=False,
        validator=attr.validators.instance_of(bool),
    )

    @classmethod
    def from_config(cls, cfg: ConfigSource) -> "StorageConfig":
        """
        Read the storage plan from the ``[storage-allowance]`` section of a
        configuration.

        Capacity is configured in GiB and held in bytes.

        :raise ValueError: If any option has an unusable value.
        """
        return cls(
            storage_capacity=_read_int(
                cfg, "storage-capacity", DEFAULT_STORAGE_CAPACITY_GIB
            )
            * GiB,
            persistence_period=_read_int(
                cfg, "persistence-period", DEFAULT_PERSISTENCE_PERIOD
            ),
            min_days_threshold=_read_int(
                cfg, "min-days-threshold", DEFAULT_MIN_DAYS_THRESHOLD
            ),
            with_cdn=cfg.get_config(
                section=SECTION_NAME,
                option="with-cdn",
                default=False,
                boolean=True,
            ),
        )


def read_payment_market_url(cfg: ConfigSource) -> Optional[DecodedURL]:
    """
    Get the root of the payment-market service HTTP API, if one is
    configured.
    """
    value = cfg.get_config(
        section=SECTION_NAME,
        option="payment-market-url",
        default=None,
    )
    if value is None:
        return None
    return DecodedURL.from_text(value.strip())
