# Copyright 2021 PrivateStorage.io, LLC
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
Basic utilities for producing configuration file text.
"""

from typing import Iterable, Mapping

from ._types import AllowanceConfig
from .config import SECTION_NAME, StorageConfig
from .storage_common import GiB


def _merge_sections(
    divided_sections: Iterable[Mapping[str, Mapping[str, str]]]
) -> dict[str, dict[str, str]]:
    """
    Collapse a sequence of section mappings into one.  Items of sections which
    appear more than once are merged with later values winning.
    """
    result: dict[str, dict[str, str]] = {}
    for sections in divided_sections:
        for name, contents in sections.items():
            result.setdefault(name, {}).update(contents)
    return result


def config_string_from_sections(
    divided_sections: Iterable[Mapping[str, Mapping[str, str]]]
) -> str:
    """
    Get the ini-syntax string representing the given configuration values.

    :param divided_sections: The configuration to use to generate the
        string.  Each mapping maps a top-level section name to a mapping of
        option/value pairs.
    """
    sections = _merge_sections(divided_sections)
    return "".join(
        "[{name}]\n{items}\n".format(
            name=name,
            items="".join(
                "{key} = {value}\n".format(key=key, value=value)
                for (key, value) in contents.items()
            ),
        )
        for (name, contents) in sections.items()
    )


def storage_config_section(config: StorageConfig) -> dict[str, AllowanceConfig]:
    """
    Represent a storage plan as a configuration section which
    ``StorageConfig.from_config`` reads back to an equal plan.

    :raise ValueError: If the capacity is not a whole number of GiB since the
        configuration file cannot express it.
    """
    gib, remainder = divmod(config.storage_capacity, GiB)
    if remainder:
        raise ValueError(
            "storage capacity {} is not a whole number of GiB".format(
                config.storage_capacity,
            ),
        )
    return {
        SECTION_NAME: {
            "storage-capacity": str(gib),
            "persistence-period": str(config.persistence_period),
            "min-days-threshold": str(config.min_days_threshold),
            "with-cdn": "true" if config.with_cdn else "false",
        },
    }
