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
JSON helpers for the versioned documents exchanged with the payment-market
service and the web view.
"""

from json import dumps as _dumps
from json import loads as _loads
from typing import Any

# Enough of a bad document to recognize it in an error message.
_EXCERPT_LENGTH = 80


def dumps_utf8(o: Any) -> bytes:
    """
    Serialize an object to a UTF-8-encoded JSON byte string.
    """
    return _dumps(o).encode("utf-8")


def load_object(data: bytes) -> dict:
    """
    Load a JSON object from a byte string.

    :raise ValueError: If ``data`` is not JSON or is JSON for something other
        than an object.  The message includes the start of ``data``.
    """
    try:
        value = _loads(data)
    except ValueError as e:
        raise ValueError("{!r}: {!r}".format(e, data[:_EXCERPT_LENGTH]))
    if not isinstance(value, dict):
        raise ValueError(
            "Expected a JSON object, got {!r}".format(data[:_EXCERPT_LENGTH]),
        )
    return value
