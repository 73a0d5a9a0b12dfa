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
Testtools matchers useful for the test suite.
"""

__all__ = [
    "Provides",
    "between",
    "greater_or_equal",
    "lesser_or_equal",
    "matches_json",
    "matches_response",
]

from json import loads
from typing import Generic, Optional, TypeVar

from attrs import field, frozen, validators
from testtools.matchers import (
    AfterPreprocessing,
    Always,
    Equals,
    GreaterThan,
    LessThan,
)
from testtools.matchers import Matcher as _Matcher
from testtools.matchers import MatchesAll, MatchesAny, MatchesStructure, Mismatch
from testtools.twistedsupport import succeeded
from treq import content
from treq.response import IResponse
from twisted.web.http_headers import Headers
from zope.interface.interface import InterfaceClass

_T = TypeVar("_T")


class Matcher(_Matcher, Generic[_T]):
    """
    A generic version of ``_Matcher``.
    """


@frozen
class Provides(object):
    """
    Match objects that provide all of a list of Zope Interface interfaces.
    """

    interfaces: list[InterfaceClass] = field(validator=validators.instance_of(list))

    def match(self, obj: object) -> Optional[Mismatch]:
        missing = set()
        for iface in self.interfaces:
            if not iface.providedBy(obj):
                missing.add(iface)
        if missing == set():
            return None

        return Mismatch(
            "{} does not provide expected {}".format(
                obj,
                ", ".join(str(iface) for iface in missing),
            )
        )


def greater_or_equal(v: _T) -> Matcher[_T]:
    """
    Matches a value greater than or equal to ``v``.
    """
    return MatchesAny(GreaterThan(v), Equals(v))  # type: ignore[no-any-return]


def lesser_or_equal(v: _T) -> Matcher[_T]:
    """
    Matches a value less than or equal to ``v``.
    """
    return MatchesAny(LessThan(v), Equals(v))  # type: ignore[no-any-return]


def between(low: _T, high: _T) -> Matcher[_T]:
    """
    Matches a value in the range [low, high].
    """
    return MatchesAll(  # type: ignore[no-any-return]
        greater_or_equal(low),
        lesser_or_equal(high),
    )


def matches_response(
    code_matcher: Matcher[int] = Always(),
    headers_matcher: Matcher[Headers] = Always(),
    body_matcher: Matcher[bytes] = Always(),
) -> Matcher[IResponse]:
    """
    Match a Treq response object with certain code and body.

    :param code_matcher: A matcher to apply to the response code.

    :param headers_matcher: A matcher to apply to the response headers (a
        ``twisted.web.http_headers.Headers`` instance).

    :param body_matcher: A matcher to apply to the response body.
    """
    return MatchesAll(  # type: ignore[no-any-return]
        MatchesStructure(
            code=code_matcher,
            headers=headers_matcher,
        ),
        AfterPreprocessing(
            lambda response: content(response),
            succeeded(body_matcher),
        ),
    )


def matches_json(matcher: Matcher[object] = Always()) -> Matcher[bytes]:
    """
    Return a matcher for a JSON string which can be decoded to an object
    matched by the given matcher.
    """

    class JSONMatcher(Matcher[bytes]):
        def match(self, s: bytes) -> Optional[Mismatch]:
            try:
                value = loads(s)
            except Exception as e:
                return Mismatch(f"Failed to decode {str(s)[:80]!r}: {e}")

            return matcher.match(value)

    return JSONMatcher()
