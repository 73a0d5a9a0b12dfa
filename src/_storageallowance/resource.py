# -*- coding: utf-8 -*-
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
This module implements views (in the MVC sense) for a web interface to the
storage metrics.  Presentation layers read the metrics and the remediation
they call for from here.
"""

from typing import Any, Optional

from twisted.internet.defer import Deferred
from twisted.logger import Logger
from twisted.python.failure import Failure
from twisted.web.http import BAD_GATEWAY, BAD_REQUEST, INTERNAL_SERVER_ERROR
from twisted.web.iweb import IRequest
from twisted.web.resource import IResource, Resource
from twisted.web.server import NOT_DONE_YET

from . import __version__ as _storageallowance_version
from ._json import dumps_utf8, load_object
from .calculator import compute_storage_metrics
from .config import ConfigSource, StorageConfig
from .model import CalculationResult
from .paymentmarket import (
    PROVIDER_ERRORS,
    IBalanceSnapshotProvider,
    get_snapshot_provider,
)
from .remediation import extension_days, format_token_amount, remediation_for


def from_configuration(
    cfg: ConfigSource,
    reactor: Any,
    provider: Optional[IBalanceSnapshotProvider] = None,
) -> IResource:
    """
    Instantiate the root resource using the ``[storage-allowance]`` section
    of a configuration.

    :param cfg: The configuration to read.

    :param reactor: The reactor to use to talk to the payment-market service.

    :param provider: The snapshot provider to use instead of the configured
        payment-market service.
    """
    if provider is None:
        provider = get_snapshot_provider(cfg, reactor)
    return resource_tree(provider, StorageConfig.from_config(cfg))


def resource_tree(
    provider: IBalanceSnapshotProvider, config: StorageConfig
) -> IResource:
    """
    Create the full resource hierarchy.

    :param provider: The source of balance snapshots.

    :param config: The configured storage plan.

    :return: The root of the resource hierarchy.
    """
    root = Resource()
    root.putChild(
        b"storage-metrics",
        _StorageMetrics(provider, config),
    )
    root.putChild(
        b"calculate-metrics",
        _CalculateMetrics(provider, config),
    )
    root.putChild(
        b"version",
        _ProjectVersion(),
    )
    return root


def marshal_metrics(result: CalculationResult, persistence_period: int) -> dict:
    """
    Represent metrics, and the remediation they call for, for a
    presentation layer.
    """
    remediation = remediation_for(result)
    return {
        "metrics": result.marshal(),
        "remediation": remediation.to_json_v1(),
        "message": remediation.describe(),
        "deposit-needed-tokens": format_token_amount(result.deposit_needed),
        "extension-days": extension_days(
            persistence_period, result.persistence_days_left
        ),
    }


def metrics_error(err: Failure, logger: Logger, request: IRequest) -> None:
    """
    Log a failure to calculate storage metrics and report it for the given
    request.

    Failures talking to the payment-market service are reported as a bad
    gateway error and anything else as an internal server error.  If part of
    the response has already been written the code can no longer change so
    the response is only finished.
    """
    if request.startedWriting:
        logger.failure("storage metrics response failed", err)
        if not request.finished:
            request.finish()
    elif err.check(*PROVIDER_ERRORS):
        upstream_error(err, logger, request)
    else:
        internal_server_error(err, logger, request)


def upstream_error(err: Failure, logger: Logger, request: IRequest) -> None:
    """
    Log a failure to get a balance snapshot and report it as a bad gateway
    error for the given request.
    """
    logger.failure("balance snapshot request failed", err)
    application_json(request)
    request.setResponseCode(BAD_GATEWAY)
    request.write(dumps_utf8({"reason": err.getErrorMessage()}))
    request.finish()


def internal_server_error(err: Failure, logger: Logger, request: IRequest) -> None:
    """
    Log a failure and return it as an internal server error for the given
    request.
    """
    logger.failure("storage metrics calculation failed", err)
    application_json(request)
    request.setResponseCode(INTERNAL_SERVER_ERROR)
    request.write(dumps_utf8({"reason": err.getErrorMessage()}))
    request.finish()


class _StorageMetrics(Resource):
    """
    This resource exposes the metrics for the configured storage plan.  Users
    **GET** it to learn whether their allowances are sufficient.
    """

    _log = Logger()

    allowedMethods = [b"GET"]

    def __init__(self, provider, config):
        self._provider = provider
        self._config = config
        Resource.__init__(self)

    def render_GET(self, request):
        d = Deferred.fromCoroutine(self._render_metrics(request))
        d.addErrback(metrics_error, self._log, request)
        return NOT_DONE_YET

    async def _render_metrics(self, request) -> None:
        result = await compute_storage_metrics(self._provider, self._config)
        application_json(request)
        request.write(
            dumps_utf8(marshal_metrics(result, self._config.persistence_period))
        )
        request.finish()


class _CalculateMetrics(Resource):
    """
    This resource calculates metrics for a storage plan given in the request
    body instead of the configured one.
    """

    _log = Logger()

    allowedMethods = [b"POST"]

    def __init__(self, provider, config):
        self._provider = provider
        self._config = config
        Resource.__init__(self)

    def render_POST(self, request):
        """
        Calculate metrics for the storage capacity, persistence period, and
        minimum days threshold in the request.  Omitted values are taken from
        the configured plan.
        """
        if wrong_content_type(request, "application/json"):
            return NOT_DONE_YET

        application_json(request)
        payload = request.content.read()
        try:
            body_object = load_object(payload)
        except ValueError:
            request.setResponseCode(BAD_REQUEST)
            return dumps_utf8(
                {
                    "error": "could not parse request body",
                }
            )

        if body_object.get("version") != 1:
            request.setResponseCode(BAD_REQUEST)
            return dumps_utf8(
                {
                    "error": "did not find required version number 1 in request",
                }
            )

        unknown = set(body_object) - {
            "version",
            "storage-capacity",
            "persistence-period",
            "min-days-threshold",
        }
        if unknown:
            request.setResponseCode(BAD_REQUEST)
            return dumps_utf8(
                {
                    "error": "unrecognized properties: {}".format(
                        ", ".join(sorted(unknown))
                    ),
                }
            )

        try:
            storage_capacity = _optional_integer(
                body_object, "storage-capacity", minimum=1
            )
            persistence_period = _optional_integer(
                body_object, "persistence-period", minimum=1
            )
            min_days_threshold = _optional_integer(
                body_object, "min-days-threshold", minimum=0
            )
        except ValueError as e:
            request.setResponseCode(BAD_REQUEST)
            return dumps_utf8({"error": str(e)})

        d = Deferred.fromCoroutine(
            self._render_metrics(
                request,
                storage_capacity,
                persistence_period,
                min_days_threshold,
            )
        )
        d.addErrback(metrics_error, self._log, request)
        return NOT_DONE_YET

    async def _render_metrics(
        self, request, storage_capacity, persistence_period, min_days_threshold
    ) -> None:
        result = await compute_storage_metrics(
            self._provider,
            self._config,
            persistence_period_days=persistence_period,
            storage_capacity=storage_capacity,
            min_days_threshold=min_days_threshold,
        )
        if persistence_period is None:
            persistence_period = self._config.persistence_period
        request.write(dumps_utf8(marshal_metrics(result, persistence_period)))
        request.finish()


def _optional_integer(body: dict, key: str, minimum: int) -> Optional[int]:
    value = body.get(key)
    if value is None:
        return None
    if not isinstance(value, int) or isinstance(value, bool) or value < minimum:
        raise ValueError(
            "{} must be an integer no less than {}".format(key, minimum),
        )
    return value


class _ProjectVersion(Resource):
    """
    This resource exposes the version of **StorageAllowance** itself.
    """

    def render_GET(self, request):
        application_json(request)
        return dumps_utf8(
            {
                "version": _storageallowance_version,
            }
        )


def wrong_content_type(request, required_type):
    """
    Check the content-type of a request and respond if it is incorrect.

    :param request: The request object to check.

    :param str required_type: The required content-type (eg
        ``"application/json"``).

    :return bool: ``True`` if the content-type is wrong and an error response
        has been generated.  ``False`` otherwise.
    """
    actual_type = request.requestHeaders.getRawHeaders(
        "content-type",
        [None],
    )[0]
    if actual_type != required_type:
        request.setResponseCode(BAD_REQUEST)
        request.finish()
        return True
    return False


def application_json(request):
    """
    Set the given request's response content-type to ``application/json``.

    :param twisted.web.iweb.IRequest request: The request to modify.
    """
    request.responseHeaders.setRawHeaders("content-type", ["application/json"])
