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
The automated unit test suite.
"""


def _configure_hypothesis():
    """
    Define Hypothesis profiles and select one based on environment
    variables.
    """
    from os import environ

    from hypothesis import HealthCheck, settings

    base = dict(
        suppress_health_check=[
            # Build machines vary a lot in how fast they are.  Don't fail
            # otherwise good tests because data generation was slow.
            HealthCheck.too_slow,
        ],
        deadline=None,
    )

    settings.register_profile("default", **base)

    settings.register_profile(
        "ci",
        max_examples=200,
        **base,
    )

    settings.register_profile(
        "fast",
        max_examples=2,
        **base,
    )

    settings.register_profile(
        "big",
        max_examples=10000,
        **base,
    )

    profile_name = environ.get("STORAGEALLOWANCE_HYPOTHESIS_PROFILE", "default")
    settings.load_profile(profile_name)
    print("Loaded profile {}".format(profile_name))


_configure_hypothesis()
