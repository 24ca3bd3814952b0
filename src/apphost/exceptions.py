# Copyright 2024 Michael Maillet, Damien Davison, Sacha Davison
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
Exceptions raised while building, publishing and validating application models.
"""
from typing import Any, List, Optional


class DistributedApplicationError(Exception):
    """
    Raised when the application model cannot be constructed, e.g. duplicate
    resource names or invalid endpoint configuration.
    """


class ArgumentNullError(ValueError):
    """
    Raised when a required argument is missing.
    """
    def __init__(self, param_name: str):
        self.param_name = param_name
        super().__init__(f"Value cannot be None. (Parameter '{param_name}')")


class ManifestError(Exception):
    """
    Raised when a manifest cannot be read, fails schema validation or
    contains broken references.
    """
    def __init__(self, message: str, issues: Optional[List[Any]] = None):
        super().__init__(message)
        self.issues = issues or []


def throw_if_none(value: Any, param_name: str) -> Any:
    """
    Raises ArgumentNullError when value is None, otherwise returns it unchanged.

    :param value: The argument value.
    :param param_name: The argument name used in the error message.
    :return: The value.
    """
    if value is None:
        raise ArgumentNullError(param_name)
    return value
