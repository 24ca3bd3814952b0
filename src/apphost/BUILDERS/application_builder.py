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
The application builder: entry point for assembling a distributed application model.
"""
import logging
import os
from typing import Dict, List, Optional

from .resource_builder import ResourceBuilder
from ..CONFIG.settings import AppHostSettings, load_settings
from ..MODELS.resource import (
    ContainerResource,
    GenerateParameterDefault,
    ParameterResource,
    ProjectResource,
    Resource,
)
from ..UTILS.names import validate_name
from ..exceptions import DistributedApplicationError, throw_if_none

logger = logging.getLogger(__name__)


class DistributedApplicationModel:
    """
    The finished set of resources, in registration order.
    """
    def __init__(self, resources: List[Resource], settings: AppHostSettings):
        self.resources = list(resources)
        self.settings = settings
        self._by_name: Dict[str, Resource] = {r.name.lower(): r for r in self.resources}

    def get(self, name: str) -> Optional[Resource]:
        return self._by_name.get(name.lower())

    def __contains__(self, name: str) -> bool:
        return name.lower() in self._by_name

    def __iter__(self):
        return iter(self.resources)

    def __len__(self) -> int:
        return len(self.resources)


class DistributedApplicationBuilder:
    """
    Collects resources during application-model construction.
    Single owner, synchronous; nothing is started here.
    """
    def __init__(self, settings: Optional[AppHostSettings] = None):
        """
        :param settings: App host settings. Loaded from the environment when omitted.
        """
        self.settings = settings or load_settings()
        self._resources: List[Resource] = []

    @property
    def resources(self) -> List[Resource]:
        return list(self._resources)

    def add_resource(self, resource: Resource) -> ResourceBuilder:
        """
        Registers a resource and returns a builder for it.

        :param resource: The resource to add.
        :return: A ResourceBuilder wrapping the resource.
        :raises DistributedApplicationError: If the name is invalid or already taken.
        """
        throw_if_none(resource, "resource")
        validate_name(resource.name)

        if any(r.name.lower() == resource.name.lower() for r in self._resources):
            raise DistributedApplicationError(
                f"Cannot add resource of type '{type(resource).__name__}' with name "
                f"'{resource.name}' because resource of type '{type(self._find(resource.name)).__name__}' "
                f"with that name already exists. Resource names are case-insensitive."
            )

        self._resources.append(resource)
        logger.debug("Added %s resource '%s'", type(resource).__name__, resource.name)
        return ResourceBuilder(self, resource)

    def _find(self, name: str) -> Optional[Resource]:
        for r in self._resources:
            if r.name.lower() == name.lower():
                return r
        return None

    def add_container(self, name: str, image: str, tag: Optional[str] = None) -> ResourceBuilder:
        throw_if_none(name, "name")
        throw_if_none(image, "image")
        return self.add_resource(ContainerResource(name)).with_image(image, tag)

    def add_project(self, name: str, path: str) -> ResourceBuilder:
        """
        Adds a project. Relative paths are resolved against the app host directory.
        """
        throw_if_none(name, "name")
        throw_if_none(path, "path")
        path = os.path.abspath(os.path.join(self.settings.app_host_directory, path))
        return self.add_resource(ProjectResource(name, path))

    def add_parameter(self, name: str, value: Optional[str] = None, secret: bool = False) -> ResourceBuilder:
        """
        Adds a parameter whose value is supplied at deploy time, optionally with a default.
        """
        throw_if_none(name, "name")
        return self.add_resource(ParameterResource(name, secret=secret, default=value))

    def add_generated_parameter(self, name: str, secret: bool = True, min_length: int = 22,
                                lower: bool = True, upper: bool = True,
                                numeric: bool = True, special: bool = True) -> ResourceBuilder:
        """
        Adds a parameter whose value the orchestrator generates, e.g. a password.
        """
        throw_if_none(name, "name")
        if min_length < 1:
            raise ValueError("min_length must be at least 1")
        if not (lower or upper or numeric or special):
            raise ValueError("At least one character class must be enabled")
        policy = GenerateParameterDefault(min_length=min_length, lower=lower, upper=upper,
                                          numeric=numeric, special=special)
        return self.add_resource(ParameterResource(name, secret=secret, generate=policy))

    def build(self) -> DistributedApplicationModel:
        return DistributedApplicationModel(self._resources, self.settings)
