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
Annotations attached to resources in the application model.
Each builder call adds one annotation to a resource; publishers read them back.
"""
from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional

from ..UTILS.expressions import binding_expression


@dataclass
class EndpointAnnotation:
    """
    A named network endpoint on a resource. Published as a manifest binding.
    """
    name: str
    protocol: str = "tcp"
    scheme: str = "tcp"
    transport: Optional[str] = None
    port: Optional[int] = None
    target_port: Optional[int] = None
    is_external: bool = False
    is_proxied: bool = True

    def __post_init__(self):
        if self.transport is None:
            self.transport = "http" if self.scheme in ("http", "https") else self.scheme


@dataclass
class ContainerImageAnnotation:
    """
    Container image coordinates.
    """
    image: str
    tag: Optional[str] = "latest"
    registry: Optional[str] = None

    @property
    def full_name(self) -> str:
        name = f"{self.registry}/{self.image}" if self.registry else self.image
        if self.tag:
            return f"{name}:{self.tag}"
        return name


class ContainerMountType(str, Enum):
    """
    Kind of storage mounted into a container.
    """
    VOLUME = "volume"
    BIND = "bind"


@dataclass
class ContainerMountAnnotation:
    """
    A volume or bind mount. Anonymous volumes have no source.
    """
    source: Optional[str]
    target: str
    type: ContainerMountType = ContainerMountType.VOLUME
    read_only: bool = False


@dataclass
class EnvironmentAnnotation:
    name: str
    value: str


@dataclass
class ArgsAnnotation:
    args: List[str] = field(default_factory=list)


@dataclass(frozen=True)
class EndpointReference:
    """
    Points at an endpoint of a resource so other resources can consume its
    host, port or url in environment expressions.
    """
    resource_name: str
    endpoint_name: str

    def expression(self, name: str) -> str:
        return binding_expression(self.resource_name, self.endpoint_name, name)

    @property
    def host(self) -> str:
        return self.expression("host")

    @property
    def port(self) -> str:
        return self.expression("port")

    @property
    def url(self) -> str:
        return self.expression("url")
