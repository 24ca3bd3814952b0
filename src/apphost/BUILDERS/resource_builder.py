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
Fluent builder for configuring a single resource in the application model.
"""
import logging
import os
from typing import Generic, Optional, TypeVar, Union

from ..MODELS.annotations import (
    ArgsAnnotation,
    ContainerImageAnnotation,
    ContainerMountAnnotation,
    ContainerMountType,
    EndpointAnnotation,
    EndpointReference,
    EnvironmentAnnotation,
)
from ..MODELS.resource import (
    ContainerResource,
    ParameterResource,
    ProjectResource,
    Resource,
    ResourceWithConnectionString,
)
from ..UTILS.expressions import binding_expression, connection_string_expression
from ..UTILS.names import validate_name
from ..exceptions import DistributedApplicationError, throw_if_none

logger = logging.getLogger(__name__)

T = TypeVar("T", bound=Resource)


class ResourceBuilder(Generic[T]):
    """
    Wraps a resource and exposes chainable configuration methods.
    Every ``with_*`` method attaches one annotation and returns the builder.
    """
    def __init__(self, application_builder, resource: T):
        """
        :param application_builder: The DistributedApplicationBuilder that owns the model.
        :param resource: The resource being configured.
        """
        self.application_builder = application_builder
        self.resource = resource

    def with_annotation(self, annotation) -> "ResourceBuilder[T]":
        throw_if_none(annotation, "annotation")
        self.resource.annotations.append(annotation)
        return self

    # Endpoints

    def with_endpoint(self,
                      port: Optional[int] = None,
                      target_port: Optional[int] = None,
                      scheme: Optional[str] = None,
                      name: Optional[str] = None,
                      env: Optional[str] = None,
                      is_proxied: bool = True,
                      is_external: Optional[bool] = None,
                      protocol: str = "tcp") -> "ResourceBuilder[T]":
        """
        Adds a network endpoint.

        :param port: Host port. None lets the orchestrator pick one.
        :param target_port: Port the resource listens on.
        :param scheme: URI scheme, defaults to "tcp".
        :param name: Endpoint name, defaults to the scheme.
        :param env: Environment variable that receives the target port.
        :param is_proxied: Whether the orchestrator proxies the endpoint.
        :param is_external: Whether the endpoint is reachable from outside the application.
        :param protocol: Network protocol.
        :raises DistributedApplicationError: If an endpoint with the same name exists.
        """
        scheme = scheme or "tcp"
        name = validate_name(name or scheme, "Endpoint")

        if any(e.name == name for e in self.resource.endpoints):
            raise DistributedApplicationError(
                f"Endpoint with name '{name}' already exists on resource '{self.resource.name}'."
            )

        self.with_annotation(EndpointAnnotation(
            name=name,
            protocol=protocol,
            scheme=scheme,
            port=port,
            target_port=target_port,
            is_external=bool(is_external),
            is_proxied=is_proxied,
        ))
        if env:
            self.with_environment(env, binding_expression(self.resource.name, name, "targetPort"))
        return self

    def with_http_endpoint(self, port: Optional[int] = None, target_port: Optional[int] = None,
                           name: Optional[str] = None, env: Optional[str] = None,
                           is_proxied: bool = True) -> "ResourceBuilder[T]":
        return self.with_endpoint(port=port, target_port=target_port, scheme="http",
                                  name=name or "http", env=env, is_proxied=is_proxied)

    def with_https_endpoint(self, port: Optional[int] = None, target_port: Optional[int] = None,
                            name: Optional[str] = None, env: Optional[str] = None,
                            is_proxied: bool = True) -> "ResourceBuilder[T]":
        return self.with_endpoint(port=port, target_port=target_port, scheme="https",
                                  name=name or "https", env=env, is_proxied=is_proxied)

    def with_external_http_endpoints(self) -> "ResourceBuilder[T]":
        """
        Marks every http and https endpoint of the resource as external.
        """
        for endpoint in self.resource.endpoints:
            if endpoint.scheme in ("http", "https"):
                endpoint.is_external = True
        return self

    def get_endpoint(self, name: str) -> EndpointReference:
        return self.resource.get_endpoint(name)

    # Container image

    def _container(self) -> ContainerResource:
        if not isinstance(self.resource, ContainerResource):
            raise DistributedApplicationError(
                f"Resource '{self.resource.name}' is not a container resource."
            )
        return self.resource

    def _image(self) -> ContainerImageAnnotation:
        image = self._container().image
        if image is None:
            raise DistributedApplicationError(
                f"Resource '{self.resource.name}' does not have a container image specified."
            )
        return image

    def with_image(self, image: str, tag: Optional[str] = None) -> "ResourceBuilder[T]":
        """
        Sets the container image. A tag embedded in the image ("name:tag")
        is used when no explicit tag is given.
        """
        throw_if_none(image, "image")
        container = self._container()

        if tag is None:
            last_segment = image.rsplit('/', 1)[-1]
            if ':' in last_segment:
                image, tag = image.rsplit(':', 1)
            else:
                tag = "latest"

        current = container.image
        if current is not None:
            current.image = image
            current.tag = tag
        else:
            self.with_annotation(ContainerImageAnnotation(image=image, tag=tag))
        return self

    def with_image_tag(self, tag: str) -> "ResourceBuilder[T]":
        throw_if_none(tag, "tag")
        self._image().tag = tag
        return self

    def with_image_registry(self, registry: str) -> "ResourceBuilder[T]":
        throw_if_none(registry, "registry")
        self._image().registry = registry
        return self

    # Storage

    def with_volume(self, name: Optional[str], target: str, is_read_only: bool = False) -> "ResourceBuilder[T]":
        """
        Adds a runtime-managed volume. A None name creates an anonymous volume.

        :param name: The volume name.
        :param target: The path inside the container.
        :param is_read_only: Whether the volume is mounted read-only.
        """
        throw_if_none(target, "target")
        self._container()
        return self.with_annotation(ContainerMountAnnotation(
            source=name, target=target, type=ContainerMountType.VOLUME, read_only=is_read_only
        ))

    def with_bind_mount(self, source: str, target: str, is_read_only: bool = False) -> "ResourceBuilder[T]":
        """
        Adds a bind mount. Relative sources are resolved against the app host directory.

        :param source: The host directory.
        :param target: The path inside the container.
        :param is_read_only: Whether the mount is read-only.
        """
        throw_if_none(source, "source")
        throw_if_none(target, "target")
        self._container()
        source = os.path.abspath(os.path.join(self.application_builder.settings.app_host_directory, source))
        return self.with_annotation(ContainerMountAnnotation(
            source=source, target=target, type=ContainerMountType.BIND, read_only=is_read_only
        ))

    # Environment

    def with_environment(self, name: str,
                         value: Union[str, EndpointReference, "ResourceBuilder", None]) -> "ResourceBuilder[T]":
        """
        Sets an environment variable. The value may be a literal, an endpoint
        reference (its url is used), or the builder of a parameter or of a
        resource with a connection string.
        """
        throw_if_none(name, "name")
        return self.with_annotation(EnvironmentAnnotation(name=name, value=self._expression(value)))

    def with_args(self, *args: str) -> "ResourceBuilder[T]":
        return self.with_annotation(ArgsAnnotation(args=[self._expression(a) for a in args]))

    def with_reference(self, source: Union["ResourceBuilder", EndpointReference],
                       connection_name: Optional[str] = None) -> "ResourceBuilder[T]":
        """
        Injects the information needed to reach another resource: its
        connection string, or service-discovery variables for its http endpoints.

        :param source: The referenced resource builder or endpoint.
        :param connection_name: Overrides the connection string name.
        """
        throw_if_none(source, "source")

        if isinstance(source, EndpointReference):
            key = f"services__{source.resource_name}__{source.endpoint_name}__0"
            return self.with_environment(key, source.url)

        resource = source.resource
        if isinstance(resource, ResourceWithConnectionString):
            key = f"ConnectionStrings__{connection_name or resource.name}"
            return self.with_environment(key, connection_string_expression(resource.name))

        if isinstance(resource, ProjectResource):
            for endpoint in resource.endpoints:
                if endpoint.scheme in ("http", "https"):
                    self.with_reference(EndpointReference(resource.name, endpoint.name))
            return self

        raise DistributedApplicationError(
            f"Resource '{resource.name}' cannot be referenced: it has no connection string or http endpoints."
        )

    @staticmethod
    def _expression(value) -> str:
        if isinstance(value, EndpointReference):
            return value.url
        if isinstance(value, ResourceBuilder):
            resource = value.resource
            if isinstance(resource, ParameterResource):
                return resource.value_expression
            if isinstance(resource, ResourceWithConnectionString):
                return connection_string_expression(resource.name)
            raise DistributedApplicationError(
                f"Resource '{resource.name}' cannot be used as an environment value."
            )
        return "" if value is None else str(value)
