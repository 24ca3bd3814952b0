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
Publisher that writes the JSON deployment manifest for an application model.
"""
import json
import logging
import os
from typing import Dict, List, Optional

from ..MODELS import manifest as m
from ..MODELS.annotations import ContainerMountType, EndpointAnnotation
from ..MODELS.resource import (
    ContainerResource,
    GenerateParameterDefault,
    ParameterResource,
    ProjectResource,
    Resource,
    ResourceWithConnectionString,
)

logger = logging.getLogger(__name__)


class ManifestPublisher:
    """
    Converts a DistributedApplicationModel into a Manifest.
    """
    def __init__(self, model, manifest_dir: Optional[str] = None):
        """
        :param model: The built application model.
        :param manifest_dir: Directory the manifest is written to; bind mount
            sources and project paths are made relative to it. Defaults to the
            app host directory.
        """
        self.model = model
        self.manifest_dir = os.path.abspath(manifest_dir or model.settings.app_host_directory)

    def build_manifest(self) -> m.Manifest:
        resources = {}
        for resource in self.model:
            published = self._publish_resource(resource)
            if published is None:
                logger.warning("Resource '%s' of type %s has no manifest representation, skipping",
                               resource.name, type(resource).__name__)
                continue
            resources[resource.name] = published
        return m.Manifest(resources=resources)

    def publish(self, path: str) -> str:
        """
        Writes the manifest as indented JSON.

        :param path: Output file path.
        :return: The path written.
        """
        self.manifest_dir = os.path.abspath(os.path.dirname(path) or ".")
        data = self.build_manifest().to_dict()
        os.makedirs(self.manifest_dir, exist_ok=True)
        with open(path, 'w') as f:
            json.dump(data, f, indent=2)
            f.write("\n")
        logger.info("Published manifest with %d resources to %s", len(data["resources"]), path)
        return path

    def _publish_resource(self, resource: Resource):
        if isinstance(resource, ContainerResource):
            return self._container(resource)
        if isinstance(resource, ProjectResource):
            return m.ProjectResource(
                type="project.v0",
                path=self._relative(resource.path),
                args=resource.args or None,
                env=resource.environment or None,
                bindings=self._bindings(resource.endpoints),
            )
        if isinstance(resource, ParameterResource):
            return self._parameter(resource)
        if isinstance(resource, ResourceWithConnectionString):
            return m.ValueResource(type="value.v0", connection_string=resource.connection_string_expression)
        return None

    def _container(self, resource: ContainerResource) -> m.ContainerResource:
        image = resource.image
        if image is None:
            raise ValueError(f"Container resource '{resource.name}' has no image")

        volumes = []
        bind_mounts = []
        for mount in resource.mounts:
            if mount.type == ContainerMountType.BIND:
                bind_mounts.append(m.BindMount(source=self._relative(mount.source),
                                               target=mount.target, read_only=mount.read_only))
            else:
                volumes.append(m.Volume(name=mount.source, target=mount.target, read_only=mount.read_only))

        connection_string = None
        if isinstance(resource, ResourceWithConnectionString):
            connection_string = resource.connection_string_expression

        return m.ContainerResource(
            type="container.v0",
            image=image.full_name,
            entrypoint=resource.entrypoint,
            connection_string=connection_string,
            args=resource.args or None,
            env=resource.environment or None,
            bindings=self._bindings(resource.endpoints),
            volumes=volumes or None,
            bind_mounts=bind_mounts or None,
        )

    def _parameter(self, resource: ParameterResource) -> m.ParameterResource:
        default = None
        if resource.generate is not None:
            default = m.InputDefault(generate=self._generate(resource.generate))
        elif resource.default is not None:
            default = m.InputDefault(value=resource.default)

        return m.ParameterResource(
            type="parameter.v0",
            value="{%s.inputs.value}" % resource.name,
            inputs={"value": m.Input(secret=resource.secret or None, default=default)},
        )

    @staticmethod
    def _generate(policy: GenerateParameterDefault) -> m.GenerateDefault:
        # Character classes are only written when disabled, minimums only when set.
        return m.GenerateDefault(
            min_length=policy.min_length,
            lower=None if policy.lower else False,
            upper=None if policy.upper else False,
            numeric=None if policy.numeric else False,
            special=None if policy.special else False,
            min_lower=policy.min_lower or None,
            min_upper=policy.min_upper or None,
            min_numeric=policy.min_numeric or None,
            min_special=policy.min_special or None,
        )

    @staticmethod
    def _bindings(endpoints: List[EndpointAnnotation]) -> Optional[Dict[str, m.Binding]]:
        if not endpoints:
            return None
        return {
            e.name: m.Binding(
                scheme=e.scheme,
                protocol=e.protocol,
                transport=e.transport,
                port=e.port,
                target_port=e.target_port,
                external=True if e.is_external else None,
            )
            for e in endpoints
        }

    def _relative(self, path: str) -> str:
        if not os.path.isabs(path):
            return path
        return os.path.relpath(path, self.manifest_dir)
