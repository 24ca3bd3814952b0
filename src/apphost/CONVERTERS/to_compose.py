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
Converters for generating a docker-compose setup from a deployment manifest.
"""
import logging
import os
from typing import Dict, List

import yaml
from jinja2 import Template

from ..MODELS.manifest import ContainerResource, Manifest, ParameterResource, ProjectResource, ValueResource
from ..RUNNERS.dependency_resolver import DependencyResolver
from ..UTILS.expressions import ExpressionInterpolator, Reference
from ..VALIDATORS.manifest_validator import ManifestValidator
from ..exceptions import ManifestError

logger = logging.getLogger(__name__)

ENV_FILE_TEMPLATE = """\
# Parameters for the compose services. Fill in blank values before running.
{% for p in parameters %}
{% if p.secret %}
# {{ p.name }} (secret{% if p.min_length %}, at least {{ p.min_length }} characters{% endif %})
{% else %}
# {{ p.name }}
{% endif %}
{{ p.env_name }}={{ p.value }}
{% endfor %}
"""


def parameter_env_name(name: str) -> str:
    """
    Environment variable that carries a parameter value, e.g. surrealdb-password -> SURREALDB_PASSWORD.
    """
    return name.upper().replace('-', '_')


class ComposeConverter:
    """
    Converts the container resources of a manifest into docker-compose services.
    Projects are skipped: they have no image to run.
    """

    def __init__(self, manifest: Manifest, manifest_dir: str = "."):
        """
        Initializes the compose converter.

        :param manifest: The parsed manifest.
        :param manifest_dir: The directory relative bind mount sources are resolved against.
        """
        self.manifest = manifest
        self.manifest_dir = os.path.abspath(manifest_dir)
        self.template = Template(ENV_FILE_TEMPLATE, trim_blocks=True, lstrip_blocks=True)
        self._resolving: List[str] = []

    def convert(self, output_dir: str = "compose") -> str:
        """
        Writes docker-compose.yml and .env into output_dir.

        :param output_dir: The directory where files will be created.
        :return: The path to the output directory.
        :raises ManifestError: If the manifest has broken references or
            references something compose cannot express.
        """
        ManifestValidator().ensure_valid(self.manifest)
        compose = self.build_compose(output_dir)
        os.makedirs(output_dir, exist_ok=True)

        with open(os.path.join(output_dir, "docker-compose.yml"), "w") as f:
            yaml.safe_dump(compose, f, sort_keys=False, default_flow_style=False)

        with open(os.path.join(output_dir, ".env"), "w") as f:
            f.write(self.render_env_file())

        logger.info("Compose files generated in %s", output_dir)
        return output_dir

    def build_compose(self, output_dir: str = ".") -> Dict:
        """
        Builds the docker-compose document.

        :param output_dir: Directory the compose file will live in; bind mount sources are relative to it.
        :return: The compose document as a dict.
        """
        services = {}
        volumes = {}
        containers = self._containers()

        for name in DependencyResolver().resolve_order(self.manifest):
            resource = self.manifest.resources[name]
            if isinstance(resource, ProjectResource):
                logger.warning("Skipping project resource '%s': projects are not containerized", name)
                continue
            if not isinstance(resource, ContainerResource):
                continue

            service = {"image": resource.image}
            if resource.entrypoint:
                service["entrypoint"] = resource.entrypoint
            if resource.args:
                service["command"] = [self.resolve(a) for a in resource.args]
            if resource.env:
                service["environment"] = {k: self.resolve(v) for k, v in resource.env.items()}

            ports = self._ports(resource)
            if ports:
                service["ports"] = ports

            mounts = []
            for volume in resource.volumes or []:
                if volume.name:
                    volumes[volume.name] = {}
                    mounts.append(self._mount(volume.name, volume.target, volume.read_only))
                else:
                    mounts.append(volume.target)
            for bind in resource.bind_mounts or []:
                mounts.append(self._mount(self._bind_source(bind.source, output_dir), bind.target, bind.read_only))
            if mounts:
                service["volumes"] = mounts

            depends_on = self._depends_on(name, containers)
            if depends_on:
                service["depends_on"] = depends_on

            services[name] = service

        compose = {"services": services}
        if volumes:
            compose["volumes"] = volumes
        return compose

    def render_env_file(self) -> str:
        parameters = []
        for name, resource in self.manifest.resources.items():
            if not isinstance(resource, ParameterResource):
                continue
            parameter_input = (resource.inputs or {}).get("value")
            value = ""
            min_length = None
            secret = False
            if parameter_input is not None:
                secret = bool(parameter_input.secret)
                if parameter_input.default is not None:
                    value = parameter_input.default.value or ""
                    if parameter_input.default.generate is not None:
                        min_length = parameter_input.default.generate.min_length
            parameters.append({
                "name": name,
                "env_name": parameter_env_name(name),
                "value": value,
                "secret": secret,
                "min_length": min_length,
            })
        return self.template.render(parameters=parameters)

    def resolve(self, expression: str) -> str:
        """
        Resolves every reference in an expression to its compose equivalent.
        Hosts become service names, ports become container ports and
        parameters become ``${NAME}`` substitutions from the .env file.
        """
        return ExpressionInterpolator.interpolate(expression, self._resolve_reference)

    def _resolve_reference(self, ref: Reference) -> str:
        target = self.manifest.resources[ref.resource]
        parts = ref.parts

        if parts[0] == "connectionString":
            if ref.resource in self._resolving:
                raise ManifestError(f"Circular reference detected involving {ref.resource}")
            self._resolving.append(ref.resource)
            try:
                return self.resolve(target.connection_string)
            finally:
                self._resolving.pop()
        if parts[0] in ("value", "inputs") and isinstance(target, ParameterResource):
            return "${%s}" % parameter_env_name(ref.resource)
        if parts[0] == "bindings":
            if isinstance(target, ProjectResource):
                raise ManifestError(f"Cannot resolve {ref}: project '{ref.resource}' is not part of the compose output")
            binding = target.bindings[parts[1]]
            port = binding.target_port or binding.port
            prop = parts[2]
            if port is None and prop in ("port", "targetPort", "url"):
                raise ManifestError(f"Cannot resolve {ref}: binding '{parts[1]}' has no port")
            if prop == "host":
                return ref.resource
            if prop in ("port", "targetPort"):
                return str(port)
            if prop == "url":
                return f"{binding.scheme}://{ref.resource}:{port}"
            return getattr(binding, prop)
        raise ManifestError(f"Cannot resolve {ref} for compose output")

    def _containers(self) -> List[str]:
        return [n for n, r in self.manifest.resources.items() if isinstance(r, ContainerResource)]

    def _depends_on(self, name: str, containers: List[str]) -> List[str]:
        # Follow value resources (e.g. databases) through to the container behind them.
        deps = DependencyResolver().dependencies(self.manifest)
        found = []
        pending = list(deps.get(name, []))
        seen = set()
        while pending:
            dep = pending.pop()
            if dep in seen:
                continue
            seen.add(dep)
            if dep in containers:
                if dep != name:
                    found.append(dep)
            elif isinstance(self.manifest.resources[dep], ValueResource):
                pending.extend(deps.get(dep, []))
        return sorted(found)

    @staticmethod
    def _ports(resource: ContainerResource) -> List[str]:
        ports = []
        for binding in (resource.bindings or {}).values():
            if binding.target_port is None:
                continue
            if binding.port is not None:
                ports.append(f"{binding.port}:{binding.target_port}")
            else:
                ports.append(str(binding.target_port))
        return ports

    @staticmethod
    def _mount(source: str, target: str, read_only: bool) -> str:
        return f"{source}:{target}:ro" if read_only else f"{source}:{target}"

    def _bind_source(self, source: str, output_dir: str) -> str:
        absolute = os.path.abspath(os.path.join(self.manifest_dir, source))
        relative = os.path.relpath(absolute, os.path.abspath(output_dir))
        if not relative.startswith('.'):
            relative = "./" + relative
        return relative
