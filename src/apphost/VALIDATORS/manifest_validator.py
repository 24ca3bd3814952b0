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
Structural completeness checks for deployment manifests.

Every expression such as ``{db.connectionString}`` or
``{api.bindings.http.url}`` must point at a resource, binding or input that
exists in the same manifest.
"""
import logging
from dataclasses import dataclass
from typing import List

from ..MODELS.manifest import ContainerResource, Manifest, ParameterResource, ProjectResource, ValueResource
from ..RUNNERS.dependency_resolver import DependencyResolver, resource_expressions
from ..UTILS.expressions import ExpressionInterpolator, Reference
from ..exceptions import ManifestError

logger = logging.getLogger(__name__)

BINDING_PROPERTIES = ("host", "port", "targetPort", "url", "scheme", "protocol", "transport")


@dataclass
class ManifestIssue:
    """
    A broken reference found in a manifest.
    """
    resource: str
    reference: str
    message: str

    def __str__(self) -> str:
        return f"{self.resource}: {self.reference}: {self.message}"


class ManifestValidator:
    """
    Validates references between manifest resources.
    """
    def __init__(self):
        self.resolver = DependencyResolver()

    def validate(self, manifest: Manifest) -> List[ManifestIssue]:
        """
        Checks every reference in every resource.

        :param manifest: The manifest to check.
        :return: The issues found; empty when the manifest is complete.
        """
        issues = []
        for name, resource in manifest.resources.items():
            for expression in resource_expressions(resource):
                for ref in ExpressionInterpolator.references(expression):
                    message = self._check(manifest, ref)
                    if message:
                        issues.append(ManifestIssue(resource=name, reference=str(ref), message=message))

        if not issues:
            try:
                self.resolver.resolve_order(manifest)
            except ManifestError as e:
                issues.append(ManifestIssue(resource="*", reference="", message=str(e)))

        logger.debug("Validated manifest with %d resources, %d issues", len(manifest.resources), len(issues))
        return issues

    def ensure_valid(self, manifest: Manifest) -> Manifest:
        """
        :raises ManifestError: If the manifest has issues; the issues are attached to the error.
        """
        issues = self.validate(manifest)
        if issues:
            details = "; ".join(str(i) for i in issues)
            raise ManifestError(f"Manifest has {len(issues)} invalid reference(s): {details}", issues=issues)
        return manifest

    @staticmethod
    def _check(manifest: Manifest, ref: Reference):
        target = manifest.resources.get(ref.resource)
        if target is None:
            return f"unknown resource '{ref.resource}'"

        parts = ref.parts
        head = parts[0]

        if head == "connectionString" and len(parts) == 1:
            if isinstance(target, ValueResource):
                return None
            if isinstance(target, ContainerResource) and target.connection_string:
                return None
            return f"resource '{ref.resource}' has no connection string"

        if head == "value" and len(parts) == 1:
            if isinstance(target, ParameterResource):
                return None
            return f"resource '{ref.resource}' has no value"

        if head == "bindings" and len(parts) == 3:
            binding, prop = parts[1], parts[2]
            bindings = target.bindings if isinstance(target, (ContainerResource, ProjectResource)) else None
            if not bindings or binding not in bindings:
                return f"resource '{ref.resource}' has no binding '{binding}'"
            if prop not in BINDING_PROPERTIES:
                return f"unknown binding property '{prop}'"
            return None

        if head == "inputs" and len(parts) == 2:
            inputs = target.inputs if isinstance(target, ParameterResource) else None
            if not inputs or parts[1] not in inputs:
                return f"resource '{ref.resource}' has no input '{parts[1]}'"
            return None

        return f"unknown property '{ref.path}'"
