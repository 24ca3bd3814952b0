"""
Dependency resolution for manifest resources based on the references between them.
"""
from typing import Dict, List, Set

from ..MODELS.manifest import Manifest
from ..UTILS.expressions import ExpressionInterpolator
from ..exceptions import ManifestError


def resource_expressions(resource) -> List[str]:
    """
    Returns every string of a manifest resource that may contain references.
    """
    expressions = []
    for attr in ("connection_string", "value", "entrypoint"):
        value = getattr(resource, attr, None)
        if value:
            expressions.append(value)
    expressions.extend(getattr(resource, "args", None) or [])
    expressions.extend((getattr(resource, "env", None) or {}).values())
    for parameter_input in (getattr(resource, "inputs", None) or {}).values():
        if parameter_input.default is not None and parameter_input.default.value:
            expressions.append(parameter_input.default.value)
    return expressions


class DependencyResolver:
    """
    Orders resources so that every resource comes after the resources it references.
    """
    def dependencies(self, manifest: Manifest) -> Dict[str, Set[str]]:
        """
        Maps each resource to the other existing resources it references.
        A resource lists itself only when it forms a cycle on its own.
        """
        deps = {}
        for name, resource in manifest.resources.items():
            refs = set()
            for expression in resource_expressions(resource):
                for ref in ExpressionInterpolator.references(expression):
                    if ref.resource != name and ref.resource in manifest.resources:
                        refs.add(ref.resource)
            if self._references_itself(name, resource):
                refs.add(name)
            deps[name] = refs
        return deps

    @staticmethod
    def _references_itself(name: str, resource) -> bool:
        """
        True when the connection string or value of a resource is defined in
        terms of its own connection string or value. References to its own
        bindings or inputs are not cycles.
        """
        for attr in ("connection_string", "value"):
            for ref in ExpressionInterpolator.references(getattr(resource, attr, None)):
                if ref.resource == name and ref.parts[0] in ("connectionString", "value"):
                    return True
        return False

    def resolve_order(self, manifest: Manifest) -> List[str]:
        """
        Determines the order resources must be resolved in using topological sort.

        :param manifest: The manifest.
        :return: Resource names, dependencies first.
        :raises ManifestError: If a circular reference is detected.
        """
        dependencies = self.dependencies(manifest)

        ordered = []
        visited = set()
        processing = set()

        def visit(name):
            if name in processing:
                raise ManifestError(f"Circular reference detected involving {name}")
            if name not in visited:
                processing.add(name)
                for dep in sorted(dependencies.get(name, [])):
                    visit(dep)
                processing.remove(name)
                visited.add(name)
                ordered.append(name)

        for name in manifest.resources:
            visit(name)

        return ordered
