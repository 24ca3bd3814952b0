"""
Resources of the distributed application model.
"""
from dataclasses import dataclass
from typing import Dict, List, Optional, Type, TypeVar

from .annotations import (
    ArgsAnnotation,
    ContainerImageAnnotation,
    ContainerMountAnnotation,
    EndpointAnnotation,
    EndpointReference,
    EnvironmentAnnotation,
)
from ..UTILS.expressions import value_expression

T = TypeVar("T")


class Resource:
    """
    A named unit in the application topology.
    Configuration is stored as a list of annotations.
    """
    def __init__(self, name: str):
        self.name = name
        self.annotations: List[object] = []

    def annotations_of(self, kind: Type[T]) -> List[T]:
        """
        Returns all annotations of the given type, in insertion order.
        """
        return [a for a in self.annotations if isinstance(a, kind)]

    @property
    def endpoints(self) -> List[EndpointAnnotation]:
        return self.annotations_of(EndpointAnnotation)

    def get_endpoint(self, name: str) -> EndpointReference:
        """
        Returns a reference to a named endpoint of this resource.

        :raises KeyError: If the resource has no endpoint with that name.
        """
        if not any(e.name == name for e in self.endpoints):
            raise KeyError(f"Resource '{self.name}' has no endpoint named '{name}'")
        return EndpointReference(self.name, name)

    @property
    def environment(self) -> Dict[str, str]:
        env = {}
        for annotation in self.annotations_of(EnvironmentAnnotation):
            env[annotation.name] = annotation.value
        return env

    @property
    def args(self) -> List[str]:
        args = []
        for annotation in self.annotations_of(ArgsAnnotation):
            args.extend(annotation.args)
        return args

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.name!r})"


class ResourceWithConnectionString:
    """
    Mixin for resources that other resources can reference by connection string.
    """
    @property
    def connection_string_expression(self) -> str:
        raise NotImplementedError


class ResourceWithParent:
    """
    Mixin for child resources whose lifetime is bound to a parent resource.
    """
    parent: Resource


class ContainerResource(Resource):
    """
    A resource backed by a container image.
    """
    def __init__(self, name: str, entrypoint: Optional[str] = None):
        super().__init__(name)
        self.entrypoint = entrypoint

    @property
    def image(self) -> Optional[ContainerImageAnnotation]:
        images = self.annotations_of(ContainerImageAnnotation)
        return images[-1] if images else None

    @property
    def mounts(self) -> List[ContainerMountAnnotation]:
        return self.annotations_of(ContainerMountAnnotation)


class ProjectResource(Resource):
    """
    A resource backed by a project on disk, e.g. a service built from source.
    """
    def __init__(self, name: str, path: str):
        super().__init__(name)
        self.path = path


@dataclass
class GenerateParameterDefault:
    """
    Generation policy for a parameter value. Only recorded in the manifest;
    the orchestrator performs the generation.
    """
    min_length: int = 22
    lower: bool = True
    upper: bool = True
    numeric: bool = True
    special: bool = True
    min_lower: int = 0
    min_upper: int = 0
    min_numeric: int = 0
    min_special: int = 0


class ParameterResource(Resource):
    """
    A named input value, either supplied by the user, defaulted, or generated.
    """
    def __init__(self, name: str, secret: bool = False, default: Optional[str] = None,
                 generate: Optional[GenerateParameterDefault] = None):
        super().__init__(name)
        self.secret = secret
        self.default = default
        self.generate = generate

    @property
    def value_expression(self) -> str:
        return value_expression(self.name)
