"""
Models for the JSON deployment manifest.
"""
from typing import Annotated, Dict, List, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field

MANIFEST_SCHEMA_URL = "https://json.schemastore.org/aspire-8.0.json"


class ManifestModel(BaseModel):
    """
    Base for manifest models: camelCase aliases, unknown fields rejected.
    """
    model_config = ConfigDict(populate_by_name=True, extra="forbid")


class Binding(ManifestModel):
    """
    A named network endpoint exposed by a resource.
    """
    scheme: str
    protocol: str
    transport: str
    port: Optional[int] = None
    target_port: Optional[int] = Field(None, alias="targetPort")
    external: Optional[bool] = None


class Volume(ManifestModel):
    name: Optional[str] = None
    target: str
    read_only: bool = Field(False, alias="readOnly")


class BindMount(ManifestModel):
    source: str
    target: str
    read_only: bool = Field(False, alias="readOnly")


class GenerateDefault(ManifestModel):
    """
    Generation policy for a parameter input.
    """
    min_length: int = Field(alias="minLength")
    lower: Optional[bool] = None
    upper: Optional[bool] = None
    numeric: Optional[bool] = None
    special: Optional[bool] = None
    min_lower: Optional[int] = Field(None, alias="minLower")
    min_upper: Optional[int] = Field(None, alias="minUpper")
    min_numeric: Optional[int] = Field(None, alias="minNumeric")
    min_special: Optional[int] = Field(None, alias="minSpecial")


class InputDefault(ManifestModel):
    value: Optional[str] = None
    generate: Optional[GenerateDefault] = None


class Input(ManifestModel):
    type: Literal["string"] = "string"
    secret: Optional[bool] = None
    default: Optional[InputDefault] = None


class ContainerResource(ManifestModel):
    type: Literal["container.v0"]
    image: str
    entrypoint: Optional[str] = None
    connection_string: Optional[str] = Field(None, alias="connectionString")
    args: Optional[List[str]] = None
    env: Optional[Dict[str, str]] = None
    bindings: Optional[Dict[str, Binding]] = None
    volumes: Optional[List[Volume]] = None
    bind_mounts: Optional[List[BindMount]] = Field(None, alias="bindMounts")


class ValueResource(ManifestModel):
    type: Literal["value.v0"]
    connection_string: str = Field(alias="connectionString")


class ProjectResource(ManifestModel):
    type: Literal["project.v0"]
    path: str
    args: Optional[List[str]] = None
    env: Optional[Dict[str, str]] = None
    bindings: Optional[Dict[str, Binding]] = None


class ParameterResource(ManifestModel):
    type: Literal["parameter.v0"]
    value: str
    inputs: Optional[Dict[str, Input]] = None


ManifestResource = Annotated[
    Union[ContainerResource, ValueResource, ProjectResource, ParameterResource],
    Field(discriminator="type"),
]


class Manifest(ManifestModel):
    """
    A complete deployment manifest: the resources of an application keyed by name.
    """
    schema_url: Optional[str] = Field(MANIFEST_SCHEMA_URL, alias="$schema")
    resources: Dict[str, ManifestResource] = {}

    def to_dict(self) -> dict:
        return self.model_dump(by_alias=True, exclude_none=True, mode="json")
