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
Builder helpers for adding SurrealDB resources to an application model.
"""
import logging
from typing import Optional

from . import surrealdb_image_tags
from ..BUILDERS.resource_builder import ResourceBuilder
from ..MODELS.surrealdb import SurrealDBDatabaseResource, SurrealDBServerResource
from ..UTILS.volume_names import create_volume_name
from ..exceptions import DistributedApplicationError, throw_if_none

logger = logging.getLogger(__name__)

# Internal port is always 27017.
DEFAULT_CONTAINER_PORT = 27017

DATA_PATH = "/data/db"
INIT_PATH = "/docker-entrypoint-initdb.d"


def add_surrealdb(builder, name: str, port: Optional[int] = None) -> "SurrealDBServerBuilder":
    """
    Adds a SurrealDB server container to the application model.

    :param builder: The DistributedApplicationBuilder.
    :param name: The resource name; also the connection string name when referenced.
    :param port: The host port. None lets the orchestrator allocate one.
    :return: A builder for the SurrealDBServerResource.
    """
    throw_if_none(builder, "builder")
    throw_if_none(name, "name")

    server = SurrealDBServerResource(name)
    logger.debug("Adding SurrealDB server '%s' (%s/%s:%s)", name,
                 surrealdb_image_tags.REGISTRY, surrealdb_image_tags.IMAGE, surrealdb_image_tags.TAG)

    builder.add_resource(server)
    return (SurrealDBServerBuilder(builder, server)
            .with_endpoint(port=port, target_port=DEFAULT_CONTAINER_PORT,
                           name=SurrealDBServerResource.PRIMARY_ENDPOINT_NAME)
            .with_image(surrealdb_image_tags.IMAGE, surrealdb_image_tags.TAG)
            .with_image_registry(surrealdb_image_tags.REGISTRY))


def add_database(builder: ResourceBuilder, name: str, database_name: Optional[str] = None) -> ResourceBuilder:
    """
    Adds a logical database under a SurrealDB server.

    :param builder: The SurrealDB server resource builder.
    :param name: The resource name; also the connection string name when referenced.
    :param database_name: The database name. Defaults to name.
    :return: A builder for the SurrealDBDatabaseResource.
    """
    throw_if_none(builder, "builder")
    throw_if_none(name, "name")
    if not isinstance(builder.resource, SurrealDBServerResource):
        raise DistributedApplicationError(
            f"Resource '{builder.resource.name}' is not a SurrealDB server; databases can only be added to one."
        )

    database_name = database_name if database_name is not None else name

    database = SurrealDBDatabaseResource(name, database_name, builder.resource)
    database_builder = builder.application_builder.add_resource(database)
    builder.resource.add_database(name, database_name)
    return database_builder


def with_data_volume(builder: ResourceBuilder, name: Optional[str] = None,
                     is_read_only: bool = False) -> ResourceBuilder:
    """
    Adds a named volume for the data folder.

    :param builder: The SurrealDB server resource builder.
    :param name: The volume name. Defaults to a name generated from the application and resource names.
    :param is_read_only: Whether the volume is read-only.
    """
    throw_if_none(builder, "builder")
    return builder.with_volume(name if name is not None else create_volume_name(builder, "data"),
                               DATA_PATH, is_read_only)


def with_data_bind_mount(builder: ResourceBuilder, source: str, is_read_only: bool = False) -> ResourceBuilder:
    """
    Adds a bind mount for the data folder.

    :param builder: The SurrealDB server resource builder.
    :param source: The host directory to mount.
    :param is_read_only: Whether the mount is read-only.
    """
    throw_if_none(builder, "builder")
    throw_if_none(source, "source")
    return builder.with_bind_mount(source, DATA_PATH, is_read_only)


def with_init_bind_mount(builder: ResourceBuilder, source: str, is_read_only: bool = True) -> ResourceBuilder:
    """
    Adds a bind mount for the init scripts folder. Read-only unless overridden.

    :param builder: The SurrealDB server resource builder.
    :param source: The host directory to mount.
    :param is_read_only: Whether the mount is read-only.
    """
    throw_if_none(builder, "builder")
    throw_if_none(source, "source")
    return builder.with_bind_mount(source, INIT_PATH, is_read_only)


class SurrealDBServerBuilder(ResourceBuilder[SurrealDBServerResource]):
    """
    Resource builder for a SurrealDB server, with the helpers above as chainable methods.
    """
    def add_database(self, name: str, database_name: Optional[str] = None) -> ResourceBuilder:
        return add_database(self, name, database_name)

    def with_data_volume(self, name: Optional[str] = None, is_read_only: bool = False) -> "SurrealDBServerBuilder":
        return with_data_volume(self, name, is_read_only)

    def with_data_bind_mount(self, source: str, is_read_only: bool = False) -> "SurrealDBServerBuilder":
        return with_data_bind_mount(self, source, is_read_only)

    def with_init_bind_mount(self, source: str, is_read_only: bool = True) -> "SurrealDBServerBuilder":
        return with_init_bind_mount(self, source, is_read_only)
