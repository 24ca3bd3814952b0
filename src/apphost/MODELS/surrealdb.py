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
SurrealDB server and database resources.
"""
from typing import Dict

from .annotations import EndpointReference
from .resource import ContainerResource, Resource, ResourceWithConnectionString, ResourceWithParent
from ..UTILS.expressions import connection_string_expression


class SurrealDBServerResource(ContainerResource, ResourceWithConnectionString):
    """
    A SurrealDB server running in a container. Owns zero or more logical databases.
    """
    PRIMARY_ENDPOINT_NAME = "tcp"

    def __init__(self, name: str):
        super().__init__(name)
        self._databases: Dict[str, str] = {}

    @property
    def primary_endpoint(self) -> EndpointReference:
        return EndpointReference(self.name, self.PRIMARY_ENDPOINT_NAME)

    @property
    def connection_string_expression(self) -> str:
        endpoint = self.primary_endpoint
        return f"Server=ws://{endpoint.host}:{endpoint.port}/rpc"

    @property
    def databases(self) -> Dict[str, str]:
        """
        Registered databases: resource name -> database name.
        """
        return dict(self._databases)

    def add_database(self, name: str, database_name: str):
        self._databases[name] = database_name


class SurrealDBDatabaseResource(Resource, ResourceWithConnectionString, ResourceWithParent):
    """
    A logical database inside a SurrealDB server. The connection string is the
    parent's connection string plus the database name.
    """
    def __init__(self, name: str, database_name: str, parent: SurrealDBServerResource):
        super().__init__(name)
        self.database_name = database_name
        self.parent = parent

    @property
    def connection_string_expression(self) -> str:
        return f"{connection_string_expression(self.parent.name)};Database={self.database_name}"
