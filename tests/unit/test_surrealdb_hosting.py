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
Unit tests for the SurrealDB builder helpers.
"""
import os
import pytest

from apphost.BUILDERS.application_builder import DistributedApplicationBuilder
from apphost.CONFIG.settings import AppHostSettings
from apphost.HOSTING import surrealdb_image_tags
from apphost.HOSTING.surrealdb import (
    DATA_PATH,
    DEFAULT_CONTAINER_PORT,
    INIT_PATH,
    SurrealDBServerBuilder,
    add_database,
    add_surrealdb,
    with_data_bind_mount,
    with_data_volume,
    with_init_bind_mount,
)
from apphost.MODELS.annotations import ContainerMountType
from apphost.MODELS.surrealdb import SurrealDBDatabaseResource, SurrealDBServerResource
from apphost.UTILS.volume_names import app_host_hash
from apphost.exceptions import ArgumentNullError, DistributedApplicationError


@pytest.fixture
def builder(tmp_path):
    settings = AppHostSettings(application_name="Playground.AppHost", app_host_directory=str(tmp_path))
    return DistributedApplicationBuilder(settings)


class TestAddSurrealDB:
    """Tests for add_surrealdb."""

    def test_adds_container_with_endpoint_and_image(self, builder):
        """Test the server gets the primary endpoint and the pinned image."""
        surrealdb = add_surrealdb(builder, "surrealdb")
        resource = surrealdb.resource

        assert isinstance(surrealdb, SurrealDBServerBuilder)
        assert isinstance(resource, SurrealDBServerResource)
        assert resource in builder.resources

        endpoint = resource.endpoints[0]
        assert endpoint.name == "tcp"
        assert endpoint.target_port == DEFAULT_CONTAINER_PORT
        assert endpoint.port is None

        assert resource.image.registry == surrealdb_image_tags.REGISTRY
        assert resource.image.image == surrealdb_image_tags.IMAGE
        assert resource.image.tag == surrealdb_image_tags.TAG
        assert resource.image.full_name == "docker.io/surrealdb/surrealdb:v1.5.5"

    def test_host_port(self, builder):
        """Test the host port is recorded on the endpoint."""
        resource = add_surrealdb(builder, "surrealdb", port=9000).resource
        assert resource.endpoints[0].port == 9000

    def test_connection_string_expression(self, builder):
        """Test the server connection string references its primary binding."""
        resource = add_surrealdb(builder, "surrealdb").resource
        assert resource.connection_string_expression == \
            "Server=ws://{surrealdb.bindings.tcp.host}:{surrealdb.bindings.tcp.port}/rpc"

    def test_missing_builder(self):
        """Test that a missing builder fails fast."""
        with pytest.raises(ArgumentNullError):
            add_surrealdb(None, "surrealdb")

    def test_missing_name_does_not_mutate(self, builder):
        """Test that a missing name fails before the model changes."""
        with pytest.raises(ArgumentNullError) as exc:
            add_surrealdb(builder, None)
        assert exc.value.param_name == "name"
        assert isinstance(exc.value, ValueError)
        assert builder.resources == []


class TestAddDatabase:
    """Tests for add_database."""

    def test_database_name_defaults_to_resource_name(self, builder):
        """Test database name falls back to the registration name."""
        server = add_surrealdb(builder, "surrealdb")
        db = add_database(server, "inventory")

        assert isinstance(db.resource, SurrealDBDatabaseResource)
        assert db.resource.database_name == "inventory"
        assert server.resource.databases == {"inventory": "inventory"}

    def test_explicit_database_name(self, builder):
        """Test an explicit database name is kept."""
        server = add_surrealdb(builder, "surrealdb")
        db = server.add_database("db", "catalog")

        assert db.resource.name == "db"
        assert db.resource.database_name == "catalog"
        assert db.resource.parent is server.resource
        assert db.resource.connection_string_expression == "{surrealdb.connectionString};Database=catalog"

    def test_database_registered_in_model(self, builder):
        """Test the child is a model resource of its own."""
        server = add_surrealdb(builder, "surrealdb")
        server.add_database("db")
        model = builder.build()
        assert "db" in model
        assert model.get("db").parent is server.resource

    def test_missing_arguments(self, builder):
        """Test that missing arguments fail without registering anything."""
        server = add_surrealdb(builder, "surrealdb")
        with pytest.raises(ArgumentNullError):
            add_database(None, "db")
        with pytest.raises(ArgumentNullError):
            add_database(server, None)
        assert len(builder.resources) == 1
        assert server.resource.databases == {}

    def test_database_requires_surrealdb_parent(self, builder):
        """Test adding a database under another resource fails before registering it."""
        cache = builder.add_container("cache", "redis")
        with pytest.raises(DistributedApplicationError):
            add_database(cache, "db")
        assert [r.name for r in builder.resources] == ["cache"]

    def test_duplicate_database_does_not_touch_parent(self, builder):
        """Test a rejected duplicate leaves the parent's database list intact."""
        server = add_surrealdb(builder, "surrealdb")
        server.add_database("db")
        with pytest.raises(DistributedApplicationError):
            server.add_database("DB", "other")
        assert server.resource.databases == {"db": "db"}


class TestVolumesAndMounts:
    """Tests for the data volume and bind mount helpers."""

    def test_data_volume_generated_name(self, builder, tmp_path):
        """Test the generated volume name."""
        server = with_data_volume(add_surrealdb(builder, "surrealdb"))
        mount = server.resource.mounts[0]

        expected = "playground.apphost-{}-surrealdb-data".format(app_host_hash(str(tmp_path)))
        assert mount.source == expected
        assert mount.target == DATA_PATH
        assert mount.type == ContainerMountType.VOLUME
        assert mount.read_only is False

    def test_data_volume_name_is_deterministic(self, tmp_path):
        """Test equal app hosts produce equal names and different directories do not."""
        def volume_name(directory):
            settings = AppHostSettings(application_name="app", app_host_directory=directory)
            builder = DistributedApplicationBuilder(settings)
            return add_surrealdb(builder, "surrealdb").with_data_volume().resource.mounts[0].source

        assert volume_name(str(tmp_path / "a")) == volume_name(str(tmp_path / "a"))
        assert volume_name(str(tmp_path / "a")) != volume_name(str(tmp_path / "b"))

    def test_data_volume_explicit_name(self, builder):
        """Test an explicit volume name and read-only flag."""
        server = add_surrealdb(builder, "surrealdb").with_data_volume("mydata", is_read_only=True)
        mount = server.resource.mounts[0]
        assert mount.source == "mydata"
        assert mount.read_only is True

    def test_data_bind_mount_defaults_read_write(self, builder, tmp_path):
        """Test the data bind mount is read-write at the data path."""
        server = with_data_bind_mount(add_surrealdb(builder, "surrealdb"), "data")
        mount = server.resource.mounts[0]
        assert mount.type == ContainerMountType.BIND
        assert mount.source == os.path.join(str(tmp_path), "data")
        assert mount.target == DATA_PATH
        assert mount.read_only is False

    def test_init_bind_mount_defaults_read_only(self, builder):
        """Test the init bind mount is read-only at the init path."""
        server = with_init_bind_mount(add_surrealdb(builder, "surrealdb"), "init")
        mount = server.resource.mounts[0]
        assert mount.target == INIT_PATH
        assert mount.target != DATA_PATH
        assert mount.read_only is True

    def test_init_bind_mount_override(self, builder):
        """Test the init bind mount read-only flag can be overridden."""
        server = add_surrealdb(builder, "surrealdb").with_init_bind_mount("init", is_read_only=False)
        assert server.resource.mounts[0].read_only is False

    def test_missing_source_does_not_mutate(self, builder):
        """Test that a missing source fails before any mount is added."""
        server = add_surrealdb(builder, "surrealdb")
        with pytest.raises(ArgumentNullError):
            with_data_bind_mount(server, None)
        with pytest.raises(ArgumentNullError):
            with_init_bind_mount(server, None)
        with pytest.raises(ArgumentNullError):
            with_data_volume(None)
        assert server.resource.mounts == []
