"""
Unit tests for the compose converter.
"""
import os
import pytest
import yaml

from apphost.CONVERTERS.to_compose import ComposeConverter, parameter_env_name
from apphost.PARSERS.manifest_parser import ManifestParser
from apphost.exceptions import ManifestError

MANIFESTS_DIR = os.path.join(os.path.dirname(__file__), "..", "..", "manifests")


@pytest.fixture
def playground():
    return ManifestParser().parse(os.path.join(MANIFESTS_DIR, "playground.json"))


def test_parameter_env_name():
    assert parameter_env_name("surrealdb-password") == "SURREALDB_PASSWORD"


def test_convert_playground(playground, tmp_path):
    out = tmp_path / "compose"
    ComposeConverter(playground, manifest_dir=MANIFESTS_DIR).convert(str(out))

    with open(out / "docker-compose.yml") as f:
        compose = yaml.safe_load(f)

    assert list(compose["services"]) == ["surrealdb"]
    surrealdb = compose["services"]["surrealdb"]
    assert surrealdb["image"] == "docker.io/surrealdb/surrealdb:v1.5.5"
    assert surrealdb["command"] == ["start", "file:/data/db"]
    assert surrealdb["environment"] == {
        "SURREAL_BIND": "0.0.0.0:27017",
        "SURREAL_USER": "root",
        "SURREAL_PASS": "${SURREALDB_PASSWORD}",
    }
    assert surrealdb["ports"] == ["27017"]
    assert surrealdb["volumes"] == ["surrealdb-data:/data/db"]
    assert compose["volumes"] == {"surrealdb-data": {}}

    env_file = (out / ".env").read_text()
    assert "SURREALDB_PASSWORD=\n" in env_file
    assert "at least 22 characters" in env_file


def test_resolve_connection_string(playground):
    """Test connection strings resolve through value resources."""
    converter = ComposeConverter(playground)
    assert converter.resolve("{db.connectionString}") == "Server=ws://surrealdb:27017/rpc;Database=db"


def test_bind_mounts_and_depends_on(tmp_path):
    manifest = ManifestParser().parse_from_dict({"resources": {
        "db": {
            "type": "container.v0",
            "image": "docker.io/surrealdb/surrealdb:v1.5.5",
            "connectionString": "Server=ws://{db.bindings.tcp.host}:{db.bindings.tcp.port}/rpc",
            "bindings": {"tcp": {"scheme": "tcp", "protocol": "tcp", "transport": "tcp",
                                 "port": 8000, "targetPort": 27017}},
            "bindMounts": [{"source": "init", "target": "/docker-entrypoint-initdb.d", "readOnly": True}],
        },
        "main": {"type": "value.v0", "connectionString": "{db.connectionString};Database=main"},
        "worker": {
            "type": "container.v0",
            "image": "worker:1.0",
            "env": {"ConnectionStrings__main": "{main.connectionString}"},
        },
    }})

    compose = ComposeConverter(manifest, manifest_dir=str(tmp_path)).build_compose(str(tmp_path / "out"))

    db = compose["services"]["db"]
    assert db["ports"] == ["8000:27017"]
    assert db["volumes"] == ["../init:/docker-entrypoint-initdb.d:ro"]

    worker = compose["services"]["worker"]
    assert worker["depends_on"] == ["db"]
    assert worker["environment"]["ConnectionStrings__main"] == "Server=ws://db:27017/rpc;Database=main"
    assert "volumes" not in compose


def test_fixed_parameter_default_in_env_file():
    manifest = ManifestParser().parse_from_dict({"resources": {
        "region": {"type": "parameter.v0", "value": "{region.inputs.value}",
                   "inputs": {"value": {"type": "string", "default": {"value": "eu-west"}}}},
    }})
    assert "REGION=eu-west" in ComposeConverter(manifest).render_env_file()


def test_convert_rejects_broken_manifest(tmp_path):
    manifest = ManifestParser().parse_from_dict({"resources": {
        "web": {"type": "container.v0", "image": "nginx", "env": {"DB": "{db.connectionString}"}},
    }})
    with pytest.raises(ManifestError):
        ComposeConverter(manifest).convert(str(tmp_path / "out"))
    assert not (tmp_path / "out").exists()


def test_resolve_rejects_self_referencing_connection_string():
    """Test a connection string defined by itself fails instead of recursing."""
    manifest = ManifestParser().parse_from_dict({"resources": {
        "x": {"type": "container.v0", "image": "redis", "connectionString": "{x.connectionString}"},
    }})
    with pytest.raises(ManifestError) as exc:
        ComposeConverter(manifest).resolve("{x.connectionString}")
    assert "Circular reference" in str(exc.value)


def test_project_binding_cannot_be_resolved(tmp_path):
    """Test references to skipped projects fail rather than producing a bogus url."""
    manifest = ManifestParser().parse_from_dict({"resources": {
        "api": {"type": "project.v0", "path": "api.csproj",
                "bindings": {"http": {"scheme": "http", "protocol": "tcp", "transport": "http"}}},
        "web": {"type": "container.v0", "image": "nginx", "env": {"API": "{api.bindings.http.url}"}},
    }})
    with pytest.raises(ManifestError) as exc:
        ComposeConverter(manifest).convert(str(tmp_path / "out"))
    assert "project 'api'" in str(exc.value)
    assert not (tmp_path / "out").exists()


def test_binding_without_port_cannot_be_resolved():
    manifest = ManifestParser().parse_from_dict({"resources": {
        "cache": {"type": "container.v0", "image": "redis",
                  "bindings": {"tcp": {"scheme": "tcp", "protocol": "tcp", "transport": "tcp"}}},
        "web": {"type": "container.v0", "image": "nginx", "env": {"CACHE": "{cache.bindings.tcp.url}"}},
    }})
    converter = ComposeConverter(manifest)
    assert converter.resolve("{cache.bindings.tcp.host}") == "cache"
    with pytest.raises(ManifestError) as exc:
        converter.build_compose()
    assert "has no port" in str(exc.value)
