"""
The playground application: a SurrealDB server with one database, a setup
project that seeds it, an API project, and a generated admin password.
"""
from typing import Optional

from ..BUILDERS.application_builder import DistributedApplicationBuilder, DistributedApplicationModel
from ..CONFIG.settings import AppHostSettings
from ..HOSTING.surrealdb import add_surrealdb


def build_playground(settings: Optional[AppHostSettings] = None) -> DistributedApplicationModel:
    builder = DistributedApplicationBuilder(settings)

    password = builder.add_generated_parameter("surrealdb-password", secret=True, min_length=22)

    surrealdb = add_surrealdb(builder, "surrealdb")
    bind_port = surrealdb.get_endpoint("tcp").expression("targetPort")
    (surrealdb
        .with_args("start", "file:/data/db")
        .with_environment("SURREAL_BIND", "0.0.0.0:" + bind_port)
        .with_environment("SURREAL_USER", "root")
        .with_environment("SURREAL_PASS", password)
        .with_data_volume("surrealdb-data"))

    db = surrealdb.add_database("db")

    builder.add_project("setup", "../Playground.Setup/Playground.Setup.csproj").with_reference(db)

    (builder.add_project("api", "../Playground.Api/Playground.Api.csproj")
        .with_http_endpoint()
        .with_https_endpoint()
        .with_external_http_endpoints()
        .with_reference(db))

    return builder.build()
