"""
Pinned SurrealDB container image coordinates.
"""

REGISTRY = "docker.io"
IMAGE = "surrealdb/surrealdb"
TAG = "v1.5.5"
