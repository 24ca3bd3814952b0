"""
Generation of deterministic names for runtime-managed volumes.
"""
import hashlib
import re

_INVALID_CHARS = re.compile(r'[^a-z0-9_.-]')


def sanitize(name: str) -> str:
    """
    Turns an application name into something the container runtime accepts
    as part of a volume name.

    :param name: The raw application name.
    :return: Lowercased name with invalid characters replaced by '_'.
    """
    safe = _INVALID_CHARS.sub('_', name.lower())
    if not safe or not safe[0].isalnum():
        safe = 'v' + safe
    return safe


def app_host_hash(app_host_directory: str) -> str:
    """
    Returns the first 10 hex characters of the SHA-256 of the app host directory.
    """
    return hashlib.sha256(app_host_directory.encode('utf-8')).hexdigest()[:10]


def create_volume_name(builder, suffix: str) -> str:
    """
    Creates a volume name for a resource.

    Format: ``<application>-<hash>-<resource>-<suffix>``. The hash is derived
    from the app host directory so two app hosts sharing an application name
    do not share volumes.

    :param builder: The resource builder the volume belongs to.
    :param suffix: Distinguishes multiple volumes of the same resource, e.g. "data".
    :return: The volume name.
    """
    settings = builder.application_builder.settings
    return "{}-{}-{}-{}".format(
        sanitize(settings.application_name),
        app_host_hash(settings.app_host_directory),
        builder.resource.name,
        suffix,
    )
