"""
Settings for the app host, resolved from the environment and .env files.
"""
import os
from typing import Dict, List, Optional

from dotenv import dotenv_values
from pydantic import BaseModel

ENV_APPLICATION_NAME = "APPHOST_APPLICATION_NAME"
ENV_DIRECTORY = "APPHOST_DIRECTORY"
ENV_MANIFEST_PATH = "APPHOST_MANIFEST_PATH"

DEFAULT_MANIFEST_PATH = "aspire-manifest.json"


class AppHostSettings(BaseModel):
    """
    Identity of the app host. The application name and directory feed
    generated volume names.
    """
    application_name: str
    app_host_directory: str
    manifest_path: str = DEFAULT_MANIFEST_PATH


def load_settings(base_dir: Optional[str] = None,
                  env_files: Optional[List[str]] = None,
                  overrides: Optional[Dict[str, str]] = None) -> AppHostSettings:
    """
    Merges settings from the current process, .env files and explicit overrides
    (later sources win).

    :param base_dir: Directory for resolving relative .env paths. Defaults to the cwd.
    :param env_files: .env files to read; missing files are ignored.
    :param overrides: Explicit variables that override everything else.
    :return: The resolved settings.
    """
    base_dir = os.path.abspath(base_dir or os.getcwd())
    merged = dict(os.environ)

    for env_file in env_files or []:
        file_path = os.path.join(base_dir, env_file)
        if os.path.exists(file_path):
            merged.update({k: v for k, v in dotenv_values(file_path).items() if v is not None})

    merged.update(overrides or {})

    directory = os.path.abspath(merged.get(ENV_DIRECTORY) or base_dir)
    return AppHostSettings(
        application_name=merged.get(ENV_APPLICATION_NAME) or os.path.basename(directory) or "apphost",
        app_host_directory=directory,
        manifest_path=merged.get(ENV_MANIFEST_PATH) or DEFAULT_MANIFEST_PATH,
    )
