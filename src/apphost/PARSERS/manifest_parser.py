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
Parser for JSON deployment manifests.
"""
import json

from pydantic import ValidationError

from ..MODELS.manifest import Manifest
from ..exceptions import ManifestError


class ManifestParser:
    """
    Reads a manifest and validates it against the manifest schema.
    """
    def parse(self, manifest_path: str) -> Manifest:
        """
        Parses a manifest file from a path.

        :param manifest_path: Path to the manifest file.
        :return: Parsed manifest.
        :raises ManifestError: If the file is missing, not JSON, or not a valid manifest.
        """
        try:
            with open(manifest_path, 'r') as f:
                content = f.read()
        except OSError as e:
            raise ManifestError(f"Cannot read manifest {manifest_path}: {e}") from e
        return self.parse_from_string(content)

    def parse_from_string(self, content: str) -> Manifest:
        """
        Parses a manifest from a string.

        :param content: JSON content of the manifest.
        :return: Parsed manifest.
        """
        try:
            data = json.loads(content)
        except json.JSONDecodeError as e:
            raise ManifestError(f"Manifest is not valid JSON: {e}") from e
        return self.parse_from_dict(data)

    def parse_from_dict(self, data) -> Manifest:
        if not isinstance(data, dict):
            raise ManifestError("Manifest must be a JSON object")
        if "resources" not in data:
            raise ManifestError("Manifest has no 'resources' section")
        try:
            return Manifest.model_validate(data)
        except ValidationError as e:
            raise ManifestError(f"Manifest does not match the schema: {e}", issues=e.errors()) from e
