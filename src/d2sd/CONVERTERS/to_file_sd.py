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
Converters for writing resolved targets as a Prometheus file_sd_config file.
"""
import json
import logging
import os
import tempfile
from typing import Dict, Iterable, List

import yaml
from pydantic import BaseModel

from ..MODELS.resolved_target import ResolvedTarget

logger = logging.getLogger(__name__)


class FileSDEntry(BaseModel):
    """
    One target group of a file_sd_config file.
    """
    targets: List[str]
    labels: Dict[str, str] = {}


class FileSDConverter:
    """
    Converts resolved targets into file_sd_config entries and writes them out.
    The format follows the file extension: .json, .yml or .yaml.
    """

    def convert(self, targets: Iterable[ResolvedTarget]) -> List[FileSDEntry]:
        """
        Keeps the exported targets, one entry each.

        :param targets: Resolved records, exported or not.
        :return: The file_sd entries.
        """
        return [
            FileSDEntry(targets=[t.address], labels=dict(t.labels))
            for t in targets
            if t.is_exported
        ]

    def serialize(self, entries: List[FileSDEntry], output_file: str) -> str:
        """
        Serializes entries in the format implied by the output file name.

        :param entries: The entries to serialize.
        :param output_file: Destination path, only its extension is used.
        :return: The serialized content.
        :raises ValueError: If the extension is not supported.
        """
        data = [entry.model_dump() for entry in entries]
        _, ext = os.path.splitext(output_file.lower())

        if ext in (".yml", ".yaml"):
            return yaml.safe_dump(data, default_flow_style=False, sort_keys=True)
        if ext == ".json":
            return json.dumps(data, indent=2, sort_keys=True)
        raise ValueError(f"unsupported file extension in output file: {output_file}")

    def write(self, targets: Iterable[ResolvedTarget], output_file: str) -> int:
        """
        Writes the exported targets to output_file.

        The content goes to a temporary file in the same directory first and
        is then renamed over the destination, so readers never see a partial file.

        :param targets: Resolved records, exported or not.
        :param output_file: Destination path.
        :return: Number of target groups written.
        """
        entries = self.convert(targets)
        content = self.serialize(entries, output_file)

        directory = os.path.dirname(os.path.abspath(output_file))
        fd, tmp_path = tempfile.mkstemp(prefix=".d2sd-", dir=directory)
        try:
            with os.fdopen(fd, "w") as f:
                f.write(content)
            os.chmod(tmp_path, 0o644)
            os.replace(tmp_path, output_file)
        except OSError:
            if os.path.exists(tmp_path):
                os.unlink(tmp_path)
            raise

        logger.debug(f"Wrote {len(entries)} targets to {output_file}")
        return len(entries)
