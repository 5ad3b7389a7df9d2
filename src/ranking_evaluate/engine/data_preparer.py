"""Loading a corpus into every configuration version of the platform."""

import logging
from pathlib import Path
from typing import List, Tuple

from ..platform import SearchPlatform

logger = logging.getLogger(__name__)

INDEX_SHAPE_FILENAME = "index-shape.json"


def index_fqdn(index_name: str, version: str) -> str:
    """Version-qualified index name used when talking to the platform."""
    return f"{index_name}_{version}".lower()


def _visible(path: Path) -> bool:
    return not path.name.startswith(".")


class DataPreparer:
    """
    Each immediate subfolder of the configurations root is one version. Inside
    a version, a folder named like the index or an index-shape.json file
    describes how to load that index.
    """

    def __init__(self, platform: SearchPlatform, configurations_folder: Path):
        self.platform = platform
        self.configurations_folder = Path(configurations_folder)

    def versions(self) -> List[Path]:
        if not self.configurations_folder.is_dir():
            logger.warning("Configurations folder %s not found, no versions available", self.configurations_folder)
            return []
        return sorted(d for d in self.configurations_folder.iterdir() if d.is_dir() and _visible(d))

    def definitions(self, index_name: str) -> List[Tuple[str, Path]]:
        """(version, file-or-folder) pairs describing index_name, in version order."""
        matches = []
        for version_folder in self.versions():
            for entry in sorted(version_folder.iterdir()):
                if not _visible(entry):
                    continue
                if (entry.is_dir() and entry.name == index_name) or (
                    entry.is_file() and entry.name == INDEX_SHAPE_FILENAME
                ):
                    matches.append((version_folder.name, entry))
        return matches

    def prepare(self, index_name: str, corpus_file: Path) -> List[str]:
        """Load corpus_file under every version and return the version names."""
        for version, definition in self.definitions(index_name):
            logger.info(
                "Loading the test collection into %s, configuration version %s",
                self.platform.name, version,
            )
            self.platform.load(corpus_file, definition, index_fqdn(index_name, version))

        logger.info("%s has been correctly loaded", self.platform.name)
        return [v.name for v in self.versions()]
