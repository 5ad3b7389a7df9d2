"""Query template resolution and placeholder substitution."""

import os
from pathlib import Path
from typing import Optional, Sequence, Tuple

from ..errors import ConfigurationError

VERSION_TOKEN = "${version}"


class QueryTemplateResolver:
    """
    Resolves query templates from a templates root.

    A template found in templates/<version>/ wins over templates/<name>, so a
    template can be shared by all versions or overridden per version. Names
    containing ${version} are expanded with the version being executed.
    """

    def __init__(self, templates_folder: Path):
        self.templates_folder = Path(templates_folder)

    def template_path(
        self,
        default_template: Optional[str],
        template: Optional[str],
        version: str,
    ) -> Path:
        name = template or default_template
        if not name:
            raise ConfigurationError("Unable to determine the query template: no template declared by the query or its group")
        name = name.replace(VERSION_TOKEN, version)
        versioned = self.templates_folder / version / name
        if versioned.is_file() and os.access(versioned, os.R_OK):
            return versioned
        return self.templates_folder / name

    def template(
        self,
        default_template: Optional[str],
        template: Optional[str],
        version: str,
    ) -> str:
        """Literal text of the template in use for version."""
        path = self.template_path(default_template, template, version)
        try:
            return path.read_text(encoding="utf-8")
        except OSError as e:
            raise ConfigurationError(f"Unable to read query template {path}: {e}") from e

    def query(
        self,
        default_template: Optional[str],
        template: Optional[str],
        placeholders: Sequence[Tuple[str, str]],
        version: str,
    ) -> str:
        """Template text with every placeholder replaced, in declaration order."""
        return substitute(self.template(default_template, template, version), placeholders)


def substitute(text: str, placeholders: Sequence[Tuple[str, str]]) -> str:
    """Replace each placeholder name once, in declaration order. No repeated passes."""
    for name, value in placeholders:
        text = text.replace(name, value)
    return text
