"""Descriptor parser.

Turns the JSON content of a ``factory.json`` file into a graph of
ProjectDescriptor instances. Dependencies are nested descriptor objects;
two references to the same project name anywhere in the graph yield the
same instance, taken from the ProjectRegistry.

Descriptor keys:
    name                  required string, identity of the project
    description, author   optional strings
    type                  "application" | "library"
    sources               string or list of "subdir/file" entries (wildcards allowed)
    headers               string or list of include directories
    depends, dependencies list of nested descriptor objects
    path                  project location
    url                   string or list of remote locations
    stdlib                string or list of names from the StandardLibrary table
"""

import json
import logging
from pathlib import Path
from typing import Any, Optional

from ..errors import FormatError
from .descriptor import (
    ProjectDescriptor,
    ProjectRegistry,
    ProjectType,
    SourceEntry,
    normalize_separators,
)
from .stdlib_names import parse_stdlib_name

logger = logging.getLogger(__name__)


def read_descriptor_file(file_path: Path) -> Any:
    """Read a descriptor file and return its parsed JSON content.

    Args:
        file_path: Path to the descriptor file

    Returns:
        The decoded JSON value (normally a dict)

    Raises:
        FormatError: If the file can't be read, is not UTF-8 or is not valid JSON
    """
    file_name = str(file_path)
    try:
        raw = file_path.read_bytes()
    except OSError as e:
        raise FormatError(f"can't open file: {e.strerror or e}", file_name) from e

    try:
        text = raw.decode("utf-8-sig")
    except UnicodeDecodeError as e:
        raise FormatError("the file is not encoded by UTF-8", file_name) from e

    try:
        return json.loads(text)
    except json.JSONDecodeError as e:
        raise FormatError(f"the file can't be parsed, {e.msg} (line {e.lineno}, column {e.colno})", file_name) from e


class DescriptorParser:
    """Parses descriptor JSON into registry-backed ProjectDescriptor graphs.

    One parser is bound to one descriptor file (for diagnostics) and to the
    run's registry (for deduplication).
    """

    def __init__(self, registry: ProjectRegistry, file_name: str = ""):
        self.registry = registry
        self.file_name = file_name

    def _error(self, message: str) -> FormatError:
        return FormatError(message, self.file_name)

    def parse(self, node: Any, is_root: bool, is_temporary: bool = False) -> ProjectDescriptor:
        """Parse one descriptor object and, recursively, its dependencies.

        Args:
            node: Decoded JSON value of the descriptor
            is_root: True for the top-level descriptor of a file
            is_temporary: True to build a throwaway descriptor that is never
                registered (its fields are donated to another descriptor)

        Returns:
            The descriptor; for a known name, the already registered instance

        Raises:
            FormatError: If a field is missing or malformed
        """
        if not isinstance(node, dict):
            raise self._error("invalid format, expected a JSON object that contains a project descriptor")

        name = node.get("name")
        if not isinstance(name, str):
            raise self._error("the project descriptor does not contain a name")

        if not is_temporary:
            existing = self.registry.get(name)
            if existing is not None:
                return existing

        project = ProjectDescriptor(name=name, type=self._parse_type(node, is_root))
        # Registered before the dependencies are parsed so that a reference
        # back to this name further down the tree resolves to this instance.
        if not is_temporary:
            self.registry.register(project)

        description = node.get("description")
        if isinstance(description, str):
            project.description = description
        author = node.get("author")
        if isinstance(author, str):
            project.author = author

        project.sources = [SourceEntry.from_string(s) for s in self._string_list(node, "sources", "the source files list contains a bad filename")]
        project.headers = [
            normalize_separators(h) for h in self._string_list(node, "headers", "the headers list contains a bad folder name")
        ]
        project.depends = self._parse_depends(node)

        path = node.get("path")
        if isinstance(path, str):
            if not path:
                raise self._error("the project path is incorrect")
            project.path = normalize_separators(path)

        project.url = self._string_list(node, "url", "the project URL is incorrect")
        project.stdlib_mask = self._parse_stdlib(node)

        self._check_completeness(project, is_root)
        logger.debug("Parsed %r from %s", project, self.file_name or "<memory>")
        return project

    def _parse_type(self, node: dict, is_root: bool) -> ProjectType:
        if "type" not in node:
            return ProjectType.APPLICATION if is_root else ProjectType.LIBRARY
        value = node["type"]
        try:
            if isinstance(value, str):
                return ProjectType(value)
        except ValueError:
            pass
        raise self._error(f"the project descriptor contains unsupported project type: '{value}'")

    def _string_list(self, node: dict, key: str, bad_item_message: str) -> list[str]:
        """Read a key that holds either one string or a list of strings.

        Non-string list items are skipped; an empty string is rejected.
        """
        value = node.get(key)
        if value is None:
            return []
        if isinstance(value, str):
            items = [value]
        elif isinstance(value, list):
            items = [item for item in value if isinstance(item, str)]
        else:
            logger.debug("Ignoring '%s' of type %s in %s", key, type(value).__name__, self.file_name)
            return []
        if any(not item for item in items):
            raise self._error(bad_item_message)
        return items

    def _parse_depends(self, node: dict) -> list[ProjectDescriptor]:
        value = node.get("depends")
        if value is None:
            value = node.get("dependencies")
        if value is None:
            return []
        if not isinstance(value, list):
            raise self._error("invalid format, expected a list of dependencies")
        return [self.parse(child, is_root=False) for child in value]

    def _parse_stdlib(self, node: dict) -> int:
        mask = 0
        for library_name in self._string_list(node, "stdlib", "the standard library list contains an empty name"):
            library = parse_stdlib_name(library_name)
            if library is None:
                raise self._error(f"unknown standard library '{library_name}'")
            mask |= library.bit
        return mask

    def _check_completeness(self, project: ProjectDescriptor, is_root: bool) -> None:
        """Apply defaults and decide whether the project still needs resolving.

        A project whose location is known must be complete; one without a
        location is allowed to be incomplete and is marked unresolved.
        """
        if project.path is None:
            if is_root:
                project.path = "."
            else:
                project.unresolved = True

        if not project.sources:
            if project.path is not None:
                raise self._error("the project descriptor does not contain a list of source files")
            project.unresolved = True

        if project.is_library and not project.headers:
            if project.path is not None:
                raise self._error("the library project descriptor does not contain a list of headers")
            project.unresolved = True


def parse_project_descriptor(
    node: Any,
    registry: ProjectRegistry,
    is_root: bool,
    is_temporary: bool = False,
    file_name: str = "",
) -> ProjectDescriptor:
    """Convenience wrapper around DescriptorParser.parse()."""
    return DescriptorParser(registry, file_name).parse(node, is_root=is_root, is_temporary=is_temporary)


def load_project_file(
    file_path: Path,
    registry: ProjectRegistry,
    is_temporary: bool = False,
    display_name: Optional[str] = None,
) -> ProjectDescriptor:
    """Read a descriptor file and parse its root project.

    Args:
        file_path: Path to the descriptor file
        registry: Registry shared by the whole run
        is_temporary: Parse the root as a temporary (unregistered) descriptor
        display_name: File name to use in diagnostics (defaults to file_path)

    Returns:
        The root project descriptor

    Raises:
        FormatError: If the file can't be read or the descriptor is malformed
    """
    root = read_descriptor_file(file_path)
    parser = DescriptorParser(registry, display_name or str(file_path))
    return parser.parse(root, is_root=True, is_temporary=is_temporary)
