"""Tests for dependency resolution.

The fetcher is replaced by a fake that populates the destination directory
from a table of URLs, so no network or git is involved.
"""

import json
from pathlib import Path
from typing import Any, Optional

import pytest

from cfactory.errors import DependencyError
from cfactory.project.descriptor import ProjectRegistry, SourceEntry
from cfactory.project.parser import parse_project_descriptor
from cfactory.project.resolver import DependencyResolver, find_first_unresolved


class FakeFetcher:
    """Fetches from a dict of url -> descriptor content (None means the URL fails)."""

    def __init__(self, sites: dict[str, Optional[dict[str, Any]]]):
        self.sites = sites
        self.calls: list[tuple[str, Path]] = []

    def fetch(self, url: str, destination: Path) -> bool:
        self.calls.append((url, destination))
        descriptor = self.sites.get(url)
        if descriptor is None:
            # Leave some debris behind, like a half-finished clone
            (destination / "partial").write_text("x")
            return False
        destination.mkdir(parents=True, exist_ok=True)
        (destination / "factory.json").write_text(json.dumps(descriptor), encoding="utf-8")
        return True


def load(node, registry):
    return parse_project_descriptor(node, registry, is_root=True, file_name="factory.json")


@pytest.fixture
def registry():
    return ProjectRegistry()


REMOTE_LIB = {"name": "remote", "type": "library", "sources": "src/*.c", "headers": "include", "stdlib": "math"}


class TestResolveAll:
    def test_fetch_and_merge(self, tmp_path, registry):
        root = load({"name": "app", "sources": "main.c", "depends": [{"name": "remote", "url": "https://example.com/remote.git"}]}, registry)
        fetcher = FakeFetcher({"https://example.com/remote.git": REMOTE_LIB})

        resolved = DependencyResolver(registry, tmp_path, Path("ext"), fetcher).resolve_all(root)

        (remote,) = root.depends
        assert resolved == [remote]
        assert remote.path == "ext/remote"
        assert remote.sources == [SourceEntry("src", "*.c")]
        assert remote.headers == ["include"]
        assert remote.stdlib_mask == 0b010
        assert not remote.unresolved
        assert find_first_unresolved(root) is None
        assert fetcher.calls == [("https://example.com/remote.git", tmp_path / "ext" / "remote")]

    def test_nothing_to_resolve(self, tmp_path, registry):
        root = load({"name": "app", "sources": "main.c"}, registry)
        fetcher = FakeFetcher({})
        assert DependencyResolver(registry, tmp_path, Path("ext"), fetcher).resolve_all(root) == []
        assert fetcher.calls == []

    def test_fixed_name_used_for_folder(self, tmp_path, registry):
        root = load({"name": "app", "sources": "main.c", "depends": [{"name": "my lib", "url": "u"}]}, registry)
        fetcher = FakeFetcher({"u": dict(REMOTE_LIB, name="my lib")})

        DependencyResolver(registry, tmp_path, Path("ext"), fetcher).resolve_all(root)

        assert root.depends[0].path == "ext/my_lib"
        assert (tmp_path / "ext" / "my_lib" / "factory.json").is_file()

    def test_url_fallback_order(self, tmp_path, registry):
        root = load({"name": "app", "sources": "main.c", "depends": [{"name": "remote", "url": ["bad1", "bad2", "good"]}]}, registry)
        fetcher = FakeFetcher({"bad1": None, "bad2": None, "good": REMOTE_LIB})

        DependencyResolver(registry, tmp_path, Path("ext"), fetcher).resolve_all(root)

        assert [url for url, _ in fetcher.calls] == ["bad1", "bad2", "good"]
        assert not (tmp_path / "ext" / "remote" / "partial").exists()

    def test_all_urls_fail(self, tmp_path, registry):
        root = load({"name": "app", "sources": "main.c", "depends": [{"name": "remote", "url": ["bad1", "bad2"]}]}, registry)
        fetcher = FakeFetcher({"bad1": None, "bad2": None})

        with pytest.raises(DependencyError, match="no working source location") as exc_info:
            DependencyResolver(registry, tmp_path, Path("ext"), fetcher).resolve_all(root)

        assert exc_info.value.project_name == "remote"
        assert len(fetcher.calls) == 2

    def test_no_url(self, tmp_path, registry):
        root = load({"name": "app", "sources": "main.c", "depends": [{"name": "remote", "sources": "a.c"}]}, registry)

        with pytest.raises(DependencyError, match="contains no URL"):
            DependencyResolver(registry, tmp_path, Path("ext"), FakeFetcher({})).resolve_all(root)

    def test_already_fetched_folder_reused(self, tmp_path, registry, write_descriptor):
        write_descriptor(tmp_path / "ext" / "remote", REMOTE_LIB)
        root = load({"name": "app", "sources": "main.c", "depends": [{"name": "remote", "url": "u"}]}, registry)
        fetcher = FakeFetcher({})

        DependencyResolver(registry, tmp_path, Path("ext"), fetcher).resolve_all(root)

        assert fetcher.calls == []
        assert root.depends[0].headers == ["include"]

    def test_folder_without_descriptor_is_refetched(self, tmp_path, registry):
        (tmp_path / "ext" / "remote").mkdir(parents=True)
        (tmp_path / "ext" / "remote" / "stale.txt").write_text("x")
        root = load({"name": "app", "sources": "main.c", "depends": [{"name": "remote", "url": "u"}]}, registry)
        fetcher = FakeFetcher({"u": REMOTE_LIB})

        DependencyResolver(registry, tmp_path, Path("ext"), fetcher).resolve_all(root)

        assert len(fetcher.calls) == 1

    def test_malformed_nested_descriptor(self, tmp_path, registry):
        root = load({"name": "app", "sources": "main.c", "depends": [{"name": "remote", "url": "u"}]}, registry)
        fetcher = FakeFetcher({"u": {"name": "remote", "type": "library", "headers": "include"}})

        with pytest.raises(DependencyError, match="remote") as exc_info:
            DependencyResolver(registry, tmp_path, Path("ext"), fetcher).resolve_all(root)

        assert "ext/remote/factory.json" in str(exc_info.value)

    def test_nested_descriptor_read_from_fetched_folder(self, tmp_path, registry, write_descriptor):
        write_descriptor(tmp_path / "ext" / "remote", dict(REMOTE_LIB, sources="lib/*.c"))
        root = load({"name": "app", "sources": "main.c", "depends": [{"name": "remote", "type": "library", "url": "u"}]}, registry)

        DependencyResolver(registry, tmp_path, Path("ext"), FakeFetcher({})).resolve_all(root)

        (remote,) = root.depends
        assert remote.path == "ext/remote"
        assert remote.sources == [SourceEntry("lib", "*.c")]

    def test_complete_local_dependency_untouched(self, tmp_path, registry):
        root = load(
            {"name": "app", "sources": "main.c", "depends": [{"name": "local", "path": "libs/local", "sources": "local.c", "headers": "."}]},
            registry,
        )
        fetcher = FakeFetcher({})

        resolved = DependencyResolver(registry, tmp_path, Path("ext"), fetcher).resolve_all(root)

        assert resolved == []
        assert root.depends[0].path == "libs/local"
        assert fetcher.calls == []

    def test_nested_dependencies_share_registry(self, tmp_path, registry):
        root = load(
            {
                "name": "app",
                "sources": "main.c",
                "depends": [
                    {"name": "shared", "url": "shared-url"},
                    {"name": "remote", "url": "remote-url"},
                ],
            },
            registry,
        )
        remote = dict(REMOTE_LIB, depends=[{"name": "shared", "url": "ignored"}])
        shared = {"name": "shared", "type": "library", "sources": "s.c", "headers": "."}
        fetcher = FakeFetcher({"remote-url": remote, "shared-url": shared})

        DependencyResolver(registry, tmp_path, Path("ext"), fetcher).resolve_all(root)

        shared_project, remote_project = root.depends
        assert remote_project.depends == [shared_project]
        assert [url for url, _ in fetcher.calls] == ["shared-url", "remote-url"]

    def test_header_only_library(self, tmp_path, registry):
        root = load({"name": "app", "sources": "main.c", "depends": [{"name": "hdr", "headers": "include", "url": "u"}]}, registry)
        fetcher = FakeFetcher({"u": {"name": "hdr", "sources": "unused.c"}})

        DependencyResolver(registry, tmp_path, Path("ext"), fetcher).resolve_all(root)

        hdr = root.depends[0]
        assert hdr.sources == []
        assert not hdr.unresolved

    def test_still_incomplete_after_fetch(self, tmp_path, registry):
        root = load(
            {"name": "app", "sources": "main.c", "depends": [{"name": "tool", "type": "application", "headers": "include", "url": "u"}]},
            registry,
        )
        fetcher = FakeFetcher({"u": {"name": "tool", "sources": "tool.c"}})

        with pytest.raises(DependencyError, match="contains unresolved dependencies"):
            DependencyResolver(registry, tmp_path, Path("ext"), fetcher).resolve_all(root)


def test_find_first_unresolved_is_preorder(registry):
    root = load(
        {
            "name": "app",
            "sources": "main.c",
            "depends": [
                {"name": "a", "path": "a", "sources": "a.c", "headers": ".", "depends": [{"name": "a1", "url": "u"}]},
                {"name": "b", "url": "u"},
            ],
        },
        registry,
    )
    assert find_first_unresolved(root).name == "a1"
