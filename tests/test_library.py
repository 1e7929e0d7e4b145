"""Tests for the component/style library index and its cache."""

from __future__ import annotations

from designdiff.library import LibraryIndexCache, find_component, index_library
from designdiff.models import DocumentNode, DocumentSnapshot, LibraryComponent, LibraryStyle


def _snapshot(version: str | None = "100") -> DocumentSnapshot:
    return DocumentSnapshot(
        name="Design System",
        version=version,
        document=DocumentNode(id="0:0", name="Document", type="DOCUMENT"),
        components={
            "b1": LibraryComponent(key="b1", name="Button/Size=Small, State=Default", description="CTA"),
            "b2": LibraryComponent(key="b2", name="Button/Size=Large, State=Hover"),
            "b3": LibraryComponent(key="b3", name="Button/Size=Small, State=Hover"),
            "a1": LibraryComponent(key="a1", name="Avatar"),
            "ib": LibraryComponent(key="ib", name="Icon Button"),
        },
        styles={
            "s1": LibraryStyle(key="s1", name="Brand/Primary", style_type="FILL"),
            "s2": LibraryStyle(key="s2", name="Body", style_type="TEXT"),
            "s3": LibraryStyle(key="s3", name="Brand/Secondary", style_type="FILL"),
        },
    )


class TestIndexLibrary:
    def test_groups_variants_by_base_name(self):
        index = index_library(_snapshot(), "KEY1")
        assert [c.name for c in index.components] == ["Avatar", "Button", "Icon Button"]

        button = index.components[1]
        assert button.key == "b1"
        assert button.description == "CTA"
        assert button.variants == {"Size": ["Large", "Small"], "State": ["Default", "Hover"]}
        assert button.default_variant == {"Size": "Small", "State": "Default"}

        avatar = index.components[0]
        assert avatar.variants == {}
        assert avatar.default_variant is None

    def test_styles_by_type(self):
        index = index_library(_snapshot(), "KEY1")
        assert index.styles == {"fill": ["Brand/Primary", "Brand/Secondary"], "text": ["Body"]}

    def test_metadata(self):
        index = index_library(_snapshot(), "KEY1")
        assert index.file_key == "KEY1"
        assert index.file_name == "Design System"
        assert index.version_id == "100"
        assert index_library(_snapshot(), "KEY1", "200").version_id == "200"


class TestFindComponent:
    def test_exact_before_partial(self):
        index = index_library(_snapshot(), "KEY1")
        assert find_component(index, "button").name == "Button"
        assert find_component(index, "icon").name == "Icon Button"
        assert find_component(index, "Tooltip") is None


class TestLibraryIndexCache:
    def test_get_or_build_reuses_entries(self):
        cache = LibraryIndexCache()
        snapshot = _snapshot()
        first = cache.get_or_build(snapshot, "KEY1", "100")
        second = cache.get_or_build(snapshot, "KEY1", "100")
        assert first is second
        assert len(cache) == 1
        assert ("KEY1", "100") in cache

    def test_versions_are_separate(self):
        cache = LibraryIndexCache()
        cache.get_or_build(_snapshot(), "KEY1", "100")
        cache.get_or_build(_snapshot(), "KEY1", "101")
        assert len(cache) == 2

    def test_evicts_least_recently_used(self):
        cache = LibraryIndexCache(max_entries=2)
        snapshot = _snapshot()
        cache.get_or_build(snapshot, "A", "1")
        cache.get_or_build(snapshot, "B", "1")
        cache.get("A", "1")
        cache.get_or_build(snapshot, "C", "1")
        assert ("A", "1") in cache
        assert ("B", "1") not in cache
        assert ("C", "1") in cache

    def test_clear(self):
        cache = LibraryIndexCache()
        cache.get_or_build(_snapshot(), "KEY1", "100")
        cache.clear()
        assert len(cache) == 0
        assert cache.get("KEY1", "100") is None
