"""Tests for chaining settings files and merging their sections."""

import pytest
from layered_settings import ConfigError
from layered_settings import SettingItem
from layered_settings import SettingsFile
from layered_settings import connect_settings_files
from layered_settings import merge_settings_chain


def add(key, value):
    return SettingItem("add", {"key": key, "value": value})


class TestSettingsChain:
    """Test connect_settings_files and merge_sections_into."""

    @pytest.fixture
    def make_file(self, tmp_path, store, file_lock):
        def _make(name, is_machine_wide=False):
            return SettingsFile(tmp_path / name, is_machine_wide=is_machine_wide, store=store, file_lock=file_lock)

        return _make

    @pytest.fixture
    def chain(self, make_file):
        """A (closest) -> B -> C (machine-wide), all defining packageSources."""
        a = make_file("a")
        a.add_or_update("packageSources", add("shared", "from-a"))
        a.add_or_update("packageSources", add("only-a", "a"))

        b = make_file("b")
        b.add_or_update("packageSources", add("shared", "from-b"))
        b.add_or_update("packageSources", add("only-b", "b"))
        b.add_or_update("config", add("globalPackagesFolder", "/b/packages"))

        c = make_file("c")
        c.add_or_update("packageSources", add("shared", "from-c"))
        c.add_or_update("packageSources", add("only-c", "c"))

        return [a, b, c]

    # ===== Chain Construction Tests =====

    def test_connect_empty_list_is_noop(self):
        connect_settings_files([])

    def test_connect_single_file_is_noop(self, make_file):
        only = make_file("only")
        connect_settings_files([only])
        assert only.next is None

    def test_connect_points_toward_most_authoritative(self, chain):
        a, b, c = chain
        connect_settings_files(chain)

        assert a.next is None
        assert b.next is a
        assert c.next is b

    # ===== Merge Tests =====

    def test_merge_most_authoritative_wins(self, chain):
        a, b, c = chain
        connect_settings_files(chain)

        sections = {}
        c.merge_sections_into(sections)

        items = {item.key: item.attributes["value"] for item in sections["packageSources"]}
        assert items == {"shared": "from-a", "only-a": "a", "only-b": "b", "only-c": "c"}

    def test_merge_passes_through_single_side_sections(self, chain):
        connect_settings_files(chain)

        sections = {}
        chain[-1].merge_sections_into(sections)

        assert sections["config"].items == [add("globalPackagesFolder", "/b/packages")]

    def test_merge_from_middle_skips_less_authoritative(self, chain):
        a, b, c = chain
        connect_settings_files(chain)

        sections = {}
        b.merge_sections_into(sections)

        keys = [item.key for item in sections["packageSources"]]
        assert "only-c" not in keys
        assert set(keys) == {"shared", "only-a", "only-b"}

    def test_merge_replaces_whole_item(self, make_file):
        closest = make_file("closest")
        closest.add_or_update("config", add("proxy", "http://closest"))
        distant = make_file("distant")
        distant.add_or_update("config", SettingItem("add", {"key": "proxy", "value": "http://distant", "user": "bob"}))

        sections = merge_settings_chain([closest, distant])

        assert sections["config"].items == [add("proxy", "http://closest")]

    def test_merge_does_not_modify_sources(self, chain):
        connect_settings_files(chain)
        for settings_file in chain:
            settings_file.is_dirty = False
        before = [f.get_section("packageSources") for f in chain]

        sections = {}
        chain[-1].merge_sections_into(sections)
        sections["packageSources"].items[0].attributes["value"] = "mutated"
        sections["packageSources"].items.clear()

        assert [f.get_section("packageSources") for f in chain] == before
        assert all(f.is_dirty is False for f in chain)

    def test_merge_into_existing_target(self, make_file):
        settings = make_file("one")
        settings.add_or_update("config", add("a", "file"))

        existing = make_file("existing")
        existing.add_or_update("config", add("a", "target"))
        existing.add_or_update("config", add("b", "target"))
        sections = {}
        existing.merge_sections_into(sections)

        settings.merge_sections_into(sections)

        assert sections["config"].items == [add("a", "file"), add("b", "target")]

    def test_merge_order_independent_of_chain_length(self, make_file):
        files = []
        for i in range(6):
            settings = make_file(f"level{i}")
            settings.add_or_update("config", add("shared", f"level{i}"))
            settings.add_or_update("config", add(f"own{i}", str(i)))
            files.append(settings)

        sections = merge_settings_chain(files)

        items = {item.key: item.attributes["value"] for item in sections["config"]}
        assert items["shared"] == "level0"
        assert {f"own{i}" for i in range(6)} <= set(items)

    def test_merge_settings_chain_empty(self):
        assert merge_settings_chain([]) == {}

    def test_merge_detects_cycle(self, make_file):
        first = make_file("first")
        second = make_file("second")
        first.set_next_file(second)
        second.set_next_file(first)

        with pytest.raises(ConfigError, match="cycle"):
            first.merge_sections_into({})
