"""Tests for zenhance.registry — registry and render-cycle helpers."""

import pytest

from zenhance.errors import ConfigurationError
from zenhance.registry import HeadLink, HeadScript, Registry, TagAccumulator


class TestHeadScript:
    def test_render(self) -> None:
        scripts = HeadScript()
        scripts.append("/js/app.js")
        assert str(scripts.render()) == (
            '<script type="text/javascript" src="/js/app.js"></script>'
        )

    def test_duplicate_url_keeps_position_and_last_attributes(self) -> None:
        scripts = HeadScript()
        scripts.append("/a.js")
        scripts.append("/b.js")
        scripts.append("/a.js", defer="defer")
        rendered = str(scripts.render())
        assert rendered.index("/a.js") < rendered.index("/b.js")
        assert rendered.count("/a.js") == 1
        assert 'defer="defer"' in rendered

    def test_init_clears(self) -> None:
        scripts = HeadScript()
        scripts.append("/a.js")
        scripts.init()
        assert len(scripts) == 0
        assert str(scripts.render()) == ""

    def test_attributes_are_escaped(self) -> None:
        scripts = HeadScript()
        scripts.append('/a.js?x="1"')
        assert "&quot;1&quot;" in str(scripts.render())


class TestHeadLink:
    def test_void_tag_with_defaults(self) -> None:
        links = HeadLink()
        links.append("/css/site.css", media="print", class_="theme")
        rendered = str(links.render())
        assert rendered.startswith("<link ")
        assert "</link>" not in rendered
        assert 'rel="stylesheet"' in rendered
        assert 'media="print"' in rendered
        assert 'class="theme"' in rendered

    def test_attrs_mapping_and_override(self) -> None:
        links = HeadLink()
        links.set("/favicon.ico", {"rel": "icon", "data-x": "1"})
        rendered = str(links.render())
        assert 'rel="icon"' in rendered
        assert 'data-x="1"' in rendered


class TestRegistry:
    def test_set_and_get(self) -> None:
        registry = Registry()
        registry.set("db", "handle")
        assert registry.get("db") == "handle"
        assert "db" in registry
        assert registry.get("missing", 1) == 1

    @pytest.mark.parametrize("name", ["head_script", "head_link", "helpers"])
    def test_reserved_names(self, name: str) -> None:
        with pytest.raises(ConfigurationError):
            Registry().set(name, object())

    def test_cycles_are_isolated(self) -> None:
        registry = Registry()
        first = registry.new_cycle()
        second = registry.new_cycle()
        first.head_script.append("/a.js")
        assert len(second.head_script) == 0
        assert first["head_script"] is not second["head_script"]

    def test_custom_helper(self) -> None:
        class MetaTags(TagAccumulator):
            tag = "meta"
            url_attribute = "content"
            void = True

        registry = Registry()
        registry.register_helper("head_meta", MetaTags)
        helpers = registry.new_cycle()
        helpers.head_meta.append("width=device-width", name="viewport")
        assert "head_meta" in registry.reserved
        assert 'name="viewport"' in str(helpers.snapshot()["head_meta"]())

    def test_custom_helper_name_conflict(self) -> None:
        with pytest.raises(ConfigurationError):
            Registry().register_helper("head_link", HeadLink)

    def test_snapshot_renders_late(self) -> None:
        helpers = Registry().new_cycle()
        render = helpers.snapshot()["head_link"]
        helpers.head_link.append("/late.css")
        assert "/late.css" in str(render())

    def test_helper_set_attribute_errors(self) -> None:
        helpers = Registry().new_cycle()
        with pytest.raises(AttributeError):
            _ = helpers.nothing
