"""Tests for ClassResolver and the module-level convenience functions."""

import logging
import threading
from collections import OrderedDict

import pytest

import typeloader
from typeloader.exceptions import ClassNotResolvedError
from typeloader.resolver import ClassResolver
from typeloader.resolver import get_default_resolver
from typeloader.settings import SettingsPaths


class Target:
    pass


@pytest.fixture
def sentinels(sentinel):
    """Four distinct sources, one per accessor, all empty."""
    return {
        "context": sentinel("context"),
        "library": sentinel("library"),
        "additional": sentinel("additional"),
        "system": sentinel("system"),
    }


@pytest.fixture
def resolver(sentinels) -> ClassResolver:
    return ClassResolver(
        context_source=sentinels["context"],
        library_source=sentinels["library"],
        system_source=sentinels["system"],
    )


class TestClassResolution:
    @pytest.mark.parametrize("label", ["context", "library", "system"])
    def test_each_source_can_supply_the_class(self, sentinels, resolver, label):
        sentinels[label].classes["pkg.Target"] = Target

        cls, supplied_by = resolver.resolve_with_accessor("pkg.Target")

        assert cls is Target
        assert supplied_by == label

    def test_only_the_override_resolves(self, sentinels, resolver):
        sentinels["additional"].classes["pkg.Target"] = Target

        with typeloader.additional_source(sentinels["additional"]):
            cls, supplied_by = resolver.resolve_with_accessor("pkg.Target")

        assert cls is Target
        assert supplied_by == "additional"
        assert sentinels["context"].class_lookups == ["pkg.Target"]
        assert sentinels["system"].class_lookups == []

    def test_earlier_source_shadows_later_ones(self, sentinels, resolver):
        class Shadow:
            pass

        sentinels["library"].classes["pkg.Target"] = Shadow
        sentinels["system"].classes["pkg.Target"] = Target

        assert resolver.for_name("pkg.Target") is Shadow

    @pytest.mark.parametrize("keyword,expected", [("int", int), ("boolean", bool), ("double", float)])
    def test_primitive_fallback(self, resolver, keyword, expected):
        assert resolver.resolve_with_accessor(keyword) == (expected, "primitive")

    def test_sources_win_over_primitive_table(self, sentinels, resolver):
        sentinels["context"].classes["int"] = Target
        assert resolver.for_name("int") is Target

    def test_exhaustion_raises_with_requested_name(self, sentinels, resolver):
        with pytest.raises(ClassNotResolvedError) as exc_info:
            resolver.for_name("pkg.Missing")

        assert exc_info.value.name == "pkg.Missing"
        assert "[pkg.Missing]" in str(exc_info.value)
        assert "exhausted" in str(exc_info.value)
        assert sentinels["context"].class_lookups == ["pkg.Missing"]
        # The library source is also the additional accessor's fallback
        assert sentinels["library"].class_lookups == ["pkg.Missing", "pkg.Missing"]
        assert sentinels["system"].class_lookups == ["pkg.Missing"]

    def test_failing_sources_are_skipped(self, exploding, sentinel):
        system = sentinel("system", classes={"pkg.Target": Target})
        resolver = ClassResolver(context_source=exploding, library_source=exploding, system_source=system)

        assert resolver.resolve_with_accessor("pkg.Target") == (Target, "system")

    def test_provider_callables_are_accepted(self, sentinel):
        calls = []

        def provider():
            calls.append(1)
            return sentinel("context", classes={"pkg.Target": Target})

        resolver = ClassResolver(context_source=provider)

        assert resolver.for_name("pkg.Target") is Target
        assert calls == [1]

    def test_default_chain_uses_import_system(self):
        assert ClassResolver().resolve_with_accessor("collections.OrderedDict") == (OrderedDict, "context")

    def test_default_chain_finds_path_only_classes_via_override(self, sample_root):
        resolver = ClassResolver()
        assert not resolver.is_available("tlsample.widgets.Widget")

        with typeloader.additional_source(typeloader.PathSource([sample_root])):
            cls, supplied_by = resolver.resolve_with_accessor("tlsample.widgets.Widget")

        assert cls.__name__ == "Widget"
        assert supplied_by == "additional"


class TestThreadIsolation:
    def test_override_on_one_thread_is_invisible_on_another(self, sentinel, resolver):
        override = sentinel("override", classes={"pkg.Target": Target})
        override_set = threading.Event()
        checked = threading.Event()
        results: dict[str, bool] = {}

        def thread_a():
            typeloader.set_additional_source(override)
            override_set.set()
            checked.wait(timeout=5)
            results["a_with_override"] = resolver.is_available("pkg.Target")
            typeloader.remove_additional_source()
            results["a_after_clear"] = resolver.is_available("pkg.Target")

        def thread_b():
            override_set.wait(timeout=5)
            results["b"] = resolver.is_available("pkg.Target")
            checked.set()

        threads = [threading.Thread(target=thread_a), threading.Thread(target=thread_b)]
        for t in threads:
            t.start()
        for t in threads:
            t.join(timeout=10)

        assert results == {"a_with_override": True, "b": False, "a_after_clear": False}


class TestResources:
    def test_first_source_with_resource_wins(self, sentinels, resolver):
        sentinels["library"].resources["conf/app.yaml"] = b"library"
        sentinels["system"].resources["conf/app.yaml"] = b"system"

        assert resolver.get_resource_as_stream("conf/app.yaml").read() == b"library"

    def test_override_supplies_resource(self, sentinels, resolver):
        sentinels["additional"].resources["conf/app.yaml"] = b"override"

        with typeloader.additional_source(sentinels["additional"]):
            assert resolver.get_resource_as_stream("conf/app.yaml").read() == b"override"

    @pytest.mark.parametrize("name", ["conf/missing.yaml", "int", "", "../../etc/passwd"])
    def test_miss_returns_none_without_error(self, sentinels, resolver, name):
        assert resolver.get_resource_as_stream(name) is None
        assert sentinels["system"].resource_lookups == [name]

    def test_failing_sources_return_none(self, exploding):
        resolver = ClassResolver(context_source=exploding, library_source=exploding, system_source=exploding)
        assert resolver.get_resource_as_stream("conf/app.yaml") is None


class TestAvailability:
    @pytest.mark.parametrize("name", ["pkg.Missing", "not a class name!", "", "..."])
    def test_unknown_or_invalid_names(self, resolver, name):
        assert resolver.is_available(name) is False

    def test_known_names(self, sentinels, resolver):
        sentinels["system"].classes["pkg.Target"] = Target
        assert resolver.is_available("pkg.Target") is True
        assert resolver.is_available("void") is True

    def test_not_available_path_logs_nothing_above_debug(self, resolver, caplog):
        with caplog.at_level(logging.DEBUG, logger="typeloader"):
            resolver.is_available("pkg.Missing")

        assert all(r.levelno <= logging.DEBUG for r in caplog.records)

    def test_with_real_sources(self):
        resolver = ClassResolver()
        assert resolver.is_available("collections.OrderedDict")
        assert not resolver.is_available("definitely_not_installed_pkg.Thing")
        assert not resolver.is_available("not a name")


class TestNewInstance:
    def test_by_name_creates_distinct_instances(self, sentinels, resolver):
        sentinels["context"].classes["pkg.Target"] = Target

        first = resolver.new_instance("pkg.Target")
        second = resolver.new_instance("pkg.Target")

        assert isinstance(first, Target)
        assert first is not second

    def test_by_name_unknown(self, resolver):
        with pytest.raises(ClassNotResolvedError):
            resolver.new_instance("pkg.Missing")

    def test_by_type(self, resolver):
        assert resolver.new_instance(OrderedDict) == OrderedDict()

    def test_primitive_keyword(self, resolver):
        assert resolver.new_instance("int") == 0


class TestDefaultResolver:
    def test_singleton_until_reset(self):
        first = get_default_resolver()
        assert get_default_resolver() is first

        typeloader.reset_default_resolver()

        assert get_default_resolver() is not first

    def test_built_from_settings(self, tmp_path, monkeypatch, sample_root):
        monkeypatch.setattr(
            "typeloader.resolver.load_settings",
            lambda: typeloader.settings.load_settings(
                SettingsPaths(tmp_path / "none.yaml", tmp_path / "none.yaml"),
                environ={"TYPELOADER_PATH": str(sample_root)},
            ),
        )

        assert typeloader.for_name("tlsample.widgets.Widget").__name__ == "Widget"
        assert typeloader.is_available("tlsample.widgets.Gadget")
        with typeloader.get_resource_as_stream("tlsample/data/config.txt") as stream:
            assert stream.read() == b"answer=42\n"
        assert typeloader.new_instance("tlsample.widgets.Widget", "knob").name == "knob"

    def test_module_functions(self):
        assert typeloader.for_name("collections.OrderedDict") is OrderedDict
        assert typeloader.is_available("long")
        assert typeloader.get_resource_as_stream("no/such/resource.txt") is None
