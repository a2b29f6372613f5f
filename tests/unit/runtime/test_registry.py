"""Unit tests for the static/dynamic tiers of vellum.runtime.registry."""

import datetime
import os
from unittest.mock import patch

import pytest

from tests.unit.sample_filters import upper_filter, wrap_filter
from vellum import FilterInfo, FilterRegistry, Handled, NOT_HANDLED, UndefinedFilterError
from vellum.exceptions import InvalidFilterCallbackError
from vellum.runtime import registry as registry_module


class TestRegistration:
    """Tests for register / unregister / list_names."""

    def test_register_stores_lowercase_name(self, registry):
        """Test that static names are canonicalized to lowercase."""
        registry.register("Upper", upper_filter)

        assert registry.list_names() == {"upper"}
        assert "UPPER" in registry
        assert "upper" in registry
        assert registry.get_entry("uPPer").name == "upper"

    def test_register_returns_registry_for_chaining(self, registry):
        """Test that register is fluent."""
        result = registry.register("a", upper_filter).register("b", upper_filter)

        assert result is registry
        assert registry.list_names() == {"a", "b"}

    def test_register_records_metadata(self, registry):
        """Test that registration metadata is kept on the entry."""
        registry.register("upper", upper_filter, module_name="my.filters")

        sources = registry.get_entry("upper").sources
        assert sources["module_name"] == "my.filters"
        assert isinstance(sources["registered_at"], datetime.datetime)

    def test_entry_starts_unclassified(self, registry):
        """Test that classification is deferred until first use."""
        registry.register("upper", upper_filter)

        entry = registry.get_entry("upper")
        assert entry.content_aware is None
        assert not entry.is_classified

        registry.resolve_classic("upper")
        assert entry.is_classified
        assert entry.content_aware is False

    @pytest.mark.parametrize("name", [None, ""])
    def test_empty_name_registers_dynamic_resolver(self, registry, name):
        """Test that an empty name adds a dynamic resolver instead of a static entry."""

        def resolver(filter_name, *args):
            return NOT_HANDLED

        registry.register(name, resolver)

        assert registry.list_names() == set()
        assert registry.dynamic_resolvers == (resolver,)

    def test_list_names_is_a_copy(self, populated_registry):
        """Test that mutating the returned set does not touch the registry."""
        names = populated_registry.list_names()
        names.add("bogus")

        assert "bogus" not in populated_registry

    def test_iteration_and_len(self, populated_registry):
        """Test iteration yields sorted names and len counts static entries only."""
        populated_registry.register(None, lambda name, *args: None)

        assert list(populated_registry) == ["upper", "wrap"]
        assert len(populated_registry) == 2

    def test_unregister(self, populated_registry):
        """Test that unregister drops the entry and its memoized wrapper."""
        populated_registry.resolve_classic("upper")
        populated_registry.unregister("UPPER")

        assert "upper" not in populated_registry
        with pytest.raises(UndefinedFilterError):
            populated_registry.resolve_classic("upper")("abc")

    def test_unregister_unknown_name_is_silent(self, registry):
        """Test that unregistering an unknown name does nothing."""
        registry.unregister("missing")
        assert len(registry) == 0


class TestClassicResolution:
    """Tests for resolve_classic memoization and invalidation."""

    def test_classic_filter_end_to_end(self, registry):
        """Test the upper scenario: both casings share one memoized wrapper."""
        registry.register("upper", upper_filter)

        assert registry.resolve_classic("upper")("abc") == "ABC"
        assert registry.resolve_classic("UPPER")("xyz") == "XYZ"
        assert registry.resolve_classic("UPPER") is registry.resolve_classic("upper")

    def test_classic_wrapper_is_the_callback(self, registry):
        """Test that a classic filter is returned unwrapped."""
        registry.register("upper", upper_filter)

        assert registry.resolve_classic("upper") is upper_filter

    def test_resolve_twice_is_idempotent(self, populated_registry):
        """Test that repeated lookups return the same wrapper and results."""
        first = populated_registry.resolve_classic("wrap")
        second = populated_registry.resolve_classic("wrap")

        assert first is second
        assert first("x") == second("x")

    def test_reregistering_invalidates_memoized_wrapper(self, registry):
        """Test that a new callback under an existing name replaces the cached one."""
        registry.register("greet", lambda value: f"hello {value}")
        assert registry.resolve_classic("greet")("bob") == "hello bob"

        registry.register("GREET", lambda value: f"bye {value}")

        assert registry.resolve_classic("greet")("bob") == "bye bob"

    def test_item_access(self, populated_registry):
        """Test the filters["upper"](x) style."""
        assert populated_registry["upper"]("abc") == "ABC"
        assert populated_registry["UPPER"]("abc") == "ABC"

    @pytest.mark.parametrize("name", ["name", "register", "list_names", "dynamic_resolvers"])
    def test_filter_names_do_not_collide_with_registry_members(self, registry, name):
        """Test that filters named like registry members stay reachable and leave the members intact."""
        member = getattr(registry, name)
        registry.register(name, lambda value: value.upper())

        assert registry[name]("abc") == "ABC"
        assert getattr(registry, name) == member

    def test_attributes_are_not_filters(self, populated_registry):
        """Test that attribute access never resolves filters."""
        with pytest.raises(AttributeError):
            populated_registry.upper  # noqa: B018

    def test_keyword_arguments_are_forwarded(self, registry):
        """Test that keyword arguments reach classic filters."""
        registry.register("pad", lambda value, width=0: value.ljust(width, "."))

        assert registry.resolve_classic("pad")("ab", width=4) == "ab.."

    def test_classification_happens_once(self, registry):
        """Test that classification is cached on the entry."""
        registry.register("upper", upper_filter)

        with patch.object(
            registry_module, "is_content_aware_callable", wraps=registry_module.is_content_aware_callable
        ) as mock_classify:
            registry.resolve_classic("upper")
            registry.invoke_content_aware("upper", FilterInfo(), "abc")
            registry.is_content_aware("upper")

        mock_classify.assert_called_once_with(upper_filter)


class TestCallbackForms:
    """Tests for string-encoded and pair callbacks."""

    def test_module_colon_function(self, registry):
        """Test 'module:function' callbacks."""
        registry.register("basename", "os.path:basename")

        assert registry["basename"]("/a/b.txt") == "b.txt"

    def test_dotted_function(self, registry):
        """Test dotted 'module.function' callbacks."""
        registry.register("basename", "os.path.basename")

        assert registry["basename"]("/a/b.txt") == "b.txt"

    def test_class_double_colon_method(self, registry):
        """Test 'module.Class::method' callbacks."""
        registry.register("isodate", "datetime.date::fromisoformat")

        assert registry["isodate"]("2024-01-02") == datetime.date(2024, 1, 2)

    def test_owner_method_pair(self, registry):
        """Test (owner, 'method') callbacks."""
        registry.register("upper", (str, "upper"))

        assert registry["upper"]("abc") == "ABC"

    def test_callable_object(self, registry):
        """Test that callable objects are accepted as classic filters."""

        class Repeat:
            def __call__(self, value, times=2):
                return value * times

        registry.register("repeat", Repeat())

        assert registry["repeat"]("ab", times=3) == "ababab"

    def test_unresolvable_callback_raises_on_first_use(self, registry):
        """Test that registration succeeds but resolution reports the bad callback."""
        registry.register("broken", "no_such_module_xyz:func")

        with pytest.raises(InvalidFilterCallbackError, match="Filter 'broken'") as exc_info:
            registry.resolve_classic("broken")

        assert exc_info.value.filter_name == "broken"

    def test_non_callable_target_raises(self, registry):
        """Test that resolving to a non-callable attribute is rejected."""
        registry.register("sep", "os.path:sep")

        with pytest.raises(InvalidFilterCallbackError, match="not callable"):
            registry.resolve_classic("sep")


class TestUndefinedFilters:
    """Tests for UndefinedFilterError and name suggestions."""

    def test_unknown_name_without_resolvers(self, registry):
        """Test the trim scenario: nothing registered, no suggestion."""
        wrapper = registry.resolve_classic("trim")

        with pytest.raises(UndefinedFilterError) as exc_info:
            wrapper("  x  ")

        assert exc_info.value.filter_name == "trim"
        assert exc_info.value.suggestion is None
        assert str(exc_info.value) == "Filter 'trim' is not defined."

    def test_suggestion_for_close_name(self, registry):
        """Test that a near miss suggests the registered name."""
        registry.register("trim", str.strip)

        with pytest.raises(UndefinedFilterError, match="did you mean 'trim'") as exc_info:
            registry.resolve_classic("trimm")("x")

        assert exc_info.value.suggestion == "trim"

    def test_suggestion_for_missing_letter(self, registry):
        """Test that 'uper' suggests 'upper'."""
        registry.register("upper", upper_filter)
        registry.register("lower", str.lower)

        with pytest.raises(UndefinedFilterError) as exc_info:
            registry.resolve_classic("uper")("x")

        assert exc_info.value.suggestion == "upper"
        assert str(exc_info.value) == "Filter 'uper' is not defined, did you mean 'upper'?"

    def test_tied_suggestions_follow_registration_order(self, registry):
        """Test that among equally close names the first registered one is suggested."""
        registry.register("abcy", upper_filter)
        registry.register("abcx", upper_filter)

        with pytest.raises(UndefinedFilterError) as exc_info:
            registry.resolve_classic("abcz")("x")

        assert exc_info.value.suggestion == "abcy"

    def test_no_suggestion_for_distant_name(self, registry):
        """Test that unrelated names produce no suggestion."""
        registry.register("upper", upper_filter)

        with pytest.raises(UndefinedFilterError) as exc_info:
            registry.resolve_classic("truncate")("x")

        assert exc_info.value.suggestion is None

    def test_error_raised_only_when_called(self, registry):
        """Test that resolving an unknown name never raises by itself."""
        wrapper = registry.resolve_classic("missing")

        assert callable(wrapper)
        assert registry.resolve_classic("MISSING") is wrapper


class TestDynamicResolution:
    """Tests for the dynamic resolver chain."""

    def test_resolver_receives_lowercase_name_and_arguments(self, registry, recording_resolver):
        """Test that the canonical name is prepended to the arguments."""
        calls = []
        registry.register(None, recording_resolver(calls, "A", handles={"shout": "handled"}))

        assert registry.resolve_classic("SHOUT")("abc", 1) == "handled"
        assert calls == [("A", "shout", ("abc", 1))]

    def test_most_recent_resolver_is_consulted_first(self, registry, recording_resolver):
        """Test that B (registered last) is consulted before A."""
        calls = []
        resolver_a = recording_resolver(calls, "A")
        resolver_b = recording_resolver(calls, "B")
        registry.register(None, resolver_a)
        registry.register(None, resolver_b)

        assert registry.dynamic_resolvers == (resolver_b, resolver_a)
        with pytest.raises(UndefinedFilterError):
            registry.resolve_classic("nothing")("x")

        assert [label for label, _, _ in calls] == ["B", "A"]

    def test_first_handling_resolver_wins(self, registry, recording_resolver):
        """Test that later resolvers are skipped once one handles the call."""
        calls = []
        registry.register(None, recording_resolver(calls, "A", handles={"tag": "from A"}))
        registry.register(None, recording_resolver(calls, "B", handles={"tag": "from B"}))

        assert registry.resolve_classic("tag")("x") == "from B"
        assert [label for label, _, _ in calls] == ["B"]

    def test_handled_none_is_a_result(self, registry):
        """Test that Handled(None) is returned rather than treated as a deferral."""
        registry.register(None, lambda name, *args: Handled(None))

        assert registry.resolve_classic("nothing")("x") is None

    def test_bare_values_and_none(self, registry):
        """Test that None defers and other bare values count as handled."""
        registry.register(None, lambda name, *args: "bare" if name == "bare" else None)

        assert registry.resolve_classic("bare")("x") == "bare"
        with pytest.raises(UndefinedFilterError):
            registry.resolve_classic("other")("x")

    def test_string_resolver(self, registry):
        """Test that dynamic resolvers may be given as import strings."""
        registry.register(None, "os.path:join")

        assert registry.resolve_classic("a")("b") == os.path.join("a", "b")

    def test_dynamic_wrapper_is_memoized(self, registry, recording_resolver):
        """Test that the dispatcher for an unknown name is built once."""
        calls = []
        registry.register(None, recording_resolver(calls, "A", handles={"tag": 1}))

        assert registry.resolve_classic("tag") is registry.resolve_classic("TAG")

    def test_promotion_to_static_entry(self, registry, recording_resolver):
        """Test that a deferring resolver hands over to a static entry registered later."""
        calls = []
        registry.register(None, recording_resolver(calls, "A"))
        stale_wrapper = registry.resolve_classic("late")

        registry.register("late", upper_filter)

        assert stale_wrapper("abc") == "ABC"
        assert len(calls) == 1
        assert registry.resolve_classic("late") is upper_filter

    def test_promotion_keeps_content_awareness(self, populated_registry, recording_resolver):
        """Test that promotion builds the same wrapper a fresh lookup would."""
        calls = []
        populated_registry.register(None, recording_resolver(calls, "A"))
        populated_registry.unregister("wrap")
        stale_wrapper = populated_registry.resolve_classic("wrap")

        populated_registry.register("wrap", wrap_filter)

        assert stale_wrapper("x") == "<b>x</b>"
        assert populated_registry.resolve_classic("wrap")("y") == "<b>y</b>"

    def test_promotion_uses_latest_registration(self, registry):
        """Test that promotion memoizes the entry registered last, not an earlier one."""

        def resolver(name, *args, **kwargs):
            registry.register(name, str.lower)
            registry.register(name, upper_filter)
            return NOT_HANDLED

        registry.register(None, resolver)
        stale_wrapper = registry.resolve_classic("late")

        assert stale_wrapper("abc") == "ABC"
        assert registry.resolve_classic("late") is upper_filter

    def test_no_promotion_without_resolvers(self, registry):
        """Test that a stale dispatcher with an empty chain still fails."""
        stale_wrapper = registry.resolve_classic("late")
        registry.register("late", upper_filter)

        with pytest.raises(UndefinedFilterError):
            stale_wrapper("abc")
        assert registry.resolve_classic("late")("abc") == "ABC"

    def test_dynamic_filters_are_not_listed(self, registry):
        """Test that dynamic resolvers never show up as static names."""
        registry.register(None, lambda name, *args: Handled(name))
        registry.resolve_classic("dyn")("x")

        assert "dyn" not in registry
        assert registry.list_names() == set()


class TestFilterRegistryRepr:
    """Tests for diagnostics helpers."""

    def test_repr(self, populated_registry):
        """Test the registry repr mentions both tiers."""
        assert repr(populated_registry) == "<FilterRegistry 'test_filters' static=2 dynamic=0>"

    def test_get_filter_info(self, populated_registry):
        """Test the metadata used by the CLI."""
        info = populated_registry.get_filter_info("WRAP")

        assert info["name"] == "wrap"
        assert info["content_aware"] is True
        assert info["description"] == "Wrap a value in an HTML tag"
        assert populated_registry.get_filter_info("missing") is None

    def test_is_content_aware_unknown_name(self, registry):
        """Test that asking about an unknown filter raises UndefinedFilterError."""
        with pytest.raises(UndefinedFilterError):
            registry.is_content_aware("missing")

    def test_registry_instances_are_independent(self):
        """Test that registries do not share state."""
        first = FilterRegistry()
        second = FilterRegistry()
        first.register("upper", upper_filter)

        assert "upper" not in second
