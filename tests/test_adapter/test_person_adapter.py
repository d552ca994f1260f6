"""End-to-end tests: adapting a Person through a partially mappable interface."""

import datetime as dt
from typing import Protocol

import pytest

from dynadapter import (
    InvalidArgumentError,
    UnsupportedMemberError,
    indexer,
    is_adapter,
    maps_to,
    unwrap,
)

# -------------------------------------------------------------------
# Wrapped classes
# -------------------------------------------------------------------


class Person:
    name: str

    def __init__(self, name: str, birthday: dt.date):
        self.name = name
        self._birthday = birthday

    @indexer
    def subname(self, index: int) -> str:
        return self.name[index:]

    @indexer
    def substring(self, index: int, length: int) -> str:
        return self.name[index : index + length]

    @property
    def birthday(self) -> dt.date:
        return self._birthday

    def get_age(self, today: dt.date) -> int:
        if today < self._birthday:
            raise ValueError("today precedes the birthday")
        years = today.year - self._birthday.year
        if (today.month, today.day) < (self._birthday.month, self._birthday.day):
            years -= 1
        return years


class AnotherType:
    another_type_property: str

    def another_type_method(self, arg: object) -> None:
        pass


# -------------------------------------------------------------------
# Interface declaration
# -------------------------------------------------------------------


class PersonSpec(Protocol):
    @maps_to()
    def __getitem__(self, index: int) -> str: ...

    @maps_to("wrong_target", entity_type=Person)
    @indexer
    def span(self, index: int, length: int) -> str: ...

    @maps_to()
    @property
    def name(self) -> str: ...

    @maps_to("birthday")
    @property
    def date_of_birth(self) -> dt.date: ...

    not_proxy_property: str

    @maps_to(entity_type=AnotherType)
    @property
    def another_type_property(self) -> str: ...

    @another_type_property.setter
    def another_type_property(self, value: str) -> None: ...

    @maps_to("get_age")
    def get_value(self, when: dt.date) -> int: ...

    def not_proxy_method(self, arg: object) -> None: ...

    @maps_to(entity_type=AnotherType)
    def another_type_method(self, arg: object) -> None: ...


@pytest.fixture
def alice():
    return Person("Alice", dt.date(1990, 5, 17))


@pytest.fixture
def adapter(factory, alice):
    return factory.create_adapter(PersonSpec, alice)


# -------------------------------------------------------------------
# Forwarded members
# -------------------------------------------------------------------


class TestForwardedMembers:
    def test_adapter_derives_from_the_interface(self, adapter):
        assert PersonSpec in type(adapter).__mro__
        assert is_adapter(adapter)

    def test_default_indexer_falls_back_to_matching_named_indexer(self, adapter):
        """`adapter[1]` forwards to Person.subname, the only int -> str indexer."""
        assert adapter[1] == "lice"

    def test_property_with_empty_directive(self, adapter):
        assert adapter.name == "Alice"

    def test_property_with_renamed_target(self, adapter, alice):
        assert adapter.date_of_birth == alice.birthday

    def test_method_with_renamed_target(self, adapter):
        assert adapter.get_value(dt.date(2020, 5, 16)) == 29
        assert adapter.get_value(dt.date(2020, 5, 17)) == 30

    def test_method_keyword_arguments_are_forwarded(self, adapter):
        assert adapter.get_value(when=dt.date(2021, 1, 1)) == 30

    def test_target_exceptions_propagate_unchanged(self, adapter):
        with pytest.raises(ValueError, match="precedes"):
            adapter.get_value(dt.date(1980, 1, 1))

    def test_read_only_interface_property_rejects_assignment(self, adapter):
        with pytest.raises(AttributeError):
            adapter.name = "Bob"


# -------------------------------------------------------------------
# Unresolved members
# -------------------------------------------------------------------


class TestUnresolvedMembers:
    def test_named_indexer_with_wrong_target(self, adapter):
        with pytest.raises(UnsupportedMemberError):
            adapter.span[1, 2]

    def test_property_without_counterpart(self, adapter):
        with pytest.raises(UnsupportedMemberError):
            adapter.not_proxy_property
        with pytest.raises(UnsupportedMemberError):
            adapter.not_proxy_property = "x"

    def test_property_scoped_to_another_type(self, adapter):
        with pytest.raises(UnsupportedMemberError):
            adapter.another_type_property
        with pytest.raises(UnsupportedMemberError):
            adapter.another_type_property = "value"

    def test_method_without_counterpart(self, adapter):
        with pytest.raises(UnsupportedMemberError):
            adapter.not_proxy_method(object())

    def test_method_scoped_to_another_type(self, adapter):
        with pytest.raises(UnsupportedMemberError):
            adapter.another_type_method(object())

    def test_unsupported_is_not_implemented(self, adapter):
        """Callers catching NotImplementedError also see unsupported members."""
        with pytest.raises(NotImplementedError):
            adapter.not_proxy_method(None)

    def test_error_names_interface_member_and_wrapped_type(self, adapter):
        with pytest.raises(UnsupportedMemberError) as exc_info:
            adapter.not_proxy_method(None)
        error = exc_info.value
        assert error.context["interface"] == "PersonSpec"
        assert error.context["wrapped_type"] == "Person"
        assert error.context["access"] == "call"
        assert "not_proxy_method" in str(error)
        assert "Suggestions:" in str(error)

    def test_generation_succeeds_despite_unresolved_members(self, factory):
        adapter_type = factory.get_adapter_type(PersonSpec, Person)
        descriptor = factory.describe(PersonSpec, Person)
        assert adapter_type.__name__ == "PersonPersonSpecAdapter"
        assert {b.member.name for b in descriptor.unresolved} == {
            "span",
            "not_proxy_property",
            "another_type_property",
            "not_proxy_method",
            "another_type_method",
        }


# -------------------------------------------------------------------
# Resolution plan and the wrapped reference
# -------------------------------------------------------------------


class TestDescriptorAndReference:
    def test_describe_reports_targets(self, factory):
        descriptor = factory.describe(PersonSpec, Person)
        assert descriptor.binding("get_value").target.name == "get_age"
        assert descriptor.binding("__getitem__").target.name == "subname"
        assert descriptor.binding("date_of_birth").target.name == "birthday"
        assert descriptor.binding("name").target.source == "attribute"
        with pytest.raises(KeyError):
            descriptor.binding("missing")

    def test_adapter_reads_live_state(self, adapter, alice):
        alice.name = "Bob"
        assert adapter.name == "Bob"
        assert adapter[1] == "ob"

    def test_unwrap_returns_the_same_object(self, adapter, alice):
        assert unwrap(adapter) is alice

    def test_unwrap_rejects_plain_objects(self, alice):
        with pytest.raises(InvalidArgumentError):
            unwrap(alice)
        assert not is_adapter(alice)

    def test_repr_mentions_wrapped_object(self, adapter, alice):
        assert repr(adapter).startswith("<PersonPersonSpecAdapter of ")
        assert repr(alice) in repr(adapter)

    def test_generated_class_metadata(self, factory):
        adapter_type = factory.get_adapter_type(PersonSpec, Person)
        assert adapter_type.__module__ == "tests.generated"
        assert adapter_type.__qualname__ == "PersonSpec.Person.PersonPersonSpecAdapter"
        assert adapter_type.get_value.__qualname__ == "PersonPersonSpecAdapter.get_value"

    def test_constructor_rejects_foreign_objects(self, factory):
        adapter_type = factory.get_adapter_type(PersonSpec, Person)
        with pytest.raises(InvalidArgumentError):
            adapter_type(AnotherType())


# -------------------------------------------------------------------
# Member names that look like adapter internals
# -------------------------------------------------------------------


class InternalsSpec(Protocol):
    def _adapter_target(self) -> int: ...

    _adapter_state: str


class TestInternalLookingMembers:
    def test_generation_succeeds(self, factory, alice):
        adapter_type = factory.get_adapter_type(InternalsSpec, Person)
        adapter = adapter_type(alice)
        with pytest.raises(UnsupportedMemberError):
            adapter._adapter_target()
        with pytest.raises(UnsupportedMemberError):
            adapter._adapter_state
        assert unwrap(adapter) is alice

    def test_underscore_members_forward(self, factory):
        class Holder:
            _adapter_state: str

            def __init__(self):
                self._adapter_state = "ready"

            def _adapter_target(self) -> int:
                return 7

        holder = Holder()
        adapter = factory.create_adapter(InternalsSpec, holder)
        assert adapter._adapter_target() == 7
        assert adapter._adapter_state == "ready"
        adapter._adapter_state = "done"
        assert holder._adapter_state == "done"
        assert unwrap(adapter) is holder
