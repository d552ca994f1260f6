# tests/property_based/test_adapter_properties.py
"""Property-based tests for generated adapters using Hypothesis."""

from typing import List, Protocol

import hypothesis.strategies as st
import pytest
from hypothesis import given, settings

from dynadapter import AdapterFactory, UnsupportedMemberError, indexer, maps_to, unwrap

# Shared by all examples of all tests in this module.
factory = AdapterFactory(namespace="tests.property_based.generated")


class Ledger:
    """A wrapped class with mutable state."""

    owner: str

    def __init__(self):
        self.entries: List[int] = []
        self.owner = ""

    def add(self, amount: int) -> int:
        self.entries.append(amount)
        return sum(self.entries)

    def combine(self, left: str, right: str) -> str:
        return f"{left}|{right}"

    @indexer
    def entry(self, index: int) -> int:
        return self.entries[index]

    @entry.setter
    def entry(self, index: int, value: int) -> None:
        self.entries[index] = value


class Account(Protocol):
    owner: str

    @maps_to("add")
    def deposit(self, amount: int) -> int: ...

    def combine(self, left: str, right: str) -> str: ...

    @indexer
    def entry(self, index: int) -> int: ...

    @entry.setter
    def entry(self, index: int, value: int) -> None: ...

    def close(self) -> None: ...


texts = st.text(max_size=20)
amounts = st.integers(min_value=-(10**6), max_value=10**6)


@given(left=texts, right=texts)
def test_forwarded_call_equals_direct_call(left, right):
    """Calling through the adapter returns what the wrapped method returns."""
    ledger = Ledger()
    adapter = factory.create_adapter(Account, ledger)
    assert adapter.combine(left, right) == ledger.combine(left, right)
    assert adapter.combine(right=right, left=left) == ledger.combine(left, right)


@given(st.lists(amounts, max_size=20))
def test_forwarded_calls_act_on_the_wrapped_object(deposits):
    ledger = Ledger()
    adapter = factory.create_adapter(Account, ledger)
    totals = [adapter.deposit(amount) for amount in deposits]
    assert ledger.entries == deposits
    assert totals == [sum(deposits[: i + 1]) for i in range(len(deposits))]


@given(st.lists(amounts, min_size=1, max_size=20), st.data())
def test_indexer_reads_and_writes_live_state(values, data):
    ledger = Ledger()
    ledger.entries = list(values)
    adapter = factory.create_adapter(Account, ledger)
    index = data.draw(st.integers(min_value=0, max_value=len(values) - 1))
    assert adapter.entry[index] == values[index]

    replacement = data.draw(amounts)
    adapter.entry[index] = replacement
    assert ledger.entries[index] == replacement

    ledger.entries[index] = replacement + 1
    assert adapter.entry[index] == replacement + 1


@given(texts, texts)
def test_attribute_writes_are_visible_both_ways(first, second):
    ledger = Ledger()
    adapter = factory.create_adapter(Account, ledger)
    ledger.owner = first
    assert adapter.owner == first
    adapter.owner = second
    assert ledger.owner == second
    assert unwrap(adapter) is ledger


@settings(max_examples=25)
@given(st.lists(st.integers(), max_size=5))
def test_unresolved_member_always_fails_on_use(args):
    adapter = factory.create_adapter(Account, Ledger())
    with pytest.raises(UnsupportedMemberError):
        adapter.close(*args)


@given(st.integers(min_value=1, max_value=20))
def test_adapter_class_is_stable(count):
    types = {type(factory.create_adapter(Account, Ledger())) for _ in range(count)}
    assert types == {factory.get_adapter_type(Account, Ledger)}
