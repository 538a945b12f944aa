from __future__ import annotations

import dataclasses
import types

import pytest
from mutation_guard import MutationAssertionError, guard, is_guarded, reflect


class Account:
    def __init__(self) -> None:
        self._balance = 0

    @property
    def balance(self) -> int:
        return self._balance

    @balance.setter
    def balance(self, value: int) -> None:
        self._balance = value


@dataclasses.dataclass(frozen=True)
class Point:
    x: int
    y: list[int]


def test_missing_property_has_no_descriptor() -> None:
    assert reflect.get_own_property_descriptor(guard({}), "a") is None
    assert reflect.get_own_property_descriptor(guard([1]), 5) is None


def test_writable_descriptor_is_fresh_each_time() -> None:
    view = guard({"a": 1})
    first = reflect.get_own_property_descriptor(view, "a")
    second = reflect.get_own_property_descriptor(view, "a")
    assert first == second
    assert first is not second
    assert first is not None
    assert first.value == 1
    assert not first.read_only


def test_read_only_descriptor_is_cached() -> None:
    view = guard((1, 2))
    first = reflect.get_own_property_descriptor(view, 0)
    assert first is not None
    assert first.read_only
    assert reflect.get_own_property_descriptor(view, 0) is first


def test_frozen_dataclass_descriptor_is_cached() -> None:
    view = guard(Point(1, [2]))
    first = reflect.get_own_property_descriptor(view, "x")
    assert first is not None
    assert not first.writable
    assert not first.configurable
    assert reflect.get_own_property_descriptor(view, "x") is first


def test_data_value_raw_in_shallow_mode() -> None:
    inner = [2]
    descriptor = reflect.get_own_property_descriptor(guard((1, inner)), 1)
    assert descriptor is not None
    assert descriptor.value is inner


def test_data_value_guarded_in_deep_mode() -> None:
    inner = [2]
    descriptor = reflect.get_own_property_descriptor(
        guard((1, inner), {"deep": True}), 1
    )
    assert descriptor is not None
    assert is_guarded(descriptor.value)
    with pytest.raises(MutationAssertionError) as ei:
        descriptor.value.append(3)
    assert ei.value.path == "target[1].descriptor.value.append()"
    assert inner == [2]


def test_attribute_descriptor_path() -> None:
    ns = types.SimpleNamespace(a=types.SimpleNamespace(b=1))
    descriptor = reflect.get_own_property_descriptor(guard(ns, {"deep": True}), "a")
    assert descriptor is not None
    with pytest.raises(MutationAssertionError) as ei:
        descriptor.value.b = 2
    assert ei.value.path == "target.a.descriptor.value.b"


def test_accessor_descriptor_from_class() -> None:
    descriptor = reflect.get_own_property_descriptor(guard(Account), "balance")
    assert descriptor is not None
    assert descriptor.is_accessor
    assert not descriptor.read_only
    assert descriptor.getter is Account.balance.fget


def test_setter_callable_in_shallow_mode() -> None:
    account = Account()
    descriptor = reflect.get_own_property_descriptor(guard(Account), "balance")
    assert descriptor is not None
    assert is_guarded(descriptor.setter)
    descriptor.setter(account, 5)
    assert account.balance == 5


def test_setter_rejected_in_deep_mode() -> None:
    account = Account()
    descriptor = reflect.get_own_property_descriptor(
        guard(Account, {"deep": True}), "balance"
    )
    assert descriptor is not None
    with pytest.raises(MutationAssertionError) as ei:
        descriptor.setter(account, 5)
    assert ei.value.trap == "apply"
    assert ei.value.path == "Account.balance.descriptor.set()"
    assert account.balance == 0


def test_getter_results_guarded_in_deep_mode() -> None:
    holder = types.SimpleNamespace(items=[1])

    class Wrapper:
        @property
        def items(self) -> list[int]:
            return holder.items

    descriptor = reflect.get_own_property_descriptor(
        guard(Wrapper, {"deep": True}), "items"
    )
    assert descriptor is not None
    result = descriptor.getter(Wrapper())
    assert result == [1]
    with pytest.raises(MutationAssertionError) as ei:
        result.append(2)
    assert ei.value.path == "Wrapper.items.descriptor.get().append()"
    assert holder.items == [1]


def test_builtin_type_descriptors_are_read_only() -> None:
    view = guard(int)
    first = reflect.get_own_property_descriptor(view, "bit_length")
    assert first is not None
    assert first.read_only
    assert reflect.get_own_property_descriptor(view, "bit_length") is first


def _wallet_setter(options: dict[str, bool]) -> object:
    class Wallet:
        @property
        def coins(self) -> int:
            return 0

        @coins.setter
        def coins(self, value: int) -> None:
            pass

    descriptor = reflect.get_own_property_descriptor(guard(Wallet, options), "coins")
    assert descriptor is not None
    return descriptor.setter


def test_shallow_setter_writes_pass_through() -> None:
    setter = _wallet_setter({})
    setter.note = "audited"  # type: ignore[attr-defined]
    assert setter.note == "audited"  # type: ignore[attr-defined]
    del setter.note  # type: ignore[attr-defined]
    assert not hasattr(setter, "note")
    reflect.define_property(setter, "other", reflect.PropertyDescriptor.data(1))
    assert setter.other == 1  # type: ignore[attr-defined]


def test_shallow_setter_structural_writes_reach_the_function() -> None:
    setter = _wallet_setter({"prototype": True})
    with pytest.raises(TypeError):
        reflect.prevent_extensions(setter)
    with pytest.raises(TypeError):
        reflect.set_prototype_of(setter, types.SimpleNamespace)


def test_deep_setter_writes_rejected() -> None:
    setter = _wallet_setter({"deep": True})
    with pytest.raises(MutationAssertionError) as ei:
        setter.note = "audited"  # type: ignore[attr-defined]
    assert ei.value.trap == "set"
    assert ei.value.path == "Wallet.coins.descriptor.set.note"
    with pytest.raises(MutationAssertionError) as ei:
        del setter.note  # type: ignore[attr-defined]
    assert ei.value.trap == "deleteProperty"
    assert ei.value.path == "Wallet.coins.descriptor.set.note"
