import types

import pytest
from mutation_guard import GuardOptions, guard
from mutation_guard.options import coerce_options


def compute() -> int:
    return 1


def test_defaults() -> None:
    options = coerce_options(None)
    assert options == GuardOptions()
    assert not options.deep
    assert not options.prototype


def test_mapping_is_coerced() -> None:
    options = coerce_options({"deep": True, "path": "root"})
    assert options.deep
    assert options.path == "root"


def test_options_instance_is_used_as_is() -> None:
    options = GuardOptions(deep=True)
    assert coerce_options(options) is options


def test_unknown_keys_rejected() -> None:
    with pytest.raises(TypeError) as ei:
        coerce_options({"deep": True, "depth": 2})
    assert "Unknown guard options" in str(ei.value)
    assert "depth" in str(ei.value)


def test_internal_flags_not_accepted_from_mappings() -> None:
    with pytest.raises(TypeError):
        guard([], {"is_setter": True})


def test_wrong_value_types_rejected() -> None:
    with pytest.raises(TypeError):
        GuardOptions(deep="yes")  # type: ignore[arg-type]
    with pytest.raises(TypeError):
        guard([], {"name": 3})
    with pytest.raises(TypeError):
        guard([], {"path": ["a"]})


def test_derive_clears_accessor_markers() -> None:
    options = GuardOptions(deep=True, is_getter=True, is_setter=True)
    child = options.derive(path="target.a")
    assert child.deep
    assert child.path == "target.a"
    assert not child.is_getter
    assert not child.is_setter
    assert options.derive(is_getter=True).is_getter


def test_resolve_defaults_to_target_root() -> None:
    resolved = GuardOptions().resolve(types.SimpleNamespace())
    assert resolved.name is False
    assert resolved.path == "target"


def test_resolve_uses_own_name() -> None:
    resolved = GuardOptions().resolve(compute)
    assert resolved.name == "compute"
    assert resolved.path == "compute"


def test_resolve_appends_name_to_path() -> None:
    resolved = GuardOptions(name="cfg", path="root").resolve(object())
    assert resolved.path == "root.cfg"


def test_resolve_keeps_path_without_name() -> None:
    resolved = GuardOptions(name=False, path="root").resolve(compute)
    assert resolved.path == "root"
