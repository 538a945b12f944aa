import pickle

from mutation_guard import MutationAssertionError


def test_message_names_trap_and_path() -> None:
    error = MutationAssertionError("set", "target.a")
    assert str(error) == (
        "Mutation assertion failed. `set` trap triggered on `target.a`."
    )
    assert error.trap == "set"
    assert error.path == "target.a"


def test_is_an_assertion_error() -> None:
    assert isinstance(MutationAssertionError("apply", "target()"), AssertionError)


def test_pickles_with_attributes() -> None:
    error = MutationAssertionError("deleteProperty", 'target["k"]')
    restored = pickle.loads(pickle.dumps(error))  # noqa: S301
    assert restored.trap == "deleteProperty"
    assert restored.path == 'target["k"]'
    assert str(restored) == str(error)
