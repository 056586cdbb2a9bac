import pytest

from image_toolbox.batch import run_sequential
from image_toolbox.errors import DecodeError, SurfaceUnavailable


def test_failures_do_not_abort_the_batch():
    seen = []

    def op(name):
        seen.append(name)
        if name == "bad":
            raise DecodeError("corrupt")
        return name.upper()

    items = run_sequential(["a", "bad", "c"], op)
    assert seen == ["a", "bad", "c"]
    assert [it.ok for it in items] == [True, False, True]
    assert [it.result for it in items] == ["A", None, "C"]
    assert isinstance(items[1].error, DecodeError)


def test_on_item_sees_every_item_in_order():
    reported = []
    run_sequential([1, 2, 3], lambda n: n * 2, on_item=lambda it: reported.append(it.result))
    assert reported == [2, 4, 6]


def test_surface_errors_abort_the_run():
    def op(name):
        raise SurfaceUnavailable("no surface")

    with pytest.raises(SurfaceUnavailable):
        run_sequential(["a", "b"], op)


def test_programming_errors_propagate():
    def op(name):
        raise KeyError(name)

    with pytest.raises(KeyError):
        run_sequential(["a"], op)
