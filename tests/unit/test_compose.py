"""Unit tests for composition and predicate combinators."""

import functools

from funcops.operators.compose import all_of, any_of, compose, negate
from funcops.operators.utils import callable_name


def add_one(x):
    return x + 1


def double(x):
    return x * 2


def is_even(x):
    return x % 2 == 0


def is_positive(x):
    return x > 0


class Halve:
    def __call__(self, x):
        return x // 2


class TestCompose:
    """Test left-to-right composition"""

    def test_first_function_applied_first(self):
        assert compose(add_one, double)(3) == 8
        assert compose(double, add_one)(3) == 7

    def test_first_function_receives_all_arguments(self):
        assert compose(max, double)(1, 5, 3) == 10

    def test_empty_composition_is_identity(self):
        marker = object()
        assert compose()(marker) is marker

    def test_single_function(self):
        assert compose(double)(21) == 42

    def test_name_describes_chain(self):
        assert compose(add_one, double).__name__ == "add_one_then_double"

    def test_partial_and_callable_object_steps(self):
        pipeline = compose(functools.partial(int, base=2), Halve())

        assert pipeline("1010") == 5
        assert pipeline.__name__ == "int_then_Halve"


class TestPredicates:
    """Test predicate combinators"""

    def test_negate(self):
        is_odd = negate(is_even)

        assert [x for x in range(6) if is_odd(x)] == [1, 3, 5]
        assert is_odd.__wrapped__ is is_even

    def test_all_of(self):
        check = all_of(is_even, is_positive)

        assert [x for x in range(-4, 5) if check(x)] == [2, 4]

    def test_any_of(self):
        check = any_of(is_even, is_positive)

        assert [x for x in range(-3, 3) if check(x)] == [-2, 0, 1, 2]

    def test_all_of_short_circuits(self):
        calls = []

        def never(x):
            calls.append(x)
            return True

        assert all_of(is_positive, never)(-1) is False
        assert calls == []

    def test_empty_combinators(self):
        assert all_of()(1) is True
        assert any_of()(1) is False


class TestCallableName:
    """Test labels used for wrapped callables in logs and metrics"""

    def test_plain_function(self):
        assert callable_name(add_one) == "add_one"

    def test_partial_uses_wrapped_function(self):
        assert callable_name(functools.partial(add_one)) == "add_one"
        assert callable_name(functools.partial(functools.partial(int, base=2))) == "int"

    def test_callable_object_uses_class_name(self):
        assert callable_name(Halve()) == "Halve"

    def test_negate_accepts_partial(self):
        is_odd = negate(functools.partial(is_even))

        assert is_odd(3) is True
