"""Tests for to_binding, map_binding, compose_bindings and lerp_binding."""

import pytest

from bindfx import (
    Binding,
    ConstantBinding,
    DerivedBinding,
    compose_bindings,
    create_binding,
    is_binding,
    lerp_binding,
    map_binding,
    to_binding,
)


class _LooksLikeBinding:
    """Has the right attribute names but is not a binding."""

    def get_value(self):
        return "nope"

    def map(self, fn):
        return fn


class _Vec:
    def __init__(self, x, y):
        self.x, self.y = x, y

    def lerp(self, to, alpha):
        return _Vec(self.x + (to.x - self.x) * alpha, self.y + (to.y - self.y) * alpha)

    def __eq__(self, other):
        return (self.x, self.y) == (other.x, other.y)


class TestIsBinding:
    def test_bindings(self):
        assert is_binding(Binding(1))
        assert is_binding(ConstantBinding(1))
        assert is_binding(Binding(1).map(str))

    def test_plain_values(self):
        assert not is_binding(1)
        assert not is_binding(None)
        assert not is_binding({"get_value": 1, "map": 2})

    def test_lookalike_is_not_a_binding(self):
        assert not is_binding(_LooksLikeBinding())


class TestToBinding:
    def test_binding_returned_unchanged(self):
        b = Binding(1)
        assert to_binding(b) is b

    def test_plain_value_lifted_to_constant(self):
        lifted = to_binding(5)
        assert isinstance(lifted, ConstantBinding)
        assert lifted.get_value() == 5

    def test_lookalike_is_wrapped(self):
        fake = _LooksLikeBinding()
        assert to_binding(fake).get_value() is fake


class TestMapBinding:
    def test_plain_value(self):
        calls = []
        result = map_binding(5, lambda v: calls.append(v) or v * 2)
        assert isinstance(result, ConstantBinding)
        assert result.get_value() == 10
        assert calls == [5]

    def test_binding(self):
        b, set_b = create_binding(5)
        result = map_binding(b, lambda v: v * 2)
        assert isinstance(result, DerivedBinding)
        assert result.get_value() == 10
        set_b(7)
        assert result.get_value() == 14


class TestComposeBindings:
    def test_constant_and_binding(self):
        b, set_b = create_binding(4)
        calls = []
        total = compose_bindings(3, b, lambda x, y: calls.append((x, y)) or x + y)
        assert total.get_value() == 7
        set_b(10)
        assert total.get_value() == 13
        assert calls == [(3, 4), (3, 10)]

    def test_all_constants(self):
        calls = []
        result = compose_bindings(1, 2, 3, lambda *vs: calls.append(vs) or sum(vs))
        assert isinstance(result, ConstantBinding)
        assert result.get_value() == 6
        assert calls == [(1, 2, 3)]

    def test_no_inputs(self):
        assert compose_bindings(lambda: "only").get_value() == "only"

    def test_argument_order(self):
        a = Binding("a")
        c = Binding("c")
        joined = compose_bindings(a, "b", c, lambda *vs: "".join(vs))
        assert joined.get_value() == "abc"
        c.set("C")
        assert joined.get_value() == "abC"

    def test_one_recompute_per_source_update(self):
        a = Binding(1)
        b = Binding(2)
        calls = []
        result = compose_bindings(a, b, lambda x, y: calls.append((x, y)) or x * y)
        a.set(3)
        b.set(4)
        assert calls == [(1, 2), (3, 2), (3, 4)]
        assert result.get_value() == 12

    def test_shared_source(self):
        a = Binding(2)
        square = compose_bindings(a, a, lambda x, y: x * y)
        a.set(3)
        assert square.get_value() == 9

    def test_nested_composition(self):
        a = Binding(1)
        inner = compose_bindings(a, 10, lambda x, y: x + y)
        outer = compose_bindings(inner, a, lambda i, x: (i, x))
        a.set(5)
        assert outer.get_value() == (15, 5)

    def test_missing_combiner(self):
        with pytest.raises(TypeError):
            compose_bindings()
        with pytest.raises(TypeError):
            compose_bindings(Binding(1), 2)

    def test_combiner_fault_keeps_previous_value(self):
        a = Binding(2)
        inverse = compose_bindings(a, 1, lambda x, y: y / x)
        with pytest.raises(ZeroDivisionError):
            a.set(0)
        assert inverse.get_value() == 0.5


class TestLerpBinding:
    def test_numbers_with_binding(self):
        alpha, set_alpha = create_binding(0.0)
        result = lerp_binding(alpha, 10, 20)
        assert result.get_value() == 10
        set_alpha(0.5)
        assert result.get_value() == 15

    def test_numbers_with_plain_alpha(self):
        result = lerp_binding(0.25, 0, 100)
        assert isinstance(result, ConstantBinding)
        assert result.get_value() == 25

    def test_unclamped(self):
        assert lerp_binding(2.0, 0, 10).get_value() == 20

    def test_lerpable(self):
        alpha = Binding(0.0)
        result = lerp_binding(alpha, _Vec(0, 0), _Vec(10, 20))
        alpha.set(0.5)
        assert result.get_value() == _Vec(5, 10)
