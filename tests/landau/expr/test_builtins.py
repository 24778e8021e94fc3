"""
Tests for built-in functions and the function catalog.
"""

import threading

import pytest

from landau.expr import (
    BUILTIN_FUNCTIONS,
    ArgumentDomainError,
    BuiltinError,
    EvaluationContext,
    EvaluationError,
    FunctionCatalog,
    UnknownFunctionError,
    calculate,
    call_function,
    custom_round,
    evaluate,
    get_function,
    int_auto_filler,
    parse,
    register_function,
    sum_auto_filler,
)


def call(name: str, optional=(), required=()) -> float:
    return call_function(name, list(optional), list(required), FunctionCatalog())


class TestFrac:
    """Tests for frac."""

    def test_divides(self):
        assert call("frac", required=[1, 2]) == 0.5
        assert call("frac", required=[3, 2]) == 1.5

    def test_rejects_zero_divisor(self):
        with pytest.raises(ArgumentDomainError) as exc_info:
            call("frac", required=[1, 0])
        assert exc_info.value.function_name == "frac"

    def test_requires_two_arguments(self):
        with pytest.raises(BuiltinError) as exc_info:
            call("frac", required=[1])
        assert not isinstance(exc_info.value, ArgumentDomainError)
        assert "expected 2 required argument(s), got 1" in exc_info.value.message


class TestSqrt:
    """Tests for sqrt."""

    def test_square_root_by_default(self):
        assert call("sqrt", required=[9]) == pytest.approx(3.0)

    def test_nth_root(self):
        assert call("sqrt", optional=[3], required=[27]) == pytest.approx(3.0)

    def test_odd_root_of_negative(self):
        assert call("sqrt", optional=[3], required=[-8]) == pytest.approx(-2.0)

    def test_zeroth_root_is_one(self):
        assert call("sqrt", optional=[0], required=[123]) == 1.0
        assert call("sqrt", optional=[0], required=[-4]) == 1.0

    def test_rejects_even_root_of_negative(self):
        with pytest.raises(ArgumentDomainError):
            call("sqrt", optional=[2], required=[-4])

    def test_rejects_fractional_index(self):
        with pytest.raises(ArgumentDomainError):
            call("sqrt", optional=[2.5], required=[4])


class TestInt:
    """Tests for Simpson's rule integration."""

    def test_simpson_rule(self):
        samples = int_auto_filler(lambda x: x * x, 1.0, 2.0)
        result = call("int", optional=[1, 2], required=samples)
        assert custom_round(result, 3) == 2.333

    def test_exact_for_cubics(self):
        samples = int_auto_filler(lambda x: x**3, 0.0, 2.0)
        assert call("int", optional=[0, 2], required=samples) == pytest.approx(4.0)

    def test_rejects_fewer_than_three_samples(self):
        with pytest.raises(ArgumentDomainError):
            call("int", optional=[0, 1], required=[1, 2])

    def test_requires_bounds(self):
        with pytest.raises(BuiltinError):
            call("int", required=[1, 2, 3])


class TestSumAndProd:
    """Tests for sum and prod."""

    def test_sums_values(self):
        assert call("sum", optional=[1, 3], required=[1, 2, 3]) == 6.0

    def test_rejects_empty_sum(self):
        with pytest.raises(ArgumentDomainError):
            call("sum", optional=[1, 3])

    def test_multiplies_values(self):
        assert call("prod", optional=[1, 3], required=[1, 2, 3]) == 6.0

    def test_rejects_empty_prod(self):
        with pytest.raises(ArgumentDomainError):
            call("prod")

    def test_sum_auto_filler(self):
        assert sum_auto_filler(lambda i: i * i, 1, 3) == [1, 4, 9]

    def test_sum_auto_filler_empty_range(self):
        assert sum_auto_filler(lambda i: i, 3, 1) == []


class TestFunctionCatalog:
    """Tests for lookup and registration."""

    def test_builtins_are_read_only(self):
        with pytest.raises(TypeError):
            BUILTIN_FUNCTIONS["frac"] = lambda o, r: 0.0  # type: ignore[index]

    def test_lookup_of_builtin(self):
        catalog = FunctionCatalog()
        assert catalog.get("frac") is BUILTIN_FUNCTIONS["frac"]
        assert "sqrt" in catalog

    def test_unknown_function(self):
        with pytest.raises(UnknownFunctionError) as exc_info:
            call("qrt", required=[1])
        assert exc_info.value.function_name == "qrt"

    def test_registers_extension(self):
        catalog = FunctionCatalog()
        catalog.register("double", lambda o, r: r[0] * 2.0)
        assert call_function("double", [], [10.0], catalog) == 20.0
        assert catalog.names()[-1] == "double"

    def test_builtin_cannot_be_shadowed(self, caplog):
        catalog = FunctionCatalog()
        with caplog.at_level("WARNING", logger="landau.expr.builtins"):
            catalog.register("frac", lambda o, r: 42.0)
        assert call_function("frac", [], [1.0, 2.0], catalog) == 0.5
        assert "unreachable" in caplog.text

    def test_first_extension_wins(self):
        catalog = FunctionCatalog()
        catalog.register("f", lambda o, r: 1.0)
        catalog.register("f", lambda o, r: 2.0)
        assert call_function("f", [], [], catalog) == 1.0

    def test_extension_without_result(self):
        catalog = FunctionCatalog()
        catalog.register("nothing", lambda o, r: None)
        with pytest.raises(ArgumentDomainError) as exc_info:
            call_function("nothing", [], [], catalog, position=3, source="1 + \\nothing")
        assert exc_info.value.position == 3

    def test_extension_exception_becomes_evaluation_error(self):
        catalog = FunctionCatalog()
        catalog.register("ratio", lambda o, r: r[0] / r[1])
        with pytest.raises(EvaluationError) as exc_info:
            call_function("ratio", [], [1.0, 0.0], catalog, position=0, source="\\ratio{1}{0}")
        assert exc_info.value.message.startswith("ratio: ")
        assert exc_info.value.position == 0
        assert isinstance(exc_info.value.__cause__, ZeroDivisionError)

    def test_extension_exception_is_a_failed_result(self):
        catalog = FunctionCatalog()
        catalog.register("double", lambda o, r: r[0] * 2.0)
        context = EvaluationContext(functions=catalog, high_accuracy=False)
        result = evaluate(parse("\\double{}"), context)
        assert result.success is False
        assert result.error.startswith("double: ")

    @pytest.mark.parametrize("value", ["1.5", True, [1.0], float])
    def test_extension_with_non_numeric_result(self, value):
        catalog = FunctionCatalog()
        catalog.register("odd", lambda o, r: value)
        with pytest.raises(ArgumentDomainError) as exc_info:
            call_function("odd", [], [], catalog)
        assert exc_info.value.message == "odd: no result"

    def test_extension_int_result_is_float(self):
        catalog = FunctionCatalog()
        catalog.register("seven", lambda o, r: 7)
        result = call_function("seven", [], [], catalog)
        assert result == 7.0
        assert isinstance(result, float)

    def test_builtin_errors_get_call_position(self):
        with pytest.raises(ArgumentDomainError) as exc_info:
            call_function("frac", [], [1.0, 0.0], FunctionCatalog(), position=5, source="1 + \\frac{1}{0}")
        assert exc_info.value.position == 5

    def test_catalogs_are_independent(self):
        first = FunctionCatalog()
        second = FunctionCatalog()
        first.register("only_first", lambda o, r: 1.0)
        assert "only_first" in first
        assert "only_first" not in second

    def test_concurrent_registration(self):
        catalog = FunctionCatalog()

        def register_many(prefix: str) -> None:
            for i in range(50):
                catalog.register(f"{prefix}{i}", lambda o, r: 1.0)
                assert catalog.get("frac") is not None

        threads = [
            threading.Thread(target=register_many, args=(p,)) for p in "abcd"
        ]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join()

        assert len(catalog.names()) == len(BUILTIN_FUNCTIONS) + 200


class TestDefaultCatalog:
    """Tests for the process-wide catalog."""

    def test_register_function_is_visible_to_calculate(self):
        register_function("tripled", lambda o, r: r[0] * 3.0)
        assert get_function("tripled")([], [2.0]) == 6.0
        assert calculate("\\tripled{2} + 1", high_accuracy=False) == 7.0

    def test_get_function_unknown(self):
        with pytest.raises(UnknownFunctionError):
            get_function("definitely_not_registered")
