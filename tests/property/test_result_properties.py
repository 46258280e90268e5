"""
Property-based tests for the Result type.

Laws that Result should satisfy:
- Every result is exactly one variant
- collect_all keeps every error, in order
- try_call turns exceptions into Err and values into Ok
"""

from hypothesis import given
from hypothesis import strategies as st

from clientsync.core.result import Err, Ok, Result


# =============================================================================
# Strategies
# =============================================================================

simple_values = st.one_of(
    st.integers(),
    st.text(max_size=50),
    st.booleans(),
)

error_messages = st.text(min_size=1, max_size=50)

any_result = st.one_of(simple_values.map(Ok), error_messages.map(Err))


# =============================================================================
# Variants
# =============================================================================


class TestVariants:
    @given(any_result)
    def test_exactly_one_variant(self, result: Result):
        assert result.is_ok() != result.is_err()
        assert bool(result) == result.is_ok()

    @given(simple_values)
    def test_ok_round_trips_value(self, value):
        assert Ok(value).unwrap() == value

    @given(error_messages)
    def test_err_round_trips_error(self, error):
        assert Err(error).unwrap_err() == error


# =============================================================================
# Factories
# =============================================================================


class TestFactories:
    @given(st.lists(any_result, max_size=10))
    def test_collect_all(self, results):
        combined = Result.collect_all(results)
        errors = [r.unwrap_err() for r in results if r.is_err()]

        if errors:
            assert combined == Err(errors)
        else:
            assert combined == Ok([r.unwrap() for r in results])

    @given(st.integers() | st.none())
    def test_try_call(self, value):
        def fn():
            if value is None:
                raise ValueError("no value")
            return value

        result = Result.try_call(fn, error_factory=str)

        assert result == (Err("no value") if value is None else Ok(value))
