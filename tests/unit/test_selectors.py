"""Unit tests for column selectors."""

import pyarrow as pa
import pytest
from pydantic import TypeAdapter

from prepbake.core.exceptions import SelectorError
from prepbake.core.schema import SchemaInfo
from prepbake.core.selectors import (
    AllNumeric,
    Exclude,
    Name,
    SelectorInput,
    StartsWith,
    all_numeric,
    all_outcomes,
    all_predictors,
    contains,
    ends_with,
    everything,
    has_role,
    has_type,
    matches,
    parse_selector,
    resolve_selectors,
    starts_with,
)


@pytest.fixture
def info():
    """Schema info with numeric, nominal and outcome columns."""
    table = pa.table(
        {
            "sample": ["a", "b"],
            "carbon": [49.8, 49.5],
            "hydrogen": [5.6, 5.7],
            "carbon_ratio": [1.0, 2.0],
            "HHV": [20.0, 19.5],
        }
    )
    return SchemaInfo.from_table(table, outcomes=["HHV"])


# ============================================================================
# Parsing
# ============================================================================


class TestParseSelector:
    """Tests for the string form of selectors."""

    def test_plain_name(self):
        assert parse_selector("carbon") == Name(name="carbon")

    def test_function_without_argument(self):
        assert parse_selector("all_numeric()") == AllNumeric()

    def test_function_with_quoted_argument(self):
        assert parse_selector("starts_with('car')") == StartsWith(prefix="car")
        assert parse_selector('starts_with("car")') == StartsWith(prefix="car")

    def test_negation(self):
        assert parse_selector("-carbon") == Exclude(selector=Name(name="carbon"))

    def test_unknown_function_is_a_name(self):
        """Strings that aren't a known selector call are column names."""
        assert parse_selector("log(x)") == Name(name="log(x)")

    def test_missing_argument(self):
        with pytest.raises(SelectorError, match="requires an argument"):
            parse_selector("starts_with()")

    def test_unexpected_argument(self):
        with pytest.raises(SelectorError, match="takes no arguments"):
            parse_selector("all_numeric(x)")

    def test_selector_input_validates_strings_and_dicts(self):
        """Strings and serialized selectors both validate."""
        adapter = TypeAdapter(SelectorInput)
        assert adapter.validate_python("-HHV") == Exclude(selector=Name(name="HHV"))
        assert adapter.validate_python({"kind": "contains", "text": "ratio"}) == contains("ratio")

    def test_describe_round_trips(self):
        for text in ["carbon", "all_numeric()", "starts_with('c')", "-carbon"]:
            assert parse_selector(text).describe() == text


# ============================================================================
# Resolution
# ============================================================================


class TestResolveSelectors:
    """Tests for resolve_selectors()."""

    def test_names_in_order(self, info):
        terms = [Name(name="hydrogen"), Name(name="carbon")]
        assert resolve_selectors(terms, info) == ["hydrogen", "carbon"]

    def test_duplicates_removed(self, info):
        terms = [Name(name="carbon"), all_numeric()]
        assert resolve_selectors(terms, info) == ["carbon", "hydrogen", "carbon_ratio", "HHV"]

    def test_exclusion_after_selection(self, info):
        terms = [all_numeric(), -Name(name="HHV")]
        assert resolve_selectors(terms, info) == ["carbon", "hydrogen", "carbon_ratio"]

    def test_leading_exclusion_starts_from_everything(self, info):
        terms = [-Name(name="sample")]
        assert resolve_selectors(terms, info) == ["carbon", "hydrogen", "carbon_ratio", "HHV"]

    def test_role_selectors(self, info):
        assert resolve_selectors([all_outcomes()], info) == ["HHV"]
        assert "HHV" not in resolve_selectors([all_predictors()], info)
        assert resolve_selectors([has_role("outcome")], info) == ["HHV"]

    def test_type_selector(self, info):
        assert resolve_selectors([has_type("nominal")], info) == ["sample"]

    def test_name_pattern_selectors(self, info):
        assert resolve_selectors([starts_with("carbon")], info) == ["carbon", "carbon_ratio"]
        assert resolve_selectors([ends_with("ratio")], info) == ["carbon_ratio"]
        assert resolve_selectors([matches("^h")], info) == ["hydrogen"]
        assert len(resolve_selectors([everything()], info)) == 5

    def test_empty_selection_is_allowed(self, info):
        assert resolve_selectors([starts_with("zzz")], info) == []
        assert resolve_selectors([], info) == []

    def test_missing_name_raises(self, info):
        with pytest.raises(SelectorError, match="does not exist"):
            resolve_selectors([Name(name="oxygen")], info)
