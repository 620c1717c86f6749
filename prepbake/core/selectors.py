"""Column selectors.

Steps record selectors at definition time and resolve them into a fixed,
ordered list of column names when they are prepped. Selectors are pydantic
models discriminated by ``kind`` so that step specifications serialize
cleanly; plain strings are parsed wherever a selector is expected:

    "carbon"              -> Name("carbon")
    "all_numeric()"       -> AllNumeric()
    "starts_with('x_')"   -> StartsWith("x_")
    "-carbon"             -> Exclude(Name("carbon"))
"""

import re
from typing import Annotated, Any, Literal, Sequence, Union

from pydantic import BaseModel, BeforeValidator, ConfigDict, Field

from prepbake.core.exceptions import SelectorError
from prepbake.core.schema import OUTCOME, PREDICTOR, SchemaInfo
from prepbake.core.type_mapping import NOMINAL, NUMERIC


class BaseSelector(BaseModel):
    """A rule that picks columns out of schema info."""

    model_config = ConfigDict(frozen=True)

    def select(self, info: SchemaInfo) -> list[str]:
        raise NotImplementedError

    def describe(self) -> str:
        raise NotImplementedError

    def __neg__(self) -> "Exclude":
        return Exclude(selector=self)

    def __str__(self) -> str:
        return self.describe()


class Name(BaseSelector):
    kind: Literal["name"] = "name"
    name: str

    def select(self, info: SchemaInfo) -> list[str]:
        if info.get(self.name) is None:
            raise SelectorError(
                f"Column '{self.name}' does not exist",
                context={"column": self.name, "available_columns": info.variables},
            )
        return [self.name]

    def describe(self) -> str:
        return self.name


class _PredicateSelector(BaseSelector):
    """Selects every column whose info entry matches a predicate."""

    def matches(self, variable: str, col_type: str, role: str | None) -> bool:
        raise NotImplementedError

    def select(self, info: SchemaInfo) -> list[str]:
        return [
            col.variable
            for col in info.columns
            if self.matches(col.variable, col.type, col.role)
        ]


class AllNumeric(_PredicateSelector):
    kind: Literal["all_numeric"] = "all_numeric"

    def matches(self, variable, col_type, role):
        return col_type == NUMERIC

    def describe(self) -> str:
        return "all_numeric()"


class AllNominal(_PredicateSelector):
    kind: Literal["all_nominal"] = "all_nominal"

    def matches(self, variable, col_type, role):
        return col_type == NOMINAL

    def describe(self) -> str:
        return "all_nominal()"


class AllPredictors(_PredicateSelector):
    kind: Literal["all_predictors"] = "all_predictors"

    def matches(self, variable, col_type, role):
        return role == PREDICTOR

    def describe(self) -> str:
        return "all_predictors()"


class AllOutcomes(_PredicateSelector):
    kind: Literal["all_outcomes"] = "all_outcomes"

    def matches(self, variable, col_type, role):
        return role == OUTCOME

    def describe(self) -> str:
        return "all_outcomes()"


class HasRole(_PredicateSelector):
    kind: Literal["has_role"] = "has_role"
    role: str

    def matches(self, variable, col_type, role):
        return role == self.role

    def describe(self) -> str:
        return f"has_role('{self.role}')"


class HasType(_PredicateSelector):
    kind: Literal["has_type"] = "has_type"
    type: str

    def matches(self, variable, col_type, role):
        return col_type == self.type

    def describe(self) -> str:
        return f"has_type('{self.type}')"


class StartsWith(_PredicateSelector):
    kind: Literal["starts_with"] = "starts_with"
    prefix: str

    def matches(self, variable, col_type, role):
        return variable.startswith(self.prefix)

    def describe(self) -> str:
        return f"starts_with('{self.prefix}')"


class EndsWith(_PredicateSelector):
    kind: Literal["ends_with"] = "ends_with"
    suffix: str

    def matches(self, variable, col_type, role):
        return variable.endswith(self.suffix)

    def describe(self) -> str:
        return f"ends_with('{self.suffix}')"


class Contains(_PredicateSelector):
    kind: Literal["contains"] = "contains"
    text: str

    def matches(self, variable, col_type, role):
        return self.text in variable

    def describe(self) -> str:
        return f"contains('{self.text}')"


class Matches(_PredicateSelector):
    kind: Literal["matches"] = "matches"
    pattern: str

    def matches(self, variable, col_type, role):
        return re.search(self.pattern, variable) is not None

    def describe(self) -> str:
        return f"matches('{self.pattern}')"


class Everything(_PredicateSelector):
    kind: Literal["everything"] = "everything"

    def matches(self, variable, col_type, role):
        return True

    def describe(self) -> str:
        return "everything()"


class Exclude(BaseSelector):
    """Removes the columns picked by another selector."""

    kind: Literal["exclude"] = "exclude"
    selector: "SelectorInput"

    def select(self, info: SchemaInfo) -> list[str]:
        return self.selector.select(info)

    def describe(self) -> str:
        return f"-{self.selector.describe()}"


# function name -> (selector class, name of its single argument)
_SELECTOR_FUNCTIONS: dict[str, tuple[type[BaseSelector], str | None]] = {
    "all_numeric": (AllNumeric, None),
    "all_nominal": (AllNominal, None),
    "all_predictors": (AllPredictors, None),
    "all_outcomes": (AllOutcomes, None),
    "everything": (Everything, None),
    "has_role": (HasRole, "role"),
    "has_type": (HasType, "type"),
    "starts_with": (StartsWith, "prefix"),
    "ends_with": (EndsWith, "suffix"),
    "contains": (Contains, "text"),
    "matches": (Matches, "pattern"),
}

_CALL_RE = re.compile(r"^(?P<func>[a-z_]+)\((?P<arg>.*)\)$", re.DOTALL)


def _unquote(text: str) -> str:
    text = text.strip()
    if len(text) >= 2 and text[0] == text[-1] and text[0] in ("'", '"'):
        return text[1:-1]
    return text


def parse_selector(text: str) -> BaseSelector:
    """Parse the string form of a selector.

    Strings that don't look like a known selector call are column names.

    Raises:
        SelectorError: If a selector call has a missing or unexpected argument.
    """
    text = text.strip()
    if text.startswith("-") and len(text) > 1:
        return Exclude(selector=parse_selector(text[1:]))

    match = _CALL_RE.match(text)
    if match is None or match.group("func") not in _SELECTOR_FUNCTIONS:
        return Name(name=text)

    func = match.group("func")
    arg = _unquote(match.group("arg"))
    selector_cls, arg_name = _SELECTOR_FUNCTIONS[func]
    if arg_name is None:
        if arg:
            raise SelectorError(
                f"{func}() takes no arguments",
                context={"selector": text},
            )
        return selector_cls()
    if not arg:
        raise SelectorError(
            f"{func}() requires an argument",
            context={"selector": text, "argument": arg_name},
        )
    return selector_cls(**{arg_name: arg})


def _coerce_selector(value: Any) -> Any:
    if isinstance(value, str):
        return parse_selector(value)
    return value


Selector = Annotated[
    Union[
        Name,
        AllNumeric,
        AllNominal,
        AllPredictors,
        AllOutcomes,
        HasRole,
        HasType,
        StartsWith,
        EndsWith,
        Contains,
        Matches,
        Everything,
        Exclude,
    ],
    Field(discriminator="kind"),
]

SelectorInput = Annotated[Selector, BeforeValidator(_coerce_selector)]

Exclude.model_rebuild()


def resolve_selectors(terms: Sequence[BaseSelector], info: SchemaInfo) -> list[str]:
    """Resolve selectors to an ordered list of distinct column names.

    Positive selectors add columns in order of first appearance, exclusions
    remove them. When the first selector is an exclusion, selection starts
    from every column.

    Raises:
        SelectorError: If a named column is not in the schema.
    """
    selected: list[str] = []
    for index, term in enumerate(terms):
        if isinstance(term, Exclude):
            if index == 0:
                selected = list(info.variables)
            removed = set(term.select(info))
            selected = [col for col in selected if col not in removed]
        else:
            for col in term.select(info):
                if col not in selected:
                    selected.append(col)
    return selected


def describe_selectors(terms: Sequence[BaseSelector]) -> list[str]:
    return [term.describe() for term in terms]


# Definition-time helpers mirroring the string forms.


def all_numeric() -> AllNumeric:
    return AllNumeric()


def all_nominal() -> AllNominal:
    return AllNominal()


def all_predictors() -> AllPredictors:
    return AllPredictors()


def all_outcomes() -> AllOutcomes:
    return AllOutcomes()


def everything() -> Everything:
    return Everything()


def has_role(role: str) -> HasRole:
    return HasRole(role=role)


def has_type(type: str) -> HasType:
    return HasType(type=type)


def starts_with(prefix: str) -> StartsWith:
    return StartsWith(prefix=prefix)


def ends_with(suffix: str) -> EndsWith:
    return EndsWith(suffix=suffix)


def contains(text: str) -> Contains:
    return Contains(text=text)


def matches(pattern: str) -> Matches:
    return Matches(pattern=pattern)
