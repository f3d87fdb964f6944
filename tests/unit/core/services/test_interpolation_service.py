import pytest
from hypothesis import given
from hypothesis import strategies as st

from neuroshell.core.common.exceptions import InterpolationDepthError
from neuroshell.core.domain.parsed_command import ParsedCommand, ParseMode
from neuroshell.core.services.interpolation_service import Interpolator
from neuroshell.core.services.variable_service import VariableService


@pytest.fixture
def variables() -> VariableService:
    return VariableService()


@pytest.fixture
def interpolator(variables: VariableService) -> Interpolator:
    return Interpolator(variables, max_depth=10)


def test_adjacent_placeholders(variables: VariableService, interpolator: Interpolator) -> None:
    variables.set("x", "1")
    variables.set("y", "2")

    assert interpolator.interpolate("${x}${y}") == "12"


def test_text_without_placeholders_is_unchanged(interpolator: Interpolator) -> None:
    assert interpolator.interpolate("plain $ text {x}") == "plain $ text {x}"


def test_unresolved_key_expands_to_empty_and_is_reported(
    interpolator: Interpolator,
) -> None:
    result = interpolator.interpolate_with_report("a${missing}b${also}")

    assert result.value == "ab"
    assert result.unresolved == ["missing", "also"]
    assert result.has_unresolved


def test_unterminated_placeholder_stays_literal(
    variables: VariableService, interpolator: Interpolator
) -> None:
    variables.set("x", "1")

    assert interpolator.interpolate("${x} and ${oops") == "1 and ${oops"


def test_nested_key(variables: VariableService, interpolator: Interpolator) -> None:
    variables.set("env", "prod")
    variables.set("url_prod", "https://example.com")

    assert interpolator.interpolate("${url_${env}}") == "https://example.com"


def test_value_with_placeholder_is_expanded(
    variables: VariableService, interpolator: Interpolator
) -> None:
    variables.set("name", "World")
    variables.set("greeting", "Hello ${name}")

    assert interpolator.interpolate("${greeting}!") == "Hello World!"


def test_self_reference_fails(variables: VariableService, interpolator: Interpolator) -> None:
    variables.set("a", "${a}")

    with pytest.raises(InterpolationDepthError):
        interpolator.interpolate("${a}")


def test_mutual_reference_fails(
    variables: VariableService, interpolator: Interpolator
) -> None:
    variables.set("a", "x${b}")
    variables.set("b", "y${a}")

    with pytest.raises(InterpolationDepthError) as exc_info:
        interpolator.interpolate("${a}")
    assert exc_info.value.max_depth == 10


def test_chain_at_the_depth_bound_resolves(variables: VariableService) -> None:
    variables.set("a", "${b}")
    variables.set("b", "${c}")
    variables.set("c", "done")

    assert Interpolator(variables, max_depth=2).interpolate("${a}") == "done"


def test_chain_past_the_depth_bound_fails(variables: VariableService) -> None:
    variables.set("a", "${b}")
    variables.set("b", "${c}")
    variables.set("c", "${d}")
    variables.set("d", "done")

    with pytest.raises(InterpolationDepthError):
        Interpolator(variables, max_depth=2).interpolate("${a}")


def test_result_is_not_rescanned(
    variables: VariableService, interpolator: Interpolator
) -> None:
    variables.set("dollar", "$")
    variables.set("rest", "{secret}")
    variables.set("secret", "leaked")

    assert interpolator.interpolate("${dollar}${rest}") == "${secret}"


def test_computed_variables_are_available(interpolator: Interpolator) -> None:
    assert interpolator.interpolate("${@os}") != ""


def test_interpolate_command_key_value(
    variables: VariableService, interpolator: Interpolator
) -> None:
    variables.set("who", "Ada")
    command = ParsedCommand(name="echo", options={"to": "${who}"}, message="hi ${who}")

    expanded, unresolved = interpolator.interpolate_command(command)

    assert expanded.options == {"to": "Ada"}
    assert expanded.message == "hi Ada"
    assert unresolved == []
    assert command.message == "hi ${who}"


def test_interpolate_command_raw(
    variables: VariableService, interpolator: Interpolator
) -> None:
    variables.set("n", "3")
    command = ParsedCommand(
        name="try", parse_mode=ParseMode.RAW, bracket_content="\\echo ${n}", message="${m}"
    )

    expanded, unresolved = interpolator.interpolate_command(command)

    assert expanded.bracket_content == "\\echo 3"
    assert expanded.message == ""
    assert unresolved == ["m"]


def test_max_depth_must_be_positive(variables: VariableService) -> None:
    with pytest.raises(ValueError):
        Interpolator(variables, max_depth=0)


_VALUES = {"a": "alpha", "b": "beta", "num": "42"}
_literal = st.text(
    alphabet=st.characters(exclude_characters="${}", exclude_categories=("Cs",))
)
_piece = st.one_of(_literal, st.sampled_from([f"${{{k}}}" for k in _VALUES]))


@given(st.lists(_piece, max_size=8).map("".join))
def test_interpolation_is_idempotent(text: str) -> None:
    variables = VariableService()
    for key, value in _VALUES.items():
        variables.set(key, value)
    interpolator = Interpolator(variables)

    once = interpolator.interpolate(text)

    assert interpolator.interpolate(once) == once
    assert "${" not in once
