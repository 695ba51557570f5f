import pytest

from molchat.commands.builtin import builtin_descriptors
from molchat.commands.detector import CommandParser, detect_command
from molchat.commands.params import ChainParams, NoParams, ResidueParams, ResidueRangeParams

KNOWN = frozenset(descriptor.name for descriptor in builtin_descriptors())


def _parse(text: str):
    return CommandParser(KNOWN).parse(text)


def test_chain_command_with_explicit_chain() -> None:
    parsed = _parse("zoom_chain B")
    assert parsed is not None
    assert parsed.name == "zoom_chain"
    assert parsed.params == ChainParams(chain_id="B")


@pytest.mark.parametrize("text", ["zoom_chain", "highlight_chain", "  Highlight_Chain  "])
def test_chain_commands_default_to_chain_a(text: str) -> None:
    parsed = _parse(text)
    assert parsed is not None
    assert parsed.params == ChainParams(chain_id="A")


def test_lowercase_chain_argument_is_normalised() -> None:
    parsed = _parse("highlight_chain c")
    assert parsed is not None
    assert parsed.params.chain_id == "C"


@pytest.mark.parametrize(
    "text", ["What is selected?", "what's selected", "WHAT’S SELECTED!!", "so, what is selected"]
)
def test_what_is_selected_phrases(text: str) -> None:
    parsed = _parse(text)
    assert parsed is not None
    assert parsed.name == "what_is_selected"
    assert parsed.params == NoParams()


def test_analyze_and_clear_phrases() -> None:
    assert _parse("Please analyze my selection").name == "analyze_selection"
    assert _parse("clear selection").name == "clear_selection"


def test_plain_command_token() -> None:
    parsed = _parse("RESET_VIEW")
    assert parsed is not None
    assert parsed.name == "reset_view"
    assert parsed.params == NoParams()


@pytest.mark.parametrize(
    "text",
    ["switch to surface view", "make it pretty", "", "   ", "zoom chain B"],
)
def test_free_text_is_not_a_command(text: str) -> None:
    assert _parse(text) is None


def test_phrases_need_a_registered_target() -> None:
    assert detect_command("what is selected", {"reset_view"}) is None


@pytest.mark.parametrize(
    ("text", "expected"),
    [
        ("select residue 42 in chain b", ResidueParams(residue_id=42, chain_id="B")),
        ("Select residue 7 chain A", ResidueParams(residue_id=7, chain_id="A")),
        ("select residue 42", ResidueParams(residue_id=42)),
        ("select_residue 15 b", ResidueParams(residue_id=15, chain_id="B")),
    ],
)
def test_single_residue_selection(text: str, expected: ResidueParams) -> None:
    parsed = _parse(text)
    assert parsed is not None
    assert parsed.name == "select_residue"
    assert parsed.params == expected


@pytest.mark.parametrize(
    "text",
    [
        "select residues 10-50 in chain A",
        "select residues 10 to 50 chain a",
        "select chain A residues 10 through 50",
        "select_residue_range a 10 50",
    ],
)
def test_residue_range_selection(text: str) -> None:
    parsed = _parse(text)
    assert parsed is not None
    assert parsed.name == "select_residue_range"
    assert parsed.params == ResidueRangeParams(chain_id="A", start_residue=10, end_residue=50)


@pytest.mark.parametrize(
    ("text", "expected"),
    [
        ("select residue 1 in chain AB", ResidueParams(residue_id=1, chain_id="AB")),
        ("select residue 12 chain a1", ResidueParams(residue_id=12, chain_id="A1")),
        ("select residues 3-9 in chain AA", ResidueRangeParams(chain_id="AA", start_residue=3, end_residue=9)),
        ("select chain B2 residues 3 to 9", ResidueRangeParams(chain_id="B2", start_residue=3, end_residue=9)),
    ],
)
def test_multi_character_chain_ids(text: str, expected) -> None:
    parsed = _parse(text)
    assert parsed is not None
    assert parsed.params == expected


@pytest.mark.parametrize("text", ["select residue 1 in chain ABCDE", "select residue 1 chain !", "select residue 5 in chain"])
def test_unreadable_chain_clause_goes_to_the_model(text: str) -> None:
    assert _parse(text) is None
