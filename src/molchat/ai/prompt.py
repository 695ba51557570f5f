"""Prompt rendering for natural-language requests."""

from __future__ import annotations

from collections.abc import Iterable

from molchat.types import AIContext, SelectionInfo

SYSTEM_PROMPT = (
    "You are an AI assistant for a 3D protein structure viewer. "
    "You help users interact with molecular structures and understand what they are looking at."
)


def render_prompt(message: str, context: AIContext, catalog: Iterable[str]) -> str:
    blocks = [
        _catalog_block(catalog),
        _directive_contract(),
        _context_block(context),
        _selection_block(context.selection),
        f"User message: {message}",
    ]
    return "\n\n".join(block for block in blocks if block.strip())


def _catalog_block(catalog: Iterable[str]) -> str:
    rows = [f"- {row}" for row in catalog]
    return "<commands>\n" + "\n".join(rows) + "\n</commands>"


def _directive_contract() -> str:
    return (
        "<command_contract>\n"
        "1) To perform an action in the viewer, include a directive of the form [COMMAND: name].\n"
        "2) Use only command names listed in <commands>.\n"
        "3) Chain commands take the chain id after the name, e.g. [COMMAND: zoom_chain B].\n"
        "4) Residue selection takes numbers after the name, e.g. [COMMAND: select_residue 45 A] "
        "or [COMMAND: select_residue_range B 10 50].\n"
        "5) You may include several directives; they run in the order they appear.\n"
        "6) Explain briefly in plain language what will happen. If the intent is unclear, ask instead.\n"
        "</command_contract>"
    )


def _context_block(context: AIContext) -> str:
    return (
        "<context>\n"
        f"- Structure: {context.structure_name or 'Unknown'}\n"
        f"- Representation: {context.representation}\n"
        f"- Has structure loaded: {str(context.has_structure).lower()}\n"
        "</context>"
    )


def _selection_block(selection: SelectionInfo | None) -> str:
    if selection is None:
        return "<selection>No current selection.</selection>"
    return (
        "<selection>\n"
        f"- Description: {selection.description}\n"
        f"- Residue: {selection.residue_name} {selection.residue_number}\n"
        f"- Chain: {selection.chain_id}\n"
        f"- Atom: {selection.atom_name} ({selection.element_type})\n"
        f"- Total atoms in selection: {selection.atom_count}\n"
        "</selection>"
    )
