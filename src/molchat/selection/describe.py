"""Human-readable renderings of the current selection."""

from __future__ import annotations

from molchat.selection.amino_acids import amino_acid_info
from molchat.types import SelectionInfo

NO_SELECTION_DETAILS = (
    "No atoms or residues are currently selected. "
    "Click on the protein structure to make a selection, then ask again."
)
NO_SELECTION_ANALYSIS = "Nothing is currently selected. Click on an atom or residue in the 3D viewer to select it."


def describe_element(residue_name: str, residue_number: int, chain_id: str, atom_name: str) -> str:
    return f"{residue_name} {residue_number} (Chain {chain_id}) - {atom_name} atom"


def render_selection_details(info: SelectionInfo | None) -> str:
    """Render the compact bullet list shown by ``show_selection_info``."""
    if info is None:
        return NO_SELECTION_DETAILS

    lines = ["Current Selection Details:", "", info.description, ""]
    if info.residue_name:
        lines.append(f"- Residue: {info.residue_name}")
    if info.residue_number is not None:
        lines.append(f"- Residue Number: {info.residue_number}")
    if info.chain_id:
        lines.append(f"- Chain: {info.chain_id}")
    if info.atom_name:
        lines.append(f"- Atom: {info.atom_name}")
    if info.element_type:
        lines.append(f"- Element: {info.element_type}")
    if info.atom_count:
        lines.append(f"- Total Atoms: {info.atom_count}")
    if info.coordinates is not None:
        c = info.coordinates
        lines.append(f"- Coordinates: ({c.x:.2f}, {c.y:.2f}, {c.z:.2f})")
    return "\n".join(lines)


def render_selection_analysis(info: SelectionInfo | None) -> str:
    """Render the detailed analysis, enriched with amino-acid metadata."""
    if info is None:
        return NO_SELECTION_ANALYSIS

    lines = ["**Selection Analysis:**", "", info.description]
    if info.residue_name:
        lines += [
            "",
            "**Residue Information:**",
            f"- Name: {info.residue_name}",
            f"- Number: {info.residue_number}",
            f"- Chain: {info.chain_id}",
        ]
        aa = amino_acid_info(info.residue_name)
        if aa is not None:
            lines += [
                f"- Type: {aa.type}",
                f"- Properties: {', '.join(aa.properties)}",
                f"- Description: {aa.description}",
            ]

    if info.atom_name and info.element_type:
        lines += ["", "**Atom Information:**", f"- Atom Name: {info.atom_name}", f"- Element: {info.element_type}"]

    if info.coordinates is not None:
        c = info.coordinates
        lines += ["", "**Position:**", f"- X: {c.x:.3f} Å", f"- Y: {c.y:.3f} Å", f"- Z: {c.z:.3f} Å"]
    return "\n".join(lines)
