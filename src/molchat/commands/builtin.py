"""Built-in viewer commands."""

from __future__ import annotations

from molchat.commands.params import ChainParams, NoParams, ResidueParams, ResidueRangeParams
from molchat.commands.registry import CommandDescriptor, CommandRegistry
from molchat.selection.describe import render_selection_analysis
from molchat.types import Representation
from molchat.viewer.protocol import ViewerControls

RESTORE_HINT = 'To restore the full structure view, use the command "show_full_structure" or "restore_view".'


async def _enable_water(controls: ViewerControls, _params: NoParams) -> str:
    await controls.show_water_molecules()
    return "Water molecules are now visible. HOH (water) residues are displayed as small ball-and-stick structures."


async def _hide_water(controls: ViewerControls, _params: NoParams) -> str:
    await controls.hide_water_molecules()
    return "Water molecules have been hidden from view."


async def _hide_ligands(controls: ViewerControls, _params: NoParams) -> str:
    await controls.hide_ligands()
    return "Ligands have been hidden."


async def _zoom_chain(controls: ViewerControls, params: ChainParams) -> str:
    await controls.focus_on_chain(params.chain_id)
    return f"Zoomed to chain {params.chain_id}."


async def _show_selection_info(controls: ViewerControls, _params: NoParams) -> str:
    info = await controls.get_selection_info()
    return info or "No selection information available."


async def _show_only_selected(controls: ViewerControls, _params: NoParams) -> str:
    await controls.show_only_selected()
    return f"Now showing only the selected region. The rest of the structure has been hidden.\n\n{RESTORE_HINT}"


async def _show_full_structure(controls: ViewerControls, _params: NoParams) -> str:
    await controls.show_full_structure()
    return "Full structure view restored. All parts of the structure are now visible again."


async def _restore_view(controls: ViewerControls, _params: NoParams) -> str:
    await controls.show_full_structure()
    return "View restored to show the full structure."


def _switch_to(kind: Representation, message: str):
    async def _switch(controls: ViewerControls, _params: NoParams) -> str:
        await controls.set_representation(kind)
        return message

    return _switch


async def _reset_view(controls: ViewerControls, _params: NoParams) -> str:
    await controls.reset_view()
    return "Camera view has been reset to show the entire structure."


async def _highlight_chain(controls: ViewerControls, params: ChainParams) -> str:
    await controls.highlight_chain(params.chain_id)
    return f"Chain {params.chain_id} has been highlighted."


async def _clear_highlights(controls: ViewerControls, _params: NoParams) -> str:
    await controls.clear_highlights()
    return "All highlights have been cleared."


async def _show_structure_info(controls: ViewerControls, _params: NoParams) -> str:
    info = await controls.get_structure_info()
    return info or "No structure information available."


async def _select_residue(controls: ViewerControls, params: ResidueParams) -> str:
    return await controls.select_residue(params.residue_id, params.chain_id)


async def _select_residue_range(controls: ViewerControls, params: ResidueRangeParams) -> str:
    if params.start_residue > params.end_residue:
        raise ValueError("start residue is after end residue")
    return await controls.select_residue_range(params.chain_id, params.start_residue, params.end_residue)


async def _clear_selection(controls: ViewerControls, _params: NoParams) -> str:
    await controls.clear_selection()
    return "All selections have been cleared."


async def _what_is_selected(controls: ViewerControls, _params: NoParams) -> str:
    return render_selection_analysis(await controls.get_current_selection())


def builtin_descriptors() -> list[CommandDescriptor]:
    """Return the fixed command vocabulary in catalog order."""

    return [
        CommandDescriptor(
            name="enable_water",
            description="Show water molecules (HOH residues)",
            execute=_enable_water,
            failure=(
                "Failed to show water molecules. This structure may not contain water molecules, "
                "or they may already be visible."
            ),
        ),
        CommandDescriptor(
            name="show_water",
            description="Show water molecules (alias of enable_water)",
            execute=_enable_water,
            failure="Failed to show water molecules.",
        ),
        CommandDescriptor(
            name="hide_water",
            description="Hide water molecules",
            execute=_hide_water,
            failure="Failed to hide water molecules. They may not be currently visible.",
        ),
        CommandDescriptor(
            name="hide_ligands",
            description="Hide ligand molecules",
            execute=_hide_ligands,
            failure="Failed to hide ligands.",
        ),
        CommandDescriptor(
            name="zoom_chain",
            description="Focus the camera on a chain, e.g. zoom_chain B",
            execute=_zoom_chain,
            failure="Failed to zoom to the requested chain.",
            params_type=ChainParams,
        ),
        CommandDescriptor(
            name="show_selection_info",
            description="Get information about the current selection",
            execute=_show_selection_info,
            failure="Failed to get selection information.",
        ),
        CommandDescriptor(
            name="show_only_selected",
            description="Show only the selected region",
            execute=_show_only_selected,
            failure="Failed to show only the selected region. Please make a selection first.",
        ),
        CommandDescriptor(
            name="show_full_structure",
            description="Show the full structure again after show_only_selected",
            execute=_show_full_structure,
            failure="Failed to restore the full structure view.",
        ),
        CommandDescriptor(
            name="restore_view",
            description="Restore the full structure view",
            execute=_restore_view,
            failure="Failed to restore view.",
        ),
        CommandDescriptor(
            name="switch_to_surface",
            description="Change to molecular surface representation",
            execute=_switch_to(
                Representation.SURFACE,
                "Switched to molecular surface representation. "
                "The accessible surface area and binding pockets are now visible.",
            ),
            failure="Failed to switch to surface representation.",
        ),
        CommandDescriptor(
            name="switch_to_cartoon",
            description="Change to cartoon representation (default)",
            execute=_switch_to(
                Representation.CARTOON,
                "Switched to cartoon representation. Secondary structure (helices, sheets) is shown clearly.",
            ),
            failure="Failed to switch to cartoon representation.",
        ),
        CommandDescriptor(
            name="switch_to_ball_stick",
            description="Change to ball-and-stick representation",
            execute=_switch_to(
                Representation.BALL_AND_STICK,
                "Switched to ball-and-stick representation. Individual atoms and bonds are now visible.",
            ),
            failure="Failed to switch to ball and stick representation.",
        ),
        CommandDescriptor(
            name="switch_to_spacefill",
            description="Change to space-fill representation",
            execute=_switch_to(
                Representation.SPACEFILL,
                "Switched to space-fill representation. Atoms are drawn at their van der Waals radii.",
            ),
            failure="Failed to switch to spacefill representation.",
        ),
        CommandDescriptor(
            name="reset_view",
            description="Reset camera to default position",
            execute=_reset_view,
            failure="Failed to reset camera view.",
        ),
        CommandDescriptor(
            name="highlight_chain",
            description="Highlight a chain, e.g. highlight_chain A",
            execute=_highlight_chain,
            failure="Failed to highlight the requested chain.",
            params_type=ChainParams,
        ),
        CommandDescriptor(
            name="clear_highlights",
            description="Remove all highlights",
            execute=_clear_highlights,
            failure="Failed to clear highlights.",
        ),
        CommandDescriptor(
            name="show_structure_info",
            description="Display structure information",
            execute=_show_structure_info,
            failure="Failed to get structure information.",
        ),
        CommandDescriptor(
            name="select_residue",
            description="Select a single residue by number and optional chain",
            execute=_select_residue,
            failure="Failed to select residue. Check the residue number and chain.",
            params_type=ResidueParams,
        ),
        CommandDescriptor(
            name="select_residue_range",
            description="Select a range of residues in a chain",
            execute=_select_residue_range,
            failure="Failed to select residue range. Check the chain and residue numbers.",
            params_type=ResidueRangeParams,
        ),
        CommandDescriptor(
            name="clear_selection",
            description="Clear all current selections",
            execute=_clear_selection,
            failure="Failed to clear selection.",
        ),
        CommandDescriptor(
            name="what_is_selected",
            description="Get detailed information about the current selection",
            execute=_what_is_selected,
            failure="Failed to analyze selection.",
        ),
        CommandDescriptor(
            name="analyze_selection",
            description="Provide detailed analysis of the selected residue/atom",
            execute=_what_is_selected,
            failure="Failed to analyze selection.",
        ),
    ]


def register_builtin_commands(registry: CommandRegistry) -> CommandRegistry:
    for descriptor in builtin_descriptors():
        registry.register(descriptor)
    return registry
