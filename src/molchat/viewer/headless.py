"""In-process viewer engine backed by Biopython.

Keeps the scene as plain bookkeeping (representations, highlights, camera)
so that the command pipeline can run without a graphical viewer.
"""

from __future__ import annotations

import asyncio
import io
import itertools
from collections.abc import Sequence
from dataclasses import dataclass
from pathlib import Path
from typing import Any
from urllib.parse import urlparse
from urllib.request import Request, urlopen

from Bio.PDB import MMCIFParser, PDBParser
from blinker import Signal
from loguru import logger

from molchat.errors import NoStructureLoadedError
from molchat.types import Coordinates, Representation
from molchat.viewer.protocol import ElementRecord, Loci

DEFAULT_CAMERA_RADIUS = 35.0
ZOOM_IN_RADIUS = 20.0
ZOOM_OUT_RADIUS = 50.0
DOWNLOAD_TIMEOUT_SECONDS = 20
WATER_NAMES = frozenset({"HOH", "WAT", "DOD"})
WATER_TAG = "water-representation"
USER_AGENT = "molchat-headless/0.1"


@dataclass(frozen=True)
class SceneRepresentation:
    ref: str
    kind: Representation
    tag: str | None = None


class HeadlessViewer:
    """Viewer engine without rendering."""

    def __init__(self) -> None:
        self.selection_changed = Signal("molchat.viewer.selection_changed")
        self.click = Signal("molchat.viewer.click")
        self.hover = Signal("molchat.viewer.hover")
        self._refs = itertools.count(1)
        self._structure: Any = None
        self._name: str | None = None
        self._representations: list[SceneRepresentation] = []
        self._water_ref: str | None = None
        self._ligands_hidden = False
        self._highlighted: set[str] = set()
        self._focused_chain: str | None = None
        self._camera_radius = DEFAULT_CAMERA_RADIUS
        self._only_selected = False
        self._selection: list[Loci] = []
        self._highlight: Loci | None = None

    @property
    def structure_name(self) -> str | None:
        return self._name

    @property
    def representations(self) -> list[SceneRepresentation]:
        return list(self._representations)

    @property
    def water_visible(self) -> bool:
        return self._water_ref is not None

    @property
    def ligands_hidden(self) -> bool:
        return self._ligands_hidden

    @property
    def highlighted_chains(self) -> set[str]:
        return set(self._highlighted)

    @property
    def focused_chain(self) -> str | None:
        return self._focused_chain

    @property
    def camera_radius(self) -> float:
        return self._camera_radius

    @property
    def only_selected(self) -> bool:
        return self._only_selected

    # Selection source

    def has_structure(self) -> bool:
        return self._structure is not None

    def selection_entries(self) -> Sequence[Loci]:
        return tuple(self._selection)

    def last_highlight(self) -> Loci | None:
        return self._highlight

    def position_of(self, element: ElementRecord) -> Coordinates:
        if element.handle is None:
            raise LookupError("element has no coordinates")
        x, y, z = (float(value) for value in element.handle.coord)
        return Coordinates(x=x, y=y, z=z)

    async def load_structure(self, source: str, format: str | None = None) -> None:
        self._clear_scene()
        resolved_format = _resolve_format(source, format)
        name = _structure_name(source)
        handle = await asyncio.to_thread(_open_source, source)
        structure = await asyncio.to_thread(_parse_structure, name, handle, resolved_format)
        self._structure = structure
        self._name = name
        self._add_representation(Representation.CARTOON)
        logger.info(
            "viewer.headless.loaded name={} format={} chains={}",
            name,
            resolved_format,
            ",".join(self._chain_ids()),
        )

    async def reset_view(self) -> None:
        self._focused_chain = None
        self._camera_radius = DEFAULT_CAMERA_RADIUS

    async def zoom_in(self) -> None:
        self._camera_radius = ZOOM_IN_RADIUS

    async def zoom_out(self) -> None:
        self._camera_radius = ZOOM_OUT_RADIUS

    async def focus_on_chain(self, chain_id: str) -> None:
        self._focused_chain = self._require_chain(chain_id).id

    async def set_representation(self, kind: Representation) -> None:
        self._require_structure()
        self._representations = [item for item in self._representations if item.tag == WATER_TAG]
        self._add_representation(Representation(kind))

    async def show_water_molecules(self) -> None:
        self._require_structure()
        if self._water_ref is not None:
            raise RuntimeError("Water molecules are already visible")
        if not any(_is_water(residue) for residue in self._model().get_residues()):
            raise LookupError("Structure contains no water molecules")
        self._water_ref = self._add_representation(Representation.BALL_AND_STICK, tag=WATER_TAG).ref

    async def hide_water_molecules(self) -> None:
        self._require_structure()
        tagged = [item for item in self._representations if item.tag == WATER_TAG]
        if not tagged:
            raise LookupError("No water molecules found to hide")
        self._representations = [item for item in self._representations if item.tag != WATER_TAG]
        self._water_ref = None

    async def hide_ligands(self) -> None:
        self._require_structure()
        self._ligands_hidden = True

    async def highlight_chain(self, chain_id: str) -> None:
        self._highlighted.add(self._require_chain(chain_id).id)

    async def clear_highlights(self) -> None:
        self._highlighted.clear()

    async def show_only_selected(self) -> None:
        self._require_structure()
        if not any(not entry.is_empty for entry in self._selection):
            raise LookupError("Nothing is selected")
        self._only_selected = True

    async def show_full_structure(self) -> None:
        self._require_structure()
        self._only_selected = False

    async def select_residue(self, residue_id: int, chain_id: str | None = None) -> str:
        self._require_structure()
        chains = [self._require_chain(chain_id)] if chain_id is not None else list(self._model())
        for chain in chains:
            for residue in chain:
                if residue.id[1] != residue_id or _is_water(residue):
                    continue
                loci = Loci(tuple(_element(atom) for atom in residue))
                await self._set_selection(loci)
                return (
                    f"Selected {residue.get_resname().strip()} {residue_id} in chain {chain.id} "
                    f"({len(loci.elements)} atoms)."
                )
        where = f" in chain {chain_id}" if chain_id else ""
        raise LookupError(f"Residue {residue_id}{where} not found")

    async def select_residue_range(self, chain_id: str, start_residue: int, end_residue: int) -> str:
        chain = self._require_chain(chain_id)
        residues = [
            residue
            for residue in chain
            if start_residue <= residue.id[1] <= end_residue and not _is_water(residue)
        ]
        if not residues:
            raise LookupError(f"No residues {start_residue}-{end_residue} in chain {chain.id}")
        loci = Loci(tuple(_element(atom) for residue in residues for atom in residue))
        await self._set_selection(loci)
        return (
            f"Selected residues {start_residue}-{end_residue} in chain {chain.id} "
            f"({len(residues)} residues, {len(loci.elements)} atoms)."
        )

    async def clear_selection(self) -> None:
        self._selection = []
        self._only_selected = False
        await self.selection_changed.send_async(self)

    # Interaction, as a graphical viewer would report it

    async def click_atom(
        self, chain_id: str, residue_id: int, atom_name: str | None = None, *, commit: bool = True
    ) -> None:
        """Simulate a click: report the highlight first, then commit the residue to the selection."""
        atom, residue = self._find_atom(chain_id, residue_id, atom_name)
        clicked = _element(atom)
        self._highlight = Loci((clicked,))
        await self.click.send_async(self)
        if commit:
            others = tuple(_element(other) for other in residue if other is not atom)
            await self._set_selection(Loci((clicked, *others)))

    async def hover_atom(self, chain_id: str, residue_id: int, atom_name: str | None = None) -> None:
        atom, _residue = self._find_atom(chain_id, residue_id, atom_name)
        self._highlight = Loci((_element(atom),))
        await self.hover.send_async(self)

    async def get_structure_info(self) -> str:
        if self._structure is None:
            return "No structure loaded."
        model = self._model()
        residues = list(model.get_residues())
        waters = sum(1 for residue in residues if _is_water(residue))
        ligands = sum(1 for residue in residues if residue.id[0].startswith("H_"))
        lines = [
            "Structure Information:",
            "",
            f"- Name: {self._name}",
            f"- Total atoms: {sum(1 for _ in model.get_atoms())}",
            f"- Total residues: {len(residues) - waters}",
            f"- Total chains: {len(self._chain_ids())} ({', '.join(self._chain_ids())})",
            f"- Water molecules: {waters}",
            f"- Ligands: {ligands}",
            f"- Models: {len(self._structure)}",
        ]
        return "\n".join(lines)

    def _clear_scene(self) -> None:
        self._structure = None
        self._name = None
        self._representations = []
        self._water_ref = None
        self._ligands_hidden = False
        self._highlighted.clear()
        self._focused_chain = None
        self._camera_radius = DEFAULT_CAMERA_RADIUS
        self._only_selected = False
        self._selection = []
        self._highlight = None

    def _add_representation(self, kind: Representation, *, tag: str | None = None) -> SceneRepresentation:
        item = SceneRepresentation(ref=f"repr-{next(self._refs)}", kind=kind, tag=tag)
        self._representations.append(item)
        return item

    async def _set_selection(self, loci: Loci) -> None:
        self._selection = [loci]
        await self.selection_changed.send_async(self)

    def _model(self) -> Any:
        self._require_structure()
        return next(iter(self._structure))

    def _chain_ids(self) -> list[str]:
        if self._structure is None:
            return []
        return [chain.id for chain in self._model()]

    def _require_structure(self) -> None:
        if self._structure is None:
            raise NoStructureLoadedError("No structure loaded")

    def _require_chain(self, chain_id: str) -> Any:
        model = self._model()
        if chain_id in model:
            return model[chain_id]
        # Chain ids arrive upper-cased; mmCIF auth ids may be lower case.
        matches = [chain for chain in model if chain.id.casefold() == chain_id.casefold()]
        if len(matches) != 1:
            raise LookupError(f"Chain {chain_id} not found")
        return matches[0]

    def _find_atom(self, chain_id: str, residue_id: int, atom_name: str | None) -> tuple[Any, Any]:
        chain = self._require_chain(chain_id)
        for residue in chain:
            if residue.id[1] != residue_id:
                continue
            atoms = list(residue)
            if atom_name is None:
                preferred = [atom for atom in atoms if atom.get_name() == "CA"]
                return (preferred or atoms)[0], residue
            for atom in atoms:
                if atom.get_name() == atom_name.upper():
                    return atom, residue
            raise LookupError(f"Atom {atom_name} not found in residue {residue_id}")
        raise LookupError(f"Residue {residue_id} not found in chain {chain_id}")


def _element(atom: Any) -> ElementRecord:
    residue = atom.get_parent()
    chain = residue.get_parent()
    return ElementRecord(
        residue_name=residue.get_resname().strip(),
        residue_number=int(residue.id[1]),
        chain_id=chain.id,
        atom_name=atom.get_name(),
        element_symbol=(atom.element or "").strip() or atom.get_name()[:1],
        handle=atom,
    )


def _is_water(residue: Any) -> bool:
    return residue.id[0] == "W" or residue.get_resname().strip() in WATER_NAMES


def _is_url(source: str) -> bool:
    return urlparse(source).scheme in {"http", "https"}


def _structure_name(source: str) -> str:
    path = urlparse(source).path if _is_url(source) else source
    return Path(path).stem or source


def _resolve_format(source: str, format: str | None) -> str:
    if format:
        lowered = format.casefold()
        return "mmcif" if lowered in {"cif", "mmcif"} else lowered
    path = urlparse(source).path if _is_url(source) else source
    suffix = Path(path).suffix.casefold()
    return "mmcif" if suffix in {".cif", ".mmcif"} else "pdb"


def _open_source(source: str) -> Any:
    if _is_url(source):
        request = Request(source, headers={"User-Agent": USER_AGENT})
        with urlopen(request, timeout=DOWNLOAD_TIMEOUT_SECONDS) as response:  # noqa: S310
            return io.StringIO(response.read().decode("utf-8", errors="replace"))
    path = Path(source).expanduser()
    if not path.is_file():
        raise FileNotFoundError(f"Structure file not found: {source}")
    return str(path)


def _parse_structure(name: str, handle: Any, format: str) -> Any:
    if format == "pdb":
        parser: Any = PDBParser(QUIET=True)
    elif format == "mmcif":
        parser = MMCIFParser(QUIET=True)
    else:
        raise ValueError(f"Unsupported structure format: {format}")
    structure = parser.get_structure(name, handle)
    if len(structure) == 0:
        raise ValueError("Structure file contains no models")
    return structure
