"""Static amino-acid metadata used to enrich selection descriptions."""

from __future__ import annotations

from typing import NamedTuple


class AminoAcidInfo(NamedTuple):
    type: str
    properties: tuple[str, ...]
    description: str


AMINO_ACIDS: dict[str, AminoAcidInfo] = {
    "ALA": AminoAcidInfo("Nonpolar", ("Hydrophobic", "Small"), "Alanine - Small, nonpolar side chain"),
    "ARG": AminoAcidInfo(
        "Basic",
        ("Positively charged", "Polar", "Large"),
        "Arginine - Positively charged, often involved in binding",
    ),
    "ASN": AminoAcidInfo("Polar", ("Uncharged polar", "Hydrophilic"), "Asparagine - Can form hydrogen bonds"),
    "ASP": AminoAcidInfo(
        "Acidic",
        ("Negatively charged", "Polar"),
        "Aspartic acid - Negatively charged at physiological pH",
    ),
    "CYS": AminoAcidInfo(
        "Polar",
        ("Can form disulfide bonds", "Sulfur-containing"),
        "Cysteine - Can form disulfide bridges",
    ),
    "GLN": AminoAcidInfo(
        "Polar",
        ("Uncharged polar", "Hydrophilic"),
        "Glutamine - Longer polar side chain, forms hydrogen bonds",
    ),
    "GLU": AminoAcidInfo(
        "Acidic",
        ("Negatively charged", "Polar"),
        "Glutamic acid - Negatively charged, important for protein structure",
    ),
    "GLY": AminoAcidInfo("Nonpolar", ("Flexible", "Smallest"), "Glycine - Provides flexibility, no side chain"),
    "HIS": AminoAcidInfo(
        "Basic",
        ("Can be charged", "Aromatic"),
        "Histidine - Can be protonated, important in enzyme active sites",
    ),
    "ILE": AminoAcidInfo(
        "Nonpolar",
        ("Hydrophobic", "Branched"),
        "Isoleucine - Hydrophobic, branched aliphatic side chain",
    ),
    "LEU": AminoAcidInfo("Nonpolar", ("Hydrophobic", "Branched"), "Leucine - Hydrophobic, common in protein cores"),
    "LYS": AminoAcidInfo(
        "Basic",
        ("Positively charged", "Long"),
        "Lysine - Positively charged, often on protein surfaces",
    ),
    "MET": AminoAcidInfo(
        "Nonpolar",
        ("Hydrophobic", "Sulfur-containing"),
        "Methionine - Contains sulfur, often buried in protein core",
    ),
    "PHE": AminoAcidInfo(
        "Nonpolar",
        ("Aromatic", "Hydrophobic", "Large"),
        "Phenylalanine - Aromatic, important for protein structure",
    ),
    "PRO": AminoAcidInfo(
        "Nonpolar",
        ("Rigid", "Ring structure"),
        "Proline - Rigid structure, introduces kinks in proteins",
    ),
    "SER": AminoAcidInfo(
        "Polar",
        ("Hydroxyl group", "Can be phosphorylated"),
        "Serine - Small polar residue, important for regulation",
    ),
    "THR": AminoAcidInfo(
        "Polar",
        ("Hydroxyl group", "Can be phosphorylated"),
        "Threonine - Polar with hydroxyl group",
    ),
    "TRP": AminoAcidInfo(
        "Nonpolar",
        ("Aromatic", "Large", "Indole ring"),
        "Tryptophan - Largest amino acid, aromatic indole ring",
    ),
    "TYR": AminoAcidInfo(
        "Polar",
        ("Aromatic", "Hydroxyl group"),
        "Tyrosine - Aromatic with hydroxyl group, can form hydrogen bonds",
    ),
    "VAL": AminoAcidInfo(
        "Nonpolar",
        ("Hydrophobic", "Branched"),
        "Valine - Hydrophobic, branched aliphatic side chain",
    ),
}


def amino_acid_info(residue_name: str) -> AminoAcidInfo | None:
    return AMINO_ACIDS.get(residue_name.strip().upper())
