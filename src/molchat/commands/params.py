"""Tagged parameter variants shared by the parser and the executors."""

from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator

DEFAULT_CHAIN_ID = "A"


class _Params(BaseModel):
    model_config = ConfigDict(frozen=True, extra="forbid")


class NoParams(_Params):
    kind: Literal["none"] = "none"


class ChainParams(_Params):
    kind: Literal["chain"] = "chain"
    chain_id: str = Field(default=DEFAULT_CHAIN_ID, min_length=1, description="Chain identifier")

    @field_validator("chain_id")
    @classmethod
    def _upper(cls, value: str) -> str:
        return value.strip().upper()


class ResidueParams(_Params):
    kind: Literal["residue"] = "residue"
    residue_id: int = Field(..., description="Residue sequence number")
    chain_id: str | None = Field(default=None, description="Chain identifier")

    @field_validator("chain_id")
    @classmethod
    def _upper(cls, value: str | None) -> str | None:
        return value.strip().upper() if value else None


class ResidueRangeParams(_Params):
    kind: Literal["residue_range"] = "residue_range"
    chain_id: str = Field(..., min_length=1, description="Chain identifier")
    start_residue: int = Field(..., description="First residue number")
    end_residue: int = Field(..., description="Last residue number")

    @field_validator("chain_id")
    @classmethod
    def _upper(cls, value: str) -> str:
        return value.strip().upper()


type CommandParams = NoParams | ChainParams | ResidueParams | ResidueRangeParams
