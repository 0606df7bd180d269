"""
Payload exchanged with the Word/PDF report generator.

Field aliases are the generator's exact JSON keys and must not change.
"""
from typing import Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field

ReportFormat = Literal["docx", "pdf"]
Cell = Union[int, float, str]


class ReportModel(BaseModel):
    model_config = ConfigDict(populate_by_name=True)


class ReportMethods(ReportModel):
    gear: str
    effort: str
    temp: str = Field(description="Water temperature in °F")
    notes: str
    target_species: list[str] = Field(alias="targetSpecies")


class ReportAbundanceRow(ReportModel):
    species: str
    cpue: Cell
    mean_tl: Cell = Field(alias="meanTL")
    range_tl: str = Field(alias="rangeTL")
    mean_wr: Cell = Field(alias="meanWr")
    psd: Cell
    psd_p: Cell = Field(alias="psdP")
    psd_m: Cell = Field(alias="psdM")
    psd_t: Cell = Field(alias="psdT")


class ReportCatchRow(ReportModel):
    species: str
    number: int
    pct_number: Cell = Field(alias="pctNumber")
    biomass: Cell
    pct_biomass: Cell = Field(alias="pctBiomass")


class ReportPayload(ReportModel):
    """Everything the generator needs to lay out a monitoring report."""
    reservoir: str
    dates: str
    stocking_strategy: str = Field(alias="stockingStrategy")
    methods: ReportMethods
    abundance_table: list[ReportAbundanceRow] = Field(alias="abundanceTable")
    catch_summary: list[ReportCatchRow] = Field(alias="catchSummary")
    comments: str
    suggestions: str
    format: ReportFormat = "docx"


class ReportOptions(ReportModel):
    """Narrative fields supplied by the biologist when requesting a report."""
    stocking_strategy: str = Field(default="", alias="stockingStrategy")
    comments: str = ""
    suggestions: str = ""
    target_species: Optional[list[str]] = Field(
        default=None,
        alias="targetSpecies",
        description="Species for the abundance table; every species caught when omitted",
    )
    dates: Optional[str] = Field(
        default=None,
        description="Date text for the report header; the event date when omitted",
    )
    format: ReportFormat = "docx"
