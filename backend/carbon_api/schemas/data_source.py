from __future__ import annotations

from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field

# Statuses after which the normative server will not touch a data source again
TERMINAL_DATA_SOURCE_STATUSES = frozenset({"succeeded", "failed"})


class DataSource(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="allow")

    id: str = Field(alias="_id")
    name: Optional[str] = None
    data_source_type: Optional[str] = Field(default=None, alias="dataSourceType")
    status: Optional[str] = None

    @property
    def is_transaction_source(self) -> bool:
        return self.data_source_type == "transaction"


class Report(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="allow")

    id: Optional[str] = Field(default=None, alias="_id")
    name: Optional[str] = None
    report_section: Optional[str] = Field(default=None, alias="reportSection")
    data_sources: List[str] = Field(default_factory=list, alias="dataSources")
    start_date: Optional[str] = Field(default=None, alias="startDate")
    end_date: Optional[str] = Field(default=None, alias="endDate")


class ReportTemplate(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="allow")

    id: str = Field(alias="_id")
    header: Optional[str] = None
