"""Standard Consumption Message (SCM) model."""

from __future__ import annotations

from pydantic import Field

from amrcollect.models._base import U8, U16, U32, AmrBaseModel, AmrTimestamp


class Scm(AmrBaseModel):
    """SCM payload: one cumulative consumption reading."""

    endpoint_id: U32 = Field(alias="ID")
    endpoint_type: U8 = Field(alias="Type")
    tamper_phy: U8 = Field(default=0, alias="TamperPhy")
    tamper_enc: U8 = Field(default=0, alias="TamperEnc")
    consumption: U32 = Field(alias="Consumption")
    checksum: U16 = Field(default=0, alias="ChecksumVal")


class ScmMessage(AmrBaseModel):
    received_at: AmrTimestamp = Field(alias="Time")
    type: str = Field(default="SCM", alias="Type")
    scm: Scm = Field(alias="Message")
