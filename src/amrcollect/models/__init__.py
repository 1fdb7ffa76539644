"""Data models for rtlamr messages and collector output."""

from amrcollect.models._base import AmrBaseModel, AmrTimestamp, parse_rtlamr_time
from amrcollect.models.idm import Idm, IdmMessage
from amrcollect.models.point import Point
from amrcollect.models.scm import Scm, ScmMessage

__all__ = [
    "AmrBaseModel",
    "AmrTimestamp",
    "Idm",
    "IdmMessage",
    "Point",
    "Scm",
    "ScmMessage",
    "parse_rtlamr_time",
]
