"""Single-reading (SCM) path.

SCM messages carry one cumulative reading and no interval history, so they
bypass the ring store entirely: every accepted message is one point.
"""

from __future__ import annotations

from amrcollect._constants import FIELD_CONSUMPTION
from amrcollect.ingestion.emit import endpoint_tags
from amrcollect.models.point import Point
from amrcollect.models.scm import ScmMessage


def scm_points(message: ScmMessage, measurement: str) -> list[Point]:
    scm = message.scm
    return [
        Point(
            measurement,
            endpoint_tags(scm.endpoint_id, scm.endpoint_type),
            {FIELD_CONSUMPTION: float(scm.consumption)},
            message.received_at,
        )
    ]
