"""Pydantic V2 models for metric payloads.

These define the wire shape shared by the websocket ``tvlUpdate`` event and
the HTTP endpoints. The GraphQL type in ``app/graphql/schema.py`` exposes the
same field names.
"""

from typing import Literal
from pydantic import BaseModel, ConfigDict

from .store import MetricSample, format_timestamp

TVL_UPDATE_EVENT = "tvlUpdate"


class MetricModel(BaseModel):
    """A single TVL record as sent to clients."""
    model_config = ConfigDict(from_attributes=True)

    protocol_id: str
    tvl: float
    volume_24h: float
    fees_24h: float
    timestamp: str

    @classmethod
    def from_sample(cls, sample: MetricSample) -> "MetricModel":
        return cls(
            protocol_id=sample.protocol_id,
            tvl=sample.tvl,
            volume_24h=sample.volume_24h,
            fees_24h=sample.fees_24h,
            timestamp=format_timestamp(sample.timestamp),
        )


class TvlUpdateEvent(BaseModel):
    """Websocket frame envelope: ``{"event": "tvlUpdate", "data": {...}}``."""
    event: Literal["tvlUpdate"] = TVL_UPDATE_EVENT
    data: MetricModel

    @classmethod
    def from_sample(cls, sample: MetricSample) -> "TvlUpdateEvent":
        return cls(data=MetricModel.from_sample(sample))


class HealthModel(BaseModel):
    status: str
    name: str
    timestamp: str


class MessageModel(BaseModel):
    message: str


class ProtectedModel(BaseModel):
    ok: bool
    message: str
