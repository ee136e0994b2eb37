"""GraphQL query gateway over the metrics store.

Two read-only queries, ``metrics`` and ``latestMetric``. Field names on the
``Metric`` type stay snake_case to match the websocket payload, so automatic
camel-casing is turned off and the camelCase names are given explicitly.
"""

from typing import Annotated, List, Optional

import strawberry
from fastapi import Request
from strawberry.fastapi import GraphQLRouter
from strawberry.schema.config import StrawberryConfig
from strawberry.types import Info

from app.services.metrics.store import DEFAULT_WINDOW_HOURS, MetricSample, MetricsStore, format_timestamp


@strawberry.type
class Metric:
    protocol_id: str
    tvl: float
    volume_24h: float
    fees_24h: float
    timestamp: str

    @classmethod
    def from_sample(cls, sample: MetricSample) -> "Metric":
        return cls(
            protocol_id=sample.protocol_id,
            tvl=sample.tvl,
            volume_24h=sample.volume_24h,
            fees_24h=sample.fees_24h,
            timestamp=format_timestamp(sample.timestamp),
        )


def _store(info: Info) -> MetricsStore:
    return info.context["store"]


@strawberry.type
class Query:
    @strawberry.field(name="metrics")
    def metrics(
        self,
        info: Info,
        protocol_id: Annotated[str, strawberry.argument(name="protocolId")],
        hours: Optional[int] = DEFAULT_WINDOW_HOURS,
    ) -> List[Metric]:
        if hours is None:
            hours = DEFAULT_WINDOW_HOURS
        return [Metric.from_sample(sample) for sample in _store(info).read_history(protocol_id, hours)]

    @strawberry.field(name="latestMetric")
    def latest_metric(
        self,
        info: Info,
        protocol_id: Annotated[str, strawberry.argument(name="protocolId")],
    ) -> Optional[Metric]:
        sample = _store(info).read_latest(protocol_id)
        return Metric.from_sample(sample) if sample is not None else None


schema = strawberry.Schema(query=Query, config=StrawberryConfig(auto_camel_case=False))


async def get_context(request: Request) -> dict:
    return {
        "store": request.app.state.metrics_store,
        "token": request.headers.get("authorization", ""),
    }


def create_graphql_router() -> GraphQLRouter:
    return GraphQLRouter(schema, context_getter=get_context)
