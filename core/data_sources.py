from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Dict, List, Optional

from core.data import SEED_DATA_SOURCES, new_id


logger = logging.getLogger(__name__)

INTEGRATIONS = (
    "Supabase",
    "PostgreSQL",
    "MySQL",
    "Odoo",
    "Redshift",
    "Snowflake",
    "BigQuery",
    "MongoDB",
)


@dataclass(frozen=True)
class DataSource:
    id: str
    name: str
    type: str
    status: str = "connected"
    last_sync: Optional[str] = None


class DataSourceRegistry:
    def __init__(self, sources: Optional[List[DataSource]] = None) -> None:
        if sources is None:
            sources = [DataSource(**s) for s in SEED_DATA_SOURCES]
        self._sources: Dict[str, DataSource] = {s.id: s for s in sources}

    def list(self) -> List[DataSource]:
        return list(self._sources.values())

    def add(self, name: str, source_type: str) -> DataSource:
        name = (name or "").strip()
        if not name or not source_type:
            raise ValueError("Connection name and type are required")
        if source_type not in INTEGRATIONS:
            raise ValueError(f"Unsupported data source type: {source_type}")
        # Connections are simulated, new sources report as connected straight away.
        source = DataSource(id=new_id(), name=name, type=source_type, status="connected", last_sync="Just now")
        self._sources[source.id] = source
        logger.info("data source added: %s (%s)", source.name, source.type)
        return source

    def delete(self, source_id: str) -> None:
        if source_id not in self._sources:
            raise KeyError(f"Unknown data source: {source_id}")
        del self._sources[source_id]
        logger.info("data source removed: %s", source_id)
