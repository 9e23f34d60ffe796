"""Source registry - CRUD operations for configured feed sources."""

import json
import os
import tempfile
import threading
import uuid
from dataclasses import replace
from pathlib import Path
from typing import List, Optional

import structlog

from ..ingestion.interfaces import Source, SourceType
from .settings import settings

logger = structlog.get_logger()


class RegistryError(Exception):
    """The persisted source list could not be read or written."""


class SourceRegistry:
    """Manages the persisted list of sources.

    The list is stored as a flat JSON array. Every read and write happens under
    one re-entrant lock and writes go through a temp file plus rename, so a
    reader never sees a partially written list.
    """

    def __init__(self, path: str = None):
        self.path = Path(path) if path else Path(settings.sources_path)
        self._lock = threading.RLock()

    def _load(self) -> List[Source]:
        """Load sources from disk. A missing file is an empty registry."""
        if not self.path.exists():
            return []
        try:
            with open(self.path, encoding="utf-8") as f:
                data = json.load(f)
            if not isinstance(data, list):
                raise ValueError("sources file must contain a JSON list")
            return [Source.from_dict(record) for record in data]
        except (OSError, ValueError, KeyError, TypeError) as e:
            logger.error("sources_load_failed", path=str(self.path), error=str(e))
            raise RegistryError(f"Failed to read sources: {e}") from e

    def _save(self, sources: List[Source]) -> None:
        """Save sources atomically (write to temp, then rename)."""
        self.path.parent.mkdir(parents=True, exist_ok=True)
        fd, temp_path = tempfile.mkstemp(dir=self.path.parent, suffix=".json")
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                json.dump([s.to_dict() for s in sources], f, indent=2)
            os.replace(temp_path, self.path)
            logger.debug("sources_saved", path=str(self.path), count=len(sources))
        except OSError as e:
            if os.path.exists(temp_path):
                os.unlink(temp_path)
            raise RegistryError(f"Failed to write sources: {e}") from e

    def list_sources(self) -> List[Source]:
        """List all sources in insertion order."""
        with self._lock:
            return self._load()

    def enabled_sources(self) -> List[Source]:
        """List sources that take part in ingestion passes."""
        return [s for s in self.list_sources() if s.enabled]

    def get(self, source_id: str) -> Optional[Source]:
        """Get a source by id."""
        for source in self.list_sources():
            if source.id == source_id:
                return source
        return None

    def add(self, name: str, url: str, source_type) -> Source:
        """Add a new enabled source. The URL is not checked until fetch time."""
        if not name or not url:
            raise ValueError("name and url are required")
        try:
            source_type = SourceType(source_type)
        except ValueError:
            allowed = ", ".join(t.value for t in SourceType)
            raise ValueError(f"Unknown source type: {source_type!r} (expected one of: {allowed})") from None

        with self._lock:
            sources = self._load()
            source = Source(
                id=uuid.uuid4().hex,
                name=name,
                url=url,
                source_type=source_type,
                enabled=True,
            )
            sources.append(source)
            self._save(sources)

        logger.info("source_added", id=source.id, name=name, url=url, source_type=source_type.value)
        return source

    def remove(self, source_id: str) -> bool:
        """Remove a source. Unknown ids are ignored."""
        with self._lock:
            sources = self._load()
            remaining = [s for s in sources if s.id != source_id]
            if len(remaining) == len(sources):
                return False
            self._save(remaining)

        logger.info("source_removed", id=source_id)
        return True

    def set_enabled(self, source_id: str, enabled: bool) -> bool:
        """Enable or disable a source. Returns False if it does not exist."""
        with self._lock:
            sources = self._load()
            for i, source in enumerate(sources):
                if source.id == source_id:
                    sources[i] = replace(source, enabled=enabled)
                    self._save(sources)
                    logger.info("source_toggled", id=source_id, enabled=enabled)
                    return True
        return False
