"""PRD version history.

On write, if the content differs from the current PRD, the current PRD is
pushed to the history (capped, oldest dropped first) and then replaced.
Reverting restores a previous entry after pushing the current PRD, so a
revert can itself be undone.
"""

from __future__ import annotations

from typing import Any, Dict, List, Optional, Sequence

from jalanea_forge.core.logging_config import get_logger
from jalanea_forge.core.models.domain import PrdSource, PrdVersion
from jalanea_forge.errors import VersionNotFoundError

logger = get_logger(__name__)

DEFAULT_HISTORY_LIMIT = 10


class PrdHistory:
    """Current PRD plus its previous versions, ordered oldest to newest."""

    def __init__(
        self,
        current: str = "",
        versions: Optional[Sequence[PrdVersion]] = None,
        limit: int = DEFAULT_HISTORY_LIMIT,
        current_source: PrdSource = PrdSource.generated,
    ) -> None:
        if limit < 1:
            raise ValueError("PRD history limit must be at least 1")
        self.current = current or ""
        self.current_source = current_source
        self.limit = limit
        self.versions: List[PrdVersion] = list(versions or [])
        self._trim()

    @classmethod
    def from_records(
        cls,
        current: str,
        records: Sequence[Dict[str, Any]],
        limit: int = DEFAULT_HISTORY_LIMIT,
        current_source: Optional[str] = None,
    ) -> "PrdHistory":
        """Build from the JSON stored on a project row."""
        versions = [PrdVersion.model_validate(record) for record in records or []]
        source = PrdSource(current_source) if current_source else PrdSource.generated
        return cls(current, versions, limit=limit, current_source=source)

    def to_records(self) -> List[Dict[str, Any]]:
        return [version.model_dump(mode="json", by_alias=True) for version in self.versions]

    def _push_current(self) -> None:
        if not self.current.strip():
            return
        self.versions.append(PrdVersion(content=self.current, source=self.current_source))
        self._trim()

    def _trim(self) -> None:
        overflow = len(self.versions) - self.limit
        if overflow > 0:
            del self.versions[:overflow]

    def write(self, content: str, source: PrdSource = PrdSource.generated) -> bool:
        """Replace the current PRD.

        Returns:
            False when ``content`` equals the current PRD (nothing recorded)
        """
        content = content or ""
        if content == self.current:
            return False
        self._push_current()
        self.current = content
        self.current_source = source
        logger.debug(f"PRD written (source={source.value}), history size={len(self.versions)}")
        return True

    def get(self, version_id: str) -> PrdVersion:
        for version in self.versions:
            if version.id == version_id:
                return version
        raise VersionNotFoundError(version_id)

    def revert(self, version_id: str) -> str:
        """Make a previous version current again.

        The restored entry stays in the history; the replaced PRD is pushed
        first, so the cap may drop the oldest entry.

        Raises:
            VersionNotFoundError: ``version_id`` is not in the history
        """
        target = self.get(version_id)
        if target.content != self.current:
            self._push_current()
        self.current = target.content
        self.current_source = PrdSource.reverted
        logger.info(f"PRD reverted to version {version_id}")
        return self.current
