# -*- coding: utf-8 -*-
"""
store.py - Interfaces of the collaborators the pipeline writes through

Persistence, the locale directory, change markers and the batch job manager
live outside this package; the reconcilers only see these interfaces.

Entries are dicts. Entries loaded with ``populate=["localizations"]`` carry
``localizations`` as a list of ``{"id", "locale"}``; the same shape is
accepted when writing ``localizations``.
"""

from abc import ABC, abstractmethod
from typing import Any, Dict, List, Optional


class EntryStore(ABC):
    """Entry CRUD keyed by content-type uid."""

    @abstractmethod
    async def find_one(self, uid: str, entry_id: Any,
                       populate: Optional[List[str]] = None) -> Optional[Dict[str, Any]]:
        ...

    @abstractmethod
    async def find_many(self, uid: str, where: Optional[Dict[str, Any]] = None) -> List[Dict[str, Any]]:
        ...

    @abstractmethod
    async def create(self, uid: str, data: Dict[str, Any]) -> Dict[str, Any]:
        ...

    @abstractmethod
    async def update(self, uid: str, entry_id: Any, data: Dict[str, Any]) -> Dict[str, Any]:
        """Partial update: only keys present in ``data`` change."""

    @abstractmethod
    async def exists(self, uid: str, field: str, value: Any,
                     exclude_id: Optional[Any] = None) -> bool:
        """Whether another entry already holds ``value`` in ``field``."""


class LocaleDirectory(ABC):
    @abstractmethod
    async def find(self) -> List[Dict[str, Any]]:
        """Configured locales as ``[{"code": "en"}, ...]``."""


class ChangeMarkerStore(ABC):
    """
    Pending "entry changed" markers.

    Markers are ``{"id", "group_id", "content_type", "source_locale"}``.
    """

    @abstractmethod
    async def find_one(self, marker_id: Any) -> Optional[Dict[str, Any]]:
        ...

    @abstractmethod
    async def delete(self, marker_id: Any) -> None:
        ...


class JobManager(ABC):
    """Lifecycle of long-running batch translation jobs."""

    @abstractmethod
    async def submit_job(self, params: Dict[str, Any]) -> Any:
        ...

    @abstractmethod
    async def pause_job(self, job_id: Any) -> Any:
        ...

    @abstractmethod
    async def resume_job(self, job_id: Any) -> Any:
        ...

    @abstractmethod
    async def cancel_job(self, job_id: Any) -> Any:
        ...
