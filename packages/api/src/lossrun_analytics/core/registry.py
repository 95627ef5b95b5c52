# This project was developed with assistance from AI tools.
"""Registry of applications exposed by the analytics API."""

from collections.abc import Iterable, Iterator

from ..errors import AppNotFoundError
from .config import AppEntry, settings


class AppRegistry:
    """Lookup table of known applications, keyed by ``app_id``.

    Order of iteration is the configured order.
    """

    def __init__(self, entries: Iterable[AppEntry]) -> None:
        self._apps: dict[str, AppEntry] = {}
        for entry in entries:
            self._apps[entry.app_id] = entry

    def __iter__(self) -> Iterator[AppEntry]:
        return iter(self._apps.values())

    def __len__(self) -> int:
        return len(self._apps)

    def __contains__(self, app_id: object) -> bool:
        return app_id in self._apps

    def get(self, app_id: str) -> AppEntry:
        """Return the entry for ``app_id`` or raise AppNotFoundError."""
        try:
            return self._apps[app_id]
        except KeyError:
            raise AppNotFoundError(app_id) from None


def get_app_registry() -> AppRegistry:
    """FastAPI dependency -- registry built from settings."""
    return AppRegistry(settings.APP_REGISTRY)
