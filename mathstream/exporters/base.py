"""base exporter interface."""

from abc import ABC, abstractmethod

from mathstream.core.models import Session


class Exporter(ABC):  # pylint: disable=too-few-public-methods
    """abstract base class for session exporters."""

    @abstractmethod
    def export(
        self,
        session: Session,
        destination: str,
        dry_run: bool = False,
        overwrite: bool = False,
    ) -> None:
        """
        Export a session to the destination.

        Args:
            session: The session to export
            destination: Where to write the export (interpretation varies by exporter)
            dry_run: If True, don't actually write anything
            overwrite: If True, overwrite existing content
        """
        ...  # pylint: disable=unnecessary-ellipsis
