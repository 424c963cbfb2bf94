"""Change source for the host's editor context.

The host reports which document has focus and which documents are visible;
the history view of ``GitExplorer`` follows these through debouncers.
Documents are plain filesystem paths.
"""

from typing import List, Optional, Sequence

from .events import EventEmitter


class DocumentTracker:
    """Tracks the active and visible documents of the host."""

    def __init__(self, active_document: Optional[str] = None,
                 visible_documents: Sequence[str] = ()):
        self._active_document = active_document
        self._visible_documents: List[str] = list(visible_documents)
        if active_document is not None and active_document not in self._visible_documents:
            self._visible_documents.append(active_document)

        self.on_did_change_active_document: EventEmitter[Optional[str]] = EventEmitter('ActiveDocumentChanged')
        self.on_did_change_visible_documents: EventEmitter[List[str]] = EventEmitter('VisibleDocumentsChanged')

    @property
    def active_document(self) -> Optional[str]:
        return self._active_document

    @property
    def visible_documents(self) -> List[str]:
        return list(self._visible_documents)

    async def set_active_document(self, document: Optional[str]) -> None:
        self._active_document = document
        await self.on_did_change_active_document.fire(document)

    async def set_visible_documents(self, documents: Sequence[str]) -> None:
        self._visible_documents = list(documents)
        await self.on_did_change_visible_documents.fire(self.visible_documents)

    def dispose(self) -> None:
        self.on_did_change_active_document.clear()
        self.on_did_change_visible_documents.clear()
