"""
In-memory store for the annotations of one editing session.
"""
from dataclasses import dataclass
from typing import Any, Dict, Iterator, List, Mapping, Optional, Tuple

import structlog

from inkmark.core.errors import DuplicateIdError
from .models import Annotation, CommentAnnotation, with_changes

logger = structlog.get_logger()


@dataclass(frozen=True)
class StoreSnapshot:
    """Read-only copy of the store taken at a point in time."""

    annotations: Tuple[Annotation, ...] = ()
    comments: Tuple[CommentAnnotation, ...] = ()

    @property
    def records(self) -> Tuple[Annotation, ...]:
        """Export order: all non-comment annotations, then all comments."""
        return self.annotations + self.comments

    def __iter__(self) -> Iterator[Annotation]:
        return iter(self.records)

    def __len__(self) -> int:
        return len(self.annotations) + len(self.comments)


class AnnotationStore:
    """Owns the annotation and comment collections of a session."""

    def __init__(self):
        self._annotations: List[Annotation] = []
        self._comments: List[CommentAnnotation] = []
        # id -> the collection holding that record
        self._index: Dict[str, List[Annotation]] = {}

    def _collection_for(self, record: Annotation) -> List[Annotation]:
        return self._comments if record.is_comment else self._annotations

    def add(self, record: Annotation) -> None:
        """
        Append a record to the end of its collection.

        Args:
            record: Annotation to add

        Raises:
            DuplicateIdError: If a record with the same id is already stored
        """
        if record.id in self._index:
            raise DuplicateIdError(record.id)

        collection = self._collection_for(record)
        collection.append(record)
        self._index[record.id] = collection
        logger.debug(
            "annotation_added",
            annotation_id=record.id,
            type=record.annotation_type.value,
            page=record.page,
        )

    def update(self, annotation_id: str, changes: Optional[Mapping[str, Any]] = None,
               **fields: Any) -> bool:
        """
        Merge fields into the record with the given id.

        `id`, `type`, `page` and `created_at` cannot change and are ignored.
        An unknown id is not an error.

        Args:
            annotation_id: Id of the record to update
            changes: Field names mapped to new values
            **fields: Same as `changes`, as keyword arguments

        Returns:
            True if a record with that id exists

        Raises:
            ValueError: If a value would leave the record undrawable; the
                stored record is left unchanged
        """
        collection = self._index.get(annotation_id)
        if collection is None:
            logger.debug("annotation_update_skipped", annotation_id=annotation_id)
            return False

        merged = dict(changes or {})
        merged.update(fields)

        for i, record in enumerate(collection):
            if record.id == annotation_id:
                collection[i] = with_changes(record, merged)
                logger.debug(
                    "annotation_updated", annotation_id=annotation_id, fields=sorted(merged)
                )
                return True
        return False

    def delete(self, annotation_id: str) -> bool:
        """
        Remove the record with the given id.

        Returns:
            True if a record was removed, False if the id was unknown
        """
        collection = self._index.pop(annotation_id, None)
        if collection is None:
            return False

        for i, record in enumerate(collection):
            if record.id == annotation_id:
                del collection[i]
                break
        logger.debug("annotation_deleted", annotation_id=annotation_id)
        return True

    def get(self, annotation_id: str) -> Optional[Annotation]:
        collection = self._index.get(annotation_id)
        if collection is None:
            return None
        return next((r for r in collection if r.id == annotation_id), None)

    def list_by_page(self, page_number: int) -> Iterator[Annotation]:
        """
        Lazily yield the records on a page for overlay rendering.

        Annotations come first, then comments, each in insertion order.
        """
        for record in self._annotations:
            if record.page == page_number:
                yield record
        for record in self._comments:
            if record.page == page_number:
                yield record

    @property
    def annotations(self) -> Tuple[Annotation, ...]:
        return tuple(self._annotations)

    @property
    def comments(self) -> Tuple[CommentAnnotation, ...]:
        return tuple(self._comments)

    def snapshot(self) -> StoreSnapshot:
        """Take the read-only view handed to the exporter."""
        return StoreSnapshot(tuple(self._annotations), tuple(self._comments))

    def clear(self) -> None:
        """Drop every record, e.g. when a new document is loaded."""
        self._annotations.clear()
        self._comments.clear()
        self._index.clear()

    def __contains__(self, annotation_id: object) -> bool:
        return annotation_id in self._index

    def __len__(self) -> int:
        return len(self._annotations) + len(self._comments)
