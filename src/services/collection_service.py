"""Collections: named groupings of a user's bookmarks."""

import logging

from sqlalchemy import func
from sqlalchemy.orm import Session, joinedload

from src.models import Bookmark, Collection
from src.services.payloads import not_found, recipe_payload
from src.services.storage import BlobStore
from src.services.validation import validate_length

logger = logging.getLogger(__name__)

NAME_MIN_LENGTH = 1
NAME_MAX_LENGTH = 50


class CollectionService:
    """Service for creating, filling and removing bookmark collections."""

    def __init__(self, db: Session, store: BlobStore):
        self.db = db
        self.store = store

    def _get_owned(self, user_id: int, collection_id: int) -> Collection:
        collection = (
            self.db.query(Collection)
            .filter(Collection.id == collection_id, Collection.user_id == user_id)
            .first()
        )
        if not collection:
            raise not_found("Collection")
        return collection

    def list_for_user(self, user_id: int) -> list[dict]:
        """The user's collections with their bookmark counts."""
        collections = (
            self.db.query(Collection)
            .filter(Collection.user_id == user_id)
            .order_by(Collection.created_at, Collection.id)
            .all()
        )
        counts = dict(
            self.db.query(Bookmark.collection_id, func.count(Bookmark.id))
            .filter(Bookmark.user_id == user_id, Bookmark.collection_id.isnot(None))
            .group_by(Bookmark.collection_id)
            .all()
        )
        return [
            {
                "id": c.id,
                "name": c.name,
                "created_at": c.created_at,
                "count": counts.get(c.id, 0),
            }
            for c in collections
        ]

    def create(self, user_id: int, name: str) -> Collection:
        trimmed = validate_length(name, NAME_MIN_LENGTH, NAME_MAX_LENGTH, "Name")
        collection = Collection(user_id=user_id, name=trimmed)
        self.db.add(collection)
        self.db.commit()
        self.db.refresh(collection)
        return collection

    def remove(self, user_id: int, collection_id: int) -> int:
        """
        Delete a collection, moving its bookmarks to "uncategorized".

        Bookmarks are never deleted. The reassignment and the delete share one
        commit; reconcile_orphans repairs stores where they could not.

        Returns:
            Number of bookmarks moved to uncategorized
        """
        collection = self._get_owned(user_id, collection_id)

        moved = (
            self.db.query(Bookmark)
            .filter(Bookmark.collection_id == collection.id)
            .update({"collection_id": None}, synchronize_session=False)
        )
        self.db.delete(collection)
        self.db.commit()

        logger.info(f"Deleted collection {collection_id}, {moved} bookmarks uncategorized")
        return moved

    def move_bookmark(
        self, user_id: int, bookmark_id: int, collection_id: int | None = None
    ) -> Bookmark:
        """Move a bookmark into a collection, or to uncategorized when None."""
        bookmark = (
            self.db.query(Bookmark)
            .filter(Bookmark.id == bookmark_id, Bookmark.user_id == user_id)
            .first()
        )
        if not bookmark:
            raise not_found("Bookmark")

        if collection_id is not None:
            self._get_owned(user_id, collection_id)

        bookmark.collection_id = collection_id
        self.db.commit()
        self.db.refresh(bookmark)
        return bookmark

    def get_bookmarks(self, user_id: int, collection_id: int | None = None) -> list[dict]:
        """
        Recipes bookmarked into a collection, or uncategorized ones when None.

        Recipes unpublished since bookmarking are hidden unless the caller owns them.
        """
        query = (
            self.db.query(Bookmark)
            .options(joinedload(Bookmark.recipe))
            .filter(Bookmark.user_id == user_id)
        )
        if collection_id is not None:
            self._get_owned(user_id, collection_id)
            query = query.filter(Bookmark.collection_id == collection_id)
        else:
            query = query.filter(Bookmark.collection_id.is_(None))

        bookmarks = query.order_by(Bookmark.created_at.desc(), Bookmark.id.desc()).all()

        return [
            recipe_payload(b.recipe, self.store, bookmark_id=b.id, collection_id=b.collection_id)
            for b in bookmarks
            if b.recipe is not None and (b.recipe.is_published or b.recipe.user_id == user_id)
        ]
