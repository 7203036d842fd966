"""
Product media lifecycle.

A product shows either an ordered set of images or a single video.
Edits run in three steps so an interrupted request never leaves rows
pointing at deleted objects:

1. Stage: upload the new files (failed uploads are skipped).
2. Swap: point the metadata rows at the staged files and drop the old
   references, deleting rows last. If this fails, staged rows and objects
   are removed again and the previous video path is put back.
3. Clean up: remove the storage objects that are no longer referenced.
   Failures here only leave orphaned objects, which are logged.
"""

from typing import Optional
import structlog

from config import get_supabase_client
from models.product import (
    MediaMode,
    MediaReport,
    ProductImageResponse,
    ProductResponse,
)
from exceptions import (
    DatabaseError,
    ProductImageNotFoundError,
    StorageError,
)
from services.storage_service import (
    StorageService,
    UploadedFile,
    get_product_storage,
)
from utils.storage_paths import product_image_path, product_video_path

logger = structlog.get_logger(__name__)


def to_image_responses(rows: list[dict], storage: StorageService) -> list[ProductImageResponse]:
    """Image rows in carousel order with public URLs."""
    ordered = sorted(rows or [], key=lambda r: (r.get("sort_order") or 0, r["id"]))
    return [
        ProductImageResponse(**row, image_url=storage.public_url(row["image_path"]))
        for row in ordered
    ]


class MediaService:
    """
    Keeps product images, video and their storage objects consistent.
    """

    def __init__(self, client=None, storage: Optional[StorageService] = None):
        self.db = client or get_supabase_client()
        self.storage = storage or get_product_storage()
        self.images_table = "product_images"
        self.products_table = "products"

    # ===================
    # READ OPERATIONS
    # ===================

    def get_image_rows(self, product_id: int) -> list[dict]:
        """Raw image rows of one product in carousel order."""
        try:
            result = (
                self.db.table(self.images_table)
                .select("*")
                .eq("product_id", product_id)
                .order("sort_order")
                .execute()
            )
        except Exception as e:
            logger.error("get_product_images_failed", product_id=product_id, error=str(e))
            raise DatabaseError("select", str(e))
        return result.data

    def get_images(self, product_id: int) -> list[ProductImageResponse]:
        return to_image_responses(self.get_image_rows(product_id), self.storage)

    # ===================
    # CREATE
    # ===================

    def attach_initial_media(
        self,
        product_id: int,
        images: list[UploadedFile],
        video: Optional[UploadedFile] = None
    ) -> MediaReport:
        """
        Upload the media chosen on the create form.

        Images are uploaded one at a time; each stored image gets a row with
        sort_order equal to its position in the form. The first stored image
        is featured. Failed uploads are logged and skipped.
        """
        report = MediaReport()
        featured_assigned = False

        for index, file in enumerate(images):
            path = self._stage_file(product_image_path(file.filename, index), file, report)
            if path is None:
                continue
            try:
                self._insert_image_row(product_id, path, index, not featured_assigned)
                featured_assigned = True
            except Exception as e:
                logger.error(
                    "image_row_insert_failed",
                    product_id=product_id,
                    image_path=path,
                    error=str(e)
                )
                report.uploaded.remove(path)
                report.failed.append(file.filename)
                report.orphaned.extend(self.storage.remove([path]))

        if video is not None:
            path = self._stage_file(product_video_path(video.filename), video, report)
            if path is not None:
                try:
                    self._set_video_path(product_id, path)
                except Exception as e:
                    logger.error("video_path_update_failed", product_id=product_id, error=str(e))
                    report.uploaded.remove(path)
                    report.failed.append(video.filename)
                    report.orphaned.extend(self.storage.remove([path]))

        logger.info(
            "initial_media_attached",
            product_id=product_id,
            uploaded=len(report.uploaded),
            failed=len(report.failed)
        )
        return report

    # ===================
    # EDIT
    # ===================

    def update_media(
        self,
        product: ProductResponse,
        mode: MediaMode,
        images: Optional[list[UploadedFile]] = None,
        video: Optional[UploadedFile] = None,
        remove_image_ids: Optional[list[int]] = None
    ) -> MediaReport:
        """
        Apply an edit-form media change.

        The chosen mode wins: IMAGES drops the video, VIDEO drops every
        image. Files submitted for the other mode are ignored.

        Args:
            product: Product as it was before the edit
            mode: Media mode selected on the form
            images: New images to append (IMAGES mode)
            video: Replacement video (VIDEO mode)
            remove_image_ids: Existing images to delete (IMAGES mode)

        Returns:
            MediaReport describing uploads, removals and orphans

        Raises:
            DatabaseError: If the metadata swap fails (staged files are
                removed again)
        """
        images = images or []
        current_rows = self.get_image_rows(product.id)

        logger.info(
            "updating_product_media",
            product_id=product.id,
            mode=mode.value,
            from_mode=product.media_mode.value,
            new_images=len(images),
            new_video=video is not None
        )

        if mode == MediaMode.IMAGES:
            if video is not None:
                logger.warning("video_ignored_in_images_mode", product_id=product.id)
            return self._apply_images_mode(product, current_rows, images, remove_image_ids or [])

        if images:
            logger.warning("images_ignored_in_video_mode", product_id=product.id, count=len(images))
        return self._apply_video_mode(product, current_rows, video)

    def _apply_images_mode(
        self,
        product: ProductResponse,
        current_rows: list[dict],
        images: list[UploadedFile],
        remove_image_ids: list[int]
    ) -> MediaReport:
        report = MediaReport()
        remove_ids = set(remove_image_ids)
        removed_rows = [row for row in current_rows if row["id"] in remove_ids]
        kept_rows = [row for row in current_rows if row["id"] not in remove_ids]

        # Stage
        staged = []
        for index, file in enumerate(images):
            path = self._stage_file(product_image_path(file.filename, index), file, report)
            if path is not None:
                staged.append((index, path))

        # Swap: row deletions run last, after every reversible step
        inserted_ids = []
        video_cleared = False
        try:
            for position, (index, path) in enumerate(staged):
                row = self._insert_image_row(
                    product.id,
                    path,
                    len(kept_rows) + index,
                    is_featured=not kept_rows and position == 0
                )
                inserted_ids.append(row["id"])

            if product.video_path:
                self._set_video_path(product.id, None)
                video_cleared = True

            for row in removed_rows:
                self.db.table(self.images_table).delete().eq("id", row["id"]).execute()

            if kept_rows or staged:
                self._ensure_featured(product.id)

        except Exception as e:
            if video_cleared:
                self._restore_video_path(product.id, product.video_path)
            self._compensate(product.id, inserted_ids, [path for _, path in staged], report)
            logger.error("media_swap_failed", product_id=product.id, mode="images", error=str(e))
            raise DatabaseError("update", str(e), details={"product_id": product.id})

        # Clean up
        stale = [row["image_path"] for row in removed_rows]
        if product.video_path:
            stale.append(product.video_path)
        self._cleanup(stale, report)

        return report

    def _apply_video_mode(
        self,
        product: ProductResponse,
        current_rows: list[dict],
        video: Optional[UploadedFile]
    ) -> MediaReport:
        report = MediaReport()

        # Stage
        new_path = None
        if video is not None:
            new_path = self._stage_file(product_video_path(video.filename), video, report)

        # Swap: row deletions run last, after the reversible video update
        video_set = False
        try:
            if new_path:
                self._set_video_path(product.id, new_path)
                video_set = True

            for row in current_rows:
                self.db.table(self.images_table).delete().eq("id", row["id"]).execute()

        except Exception as e:
            if video_set:
                self._restore_video_path(product.id, product.video_path)
            self._compensate(product.id, [], [new_path] if new_path else [], report)
            logger.error("media_swap_failed", product_id=product.id, mode="video", error=str(e))
            raise DatabaseError("update", str(e), details={"product_id": product.id})

        # Clean up
        stale = [row["image_path"] for row in current_rows]
        if new_path and product.video_path:
            stale.append(product.video_path)
        self._cleanup(stale, report)

        return report

    # ===================
    # SINGLE IMAGE OPERATIONS
    # ===================

    def remove_image(self, product_id: int, image_id: int) -> MediaReport:
        """
        Delete one image of a product.

        The metadata row goes first; the storage object is removed
        afterwards and a failure there is only logged.

        Raises:
            ProductImageNotFoundError: If the image doesn't belong to the product
        """
        row = self._get_image_row(product_id, image_id)
        report = MediaReport()

        try:
            self.db.table(self.images_table).delete().eq("id", image_id).execute()
            if row.get("is_featured"):
                self._ensure_featured(product_id)
        except Exception as e:
            logger.error("delete_image_failed", product_id=product_id, image_id=image_id, error=str(e))
            raise DatabaseError("delete", str(e))

        self._cleanup([row["image_path"]], report)
        logger.info("product_image_removed", product_id=product_id, image_id=image_id)
        return report

    def set_featured(self, product_id: int, image_id: int) -> list[ProductImageResponse]:
        """
        Make one image the featured image of its product.

        Raises:
            ProductImageNotFoundError: If the image doesn't belong to the product
        """
        self._get_image_row(product_id, image_id)

        try:
            (
                self.db.table(self.images_table)
                .update({"is_featured": False})
                .eq("product_id", product_id)
                .execute()
            )
            (
                self.db.table(self.images_table)
                .update({"is_featured": True})
                .eq("id", image_id)
                .execute()
            )
        except Exception as e:
            logger.error("set_featured_failed", product_id=product_id, image_id=image_id, error=str(e))
            raise DatabaseError("update", str(e))

        logger.info("featured_image_set", product_id=product_id, image_id=image_id)
        return self.get_images(product_id)

    def purge(self, product: ProductResponse, image_rows: list[dict]) -> MediaReport:
        """Remove the storage objects of a deleted product."""
        report = MediaReport()
        stale = [row["image_path"] for row in image_rows]
        if product.video_path:
            stale.append(product.video_path)
        self._cleanup(stale, report)
        return report

    # ===================
    # HELPERS
    # ===================

    def _stage_file(self, path: str, file: UploadedFile, report: MediaReport) -> Optional[str]:
        """Upload one file; None when the upload failed."""
        try:
            self.storage.upload(path, file)
        except StorageError:
            logger.warning("media_upload_skipped", filename=file.filename, storage_path=path)
            report.failed.append(file.filename)
            return None
        report.uploaded.append(path)
        return path

    def _insert_image_row(self, product_id: int, path: str, sort_order: int, is_featured: bool) -> dict:
        result = (
            self.db.table(self.images_table)
            .insert({
                "product_id": product_id,
                "image_path": path,
                "sort_order": sort_order,
                "is_featured": is_featured,
            })
            .execute()
        )
        return result.data[0]

    def _set_video_path(self, product_id: int, path: Optional[str]) -> None:
        (
            self.db.table(self.products_table)
            .update({"video_path": path})
            .eq("id", product_id)
            .execute()
        )

    def _restore_video_path(self, product_id: int, path: Optional[str]) -> None:
        try:
            self._set_video_path(product_id, path)
        except Exception as e:
            logger.error("video_path_restore_failed", product_id=product_id, video_path=path, error=str(e))

    def _get_image_row(self, product_id: int, image_id: int) -> dict:
        try:
            result = (
                self.db.table(self.images_table)
                .select("*")
                .eq("id", image_id)
                .eq("product_id", product_id)
                .limit(1)
                .execute()
            )
        except Exception as e:
            logger.error("get_product_image_failed", image_id=image_id, error=str(e))
            raise DatabaseError("select", str(e))

        if not result.data:
            raise ProductImageNotFoundError(str(image_id))
        return result.data[0]

    def _ensure_featured(self, product_id: int) -> None:
        """Give the featured flag to the first image when none has it."""
        rows = self.get_image_rows(product_id)
        if not rows or any(row.get("is_featured") for row in rows):
            return
        first = min(rows, key=lambda r: (r.get("sort_order") or 0, r["id"]))
        (
            self.db.table(self.images_table)
            .update({"is_featured": True})
            .eq("id", first["id"])
            .execute()
        )
        logger.info("featured_image_promoted", product_id=product_id, image_id=first["id"])

    def _compensate(
        self,
        product_id: int,
        inserted_ids: list[int],
        staged_paths: list[str],
        report: MediaReport
    ) -> None:
        """Undo the staged part of a failed swap."""
        for image_id in inserted_ids:
            try:
                self.db.table(self.images_table).delete().eq("id", image_id).execute()
            except Exception as e:
                logger.error(
                    "compensation_row_delete_failed",
                    product_id=product_id,
                    image_id=image_id,
                    error=str(e)
                )
        report.orphaned.extend(self.storage.remove(staged_paths))
        report.uploaded = [p for p in report.uploaded if p not in staged_paths]

    def _cleanup(self, paths: list[str], report: MediaReport) -> None:
        orphaned = self.storage.remove(paths)
        report.orphaned.extend(orphaned)
        report.removed.extend(p for p in paths if p not in orphaned)
        if orphaned:
            logger.warning("orphaned_storage_objects", paths=orphaned)


# Singleton instance for convenience
_media_service: Optional[MediaService] = None


def get_media_service() -> MediaService:
    """Get or create MediaService instance."""
    global _media_service
    if _media_service is None:
        _media_service = MediaService()
    return _media_service
