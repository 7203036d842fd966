"""
Unit tests for ProductService.

Run: pytest tests/unit/test_product_service.py -v
"""

import re
import pytest
from pydantic import ValidationError as PydanticValidationError

from services.product_service import (
    ProductService,
    filter_products,
    generate_unique_code,
    UNIQUE_CODE_LENGTH,
)
from models.product import (
    DEFAULT_HISTORY,
    DEFAULT_PHILOSOPHY,
    ProductCreate,
    ProductListItem,
    ProductStatus,
    ProductUpdate,
)
from exceptions import DatabaseError, MediaModeConflictError, ProductNotFoundError, ValidationError

from tests.factories import ProductFactory, ProductImageFactory, UMKMFactory, upload


def _create_data(umkm_id: int, **overrides) -> ProductCreate:
    fields = {"umkm_id": umkm_id, "name": "Kopi Arabika", "description": "Single origin"}
    fields.update(overrides)
    return ProductCreate(**fields)


class TestUniqueCode:
    """Tests for generate_unique_code()"""

    def test_code_is_ten_alphanumeric_characters(self):
        """Should draw exactly 10 characters from [A-Za-z0-9]."""
        # Act
        codes = [generate_unique_code() for _ in range(50)]

        # Assert
        for code in codes:
            assert len(code) == UNIQUE_CODE_LENGTH
            assert re.fullmatch(r"[A-Za-z0-9]{10}", code)


class TestProductCreateValidation:
    """Tests for ProductCreate field rules"""

    def test_blank_history_and_philosophy_get_placeholders(self):
        """Should replace blank history and philosophy with placeholder text."""
        # Act
        data = ProductCreate(umkm_id=1, name="Keripik", description="Pedas", history="  ", philosophy="")

        # Assert
        assert data.history == DEFAULT_HISTORY
        assert data.philosophy == DEFAULT_PHILOSOPHY

    @pytest.mark.parametrize("missing", ["name", "description", "umkm_id"])
    def test_required_fields(self, missing):
        """Should reject a form without name, description or UMKM."""
        # Arrange
        fields = {"umkm_id": 1, "name": "Keripik", "description": "Pedas"}
        fields.pop(missing)

        # Act & Assert
        with pytest.raises(PydanticValidationError):
            ProductCreate(**fields)


class TestProductServiceCreate:
    """Tests for ProductService.create()"""

    def test_create_is_active_with_code_and_images(self, mock_db):
        """Should store an active product with every submitted image in order."""
        # Arrange
        umkm = UMKMFactory.seed(mock_db)
        service = ProductService()

        # Act
        result = service.create(
            _create_data(umkm["id"]),
            images=[upload("a.jpg", b"a"), upload("b.PNG", b"b")]
        )

        # Assert
        product = result.product
        assert product.status == ProductStatus.ACTIVE
        assert re.fullmatch(r"[A-Za-z0-9]{10}", product.unique_code)
        assert [img.sort_order for img in product.images] == [0, 1]
        assert [img.is_featured for img in product.images] == [True, False]
        assert product.images[1].image_path.endswith(".png")
        assert product.video_path is None
        assert product.umkm.id == umkm["id"]
        assert result.media.failed == []
        assert mock_db.storage.paths() == {img.image_path for img in product.images}

    def test_create_with_video(self, mock_db):
        """Should store the video path on the product."""
        # Arrange
        umkm = UMKMFactory.seed(mock_db)
        service = ProductService()

        # Act
        result = service.create(_create_data(umkm["id"]), video=upload("clip.mp4", b"v"))

        # Assert
        assert result.product.video_path.startswith("products/videos/")
        assert result.product.video_path.endswith(".mp4")
        assert result.product.video_url.endswith(result.product.video_path)
        assert result.product.images == []

    def test_create_skips_failed_image_upload(self, mock_db):
        """Should keep going when one image fails and feature the first stored one."""
        # Arrange
        umkm = UMKMFactory.seed(mock_db)
        mock_db.storage.fail_upload_when = lambda path, content: content == b"bad"
        service = ProductService()

        # Act
        result = service.create(
            _create_data(umkm["id"]),
            images=[upload("broken.jpg", b"bad"), upload("ok.jpg", b"ok")]
        )

        # Assert
        images = result.product.images
        assert len(images) == 1
        assert images[0].is_featured is True
        assert images[0].sort_order == 1
        assert result.media.failed == ["broken.jpg"]

    def test_create_rejects_images_and_video(self, mock_db):
        """Should refuse both media kinds before writing anything."""
        # Arrange
        umkm = UMKMFactory.seed(mock_db)
        service = ProductService()

        # Act & Assert
        with pytest.raises(MediaModeConflictError) as exc_info:
            service.create(
                _create_data(umkm["id"]),
                images=[upload("a.jpg")],
                video=upload("clip.mp4")
            )

        assert exc_info.value.status_code == 422
        assert mock_db.tables["products"] == []
        assert mock_db.storage.calls == []

    def test_create_database_error(self, mock_db):
        """Should raise DatabaseError when the insert fails."""
        # Arrange
        mock_db.fail("products", "insert")
        service = ProductService()

        # Act & Assert
        with pytest.raises(DatabaseError):
            service.create(_create_data(1), images=[upload()])

        assert mock_db.storage.calls == []


class TestProductServiceRead:
    """Tests for ProductService.get_all() / get_detail()"""

    def test_get_all_newest_first_with_umkm_name(self, mock_db):
        """Should list products newest first with their maker's name."""
        # Arrange
        umkm = UMKMFactory.seed(mock_db, name="Batik Sari")
        older = ProductFactory.seed(mock_db, umkm_id=umkm["id"], name="Older")
        newer = ProductFactory.seed(mock_db, umkm_id=umkm["id"], name="Newer")
        service = ProductService()

        # Act
        products, total = service.get_all()

        # Assert
        assert total == 2
        assert [p.id for p in products] == [newer["id"], older["id"]]
        assert products[0].umkm_name == "Batik Sari"

    def test_get_all_search_matches_umkm_name_and_code(self, mock_db):
        """Should match search text against name, code and UMKM name."""
        # Arrange
        batik = UMKMFactory.seed(mock_db, name="Batik Sari")
        kopi = UMKMFactory.seed(mock_db, name="Kopi Gunung")
        ProductFactory.seed(mock_db, umkm_id=batik["id"], name="Kain", unique_code="AAAA111111")
        ProductFactory.seed(mock_db, umkm_id=kopi["id"], name="Bubuk", unique_code="BBBB222222")
        service = ProductService()

        # Act
        by_umkm, _ = service.get_all(search="batik")
        by_code, _ = service.get_all(search="bbbb2")

        # Assert
        assert [p.name for p in by_umkm] == ["Kain"]
        assert [p.name for p in by_code] == ["Bubuk"]

    def test_get_detail_orders_images(self, mock_db):
        """Should return images in sort order with public URLs."""
        # Arrange
        product = ProductFactory.seed(mock_db)
        ProductImageFactory.seed(mock_db, product["id"], sort_order=2)
        ProductImageFactory.seed(mock_db, product["id"], sort_order=0, is_featured=True)
        service = ProductService()

        # Act
        detail = service.get_detail(product["id"])

        # Assert
        assert [img.sort_order for img in detail.images] == [0, 2]
        assert detail.images[0].image_url.startswith("https://")
        assert "/storage/v1/object/public/products/" in detail.images[0].image_url

    def test_get_detail_not_found(self, mock_db):
        """Should raise ProductNotFoundError for an unknown id."""
        # Arrange
        service = ProductService()

        # Act & Assert
        with pytest.raises(ProductNotFoundError):
            service.get_detail(999)


class TestProductServiceUpdate:
    """Tests for ProductService.update()"""

    def test_update_fields_only(self, mock_db):
        """Should change given fields and leave media alone without a mode."""
        # Arrange
        product = ProductFactory.seed(mock_db)
        image = ProductImageFactory.seed(mock_db, product["id"], is_featured=True)
        service = ProductService()

        # Act
        result = service.update(product["id"], ProductUpdate(name="Renamed", status=ProductStatus.INACTIVE))

        # Assert
        assert result.product.name == "Renamed"
        assert result.product.status == ProductStatus.INACTIVE
        assert [img.id for img in result.product.images] == [image["id"]]
        assert result.product.unique_code == product["unique_code"]

    def test_update_not_found(self, mock_db):
        """Should raise ProductNotFoundError for an unknown id."""
        # Arrange
        service = ProductService()

        # Act & Assert
        with pytest.raises(ProductNotFoundError):
            service.update(404, ProductUpdate(name="x"))

    def test_remove_images_without_mode_rejected(self, mock_db):
        """Should refuse image removals when no media mode is chosen."""
        # Arrange
        product = ProductFactory.seed(mock_db, name="Kopi")
        image = ProductImageFactory.seed(mock_db, product["id"], is_featured=True)
        service = ProductService()

        # Act & Assert
        with pytest.raises(ValidationError):
            service.update(product["id"], ProductUpdate(name="Renamed"), remove_image_ids=[image["id"]])

        assert mock_db.rows("products", id=product["id"])[0]["name"] == "Kopi"
        assert len(mock_db.rows("product_images", product_id=product["id"])) == 1


class TestProductServiceDelete:
    """Tests for ProductService.delete()"""

    def test_delete_removes_rows_and_objects(self, mock_db):
        """Should delete product and image rows, then the storage objects."""
        # Arrange
        product = ProductFactory.seed(mock_db)
        image = ProductImageFactory.seed(mock_db, product["id"])
        service = ProductService()

        # Act
        report = service.delete(product["id"])

        # Assert
        assert mock_db.rows("products", id=product["id"]) == []
        assert mock_db.rows("product_images", product_id=product["id"]) == []
        assert report.removed == [image["image_path"]]
        assert mock_db.storage.paths() == set()

    def test_delete_storage_failure_is_not_fatal(self, mock_db):
        """Should still delete the rows when object removal fails."""
        # Arrange
        product = ProductFactory.seed(mock_db)
        image = ProductImageFactory.seed(mock_db, product["id"])
        mock_db.storage.fail_remove_when = lambda path: True
        service = ProductService()

        # Act
        report = service.delete(product["id"])

        # Assert
        assert mock_db.rows("products", id=product["id"]) == []
        assert report.orphaned == [image["image_path"]]

    def test_failed_product_delete_keeps_images(self, mock_db):
        """Should leave image rows and objects alone when the product row stays."""
        # Arrange
        product = ProductFactory.seed(mock_db)
        image = ProductImageFactory.seed(mock_db, product["id"])
        mock_db.fail("products", "delete")
        service = ProductService()

        # Act & Assert
        with pytest.raises(DatabaseError):
            service.delete(product["id"])

        assert len(mock_db.rows("products", id=product["id"])) == 1
        assert [row["id"] for row in mock_db.rows("product_images", product_id=product["id"])] == [image["id"]]
        assert mock_db.storage.paths() == {image["image_path"]}
        assert ("product_images", "delete") not in mock_db.calls

    def test_image_row_cleanup_failure_is_not_fatal(self, mock_db):
        """Should still purge objects once the product row is gone."""
        # Arrange
        product = ProductFactory.seed(mock_db)
        image = ProductImageFactory.seed(mock_db, product["id"])
        mock_db.fail("product_images", "delete")
        service = ProductService()

        # Act
        report = service.delete(product["id"])

        # Assert
        assert mock_db.rows("products", id=product["id"]) == []
        assert report.removed == [image["image_path"]]


class TestFilterProducts:
    """Tests for filter_products()"""

    def _item(self, **overrides) -> ProductListItem:
        fields = dict(
            id=1, umkm_id=1, name="Sambal", description="d", history="h", philosophy="p",
            unique_code="XyZ1234567", status="active", created_at="2025-01-01T00:00:00Z",
            umkm_name=None
        )
        fields.update(overrides)
        return ProductListItem(**fields)

    def test_blank_search_returns_all(self):
        """Should not filter on empty or whitespace search."""
        # Arrange
        items = [self._item()]

        # Act & Assert
        assert filter_products(items, None) == items
        assert filter_products(items, "   ") == items

    def test_case_insensitive(self):
        """Should ignore case and tolerate a missing UMKM name."""
        # Arrange
        items = [self._item(name="Sambal Bawang"), self._item(id=2, name="Kerupuk")]

        # Act
        result = filter_products(items, "BAWANG")

        # Assert
        assert [p.id for p in result] == [1]
