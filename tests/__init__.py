"""
Test suite for the Wardig UMKM Catalog.

Run all tests: pytest
Run with coverage: pytest --cov=. --cov-report=html
Run unit tests only: pytest tests/unit/
Run specific file: pytest tests/unit/test_media_service.py -v
"""
