"""
Unit tests for the Supabase connection helpers.

Run: pytest tests/unit/test_database.py -v
"""

import pytest
from unittest.mock import patch

from config import SupabaseConnectionError, check_connection, get_supabase_client, reset_connection


@pytest.fixture
def fresh_client_cache():
    reset_connection()
    yield
    reset_connection()


class TestGetSupabaseClient:

    def test_connection_failure_raises(self, fresh_client_cache):
        """Should wrap client creation errors in SupabaseConnectionError."""
        with patch("config.database.create_client", side_effect=Exception("bad url")):
            with pytest.raises(SupabaseConnectionError, match="bad url"):
                get_supabase_client()

    def test_client_is_cached(self, fresh_client_cache):
        with patch("config.database.create_client", return_value=object()) as create:
            first = get_supabase_client()
            second = get_supabase_client()

        assert first is second
        assert create.call_count == 1


class TestCheckConnection:

    def test_unhealthy_when_client_fails(self, fresh_client_cache):
        with patch("config.database.create_client", side_effect=Exception("down")):
            result = check_connection()

        assert result["status"] == "unhealthy"
        assert "down" in result["error"]
