"""Tests for the Supabase profile gateway"""
from unittest.mock import AsyncMock, Mock

import httpx
import pytest
from postgrest.exceptions import APIError

from storefront.cart import Cart
from storefront.errors import ProfileNotFound, Unavailable
from storefront.models import ScanSummary, UserProfile
from storefront.repositories import SupabaseProfileGateway, profile_to_row, row_to_profile


@pytest.fixture
def gateway(mock_supabase_client):
    return SupabaseProfileGateway(mock_supabase_client)


@pytest.mark.asyncio
async def test_get_profile(gateway, mock_supabase_client, sample_profile_row):
    """Test getting a profile by identity id"""
    table = mock_supabase_client.table.return_value
    table.execute.return_value = Mock(data=[sample_profile_row])

    profile = await gateway.get("user-123")

    mock_supabase_client.table.assert_called_with("profiles")
    table.eq.assert_called_with("id", "user-123")
    assert profile.user_id == "user-123"
    assert profile.recent_searches == ["linen"]
    assert Cart.from_list(profile.cart).total_items == 2


@pytest.mark.asyncio
async def test_get_profile_not_found(gateway):
    """Missing row maps to None"""
    assert await gateway.get("nobody") is None


@pytest.mark.asyncio
async def test_custom_table(mock_supabase_client):
    gateway = SupabaseProfileGateway(mock_supabase_client, table="shop_users")

    await gateway.get("user-123")

    mock_supabase_client.table.assert_called_with("shop_users")


@pytest.mark.asyncio
async def test_set_upserts_whole_row(gateway, mock_supabase_client):
    table = mock_supabase_client.table.return_value
    profile = UserProfile(user_id="user-123", display_name="Test", email="t@example.com")

    await gateway.set("user-123", profile)

    row = table.upsert.call_args.args[0]
    assert row["id"] == "user-123"
    assert "user_id" not in row
    assert row["cart"] == []
    assert row["is_privileged"] is False
    assert isinstance(row["created_at"], str)


@pytest.mark.asyncio
async def test_update_writes_fields(gateway, mock_supabase_client, sample_profile_row):
    table = mock_supabase_client.table.return_value
    table.execute.return_value = Mock(data=[sample_profile_row])

    await gateway.update("user-123", {"cart": []})

    table.update.assert_called_with({"cart": []})
    table.eq.assert_called_with("id", "user-123")


@pytest.mark.asyncio
async def test_update_missing_profile(gateway):
    with pytest.raises(ProfileNotFound) as exc_info:
        await gateway.update("nobody", {"cart": []})

    assert exc_info.value.user_id == "nobody"


@pytest.mark.asyncio
async def test_update_rejects_id_change(gateway):
    with pytest.raises(ValueError):
        await gateway.update("user-123", {"id": "other"})


@pytest.mark.asyncio
async def test_empty_update_skips_backend(gateway, mock_supabase_client):
    await gateway.update("user-123", {})

    mock_supabase_client.table.return_value.execute.assert_not_called()


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "error",
    [
        APIError({"message": "boom", "code": "500"}),
        httpx.ConnectError("connection refused"),
    ],
)
@pytest.mark.parametrize("operation", ["get", "set", "update"])
async def test_backend_errors_become_unavailable(gateway, mock_supabase_client, error, operation):
    mock_supabase_client.table.return_value.execute = AsyncMock(side_effect=error)

    with pytest.raises(Unavailable) as exc_info:
        if operation == "get":
            await gateway.get("user-123")
        elif operation == "set":
            await gateway.set("user-123", UserProfile(user_id="user-123"))
        else:
            await gateway.update("user-123", {"cart": []})

    assert exc_info.value.__cause__ is error


def test_row_conversion_keeps_scan_summary(sample_profile_row):
    row = {**sample_profile_row, "scan_summary": {"scan_id": "scan_1", "height": 172.5, "device": "mobile"}}

    profile = row_to_profile(row)

    assert profile.scan_summary == ScanSummary(scan_id="scan_1", height=172.5, device="mobile")
    assert profile_to_row(profile)["scan_summary"]["scan_id"] == "scan_1"


def test_row_with_null_columns(sample_profile_row):
    row = {**sample_profile_row, "cart": None, "recent_searches": None, "display_name": None}

    profile = row_to_profile(row)

    assert profile.cart == []
    assert profile.recent_searches == []
    assert profile.display_name == ""
