"""Supabase client setup and database utilities."""

from functools import lru_cache
from supabase import create_client, Client
from postgrest import SyncPostgrestClient

from app.config import get_settings


@lru_cache
def get_supabase_client() -> Client:
    """Get cached Supabase client instance using the secret key.

    Bypasses RLS - only for backend maintenance, never for user requests.
    """
    settings = get_settings()
    return create_client(
        settings.supabase_url,
        settings.supabase_secret_key
    )


def get_authenticated_postgrest_client(access_token: str) -> SyncPostgrestClient:
    """Create a PostgREST client authenticated with the user's JWT.

    Talks to PostgREST directly with the publishable key as apikey and the
    user's JWT as Authorization, so row level security applies.
    """
    settings = get_settings()
    return SyncPostgrestClient(
        base_url=f"{settings.supabase_url}/rest/v1",
        headers={
            "apikey": settings.supabase_publishable_key,
            "Authorization": f"Bearer {access_token}",
        },
    )


class Database:
    """Database helper class for Allocatr tables."""

    def __init__(self, client: Client | SyncPostgrestClient):
        self.client = client

    # --- Users ---

    def get_user_by_id(self, user_id: str) -> dict | None:
        result = self.client.table("users").select("*").eq("id", user_id).execute()
        return result.data[0] if result.data else None

    def create_user(self, user_data: dict) -> dict:
        result = self.client.table("users").insert(user_data).execute()
        return result.data[0]

    # --- Budgets ---

    def get_budget(self, user_id: str, month: str) -> dict | None:
        result = (
            self.client.table("budgets")
            .select("*")
            .eq("user_id", user_id)
            .eq("month", month)
            .limit(1)
            .execute()
        )
        return result.data[0] if result.data else None

    def upsert_budget(self, budget_data: dict) -> dict:
        """Insert or replace the budget for (user_id, month)."""
        result = (
            self.client.table("budgets")
            .upsert(budget_data, on_conflict="user_id,month")
            .execute()
        )
        return result.data[0]

    def delete_budget(self, user_id: str, month: str) -> bool:
        result = (
            self.client.table("budgets")
            .delete()
            .eq("user_id", user_id)
            .eq("month", month)
            .execute()
        )
        return bool(result.data)

    # --- Transactions ---

    def get_transactions(
        self,
        user_id: str,
        date_from: str | None = None,
        date_before: str | None = None,
    ) -> list[dict]:
        query = self.client.table("transactions").select("*").eq("user_id", user_id)
        if date_from:
            query = query.gte("date", date_from)
        if date_before:
            query = query.lt("date", date_before)
        result = query.order("date", desc=True).execute()
        return result.data

    def get_transaction_by_id(self, transaction_id: str) -> dict | None:
        result = (
            self.client.table("transactions")
            .select("*")
            .eq("id", transaction_id)
            .execute()
        )
        return result.data[0] if result.data else None

    def create_transaction(self, transaction_data: dict) -> dict:
        result = self.client.table("transactions").insert(transaction_data).execute()
        return result.data[0]

    def update_transaction(self, transaction_id: str, updates: dict) -> dict | None:
        result = (
            self.client.table("transactions")
            .update(updates)
            .eq("id", transaction_id)
            .execute()
        )
        return result.data[0] if result.data else None

    def delete_transaction(self, transaction_id: str) -> bool:
        result = (
            self.client.table("transactions")
            .delete()
            .eq("id", transaction_id)
            .execute()
        )
        return bool(result.data)
