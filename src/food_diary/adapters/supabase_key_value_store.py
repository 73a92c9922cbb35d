"""Supabase-backed key-value store."""

from dataclasses import dataclass

from supabase import Client

KV_TABLE = "kv_store"


@dataclass
class SupabaseKeyValueStore:
    """Stores JSON values in a Supabase table keyed by name."""

    client: Client

    def get(self, key: str) -> object | None:
        """Return the stored value for a key, if present."""
        response = (
            self.client.table(KV_TABLE)
            .select("value")
            .eq("key", key)
            .limit(1)
            .execute()
        )
        if not response.data:
            return None
        return response.data[0].get("value")

    def set(self, key: str, value: object) -> None:
        """Insert or replace the value for a key."""
        self.client.table(KV_TABLE).upsert({"key": key, "value": value}).execute()
