# db/database.py

from supabase import create_client, acreate_client, Client, AsyncClient
import streamlit as st

from lounge.config import SupabaseConfig


def get_supabase_client(config: SupabaseConfig) -> Client:
    """
    Returns a cached Supabase client for the booking wizards.
    Uses the anon key; row-level security on the booking tables
    only allows inserts from public pages.
    """

    if "supabase_client" not in st.session_state:
        st.session_state.supabase_client = create_client(config.url, config.key)

    return st.session_state.supabase_client


async def create_async_supabase_client(config: SupabaseConfig) -> AsyncClient:
    # Realtime subscriptions are only available on the async client, and it
    # is bound to the event loop it was created on.
    return await acreate_client(config.url, config.key)
