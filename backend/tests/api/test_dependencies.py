"""Tests for the service container."""

import pytest
from unittest.mock import patch

from api.dependencies import ServiceContainer, get_container, reset_container
from modules.directory.client import DirectoryClient
from modules.profiles.repository import InMemoryProfileStore, SupabaseProfileStore
from modules.profiles.resolver import ProfileResolver
from modules.profiles.search import SearchRanker
from shared.config import Settings


def memory_settings(**overrides) -> Settings:
    return Settings(
        _env_file=None,
        profile_store="memory",
        intra_client_id="uid",
        intra_client_secret="secret",
        **overrides,
    )


class TestServiceContainer:
    def test_services_are_cached(self):
        container = ServiceContainer(memory_settings())
        assert container.resolver is container.resolver
        assert container.search is container.search
        assert container.credentials is container.credentials

    def test_wiring_shares_one_store_and_credential(self):
        container = ServiceContainer(memory_settings())

        assert isinstance(container.profile_store, InMemoryProfileStore)
        assert isinstance(container.directory, DirectoryClient)
        assert isinstance(container.resolver, ProfileResolver)
        assert isinstance(container.search, SearchRanker)
        assert container.resolver.writer is container.writer
        assert container.directory._credentials is container.credentials

    @patch("shared.database.create_client")
    @patch("shared.database.get_settings")
    def test_supabase_store(self, mock_settings, mock_create):
        from shared.database import reset_client_cache

        mock_settings.return_value.supabase_url = "https://test.supabase.co"
        mock_settings.return_value.supabase_service_role_key = "key"
        reset_client_cache()
        container = ServiceContainer(Settings(_env_file=None))
        try:
            assert isinstance(container.profile_store, SupabaseProfileStore)
        finally:
            reset_client_cache()

    def test_populator_campus_override(self):
        container = ServiceContainer(memory_settings(intra_campus_id=1))
        assert container.populator()._campus_id == 1
        assert container.populator(campus_id=9)._campus_id == 9

    def test_reset(self):
        container = ServiceContainer(memory_settings())
        resolver = container.resolver
        container.reset()
        assert container.resolver is not resolver

    @pytest.mark.asyncio
    async def test_aclose_drains_writes(self):
        container = ServiceContainer(memory_settings())
        done = []

        async def write():
            done.append(True)

        container.writer.spawn(write, "test write")
        _ = container.http
        await container.aclose()

        assert done == [True]
        assert container.writer.pending == 0


class TestContainerSingleton:
    def test_get_container_singleton(self):
        assert get_container() is get_container()

    def test_reset_container(self):
        first = get_container()
        reset_container()
        assert get_container() is not first
