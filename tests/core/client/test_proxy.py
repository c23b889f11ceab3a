from unittest.mock import AsyncMock, MagicMock

import pytest

from organizations_account.core.client.proxy import AioBaseClientProxy


class TestAioBaseClientProxy:

    @pytest.fixture
    def isolated_mock_session(self) -> AsyncMock:
        """Session whose create_client is a plain MagicMock returning a context manager."""
        mock_session = AsyncMock()
        mock_session.create_client = MagicMock()
        return mock_session

    @pytest.fixture
    def mock_client_cm(self, isolated_mock_session: AsyncMock) -> AsyncMock:
        mock_client_cm = AsyncMock()
        mock_client_cm.__aenter__ = AsyncMock(return_value=AsyncMock())
        mock_client_cm.__aexit__ = AsyncMock(return_value=None)
        isolated_mock_session.create_client.return_value = mock_client_cm
        return mock_client_cm

    def test_initialization(self, isolated_mock_session: AsyncMock) -> None:
        """Test that a new proxy holds its settings and no client."""
        proxy = AioBaseClientProxy(
            session=isolated_mock_session,
            region="us-east-1",
            service_name="organizations",
        )

        assert proxy.session == isolated_mock_session
        assert proxy.region == "us-east-1"
        assert proxy.service_name == "organizations"
        assert proxy._client is None

    def test_client_outside_context_raises(
        self, isolated_mock_session: AsyncMock
    ) -> None:
        """Test that the client cannot be used outside the async context."""
        proxy = AioBaseClientProxy(
            session=isolated_mock_session, region="us-east-1", service_name="account"
        )

        with pytest.raises(RuntimeError, match="account client is not open"):
            _ = proxy.client

    @pytest.mark.asyncio
    async def test_context_manager_lifecycle(
        self, isolated_mock_session: AsyncMock, mock_client_cm: AsyncMock
    ) -> None:
        """Test that the client is opened on enter and released on exit."""
        proxy = AioBaseClientProxy(
            session=isolated_mock_session,
            region="us-east-1",
            service_name="organizations",
        )

        async with proxy as entered_proxy:
            assert entered_proxy is proxy
            assert proxy.client is mock_client_cm.__aenter__.return_value
            isolated_mock_session.create_client.assert_called_once_with(
                service_name="organizations", region_name="us-east-1"
            )

        mock_client_cm.__aexit__.assert_awaited_once_with(None, None, None)
        assert proxy._client is None

    @pytest.mark.asyncio
    async def test_context_manager_with_exception(
        self, isolated_mock_session: AsyncMock, mock_client_cm: AsyncMock
    ) -> None:
        """Test that the client is closed and the exception propagates."""
        proxy = AioBaseClientProxy(
            session=isolated_mock_session, region="us-east-1", service_name="account"
        )

        with pytest.raises(ValueError, match="boom"):
            async with proxy:
                raise ValueError("boom")

        mock_client_cm.__aexit__.assert_awaited_once()
        assert mock_client_cm.__aexit__.await_args.args[0] is ValueError
        assert proxy._client is None

