import pytest


@pytest.fixture
def anyio_backend() -> str:
    # The service schedules notifications with asyncio.create_task, so the
    # async tests target the asyncio backend only.
    return "asyncio"
