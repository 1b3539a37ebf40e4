import os
import tempfile

import pytest

# Keep tests deterministic and local-only; must run before media_gateway.config is imported.
os.environ["STORAGE_BACKEND"] = "local"
os.environ["LOCAL_STORAGE_PATH"] = tempfile.mkdtemp(prefix="media_gateway_test_")
os.environ["PUBLIC_BASE_URL"] = "http://testserver"
os.environ["JWT_SECRET"] = "test-secret"
os.environ["JWT_ALGORITHM"] = "HS256"
os.environ["STORAGE_CALL_TIMEOUT"] = "5"
os.environ["STORAGE_BATCH_CONCURRENCY"] = "4"


@pytest.fixture
def admin_headers() -> dict[str, str]:
    from media_gateway.core.auth import create_access_token

    return {"Authorization": f"Bearer {create_access_token('admin-1', role='admin')}"}


@pytest.fixture
def staff_headers() -> dict[str, str]:
    from media_gateway.core.auth import create_access_token

    return {"Authorization": f"Bearer {create_access_token('staff-1', role='staff')}"}
