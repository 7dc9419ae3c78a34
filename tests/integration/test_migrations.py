import os
import shutil
import subprocess
from pathlib import Path
from urllib.parse import urlparse

import pytest

pytestmark = pytest.mark.skipif(
    shutil.which("docker") is None, reason="docker is required for testcontainers"
)


def test_migration_cycle():
    """Test that alembic migrations can upgrade to head and downgrade to base without errors."""
    from testcontainers.postgres import PostgresContainer

    with PostgresContainer("postgres:16") as postgres:
        # Get database connection details from testcontainer
        db_url = postgres.get_connection_url()
        parsed_url = urlparse(db_url)

        # Point the app settings at the testcontainer database
        env = os.environ.copy()
        env["DB_USER"] = parsed_url.username
        env["DB_PASSWORD"] = parsed_url.password
        env["DB_HOST"] = parsed_url.hostname
        env["DB_PORT"] = str(parsed_url.port)
        env["DB_NAME"] = parsed_url.path.lstrip("/")
        env["APP_NAME"] = "test"

        project_root = Path(__file__).parents[2]

        upgrade_result = subprocess.run(
            ["alembic", "upgrade", "head"],
            cwd=project_root,
            env=env,
            capture_output=True,
            text=True,
        )
        assert (
            upgrade_result.returncode == 0
        ), f"Upgrade failed: {upgrade_result.stderr}"

        downgrade_result = subprocess.run(
            ["alembic", "downgrade", "base"],
            cwd=project_root,
            env=env,
            capture_output=True,
            text=True,
        )
        assert (
            downgrade_result.returncode == 0
        ), f"Downgrade failed: {downgrade_result.stderr}"
