from __future__ import annotations

from typing import Callable

import pytest

from tests.pool_env import PoolEnv, build_pool


@pytest.fixture
def make_pool() -> Callable[..., PoolEnv]:
    return build_pool
