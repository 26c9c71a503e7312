"""
Pytest fixtures for wallet tracker tests.

Every test gets its own temporary data directory with a small, seeded sample
set (3/5/7 transactions) so seeding stays fast and results are reproducible.
"""

from __future__ import annotations

import random

import pytest

from backend_wallettracker.database.seed import SampleWallet

SMALL_SAMPLES = (
    SampleWallet(
        address="3E8ociqZa9mZUSwGdSmAEMAoAxBK3FNDcd",
        name="Coinbase",
        icon_url="https://example.test/coinbase-wallet.svg",
        transaction_count=3,
        balance_magnitude=1000.0,
    ),
    SampleWallet(
        address="bc1q0sg9rdst255gtldsmcf8rk0764avqy2h2ksqs5",
        name="Kraken",
        icon_url="https://example.test/kraken.svg",
        transaction_count=5,
        balance_magnitude=2000.0,
    ),
    SampleWallet(
        address="bc1qm34lsc65zpw79lxes69zkqmk6ee3ewf0j77s3h",
        name="Phantom",
        icon_url="https://example.test/phantom_new.svg",
        transaction_count=7,
        balance_magnitude=5000.0,
    ),
)


@pytest.fixture
def data_dir(tmp_path):
    return tmp_path / "data"


@pytest.fixture
def store(data_dir):
    """Empty (not yet initialized) store over a temp directory."""
    from backend_wallettracker.database import FlatFileStore

    return FlatFileStore(data_dir, rng=random.Random(7), samples=SMALL_SAMPLES, batch_size=2)


@pytest.fixture
def seeded_store(store):
    store.initialize()
    return store


@pytest.fixture
def service(seeded_store):
    from backend_wallettracker.services import WalletService

    return WalletService(seeded_store, rng=random.Random(11))


@pytest.fixture
def settings(data_dir):
    from backend_wallettracker.config import Settings

    return Settings(data_dir=data_dir, enable_error_simulation=False, cors_origins=["http://localhost:5173"])


@pytest.fixture
def app(settings, store):
    """App over the temp store with fault injection switched off."""
    from backend_wallettracker.api_server.middleware import FaultConfig, FaultGate
    from backend_wallettracker.api_server.server import create_app
    from backend_wallettracker.services import WalletService

    service = WalletService(store, rng=random.Random(11))
    gate = FaultGate(FaultConfig(enabled=False))
    return create_app(settings, service=service, fault_gate=gate)


@pytest.fixture
def client(app):
    """FastAPI TestClient; entering it runs the lifespan, which seeds the store."""
    from fastapi.testclient import TestClient

    with TestClient(app) as c:
        yield c
