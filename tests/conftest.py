import pytest
import pytest_asyncio
from fastapi.testclient import TestClient
from sqlalchemy.ext.asyncio import create_async_engine

from orderpad.core.config import Settings
from orderpad.main import create_app
from orderpad.schemas import OrderCreate
from orderpad.services.orders import OrderService
from orderpad.storage import DatabaseStorage, MemoryStorage

SQLITE_MEMORY_URL = "sqlite+aiosqlite:///:memory:"


@pytest.fixture
def settings():
    """Settings isolated from the environment and any .env file."""
    return Settings(
        _env_file=None,
        storage_backend="memory",
        restaurant_name="Test Kitchen",
        currency_symbol="₹",
    )


@pytest.fixture
def memory_storage():
    return MemoryStorage()


@pytest_asyncio.fixture
async def database_storage():
    """Relational store on a throwaway in-memory SQLite database."""
    storage = DatabaseStorage(create_async_engine(SQLITE_MEMORY_URL))
    await storage.startup()
    yield storage
    await storage.shutdown()


@pytest_asyncio.fixture(params=["memory", "database"])
async def storage(request):
    """Runs a test once against each store implementation."""
    if request.param == "memory":
        yield MemoryStorage()
        return

    store = DatabaseStorage(create_async_engine(SQLITE_MEMORY_URL))
    await store.startup()
    yield store
    await store.shutdown()


@pytest.fixture
def service(storage, settings):
    return OrderService(storage, settings)


@pytest.fixture
def order_request():
    """Build an OrderCreate from (name, price, quantity) tuples."""
    def build(*items, table_number=5, customer_name=None, customer_phone=None):
        return OrderCreate(
            table_number=table_number,
            customer_name=customer_name,
            customer_phone=customer_phone,
            items=[
                {"item_name": name, "price": price, "quantity": quantity}
                for name, price, quantity in items
            ],
        )
    return build


@pytest.fixture
def client(settings):
    """Test client running the app lifespan on a fresh in-memory store."""
    app = create_app(settings, storage=MemoryStorage())
    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture
def order_payload():
    return {
        "tableNumber": 7,
        "customerName": "Asha",
        "customerPhone": "9876543210",
        "items": [
            {"itemName": "Paneer Tikka", "quantity": 2, "price": "100.00"},
            {"itemName": "Butter Naan", "quantity": 1, "price": "50.00"},
        ],
    }
