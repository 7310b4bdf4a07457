import os
import tempfile
from collections.abc import Generator

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import Session, sessionmaker

os.environ["ENVIRONMENT"] = "development"
os.environ.setdefault("DATABASE_URL", "sqlite:///./test_marketplace.db")

from app.db.base import Base
from app.db.session import enable_sqlite_transactions, get_db
from app.main import app
from app.models.product import Product, ProductImage
from app.models.user import User


@pytest.fixture()
def db_session() -> Generator[Session, None, None]:
    db_file = tempfile.NamedTemporaryFile(suffix=".db", delete=False)
    db_file.close()

    engine = enable_sqlite_transactions(
        create_engine(
            f"sqlite:///{db_file.name}",
            connect_args={"check_same_thread": False},
        )
    )
    TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

    Base.metadata.create_all(bind=engine)
    session = TestingSessionLocal()
    try:
        yield session
    finally:
        session.close()
        Base.metadata.drop_all(bind=engine)
        engine.dispose()
        os.unlink(db_file.name)


@pytest.fixture()
def client(db_session: Session) -> Generator[TestClient, None, None]:
    def override_get_db():
        try:
            yield db_session
        finally:
            pass

    app.dependency_overrides[get_db] = override_get_db
    app.state.limiter.reset()
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()


@pytest.fixture()
def make_user(db_session: Session):
    def _make_user(username: str, address: str = "221B Baker Street, London") -> User:
        user = User(
            username=username,
            email=f"{username}@example.com",
            address=address,
        )
        db_session.add(user)
        db_session.commit()
        db_session.refresh(user)
        return user

    return _make_user


@pytest.fixture()
def make_product(db_session: Session):
    def _make_product(
        owner: User,
        title: str = "Vintage Desk Lamp",
        price: float = 100.0,
        status: str | None = "available",
        category: str = "Home & Garden",
    ) -> Product:
        product = Product(
            owner_id=owner.id,
            title=title,
            description="A gently used item in good condition.",
            category=category,
            price=price,
            status=status,
        )
        product.images.append(
            ProductImage(image_url=f"https://img.example.com/{title.replace(' ', '-').lower()}.jpg", is_main=True)
        )
        db_session.add(product)
        db_session.commit()
        if status is None:
            # the column default would otherwise fill in "available"
            db_session.query(Product).filter(Product.id == product.id).update({Product.status: None})
            db_session.commit()
        db_session.refresh(product)
        return product

    return _make_product
