from datetime import datetime, timedelta

import pytest
from sqlalchemy.exc import OperationalError

from main import app, get_session_factory
from models import Book, Member, Penalty


def borrow(client, member_code="M001", book_code="JK-45"):
    return client.post("/books/borrow", json={"member_code": member_code, "book_code": book_code})


def give_back(client, member_code="M001", book_code="JK-45"):
    return client.post("/books/return", json={"member_code": member_code, "book_code": book_code})


def test_health_check(client):
    response = client.get("/health")
    assert response.status_code == 200
    assert response.json() == {"status": "healthy"}


def test_list_members(client):
    response = client.get("/members")
    assert response.status_code == 200
    members = response.json()
    assert isinstance(members, list)
    assert [m["code"] for m in members] == ["M001", "M002", "M003"]
    assert set(members[0]) == {"id", "code", "name", "borrowing", "status"}
    assert members[0]["borrowing"] == 0
    assert members[0]["status"] == "normal"


def test_get_member(client):
    response = client.get("/members/M001")
    assert response.status_code == 200
    body = response.json()
    assert body["code"] == "M001"
    assert "id" in body
    assert body["borrowedbooks"] == []
    assert body["penalty"] is None


def test_get_member_not_found(client):
    response = client.get("/members/M024")
    assert response.status_code == 404
    assert response.json() == {"message": "Member not found"}


def test_list_books(client):
    response = client.get("/books")
    assert response.status_code == 200
    books = response.json()
    assert isinstance(books, list)
    assert len(books) == 5
    assert {"id", "code", "title"} <= set(books[0])


def test_list_available_books(client):
    borrow(client)
    codes = [b["code"] for b in client.get("/books", params={"available": "true"}).json()]
    assert "JK-45" not in codes
    assert len(codes) == 4
    assert len(client.get("/books").json()) == 5


def test_borrow_book(client):
    response = borrow(client)
    assert response.status_code == 200
    assert response.json() == {"message": "Book borrowed successfully"}

    detail = client.get("/members/M001").json()
    assert detail["borrowing"] == 1
    assert len(detail["borrowedbooks"]) == 1
    assert detail["borrowedbooks"][0]["date_returned"] is None
    jk = next(b for b in client.get("/books").json() if b["code"] == "JK-45")
    assert jk["stock"] == 0


def test_borrow_then_return(client):
    borrow(client)
    response = give_back(client)
    assert response.status_code == 200
    assert response.json() == {"message": "Book returned successfully"}

    detail = client.get("/members/M001").json()
    assert detail["borrowing"] == 0
    assert detail["borrowedbooks"] == []
    jk = next(b for b in client.get("/books").json() if b["code"] == "JK-45")
    assert jk["stock"] == 1


def test_borrow_out_of_stock(client):
    borrow(client)
    response = borrow(client, member_code="M002")
    assert response.status_code == 404
    assert response.json() == {"message": "Book not found or out of stock"}


def test_borrow_unknown_member(client):
    response = borrow(client, member_code="M024")
    assert response.status_code == 404
    assert response.json() == {"message": "Member not found"}


def test_borrow_with_outstanding_loan(client):
    borrow(client)
    response = borrow(client, book_code="SHR-1")
    assert response.status_code == 400
    assert response.json() == {"message": "You have a book that has not been returned"}


def test_borrow_at_limit(client, seeded):
    db = seeded()
    db.query(Member).filter(Member.code == "M002").update({"borrowing": 2})
    db.commit()
    db.close()

    response = borrow(client, member_code="M002", book_code="SHR-1")
    assert response.status_code == 400
    assert response.json() == {"message": "You have reached the maximum limit of borrowing"}


def test_borrow_with_penalty(client, seeded):
    db = seeded()
    member = db.query(Member).filter(Member.code == "M003").one()
    now = datetime.now()
    db.add(Penalty(member_id=member.id, start_date=now, end_date=now + timedelta(days=3)))
    db.commit()
    db.close()

    response = borrow(client, member_code="M003")
    assert response.status_code == 400
    assert response.json() == {"message": "You have penalty"}

    detail = client.get("/members/M003").json()
    assert detail["penalty"] is not None
    assert detail["borrowing"] == 0

    db = seeded()
    assert db.query(Book).filter(Book.code == "JK-45").one().stock == 1
    db.close()


def test_return_without_loan(client):
    response = give_back(client)
    assert response.status_code == 404
    assert response.json() == {"message": "Borrowed book not found"}


def test_return_unknown_book(client):
    response = give_back(client, book_code="XX-1")
    assert response.status_code == 404
    assert response.json() == {"message": "Book not found or out of stock"}


def test_borrow_requires_codes(client):
    response = client.post("/books/borrow", json={"member_code": "M001"})
    assert response.status_code == 422
    assert "book_code" in response.json()["message"]

    response = client.post("/books/borrow", json={"member_code": "  ", "book_code": "JK-45"})
    assert response.status_code == 422


@pytest.fixture
def unreachable_database(client):
    def broken_session():
        raise OperationalError("SELECT 1", {}, Exception("database is down"))

    previous = app.dependency_overrides[get_session_factory]
    app.dependency_overrides[get_session_factory] = lambda: broken_session
    yield client
    app.dependency_overrides[get_session_factory] = previous


def test_store_failure_is_server_error(unreachable_database):
    response = borrow(unreachable_database)
    assert response.status_code == 500
    assert response.json() == {"message": "Internal Server Error"}
