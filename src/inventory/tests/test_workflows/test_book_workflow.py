from decimal import Decimal

import pytest
from sqlalchemy import func, select

from inventory.exceptions.base import ErrorKind
from inventory.models import Book
from inventory.workflows import BookWorkflow, Failure, Redirect, RenderForm, RenderPage


def book_form(category_id, **overrides) -> dict:
    form = {
        "title": "Valid Title 1",
        "author": "Jane Doe",
        "isbn": "978-0743273565",
        "description": "",
        "price": "12.99",
        "stock": "4",
        "category_id": str(category_id),
    }
    form.update(overrides)
    return form


@pytest.fixture
def workflow(db_session) -> BookWorkflow:
    return BookWorkflow(db_session)


async def count_books(session) -> int:
    return await session.scalar(select(func.count()).select_from(Book))


@pytest.mark.asyncio
class TestBookWorkflowCreate:

    async def test_create_valid_redirects_to_listing(self, workflow, created_category, db_session):
        """
        Behavior:
                - Submit a valid form.

        Importance:
                - Valid -> Persisting -> Success: committed and redirected (303) to /book.
        """
        outcome = await workflow.create(book_form(created_category.id))

        assert outcome == Redirect("/book")
        assert outcome.status_code == 303
        assert await count_books(db_session) == 1

    async def test_created_price_and_stock_read_back_unchanged(self, workflow, created_category, other_session):
        """
        Behavior:
                - Create with the largest price and stock the columns hold, then read
                  the row from another session.

        Importance:
                - Whatever the validator accepts is stored exactly; nothing is rounded
                  or truncated on the way to NUMERIC(10, 2) / INTEGER.
        """
        outcome = await workflow.create(book_form(created_category.id, price="99999999.99", stock="2147483647"))

        assert outcome == Redirect("/book")
        stored = (await other_session.scalars(select(Book))).one()
        assert stored.price == Decimal("99999999.99")
        assert stored.stock == 2147483647

    @pytest.mark.parametrize(
        "field, value",
        [("price", "1.999"), ("price", "100000000"), ("stock", "9" * 20)],
    )
    async def test_values_the_columns_cannot_hold_are_field_errors(
        self, workflow, created_category, db_session, field, value
    ):
        """
        Behavior:
                - Submit a price with three decimals, a price of 10^8, or a huge stock.

        Importance:
                - Rejected as a 400 field error instead of being rounded by the store or
                  failing as an internal error.
        """
        outcome = await workflow.create(book_form(created_category.id, **{field: value}))

        assert isinstance(outcome, RenderForm)
        assert outcome.status_code == 400
        assert [e.field for e in outcome.errors] == [field]
        assert await count_books(db_session) == 0

    async def test_invalid_form_rerenders_with_field_errors(self, workflow, created_category, db_session):
        """
        Behavior:
                - Submit a form with an empty title.

        Importance:
                - Nothing reaches the store; the form comes back (400) with the typed
                  values echoed and one error for the title, plus the genre choices.
        """
        form = book_form(created_category.id, title="")

        outcome = await workflow.create(form)

        assert isinstance(outcome, RenderForm)
        assert outcome.status_code == 400
        assert outcome.template == "book_form.html"
        assert [e.field for e in outcome.errors] == ["title"]
        assert outcome.values["isbn"] == form["isbn"]
        assert outcome.context["categories"] == [(created_category.id, created_category.name)]
        assert await count_books(db_session) == 0

    async def test_duplicate_isbn_is_duplicate_key_and_keeps_one_row(self, workflow, created_category, db_session):
        """
        Behavior:
                - Create the same ISBN twice (different titles).

        Importance:
                - The second attempt is rolled back and classified as a duplicate (409);
                  exactly one row exists afterwards and the form echoes the input.
        """
        # Arrange
        await workflow.create(book_form(created_category.id))

        # Act
        outcome = await workflow.create(book_form(created_category.id, title="Another Title"))

        # Assert
        assert isinstance(outcome, RenderForm)
        assert outcome.status_code == 409
        assert outcome.error == "A book with ISBN '978-0743273565' already exists."
        assert outcome.values["title"] == "Another Title"
        assert outcome.context["categories"]
        assert await count_books(db_session) == 1

    async def test_duplicate_title_author_in_same_genre(self, workflow, created_category):
        await workflow.create(book_form(created_category.id))

        outcome = await workflow.create(book_form(created_category.id, isbn="1234567890"))

        assert outcome.status_code == 409
        assert "already exists in this genre" in outcome.error

    async def test_missing_genre_is_invalid_input(self, workflow, db_session):
        outcome = await workflow.create(book_form(9999))

        assert isinstance(outcome, RenderForm)
        assert outcome.status_code == 400
        assert outcome.error == "The selected genre does not exist."
        assert await count_books(db_session) == 0


@pytest.mark.asyncio
class TestBookWorkflowReadUpdateDelete:

    async def test_list_and_detail(self, workflow, created_book):
        listing = await workflow.list_all()
        detail = await workflow.detail(created_book.id)

        assert isinstance(listing, RenderPage)
        assert [b.id for b in listing.context["books"]] == [created_book.id]
        assert detail.context["book"].title == created_book.title

    async def test_detail_missing_is_not_found(self, workflow):
        outcome = await workflow.detail(404)

        assert isinstance(outcome, Failure)
        assert outcome.error.kind is ErrorKind.NOT_FOUND
        assert outcome.error.message == "Book not found"

    async def test_edit_form_prefills_stored_values(self, workflow, created_book):
        outcome = await workflow.edit_form(created_book.id)

        assert isinstance(outcome, RenderForm)
        assert outcome.values["title"] == created_book.title
        assert outcome.values["price"] == "12.99"
        assert outcome.values["description"] == ""
        assert outcome.context["action"] == f"/book/{created_book.id}/update"

    async def test_update_success(self, workflow, created_book, db_session):
        form = book_form(created_book.category_id, title="Renamed Title", isbn=created_book.isbn)

        outcome = await workflow.update(created_book.id, form)

        assert outcome == Redirect("/book")
        refreshed = await BookWorkflow(db_session).detail(created_book.id)
        assert refreshed.context["book"].title == "Renamed Title"

    async def test_update_missing_is_not_found(self, workflow, created_category):
        outcome = await workflow.update(5555, book_form(created_category.id))

        assert isinstance(outcome, Failure)
        assert outcome.error.kind is ErrorKind.NOT_FOUND

    async def test_delete(self, workflow, created_book, db_session):
        outcome = await workflow.delete(created_book.id)

        assert outcome == Redirect("/book")
        assert await count_books(db_session) == 0

    async def test_delete_missing_is_not_found(self, workflow):
        outcome = await workflow.delete(8080)

        assert isinstance(outcome, Failure)
        assert outcome.error.http_status == 404
