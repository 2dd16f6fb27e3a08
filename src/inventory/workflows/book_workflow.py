import logging
from typing import Any, Mapping

from sqlalchemy.ext.asyncio import AsyncSession

from inventory.exceptions.base import ClassifiedError
from inventory.models.book import Book
from inventory.repositories.book_repository import BookRepository
from inventory.repositories.category_repository import CategoryRepository
from inventory.validators.form_validators import validate_book
from .base import BaseWorkflow
from .outcomes import Failure, Outcome, Redirect, RenderForm, RenderPage

logger = logging.getLogger(__name__)

LISTING = "/book"
FORM_TEMPLATE = "book_form.html"

EDITABLE_FIELDS = ("title", "author", "isbn", "description", "price", "stock", "category_id")


class BookWorkflow(BaseWorkflow):
    """Listing, detail, create, update and delete of books."""

    model = Book

    def __init__(self, db: AsyncSession, *, production: bool = False):
        super().__init__(db, production=production)
        self.books = BookRepository(db)
        self.categories = CategoryRepository(db)

    @staticmethod
    def _not_found() -> Failure:
        return Failure(ClassifiedError.not_found("Book not found"))

    async def _form_context(self, book_id: int | None = None) -> dict[str, Any]:
        # The genre select needs the current categories on every render
        context: dict[str, Any] = {"categories": await self.categories.list_names()}
        if book_id is None:
            context.update(form_title="Add New Book", action=f"{LISTING}/new")
        else:
            context.update(form_title="Update Book", action=f"{LISTING}/{book_id}/update")
        return context

    # --- reads ---

    async def list_all(self) -> Outcome:
        return RenderPage("books.html", {"books": await self.books.list_all()})

    async def detail(self, book_id: int) -> Outcome:
        book = await self.books.get_by_id(book_id)
        if book is None:
            return self._not_found()
        return RenderPage("book_detail.html", {"book": book})

    # --- create ---

    async def new_form(self) -> Outcome:
        return RenderForm(FORM_TEMPLATE, values={}, context=await self._form_context())

    async def create(self, raw: Mapping[str, Any]) -> Outcome:
        validation = validate_book(raw)
        if not validation.is_valid:
            return self.invalid_form(FORM_TEMPLATE, raw, validation, await self._form_context())

        cleaned = validation.cleaned
        attempt = await self.persist("create", lambda: self.books.create(**cleaned), cleaned)
        if not attempt.ok:
            # the session was rolled back; the categories query runs on a fresh transaction
            return self.failed_form(FORM_TEMPLATE, raw, attempt.error, await self._form_context())

        logger.info("workflow.book.created", extra={"id": attempt.result.id})
        return Redirect(LISTING)

    # --- update ---

    async def edit_form(self, book_id: int) -> Outcome:
        book = await self.books.get_by_id(book_id)
        if book is None:
            return self._not_found()

        stored = book.to_dict()
        values = {name: "" if stored[name] is None else str(stored[name]) for name in EDITABLE_FIELDS}
        return RenderForm(FORM_TEMPLATE, values=values, context=await self._form_context(book_id))

    async def update(self, book_id: int, raw: Mapping[str, Any]) -> Outcome:
        validation = validate_book(raw)
        if not validation.is_valid:
            return self.invalid_form(FORM_TEMPLATE, raw, validation, await self._form_context(book_id))

        cleaned = validation.cleaned
        attempt = await self.persist("update", lambda: self.books.update(book_id, **cleaned), cleaned)
        if not attempt.ok:
            return self.failed_form(FORM_TEMPLATE, raw, attempt.error, await self._form_context(book_id))
        if attempt.result is None:
            return self._not_found()

        return Redirect(LISTING)

    # --- delete ---

    async def delete(self, book_id: int) -> Outcome:
        attempt = await self.persist("delete", lambda: self.books.delete(book_id))
        if not attempt.ok:
            return Failure(attempt.error)
        if attempt.result is None:
            return self._not_found()
        return Redirect(LISTING)
