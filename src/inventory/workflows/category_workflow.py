import logging
from typing import Any, Mapping

from sqlalchemy.ext.asyncio import AsyncSession

from inventory.exceptions.base import ClassifiedError, ErrorKind
from inventory.models.category import Category
from inventory.repositories.book_repository import BookRepository
from inventory.repositories.category_repository import CategoryRepository
from inventory.validators.form_validators import validate_category
from .base import BaseWorkflow
from .outcomes import Failure, Outcome, Redirect, RenderForm, RenderPage

logger = logging.getLogger(__name__)

LISTING = "/category"
FORM_TEMPLATE = "category_form.html"


class CategoryWorkflow(BaseWorkflow):
    """Listing, detail, create, update and delete of genres."""

    model = Category

    def __init__(self, db: AsyncSession, *, production: bool = False):
        super().__init__(db, production=production)
        self.categories = CategoryRepository(db)
        self.books = BookRepository(db)

    @staticmethod
    def _not_found() -> Failure:
        return Failure(ClassifiedError.not_found("Genre not found"))

    @staticmethod
    def _form_context(category_id: int | None = None) -> dict[str, Any]:
        if category_id is None:
            return {"form_title": "Add New Genre", "action": f"{LISTING}/new"}
        return {"form_title": "Update Genre", "action": f"{LISTING}/{category_id}/update"}

    # --- reads ---

    async def list_all(self) -> Outcome:
        return RenderPage("categories.html", {"categories": await self.categories.list_all()})

    async def detail(self, category_id: int, *, error: ClassifiedError | None = None) -> Outcome:
        category = await self.categories.get_by_id(category_id)
        if category is None:
            return self._not_found()

        books = await self.books.list_by_category(category_id)
        return RenderPage(
            "category_detail.html",
            {"category": category, "books": books},
            error=self.message_for(error) if error else None,
            status_code=error.http_status if error else 200,
        )

    # --- create ---

    def new_form(self) -> Outcome:
        return RenderForm(FORM_TEMPLATE, values={}, context=self._form_context())

    async def create(self, raw: Mapping[str, Any]) -> Outcome:
        validation = validate_category(raw)
        if not validation.is_valid:
            return self.invalid_form(FORM_TEMPLATE, raw, validation, self._form_context())

        cleaned = validation.cleaned
        attempt = await self.persist("create", lambda: self.categories.create(**cleaned), cleaned)
        if not attempt.ok:
            return self.failed_form(FORM_TEMPLATE, raw, attempt.error, self._form_context())

        logger.info("workflow.category.created", extra={"id": attempt.result.id})
        return Redirect(LISTING)

    # --- update ---

    async def edit_form(self, category_id: int) -> Outcome:
        category = await self.categories.get_by_id(category_id)
        if category is None:
            return self._not_found()

        values = {"name": category.name, "description": category.description or ""}
        return RenderForm(FORM_TEMPLATE, values=values, context=self._form_context(category_id))

    async def update(self, category_id: int, raw: Mapping[str, Any]) -> Outcome:
        context = self._form_context(category_id)
        validation = validate_category(raw)
        if not validation.is_valid:
            return self.invalid_form(FORM_TEMPLATE, raw, validation, context)

        cleaned = validation.cleaned
        attempt = await self.persist("update", lambda: self.categories.update(category_id, **cleaned), cleaned)
        if not attempt.ok:
            return self.failed_form(FORM_TEMPLATE, raw, attempt.error, context)
        if attempt.result is None:
            return self._not_found()

        return Redirect(LISTING)

    # --- delete ---

    async def delete(self, category_id: int) -> Outcome:
        attempt = await self.persist("delete", lambda: self.categories.delete(category_id))
        if attempt.ok:
            if attempt.result is None:
                return self._not_found()
            return Redirect(LISTING)

        if attempt.error.kind is ErrorKind.REFERENTIAL_CONSTRAINT:
            # Recoverable: show the genre again with its books and the reason
            return await self.detail(category_id, error=attempt.error)
        return Failure(attempt.error)
