from fastapi import APIRouter, Depends, Request

from inventory.workflows import BookWorkflow
from ..deps import get_book_workflow, get_renderer, require_admin
from ..rendering import Renderer

router = APIRouter(prefix="/book", tags=["books"])


@router.get("")
async def list_books(
    request: Request,
    workflow: BookWorkflow = Depends(get_book_workflow),
    renderer: Renderer = Depends(get_renderer),
):
    return renderer.respond(request, await workflow.list_all())


# Declared before /{book_id} so "new" is never read as an id
@router.get("/new")
async def new_book_form(
    request: Request,
    workflow: BookWorkflow = Depends(get_book_workflow),
    renderer: Renderer = Depends(get_renderer),
):
    return renderer.respond(request, await workflow.new_form())


@router.post("/new")
async def create_book(
    request: Request,
    workflow: BookWorkflow = Depends(get_book_workflow),
    renderer: Renderer = Depends(get_renderer),
):
    form = await request.form()
    return renderer.respond(request, await workflow.create(dict(form)))


@router.get("/{book_id}")
async def book_detail(
    book_id: int,
    request: Request,
    workflow: BookWorkflow = Depends(get_book_workflow),
    renderer: Renderer = Depends(get_renderer),
):
    return renderer.respond(request, await workflow.detail(book_id))


@router.get("/{book_id}/update")
async def edit_book_form(
    book_id: int,
    request: Request,
    workflow: BookWorkflow = Depends(get_book_workflow),
    renderer: Renderer = Depends(get_renderer),
):
    return renderer.respond(request, await workflow.edit_form(book_id))


@router.post("/{book_id}/update")
async def update_book(
    book_id: int,
    request: Request,
    workflow: BookWorkflow = Depends(get_book_workflow),
    renderer: Renderer = Depends(get_renderer),
):
    form = await request.form()
    return renderer.respond(request, await workflow.update(book_id, dict(form)))


@router.post("/{book_id}/delete", dependencies=[Depends(require_admin)])
async def delete_book(
    book_id: int,
    request: Request,
    workflow: BookWorkflow = Depends(get_book_workflow),
    renderer: Renderer = Depends(get_renderer),
):
    return renderer.respond(request, await workflow.delete(book_id))
