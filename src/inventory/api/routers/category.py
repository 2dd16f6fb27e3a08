from fastapi import APIRouter, Depends, Request

from inventory.workflows import CategoryWorkflow
from ..deps import get_category_workflow, get_renderer, require_admin
from ..rendering import Renderer

router = APIRouter(prefix="/category", tags=["categories"])


@router.get("")
async def list_categories(
    request: Request,
    workflow: CategoryWorkflow = Depends(get_category_workflow),
    renderer: Renderer = Depends(get_renderer),
):
    return renderer.respond(request, await workflow.list_all())


@router.get("/new")
async def new_category_form(
    request: Request,
    workflow: CategoryWorkflow = Depends(get_category_workflow),
    renderer: Renderer = Depends(get_renderer),
):
    return renderer.respond(request, workflow.new_form())


@router.post("/new")
async def create_category(
    request: Request,
    workflow: CategoryWorkflow = Depends(get_category_workflow),
    renderer: Renderer = Depends(get_renderer),
):
    form = await request.form()
    return renderer.respond(request, await workflow.create(dict(form)))


@router.get("/{category_id}")
async def category_detail(
    category_id: int,
    request: Request,
    workflow: CategoryWorkflow = Depends(get_category_workflow),
    renderer: Renderer = Depends(get_renderer),
):
    return renderer.respond(request, await workflow.detail(category_id))


@router.get("/{category_id}/update")
async def edit_category_form(
    category_id: int,
    request: Request,
    workflow: CategoryWorkflow = Depends(get_category_workflow),
    renderer: Renderer = Depends(get_renderer),
):
    return renderer.respond(request, await workflow.edit_form(category_id))


@router.post("/{category_id}/update")
async def update_category(
    category_id: int,
    request: Request,
    workflow: CategoryWorkflow = Depends(get_category_workflow),
    renderer: Renderer = Depends(get_renderer),
):
    form = await request.form()
    return renderer.respond(request, await workflow.update(category_id, dict(form)))


@router.post("/{category_id}/delete", dependencies=[Depends(require_admin)])
async def delete_category(
    category_id: int,
    request: Request,
    workflow: CategoryWorkflow = Depends(get_category_workflow),
    renderer: Renderer = Depends(get_renderer),
):
    return renderer.respond(request, await workflow.delete(category_id))
