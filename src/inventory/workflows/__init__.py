from .outcomes import Failure, Outcome, Redirect, RenderForm, RenderPage
from .book_workflow import BookWorkflow
from .category_workflow import CategoryWorkflow

__all__ = [
    "Failure",
    "Outcome",
    "Redirect",
    "RenderForm",
    "RenderPage",
    "BookWorkflow",
    "CategoryWorkflow",
]
