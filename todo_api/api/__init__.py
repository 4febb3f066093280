"""Version 1 of the TODO API."""

from routedoc import Request, Response, Router

from .todos import Todo, TodoStore, create_router as create_todos_router

__all__ = ["Todo", "TodoStore", "create_router"]


def create_router(store: TodoStore) -> Router:
    router = Router()

    @router.get("/")
    def index(request: Request, response: Response):
        return {"message": "API"}

    router.use("/todos", create_todos_router(store))
    return router
