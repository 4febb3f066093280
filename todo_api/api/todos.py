"""The TODO resource: an in-memory list with list and create operations."""

from typing import List, Optional

from pydantic import BaseModel

from routedoc import Request, Response, Router, endpoint


class Todo(BaseModel):
    title: str
    description: Optional[str] = None
    done: Optional[bool] = None


class TodoStore:
    """Keeps TODOs in process memory."""

    def __init__(self):
        self._todos: List[Todo] = []

    def list(self) -> List[Todo]:
        return list(self._todos)

    def add(self, todo: Todo) -> Todo:
        self._todos.append(todo)
        return todo

    def __len__(self) -> int:
        return len(self._todos)


def create_router(store: TodoStore) -> Router:
    router = Router()

    def list_todos(request: Request, response: Response):
        return store.list()

    def create_todo(request: Request, response: Response):
        todo = store.add(Todo.model_validate(request.json_body))
        return todo

    router.get(
        "/",
        endpoint(list_todos)
        .set_meta(title="list TODOs", tags=["todos"], response_description="All TODOs")
        .set_response_schema(List[Todo])
        .build(),
    )
    router.post(
        "/",
        endpoint(create_todo)
        .set_meta(
            title="create TODO",
            tags=["todos"],
            response_description="The created TODO",
            error_description="The TODO is malformed",
        )
        .set_request_body_schema(Todo)
        .set_response_schema(Todo)
        .build(),
    )
    return router
