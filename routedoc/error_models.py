"""
Error response models for the REST framework.
"""

from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


class ErrorResponse(BaseModel):
    """Body of every error response.

    Outside production the framework adds a ``stack`` entry with the traceback.
    """

    model_config = ConfigDict(
        extra="allow",
        populate_by_name=True,
        json_schema_extra={"example": {"error": "malformed", "statusCode": 400}},
    )

    error: str = Field(..., description="Human-readable error message describing what went wrong")
    status_code: Optional[int] = Field(
        None, alias="statusCode", description="HTTP status code of the response"
    )

    def model_dump_json(self, **kwargs):
        """Serialize with wire names, leaving out unset optional entries."""
        kwargs.setdefault("exclude_none", True)
        kwargs.setdefault("by_alias", True)
        return super().model_dump_json(**kwargs)

    @classmethod
    def from_message(
        cls, message: str, status_code: Optional[int] = None, stack: Optional[str] = None
    ) -> "ErrorResponse":
        if stack is None:
            return cls(error=message, status_code=status_code)
        return cls(error=message, status_code=status_code, stack=stack)
