"""
Typed provenance carried on ledger entries.

Stored as JSON in the ``metadata`` column and discriminated by ``type``.
Consumers match on the model class instead of probing optional keys.
"""

import uuid
from typing import Annotated, Any, Literal, Optional, Union

from pydantic import BaseModel, Field, TypeAdapter, ValidationError

from src.logging_config import get_logger

logger = get_logger(__name__)


class TaskMetadata(BaseModel):
    """Entry derived from a workspace task."""

    type: Literal["task"] = "task"
    task_id: uuid.UUID
    title: str
    status: str
    priority: Optional[str] = None


class DocumentMetadata(BaseModel):
    """Entry derived from a workspace document."""

    type: Literal["document"] = "document"
    document_id: uuid.UUID
    title: str
    doc_type: str
    status: Optional[str] = None


class ProjectMetadata(BaseModel):
    """Manual entry about a project (e.g. its creation)."""

    type: Literal["project"] = "project"
    project_id: uuid.UUID
    project_name: str


LedgerMetadata = Annotated[
    Union[TaskMetadata, DocumentMetadata, ProjectMetadata],
    Field(discriminator="type"),
]

_metadata_adapter: TypeAdapter = TypeAdapter(LedgerMetadata)


def parse_metadata(raw: Optional[dict[str, Any]]) -> Optional[LedgerMetadata]:
    """
    Parse stored metadata into its typed variant.

    Rows written before the union existed, or by other writers, may carry
    shapes we do not know; those degrade to ``None`` instead of failing the read.
    """
    if not raw:
        return None
    try:
        return _metadata_adapter.validate_python(raw)
    except ValidationError:
        logger.debug("Unrecognized ledger metadata shape", extra={"metadata_type": raw.get("type")})
        return None


def dump_metadata(metadata: Optional[LedgerMetadata]) -> Optional[dict[str, Any]]:
    """Serialize typed metadata for the JSON column."""
    if metadata is None:
        return None
    return metadata.model_dump(mode="json")
