"""Edits to the document asset collection."""
from __future__ import annotations

from typing import List, Optional

from flowstate.api.schemas.document import DocBlock, DocBlockType, DocumentAsset
from flowstate.services.errors import NotFoundError
from flowstate.services.ids import new_id, now_ms

DEFAULT_BLOCK_LABELS = {
    DocBlockType.TEXT: "New Text",
    DocBlockType.LINK: "New Link",
    DocBlockType.IMAGE_URL: "New Image",
    DocBlockType.CODE: "New Snippet",
}


def new_document() -> DocumentAsset:
    return DocumentAsset(
        id=new_id(),
        title="Untitled Document",
        category="General",
        blocks=[],
        last_modified=now_ms(),
    )


def find_document(documents: List[DocumentAsset], document_id: str) -> DocumentAsset:
    for document in documents:
        if document.id == document_id:
            return document
    raise NotFoundError("Document not found")


def replace_document(documents: List[DocumentAsset], updated: DocumentAsset) -> List[DocumentAsset]:
    return [updated if document.id == updated.id else document for document in documents]


def update_document(
    document: DocumentAsset,
    *,
    title: Optional[str] = None,
    category: Optional[str] = None,
) -> DocumentAsset:
    changes = {"last_modified": now_ms()}
    if title is not None:
        changes["title"] = title.strip() or "Untitled Document"
    if category is not None:
        changes["category"] = category.strip() or "General"
    return document.model_copy(update=changes)


def add_block(
    document: DocumentAsset,
    block_type: DocBlockType,
    *,
    content: str = "",
    label: Optional[str] = None,
) -> tuple[DocumentAsset, DocBlock]:
    block = DocBlock(
        id=new_id(),
        type=block_type,
        content=content,
        label=label if label is not None else DEFAULT_BLOCK_LABELS[block_type],
    )
    updated = document.model_copy(update={"blocks": [*document.blocks, block], "last_modified": now_ms()})
    return updated, block


def update_block(
    document: DocumentAsset,
    block_id: str,
    *,
    content: Optional[str] = None,
    label: Optional[str] = None,
) -> DocumentAsset:
    changes = {}
    if content is not None:
        changes["content"] = content
    if label is not None:
        changes["label"] = label

    if not any(block.id == block_id for block in document.blocks):
        raise NotFoundError("Block not found")
    blocks = [block.model_copy(update=changes) if block.id == block_id else block for block in document.blocks]
    return document.model_copy(update={"blocks": blocks, "last_modified": now_ms()})


def remove_block(document: DocumentAsset, block_id: str) -> DocumentAsset:
    blocks = [block for block in document.blocks if block.id != block_id]
    if len(blocks) == len(document.blocks):
        raise NotFoundError("Block not found")
    return document.model_copy(update={"blocks": blocks, "last_modified": now_ms()})
