"""Document asset routes."""
from __future__ import annotations

from typing import Callable, List

from fastapi import APIRouter, Depends, status

from flowstate.api.errors import http_error_for
from flowstate.api.schemas.document import (
    BlockCreateRequest,
    BlockUpdateRequest,
    DocumentAsset,
    DocumentUpdateRequest,
)
from flowstate.db.deps import get_storage
from flowstate.services import document_library
from flowstate.services.errors import FlowStateError
from flowstate.services.storage.facade import StorageFacade

router = APIRouter()


@router.get("/documents", response_model=List[DocumentAsset], tags=["documents"])
def list_documents(storage: StorageFacade = Depends(get_storage)) -> List[DocumentAsset]:
    """List documents; starter content is returned until the user saves their own."""
    return storage.load_documents()


@router.put("/documents", response_model=List[DocumentAsset], tags=["documents"])
def replace_documents(
    payload: List[DocumentAsset],
    storage: StorageFacade = Depends(get_storage),
) -> List[DocumentAsset]:
    """Replace the whole document collection."""
    try:
        storage.save_documents(payload)
    except FlowStateError as exc:
        raise http_error_for(exc) from exc
    return payload


@router.post("/documents", response_model=DocumentAsset, status_code=status.HTTP_201_CREATED, tags=["documents"])
def create_document(storage: StorageFacade = Depends(get_storage)) -> DocumentAsset:
    document = document_library.new_document()
    try:
        storage.save_documents([*storage.load_documents(), document])
    except FlowStateError as exc:
        raise http_error_for(exc) from exc
    return document


@router.patch("/documents/{document_id}", response_model=DocumentAsset, tags=["documents"])
def update_document(
    document_id: str,
    payload: DocumentUpdateRequest,
    storage: StorageFacade = Depends(get_storage),
) -> DocumentAsset:
    return _edit_document(
        storage,
        document_id,
        lambda document: document_library.update_document(document, title=payload.title, category=payload.category),
    )


@router.post(
    "/documents/{document_id}/blocks",
    response_model=DocumentAsset,
    status_code=status.HTTP_201_CREATED,
    tags=["documents"],
)
def add_block(
    document_id: str,
    payload: BlockCreateRequest,
    storage: StorageFacade = Depends(get_storage),
) -> DocumentAsset:
    return _edit_document(
        storage,
        document_id,
        lambda document: document_library.add_block(
            document, payload.type, content=payload.content, label=payload.label
        )[0],
    )


@router.patch("/documents/{document_id}/blocks/{block_id}", response_model=DocumentAsset, tags=["documents"])
def update_block(
    document_id: str,
    block_id: str,
    payload: BlockUpdateRequest,
    storage: StorageFacade = Depends(get_storage),
) -> DocumentAsset:
    return _edit_document(
        storage,
        document_id,
        lambda document: document_library.update_block(
            document, block_id, content=payload.content, label=payload.label
        ),
    )


@router.delete("/documents/{document_id}/blocks/{block_id}", response_model=DocumentAsset, tags=["documents"])
def delete_block(document_id: str, block_id: str, storage: StorageFacade = Depends(get_storage)) -> DocumentAsset:
    return _edit_document(storage, document_id, lambda document: document_library.remove_block(document, block_id))


def _edit_document(
    storage: StorageFacade,
    document_id: str,
    edit: Callable[[DocumentAsset], DocumentAsset],
) -> DocumentAsset:
    try:
        documents = storage.load_documents()
        updated = edit(document_library.find_document(documents, document_id))
        storage.save_documents(document_library.replace_document(documents, updated))
    except FlowStateError as exc:
        raise http_error_for(exc) from exc
    return updated
