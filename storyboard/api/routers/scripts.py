"""
Script API endpoints.

Routes:
- POST /scripts - Store an already-chunked script
- GET /scripts/{id} - Get script with chunks and images
- POST /scripts/{id}/chunks/{chunk_id}/generate-image - Generate one chunk's image

Dependencies: storyboard.application.services.script_service, storyboard.models
System role: Script HTTP API
"""

from uuid import UUID

from fastapi import APIRouter, Depends, status

from storyboard.api.deps import get_script_service
from storyboard.api.routers.router_utils import handle_storyboard_errors
from storyboard.application.services.script_service import ScriptService
from storyboard.models.script import (
    ChunkResponse,
    CreateScriptRequest,
    GenerateChunkImageRequest,
    GenerateChunkImageResponse,
    ScriptResponse,
)

router = APIRouter(prefix="/scripts", tags=["scripts"])


@router.post("", response_model=ScriptResponse, status_code=status.HTTP_201_CREATED)
@handle_storyboard_errors
async def create_script(
    request: CreateScriptRequest,
    script_service: ScriptService = Depends(get_script_service),
) -> ScriptResponse:
    """
    Store a script whose chunks were produced by the chunking service.

    Raises:
        HTTPException(503): Store unavailable or duplicate chunk keys
    """
    script = await script_service.create_script(
        title=request.title,
        original_script=request.original_script,
        chunks=[chunk.model_dump() for chunk in request.chunks],
    )
    return ScriptResponse.from_model(script)


@router.get("/{script_id}", response_model=ScriptResponse)
@handle_storyboard_errors
async def get_script(
    script_id: UUID,
    script_service: ScriptService = Depends(get_script_service),
) -> ScriptResponse:
    """
    Get script by ID with ordered chunks.

    Raises:
        HTTPException(404): Script not found
    """
    script = await script_service.get_script(script_id)
    return ScriptResponse.from_model(script)


@router.post(
    "/{script_id}/chunks/{chunk_id}/generate-image",
    response_model=GenerateChunkImageResponse,
)
@handle_storyboard_errors
async def generate_chunk_image(
    script_id: UUID,
    chunk_id: str,
    request: GenerateChunkImageRequest,
    script_service: ScriptService = Depends(get_script_service),
) -> GenerateChunkImageResponse:
    """
    Generate the image(s) for a single chunk synchronously.

    Args:
        script_id: Script UUID
        chunk_id: Chunk key within the script
        request: Provider, style, color, quality and options
        script_service: Injected ScriptService

    Returns:
        GenerateChunkImageResponse: Image references and the updated chunk

    Raises:
        HTTPException(404): Script or chunk not found
        HTTPException(400): Provider unavailable
        HTTPException(502): Provider failed or timed out
    """
    chunk, outcome = await script_service.generate_chunk_image(
        script_id, chunk_id, request.to_config()
    )
    return GenerateChunkImageResponse(
        image_url=outcome.image_url,
        secondary_image_url=outcome.secondary_image_url,
        chunk=ChunkResponse.from_model(chunk),
    )
