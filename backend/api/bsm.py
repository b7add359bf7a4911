from fastapi import APIRouter, UploadFile, File, HTTPException, Request
from fastapi.responses import JSONResponse, Response
import logging

from backend import metrics
from dbc2bsm.config import BsmSettings
from dbc2bsm.exceptions import ConfigurationError, ConversionError, DbcError
from dbc2bsm.services.dbc_service import DbcService
from dbc2bsm.services.document_service import DocumentService
from dbc2bsm.services.layout_service import layout_to_dict

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/bsm", tags=["bsm"])


def _settings(request: Request) -> BsmSettings:
    config = getattr(request.app.state, "config", None)
    if config is None:
        return BsmSettings()
    try:
        config.require_valid()
    except ConfigurationError as e:
        metrics.inc("bsm_config_error")
        logger.error(f"Refusing request: {e}")
        raise HTTPException(status_code=503, detail=str(e))
    return config.bsm_settings


async def _load_messages(file: UploadFile):
    fname = file.filename or ""
    if not fname.lower().endswith(".dbc"):
        raise HTTPException(status_code=400, detail="Only .dbc files supported")
    contents = await file.read()
    try:
        text = contents.decode("utf-8")
    except UnicodeDecodeError:
        text = contents.decode("latin-1")

    dbc = DbcService()
    try:
        dbc.load_dbc_string(text, name=fname)
    except DbcError as e:
        metrics.inc("bsm_convert_error")
        raise HTTPException(status_code=400, detail=f"DBC parse error: {e}")
    return dbc.get_message_definitions()


def _conversion_failed(e: ConversionError) -> JSONResponse:
    metrics.inc("bsm_convert_error")
    logger.warning(f"Conversion failed ({e.kind.value}): {e}")
    return JSONResponse(
        status_code=422,
        content={"kind": e.kind.value, "message_name": e.message_name, "detail": str(e)},
    )


@router.post("/convert")
async def convert_dbc(request: Request, file: UploadFile = File(...), timestamps: bool = False):
    """Convert an uploaded DBC file into a beSTORM XML document."""
    service = DocumentService(_settings(request))
    messages = await _load_messages(file)
    try:
        document = service.render_messages(messages, include_timestamp=timestamps)
    except ConversionError as e:
        return _conversion_failed(e)

    metrics.inc("bsm_convert_ok")
    metrics.inc("bsm_messages_converted", len(messages))
    return Response(content=document, media_type="application/xml")


@router.post("/layout")
async def layout_dbc(request: Request, file: UploadFile = File(...)):
    """Return the reconciled bit layout of every message as a JSON list."""
    metrics.inc("bsm_layout_requests")
    service = DocumentService(_settings(request))
    messages = await _load_messages(file)
    try:
        layouts = service.reconcile_all(messages)
    except ConversionError as e:
        return _conversion_failed(e)
    return JSONResponse([layout_to_dict(layout) for layout in layouts])
