"""
AI helpers via LangChain + OpenAI.

- POST /ai/extract-tenant-info: upload an ID card / application form image, get tenant fields.
- POST /ai/describe-document: upload a document image, get a one-sentence description.
- POST /ai/generate-notice: send bullet points, get a full tenant notice.
"""
import base64
import logging
from datetime import date
from typing import Optional

from fastapi import APIRouter, Depends, File, HTTPException, UploadFile
from langchain_core.messages import HumanMessage, SystemMessage
from langchain_openai import ChatOpenAI
from pydantic import BaseModel, Field

from rentflow.core.auth import User, get_current_user
from rentflow.core.config import settings
from rentflow.core.errors import ConfigurationError
from rentflow.core.storage import FilePayload, read_upload

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/ai", tags=["ai"])

VISION_MODEL = "gpt-4o"
TEXT_MODEL = "gpt-4o-mini"

EXTRACT_TENANT_PROMPT = (
    "You are a data entry assistant for a property manager. Extract tenant information from the "
    "provided document image, which could be a National ID card (NID), passport, or application form.\n\n"
    "Look for: full name, father's name, email address, phone number, full address, date of birth "
    "(YYYY-MM-DD), National ID (NID) number, and advance / security deposit amount.\n\n"
    "If any piece of information is not clearly visible or present, leave it empty. "
    "Do not guess or make up information."
)

DESCRIBE_DOCUMENT_PROMPT = (
    "You are an expert document analyst. Look at the provided document image and write a short, "
    "concise, one-sentence description of what it is.\n\n"
    "For example:\n"
    '- "An electricity bill for the month of June 2024."\n'
    '- "The national ID card for John Doe."\n'
    '- "A rental agreement signed on January 1st, 2023."\n\n'
    "Reply with the sentence only."
)

NOTICE_SYSTEM_PROMPT = (
    "You are a helpful property manager's assistant. Write a clear, professional, and friendly notice "
    "for tenants based on the key points you are given. The tone should be courteous but firm. "
    "Make the notice well-formatted and easy to read. Reply with the notice content only."
)


class TenantInfo(BaseModel):
    """Fields read off an ID card or application form; missing ones stay None."""
    name: Optional[str] = Field(default=None, description="The full name of the person.")
    email: Optional[str] = Field(default=None, description="The email address of the person.")
    phone: Optional[str] = Field(default=None, description="The phone number of the person.")
    father_name: Optional[str] = Field(default=None, description="The person's father's name.")
    address: Optional[str] = Field(default=None, description="The person's full address.")
    date_of_birth: Optional[date] = Field(default=None, description="Date of birth in YYYY-MM-DD format.")
    nid_number: Optional[str] = Field(default=None, description="The person's National ID (NID) number.")
    advance_deposit: Optional[float] = Field(default=None, description="Advance or security deposit amount.")


class DocumentDescription(BaseModel):
    description: str


class NoticeRequest(BaseModel):
    points: str = Field(..., min_length=1, max_length=8_000, description="Key points for the notice")


class NoticeResponse(BaseModel):
    notice: str


def _llm(model: str, max_tokens: int = 1024) -> ChatOpenAI:
    if not settings.OPENAI_API_KEY:
        raise ConfigurationError("OpenAI API key is not configured. Set OPENAI_API_KEY in .env.")
    return ChatOpenAI(model=model, api_key=settings.OPENAI_API_KEY, max_tokens=max_tokens)


def _image_message(payload: FilePayload, prompt: str) -> HumanMessage:
    data_url = f"data:{payload.content_type};base64,{base64.standard_b64encode(payload.data).decode('utf-8')}"
    return HumanMessage(
        content=[
            {"type": "image_url", "image_url": {"url": data_url}},
            {"type": "text", "text": prompt},
        ]
    )


def extract_tenant_info(payload: FilePayload) -> TenantInfo:
    llm = _llm(VISION_MODEL).with_structured_output(TenantInfo)
    return llm.invoke([_image_message(payload, EXTRACT_TENANT_PROMPT)])


def describe_document(payload: FilePayload) -> str:
    response = _llm(VISION_MODEL, max_tokens=256).invoke([_image_message(payload, DESCRIBE_DOCUMENT_PROMPT)])
    return (response.content or "").strip()


def generate_notice(points: str) -> str:
    response = _llm(TEXT_MODEL).invoke([
        SystemMessage(content=NOTICE_SYSTEM_PROMPT),
        HumanMessage(content=f"Here are the key points to include:\n{points}"),
    ])
    return (response.content or "").strip()


@router.post("/extract-tenant-info", response_model=TenantInfo)
async def extract_tenant_info_route(
    image: UploadFile = File(..., description="ID card or application form (JPEG, PNG, GIF, WebP)"),
    current_user: User = Depends(get_current_user),
):
    payload = await read_upload(image, ("image/",))
    try:
        return extract_tenant_info(payload)
    except ConfigurationError:
        raise
    except Exception as e:
        logger.exception("Tenant info extraction failed")
        raise HTTPException(status_code=502, detail=f"Vision API error: {str(e)}")


@router.post("/describe-document", response_model=DocumentDescription)
async def describe_document_route(
    image: UploadFile = File(..., description="Document image to describe"),
    current_user: User = Depends(get_current_user),
):
    payload = await read_upload(image, ("image/",))
    try:
        return DocumentDescription(description=describe_document(payload))
    except ConfigurationError:
        raise
    except Exception as e:
        logger.exception("Document description failed")
        raise HTTPException(status_code=502, detail=f"Vision API error: {str(e)}")


@router.post("/generate-notice", response_model=NoticeResponse)
async def generate_notice_route(
    body: NoticeRequest,
    current_user: User = Depends(get_current_user),
):
    """
    - **Body**: `{ "points": "water off Friday 10-2\\nlift servicing next week" }`.
    - **Returns**: `{ "notice": "..." }`, ready to save as the month's notice.
    """
    try:
        return NoticeResponse(notice=generate_notice(body.points))
    except ConfigurationError:
        raise
    except Exception as e:
        logger.exception("Notice generation failed")
        raise HTTPException(status_code=502, detail=f"Chat API error: {str(e)}")
