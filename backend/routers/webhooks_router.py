from fastapi import APIRouter, Depends, Request
from fastapi.concurrency import run_in_threadpool
from loguru import logger
from sqlalchemy.orm import Session

import models.schemas as schemas
from helpers.rate_limiter import WEBHOOK_RATE, limiter
from helpers.webhook_signature import REQUIRED_HEADERS, verify_webhook
from models.config import settings
from models.exceptions import ValidationException
from repositories.database import get_db
from services import WebhookService

router = APIRouter(prefix="/webhooks", tags=["webhooks"])


@router.post("/identity", response_model=schemas.WebhookAck)
@limiter.limit(WEBHOOK_RATE)
async def identity_webhook(request: Request, db: Session = Depends(get_db)):
    """
    Receive signed user lifecycle events from the identity provider.

    The raw body is verified before it is parsed. Database writes and the
    welcome email run in the threadpool.
    """
    body = await request.body()
    headers = {name: request.headers.get(name) for name in REQUIRED_HEADERS}
    event = verify_webhook(settings.IDENTITY_WEBHOOK_SECRET, headers, body)
    if not isinstance(event, dict):
        raise ValidationException("Webhook body must be an object")

    logger.info(f"Identity webhook {headers['svix-id']}: {event.get('type')}")
    return await run_in_threadpool(WebhookService.handle_event, db, event)
