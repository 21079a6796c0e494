from contextlib import asynccontextmanager
import logging
from pathlib import Path

from resume_tailor.api.deps import get_record_store, get_resume_generator
from resume_tailor.core.config import settings

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app):
    Path(settings.files_dir).mkdir(parents=True, exist_ok=True)

    store = get_record_store()
    generator = get_resume_generator()
    logger.info(
        "startup record_store=%s ai_mode=%s",
        "sqlite" if store is not None else "disabled",
        "demo" if generator.is_demo else "live",
    )
    yield
    if store is not None:
        store.close()
