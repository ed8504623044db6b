import sys

from loguru import logger

from saligo.ai.orchestrator import AIOrchestrator
from saligo.ai.providers import create_adapter
from saligo.api import create_app
from saligo.config import Settings

settings = Settings()

logger.configure(handlers=[{"sink": sys.stderr, "level": settings.log_level}])

logger.info(f"Initializing center discovery with the {settings.provider.value} provider")
adapter = create_adapter(settings)
orchestrator = AIOrchestrator.from_settings(settings, adapter)
app = create_app(settings=settings, orchestrator=orchestrator)
