from intakebot.routes.webhook import router as webhook_router
from intakebot.routes.admin import router as admin_router

__all__ = ["webhook_router", "admin_router"]
