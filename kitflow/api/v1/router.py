from fastapi import APIRouter

from kitflow.api.v1.endpoints import (
    # Access Control
    auth,
    users,
    # Kits & Fulfillment
    kits,
    assignments,
    programs,
    # Directory
    clients,
    vendors,
    services,
    # Materials
    inventory,
    laser_files,
    storage,
    # Reports & AI
    reports,
    ai,
)

# Create main API router
api_router = APIRouter(prefix="/api/v1")

# ==================== Access Control ====================
api_router.include_router(
    auth.router,
    prefix="/auth",
    tags=["Authentication"]
)
api_router.include_router(
    users.router,
    prefix="/users",
    tags=["Users"]
)

# ==================== Kits & Fulfillment ====================
api_router.include_router(
    kits.router,
    prefix="/kits",
    tags=["Kits"]
)
api_router.include_router(
    assignments.router,
    prefix="/assignments",
    tags=["Assignments"]
)
api_router.include_router(
    programs.router,
    prefix="/programs",
    tags=["Programs"]
)

# ==================== Directory ====================
api_router.include_router(
    clients.router,
    prefix="/clients",
    tags=["Clients"]
)
api_router.include_router(
    vendors.router,
    prefix="/vendors",
    tags=["Vendors"]
)
api_router.include_router(
    services.router,
    prefix="/services",
    tags=["Service Providers"]
)

# ==================== Materials ====================
api_router.include_router(
    inventory.router,
    prefix="/inventory",
    tags=["Inventory"]
)
api_router.include_router(
    laser_files.router,
    prefix="/laser-files",
    tags=["Laser Files"]
)
api_router.include_router(
    storage.router,
    prefix="/storage",
    tags=["Storage"]
)

# ==================== Reports & AI ====================
api_router.include_router(
    reports.router,
    prefix="/reports",
    tags=["Reports"]
)
api_router.include_router(
    ai.router,
    prefix="/ai",
    tags=["AI Assistant"]
)
