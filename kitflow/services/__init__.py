# Services module
from kitflow.services.auth_service import AuthService
from kitflow.services.email_service import EmailService
from kitflow.services.kit_service import KitService
from kitflow.services.assignment_service import AssignmentService
from kitflow.services.client_service import ClientService
from kitflow.services.contact_service import VendorService, ServiceProviderService
from kitflow.services.inventory_service import InventoryService
from kitflow.services.program_service import ProgramService
from kitflow.services.laser_file_service import LaserFileService
from kitflow.services.report_service import ReportService

__all__ = [
    "AuthService",
    "EmailService",
    "KitService",
    "AssignmentService",
    "ClientService",
    "VendorService",
    "ServiceProviderService",
    "InventoryService",
    "ProgramService",
    "LaserFileService",
    "ReportService",
]
