# Models module
from kitflow.models.user import User, UserRole, LoginCode
from kitflow.models.kit import Kit, KitStatus, derive_kit_status
from kitflow.models.assignment import Assignment, AssignmentStatus
from kitflow.models.client import Client, ClientType
from kitflow.models.contact import Vendor, ServiceProvider
from kitflow.models.inventory import (
    InventoryItem, InventoryCategory, InventoryCategoryType, SubcategoryType
)
from kitflow.models.program import Program
from kitflow.models.laser_file import LaserFile
