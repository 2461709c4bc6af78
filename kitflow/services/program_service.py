"""
Program Service.

Programs are the product lines kits belong to. A kit points at its program
through ``Kit.type == Program.slug``, so slugs are immutable and a program
cannot be removed while kits still use it.
"""
import logging
import re
import uuid
from typing import Optional, List

from sqlalchemy import select, func
from sqlalchemy.ext.asyncio import AsyncSession

from kitflow.core.exceptions import ConflictError, NotFound, ValidationError
from kitflow.models.kit import Kit
from kitflow.models.program import Program
from kitflow.schemas.program import ProgramCreate, ProgramUpdate


logger = logging.getLogger(__name__)

SLUG_PATTERN = re.compile(r"[a-z0-9-]+")

DEFAULT_PROGRAMS = [
    {
        "name": "CSTEM",
        "slug": "cstem",
        "description": "Computer Science, Technology, Engineering, and Mathematics program",
    },
    {
        "name": "Robotics",
        "slug": "robotics",
        "description": "Robotics and automation program",
    },
]


class ProgramService:
    """Service for programs."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def list_programs(self) -> List[Program]:
        result = await self.db.execute(select(Program).order_by(Program.name))
        return list(result.scalars().all())

    async def get_by_slug(self, slug: str) -> Optional[Program]:
        result = await self.db.execute(select(Program).where(Program.slug == slug))
        return result.scalar_one_or_none()

    async def get_program_or_404(self, program_id: uuid.UUID) -> Program:
        result = await self.db.execute(select(Program).where(Program.id == program_id))
        program = result.scalar_one_or_none()
        if not program:
            raise NotFound("Program not found")
        return program

    async def create_program(
        self,
        data: ProgramCreate,
        user_id: Optional[uuid.UUID] = None
    ) -> Program:
        if not SLUG_PATTERN.fullmatch(data.slug):
            raise ValidationError(
                "Slug must contain only lowercase letters, numbers, and hyphens"
            )
        if await self.get_by_slug(data.slug):
            raise ValidationError("A program with this name already exists")

        program = Program(
            name=data.name,
            slug=data.slug,
            description=data.description,
            categories=data.categories,
            created_by=user_id,
        )
        self.db.add(program)
        await self.db.commit()
        await self.db.refresh(program)
        logger.info(f"Program created: {program.slug}")
        return program

    async def update_program(self, program_id: uuid.UUID, data: ProgramUpdate) -> Program:
        program = await self.get_program_or_404(program_id)
        for field, value in data.model_dump(exclude_unset=True).items():
            setattr(program, field, value)
        await self.db.commit()
        await self.db.refresh(program)
        return program

    async def delete_program(self, program_id: uuid.UUID) -> None:
        """Delete a program. Blocked while any kit has ``type == slug``."""
        program = await self.get_program_or_404(program_id)

        kit_count = await self.db.scalar(
            select(func.count(Kit.id)).where(Kit.type == program.slug)
        )
        if kit_count:
            raise ConflictError(
                f"Cannot delete program: {kit_count} kit(s) are using this program. "
                "Please reassign or delete those kits first."
            )

        await self.db.delete(program)
        await self.db.commit()
        logger.info(f"Program deleted: {program.slug}")

    async def seed_default_programs(self) -> int:
        """Create the default programs when the table is empty. Returns rows added."""
        count = await self.db.scalar(select(func.count(Program.id)))
        if count:
            return 0

        for entry in DEFAULT_PROGRAMS:
            self.db.add(Program(**entry))
        await self.db.commit()
        logger.info(f"Seeded {len(DEFAULT_PROGRAMS)} default programs")
        return len(DEFAULT_PROGRAMS)
