import logging
from typing import Optional

from sqlalchemy import or_
from sqlalchemy.orm import Session

from errors import ConflictError, NotFoundError, ValidationError
from modules.directory.models import Sector

logger = logging.getLogger(__name__)

class SectorService:

    @staticmethod
    def query_sectors(session: Session, search: Optional[str] = None):
        query = session.query(Sector)
        if search:
            pattern = f"%{search}%"
            query = query.filter(or_(Sector.name.ilike(pattern), Sector.description.ilike(pattern)))
        return query.order_by(Sector.name.asc())

    @staticmethod
    def get_sector(session: Session, sector_id: int) -> Sector:
        sector = session.get(Sector, sector_id)
        if not sector:
            raise NotFoundError("Setor não encontrado")
        return sector

    @staticmethod
    def create_sector(session: Session, name: str, description: Optional[str] = None) -> Sector:
        name = (name or "").strip()
        if not name:
            raise ValidationError("Nome do setor é obrigatório")
        if session.query(Sector).filter(Sector.name == name).first():
            raise ConflictError("Já existe um setor com este nome")

        sector = Sector(name=name, description=description or None)
        session.add(sector)
        session.commit()
        session.refresh(sector)
        logger.info("Sector %s created", sector.name)
        return sector

    @staticmethod
    def update_sector(session: Session, sector_id: int, name: str, description: Optional[str] = None) -> Sector:
        name = (name or "").strip()
        if not name:
            raise ValidationError("Nome do setor é obrigatório")
        sector = SectorService.get_sector(session, sector_id)

        if name != sector.name and session.query(Sector).filter(Sector.name == name).first():
            raise ConflictError("Já existe um setor com este nome")

        sector.name = name
        sector.description = description or None
        session.commit()
        session.refresh(sector)
        return sector

    @staticmethod
    def delete_sector(session: Session, sector_id: int):
        sector = SectorService.get_sector(session, sector_id)
        if sector.users:
            raise ConflictError("Não é possível deletar setor que possui usuários")
        if sector.signatures:
            raise ConflictError("Não é possível deletar setor que possui assinaturas")

        session.delete(sector)
        session.commit()
        logger.info("Sector %s deleted", sector_id)
