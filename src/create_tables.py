# create_tables.py
import logging

from database import engine, Base
# Importa todos los modelos para que se registren con Base
from modules.directory.models import Sector, User
from modules.signatures.models import Signature, Attachment
from modules.workflow.models import Request
from modules.chat.models import ChatMessage

logger = logging.getLogger(__name__)

def crear_tablas():
    """Crea todas las tablas en la base de datos"""
    logger.info("Tablas a crear: %s", list(Base.metadata.tables.keys()))
    Base.metadata.create_all(bind=engine)
    logger.info("Tablas creadas exitosamente")

if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO)
    crear_tablas()
