from .directory_schemas import (
    SectorSummary, SectorCreate, SectorUpdate, SectorResponse,
    UserSummary, UserCreate, UserUpdate, UserResponse
)

__all__ = [
    'SectorSummary', 'SectorCreate', 'SectorUpdate', 'SectorResponse',
    'UserSummary', 'UserCreate', 'UserUpdate', 'UserResponse'
]
