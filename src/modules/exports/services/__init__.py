from .export_service import ExportService, EXPORTABLE_TABLES, XLSX_MEDIA_TYPE

__all__ = ['ExportService', 'EXPORTABLE_TABLES', 'XLSX_MEDIA_TYPE']
