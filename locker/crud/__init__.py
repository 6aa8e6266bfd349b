from locker.crud.deleted_document import deleted_document_crud, DeletedDocumentCRUD
from locker.crud.smart_folder import smart_folder_crud, SmartFolderCRUD
from locker.crud.folder_assignment import folder_assignment_crud, FolderAssignmentCRUD
from locker.crud.document_share import document_share_crud, DocumentShareCRUD

__all__ = [
    "deleted_document_crud",
    "DeletedDocumentCRUD",
    "smart_folder_crud",
    "SmartFolderCRUD",
    "folder_assignment_crud",
    "FolderAssignmentCRUD",
    "document_share_crud",
    "DocumentShareCRUD",
]
