import asyncio
import re
from typing import Dict, Iterable, List, Optional

from pymongo.errors import DuplicateKeyError

from locker.core.exceptions import AppError, Conflict, NotFound, ValidationFailed
from locker.crud import folder_assignment_crud, smart_folder_crud
from locker.schemas.categorization import FolderCandidate
from locker.schemas.folder import (
    AssignmentResponse,
    AutoAssignResult,
    FolderWithDocuments,
    OrganizeResult,
    SmartFolderCreate,
    SmartFolderIn,
    SmartFolderResponse,
    SmartFolderUpdate,
)
from locker.schemas.response import OperationResult
from locker.services.categorization_service import CategorizationService
from locker.services.document_service import DocumentService
from locker.utils import get_logger
from locker.utils.document_path import base_name, belongs_to, is_private_path, parse_object_name, resolve_category

logger = get_logger(__name__)

MAX_FOLDER_KEYWORDS = 10
_NON_WORD = re.compile(r"[^a-z0-9\s]")


def generate_folder_keywords(folder_name: str, document_names: Iterable[str]) -> List[str]:
    """Words longer than two characters from the folder and document names, first ten kept"""
    keywords: Dict[str, None] = {}
    for word in folder_name.lower().split(" "):
        if len(word) > 2:
            keywords.setdefault(word)
    for name in document_names:
        for word in _NON_WORD.sub(" ", name.lower()).split(" "):
            if len(word) > 2:
                keywords.setdefault(word)
    return list(keywords)[:MAX_FOLDER_KEYWORDS]


class FolderService:
    def __init__(
        self,
        documents: Optional[DocumentService] = None,
        categorizer: Optional[CategorizationService] = None,
        crud=None,
        assignment_crud=None,
    ):
        self.documents = documents or DocumentService()
        self.categorizer = categorizer or CategorizationService()
        self.crud = crud or smart_folder_crud
        self.assignment_crud = assignment_crud or folder_assignment_crud

    @staticmethod
    def _to_response(folder) -> SmartFolderResponse:
        return SmartFolderResponse(
            id=str(folder.id),
            folder_name=folder.folder_name,
            description=folder.description or "",
            keywords=list(folder.keywords or []),
            created_at=folder.created_at,
            updated_at=folder.updated_at,
        )

    @staticmethod
    def _to_assignment(assignment) -> AssignmentResponse:
        return AssignmentResponse(
            document_path=assignment.document_path,
            folder_id=assignment.folder_id,
            assigned_at=assignment.assigned_at,
        )

    async def _get_folder(self, user_id: str, folder_id: str):
        folder = await self.crud.get_owned(user_id, folder_id)
        if not folder:
            raise NotFound("Folder not found", code="folder_not_found")
        return folder

    async def _create_or_reuse(self, user_id: str, name: str, description: str, keywords: List[str]):
        """Returns (folder, created)"""
        existing = await self.crud.get_by_name(user_id, name)
        if existing:
            return existing, False
        folder = await self.create_folder(user_id, SmartFolderIn(folder_name=name, description=description, keywords=keywords))
        return folder, True

    # ---- folders ----

    async def create_folder(self, user_id: str, data: SmartFolderIn) -> SmartFolderResponse:
        name = data.folder_name.strip()
        if not name:
            raise ValidationFailed("Folder name is required", field="folder_name")
        if await self.crud.get_by_name(user_id, name):
            raise Conflict(f"Folder '{name}' already exists", code="folder_exists")
        try:
            folder = await self.crud.create(SmartFolderCreate(
                user_id=user_id,
                folder_name=name,
                description=data.description or "",
                keywords=data.keywords,
            ))
        except DuplicateKeyError:
            raise Conflict(f"Folder '{name}' already exists", code="folder_exists")
        logger.info(f"[FOLDER] Created - user_id: {user_id}, name: {name}")
        return self._to_response(folder)

    async def list_folders(self, user_id: str) -> List[SmartFolderResponse]:
        return [self._to_response(f) for f in await self.crud.list_for_user(user_id)]

    async def update_folder(self, user_id: str, folder_id: str, data: SmartFolderUpdate) -> SmartFolderResponse:
        folder = await self._get_folder(user_id, folder_id)
        changes = data.model_dump(exclude_unset=True)
        if changes.get("folder_name"):
            changes["folder_name"] = changes["folder_name"].strip()
            clash = await self.crud.get_by_name(user_id, changes["folder_name"])
            if clash and str(clash.id) != str(folder.id):
                raise Conflict(f"Folder '{changes['folder_name']}' already exists", code="folder_exists")
        try:
            folder = await self.crud.update(folder, changes)
        except DuplicateKeyError:
            raise Conflict("Folder name already exists", code="folder_exists")
        logger.info(f"[FOLDER] Updated - user_id: {user_id}, folder_id: {folder_id}, fields: {list(changes)}")
        return self._to_response(folder)

    async def delete_folder(self, user_id: str, folder_id: str) -> int:
        """Deletes the folder and its assignments; returns how many assignments went with it"""
        folder = await self._get_folder(user_id, folder_id)
        removed = await self.assignment_crud.delete_for_folder(user_id, str(folder.id))
        await self.crud.delete(folder)
        logger.info(f"[FOLDER] Deleted - user_id: {user_id}, folder_id: {folder_id}, assignments: {removed}")
        return removed

    # ---- assignments ----

    async def assign(self, user_id: str, path: str, folder_id: str) -> AssignmentResponse:
        if not belongs_to(user_id, path):
            raise NotFound("Document not found", code="document_not_found")
        folder = await self._get_folder(user_id, folder_id)
        assignment = await self.assignment_crud.upsert(user_id, path, str(folder.id))
        return self._to_assignment(assignment)

    async def unassign(self, user_id: str, path: str) -> bool:
        removed = await self.assignment_crud.delete_for_path(user_id, path)
        if not removed:
            raise NotFound("Document is not in a folder", code="assignment_not_found")
        return True

    async def list_assignments(self, user_id: str) -> List[AssignmentResponse]:
        return [self._to_assignment(a) for a in await self.assignment_crud.list_for_user(user_id)]

    async def folder_view(self, user_id: str) -> List[FolderWithDocuments]:
        """Folders with their active documents; assignments to vanished paths are left out"""
        folders = await self.crud.list_for_user(user_id)
        assignments = await self.assignment_crud.list_for_user(user_id)
        active = {d.path: d for d in await self.documents.list_active(user_id)}

        by_folder: Dict[str, list] = {}
        for assignment in assignments:
            document = active.get(assignment.document_path)
            if document:
                by_folder.setdefault(assignment.folder_id, []).append(document)

        return [
            FolderWithDocuments(folder=self._to_response(f), documents=by_folder.get(str(f.id), []))
            for f in folders
        ]

    # ---- automatic organisation ----

    async def _candidates(self, user_id: str) -> List[FolderCandidate]:
        return [
            FolderCandidate(name=f.folder_name, keywords=list(f.keywords or []), description=f.description or None)
            for f in await self.crud.list_for_user(user_id)
        ]

    async def auto_assign(self, user_id: str, path: str, file_type: str = "application/octet-stream") -> AutoAssignResult:
        if not belongs_to(user_id, path):
            raise NotFound("Document not found", code="document_not_found")
        if is_private_path(user_id, path):
            raise ValidationFailed("Private documents are not auto-filed", field="path", code="private_document")

        _, name = parse_object_name(base_name(path))
        category = resolve_category(user_id, path)
        decision = await self.categorizer.find_best_folder_for_document(
            name, category, file_type, await self._candidates(user_id)
        )

        if decision.action == "assign":
            folder = await self.crud.get_by_name(user_id, decision.folder_name)
            if folder:
                await self.assignment_crud.upsert(user_id, path, str(folder.id))
                logger.info(f"[AUTO_ASSIGN] Assigned - path: {path}, folder: {folder.folder_name}")
                return AutoAssignResult(
                    action="assigned",
                    folder_name=folder.folder_name,
                    folder_id=str(folder.id),
                    reasoning=decision.reasoning,
                )

        folder, _ = await self._create_or_reuse(
            user_id,
            decision.folder_name,
            f"Auto-created for {name}",
            generate_folder_keywords(decision.folder_name, [name]),
        )
        await self.assignment_crud.upsert(user_id, path, str(folder.id))
        logger.info(f"[AUTO_ASSIGN] Created and assigned - path: {path}, folder: {folder.folder_name}")
        return AutoAssignResult(
            action="created_and_assigned",
            folder_name=folder.folder_name,
            folder_id=str(folder.id),
            reasoning=decision.reasoning,
        )

    async def organize(self, user_id: str) -> OperationResult[OrganizeResult]:
        """File every active, unassigned, non-private document, one at a time"""
        assigned_paths = {a.document_path for a in await self.assignment_crud.list_for_user(user_id)}
        pending = [
            d for d in await self.documents.list_active(user_id)
            if not d.is_private and d.path not in assigned_paths
        ]
        outcome = OperationResult(result=OrganizeResult(processed=0, assigned=0))
        logger.info(f"[ORGANIZE] Starting - user_id: {user_id}, pending: {len(pending)}")

        for document in pending:
            outcome.result.processed += 1
            try:
                candidates = await self._candidates(user_id)
                match = await self.categorizer.find_best_matching_folder(document.name, document.category, candidates)
                folder = await self.crud.get_by_name(user_id, match.folder_name) if match else None
                if folder is None:
                    label = await self.categorizer.get_subcategory_name(document.name, document.category)
                    folder, created = await self._create_or_reuse(
                        user_id, label, "", generate_folder_keywords(label, [document.name])
                    )
                    if created:
                        outcome.result.folders_created.append(folder.folder_name)
                await self.assignment_crud.upsert(user_id, document.path, str(folder.id))
                outcome.result.assigned += 1
            except AppError as e:
                logger.warning(f"[ORGANIZE] Skipped - path: {document.path}, error: {e.message}")
                outcome.advise(f"organize:{document.path}", e.message)

            if self.categorizer.enabled and self.categorizer.delay:
                await asyncio.sleep(self.categorizer.delay)

        logger.info(
            f"[ORGANIZE] Completed - user_id: {user_id}, assigned: {outcome.result.assigned}, "
            f"new folders: {len(outcome.result.folders_created)}"
        )
        return outcome
