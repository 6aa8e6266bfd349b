import asyncio
import json
import re
from typing import Iterable, List, Optional, Sequence

from openai import AsyncOpenAI, OpenAIError

from locker.configs.settings import settings
from locker.consts import CATEGORY_MAPPING, DocumentCategory
from locker.prompts import (
    CATEGORIZE_PROMPT,
    FOLDER_DECISION_PROMPT,
    MATCH_FOLDER_PROMPT,
    SUBCATEGORY_PROMPT,
)
from locker.schemas.categorization import (
    BulkCategorizeItem,
    CategorySuggestion,
    FolderCandidate,
    FolderDecision,
    FolderMatch,
)
from locker.schemas.document import ActiveDocument
from locker.utils import get_logger

logger = get_logger(__name__)

_JSON_OBJECT = re.compile(r"\{[\s\S]*\}")
_AI_ERRORS = (OpenAIError, ValueError, KeyError, TypeError, AttributeError, IndexError)
CONTENT_PREVIEW_CHARS = 500
MAX_SUBCATEGORY_LENGTH = 30

# Checked in order; first hit wins
_CATEGORY_KEYWORDS = [
    ("education", ("semester", "transcript", "certificate", "degree", "result", "marksheet"),
     "Filename contains education-related keywords", "academic_transcripts"),
    ("identity", ("passport", "license", "id", "aadhar", "pan"),
     "Filename contains identity document keywords", None),
    ("financial", ("bank", "statement", "tax", "salary", "invoice"),
     "Filename contains financial document keywords", None),
    ("medical", ("medical", "prescription", "report", "health"),
     "Filename contains medical document keywords", None),
    ("legal", ("contract", "agreement", "legal", "court"),
     "Filename contains legal document keywords", None),
]

_SUBCATEGORY_KEYWORDS = {
    "education": ([(("certificate", "course"), "Courses"), (("transcript",), "Transcripts"),
                   (("degree",), "Degrees"), (("result", "semester"), "Results"),
                   (("internship",), "Internships")], "Academic Documents"),
    "financial": ([(("bank", "statement"), "Bank Statements"), (("tax",), "Tax Documents"),
                   (("salary",), "Salary"), (("investment",), "Investments"),
                   (("insurance",), "Insurance")], "Financial Documents"),
    "identity": ([(("passport",), "Passport"), (("license",), "Licenses"),
                  (("aadhar", "national"), "National ID"), (("address",), "Address Proof")], "Identity Documents"),
    "medical": ([(("prescription",), "Prescriptions"), (("report",), "Medical Reports"),
                 (("vaccination",), "Vaccinations"), (("insurance",), "Health Insurance")], "Medical Documents"),
    "legal": ([(("contract",), "Contracts"), (("property",), "Property"),
               (("court",), "Court Documents")], "Legal Documents"),
}


def fallback_categorization(file_name: str) -> CategorySuggestion:
    lowered = file_name.lower()
    for category, keywords, reasoning, subcategory in _CATEGORY_KEYWORDS:
        if any(k in lowered for k in keywords):
            return CategorySuggestion(category=category, confidence=0.7, reasoning=reasoning, subcategory=subcategory)
    return CategorySuggestion(
        category=DocumentCategory.OTHER.value,
        confidence=0.5,
        reasoning="Could not determine category from filename, defaulting to 'other'",
    )


def fallback_subcategory(file_name: str, category: str) -> str:
    lowered = file_name.lower()
    rules, default = _SUBCATEGORY_KEYWORDS.get(category, ([], "Miscellaneous"))
    for keywords, label in rules:
        if any(k in lowered for k in keywords):
            return label
    return default


def fallback_matching_folder(file_name: str, folders: Sequence[FolderCandidate]) -> Optional[FolderMatch]:
    lowered = file_name.lower()
    for folder in folders:
        matching = [k for k in folder.keywords if k and k.lower() in lowered]
        if matching:
            confidence = min(0.8, len(matching) / len(folder.keywords) + 0.3)
            return FolderMatch(folder_name=folder.name, confidence=confidence)
    return None


def default_folder_name(category: str) -> str:
    return f"{category[:1].upper()}{category[1:]} Documents"


def extract_json(text: str) -> dict:
    match = _JSON_OBJECT.search(text or "")
    if not match:
        raise ValueError("No JSON object in model response")
    return json.loads(match.group(0))


def _content_line(content: Optional[str]) -> str:
    return f"- Content Preview: {content[:CONTENT_PREVIEW_CHARS]}\n" if content else ""


class CategorizationService:
    """
    Category and folder suggestions from an OpenAI-compatible chat endpoint.

    Every public method degrades to deterministic filename heuristics when no
    API key is configured or the call fails for any reason; nothing here
    raises to the caller.
    """

    def __init__(self, client: Optional[AsyncOpenAI] = None, model: Optional[str] = None, delay: Optional[float] = None):
        if client is None and settings.AI_API_KEY:
            client = AsyncOpenAI(
                api_key=settings.AI_API_KEY,
                base_url=settings.AI_BASE_URL,
                timeout=settings.AI_TIMEOUT_SECONDS,
                max_retries=0,
            )
        self.client = client
        self.model = model or settings.AI_MODEL
        self.delay = settings.AI_BULK_DELAY_SECONDS if delay is None else delay

    @property
    def enabled(self) -> bool:
        return self.client is not None

    async def aclose(self) -> None:
        if self.client is not None:
            await self.client.close()

    async def _complete(self, prompt: str) -> str:
        response = await self.client.chat.completions.create(
            model=self.model,
            messages=[{"role": "user", "content": prompt}],
            temperature=0.2,
        )
        text = response.choices[0].message.content
        if not text:
            raise ValueError("Empty response from model")
        return text

    async def categorize_document(self, file_name: str, content: Optional[str] = None) -> CategorySuggestion:
        if not self.enabled:
            return fallback_categorization(file_name)
        try:
            raw = extract_json(await self._complete(
                CATEGORIZE_PROMPT.format(file_name=file_name, content_line=_content_line(content))
            ))
            category = str(raw.get("category", "")).lower()
            confidence = min(1.0, max(0.0, float(raw.get("confidence", 0.5))))
            reasoning = str(raw.get("reasoning") or "")
            if category not in CATEGORY_MAPPING:
                category = DocumentCategory.OTHER.value
                confidence = max(0.3, confidence - 0.2)
                reasoning += " (Fallback to 'other' category)"
            return CategorySuggestion(
                category=category,
                confidence=confidence,
                reasoning=reasoning,
                subcategory=raw.get("subcategory") or None,
            )
        except _AI_ERRORS as e:
            logger.warning(f"[AI] Categorization failed for '{file_name}', using heuristics: {e}")
            return fallback_categorization(file_name)

    async def get_subcategory_name(self, file_name: str, category: str, content: Optional[str] = None) -> str:
        if not self.enabled:
            return fallback_subcategory(file_name, category)
        try:
            text = await self._complete(SUBCATEGORY_PROMPT.format(
                file_name=file_name, category=category, content_line=_content_line(content)
            ))
            label = re.sub(r"['\"]", "", text).strip()
            if 0 < len(label) <= MAX_SUBCATEGORY_LENGTH:
                return label
            raise ValueError(f"Invalid subcategory '{label[:40]}'")
        except _AI_ERRORS as e:
            logger.warning(f"[AI] Subcategory failed for '{file_name}', using heuristics: {e}")
            return fallback_subcategory(file_name, category)

    async def find_best_matching_folder(
        self,
        file_name: str,
        category: str,
        folders: Sequence[FolderCandidate],
    ) -> Optional[FolderMatch]:
        """An existing folder the model is confident about, or None"""
        if not folders:
            return None
        if not self.enabled:
            return fallback_matching_folder(file_name, folders)

        listing = "\n".join(
            f'{i}. "{f.name}" - Keywords: [{", ".join(f.keywords)}]'
            + (f" - Description: {f.description}" if f.description else "")
            for i, f in enumerate(folders, start=1)
        )
        try:
            raw = extract_json(await self._complete(MATCH_FOLDER_PROMPT.format(
                file_name=file_name, category=category, folders=listing,
                threshold=settings.AI_AUTO_APPLY_THRESHOLD,
            )))
            name = raw.get("folderName")
            confidence = float(raw.get("confidence") or 0.0)
            known = {f.name for f in folders}
            if name in known and confidence >= settings.AI_AUTO_APPLY_THRESHOLD:
                return FolderMatch(folder_name=name, confidence=min(1.0, confidence))
            return None
        except _AI_ERRORS as e:
            logger.warning(f"[AI] Folder match failed for '{file_name}', using heuristics: {e}")
            return fallback_matching_folder(file_name, folders)

    async def find_best_folder_for_document(
        self,
        name: str,
        category: str,
        file_type: str,
        folders: Sequence[FolderCandidate],
    ) -> FolderDecision:
        fallback_name = default_folder_name(category)
        if self.enabled and folders:
            try:
                raw = extract_json(await self._complete(FOLDER_DECISION_PROMPT.format(
                    name=name, category=category, file_type=file_type,
                    folders=", ".join(f.name for f in folders),
                )))
                action = raw.get("action")
                return FolderDecision(
                    action=action if action in ("assign", "create_new") else "create_new",
                    folder_name=str(raw.get("folder_name") or fallback_name).strip()[:100],
                    reasoning=str(raw.get("reasoning") or "No specific reasoning provided"),
                )
            except _AI_ERRORS as e:
                logger.warning(f"[AI] Folder decision failed for '{name}', using heuristics: {e}")

        match = fallback_matching_folder(name, folders)
        if match:
            return FolderDecision(action="assign", folder_name=match.folder_name, reasoning="Filename matches folder keywords")
        if any(f.name == fallback_name for f in folders):
            return FolderDecision(action="assign", folder_name=fallback_name, reasoning=f"Default folder for {category} documents")
        return FolderDecision(action="create_new", folder_name=fallback_name, reasoning=f"No existing folder fits this {category} document")

    async def bulk_categorize(self, documents: Iterable[ActiveDocument]) -> List[BulkCategorizeItem]:
        """Sequential with a fixed pause between calls to stay under rate limits"""
        results = []
        for document in documents:
            try:
                suggestion = await self.categorize_document(document.name)
            except Exception as e:
                logger.error(f"[AI] Bulk item failed - path: {document.path}, error: {e}")
                suggestion = CategorySuggestion(
                    category=DocumentCategory.OTHER.value,
                    confidence=0.3,
                    reasoning="Error occurred during categorization",
                )
            results.append(BulkCategorizeItem(
                path=document.path,
                name=document.name,
                current_category=document.category,
                suggested_category=suggestion.category,
                confidence=suggestion.confidence,
                reasoning=suggestion.reasoning,
                auto_apply=(
                    suggestion.category != document.category
                    and suggestion.confidence >= settings.AI_AUTO_APPLY_THRESHOLD
                ),
            ))
            if self.delay and self.enabled:
                await asyncio.sleep(self.delay)
        return results
