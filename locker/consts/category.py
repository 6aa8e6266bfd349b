from enum import Enum


class DocumentCategory(str, Enum):
    EDUCATION = "education"
    IDENTITY = "identity"
    FINANCIAL = "financial"
    MEDICAL = "medical"
    LEGAL = "legal"
    OTHER = "other"
    PRIVATE = "private"


# Categories a user can pick at upload time; "private" comes from the path prefix
UPLOAD_CATEGORIES = tuple(c.value for c in DocumentCategory if c is not DocumentCategory.PRIVATE)


def is_private_category(category: str) -> bool:
    return category == DocumentCategory.PRIVATE.value


CATEGORY_MAPPING = {
    "education": {
        "label": "Education",
        "subcategories": [
            "academic_transcripts",
            "certificates",
            "degree_documents",
            "semester_results",
            "course_completion",
            "internship_documents",
            "scholarship_documents",
        ],
    },
    "identity": {
        "label": "Identity",
        "subcategories": [
            "passport",
            "drivers_license",
            "national_id",
            "voter_id",
            "birth_certificate",
            "address_proof",
        ],
    },
    "financial": {
        "label": "Financial",
        "subcategories": [
            "bank_statements",
            "tax_documents",
            "investment_documents",
            "insurance_policies",
            "loan_documents",
            "salary_slips",
        ],
    },
    "medical": {
        "label": "Medical",
        "subcategories": [
            "medical_reports",
            "prescriptions",
            "vaccination_certificates",
            "health_insurance",
            "medical_bills",
        ],
    },
    "legal": {
        "label": "Legal",
        "subcategories": [
            "contracts",
            "legal_notices",
            "court_documents",
            "property_documents",
            "wills_trusts",
        ],
    },
    "other": {
        "label": "Other",
        "subcategories": [
            "personal_documents",
            "travel_documents",
            "employment_documents",
            "miscellaneous",
        ],
    },
}
