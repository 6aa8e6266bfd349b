CATEGORIZE_PROMPT = """
You are an intelligent document categorization system for a digital locker application.
Analyze the following document information and categorize it into one of these main categories:

Categories:
1. education - Academic documents, certificates, transcripts, semester results, course materials, internship documents
2. identity - ID documents, passports, licenses, birth certificates, address proofs
3. financial - Bank statements, tax documents, investment papers, insurance, loan documents, salary slips
4. medical - Medical reports, prescriptions, vaccination certificates, health insurance, medical bills
5. legal - Contracts, legal notices, court documents, property papers, wills
6. other - Any document that doesn't fit the above categories

Document Information:
- File Name: {file_name}
{content_line}
Please respond with a JSON object containing:
{{
  "category": "main_category_name",
  "confidence": confidence_score_0_to_1,
  "reasoning": "brief_explanation_of_categorization",
  "subcategory": "specific_subcategory_if_applicable"
}}

Focus on accuracy and provide a confidence score based on how certain you are about the categorization.
"""

SUBCATEGORY_PROMPT = """
You are an intelligent document subcategorization system. Given a document in the "{category}" category,
determine the most appropriate subcategory or umbrella term for better organization.

Document Information:
- File Name: {file_name}
- Main Category: {category}
{content_line}
Based on the document type, suggest a specific subcategory name that would be useful for grouping similar documents.

Examples:
- Course certificates -> "Courses"
- Academic transcripts -> "Transcripts"
- Bank statements -> "Bank Statements"
- Tax documents -> "Tax Documents"
- Passport documents -> "Passport"
- Address proofs -> "Address Proof"
- Medical reports -> "Medical Reports"
- Vaccination certificates -> "Vaccinations"
- Contracts -> "Contracts"
- Property documents -> "Property"

Respond with ONLY the subcategory name (2-3 words max, title case). Do not include quotes or explanations.
"""

MATCH_FOLDER_PROMPT = """
You are an intelligent document folder matching system. Given a document and a list of existing folders,
determine which folder (if any) is the best match for this document.

Document Information:
- File Name: {file_name}
- Category: {category}

Existing Folders:
{folders}

If the confidence is below {threshold}, consider it as no match and the document should get its own new folder.

Respond with a JSON object:
{{
  "folderName": "exact_folder_name_from_list_or_null",
  "confidence": confidence_score_0_to_1,
  "reasoning": "brief_explanation"
}}
"""

FOLDER_DECISION_PROMPT = """
Analyze this document and determine which existing folder it belongs to, or if it needs a new folder.

Document Information:
- Name: {name}
- Category: {category}
- Type: {file_type}

Existing Folders: {folders}

Respond with a JSON object:
{{
  "action": "assign" | "create_new",
  "folder_name": "existing_folder_name_or_new_folder_name",
  "reasoning": "brief_explanation"
}}

If the document clearly belongs to an existing folder, use "assign".
If it doesn't fit any existing folder, use "create_new" with a suggested new folder name.
"""
