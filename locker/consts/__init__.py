from locker.consts.category import DocumentCategory, CATEGORY_MAPPING, UPLOAD_CATEGORIES, is_private_category

__all__ = ["DocumentCategory", "CATEGORY_MAPPING", "UPLOAD_CATEGORIES", "is_private_category"]
