# Content layer: entity types, the Strapi client and the snapshot provider.

from .client import StrapiClient
from .provider import CMSContentSource, ContentProvider, FileContentSource
from .types import Article, Author, Category, ContentSnapshot, SEOMetadata, Subcategory, Tag

__all__ = [
    "StrapiClient",
    "CMSContentSource",
    "ContentProvider",
    "FileContentSource",
    "Article",
    "Author",
    "Category",
    "ContentSnapshot",
    "SEOMetadata",
    "Subcategory",
    "Tag",
]
