"""Product catalog engine.

Provides the attribute catalog cache, combination keys and SKUs,
variation resolution, facet computation and full-text search.
"""

from storefront.catalog.attributes import AttributeCatalog, AttributeSnapshot
from storefront.catalog.facets import FacetComputer
from storefront.catalog.keys import compose_key, generate_variation_sku, slugify_value
from storefront.catalog.parsing import (
    ParseError,
    ParseResult,
    parse_attribute_filters,
    parse_product_attributes,
)
from storefront.catalog.repository import ProductRepository
from storefront.catalog.search import (
    SearchService,
    SearchSort,
    build_autocomplete_query,
    build_query,
)
from storefront.catalog.service import CatalogService
from storefront.catalog.variations import (
    VariationResolver,
    VariationSelector,
    build_lookup,
    sort_variations_for_display,
)

__all__ = [
    # Attribute catalog
    "AttributeCatalog",
    "AttributeSnapshot",
    # Keys
    "compose_key",
    "generate_variation_sku",
    "slugify_value",
    # Parsing
    "ParseError",
    "ParseResult",
    "parse_attribute_filters",
    "parse_product_attributes",
    # Variations
    "VariationResolver",
    "VariationSelector",
    "build_lookup",
    "sort_variations_for_display",
    # Facets
    "FacetComputer",
    # Search
    "SearchService",
    "SearchSort",
    "build_autocomplete_query",
    "build_query",
    # Repository / service
    "ProductRepository",
    "CatalogService",
]
