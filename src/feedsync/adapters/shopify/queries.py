"""GraphQL documents for the Shopify Admin API."""

from __future__ import annotations

MEDIA_FIELDS = """
fragment MediaFields on Media {
  id
  alt
  status
  mediaContentType
  preview { image { url } }
}
"""

VARIANT_FIELDS = """
fragment VariantFields on ProductVariant {
  id
  sku
  barcode
  price
  selectedOptions { name value }
  media(first: 1) { nodes { id } }
}
"""

PRODUCT_FIELDS = (
    """
fragment ProductFields on Product {
  id
  title
  handle
  tags
  variants(first: 100) { nodes { ...VariantFields } }
  media(first: 100) { nodes { ...MediaFields } }
}
"""
    + VARIANT_FIELDS
    + MEDIA_FIELDS
)

SEARCH_PRODUCTS = (
    """
query SearchProducts($query: String!, $first: Int!) {
  products(first: $first, query: $query) {
    nodes { ...ProductFields }
  }
}
"""
    + PRODUCT_FIELDS
)

PRODUCT_CREATE = (
    """
mutation ProductCreate($product: ProductCreateInput!) {
  productCreate(product: $product) {
    product { ...ProductFields }
    userErrors { field message }
  }
}
"""
    + PRODUCT_FIELDS
)

PRODUCT_CREATE_MEDIA = (
    """
mutation ProductCreateMedia($productId: ID!, $media: [CreateMediaInput!]!) {
  productCreateMedia(productId: $productId, media: $media) {
    media { ...MediaFields }
    mediaUserErrors { field message code }
  }
}
"""
    + MEDIA_FIELDS
)

PRODUCT_MEDIA = (
    """
query ProductMedia($id: ID!) {
  product(id: $id) {
    media(first: 100) { nodes { ...MediaFields } }
  }
}
"""
    + MEDIA_FIELDS
)

PRODUCT_VARIANTS = (
    """
query ProductVariants($id: ID!, $after: String) {
  product(id: $id) {
    variants(first: 100, after: $after) {
      nodes { ...VariantFields }
      pageInfo { hasNextPage endCursor }
    }
  }
}
"""
    + VARIANT_FIELDS
)

VARIANTS_BULK_CREATE = (
    """
mutation ProductVariantsBulkCreate(
  $productId: ID!
  $variants: [ProductVariantsBulkInput!]!
  $strategy: ProductVariantsBulkCreateStrategy
) {
  productVariantsBulkCreate(productId: $productId, variants: $variants, strategy: $strategy) {
    productVariants { ...VariantFields }
    userErrors { field message code }
  }
}
"""
    + VARIANT_FIELDS
)

VARIANTS_BULK_UPDATE = (
    """
mutation ProductVariantsBulkUpdate($productId: ID!, $variants: [ProductVariantsBulkInput!]!) {
  productVariantsBulkUpdate(productId: $productId, variants: $variants, allowPartialUpdates: true) {
    productVariants { ...VariantFields }
    userErrors { field message code }
  }
}
"""
    + VARIANT_FIELDS
)

PUBLICATIONS = """
query Publications {
  publications(first: 50) {
    nodes { id name }
  }
}
"""

PUBLISHABLE_PUBLISH = """
mutation PublishablePublish($id: ID!, $input: [PublicationInput!]!) {
  publishablePublish(id: $id, input: $input) {
    userErrors { field message }
  }
}
"""

VARIANT_OPTIONS = """
query VariantOptions($first: Int!, $after: String) {
  productVariants(first: $first, after: $after) {
    nodes { selectedOptions { name value } }
    pageInfo { hasNextPage endCursor }
  }
}
"""
