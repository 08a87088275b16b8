"""
GraphQL documents for the importable resources

`$query` is always declared; a null value means "no filter".
"""

from shopwoo.core.exceptions import ValidationError
from shopwoo.shared.constants.importer import (
    RESOURCE_PRODUCTS,
    RESOURCE_CUSTOMERS,
    RESOURCE_ORDERS,
    RESOURCE_TYPES,
)

_PAGE_INFO = """
    pageInfo {
      hasNextPage
      endCursor
    }
"""

_ADDRESS_FIELDS = """
      firstName
      lastName
      company
      address1
      address2
      city
      province
      provinceCode
      country
      countryCodeV2
      zip
      phone
"""

_MONEY = """
      shopMoney {
        amount
        currencyCode
      }
"""

PRODUCTS_QUERY = (
    """
query getProducts($first: Int!, $after: String, $query: String) {
  products(first: $first, after: $after, query: $query) {"""
    + _PAGE_INFO
    + """
    nodes {
      id
      title
      handle
      description
      descriptionHtml
      createdAt
      updatedAt
      publishedAt
      vendor
      productType
      tags
      status
      variants(first: 10) {
        nodes {
          id
          title
          price
          compareAtPrice
          sku
          position
          inventoryQuantity
          availableForSale
          taxable
        }
      }
      images(first: 10) {
        nodes {
          id
          src
          url
          altText
          width
          height
        }
      }
      collections(first: 20) {
        nodes {
          id
          title
          handle
          description
        }
      }
    }
  }
}
"""
)

CUSTOMERS_QUERY = (
    """
query getCustomers($first: Int!, $after: String, $query: String) {
  customers(first: $first, after: $after, query: $query) {"""
    + _PAGE_INFO
    + """
    edges {
      cursor
      node {
        id
        firstName
        lastName
        email
        phone
        state
        tags
        createdAt
        updatedAt
        image {
          url
          altText
        }
        addresses {"""
    + _ADDRESS_FIELDS
    + """        }
        defaultAddress {"""
    + _ADDRESS_FIELDS
    + """        }
      }
    }
  }
}
"""
)

ORDERS_QUERY = (
    """
query getOrders($first: Int!, $after: String, $query: String) {
  orders(first: $first, after: $after, query: $query) {"""
    + _PAGE_INFO
    + """
    nodes {
      id
      name
      createdAt
      displayFinancialStatus
      displayFulfillmentStatus
      email
      phone
      note
      tags
      currentTotalPriceSet {"""
    + _MONEY
    + """      }
      customer {
        id
        email
        firstName
        lastName
        phone
      }
      billingAddress {"""
    + _ADDRESS_FIELDS
    + """      }
      shippingAddress {"""
    + _ADDRESS_FIELDS
    + """      }
      lineItems(first: 20) {
        nodes {
          id
          title
          quantity
          originalUnitPriceSet {"""
    + _MONEY
    + """          }
          variant {
            id
            sku
            product {
              id
            }
          }
        }
      }
      shippingLines(first: 5) {
        nodes {
          title
          originalPriceSet {"""
    + _MONEY
    + """          }
        }
      }
      taxLines {
        title
        priceSet {"""
    + _MONEY
    + """        }
      }
    }
  }
}
"""
)

_COUNT_QUERY_TEMPLATE = """
query count{name}($first: Int!, $query: String) {{
  {connection}(first: $first, query: $query) {{
    nodes {{
      id
    }}
    pageInfo {{
      hasNextPage
    }}
  }}
}}
"""

PAGE_QUERIES = {
    RESOURCE_PRODUCTS: PRODUCTS_QUERY,
    RESOURCE_CUSTOMERS: CUSTOMERS_QUERY,
    RESOURCE_ORDERS: ORDERS_QUERY,
}

COUNT_QUERIES = {
    resource: _COUNT_QUERY_TEMPLATE.format(
        name=resource.capitalize(), connection=resource
    )
    for resource in RESOURCE_TYPES
}


def validate_resource_type(resource_type: str) -> str:
    """Reject resource types the importer has no query for"""
    if resource_type not in PAGE_QUERIES:
        raise ValidationError(
            f"Unsupported resource type '{resource_type}'",
            field="resource_type",
            value=resource_type,
        )
    return resource_type


def page_query(resource_type: str) -> str:
    return PAGE_QUERIES[validate_resource_type(resource_type)]


def count_query(resource_type: str) -> str:
    return COUNT_QUERIES[validate_resource_type(resource_type)]
