"""
Shopify Admin GraphQL API access for the import engine
"""
