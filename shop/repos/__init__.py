"""
Repository layer for data access operations.

``order_repo`` returns Order entities loaded with a given strategy;
``order_query_repo`` returns projection records from hand-written queries.
"""
