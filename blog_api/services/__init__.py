# Services package.
#
# Each module exposes a focused set of async functions that encapsulate
# business logic and database access for a single resource:
#
#   auth_service    : registration, credential checks, user lookup
#   post_service    : CRUD + full-text search for Post
#   comment_service : CRUD for Comment within a Post
#
# All service functions accept an AsyncSession as their first argument
# so that the router layer controls the transaction boundary via the
# ``get_db`` dependency. Lookups that find nothing return None / False;
# routers translate that into the matching HTTP error.
