"""grantwatch: watch a PostgreSQL role's privileges and report what changed."""
