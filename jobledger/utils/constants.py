"""
Table names and enumerations shared by services, stores and schemas.
"""

JOBS_TABLE = "jobs"
EXPENSES_TABLE = "expenses"
TRANSACTIONS_TABLE = "transactions"
CATEGORIES_TABLE = "categories"
CLIENTS_TABLE = "clients"

# Job lifecycle
JOB_STATUS_IN_PROGRESS = "in_progress"
JOB_STATUS_COMPLETED = "completed"
JOB_STATUS_CANCELED = "canceled"
JOB_STATUSES = (JOB_STATUS_IN_PROGRESS, JOB_STATUS_COMPLETED, JOB_STATUS_CANCELED)

# Transaction.type
TRANSACTION_TYPES = ("income", "expense")

# Category.type
CATEGORY_TYPES = ("income", "expense", "both")

# Fields mirrored from a job/expense onto its derived transaction
MIRRORED_FIELDS = ("amount", "date", "description")

# Postgres SQLSTATE for unique_violation
UNIQUE_VIOLATION = "23505"
