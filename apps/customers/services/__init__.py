"""
Customers app services layer.

Services contain business logic and orchestrate operations across models.
Every state-changing operation runs in one transaction, collects failures
on an ErrorTracker and returns an OperationResult.
"""

from .error_tracker import (
    ErrorTracker,
    OperationResult,
)

from .group_lookup import (
    get_default_customer_group,
    customer_group_exists,
)

from .position_reset import (
    reset_customer_positions,
)

from .group_management import (
    create_customer_group,
    update_customer_group,
    delete_customer_group,
)

from .customer_management import (
    create_customer,
    update_customer,
    delete_customer,
)

from .customer_search import (
    search_customer_groups,
    search_customers,
)


__all__ = [
    # Errors and results
    'ErrorTracker',
    'OperationResult',

    # Lookups
    'get_default_customer_group',
    'customer_group_exists',

    # Positions
    'reset_customer_positions',

    # Group Management
    'create_customer_group',
    'update_customer_group',
    'delete_customer_group',

    # Customer Management
    'create_customer',
    'update_customer',
    'delete_customer',

    # Search
    'search_customer_groups',
    'search_customers',
]
