"""
Customers App - Customer Groups and Ordered Membership

This app manages customers grouped into named customer groups. Every
customer belongs to exactly one group, and each group keeps a dense
1..N ordering of its members, separately for active and withheld
customers.

Key Features:
- Group create/update/delete with bulk membership changes
- Fallback to the default group when a customer's group is missing or removed
- Position repair after membership changes
- Error aggregation with all-or-nothing transactions

Architecture:
- Models: CustomerGroup, Customer
- Services: group_management, customer_management, position_reset
- Views: RESTful API with ViewSets
- Exceptions: Domain exception hierarchy
"""
