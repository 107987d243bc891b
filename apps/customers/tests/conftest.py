import itertools

import pytest
from django.contrib.auth import get_user_model
from rest_framework.test import APIClient
from rest_framework_simplejwt.tokens import RefreshToken
from apps.customers.models import Customer, CustomerGroup


_sequence = itertools.count(1)


def partition_positions(customer_group, is_withheld=False):
    """Sorted positions of one partition, read from the database."""
    return sorted(
        Customer.objects
        .in_partition(customer_group.id, is_withheld)
        .values_list('position', flat=True)
    )


@pytest.fixture
def positions():
    """Return the partition_positions helper."""
    return partition_positions


@pytest.fixture
def assert_dense():
    """Return a checker asserting a partition holds exactly 1..N."""

    def _assert_dense(customer_group, is_withheld=False):
        found = partition_positions(customer_group, is_withheld)
        assert found == list(range(1, len(found) + 1))

    return _assert_dense


@pytest.fixture
def api_client():
    """Return an unauthenticated API client."""
    return APIClient()


@pytest.fixture
def staff_user(db):
    """Create and return a user operating the API."""
    return get_user_model().objects.create_user(
        username='staff',
        email='staff@example.com',
        password='TestPass123!',
    )


@pytest.fixture
def authenticated_client(api_client, staff_user):
    """Return API client authenticated with a JWT."""
    refresh = RefreshToken.for_user(staff_user)
    api_client.credentials(HTTP_AUTHORIZATION=f'Bearer {refresh.access_token}')
    return api_client


@pytest.fixture
def default_group(db):
    """Create and return the default customer group."""
    return CustomerGroup.objects.create(name='General', is_default=True)


@pytest.fixture
def customer_group(db):
    """Create and return a regular customer group."""
    return CustomerGroup.objects.create(name='Morning Route')


@pytest.fixture
def other_group(db):
    """Create and return a second regular customer group."""
    return CustomerGroup.objects.create(name='Evening Route')


@pytest.fixture
def make_customer(db):
    """Factory creating customers with unique names and mobile numbers."""

    def _make_customer(customer_group, **kwargs):
        number = next(_sequence)
        kwargs.setdefault('name', f'Customer {number}')
        kwargs.setdefault('mobile_no', f'98{number:08d}')
        return Customer.objects.create(customer_group=customer_group, **kwargs)

    return _make_customer


@pytest.fixture
def group_with_customers(customer_group, make_customer):
    """Regular group holding three active customers at positions 1, 2, 3."""
    customers = [make_customer(customer_group) for _ in range(3)]
    return customer_group, customers


@pytest.fixture
def ordered_names():
    """Return a reader of customer names in position order."""

    def _ordered_names(customer_group, is_withheld=False):
        return list(
            Customer.objects
            .in_partition(customer_group.id, is_withheld)
            .order_by('position', 'id')
            .values_list('name', flat=True)
        )

    return _ordered_names


@pytest.fixture
def reordered_group(customer_group, make_customer):
    """
    Regular group whose order differs from creation order.

    Created as Xavier, Yamuna, Anita, Dinesh; Dinesh is then moved to
    position 3, leaving Xavier, Yamuna, Dinesh, Anita.
    """
    xavier = make_customer(customer_group, name='Xavier')
    yamuna = make_customer(customer_group, name='Yamuna')
    anita = make_customer(customer_group, name='Anita')
    dinesh = make_customer(customer_group, name='Dinesh')

    dinesh.position = 3
    dinesh.save()

    return customer_group, (xavier, yamuna, anita, dinesh)
