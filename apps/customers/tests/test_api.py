import pytest
from decimal import Decimal
from django.urls import reverse
from rest_framework import status
from apps.customers.models import Customer, CustomerGroup


# =============================================================================
# Customer Group API Tests
# =============================================================================

@pytest.mark.django_db
class TestCustomerGroupList:
    """Tests for GET /api/customer-groups/"""

    def test_list_requires_authentication(self, api_client, default_group):
        url = reverse('customers:customer-group-list')
        response = api_client.get(url)

        assert response.status_code == status.HTTP_401_UNAUTHORIZED

    def test_list_groups(self, authenticated_client, default_group, group_with_customers):
        """Groups are ordered by name and carry their customer count."""
        url = reverse('customers:customer-group-list')
        response = authenticated_client.get(url)

        assert response.status_code == status.HTTP_200_OK
        results = response.data['results']
        assert [group['name'] for group in results] == ['General', 'Morning Route']
        assert results[0]['customer_count'] == 0
        assert results[1]['customer_count'] == 3

    def test_filter_by_name(self, authenticated_client, default_group, customer_group, other_group):
        url = reverse('customers:customer-group-list')
        response = authenticated_client.get(url, {'n': 'route'})

        names = [group['name'] for group in response.data['results']]
        assert names == ['Evening Route', 'Morning Route']

    def test_filter_by_customer_count(self, authenticated_client, default_group, group_with_customers):
        url = reverse('customers:customer-group-list')

        response = authenticated_client.get(url, {'ccge': 1})
        assert [group['name'] for group in response.data['results']] == ['Morning Route']

        response = authenticated_client.get(url, {'ccle': 0})
        assert [group['name'] for group in response.data['results']] == ['General']

    def test_filter_by_due_amount(self, authenticated_client, default_group, customer_group, make_customer):
        make_customer(customer_group, due_amount=Decimal('150.00'))
        make_customer(default_group, due_amount=Decimal('20.00'))
        url = reverse('customers:customer-group-list')

        response = authenticated_client.get(url, {'dage': '100'})

        results = response.data['results']
        assert [group['name'] for group in results] == ['Morning Route']
        assert Decimal(results[0]['total_due_amount']) == Decimal('150.00')

    def test_invalid_filter_is_rejected(self, authenticated_client, default_group):
        url = reverse('customers:customer-group-list')
        response = authenticated_client.get(url, {'ccge': 'many'})

        assert response.status_code == status.HTTP_400_BAD_REQUEST


@pytest.mark.django_db
class TestCustomerGroupCreate:
    """Tests for POST /api/customer-groups/"""

    def test_create_group_with_customers(self, authenticated_client, default_group, make_customer):
        customer = make_customer(default_group)
        url = reverse('customers:customer-group-list')

        response = authenticated_client.post(
            url, {'name': 'vip clients', 'customer_ids': [customer.id]}, format='json'
        )

        assert response.status_code == status.HTTP_201_CREATED
        assert response.data['name'] == 'Vip Clients'
        assert response.data['customer_count'] == 1
        customer.refresh_from_db()
        assert customer.customer_group_id == response.data['id']

    def test_create_group_invalid_name(self, authenticated_client, default_group):
        url = reverse('customers:customer-group-list')
        response = authenticated_client.post(url, {'name': 'ab'}, format='json')

        assert response.status_code == status.HTTP_422_UNPROCESSABLE_ENTITY
        assert 'Name: Ensure this value has at least 3 characters (it has 2).' in response.data['errors']
        assert CustomerGroup.objects.count() == 1

    def test_create_group_duplicate_name(self, authenticated_client, customer_group):
        url = reverse('customers:customer-group-list')
        response = authenticated_client.post(url, {'name': 'morning route'}, format='json')

        assert response.status_code == status.HTTP_422_UNPROCESSABLE_ENTITY
        assert response.data['errors'] == [
            'Name should be unique. Group already present with same name.'
        ]


@pytest.mark.django_db
class TestCustomerGroupUpdate:
    """Tests for PUT/PATCH /api/customer-groups/{id}/"""

    def test_patch_repositions_customer(self, authenticated_client, group_with_customers):
        customer_group, (first, second, third) = group_with_customers
        url = reverse('customers:customer-group-detail', args=[customer_group.id])

        response = authenticated_client.patch(
            url,
            {'customer_positions': [{'customer_id': third.id, 'position': 1}]},
            format='json',
        )

        assert response.status_code == status.HTTP_200_OK
        third.refresh_from_db()
        first.refresh_from_db()
        assert (third.position, first.position) == (1, 2)

    def test_put_renames_and_removes(self, authenticated_client, default_group, group_with_customers):
        customer_group, (first, _, _) = group_with_customers
        url = reverse('customers:customer-group-detail', args=[customer_group.id])

        response = authenticated_client.put(
            url,
            {'name': 'day route', 'remove_customer_ids': [first.id]},
            format='json',
        )

        assert response.status_code == status.HTTP_200_OK
        assert response.data['name'] == 'Day Route'
        assert response.data['customer_count'] == 2
        first.refresh_from_db()
        assert first.customer_group_id == default_group.id

    def test_several_positions_are_rejected(self, authenticated_client, group_with_customers):
        customer_group, (first, second, _) = group_with_customers
        url = reverse('customers:customer-group-detail', args=[customer_group.id])

        response = authenticated_client.patch(
            url,
            {'customer_positions': [
                {'customer_id': first.id, 'position': 2},
                {'customer_id': second.id, 'position': 1},
            ]},
            format='json',
        )

        assert response.status_code == status.HTTP_422_UNPROCESSABLE_ENTITY
        assert response.data['errors'] == ['Invalid position provided']

    def test_missing_default_group_is_a_conflict(self, authenticated_client, group_with_customers):
        customer_group, (first, _, _) = group_with_customers
        url = reverse('customers:customer-group-detail', args=[customer_group.id])

        response = authenticated_client.patch(
            url, {'remove_customer_ids': [first.id]}, format='json'
        )

        assert response.status_code == status.HTTP_409_CONFLICT
        assert 'error' in response.data


@pytest.mark.django_db
class TestCustomerGroupDelete:
    """Tests for DELETE /api/customer-groups/{id}/"""

    def test_delete_group(self, authenticated_client, default_group, group_with_customers):
        customer_group, customers = group_with_customers
        url = reverse('customers:customer-group-detail', args=[customer_group.id])

        response = authenticated_client.delete(url)

        assert response.status_code == status.HTTP_204_NO_CONTENT
        assert not CustomerGroup.objects.filter(id=customer_group.id).exists()
        assert default_group.customers.count() == len(customers)

    def test_delete_default_group(self, authenticated_client, default_group):
        url = reverse('customers:customer-group-detail', args=[default_group.id])

        response = authenticated_client.delete(url)

        assert response.status_code == status.HTTP_422_UNPROCESSABLE_ENTITY
        assert response.data['errors'] == ['Cannot delete the default group.']
        assert CustomerGroup.objects.filter(id=default_group.id).exists()


@pytest.mark.django_db
class TestCustomerGroupCustomers:
    """Tests for GET /api/customer-groups/{id}/customers/"""

    def test_lists_active_customers_by_name(self, authenticated_client, customer_group, make_customer):
        make_customer(customer_group, name='Zara Khan')
        make_customer(customer_group, name='Anil Rai')
        make_customer(customer_group, name='Bina Shah', is_active=False)
        url = reverse('customers:customer-group-customers', args=[customer_group.id])

        response = authenticated_client.get(url)

        assert response.status_code == status.HTTP_200_OK
        assert [customer['name'] for customer in response.data] == ['Anil Rai', 'Zara Khan']


# =============================================================================
# Customer API Tests
# =============================================================================

@pytest.mark.django_db
class TestCustomerList:
    """Tests for GET /api/customers/"""

    def test_list_ordered_by_group_name_then_position(
        self, authenticated_client, customer_group, other_group, make_customer
    ):
        morning_first = make_customer(customer_group)
        evening = make_customer(other_group)
        morning_second = make_customer(customer_group)
        url = reverse('customers:customer-list')

        response = authenticated_client.get(url)

        assert response.status_code == status.HTTP_200_OK
        ids = [customer['id'] for customer in response.data['results']]
        assert ids == [evening.id, morning_first.id, morning_second.id]

    def test_search_by_name_or_mobile(self, authenticated_client, customer_group, make_customer):
        make_customer(customer_group, name='Ram Kumar', mobile_no='9841000001')
        make_customer(customer_group, name='Sita Devi', mobile_no='9841000002')
        url = reverse('customers:customer-list')

        response = authenticated_client.get(url, {'nom': 'kumar'})
        assert [customer['name'] for customer in response.data['results']] == ['Ram Kumar']

        response = authenticated_client.get(url, {'nom': '000002'})
        assert [customer['name'] for customer in response.data['results']] == ['Sita Devi']

    def test_filter_by_group_and_flags(self, authenticated_client, customer_group, other_group, make_customer):
        kept = make_customer(customer_group)
        withheld = make_customer(customer_group, is_withheld=True)
        make_customer(other_group)
        url = reverse('customers:customer-list')

        response = authenticated_client.get(url, {'cg_id': [customer_group.id]})
        assert {customer['id'] for customer in response.data['results']} == {kept.id, withheld.id}

        response = authenticated_client.get(url, {'cg_id': [customer_group.id], 'wh': 'true'})
        assert [customer['id'] for customer in response.data['results']] == [withheld.id]


@pytest.mark.django_db
class TestCustomerCreate:
    """Tests for POST /api/customers/"""

    def test_create_customer(self, authenticated_client, default_group, group_with_customers):
        customer_group, _ = group_with_customers
        url = reverse('customers:customer-list')

        response = authenticated_client.post(url, {
            'name': 'maya gurung',
            'mobile_no': '9800000099',
            'customer_group_id': customer_group.id,
        }, format='json')

        assert response.status_code == status.HTTP_201_CREATED
        assert response.data['name'] == 'Maya Gurung'
        assert response.data['customer_group']['id'] == customer_group.id
        assert response.data['position'] == 4

    def test_unknown_group_falls_back_to_default(self, authenticated_client, default_group):
        url = reverse('customers:customer-list')

        response = authenticated_client.post(url, {
            'name': 'Maya Gurung',
            'mobile_no': '9800000099',
            'customer_group_id': 999999,
        }, format='json')

        assert response.status_code == status.HTTP_201_CREATED
        assert response.data['customer_group']['id'] == default_group.id

    def test_invalid_customer(self, authenticated_client, default_group):
        url = reverse('customers:customer-list')

        response = authenticated_client.post(url, {'name': 'Mo'}, format='json')

        assert response.status_code == status.HTTP_422_UNPROCESSABLE_ENTITY
        assert 'Mobile no: This field cannot be blank.' in response.data['errors']
        assert Customer.objects.count() == 0

    def test_missing_default_group_is_a_conflict(self, authenticated_client, db):
        url = reverse('customers:customer-list')

        response = authenticated_client.post(
            url, {'name': 'Maya Gurung', 'mobile_no': '9800000099'}, format='json'
        )

        assert response.status_code == status.HTTP_409_CONFLICT


@pytest.mark.django_db
class TestCustomerUpdateDelete:
    """Tests for PATCH/DELETE /api/customers/{id}/"""

    def test_patch_customer(self, authenticated_client, default_group, group_with_customers):
        _, (first, _, _) = group_with_customers
        original_name = first.name
        url = reverse('customers:customer-detail', args=[first.id])

        response = authenticated_client.patch(
            url, {'name': None, 'address': 'Lake Side'}, format='json'
        )

        assert response.status_code == status.HTTP_200_OK
        assert response.data['name'] == original_name
        assert response.data['address'] == 'Lake Side'

    def test_patch_moves_customer_to_group(self, authenticated_client, default_group, group_with_customers, other_group):
        customer_group, (first, _, _) = group_with_customers
        url = reverse('customers:customer-detail', args=[first.id])

        response = authenticated_client.patch(
            url, {'customer_group_id': other_group.id}, format='json'
        )

        assert response.status_code == status.HTTP_200_OK
        assert response.data['customer_group']['id'] == other_group.id
        assert sorted(customer_group.customers.values_list('position', flat=True)) == [1, 2]

    def test_patch_invalid_customer(self, authenticated_client, default_group, group_with_customers):
        _, (first, _, _) = group_with_customers
        url = reverse('customers:customer-detail', args=[first.id])

        response = authenticated_client.patch(url, {'name': 'x'}, format='json')

        assert response.status_code == status.HTTP_422_UNPROCESSABLE_ENTITY
        assert response.data['errors'] == [
            'Name: Ensure this value has at least 3 characters (it has 1).'
        ]

    def test_delete_customer(self, authenticated_client, default_group, group_with_customers):
        customer_group, (first, _, _) = group_with_customers
        url = reverse('customers:customer-detail', args=[first.id])

        response = authenticated_client.delete(url)

        assert response.status_code == status.HTTP_204_NO_CONTENT
        assert not Customer.objects.filter(id=first.id).exists()
        assert sorted(customer_group.customers.values_list('position', flat=True)) == [1, 2]


@pytest.mark.django_db
class TestHealthCheck:

    def test_health_check(self, client):
        response = client.get(reverse('health-check'))

        assert response.status_code == 200
        assert response.json() == {'status': 'ok'}
