from django.urls import path, include
from rest_framework.routers import DefaultRouter
from . import views

app_name = 'customers'

# Router for ViewSets
router = DefaultRouter()
router.register(r'customer-groups', views.CustomerGroupViewSet, basename='customer-group')
router.register(r'customers', views.CustomerViewSet, basename='customer')

urlpatterns = [
    # Customer group routes
    # GET    /api/customer-groups/                  - List groups (n, ccge, ccle, dage, dale)
    # POST   /api/customer-groups/                  - Create group
    # GET    /api/customer-groups/{id}/             - Get group details
    # PUT    /api/customer-groups/{id}/             - Rename / add / remove / reposition
    # PATCH  /api/customer-groups/{id}/             - Same as PUT
    # DELETE /api/customer-groups/{id}/             - Delete group (not the default one)
    # GET    /api/customer-groups/{id}/customers/   - Active customers of the group

    # Customer routes
    # GET    /api/customers/              - List customers (nom, cg_id, act, wh)
    # POST   /api/customers/              - Create customer
    # GET    /api/customers/{id}/         - Get customer
    # PUT    /api/customers/{id}/         - Update customer
    # PATCH  /api/customers/{id}/         - Same as PUT
    # DELETE /api/customers/{id}/         - Delete customer

    # Include router URLs
    path('', include(router.urls)),
]
