"""Admin console routes."""

from django.urls import path

from . import views

app_name = "console"

urlpatterns = [
    path("", views.DashboardView.as_view(), name="dashboard"),
    # Products
    path("products/", views.ProductListView.as_view(), name="product-list"),
    path("products/new/", views.ProductCreateView.as_view(), name="product-create"),
    path("products/<str:product_id>/edit/", views.ProductUpdateView.as_view(), name="product-update"),
    path("products/<str:product_id>/delete/", views.ProductDeleteView.as_view(), name="product-delete"),
    path("products/<str:product_id>/toggle/", views.ProductToggleView.as_view(), name="product-toggle"),
    # Orders
    path("orders/", views.OrderListView.as_view(), name="order-list"),
    path("orders/new/", views.OrderCreateView.as_view(), name="order-create"),
    path("orders/<str:order_id>/", views.OrderDetailView.as_view(), name="order-detail"),
    path("orders/<str:order_id>/status/", views.OrderStatusView.as_view(), name="order-status"),
    # Members
    path("members/", views.MemberListView.as_view(), name="member-list"),
    path("members/new/", views.MemberCreateView.as_view(), name="member-create"),
    path("members/<str:member_id>/edit/", views.MemberUpdateView.as_view(), name="member-update"),
    path("members/<str:member_id>/delete/", views.MemberDeleteView.as_view(), name="member-delete"),
]
