"""Storefront routes."""

from django.urls import path

from . import views

app_name = "store"

urlpatterns = [
    path("", views.HomeView.as_view(), name="home"),
    path("products/", views.ProductListView.as_view(), name="product-list"),
    path("products/<str:product_id>/", views.ProductDetailView.as_view(), name="product-detail"),
    path("category/<path:category_name>/", views.ProductListView.as_view(), name="category"),
    path("cart/", views.CartView.as_view(), name="cart"),
    path("cart/add/", views.CartAddView.as_view(), name="cart-add"),
    path("cart/update/", views.CartUpdateView.as_view(), name="cart-update"),
    path("cart/remove/", views.CartRemoveView.as_view(), name="cart-remove"),
    path("cart/checkout/", views.CartCheckoutView.as_view(), name="cart-checkout"),
    path("checkout/", views.CheckoutView.as_view(), name="checkout"),
    path("order-confirmation/", views.OrderConfirmationView.as_view(), name="order-confirmation"),
    path("about/", views.AboutView.as_view(), name="about"),
]
