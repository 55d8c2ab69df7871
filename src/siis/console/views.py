"""Admin console views."""

import logging

from django.contrib import messages
from django.http import Http404
from django.shortcuts import redirect
from django.views import View
from django.views.generic import FormView, TemplateView

from siis.core.mixins import AdminRequiredMixin
from siis.gateway import GatewayError, get_gateway
from siis.gateway.records import ORDER_STATUS_CHOICES

from . import services
from .forms import MemberForm, OrderForm, OrderStatusForm, ProductForm

logger = logging.getLogger(__name__)

LOAD_ERROR = "Could not load {what}, please refresh the page."
SAVE_ERROR = "Could not save {what}, please try again."


class ConsoleView(AdminRequiredMixin, TemplateView):
    """Base view for console pages."""

    section = None

    def get_context_data(self, **kwargs):
        context = super().get_context_data(**kwargs)
        context["section"] = self.section
        return context


class RecordMixin:
    """Fetch the record named in the URL or 404."""

    repository_name = None
    record_kwarg = None
    record_label = "record"

    def get_record(self):
        if not hasattr(self, "_record"):
            repository = getattr(get_gateway(), self.repository_name)
            try:
                record = repository.get(self.kwargs[self.record_kwarg])
            except GatewayError as e:
                logger.warning(f"Could not load {self.record_label} {self.kwargs[self.record_kwarg]}: {e}")
                raise Http404(f"{self.record_label} unavailable") from e
            if record is None:
                raise Http404(f"{self.record_label} not found")
            self._record = record
        return self._record


class DashboardView(ConsoleView):
    template_name = "console/dashboard.html"
    section = "dashboard"

    def get_context_data(self, **kwargs):
        context = super().get_context_data(**kwargs)
        try:
            context["stats"] = services.dashboard_stats(get_gateway())
        except GatewayError as e:
            logger.warning(f"Dashboard stats failed: {e}")
            context["error"] = LOAD_ERROR.format(what="dashboard data")
        return context


# Products


class ProductListView(ConsoleView):
    template_name = "console/product_list.html"
    section = "products"

    def get_context_data(self, **kwargs):
        context = super().get_context_data(**kwargs)
        query = self.request.GET.get("q", "")
        try:
            products = get_gateway().products.list()
        except GatewayError as e:
            logger.warning(f"Product list failed: {e}")
            products = []
            context["error"] = LOAD_ERROR.format(what="products")

        context["products"] = services.search(products, query, "name", "category")
        context["query"] = query
        return context


class ProductCreateView(AdminRequiredMixin, FormView):
    template_name = "console/product_form.html"
    form_class = ProductForm

    def form_valid(self, form):
        try:
            services.create_product(get_gateway(), form.cleaned_data, form.cleaned_data["images"])
        except GatewayError as e:
            logger.error(f"Product create failed: {e}")
            messages.error(self.request, SAVE_ERROR.format(what="the product"))
            return self.form_invalid(form)

        messages.success(self.request, f"Product {form.cleaned_data['name']} created.")
        return redirect("console:product-list")

    def get_context_data(self, **kwargs):
        context = super().get_context_data(**kwargs)
        context["section"] = "products"
        return context


class ProductUpdateView(RecordMixin, AdminRequiredMixin, FormView):
    template_name = "console/product_form.html"
    form_class = ProductForm
    repository_name = "products"
    record_kwarg = "product_id"
    record_label = "Product"

    def get_initial(self):
        return ProductForm.initial_for(self.get_record())

    def form_valid(self, form):
        item = self.get_record()
        try:
            services.update_product(get_gateway(), item, form.cleaned_data, form.cleaned_data["images"])
        except GatewayError as e:
            logger.error(f"Product update failed for {item.id}: {e}")
            messages.error(self.request, SAVE_ERROR.format(what="the product"))
            return self.form_invalid(form)

        messages.success(self.request, f"Product {form.cleaned_data['name']} updated.")
        return redirect("console:product-list")

    def get_context_data(self, **kwargs):
        context = super().get_context_data(**kwargs)
        context["section"] = "products"
        context["product"] = self.get_record()
        return context


class ProductDeleteView(RecordMixin, AdminRequiredMixin, View):
    repository_name = "products"
    record_kwarg = "product_id"
    record_label = "Product"

    def post(self, request, product_id):
        item = self.get_record()
        try:
            services.delete_product(get_gateway(), item)
        except GatewayError as e:
            logger.error(f"Product delete failed for {item.id}: {e}")
            messages.error(request, "Could not delete the product, please try again.")
        else:
            messages.success(request, f"Product {item.name} deleted.")
        return redirect("console:product-list")


class ProductToggleView(RecordMixin, AdminRequiredMixin, View):
    repository_name = "products"
    record_kwarg = "product_id"
    record_label = "Product"

    def post(self, request, product_id):
        item = self.get_record()
        try:
            is_active = services.toggle_product_active(get_gateway(), item)
        except GatewayError as e:
            logger.error(f"Product toggle failed for {item.id}: {e}")
            messages.error(request, SAVE_ERROR.format(what="the product"))
        else:
            state = "activated" if is_active else "deactivated"
            messages.success(request, f"Product {item.name} {state}.")
        return redirect("console:product-list")


# Orders


class OrderListView(ConsoleView):
    template_name = "console/order_list.html"
    section = "orders"

    def get_context_data(self, **kwargs):
        context = super().get_context_data(**kwargs)
        status = self.request.GET.get("status", "all")
        query = self.request.GET.get("q", "")
        try:
            orders = get_gateway().orders.list()
        except GatewayError as e:
            logger.warning(f"Order list failed: {e}")
            orders = []
            context["error"] = LOAD_ERROR.format(what="orders")

        filtered = orders if status == "all" else [order for order in orders if order.status == status]
        context.update({
            "orders": services.search(filtered, query, "customer_name"),
            "stats": services.order_stats(orders),
            "status_choices": ORDER_STATUS_CHOICES,
            "current_status": status,
            "query": query,
        })
        return context


class OrderDetailView(RecordMixin, ConsoleView):
    template_name = "console/order_detail.html"
    section = "orders"
    repository_name = "orders"
    record_kwarg = "order_id"
    record_label = "Order"

    def get_context_data(self, **kwargs):
        context = super().get_context_data(**kwargs)
        order = self.get_record()
        context["order"] = order
        context["next_statuses"] = [
            (status, dict(ORDER_STATUS_CHOICES)[status])
            for status in services.allowed_transitions(order.status)
        ]
        context.setdefault("status_form", OrderStatusForm())
        return context


class OrderStatusView(RecordMixin, AdminRequiredMixin, View):
    repository_name = "orders"
    record_kwarg = "order_id"
    record_label = "Order"

    def post(self, request, order_id):
        order = self.get_record()
        form = OrderStatusForm(request.POST)
        if not form.is_valid():
            messages.error(request, "Please choose a valid status.")
            return redirect("console:order-detail", order_id=order.id)

        new_status = form.cleaned_data["status"]
        try:
            services.update_order_status(get_gateway(), order, new_status)
        except services.InvalidStatusTransition as e:
            messages.error(request, f"Cannot change an order from {order.status_label} to {dict(ORDER_STATUS_CHOICES)[new_status]}.")
            logger.info(str(e))
        except GatewayError as e:
            logger.error(f"Order status update failed for {order.id}: {e}")
            messages.error(request, "Could not update the order status, please try again.")
        else:
            messages.success(request, "Order status updated.")
        return redirect("console:order-detail", order_id=order.id)


class OrderCreateView(AdminRequiredMixin, FormView):
    template_name = "console/order_form.html"
    form_class = OrderForm

    def form_valid(self, form):
        try:
            order_id = services.create_order(get_gateway(), form.cleaned_data)
        except GatewayError as e:
            logger.error(f"Order create failed: {e}")
            messages.error(self.request, SAVE_ERROR.format(what="the order"))
            return self.form_invalid(form)

        messages.success(self.request, "Order created.")
        return redirect("console:order-detail", order_id=order_id)

    def get_context_data(self, **kwargs):
        context = super().get_context_data(**kwargs)
        context["section"] = "orders"
        return context


# Members


class MemberListView(ConsoleView):
    template_name = "console/member_list.html"
    section = "members"

    def get_context_data(self, **kwargs):
        context = super().get_context_data(**kwargs)
        query = self.request.GET.get("q", "")
        try:
            members = get_gateway().members.list()
        except GatewayError as e:
            logger.warning(f"Member list failed: {e}")
            members = []
            context["error"] = LOAD_ERROR.format(what="members")

        context["members"] = services.search(members, query, "display_name")
        context["query"] = query
        return context


class MemberCreateView(AdminRequiredMixin, FormView):
    template_name = "console/member_form.html"
    form_class = MemberForm

    def form_valid(self, form):
        try:
            services.create_member(get_gateway(), form.cleaned_data)
        except GatewayError as e:
            logger.error(f"Member create failed: {e}")
            messages.error(self.request, SAVE_ERROR.format(what="the member"))
            return self.form_invalid(form)

        messages.success(self.request, f"Member {form.cleaned_data['display_name']} created.")
        return redirect("console:member-list")

    def get_context_data(self, **kwargs):
        context = super().get_context_data(**kwargs)
        context["section"] = "members"
        return context


class MemberUpdateView(RecordMixin, AdminRequiredMixin, FormView):
    template_name = "console/member_form.html"
    form_class = MemberForm
    repository_name = "members"
    record_kwarg = "member_id"
    record_label = "Member"

    def get_initial(self):
        return MemberForm.initial_for(self.get_record())

    def form_valid(self, form):
        member = self.get_record()
        try:
            services.update_member(get_gateway(), member, form.cleaned_data)
        except GatewayError as e:
            logger.error(f"Member update failed for {member.id}: {e}")
            messages.error(self.request, SAVE_ERROR.format(what="the member"))
            return self.form_invalid(form)

        messages.success(self.request, f"Member {form.cleaned_data['display_name']} updated.")
        return redirect("console:member-list")

    def get_context_data(self, **kwargs):
        context = super().get_context_data(**kwargs)
        context["section"] = "members"
        context["member"] = self.get_record()
        return context


class MemberDeleteView(RecordMixin, AdminRequiredMixin, View):
    repository_name = "members"
    record_kwarg = "member_id"
    record_label = "Member"

    def post(self, request, member_id):
        member = self.get_record()
        try:
            services.delete_member(get_gateway(), member)
        except GatewayError as e:
            logger.error(f"Member delete failed for {member.id}: {e}")
            messages.error(request, "Could not delete the member, please try again.")
        else:
            messages.success(request, f"Member {member.display_name} deleted.")
        return redirect("console:member-list")
