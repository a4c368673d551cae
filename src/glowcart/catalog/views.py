"""Catalog JSON endpoints."""

from decimal import Decimal, InvalidOperation

from django.http import JsonResponse

from glowcart.core.api import ApiView, BadRequest, json_body

from . import services


def product_as_dict(product) -> dict:
    return {
        "id": str(product.pk),
        "name": product.name,
        "description": product.description,
        "benefits": product.benefits,
        "ingredients": product.ingredients,
        "image_url": product.image_url,
        "price": str(product.price),
        "stock_quantity": product.stock_quantity,
        "category": product.category,
        "skin_type": list(product.skin_type or []),
        "featured": product.featured,
    }


def _product_fields(data: dict) -> dict:
    fields = {k: v for k, v in data.items() if k in services.EDITABLE_FIELDS}
    if "price" in fields:
        try:
            fields["price"] = Decimal(str(fields["price"]))
        except InvalidOperation:
            raise BadRequest("Price must be a decimal number")
    return fields


class ProductListView(ApiView):
    """GET lists products; POST creates one (administrators only)."""

    def get(self, request):
        featured = request.GET.get("featured")
        if featured is not None:
            featured = featured.lower() in ("1", "true", "yes")
        products = services.list_products(
            category=request.GET.get("category") or None,
            skin_type=request.GET.get("skin_type") or None,
            featured=featured,
        )
        return JsonResponse({"products": [product_as_dict(p) for p in products]})

    def post(self, request):
        product = services.create_product(request.user, **_product_fields(json_body(request)))
        return JsonResponse(product_as_dict(product), status=201)


class ProductDetailView(ApiView):
    """Read, update or delete a single product."""

    def get(self, request, product_id):
        return JsonResponse(product_as_dict(services.get_product(product_id)))

    def patch(self, request, product_id):
        product = services.update_product(request.user, product_id, **_product_fields(json_body(request)))
        return JsonResponse(product_as_dict(product))

    def delete(self, request, product_id):
        services.delete_product(request.user, product_id)
        return JsonResponse({"deleted": True})
